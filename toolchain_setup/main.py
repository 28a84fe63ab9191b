"""
Toolchain Setup — CLI entrypoint.

Usage:
    python -m toolchain_setup.main --help
    toolchain-setup run            # main on first call, post on second
    toolchain-setup main
    toolchain-setup post
    toolchain-setup cache-key 2021.3.10f1 --module android
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from toolchain_setup import __version__
from toolchain_setup.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="toolchain-setup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only show warnings and errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to toolchain.yml (default: auto-detect).",
)
@click.option(
    "--state-file",
    type=click.Path(exists=False),
    default=None,
    help="Keep cross-phase state in this JSON file instead of the runner.",
)
@click.option(
    "--cache-dir",
    type=click.Path(exists=False),
    default=None,
    help="Cache root (default: $TCS_CACHE_DIR or ~/.cache/toolchain-setup).",
)
@click.option("--mock", is_flag=True, help="Use the mock installer (no real installs).")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    state_file: str | None,
    cache_dir: str | None,
    mock: bool,
) -> None:
    """Toolchain Setup — install toolchains and cache them across CI runs."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["state_file"] = Path(state_file) if state_file else None
    ctx.obj["cache_dir"] = Path(cache_dir) if cache_dir else None
    ctx.obj["mock"] = mock

    # ── Logging setup (once, at process start) ──────────────────
    if debug or os.environ.get("RUNNER_DEBUG") == "1":
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "WARNING"
    else:
        level = os.environ.get("TCS_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        log_file=os.environ.get("TCS_LOG_FILE"),
        log_file_level=os.environ.get("TCS_LOG_FILE_LEVEL"),
        actions=os.environ.get("GITHUB_ACTIONS") == "true",
    )


# ── Collaborators ───────────────────────────────────────────────


def _config_path(ctx: click.Context) -> Path | None:
    config_path: Path | None = ctx.obj.get("config_path")
    if config_path is None:
        from toolchain_setup.core.config.loader import find_config_file

        config_path = find_config_file()
    return config_path


def _build_runtime(ctx: click.Context) -> dict:
    """Wire the state store, installer loader, cache and outputs for a phase."""
    from toolchain_setup.adapters.actions.outputs import ActionsOutputs
    from toolchain_setup.adapters.cache.local import LocalDirectoryCache
    from toolchain_setup.core.persistence.state_store import select_state_store

    return {
        "store": select_state_store(state_file=ctx.obj.get("state_file")),
        "installer": _installer_loader(ctx),
        "cache": LocalDirectoryCache(ctx.obj.get("cache_dir")),
        "outputs": ActionsOutputs(),
    }


def _installer_loader(ctx: click.Context):
    """Installer factory.  Raises ConfigError when called, inside the phase."""
    return lambda: _build_installer(ctx)


def _build_installer(ctx: click.Context):
    from toolchain_setup.core.config.loader import load_installer_config

    config = load_installer_config(_config_path(ctx))

    if ctx.obj.get("mock"):
        from toolchain_setup.adapters.installer.mock import MockInstaller

        return MockInstaller(
            install_path=os.path.expanduser(config.install_path),
            create_dirs=True,
        )

    from toolchain_setup.adapters.installer.command import CommandInstaller

    return CommandInstaller(config)


def _input_loader(ctx: click.Context):
    from toolchain_setup.core.config.loader import load_inputs

    config_path = _config_path(ctx)
    return lambda: load_inputs(config_path)


def _finish(result, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    if not result.ok:
        sys.exit(1)


# ── Phases ──────────────────────────────────────────────────────


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def run(ctx: click.Context, as_json: bool) -> None:
    """Run the main phase, or the post phase if main already ran."""
    from toolchain_setup.core.use_cases.dispatch import dispatch

    rt = _build_runtime(ctx)
    result = dispatch(_input_loader(ctx), rt["store"], rt["installer"], rt["cache"], rt["outputs"])
    _finish(result, as_json)


@cli.command("main")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def main_cmd(ctx: click.Context, as_json: bool) -> None:
    """Install toolchains, restoring the installation from cache."""
    from toolchain_setup.core.use_cases.dispatch import main_phase

    rt = _build_runtime(ctx)
    result = main_phase(_input_loader(ctx), rt["store"], rt["installer"], rt["cache"], rt["outputs"])
    _finish(result, as_json)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def post(ctx: click.Context, as_json: bool) -> None:
    """Save the installation to cache if the main phase missed."""
    from toolchain_setup.core.use_cases.dispatch import post_phase

    rt = _build_runtime(ctx)
    result = post_phase(rt["store"], rt["installer"], rt["cache"])
    _finish(result, as_json)


# ── Keys ────────────────────────────────────────────────────────


@cli.command("cache-key")
@click.argument("versions", nargs=-1)
@click.option("--module", "-m", "modules", multiple=True, help="Requested module (repeatable).")
@click.option("--platform", default=None, help="Platform tag (default: this machine).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def cache_key(
    versions: tuple[str, ...],
    modules: tuple[str, ...],
    platform: str | None,
    as_json: bool,
) -> None:
    """Show the cache keys for a set of versions and modules.

    Examples:

        toolchain-setup cache-key 2021.3.10f1 --module android

        toolchain-setup cache-key 2022.3.1f1 2021.3.10f1 --platform linux
    """
    from toolchain_setup.core.services.cache_keys import build_cache_keys

    keys = build_cache_keys(list(versions), list(modules), platform=platform)

    if as_json:
        click.echo(json.dumps(keys.model_dump(), indent=2))
        return

    click.secho(f"🔑 {keys.primary_key}", fg="cyan", bold=True)
    for key in keys.restore_keys:
        click.echo(f"   ↳ {key}")


# ── Register sub-command groups from toolchain_setup/ui/cli/ ─────

from toolchain_setup.ui.cli.cache import cache
from toolchain_setup.ui.cli.state import state

cli.add_command(cache)
cli.add_command(state)


if __name__ == "__main__":
    cli()

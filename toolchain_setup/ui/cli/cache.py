"""
CLI commands for the local installation cache.
"""

from __future__ import annotations

import json

import click


@click.group()
def cache() -> None:
    """Installation cache — list stored entries."""


@cache.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_entries(ctx: click.Context, as_json: bool) -> None:
    """List cached installations, newest first."""
    from toolchain_setup.adapters.cache.local import LocalDirectoryCache

    local = LocalDirectoryCache(ctx.obj.get("cache_dir"))
    entries = local.entries()

    if as_json:
        click.echo(json.dumps(
            {
                "cache_dir": str(local.cache_dir),
                "entries": [e.model_dump() for e in entries],
            },
            indent=2,
        ))
        return

    if not entries:
        click.secho(f"No cached installations in {local.cache_dir}", fg="yellow")
        return

    click.secho(f"📦 {len(entries)} cached installation(s)", fg="cyan", bold=True)
    for entry in entries:
        size_mb = entry.size_bytes / (1024 * 1024)
        click.echo(f"   • {entry.key}  ({size_mb:.1f} MB, {entry.created_at})")

"""
CLI commands for the cross-phase state.

Inspect or reset what the main phase left behind for the post phase.
"""

from __future__ import annotations

import json

import click


@click.group()
def state() -> None:
    """Cross-phase state — inspect or reset."""


@state.command("show")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show(ctx: click.Context, as_json: bool) -> None:
    """Show the persisted phase flag, cache key and hit status."""
    from toolchain_setup.core.persistence.state_store import (
        load_persisted_state,
        select_state_store,
    )

    persisted = load_persisted_state(select_state_store(state_file=ctx.obj.get("state_file")))

    if as_json:
        click.echo(json.dumps(persisted.model_dump(), indent=2))
        return

    phase = "post" if persisted.is_post else "main"
    click.secho(f"📋 Next phase: {phase}", fg="cyan", bold=True)
    click.echo(f"   Cache key: {persisted.cache_key or '—'}")
    if persisted.cache_hit is None:
        click.echo("   Cache hit: —")
    else:
        click.echo(f"   Cache hit: {'yes' if persisted.cache_hit else 'no'}")


@state.command("clear")
@click.pass_context
def clear(ctx: click.Context) -> None:
    """Discard the persisted state so the next run starts with main."""
    from toolchain_setup.core.persistence.state_store import select_state_store

    select_state_store(state_file=ctx.obj.get("state_file")).clear()
    click.secho("✅ State cleared", fg="green")

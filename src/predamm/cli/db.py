"""Db subcommand: init."""

from __future__ import annotations

import typer

from predamm.cli.common import open_store

app = typer.Typer(help="Database setup")


@app.command("init")
def init(ctx: typer.Context) -> None:
    """Create the DuckDB file and schema if missing."""
    with open_store(ctx) as store:
        typer.echo(f"Schema ready at {store.db_path}")

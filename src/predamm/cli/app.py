"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from predamm.config import get_settings
from predamm.config.settings import configure_logging

app = typer.Typer(
    name="predamm",
    help="predamm - Prediction market trading on a share-pool AMM.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
    db: str | None = typer.Option(None, "--db", help="DuckDB path, overrides [storage] db_path"),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile, "db_path": db}


# Subcommands registered from other modules
from predamm.cli import api_cmd, db, events, trade, users  # noqa: E402

app.add_typer(db.app, name="db")
app.add_typer(events.app, name="events")
app.add_typer(users.app, name="users")
app.add_typer(trade.app, name="trade")
app.add_typer(api_cmd.app, name="api")


def run() -> None:
    app()


if __name__ == "__main__":
    run()

"""Helpers shared by CLI subcommands."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

import typer

from predamm.amm.market import Amm
from predamm.amm.params import AmmParams
from predamm.errors import AmmError
from predamm.retry import run_with_retry
from predamm.storage.db import Store

T = TypeVar("T")


@contextmanager
def open_store(ctx: typer.Context) -> Iterator[Store]:
    settings = ctx.obj["settings"]
    store = Store.from_settings(settings, db_path=ctx.obj.get("db_path"))
    try:
        yield store
    finally:
        store.close()


def make_amm(ctx: typer.Context, store: Store) -> Amm:
    return Amm(store, AmmParams.from_settings(ctx.obj["settings"]))


def run_or_exit(ctx: typer.Context, fn: Callable[[], T], retry: bool = False) -> T:
    """Run fn; print AmmErrors and exit 1. retry=True retries conflicts/timeouts."""
    settings = ctx.obj["settings"]
    try:
        if retry:
            return run_with_retry(fn, retries=settings.retry_attempts, base_delay=settings.retry_base_delay_sec)
        return fn()
    except AmmError as e:
        typer.echo(f"Error ({e.code}): {e.message}", err=True)
        raise typer.Exit(1)


def fmt(value: Any, places: int = 4) -> str:
    """Decimal/number for display."""
    if value is None:
        return "-"
    return f"{value:.{places}f}"

"""Users subcommand: create, balance, deposit, allocations."""

from __future__ import annotations

import typer

from predamm import services
from predamm.cli.common import fmt, open_store, run_or_exit

app = typer.Typer(help="Users, balances and positions")


@app.command("create")
def create(
    ctx: typer.Context,
    username: str | None = typer.Option(None, "--username", "-u"),
    wallet: str | None = typer.Option(None, "--wallet"),
    playmoney: str = typer.Option("0", "--playmoney", help="Starting balance"),
) -> None:
    """Register a user."""
    with open_store(ctx) as store:
        user = run_or_exit(ctx, lambda: services.create_user(store, username, wallet, playmoney))
        typer.echo(f"User {user.id}  balance={fmt(user.playmoney, 2)}")


@app.command("balance")
def balance(
    ctx: typer.Context,
    user_id: int | None = typer.Argument(None, help="User ID"),
    wallet: str | None = typer.Option(None, "--wallet", help="Look up by wallet address instead"),
) -> None:
    """Show playmoney balance."""
    if user_id is None and not wallet:
        typer.echo("Give a user ID or --wallet")
        raise typer.Exit(1)
    with open_store(ctx) as store:
        if wallet:
            amount = run_or_exit(ctx, lambda: services.get_balance_by_wallet(store, wallet))
        else:
            amount = run_or_exit(ctx, lambda: services.get_user(store, user_id)).playmoney
        typer.echo(f"Balance: {fmt(amount, 2)}")


@app.command("deposit")
def deposit(
    ctx: typer.Context,
    user_id: int = typer.Argument(..., help="User ID"),
    amount: str = typer.Argument(..., help="Playmoney to credit"),
) -> None:
    """Credit playmoney to a user."""
    with open_store(ctx) as store:
        user = run_or_exit(ctx, lambda: services.deposit(store, user_id, amount), retry=True)
        typer.echo(f"Balance: {fmt(user.playmoney, 2)}")


@app.command("allocations")
def allocations(
    ctx: typer.Context,
    user_id: int | None = typer.Option(None, "--user"),
    outcome_id: int | None = typer.Option(None, "--outcome"),
    limit: int = typer.Option(10, "--limit", "-n"),
    page: int = typer.Option(1, "--page"),
) -> None:
    """List share positions."""
    with open_store(ctx) as store:
        rows = services.list_allocations(store, user_id=user_id, outcome_id=outcome_id, limit=limit, page=page)
        for a in rows:
            typer.echo(f"  {a.id:>5}  user={a.user_id}  outcome={a.outcome_id}  shares={fmt(a.amount, 2)}")
        typer.echo(f"Total: {len(rows)} allocations")

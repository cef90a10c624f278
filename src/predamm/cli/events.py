"""Events subcommand: create, list, show, init-market, prices, trades."""

from __future__ import annotations

from datetime import datetime

import typer

from predamm import services
from predamm.amm.params import AmmParams
from predamm.cli.common import fmt, make_amm, open_store, run_or_exit

app = typer.Typer(help="Events and their AMM markets")


@app.command("create")
def create(
    ctx: typer.Context,
    question: str = typer.Option(..., "--question", "-q", help="Event question"),
    outcome: list[str] = typer.Option(..., "--outcome", "-o", help="Outcome title (repeat per outcome)"),
    wallet: str | None = typer.Option(None, "--wallet", help="Owner wallet address"),
    description: str | None = typer.Option(None, "--description"),
    expiry: datetime | None = typer.Option(None, "--expiry", help="Expiry date (ISO)"),
    community: list[str] = typer.Option([], "--community", help="Community tag (repeatable)"),
    initialize: bool = typer.Option(
        True, "--initialize/--no-initialize", help="Seed the market pools right away"
    ),
) -> None:
    """Create an event with its outcomes."""
    with open_store(ctx) as store:
        params = AmmParams.from_settings(ctx.obj["settings"])
        event = run_or_exit(
            ctx,
            lambda: services.create_event(
                store,
                question,
                outcome,
                wallet_address=wallet,
                description=description,
                expiry_date=expiry,
                community=community,
                params=params,
            ),
        )
        typer.echo(f"Event {event.id}: {event.question}")
        for o in event.outcomes:
            typer.echo(f"  outcome {o.id}  {o.title}")
        if initialize:
            run_or_exit(ctx, lambda: make_amm(ctx, store).initialize_market(event.id))
            typer.echo("Market initialized.")


@app.command("list")
def list_events(
    ctx: typer.Context,
    status: str | None = typer.Option(None, "--status", help="ACTIVE or RESOLVED"),
    community: str | None = typer.Option(None, "--community"),
    sort_by: str | None = typer.Option(None, "--sort-by", help="column:asc|desc"),
    limit: int = typer.Option(10, "--limit", "-n"),
    page: int = typer.Option(1, "--page"),
) -> None:
    """List events with trade count and volume."""
    with open_store(ctx) as store:
        rows = services.list_events(
            store, status=status, community=community, sort_by=sort_by, limit=limit, page=page
        )
        for e in rows:
            typer.echo(
                f"  {e.id:>5}  {e.status:<8}  trades={e.trade_count:<5}  "
                f"traders={e.users_traded:<4}  volume={fmt(e.volume, 2):>10}  {e.question[:60]}"
            )
        typer.echo(f"Total: {len(rows)} events")


@app.command("show")
def show(ctx: typer.Context, event_id: int = typer.Argument(..., help="Event ID")) -> None:
    """Show one event with its market prices."""
    with open_store(ctx) as store:
        event = run_or_exit(ctx, lambda: services.get_event(store, event_id))
        typer.echo(f"Event {event.id}: {event.question}  [{event.status}]")
        typer.echo(f"Trades: {event.trade_count}  Traders: {event.users_traded}  Volume: {fmt(event.volume, 2)}")
        for p in run_or_exit(ctx, lambda: make_amm(ctx, store).get_market_prices(event_id)):
            typer.echo(
                f"  {p.outcome_id:>5}  {p.title:<20}  price={fmt(p.price)}  "
                f"supply={fmt(p.current_supply, 2)}  liquidity={fmt(p.total_liquidity, 2)}"
            )


@app.command("init-market")
def init_market(ctx: typer.Context, event_id: int = typer.Argument(..., help="Event ID")) -> None:
    """Reset every outcome pool to the seed supply and liquidity (destructive)."""
    with open_store(ctx) as store:
        prices = run_or_exit(ctx, lambda: make_amm(ctx, store).initialize_market(event_id), retry=True)
        for p in prices:
            typer.echo(f"  {p.outcome_id:>5}  {p.title:<20}  price={fmt(p.price)}")


@app.command("prices")
def prices(
    ctx: typer.Context,
    event_id: int = typer.Argument(..., help="Event ID"),
    outcome_id: int | None = typer.Option(None, "--outcome", help="Only this outcome"),
) -> None:
    """Current AMM prices."""
    with open_store(ctx) as store:
        amm = make_amm(ctx, store)
        if outcome_id is not None:
            rows = [run_or_exit(ctx, lambda: amm.get_outcome_price(event_id, outcome_id))]
        else:
            rows = run_or_exit(ctx, lambda: amm.get_prices(event_id))
        for p in rows:
            typer.echo(f"  {p.outcome_id:>5}  {p.title:<20}  price={fmt(p.price)}")


@app.command("trades")
def trades(
    ctx: typer.Context,
    event_id: int = typer.Argument(..., help="Event ID"),
    limit: int = typer.Option(20, "--limit", "-n"),
) -> None:
    """Recent trades on an event."""
    with open_store(ctx) as store:
        rows = services.list_trades(store, event_id=event_id, limit=limit)
        for t in rows:
            typer.echo(
                f"  {t.id:>6}  {t.order_type:<4}  outcome={t.outcome_id}  user={t.user_id}  "
                f"size={fmt(t.order_size, 2)}  amount={fmt(t.amount, 2)}  after={fmt(t.after_price)}"
            )
        typer.echo(f"Total: {len(rows)} trades")

"""Trade subcommand: buy, sell, quote-buy, quote-sell."""

from __future__ import annotations

import typer

from predamm.cli.common import fmt, make_amm, open_store, run_or_exit
from predamm.models import QuoteResult, TradeResult

app = typer.Typer(help="Trade against the AMM")


def _echo_trade(label: str, result: TradeResult, outcome_id: int) -> None:
    typer.echo(f"{label}: {fmt(result.shares, 2)} shares for {fmt(result.cost, 2)}")
    for p in result.price_impacts:
        marker = "*" if p.outcome_id == outcome_id else " "
        typer.echo(
            f" {marker}{p.outcome_id:>5}  {p.title:<20}  {fmt(p.before_price)} -> {fmt(p.after_price)}  "
            f"({fmt(p.impact, 2)}%)"
        )


def _echo_quote(quote: QuoteResult) -> None:
    typer.echo(f"Shares: {fmt(quote.shares, 2)}  USD: {fmt(quote.usd_amount, 2)}")
    typer.echo(f"Price per share: {fmt(quote.price_per_share)}  New price: {fmt(quote.new_price)}")
    typer.echo(f"Fee: {fmt(quote.total_fee, 2)}  After fees: {fmt(quote.after_fees, 2)}")
    typer.echo(f"Price impact: {fmt(quote.price_impact, 2)}%")


@app.command("buy")
def buy(
    ctx: typer.Context,
    event_id: int = typer.Option(..., "--event", "-e"),
    outcome_id: int = typer.Option(..., "--outcome", "-o"),
    amount: str = typer.Option(..., "--amount", "-a", help="Playmoney to spend"),
    user_id: int = typer.Option(..., "--user", "-u"),
) -> None:
    """Buy outcome shares with playmoney."""
    with open_store(ctx) as store:
        amm = make_amm(ctx, store)
        result = run_or_exit(ctx, lambda: amm.buy(event_id, outcome_id, amount, user_id), retry=True)
        _echo_trade("Bought", result, outcome_id)


@app.command("sell")
def sell(
    ctx: typer.Context,
    event_id: int = typer.Option(..., "--event", "-e"),
    outcome_id: int = typer.Option(..., "--outcome", "-o"),
    shares: str = typer.Option(..., "--shares", "-s"),
    user_id: int = typer.Option(..., "--user", "-u"),
) -> None:
    """Sell held outcome shares back to the AMM."""
    with open_store(ctx) as store:
        amm = make_amm(ctx, store)
        result = run_or_exit(ctx, lambda: amm.sell(event_id, outcome_id, shares, user_id), retry=True)
        _echo_trade("Sold", result, outcome_id)


@app.command("quote-buy")
def quote_buy(
    ctx: typer.Context,
    event_id: int = typer.Option(..., "--event", "-e"),
    outcome_id: int = typer.Option(..., "--outcome", "-o"),
    amount: str = typer.Option(..., "--amount", "-a"),
) -> None:
    """Quote shares received for a playmoney amount."""
    with open_store(ctx) as store:
        _echo_quote(run_or_exit(ctx, lambda: make_amm(ctx, store).quote_buy(event_id, outcome_id, amount)))


@app.command("quote-sell")
def quote_sell(
    ctx: typer.Context,
    event_id: int = typer.Option(..., "--event", "-e"),
    outcome_id: int = typer.Option(..., "--outcome", "-o"),
    shares: str = typer.Option(..., "--shares", "-s"),
) -> None:
    """Quote playmoney returned for selling shares."""
    with open_store(ctx) as store:
        _echo_quote(run_or_exit(ctx, lambda: make_amm(ctx, store).quote_sell(event_id, outcome_id, shares)))

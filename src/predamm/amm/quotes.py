"""Read-only quotes. No transaction: a quote may be stale by the time a trade runs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from predamm.amm.params import DEFAULT_PARAMS, AmmParams
from predamm.amm.planning import TradePlan, plan_buy, plan_sell
from predamm.amm.state import load_state
from predamm.models import QuoteResult

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def _to_quote(plan: TradePlan) -> QuoteResult:
    impact = plan.outcome_impact
    return QuoteResult(
        usd_amount=plan.gross,
        shares=plan.shares,
        price_per_share=plan.gross / plan.shares,
        price_impact=impact.impact,
        total_fee=plan.fee,
        after_fees=plan.net,
        new_price=impact.after_price,
    )


def quote_buy(
    conn: DuckDBPyConnection,
    event_id: int,
    outcome_id: int,
    usd_amount: Any,
    params: AmmParams = DEFAULT_PARAMS,
) -> QuoteResult:
    """How many shares usd_amount buys now, and what it does to the price."""
    state = load_state(conn, event_id, params)
    return _to_quote(plan_buy(state, outcome_id, usd_amount, params))


def quote_sell(
    conn: DuckDBPyConnection,
    event_id: int,
    outcome_id: int,
    shares: Any,
    params: AmmParams = DEFAULT_PARAMS,
) -> QuoteResult:
    """What selling `shares` returns now (usd_amount gross, after_fees net)."""
    state = load_state(conn, event_id, params)
    return _to_quote(plan_sell(state, outcome_id, shares, params))

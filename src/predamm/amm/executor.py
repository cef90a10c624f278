"""Trade execution against the share pool.

execute_buy / execute_sell expect to run inside Store.transaction(): every
read and write below lands atomically or not at all, so rejecting a trade
is just raising. Order of effects for a buy:

    user balance  -= usd_amount
    outcome       supply += shares, liquidity += net
    every outcome liquidity += fee / n   (traded outcome included)
    trade record  appended
    allocation    += shares

A sell mirrors it with the proceeds computed at the pre-trade price.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from predamm.amm.params import DEFAULT_PARAMS, AmmParams
from predamm.amm.planning import TradePlan, plan_buy, plan_sell
from predamm.amm.pricing import quantize_money, split_fee
from predamm.amm.state import MarketState, load_state
from predamm.errors import InsufficientBalance, InsufficientShares, NotFound
from predamm.models import ORDER_BUY, ORDER_SELL, Trade, TradeResult
from predamm.storage.allocations import decrement_allocation, find_allocation, upsert_allocation
from predamm.storage.outcomes import update_outcome
from predamm.storage.trades import create_trade
from predamm.storage.users import find_user, update_user_balance

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

log = structlog.get_logger(__name__)


def _distribute_fee(conn: DuckDBPyConnection, state: MarketState, plan: TradePlan) -> None:
    for outcome, part in zip(state.outcomes, split_fee(plan.fee, len(state.outcomes))):
        update_outcome(conn, outcome.id, liquidity_delta=part)


def execute_buy(
    conn: DuckDBPyConnection,
    event_id: int,
    outcome_id: int,
    usd_amount: Any,
    user_id: int,
    params: AmmParams = DEFAULT_PARAMS,
) -> TradeResult:
    """Spend usd_amount of the user's playmoney on outcome_id shares."""
    usd_amount = quantize_money(usd_amount)
    user = find_user(conn, user_id)
    if user is None:
        raise NotFound("User not found")
    if user.playmoney < usd_amount:
        raise InsufficientBalance("Insufficient balance")

    state = load_state(conn, event_id, params)
    plan = plan_buy(state, outcome_id, usd_amount, params)

    update_user_balance(conn, user_id, -plan.gross)
    update_outcome(
        conn,
        outcome_id,
        supply_delta=plan.shares,
        liquidity_delta=plan.net,
        min_supply=params.min_shares,
    )
    _distribute_fee(conn, state, plan)
    create_trade(
        conn,
        Trade(
            order_type=ORDER_BUY,
            order_size=plan.shares,
            amount=plan.gross,
            event_id=event_id,
            outcome_id=outcome_id,
            user_id=user_id,
            after_price=plan.outcome_impact.after_price,
        ),
    )
    upsert_allocation(conn, user_id, outcome_id, plan.shares)

    log.info(
        "trade_executed",
        side=ORDER_BUY,
        event_id=event_id,
        outcome_id=outcome_id,
        user_id=user_id,
        shares=str(plan.shares),
        amount=str(plan.gross),
        fee=str(plan.fee),
    )
    return TradeResult(shares=plan.shares, cost=plan.gross, price_impacts=plan.price_impacts)


def execute_sell(
    conn: DuckDBPyConnection,
    event_id: int,
    outcome_id: int,
    shares: Any,
    user_id: int,
    params: AmmParams = DEFAULT_PARAMS,
) -> TradeResult:
    """Sell shares of outcome_id held by the user; proceeds net of fee go to playmoney."""
    shares = quantize_money(shares)
    allocation = find_allocation(conn, user_id, outcome_id)
    if allocation is None or allocation.amount < shares:
        raise InsufficientShares("Insufficient shares")

    state = load_state(conn, event_id, params)
    plan = plan_sell(state, outcome_id, shares, params)

    update_outcome(
        conn,
        outcome_id,
        supply_delta=-plan.shares,
        liquidity_delta=-plan.net,
        min_supply=params.min_shares,
    )
    _distribute_fee(conn, state, plan)
    update_user_balance(conn, user_id, plan.net)
    decrement_allocation(conn, user_id, outcome_id, plan.shares)
    create_trade(
        conn,
        Trade(
            order_type=ORDER_SELL,
            order_size=plan.shares,
            amount=plan.net,
            event_id=event_id,
            outcome_id=outcome_id,
            user_id=user_id,
            after_price=plan.outcome_impact.after_price,
        ),
    )

    log.info(
        "trade_executed",
        side=ORDER_SELL,
        event_id=event_id,
        outcome_id=outcome_id,
        user_id=user_id,
        shares=str(plan.shares),
        amount=str(plan.net),
        fee=str(plan.fee),
    )
    return TradeResult(shares=plan.shares, cost=plan.net, price_impacts=plan.price_impacts)

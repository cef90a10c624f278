"""Trade planning shared by quotes and execution.

A plan is everything a trade would do to the pool, computed from one
pre-trade price snapshot: shares, fee, net amount, prices after and the
impact on every outcome. Both the quote engine and the executor go
through these functions, so a quote is rejected exactly when the same
trade would be rejected for market reasons. Balance and holdings checks
belong to the executor.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Any

from predamm.amm.params import DEFAULT_PARAMS, AmmParams
from predamm.amm.pricing import (
    HUNDRED,
    MAX_TRADE_AMOUNT,
    ZERO,
    as_decimal,
    calculate_price_impacts,
    calculate_prices,
    quantize_money,
)
from predamm.amm.state import MarketState
from predamm.errors import InsufficientLiquidity, InvalidRequest
from predamm.models import PriceImpact


@dataclass
class TradePlan:
    outcome_index: int
    shares: Decimal  # bought or sold
    gross: Decimal  # USD paid (buy) or share value at pre-trade price (sell)
    fee: Decimal
    net: Decimal  # gross - fee
    prices_before: list[Decimal]
    prices_after: list[Decimal]
    price_impacts: list[PriceImpact]

    @property
    def outcome_impact(self) -> PriceImpact:
        return self.price_impacts[self.outcome_index]


def _check_impact(impact: PriceImpact, params: AmmParams, hint: str) -> None:
    if abs(impact.impact) > params.max_price_impact * HUNDRED:
        raise InvalidRequest(f"Price impact too high - try {hint}")


def plan_buy(
    state: MarketState,
    outcome_id: int,
    usd_amount: Any,
    params: AmmParams = DEFAULT_PARAMS,
) -> TradePlan:
    """Spend usd_amount on outcome_id: fee off the top, whole shares at the current price."""
    index = state.index_of(outcome_id)
    usd_amount = quantize_money(as_decimal(usd_amount))
    if usd_amount <= ZERO:
        raise InvalidRequest("Amount too small")
    if usd_amount > MAX_TRADE_AMOUNT:
        raise InvalidRequest("Amount too large")
    prices_before = calculate_prices(state.shares, params)
    fee = quantize_money(usd_amount * params.fee_rate)
    net = usd_amount - fee
    shares = (net / prices_before[index]).to_integral_value(rounding=ROUND_FLOOR)
    if shares <= ZERO:
        raise InvalidRequest("Amount too small")
    new_shares = list(state.shares)
    new_shares[index] += shares
    prices_after = calculate_prices(new_shares, params)
    impacts = calculate_price_impacts(state.outcomes, prices_before, prices_after)
    plan = TradePlan(
        outcome_index=index,
        shares=shares,
        gross=usd_amount,
        fee=fee,
        net=net,
        prices_before=prices_before,
        prices_after=prices_after,
        price_impacts=impacts,
    )
    _check_impact(plan.outcome_impact, params, "a smaller amount")
    return plan


def plan_sell(
    state: MarketState,
    outcome_id: int,
    shares: Any,
    params: AmmParams = DEFAULT_PARAMS,
) -> TradePlan:
    """Sell shares of outcome_id at the current price, fee deducted from the proceeds."""
    index = state.index_of(outcome_id)
    shares = quantize_money(as_decimal(shares))
    if shares <= ZERO:
        raise InvalidRequest("Share amount must be positive")
    if shares > MAX_TRADE_AMOUNT:
        raise InvalidRequest("Share amount too large")
    if state.shares[index] - shares < params.min_shares:
        raise InvalidRequest("Selling this amount would reduce shares below minimum")
    prices_before = calculate_prices(state.shares, params)
    new_shares = list(state.shares)
    new_shares[index] -= shares
    prices_after = calculate_prices(new_shares, params)
    # Proceeds rounded down so the pool never pays out more than the shares are worth
    gross = quantize_money(shares * prices_before[index], rounding=ROUND_FLOOR)
    fee = quantize_money(gross * params.fee_rate)
    net = gross - fee
    if state.outcomes[index].total_liquidity < net:
        raise InsufficientLiquidity("Insufficient liquidity in the market")
    impacts = calculate_price_impacts(state.outcomes, prices_before, prices_after)
    plan = TradePlan(
        outcome_index=index,
        shares=shares,
        gross=gross,
        fee=fee,
        net=net,
        prices_before=prices_before,
        prices_after=prices_after,
        price_impacts=impacts,
    )
    _check_impact(plan.outcome_impact, params, "selling fewer shares")
    return plan

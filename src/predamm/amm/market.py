"""Amm: the store-bound entry point used by the API and CLI."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog

from predamm.amm.executor import execute_buy, execute_sell
from predamm.amm.lifecycle import initialize_market
from predamm.amm.params import DEFAULT_PARAMS, AmmParams
from predamm.amm.pricing import HUNDRED, as_decimal, calculate_prices
from predamm.amm.quotes import quote_buy, quote_sell
from predamm.amm.state import load_state
from predamm.errors import InvalidRequest
from predamm.models import ORDER_BUY, ORDER_SELL, OutcomePrice, QuoteResult, TradeResult
from predamm.storage.db import Store

log = structlog.get_logger(__name__)


class Amm:
    """
    Binds the AMM operations to a Store.

    buy/sell/initialize_market each run in one store transaction; prices and
    quotes read through an autocommit cursor.
    """

    def __init__(self, store: Store, params: AmmParams = DEFAULT_PARAMS) -> None:
        self.store = store
        self.params = params

    def buy(self, event_id: int, outcome_id: int, amount: Any, user_id: int) -> TradeResult:
        try:
            return self.store.run_in_transaction(
                lambda conn: execute_buy(conn, event_id, outcome_id, amount, user_id, self.params)
            )
        except InvalidRequest as e:
            log.info("trade_rejected", side=ORDER_BUY, event_id=event_id, outcome_id=outcome_id, reason=e.code)
            raise

    def sell(self, event_id: int, outcome_id: int, shares: Any, user_id: int) -> TradeResult:
        try:
            return self.store.run_in_transaction(
                lambda conn: execute_sell(conn, event_id, outcome_id, shares, user_id, self.params)
            )
        except InvalidRequest as e:
            log.info("trade_rejected", side=ORDER_SELL, event_id=event_id, outcome_id=outcome_id, reason=e.code)
            raise

    def quote_buy(self, event_id: int, outcome_id: int, usd_amount: Any) -> QuoteResult:
        with self.store.read() as conn:
            return quote_buy(conn, event_id, outcome_id, usd_amount, self.params)

    def quote_sell(self, event_id: int, outcome_id: int, shares: Any) -> QuoteResult:
        with self.store.read() as conn:
            return quote_sell(conn, event_id, outcome_id, shares, self.params)

    def initialize_market(self, event_id: int) -> list[OutcomePrice]:
        self.store.run_in_transaction(lambda conn: initialize_market(conn, event_id, self.params))
        return self.get_prices(event_id)

    def get_prices(self, event_id: int, oracle_price: Any = None) -> list[OutcomePrice]:
        """Current price of every outcome. oracle_price is passed through untouched."""
        oracle = as_decimal(oracle_price) if oracle_price is not None else None
        with self.store.read() as conn:
            state = load_state(conn, event_id, self.params)
        prices = calculate_prices(state.shares, self.params)
        return [
            OutcomePrice(
                outcome_id=o.id,
                title=o.title,
                price=price,
                current_supply=o.current_supply,
                total_liquidity=o.total_liquidity,
                oracle_price=oracle,
            )
            for o, price in zip(state.outcomes, prices)
        ]

    def get_market_prices(self, event_id: int) -> list[OutcomePrice]:
        """get_prices plus implied probability in percent."""
        return [
            p.model_copy(update={"implied_probability": p.price * HUNDRED})
            for p in self.get_prices(event_id)
        ]

    def get_outcome_price(self, event_id: int, outcome_id: int) -> OutcomePrice:
        with self.store.read() as conn:
            state = load_state(conn, event_id, self.params)
        index = state.index_of(outcome_id)
        outcome = state.outcomes[index]
        price: Decimal = calculate_prices(state.shares, self.params)[index]
        return OutcomePrice(
            outcome_id=outcome.id,
            title=outcome.title,
            price=price,
            current_supply=outcome.current_supply,
            total_liquidity=outcome.total_liquidity,
        )

"""Canonical schema (Pydantic) - User, Event, Outcome, Trade."""

from predamm.models.market import (
    EVENT_STATUS_ACTIVE,
    EVENT_STATUS_RESOLVED,
    Event,
    Outcome,
    OutcomePrice,
    User,
)
from predamm.models.trade import (
    ORDER_BUY,
    ORDER_SELL,
    PriceImpact,
    QuoteResult,
    TokenAllocation,
    Trade,
    TradeResult,
)

__all__ = [
    "EVENT_STATUS_ACTIVE",
    "EVENT_STATUS_RESOLVED",
    "ORDER_BUY",
    "ORDER_SELL",
    "Event",
    "Outcome",
    "OutcomePrice",
    "PriceImpact",
    "QuoteResult",
    "TokenAllocation",
    "Trade",
    "TradeResult",
    "User",
]

"""User, Event, Outcome - persisted entities."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

EVENT_STATUS_ACTIVE = "ACTIVE"
EVENT_STATUS_RESOLVED = "RESOLVED"


class User(BaseModel):
    """Trader account holding a playmoney balance."""

    id: int
    username: str | None = None
    wallet_address: str | None = None
    playmoney: Decimal = Field(..., ge=0)
    created_at: int | None = None  # ms epoch


class Outcome(BaseModel):
    """One tradable outcome of an event and its share pool."""

    id: int
    event_id: int
    title: str
    current_supply: Decimal = Field(..., ge=0)
    total_liquidity: Decimal = Field(..., ge=0)


class Event(BaseModel):
    """Prediction event with 1..N outcomes."""

    id: int
    unique_id: str | None = None
    question: str
    description: str | None = None
    resolution_criteria: str | None = None
    image: str | None = None
    expiry_date: datetime | None = None
    community: list[str] = Field(default_factory=list)
    user_id: int | None = None
    status: str = Field(EVENT_STATUS_ACTIVE, pattern="^(ACTIVE|RESOLVED)$")
    outcome_won: int | None = None
    created_at: int | None = None  # ms epoch
    updated_at: int | None = None
    outcomes: list[Outcome] = Field(default_factory=list)
    # Aggregates over the trades table, filled by list/get queries
    trade_count: int = 0
    users_traded: int = 0
    volume: Decimal = Decimal("0")


class OutcomePrice(BaseModel):
    """Current AMM price of one outcome."""

    outcome_id: int
    title: str
    price: Decimal
    current_supply: Decimal
    total_liquidity: Decimal
    implied_probability: Decimal | None = None  # price * 100
    oracle_price: Decimal | None = None  # passed through untouched

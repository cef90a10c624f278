"""Trade, TokenAllocation and AMM trade/quote results."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

ORDER_BUY = "BUY"
ORDER_SELL = "SELL"


class Trade(BaseModel):
    """Executed trade against the AMM. Append-only."""

    id: int | None = None
    order_type: str = Field(..., pattern="^(BUY|SELL)$")
    order_size: Decimal = Field(..., ge=0)  # shares
    amount: Decimal = Field(..., ge=0)  # USD paid (buy) or received net of fee (sell)
    event_id: int
    outcome_id: int
    user_id: int
    after_price: Decimal | None = None
    created_at: int | None = None  # ms epoch


class TokenAllocation(BaseModel):
    """Shares of one outcome held by one user."""

    id: int
    user_id: int
    outcome_id: int
    amount: Decimal = Field(..., ge=0)
    created_at: int | None = None
    updated_at: int | None = None


class PriceImpact(BaseModel):
    outcome_id: int
    title: str
    before_price: Decimal
    after_price: Decimal
    impact: Decimal  # percent


class TradeResult(BaseModel):
    shares: Decimal
    cost: Decimal
    price_impacts: list[PriceImpact]


class QuoteResult(BaseModel):
    """Advisory quote; the executed trade may price differently."""

    usd_amount: Decimal
    shares: Decimal
    price_per_share: Decimal
    price_impact: Decimal
    total_fee: Decimal
    after_fees: Decimal
    new_price: Decimal

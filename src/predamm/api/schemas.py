"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. not_found, insufficient_balance")


# --- Events ---
class EventCreateRequest(BaseModel):
    question: str
    outcomes: list[str] = Field(..., min_length=1)
    wallet_address: str | None = Field(None, description="Owner; looked up among registered users")
    unique_id: str | None = None
    description: str | None = None
    resolution_criteria: str | None = None
    image: str | None = None
    expiry_date: datetime | None = None
    community: list[str] = Field(default_factory=list)


# --- Trading ---
class BuyRequest(BaseModel):
    outcome_id: int
    amount: Decimal = Field(..., gt=0, description="USD-equivalent playmoney to spend")
    user_id: int


class SellRequest(BaseModel):
    outcome_id: int
    shares: Decimal = Field(..., gt=0)
    user_id: int


class QuoteBuyRequest(BaseModel):
    outcome_id: int
    amount: Decimal = Field(..., gt=0)


class QuoteSellRequest(BaseModel):
    outcome_id: int
    shares: Decimal = Field(..., gt=0)


# --- Users ---
class UserCreateRequest(BaseModel):
    username: str | None = None
    wallet_address: str | None = None
    playmoney: Decimal = Field(Decimal("0"), ge=0)


class DepositRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)


class BalanceResponse(BaseModel):
    playmoney: Decimal

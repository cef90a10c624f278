"""Event, user, allocation and trade operations shared by the API and CLI."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from predamm.amm.params import DEFAULT_PARAMS, AmmParams
from predamm.amm.pricing import ZERO, quantize_money
from predamm.errors import InvalidRequest, NotFound
from predamm.models import Event, TokenAllocation, Trade, User
from predamm.storage import allocations, events, trades, users
from predamm.storage.db import Store


def create_event(
    store: Store,
    question: str,
    outcomes: list[str],
    *,
    wallet_address: str | None = None,
    unique_id: str | None = None,
    description: str | None = None,
    resolution_criteria: str | None = None,
    image: str | None = None,
    expiry_date: datetime | None = None,
    community: list[str] | None = None,
    params: AmmParams = DEFAULT_PARAMS,
) -> Event:
    """Create an ACTIVE event owned by the wallet's user (if any). Outcomes start at min_shares."""
    titles = [t.strip() for t in outcomes if t and t.strip()]
    if not titles:
        raise InvalidRequest("An event needs at least one outcome")
    if len(set(titles)) != len(titles):
        raise InvalidRequest("Outcome titles must be unique")

    def _create(conn: Any) -> Event:
        owner = users.find_user_by_wallet(conn, wallet_address) if wallet_address else None
        return events.create_event(
            conn,
            question,
            titles,
            unique_id=unique_id,
            description=description,
            resolution_criteria=resolution_criteria,
            image=image,
            expiry_date=expiry_date,
            community=community,
            user_id=owner.id if owner else None,
            initial_supply=params.min_shares,
        )

    return store.run_in_transaction(_create)


def get_event(store: Store, event_id: int) -> Event:
    with store.read() as conn:
        event = events.get_event(conn, event_id)
    if event is None:
        raise NotFound("Event not found")
    return event


def list_events(store: Store, **filters: Any) -> list[Event]:
    with store.read() as conn:
        return events.list_events(conn, **filters)


def create_user(
    store: Store,
    username: str | None = None,
    wallet_address: str | None = None,
    playmoney: Decimal | int | str = 0,
) -> User:
    if quantize_money(playmoney) < ZERO:
        raise InvalidRequest("Starting balance cannot be negative")

    def _create(conn: Any) -> User:
        if wallet_address and users.find_user_by_wallet(conn, wallet_address):
            raise InvalidRequest("Wallet address already registered")
        return users.create_user(conn, username, wallet_address, playmoney)

    return store.run_in_transaction(_create)


def get_user(store: Store, user_id: int) -> User:
    with store.read() as conn:
        user = users.find_user(conn, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def get_balance_by_wallet(store: Store, wallet_address: str) -> Decimal:
    with store.read() as conn:
        user = users.find_user_by_wallet(conn, wallet_address)
    if user is None:
        raise NotFound("Wallet address not found")
    return user.playmoney


def deposit(store: Store, user_id: int, amount: Any) -> User:
    """Credit playmoney to a user."""
    amount = quantize_money(amount)
    if amount <= ZERO:
        raise InvalidRequest("Deposit amount must be positive")

    def _deposit(conn: Any) -> User:
        if users.find_user(conn, user_id) is None:
            raise NotFound("User not found")
        users.update_user_balance(conn, user_id, amount)
        return users.find_user(conn, user_id)

    return store.run_in_transaction(_deposit)


def list_allocations(store: Store, **filters: Any) -> list[TokenAllocation]:
    with store.read() as conn:
        return allocations.list_allocations(conn, **filters)


def get_allocation(store: Store, allocation_id: int) -> TokenAllocation:
    with store.read() as conn:
        allocation = allocations.get_allocation(conn, allocation_id)
    if allocation is None:
        raise NotFound("User's allocation not found")
    return allocation


def list_trades(store: Store, **filters: Any) -> list[Trade]:
    with store.read() as conn:
        return trades.list_trades(conn, **filters)

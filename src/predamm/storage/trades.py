"""Trade history (append-only)."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from predamm.amm.pricing import quantize_money, quantize_price
from predamm.models import Trade

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_COLUMNS = [
    "id", "order_type", "order_size", "amount", "event_id", "outcome_id", "user_id", "after_price", "created_at",
]


def _to_trade(row: tuple) -> Trade:
    return Trade(**dict(zip(_COLUMNS, row)))


def create_trade(conn: DuckDBPyConnection, trade: Trade) -> Trade:
    """Append one trade record and return it with id and created_at set."""
    row = conn.execute(
        f"""
        INSERT INTO trades (order_type, order_size, amount, event_id, outcome_id, user_id, after_price, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        RETURNING {", ".join(_COLUMNS)}
        """,
        [
            trade.order_type,
            quantize_money(trade.order_size),
            quantize_money(trade.amount),
            trade.event_id,
            trade.outcome_id,
            trade.user_id,
            quantize_price(trade.after_price) if trade.after_price is not None else None,
            trade.created_at or int(time.time() * 1000),
        ],
    ).fetchone()
    return _to_trade(row)


def list_trades(
    conn: DuckDBPyConnection,
    *,
    event_id: int | None = None,
    user_id: int | None = None,
    limit: int = 50,
) -> list[Trade]:
    """Most recent trades first, optionally filtered by event and/or user."""
    conditions = ["1=1"]
    params: list[Any] = []
    if event_id is not None:
        conditions.append("event_id = ?")
        params.append(event_id)
    if user_id is not None:
        conditions.append("user_id = ?")
        params.append(user_id)
    params.append(limit)
    rows = conn.execute(
        f"""
        SELECT {", ".join(_COLUMNS)} FROM trades
        WHERE {" AND ".join(conditions)}
        ORDER BY id DESC
        LIMIT ?
        """,
        params,
    ).fetchall()
    return [_to_trade(r) for r in rows]

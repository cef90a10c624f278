"""Token allocation (position) persistence."""

from __future__ import annotations

import time
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from predamm.amm.pricing import quantize_money
from predamm.models import TokenAllocation

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_COLUMNS = ["id", "user_id", "outcome_id", "amount", "created_at", "updated_at"]
_SELECT = "SELECT id, user_id, outcome_id, amount, created_at, updated_at FROM token_allocations"


def _to_allocation(row: tuple) -> TokenAllocation:
    return TokenAllocation(**dict(zip(_COLUMNS, row)))


def find_allocation(conn: DuckDBPyConnection, user_id: int, outcome_id: int) -> TokenAllocation | None:
    row = conn.execute(
        f"{_SELECT} WHERE user_id = ? AND outcome_id = ?", [user_id, outcome_id]
    ).fetchone()
    return _to_allocation(row) if row else None


def get_allocation(conn: DuckDBPyConnection, allocation_id: int) -> TokenAllocation | None:
    row = conn.execute(f"{_SELECT} WHERE id = ?", [allocation_id]).fetchone()
    return _to_allocation(row) if row else None


def upsert_allocation(conn: DuckDBPyConnection, user_id: int, outcome_id: int, delta: Decimal) -> None:
    """Create the (user, outcome) position with `delta` shares, or add `delta` to it."""
    now_ms = int(time.time() * 1000)
    conn.execute(
        """
        INSERT INTO token_allocations (user_id, outcome_id, amount, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT (user_id, outcome_id) DO UPDATE SET
            amount = amount + excluded.amount,
            updated_at = excluded.updated_at
        """,
        [user_id, outcome_id, quantize_money(delta), now_ms, now_ms],
    )


def decrement_allocation(conn: DuckDBPyConnection, user_id: int, outcome_id: int, amount: Decimal) -> None:
    """Subtract shares from an existing position. Caller checks the holding first."""
    conn.execute(
        """
        UPDATE token_allocations SET amount = amount - ?, updated_at = ?
        WHERE user_id = ? AND outcome_id = ?
        """,
        [quantize_money(amount), int(time.time() * 1000), user_id, outcome_id],
    )


def list_allocations(
    conn: DuckDBPyConnection,
    *,
    user_id: int | None = None,
    outcome_id: int | None = None,
    limit: int = 10,
    page: int = 1,
) -> list[TokenAllocation]:
    """Filter positions by user and/or outcome, paginated (page starts at 1)."""
    conditions = ["1=1"]
    params: list[Any] = []
    if user_id is not None:
        conditions.append("user_id = ?")
        params.append(user_id)
    if outcome_id is not None:
        conditions.append("outcome_id = ?")
        params.append(outcome_id)
    where = " AND ".join(conditions)
    params.extend([limit, (max(page, 1) - 1) * limit])
    rows = conn.execute(
        f"{_SELECT} WHERE {where} ORDER BY id LIMIT ? OFFSET ?",
        params,
    ).fetchall()
    return [_to_allocation(r) for r in rows]

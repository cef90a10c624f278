"""Event persistence, with trade aggregates for listings."""

from __future__ import annotations

import time
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from predamm.amm.pricing import ZERO
from predamm.models import EVENT_STATUS_ACTIVE, Event
from predamm.storage.outcomes import create_outcomes, find_outcomes_by_events

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_EVENT_COLUMNS = [
    "id", "unique_id", "question", "description", "resolution_criteria", "image",
    "expiry_date", "community", "user_id", "status", "outcome_won", "created_at", "updated_at",
]
_AGG_COLUMNS = ["trade_count", "users_traded", "volume"]

# Columns accepted by sort_by="<column>:<asc|desc>"
SORTABLE_COLUMNS = {"id", "created_at", "updated_at", "expiry_date", "question", "status", "volume", "trade_count"}


def create_event(
    conn: DuckDBPyConnection,
    question: str,
    outcomes: list[str],
    *,
    unique_id: str | None = None,
    description: str | None = None,
    resolution_criteria: str | None = None,
    image: str | None = None,
    expiry_date: datetime | None = None,
    community: list[str] | None = None,
    user_id: int | None = None,
    initial_supply: Decimal = ZERO,
) -> Event:
    """Insert an ACTIVE event and one outcome per title. Run inside a transaction."""
    now_ms = int(time.time() * 1000)
    row = conn.execute(
        f"""
        INSERT INTO events (unique_id, question, description, resolution_criteria, image,
                            expiry_date, community, user_id, status, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        RETURNING {", ".join(_EVENT_COLUMNS)}
        """,
        [
            unique_id,
            question,
            description,
            resolution_criteria,
            image,
            expiry_date,
            list(community or []),
            user_id,
            EVENT_STATUS_ACTIVE,
            now_ms,
            now_ms,
        ],
    ).fetchone()
    data = dict(zip(_EVENT_COLUMNS, row))
    data["community"] = data["community"] or []
    data["outcomes"] = create_outcomes(conn, data["id"], outcomes, initial_supply=initial_supply)
    return Event(**data)


def _select_events(
    conn: DuckDBPyConnection,
    where: str,
    params: list[Any],
    order: str,
    limit: int | None = None,
    offset: int = 0,
) -> list[Event]:
    event_cols = ", ".join(f"e.{c} AS {c}" for c in _EVENT_COLUMNS)
    sql = f"""
        SELECT {event_cols},
               COUNT(t.id) AS trade_count,
               COUNT(DISTINCT t.user_id) AS users_traded,
               COALESCE(SUM(t.amount), 0) AS volume
        FROM events e
        LEFT JOIN trades t ON t.event_id = e.id
        WHERE {where}
        GROUP BY ALL
        ORDER BY {order}
    """
    params = list(params)
    if limit is not None:
        sql += " LIMIT ? OFFSET ?"
        params.extend([limit, offset])
    rows = conn.execute(sql, params).fetchall()
    columns = _EVENT_COLUMNS + _AGG_COLUMNS
    records = [dict(zip(columns, r)) for r in rows]
    outcomes = find_outcomes_by_events(conn, [r["id"] for r in records])
    events = []
    for r in records:
        r["community"] = r["community"] or []
        r["volume"] = Decimal(r["volume"])
        r["outcomes"] = outcomes.get(r["id"], [])
        events.append(Event(**r))
    return events


def get_event(conn: DuckDBPyConnection, event_id: int) -> Event | None:
    """Event with outcomes and trade aggregates, or None."""
    events = _select_events(conn, "e.id = ?", [event_id], "id")
    return events[0] if events else None


def _order_clause(sort_by: str | None) -> str:
    """Parse 'column:asc|desc'. Unknown columns fall back to newest first."""
    if not sort_by:
        return "created_at DESC, id DESC"
    column, _, direction = sort_by.partition(":")
    column = column.strip()
    direction = direction.strip().upper() or "ASC"
    if column not in SORTABLE_COLUMNS or direction not in ("ASC", "DESC"):
        return "created_at DESC, id DESC"
    return f"{column} {direction}, id DESC"


def list_events(
    conn: DuckDBPyConnection,
    *,
    status: str | None = None,
    community: str | None = None,
    user_id: int | None = None,
    limit: int = 10,
    page: int = 1,
    sort_by: str | None = None,
) -> list[Event]:
    """
    Paginated event listing (page starts at 1) with outcomes, trade count,
    distinct traders and volume. `community` matches any element of the
    event's community list.
    """
    conditions = ["1=1"]
    params: list[Any] = []
    if status:
        conditions.append("e.status = ?")
        params.append(status.upper())
    if community:
        conditions.append("list_contains(e.community, ?)")
        params.append(community)
    if user_id is not None:
        conditions.append("e.user_id = ?")
        params.append(user_id)
    return _select_events(
        conn,
        " AND ".join(conditions),
        params,
        _order_clause(sort_by),
        limit=limit,
        offset=(max(page, 1) - 1) * limit,
    )

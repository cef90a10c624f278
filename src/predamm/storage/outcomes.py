"""Outcome share pool persistence."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from predamm.amm.pricing import ZERO, quantize_money
from predamm.models import Outcome

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_COLUMNS = ["id", "event_id", "title", "current_supply", "total_liquidity"]
_SELECT = "SELECT id, event_id, title, current_supply, total_liquidity FROM outcomes"


def _to_outcome(row: tuple) -> Outcome:
    return Outcome(**dict(zip(_COLUMNS, row)))


def create_outcomes(
    conn: DuckDBPyConnection,
    event_id: int,
    titles: list[str],
    initial_supply: Decimal = ZERO,
) -> list[Outcome]:
    """Insert one outcome per title with an empty liquidity pool."""
    created = []
    for title in titles:
        row = conn.execute(
            f"""
            INSERT INTO outcomes (event_id, title, current_supply, total_liquidity)
            VALUES (?, ?, ?, ?)
            RETURNING {", ".join(_COLUMNS)}
            """,
            [event_id, title, quantize_money(initial_supply), quantize_money(ZERO)],
        ).fetchone()
        created.append(_to_outcome(row))
    return created


def find_outcomes_by_event(conn: DuckDBPyConnection, event_id: int) -> list[Outcome]:
    """Outcomes of an event in creation order (the index order used for pricing)."""
    rows = conn.execute(f"{_SELECT} WHERE event_id = ? ORDER BY id", [event_id]).fetchall()
    return [_to_outcome(r) for r in rows]


def find_outcomes_by_events(conn: DuckDBPyConnection, event_ids: list[int]) -> dict[int, list[Outcome]]:
    """Batch lookup: event_id -> outcomes."""
    by_event: dict[int, list[Outcome]] = {eid: [] for eid in event_ids}
    if not event_ids:
        return by_event
    placeholders = ",".join("?" for _ in event_ids)
    rows = conn.execute(
        f"{_SELECT} WHERE event_id IN ({placeholders}) ORDER BY id",
        list(event_ids),
    ).fetchall()
    for r in rows:
        outcome = _to_outcome(r)
        by_event[outcome.event_id].append(outcome)
    return by_event


def update_outcome(
    conn: DuckDBPyConnection,
    outcome_id: int,
    supply_delta: Decimal = ZERO,
    liquidity_delta: Decimal = ZERO,
    min_supply: Decimal = ZERO,
) -> None:
    """
    Apply deltas to an outcome's pool.

    The supply delta is applied on top of max(current_supply, min_supply) so a
    row stored below the floor is lifted to it before the trade lands.
    """
    conn.execute(
        """
        UPDATE outcomes
        SET current_supply = GREATEST(current_supply, ?) + ?,
            total_liquidity = total_liquidity + ?
        WHERE id = ?
        """,
        [
            quantize_money(min_supply),
            quantize_money(supply_delta),
            quantize_money(liquidity_delta),
            outcome_id,
        ],
    )


def set_outcome_pool(
    conn: DuckDBPyConnection,
    outcome_id: int,
    current_supply: Decimal,
    total_liquidity: Decimal,
) -> None:
    """Overwrite an outcome's pool (market initialization)."""
    conn.execute(
        "UPDATE outcomes SET current_supply = ?, total_liquidity = ? WHERE id = ?",
        [quantize_money(current_supply), quantize_money(total_liquidity), outcome_id],
    )

"""User and playmoney balance persistence."""

from __future__ import annotations

import time
from decimal import Decimal
from typing import TYPE_CHECKING

from predamm.amm.pricing import quantize_money
from predamm.models import User

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_COLUMNS = ["id", "username", "wallet_address", "playmoney", "created_at"]
_SELECT = "SELECT id, username, wallet_address, playmoney, created_at FROM users"


def _to_user(row: tuple) -> User:
    return User(**dict(zip(_COLUMNS, row)))


def create_user(
    conn: DuckDBPyConnection,
    username: str | None = None,
    wallet_address: str | None = None,
    playmoney: Decimal | int | str = 0,
) -> User:
    """Insert a user and return it with its assigned id."""
    row = conn.execute(
        """
        INSERT INTO users (username, wallet_address, playmoney, created_at)
        VALUES (?, ?, ?, ?)
        RETURNING id, username, wallet_address, playmoney, created_at
        """,
        [username, wallet_address, quantize_money(playmoney), int(time.time() * 1000)],
    ).fetchone()
    return _to_user(row)


def find_user(conn: DuckDBPyConnection, user_id: int) -> User | None:
    row = conn.execute(f"{_SELECT} WHERE id = ?", [user_id]).fetchone()
    return _to_user(row) if row else None


def find_user_by_wallet(conn: DuckDBPyConnection, wallet_address: str) -> User | None:
    row = conn.execute(f"{_SELECT} WHERE wallet_address = ?", [wallet_address]).fetchone()
    return _to_user(row) if row else None


def update_user_balance(conn: DuckDBPyConnection, user_id: int, delta: Decimal) -> None:
    """Add delta (negative to debit) to the user's playmoney."""
    conn.execute(
        "UPDATE users SET playmoney = playmoney + ? WHERE id = ?",
        [quantize_money(delta), user_id],
    )

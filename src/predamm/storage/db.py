"""DuckDB connection, schema init and the transactional Store handle."""

from __future__ import annotations

import time
from contextlib import contextmanager
from pathlib import Path
from threading import BoundedSemaphore, Lock, Timer
from typing import TYPE_CHECKING, Callable, Iterator, TypeVar

import duckdb
import structlog

from predamm.errors import TransactionConflict, TransactionTimeout

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

    from predamm.config.settings import Settings

log = structlog.get_logger(__name__)

T = TypeVar("T")

SCHEMA_SQL = """
-- Sequences for auto-increment IDs
CREATE SEQUENCE IF NOT EXISTS user_seq START 1;
CREATE SEQUENCE IF NOT EXISTS event_seq START 1;
CREATE SEQUENCE IF NOT EXISTS outcome_seq START 1;
CREATE SEQUENCE IF NOT EXISTS allocation_seq START 1;
CREATE SEQUENCE IF NOT EXISTS trade_seq START 1;

-- Traders and their playmoney balance
CREATE TABLE IF NOT EXISTS users (
    id              BIGINT PRIMARY KEY DEFAULT nextval('user_seq'),
    username        VARCHAR,
    wallet_address  VARCHAR UNIQUE,
    playmoney       DECIMAL(38, 12) NOT NULL DEFAULT 0,
    created_at      BIGINT NOT NULL
);

-- Prediction events
CREATE TABLE IF NOT EXISTS events (
    id                  BIGINT PRIMARY KEY DEFAULT nextval('event_seq'),
    unique_id           VARCHAR,
    question            VARCHAR NOT NULL,
    description         VARCHAR,
    resolution_criteria VARCHAR,
    image               VARCHAR,
    expiry_date         TIMESTAMP,
    community           VARCHAR[],
    user_id             BIGINT,
    status              VARCHAR NOT NULL DEFAULT 'ACTIVE',
    outcome_won         BIGINT,
    created_at          BIGINT NOT NULL,
    updated_at          BIGINT NOT NULL
);

-- Outcome share pools (AMM state)
CREATE TABLE IF NOT EXISTS outcomes (
    id              BIGINT PRIMARY KEY DEFAULT nextval('outcome_seq'),
    event_id        BIGINT NOT NULL,
    title           VARCHAR NOT NULL,
    current_supply  DECIMAL(38, 12) NOT NULL DEFAULT 0,
    total_liquidity DECIMAL(38, 12) NOT NULL DEFAULT 0
);

-- Per (user, outcome) positions
CREATE TABLE IF NOT EXISTS token_allocations (
    id          BIGINT PRIMARY KEY DEFAULT nextval('allocation_seq'),
    user_id     BIGINT NOT NULL,
    outcome_id  BIGINT NOT NULL,
    amount      DECIMAL(38, 12) NOT NULL DEFAULT 0,
    created_at  BIGINT NOT NULL,
    updated_at  BIGINT NOT NULL,
    UNIQUE (user_id, outcome_id)
);

-- Trade history (append-only)
CREATE TABLE IF NOT EXISTS trades (
    id          BIGINT PRIMARY KEY DEFAULT nextval('trade_seq'),
    order_type  VARCHAR NOT NULL,
    order_size  DECIMAL(38, 12) NOT NULL,
    amount      DECIMAL(38, 12) NOT NULL,
    event_id    BIGINT NOT NULL,
    outcome_id  BIGINT NOT NULL,
    user_id     BIGINT NOT NULL,
    after_price DECIMAL(38, 18),
    created_at  BIGINT NOT NULL
);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager."""
    if str(db_path) == ":memory:":
        return duckdb.connect(":memory:")
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables and sequences if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise


def _rollback(cur: DuckDBPyConnection) -> None:
    try:
        cur.execute("ROLLBACK")
    except duckdb.Error as e:
        # A failed COMMIT has already closed the transaction
        log.debug("rollback_skipped", error=str(e))


class Store:
    """
    Owns one DuckDB database and hands out cursors.

    Every trade runs in `transaction()`: BEGIN on a fresh cursor, COMMIT when
    the body returns, ROLLBACK on any exception. DuckDB's optimistic MVCC
    rejects the second writer of a row; that surfaces as TransactionConflict.
    At most `pool_size` transactions run at once; waiting longer than
    `max_wait_sec` for a slot, or a body running longer than `timeout_sec`,
    raises TransactionTimeout and nothing is committed. A statement still
    executing at `timeout_sec` is interrupted.
    """

    def __init__(
        self,
        db_path: str | Path,
        *,
        pool_size: int = 8,
        max_wait_sec: float = 5.0,
        timeout_sec: float = 10.0,
    ) -> None:
        self.db_path = db_path
        self.max_wait_sec = max_wait_sec
        self.timeout_sec = timeout_sec
        self._conn = get_connection(db_path)
        init_schema(self._conn)
        self._slots = BoundedSemaphore(pool_size)
        self._cursor_lock = Lock()

    @classmethod
    def from_settings(cls, settings: Settings, db_path: str | Path | None = None) -> Store:
        return cls(
            db_path or settings.db_path,
            pool_size=settings.pool_size,
            max_wait_sec=settings.transaction_max_wait_sec,
            timeout_sec=settings.transaction_timeout_sec,
        )

    def _cursor(self) -> DuckDBPyConnection:
        with self._cursor_lock:
            return self._conn.cursor()

    @contextmanager
    def read(self) -> Iterator[DuckDBPyConnection]:
        """Autocommit cursor for reads that tolerate staleness (quotes, listings)."""
        cur = self._cursor()
        try:
            yield cur
        finally:
            cur.close()

    @contextmanager
    def transaction(self) -> Iterator[DuckDBPyConnection]:
        if not self._slots.acquire(timeout=self.max_wait_sec):
            log.warning("transaction_slot_timeout", max_wait_sec=self.max_wait_sec)
            raise TransactionTimeout(f"No transaction slot within {self.max_wait_sec}s")
        try:
            cur = self._cursor()
            try:
                started = time.monotonic()
                cur.execute("BEGIN TRANSACTION")
                # Aborts a statement still running when the time limit passes
                watchdog = Timer(self.timeout_sec, cur.interrupt)
                watchdog.daemon = True
                try:
                    watchdog.start()
                    try:
                        yield cur
                    finally:
                        watchdog.cancel()
                    elapsed = time.monotonic() - started
                    if elapsed > self.timeout_sec:
                        raise TransactionTimeout(
                            f"Transaction ran {elapsed:.3f}s, limit is {self.timeout_sec}s"
                        )
                    cur.execute("COMMIT")
                except duckdb.InterruptException as e:
                    _rollback(cur)
                    log.warning("transaction_interrupted", timeout_sec=self.timeout_sec)
                    raise TransactionTimeout(f"Transaction exceeded {self.timeout_sec}s and was aborted") from e
                except duckdb.TransactionException as e:
                    _rollback(cur)
                    log.info("transaction_conflict", error=str(e))
                    raise TransactionConflict(f"Concurrent update, try again: {e}") from e
                except BaseException:
                    _rollback(cur)
                    raise
            finally:
                cur.close()
        finally:
            self._slots.release()

    def run_in_transaction(self, fn: Callable[[DuckDBPyConnection], T]) -> T:
        """Run fn(cursor) atomically and return its result."""
        with self.transaction() as cur:
            return fn(cur)

    def close(self) -> None:
        self._conn.close()

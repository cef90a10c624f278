"""Shared fixtures: a temp DuckDB store, an AMM and a seeded two-outcome market."""

import shutil
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

from predamm import services
from predamm.amm.market import Amm
from predamm.storage.allocations import find_allocation, upsert_allocation
from predamm.storage.db import Store
from predamm.storage.outcomes import find_outcomes_by_event, set_outcome_pool
from predamm.storage.users import find_user


@pytest.fixture
def temp_dir():
    tmp = tempfile.mkdtemp()
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def store(temp_dir):
    s = Store(temp_dir / "test.duckdb")
    yield s
    s.close()


@pytest.fixture
def amm(store):
    return Amm(store)


@pytest.fixture
def market(store, amm):
    """Yes/No event, initialized: supply 1 and liquidity 100 on both outcomes."""
    event = services.create_event(store, "Will it rain tomorrow?", ["Yes", "No"])
    amm.initialize_market(event.id)
    return services.get_event(store, event.id)


@pytest.fixture
def trader(store):
    return services.create_user(store, "alice", "wallet-alice", Decimal("1000"))


def set_pool(store, outcome_id, supply, liquidity):
    store.run_in_transaction(
        lambda conn: set_outcome_pool(conn, outcome_id, Decimal(supply), Decimal(liquidity))
    )


def give_shares(store, user_id, outcome_id, amount):
    store.run_in_transaction(lambda conn: upsert_allocation(conn, user_id, outcome_id, Decimal(amount)))


def snapshot(store, event_id, user_id):
    """Everything a trade may touch, for before/after comparisons."""
    with store.read() as conn:
        outcomes = [
            (o.id, o.current_supply, o.total_liquidity) for o in find_outcomes_by_event(conn, event_id)
        ]
        user = find_user(conn, user_id)
        allocations = [find_allocation(conn, user_id, o[0]) for o in outcomes]
        trade_count = conn.execute("SELECT COUNT(*) FROM trades").fetchone()[0]
    return {
        "outcomes": outcomes,
        "playmoney": user.playmoney if user else None,
        "allocations": [a.amount if a else None for a in allocations],
        "trades": trade_count,
    }


def outcome_row(store, event_id, outcome_id):
    with store.read() as conn:
        return next(o for o in find_outcomes_by_event(conn, event_id) if o.id == outcome_id)


def balance(store, user_id):
    with store.read() as conn:
        return find_user(conn, user_id).playmoney

"""Events, users, deposits, allocations and trade history."""

from datetime import datetime
from decimal import Decimal

import pytest

from conftest import set_pool
from predamm import services
from predamm.errors import InvalidRequest, NotFound


def _even_pools(store, event):
    for o in event.outcomes:
        set_pool(store, o.id, 100, 100)


def test_create_event_with_owner(store, trader):
    event = services.create_event(
        store,
        "Will BTC close above 100k?",
        ["Yes", "No"],
        wallet_address="wallet-alice",
        unique_id="btc-100k",
        description="Daily close",
        resolution_criteria="Exchange close price",
        expiry_date=datetime(2027, 1, 1),
        community=["crypto", "markets"],
    )
    assert event.user_id == trader.id
    assert event.status == "ACTIVE"
    assert event.unique_id == "btc-100k"
    assert [o.title for o in event.outcomes] == ["Yes", "No"]

    loaded = services.get_event(store, event.id)
    assert loaded.community == ["crypto", "markets"]
    assert loaded.expiry_date == datetime(2027, 1, 1)
    assert loaded.trade_count == 0
    assert loaded.volume == Decimal(0)


def test_create_event_unknown_wallet_has_no_owner(store):
    event = services.create_event(store, "Q?", ["Yes", "No"], wallet_address="nobody")
    assert event.user_id is None


def test_create_event_rejects_bad_outcomes(store):
    with pytest.raises(InvalidRequest):
        services.create_event(store, "Q?", [])
    with pytest.raises(InvalidRequest):
        services.create_event(store, "Q?", ["  ", ""])
    with pytest.raises(InvalidRequest, match="unique"):
        services.create_event(store, "Q?", ["Yes", "Yes"])
    assert services.list_events(store) == []


def test_get_event_not_found(store):
    with pytest.raises(NotFound, match="Event not found"):
        services.get_event(store, 777)


def test_event_aggregates(store, amm, market, trader):
    bob = services.create_user(store, "bob", "wallet-bob", Decimal(50))
    yes, no = market.outcomes
    _even_pools(store, market)
    amm.buy(market.id, yes.id, "1", trader.id)
    amm.buy(market.id, no.id, "1", trader.id)
    amm.buy(market.id, no.id, "2", bob.id)

    event = services.get_event(store, market.id)
    assert event.trade_count == 3
    assert event.users_traded == 2
    assert event.volume == Decimal(4)
    assert len(event.outcomes) == 2


def test_list_events_filters_and_pages(store, amm, trader):
    a = services.create_event(store, "A?", ["Yes", "No"], community=["sports"])
    b = services.create_event(store, "B?", ["Yes", "No"], community=["crypto"])
    c = services.create_event(store, "C?", ["Yes", "No"], community=["crypto", "sports"])
    amm.initialize_market(b.id)
    _even_pools(store, b)
    amm.buy(b.id, b.outcomes[0].id, "5", trader.id)

    assert {e.id for e in services.list_events(store, community="sports")} == {a.id, c.id}
    assert services.list_events(store, sort_by="volume:desc")[0].id == b.id
    assert [e.id for e in services.list_events(store, sort_by="id:asc")] == [a.id, b.id, c.id]
    assert [e.id for e in services.list_events(store, sort_by="id:asc", limit=2, page=2)] == [c.id]
    assert len(services.list_events(store, status="active")) == 3
    assert services.list_events(store, status="RESOLVED") == []
    # unknown sort column falls back to newest first
    assert len(services.list_events(store, sort_by="question; DROP TABLE events")) == 3


def test_create_user_and_balance(store):
    user = services.create_user(store, "carol", "wallet-carol", "25.5")
    assert user.playmoney == Decimal("25.5")
    assert services.get_balance_by_wallet(store, "wallet-carol") == Decimal("25.5")
    assert services.get_user(store, user.id).username == "carol"


def test_create_user_rejections(store, trader):
    with pytest.raises(InvalidRequest, match="already registered"):
        services.create_user(store, "alice2", "wallet-alice", 0)
    with pytest.raises(InvalidRequest, match="negative"):
        services.create_user(store, "neg", "wallet-neg", "-1")


def test_user_lookups_not_found(store):
    with pytest.raises(NotFound):
        services.get_user(store, 12345)
    with pytest.raises(NotFound, match="Wallet"):
        services.get_balance_by_wallet(store, "missing")


def test_deposit(store, trader):
    user = services.deposit(store, trader.id, "250")
    assert user.playmoney == Decimal(1250)
    with pytest.raises(InvalidRequest):
        services.deposit(store, trader.id, "0")
    with pytest.raises(InvalidRequest):
        services.deposit(store, trader.id, "-3")
    with pytest.raises(NotFound):
        services.deposit(store, 999, "1")
    with pytest.raises(InvalidRequest, match="out of range"):
        services.deposit(store, trader.id, Decimal(10) ** 30)
    with pytest.raises(InvalidRequest, match="Invalid amount"):
        services.deposit(store, trader.id, "ten")
    assert services.get_user(store, trader.id).playmoney == Decimal(1250)


def test_allocations_and_trades(store, amm, market, trader):
    yes, no = market.outcomes
    _even_pools(store, market)
    amm.buy(market.id, yes.id, "1", trader.id)
    amm.buy(market.id, no.id, "1", trader.id)

    rows = services.list_allocations(store, user_id=trader.id)
    assert [(a.outcome_id, a.amount) for a in rows] == [(yes.id, Decimal(1)), (no.id, Decimal(1))]
    assert [a.outcome_id for a in services.list_allocations(store, outcome_id=no.id)] == [no.id]
    assert len(services.list_allocations(store, user_id=trader.id, limit=1, page=2)) == 1

    one = services.get_allocation(store, rows[0].id)
    assert one.user_id == trader.id
    with pytest.raises(NotFound):
        services.get_allocation(store, 999)

    history = services.list_trades(store, event_id=market.id)
    assert [t.outcome_id for t in history] == [no.id, yes.id]
    assert services.list_trades(store, user_id=999) == []

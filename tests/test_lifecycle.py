"""Market initialization, state reader floor and price reads."""

from decimal import Decimal

import pytest

from conftest import outcome_row, set_pool
from predamm import services
from predamm.amm.market import Amm
from predamm.amm.params import AmmParams
from predamm.amm.state import load_state
from predamm.errors import NotFound


def test_new_event_outcomes_start_at_min_shares(store):
    event = services.create_event(store, "Q?", ["Yes", "No"])
    for o in event.outcomes:
        assert o.current_supply == Decimal(1)
        assert o.total_liquidity == Decimal(0)


def test_initialize_market_seeds_every_outcome(store, amm):
    event = services.create_event(store, "Q?", ["A", "B", "C", "D"])
    prices = amm.initialize_market(event.id)
    assert [p.outcome_id for p in prices] == [o.id for o in event.outcomes]
    for p in prices:
        assert p.price == Decimal(1) / Decimal(4)
        assert p.current_supply == Decimal(1)
        assert p.total_liquidity == Decimal(100)


def test_initialize_market_overwrites_traded_pools(store, amm, market, trader):
    yes, no = market.outcomes
    amm.buy(market.id, yes.id, "1", trader.id)
    assert outcome_row(store, market.id, yes.id).current_supply == Decimal(2)

    prices = amm.initialize_market(market.id)
    assert [p.price for p in prices] == [Decimal("0.5"), Decimal("0.5")]
    for o in (yes, no):
        row = outcome_row(store, market.id, o.id)
        assert row.current_supply == Decimal(1)
        assert row.total_liquidity == Decimal(100)


def test_initialize_market_uses_params(store):
    amm = Amm(store, AmmParams(initial_liquidity=Decimal(500), min_shares=Decimal(10)))
    event = services.create_event(store, "Q?", ["Yes", "No"])
    amm.initialize_market(event.id)
    row = outcome_row(store, event.id, event.outcomes[0].id)
    assert row.current_supply == Decimal(10)
    assert row.total_liquidity == Decimal(500)


def test_initialize_unknown_event(amm):
    with pytest.raises(NotFound):
        amm.initialize_market(31337)


def test_state_reader_floors_supply(store, market):
    yes, no = market.outcomes
    set_pool(store, yes.id, 0, 100)
    with store.read() as conn:
        state = load_state(conn, market.id)
    assert state.shares == [Decimal(1), Decimal(1)]
    assert [o.id for o in state.outcomes] == [yes.id, no.id]
    assert state.outcomes[0].current_supply == Decimal(0)


def test_trade_lifts_legacy_row_to_floor(store, amm, market, trader):
    yes = market.outcomes[0]
    set_pool(store, yes.id, 0, 100)
    result = amm.buy(market.id, yes.id, "1", trader.id)
    assert result.shares == Decimal(1)
    # stored value becomes max(0, 1) + 1, not 0 + 1
    assert outcome_row(store, market.id, yes.id).current_supply == Decimal(2)


def test_state_reader_unknown_event(store):
    with store.read() as conn:
        with pytest.raises(NotFound):
            load_state(conn, 4242)


def test_get_prices_passes_oracle_price_through(amm, market):
    prices = amm.get_prices(market.id, oracle_price="67123.45")
    assert {p.title for p in prices} == {"Yes", "No"}
    assert all(p.oracle_price == Decimal("67123.45") for p in prices)
    assert all(p.implied_probability is None for p in prices)
    assert amm.get_prices(market.id)[0].oracle_price is None


def test_get_market_prices_adds_implied_probability(store, amm, market):
    yes, no = market.outcomes
    set_pool(store, yes.id, 3, 100)
    set_pool(store, no.id, 1, 100)
    rows = amm.get_market_prices(market.id)
    assert rows[0].implied_probability == Decimal(75)
    assert rows[1].implied_probability == Decimal(25)
    assert sum(r.price for r in rows) == Decimal(1)


def test_get_outcome_price(amm, market):
    no = market.outcomes[1]
    price = amm.get_outcome_price(market.id, no.id)
    assert price.outcome_id == no.id
    assert price.title == "No"
    assert price.price == Decimal("0.5")
    with pytest.raises(NotFound):
        amm.get_outcome_price(market.id, 5555)

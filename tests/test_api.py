"""API smoke tests against a temp store."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from conftest import give_shares, set_pool
from predamm.api.main import create_app
from predamm.config import Settings


@pytest.fixture
def client(store):
    return TestClient(create_app(store=store, settings=Settings()))


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_event_lifecycle(client):
    r = client.post("/users", json={"username": "dana", "wallet_address": "w-dana", "playmoney": "100"})
    assert r.status_code == 201
    user_id = r.json()["id"]

    r = client.post(
        "/events",
        json={"question": "Rain?", "outcomes": ["Yes", "No"], "wallet_address": "w-dana", "community": ["weather"]},
    )
    assert r.status_code == 201
    event = r.json()
    assert event["user_id"] == user_id
    yes_id = event["outcomes"][0]["id"]

    r = client.post(f"/events/{event['id']}/initialize")
    assert r.status_code == 200
    assert [Decimal(p["price"]) for p in r.json()] == [Decimal("0.5"), Decimal("0.5")]

    r = client.post(f"/events/{event['id']}/quote/buy", json={"outcome_id": yes_id, "amount": "1"})
    assert r.status_code == 200
    assert Decimal(r.json()["shares"]) == Decimal(1)

    r = client.post(f"/events/{event['id']}/buy", json={"outcome_id": yes_id, "amount": "1", "user_id": user_id})
    assert r.status_code == 200
    assert Decimal(r.json()["shares"]) == Decimal(1)
    assert len(r.json()["price_impacts"]) == 2

    r = client.get(f"/events/{event['id']}")
    assert r.json()["trade_count"] == 1
    assert Decimal(r.json()["volume"]) == Decimal(1)

    r = client.get("/events", params={"community": "weather"})
    assert [e["id"] for e in r.json()] == [event["id"]]

    r = client.get(f"/events/{event['id']}/trades")
    assert [t["order_type"] for t in r.json()] == ["BUY"]

    r = client.get("/wallets/w-dana/balance")
    assert Decimal(r.json()["playmoney"]) == Decimal(99)

    r = client.get("/allocations", params={"user_id": user_id})
    assert [Decimal(a["amount"]) for a in r.json()] == [Decimal(1)]


def test_prices_endpoints(client, market):
    r = client.get(f"/events/{market.id}/prices", params={"oracle_price": "65000"})
    assert r.status_code == 200
    assert all(Decimal(p["oracle_price"]) == Decimal(65000) for p in r.json())

    r = client.get(f"/events/{market.id}/market")
    assert [Decimal(p["implied_probability"]) for p in r.json()] == [Decimal(50), Decimal(50)]

    yes = market.outcomes[0]
    r = client.get(f"/events/{market.id}/outcomes/{yes.id}/price")
    assert r.json()["title"] == "Yes"


def test_sell_and_quote_sell(client, store, market, trader):
    yes, no = market.outcomes
    set_pool(store, yes.id, 100, 100)
    set_pool(store, no.id, 100, 100)
    give_shares(store, trader.id, yes.id, 10)

    r = client.post(f"/events/{market.id}/quote/sell", json={"outcome_id": yes.id, "shares": "10"})
    assert Decimal(r.json()["after_fees"]) == Decimal("4.9")

    r = client.post(f"/events/{market.id}/sell", json={"outcome_id": yes.id, "shares": "10", "user_id": trader.id})
    assert r.status_code == 200
    assert Decimal(r.json()["cost"]) == Decimal("4.9")


def test_errors_use_code_and_status(client, market, trader):
    yes = market.outcomes[0]
    r = client.get("/events/9999")
    assert r.status_code == 404
    assert r.json() == {"detail": "Event not found", "code": "not_found"}

    r = client.post(f"/events/{market.id}/buy", json={"outcome_id": yes.id, "amount": "5000", "user_id": trader.id})
    assert r.status_code == 400
    assert r.json()["code"] == "insufficient_balance"

    r = client.post(f"/events/{market.id}/buy", json={"outcome_id": yes.id, "amount": "200", "user_id": trader.id})
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_request"
    assert "Price impact" in r.json()["detail"]

    r = client.post(f"/events/{market.id}/sell", json={"outcome_id": yes.id, "shares": "1", "user_id": trader.id})
    assert r.json()["code"] == "insufficient_shares"

    r = client.post(f"/events/{market.id}/buy", json={"outcome_id": yes.id, "amount": "-1", "user_id": trader.id})
    assert r.status_code == 422


def test_users_and_deposit(client, trader):
    r = client.post(f"/users/{trader.id}/deposit", json={"amount": "10"})
    assert r.status_code == 200
    assert Decimal(r.json()["playmoney"]) == Decimal(1010)

    r = client.get(f"/users/{trader.id}")
    assert r.json()["username"] == "alice"

    r = client.post("/users", json={"username": "dup", "wallet_address": "wallet-alice"})
    assert r.status_code == 400

    assert client.get("/users/999").status_code == 404
    assert client.get("/allocations/999").status_code == 404
    assert client.get("/wallets/nope/balance").json()["code"] == "not_found"


def test_large_amounts_are_client_errors(client, market, trader):
    yes = market.outcomes[0]
    big = "100000000000000000"

    r = client.post(f"/events/{market.id}/buy", json={"outcome_id": yes.id, "amount": big, "user_id": trader.id})
    assert r.status_code == 400
    assert r.json()["code"] == "insufficient_balance"

    r = client.post("/users", json={"username": "whale", "wallet_address": "w-whale", "playmoney": big})
    assert r.status_code == 201
    whale_id = r.json()["id"]
    assert Decimal(r.json()["playmoney"]) == Decimal(big)

    r = client.post(f"/events/{market.id}/buy", json={"outcome_id": yes.id, "amount": big, "user_id": whale_id})
    assert r.status_code == 400
    assert "too large" in r.json()["detail"]

    r = client.post(f"/users/{whale_id}/deposit", json={"amount": "1" + "0" * 30})
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_request"

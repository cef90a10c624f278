"""CLI smoke tests: commands run end to end against a temp database."""

import pytest
from typer.testing import CliRunner

from predamm.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    # Cached loggers would keep writing to the first invocation's stdout
    monkeypatch.setattr("predamm.cli.app.configure_logging", lambda settings: None)


@pytest.fixture
def db(temp_dir):
    return str(temp_dir / "cli.duckdb")


def invoke(db, *args):
    return runner.invoke(app, ["--db", db, *args])


def test_db_init(db):
    result = invoke(db, "db", "init")
    assert result.exit_code == 0
    assert "Schema ready" in result.output


def test_trading_flow(db):
    result = invoke(db, "users", "create", "-u", "erin", "--wallet", "w-erin", "--playmoney", "100")
    assert result.exit_code == 0
    assert "User 1" in result.output

    result = invoke(db, "events", "create", "-q", "Snow?", "-o", "Yes", "-o", "No")
    assert result.exit_code == 0
    assert "Event 1: Snow?" in result.output
    assert "Market initialized." in result.output

    result = invoke(db, "trade", "quote-buy", "-e", "1", "-o", "1", "-a", "1")
    assert result.exit_code == 0
    assert "Shares: 1.00" in result.output

    result = invoke(db, "trade", "buy", "-e", "1", "-o", "1", "-a", "1", "-u", "1")
    assert result.exit_code == 0
    assert "Bought: 1.00 shares for 1.00" in result.output

    result = invoke(db, "users", "balance", "1")
    assert "Balance: 99.00" in result.output
    result = invoke(db, "users", "balance", "--wallet", "w-erin")
    assert "Balance: 99.00" in result.output

    result = invoke(db, "users", "allocations", "--user", "1")
    assert "Total: 1 allocations" in result.output

    result = invoke(db, "events", "show", "1")
    assert result.exit_code == 0
    assert "Trades: 1" in result.output

    result = invoke(db, "events", "trades", "1")
    assert "BUY" in result.output

    result = invoke(db, "events", "prices", "1", "--outcome", "2")
    assert "No" in result.output

    result = invoke(db, "users", "deposit", "1", "50")
    assert "Balance: 149.00" in result.output


def test_errors_exit_nonzero(db):
    invoke(db, "users", "create", "-u", "frank", "--playmoney", "5")
    invoke(db, "events", "create", "-q", "Hail?", "-o", "Yes", "-o", "No")

    result = invoke(db, "trade", "buy", "-e", "1", "-o", "1", "-a", "50", "-u", "1")
    assert result.exit_code == 1
    assert "insufficient_balance" in result.output

    result = invoke(db, "trade", "sell", "-e", "1", "-o", "1", "-s", "1", "-u", "1")
    assert result.exit_code == 1
    assert "insufficient_shares" in result.output

    result = invoke(db, "events", "show", "42")
    assert result.exit_code == 1
    assert "not_found" in result.output

    result = invoke(db, "trade", "buy", "-e", "1", "-o", "1", "-a", "abc", "-u", "1")
    assert result.exit_code == 1
    assert "Error (invalid_request): Invalid amount" in result.output

    result = invoke(db, "users", "deposit", "1", "lots")
    assert result.exit_code == 1
    assert "invalid_request" in result.output


def test_events_list(db):
    invoke(db, "events", "create", "-q", "One?", "-o", "A", "-o", "B", "--community", "x")
    invoke(db, "events", "create", "-q", "Two?", "-o", "A", "-o", "B", "--no-initialize")
    result = invoke(db, "events", "list")
    assert result.exit_code == 0
    assert "Total: 2 events" in result.output
    result = invoke(db, "events", "list", "--community", "x")
    assert "Total: 1 events" in result.output

"""Market initialization."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from predamm.amm.params import DEFAULT_PARAMS, AmmParams
from predamm.errors import NotFound
from predamm.storage.outcomes import find_outcomes_by_event, set_outcome_pool

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

log = structlog.get_logger(__name__)


def initialize_market(
    conn: DuckDBPyConnection,
    event_id: int,
    params: AmmParams = DEFAULT_PARAMS,
) -> None:
    """
    Reset every outcome of the event to min_shares supply and
    initial_liquidity. Overwrites whatever was there: first-time setup only.
    """
    outcomes = find_outcomes_by_event(conn, event_id)
    if not outcomes:
        raise NotFound("Event outcomes not found")
    for outcome in outcomes:
        set_outcome_pool(conn, outcome.id, params.min_shares, params.initial_liquidity)
    log.info("market_initialized", event_id=event_id, outcomes=len(outcomes))

"""Market state: an event's outcomes and the share vector used for pricing."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from predamm.amm.params import DEFAULT_PARAMS, AmmParams
from predamm.errors import NotFound
from predamm.models import Outcome
from predamm.storage.outcomes import find_outcomes_by_event

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


@dataclass
class MarketState:
    """Outcomes in pricing order and their share counts (floored at min_shares)."""

    shares: list[Decimal]
    outcomes: list[Outcome]

    def index_of(self, outcome_id: int) -> int:
        """Position of outcome_id in the pool. Raises NotFound."""
        for i, outcome in enumerate(self.outcomes):
            if outcome.id == outcome_id:
                return i
        raise NotFound("Outcome not found")


def load_state(
    conn: DuckDBPyConnection,
    event_id: int,
    params: AmmParams = DEFAULT_PARAMS,
) -> MarketState:
    """Read an event's pool. The min_shares floor is applied to what is reported, not stored."""
    outcomes = find_outcomes_by_event(conn, event_id)
    if not outcomes:
        raise NotFound("Event outcomes not found")
    shares = [max(o.current_supply, params.min_shares) for o in outcomes]
    return MarketState(shares=shares, outcomes=outcomes)

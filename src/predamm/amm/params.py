"""AMM constants, overridable from the [amm] config section."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from predamm.config.settings import Settings


@dataclass(frozen=True)
class AmmParams:
    fee_rate: Decimal = Decimal("0.02")
    initial_liquidity: Decimal = Decimal("100")
    min_shares: Decimal = Decimal("1")
    max_price_impact: Decimal = Decimal("0.5")  # fraction, compared against impact / 100
    min_price: Decimal = Decimal("0.001")
    max_price: Decimal = Decimal("0.999")

    @classmethod
    def from_settings(cls, settings: Settings) -> AmmParams:
        return cls(
            fee_rate=settings.fee_rate,
            initial_liquidity=settings.initial_liquidity,
            min_shares=settings.min_shares,
            max_price_impact=settings.max_price_impact,
            min_price=settings.min_price,
            max_price=settings.max_price,
        )


DEFAULT_PARAMS = AmmParams()

"""Share-pool pricing: pure Decimal math, no state.

Price of outcome i is its share count over the total, clamped away from
0 and 1 and renormalized. The caller (executor, quote engine) handles
state, persistence and validation.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, InvalidOperation, localcontext
from typing import Any, Sequence

from predamm.amm.params import DEFAULT_PARAMS, AmmParams
from predamm.errors import InvalidRequest
from predamm.models import PriceImpact

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Storage precision: DECIMAL(38, 12) for money/shares, DECIMAL(38, 18) for prices
MONEY_QUANTUM = Decimal(10) ** -12
PRICE_QUANTUM = Decimal(10) ** -18
STORAGE_PRECISION = 38
# Largest single trade: keeps fee and share math exact in the default 28-digit context
MAX_TRADE_AMOUNT = Decimal(10) ** 15


def as_decimal(value: Any) -> Decimal:
    """
    Coerce int/str/float/Decimal to a finite Decimal. Floats go through str()
    to drop binary noise. Raises InvalidRequest for anything else.
    """
    if isinstance(value, float):
        value = str(value)
    try:
        result = value if isinstance(value, Decimal) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidRequest(f"Invalid amount: {value!r}") from e
    if not result.is_finite():
        raise InvalidRequest(f"Invalid amount: {value!r}")
    return result


def quantize_money(value: Any, rounding: str | None = None) -> Decimal:
    """
    Round to storage precision for money and share columns. Values that do
    not fit DECIMAL(38, 12) raise InvalidRequest.
    """
    value = as_decimal(value)
    with localcontext() as ctx:
        ctx.prec = STORAGE_PRECISION
        try:
            return value.quantize(MONEY_QUANTUM, rounding=rounding)
        except InvalidOperation as e:
            raise InvalidRequest(f"Amount out of range: {value}") from e


def quantize_price(value: Decimal) -> Decimal:
    return value.quantize(PRICE_QUANTUM)


def calculate_prices(shares: Sequence[Decimal], params: AmmParams = DEFAULT_PARAMS) -> list[Decimal]:
    """
    Price vector for a share pool.

    raw_i = shares_i / sum(shares), clamped into [min_price, max_price], then
    divided by the clamped sum so the vector sums to 1. Outputs stay strictly
    inside (0, 1) as long as min_price > 0.
    """
    if not shares:
        return []
    total = sum(shares, ZERO)
    if total <= ZERO:
        # Degenerate pool: treat every outcome as equally likely
        return [Decimal(1) / len(shares)] * len(shares)
    raw = [s / total for s in shares]
    clamped = [min(max(p, params.min_price), params.max_price) for p in raw]
    clamped_sum = sum(clamped, ZERO)
    return [p / clamped_sum for p in clamped]


def calculate_price_impacts(
    outcomes: Sequence[Any],
    prices_before: Sequence[Decimal],
    prices_after: Sequence[Decimal],
) -> list[PriceImpact]:
    """Signed percentage move per outcome: (after - before) / before * 100."""
    return [
        PriceImpact(
            outcome_id=outcome.id,
            title=outcome.title,
            before_price=before,
            after_price=after,
            impact=(after - before) / before * HUNDRED,
        )
        for outcome, before, after in zip(outcomes, prices_before, prices_after)
    ]


def split_fee(fee: Decimal, count: int) -> list[Decimal]:
    """
    Split a fee into `count` equal parts at storage precision.

    Parts are floored to MONEY_QUANTUM and the leftover quanta go one each
    to the first parts, so sum(parts) == fee exactly.
    """
    if count <= 0:
        return []
    fee = quantize_money(fee)
    part = quantize_money(fee / count, rounding=ROUND_FLOOR)
    leftover = int((fee - part * count) / MONEY_QUANTUM)
    return [part + MONEY_QUANTUM if i < leftover else part for i in range(count)]

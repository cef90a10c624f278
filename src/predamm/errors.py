"""Error taxonomy shared by the AMM core, the API and the CLI."""

from __future__ import annotations


class AmmError(Exception):
    """Base class. `code` and `status_code` feed the API error body."""

    code = "amm_error"
    status_code = 500
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(AmmError):
    """Event, outcome, user or allocation does not exist."""

    code = "not_found"
    status_code = 404


class InvalidRequest(AmmError):
    """Input the market cannot accept; the caller must change it."""

    code = "invalid_request"
    status_code = 400


class InsufficientBalance(InvalidRequest):
    code = "insufficient_balance"


class InsufficientShares(InvalidRequest):
    code = "insufficient_shares"


class InsufficientLiquidity(InvalidRequest):
    code = "insufficient_liquidity"


class TransactionConflict(AmmError):
    """A concurrent transaction touched the same rows. Safe to retry."""

    code = "transaction_conflict"
    status_code = 409
    retryable = True


class TransactionTimeout(AmmError):
    """No transaction slot in time, or the transaction ran too long. Safe to retry."""

    code = "transaction_timeout"
    status_code = 503
    retryable = True

from __future__ import annotations

from typing import Any


class DomainValidationError(ValueError):
    """Raised when a ledger rule is violated."""

    code = "domain_validation_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInputError(DomainValidationError):
    code = "invalid_input"


class InvalidDateRangeError(DomainValidationError):
    code = "invalid_date_range"


class GameClosedError(DomainValidationError):
    code = "game_closed"


class InvalidJackpotAmountError(DomainValidationError):
    code = "invalid_jackpot_amount"


class MissingWinnerInfoError(DomainValidationError):
    code = "missing_winner_info"


class DuplicateGameNumberError(DomainValidationError):
    code = "duplicate_game_number"


class ActiveGameExistsError(DomainValidationError):
    code = "active_game_exists"


class RecordNotFoundError(DomainValidationError):
    code = "not_found"


class ConsistencyViolationError(RuntimeError):
    """Stored aggregates cannot be reconciled from their source rows."""

    code = "consistency_violation"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import HTTPException, status

from qoh_ledger.domain import (
    ActiveGameExistsError,
    ConsistencyViolationError,
    DomainValidationError,
    DuplicateGameNumberError,
    GameClosedError,
    RecordNotFoundError,
)

STATUS_BY_ERROR: dict[type[Exception], int] = {
    RecordNotFoundError: status.HTTP_404_NOT_FOUND,
    GameClosedError: status.HTTP_409_CONFLICT,
    DuplicateGameNumberError: status.HTTP_409_CONFLICT,
    ActiveGameExistsError: status.HTTP_409_CONFLICT,
    ConsistencyViolationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def api_error(
    *,
    code: str,
    message: str,
    details: Any | None = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "code": code,
            "message": message,
            "details": details,
        },
    )


def from_domain_error(exc: DomainValidationError | ConsistencyViolationError) -> HTTPException:
    status_code = next(
        (code for kind, code in STATUS_BY_ERROR.items() if isinstance(exc, kind)),
        status.HTTP_400_BAD_REQUEST,
    )
    return api_error(code=exc.code, message=exc.message, details=exc.details or None, status_code=status_code)


@contextmanager
def domain_errors() -> Iterator[None]:
    try:
        yield
    except (DomainValidationError, ConsistencyViolationError) as exc:
        raise from_domain_error(exc) from exc

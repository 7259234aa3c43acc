from typing import NoReturn

from fastapi import HTTPException, status

from src.core.orders import (
    ApprovalStateConflictError,
    OrderBlockedError,
    OrderIdempotencyConflictError,
    OrderNotFoundError,
    OrderValidationError,
)

HTTP_422_UNPROCESSABLE = getattr(
    status,
    "HTTP_422_UNPROCESSABLE_CONTENT",
    status.HTTP_422_UNPROCESSABLE_ENTITY,
)


def raise_order_http_exception(exc: Exception) -> NoReturn:
    if isinstance(exc, OrderNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, (OrderIdempotencyConflictError, ApprovalStateConflictError)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if isinstance(exc, OrderBlockedError):
        raise HTTPException(
            status_code=HTTP_422_UNPROCESSABLE,
            detail={
                "code": str(exc),
                "outcome": exc.report.outcome,
                "checks": [check.model_dump(mode="json") for check in exc.report.checks],
            },
        ) from exc
    if isinstance(exc, OrderValidationError):
        raise HTTPException(status_code=HTTP_422_UNPROCESSABLE, detail=str(exc)) from exc
    raise exc

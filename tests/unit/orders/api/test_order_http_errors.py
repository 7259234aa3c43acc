import pytest
from fastapi import HTTPException

from src.api.routers.order_http_errors import HTTP_422_UNPROCESSABLE, raise_order_http_exception
from src.core.models import CheckResult, PreTradeCheckReport
from src.core.orders import (
    ApprovalStateConflictError,
    OrderBlockedError,
    OrderIdempotencyConflictError,
    OrderNotFoundError,
    OrderValidationError,
)


@pytest.mark.parametrize(
    ("exc", "expected_status"),
    [
        (OrderNotFoundError("missing"), 404),
        (OrderIdempotencyConflictError("idem"), 409),
        (ApprovalStateConflictError("state"), 409),
        (OrderValidationError("validation"), HTTP_422_UNPROCESSABLE),
    ],
)
def test_raise_order_http_exception_maps_domain_errors(exc: Exception, expected_status: int):
    with pytest.raises(HTTPException) as caught:
        raise_order_http_exception(exc)
    assert caught.value.status_code == expected_status
    assert caught.value.detail == str(exc)


def test_blocked_order_detail_carries_checks():
    report = PreTradeCheckReport(
        checks=[CheckResult(name="Restricted Security", severity="hard", message="blocked")],
        outcome="hard",
    )
    with pytest.raises(HTTPException) as caught:
        raise_order_http_exception(OrderBlockedError("ORDER_BLOCKED", report))

    assert caught.value.status_code == HTTP_422_UNPROCESSABLE
    assert caught.value.detail == {
        "code": "ORDER_BLOCKED",
        "outcome": "hard",
        "checks": [{"name": "Restricted Security", "severity": "hard", "message": "blocked"}],
    }


def test_raise_order_http_exception_reraises_unknown_error():
    with pytest.raises(RuntimeError, match="boom"):
        raise_order_http_exception(RuntimeError("boom"))

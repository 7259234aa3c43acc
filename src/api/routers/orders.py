from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, Path, Query, status

from src.api.routers.order_http_errors import raise_order_http_exception
from src.api.routers.orders_config import get_order_desk_service
from src.core.models import OrderContext, PreTradeCheckReport, Side
from src.core.orders import (
    Order,
    OrderDeskError,
    OrderDeskService,
    OrderListResponse,
    OrderPreviewResponse,
    OrderSubmitRequest,
    OrderSubmitResponse,
    OrderTicketRequest,
)
from src.core.orders.models import OrderStatus

router = APIRouter(tags=["Order Entry"])


@router.post(
    "/orders/preview",
    response_model=OrderPreviewResponse,
    status_code=status.HTTP_200_OK,
    summary="Preview Order Ticket",
    description=(
        "Derives the order summary from the ticket inputs and runs pre-trade compliance "
        "checks against the current reference data. Nothing is persisted."
    ),
)
def preview_order(
    payload: OrderTicketRequest,
    service: Annotated[OrderDeskService, Depends(get_order_desk_service)] = None,
) -> OrderPreviewResponse:
    try:
        return service.preview(payload)
    except OrderDeskError as exc:
        raise_order_http_exception(exc)


@router.post(
    "/orders/checks",
    response_model=PreTradeCheckReport,
    status_code=status.HTTP_200_OK,
    summary="Run Pre-Trade Checks",
    description="Evaluates the compliance rules for a raw order context.",
)
def run_checks(
    payload: OrderContext,
    service: Annotated[OrderDeskService, Depends(get_order_desk_service)] = None,
) -> PreTradeCheckReport:
    return service.check(payload)


@router.post(
    "/orders",
    response_model=OrderSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Order",
    description=(
        "Submits a complete ticket. Orders needing approval go to the approval queue, "
        "clean orders go to the order book, blocked orders are rejected with the failing checks."
    ),
)
def submit_order(
    payload: OrderSubmitRequest,
    idempotency_key: Annotated[
        Optional[str],
        Header(
            alias="Idempotency-Key",
            description="Optional idempotency key for submission deduplication.",
            examples=["order-submit-idem-001"],
        ),
    ] = None,
    service: Annotated[OrderDeskService, Depends(get_order_desk_service)] = None,
) -> OrderSubmitResponse:
    try:
        return service.submit(payload=payload, idempotency_key=idempotency_key)
    except OrderDeskError as exc:
        raise_order_http_exception(exc)


@router.get(
    "/orders",
    response_model=OrderListResponse,
    status_code=status.HTTP_200_OK,
    summary="List Order Book",
    description="Lists order book records, newest first, with per-status counts.",
)
def list_orders(
    order_status: Annotated[
        Optional[OrderStatus],
        Query(alias="status", description="Order status filter.", examples=["Working"]),
    ] = None,
    side: Annotated[
        Optional[Side], Query(description="Order side filter.", examples=["Buy"])
    ] = None,
    service: Annotated[OrderDeskService, Depends(get_order_desk_service)] = None,
) -> OrderListResponse:
    return service.list_orders(status=order_status, side=side)


@router.post(
    "/orders/refresh",
    response_model=OrderListResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh Order Book",
    description="Regenerates the demo order book.",
)
def refresh_orders(
    service: Annotated[OrderDeskService, Depends(get_order_desk_service)] = None,
) -> OrderListResponse:
    return service.refresh_order_book()


@router.get(
    "/orders/{order_id}",
    response_model=Order,
    status_code=status.HTTP_200_OK,
    summary="Get Order",
)
def get_order(
    order_id: Annotated[str, Path(description="Order book identifier.", examples=["ORD-001"])],
    service: Annotated[OrderDeskService, Depends(get_order_desk_service)] = None,
) -> Order:
    try:
        return service.get_order(order_id=order_id)
    except OrderDeskError as exc:
        raise_order_http_exception(exc)

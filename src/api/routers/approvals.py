from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from src.api.routers.order_http_errors import raise_order_http_exception
from src.api.routers.orders_config import get_order_desk_service
from src.core.orders import (
    ApprovalDecisionRequest,
    ApprovalListResponse,
    ApprovalOrder,
    OrderDeskError,
    OrderDeskService,
)
from src.core.orders.models import ApprovalStatus

router = APIRouter(tags=["Order Approvals"])

ApprovalId = Annotated[
    str, Path(description="Approval queue identifier.", examples=["APR-001"])
]


@router.get(
    "/approvals",
    response_model=ApprovalListResponse,
    status_code=status.HTTP_200_OK,
    summary="List Approval Queue",
    description=(
        "Lists orders held for supervisory approval with per-status counts, "
        "the pending count and the high-urgency pending count."
    ),
)
def list_approvals(
    approval_status: Annotated[
        Optional[ApprovalStatus],
        Query(alias="status", description="Approval status filter.", examples=["Approved"]),
    ] = None,
    service: Annotated[OrderDeskService, Depends(get_order_desk_service)] = None,
) -> ApprovalListResponse:
    return service.list_approvals(status=approval_status)


@router.get(
    "/approvals/{order_id}",
    response_model=ApprovalOrder,
    status_code=status.HTTP_200_OK,
    summary="Get Approval Order",
)
def get_approval(
    order_id: ApprovalId,
    service: Annotated[OrderDeskService, Depends(get_order_desk_service)] = None,
) -> ApprovalOrder:
    try:
        return service.get_approval(order_id=order_id)
    except OrderDeskError as exc:
        raise_order_http_exception(exc)


@router.post(
    "/approvals/{order_id}/approve",
    response_model=ApprovalOrder,
    status_code=status.HTTP_200_OK,
    summary="Approve Order",
    description="Approves a pending order. A blank comment defaults to `Approved.`.",
)
def approve_order(
    order_id: ApprovalId,
    payload: ApprovalDecisionRequest,
    service: Annotated[OrderDeskService, Depends(get_order_desk_service)] = None,
) -> ApprovalOrder:
    try:
        return service.approve(order_id=order_id, payload=payload)
    except OrderDeskError as exc:
        raise_order_http_exception(exc)


@router.post(
    "/approvals/{order_id}/reject",
    response_model=ApprovalOrder,
    status_code=status.HTTP_200_OK,
    summary="Reject Order",
    description="Rejects a pending order. A non-blank comment is required.",
)
def reject_order(
    order_id: ApprovalId,
    payload: ApprovalDecisionRequest,
    service: Annotated[OrderDeskService, Depends(get_order_desk_service)] = None,
) -> ApprovalOrder:
    try:
        return service.reject(order_id=order_id, payload=payload)
    except OrderDeskError as exc:
        raise_order_http_exception(exc)

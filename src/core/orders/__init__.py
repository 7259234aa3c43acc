from src.core.orders.models import (
    ApprovalDecisionRequest,
    ApprovalListResponse,
    ApprovalOrder,
    Order,
    OrderListResponse,
    OrderPreviewResponse,
    OrderSubmitRequest,
    OrderSubmitResponse,
    OrderTicketRequest,
    TradeWarning,
)
from src.core.orders.repository import OrderRepository
from src.core.orders.service import (
    ApprovalStateConflictError,
    OrderBlockedError,
    OrderDeskError,
    OrderDeskService,
    OrderIdempotencyConflictError,
    OrderNotFoundError,
    OrderValidationError,
)

__all__ = [
    "ApprovalDecisionRequest",
    "ApprovalListResponse",
    "ApprovalOrder",
    "ApprovalStateConflictError",
    "Order",
    "OrderBlockedError",
    "OrderDeskError",
    "OrderDeskService",
    "OrderIdempotencyConflictError",
    "OrderListResponse",
    "OrderNotFoundError",
    "OrderPreviewResponse",
    "OrderRepository",
    "OrderSubmitRequest",
    "OrderSubmitResponse",
    "OrderTicketRequest",
    "OrderValidationError",
    "TradeWarning",
]

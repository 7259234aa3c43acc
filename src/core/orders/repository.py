from typing import Callable, Optional, Protocol

from src.core.models import Side
from src.core.orders.models import (
    ApprovalOrder,
    ApprovalStatus,
    Order,
    OrderIdempotencyRecord,
    OrderStatus,
)


class OrderRepository(Protocol):
    def next_order_id(self) -> str: ...

    def create_order(self, order: Order) -> None: ...

    def get_order(self, *, order_id: str) -> Optional[Order]: ...

    def list_orders(
        self, *, status: Optional[OrderStatus], side: Optional[Side]
    ) -> list[Order]: ...

    def replace_orders(self, orders: list[Order]) -> None: ...

    def transform_orders(self, transform: Callable[[Order], Order]) -> int: ...

    def next_approval_id(self) -> str: ...

    def create_approval(self, approval: ApprovalOrder) -> None: ...

    def decide_approval(
        self, approval: ApprovalOrder, *, expected_status: ApprovalStatus
    ) -> bool: ...

    def get_approval(self, *, order_id: str) -> Optional[ApprovalOrder]: ...

    def list_approvals(self, *, status: Optional[ApprovalStatus]) -> list[ApprovalOrder]: ...

    def replace_approvals(self, approvals: list[ApprovalOrder]) -> None: ...

    def get_idempotency(self, *, idempotency_key: str) -> Optional[OrderIdempotencyRecord]: ...

    def save_idempotency(self, record: OrderIdempotencyRecord) -> None: ...

from copy import deepcopy
from threading import Lock
from typing import Callable, Optional

from src.core.models import Side
from src.core.orders.models import (
    ApprovalOrder,
    ApprovalStatus,
    Order,
    OrderIdempotencyRecord,
    OrderStatus,
)
from src.core.orders.repository import OrderRepository


def _next_sequence(existing_ids) -> int:
    sequence = -1
    for record_id in existing_ids:
        _, _, suffix = record_id.partition("-")
        if suffix.isdigit():
            sequence = max(sequence, int(suffix))
    return sequence + 1


class InMemoryOrderRepository(OrderRepository):
    def __init__(self) -> None:
        self._lock = Lock()
        self._orders: dict[str, Order] = {}
        self._approvals: dict[str, ApprovalOrder] = {}
        self._idempotency: dict[str, OrderIdempotencyRecord] = {}
        self._order_sequence = 0
        self._approval_sequence = 0

    def next_order_id(self) -> str:
        with self._lock:
            order_id = f"ORD-{self._order_sequence:03d}"
            self._order_sequence += 1
            return order_id

    def create_order(self, order: Order) -> None:
        with self._lock:
            self._orders[order.id] = deepcopy(order)
            self._order_sequence = max(self._order_sequence, _next_sequence([order.id]))

    def get_order(self, *, order_id: str) -> Optional[Order]:
        with self._lock:
            order = self._orders.get(order_id)
            return deepcopy(order) if order is not None else None

    def list_orders(
        self, *, status: Optional[OrderStatus], side: Optional[Side]
    ) -> list[Order]:
        with self._lock:
            rows = list(self._orders.values())

        rows = sorted(rows, key=lambda x: (x.timestamp, x.id), reverse=True)

        if status is not None:
            rows = [row for row in rows if row.status == status]
        if side is not None:
            rows = [row for row in rows if row.side == side]
        return [deepcopy(row) for row in rows]

    def replace_orders(self, orders: list[Order]) -> None:
        with self._lock:
            self._orders = {order.id: deepcopy(order) for order in orders}
            self._order_sequence = max(self._order_sequence, _next_sequence(self._orders))

    def transform_orders(self, transform: Callable[[Order], Order]) -> int:
        changed = 0
        with self._lock:
            for order_id, order in list(self._orders.items()):
                updated = transform(deepcopy(order))
                if updated != order:
                    self._orders[order_id] = deepcopy(updated)
                    changed += 1
        return changed

    def next_approval_id(self) -> str:
        with self._lock:
            approval_id = f"APR-{self._approval_sequence:03d}"
            self._approval_sequence += 1
            return approval_id

    def create_approval(self, approval: ApprovalOrder) -> None:
        with self._lock:
            self._approvals[approval.id] = deepcopy(approval)
            self._approval_sequence = max(
                self._approval_sequence, _next_sequence([approval.id])
            )

    def decide_approval(
        self, approval: ApprovalOrder, *, expected_status: ApprovalStatus
    ) -> bool:
        with self._lock:
            current = self._approvals.get(approval.id)
            if current is None or current.approval_status != expected_status:
                return False
            self._approvals[approval.id] = deepcopy(approval)
            return True

    def get_approval(self, *, order_id: str) -> Optional[ApprovalOrder]:
        with self._lock:
            approval = self._approvals.get(order_id)
            return deepcopy(approval) if approval is not None else None

    def list_approvals(self, *, status: Optional[ApprovalStatus]) -> list[ApprovalOrder]:
        with self._lock:
            rows = list(self._approvals.values())

        rows = sorted(rows, key=lambda x: (x.timestamp, x.id), reverse=True)
        # Review order: pending first, then high urgency, newest first within each group.
        rows.sort(key=lambda x: (x.approval_status != "Pending Approval", x.urgency != "high"))

        if status is not None:
            rows = [row for row in rows if row.approval_status == status]
        return [deepcopy(row) for row in rows]

    def replace_approvals(self, approvals: list[ApprovalOrder]) -> None:
        with self._lock:
            self._approvals = {approval.id: deepcopy(approval) for approval in approvals}
            self._approval_sequence = max(
                self._approval_sequence, _next_sequence(self._approvals)
            )

    def get_idempotency(self, *, idempotency_key: str) -> Optional[OrderIdempotencyRecord]:
        with self._lock:
            record = self._idempotency.get(idempotency_key)
            return deepcopy(record) if record is not None else None

    def save_idempotency(self, record: OrderIdempotencyRecord) -> None:
        with self._lock:
            self._idempotency[record.idempotency_key] = deepcopy(record)

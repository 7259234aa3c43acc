import hashlib
import json
import logging
import random
import threading
from collections import Counter
from datetime import datetime, timezone
from typing import Optional

from src.core.compliance import run_pre_trade_checks
from src.core.models import OrderContext, PreTradeCheckReport, Side
from src.core.orders.composition import OrderTicket
from src.core.orders.models import (
    APPROVAL_STATUSES,
    ORDER_STATUSES,
    ApprovalDecisionRequest,
    ApprovalListResponse,
    ApprovalOrder,
    ApprovalStatus,
    Order,
    OrderIdempotencyRecord,
    OrderListResponse,
    OrderPreviewResponse,
    OrderStatus,
    OrderSubmitRequest,
    OrderSubmitResponse,
    OrderTicketRequest,
)
from src.core.orders.presentation import summarize_checks
from src.core.orders.repository import OrderRepository
from src.core.orders.simulation import generate_demo_approvals, generate_demo_orders
from src.core.orders.warnings import derive_urgency, derive_warnings
from src.core.reference_data import ReferenceDataProvider
from src.core.securities import SecurityCatalog

logger = logging.getLogger(__name__)


class OrderDeskError(Exception):
    pass


class OrderNotFoundError(OrderDeskError):
    pass


class OrderValidationError(OrderDeskError):
    pass


class OrderBlockedError(OrderDeskError):
    def __init__(self, message: str, report: PreTradeCheckReport) -> None:
        super().__init__(message)
        self.report = report


class ApprovalStateConflictError(OrderDeskError):
    pass


class OrderIdempotencyConflictError(OrderDeskError):
    pass


class OrderDeskService:
    def __init__(
        self,
        *,
        repository: OrderRepository,
        reference_data: ReferenceDataProvider,
        catalog: Optional[SecurityCatalog] = None,
        idempotency_replay_enabled: bool = True,
        demo_seed: Optional[int] = None,
    ) -> None:
        self._repository = repository
        self._reference_data = reference_data
        self._catalog = catalog or SecurityCatalog()
        self._idempotency_replay_enabled = idempotency_replay_enabled
        self._demo_seed = demo_seed
        self._submit_lock = threading.Lock()

    @property
    def catalog(self) -> SecurityCatalog:
        return self._catalog

    def check(self, context: OrderContext) -> PreTradeCheckReport:
        return run_pre_trade_checks(context, self._reference_data.snapshot())

    def build_ticket(self, request: OrderTicketRequest) -> OrderTicket:
        security = None
        if request.symbol:
            security = self._catalog.get(request.symbol)
            if security is None:
                raise OrderValidationError(f"UNKNOWN_SECURITY: {request.symbol}")
        return OrderTicket(
            security=security,
            side=request.side,
            order_type=request.order_type,
            tif=request.tif,
            order_by=request.order_by,
            input_value=request.input_value,
            limit_price=request.limit_price,
            investment_account=request.investment_account,
            cash_account=request.cash_account,
        )

    def preview(self, request: OrderTicketRequest) -> OrderPreviewResponse:
        ticket = self.build_ticket(request)
        report = self.check(ticket.to_order_context())
        can_submit = ticket.is_complete and report.outcome != "hard"
        return OrderPreviewResponse(
            security=ticket.security,
            summary=ticket.summary() if ticket.is_complete else None,
            checks=report.checks,
            outcome=report.outcome,
            panel=summarize_checks(report.checks, report.outcome),
            can_submit=can_submit,
            requires_approval=can_submit and report.outcome == "soft",
            submit_label=ticket.submit_label(),
        )

    def submit(
        self,
        *,
        payload: OrderSubmitRequest,
        idempotency_key: Optional[str] = None,
    ) -> OrderSubmitResponse:
        if not idempotency_key or not self._idempotency_replay_enabled:
            return self._submit(payload)

        request_hash = _hash_request(payload)
        # Lookup, booking and record save form one step per desk.
        with self._submit_lock:
            existing = self._repository.get_idempotency(idempotency_key=idempotency_key)
            if existing is not None:
                if existing.request_hash != request_hash:
                    raise OrderIdempotencyConflictError(
                        "IDEMPOTENCY_KEY_CONFLICT: request hash mismatch"
                    )
                return OrderSubmitResponse.model_validate(existing.response_json)

            response = self._submit(payload)
            self._repository.save_idempotency(
                OrderIdempotencyRecord(
                    idempotency_key=idempotency_key,
                    request_hash=request_hash,
                    response_json=response.model_dump(mode="json"),
                    created_at=_utc_now(),
                )
            )
            return response

    def _submit(self, payload: OrderSubmitRequest) -> OrderSubmitResponse:
        ticket = self.build_ticket(payload)
        if not ticket.is_complete or ticket.security is None:
            raise OrderValidationError("ORDER_INCOMPLETE: security, quantity and accounts required")

        report = self.check(ticket.to_order_context())
        if report.outcome == "hard":
            logger.warning(
                "Order blocked by pre-trade checks. symbol=%s failing=%s",
                ticket.security.symbol,
                [check.name for check in report.checks if check.severity == "hard"],
            )
            raise OrderBlockedError("ORDER_BLOCKED_BY_PRE_TRADE_CHECKS", report)

        now = _utc_now()
        if report.outcome == "soft":
            return self._queue_for_approval(
                ticket=ticket, submitted_by=payload.submitted_by, report=report, now=now
            )
        return self._book_order(ticket=ticket, report=report, now=now)

    def _book_order(
        self, *, ticket: OrderTicket, report: PreTradeCheckReport, now: datetime
    ) -> OrderSubmitResponse:
        security = ticket.security
        order = Order(
            id=self._repository.next_order_id(),
            timestamp=now,
            symbol=security.symbol,
            name=security.name,
            security_type=security.type,
            side=ticket.side,
            order_type=ticket.order_type,
            tif=ticket.tif,
            qty=ticket.summary().units,
            price=security.price,
            limit_price=ticket.parsed_limit_price,
            status="Pending",
            account=ticket.investment_account,
            fees=ticket.summary().fees,
        )
        self._repository.create_order(order)
        logger.info(
            "Order booked. OrderID=%s symbol=%s side=%s outcome=%s",
            order.id,
            order.symbol,
            order.side,
            report.outcome,
        )
        return OrderSubmitResponse(
            destination="ORDER_BOOK",
            outcome=report.outcome,
            checks=report.checks,
            order=order,
        )

    def _queue_for_approval(
        self,
        *,
        ticket: OrderTicket,
        submitted_by: str,
        report: PreTradeCheckReport,
        now: datetime,
    ) -> OrderSubmitResponse:
        security = ticket.security
        summary = ticket.summary()
        limit_price = ticket.parsed_limit_price
        warnings = derive_warnings(
            symbol=security.symbol,
            price=security.price,
            qty=summary.units,
            limit_price=limit_price,
        )
        approval = ApprovalOrder(
            id=self._repository.next_approval_id(),
            timestamp=now,
            symbol=security.symbol,
            name=security.name,
            security_type=security.type,
            side=ticket.side,
            order_type=ticket.order_type,
            tif=ticket.tif,
            qty=summary.units,
            price=security.price,
            limit_price=limit_price,
            fees=summary.fees,
            account=ticket.investment_account,
            submitted_by=submitted_by,
            approval_status="Pending Approval",
            warnings=warnings,
            urgency=derive_urgency(warnings),
        )
        self._repository.create_approval(approval)
        logger.info(
            "Order queued for approval. ApprovalID=%s symbol=%s urgency=%s",
            approval.id,
            approval.symbol,
            approval.urgency,
        )
        return OrderSubmitResponse(
            destination="APPROVAL_QUEUE",
            outcome=report.outcome,
            checks=report.checks,
            approval=approval,
        )

    def list_orders(
        self, *, status: Optional[OrderStatus] = None, side: Optional[Side] = None
    ) -> OrderListResponse:
        all_orders = self._repository.list_orders(status=None, side=None)
        counts = Counter(order.status for order in all_orders)
        items = [
            order
            for order in all_orders
            if (status is None or order.status == status) and (side is None or order.side == side)
        ]
        return OrderListResponse(
            items=items, counts={key: counts.get(key, 0) for key in ORDER_STATUSES}
        )

    def get_order(self, *, order_id: str) -> Order:
        order = self._repository.get_order(order_id=order_id)
        if order is None:
            raise OrderNotFoundError("ORDER_NOT_FOUND")
        return order

    def refresh_order_book(self) -> OrderListResponse:
        orders = generate_demo_orders(
            random.Random(self._demo_seed), now=_utc_now(), catalog=self._catalog
        )
        self._repository.replace_orders(orders)
        return self.list_orders()

    def seed_demo_data(self) -> None:
        rng = random.Random(self._demo_seed)
        now = _utc_now()
        self._repository.replace_orders(generate_demo_orders(rng, now=now, catalog=self._catalog))
        self._repository.replace_approvals(
            generate_demo_approvals(rng, now=now, catalog=self._catalog)
        )

    def list_approvals(self, *, status: Optional[ApprovalStatus] = None) -> ApprovalListResponse:
        all_approvals = self._repository.list_approvals(status=None)
        counts = Counter(approval.approval_status for approval in all_approvals)
        pending = [a for a in all_approvals if a.approval_status == "Pending Approval"]
        return ApprovalListResponse(
            items=[a for a in all_approvals if status is None or a.approval_status == status],
            counts={key: counts.get(key, 0) for key in APPROVAL_STATUSES},
            pending_count=len(pending),
            high_urgency_count=sum(1 for a in pending if a.urgency == "high"),
        )

    def get_approval(self, *, order_id: str) -> ApprovalOrder:
        approval = self._repository.get_approval(order_id=order_id)
        if approval is None:
            raise OrderNotFoundError("APPROVAL_NOT_FOUND")
        return approval

    def approve(self, *, order_id: str, payload: ApprovalDecisionRequest) -> ApprovalOrder:
        return self._decide(
            order_id=order_id,
            to_status="Approved",
            actor_id=payload.actor_id,
            comment=payload.comment.strip() or "Approved.",
        )

    def reject(self, *, order_id: str, payload: ApprovalDecisionRequest) -> ApprovalOrder:
        comment = payload.comment.strip()
        if not comment:
            raise OrderValidationError("REJECTION_COMMENT_REQUIRED")
        return self._decide(
            order_id=order_id,
            to_status="Rejected",
            actor_id=payload.actor_id,
            comment=comment,
        )

    def _decide(
        self,
        *,
        order_id: str,
        to_status: ApprovalStatus,
        actor_id: str,
        comment: str,
    ) -> ApprovalOrder:
        approval = self.get_approval(order_id=order_id)
        if approval.approval_status != "Pending Approval":
            raise ApprovalStateConflictError(
                f"APPROVAL_STATE_CONFLICT: order is {approval.approval_status}"
            )
        approval.approval_status = to_status
        approval.approval_comment = comment
        approval.decided_by = actor_id
        approval.decided_at = _utc_now()
        if not self._repository.decide_approval(approval, expected_status="Pending Approval"):
            raise ApprovalStateConflictError("APPROVAL_STATE_CONFLICT: order was already decided")
        logger.info(
            "Approval decision recorded. ApprovalID=%s status=%s actor=%s",
            approval.id,
            to_status,
            actor_id,
        )
        return approval


def _hash_request(payload: OrderSubmitRequest) -> str:
    canonical = json.dumps(payload.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))
    return f"sha256:{hashlib.sha256(canonical.encode('utf-8')).hexdigest()}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)

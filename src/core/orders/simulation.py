"""
FILE: src/core/orders/simulation.py
Seedable demo data for the order book and approval queue, plus the periodic
order lifecycle simulation that drives the live order book view.
"""

import asyncio
import logging
import random
from datetime import datetime, timedelta
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import List, Optional

from src.core.models import FEE_RATE, Security
from src.core.orders.models import (
    TERMINAL_ORDER_STATUSES,
    ApprovalOrder,
    ApprovalStatus,
    Order,
    OrderStatus,
)
from src.core.orders.repository import OrderRepository
from src.core.orders.warnings import derive_urgency, derive_warnings
from src.core.securities import SecurityCatalog

logger = logging.getLogger(__name__)

ORDER_BOOK_SYMBOLS = ("AAPL", "MSFT", "GOOGL", "US10Y", "CORP5Y", "VFIAX", "TSLA", "FXAIX")
APPROVAL_SYMBOLS = ("AAPL", "MSFT", "TSLA", "US10Y", "CORP5Y", "VFIAX", "GOOGL", "FXAIX")
SIDES = ("Buy", "Sell")
ORDER_TYPES = ("Market", "Limit", "Stop Loss")
TIFS = ("Day", "GTC", "IOC", "FOK")
ACCOUNTS = ("INV-001 Main", "INV-002 Growth", "INV-003 Retirement")
TRADERS = ("J. Smith", "A. Patel", "M. Chen", "R. Johnson", "S. Williams")
DEMO_ORDER_STATUSES: tuple[OrderStatus, ...] = (
    "Pending",
    "Working",
    "Partially Filled",
    "Filled",
    "Cancelled",
)
DEMO_APPROVAL_STATUSES: tuple[ApprovalStatus, ...] = (
    "Pending Approval",
    "Pending Approval",
    "Pending Approval",
    "Approved",
    "Rejected",
)
DEMO_APPROVAL_COMMENTS = {
    "Approved": "Reviewed and approved.",
    "Rejected": "Order exceeds risk limits for this account.",
}

PENDING_TO_WORKING_PROBABILITY = 0.3
WORKING_FILL_PROBABILITY = 0.25
PARTIAL_FILL_PROBABILITY = 0.3
CANCEL_PROBABILITY = 0.05
WORKING_FILL_FRACTION = Decimal("0.2")
PARTIAL_FILL_FRACTION = Decimal("0.25")


def _cents(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _floor(value: Decimal) -> Decimal:
    return value.to_integral_value(rounding=ROUND_FLOOR)


def _resolve_securities(catalog: SecurityCatalog, symbols) -> List[Security]:
    securities = [catalog.get(symbol) for symbol in symbols]
    return [security for security in securities if security is not None]


def generate_demo_orders(
    rng: random.Random,
    *,
    now: datetime,
    catalog: Optional[SecurityCatalog] = None,
    count: int = 18,
) -> List[Order]:
    securities = _resolve_securities(catalog or SecurityCatalog(), ORDER_BOOK_SYMBOLS)
    orders: List[Order] = []
    for i in range(count):
        security = securities[i % len(securities)]
        side = SIDES[i % 2]
        qty = Decimal(rng.randrange(10, 510))
        status = DEMO_ORDER_STATUSES[i % len(DEMO_ORDER_STATUSES)]
        if status == "Filled":
            filled_qty = qty
        elif status == "Partially Filled":
            filled_qty = _floor(qty * Decimal(str(0.3 + rng.random() * 0.5)))
        else:
            filled_qty = Decimal("0")
        order_type = ORDER_TYPES[i % 3]
        limit_factor = Decimal("0.98") if side == "Buy" else Decimal("1.02")
        orders.append(
            Order(
                id=f"ORD-{i:03d}",
                timestamp=now - timedelta(seconds=rng.random() * 86400 * 2),
                symbol=security.symbol,
                name=security.name,
                security_type=security.type,
                side=side,
                order_type=order_type,
                tif=TIFS[i % 4],
                qty=qty,
                filled_qty=filled_qty,
                price=security.price,
                limit_price=(
                    _cents(security.price * limit_factor) if order_type == "Limit" else None
                ),
                status=status,
                account=ACCOUNTS[i % 3],
                fees=_cents(qty * security.price * FEE_RATE),
            )
        )
    return orders


def generate_demo_approvals(
    rng: random.Random,
    *,
    now: datetime,
    catalog: Optional[SecurityCatalog] = None,
    count: int = 12,
) -> List[ApprovalOrder]:
    securities = _resolve_securities(catalog or SecurityCatalog(), APPROVAL_SYMBOLS)
    approvals: List[ApprovalOrder] = []
    for i in range(count):
        security = securities[i % len(securities)]
        side = SIDES[i % 2]
        qty = Decimal(rng.randrange(50, 850))
        order_type = ORDER_TYPES[i % 3]
        limit_factor = Decimal("0.95") if side == "Buy" else Decimal("1.05")
        limit_price = _cents(security.price * limit_factor) if order_type == "Limit" else None
        approval_status = DEMO_APPROVAL_STATUSES[i % len(DEMO_APPROVAL_STATUSES)]
        warnings = derive_warnings(
            symbol=security.symbol, price=security.price, qty=qty, limit_price=limit_price
        )
        approvals.append(
            ApprovalOrder(
                id=f"APR-{i:03d}",
                timestamp=now - timedelta(seconds=rng.random() * 86400),
                symbol=security.symbol,
                name=security.name,
                security_type=security.type,
                side=side,
                order_type=order_type,
                tif=TIFS[i % 4],
                qty=qty,
                price=security.price,
                limit_price=limit_price,
                fees=_cents(qty * security.price * FEE_RATE),
                account=ACCOUNTS[i % 3],
                submitted_by=TRADERS[i % len(TRADERS)],
                approval_status=approval_status,
                approval_comment=DEMO_APPROVAL_COMMENTS.get(approval_status),
                warnings=warnings,
                urgency=derive_urgency(warnings),
            )
        )
    return approvals


def advance_order(order: Order, draw: float) -> Order:
    """Apply one lifecycle step to an order given a uniform draw in [0, 1)."""
    if order.status in TERMINAL_ORDER_STATUSES:
        return order

    if order.status == "Pending" and draw < PENDING_TO_WORKING_PROBABILITY:
        return order.model_copy(update={"status": "Working"})
    if order.status == "Working" and draw < WORKING_FILL_PROBABILITY:
        return _fill(order, WORKING_FILL_FRACTION)
    if order.status == "Partially Filled" and draw < PARTIAL_FILL_PROBABILITY:
        return _fill(order, PARTIAL_FILL_FRACTION)
    if draw < CANCEL_PROBABILITY:
        return order.model_copy(update={"status": "Cancelled"})
    return order


def _fill(order: Order, fraction: Decimal) -> Order:
    filled_qty = min(order.qty, order.filled_qty + _floor(order.qty * fraction))
    status: OrderStatus = "Filled" if filled_qty >= order.qty else "Partially Filled"
    return order.model_copy(update={"filled_qty": filled_qty, "status": status})


class OrderBookSimulator:
    def __init__(self, *, repository: OrderRepository, rng: Optional[random.Random] = None):
        self._repository = repository
        self._rng = rng or random.Random()

    def tick(self) -> int:
        return self._repository.transform_orders(self._step)

    def _step(self, order: Order) -> Order:
        if order.status in TERMINAL_ORDER_STATUSES:
            return order
        return advance_order(order, self._rng.random())

    async def run(self, *, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                changed = self.tick()
            except Exception:
                logger.exception("Order book simulation tick failed.")
                continue
            if changed:
                logger.debug("Order book simulation tick. changed=%s", changed)

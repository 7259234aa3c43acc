from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from src.core.common.formatting import round_half_up
from src.core.compliance import parse_decimal
from src.core.models import (
    FEE_RATE,
    OrderBy,
    OrderContext,
    OrderType,
    Security,
    Side,
    TimeInForce,
)
from src.core.orders.models import OrderSummary


class OrderTicket(BaseModel):
    """In-progress order fields plus the values derived from them."""

    security: Optional[Security] = None
    side: Side = "Buy"
    order_type: OrderType = "Market"
    tif: TimeInForce = "Day"
    order_by: OrderBy = "Amount"
    input_value: str = Field(default="", description="Raw amount or units input.")
    limit_price: str = Field(default="", description="Raw limit or stop price input.")
    investment_account: str = ""
    cash_account: str = ""

    @property
    def input_number(self) -> Decimal:
        return parse_decimal(self.input_value) or Decimal("0")

    @property
    def effective_price(self) -> Decimal:
        if self.order_type == "Limit":
            limit = parse_decimal(self.limit_price)
            if limit is not None:
                return limit
        if self.security is not None:
            return self.security.price
        return Decimal("0")

    @property
    def units(self) -> Decimal:
        if self.order_by == "Units":
            return self.input_number
        price = self.effective_price
        if price == 0:
            return Decimal("0")
        return self.input_number / price

    @property
    def order_amount(self) -> Decimal:
        if self.order_by == "Amount":
            return self.input_number
        return self.input_number * self.effective_price

    @property
    def fees(self) -> Decimal:
        return self.order_amount * FEE_RATE

    @property
    def total(self) -> Decimal:
        if self.side == "Buy":
            return self.order_amount + self.fees
        return self.order_amount - self.fees

    @property
    def is_complete(self) -> bool:
        return (
            self.security is not None
            and self.input_number > 0
            and self.order_amount > 0
            and bool(self.investment_account)
            and bool(self.cash_account)
        )

    @property
    def parsed_limit_price(self) -> Optional[Decimal]:
        if self.order_type != "Limit":
            return None
        return parse_decimal(self.limit_price)

    def to_order_context(self) -> OrderContext:
        return OrderContext(
            security=self.security,
            side=self.side,
            order_amount=self.order_amount,
            limit_price=self.limit_price,
            order_type=self.order_type,
            investment_account=self.investment_account,
            cash_account=self.cash_account,
        )

    def summary(self) -> OrderSummary:
        return OrderSummary(
            price=round_half_up(self.effective_price, 2),
            units=round_half_up(self.units, 4),
            order_amount=round_half_up(self.order_amount, 2),
            fees=round_half_up(self.fees, 2),
            total=round_half_up(self.total, 2),
        )

    def submit_label(self) -> str:
        if not self.is_complete or self.security is None:
            return "Complete Order Details"
        return f"{self.side} {self.security.symbol}"

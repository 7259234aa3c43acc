from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from src.core.models import (
    CheckResult,
    OrderBy,
    OrderType,
    OverallOutcome,
    Security,
    SecurityType,
    Side,
    TimeInForce,
)

OrderStatus = Literal["Pending", "Working", "Partially Filled", "Filled", "Cancelled", "Rejected"]
ApprovalStatus = Literal["Pending Approval", "Approved", "Rejected"]
WarningType = Literal["large_order", "price_deviation", "unusual_security"]
Urgency = Literal["normal", "high"]
SubmissionDestination = Literal["ORDER_BOOK", "APPROVAL_QUEUE"]

ORDER_STATUSES: tuple[OrderStatus, ...] = (
    "Pending",
    "Working",
    "Partially Filled",
    "Filled",
    "Cancelled",
    "Rejected",
)
TERMINAL_ORDER_STATUSES = {"Filled", "Cancelled", "Rejected"}
APPROVAL_STATUSES: tuple[ApprovalStatus, ...] = ("Pending Approval", "Approved", "Rejected")


class TradeWarning(BaseModel):
    type: WarningType = Field(description="Warning category.", examples=["large_order"])
    message: str = Field(description="Rendered warning text for the reviewer.")


class Order(BaseModel):
    id: str = Field(description="Order book identifier.", examples=["ORD-018"])
    timestamp: datetime = Field(description="Order creation time (UTC).")
    symbol: str = Field(examples=["AAPL"])
    name: str = Field(examples=["Apple Inc."])
    security_type: SecurityType = Field(examples=["Equity"])
    side: Side = Field(examples=["Buy"])
    order_type: OrderType = Field(examples=["Limit"])
    tif: TimeInForce = Field(examples=["Day"])
    qty: Decimal = Field(description="Ordered units.", examples=["100"])
    filled_qty: Decimal = Field(default=Decimal("0"), description="Units filled so far.")
    price: Decimal = Field(description="Market price at order time.", examples=["189.84"])
    limit_price: Optional[Decimal] = Field(default=None, examples=["186.04"])
    status: OrderStatus = Field(default="Pending", examples=["Working"])
    account: str = Field(description="Investment account.", examples=["INV-001 Main"])
    fees: Decimal = Field(description="Commission at the desk fee rate.", examples=["18.98"])


class ApprovalOrder(BaseModel):
    id: str = Field(description="Approval queue identifier.", examples=["APR-012"])
    timestamp: datetime = Field(description="Submission time (UTC).")
    symbol: str = Field(examples=["CORP5Y"])
    name: str = Field(examples=["IG Corporate 5Y"])
    security_type: SecurityType = Field(examples=["Bond"])
    side: Side = Field(examples=["Buy"])
    order_type: OrderType = Field(examples=["Market"])
    tif: TimeInForce = Field(examples=["GTC"])
    qty: Decimal = Field(examples=["1200"])
    filled_qty: Decimal = Field(default=Decimal("0"))
    price: Decimal = Field(examples=["101.50"])
    limit_price: Optional[Decimal] = Field(default=None)
    fees: Decimal = Field(examples=["121.80"])
    account: str = Field(examples=["INV-003 Retirement"])
    submitted_by: str = Field(description="Trader that submitted the order.", examples=["M. Chen"])
    approval_status: ApprovalStatus = Field(default="Pending Approval")
    approval_comment: Optional[str] = Field(default=None, examples=["Reviewed and approved."])
    decided_by: Optional[str] = Field(default=None, description="Supervisor that decided.")
    decided_at: Optional[datetime] = Field(default=None)
    warnings: List[TradeWarning] = Field(default_factory=list)
    urgency: Urgency = Field(default="normal")


class OrderTicketRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "symbol": "AAPL",
                "side": "Buy",
                "order_type": "Limit",
                "tif": "Day",
                "order_by": "Amount",
                "input_value": "25000",
                "limit_price": "185.00",
                "investment_account": "INV-001 Main",
                "cash_account": "CASH-001 USD",
            }
        }
    }

    symbol: Optional[str] = Field(default=None, description="Selected security symbol.")
    side: Side = Field(default="Buy")
    order_type: OrderType = Field(default="Market")
    tif: TimeInForce = Field(default="Day")
    order_by: OrderBy = Field(default="Amount")
    input_value: str = Field(default="", description="Raw amount or units input.")
    limit_price: str = Field(default="", description="Raw limit or stop price input.")
    investment_account: str = Field(default="")
    cash_account: str = Field(default="")


class OrderSubmitRequest(OrderTicketRequest):
    submitted_by: str = Field(description="Trader submitting the order.", examples=["J. Smith"])


class OrderSummary(BaseModel):
    price: Decimal = Field(description="Effective price (2dp).")
    units: Decimal = Field(description="Units (4dp).")
    order_amount: Decimal = Field(description="Order amount (2dp).")
    fees: Decimal = Field(description="Fees at 0.1% (2dp).")
    total: Decimal = Field(description="Amount plus fees for Buy, minus fees for Sell (2dp).")


class CheckPanel(BaseModel):
    outcome: OverallOutcome
    label: str = Field(examples=["Approval Required"])
    headline: str = Field(examples=["Pre-Trade Check: 1 issue found"])
    issues: List[CheckResult] = Field(default_factory=list)
    passed_count: int = Field(default=0)
    expanded_by_default: bool = Field(default=False)


class OrderPreviewResponse(BaseModel):
    security: Optional[Security] = None
    summary: Optional[OrderSummary] = Field(
        default=None, description="Present only when the ticket is complete."
    )
    checks: List[CheckResult] = Field(default_factory=list)
    outcome: OverallOutcome = "pass"
    panel: Optional[CheckPanel] = None
    can_submit: bool = False
    requires_approval: bool = False
    submit_label: str = Field(examples=["Buy AAPL", "Complete Order Details"])


class OrderSubmitResponse(BaseModel):
    destination: SubmissionDestination
    outcome: OverallOutcome
    checks: List[CheckResult] = Field(default_factory=list)
    order: Optional[Order] = None
    approval: Optional[ApprovalOrder] = None


class OrderListResponse(BaseModel):
    items: List[Order] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=dict, description="Order count by status.")


class ApprovalListResponse(BaseModel):
    items: List[ApprovalOrder] = Field(default_factory=list)
    counts: Dict[str, int] = Field(
        default_factory=dict, description="Approval count by approval status."
    )
    pending_count: int = 0
    high_urgency_count: int = Field(
        default=0, description="Pending approvals with high urgency."
    )


class ApprovalDecisionRequest(BaseModel):
    actor_id: str = Field(description="Supervisor recording the decision.", examples=["sup_01"])
    comment: str = Field(default="", description="Decision comment; required for rejections.")


class OrderIdempotencyRecord(BaseModel):
    idempotency_key: str
    request_hash: str
    response_json: Dict[str, Any]
    created_at: datetime

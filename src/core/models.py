"""
FILE: src/core/models.py
"""

from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

SecurityType = Literal["Equity", "Bond", "Fund"]
Side = Literal["Buy", "Sell"]
OrderType = Literal["Market", "Limit", "Stop Loss"]
TimeInForce = Literal["Day", "GTC", "IOC", "FOK"]
OrderBy = Literal["Amount", "Units"]

Severity = Literal["hard", "soft", "warning", "pass"]
OverallOutcome = Severity

CheckName = Literal[
    "Restricted Security",
    "Client Residency",
    "Cash Sufficiency",
    "Concentration Limit",
    "Order Size",
    "Price Deviation",
]

CONCENTRATION_LIMIT_PCT = Decimal("20")
ORDER_SIZE_APPROVAL_THRESHOLD = Decimal("100000")
PRICE_DEVIATION_WARNING_PCT = Decimal("3")
FEE_RATE = Decimal("0.001")
# Free-text numbers at or beyond this magnitude are treated as unparsable.
MAX_INPUT_MAGNITUDE = Decimal("1e40")
MAX_ORDER_AMOUNT = Decimal("1e100")


class Security(BaseModel):
    symbol: str = Field(description="Ticker or desk symbol.", examples=["AAPL"])
    name: str = Field(description="Display name of the security.", examples=["Apple Inc."])
    type: SecurityType = Field(description="Security class.", examples=["Equity"])
    price: Decimal = Field(description="Current market price.", examples=["189.84"])
    ytm: Optional[Decimal] = Field(
        default=None, description="Yield to maturity in percent (bonds).", examples=["4.28"]
    )
    coupon: Optional[Decimal] = Field(
        default=None, description="Coupon rate in percent (bonds).", examples=["4.0"]
    )
    maturity: Optional[str] = Field(
        default=None, description="Maturity date (bonds).", examples=["2034-11-15"]
    )
    nav: Optional[Decimal] = Field(
        default=None, description="Net asset value (funds).", examples=["431.20"]
    )


class OrderContext(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "security": {
                    "symbol": "AAPL",
                    "name": "Apple Inc.",
                    "type": "Equity",
                    "price": "189.84",
                },
                "side": "Buy",
                "order_amount": "25000",
                "limit_price": "",
                "order_type": "Market",
                "investment_account": "INV-001 Main",
                "cash_account": "CASH-001 USD",
            }
        }
    }

    security: Optional[Security] = Field(
        default=None, description="Selected security; absent while the user is still searching."
    )
    side: Side = Field(default="Buy", description="Trade side.")
    order_amount: Decimal = Field(
        default=Decimal("0"),
        gt=-MAX_ORDER_AMOUNT,
        lt=MAX_ORDER_AMOUNT,
        description="Currency value of the trade as computed upstream.",
    )
    limit_price: str = Field(
        default="",
        description="Raw limit price input; may be empty or non-numeric.",
        examples=["104.00"],
    )
    order_type: str = Field(default="Market", description="Order type label.", examples=["Limit"])
    investment_account: str = Field(
        default="", description="Investment account identifier; empty when not chosen."
    )
    cash_account: str = Field(
        default="", description="Cash account identifier; empty when not chosen."
    )


class ReferenceData(BaseModel):
    portfolio_value: Dict[str, Decimal] = Field(
        default_factory=dict, description="Net portfolio value by investment account."
    )
    cash_balance: Dict[str, Decimal] = Field(
        default_factory=dict, description="Available cash by cash account."
    )
    holdings: Dict[str, Dict[str, Decimal]] = Field(
        default_factory=dict,
        description="Current position value by investment account, then symbol.",
    )
    restricted_symbols: List[str] = Field(
        default_factory=list, description="Symbols on the restricted securities list."
    )
    residency_restricted: Dict[str, str] = Field(
        default_factory=dict, description="Residency restriction reason by symbol."
    )

    def portfolio_value_for(self, investment_account: str) -> Decimal:
        return self.portfolio_value.get(investment_account, Decimal("0"))

    def cash_balance_for(self, cash_account: str) -> Decimal:
        return self.cash_balance.get(cash_account, Decimal("0"))

    def holding_value_for(self, investment_account: str, symbol: str) -> Decimal:
        return self.holdings.get(investment_account, {}).get(symbol, Decimal("0"))

    def is_restricted(self, symbol: str) -> bool:
        return symbol in self.restricted_symbols

    def residency_restriction_for(self, symbol: str) -> Optional[str]:
        return self.residency_restricted.get(symbol)


class CheckResult(BaseModel):
    name: CheckName = Field(description="Check identifier and display label.")
    severity: Severity = Field(description="Check severity tier.")
    message: str = Field(description="Rendered explanation with concrete values.")


class PreTradeCheckReport(BaseModel):
    checks: List[CheckResult] = Field(
        default_factory=list, description="Check results in evaluation order."
    )
    outcome: OverallOutcome = Field(
        default="pass", description="Highest severity present; pass when no checks ran."
    )

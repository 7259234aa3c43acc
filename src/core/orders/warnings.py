from decimal import Decimal
from typing import List, Optional

from src.core.common.formatting import format_currency, format_percent
from src.core.models import ORDER_SIZE_APPROVAL_THRESHOLD, PRICE_DEVIATION_WARNING_PCT
from src.core.orders.models import TradeWarning, Urgency

# Fixed-income instruments routed to additional review.
UNUSUAL_SECURITIES = frozenset({"CORP5Y", "US10Y"})
HIGH_URGENCY_WARNING_COUNT = 2


def derive_warnings(
    *,
    symbol: str,
    price: Decimal,
    qty: Decimal,
    limit_price: Optional[Decimal],
) -> List[TradeWarning]:
    warnings: List[TradeWarning] = []
    total_value = qty * price

    if total_value > ORDER_SIZE_APPROVAL_THRESHOLD:
        warnings.append(
            TradeWarning(
                type="large_order",
                message=(
                    f"Order value {format_currency(total_value)} exceeds "
                    f"${ORDER_SIZE_APPROVAL_THRESHOLD:,} threshold."
                ),
            )
        )

    if limit_price and price > 0:
        deviation = abs(limit_price - price) / price * Decimal("100")
        if deviation > PRICE_DEVIATION_WARNING_PCT:
            warnings.append(
                TradeWarning(
                    type="price_deviation",
                    message=f"Limit price deviates {format_percent(deviation)} from market price.",
                )
            )

    if symbol in UNUSUAL_SECURITIES:
        warnings.append(
            TradeWarning(
                type="unusual_security",
                message=f"{symbol} is a fixed-income instrument requiring additional review.",
            )
        )
    return warnings


def derive_urgency(warnings: List[TradeWarning]) -> Urgency:
    return "high" if len(warnings) >= HIGH_URGENCY_WARNING_COUNT else "normal"

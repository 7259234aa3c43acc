"""
FILE: src/core/compliance.py
Pre-trade compliance check engine.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

from src.core.common.formatting import format_currency, format_percent, format_price
from src.core.models import (
    CONCENTRATION_LIMIT_PCT,
    MAX_INPUT_MAGNITUDE,
    ORDER_SIZE_APPROVAL_THRESHOLD,
    PRICE_DEVIATION_WARNING_PCT,
    CheckResult,
    OrderContext,
    OverallOutcome,
    PreTradeCheckReport,
    ReferenceData,
)

_SEVERITY_PRIORITY = {"hard": 3, "soft": 2, "warning": 1, "pass": 0}


def parse_decimal(raw: str) -> Optional[Decimal]:
    """Parse free-text numeric input.

    Returns None for empty, malformed, non-finite or out-of-range input.
    """
    if not raw or not raw.strip():
        return None
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    if value and not (1 / MAX_INPUT_MAGNITUDE <= value.copy_abs() < MAX_INPUT_MAGNITUDE):
        return None
    return value


class RuleEngine:
    """
    Evaluates the pre-trade rules against one order context.
    HARD blocks submission, SOFT routes it for approval, WARNING is informational.
    Restricted Security and Client Residency emit nothing when they do not fire;
    the remaining rules emit a PASS entry whenever their inputs are present.
    """

    @staticmethod
    def evaluate(context: OrderContext, reference: ReferenceData) -> List[CheckResult]:
        results: List[CheckResult] = []
        security = context.security
        amount = context.order_amount

        if security is None or amount <= 0:
            return results

        # 1. Restricted Security (Hard)
        if reference.is_restricted(security.symbol):
            results.append(
                CheckResult(
                    name="Restricted Security",
                    severity="hard",
                    message=(
                        f"{security.symbol} is on the restricted securities list "
                        "and cannot be traded."
                    ),
                )
            )

        # 2. Client Residency (Hard)
        residency_reason = reference.residency_restriction_for(security.symbol)
        if residency_reason:
            results.append(
                CheckResult(name="Client Residency", severity="hard", message=residency_reason)
            )

        # 3. Cash Sufficiency (Hard)
        if context.side == "Buy" and context.cash_account:
            available = reference.cash_balance_for(context.cash_account)
            if amount > available:
                results.append(
                    CheckResult(
                        name="Cash Sufficiency",
                        severity="hard",
                        message=(
                            f"Insufficient funds. Required: {format_currency(amount)}, "
                            f"available: {format_currency(available)}."
                        ),
                    )
                )
            else:
                results.append(
                    CheckResult(
                        name="Cash Sufficiency",
                        severity="pass",
                        message=f"Sufficient funds available ({format_currency(available)}).",
                    )
                )

        # 4. Concentration Limit (Hard)
        if context.investment_account:
            portfolio_value = reference.portfolio_value_for(context.investment_account)
            current_holding = reference.holding_value_for(
                context.investment_account, security.symbol
            )
            if context.side == "Buy":
                new_exposure = current_holding + amount
            else:
                new_exposure = current_holding - amount
            concentration = (
                new_exposure / portfolio_value * Decimal("100")
                if portfolio_value > 0
                else Decimal("0")
            )
            limit_label = f"{CONCENTRATION_LIMIT_PCT}%"
            if concentration > CONCENTRATION_LIMIT_PCT:
                results.append(
                    CheckResult(
                        name="Concentration Limit",
                        severity="hard",
                        message=(
                            f"Post-trade concentration of {format_percent(concentration)} "
                            f"exceeds {limit_label} limit for {security.symbol}."
                        ),
                    )
                )
            else:
                results.append(
                    CheckResult(
                        name="Concentration Limit",
                        severity="pass",
                        message=(
                            f"Post-trade concentration: {format_percent(concentration)} "
                            f"(limit: {limit_label})."
                        ),
                    )
                )

        # 5. Order Size (Soft)
        threshold_label = f"${ORDER_SIZE_APPROVAL_THRESHOLD:,}"
        if amount > ORDER_SIZE_APPROVAL_THRESHOLD:
            results.append(
                CheckResult(
                    name="Order Size",
                    severity="soft",
                    message=(
                        f"Order value {format_currency(amount)} exceeds {threshold_label} "
                        "threshold; requires approval."
                    ),
                )
            )
        else:
            results.append(
                CheckResult(
                    name="Order Size",
                    severity="pass",
                    message=(
                        f"Order value {format_currency(amount)} within {threshold_label} "
                        "threshold."
                    ),
                )
            )

        # 6. Price Deviation (Warning)
        if context.order_type == "Limit" and context.limit_price:
            deviation = _limit_price_deviation(context.limit_price, security.price)
            if deviation is not None:
                deviation_label = f"{PRICE_DEVIATION_WARNING_PCT}%"
                if deviation > PRICE_DEVIATION_WARNING_PCT:
                    results.append(
                        CheckResult(
                            name="Price Deviation",
                            severity="warning",
                            message=(
                                f"Limit price deviates {format_percent(deviation)} from "
                                f"market price (${format_price(security.price)})."
                            ),
                        )
                    )
                else:
                    results.append(
                        CheckResult(
                            name="Price Deviation",
                            severity="pass",
                            message=f"Limit price within {deviation_label} of market.",
                        )
                    )

        return results


def _limit_price_deviation(limit_price: str, market_price: Decimal) -> Optional[Decimal]:
    limit = parse_decimal(limit_price)
    if limit is None or market_price <= 0:
        return None
    return abs(limit - market_price) / market_price * Decimal("100")


def reduce_outcome(results: Iterable[CheckResult]) -> OverallOutcome:
    outcome: OverallOutcome = "pass"
    for result in results:
        if _SEVERITY_PRIORITY[result.severity] > _SEVERITY_PRIORITY[outcome]:
            outcome = result.severity
    return outcome


def run_pre_trade_checks(context: OrderContext, reference: ReferenceData) -> PreTradeCheckReport:
    checks = RuleEngine.evaluate(context, reference)
    return PreTradeCheckReport(checks=checks, outcome=reduce_outcome(checks))

"""
FILE: tests/unit/shared/compliance/test_compliance_rule_engine.py
Unit tests for the pre-trade check engine.
"""

from decimal import Decimal

import pytest

from src.core.compliance import RuleEngine, parse_decimal, reduce_outcome, run_pre_trade_checks
from src.core.models import CheckResult, OrderContext, ReferenceData, Security
from src.core.reference_data import StaticReferenceDataProvider
from src.core.securities import SecurityCatalog


@pytest.fixture
def reference() -> ReferenceData:
    return StaticReferenceDataProvider.demo().snapshot()


def _security(symbol: str = "AAPL", price: str = "189.84") -> Security:
    return Security(symbol=symbol, name=f"{symbol} Test", type="Equity", price=Decimal(price))


def _context(**overrides) -> OrderContext:
    fields = {
        "security": _security(),
        "side": "Buy",
        "order_amount": Decimal("1000"),
        "limit_price": "",
        "order_type": "Market",
        "investment_account": "",
        "cash_account": "",
    }
    fields.update(overrides)
    return OrderContext(**fields)


def _by_name(results, name):
    return [r for r in results if r.name == name]


@pytest.mark.parametrize(
    "overrides",
    [
        {"security": None},
        {"order_amount": Decimal("0")},
        {"order_amount": Decimal("-5")},
        {"security": None, "investment_account": "INV-001 Main", "cash_account": "CASH-001 USD"},
    ],
)
def test_guard_clause_returns_no_results(reference, overrides):
    assert RuleEngine.evaluate(_context(**overrides), reference) == []


def test_vacuous_outcome_is_pass(reference):
    report = run_pre_trade_checks(_context(security=None), reference)
    assert report.checks == []
    assert report.outcome == "pass"


def test_outcome_is_max_severity():
    def _result(severity):
        return CheckResult(name="Order Size", severity=severity, message="m")

    assert reduce_outcome([_result("pass"), _result("warning")]) == "warning"
    assert reduce_outcome([_result("warning"), _result("soft"), _result("pass")]) == "soft"
    assert reduce_outcome([_result("soft"), _result("hard"), _result("warning")]) == "hard"
    assert reduce_outcome([_result("pass")]) == "pass"
    assert reduce_outcome([]) == "pass"


def test_engine_is_deterministic(reference):
    context = _context(
        order_amount=Decimal("150000"),
        order_type="Limit",
        limit_price="200",
        investment_account="INV-001 Main",
        cash_account="CASH-001 USD",
    )
    first = run_pre_trade_checks(context, reference)
    second = run_pre_trade_checks(context, reference)
    assert first.model_dump_json() == second.model_dump_json()


@pytest.mark.parametrize("side", ["Buy", "Sell"])
@pytest.mark.parametrize("amount", ["1", "250000"])
@pytest.mark.parametrize("accounts", [("", ""), ("INV-002 Growth", "CASH-002 EUR")])
def test_restricted_security_is_independent_of_other_fields(reference, side, amount, accounts):
    context = _context(
        security=_security("MUNI7Y", "98.80"),
        side=side,
        order_amount=Decimal(amount),
        investment_account=accounts[0],
        cash_account=accounts[1],
    )
    restricted = _by_name(RuleEngine.evaluate(context, reference), "Restricted Security")
    assert len(restricted) == 1
    assert restricted[0].severity == "hard"
    assert restricted[0].message == (
        "MUNI7Y is on the restricted securities list and cannot be traded."
    )


def test_unrestricted_security_emits_no_restricted_or_residency_entry(reference):
    results = RuleEngine.evaluate(_context(), reference)
    assert _by_name(results, "Restricted Security") == []
    assert _by_name(results, "Client Residency") == []


def test_residency_restriction_uses_reason_verbatim(reference):
    results = RuleEngine.evaluate(_context(security=_security("SWPPX", "73.88")), reference)
    residency = _by_name(results, "Client Residency")
    assert len(residency) == 1
    assert residency[0].severity == "hard"
    assert residency[0].message == "Security not available for non-US resident clients"


def test_cash_sufficiency_hard_when_amount_exceeds_balance(reference):
    context = _context(order_amount=Decimal("80000"), cash_account="CASH-001 USD")
    [cash] = _by_name(RuleEngine.evaluate(context, reference), "Cash Sufficiency")
    assert cash.severity == "hard"
    assert "80,000.00" in cash.message
    assert "75,000.00" in cash.message
    assert cash.message == "Insufficient funds. Required: $80,000.00, available: $75,000.00."


def test_cash_sufficiency_pass_within_balance(reference):
    context = _context(order_amount=Decimal("50000"), cash_account="CASH-001 USD")
    [cash] = _by_name(RuleEngine.evaluate(context, reference), "Cash Sufficiency")
    assert cash.severity == "pass"
    assert cash.message == "Sufficient funds available ($75,000.00)."


def test_cash_sufficiency_boundary_equal_amount_passes(reference):
    context = _context(order_amount=Decimal("75000"), cash_account="CASH-001 USD")
    [cash] = _by_name(RuleEngine.evaluate(context, reference), "Cash Sufficiency")
    assert cash.severity == "pass"


def test_cash_sufficiency_unknown_account_has_zero_balance(reference):
    context = _context(order_amount=Decimal("10"), cash_account="CASH-999 JPY")
    [cash] = _by_name(RuleEngine.evaluate(context, reference), "Cash Sufficiency")
    assert cash.severity == "hard"
    assert "available: $0.00" in cash.message


@pytest.mark.parametrize(
    ("side", "cash_account"),
    [("Sell", "CASH-001 USD"), ("Buy", "")],
)
def test_cash_sufficiency_absent_without_prerequisites(reference, side, cash_account):
    context = _context(side=side, order_amount=Decimal("80000"), cash_account=cash_account)
    assert _by_name(RuleEngine.evaluate(context, reference), "Cash Sufficiency") == []


def test_concentration_breach_is_hard(reference):
    context = _context(order_amount=Decimal("25000"), investment_account="INV-001 Main")
    [concentration] = _by_name(RuleEngine.evaluate(context, reference), "Concentration Limit")
    assert concentration.severity == "hard"
    assert concentration.message == (
        "Post-trade concentration of 21.0% exceeds 20% limit for AAPL."
    )


def test_concentration_within_limit_passes(reference):
    context = _context(order_amount=Decimal("10000"), investment_account="INV-001 Main")
    [concentration] = _by_name(RuleEngine.evaluate(context, reference), "Concentration Limit")
    assert concentration.severity == "pass"
    assert concentration.message == "Post-trade concentration: 18.0% (limit: 20%)."


def test_concentration_sell_reduces_exposure(reference):
    context = _context(
        side="Sell", order_amount=Decimal("30000"), investment_account="INV-001 Main"
    )
    [concentration] = _by_name(RuleEngine.evaluate(context, reference), "Concentration Limit")
    assert concentration.severity == "pass"
    assert "10.0%" in concentration.message


def test_concentration_unknown_account_reports_zero(reference):
    context = _context(order_amount=Decimal("99999"), investment_account="INV-404 Unknown")
    [concentration] = _by_name(RuleEngine.evaluate(context, reference), "Concentration Limit")
    assert concentration.severity == "pass"
    assert "0.0%" in concentration.message


def test_concentration_absent_without_investment_account(reference):
    context = _context(order_amount=Decimal("25000"))
    assert _by_name(RuleEngine.evaluate(context, reference), "Concentration Limit") == []


@pytest.mark.parametrize(
    ("amount", "severity"),
    [("100001", "soft"), ("100000", "pass"), ("99999.99", "pass")],
)
def test_order_size_threshold_is_strict(reference, amount, severity):
    results = RuleEngine.evaluate(_context(order_amount=Decimal(amount)), reference)
    [size] = _by_name(results, "Order Size")
    assert size.severity == severity


def test_order_size_messages(reference):
    [soft] = _by_name(
        RuleEngine.evaluate(_context(order_amount=Decimal("150000")), reference), "Order Size"
    )
    assert soft.message == "Order value $150,000.00 exceeds $100,000 threshold; requires approval."
    [ok] = _by_name(
        RuleEngine.evaluate(_context(order_amount=Decimal("5000")), reference), "Order Size"
    )
    assert ok.message == "Order value $5,000.00 within $100,000 threshold."


def test_price_deviation_warning_above_three_percent(reference):
    context = _context(
        security=_security(price="100"), order_type="Limit", limit_price="104"
    )
    [deviation] = _by_name(RuleEngine.evaluate(context, reference), "Price Deviation")
    assert deviation.severity == "warning"
    assert deviation.message == "Limit price deviates 4.0% from market price ($100.00)."


def test_price_deviation_pass_within_three_percent(reference):
    context = _context(
        security=_security(price="100"), order_type="Limit", limit_price="102.5"
    )
    [deviation] = _by_name(RuleEngine.evaluate(context, reference), "Price Deviation")
    assert deviation.severity == "pass"
    assert deviation.message == "Limit price within 3% of market."


@pytest.mark.parametrize("order_type", ["Market", "Stop Loss"])
def test_price_deviation_absent_for_non_limit_orders(reference, order_type):
    context = _context(
        security=_security(price="100"), order_type=order_type, limit_price="150"
    )
    assert _by_name(RuleEngine.evaluate(context, reference), "Price Deviation") == []


@pytest.mark.parametrize("limit_price", ["", "abc", "NaN", "Infinity"])
def test_price_deviation_absent_for_unusable_limit_price(reference, limit_price):
    context = _context(
        security=_security(price="100"), order_type="Limit", limit_price=limit_price
    )
    assert _by_name(RuleEngine.evaluate(context, reference), "Price Deviation") == []


def test_price_deviation_absent_for_non_positive_market_price(reference):
    context = _context(security=_security(price="0"), order_type="Limit", limit_price="10")
    assert _by_name(RuleEngine.evaluate(context, reference), "Price Deviation") == []


def test_rules_run_in_fixed_order(reference):
    context = _context(
        security=_security("MUNI7Y", "98.80"),
        order_amount=Decimal("150000"),
        order_type="Limit",
        limit_price="120",
        investment_account="INV-001 Main",
        cash_account="CASH-001 USD",
    )
    names = [r.name for r in RuleEngine.evaluate(context, reference)]
    assert names == [
        "Restricted Security",
        "Cash Sufficiency",
        "Concentration Limit",
        "Order Size",
        "Price Deviation",
    ]


def test_restricted_symbol_end_to_end(reference):
    muni = SecurityCatalog().get("MUNI7Y")
    context = OrderContext(
        security=muni,
        side="Buy",
        order_amount=Decimal("5000"),
        order_type="Market",
        investment_account="INV-001 Main",
        cash_account="CASH-001 USD",
    )
    report = run_pre_trade_checks(context, reference)

    hard = [r for r in report.checks if r.severity == "hard"]
    assert [r.name for r in hard] == ["Restricted Security"]
    assert report.outcome == "hard"
    assert {r.name for r in report.checks if r.severity == "pass"} == {
        "Cash Sufficiency",
        "Concentration Limit",
        "Order Size",
    }


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("104", Decimal("104")),
        (" 102.5 ", Decimal("102.5")),
        ("", None),
        ("   ", None),
        ("1e", None),
        ("NaN", None),
        ("-Infinity", None),
        ("0", Decimal("0")),
        ("1e30", Decimal("1e30")),
        ("1e40", None),
        ("-1e41", None),
        ("1e-41", None),
    ],
)
def test_parse_decimal(raw, expected):
    assert parse_decimal(raw) == expected


def test_huge_limit_price_warns_without_raising(reference):
    context = _context(
        security=_security(price="100"), order_type="Limit", limit_price="1e30"
    )
    [deviation] = _by_name(RuleEngine.evaluate(context, reference), "Price Deviation")

    assert deviation.severity == "warning"
    assert deviation.message.endswith("from market price ($100.00).")


def test_huge_order_amount_is_reported_in_full(reference):
    context = _context(
        order_amount=Decimal("1e27"),
        investment_account="INV-001 Main",
        cash_account="CASH-001 USD",
    )
    report = run_pre_trade_checks(context, reference)
    [size] = _by_name(report.checks, "Order Size")

    assert size.severity == "soft"
    assert "$1" + ",000" * 9 + ".00" in size.message
    assert report.outcome == "hard"
    assert [r.severity for r in _by_name(report.checks, "Cash Sufficiency")] == ["hard"]
    assert [r.severity for r in _by_name(report.checks, "Concentration Limit")] == ["hard"]


def test_order_amount_outside_supported_range_is_rejected():
    with pytest.raises(ValueError):
        _context(order_amount=Decimal("1e100"))

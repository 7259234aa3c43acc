from decimal import Decimal

from src.core.orders.composition import OrderTicket
from src.core.securities import SecurityCatalog

CATALOG = SecurityCatalog()


def _ticket(**overrides) -> OrderTicket:
    fields = {
        "security": CATALOG.get("AAPL"),
        "side": "Buy",
        "order_type": "Market",
        "order_by": "Amount",
        "input_value": "25000",
        "investment_account": "INV-001 Main",
        "cash_account": "CASH-001 USD",
    }
    fields.update(overrides)
    return OrderTicket(**fields)


def test_amount_ticket_derives_units_fees_and_total():
    summary = _ticket().summary()

    assert summary.price == Decimal("189.84")
    assert summary.units == Decimal("131.6898")
    assert summary.order_amount == Decimal("25000.00")
    assert summary.fees == Decimal("25.00")
    assert summary.total == Decimal("25025.00")


def test_sell_total_subtracts_fees():
    assert _ticket(side="Sell").summary().total == Decimal("24975.00")


def test_units_ticket_uses_limit_price_for_limit_orders():
    ticket = _ticket(order_type="Limit", order_by="Units", input_value="100", limit_price="185.00")

    assert ticket.effective_price == Decimal("185.00")
    assert ticket.order_amount == Decimal("18500.00")
    assert ticket.summary().fees == Decimal("18.50")
    assert ticket.parsed_limit_price == Decimal("185.00")


def test_unparsable_limit_price_falls_back_to_market_price():
    ticket = _ticket(order_type="Limit", limit_price="abc")

    assert ticket.effective_price == Decimal("189.84")
    assert ticket.parsed_limit_price is None


def test_stop_loss_price_is_not_used_for_pricing():
    ticket = _ticket(order_type="Stop Loss", limit_price="150")

    assert ticket.effective_price == Decimal("189.84")
    assert ticket.parsed_limit_price is None


def test_ticket_without_security_prices_at_zero():
    ticket = _ticket(security=None)

    assert ticket.effective_price == Decimal("0")
    assert ticket.units == Decimal("0")
    assert ticket.is_complete is False


def test_completeness_requires_input_and_both_accounts():
    assert _ticket().is_complete is True
    assert _ticket(input_value="").is_complete is False
    assert _ticket(input_value="0").is_complete is False
    assert _ticket(input_value="-10").is_complete is False
    assert _ticket(input_value="ten").is_complete is False
    assert _ticket(investment_account="").is_complete is False
    assert _ticket(cash_account="").is_complete is False


def test_submit_label():
    assert _ticket().submit_label() == "Buy AAPL"
    assert _ticket(side="Sell").submit_label() == "Sell AAPL"
    assert _ticket(cash_account="").submit_label() == "Complete Order Details"


def test_order_context_carries_raw_limit_and_amount():
    context = _ticket(order_type="Limit", limit_price="185.00").to_order_context()

    assert context.security.symbol == "AAPL"
    assert context.order_amount == Decimal("25000")
    assert context.limit_price == "185.00"
    assert context.order_type == "Limit"
    assert context.cash_account == "CASH-001 USD"

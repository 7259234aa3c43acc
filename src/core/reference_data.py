from copy import deepcopy
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Optional, Protocol

from src.core.models import ReferenceData

DEMO_PORTFOLIO_VALUE: Dict[str, Decimal] = {
    "INV-001 Main": Decimal("500000"),
    "INV-002 Growth": Decimal("250000"),
    "INV-003 Retirement": Decimal("800000"),
}

DEMO_CASH_BALANCE: Dict[str, Decimal] = {
    "CASH-001 USD": Decimal("75000"),
    "CASH-002 EUR": Decimal("42000"),
}

DEMO_HOLDINGS: Dict[str, Dict[str, Decimal]] = {
    "INV-001 Main": {"AAPL": Decimal("80000"), "MSFT": Decimal("120000")},
    "INV-002 Growth": {"TSLA": Decimal("60000"), "GOOGL": Decimal("40000")},
    "INV-003 Retirement": {"US10Y": Decimal("200000"), "VFIAX": Decimal("300000")},
}

DEMO_RESTRICTED_SYMBOLS = ("MUNI7Y",)

DEMO_RESIDENCY_RESTRICTED: Dict[str, str] = {
    "SWPPX": "Security not available for non-US resident clients",
}


class ReferenceDataProvider(Protocol):
    def portfolio_value(self, investment_account: str) -> Decimal: ...

    def cash_balance(self, cash_account: str) -> Decimal: ...

    def holding_value(self, investment_account: str, symbol: str) -> Decimal: ...

    def is_restricted(self, symbol: str) -> bool: ...

    def residency_restriction(self, symbol: str) -> Optional[str]: ...

    def snapshot(self) -> ReferenceData: ...


class StaticReferenceDataProvider(ReferenceDataProvider):
    """Table-backed provider. Missing keys mean no position or no restriction."""

    def __init__(
        self,
        *,
        portfolio_value: Optional[Mapping[str, Decimal]] = None,
        cash_balance: Optional[Mapping[str, Decimal]] = None,
        holdings: Optional[Mapping[str, Mapping[str, Decimal]]] = None,
        restricted_symbols: Optional[Iterable[str]] = None,
        residency_restricted: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._data = ReferenceData(
            portfolio_value=dict(portfolio_value or {}),
            cash_balance=dict(cash_balance or {}),
            holdings={account: dict(rows) for account, rows in (holdings or {}).items()},
            restricted_symbols=sorted(set(restricted_symbols or ())),
            residency_restricted=dict(residency_restricted or {}),
        )

    @classmethod
    def demo(cls) -> "StaticReferenceDataProvider":
        return cls(
            portfolio_value=DEMO_PORTFOLIO_VALUE,
            cash_balance=DEMO_CASH_BALANCE,
            holdings=DEMO_HOLDINGS,
            restricted_symbols=DEMO_RESTRICTED_SYMBOLS,
            residency_restricted=DEMO_RESIDENCY_RESTRICTED,
        )

    def portfolio_value(self, investment_account: str) -> Decimal:
        return self._data.portfolio_value_for(investment_account)

    def cash_balance(self, cash_account: str) -> Decimal:
        return self._data.cash_balance_for(cash_account)

    def holding_value(self, investment_account: str, symbol: str) -> Decimal:
        return self._data.holding_value_for(investment_account, symbol)

    def is_restricted(self, symbol: str) -> bool:
        return self._data.is_restricted(symbol)

    def residency_restriction(self, symbol: str) -> Optional[str]:
        return self._data.residency_restriction_for(symbol)

    def snapshot(self) -> ReferenceData:
        return deepcopy(self._data)

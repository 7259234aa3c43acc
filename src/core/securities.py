from decimal import Decimal
from typing import List, Literal, Optional, Union

from src.core.models import Security, SecurityType

SecurityTypeFilter = Union[SecurityType, Literal["All"]]

DEMO_SECURITIES: List[Security] = [
    Security(symbol="AAPL", name="Apple Inc.", type="Equity", price=Decimal("189.84")),
    Security(symbol="MSFT", name="Microsoft Corp.", type="Equity", price=Decimal("378.91")),
    Security(symbol="GOOGL", name="Alphabet Inc.", type="Equity", price=Decimal("141.80")),
    Security(symbol="TSLA", name="Tesla Inc.", type="Equity", price=Decimal("248.42")),
    Security(
        symbol="US10Y",
        name="US Treasury 10Y",
        type="Bond",
        price=Decimal("97.25"),
        ytm=Decimal("4.28"),
        maturity="2034-11-15",
        coupon=Decimal("4.0"),
    ),
    Security(
        symbol="CORP5Y",
        name="IG Corporate 5Y",
        type="Bond",
        price=Decimal("101.50"),
        ytm=Decimal("5.12"),
        maturity="2029-06-01",
        coupon=Decimal("5.25"),
    ),
    Security(
        symbol="MUNI7Y",
        name="Municipal Bond 7Y",
        type="Bond",
        price=Decimal("98.80"),
        ytm=Decimal("3.45"),
        maturity="2031-03-15",
        coupon=Decimal("3.5"),
    ),
    Security(
        symbol="VFIAX",
        name="Vanguard 500 Index",
        type="Fund",
        price=Decimal("431.20"),
        nav=Decimal("431.20"),
    ),
    Security(
        symbol="FXAIX",
        name="Fidelity 500 Index",
        type="Fund",
        price=Decimal("182.55"),
        nav=Decimal("182.55"),
    ),
    Security(
        symbol="SWPPX",
        name="Schwab S&P 500",
        type="Fund",
        price=Decimal("73.88"),
        nav=Decimal("73.88"),
    ),
]


class SecurityCatalog:
    def __init__(self, securities: Optional[List[Security]] = None) -> None:
        self._securities = list(securities if securities is not None else DEMO_SECURITIES)

    def search(self, query: str = "", type_filter: SecurityTypeFilter = "All") -> List[Security]:
        needle = query.strip().lower()
        return [
            security
            for security in self._securities
            if (type_filter == "All" or security.type == type_filter)
            and (
                not needle
                or needle in security.symbol.lower()
                or needle in security.name.lower()
            )
        ]

    def get(self, symbol: str) -> Optional[Security]:
        return next((s for s in self._securities if s.symbol == symbol), None)

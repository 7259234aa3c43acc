"""
FILE: tests/conftest.py
Shared fixtures for order desk tests.
"""

from pathlib import Path

import pytest

from src.api.routers.orders_config import reset_order_desk_service_for_tests


def _has_marker(item: pytest.Item, name: str) -> bool:
    return item.get_closest_marker(name) is not None


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if _has_marker(item, "unit") or _has_marker(item, "integration"):
            continue

        path = Path(str(item.fspath)).as_posix().lower()
        if "/tests/integration/" in path or "_integration.py" in path:
            item.add_marker(pytest.mark.integration)
            continue
        item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def order_desk_test_harness(monkeypatch: pytest.MonkeyPatch):
    """Deterministic demo data and no background simulation while tests run."""

    monkeypatch.setenv("ORDER_BOOK_SIMULATION_ENABLED", "false")
    monkeypatch.setenv("ORDER_DESK_DEMO_SEED", "1234")
    reset_order_desk_service_for_tests()
    yield
    reset_order_desk_service_for_tests()

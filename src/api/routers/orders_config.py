import logging
import os
import random
from typing import Optional

from src.core.orders import OrderDeskService
from src.core.orders.repository import OrderRepository
from src.core.orders.simulation import OrderBookSimulator
from src.core.reference_data import StaticReferenceDataProvider
from src.core.securities import SecurityCatalog
from src.infrastructure.orders import InMemoryOrderRepository

logger = logging.getLogger(__name__)

DEFAULT_SIMULATION_INTERVAL_SECONDS = 2.0

_REPOSITORY: OrderRepository = InMemoryOrderRepository()
_SERVICE: Optional[OrderDeskService] = None


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise RuntimeError(f"{name}_INVALID") from exc


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError as exc:
        raise RuntimeError(f"{name}_INVALID") from exc
    if parsed <= 0:
        raise RuntimeError(f"{name}_INVALID")
    return parsed


def demo_seed() -> Optional[int]:
    return _env_int("ORDER_DESK_DEMO_SEED")


def simulation_enabled() -> bool:
    return _env_flag("ORDER_BOOK_SIMULATION_ENABLED", True)


def simulation_interval_seconds() -> float:
    return _env_float(
        "ORDER_BOOK_SIMULATION_INTERVAL_SECONDS", DEFAULT_SIMULATION_INTERVAL_SECONDS
    )


def get_order_repository() -> OrderRepository:
    return _REPOSITORY


def get_order_desk_service() -> OrderDeskService:
    global _SERVICE
    if _SERVICE is None:
        service = OrderDeskService(
            repository=_REPOSITORY,
            reference_data=StaticReferenceDataProvider.demo(),
            catalog=SecurityCatalog(),
            idempotency_replay_enabled=_env_flag("ORDER_IDEMPOTENCY_REPLAY_ENABLED", True),
            demo_seed=demo_seed(),
        )
        if _env_flag("ORDER_DESK_SEED_DEMO_DATA", True):
            service.seed_demo_data()
            logger.info("Order desk demo data seeded.")
        _SERVICE = service
    return _SERVICE


def build_order_book_simulator() -> OrderBookSimulator:
    seed = demo_seed()
    return OrderBookSimulator(
        repository=get_order_repository(),
        rng=random.Random(seed) if seed is not None else None,
    )


def reset_order_desk_service_for_tests() -> None:
    global _REPOSITORY
    global _SERVICE
    _REPOSITORY = InMemoryOrderRepository()
    _SERVICE = None

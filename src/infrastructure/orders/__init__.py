from src.infrastructure.orders.in_memory import InMemoryOrderRepository

__all__ = ["InMemoryOrderRepository"]

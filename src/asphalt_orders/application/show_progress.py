"""Application service: Delivery Progress use case (query)."""

from __future__ import annotations

from asphalt_orders.domain.exceptions import EntityNotFoundError
from asphalt_orders.domain.repository.order_repository import OrderRepository
from asphalt_orders.domain.service.delivery_progress import (
    DeliveryProgress,
    delivery_progress,
)
from asphalt_orders.domain.service.load_validator import LoadSummary, summarize_loads


class ShowProgressHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int) -> tuple[DeliveryProgress, LoadSummary]:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return delivery_progress(order), summarize_loads(order)

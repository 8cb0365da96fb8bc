"""Application service: Show / List Orders use cases (queries)."""

from __future__ import annotations

from asphalt_orders.application.dto import OrderDTO
from asphalt_orders.domain.exceptions import EntityNotFoundError, ValidationError
from asphalt_orders.domain.model.order import OrderStatus
from asphalt_orders.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return OrderDTO.from_order(order)


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, status: str | None = None) -> list[OrderDTO]:
        try:
            wanted = OrderStatus(status) if status else None
        except ValueError:
            raise ValidationError(f"Unknown order status: '{status}'") from None
        return [OrderDTO.from_order(o) for o in self._order_repo.list_by_status(wanted)]

"""Application service: Advance Order Status use case.

Staff move an order through the pre-delivery stages
(authorized, confirmed, in production, ready).  Delivery and completion
statuses are owned by the load ledger and payment capture.
"""

from __future__ import annotations

import logging

from asphalt_orders.application.order_locks import OrderLocks
from asphalt_orders.domain.exceptions import EntityNotFoundError, ValidationError
from asphalt_orders.domain.model.order import OrderStatus
from asphalt_orders.domain.repository.order_repository import (
    OrderPatch,
    OrderRepository,
)

logger = logging.getLogger(__name__)


class AdvanceStatusHandler:

    def __init__(self, order_repo: OrderRepository, locks: OrderLocks) -> None:
        self._order_repo = order_repo
        self._locks = locks

    def handle(self, order_id: int, new_status: str) -> None:
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown order status: '{new_status}'") from None

        with self._locks.hold(order_id):
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            previous = order.status
            read_version = order.version
            order.advance_to(target)
            self._order_repo.update(
                order.id, OrderPatch(status=order.status), expected_version=read_version
            )

        logger.info(
            "[ORDERS] order #%s moved %s -> %s", order_id, previous.value, target.value
        )

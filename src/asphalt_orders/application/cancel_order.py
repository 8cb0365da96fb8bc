"""Application service: Cancel Order use case.

Marks the order CANCELLED with a version-checked write, then releases the
authorization hold with the payment processor.  A concurrent change to the
order fails the write before the hold is touched.  If the processor cannot
release the hold, the previous status is restored and the error propagates.

Orders that already have deliveries cannot be cancelled; they must be
completed so the delivered tonnage is charged.
"""

from __future__ import annotations

import logging

from asphalt_orders.application.order_locks import OrderLocks
from asphalt_orders.domain.exceptions import EntityNotFoundError, PaymentProcessorError
from asphalt_orders.domain.gateway.payment_processor import PaymentProcessor
from asphalt_orders.domain.repository.order_repository import (
    OrderPatch,
    OrderRepository,
)

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        payment_processor: PaymentProcessor,
        locks: OrderLocks,
    ) -> None:
        self._order_repo = order_repo
        self._payment_processor = payment_processor
        self._locks = locks

    def handle(self, order_id: int) -> None:
        with self._locks.hold(order_id):
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            previous = order.status
            order.cancel()
            version = self._order_repo.update(
                order.id, OrderPatch(status=order.status), expected_version=order.version
            )

            if order.payment_intent_id:
                try:
                    self._payment_processor.cancel(order.payment_intent_id)
                except PaymentProcessorError as exc:
                    logger.error(
                        "[ORDERS] order #%s: hold %s not released (%s); restoring %s",
                        order_id,
                        order.payment_intent_id,
                        exc.detail or exc,
                        previous.value,
                    )
                    self._order_repo.update(
                        order.id, OrderPatch(status=previous), expected_version=version
                    )
                    raise

        logger.info("[ORDERS] order #%s cancelled, hold released", order_id)

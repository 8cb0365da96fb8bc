"""Application service: Append Load use case.

The load ledger entry point.  Under the order's lock it re-reads the
order, re-runs the validator against that fresh state, appends the load
on the aggregate and writes the change back with a version check.  An
invalid load leaves the order untouched.
"""

from __future__ import annotations

import logging

from asphalt_orders.application.dto import AppendLoadResult, LoadRequest
from asphalt_orders.application.order_locks import OrderLocks
from asphalt_orders.domain.exceptions import EntityNotFoundError, ValidationError
from asphalt_orders.domain.model.value_objects import Tonnage, format_tons
from asphalt_orders.domain.repository.order_repository import (
    OrderPatch,
    OrderRepository,
)
from asphalt_orders.domain.service.load_validator import validate_new_load

logger = logging.getLogger(__name__)


class AppendLoadHandler:

    def __init__(self, order_repo: OrderRepository, locks: OrderLocks) -> None:
        self._order_repo = order_repo
        self._locks = locks

    def handle(self, request: LoadRequest, actor_id: str) -> AppendLoadResult:
        tonnage = Tonnage.of(request.tonnage_delivered).value

        with self._locks.hold(request.order_id):
            order = self._order_repo.get_by_id(request.order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{request.order_id} not found")

            decision = validate_new_load(order, tonnage)
            if not decision.valid:
                logger.info(
                    "[LOADS] rejected %s tons for order #%s: %s",
                    format_tons(tonnage),
                    order.id,
                    decision.error,
                )
                raise ValidationError(decision.error)

            read_version = order.version
            load = order.append_load(
                tonnage,
                created_by=actor_id,
                truck_id=request.truck_id,
                driver_name=request.driver_name,
                ticket_number=request.ticket_number,
                notes=request.notes,
            )

            patch = OrderPatch(
                status=order.status,
                loads=order.loads,
                total_delivered=order.total_delivered,
            )
            self._order_repo.update(order.id, patch, expected_version=read_version)

        logger.info(
            "[LOADS] order #%s load %d: %s tons by %s (total %s / %s)",
            order.id,
            load.load_number,
            format_tons(tonnage),
            actor_id,
            format_tons(order.total_delivered),
            format_tons(order.max_allowed_tonnage),
        )
        if decision.warning:
            logger.warning("[LOADS] order #%s: %s", order.id, decision.warning)

        return AppendLoadResult(
            load_id=load.id,
            load_number=load.load_number,
            total_delivered=format_tons(order.total_delivered),
            warning=decision.warning,
        )

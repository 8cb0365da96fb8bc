"""Application service: Complete Order use case (payment capture).

Converts delivered tonnage into a charge and captures it against the
authorization hold.

The order is claimed with a version-checked write before the processor is
called.  The claim freezes the ledger for every writer, in this process or
another, so the amount captured always matches the stored tonnage.  Its key
is sent as the idempotency key, so retrying an interrupted capture never
charges twice.

- A declined capture releases the claim and leaves the order as it was.
- Any other processor failure keeps the claim; the next completion
  resumes it under the same key.
- Once the processor confirms, the completion is recorded even if another
  write slipped in meanwhile.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from asphalt_orders.application.dto import CaptureResult
from asphalt_orders.application.order_locks import OrderLocks
from asphalt_orders.domain.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    PaymentProcessorError,
    ValidationError,
)
from asphalt_orders.domain.gateway.payment_processor import (
    CaptureConfirmation,
    PaymentProcessor,
)
from asphalt_orders.domain.model.order import Order, OrderStatus
from asphalt_orders.domain.model.value_objects import Money, format_tons
from asphalt_orders.domain.repository.order_repository import (
    OrderPatch,
    OrderRepository,
)
from asphalt_orders.domain.service.capture_calculation import (
    capture_message,
    plan_capture,
)

logger = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Stripe rejects metadata values longer than this.
METADATA_VALUE_LIMIT = 500


class CompleteOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        payment_processor: PaymentProcessor,
        locks: OrderLocks,
    ) -> None:
        self._order_repo = order_repo
        self._payment_processor = payment_processor
        self._locks = locks

    def handle(self, order_id: int) -> CaptureResult:
        with self._locks.hold(order_id):
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            self._check_capturable(order)
            self._claim(order)

            plan = plan_capture(order)
            amount_cents = plan.amount_to_capture.cents

            try:
                confirmation = self._payment_processor.capture(
                    order.payment_intent_id,  # type: ignore[arg-type]
                    amount_cents,
                    self._capture_metadata(order),
                    idempotency_key=order.capture_key,  # type: ignore[arg-type]
                )
            except PaymentProcessorError as exc:
                logger.error(
                    "[CAPTURE] order #%s: capture of %s failed: %s",
                    order.id,
                    plan.amount_to_capture,
                    exc.detail or exc,
                )
                if exc.declined:
                    self._release(order)
                raise

            final_amount = self._record_completion(order, confirmation)

        logger.info(
            "[CAPTURE] order #%s completed: captured %s for %s tons (%s)",
            order.id,
            final_amount,
            format_tons(order.total_delivered),
            confirmation.id,
        )
        if plan.excess_amount is not None:
            logger.warning(
                "[CAPTURE] order #%s delivered %s beyond its hold; settle separately",
                order.id,
                plan.excess_amount,
            )

        return CaptureResult(
            captured_amount=final_amount.amount,
            captured_amount_cents=final_amount.cents,
            message=capture_message(plan),
            excess_amount=plan.excess_amount.amount if plan.is_capped else None,
            payment_status=confirmation.status,
        )

    # --- Internal helpers -----------------------------------------------------

    def _claim(self, order: Order) -> None:
        if order.capture_key is not None:
            logger.warning(
                "[CAPTURE] order #%s: resuming interrupted capture %s",
                order.id,
                order.capture_key,
            )
            return
        order.begin_capture()
        order.version = self._order_repo.update(
            order.id,
            OrderPatch(capture_key=order.capture_key),
            expected_version=order.version,
        )

    def _release(self, order: Order) -> None:
        order.release_capture()
        try:
            order.version = self._order_repo.update(
                order.id, OrderPatch(capture_key=None), expected_version=order.version
            )
        except ConcurrencyConflictError:
            logger.error(
                "[CAPTURE] order #%s: capture claim could not be released; "
                "the next completion will resume it",
                order.id,
            )

    def _record_completion(self, order: Order, confirmation: CaptureConfirmation) -> Money:
        final_amount = Money.from_cents(
            confirmation.amount_captured, order.authorized_amount.currency
        )
        order.complete(final_amount, datetime.now(timezone.utc))
        patch = OrderPatch(
            status=order.status,
            final_amount=order.final_amount,
            completed_at=order.completed_at,
        )
        try:
            self._order_repo.update(order.id, patch, expected_version=order.version)
        except ConcurrencyConflictError:
            # The money is taken; the completion must be stored regardless.
            current = self._order_repo.get_by_id(order.id)
            logger.warning(
                "[CAPTURE] order #%s changed during capture (version %s -> %s); "
                "recording completion from the processor confirmation %s",
                order.id,
                order.version,
                current.version,  # type: ignore[union-attr]
                confirmation.id,
            )
            self._order_repo.update(
                order.id, patch, expected_version=current.version  # type: ignore[union-attr]
            )
        return final_amount

    @staticmethod
    def _check_capturable(order: Order) -> None:
        if order.status == OrderStatus.COMPLETED:
            raise ValidationError(f"Order #{order.id} is already completed")
        if order.status == OrderStatus.CANCELLED:
            raise ValidationError(f"Order #{order.id} is cancelled")
        if not order.loads:
            raise ValidationError(
                f"Order #{order.id} has no deliveries; nothing to capture"
            )
        if not order.payment_intent_id:
            raise ValidationError(f"Order #{order.id} has no payment authorization")

    @staticmethod
    def _capture_metadata(order: Order) -> dict[str, str]:
        """Audit link between the charge and the loads it pays for."""
        first, last = order.delivery_window  # type: ignore[misc]
        return {
            "order_id": str(order.id),
            "load_count": str(len(order.loads)),
            "total_delivered_tons": format_tons(order.total_delivered),
            "ticket_numbers": join_limited(
                [load.ticket_number for load in order.loads if load.ticket_number]
            ),
            "truck_ids": join_limited(
                sorted({load.truck_id for load in order.loads if load.truck_id})
            ),
            "first_delivery": first.strftime(_TIMESTAMP_FORMAT),
            "last_delivery": last.strftime(_TIMESTAMP_FORMAT),
        }


def join_limited(values: list[str], limit: int = METADATA_VALUE_LIMIT) -> str:
    """Comma-join *values*, ending with "+N more" when they exceed *limit*.

    >>> join_limited(["TK-1", "TK-2", "TK-3"], limit=12)
    'TK-1,+2 more'
    """
    text = ",".join(values)
    if len(text) <= limit:
        return text

    kept: list[str] = []
    used = 0
    for value in values:
        left_after = len(values) - len(kept) - 1
        width = len(value) + (1 if kept else 0)
        marker = len(f",+{left_after} more")
        if used + width + marker > limit:
            break
        kept.append(value)
        used += width

    rest = f"+{len(values) - len(kept)} more"
    return ",".join(kept + [rest])

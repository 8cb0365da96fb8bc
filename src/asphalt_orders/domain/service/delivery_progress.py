"""Domain service: Delivery progress.

Derives a delivery phase from the load ledger.  The phase describes
tonnage only; it says nothing about payment, so ``DeliveryPhase.COMPLETED``
and ``OrderStatus.COMPLETED`` are independent.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from asphalt_orders.domain.model.order import Order
from asphalt_orders.domain.service.load_validator import summarize_loads

HUNDRED = Decimal("100")


class DeliveryPhase(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVER_DELIVERED = "over_delivered"


@dataclass(frozen=True)
class DeliveryProgress:
    phase: DeliveryPhase
    progress_percentage: Decimal
    status_message: str


def delivery_progress(order: Order) -> DeliveryProgress:
    summary = summarize_loads(order)
    delivered = summary.total_delivered

    if delivered == 0:
        return DeliveryProgress(DeliveryPhase.NOT_STARTED, Decimal("0"), "No deliveries yet")

    if delivered > order.original_tonnage:
        excess = delivered - order.original_tonnage
        return DeliveryProgress(
            DeliveryPhase.OVER_DELIVERED,
            HUNDRED,
            f"Over-delivered by {excess:.1f} tons",
        )

    if delivered == order.original_tonnage:
        return DeliveryProgress(DeliveryPhase.COMPLETED, HUNDRED, "Order completed")

    return DeliveryProgress(
        DeliveryPhase.IN_PROGRESS,
        summary.percent_complete.quantize(Decimal("0.1")),
        f"{summary.remaining_tonnage:.1f} tons remaining",
    )

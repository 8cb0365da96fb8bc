"""Plain containers passed between the CLI/HTTP adapters and the handlers.

Tonnages are rendered as strings here so callers never deal with Decimal
formatting.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from asphalt_orders.domain.model.order import Load, Order
from asphalt_orders.domain.model.value_objects import format_tons


@dataclass(frozen=True)
class LoadRequest:
    """Input: one delivery as reported by the plant operator."""

    order_id: int
    tonnage_delivered: Decimal | str
    truck_id: str | None = None
    driver_name: str | None = None
    ticket_number: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class AppendLoadResult:
    load_id: str
    load_number: int
    total_delivered: str
    warning: str | None = None


@dataclass(frozen=True)
class LoadDTO:
    load_number: int
    tonnage: str
    delivery_time: str
    truck_id: str | None
    driver_name: str | None
    ticket_number: str | None
    notes: str | None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_name: str
    mix_type: str
    status: str
    original_tonnage: str
    max_allowed_tonnage: str
    total_delivered: str
    authorized_amount: str  # formatted, e.g. "$8250.00"
    final_amount: str | None
    payment_intent_id: str | None
    loads: list[LoadDTO]
    created_at: str

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            customer_name=order.customer_name,
            mix_type=order.mix_type,
            status=order.status.value,
            original_tonnage=format_tons(order.original_tonnage),
            max_allowed_tonnage=format_tons(order.max_allowed_tonnage),
            total_delivered=format_tons(order.total_delivered),
            authorized_amount=str(order.authorized_amount),
            final_amount=str(order.final_amount) if order.final_amount is not None else None,
            payment_intent_id=order.payment_intent_id,
            loads=[_load_dto(load) for load in order.loads],
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )


@dataclass(frozen=True)
class CaptureResult:
    """Output: what was charged when an order was completed."""

    captured_amount: Decimal
    captured_amount_cents: int
    message: str
    excess_amount: Decimal | None = None
    payment_status: str | None = None


def _load_dto(load: Load) -> LoadDTO:
    return LoadDTO(
        load_number=load.load_number,
        tonnage=format_tons(load.tonnage_delivered),
        delivery_time=load.delivery_time.strftime("%Y-%m-%d %H:%M UTC"),
        truck_id=load.truck_id,
        driver_name=load.driver_name,
        ticket_number=load.ticket_number,
        notes=load.notes,
    )

"""Order aggregate: an asphalt order and its ledger of delivered loads.

Ledger totals and status transitions are enforced on the aggregate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from asphalt_orders.domain.exceptions import ValidationError
from asphalt_orders.domain.model.value_objects import Money, Tonnage


class OrderStatus(Enum):
    PENDING = "pending"
    AUTHORIZED = "authorized"
    CONFIRMED = "confirmed"
    IN_PRODUCTION = "in_production"
    READY = "ready"
    PARTIAL_DELIVERY = "partial_delivery"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Forward order of the lifecycle; CANCELLED sits outside it.
_LIFECYCLE = [
    OrderStatus.PENDING,
    OrderStatus.AUTHORIZED,
    OrderStatus.CONFIRMED,
    OrderStatus.IN_PRODUCTION,
    OrderStatus.READY,
    OrderStatus.PARTIAL_DELIVERY,
    OrderStatus.COMPLETED,
]

TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

# Statuses staff may set by hand. PARTIAL_DELIVERY belongs to the ledger and
# COMPLETED to payment capture.
MANUAL_STATUSES = frozenset(
    {
        OrderStatus.AUTHORIZED,
        OrderStatus.CONFIRMED,
        OrderStatus.IN_PRODUCTION,
        OrderStatus.READY,
    }
)


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_DELIVERY_RATIO = Decimal("1.10")
MIN_LOAD_TONNAGE = Decimal("0.5")
LOAD_STATUS_DELIVERED = "delivered"


def max_allowed_for(tonnage: Tonnage) -> Decimal:
    """The 110% delivery ceiling for an ordered tonnage."""
    return tonnage.value * MAX_DELIVERY_RATIO


def authorization_for(tonnage: Tonnage, price_per_ton: Money) -> Money:
    """Amount to hold on the customer's card: the ceiling at the unit price."""
    return price_per_ton * max_allowed_for(tonnage)


@dataclass(frozen=True)
class Load:
    """One physical truck delivery against an order.

    Loads are owned by their order and never change once recorded.
    """

    id: str
    load_number: int
    tonnage_delivered: Decimal
    delivery_time: datetime
    created_at: datetime
    created_by: str
    status: str = LOAD_STATUS_DELIVERED
    truck_id: str | None = None
    driver_name: str | None = None
    ticket_number: str | None = None
    notes: str | None = None


@dataclass
class Order:
    """Aggregate root for asphalt mix orders.

    Use the ``Order.create()`` factory for new orders; it derives the
    delivery ceiling and the authorization hold.  The ``__init__`` is
    intentionally simple so the repository can reconstitute persisted
    orders without re-validating.

    Invariants:
    - ``total_delivered`` equals the sum of ``loads[].tonnage_delivered``
    - ``0 <= total_delivered <= max_allowed_tonnage``
    - ``status`` only moves forward; COMPLETED is reached through ``complete()``
    - no load is appended while ``capture_key`` holds a capture claim
    """

    id: int | None
    customer_name: str
    mix_type: str
    original_tonnage: Decimal
    max_allowed_tonnage: Decimal
    authorized_amount: Money
    payment_intent_id: str | None
    status: OrderStatus = OrderStatus.PENDING
    total_delivered: Decimal = Decimal("0")
    loads: list[Load] = field(default_factory=list)
    final_amount: Money | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None
    capture_key: str | None = None
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_name: str,
        mix_type: str,
        tonnage: Tonnage,
        price_per_ton: Money,
        payment_intent_id: str | None = None,
    ) -> Order:
        """Create a new order in PENDING with no loads.

        The payment hold may be attached afterwards, once the processor has
        authorized ``authorized_amount``.
        """
        if not customer_name or not customer_name.strip():
            raise ValidationError("Customer name is required")
        if not mix_type or not mix_type.strip():
            raise ValidationError("Mix type is required")
        if price_per_ton.amount <= 0:
            raise ValidationError("Price per ton must be greater than zero")

        return Order(
            id=None,
            customer_name=customer_name.strip(),
            mix_type=mix_type.strip(),
            original_tonnage=tonnage.value,
            max_allowed_tonnage=max_allowed_for(tonnage),
            authorized_amount=authorization_for(tonnage, price_per_ton),
            payment_intent_id=payment_intent_id,
        )

    # --- Load ledger ----------------------------------------------------------

    def append_load(
        self,
        tonnage: Decimal,
        *,
        created_by: str,
        truck_id: str | None = None,
        driver_name: str | None = None,
        ticket_number: str | None = None,
        notes: str | None = None,
        delivered_at: datetime | None = None,
    ) -> Load:
        """Record a delivered load.

        The first load moves the order into PARTIAL_DELIVERY.  Completion is
        never automatic, even when the original tonnage is reached.
        """
        # Local import: the validator reads Order snapshots.
        from asphalt_orders.domain.service.load_validator import validate_new_load

        if self.status in TERMINAL_STATUSES:
            raise ValidationError(
                f"Cannot add loads to order in {self.status.value} status"
            )
        if self.capture_key is not None:
            raise ValidationError(
                f"Cannot add loads to order #{self.id} while its payment is being captured"
            )

        decision = validate_new_load(self, tonnage)
        if not decision.valid:
            raise ValidationError(decision.error)

        now = datetime.now(timezone.utc)
        load = Load(
            id=f"load_{uuid4().hex}",
            load_number=len(self.loads) + 1,
            tonnage_delivered=tonnage,
            delivery_time=delivered_at or now,
            created_at=now,
            created_by=created_by,
            truck_id=truck_id or None,
            driver_name=driver_name or None,
            ticket_number=ticket_number or None,
            notes=notes or None,
        )

        if not self.loads:
            self.status = OrderStatus.PARTIAL_DELIVERY
        self.loads.append(load)
        self.total_delivered += tonnage
        return load

    # --- State transitions ----------------------------------------------------

    def advance_to(self, new_status: OrderStatus) -> None:
        """Move the order forward through the pre-delivery stages."""
        if new_status not in MANUAL_STATUSES:
            raise ValidationError(
                f"Status {new_status.value} cannot be set manually"
            )
        if self.status in TERMINAL_STATUSES:
            raise ValidationError(
                f"Cannot change status of a {self.status.value} order"
            )
        if _LIFECYCLE.index(new_status) <= _LIFECYCLE.index(self.status):
            raise ValidationError(
                f"Cannot move order from {self.status.value} to {new_status.value}"
            )
        self.status = new_status

    def begin_capture(self) -> str:
        """Claim the order for payment capture and return the claim's key.

        While claimed the ledger is frozen, so the captured amount cannot
        drift from the tonnage it was computed from.  The key doubles as the
        processor idempotency key; every retry of the same capture reuses it.
        """
        if self.capture_key is not None:
            return self.capture_key
        if self.status in TERMINAL_STATUSES:
            raise ValidationError(f"Cannot capture payment for a {self.status.value} order")
        if not self.loads:
            raise ValidationError(f"Order #{self.id} has no deliveries; nothing to capture")
        self.capture_key = f"capture-order-{self.id}-{uuid4().hex[:12]}"
        return self.capture_key

    def release_capture(self) -> None:
        """Drop the capture claim after the processor refused the charge."""
        self.capture_key = None

    def complete(self, final_amount: Money, completed_at: datetime | None = None) -> None:
        """Record the captured charge and close the order.

        Only the payment capture flow calls this, after the processor has
        confirmed the capture.
        """
        if self.status == OrderStatus.COMPLETED:
            raise ValidationError("Order already completed")
        if self.status == OrderStatus.CANCELLED:
            raise ValidationError("Cannot complete a cancelled order")
        if not self.loads:
            raise ValidationError("Cannot complete an order with no deliveries")
        if final_amount > self.authorized_amount:
            raise ValidationError(
                f"Final amount {final_amount} exceeds authorized {self.authorized_amount}"
            )
        self.final_amount = final_amount
        self.completed_at = completed_at or datetime.now(timezone.utc)
        self.status = OrderStatus.COMPLETED

    def cancel(self) -> None:
        """Transition any undelivered, open order -> CANCELLED.

        Releasing the authorization hold is coordinated by the application
        handler once the cancellation is stored.
        """
        if self.status == OrderStatus.CANCELLED:
            raise ValidationError("Order is already cancelled")
        if self.status == OrderStatus.COMPLETED:
            raise ValidationError("Cannot cancel order in completed status")
        if self.loads:
            raise ValidationError(
                f"Cannot cancel order with {len(self.loads)} delivered load(s); "
                f"complete it to capture payment instead"
            )
        self.status = OrderStatus.CANCELLED

    # --- Computed properties --------------------------------------------------

    @property
    def ledger_total(self) -> Decimal:
        """Total recomputed from the loads themselves."""
        return sum((load.tonnage_delivered for load in self.loads), Decimal("0"))

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def delivery_window(self) -> tuple[datetime, datetime] | None:
        """Earliest and latest delivery times, or None before the first load."""
        if not self.loads:
            return None
        times = [load.delivery_time for load in self.loads]
        return min(times), max(times)

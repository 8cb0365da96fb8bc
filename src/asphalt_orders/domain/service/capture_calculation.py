"""Domain service: Capture calculation.

Turns delivered tonnage into the amount to capture against the
authorization hold.  The unit price is not stored on the order, so it is
back-derived from the hold, which was placed for exactly the 110% ceiling.

The captured amount never exceeds the hold.  Anything delivered beyond it
is reported as ``excess_amount`` and left for staff to settle separately.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from asphalt_orders.domain.model.order import Order
from asphalt_orders.domain.model.value_objects import Money


@dataclass(frozen=True)
class CapturePlan:
    price_per_ton: Decimal
    delivered_amount: Money
    amount_to_capture: Money
    excess_amount: Money | None
    released_amount: Money

    @property
    def is_capped(self) -> bool:
        return self.excess_amount is not None


def plan_capture(order: Order) -> CapturePlan:
    authorized = order.authorized_amount
    price_per_ton = authorized.amount / order.max_allowed_tonnage
    delivered = Money(order.total_delivered * price_per_ton, authorized.currency)

    if delivered > authorized:
        to_capture = authorized
        excess = delivered - authorized
    else:
        to_capture = delivered
        excess = None

    return CapturePlan(
        price_per_ton=price_per_ton,
        delivered_amount=delivered,
        amount_to_capture=to_capture,
        excess_amount=excess,
        released_amount=authorized - to_capture,
    )


def capture_message(plan: CapturePlan) -> str:
    if plan.excess_amount is None:
        return f"Payment captured successfully: {plan.amount_to_capture}"
    return (
        f"Captured maximum authorized amount: {plan.amount_to_capture}. "
        f"Actual amount of {plan.delivered_amount} exceeded authorization "
        f"by {plan.excess_amount}."
    )

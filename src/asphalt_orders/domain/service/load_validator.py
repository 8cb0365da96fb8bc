"""Domain service: Load validation.

Decides whether a proposed delivery may be added to an order without
breaching the 110% ceiling.  Everything here is a pure function of an
order snapshot, so callers can run it as often as they like.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from asphalt_orders.domain.model.order import MIN_LOAD_TONNAGE
from asphalt_orders.domain.model.value_objects import format_tons

if TYPE_CHECKING:
    from asphalt_orders.domain.model.order import Order


@dataclass(frozen=True)
class LoadDecision:
    """Outcome of validating a proposed load.

    ``warning`` is informational and never blocks the append.
    """

    valid: bool
    error: str | None = None
    warning: str | None = None


@dataclass(frozen=True)
class LoadSummary:
    total_loads: int
    total_delivered: Decimal
    remaining_tonnage: Decimal
    percent_complete: Decimal
    can_add_more_loads: bool
    max_additional_tonnage: Decimal


def summarize_loads(order: Order) -> LoadSummary:
    """Running totals derived from the order's ledger."""
    total = order.total_delivered
    max_additional = max(Decimal("0"), order.max_allowed_tonnage - total)
    return LoadSummary(
        total_loads=len(order.loads),
        total_delivered=total,
        remaining_tonnage=max(Decimal("0"), order.original_tonnage - total),
        percent_complete=min(Decimal("100"), total / order.original_tonnage * 100),
        can_add_more_loads=max_additional > 0,
        max_additional_tonnage=max_additional,
    )


def validate_new_load(order: Order, tonnage_to_add: Decimal) -> LoadDecision:
    """Check a proposed load against the ceiling and the minimum load size."""
    summary = summarize_loads(order)

    if tonnage_to_add > summary.max_additional_tonnage:
        return LoadDecision(
            valid=False,
            error=(
                f"Cannot deliver {format_tons(tonnage_to_add)} tons. "
                f"Maximum additional tonnage allowed: "
                f"{format_tons(summary.max_additional_tonnage)} tons "
                f"(110% limit: {format_tons(order.max_allowed_tonnage)} tons total)"
            ),
        )

    if tonnage_to_add < MIN_LOAD_TONNAGE:
        return LoadDecision(
            valid=False,
            error=f"Minimum load size is {format_tons(MIN_LOAD_TONNAGE)} tons",
        )

    new_total = summary.total_delivered + tonnage_to_add
    if new_total >= order.original_tonnage:
        excess = new_total - order.original_tonnage
        if excess > 0:
            warning = f"This load will exceed the original order by {excess:.1f} tons"
        else:
            warning = "This load will complete the original order"
        return LoadDecision(valid=True, warning=warning)

    return LoadDecision(valid=True)

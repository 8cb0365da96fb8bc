"""Abstract repository for Order aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  Writes to an existing order go through ``update()``,
which applies an ``OrderPatch`` only if the stored version still matches
the version the caller read.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal
from typing import Any

from asphalt_orders.domain.model.order import Load, Order, OrderStatus
from asphalt_orders.domain.model.value_objects import Money


class _Unset:
    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class OrderPatch:
    """Partial update for a persisted order.

    A field left as ``UNSET`` is not written.  ``None`` is a real value.
    """

    status: OrderStatus = UNSET
    loads: list[Load] = UNSET
    total_delivered: Decimal = UNSET
    final_amount: Money | None = UNSET
    completed_at: datetime | None = UNSET
    capture_key: str | None = UNSET

    def present(self) -> dict[str, Any]:
        """The fields this patch sets, by name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def apply_to(self, order: Order) -> None:
        for name, value in self.present().items():
            if name == "loads":
                value = list(value)
            setattr(order, name, value)


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_by_status(self, status: OrderStatus | None = None) -> list[Order]:
        """Return orders (newest first), optionally only those in *status*."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order, assigning its ID and first version."""

    @abstractmethod
    def update(self, order_id: int, patch: OrderPatch, expected_version: int) -> int:
        """Apply *patch* if the stored version equals *expected_version*.

        Returns the new version.  Raises EntityNotFoundError for unknown
        orders and ConcurrencyConflictError when the version moved on.
        """

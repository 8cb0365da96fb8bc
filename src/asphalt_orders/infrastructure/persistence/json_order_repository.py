"""JSON-file-backed implementation of OrderRepository.

Each record carries a ``version``.  ``update()`` compares it with the
caller's expected version and rewrites the file under a lock, so the
read-compare-write is a single step for every writer in this process.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from asphalt_orders.domain.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
)
from asphalt_orders.domain.model.order import Load, Order, OrderStatus
from asphalt_orders.domain.model.value_objects import Money
from asphalt_orders.domain.repository.order_repository import (
    OrderPatch,
    OrderRepository,
)


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._load_raw():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def list_by_status(self, status: OrderStatus | None = None) -> list[Order]:
        orders = [
            self._to_domain(raw)
            for raw in self._load_raw()
            if status is None or raw["status"] == status.value
        ]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def add(self, order: Order) -> None:
        with self._lock:
            orders = self._load_raw()
            order.id = max((o["id"] for o in orders), default=0) + 1
            order.version = 1
            orders.append(self._to_raw(order))
            self._persist_raw(orders)

    def update(self, order_id: int, patch: OrderPatch, expected_version: int) -> int:
        with self._lock:
            orders = self._load_raw()
            for i, raw in enumerate(orders):
                if raw["id"] == order_id:
                    break
            else:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            if raw["version"] != expected_version:
                raise ConcurrencyConflictError(
                    f"Order #{order_id} was modified concurrently "
                    f"(expected version {expected_version}, found {raw['version']}); "
                    f"reload and retry"
                )

            order = self._to_domain(raw)
            patch.apply_to(order)
            order.version = expected_version + 1
            orders[i] = self._to_raw(order)
            self._persist_raw(orders)
            return order.version

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "version": order.version,
            "customer_name": order.customer_name,
            "mix_type": order.mix_type,
            "status": order.status.value,
            "original_tonnage": str(order.original_tonnage),
            "max_allowed_tonnage": str(order.max_allowed_tonnage),
            "total_delivered": str(order.total_delivered),
            "authorized_amount": str(order.authorized_amount.amount),
            "currency": order.authorized_amount.currency,
            "final_amount": (
                str(order.final_amount.amount) if order.final_amount is not None else None
            ),
            "payment_intent_id": order.payment_intent_id,
            "created_at": order.created_at.isoformat(),
            "completed_at": order.completed_at.isoformat() if order.completed_at else None,
            "capture_key": order.capture_key,
            "loads": [
                {
                    "id": load.id,
                    "load_number": load.load_number,
                    "tonnage_delivered": str(load.tonnage_delivered),
                    "delivery_time": load.delivery_time.isoformat(),
                    "created_at": load.created_at.isoformat(),
                    "created_by": load.created_by,
                    "status": load.status,
                    "truck_id": load.truck_id,
                    "driver_name": load.driver_name,
                    "ticket_number": load.ticket_number,
                    "notes": load.notes,
                }
                for load in order.loads
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "USD")
        loads = [
            Load(
                id=ld["id"],
                load_number=ld["load_number"],
                tonnage_delivered=Decimal(ld["tonnage_delivered"]),
                delivery_time=datetime.fromisoformat(ld["delivery_time"]),
                created_at=datetime.fromisoformat(ld["created_at"]),
                created_by=ld["created_by"],
                status=ld.get("status", "delivered"),
                truck_id=ld.get("truck_id"),
                driver_name=ld.get("driver_name"),
                ticket_number=ld.get("ticket_number"),
                notes=ld.get("notes"),
            )
            for ld in raw.get("loads", [])
        ]
        final_amount = raw.get("final_amount")
        completed_at = raw.get("completed_at")
        return Order(
            id=raw["id"],
            customer_name=raw["customer_name"],
            mix_type=raw["mix_type"],
            original_tonnage=Decimal(raw["original_tonnage"]),
            max_allowed_tonnage=Decimal(raw["max_allowed_tonnage"]),
            authorized_amount=Money(Decimal(raw["authorized_amount"]), currency),
            payment_intent_id=raw.get("payment_intent_id"),
            status=OrderStatus(raw["status"]),
            total_delivered=Decimal(raw["total_delivered"]),
            loads=loads,
            final_amount=Money(Decimal(final_amount), currency) if final_amount else None,
            created_at=datetime.fromisoformat(raw["created_at"]),
            completed_at=datetime.fromisoformat(completed_at) if completed_at else None,
            capture_key=raw.get("capture_key"),
            version=raw["version"],
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, orders: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(orders, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")

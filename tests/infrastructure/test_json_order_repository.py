"""Tests for the JSON-file order repository."""

from datetime import datetime
from decimal import Decimal

import pytest

from asphalt_orders.domain.exceptions import ConcurrencyConflictError, EntityNotFoundError
from asphalt_orders.domain.model.order import Order, OrderStatus
from asphalt_orders.domain.model.value_objects import Money, Tonnage
from asphalt_orders.domain.repository.order_repository import UNSET, OrderPatch
from asphalt_orders.infrastructure.persistence.json_order_repository import JsonOrderRepository


def _new_order(customer: str = "Acme Paving") -> Order:
    return Order.create(customer, "SP-12.5", Tonnage.of("100"), Money.of("75"), "pi_1")


@pytest.fixture
def repo(tmp_path):
    return JsonOrderRepository(tmp_path / "orders.json")


class TestAddAndRead:

    def test_add_assigns_id_and_version(self, repo):
        order = _new_order()
        repo.add(order)
        assert order.id == 1
        assert order.version == 1

        second = _new_order("Bravo Roads")
        repo.add(second)
        assert second.id == 2

    def test_roundtrip_preserves_loads_and_timestamps(self, repo):
        order = _new_order()
        order.append_load(Decimal("12.5"), created_by="op-1", truck_id="T-1", ticket_number="TK-1")
        repo.add(order)

        loaded = repo.get_by_id(order.id)
        assert loaded.total_delivered == Decimal("12.5")
        assert loaded.authorized_amount == Money.of("8250.00")
        assert loaded.status == OrderStatus.PARTIAL_DELIVERY
        assert isinstance(loaded.created_at, datetime)
        assert isinstance(loaded.loads[0].delivery_time, datetime)
        assert loaded.loads[0] == order.loads[0]

    def test_missing_order(self, repo):
        assert repo.get_by_id(5) is None

    def test_creates_file_on_first_use(self, tmp_path):
        path = tmp_path / "nested" / "orders.json"
        JsonOrderRepository(path)
        assert path.read_text(encoding="utf-8") == "[]"


class TestConditionalUpdate:

    def test_update_applies_only_present_fields(self, repo):
        order = _new_order()
        repo.add(order)

        new_version = repo.update(order.id, OrderPatch(status=OrderStatus.CONFIRMED), 1)

        loaded = repo.get_by_id(order.id)
        assert new_version == 2
        assert loaded.version == 2
        assert loaded.status == OrderStatus.CONFIRMED
        assert loaded.customer_name == "Acme Paving"
        assert loaded.final_amount is None

    def test_stale_version_conflicts(self, repo):
        order = _new_order()
        repo.add(order)
        repo.update(order.id, OrderPatch(status=OrderStatus.CONFIRMED), 1)

        with pytest.raises(ConcurrencyConflictError, match="expected version 1, found 2"):
            repo.update(order.id, OrderPatch(status=OrderStatus.READY), 1)
        assert repo.get_by_id(order.id).status == OrderStatus.CONFIRMED

    def test_unknown_order(self, repo):
        with pytest.raises(EntityNotFoundError):
            repo.update(9, OrderPatch(status=OrderStatus.READY), 1)

    def test_completion_fields_persist(self, repo):
        order = _new_order()
        repo.add(order)
        completed_at = datetime(2026, 5, 1, 12, 30)
        repo.update(
            order.id,
            OrderPatch(
                status=OrderStatus.COMPLETED,
                final_amount=Money.of("7875.00"),
                completed_at=completed_at,
            ),
            1,
        )
        loaded = repo.get_by_id(order.id)
        assert loaded.final_amount == Money.of("7875.00")
        assert loaded.completed_at == completed_at

    def test_capture_claim_persists_and_clears(self, repo):
        order = _new_order()
        repo.add(order)

        version = repo.update(order.id, OrderPatch(capture_key="capture-order-1-abc"), 1)
        assert repo.get_by_id(order.id).capture_key == "capture-order-1-abc"

        repo.update(order.id, OrderPatch(capture_key=None), version)
        assert repo.get_by_id(order.id).capture_key is None


def test_list_by_status(repo):
    first, second = _new_order("A"), _new_order("B")
    repo.add(first)
    repo.add(second)
    repo.update(first.id, OrderPatch(status=OrderStatus.CANCELLED), 1)

    assert [o.customer_name for o in repo.list_by_status(OrderStatus.CANCELLED)] == ["A"]
    assert {o.customer_name for o in repo.list_by_status()} == {"A", "B"}


def test_order_patch_presence():
    patch = OrderPatch(status=OrderStatus.READY, final_amount=None)
    assert patch.present() == {"status": OrderStatus.READY, "final_amount": None}
    assert patch.loads is UNSET

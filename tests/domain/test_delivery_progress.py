"""Unit tests for the delivery progress calculator."""

from decimal import Decimal

from asphalt_orders.domain.model.order import Order, OrderStatus
from asphalt_orders.domain.model.value_objects import Money, Tonnage
from asphalt_orders.domain.service.delivery_progress import DeliveryPhase, delivery_progress


def _order_with(*tons: str) -> Order:
    order = Order.create("Acme Paving", "SP-12.5", Tonnage.of("100"), Money.of("75"), "pi_1")
    for t in tons:
        order.append_load(Decimal(t), created_by="operator-1")
    return order


class TestDeliveryProgress:

    def test_not_started(self):
        progress = delivery_progress(_order_with())
        assert progress.phase == DeliveryPhase.NOT_STARTED
        assert progress.progress_percentage == 0
        assert progress.status_message == "No deliveries yet"

    def test_in_progress(self):
        progress = delivery_progress(_order_with("60"))
        assert progress.phase == DeliveryPhase.IN_PROGRESS
        assert progress.progress_percentage == Decimal("60.0")
        assert progress.status_message == "40.0 tons remaining"

    def test_in_progress_fractional(self):
        progress = delivery_progress(_order_with("33.3"))
        assert progress.progress_percentage == Decimal("33.3")
        assert progress.status_message == "66.7 tons remaining"

    def test_delivery_completed_is_not_order_completed(self):
        order = _order_with("60", "40")
        progress = delivery_progress(order)
        assert progress.phase == DeliveryPhase.COMPLETED
        assert progress.progress_percentage == 100
        assert progress.status_message == "Order completed"
        assert order.status == OrderStatus.PARTIAL_DELIVERY

    def test_over_delivered(self):
        progress = delivery_progress(_order_with("60", "45"))
        assert progress.phase == DeliveryPhase.OVER_DELIVERED
        assert progress.progress_percentage == 100
        assert progress.status_message == "Over-delivered by 5.0 tons"

    def test_repeated_calls_identical_and_side_effect_free(self):
        order = _order_with("60", "45")
        before = (order.total_delivered, len(order.loads), order.status)
        assert delivery_progress(order) == delivery_progress(order)
        assert (order.total_delivered, len(order.loads), order.status) == before

"""Unit tests for turning delivered tonnage into a capture amount."""

from decimal import Decimal

import pytest

from asphalt_orders.domain.model.order import Order
from asphalt_orders.domain.model.value_objects import Money, Tonnage
from asphalt_orders.domain.service.capture_calculation import capture_message, plan_capture


def _order(delivered: str, tons: str = "100", price: str = "75") -> Order:
    """Order reconstituted with an arbitrary delivered total."""
    order = Order.create("Acme Paving", "SP-12.5", Tonnage.of(tons), Money.of(price), "pi_1")
    order.total_delivered = Decimal(delivered)
    return order


class TestPlanCapture:

    def test_price_per_ton_back_derived_from_hold(self):
        assert plan_capture(_order("105")).price_per_ton == Decimal("75")

    def test_under_authorization_captures_delivered_amount(self):
        plan = plan_capture(_order("105"))
        assert plan.delivered_amount == Money.of("7875.00")
        assert plan.amount_to_capture == Money.of("7875.00")
        assert plan.excess_amount is None
        assert plan.released_amount == Money.of("375.00")
        assert plan.amount_to_capture.cents == 787500

    def test_exact_authorization_boundary_not_capped(self):
        plan = plan_capture(_order("110"))
        assert plan.amount_to_capture == Money.of("8250.00")
        assert plan.excess_amount is None
        assert not plan.is_capped

    def test_over_authorization_capped_with_excess(self):
        plan = plan_capture(_order("115"))
        assert plan.delivered_amount == Money.of("8625.00")
        assert plan.amount_to_capture == Money.of("8250.00")
        assert plan.excess_amount == Money.of("375.00")
        assert plan.released_amount == Money.of("0")

    @pytest.mark.parametrize("delivered", ["0.5", "12.25", "99.99", "100", "109.5", "110", "111", "250"])
    def test_capture_never_exceeds_hold(self, delivered):
        order = _order(delivered)
        plan = plan_capture(order)
        assert plan.amount_to_capture == min(plan.delivered_amount, order.authorized_amount)
        if plan.delivered_amount > order.authorized_amount:
            assert plan.excess_amount == plan.delivered_amount - order.authorized_amount
        else:
            assert plan.excess_amount is None

    def test_uneven_price_rounds_to_cents(self):
        plan = plan_capture(_order("3.3", tons="3", price="1.01"))
        assert plan.amount_to_capture == Money.of("3.33")


class TestCaptureMessage:

    def test_plain_capture(self):
        assert capture_message(plan_capture(_order("105"))) == (
            "Payment captured successfully: $7875.00"
        )

    def test_capped_capture(self):
        assert capture_message(plan_capture(_order("115"))) == (
            "Captured maximum authorized amount: $8250.00. Actual amount of "
            "$8625.00 exceeded authorization by $375.00."
        )

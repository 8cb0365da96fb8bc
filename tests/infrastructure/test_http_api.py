"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from asphalt_orders.application.create_order import CreateOrderHandler
from asphalt_orders.application.order_locks import OrderLocks
from asphalt_orders.domain.exceptions import PaymentProcessorError
from asphalt_orders.infrastructure.http import api
from tests.fakes import FakeOrderRepository, FakePaymentProcessor


@pytest.fixture
def context():
    order_repo = FakeOrderRepository()
    processor = FakePaymentProcessor()
    locks = OrderLocks()
    order_id = CreateOrderHandler(order_repo, processor).handle(
        "Acme Paving", "SP-12.5", "100", "75.00"
    ).id

    app = api.create_app()
    app.dependency_overrides[api.get_order_repository] = lambda: order_repo
    app.dependency_overrides[api.get_payment_processor] = lambda: processor
    app.dependency_overrides[api.get_order_locks] = lambda: locks
    with TestClient(app) as client:
        yield client, order_repo, processor, order_id


def _post_load(client, order_id, tons, **extra):
    return client.post(
        "/loads",
        json={"orderId": order_id, "tonnageDelivered": tons, **extra},
        headers={"X-Actor-Id": "op-7"},
    )


class TestLoads:

    def test_created(self, context):
        client, order_repo, _, oid = context
        response = _post_load(client, oid, 60, truckId="T-1", ticketNumber="TK-1")

        assert response.status_code == 201
        body = response.json()
        assert body["loadId"].startswith("load_")
        assert body["loadNumber"] == 1
        assert "warning" not in body

        load = order_repo.get_by_id(oid).loads[0]
        assert load.created_by == "op-7"
        assert load.truck_id == "T-1"

    def test_warning_returned(self, context):
        client, _, _, oid = context
        _post_load(client, oid, 60)
        response = _post_load(client, oid, 45)
        assert response.status_code == 201
        assert response.json()["warning"] == "This load will exceed the original order by 5.0 tons"

    def test_over_ceiling_is_400(self, context):
        client, _, _, oid = context
        _post_load(client, oid, 105)
        response = _post_load(client, oid, 10)
        assert response.status_code == 400
        assert "110% limit: 110 tons total" in response.json()["error"]

    def test_missing_field_is_400(self, context):
        client, _, _, oid = context
        response = client.post("/loads", json={"orderId": oid})
        assert response.status_code == 400
        assert "tonnageDelivered" in response.json()["error"]

    def test_unknown_order_is_404(self, context):
        client, *_ = context
        assert _post_load(client, 999, 5).status_code == 404


class TestComplete:

    def test_captures(self, context):
        client, _, processor, oid = context
        _post_load(client, oid, 60)
        _post_load(client, oid, 45)

        response = client.post(f"/orders/{oid}/complete", json={})

        assert response.status_code == 200
        assert response.json() == {
            "captured_amount": 7875.0,
            "message": "Payment captured successfully: $7875.00",
        }
        assert processor.captures[0]["amount"] == 787500

    def test_declined_is_402(self, context):
        client, order_repo, processor, oid = context
        _post_load(client, oid, 60)
        processor.capture_error = PaymentProcessorError(
            "Payment capture declined", declined=True, detail="card_declined"
        )

        response = client.post(f"/orders/{oid}/complete", json={})

        assert response.status_code == 402
        assert response.json() == {"error": "Payment capture declined", "details": "card_declined"}
        assert order_repo.get_by_id(oid).final_amount is None

    def test_processor_outage_is_500(self, context):
        client, _, processor, oid = context
        _post_load(client, oid, 60)
        processor.capture_error = PaymentProcessorError("Payment capture failed")
        assert client.post(f"/orders/{oid}/complete", json={}).status_code == 500

    def test_nothing_delivered_is_400(self, context):
        client, _, _, oid = context
        assert client.post(f"/orders/{oid}/complete", json={}).status_code == 400


class TestProgress:

    def test_not_started(self, context):
        client, _, _, oid = context
        response = client.get(f"/orders/{oid}/progress")
        assert response.status_code == 200
        assert response.json() == {
            "phase": "not_started",
            "progressPercentage": 0.0,
            "statusMessage": "No deliveries yet",
        }

    def test_in_progress(self, context):
        client, _, _, oid = context
        _post_load(client, oid, 60)
        body = client.get(f"/orders/{oid}/progress").json()
        assert body["phase"] == "in_progress"
        assert body["progressPercentage"] == 60.0
        assert body["statusMessage"] == "40.0 tons remaining"

    def test_unknown_order_is_404(self, context):
        client, *_ = context
        assert client.get("/orders/31/progress").status_code == 404

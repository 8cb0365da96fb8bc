"""End-to-end tests for the click CLI, wired to in-memory fakes."""

import pytest
from click.testing import CliRunner

from asphalt_orders.application.order_locks import OrderLocks
from asphalt_orders.infrastructure.cli import load_commands, order_commands
from asphalt_orders.infrastructure.cli.main import cli
from tests.fakes import FakeOrderRepository, FakePaymentProcessor


@pytest.fixture
def wired(monkeypatch):
    repo = FakeOrderRepository()
    processor = FakePaymentProcessor()
    locks = OrderLocks()
    for module in (order_commands, load_commands):
        monkeypatch.setattr(module, "order_repository", lambda: repo)
        monkeypatch.setattr(module, "order_locks", lambda: locks)
    monkeypatch.setattr(order_commands, "payment_processor", lambda: processor)
    return repo, processor


def _run(*args):
    return CliRunner().invoke(cli, list(args))


def _create():
    return _run(
        "order", "create", "--customer", "Acme Paving", "--mix", "SP-12.5",
        "--tons", "100", "--price", "75.00",
    )


def test_create_order(wired):
    _, processor = wired
    result = _create()

    assert result.exit_code == 0, result.output
    assert "Order #1 created  (status=pending)" in result.output
    assert "Authorized: $8250.00  (pi_test_1)" in result.output
    assert processor.authorizations[0]["amount"] == 825000


def test_load_add_and_list(wired):
    _create()
    result = _run(
        "load", "add", "--order", "1", "--tons", "60", "--truck", "T-12",
        "--ticket", "TK-1", "--actor", "operator",
    )
    assert result.exit_code == 0, result.output
    assert "Load #1 recorded for order #1 (total delivered 60 tons)" in result.output

    listing = _run("load", "list", "--order", "1")
    assert "#1  60 tons" in listing.output
    assert "truck T-12, ticket TK-1" in listing.output


def test_load_add_warns(wired):
    _create()
    _run("load", "add", "--order", "1", "--tons", "60", "--actor", "op")
    result = _run("load", "add", "--order", "1", "--tons", "40", "--actor", "op")
    assert "Warning: This load will complete the original order" in result.output


def test_load_over_ceiling_fails(wired):
    _create()
    result = _run("load", "add", "--order", "1", "--tons", "111", "--actor", "op")
    assert result.exit_code != 0
    assert "110% limit: 110 tons total" in result.output


def test_progress(wired):
    _create()
    _run("load", "add", "--order", "1", "--tons", "25", "--actor", "op")
    result = _run("order", "progress", "--id", "1")
    assert result.exit_code == 0, result.output
    assert "Order #1: in_progress (25.0%)" in result.output
    assert "75.0 tons remaining" in result.output
    assert "1 load(s), 25 tons delivered, up to 85 more allowed" in result.output


def test_complete_captures(wired):
    repo, processor = wired
    _create()
    _run("load", "add", "--order", "1", "--tons", "50", "--actor", "op")

    result = _run("order", "complete", "--id", "1")

    assert result.exit_code == 0, result.output
    assert "Payment captured successfully: $3750.00" in result.output
    assert processor.captures[0]["amount"] == 375000
    assert repo.get_by_id(1).status.value == "completed"


def test_advance_and_cancel(wired):
    _, processor = wired
    _create()
    assert _run("order", "advance", "--id", "1", "--to", "confirmed").exit_code == 0

    backwards = _run("order", "advance", "--id", "1", "--to", "authorized")
    assert backwards.exit_code != 0
    assert "Cannot move order from confirmed to authorized" in backwards.output

    assert _run("order", "cancel", "--id", "1").exit_code == 0
    assert processor.cancelled == ["pi_test_1"]


def test_list_filters_by_status(wired):
    _create()
    _create()
    _run("order", "cancel", "--id", "2")

    result = _run("order", "list", "--status", "cancelled")
    lines = [line for line in result.output.splitlines() if line[:1].isdigit()]
    assert len(lines) == 1
    assert lines[0].startswith("2 ")


def test_unknown_order(wired):
    result = _run("order", "show", "--id", "42")
    assert result.exit_code != 0
    assert "not found" in result.output

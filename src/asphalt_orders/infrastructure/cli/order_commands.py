"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from asphalt_orders.application.advance_status import AdvanceStatusHandler
from asphalt_orders.application.cancel_order import CancelOrderHandler
from asphalt_orders.application.complete_order import CompleteOrderHandler
from asphalt_orders.application.create_order import CreateOrderHandler
from asphalt_orders.application.dto import OrderDTO
from asphalt_orders.application.show_order import ListOrdersHandler, ShowOrderHandler
from asphalt_orders.application.show_progress import ShowProgressHandler
from asphalt_orders.domain.exceptions import DomainException
from asphalt_orders.domain.model.order import MANUAL_STATUSES, OrderStatus
from asphalt_orders.domain.model.value_objects import format_tons
from asphalt_orders.infrastructure.bootstrap import (
    order_locks,
    order_repository,
    payment_processor,
)
from asphalt_orders.infrastructure.config import settings


@click.command("create")
@click.option("--customer", required=True, help="Customer name.")
@click.option("--mix", "mix_type", required=True, help="Asphalt mix (e.g. SP-12.5).")
@click.option("--tons", required=True, help="Ordered tonnage (e.g. 100).")
@click.option("--price", required=True, help="Price per ton (e.g. 75.00).")
def order_create(customer: str, mix_type: str, tons: str, price: str) -> None:
    """Create an order and authorize 110% of its value."""
    try:
        handler = CreateOrderHandler(
            order_repo=order_repository(),
            payment_processor=payment_processor(),
            currency=settings.CURRENCY,
        )
        dto = handler.handle(
            customer_name=customer, mix_type=mix_type, tonnage=tons, price_per_ton=price
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created  (status={dto.status})")
    click.echo(f"Customer:   {dto.customer_name}")
    click.echo(f"Mix:        {dto.mix_type}")
    click.echo(f"Tonnage:    {dto.original_tonnage} tons (limit {dto.max_allowed_tonnage})")
    click.echo(f"Authorized: {dto.authorized_amount}  ({dto.payment_intent_id})")


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer:   {dto.customer_name}")
    click.echo(f"Mix:        {dto.mix_type}")
    click.echo(f"Created:    {dto.created_at}")
    click.echo(
        f"Delivered:  {dto.total_delivered} of {dto.original_tonnage} tons "
        f"(limit {dto.max_allowed_tonnage})"
    )
    click.echo(f"Authorized: {dto.authorized_amount}")
    if dto.final_amount is not None:
        click.echo(f"Captured:   {dto.final_amount}")
    click.echo()

    if not dto.loads:
        click.echo("  No loads delivered yet.")
        return

    click.echo(f"  {'#':>3} {'Tons':>8} {'Delivered':<20} {'Truck':<10} {'Ticket':<10}")
    click.echo(f"  {'-'*55}")
    for load in dto.loads:
        click.echo(
            f"  {load.load_number:>3} {load.tonnage:>8} {load.delivery_time:<20} "
            f"{load.truck_id or '-':<10} {load.ticket_number or '-':<10}"
        )


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option(
    "--status",
    default=None,
    type=click.Choice([s.value for s in OrderStatus]),
    help="Only orders in this status.",
)
def order_list(status: str | None) -> None:
    """List orders, newest first."""
    dtos = ListOrdersHandler(order_repo=order_repository()).handle(status)

    if not dtos:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Customer':<20} {'Status':<18} {'Delivered':>10} {'Ordered':>8}")
    click.echo("-" * 66)
    for dto in dtos:
        click.echo(
            f"{dto.id:<6} {dto.customer_name:<20} {dto.status:<18} "
            f"{dto.total_delivered:>10} {dto.original_tonnage:>8}"
        )


@click.command("progress")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
def order_progress(order_id: int) -> None:
    """Show delivery progress for an order."""
    handler = ShowProgressHandler(order_repo=order_repository())

    try:
        progress, summary = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id}: {progress.phase.value} ({progress.progress_percentage}%)")
    click.echo(progress.status_message)
    click.echo(
        f"{summary.total_loads} load(s), {format_tons(summary.total_delivered)} tons delivered, "
        f"up to {format_tons(summary.max_additional_tonnage)} more allowed"
    )


@click.command("advance")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--to",
    "new_status",
    required=True,
    type=click.Choice(sorted(s.value for s in MANUAL_STATUSES)),
    help="Target status.",
)
def order_advance(order_id: int, new_status: str) -> None:
    """Move an order forward before delivery starts."""
    handler = AdvanceStatusHandler(order_repo=order_repository(), locks=order_locks())

    try:
        handler.handle(order_id, new_status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {new_status}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
def order_cancel(order_id: int) -> None:
    """Cancel an undelivered order (releases the payment hold)."""
    try:
        handler = CancelOrderHandler(
            order_repo=order_repository(),
            payment_processor=payment_processor(),
            locks=order_locks(),
        )
        handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled.")


@click.command("complete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to complete.")
def order_complete(order_id: int) -> None:
    """Capture payment for delivered tonnage and complete the order."""
    try:
        handler = CompleteOrderHandler(
            order_repo=order_repository(),
            payment_processor=payment_processor(),
            locks=order_locks(),
        )
        result = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(result.message)
    if result.excess_amount is not None:
        click.echo(f"Uncaptured excess: ${result.excess_amount:.2f}")

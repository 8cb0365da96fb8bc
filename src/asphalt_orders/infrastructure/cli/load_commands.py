"""CLI commands for the load ledger."""

from __future__ import annotations

import getpass

import click

from asphalt_orders.application.append_load import AppendLoadHandler
from asphalt_orders.application.dto import LoadRequest
from asphalt_orders.application.show_order import ShowOrderHandler
from asphalt_orders.domain.exceptions import DomainException
from asphalt_orders.infrastructure.bootstrap import order_locks, order_repository


@click.command("add")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.option("--tons", required=True, help="Tonnage delivered on this load.")
@click.option("--truck", "truck_id", default=None, help="Truck identifier.")
@click.option("--driver", "driver_name", default=None, help="Driver name.")
@click.option("--ticket", "ticket_number", default=None, help="Plant ticket number.")
@click.option("--notes", default=None, help="Delivery notes.")
@click.option("--actor", default=None, help="Operator recording the load (defaults to OS user).")
def load_add(
    order_id: int,
    tons: str,
    truck_id: str | None,
    driver_name: str | None,
    ticket_number: str | None,
    notes: str | None,
    actor: str | None,
) -> None:
    """Record a delivered load against an order."""
    handler = AppendLoadHandler(order_repo=order_repository(), locks=order_locks())

    try:
        result = handler.handle(
            LoadRequest(
                order_id=order_id,
                tonnage_delivered=tons,
                truck_id=truck_id,
                driver_name=driver_name,
                ticket_number=ticket_number,
                notes=notes,
            ),
            actor_id=actor or getpass.getuser(),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Load #{result.load_number} recorded for order #{order_id} "
        f"(total delivered {result.total_delivered} tons)"
    )
    if result.warning:
        click.echo(f"Warning: {result.warning}")


@click.command("list")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
def load_list(order_id: int) -> None:
    """List the loads delivered for an order."""
    try:
        dto = ShowOrderHandler(order_repo=order_repository()).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not dto.loads:
        click.echo("No loads delivered yet.")
        return

    for load in dto.loads:
        details = ", ".join(
            f"{label} {value}"
            for label, value in (
                ("truck", load.truck_id),
                ("driver", load.driver_name),
                ("ticket", load.ticket_number),
            )
            if value
        )
        click.echo(f"#{load.load_number}  {load.tonnage} tons  {load.delivery_time}  {details}")
        if load.notes:
            click.echo(f"    {load.notes}")

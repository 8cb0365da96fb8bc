import click

from asphalt_orders.infrastructure.bootstrap import configure_logging
from asphalt_orders.infrastructure.cli.load_commands import load_add, load_list
from asphalt_orders.infrastructure.cli.order_commands import (
    order_advance,
    order_cancel,
    order_complete,
    order_create,
    order_list,
    order_progress,
    order_show,
)


@click.group()
def cli() -> None:
    """Asphalt plant orders: loads and payment capture"""
    configure_logging()


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def load() -> None:
    """Record and inspect deliveries."""


# Register subcommands
order.add_command(order_advance)
order.add_command(order_cancel)
order.add_command(order_complete)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_progress)
order.add_command(order_show)
load.add_command(load_add)
load.add_command(load_list)

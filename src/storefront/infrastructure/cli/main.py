import logging

import click

from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
)
from storefront.infrastructure.cli.checkout_commands import checkout
from storefront.infrastructure.cli.order_commands import (
    order_cancel,
    order_list,
    order_show,
    order_track,
)


@click.group()
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug).")
def cli(verbose: int) -> None:
    """Storefront — cart, checkout and order tracking"""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@cli.group()
def cart() -> None:
    """Manage the shopping cart."""


@cli.group()
def order() -> None:
    """Track orders."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
cli.add_command(checkout)
order.add_command(order_cancel)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_track)

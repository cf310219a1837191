"""CLI commands for the shopping cart."""

from __future__ import annotations

import click

from storefront.application.cart import CartAggregate
from storefront.application.dto import CartDTO, cart_to_dto
from storefront.infrastructure import bootstrap
from storefront.infrastructure.cli.notifier import ClickNotifier
from storefront.infrastructure.cli.runtime import require_login, run


def _parse_options(raw: tuple[str, ...]) -> dict[str, str]:
    """Parse ('color=red', 'size=M') into a customization mapping."""
    result: dict[str, str] = {}
    for pair in raw:
        if "=" not in pair:
            raise click.BadParameter(
                f"Invalid option '{pair}'. Expected 'name=value'.", param_hint="--option"
            )
        name, value = pair.split("=", 1)
        result[name.strip()] = value.strip()
    return result


def _display_cart(dto: CartDTO) -> None:
    """Shared formatting for displaying the cart."""
    if not dto.items:
        click.echo("Your cart is empty.")
        return

    click.echo(f"  {'Item':<8} {'Product':<24} {'Qty':>5} {'Stock':>6} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*72}")
    for item in dto.items:
        marker = "" if item.can_increment else " (max)"
        click.echo(
            f"  {item.item_id:<8} {item.product_name:<24} {item.quantity:>5} "
            f"{item.stock:>6} {item.unit_price:>12} {item.item_total:>12}{marker}"
        )
        for name, value in item.customization.items():
            click.echo(f"  {'':<8}   {name}: {value}")
    click.echo(f"  {'-'*72}")
    click.echo(f"  {'Items':<20} {dto.item_count:>52}")
    click.echo(f"  {'Subtotal':<20} {dto.subtotal:>52}")
    click.echo(f"  {'Shipping':<20} {dto.shipping:>52}")
    click.echo(f"  {'Tax (8%)':<20} {dto.tax:>52}")
    click.echo(f"  {'Total':<20} {dto.total:>52}")

    if dto.free_shipping_hint:
        click.echo()
        click.echo(dto.free_shipping_hint)
    for notice in dto.notices:
        click.secho(f"! {notice}", fg="yellow")


def _cart_command(action):
    """Run *action(cart)* against a live cart, then print the cart."""

    async def work(config, client) -> None:
        require_login(config)
        cart = bootstrap.cart_aggregate(client, config, ClickNotifier())
        try:
            if await action(cart):
                _display_cart(cart_to_dto(cart.snapshot, cart.pending))
        finally:
            await cart.close()

    run(work)


@click.command("show")
def cart_show() -> None:
    """Show the cart with totals and stock/price notices."""
    async def action(cart: CartAggregate) -> bool:
        return await cart.refresh()

    _cart_command(action)


@click.command("add")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", default=1, show_default=True, type=int, help="Quantity to add.")
@click.option("--option", "options", multiple=True, help="Customization as 'name=value' (repeatable).")
def cart_add(product_id: str, quantity: int, options: tuple[str, ...]) -> None:
    """Add a product to the cart."""
    customization = _parse_options(options)

    async def action(cart: CartAggregate) -> bool:
        return await cart.add_item(product_id, quantity, customization or None)

    _cart_command(action)


@click.command("update")
@click.option("--item", "item_id", required=True, help="Cart item ID.")
@click.option("--quantity", required=True, type=int, help="New quantity (0 removes the item).")
def cart_update(item_id: str, quantity: int) -> None:
    """Change the quantity of a cart item."""
    async def action(cart: CartAggregate) -> bool:
        # load the stock snapshot the quantity guard relies on
        if not await cart.refresh():
            return False
        return await cart.update_quantity(item_id, quantity)

    _cart_command(action)


@click.command("remove")
@click.option("--item", "item_id", required=True, help="Cart item ID.")
def cart_remove(item_id: str) -> None:
    """Remove an item from the cart."""
    async def action(cart: CartAggregate) -> bool:
        return await cart.remove_item(item_id)

    _cart_command(action)


@click.command("clear")
@click.option("--yes", "assume_yes", is_flag=True, default=False, help="Do not ask for confirmation.")
def cart_clear(assume_yes: bool) -> None:
    """Remove every item from the cart."""
    def confirm() -> bool:
        return assume_yes or click.confirm("Are you sure you want to clear your cart?")

    async def action(cart: CartAggregate) -> bool:
        return await cart.clear(confirm)

    _cart_command(action)

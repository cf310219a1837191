"""CLI commands for order tracking."""

from __future__ import annotations

import click

from storefront.application.dto import OrderDTO, OrderTrackingDTO
from storefront.application.orders import (
    CancelOrderHandler,
    ListOrdersHandler,
    ShowOrderHandler,
    TrackOrderHandler,
)
from storefront.domain.model.order import OrderStatus
from storefront.infrastructure import bootstrap
from storefront.infrastructure.cli.runtime import require_login, run


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.order_number}  (status={dto.status})")
    click.echo(f"Placed:   {dto.ordered_at}")
    click.echo(f"Payment:  {dto.payment_method}")
    click.echo()
    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*56}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<24} {item.quantity:>5} {item.unit_price:>12} {item.line_total:>12}"
        )
    click.echo(f"  {'-'*56}")
    click.echo(f"  {'Subtotal':<30} {dto.subtotal:>25}")
    click.echo(f"  {'Shipping':<30} {dto.shipping:>25}")
    click.echo(f"  {'Tax':<30} {dto.tax:>25}")
    click.echo(f"  {'Order Total':<30} {dto.total:>25}")


def _display_tracking(dto: OrderTrackingDTO) -> None:
    click.echo(f"Order #{dto.order_number}  (status={dto.current_status})")
    if dto.delivery_status:
        click.echo(f"Delivery: {dto.delivery_status}")
    if dto.tracking_number:
        courier = f" ({dto.courier})" if dto.courier else ""
        click.echo(f"Tracking: {dto.tracking_number}{courier}")
    if dto.estimated_delivery:
        click.echo(f"Estimated delivery: {dto.estimated_delivery}")
    click.echo()
    if not dto.events:
        click.echo("No tracking events yet")
        return
    for event in dto.events:
        click.echo(f"  {event.timestamp:<22} {event.status:<18} {event.description}")
        click.echo(f"  {'':<22} {'':<18} Location: {event.location}")


@click.command("list")
@click.option("--status", type=click.Choice([s.value for s in OrderStatus], case_sensitive=False), default=None)
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=10, show_default=True, type=int)
def order_list(status: str | None, page: int, limit: int) -> None:
    """List your orders."""
    async def work(config, client):
        require_login(config)
        handler = ListOrdersHandler(bootstrap.order_gateway(client))
        return await handler.handle(status=status, page=page, limit=limit)

    result = run(work)
    if not result.orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<8} {'Order':<18} {'Status':<12} {'Placed':<22} {'Total':>12}")
    click.echo("-" * 76)
    for o in result.orders:
        click.echo(f"{o.id:<8} {o.order_number:<18} {o.status:<12} {o.ordered_at:<22} {o.total:>12}")
    click.echo(f"Page {result.current_page} of {result.total_pages} ({result.total_items} orders)")


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def order_show(order_id: str) -> None:
    """Show details of an order."""
    async def work(config, client):
        require_login(config)
        return await ShowOrderHandler(bootstrap.order_gateway(client)).handle(order_id)

    _display_order(run(work))


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
@click.option("--reason", default=None, help="Why the order is being cancelled.")
@click.option("--yes", "assume_yes", is_flag=True, default=False, help="Do not ask for confirmation.")
def order_cancel(order_id: str, reason: str | None, assume_yes: bool) -> None:
    """Cancel a pending or confirmed order."""
    if not assume_yes and not click.confirm("Are you sure you want to cancel this order?"):
        return

    async def work(config, client):
        require_login(config)
        await CancelOrderHandler(bootstrap.order_gateway(client)).handle(order_id, reason)

    run(work)
    click.echo(f"Order #{order_id} cancelled.")


@click.command("track")
@click.option("--id", "order_id", required=True, help="Order ID to track.")
def order_track(order_id: str) -> None:
    """Show the delivery status and tracking history of an order."""
    async def work(config, client):
        require_login(config)
        return await TrackOrderHandler(bootstrap.order_gateway(client)).handle(order_id)

    _display_tracking(run(work))

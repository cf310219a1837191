"""CLI command for the two-step checkout (Shipping -> Payment -> Place Order)."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

import click

from storefront.application.checkout import CheckoutFlow, CheckoutTotals, OrderConfirmation
from storefront.domain.model.checkout import (
    CARD_FIELDS,
    SHIPPING_FIELDS,
    CheckoutSession,
    PaymentMethod,
)
from storefront.domain.service.card_validation import error_message
from storefront.infrastructure import bootstrap
from storefront.infrastructure.cli.notifier import ClickNotifier
from storefront.infrastructure.cli.runtime import require_login, run

T = TypeVar("T")

_PROMPTS = {
    "shipping_address": ("Full shipping address", False),
    "shipping_phone": ("Contact phone number", False),
    "card_number": ("Card number", False),
    "card_expiry": ("Expiry (MM/YY)", False),
    "card_cvv": ("CVV", True),
    "card_holder_name": ("Cardholder name", False),
}


async def _ask(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking prompt in a worker thread so the event loop keeps running."""
    return await asyncio.to_thread(func, *args, **kwargs)


async def _prompt_field(session: CheckoutSession, field: str, initial: str | None) -> None:
    """Edit a field, validate it on 'blur', and re-prompt until it is valid."""
    label, hidden = _PROMPTS[field]
    value = initial
    while True:
        if value is None:
            value = await _ask(click.prompt, label, hide_input=hidden)
        session.edit(field, value)
        error = session.blur(field)
        if error is None:
            return
        click.secho(error_message(field, error), fg="red", err=True)
        value = None


async def _reprompt_errors(session: CheckoutSession, fields: tuple[str, ...]) -> None:
    for field in fields:
        if field in session.validation_errors:
            click.secho(error_message(field, session.validation_errors[field]), fg="red", err=True)
            await _prompt_field(session, field, None)


def _display_totals(totals: CheckoutTotals) -> None:
    shipping = "FREE" if totals.shipping_cost.amount == 0 else str(totals.shipping_cost)
    click.echo(f"  {'Items':<20} {totals.item_count:>20}")
    click.echo(f"  {'Subtotal':<20} {str(totals.subtotal):>20}")
    click.echo(f"  {'Shipping':<20} {shipping:>20}")
    click.echo(f"  {'Tax (8%)':<20} {str(totals.tax_amount):>20}")
    click.echo(f"  {'-'*41}")
    click.echo(f"  {'Total':<20} {str(totals.grand_total):>20}")


def _display_confirmation(confirmation: OrderConfirmation) -> None:
    click.echo()
    click.echo(f"Order #{confirmation.order_number} placed  (status={confirmation.order.status.value})")
    _display_totals(confirmation.totals)


@click.command("checkout")
@click.option("--address", default=None, help="Full shipping address.")
@click.option("--phone", default=None, help="Contact phone number.")
@click.option("--notes", default=None, help="Delivery notes.")
@click.option(
    "--payment-method",
    type=click.Choice([m.value for m in PaymentMethod]),
    default=None,
    help="Payment method.",
)
@click.option("--card-number", default=None, help="Card number (card payments only).")
@click.option("--expiry", default=None, help="Card expiry as MM/YY.")
@click.option("--cvv", default=None, help="Card security code.")
@click.option("--holder-name", default=None, help="Name on the card.")
@click.option("--yes", "assume_yes", is_flag=True, default=False, help="Place the order without asking.")
def checkout(
    address: str | None,
    phone: str | None,
    notes: str | None,
    payment_method: str | None,
    card_number: str | None,
    expiry: str | None,
    cvv: str | None,
    holder_name: str | None,
    assume_yes: bool,
) -> None:
    """Check out the current cart.

    Missing details are prompted for.  Card details are validated locally
    and are never sent to the order service.
    """
    card_values = {
        "card_number": card_number,
        "card_expiry": expiry,
        "card_cvv": cvv,
        "card_holder_name": holder_name,
    }

    async def work(config, client) -> None:
        require_login(config)
        notifier = ClickNotifier()
        cart = bootstrap.cart_aggregate(client, config, notifier)
        flow = bootstrap.checkout_flow(cart, client, config, notifier)
        try:
            await _run_checkout(flow)
        finally:
            await cart.close()

    async def _run_checkout(flow: CheckoutFlow) -> None:
        session = await flow.begin()
        if session is None:
            return
        _display_totals(flow.totals())
        click.echo()

        # Step 1: shipping
        await _prompt_field(session, "shipping_address", address)
        await _prompt_field(session, "shipping_phone", phone)
        if notes is None:
            notes_value = await _ask(
                click.prompt, "Additional notes (optional)", default="", show_default=False
            )
        else:
            notes_value = notes
        session.edit("notes", notes_value)
        while not session.continue_to_payment():
            await _reprompt_errors(session, SHIPPING_FIELDS)

        # Step 2: payment
        method = payment_method or await _ask(
            click.prompt,
            "Payment method",
            type=click.Choice([m.value for m in PaymentMethod]),
            default=PaymentMethod.COD.value,
        )
        session.select_payment_method(method)
        if session.payment_method.requires_card:
            for field in CARD_FIELDS:
                await _prompt_field(session, field, card_values[field])

        while True:
            click.echo()
            _display_totals(flow.totals())
            if not assume_yes and not await _ask(click.confirm, "Place order?", default=True):
                flow.cancel()
                click.echo("Checkout cancelled.")
                return

            confirmation = await flow.place_order()
            if confirmation is not None:
                _display_confirmation(confirmation)
                return
            if any(field in session.validation_errors for field in CARD_FIELDS):
                await _reprompt_errors(session, CARD_FIELDS)
                continue
            if assume_yes or not await _ask(click.confirm, "Retry?", default=True):
                flow.cancel()
                raise click.ClickException("Order was not placed.")

    run(work)

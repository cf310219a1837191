"""Tests for the CheckoutFlow application service."""

import asyncio
from datetime import date

import pytest

from storefront.application.cart import CartAggregate
from storefront.application.checkout import CheckoutFlow
from storefront.application.notifications import NotificationLevel
from storefront.domain.exceptions import RemoteServiceError, ValidationError
from storefront.domain.model.checkout import CheckoutStep, PaymentMethod
from storefront.domain.model.value_objects import Money
from storefront.domain.service.card_validation import FieldError
from tests.fakes import (
    AuthFlag,
    FakeCartGateway,
    FakeOrderGateway,
    FakeProduct,
    RecordingNotifier,
)

TODAY = date(2026, 10, 19)


def _setup(lines=(("p1", 1),), authenticated=True):
    cart_gateway = FakeCartGateway([
        FakeProduct("p1", "Desk Lamp", "4999.99", 5),
        FakeProduct("p2", "Notebook", "250", 50),
    ])
    order_gateway = FakeOrderGateway(cart_gateway)
    notifier = RecordingNotifier()
    auth = AuthFlag(authenticated)
    cart = CartAggregate(cart_gateway, auth, notifier)
    flow = CheckoutFlow(cart, order_gateway, auth, notifier)

    async def prepare():
        for product_id, quantity in lines:
            await cart_gateway.add_item(product_id, quantity)

    asyncio.run(prepare())
    cart_gateway.calls.clear()
    return flow, cart_gateway, order_gateway, notifier, auth


def _at_payment(flow, method=PaymentMethod.COD):
    session = asyncio.run(flow.begin())
    session.edit("shipping_address", "12 Main St, Lahore")
    session.edit("shipping_phone", "+92-300-1234567")
    assert session.continue_to_payment()
    session.select_payment_method(method)
    return session


class TestBegin:

    def test_begin_with_items_starts_at_shipping(self):
        flow, _, _, _, _ = _setup()
        session = asyncio.run(flow.begin())
        assert session is flow.session
        assert session.step == CheckoutStep.SHIPPING

    def test_empty_cart_is_turned_away(self):
        flow, _, _, notifier, _ = _setup(lines=())
        assert asyncio.run(flow.begin()) is None
        assert flow.session is None
        assert notifier.titles(NotificationLevel.WARNING) == ["Your cart is empty"]

    def test_unauthenticated_is_turned_away(self):
        flow, cart_gateway, _, notifier, _ = _setup(authenticated=False)
        assert asyncio.run(flow.begin()) is None
        assert cart_gateway.calls == []
        assert notifier.titles() == ["Please log in"]

    def test_totals_reflect_loaded_cart(self):
        flow, _, _, _, _ = _setup()
        asyncio.run(flow.begin())
        totals = flow.totals()
        assert totals.item_count == 1
        assert totals.subtotal == Money.of("4999.99")
        assert totals.shipping_cost == Money.of("500")
        assert totals.grand_total == Money.of("5899.9892")

    def test_cancel_discards_session(self):
        flow, _, _, _, _ = _setup()
        asyncio.run(flow.begin())
        flow.cancel()
        assert flow.session is None


class TestPlaceOrder:

    def test_cod_order_is_placed_and_session_destroyed(self):
        flow, cart_gateway, order_gateway, notifier, _ = _setup()
        _at_payment(flow)
        confirmation = asyncio.run(flow.place_order(TODAY))
        assert confirmation.order_number == "ORD-1001"
        assert flow.session is None
        [request] = order_gateway.requests
        assert request.payment_method == PaymentMethod.COD
        assert request.shipping_address == "12 Main St, Lahore"
        assert "Order placed successfully!" in notifier.titles(NotificationLevel.SUCCESS)
        assert cart_gateway.calls[-1] == "fetch_cart"

    def test_cart_is_refetched_after_order(self):
        flow, _, _, _, _ = _setup()
        _at_payment(flow)
        asyncio.run(flow.place_order(TODAY))
        assert flow.totals().item_count == 0

    def test_totals_are_recomputed_at_submission(self):
        flow, cart_gateway, _, _, _ = _setup()
        _at_payment(flow)
        cart_gateway.server_set_quantity("1", 2)
        confirmation = asyncio.run(flow.place_order(TODAY))
        assert confirmation.totals.item_count == 2
        assert confirmation.totals.subtotal == Money.of("9999.98")
        assert confirmation.totals.shipping_cost == Money.zero()

    def test_invalid_card_blocks_submission(self):
        flow, _, order_gateway, _, _ = _setup()
        session = _at_payment(flow, PaymentMethod.CREDIT_CARD)
        session.edit("card_number", "4532015112830367")
        session.edit("card_expiry", "1228")
        session.edit("card_cvv", "123")
        session.edit("card_holder_name", "A. Khan")
        assert asyncio.run(flow.place_order(TODAY)) is None
        assert order_gateway.requests == []
        assert session.validation_errors == {"card_number": FieldError.FAILED_CHECKSUM}
        assert flow.session is session
        assert session.step == CheckoutStep.PAYMENT

    def test_valid_card_is_submitted_without_card_data(self):
        flow, _, order_gateway, _, _ = _setup()
        session = _at_payment(flow, PaymentMethod.CREDIT_CARD)
        session.edit("card_number", "4532015112830366")
        session.edit("card_expiry", "1228")
        session.edit("card_cvv", "123")
        session.edit("card_holder_name", "A. Khan")
        assert asyncio.run(flow.place_order(TODAY)) is not None
        [request] = order_gateway.requests
        assert request.payment_method == PaymentMethod.CREDIT_CARD
        assert "4532" not in repr(request)

    def test_service_refusal_keeps_session_for_retry(self):
        flow, _, order_gateway, notifier, _ = _setup()
        session = _at_payment(flow)
        order_gateway.fail_with = RemoteServiceError("Insufficient stock for Desk Lamp", 400)
        assert asyncio.run(flow.place_order(TODAY)) is None
        assert flow.session is session
        assert session.step == CheckoutStep.PAYMENT
        assert not flow.is_submitting
        [error] = [n for n in notifier.notifications if n.level == NotificationLevel.ERROR]
        assert error.title == "Failed to place order"
        assert error.detail == "Insufficient stock for Desk Lamp"

        order_gateway.fail_with = None
        assert asyncio.run(flow.place_order(TODAY)) is not None

    def test_cart_emptied_meanwhile_is_caught(self):
        flow, cart_gateway, order_gateway, notifier, _ = _setup()
        _at_payment(flow)
        cart_gateway.server_clear()
        assert asyncio.run(flow.place_order(TODAY)) is None
        assert order_gateway.requests == []
        assert "Your cart is empty" in notifier.titles(NotificationLevel.WARNING)

    def test_logged_out_before_submit(self):
        flow, _, order_gateway, notifier, auth = _setup()
        _at_payment(flow)
        auth.value = False
        assert asyncio.run(flow.place_order(TODAY)) is None
        assert order_gateway.requests == []
        assert notifier.titles(NotificationLevel.ERROR) == ["Please log in to place an order"]

    def test_double_submit_is_ignored(self):
        flow, cart_gateway, order_gateway, _, _ = _setup()
        _at_payment(flow)

        async def scenario():
            gate = asyncio.Event()
            cart_gateway.gates["fetch_cart"] = gate
            first = asyncio.create_task(flow.place_order(TODAY))
            await asyncio.sleep(0)
            submitting = flow.is_submitting
            second = await flow.place_order(TODAY)
            del cart_gateway.gates["fetch_cart"]
            gate.set()
            return submitting, second, await first

        submitting, second, first = asyncio.run(scenario())
        assert submitting is True
        assert second is None
        assert first is not None
        assert len(order_gateway.requests) == 1

    def test_without_session_is_an_error(self):
        flow, _, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="No checkout in progress"):
            asyncio.run(flow.place_order(TODAY))

    def test_from_shipping_step_is_an_error(self):
        flow, _, _, _, _ = _setup()
        asyncio.run(flow.begin())
        with pytest.raises(ValidationError, match="from the SHIPPING step"):
            asyncio.run(flow.place_order(TODAY))

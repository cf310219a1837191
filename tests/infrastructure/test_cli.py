"""End-to-end CLI tests: click commands against the fake store API."""

import threading

import click
import pytest
from click.testing import CliRunner

from storefront.infrastructure import bootstrap
from storefront.infrastructure.cli.main import cli
from storefront.infrastructure.http.api_client import ApiClient
from tests.fakes import FakeProduct, FakeStoreApi

ENV = {"STOREFRONT_API_URL": "http://store.test/api", "STOREFRONT_API_TOKEN": FakeStoreApi.TOKEN}


@pytest.fixture
def api(monkeypatch):
    store = FakeStoreApi([
        FakeProduct("5", "Desk Lamp", "1500.00", 3),
        FakeProduct("6", "Notebook", "250.00", 50),
    ])
    for name in ("STOREFRONT_API_URL", "STOREFRONT_API_TOKEN", "STOREFRONT_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        bootstrap,
        "api_client",
        lambda config: ApiClient(
            config.api_url, token=config.api_token, timeout=config.timeout,
            transport=store.transport(),
        ),
    )
    return store


def invoke(args, env=ENV, input=None):
    return CliRunner().invoke(cli, args, env=env, input=input)


def _fill_cart(api, product_id=5, quantity=1):
    api.lines.append({
        "id": len(api.lines) + 1,
        "productId": product_id,
        "quantity": quantity,
        "priceAtTime": api.products[str(product_id)].price,
        "customization": {},
    })


class TestLogin:

    def test_commands_require_token(self, api):
        result = invoke(["cart", "show"], env={})
        assert result.exit_code == 1
        assert "You need to be logged in" in result.output
        assert api.requests == []

    def test_bad_timeout_is_reported(self, api):
        result = invoke(["cart", "show"], env={**ENV, "STOREFRONT_TIMEOUT": "soon"})
        assert result.exit_code == 1
        assert "STOREFRONT_TIMEOUT" in result.output


class TestCartCommands:

    def test_show_empty_cart(self, api):
        result = invoke(["cart", "show"])
        assert result.exit_code == 0
        assert "Your cart is empty." in result.output

    def test_add_shows_totals(self, api):
        result = invoke(["cart", "add", "--product", "5", "--quantity", "2", "--option", "shade=white"])
        assert result.exit_code == 0, result.output
        assert "Added to cart" in result.output
        assert "Desk Lamp" in result.output
        assert "shade: white" in result.output
        assert "$3000.00" in result.output
        assert "$500.00" in result.output
        assert "$240.00" in result.output
        assert "$3740.00" in result.output
        assert "Add $2000.00 more for free shipping!" in result.output

    def test_add_bad_option(self, api):
        result = invoke(["cart", "add", "--product", "5", "--option", "shade"])
        assert result.exit_code == 2
        assert "Expected 'name=value'" in result.output

    def test_add_failure_is_reported(self, api):
        result = invoke(["cart", "add", "--product", "5", "--quantity", "9"])
        assert result.exit_code == 0
        assert "Failed to add item to cart: Only 3 items available in stock" in result.output

    def test_update_quantity(self, api):
        _fill_cart(api, 6, 1)
        result = invoke(["cart", "update", "--item", "1", "--quantity", "4"])
        assert result.exit_code == 0, result.output
        assert api.lines[0]["quantity"] == 4

    def test_update_above_stock_is_refused(self, api):
        _fill_cart(api, 5, 3)
        result = invoke(["cart", "update", "--item", "1", "--quantity", "4"])
        assert "Max quantity reached" in result.output
        assert api.lines[0]["quantity"] == 3
        assert not any(r.method == "PUT" for r in api.requests)

    def test_update_to_zero_removes(self, api):
        _fill_cart(api, 6, 2)
        result = invoke(["cart", "update", "--item", "1", "--quantity", "0"])
        assert "Item removed from cart" in result.output
        assert api.lines == []

    def test_stock_notice_is_displayed(self, api):
        _fill_cart(api, 5, 3)
        api.products["5"].stock = 1
        result = invoke(["cart", "show"])
        assert "Only 1 of Desk Lamp left in stock (you have 3)" in result.output

    def test_remove(self, api):
        _fill_cart(api, 6, 1)
        result = invoke(["cart", "remove", "--item", "1"])
        assert "Item removed from cart" in result.output
        assert api.lines == []

    def test_clear_declined(self, api):
        _fill_cart(api)
        result = invoke(["cart", "clear"], input="n\n")
        assert result.exit_code == 0
        assert len(api.lines) == 1

    def test_clear_confirmed(self, api):
        _fill_cart(api)
        result = invoke(["cart", "clear", "--yes"])
        assert "Cart cleared successfully" in result.output
        assert api.lines == []

    def test_service_down(self, api):
        api.down = True
        result = invoke(["cart", "show"])
        assert "Failed to load cart: Could not reach the store service" in result.output


CHECKOUT_ARGS = [
    "checkout",
    "--address", "12 Main St, Lahore",
    "--phone", "+92-300-1234567",
    "--notes", "",
]


class TestCheckoutCommand:

    def test_cod_checkout(self, api):
        _fill_cart(api, 5, 2)
        result = invoke(CHECKOUT_ARGS + ["--payment-method", "COD", "--yes"])
        assert result.exit_code == 0, result.output
        assert "Order #ORD-1001 placed  (status=PENDING)" in result.output
        assert "Order placed successfully!" in result.output
        assert api.lines == []
        order = api.orders[1001]
        assert order["payment"]["method"] == "COD"
        assert order["notes"] is None

    def test_card_checkout_never_sends_card_data(self, api):
        _fill_cart(api, 6, 1)
        result = invoke(CHECKOUT_ARGS + [
            "--payment-method", "CREDIT_CARD",
            "--card-number", "4532015112830366",
            "--expiry", "12/99",
            "--cvv", "123",
            "--holder-name", "A. Khan",
            "--yes",
        ])
        assert result.exit_code == 0, result.output
        [order_request] = [r for r in api.requests if r.url.path == "/api/orders"]
        assert b"4532" not in order_request.content
        assert b"cvv" not in order_request.content.lower()

    def test_invalid_card_is_reprompted(self, api):
        _fill_cart(api, 6, 1)
        result = invoke(
            CHECKOUT_ARGS + [
                "--payment-method", "DEBIT_CARD",
                "--card-number", "4532015112830367",
                "--expiry", "12/99",
                "--cvv", "123",
                "--holder-name", "A. Khan",
                "--yes",
            ],
            input="4532015112830366\n",
        )
        assert result.exit_code == 0, result.output
        assert "Card number is not a valid card number" in result.output
        assert 1001 in api.orders

    def test_invalid_phone_is_reprompted(self, api):
        _fill_cart(api, 6, 1)
        args = [
            "checkout", "--address", "12 Main St", "--phone", "12345", "--notes", "",
            "--payment-method", "COD", "--yes",
        ]
        result = invoke(args, input="03001234567\n")
        assert result.exit_code == 0, result.output
        assert "Phone number has an invalid length" in result.output
        assert api.orders[1001]["shippingPhone"] == "03001234567"

    def test_prompts_do_not_block_the_event_loop(self, api, monkeypatch):
        _fill_cart(api, 6, 1)
        prompt_threads = []
        real_prompt = click.prompt

        def recording_prompt(*args, **kwargs):
            prompt_threads.append(threading.current_thread())
            return real_prompt(*args, **kwargs)

        monkeypatch.setattr(click, "prompt", recording_prompt)
        args = [
            "checkout", "--address", "12 Main St", "--notes", "",
            "--payment-method", "COD", "--yes",
        ]
        result = invoke(args, input="03001234567\n")
        assert result.exit_code == 0, result.output
        assert prompt_threads
        assert threading.main_thread() not in prompt_threads
        assert api.orders[1001]["shippingPhone"] == "03001234567"

    def test_empty_cart(self, api):
        result = invoke(CHECKOUT_ARGS + ["--payment-method", "COD", "--yes"])
        assert result.exit_code == 0
        assert "Your cart is empty" in result.output
        assert api.orders == {}

    def test_declined_confirmation(self, api):
        _fill_cart(api)
        result = invoke(CHECKOUT_ARGS + ["--payment-method", "COD"], input="n\n")
        assert "Checkout cancelled." in result.output
        assert api.orders == {}

    def test_free_shipping_in_totals(self, api):
        _fill_cart(api, 6, 20)
        result = invoke(CHECKOUT_ARGS + ["--payment-method", "EASYPAISA", "--yes"])
        assert result.exit_code == 0, result.output
        assert "FREE" in result.output
        assert "$5400.00" in result.output


class TestOrderCommands:

    def _place(self, api, quantity=1):
        _fill_cart(api, 6, quantity)
        result = invoke(CHECKOUT_ARGS + ["--payment-method", "COD", "--yes"])
        assert result.exit_code == 0, result.output

    def test_list_empty(self, api):
        result = invoke(["order", "list"])
        assert "No orders found." in result.output

    def test_list(self, api):
        self._place(api)
        self._place(api, 2)
        result = invoke(["order", "list"])
        assert result.exit_code == 0, result.output
        assert "ORD-1001" in result.output
        assert "ORD-1002" in result.output
        assert "Page 1 of 1 (2 orders)" in result.output

    def test_list_by_status(self, api):
        self._place(api)
        result = invoke(["order", "list", "--status", "delivered"])
        assert "No orders found." in result.output

    def test_show(self, api):
        self._place(api, 2)
        result = invoke(["order", "show", "--id", "1001"])
        assert result.exit_code == 0, result.output
        assert "Order #ORD-1001  (status=PENDING)" in result.output
        assert "Notebook" in result.output
        assert "$1040.00" in result.output
        assert "2026-10-19 14:30 UTC" in result.output

    def test_show_missing(self, api):
        result = invoke(["order", "show", "--id", "42"])
        assert result.exit_code == 1
        assert "Order #42 not found" in result.output

    def test_cancel(self, api):
        self._place(api)
        result = invoke(["order", "cancel", "--id", "1001", "--reason", "Changed my mind", "--yes"])
        assert result.exit_code == 0, result.output
        assert "Order #1001 cancelled." in result.output
        assert api.orders[1001]["status"] == "CANCELLED"
        assert api.orders[1001]["cancelReason"] == "Changed my mind"

    def test_cancel_shipped_order_refused(self, api):
        self._place(api)
        api.orders[1001]["status"] = "SHIPPED"
        result = invoke(["order", "cancel", "--id", "1001", "--yes"])
        assert result.exit_code == 1
        assert "Cannot cancel order ORD-1001 in SHIPPED status" in result.output
        assert not any(r.url.path.endswith("/cancel") for r in api.requests)

    def test_track(self, api):
        self._place(api)
        api.orders[1001]["status"] = "SHIPPED"
        api.orders[1001]["delivery"] = {
            "status": "IN_TRANSIT",
            "trackingNumber": "TCS123456",
            "courierCompany": "TCS",
            "estimatedDelivery": "2026-10-22T00:00:00Z",
        }
        result = invoke(["order", "track", "--id", "1001"])
        assert result.exit_code == 0, result.output
        assert "Order #ORD-1001  (status=SHIPPED)" in result.output
        assert "Delivery: IN_TRANSIT" in result.output
        assert "Tracking: TCS123456 (TCS)" in result.output
        assert "Estimated delivery: 2026-10-22" in result.output
        assert "Order placed" in result.output
        assert "Location: Not specified" in result.output

    def test_track_after_cancel(self, api):
        self._place(api)
        invoke(["order", "cancel", "--id", "1001", "--reason", "Changed my mind", "--yes"])
        result = invoke(["order", "track", "--id", "1001"])
        assert "(status=CANCELLED)" in result.output
        assert "Changed my mind" in result.output

    def test_track_missing(self, api):
        result = invoke(["order", "track", "--id", "42"])
        assert result.exit_code == 1
        assert "Order #42 not found" in result.output

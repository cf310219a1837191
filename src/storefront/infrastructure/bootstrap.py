"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

Settings come from the environment:

- ``STOREFRONT_API_URL``   base URL of the store API
- ``STOREFRONT_API_TOKEN`` bearer token; its presence means "logged in"
- ``STOREFRONT_TIMEOUT``   request timeout in seconds
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from storefront.application.cart import CartAggregate
from storefront.application.checkout import CheckoutFlow
from storefront.application.notifications import Notifier
from storefront.domain.exceptions import ValidationError
from storefront.infrastructure.http.api_client import ApiClient
from storefront.infrastructure.http.cart_gateway import HttpCartGateway
from storefront.infrastructure.http.order_gateway import HttpOrderGateway

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    api_token: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    @property
    def is_authenticated(self) -> bool:
        return bool(self.api_token)

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        raw_timeout = env.get("STOREFRONT_TIMEOUT", "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ValidationError(
                f"STOREFRONT_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
            ) from None
        if timeout <= 0:
            raise ValidationError("STOREFRONT_TIMEOUT must be positive")
        return Settings(
            api_url=env.get("STOREFRONT_API_URL", "").strip() or DEFAULT_API_URL,
            api_token=env.get("STOREFRONT_API_TOKEN", "").strip() or None,
            timeout=timeout,
        )


def settings() -> Settings:
    return Settings.from_env()


def api_client(config: Settings) -> ApiClient:
    return ApiClient(config.api_url, token=config.api_token, timeout=config.timeout)


def cart_aggregate(client: ApiClient, config: Settings, notifier: Notifier) -> CartAggregate:
    return CartAggregate(
        gateway=HttpCartGateway(client),
        is_authenticated=lambda: config.is_authenticated,
        notifier=notifier,
    )


def order_gateway(client: ApiClient) -> HttpOrderGateway:
    return HttpOrderGateway(client)


def checkout_flow(cart: CartAggregate, client: ApiClient, config: Settings, notifier: Notifier) -> CheckoutFlow:
    return CheckoutFlow(
        cart=cart,
        order_gateway=order_gateway(client),
        is_authenticated=lambda: config.is_authenticated,
        notifier=notifier,
    )

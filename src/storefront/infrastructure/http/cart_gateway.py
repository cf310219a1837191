"""HTTP implementation of CartGateway."""

from __future__ import annotations

from storefront.domain.model.cart import CartSnapshot
from storefront.domain.repository.cart_gateway import CartGateway
from storefront.infrastructure.http.api_client import ApiClient, decode
from storefront.infrastructure.http.schemas import (
    AddToCartBody,
    CartPayload,
    UpdateCartItemBody,
    to_wire_id,
)


class HttpCartGateway(CartGateway):

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def fetch_cart(self) -> CartSnapshot:
        envelope = await self._client.get("/cart")
        return decode(CartPayload, envelope.data or {}).to_domain()

    async def add_item(
        self,
        product_id: str,
        quantity: int,
        customization: dict[str, str] | None = None,
    ) -> None:
        body = AddToCartBody(
            product_id=to_wire_id(product_id),
            quantity=quantity,
            customization=customization or None,
        )
        await self._client.post("/cart", body)

    async def update_item(
        self,
        item_id: str,
        quantity: int,
        customization: dict[str, str] | None = None,
    ) -> None:
        body = UpdateCartItemBody(quantity=quantity, customization=customization)
        await self._client.put(f"/cart/{item_id}", body)

    async def remove_item(self, item_id: str) -> None:
        await self._client.delete(f"/cart/{item_id}")

    async def clear(self) -> None:
        await self._client.delete("/cart")

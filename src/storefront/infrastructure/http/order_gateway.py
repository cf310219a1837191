"""HTTP implementation of OrderGateway."""

from __future__ import annotations

from http import HTTPStatus

from storefront.domain.exceptions import EntityNotFoundError, RemoteServiceError
from storefront.domain.model.checkout import OrderRequest
from storefront.domain.model.order import Order, OrderPage, OrderStatus, OrderTracking
from storefront.domain.repository.order_gateway import OrderGateway
from storefront.infrastructure.http.api_client import ApiClient, decode
from storefront.infrastructure.http.schemas import (
    ApiEnvelope,
    CancelOrderBody,
    CreateOrderBody,
    OrderPayload,
    OrderTrackingPayload,
    PlacedOrderPayload,
    order_page,
)


class HttpOrderGateway(OrderGateway):

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def place_order(self, request: OrderRequest) -> Order:
        envelope = await self._client.post("/orders", CreateOrderBody.from_request(request))
        return decode(PlacedOrderPayload, envelope.data).to_domain()

    async def list_orders(
        self,
        status: OrderStatus | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPage:
        params: dict[str, str | int] = {"page": page, "limit": limit}
        if status is not None:
            params["status"] = status.value
        envelope = await self._client.get("/orders/my-orders", params=params)
        orders = [decode(OrderPayload, raw) for raw in envelope.data or []]
        return order_page(orders, envelope.pagination)

    async def get_order(self, order_id: str) -> Order:
        envelope = await self._get_order_resource(order_id, f"/orders/{order_id}")
        return decode(OrderPayload, envelope.data).to_domain()

    async def cancel_order(self, order_id: str, reason: str | None = None) -> None:
        await self._client.put(f"/orders/{order_id}/cancel", CancelOrderBody(reason=reason))

    async def get_tracking(self, order_id: str) -> OrderTracking:
        envelope = await self._get_order_resource(order_id, f"/orders/{order_id}/tracking")
        return decode(OrderTrackingPayload, envelope.data).to_domain()

    async def _get_order_resource(self, order_id: str, path: str) -> ApiEnvelope:
        try:
            return await self._client.get(path)
        except RemoteServiceError as exc:
            if exc.status_code == HTTPStatus.NOT_FOUND:
                raise EntityNotFoundError(f"Order #{order_id} not found") from exc
            raise

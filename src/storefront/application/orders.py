"""Application services: order tracking use cases (list, show, cancel, track)."""

from __future__ import annotations

import logging

from storefront.application.dto import (
    OrderDTO,
    OrderPageDTO,
    OrderTrackingDTO,
    order_to_dto,
    tracking_to_dto,
)
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import OrderStatus
from storefront.domain.repository.order_gateway import OrderGateway

logger = logging.getLogger(__name__)


class ListOrdersHandler:

    def __init__(self, order_gateway: OrderGateway) -> None:
        self._order_gateway = order_gateway

    async def handle(
        self,
        status: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPageDTO:
        if page < 1:
            raise ValidationError("Page must be 1 or greater")
        if limit < 1:
            raise ValidationError("Limit must be 1 or greater")
        try:
            status_filter = OrderStatus(status.upper()) if status else None
        except ValueError:
            raise ValidationError(f"Unknown order status '{status}'") from None

        result = await self._order_gateway.list_orders(status_filter, page, limit)
        return OrderPageDTO(
            orders=[order_to_dto(o) for o in result.orders],
            current_page=result.current_page,
            total_pages=result.total_pages,
            total_items=result.total_items,
        )


class ShowOrderHandler:

    def __init__(self, order_gateway: OrderGateway) -> None:
        self._order_gateway = order_gateway

    async def handle(self, order_id: str) -> OrderDTO:
        return order_to_dto(await self._order_gateway.get_order(order_id))


class CancelOrderHandler:

    def __init__(self, order_gateway: OrderGateway) -> None:
        self._order_gateway = order_gateway

    async def handle(self, order_id: str, reason: str | None = None) -> None:
        """Cancel an order that has not been processed yet.

        Only PENDING and CONFIRMED orders may be cancelled by the customer;
        the status is checked against a fresh read before asking the service.
        """
        order = await self._order_gateway.get_order(order_id)
        order.assert_cancellable()
        await self._order_gateway.cancel_order(order_id, reason)
        logger.info("Order %s cancelled", order.order_number)


class TrackOrderHandler:

    def __init__(self, order_gateway: OrderGateway) -> None:
        self._order_gateway = order_gateway

    async def handle(self, order_id: str) -> OrderTrackingDTO:
        tracking = await self._order_gateway.get_tracking(order_id)
        logger.debug(
            "Order %s has %d tracking event(s)", tracking.order_number, len(tracking.history)
        )
        return tracking_to_dto(tracking)

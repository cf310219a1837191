"""Abstract gateway to the remote order service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.checkout import OrderRequest
from storefront.domain.model.order import Order, OrderPage, OrderStatus, OrderTracking


class OrderGateway(ABC):

    @abstractmethod
    async def place_order(self, request: OrderRequest) -> Order:
        """Finalize checkout and return the created order.

        The service may answer with little more than the order number;
        missing fields come back as defaults.
        """

    @abstractmethod
    async def list_orders(
        self,
        status: OrderStatus | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPage:
        """Return one page of the current customer's orders."""

    @abstractmethod
    async def get_order(self, order_id: str) -> Order:
        """Return a single order, raising EntityNotFoundError if unknown."""

    @abstractmethod
    async def cancel_order(self, order_id: str, reason: str | None = None) -> None:
        """Ask the service to cancel an order."""

    @abstractmethod
    async def get_tracking(self, order_id: str) -> OrderTracking:
        """Return the status history and delivery details of an order."""

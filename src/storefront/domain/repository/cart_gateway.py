"""Abstract gateway to the remote cart service.

Defined in the domain layer so the domain never depends on
infrastructure.  The server holds the authoritative cart; every method
that changes it returns nothing useful on purpose, because callers
re-read the whole cart with ``fetch_cart`` afterwards.

Implementations raise ``RemoteServiceError`` for any failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import CartSnapshot


class CartGateway(ABC):

    @abstractmethod
    async def fetch_cart(self) -> CartSnapshot:
        """Return the authoritative cart."""

    @abstractmethod
    async def add_item(
        self,
        product_id: str,
        quantity: int,
        customization: dict[str, str] | None = None,
    ) -> None:
        """Add a product, or increment it if already in the cart."""

    @abstractmethod
    async def update_item(
        self,
        item_id: str,
        quantity: int,
        customization: dict[str, str] | None = None,
    ) -> None:
        """Set the quantity (and optionally the customization) of a line item."""

    @abstractmethod
    async def remove_item(self, item_id: str) -> None:
        """Remove one line item."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every line item."""

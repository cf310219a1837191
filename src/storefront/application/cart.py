"""Application service: the Cart Aggregate.

``CartAggregate`` keeps the session's view of the cart.  It never edits
line items locally: every mutation is sent to the cart service and then
the whole cart is read back and swapped in.  Whichever server response
completes last is what the user sees.

Every operation needs an authenticated principal.  The check is a
callable handed in by the composition root, so tests can flip it without
touching global state.  When it says no, the operation logs a warning
and does nothing else.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from storefront.application.notifications import LoggingNotifier, Notifier
from storefront.domain.exceptions import RemoteServiceError
from storefront.domain.model.cart import CartSnapshot, LineItem
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.cart_gateway import CartGateway

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 60.0

_EMPTY = CartSnapshot()


class CartAggregate:

    def __init__(
        self,
        gateway: CartGateway,
        is_authenticated: Callable[[], bool],
        notifier: Notifier | None = None,
    ) -> None:
        self._gateway = gateway
        self._is_authenticated = is_authenticated
        self._notifier = notifier or LoggingNotifier()
        self._snapshot: CartSnapshot | None = None
        self._pending: set[str] = set()
        self._poll_task: asyncio.Task[None] | None = None
        self._closed = False

    # --- Reads ----------------------------------------------------------------

    @property
    def snapshot(self) -> CartSnapshot:
        return self._snapshot if self._snapshot is not None else _EMPTY

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def items(self) -> tuple[LineItem, ...]:
        return self.snapshot.items

    @property
    def item_count(self) -> int:
        return self.snapshot.item_count

    @property
    def subtotal(self) -> Money:
        return self.snapshot.subtotal

    @property
    def pending(self) -> frozenset[str]:
        return frozenset(self._pending)

    def is_pending(self, item_id: str) -> bool:
        """True while a change to *item_id* is waiting on the server."""
        return item_id in self._pending

    def can_increment(self, item_id: str) -> bool:
        item = self.snapshot.find_item(item_id)
        return item is not None and not item.at_stock_limit and not self.is_pending(item_id)

    # --- Operations -----------------------------------------------------------

    async def refresh(self, notify_errors: bool = True) -> bool:
        """Re-read the cart from the server and replace the local snapshot."""
        if not self._authorized("refresh the cart"):
            return False
        try:
            snapshot = await self._gateway.fetch_cart()
        except RemoteServiceError as exc:
            if notify_errors:
                self._notifier.error("Failed to load cart", str(exc))
            else:
                logger.warning("Cart refresh failed: %s", exc)
            return False
        return self._apply(snapshot)

    async def add_item(
        self,
        product_id: str,
        quantity: int = 1,
        customization: dict[str, str] | None = None,
    ) -> bool:
        if not self._authorized("add items to the cart"):
            return False
        qty = Quantity(quantity)
        return await self._mutate(
            f"product:{product_id}",
            lambda: self._gateway.add_item(product_id, qty.value, customization),
            failure_title="Failed to add item to cart",
            success_title="Added to cart",
        )

    async def update_quantity(self, item_id: str, new_quantity: int) -> bool:
        """Change a line item's quantity; zero or less removes the item.

        Raising a quantity above the last known stock is refused here
        rather than clamped, mirroring the disabled increment control.
        Lowering it is always allowed, even when stock has since dropped
        below the current quantity.
        """
        if not self._authorized("update the cart"):
            return False
        if new_quantity <= 0:
            return await self.remove_item(item_id)

        item = self.snapshot.find_item(item_id)
        if item is not None and new_quantity > item.quantity and new_quantity > item.unit_stock:
            logger.warning(
                "Refusing quantity %d for item %s: only %d in stock",
                new_quantity, item_id, item.unit_stock,
            )
            self._notifier.warning(
                "Max quantity reached",
                f"Only {item.unit_stock} of {item.product_name} in stock",
            )
            return False

        return await self._mutate(
            item_id,
            lambda: self._gateway.update_item(item_id, new_quantity),
            failure_title="Failed to update quantity",
        )

    async def remove_item(self, item_id: str) -> bool:
        if not self._authorized("remove items from the cart"):
            return False
        return await self._mutate(
            item_id,
            lambda: self._gateway.remove_item(item_id),
            failure_title="Failed to remove item",
            success_title="Item removed from cart",
        )

    async def clear(self, confirm: Callable[[], bool]) -> bool:
        """Empty the cart once the user has confirmed the destructive action."""
        if not self._authorized("clear the cart"):
            return False
        if not confirm():
            logger.info("Clear cart declined by user")
            return False
        return await self._mutate(
            "*",
            self._gateway.clear,
            failure_title="Failed to clear cart",
            success_title="Cart cleared successfully",
        )

    def invalidate(self) -> None:
        """Drop the local snapshot, e.g. on logout."""
        self._snapshot = None

    # --- Polling and teardown -------------------------------------------------

    def start_polling(self, interval: float = POLL_INTERVAL_SECONDS) -> asyncio.Task[None]:
        """Refresh every *interval* seconds until stopped.  Needs a running loop."""
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.get_running_loop().create_task(self._poll(interval))
        return self._poll_task

    async def stop_polling(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def close(self) -> None:
        """Tear down: stop polling and ignore responses still in flight."""
        self._closed = True
        await self.stop_polling()

    async def _poll(self, interval: float) -> None:
        while not self._closed:
            await asyncio.sleep(interval)
            if self._is_authenticated():
                await self.refresh(notify_errors=False)

    # --- Internal helpers -----------------------------------------------------

    def _authorized(self, action: str) -> bool:
        if self._is_authenticated():
            return True
        logger.warning("User must be authenticated to %s", action)
        return False

    def _apply(self, snapshot: CartSnapshot) -> bool:
        if self._closed:
            logger.debug("Discarding cart response received after teardown")
            return False
        self._snapshot = snapshot
        return True

    async def _mutate(
        self,
        key: str,
        call: Callable[[], Awaitable[None]],
        failure_title: str,
        success_title: str | None = None,
    ) -> bool:
        if key in self._pending:
            logger.warning("Ignoring cart change for %s: previous change still in flight", key)
            return False

        self._pending.add(key)
        try:
            await call()
        except RemoteServiceError as exc:
            if not self._closed:
                self._notifier.error(failure_title, str(exc))
            return False
        finally:
            self._pending.discard(key)

        if self._closed:
            logger.debug("Cart changed after teardown; skipping refresh")
            return False
        if success_title:
            self._notifier.success(success_title)
        return await self.refresh()

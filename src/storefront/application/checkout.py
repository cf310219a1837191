"""Application service: Checkout.

Coordinates the CheckoutSession state machine, the live cart and the
order service.  Totals shown at submission time are recomputed from a
fresh cart read, never from numbers captured when checkout began, so a
price or stock change made meanwhile is reflected.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from storefront.application.cart import CartAggregate
from storefront.application.notifications import LoggingNotifier, Notifier
from storefront.domain.exceptions import RemoteServiceError, ValidationError
from storefront.domain.model.cart import CartSnapshot
from storefront.domain.model.checkout import CheckoutSession, CheckoutStep
from storefront.domain.model.order import Order
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.order_gateway import OrderGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutTotals:
    item_count: int
    subtotal: Money
    shipping_cost: Money
    tax_amount: Money
    grand_total: Money

    @staticmethod
    def from_snapshot(snapshot: CartSnapshot) -> CheckoutTotals:
        return CheckoutTotals(
            item_count=snapshot.item_count,
            subtotal=snapshot.subtotal,
            shipping_cost=snapshot.shipping_cost,
            tax_amount=snapshot.tax_amount,
            grand_total=snapshot.grand_total,
        )


@dataclass(frozen=True)
class OrderConfirmation:
    """Handed to the order-confirmation view after a successful submit."""

    order: Order
    totals: CheckoutTotals

    @property
    def order_number(self) -> str:
        return self.order.order_number


class CheckoutFlow:

    def __init__(
        self,
        cart: CartAggregate,
        order_gateway: OrderGateway,
        is_authenticated: Callable[[], bool],
        notifier: Notifier | None = None,
    ) -> None:
        self._cart = cart
        self._order_gateway = order_gateway
        self._is_authenticated = is_authenticated
        self._notifier = notifier or LoggingNotifier()
        self._session: CheckoutSession | None = None
        self._submitting = False

    @property
    def session(self) -> CheckoutSession | None:
        return self._session

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    def totals(self) -> CheckoutTotals:
        """Totals from the cart as it stands right now."""
        return CheckoutTotals.from_snapshot(self._cart.snapshot)

    async def begin(self) -> CheckoutSession | None:
        """Start checkout.  Needs a logged-in user and a non-empty cart."""
        if not self._is_authenticated():
            logger.warning("User must be authenticated to checkout")
            self._notifier.warning("Please log in", "You need to be logged in to checkout.")
            return None

        if not await self._cart.refresh():
            return None
        if self._cart.snapshot.is_empty:
            self._notifier.warning(
                "Your cart is empty",
                "Add some items to your cart before checking out.",
            )
            return None

        self._session = CheckoutSession()
        logger.info("Checkout started with %d item(s)", self._cart.item_count)
        return self._session

    def cancel(self) -> None:
        """Discard the session (the user navigated away)."""
        if self._session is not None:
            logger.info("Checkout abandoned at %s step", self._session.step.value)
        self._session = None

    async def place_order(self, today: date | None = None) -> OrderConfirmation | None:
        """Payment -> Submitted.

        Returns the confirmation on success; the session is gone
        afterwards.  Returns ``None`` when card details are invalid (the
        errors are on the session) or when the service refuses the order
        (a notification is raised and the session stays on the Payment
        step so the user can retry).
        """
        session = self._session
        if session is None:
            raise ValidationError("No checkout in progress")
        if session.step != CheckoutStep.PAYMENT:
            raise ValidationError(
                f"Cannot place order from the {session.step.value} step"
            )

        if not self._is_authenticated():
            logger.warning("User must be authenticated to place an order")
            self._notifier.error("Please log in to place an order")
            return None
        if self._submitting:
            logger.warning("Ignoring place order: a submission is already in flight")
            return None
        if not session.check_payment(today):
            logger.info("Place order blocked by invalid payment details")
            return None

        self._submitting = True
        try:
            if not await self._cart.refresh():
                return None
            snapshot = self._cart.snapshot
            if snapshot.is_empty:
                self._notifier.warning(
                    "Your cart is empty",
                    "Add some items to your cart before checking out.",
                )
                return None
            totals = CheckoutTotals.from_snapshot(snapshot)

            try:
                order = await self._order_gateway.place_order(session.to_order_request())
            except RemoteServiceError as exc:
                self._notifier.error("Failed to place order", str(exc))
                return None
        finally:
            self._submitting = False

        if self._session is session:
            self._session = None
        logger.info("Order %s placed (total %s)", order.order_number, totals.grand_total)
        self._notifier.success("Order placed successfully!", f"Order #{order.order_number}")

        # the service empties the cart once the order exists
        await self._cart.refresh(notify_errors=False)
        return OrderConfirmation(order=order, totals=totals)

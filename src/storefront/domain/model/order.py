"""Order — a placed order as reported by the order service.

Orders are owned by the backend.  This model is a read-only projection
used for the confirmation view and order tracking; the only client-side
rule is which statuses may still be cancelled by the customer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.checkout import PaymentMethod
from storefront.domain.model.value_objects import Money


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value: object) -> OrderStatus | None:
        """Case-insensitive lookup; unknown values yield None."""
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


CANCELLABLE_STATUSES = (OrderStatus.PENDING, OrderStatus.CONFIRMED)


@dataclass(frozen=True)
class OrderLine:
    """Price snapshot of a product at order time."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: Money
    total_price: Money


@dataclass(frozen=True)
class Order:

    id: str
    order_number: str
    status: OrderStatus
    subtotal: Money
    shipping_cost: Money
    tax_amount: Money
    total_amount: Money
    shipping_address: str = ""
    shipping_phone: str = ""
    payment_method: PaymentMethod | None = None
    notes: str | None = None
    items: tuple[OrderLine, ...] = ()
    ordered_at: datetime | None = None

    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    def assert_cancellable(self) -> None:
        if not self.is_cancellable:
            raise ValidationError(
                f"Cannot cancel order {self.order_number} in {self.status.value} status"
            )


@dataclass(frozen=True)
class OrderPage:
    """One page of the customer's order history."""

    orders: tuple[Order, ...] = ()
    current_page: int = 1
    total_pages: int = 1
    total_items: int = 0


@dataclass(frozen=True)
class DeliveryInfo:
    """Courier details attached to a shipped order."""

    status: str | None = None
    tracking_number: str | None = None
    courier_company: str | None = None
    courier_contact: str | None = None
    tracking_url: str | None = None
    estimated_delivery: datetime | None = None
    actual_delivery: datetime | None = None


@dataclass(frozen=True)
class TrackingEvent:
    status: str
    description: str | None = None
    location: str | None = None
    timestamp: datetime | None = None

    @property
    def summary(self) -> str:
        return self.description or f"Order status updated to {self.status}"


@dataclass(frozen=True)
class OrderTracking:
    """Status history of one order, in the order the service reports it."""

    order_number: str
    current_status: OrderStatus | None
    delivery: DeliveryInfo | None = None
    history: tuple[TrackingEvent, ...] = ()


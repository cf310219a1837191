"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry pre-formatted data from the application layer to the CLI
without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from storefront.domain.model.cart import CartSnapshot
from storefront.domain.model.order import Order, OrderTracking


@dataclass(frozen=True)
class CartLineDTO:
    """A single line item as displayed to the user."""

    item_id: str
    product_name: str
    quantity: int
    stock: int
    unit_price: str  # formatted, e.g. "$15.00"
    item_total: str
    customization: dict[str, str]
    can_increment: bool


@dataclass(frozen=True)
class CartDTO:
    items: list[CartLineDTO]
    item_count: int
    subtotal: str
    shipping: str  # "FREE" or formatted fee
    tax: str
    total: str
    free_shipping_hint: str | None
    notices: list[str]


@dataclass(frozen=True)
class OrderLineDTO:
    product_name: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    id: str
    order_number: str
    status: str
    payment_method: str
    items: list[OrderLineDTO]
    subtotal: str
    shipping: str
    tax: str
    total: str
    ordered_at: str
    cancellable: bool


@dataclass(frozen=True)
class OrderPageDTO:
    orders: list[OrderDTO]
    current_page: int
    total_pages: int
    total_items: int


@dataclass(frozen=True)
class TrackingEventDTO:
    status: str
    description: str
    location: str
    timestamp: str


@dataclass(frozen=True)
class OrderTrackingDTO:
    order_number: str
    current_status: str
    delivery_status: str | None
    tracking_number: str | None
    courier: str | None
    estimated_delivery: str | None
    events: list[TrackingEventDTO]


# --- Mapping ------------------------------------------------------------------


def cart_to_dto(snapshot: CartSnapshot, pending: frozenset[str] = frozenset()) -> CartDTO:
    remaining = snapshot.free_shipping_remaining
    hint = None
    if remaining.amount > 0 and not snapshot.is_empty:
        hint = f"Add {remaining} more for free shipping!"

    shipping = snapshot.shipping_cost
    return CartDTO(
        items=[
            CartLineDTO(
                item_id=item.id,
                product_name=item.product_name,
                quantity=item.quantity,
                stock=item.unit_stock,
                unit_price=str(item.price_at_time),
                item_total=str(item.item_total),
                customization=dict(item.customization),
                can_increment=not item.at_stock_limit and item.id not in pending,
            )
            for item in snapshot.items
        ],
        item_count=snapshot.item_count,
        subtotal=str(snapshot.subtotal),
        shipping="FREE" if shipping.amount == 0 else str(shipping),
        tax=str(snapshot.tax_amount),
        total=str(snapshot.grand_total),
        free_shipping_hint=hint,
        notices=[notice.message for notice in snapshot.notices()],
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        order_number=order.order_number,
        status=order.status.value,
        payment_method=order.payment_method.value if order.payment_method else "-",
        items=[
            OrderLineDTO(
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=str(line.unit_price),
                line_total=str(line.total_price),
            )
            for line in order.items
        ],
        subtotal=str(order.subtotal),
        shipping=str(order.shipping_cost),
        tax=str(order.tax_amount),
        total=str(order.total_amount),
        ordered_at=_timestamp(order.ordered_at),
        cancellable=order.is_cancellable,
    )


def tracking_to_dto(tracking: OrderTracking) -> OrderTrackingDTO:
    delivery = tracking.delivery
    estimated = delivery.estimated_delivery if delivery else None
    return OrderTrackingDTO(
        order_number=tracking.order_number,
        current_status=tracking.current_status.value if tracking.current_status else "UNKNOWN",
        delivery_status=delivery.status if delivery else None,
        tracking_number=delivery.tracking_number if delivery else None,
        courier=delivery.courier_company if delivery else None,
        estimated_delivery=estimated.strftime("%Y-%m-%d") if estimated else None,
        events=[
            TrackingEventDTO(
                status=event.status,
                description=event.summary,
                location=event.location or "Not specified",
                timestamp=_timestamp(event.timestamp),
            )
            for event in tracking.history
        ],
    )


def _timestamp(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC") if value else "-"

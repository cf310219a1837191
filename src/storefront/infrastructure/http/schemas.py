"""Wire schemas for the store REST API.

Each Pydantic model mirrors one JSON shape the service sends or accepts.
Field names are snake_case here and camelCase on the wire.  Amounts are
accepted as numbers or strings and only become ``Money`` in
``to_domain``, through the tolerant parser.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from storefront.domain.model.cart import CartSnapshot, LineItem
from storefront.domain.model.checkout import OrderRequest, PaymentMethod
from storefront.domain.model.order import (
    DeliveryInfo,
    Order,
    OrderLine,
    OrderPage,
    OrderStatus,
    OrderTracking,
    TrackingEvent,
)
from storefront.domain.model.value_objects import Money, to_quantity

Amount = Optional[Union[int, float, str]]
WireId = Union[int, str]


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def to_wire_id(value: str) -> WireId:
    """The service keys rows by integer; opaque ids pass through."""
    return int(value) if value.isdigit() else value


_TIMESTAMP = TypeAdapter(datetime)


def to_timestamp(value: Any) -> Optional[datetime]:
    """Lenient timestamp read: anything unparseable is treated as absent."""
    if value is None or value == "":
        return None
    try:
        return _TIMESTAMP.validate_python(value)
    except PydanticValidationError:
        return None


def to_payment_method(value: Any) -> Optional[PaymentMethod]:
    try:
        return PaymentMethod(str(value).strip().upper()) if value else None
    except ValueError:
        return None


# -----------------
# Envelope
# -----------------

class Pagination(WireModel):
    current_page: int = 1
    total_pages: int = 1
    total_items: int = 0
    items_per_page: Optional[int] = None
    has_next_page: bool = False
    has_prev_page: bool = False


class ApiEnvelope(WireModel):
    success: bool
    message: Optional[str] = None
    data: Any = None
    count: Optional[int] = None
    pagination: Optional[Pagination] = None


# -----------------
# Cart
# -----------------

class ProductRef(WireModel):
    id: WireId
    name: str = ""
    price: Amount = None
    discount_price: Amount = None
    stock: Amount = 0


class CartItemPayload(WireModel):
    id: WireId
    product_id: WireId
    quantity: int = Field(..., ge=1)
    price_at_time: Amount = None
    current_price: Amount = None
    customization: Optional[dict[str, Any]] = None
    product: Optional[ProductRef] = None

    def to_domain(self) -> LineItem:
        product = self.product
        price_at_time = Money.parse(self.price_at_time)
        live = self.current_price
        if live is None and product is not None:
            live = product.discount_price if product.discount_price is not None else product.price
        return LineItem(
            id=str(self.id),
            product_id=str(self.product_id),
            product_name=product.name if product else "",
            quantity=self.quantity,
            unit_stock=to_quantity(product.stock) if product else 0,
            price_at_time=price_at_time,
            current_price=Money.parse(live) if live is not None else price_at_time,
            customization={k: str(v) for k, v in (self.customization or {}).items()},
        )


class CartSummaryPayload(WireModel):
    total_items: int = 0
    subtotal: Amount = None


class CartPayload(WireModel):
    cart_id: Optional[WireId] = None
    items: list[CartItemPayload] = []
    summary: Optional[CartSummaryPayload] = None

    def to_domain(self) -> CartSnapshot:
        # summary is informational; totals are recomputed from the items
        return CartSnapshot(
            items=tuple(item.to_domain() for item in self.items),
            cart_id=str(self.cart_id) if self.cart_id is not None else None,
        )


class AddToCartBody(WireModel):
    product_id: WireId
    quantity: int = 1
    customization: Optional[dict[str, str]] = None


class UpdateCartItemBody(WireModel):
    quantity: int
    customization: Optional[dict[str, str]] = None


# -----------------
# Orders
# -----------------

class OrderItemPayload(WireModel):
    product_id: WireId
    product_name: str = ""
    quantity: int
    unit_price: Amount = None
    total_price: Amount = None

    def to_domain(self) -> OrderLine:
        return OrderLine(
            product_id=str(self.product_id),
            product_name=self.product_name,
            quantity=self.quantity,
            unit_price=Money.parse(self.unit_price),
            total_price=Money.parse(self.total_price),
        )


class PaymentPayload(WireModel):
    status: Optional[str] = None
    method: Optional[PaymentMethod] = None


class OrderPayload(WireModel):
    id: WireId
    order_number: str
    status: OrderStatus
    subtotal: Amount = None
    shipping_cost: Amount = None
    tax_amount: Amount = None
    total_amount: Amount = None
    shipping_address: str = ""
    shipping_phone: str = ""
    notes: Optional[str] = None
    items: list[OrderItemPayload] = []
    payment: Optional[PaymentPayload] = None
    ordered_at: Optional[datetime] = None

    def to_domain(self) -> Order:
        return Order(
            id=str(self.id),
            order_number=self.order_number,
            status=self.status,
            subtotal=Money.parse(self.subtotal),
            shipping_cost=Money.parse(self.shipping_cost),
            tax_amount=Money.parse(self.tax_amount),
            total_amount=Money.parse(self.total_amount),
            shipping_address=self.shipping_address,
            shipping_phone=self.shipping_phone,
            payment_method=self.payment.method if self.payment else None,
            notes=self.notes,
            items=tuple(item.to_domain() for item in self.items),
            ordered_at=self.ordered_at,
        )


class PlacedOrderPayload(WireModel):
    """Response to order creation.

    Only ``orderNumber`` is required.  Once the service has accepted the
    order, an unfamiliar status, payment method or date format must not
    turn the result into a failure the customer would retry.
    """

    id: Optional[WireId] = None
    order_number: str
    status: Any = None
    subtotal: Amount = None
    shipping_cost: Amount = None
    tax_amount: Amount = None
    total_amount: Amount = None
    shipping_address: Optional[str] = None
    shipping_phone: Optional[str] = None
    notes: Optional[str] = None
    payment: Any = None
    ordered_at: Any = None

    def to_domain(self) -> Order:
        return Order(
            id=str(self.id) if self.id is not None else self.order_number,
            order_number=self.order_number,
            status=OrderStatus.parse(self.status) or OrderStatus.PENDING,
            subtotal=Money.parse(self.subtotal),
            shipping_cost=Money.parse(self.shipping_cost),
            tax_amount=Money.parse(self.tax_amount),
            total_amount=Money.parse(self.total_amount),
            shipping_address=self.shipping_address or "",
            shipping_phone=self.shipping_phone or "",
            payment_method=to_payment_method(
                self.payment.get("method") if isinstance(self.payment, dict) else None
            ),
            notes=self.notes,
            ordered_at=to_timestamp(self.ordered_at),
        )


def order_page(orders: list[OrderPayload], pagination: Optional[Pagination]) -> OrderPage:
    pagination = pagination or Pagination(total_items=len(orders))
    return OrderPage(
        orders=tuple(o.to_domain() for o in orders),
        current_page=pagination.current_page,
        total_pages=pagination.total_pages,
        total_items=pagination.total_items,
    )


class CreateOrderBody(WireModel):
    """Shipping and payment choice only.  Card data is never sent."""

    shipping_address: str
    shipping_phone: str
    payment_method: PaymentMethod
    notes: Optional[str] = None

    @staticmethod
    def from_request(request: OrderRequest) -> CreateOrderBody:
        return CreateOrderBody(
            shipping_address=request.shipping_address,
            shipping_phone=request.shipping_phone,
            payment_method=request.payment_method,
            notes=request.notes,
        )


class CancelOrderBody(WireModel):
    reason: Optional[str] = None


# -----------------
# Tracking
# -----------------

class DeliveryPayload(WireModel):
    status: Optional[str] = None
    tracking_number: Optional[str] = None
    courier_company: Optional[str] = None
    courier_contact: Optional[str] = None
    tracking_url: Optional[str] = None
    estimated_delivery: Any = None
    actual_delivery: Any = None

    def to_domain(self) -> DeliveryInfo:
        return DeliveryInfo(
            status=self.status,
            tracking_number=self.tracking_number,
            courier_company=self.courier_company,
            courier_contact=self.courier_contact,
            tracking_url=self.tracking_url,
            estimated_delivery=to_timestamp(self.estimated_delivery),
            actual_delivery=to_timestamp(self.actual_delivery),
        )


class TrackingEventPayload(WireModel):
    status: str
    description: Optional[str] = None
    location: Optional[str] = None
    timestamp: Any = None
    created_at: Any = None

    def to_domain(self) -> TrackingEvent:
        return TrackingEvent(
            status=self.status,
            description=self.description or None,
            location=self.location or None,
            timestamp=to_timestamp(self.timestamp) or to_timestamp(self.created_at),
        )


class OrderTrackingPayload(WireModel):
    order_number: str
    current_status: Optional[str] = None
    delivery: Optional[DeliveryPayload] = None
    tracking_history: list[TrackingEventPayload] = []

    def to_domain(self) -> OrderTracking:
        return OrderTracking(
            order_number=self.order_number,
            current_status=OrderStatus.parse(self.current_status) if self.current_status else None,
            delivery=self.delivery.to_domain() if self.delivery else None,
            history=tuple(event.to_domain() for event in self.tracking_history),
        )

"""Cart model — the client-side projection of the server-held cart.

A ``CartSnapshot`` is rebuilt from every successful server read and is
never patched in place.  Every total is derived from the line items on
demand; no stored "total" field is trusted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from storefront.domain.model.value_objects import Money

# ---------------------------------------------------------------------------
# Constants for pricing rules
# ---------------------------------------------------------------------------
FREE_SHIPPING_THRESHOLD = Money(Decimal("5000"))
STANDARD_SHIPPING_FEE = Money(Decimal("500"))
TAX_RATE = Decimal("0.08")


@dataclass(frozen=True)
class LineItem:
    """A product entry in the cart.

    ``price_at_time`` is the unit price captured when the item was added;
    ``current_price`` is the product's live price.  Totals always use the
    captured price.  ``unit_stock`` is the stock snapshot from the last
    fetch, so ``quantity`` may exceed it once other buyers deplete stock.
    """

    id: str
    product_id: str
    product_name: str
    quantity: int
    unit_stock: int
    price_at_time: Money
    current_price: Money
    customization: dict[str, str] = field(default_factory=dict, hash=False)

    @property
    def item_total(self) -> Money:
        return self.price_at_time * self.quantity

    @property
    def at_stock_limit(self) -> bool:
        """True when the increment control must be disabled."""
        return self.quantity >= self.unit_stock

    @property
    def exceeds_stock(self) -> bool:
        return self.quantity > self.unit_stock

    @property
    def has_price_drift(self) -> bool:
        return self.current_price.amount != self.price_at_time.amount


class NoticeKind(Enum):
    STOCK_LIMIT = "STOCK_LIMIT"
    STOCK_EXCEEDED = "STOCK_EXCEEDED"
    PRICE_CHANGED = "PRICE_CHANGED"


@dataclass(frozen=True)
class CartNotice:
    """Non-blocking inline notice about stock or price drift."""

    kind: NoticeKind
    item_id: str
    message: str


@dataclass(frozen=True)
class CartSnapshot:
    """Immutable cart state as of one server read."""

    items: tuple[LineItem, ...] = ()
    cart_id: str | None = None

    # --- Computed totals ------------------------------------------------------

    @property
    def subtotal(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.item_total
        return result

    @property
    def shipping_cost(self) -> Money:
        if self.subtotal >= FREE_SHIPPING_THRESHOLD:
            return Money.zero()
        return STANDARD_SHIPPING_FEE

    @property
    def tax_amount(self) -> Money:
        return self.subtotal * TAX_RATE

    @property
    def grand_total(self) -> Money:
        return self.subtotal + self.shipping_cost + self.tax_amount

    @property
    def free_shipping_remaining(self) -> Money:
        """How much more to spend before shipping becomes free."""
        if self.subtotal >= FREE_SHIPPING_THRESHOLD:
            return Money.zero()
        return FREE_SHIPPING_THRESHOLD - self.subtotal

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    # --- Lookup ---------------------------------------------------------------

    def find_item(self, item_id: str) -> LineItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    # --- Drift ----------------------------------------------------------------

    def notices(self) -> list[CartNotice]:
        """Stock and price drift, in item order.

        Notices never clamp quantities or reprice items; the user decides.
        """
        result: list[CartNotice] = []
        for item in self.items:
            if item.exceeds_stock:
                result.append(CartNotice(
                    NoticeKind.STOCK_EXCEEDED,
                    item.id,
                    f"Only {item.unit_stock} of {item.product_name} left in stock "
                    f"(you have {item.quantity})",
                ))
            elif item.at_stock_limit:
                result.append(CartNotice(
                    NoticeKind.STOCK_LIMIT,
                    item.id,
                    f"Max quantity reached for {item.product_name}",
                ))
            if item.has_price_drift:
                result.append(CartNotice(
                    NoticeKind.PRICE_CHANGED,
                    item.id,
                    f"Price of {item.product_name} changed from "
                    f"{item.price_at_time} to {item.current_price}",
                ))
        return result

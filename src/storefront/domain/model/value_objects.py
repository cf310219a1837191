"""Value Objects and tolerant parsers shared across the domain.

Value Objects are immutable and compared by value, not identity.
The remote service sends amounts either as JSON numbers or as strings
(``"1499.00"``), so every amount that enters the domain goes through
``to_amount`` first.  A malformed amount becomes zero; it never turns
into NaN further down an arithmetic chain.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext

from storefront.domain.exceptions import ValidationError

ZERO = Decimal("0")
CENTS = Decimal("0.01")
# larger readings are treated as malformed
MAX_AMOUNT = Decimal("1e30")


def to_amount(value: int | float | str | Decimal | None) -> Decimal:
    """Parse a numeric or textual amount into a finite, non-negative Decimal.

    Anything that cannot be read as a finite non-negative number
    (``None``, ``""``, ``"abc"``, ``"NaN"``, ``"-3"``) yields ``0``, and
    so does anything above ``MAX_AMOUNT``.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    if not amount.is_finite() or amount < ZERO or amount > MAX_AMOUNT:
        return ZERO
    return amount


def to_quantity(value: int | float | str | None) -> int:
    """Parse a quantity or stock count; invalid or negative input yields 0."""
    return int(to_amount(value))  # truncates fractional input


def format_currency(amount: Decimal | int | float | str) -> str:
    """Fixed two-decimal display form, e.g. ``"1234.50"``.

    Presentation only; never compare the returned strings.  Computed
    totals may exceed ``MAX_AMOUNT`` and are shown as they are.
    """
    if not isinstance(amount, Decimal) or not amount.is_finite() or amount < ZERO:
        amount = to_amount(amount)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return f"{amount.quantize(CENTS):.2f}"


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal so that ``price × quantity`` and ``subtotal × tax rate``
    are exact; nothing is rounded until the value is displayed.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < ZERO:
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        result = self.amount - other.amount
        if result < ZERO:
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(result, self.currency)

    def __mul__(self, factor: int | Decimal) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Can only multiply Money by int or Decimal, got {type(factor).__name__}"
            )
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"${format_currency(self.amount)}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def zero(currency: str = "USD") -> Money:
        return Money(ZERO, currency)

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Strict factory: raises ValidationError on a malformed amount."""
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc
        if not value.is_finite() or value > MAX_AMOUNT:
            raise ValidationError(f"Invalid money amount: {amount!r}")
        return Money(value)

    @staticmethod
    def parse(amount: str | float | int | Decimal | None) -> Money:
        """Tolerant factory for server payloads: bad input becomes zero."""
        return Money(to_amount(amount))


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)

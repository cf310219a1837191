"""CheckoutSession — the in-progress state of a user placing an order.

The session is a plain dataclass with a ``step`` enum.  Whether a
transition is allowed is decided by the pure guard functions at the
bottom of this module (same session in, same decision out); the session
methods only apply their verdict.

Lifecycle: created when checkout begins with a non-empty cart, discarded
when the order is placed or the user walks away.  Never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.service.card_validation import (
    FieldError,
    format_card_number,
    format_expiry,
    validate_card_number,
    validate_cvv,
    validate_expiry,
    validate_phone,
    validate_required,
)


class CheckoutStep(Enum):
    SHIPPING = "SHIPPING"
    PAYMENT = "PAYMENT"


class PaymentMethod(Enum):
    COD = "COD"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    EASYPAISA = "EASYPAISA"
    JAZZCASH = "JAZZCASH"
    BANK_TRANSFER = "BANK_TRANSFER"

    @property
    def requires_card(self) -> bool:
        return self in (PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD)


@dataclass
class CardDetails:
    number: str = ""
    expiry: str = ""
    cvv: str = ""
    holder_name: str = ""


@dataclass(frozen=True)
class OrderRequest:
    """What is sent to the order endpoint.  Card data is never included."""

    shipping_address: str
    shipping_phone: str
    payment_method: PaymentMethod
    notes: str | None = None


SHIPPING_FIELDS = ("shipping_address", "shipping_phone")
CARD_FIELDS = ("card_number", "card_expiry", "card_cvv", "card_holder_name")

# field name -> (owner, attribute, keystroke formatter)
_EDITABLE_FIELDS = {
    "shipping_address": (None, "shipping_address", None),
    "shipping_phone": (None, "shipping_phone", None),
    "notes": (None, "notes", None),
    "card_number": ("card", "number", format_card_number),
    "card_expiry": ("card", "expiry", format_expiry),
    "card_cvv": ("card", "cvv", None),
    "card_holder_name": ("card", "holder_name", None),
}


@dataclass
class CheckoutSession:
    step: CheckoutStep = CheckoutStep.SHIPPING
    shipping_address: str = ""
    shipping_phone: str = ""
    notes: str = ""
    payment_method: PaymentMethod = PaymentMethod.COD
    card: CardDetails = field(default_factory=CardDetails)
    validation_errors: dict[str, FieldError] = field(default_factory=dict)

    # --- Field edits ----------------------------------------------------------

    def edit(self, field_name: str, value: str) -> str:
        """Apply a keystroke-level edit and clear that field's error.

        Card number and expiry are reformatted on the way in.  Returns the
        value actually stored.
        """
        try:
            owner, attr, formatter = _EDITABLE_FIELDS[field_name]
        except KeyError:
            raise ValidationError(f"Unknown checkout field '{field_name}'") from None

        stored = formatter(value) if formatter else value
        target = self.card if owner == "card" else self
        setattr(target, attr, stored)
        self.validation_errors.pop(field_name, None)
        return stored

    def blur(self, field_name: str, today: date | None = None) -> FieldError | None:
        """Validate a single field when it loses focus."""
        error = validate_field(self, field_name, today)
        if error is None:
            self.validation_errors.pop(field_name, None)
        else:
            self.validation_errors[field_name] = error
        return error

    def select_payment_method(self, method: PaymentMethod | str) -> None:
        try:
            self.payment_method = PaymentMethod(method)
        except ValueError:
            raise ValidationError(f"Unsupported payment method '{method}'") from None
        if not self.payment_method.requires_card:
            for name in CARD_FIELDS:
                self.validation_errors.pop(name, None)

    # --- Transitions ----------------------------------------------------------

    def continue_to_payment(self) -> bool:
        """Shipping -> Payment.  Denied (with errors set) while invalid."""
        if self.step != CheckoutStep.SHIPPING:
            raise ValidationError(
                f"Cannot continue to payment from the {self.step.value} step"
            )
        errors = shipping_errors(self)
        self._replace_errors(SHIPPING_FIELDS, errors)
        if errors:
            return False
        self.step = CheckoutStep.PAYMENT
        return True

    def back_to_shipping(self) -> None:
        """Payment -> Shipping.  Always permitted."""
        self.step = CheckoutStep.SHIPPING

    def check_payment(self, today: date | None = None) -> bool:
        """Run the Place Order gate, recording any card errors."""
        errors = payment_errors(self, today)
        self._replace_errors(CARD_FIELDS, errors)
        return not errors

    # --- Submission -----------------------------------------------------------

    def to_order_request(self) -> OrderRequest:
        return OrderRequest(
            shipping_address=self.shipping_address.strip(),
            shipping_phone=self.shipping_phone.strip(),
            payment_method=self.payment_method,
            notes=self.notes.strip() or None,
        )

    # --- Internal helpers -----------------------------------------------------

    def _replace_errors(self, fields: tuple[str, ...], errors: dict[str, FieldError]) -> None:
        for name in fields:
            self.validation_errors.pop(name, None)
        self.validation_errors.update(errors)


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


def validate_field(
    session: CheckoutSession, field_name: str, today: date | None = None
) -> FieldError | None:
    card = session.card
    if field_name == "shipping_address":
        return validate_required(session.shipping_address)
    if field_name == "shipping_phone":
        return validate_phone(session.shipping_phone)
    if field_name == "card_number":
        return validate_card_number(card.number)
    if field_name == "card_expiry":
        return validate_expiry(card.expiry, today)
    if field_name == "card_cvv":
        return validate_cvv(card.cvv)
    if field_name == "card_holder_name":
        return validate_required(card.holder_name)
    return None


def shipping_errors(session: CheckoutSession) -> dict[str, FieldError]:
    return _collect(session, SHIPPING_FIELDS)


def payment_errors(
    session: CheckoutSession, today: date | None = None
) -> dict[str, FieldError]:
    """COD, wallets and bank transfer need nothing more; cards need all four fields."""
    if not session.payment_method.requires_card:
        return {}
    return _collect(session, CARD_FIELDS, today)


def can_continue(session: CheckoutSession) -> bool:
    return session.step == CheckoutStep.SHIPPING and not shipping_errors(session)


def can_place_order(session: CheckoutSession, today: date | None = None) -> bool:
    return session.step == CheckoutStep.PAYMENT and not payment_errors(session, today)


def _collect(
    session: CheckoutSession, fields: tuple[str, ...], today: date | None = None
) -> dict[str, FieldError]:
    errors: dict[str, FieldError] = {}
    for name in fields:
        error = validate_field(session, name, today)
        if error is not None:
            errors[name] = error
    return errors

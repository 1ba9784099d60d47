"""Payment validation utilities."""
from decimal import Decimal
from typing import Optional

from app.core.errors import PaymentValidationError
from app.schemas.payment import PaymentCreate, PaymentUpdate


def validate_amount(amount: Optional[Decimal]) -> None:
    """Amount must be a finite, non-negative decimal."""
    if amount is None:
        raise PaymentValidationError("Payment amount is required")
    if not amount.is_finite():
        raise PaymentValidationError(f"Payment amount is not a number: {amount}")
    if amount < 0:
        raise PaymentValidationError(f"Payment has negative amount: {amount}")


def validate_payer_name(payer_name: Optional[str]) -> None:
    if payer_name is None or not payer_name.strip():
        raise PaymentValidationError("Payer name is required")


def validate_new_payment(payment_in: PaymentCreate) -> None:
    """
    Validate a payment before it is recorded.

    Rules:
    - payer name must be present and not blank
    - payment date must be present
    - amount must be non-negative
    """
    validate_payer_name(payment_in.payer_name)
    if payment_in.payment_date is None:
        raise PaymentValidationError("Payment date is required")
    validate_amount(payment_in.amount)


def validate_payment_update(payment_in: PaymentUpdate) -> None:
    """Validate only the fields an update actually sets."""
    fields = payment_in.model_fields_set
    if "payer_name" in fields:
        validate_payer_name(payment_in.payer_name)
    if "payment_date" in fields and payment_in.payment_date is None:
        raise PaymentValidationError("Payment date cannot be cleared")
    if "amount" in fields:
        validate_amount(payment_in.amount)
    if "customer_event_id" in fields and not (payment_in.customer_event_id or "").strip():
        raise PaymentValidationError("Customer event is required")
    for name in ("method", "status"):
        if name in fields and getattr(payment_in, name) is None:
            raise PaymentValidationError(f"Payment {name} cannot be cleared")

"""
Payment model - one money movement against a customer event.

Design principles:
- Amounts are Decimal, never float
- Immutable once created; edits go through copy_with and keep
  payment_id and created_at
- status is recorded by the user at entry time and is independent of
  the reconciliation status derived for the event
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator

from app.models.base import DomainModel, _utcnow, to_decimal


class PaymentMethod(str, Enum):
    CASH = "cash"
    CHEQUE = "cheque"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CARD = "card"
    NETBANKING = "netbanking"
    OTHER = "other"
    ADJUSTMENT = "adjustment"

    @property
    def display_name(self) -> str:
        return _METHOD_LABELS[self]


_METHOD_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.CHEQUE: "Cheque",
    PaymentMethod.BANK_TRANSFER: "Bank Transfer",
    PaymentMethod.UPI: "UPI",
    PaymentMethod.CARD: "Card",
    PaymentMethod.NETBANKING: "Net Banking",
    PaymentMethod.OTHER: "Other",
    PaymentMethod.ADJUSTMENT: "Adjustment",
}


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    FULL = "full"

    @property
    def display_name(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    PaymentStatus.PENDING: "Pending",
    PaymentStatus.PARTIAL: "Partial Payment",
    PaymentStatus.FULL: "Full Payment",
}


class Payment(DomainModel):
    """
    A single payment applied against one customer event.

    Invariants:
    - amount >= 0
    - payment_id and created_at never change across updates
    """

    payment_id: str = Field(validation_alias=AliasChoices("payment_id", "_id"))
    customer_event_id: str
    payer_name: str
    method: PaymentMethod = PaymentMethod.CASH
    amount: Decimal = Field(ge=0)
    status: PaymentStatus = PaymentStatus.PENDING
    reference: Optional[str] = None
    notes: Optional[str] = None
    payment_date: date
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: Optional[datetime] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Any:
        return to_decimal(value)

    @field_validator("payment_date", mode="before")
    @classmethod
    def _date_only(cls, value: Any) -> Any:
        # Mongo hands dates back as datetimes
        if isinstance(value, datetime):
            return value.date()
        return value

    def copy_with(self, **changes: Any) -> "Payment":
        changes.pop("payment_id", None)
        changes.pop("created_at", None)
        return super().copy_with(**changes)

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from app.models.payment import Payment, PaymentMethod, PaymentStatus


class PaymentBase(BaseModel):
    customer_event_id: str
    payer_name: Optional[str] = None
    method: PaymentMethod = PaymentMethod.CASH
    amount: Optional[Decimal] = None
    status: PaymentStatus = PaymentStatus.PENDING
    reference: Optional[str] = None
    notes: Optional[str] = None
    payment_date: Optional[date] = None

    model_config = {"from_attributes": True}


class PaymentCreate(PaymentBase):
    """Required fields are checked by validate_new_payment so the API reports them uniformly."""
    pass


class PaymentUpdate(BaseModel):
    """Partial update. Only fields explicitly sent are applied."""
    customer_event_id: Optional[str] = None
    payer_name: Optional[str] = None
    method: Optional[PaymentMethod] = None
    amount: Optional[Decimal] = None
    status: Optional[PaymentStatus] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    payment_date: Optional[date] = None


class PaymentResponse(BaseModel):
    payment_id: str
    customer_event_id: str
    payer_name: str
    method: PaymentMethod
    method_display: str
    amount: Decimal
    status: PaymentStatus
    status_display: str
    reference: Optional[str] = None
    notes: Optional[str] = None
    payment_date: date
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_payment(cls, payment: Payment) -> "PaymentResponse":
        return cls(
            **payment.model_dump(),
            method_display=payment.method.display_name,
            status_display=payment.status.display_name,
        )

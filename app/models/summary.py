"""
Financial summary model - derived per-event payment picture.

Never persisted. Rebuilt from a CustomerEvent and its payments every time
it is requested, so nothing here is ever stale or partially updated.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from pydantic import NonNegativeInt, computed_field, model_validator

from app.core.config import settings
from app.models.base import DomainModel
from app.models.customer_event import EventLifecycle
from app.models.payment import Payment


class ReconciliationStatus(str, Enum):
    NOT_STARTED = "not_started"
    PARTIAL = "partial"
    COMPLETED = "completed"
    OVERPAID = "overpaid"
    CANCELLED = "cancelled"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class FinancialSummary(DomainModel):
    """
    Immutable reconciliation of one customer event.

    Invariants:
    - total_paid == sum(p.amount for p in payments)
    - remaining_amount == agreed_amount - total_paid
    - is_overpaid == (remaining_amount < 0)
    """

    customer_event_id: str
    customer_name: str
    event_name: str
    agreed_amount: Decimal
    payments: Tuple[Payment, ...] = ()
    total_paid: Decimal
    remaining_amount: Decimal
    is_overpaid: bool
    last_payment_date: Optional[date] = None
    status: ReconciliationStatus
    event_status: EventLifecycle = EventLifecycle.ACTIVE

    @model_validator(mode="after")
    def _check_reconciles(self) -> "FinancialSummary":
        paid = sum((p.amount for p in self.payments), Decimal("0"))
        if paid != self.total_paid:
            raise ValueError(f"total_paid {self.total_paid} does not match payments sum {paid}")
        if self.remaining_amount != self.agreed_amount - self.total_paid:
            raise ValueError("remaining_amount must equal agreed_amount - total_paid")
        if self.is_overpaid != (self.remaining_amount < 0):
            raise ValueError("is_overpaid must reflect a negative remaining_amount")
        return self

    @computed_field
    @property
    def payment_count(self) -> NonNegativeInt:
        return len(self.payments)

    @computed_field
    @property
    def payment_progress(self) -> Decimal:
        """Share of the agreed amount received, clamped to [0, 1]. Display only."""
        if self.agreed_amount <= 0:
            return Decimal("0")
        ratio = self.total_paid / self.agreed_amount
        return max(Decimal("0"), min(Decimal("1"), ratio))

    def remaining_display_text(self, currency_symbol: str | None = None) -> str:
        symbol = settings.CURRENCY_SYMBOL if currency_symbol is None else currency_symbol
        if self.is_overpaid:
            return f"Overpaid by {symbol}{-self.remaining_amount:.2f}"
        if self.remaining_amount > 0:
            return f"Remaining {symbol}{self.remaining_amount:.2f}"
        return "Fully Paid"


class PaymentStatistics(DomainModel):
    """Totals across a set of summaries, as shown on the dashboard."""

    total_events: int = 0
    completed_events: int = 0
    partial_events: int = 0
    overpaid_events: int = 0
    not_started_events: int = 0
    cancelled_events: int = 0
    total_agreed_amount: Decimal = Decimal("0")
    total_paid_amount: Decimal = Decimal("0")
    total_remaining_amount: Decimal = Decimal("0")
    completion_percentage: Decimal = Decimal("0")

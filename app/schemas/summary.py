from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from app.models.customer_event import EventLifecycle
from app.models.summary import FinancialSummary, PaymentStatistics, ReconciliationStatus
from app.schemas.payment import PaymentResponse


class FinancialSummaryResponse(BaseModel):
    customer_event_id: str
    customer_name: str
    event_name: str
    agreed_amount: Decimal
    total_paid: Decimal
    remaining_amount: Decimal
    is_overpaid: bool
    payment_progress: Decimal
    last_payment_date: Optional[date] = None
    status: ReconciliationStatus
    status_display: str
    remaining_display: str
    event_status: EventLifecycle
    payments: List[PaymentResponse] = []

    @classmethod
    def from_summary(cls, summary: FinancialSummary) -> "FinancialSummaryResponse":
        return cls(
            customer_event_id=summary.customer_event_id,
            customer_name=summary.customer_name,
            event_name=summary.event_name,
            agreed_amount=summary.agreed_amount,
            total_paid=summary.total_paid,
            remaining_amount=summary.remaining_amount,
            is_overpaid=summary.is_overpaid,
            payment_progress=summary.payment_progress,
            last_payment_date=summary.last_payment_date,
            status=summary.status,
            status_display=summary.status.display_name,
            remaining_display=summary.remaining_display_text(),
            event_status=summary.event_status,
            payments=[PaymentResponse.from_payment(p) for p in summary.payments],
        )


class DashboardResponse(BaseModel):
    """Board snapshot. refresh_error is set when the latest refresh failed and older data is shown."""
    statistics: PaymentStatistics
    summaries: List[FinancialSummaryResponse]
    refreshed_at: Optional[datetime] = None
    refresh_error: Optional[str] = None

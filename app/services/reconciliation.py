"""
Payment reconciliation - pure functions, no I/O.

Core algorithm:
1. Group payments by the customer event they apply to
2. Reduce each group to (total paid, last payment date)
3. Classify the event against its agreed amount
4. Freeze the result into a FinancialSummary

All arithmetic is Decimal; equality checks are exact.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence

from app.core.logging import get_logger
from app.models.customer_event import CustomerEvent, EventLifecycle
from app.models.payment import Payment
from app.models.summary import FinancialSummary, PaymentStatistics, ReconciliationStatus

logger = get_logger(__name__)

ZERO = Decimal("0")


class PaymentTotals(NamedTuple):
    total_paid: Decimal
    last_payment_date: Optional[date]


def aggregate_payments(payments: Iterable[Payment]) -> PaymentTotals:
    """Sum amounts and find the most recent payment date."""
    total = ZERO
    latest: Optional[date] = None
    for payment in payments:
        total += payment.amount
        if latest is None or payment.payment_date > latest:
            latest = payment.payment_date
    return PaymentTotals(total, latest)


def group_payments_by_event(payments: Iterable[Payment]) -> Dict[str, List[Payment]]:
    """
    Bucket payments by customer_event_id.

    Dict order is first-seen event order; each bucket keeps input order.
    """
    grouped: Dict[str, List[Payment]] = {}
    for payment in payments:
        grouped.setdefault(payment.customer_event_id, []).append(payment)
    return grouped


def classify_status(
    agreed_amount: Decimal,
    total_paid: Decimal,
    event_status: EventLifecycle,
) -> ReconciliationStatus:
    # Order matters: a cancelled event with no payments is cancelled, not not_started.
    if event_status == EventLifecycle.CANCELLED:
        return ReconciliationStatus.CANCELLED
    if total_paid == 0:
        return ReconciliationStatus.NOT_STARTED
    if total_paid < agreed_amount:
        return ReconciliationStatus.PARTIAL
    if total_paid == agreed_amount:
        return ReconciliationStatus.COMPLETED
    return ReconciliationStatus.OVERPAID


def build_summary(event: CustomerEvent, payments: Iterable[Payment]) -> FinancialSummary:
    """Reconcile one event. Payments belonging to other events are skipped."""
    matched = tuple(p for p in payments if p.customer_event_id == event.event_id)
    totals = aggregate_payments(matched)
    remaining = event.agreed_amount - totals.total_paid

    return FinancialSummary(
        customer_event_id=event.event_id,
        customer_name=event.customer_name,
        event_name=event.event_name,
        agreed_amount=event.agreed_amount,
        payments=matched,
        total_paid=totals.total_paid,
        remaining_amount=remaining,
        is_overpaid=totals.total_paid > event.agreed_amount,
        last_payment_date=totals.last_payment_date,
        status=classify_status(event.agreed_amount, totals.total_paid, event.status),
        event_status=event.status,
    )


def build_summaries(
    events: Sequence[CustomerEvent],
    payments: Iterable[Payment],
) -> List[FinancialSummary]:
    """One summary per event, in the order the events were given."""
    grouped = group_payments_by_event(payments)

    summaries = [build_summary(event, grouped.pop(event.event_id, ())) for event in events]

    if grouped:
        logger.debug(
            "orphaned_payments_ignored",
            event_ids=list(grouped),
            payment_count=sum(len(v) for v in grouped.values()),
        )
    return summaries


def compute_statistics(summaries: Iterable[FinancialSummary]) -> PaymentStatistics:
    """
    Dashboard totals.

    Cancelled events are counted and their payments stay in the paid total,
    but their agreed amount is neither owed nor a completion target.
    Outstanding only counts positive remaining balances.
    """
    counts = {status: 0 for status in ReconciliationStatus}
    total_events = 0
    agreed = ZERO
    paid = ZERO
    paid_on_open = ZERO
    outstanding = ZERO

    for summary in summaries:
        total_events += 1
        counts[summary.status] += 1
        paid += summary.total_paid
        if summary.status == ReconciliationStatus.CANCELLED:
            continue
        agreed += summary.agreed_amount
        paid_on_open += summary.total_paid
        if summary.remaining_amount > 0:
            outstanding += summary.remaining_amount

    completion = ZERO
    if agreed > 0:
        completion = (paid_on_open / agreed * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    return PaymentStatistics(
        total_events=total_events,
        completed_events=counts[ReconciliationStatus.COMPLETED],
        partial_events=counts[ReconciliationStatus.PARTIAL],
        overpaid_events=counts[ReconciliationStatus.OVERPAID],
        not_started_events=counts[ReconciliationStatus.NOT_STARTED],
        cancelled_events=counts[ReconciliationStatus.CANCELLED],
        total_agreed_amount=agreed,
        total_paid_amount=paid,
        total_remaining_amount=outstanding,
        completion_percentage=completion,
    )

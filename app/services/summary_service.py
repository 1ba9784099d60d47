import asyncio
from typing import List, Optional, Tuple

from app.core.errors import CustomerEventNotFoundError
from app.models.customer_event import CustomerEvent
from app.models.payment import Payment
from app.models.summary import FinancialSummary, PaymentStatistics
from app.repositories.interfaces import CustomerEventStore, PaymentStore
from app.schemas.criteria import FilterCriteria
from app.services.filter_pipeline import SUMMARY_SHAPE, filter_and_sort
from app.services.reconciliation import build_summaries, build_summary, compute_statistics


class SummaryService:
    """
    Builds per-event financial summaries from a fresh store snapshot.

    Nothing is cached: each call reads both collections once and rebuilds.
    Store failures propagate unchanged so callers can tell "no data" from
    "fetch failed".
    """

    def __init__(self, payments: PaymentStore, events: CustomerEventStore) -> None:
        self._payments = payments
        self._events = events

    async def snapshot(self) -> Tuple[List[CustomerEvent], List[Payment]]:
        events, payments = await asyncio.gather(
            self._events.list_customer_events(),
            self._payments.list_payments(),
        )
        return events, payments

    async def build_summaries(self) -> List[FinancialSummary]:
        events, payments = await self.snapshot()
        return build_summaries(events, payments)

    async def list_summaries(self, criteria: Optional[FilterCriteria] = None) -> List[FinancialSummary]:
        summaries = await self.build_summaries()
        return filter_and_sort(summaries, criteria, SUMMARY_SHAPE)

    async def get_summary(self, event_id: str) -> FinancialSummary:
        """
        Raises:
            CustomerEventNotFoundError: If the event does not exist.
        """
        event = await self._events.get_customer_event(event_id)
        if event is None:
            raise CustomerEventNotFoundError(event_id)
        payments = await self._payments.list_payments()
        return build_summary(event, payments)

    async def get_statistics(self) -> PaymentStatistics:
        return compute_statistics(await self.build_summaries())

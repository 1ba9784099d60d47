"""
SummaryBoard - last successfully built summaries for dashboard surfaces.

Readers that serve the board call refresh() per request, since customer
events and other workers' writes never reach the in-process bus. The bus
only marks the board stale so refresh_if_stale() can rebuild early. A
refresh replaces the whole snapshot at once; a failed refresh keeps what
was shown before and records the error.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from app.core.errors import StoreUnavailableError
from app.core.events import ANY_EVENT, DataChangeBus
from app.core.logging import get_logger
from app.models.summary import FinancialSummary, PaymentStatistics
from app.services.reconciliation import compute_statistics
from app.services.summary_service import SummaryService

logger = get_logger(__name__)


class SummaryBoard:
    def __init__(self, service: SummaryService, bus: DataChangeBus) -> None:
        self._service = service
        self._bus = bus
        self.summaries: Tuple[FinancialSummary, ...] = ()
        self.statistics: PaymentStatistics = PaymentStatistics()
        self.refreshed_at: Optional[datetime] = None
        self.last_error: Optional[StoreUnavailableError] = None
        self.stale = True

    @property
    def has_data(self) -> bool:
        return self.refreshed_at is not None

    def attach(self) -> None:
        self._bus.subscribe(ANY_EVENT, self._on_change)

    def detach(self) -> None:
        self._bus.unsubscribe(ANY_EVENT, self._on_change)

    def _on_change(self, event_type: str, payload: Dict[str, Any]) -> None:
        self.stale = True

    async def refresh(self) -> Tuple[FinancialSummary, ...]:
        """
        Rebuild from the store.

        Raises:
            StoreUnavailableError: The previous snapshot is left untouched.
        """
        try:
            summaries = tuple(await self._service.build_summaries())
        except StoreUnavailableError as exc:
            self.last_error = exc
            logger.warning("summary_board_refresh_failed", error=str(exc), has_data=self.has_data)
            raise

        self.summaries = summaries
        self.statistics = compute_statistics(summaries)
        self.refreshed_at = datetime.now(timezone.utc)
        self.last_error = None
        self.stale = False
        logger.info("summary_board_refreshed", events=len(summaries))
        return summaries

    async def refresh_if_stale(self) -> Tuple[FinancialSummary, ...]:
        if self.stale:
            return await self.refresh()
        return self.summaries

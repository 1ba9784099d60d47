from typing import List
from fastapi import APIRouter, Depends
from app.api.deps import get_filter_criteria, get_summary_service
from app.models.summary import PaymentStatistics
from app.schemas.criteria import FilterCriteria
from app.schemas.summary import FinancialSummaryResponse
from app.services.summary_service import SummaryService

router = APIRouter()

@router.get("/", response_model=List[FinancialSummaryResponse])
async def list_summaries(
    criteria: FilterCriteria = Depends(get_filter_criteria),
    service: SummaryService = Depends(get_summary_service)
):
    """Per-event payment summaries (search, filter, sort)"""
    summaries = await service.list_summaries(criteria)
    return [FinancialSummaryResponse.from_summary(s) for s in summaries]

@router.get("/statistics", response_model=PaymentStatistics)
async def get_statistics(service: SummaryService = Depends(get_summary_service)):
    """Totals across all customer events"""
    return await service.get_statistics()

@router.get("/{event_id}", response_model=FinancialSummaryResponse)
async def get_summary(
    event_id: str,
    service: SummaryService = Depends(get_summary_service)
):
    """Payment summary for one customer event"""
    return FinancialSummaryResponse.from_summary(await service.get_summary(event_id))

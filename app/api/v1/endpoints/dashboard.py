from fastapi import APIRouter, Depends
from app.api.deps import get_summary_board
from app.core.errors import StoreUnavailableError
from app.schemas.summary import DashboardResponse, FinancialSummaryResponse
from app.services.summary_board import SummaryBoard

router = APIRouter()

@router.get("/", response_model=DashboardResponse)
async def get_dashboard(board: SummaryBoard = Depends(get_summary_board)):
    """
    Dashboard snapshot, rebuilt from the stores on every request.

    When a refresh fails after data has been shown once, the previous
    snapshot is returned with refresh_error set. With nothing to fall back
    on, the store error is raised (503).
    """
    try:
        await board.refresh()
    except StoreUnavailableError:
        if not board.has_data:
            raise

    return DashboardResponse(
        statistics=board.statistics,
        summaries=[FinancialSummaryResponse.from_summary(s) for s in board.summaries],
        refreshed_at=board.refreshed_at,
        refresh_error=board.last_error.message if board.last_error else None,
    )

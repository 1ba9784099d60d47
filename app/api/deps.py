"""FastAPI dependency providers: stores, services and list criteria."""

from datetime import date
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request, status

from app.core.events import DataChangeBus, get_event_bus
from app.db.mongo import get_db
from app.repositories.customer_event_repo import CustomerEventRepository
from app.repositories.interfaces import CustomerEventStore, PaymentStore
from app.repositories.payment_repo import PaymentRepository
from app.schemas.criteria import ALL, FilterCriteria, FilterMode
from app.services.payment_service import PaymentService
from app.services.summary_board import SummaryBoard
from app.services.summary_service import SummaryService


def get_payment_store(db=Depends(get_db)) -> PaymentStore:
    return PaymentRepository(db)


def get_customer_event_store(db=Depends(get_db)) -> CustomerEventStore:
    return CustomerEventRepository(db)


def get_bus() -> DataChangeBus:
    return get_event_bus()


def get_payment_service(
    payments: PaymentStore = Depends(get_payment_store),
    events: CustomerEventStore = Depends(get_customer_event_store),
    bus: DataChangeBus = Depends(get_bus),
) -> PaymentService:
    return PaymentService(payments, events, bus)


def get_summary_service(
    payments: PaymentStore = Depends(get_payment_store),
    events: CustomerEventStore = Depends(get_customer_event_store),
) -> SummaryService:
    return SummaryService(payments, events)


def get_summary_board(request: Request) -> SummaryBoard:
    board = getattr(request.app.state, "summary_board", None)
    if board is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dashboard is not ready"
        )
    return board


def get_filter_criteria(
    search: str = Query("", description="Case-insensitive text search"),
    filter_mode: str = Query(FilterMode.STATUS.value, description="status | method | budget"),
    filter_value: str = Query(ALL, description="Category to keep, or 'all'"),
    sort: Optional[str] = Query(None, description="name | amount | paid | date | status | method"),
    ascending: bool = Query(True),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
) -> FilterCriteria:
    return FilterCriteria(
        search_term=search,
        filter_mode=filter_mode,
        filter_value=filter_value,
        sort_key=sort,
        sort_ascending=ascending,
        date_from=date_from,
        date_to=date_to,
    )

from fastapi import APIRouter
from app.api.v1.endpoints import customer_events, dashboard, payments, summaries

api_router = APIRouter()

api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(summaries.router, prefix="/summaries", tags=["summaries"])
api_router.include_router(customer_events.router, prefix="/customer-events", tags=["customer-events"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])

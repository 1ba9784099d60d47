from typing import List
from fastapi import APIRouter, Depends
from app.api.deps import get_customer_event_store
from app.models.customer_event import CustomerEvent
from app.repositories.interfaces import CustomerEventStore

router = APIRouter()

@router.get("/", response_model=List[CustomerEvent])
async def list_customer_events(store: CustomerEventStore = Depends(get_customer_event_store)):
    """Customer events payments can be recorded against"""
    return await store.list_customer_events()

from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.errors import StoreUnavailableError
from app.core.logging import get_logger
from app.models.customer_event import CustomerEvent
from app.repositories.interfaces import CustomerEventStore

logger = get_logger(__name__)


class CustomerEventRepository(CustomerEventStore):
    """Read access to customer events owned by the bookings side of the app."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.customer_events

    async def list_customer_events(self) -> List[CustomerEvent]:
        try:
            docs = await self.collection.find({}).to_list(None)
        except PyMongoError as exc:
            logger.error("event_store_read_failed", operation="list_customer_events", error=str(exc))
            raise StoreUnavailableError("list_customer_events") from exc
        return [CustomerEvent.model_validate(doc) for doc in docs]

    async def get_customer_event(self, event_id: str) -> Optional[CustomerEvent]:
        try:
            doc = await self.collection.find_one({"_id": event_id})
        except PyMongoError as exc:
            logger.error("event_store_read_failed", operation="get_customer_event", error=str(exc))
            raise StoreUnavailableError("get_customer_event") from exc
        return CustomerEvent.model_validate(doc) if doc else None

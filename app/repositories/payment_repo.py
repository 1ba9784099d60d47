"""
PaymentRepository - MongoDB-backed payment store.

Documents use the payment id as _id. Amounts are stored as decimal strings
and payment dates as ISO dates so nothing round-trips through float. The
id sequence lives in the counters collection.
"""

import re
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.config import settings
from app.core.errors import PaymentIdConflictError, StoreUnavailableError
from app.core.logging import get_logger
from app.models.payment import Payment
from app.repositories.interfaces import PaymentStore

logger = get_logger(__name__)

ID_DIGITS = 6
COUNTER_ID = "payment_id"


def format_payment_id(sequence: int, prefix: str | None = None) -> str:
    """PAY000001 style identifier."""
    return f"{prefix or settings.PAYMENT_ID_PREFIX}{sequence:0{ID_DIGITS}d}"


class PaymentRepository(PaymentStore):
    """Repository for payment records."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.payments
        self.counters = db.counters

    async def list_payments(self) -> List[Payment]:
        try:
            docs = await self.collection.find({}).sort("created_at", 1).to_list(None)
        except PyMongoError as exc:
            logger.error("payment_store_read_failed", operation="list_payments", error=str(exc))
            raise StoreUnavailableError("list_payments") from exc
        return [Payment.model_validate(doc) for doc in docs]

    async def get_payment(self, payment_id: str) -> Optional[Payment]:
        try:
            doc = await self.collection.find_one({"_id": payment_id})
        except PyMongoError as exc:
            logger.error("payment_store_read_failed", operation="get_payment", error=str(exc))
            raise StoreUnavailableError("get_payment") from exc
        return Payment.model_validate(doc) if doc else None

    async def create_payment(self, payment: Payment) -> Payment:
        try:
            await self.collection.insert_one(self._to_document(payment))
        except DuplicateKeyError as exc:
            logger.warning("payment_id_conflict", payment_id=payment.payment_id)
            raise PaymentIdConflictError(payment.payment_id) from exc
        except PyMongoError as exc:
            logger.error("payment_store_write_failed", operation="create_payment", error=str(exc))
            raise StoreUnavailableError("create_payment") from exc
        return payment

    async def update_payment(self, payment: Payment) -> Optional[Payment]:
        try:
            result = await self.collection.replace_one(
                {"_id": payment.payment_id},
                self._to_document(payment)
            )
        except PyMongoError as exc:
            logger.error("payment_store_write_failed", operation="update_payment", error=str(exc))
            raise StoreUnavailableError("update_payment") from exc
        return payment if result.matched_count else None

    async def delete_payment(self, payment_id: str) -> bool:
        try:
            result = await self.collection.delete_one({"_id": payment_id})
        except PyMongoError as exc:
            logger.error("payment_store_write_failed", operation="delete_payment", error=str(exc))
            raise StoreUnavailableError("delete_payment") from exc
        return result.deleted_count > 0

    async def next_payment_id(self) -> str:
        """
        Take the next sequence number from the counters collection.

        $inc on a single counter document is atomic, so concurrent callers
        never receive the same id. The first call seeds the counter from the
        highest id already stored. Deleted ids are never reused.
        """
        prefix = settings.PAYMENT_ID_PREFIX
        try:
            if await self.counters.find_one({"_id": COUNTER_ID}) is None:
                await self._seed_sequence(prefix)
            counter = await self.counters.find_one_and_update(
                {"_id": COUNTER_ID},
                {"$inc": {"seq": 1}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            logger.error("payment_store_write_failed", operation="next_payment_id", error=str(exc))
            raise StoreUnavailableError("next_payment_id") from exc
        return format_payment_id(counter["seq"], prefix)

    # ===== PRIVATE HELPERS =====

    async def _seed_sequence(self, prefix: str) -> None:
        # Zero-padded ids sort lexicographically, so the last _id under the
        # prefix carries the highest number. $max keeps concurrent seeds safe.
        pattern = f"^{re.escape(prefix)}[0-9]{{{ID_DIGITS}}}$"
        docs = await (
            self.collection.find({"_id": {"$regex": pattern}}, {"_id": 1})
            .sort("_id", -1)
            .limit(1)
            .to_list(1)
        )
        highest = int(docs[0]["_id"][len(prefix):]) if docs else 0
        await self.counters.update_one(
            {"_id": COUNTER_ID},
            {"$max": {"seq": highest}},
            upsert=True,
        )
        logger.info("payment_sequence_seeded", highest=highest)

    @staticmethod
    def _to_document(payment: Payment) -> Dict[str, Any]:
        doc = payment.model_dump(mode="json")
        doc["_id"] = doc.pop("payment_id")
        # Keep timestamps native so Mongo can index and sort them
        doc["created_at"] = payment.created_at
        doc["updated_at"] = payment.updated_at
        return doc

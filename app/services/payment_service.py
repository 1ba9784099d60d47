from datetime import datetime, timezone
from typing import List, Optional

from app.core.errors import PaymentIdConflictError, PaymentNotFoundError, PaymentValidationError
from app.core.events import DataChangeBus, PaymentEvents
from app.core.logging import get_logger
from app.models.payment import Payment
from app.repositories.interfaces import CustomerEventStore, PaymentStore
from app.schemas.criteria import FilterCriteria
from app.schemas.payment import PaymentCreate, PaymentUpdate
from app.services.filter_pipeline import PAYMENT_SHAPE, filter_and_sort
from app.utils.payment_validation import validate_new_payment, validate_payment_update

logger = get_logger(__name__)

MAX_ID_ATTEMPTS = 3


class PaymentService:
    """Records, edits and lists individual payments."""

    def __init__(
        self,
        payments: PaymentStore,
        events: CustomerEventStore,
        bus: DataChangeBus,
    ) -> None:
        self._payments = payments
        self._events = events
        self._bus = bus

    async def list_payments(self, criteria: Optional[FilterCriteria] = None) -> List[Payment]:
        """All payments run through the search/filter/sort pipeline."""
        payments = await self._payments.list_payments()
        return filter_and_sort(payments, criteria, PAYMENT_SHAPE)

    async def get_payment(self, payment_id: str) -> Payment:
        """
        Raises:
            PaymentNotFoundError: If no payment has this id.
        """
        payment = await self._payments.get_payment(payment_id)
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        return payment

    async def create_payment(self, payment_in: PaymentCreate) -> Payment:
        """
        Validate and record a new payment, then announce it.

        Raises:
            PaymentValidationError: Missing payer/date, negative amount or
                unknown customer event.
            PaymentIdConflictError: Every attempted id was already taken.
        """
        validate_new_payment(payment_in)
        await self._require_event(payment_in.customer_event_id)

        for attempt in range(1, MAX_ID_ATTEMPTS + 1):
            payment = Payment(
                payment_id=await self._payments.next_payment_id(),
                **payment_in.model_dump(),
            )
            try:
                payment = await self._payments.create_payment(payment)
                break
            except PaymentIdConflictError:
                if attempt == MAX_ID_ATTEMPTS:
                    raise
                logger.warning("payment_id_retry", payment_id=payment.payment_id, attempt=attempt)

        logger.info(
            "payment_created",
            payment_id=payment.payment_id,
            customer_event_id=payment.customer_event_id,
            amount=str(payment.amount),
        )
        await self._bus.publish(
            PaymentEvents.PAYMENT_CREATED,
            {"payment_id": payment.payment_id, "customer_event_id": payment.customer_event_id},
        )
        return payment

    async def update_payment(self, payment_id: str, payment_in: PaymentUpdate) -> Payment:
        """Apply the fields that were sent; id and created_at are preserved."""
        validate_payment_update(payment_in)
        existing = await self.get_payment(payment_id)

        changes = payment_in.model_dump(exclude_unset=True)
        if "customer_event_id" in changes and changes["customer_event_id"] != existing.customer_event_id:
            await self._require_event(changes["customer_event_id"])

        updated = existing.copy_with(**changes, updated_at=datetime.now(timezone.utc))
        if await self._payments.update_payment(updated) is None:
            raise PaymentNotFoundError(payment_id)

        logger.info("payment_updated", payment_id=payment_id, fields=sorted(changes))
        await self._bus.publish(
            PaymentEvents.PAYMENT_UPDATED,
            {
                "payment_id": payment_id,
                "customer_event_id": updated.customer_event_id,
                "previous_customer_event_id": existing.customer_event_id,
            },
        )
        return updated

    async def delete_payment(self, payment_id: str) -> None:
        existing = await self.get_payment(payment_id)
        if not await self._payments.delete_payment(payment_id):
            raise PaymentNotFoundError(payment_id)

        logger.info("payment_deleted", payment_id=payment_id)
        await self._bus.publish(
            PaymentEvents.PAYMENT_DELETED,
            {"payment_id": payment_id, "customer_event_id": existing.customer_event_id},
        )

    async def _require_event(self, event_id: str) -> None:
        if await self._events.get_customer_event(event_id) is None:
            raise PaymentValidationError(f"Customer event '{event_id}' does not exist")

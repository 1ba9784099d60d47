"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Any I/O failure is
raised as StoreUnavailableError; callers never receive zeroed placeholders.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.models.customer_event import CustomerEvent
from app.models.payment import Payment


class PaymentStore(ABC):
    """Interface for payment persistence operations."""

    @abstractmethod
    async def list_payments(self) -> List[Payment]:
        """Return every payment, oldest record first."""
        ...

    @abstractmethod
    async def get_payment(self, payment_id: str) -> Optional[Payment]:
        """Return a payment by ID, or None if not found."""
        ...

    @abstractmethod
    async def create_payment(self, payment: Payment) -> Payment:
        """Persist a new payment and return it.

        Raises PaymentIdConflictError if the id is already stored.
        """
        ...

    @abstractmethod
    async def update_payment(self, payment: Payment) -> Optional[Payment]:
        """Replace the stored payment with the same ID, or None if it does not exist."""
        ...

    @abstractmethod
    async def delete_payment(self, payment_id: str) -> bool:
        """Delete a payment. Returns False if there was nothing to delete."""
        ...

    @abstractmethod
    async def next_payment_id(self) -> str:
        """Return an unused payment identifier. Concurrent callers get distinct ids."""
        ...


class CustomerEventStore(ABC):
    """Read-only access to customer events."""

    @abstractmethod
    async def list_customer_events(self) -> List[CustomerEvent]:
        """Return all customer events in store order."""
        ...

    @abstractmethod
    async def get_customer_event(self, event_id: str) -> Optional[CustomerEvent]:
        """Return a customer event by ID, or None if not found."""
        ...

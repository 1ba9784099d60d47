from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.core.errors import PaymentIdConflictError, StoreUnavailableError
from app.core.events import DataChangeBus
from app.main import app
from app.models.customer_event import CustomerEvent, EventLifecycle
from app.models.payment import Payment, PaymentMethod, PaymentStatus
from app.repositories.interfaces import CustomerEventStore, PaymentStore
from app.repositories.payment_repo import format_payment_id
from app.services.summary_board import SummaryBoard
from app.services.summary_service import SummaryService


class InMemoryPaymentStore(PaymentStore):
    """Dict-backed payment store. Set fail=True to simulate an outage."""

    def __init__(self, payments: Optional[List[Payment]] = None):
        self.payments: Dict[str, Payment] = {p.payment_id: p for p in payments or []}
        self.fail = False
        self._sequence = len(self.payments)

    def _check(self, operation: str) -> None:
        if self.fail:
            raise StoreUnavailableError(operation)

    async def list_payments(self) -> List[Payment]:
        self._check("list_payments")
        return list(self.payments.values())

    async def get_payment(self, payment_id: str) -> Optional[Payment]:
        self._check("get_payment")
        return self.payments.get(payment_id)

    async def create_payment(self, payment: Payment) -> Payment:
        self._check("create_payment")
        if payment.payment_id in self.payments:
            raise PaymentIdConflictError(payment.payment_id)
        self.payments[payment.payment_id] = payment
        return payment

    async def update_payment(self, payment: Payment) -> Optional[Payment]:
        self._check("update_payment")
        if payment.payment_id not in self.payments:
            return None
        self.payments[payment.payment_id] = payment
        return payment

    async def delete_payment(self, payment_id: str) -> bool:
        self._check("delete_payment")
        return self.payments.pop(payment_id, None) is not None

    async def next_payment_id(self) -> str:
        self._check("next_payment_id")
        self._sequence += 1
        return format_payment_id(self._sequence)


class InMemoryCustomerEventStore(CustomerEventStore):
    def __init__(self, events: Optional[List[CustomerEvent]] = None):
        self.events: Dict[str, CustomerEvent] = {e.event_id: e for e in events or []}
        self.fail = False

    async def list_customer_events(self) -> List[CustomerEvent]:
        if self.fail:
            raise StoreUnavailableError("list_customer_events")
        return list(self.events.values())

    async def get_customer_event(self, event_id: str) -> Optional[CustomerEvent]:
        if self.fail:
            raise StoreUnavailableError("get_customer_event")
        return self.events.get(event_id)


def make_payment(
    payment_id: str = "PAY000001",
    customer_event_id: str = "EVT001",
    amount: str = "100.00",
    payer_name: str = "Asha Rao",
    method: PaymentMethod = PaymentMethod.CASH,
    status: PaymentStatus = PaymentStatus.PARTIAL,
    payment_date: date = date(2025, 3, 1),
    reference: Optional[str] = None,
) -> Payment:
    return Payment(
        payment_id=payment_id,
        customer_event_id=customer_event_id,
        payer_name=payer_name,
        method=method,
        amount=Decimal(amount),
        status=status,
        payment_date=payment_date,
        reference=reference,
    )


def make_event(
    event_id: str = "EVT001",
    agreed_amount: str = "100000.00",
    customer_name: str = "Meera Iyer",
    event_name: str = "Wedding Reception",
    status: EventLifecycle = EventLifecycle.ACTIVE,
) -> CustomerEvent:
    return CustomerEvent(
        event_id=event_id,
        agreed_amount=Decimal(agreed_amount),
        customer_name=customer_name,
        event_name=event_name,
        status=status,
    )


@pytest.fixture
def payment_factory():
    return make_payment


@pytest.fixture
def event_factory():
    return make_event


@pytest.fixture
def sample_event() -> CustomerEvent:
    return make_event()


@pytest.fixture
def sample_payments() -> List[Payment]:
    """The four partial payments from the reception booking (85000.00 of 100000.00)."""
    return [
        make_payment("PAY000001", amount="25000.00", payment_date=date(2025, 1, 10)),
        make_payment("PAY000002", amount="35000.00", payment_date=date(2025, 2, 10)),
        make_payment("PAY000003", amount="15000.00", payment_date=date(2025, 3, 10)),
        make_payment("PAY000004", amount="10000.00", payment_date=date(2025, 4, 10)),
    ]


@pytest.fixture
def payment_store(sample_payments) -> InMemoryPaymentStore:
    return InMemoryPaymentStore(sample_payments)


@pytest.fixture
def event_store(sample_event) -> InMemoryCustomerEventStore:
    return InMemoryCustomerEventStore([
        sample_event,
        make_event("EVT002", agreed_amount="5000.00", customer_name="Kabir Shah", event_name="Birthday"),
    ])


@pytest.fixture
def bus() -> DataChangeBus:
    return DataChangeBus()


@pytest.fixture
def mock_db():
    """Motor database double with AsyncMock collection methods."""
    db = MagicMock()
    for name in ("payments", "customer_events", "counters"):
        collection = MagicMock()
        collection.find_one = AsyncMock()
        collection.find_one_and_update = AsyncMock()
        collection.insert_one = AsyncMock()
        collection.update_one = AsyncMock()
        collection.replace_one = AsyncMock()
        collection.delete_one = AsyncMock()
        setattr(db, name, collection)
    return db


@pytest.fixture
def mock_cursor():
    """Build a find() cursor double supporting sort/limit chaining and to_list."""
    def _cursor(docs):
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.to_list = AsyncMock(return_value=docs)
        return cursor
    return _cursor


@pytest.fixture
def client(payment_store, event_store, bus):
    """HTTP client wired to the in-memory stores. Lifespan (Mongo) is not started."""
    app.dependency_overrides[deps.get_payment_store] = lambda: payment_store
    app.dependency_overrides[deps.get_customer_event_store] = lambda: event_store
    app.dependency_overrides[deps.get_bus] = lambda: bus

    board = SummaryBoard(SummaryService(payment_store, event_store), bus)
    board.attach()
    app.state.summary_board = board

    try:
        yield TestClient(app)
    finally:
        board.detach()
        app.state.summary_board = None
        app.dependency_overrides.clear()

from datetime import date
from decimal import Decimal

import pytest

from app.core.errors import (
    PaymentIdConflictError,
    PaymentNotFoundError,
    PaymentValidationError,
    StoreUnavailableError,
)
from app.core.events import ANY_EVENT, PaymentEvents
from app.models.payment import PaymentMethod, PaymentStatus
from app.schemas.criteria import FilterCriteria
from app.schemas.payment import PaymentCreate, PaymentUpdate
from app.services.payment_service import PaymentService


@pytest.fixture
def service(payment_store, event_store, bus):
    return PaymentService(payment_store, event_store, bus)


@pytest.fixture
def published(bus):
    events = []
    bus.subscribe(ANY_EVENT, lambda event_type, payload: events.append((event_type, payload)))
    return events


def new_payment(**overrides) -> PaymentCreate:
    data = {
        "customer_event_id": "EVT001",
        "payer_name": "Asha Rao",
        "method": PaymentMethod.UPI,
        "amount": Decimal("15000.00"),
        "status": PaymentStatus.FULL,
        "payment_date": date(2025, 5, 10),
    }
    data.update(overrides)
    return PaymentCreate(**data)


class TestCreatePayment:
    @pytest.mark.asyncio
    async def test_assigns_next_id_and_stores(self, service, payment_store):
        payment = await service.create_payment(new_payment())

        assert payment.payment_id == "PAY000005"
        assert payment.amount == Decimal("15000.00")
        assert payment.created_at is not None
        assert payment_store.payments["PAY000005"] == payment

    @pytest.mark.asyncio
    async def test_publishes_created_event(self, service, published):
        payment = await service.create_payment(new_payment())

        assert published == [
            (
                PaymentEvents.PAYMENT_CREATED,
                {"payment_id": payment.payment_id, "customer_event_id": "EVT001"},
            )
        ]

    @pytest.mark.asyncio
    async def test_zero_amount_is_allowed(self, service):
        payment = await service.create_payment(new_payment(amount=Decimal("0")))
        assert payment.amount == Decimal("0")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"payer_name": None}, "Payer name is required"),
            ({"payer_name": "   "}, "Payer name is required"),
            ({"payment_date": None}, "Payment date is required"),
            ({"amount": None}, "Payment amount is required"),
            ({"amount": Decimal("-1.00")}, "negative amount"),
        ],
    )
    async def test_rejects_invalid_payment(self, service, payment_store, published, overrides, message):
        with pytest.raises(PaymentValidationError) as exc_info:
            await service.create_payment(new_payment(**overrides))

        assert message in exc_info.value.message
        assert len(payment_store.payments) == 4
        assert published == []

    @pytest.mark.asyncio
    async def test_rejects_unknown_event(self, service, payment_store):
        with pytest.raises(PaymentValidationError, match="EVT404"):
            await service.create_payment(new_payment(customer_event_id="EVT404"))
        assert len(payment_store.payments) == 4

    @pytest.mark.asyncio
    async def test_taken_id_is_retried_with_a_fresh_one(self, service, payment_store, published):
        # the next id handed out (PAY000004) is already stored, as when
        # another worker won the race for it
        payment_store._sequence = 3

        payment = await service.create_payment(new_payment())

        assert payment.payment_id == "PAY000005"
        assert payment_store.payments["PAY000004"].amount == Decimal("10000.00")
        assert len(published) == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_repeated_id_conflicts(self, service, payment_store, published):
        payment_store._sequence = 0

        with pytest.raises(PaymentIdConflictError):
            await service.create_payment(new_payment())

        assert len(payment_store.payments) == 4
        assert published == []

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, service, payment_store, published):
        payment_store.fail = True
        with pytest.raises(StoreUnavailableError):
            await service.create_payment(new_payment())
        assert published == []


class TestUpdatePayment:
    @pytest.mark.asyncio
    async def test_keeps_id_and_created_at(self, service, payment_store):
        original = payment_store.payments["PAY000002"]

        updated = await service.update_payment(
            "PAY000002", PaymentUpdate(amount=Decimal("36000.00"), notes="corrected")
        )

        assert updated.payment_id == "PAY000002"
        assert updated.created_at == original.created_at
        assert updated.updated_at is not None
        assert updated.amount == Decimal("36000.00")
        assert updated.notes == "corrected"
        assert updated.payer_name == original.payer_name
        assert payment_store.payments["PAY000002"] == updated
        # the previous value object is untouched
        assert original.amount == Decimal("35000.00")

    @pytest.mark.asyncio
    async def test_publishes_previous_event_id(self, service, published):
        await service.update_payment("PAY000001", PaymentUpdate(customer_event_id="EVT002"))

        event_type, payload = published[0]
        assert event_type == PaymentEvents.PAYMENT_UPDATED
        assert payload == {
            "payment_id": "PAY000001",
            "customer_event_id": "EVT002",
            "previous_customer_event_id": "EVT001",
        }

    @pytest.mark.asyncio
    async def test_move_to_unknown_event_is_rejected(self, service):
        with pytest.raises(PaymentValidationError):
            await service.update_payment("PAY000001", PaymentUpdate(customer_event_id="EVT404"))

    @pytest.mark.asyncio
    async def test_not_found(self, service):
        with pytest.raises(PaymentNotFoundError):
            await service.update_payment("PAY999999", PaymentUpdate(notes="x"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "update",
        [
            PaymentUpdate(amount=Decimal("-5")),
            PaymentUpdate(payer_name=""),
            PaymentUpdate(payment_date=None),
            PaymentUpdate(method=None),
            PaymentUpdate(customer_event_id=" "),
        ],
    )
    async def test_rejects_invalid_changes(self, service, payment_store, update):
        with pytest.raises(PaymentValidationError):
            await service.update_payment("PAY000001", update)
        assert payment_store.payments["PAY000001"].updated_at is None

    @pytest.mark.asyncio
    async def test_reference_can_be_cleared(self, service, payment_store):
        await service.update_payment("PAY000001", PaymentUpdate(reference="UTR-1"))
        updated = await service.update_payment("PAY000001", PaymentUpdate(reference=None))
        assert updated.reference is None


class TestDeleteAndRead:
    @pytest.mark.asyncio
    async def test_delete_publishes(self, service, payment_store, published):
        await service.delete_payment("PAY000003")

        assert "PAY000003" not in payment_store.payments
        assert published == [
            (PaymentEvents.PAYMENT_DELETED, {"payment_id": "PAY000003", "customer_event_id": "EVT001"})
        ]

    @pytest.mark.asyncio
    async def test_delete_missing(self, service, published):
        with pytest.raises(PaymentNotFoundError):
            await service.delete_payment("PAY999999")
        assert published == []

    @pytest.mark.asyncio
    async def test_get_payment(self, service):
        payment = await service.get_payment("PAY000004")
        assert payment.amount == Decimal("10000.00")

    @pytest.mark.asyncio
    async def test_list_applies_criteria(self, service):
        result = await service.list_payments(FilterCriteria(sort_key="amount", sort_ascending=False))
        assert [p.payment_id for p in result] == ["PAY000002", "PAY000001", "PAY000003", "PAY000004"]

    @pytest.mark.asyncio
    async def test_list_empty_store(self, service, payment_store):
        payment_store.payments.clear()
        assert await service.list_payments(FilterCriteria(search_term="asha")) == []

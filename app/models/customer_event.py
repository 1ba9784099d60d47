from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from app.models.base import DomainModel, to_decimal


class EventLifecycle(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CustomerEvent(DomainModel):
    """Contracted engagement with one customer. Read-only to the engine."""

    event_id: str = Field(validation_alias=AliasChoices("event_id", "_id"))
    customer_name: str
    event_name: str
    agreed_amount: Decimal = Field(default=Decimal("0"), ge=0)
    status: EventLifecycle = EventLifecycle.ACTIVE

    @field_validator("agreed_amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Any:
        return to_decimal(value)

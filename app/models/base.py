from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Self

from bson.decimal128 import Decimal128
from pydantic import BaseModel, ConfigDict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_decimal(value: Any) -> Any:
    """Coerce stored money values to Decimal without passing through float."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class DomainModel(BaseModel):
    """Immutable value object. Changes produce a new, re-validated instance."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        from_attributes=True
    )

    def copy_with(self, **changes: Any) -> Self:
        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)

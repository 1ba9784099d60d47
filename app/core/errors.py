"""Domain error codes for payment reconciliation."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    PAYMENT_INVALID = "PAYMENT_INVALID"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    CUSTOMER_EVENT_NOT_FOUND = "CUSTOMER_EVENT_NOT_FOUND"
    PAYMENT_ID_CONFLICT = "PAYMENT_ID_CONFLICT"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class PaymentValidationError(DomainError):
    """Raised when a payment is rejected before it reaches the engine."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.PAYMENT_INVALID, message=message)


class PaymentNotFoundError(DomainError):
    """Raised when a payment is not found."""

    def __init__(self, payment_id: str) -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_NOT_FOUND,
            message="Payment not found",
        )
        object.__setattr__(self, "payment_id", payment_id)


class CustomerEventNotFoundError(DomainError):
    """Raised when a customer event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.CUSTOMER_EVENT_NOT_FOUND,
            message="Customer event not found",
        )
        object.__setattr__(self, "event_id", event_id)


class StoreUnavailableError(DomainError):
    """Raised when the payment store cannot be read or written."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message=f"Payment store unavailable during {operation}",
        )
        object.__setattr__(self, "operation", operation)


class PaymentIdConflictError(DomainError):
    """Raised when a new payment's id is already taken in the store."""

    def __init__(self, payment_id: str) -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_ID_CONFLICT,
            message=f"Payment id {payment_id} is already in use",
        )
        object.__setattr__(self, "payment_id", payment_id)

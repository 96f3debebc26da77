from .event_service import EventService
from .expense_service import ExpenseService
from .registration_service import RegistrationService
from .exceptions import (
    ServiceError,
    ValidationError,
    NotFoundError,
    PermissionDeniedError,
    InvalidStateError,
    DuplicateEventError,
    CapacityExceededError,
    StoreUnavailableError,
    AuthenticationError,
)

__all__ = [
    "EventService",
    "ExpenseService",
    "RegistrationService",
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "InvalidStateError",
    "DuplicateEventError",
    "CapacityExceededError",
    "StoreUnavailableError",
    "AuthenticationError",
]

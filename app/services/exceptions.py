from typing import Optional
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)


class ServiceError(Exception):
    """Base exception for core service errors

    ``error_code`` is the machine-checkable kind returned to clients;
    ``cause`` keeps the underlying store exception for diagnostics.
    """

    error_code = "ServiceError"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationError(ServiceError):
    """Malformed or missing input"""

    error_code = "ValidationError"


class NotFoundError(ServiceError):
    """Referenced entity does not exist"""

    error_code = "NotFoundError"


class PermissionDeniedError(ServiceError):
    """Role or ownership check failed"""

    error_code = "PermissionError"


class InvalidStateError(ServiceError):
    """Entity is not in a state that allows the operation"""

    error_code = "InvalidStateError"


class DuplicateEventError(ServiceError):
    """Organizer already has an active event with this name"""

    error_code = "DuplicateEventError"


class CapacityExceededError(ServiceError):
    """Event has no free seats"""

    error_code = "CapacityExceededError"


class StoreUnavailableError(ServiceError):
    """Transient store failure; safe to retry with backoff"""

    error_code = "StoreUnavailableError"
    retryable = True


class AuthenticationError(ServiceError):
    """Bearer credential missing or rejected by the access gate"""

    error_code = "AuthenticationError"


def translate_store_error(error: SQLAlchemyError, action: str) -> ServiceError:
    """Map a SQLAlchemy failure onto the nearest taxonomy kind"""
    if isinstance(error, (OperationalError, DisconnectionError, PoolTimeoutError)):
        return StoreUnavailableError(
            f"Store unavailable while trying to {action}", cause=error
        )
    if isinstance(error, IntegrityError):
        return ValidationError(
            f"Failed to {action}: data violates a store constraint", cause=error
        )
    return StoreUnavailableError(f"Failed to {action}", cause=error)

# app/utils/router_helpers.py

from fastapi import HTTPException, status
from typing import Callable, Any
from functools import wraps
import logging

from ..schemas.common import ResponseFactory
from .constants import ResponseMessages
from ..services.exceptions import (
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

logger = logging.getLogger(__name__)

# Most specific classes first; ServiceError is the catch-all
ERROR_STATUS_CODES = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (DuplicateEventError, status.HTTP_409_CONFLICT),
    (CapacityExceededError, status.HTTP_409_CONFLICT),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ServiceError, status.HTTP_400_BAD_REQUEST),
)


def status_code_for(error: ServiceError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def handle_service_errors(func: Callable) -> Callable:
    """Decorator to standardize service error handling in routers"""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except StoreUnavailableError as e:
            logger.error(f"Store unavailable in {func.__name__}: {e}", exc_info=e.cause)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=ResponseFactory.error(e.message, error_code=e.error_code),
                headers={"Retry-After": "1"},
            )

        except ServiceError as e:
            logger.warning(f"{e.error_code} in {func.__name__}: {e.message}")
            raise HTTPException(
                status_code=status_code_for(e),
                detail=ResponseFactory.error(e.message, error_code=e.error_code),
            )

        # Unexpected errors -> 500 Internal Server Error
        except Exception as e:
            logger.error(
                f"Unexpected error in {func.__name__}: {str(e)}", exc_info=True
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=ResponseFactory.error(
                    "An unexpected error occurred", error_code="InternalError"
                ),
            )

    return wrapper


class RouterResponse:
    """Success bodies shared by every router"""

    @staticmethod
    def _body(message: str, data: Any = None) -> dict:
        body = {"success": True, "message": message}
        if data is not None:
            body["data"] = data
        return body

    @classmethod
    def success(cls, data: Any = None, message: str = ResponseMessages.SUCCESS) -> dict:
        return cls._body(message, data)

    @classmethod
    def created(cls, data: Any, message: str = ResponseMessages.CREATED) -> dict:
        return cls._body(message, data)

    @classmethod
    def updated(cls, data: Any = None, message: str = ResponseMessages.UPDATED) -> dict:
        return cls._body(message, data)

    @classmethod
    def deleted(cls, message: str = ResponseMessages.DELETED) -> dict:
        return cls._body(message)

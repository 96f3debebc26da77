from datetime import datetime
from ..utils.date_helpers import DateHelpers
from typing import Any, Dict, Generic, Optional
from ..utils.constants import ResponseMessages
from pydantic import BaseModel, Field
from typing import TypeVar

T = TypeVar("T")


class BaseResponse(BaseModel, Generic[T]):
    """Base response model for all API responses"""

    success: bool = True
    message: str
    timestamp: datetime = Field(default_factory=DateHelpers.utcnow)
    data: Optional[T] = None


class SuccessResponse(BaseResponse[T]):
    """Standard success response with typed data"""

    success: bool = True


class ErrorResponse(BaseModel):
    """Standard error body: message plus machine-checkable kind"""

    success: bool = False
    message: str
    error_code: str
    details: Optional[Any] = None


class ResponseFactory:
    """Factory for creating consistent API responses"""

    @staticmethod
    def success(
        data: T = None, message: str = ResponseMessages.SUCCESS
    ) -> SuccessResponse[T]:
        return SuccessResponse(data=data, message=message)

    @staticmethod
    def error(message: str, error_code: str, details: Any = None) -> Dict[str, Any]:
        return ErrorResponse(
            message=message, error_code=error_code, details=details
        ).model_dump(exclude_none=True)

from .common import SuccessResponse, ErrorResponse, ResponseFactory
from .user import CurrentUser, UserResponse
from .event import (
    EventCreate,
    EventUpdate,
    EventStatusUpdate,
    EventRejection,
    EventResponse,
)
from .registration import RegistrationRequest, RegistrationResponse
from .expense import ExpenseCreate, ExpenseResponse, BudgetTotals

__all__ = [
    "SuccessResponse",
    "ErrorResponse",
    "ResponseFactory",
    "CurrentUser",
    "UserResponse",
    "EventCreate",
    "EventUpdate",
    "EventStatusUpdate",
    "EventRejection",
    "EventResponse",
    "RegistrationRequest",
    "RegistrationResponse",
    "ExpenseCreate",
    "ExpenseResponse",
    "BudgetTotals",
]

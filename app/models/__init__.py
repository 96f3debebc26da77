from .user import User
from .event import Event
from .registration import Registration
from .expense import Expense


__all__ = [
    "User",
    "Event",
    "Registration",
    "Expense",
]

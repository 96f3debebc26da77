from .date_helpers import DateHelpers
from .constants import AppConstants, ResponseMessages

__all__ = [
    "DateHelpers",
    "AppConstants",
    "ResponseMessages",
]

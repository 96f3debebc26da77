# app/routers/__init__.py

# Import all router modules to make them available
from . import auth
from . import event
from . import registrations
from . import expenses

__all__ = [
    "auth",
    "event",
    "registrations",
    "expenses",
]

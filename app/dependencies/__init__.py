# app/dependencies/__init__.py

from .permissions import (
    get_current_user,
    require_admin,
    require_organizer,
)

__all__ = [
    "get_current_user",
    "require_admin",
    "require_organizer",
]

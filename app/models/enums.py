from enum import Enum


class UserRole(str, Enum):
    STUDENT = "student"
    ORGANIZER = "organizer"
    ADMIN = "admin"


class EventStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RegistrationStatus(str, Enum):
    REGISTERED = "Registered"
    CANCELLED = "Cancelled"


# Statuses that block an organizer from re-submitting the same event name
ACTIVE_EVENT_STATUSES = (EventStatus.PENDING.value, EventStatus.APPROVED.value)

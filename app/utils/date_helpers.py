from datetime import datetime, timezone
from typing import Optional


class DateHelpers:
    @staticmethod
    def utcnow() -> datetime:
        """Current UTC time as a naive datetime, matching stored values"""
        return datetime.now(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
        """Convert an aware datetime to naive UTC; naive values are taken as UTC"""
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def month_key(value: datetime) -> str:
        """Year-month bucket used by event reports, e.g. 2025-03"""
        return value.strftime("%Y-%m")

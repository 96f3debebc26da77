from pydantic import BaseModel, validator, Field, computed_field
from typing import Optional
from datetime import datetime
from ..models.enums import EventStatus
from ..utils.constants import AppConstants
from ..utils.date_helpers import DateHelpers


class EventBase(BaseModel):
    event_name: str = Field(
        ..., min_length=1, max_length=AppConstants.MAX_EVENT_NAME_LENGTH
    )
    date_time: datetime
    venue: str = Field(..., min_length=1, max_length=AppConstants.MAX_VENUE_LENGTH)
    description: Optional[str] = Field(
        None, max_length=AppConstants.MAX_DESCRIPTION_LENGTH
    )
    max_students: int = Field(..., ge=AppConstants.MIN_EVENT_CAPACITY)
    total_budget: float = Field(..., ge=0)


class EventCreate(EventBase):
    @validator("event_name", "venue")
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be blank")
        return v.strip()

    @validator("date_time")
    def normalize_date_time(cls, v):
        return DateHelpers.to_naive_utc(v)


class EventUpdate(BaseModel):
    event_name: Optional[str] = Field(
        None, min_length=1, max_length=AppConstants.MAX_EVENT_NAME_LENGTH
    )
    date_time: Optional[datetime] = None
    venue: Optional[str] = Field(
        None, min_length=1, max_length=AppConstants.MAX_VENUE_LENGTH
    )
    description: Optional[str] = Field(
        None, max_length=AppConstants.MAX_DESCRIPTION_LENGTH
    )
    max_students: Optional[int] = Field(None, ge=AppConstants.MIN_EVENT_CAPACITY)
    total_budget: Optional[float] = Field(None, ge=0)

    @validator("date_time")
    def normalize_date_time(cls, v):
        return DateHelpers.to_naive_utc(v)


class EventStatusUpdate(BaseModel):
    event_id: int
    status: EventStatus
    reason: Optional[str] = Field(None, max_length=AppConstants.MAX_DESCRIPTION_LENGTH)


class EventRejection(BaseModel):
    reason: str = Field(..., min_length=1, max_length=AppConstants.MAX_DESCRIPTION_LENGTH)


class EventResponse(BaseModel):
    id: int
    organizer_id: int
    event_name: str
    date_time: datetime
    venue: str
    description: Optional[str] = None
    max_students: int
    total_budget: float
    status: EventStatus
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    organizer_name: Optional[str] = None
    organizer_email: Optional[str] = None
    registered_count: Optional[int] = None

    # COMPUTED FIELDS
    @computed_field
    @property
    def is_upcoming(self) -> bool:
        """Check if event is in the future"""
        return self.date_time >= DateHelpers.utcnow()

    @computed_field
    @property
    def is_full(self) -> bool:
        """Check if event has reached max capacity"""
        if self.registered_count is None:
            return False
        return self.registered_count >= self.max_students

    class Config:
        from_attributes = True

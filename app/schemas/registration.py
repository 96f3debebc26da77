from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from ..models.enums import RegistrationStatus


class RegistrationRequest(BaseModel):
    event_id: int = Field(..., gt=0)


class RegistrationResponse(BaseModel):
    id: int
    user_id: int
    event_id: int
    student_name: str
    email_id: str
    event_name: str
    status: RegistrationStatus
    registered_at: Optional[datetime] = None

    class Config:
        from_attributes = True

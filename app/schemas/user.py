from dataclasses import dataclass
from pydantic import BaseModel, EmailStr
from ..models.enums import UserRole


@dataclass
class CurrentUser:
    """Identity attached to a request by the access gate"""

    id: int
    role: str
    name: str
    email: str

    @classmethod
    def from_model(cls, user) -> "CurrentUser":
        return cls(id=user.id, role=user.role, name=user.name, email=user.email)


class UserResponse(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: UserRole

    class Config:
        from_attributes = True

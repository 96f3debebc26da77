from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import RegistrationStatus


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )

    # Snapshot taken at registration time
    student_name = Column(String, nullable=False)
    email_id = Column(String, nullable=False)
    event_name = Column(String(255), nullable=False)

    status = Column(
        String(20), nullable=False, default=RegistrationStatus.REGISTERED.value
    )
    registered_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="registrations")
    event = relationship("Event", back_populates="registrations")

    __table_args__ = (
        CheckConstraint(
            "status IN ('Registered', 'Cancelled')", name="check_registration_status"
        ),
        # Admission control counts Registered rows per event
        Index("idx_registration_event_status", "event_id", "status"),
        Index("idx_registration_user_event", "user_id", "event_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Registration(id={self.id}, user={self.user_id}, "
            f"event={self.event_id}, status={self.status})>"
        )

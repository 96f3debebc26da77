from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    DateTime,
    ForeignKey,
    Text,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import EventStatus


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    organizer_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    event_name = Column(String(255), nullable=False)
    date_time = Column(DateTime, nullable=False)
    venue = Column(String(255), nullable=False)
    description = Column(Text)
    max_students = Column(Integer, nullable=False)
    total_budget = Column(Float, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=EventStatus.PENDING.value)
    rejection_reason = Column(Text)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    organizer = relationship(
        "User", back_populates="events", foreign_keys=[organizer_id]
    )
    registrations = relationship(
        "Registration", back_populates="event", cascade="all, delete-orphan"
    )
    expenses = relationship(
        "Expense",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="Expense.id",
    )

    __table_args__ = (
        CheckConstraint("max_students >= 1", name="check_event_capacity_positive"),
        CheckConstraint("total_budget >= 0", name="check_event_budget_non_negative"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="check_event_status"
        ),
        # Duplicate-submission lookups
        Index("idx_event_organizer_name_status", "organizer_id", "event_name", "status"),
        Index("idx_event_status_date", "status", "date_time"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.event_name}, status={self.status})>"

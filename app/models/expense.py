from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    DateTime,
    ForeignKey,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    category = Column(String, nullable=False)
    actual_spent = Column(Float, nullable=False)

    # Ledger snapshots stamped at insertion time
    total_budget = Column(Float, nullable=False)
    total_amount_spent = Column(Float, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="expenses")

    __table_args__ = (
        CheckConstraint("actual_spent >= 0", name="check_expense_non_negative"),
        Index("idx_expense_event_order", "event_id", "id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Expense(id={self.id}, event={self.event_id}, "
            f"spent={self.actual_spent}, running={self.total_amount_spent})>"
        )

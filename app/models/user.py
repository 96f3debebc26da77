from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import UserRole


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    # Credentials are issued by the access gate; kept for rotation outside this service
    password_hash = Column(String, nullable=True)
    role = Column(String, nullable=False, default=UserRole.STUDENT.value)

    supabase_id = Column(String, unique=True, index=True, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Constraints
    __table_args__ = (
        CheckConstraint(
            "role IN ('student', 'organizer', 'admin')", name="check_user_role"
        ),
    )

    events = relationship(
        "Event",
        back_populates="organizer",
        foreign_keys="Event.organizer_id",
        cascade="all, delete-orphan",
    )
    registrations = relationship(
        "Registration", back_populates="user", cascade="all, delete-orphan"
    )

    @classmethod
    def create_from_supabase(cls, supabase_user, db_session):
        """Create new user from Supabase auth user"""
        user_metadata = supabase_user.user_metadata or {}
        # app_metadata is writable by service role only, so role comes from there
        app_metadata = supabase_user.app_metadata or {}

        role = app_metadata.get("role", UserRole.STUDENT.value)
        if role not in {r.value for r in UserRole}:
            role = UserRole.STUDENT.value

        user = cls(
            email=supabase_user.email,
            name=user_metadata.get("full_name")
            or user_metadata.get("name")
            or supabase_user.email.split("@")[0],
            supabase_id=supabase_user.id,
            role=role,
        )

        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    @classmethod
    def get_or_create_from_supabase(cls, supabase_user, db_session):
        """Get existing user or create new one from Supabase"""
        user = db_session.query(cls).filter(cls.supabase_id == supabase_user.id).first()
        if user:
            return user

        try:
            return cls.create_from_supabase(supabase_user, db_session)
        except IntegrityError:
            # Another request provisioned the same account first
            db_session.rollback()
            return (
                db_session.query(cls)
                .filter(cls.supabase_id == supabase_user.id)
                .one()
            )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

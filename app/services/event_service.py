from sqlalchemy import func, insert, literal, select
from typing import List, Dict, Any, Optional
from datetime import datetime
from collections import Counter
import logging
import math

from ..models.event import Event
from ..models.registration import Registration
from ..models.user import User
from ..models.enums import (
    EventStatus,
    RegistrationStatus,
    UserRole,
    ACTIVE_EVENT_STATUSES,
)
from ..utils.constants import AppConstants
from ..utils.date_helpers import DateHelpers
from .base import BaseService
from .exceptions import (
    ValidationError,
    NotFoundError,
    PermissionDeniedError,
    InvalidStateError,
    DuplicateEventError,
)

logger = logging.getLogger(__name__)

REQUIRED_EVENT_FIELDS = (
    "event_name",
    "date_time",
    "venue",
    "max_students",
    "total_budget",
)
TRANSITION_TARGETS = (EventStatus.APPROVED.value, EventStatus.REJECTED.value)


def registered_count_column():
    """Live count of Registered rows for the enclosing Event row"""
    return (
        select(func.count(Registration.id))
        .where(
            Registration.event_id == Event.id,
            Registration.status == RegistrationStatus.REGISTERED.value,
        )
        .correlate(Event)
        .scalar_subquery()
        .label("registered_count")
    )


class EventService(BaseService):
    """Event lifecycle: submission, organizer edits, admin review and deletion"""

    def create_event(
        self,
        organizer_id: int,
        event_name: str,
        date_time: datetime,
        venue: str,
        description: Optional[str],
        max_students: int,
        total_budget: float,
    ) -> int:
        """Submit a new event in ``pending`` and return its id.

        The duplicate-submission guard and the insert are one statement, run
        after locking the organizer row, so two concurrent submissions of the
        same name cannot both land.
        """
        fields = self._clean_fields(
            {
                "event_name": event_name,
                "date_time": date_time,
                "venue": venue,
                "description": description,
                "max_students": max_students,
                "total_budget": total_budget,
            }
        )
        self._validate_event_fields(fields)

        with self._transaction("create event"):
            self._lock_user_or_raise(organizer_id)

            now = DateHelpers.utcnow()
            candidate = select(
                literal(organizer_id, Event.organizer_id.type),
                literal(fields["event_name"], Event.event_name.type),
                literal(fields["date_time"], Event.date_time.type),
                literal(fields["venue"], Event.venue.type),
                literal(fields["description"], Event.description.type),
                literal(fields["max_students"], Event.max_students.type),
                literal(float(fields["total_budget"]), Event.total_budget.type),
                literal(EventStatus.PENDING.value, Event.status.type),
            ).where(~self._duplicate_clause(organizer_id, fields["event_name"], now))

            stmt = (
                insert(Event)
                .from_select(
                    [
                        "organizer_id",
                        "event_name",
                        "date_time",
                        "venue",
                        "description",
                        "max_students",
                        "total_budget",
                        "status",
                    ],
                    candidate,
                )
                .returning(Event.id)
            )
            event_id = self.db.execute(stmt).scalar_one_or_none()

            if event_id is None:
                logger.info(
                    f"Duplicate submission of '{fields['event_name']}' "
                    f"by organizer {organizer_id} rejected"
                )
                raise DuplicateEventError("Event Name already exists.")

        logger.info(
            f"Event {event_id} '{fields['event_name']}' submitted by organizer {organizer_id}"
        )
        return event_id

    def update_event(self, event_id: int, fields: Dict[str, Any], actor) -> Dict[str, Any]:
        """Overwrite mutable fields of a pending event"""

        unknown = set(fields) - set(AppConstants.EDITABLE_EVENT_FIELDS)
        if unknown:
            raise ValidationError(
                f"Fields cannot be edited: {', '.join(sorted(unknown))}"
            )
        if not fields:
            raise ValidationError("No fields to update")

        fields = self._clean_fields(fields)
        self._validate_event_fields(fields, partial=True)

        with self._transaction("update event"):
            event = self._get_event_or_raise(event_id, lock=True)
            self._require_event_manager(actor, event, "edit this event")

            if event.status != EventStatus.PENDING.value:
                raise InvalidStateError("Only pending events can be edited")

            if "event_name" in fields or "date_time" in fields:
                self._raise_if_duplicate(
                    event,
                    fields.get("event_name", event.event_name),
                    fields.get("date_time", event.date_time),
                )

            for field, value in fields.items():
                setattr(event, field, value)

            self.db.flush()
            result = self._serialize_event(event)

        logger.info(f"Event {event_id} updated by user {actor.id}: {sorted(fields)}")
        return result

    def transition_status(
        self,
        event_id: int,
        target_status: str,
        actor_role: str,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Admin review: move an event to approved or rejected.

        The current status is not checked, so a decided event can be decided
        again. Approving clears any earlier rejection reason and is refused
        when it would revive a name already taken by another active event.
        """
        if actor_role != UserRole.ADMIN.value:
            raise PermissionDeniedError("Only admins can approve or reject events")

        target = getattr(target_status, "value", target_status)
        if target not in TRANSITION_TARGETS:
            raise ValidationError("Invalid status.")

        reason = reason.strip() if reason else None
        if target == EventStatus.REJECTED.value and not reason:
            raise ValidationError("A reason is required to reject an event")

        with self._transaction(f"mark event {target}"):
            event = self._get_event_or_raise(event_id, lock=True)
            previous = event.status

            if target == EventStatus.APPROVED.value:
                self._raise_if_duplicate(event, event.event_name, event.date_time)

            event.status = target
            event.rejection_reason = (
                reason if target == EventStatus.REJECTED.value else None
            )

            self.db.flush()
            result = self._serialize_event(event)

        logger.info(f"Event {event_id} moved from {previous} to {target}")
        return result

    def delete_event(self, event_id: int, actor) -> None:
        """Hard delete, whatever the status; registrations and expenses go with it"""

        with self._transaction("delete event"):
            event = self._get_event_or_raise(event_id, lock=True)
            self._require_event_manager(actor, event, "delete this event")
            self.db.delete(event)

        logger.info(f"Event {event_id} deleted by user {actor.id}")

    # === QUERIES ===
    def get_event(self, event_id: int) -> Dict[str, Any]:
        """Single event with organizer identity and live registered count"""

        with self._transaction("load event"):
            row = (
                self._detailed_query()
                .filter(Event.id == event_id)
                .first()
            )
            if not row:
                raise NotFoundError(f"Event {event_id} not found")
            return self._serialize_row(row)

    def list_organizer_events(
        self, organizer_id: int, status: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Events owned by an organizer, optionally filtered by status"""

        status = getattr(status, "value", status)
        with self._transaction("list organizer events"):
            query = self._detailed_query().filter(Event.organizer_id == organizer_id)
            if status:
                query = query.filter(Event.status == status)
            rows = query.order_by(Event.created_at.desc(), Event.id.desc()).all()
            return [self._serialize_row(row) for row in rows]

    def list_pending_events(self, actor_role: str) -> List[Dict[str, Any]]:
        """Global review queue (admin only)"""

        if actor_role != UserRole.ADMIN.value:
            raise PermissionDeniedError("Only admins can view pending events")

        with self._transaction("list pending events"):
            rows = (
                self._detailed_query()
                .filter(Event.status == EventStatus.PENDING.value)
                .order_by(Event.created_at.desc(), Event.id.desc())
                .all()
            )
            return [self._serialize_row(row) for row in rows]

    def list_upcoming_approved_events(self) -> List[Dict[str, Any]]:
        """Approved events scheduled now or later, for students to browse"""

        with self._transaction("list approved events"):
            rows = (
                self._detailed_query()
                .filter(
                    Event.status == EventStatus.APPROVED.value,
                    Event.date_time >= DateHelpers.utcnow(),
                )
                .order_by(Event.created_at.desc(), Event.id.desc())
                .all()
            )
            return [self._serialize_row(row) for row in rows]

    def list_all_events(self, actor_role: str) -> List[Dict[str, Any]]:
        """Every event regardless of status (admin only)"""

        if actor_role != UserRole.ADMIN.value:
            raise PermissionDeniedError("Only admins can view all events")

        with self._transaction("list events"):
            rows = (
                self._detailed_query()
                .order_by(Event.created_at.desc(), Event.id.desc())
                .all()
            )
            return [self._serialize_row(row) for row in rows]

    def get_event_reports(self, actor) -> Dict[str, Any]:
        """Status counts, monthly volume and best-filled approved events.

        Admins see every event; anyone else sees only events they organize.
        """
        with self._transaction("build event reports"):
            query = self.db.query(Event, registered_count_column())
            if actor.role != UserRole.ADMIN.value:
                query = query.filter(Event.organizer_id == actor.id)
            rows = query.all()

        status_counts = Counter(event.status for event, _ in rows)
        monthly = Counter(DateHelpers.month_key(event.date_time) for event, _ in rows)

        registration_stats = [
            {
                "id": event.id,
                "event_name": event.event_name,
                "max_students": event.max_students,
                "registered_count": count,
                "fill_percentage": round(count / event.max_students * 100),
            }
            for event, count in rows
            if event.status == EventStatus.APPROVED.value
        ]
        registration_stats.sort(key=lambda s: s["fill_percentage"], reverse=True)

        return {
            "status_counts": [
                {"status": status, "count": count}
                for status, count in sorted(status_counts.items())
            ],
            "monthly_events": [
                {"month": month, "event_count": monthly[month]}
                for month in sorted(monthly, reverse=True)[: AppConstants.REPORT_MONTHS]
            ],
            "registration_stats": registration_stats[: AppConstants.REPORT_TOP_EVENTS],
        }

    # === HELPER METHODS ===
    def _lock_user_or_raise(self, user_id: int) -> User:
        """Lock the organizer row; serializes that organizer's submissions"""
        user = self.db.query(User).filter(User.id == user_id).with_for_update().first()
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def _raise_if_duplicate(
        self, event: Event, event_name: str, date_time: datetime
    ) -> None:
        """Refuse a name/date that collides with another active future event"""
        now = DateHelpers.utcnow()
        if date_time < now:
            return

        self._lock_user_or_raise(event.organizer_id)
        duplicate = self.db.query(
            self._duplicate_clause(
                event.organizer_id, event_name, now, exclude_event_id=event.id
            )
        ).scalar()
        if duplicate:
            raise DuplicateEventError("Event Name already exists.")

    @staticmethod
    def _duplicate_clause(
        organizer_id: int,
        event_name: str,
        now: datetime,
        exclude_event_id: Optional[int] = None,
    ):
        """EXISTS clause for an active event of the same name scheduled now or later"""
        query = select(Event.id).where(
            Event.organizer_id == organizer_id,
            Event.event_name == event_name,
            Event.status.in_(ACTIVE_EVENT_STATUSES),
            Event.date_time >= now,
        )
        if exclude_event_id is not None:
            query = query.where(Event.id != exclude_event_id)
        return query.correlate(None).exists()

    def _detailed_query(self):
        return self.db.query(
            Event, User.name, User.email, registered_count_column()
        ).join(User, Event.organizer_id == User.id)

    @staticmethod
    def _clean_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {}
        for field, value in fields.items():
            if isinstance(value, str):
                value = value.strip()
                if field == "description" and not value:
                    value = None
            if field == "date_time" and isinstance(value, datetime):
                value = DateHelpers.to_naive_utc(value)
            cleaned[field] = value
        return cleaned

    @staticmethod
    def _validate_event_fields(fields: Dict[str, Any], partial: bool = False) -> None:
        """Raise ValidationError for absent required fields or bad numbers"""
        for field in REQUIRED_EVENT_FIELDS:
            if partial and field not in fields:
                continue
            value = fields.get(field)
            if value is None or value == "":
                raise ValidationError(f"{field} is required")

        if "date_time" in fields and not isinstance(fields["date_time"], datetime):
            raise ValidationError("date_time must be a datetime")

        if "max_students" in fields:
            capacity = fields["max_students"]
            if (
                isinstance(capacity, bool)
                or not isinstance(capacity, int)
                or capacity < AppConstants.MIN_EVENT_CAPACITY
            ):
                raise ValidationError("max_students must be at least 1")

        if "total_budget" in fields:
            budget = fields["total_budget"]
            if (
                isinstance(budget, bool)
                or not isinstance(budget, (int, float))
                or not math.isfinite(budget)
                or budget < 0
            ):
                raise ValidationError("total_budget must be a non-negative amount")

    @staticmethod
    def _serialize_event(
        event: Event,
        organizer_name: Optional[str] = None,
        organizer_email: Optional[str] = None,
        registered_count: Optional[int] = None,
    ) -> Dict[str, Any]:
        return {
            "id": event.id,
            "organizer_id": event.organizer_id,
            "event_name": event.event_name,
            "date_time": event.date_time,
            "venue": event.venue,
            "description": event.description,
            "max_students": event.max_students,
            "total_budget": event.total_budget,
            "status": event.status,
            "rejection_reason": event.rejection_reason,
            "created_at": event.created_at,
            "organizer_name": organizer_name,
            "organizer_email": organizer_email,
            "registered_count": registered_count,
        }

    def _serialize_row(self, row) -> Dict[str, Any]:
        event, organizer_name, organizer_email, registered_count = row
        return self._serialize_event(
            event, organizer_name, organizer_email, registered_count
        )

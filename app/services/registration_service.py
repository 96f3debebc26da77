from sqlalchemy import and_, func, insert, literal, select, update
from typing import List, Dict, Any
import logging

from ..models.event import Event
from ..models.registration import Registration
from ..models.user import User
from ..models.enums import RegistrationStatus
from .base import BaseService
from .exceptions import NotFoundError, CapacityExceededError

logger = logging.getLogger(__name__)


class RegistrationService(BaseService):
    """Capacity-safe enrollment and cancellation"""

    def register_for_event(self, user_id: int, event_id: int) -> Dict[str, Any]:
        """Admit a student if the event still has a free seat.

        The seat count and the insert happen in one INSERT ... SELECT guarded by
        ``count(Registered) < max_students``, after the event row is locked.
        Zero inserted rows means the event was full.
        """
        with self._transaction("register for event"):
            user = self.db.query(User).filter(User.id == user_id).first()
            if not user:
                raise NotFoundError("User not found")

            event = self._get_event_or_raise(event_id, lock=True)

            current_registered = self._registered_count_subquery(event_id)
            candidate = select(
                literal(user.id, Registration.user_id.type),
                literal(event.id, Registration.event_id.type),
                literal(user.name, Registration.student_name.type),
                literal(user.email, Registration.email_id.type),
                literal(event.event_name, Registration.event_name.type),
                literal(RegistrationStatus.REGISTERED.value, Registration.status.type),
            ).where(Event.id == event_id, current_registered < Event.max_students)

            stmt = (
                insert(Registration)
                .from_select(
                    [
                        "user_id",
                        "event_id",
                        "student_name",
                        "email_id",
                        "event_name",
                        "status",
                    ],
                    candidate,
                )
                .returning(Registration.id)
            )
            registration_id = self.db.execute(stmt).scalar_one_or_none()

            if registration_id is None:
                logger.info(
                    f"Registration rejected for user {user_id}: event {event_id} "
                    f"is at capacity ({event.max_students})"
                )
                raise CapacityExceededError("Registrations full")

            registration = self.db.get(Registration, registration_id)
            result = self._serialize(registration)

        logger.info(f"User {user_id} registered for event {event_id}")
        return result

    def cancel_registration(self, user_id: int, event_id: int) -> int:
        """Soft-delete the user's registrations for an event.

        Idempotent: returns how many rows flipped to Cancelled, which is 0 when
        there was nothing left to cancel.
        """
        with self._transaction("cancel registration"):
            result = self.db.execute(
                update(Registration)
                .where(
                    and_(
                        Registration.user_id == user_id,
                        Registration.event_id == event_id,
                        Registration.status == RegistrationStatus.REGISTERED.value,
                    )
                )
                .values(status=RegistrationStatus.CANCELLED.value)
            )
            cancelled = result.rowcount

        logger.info(
            f"User {user_id} cancelled registration for event {event_id} "
            f"({cancelled} row(s) changed)"
        )
        return cancelled

    def list_registrations_for_user(
        self, user_id: int, include_cancelled: bool = False
    ) -> List[Dict[str, Any]]:
        with self._transaction("list user registrations"):
            query = self.db.query(Registration).filter(Registration.user_id == user_id)
            if not include_cancelled:
                query = query.filter(
                    Registration.status == RegistrationStatus.REGISTERED.value
                )
            registrations = query.order_by(Registration.id.desc()).all()
            return [self._serialize(r) for r in registrations]

    def list_registrations_for_event(self, event_id: int, actor) -> List[Dict[str, Any]]:
        """Registered students of one event (organizer of the event or admin)"""

        with self._transaction("list event registrations"):
            event = self._get_event_or_raise(event_id)
            self._require_event_manager(actor, event, "view its registrations")

            rows = (
                self.db.query(Registration, User.email)
                .join(User, Registration.user_id == User.id)
                .filter(
                    Registration.event_id == event_id,
                    Registration.status == RegistrationStatus.REGISTERED.value,
                )
                .order_by(Registration.id)
                .all()
            )
            return [
                {
                    "registration_id": registration.id,
                    "user_id": registration.user_id,
                    "student_name": registration.student_name,
                    "email": email,
                    "registered_at": registration.registered_at,
                }
                for registration, email in rows
            ]

    def count_registered(self, event_id: int) -> int:
        with self._transaction("count registrations"):
            return self.db.execute(
                select(self._registered_count_subquery(event_id))
            ).scalar_one()

    # === HELPER METHODS ===
    @staticmethod
    def _registered_count_subquery(event_id: int):
        return (
            select(func.count(Registration.id))
            .where(
                Registration.event_id == event_id,
                Registration.status == RegistrationStatus.REGISTERED.value,
            )
            .correlate(None)
            .scalar_subquery()
        )

    @staticmethod
    def _serialize(registration: Registration) -> Dict[str, Any]:
        return {
            "id": registration.id,
            "user_id": registration.user_id,
            "event_id": registration.event_id,
            "student_name": registration.student_name,
            "email_id": registration.email_id,
            "event_name": registration.event_name,
            "status": registration.status,
            "registered_at": registration.registered_at,
        }

from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from ..models.event import Event
from ..models.enums import UserRole
from .exceptions import (
    ServiceError,
    NotFoundError,
    PermissionDeniedError,
    translate_store_error,
)

logger = logging.getLogger(__name__)


class BaseService:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _transaction(self, action: str):
        """Run one top-level operation as a single transaction.

        Commits on success. On any failure the session is rolled back so no
        partial effect survives, and store errors are re-raised as taxonomy kinds.
        """
        try:
            yield
            self.db.commit()
        except ServiceError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Store error during {action}: {e}", exc_info=True)
            raise translate_store_error(e, action) from e
        except Exception:
            self.db.rollback()
            raise

    def _get_event_or_raise(self, event_id: int, lock: bool = False) -> Event:
        """Get event or raise exception; ``lock`` takes a row lock until commit"""
        query = self.db.query(Event).filter(Event.id == event_id)
        if lock:
            query = query.with_for_update()
        event = query.first()
        if not event:
            raise NotFoundError(f"Event {event_id} not found")
        return event

    @staticmethod
    def _is_admin(actor) -> bool:
        return actor.role == UserRole.ADMIN.value

    def _require_event_manager(self, actor, event: Event, action: str) -> None:
        """Only the owning organizer or an admin may manage an event"""
        if self._is_admin(actor) or actor.id == event.organizer_id:
            return
        raise PermissionDeniedError(
            f"Only the event organizer or an admin can {action}"
        )

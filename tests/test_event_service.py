# tests/test_event_service.py

from datetime import timedelta, timezone

import pytest

from app.models.event import Event
from app.models.enums import EventStatus, UserRole
from app.services.event_service import EventService
from app.services.registration_service import RegistrationService
from app.services.exceptions import (
    ValidationError,
    NotFoundError,
    PermissionDeniedError,
    InvalidStateError,
    DuplicateEventError,
)
from app.utils.date_helpers import DateHelpers


def test_create_event_starts_pending(db_session, organizer, make_event):
    event_id = make_event()

    event = db_session.get(Event, event_id)
    assert event.status == EventStatus.PENDING.value
    assert event.rejection_reason is None
    assert event.organizer_id == organizer.id
    assert event.created_at is not None


def test_create_event_strips_text_and_normalizes_aware_datetime(db_session, organizer, future):
    aware = future().replace(tzinfo=timezone(timedelta(hours=2)))
    event_id = EventService(db_session).create_event(
        organizer_id=organizer.id,
        event_name="  Robotics Demo  ",
        date_time=aware,
        venue=" Lab 3 ",
        description="   ",
        max_students=5,
        total_budget=0,
    )

    event = db_session.get(Event, event_id)
    assert event.event_name == "Robotics Demo"
    assert event.venue == "Lab 3"
    assert event.description is None
    assert event.date_time == aware.astimezone(timezone.utc).replace(tzinfo=None)


@pytest.mark.parametrize(
    "overrides",
    [
        {"event_name": ""},
        {"venue": None},
        {"date_time": None},
        {"max_students": 0},
        {"max_students": None},
        {"total_budget": -1},
    ],
)
def test_create_event_rejects_invalid_input(db_session, organizer, future, overrides):
    fields = dict(
        organizer_id=organizer.id,
        event_name="Career Fair",
        date_time=future(),
        venue="Gym",
        description=None,
        max_students=50,
        total_budget=500.0,
    )
    fields.update(overrides)

    with pytest.raises(ValidationError):
        EventService(db_session).create_event(**fields)

    assert db_session.query(Event).count() == 0


def test_create_event_for_unknown_organizer(db_session, future):
    with pytest.raises(NotFoundError):
        EventService(db_session).create_event(
            organizer_id=999,
            event_name="Ghost Event",
            date_time=future(),
            venue="Nowhere",
            description=None,
            max_students=1,
            total_budget=0,
        )


def test_duplicate_pending_event_is_rejected(db_session, make_event):
    make_event(event_name="Hack Night")

    with pytest.raises(DuplicateEventError) as exc_info:
        make_event(event_name="Hack Night")

    assert exc_info.value.error_code == "DuplicateEventError"
    assert db_session.query(Event).count() == 1


def test_duplicate_approved_event_is_rejected(db_session, admin, make_event):
    event_id = make_event(event_name="Hack Night")
    EventService(db_session).transition_status(
        event_id, EventStatus.APPROVED.value, admin.role
    )

    with pytest.raises(DuplicateEventError):
        make_event(event_name="Hack Night")


def test_same_name_allowed_after_rejection(db_session, admin, make_event):
    event_id = make_event(event_name="Hack Night")
    EventService(db_session).transition_status(
        event_id, EventStatus.REJECTED.value, admin.role, reason="Venue unavailable"
    )

    second_id = make_event(event_name="Hack Night")

    assert second_id != event_id


def test_same_name_allowed_when_existing_event_is_past(db_session, make_event):
    make_event(event_name="Hack Night", date_time=DateHelpers.utcnow() - timedelta(days=1))

    assert make_event(event_name="Hack Night")


def test_same_name_allowed_for_another_organizer(db_session, make_user, make_event):
    other = make_user(UserRole.ORGANIZER.value)
    make_event(event_name="Hack Night")

    assert make_event(owner=other, event_name="Hack Night")


def test_update_pending_event(db_session, organizer, make_event):
    event_id = make_event()

    updated = EventService(db_session).update_event(
        event_id, {"venue": "Auditorium", "max_students": 25}, actor=organizer
    )

    assert updated["venue"] == "Auditorium"
    assert updated["max_students"] == 25
    assert updated["status"] == EventStatus.PENDING.value


def test_update_event_not_found(db_session, organizer):
    with pytest.raises(NotFoundError):
        EventService(db_session).update_event(999, {"venue": "X"}, actor=organizer)


def test_update_non_pending_event_is_invalid_state(db_session, organizer, admin, make_event):
    event_id = make_event()
    service = EventService(db_session)
    service.transition_status(event_id, EventStatus.APPROVED.value, admin.role)

    with pytest.raises(InvalidStateError):
        service.update_event(event_id, {"venue": "Elsewhere"}, actor=organizer)


def test_update_by_other_organizer_is_denied(db_session, make_user, make_event):
    event_id = make_event()
    intruder = make_user(UserRole.ORGANIZER.value)

    with pytest.raises(PermissionDeniedError):
        EventService(db_session).update_event(event_id, {"venue": "X"}, actor=intruder)


def test_update_rejects_unknown_and_invalid_fields(db_session, organizer, make_event):
    event_id = make_event()
    service = EventService(db_session)

    with pytest.raises(ValidationError):
        service.update_event(event_id, {"status": "approved"}, actor=organizer)
    with pytest.raises(ValidationError):
        service.update_event(event_id, {"max_students": 0}, actor=organizer)
    with pytest.raises(ValidationError):
        service.update_event(event_id, {}, actor=organizer)


def test_rename_into_duplicate_is_rejected(db_session, organizer, make_event):
    make_event(event_name="Hack Night")
    other_id = make_event(event_name="Game Night")

    with pytest.raises(DuplicateEventError):
        EventService(db_session).update_event(
            other_id, {"event_name": "Hack Night"}, actor=organizer
        )


def test_rename_to_own_name_is_not_a_duplicate(db_session, organizer, make_event):
    event_id = make_event(event_name="Hack Night")

    updated = EventService(db_session).update_event(
        event_id, {"event_name": "Hack Night", "venue": "Room 2"}, actor=organizer
    )

    assert updated["venue"] == "Room 2"


def active_future_events_named(db_session, name):
    return (
        db_session.query(Event)
        .filter(
            Event.event_name == name,
            Event.status.in_(["pending", "approved"]),
            Event.date_time >= DateHelpers.utcnow(),
        )
        .count()
    )


def test_moving_past_event_into_future_checks_duplicates(
    db_session, organizer, make_event, future
):
    old_id = make_event(
        event_name="Gala", date_time=DateHelpers.utcnow() - timedelta(days=30)
    )
    make_event(event_name="Gala", date_time=future(3))

    with pytest.raises(DuplicateEventError):
        EventService(db_session).update_event(
            old_id, {"date_time": future(9)}, actor=organizer
        )

    assert active_future_events_named(db_session, "Gala") == 1


def test_moving_event_to_the_past_skips_duplicate_check(
    db_session, organizer, make_event, future
):
    make_event(event_name="Gala", date_time=future(3))
    other_id = make_event(event_name="Ball", date_time=future(4))
    past = DateHelpers.utcnow().replace(microsecond=0) - timedelta(days=1)

    updated = EventService(db_session).update_event(
        other_id, {"event_name": "Gala", "date_time": past}, actor=organizer
    )

    assert updated["date_time"] == past


def test_reschedule_without_collision(db_session, organizer, make_event, future):
    event_id = make_event(event_name="Gala", date_time=future(3))
    later = future(10)

    updated = EventService(db_session).update_event(
        event_id, {"date_time": later}, actor=organizer
    )

    assert updated["date_time"] == later


def test_transition_requires_admin(db_session, organizer, make_event):
    event_id = make_event()

    with pytest.raises(PermissionDeniedError) as exc_info:
        EventService(db_session).transition_status(
            event_id, EventStatus.APPROVED.value, organizer.role
        )

    assert exc_info.value.error_code == "PermissionError"


def test_transition_validates_target_and_reason(db_session, admin, make_event):
    event_id = make_event()
    service = EventService(db_session)

    with pytest.raises(ValidationError):
        service.transition_status(event_id, EventStatus.PENDING.value, admin.role)
    with pytest.raises(ValidationError):
        service.transition_status(event_id, EventStatus.REJECTED.value, admin.role)
    with pytest.raises(ValidationError):
        service.transition_status(
            event_id, EventStatus.REJECTED.value, admin.role, reason="   "
        )
    with pytest.raises(NotFoundError):
        service.transition_status(999, EventStatus.APPROVED.value, admin.role)


def test_reject_sets_reason_and_approve_clears_it(db_session, admin, make_event):
    event_id = make_event()
    service = EventService(db_session)

    rejected = service.transition_status(
        event_id, EventStatus.REJECTED.value, admin.role, reason="Budget too high"
    )
    assert rejected["status"] == EventStatus.REJECTED.value
    assert rejected["rejection_reason"] == "Budget too high"

    # Decided events may be decided again
    approved = service.transition_status(event_id, EventStatus.APPROVED, admin.role)
    assert approved["status"] == EventStatus.APPROVED.value
    assert approved["rejection_reason"] is None


def test_delete_event_cascades(db_session, organizer, student, make_event):
    event_id = make_event()
    RegistrationService(db_session).register_for_event(student.id, event_id)

    EventService(db_session).delete_event(event_id, actor=organizer)

    assert db_session.get(Event, event_id) is None
    assert RegistrationService(db_session).list_registrations_for_user(student.id) == []


def test_delete_event_ownership(db_session, admin, make_user, make_event):
    event_id = make_event()
    intruder = make_user(UserRole.ORGANIZER.value)
    service = EventService(db_session)

    with pytest.raises(PermissionDeniedError):
        service.delete_event(event_id, actor=intruder)

    service.delete_event(event_id, actor=admin)
    with pytest.raises(NotFoundError):
        service.get_event(event_id)


def test_get_event_includes_organizer_and_live_count(db_session, organizer, student, make_event):
    event_id = make_event(max_students=3)
    RegistrationService(db_session).register_for_event(student.id, event_id)

    event = EventService(db_session).get_event(event_id)

    assert event["organizer_name"] == "Olivia Organizer"
    assert event["organizer_email"] == organizer.email
    assert event["registered_count"] == 1


def test_organizer_views_filter_by_status(db_session, organizer, admin, make_event):
    service = EventService(db_session)
    pending_id = make_event(event_name="Pending One")
    approved_id = make_event(event_name="Approved One")
    rejected_id = make_event(event_name="Rejected One")
    service.transition_status(approved_id, "approved", admin.role)
    service.transition_status(rejected_id, "rejected", admin.role, reason="No")

    def ids(status):
        return [e["id"] for e in service.list_organizer_events(organizer.id, status)]

    assert ids(EventStatus.PENDING) == [pending_id]
    assert ids("approved") == [approved_id]
    assert ids("rejected") == [rejected_id]
    assert len(service.list_organizer_events(organizer.id)) == 3


def test_admin_lists(db_session, organizer, admin, make_event):
    service = EventService(db_session)
    first = make_event(event_name="First")
    second = make_event(event_name="Second")
    service.transition_status(second, "approved", admin.role)

    pending = service.list_pending_events(admin.role)
    assert [e["id"] for e in pending] == [first]
    assert {e["id"] for e in service.list_all_events(admin.role)} == {first, second}

    with pytest.raises(PermissionDeniedError):
        service.list_pending_events(organizer.role)
    with pytest.raises(PermissionDeniedError):
        service.list_all_events(organizer.role)


def test_upcoming_approved_excludes_past_and_unapproved(db_session, admin, make_event):
    service = EventService(db_session)
    upcoming = make_event(event_name="Upcoming")
    past = make_event(
        event_name="Past", date_time=DateHelpers.utcnow() - timedelta(days=2)
    )
    make_event(event_name="Still Pending")
    service.transition_status(upcoming, "approved", admin.role)
    service.transition_status(past, "approved", admin.role)

    events = service.list_upcoming_approved_events()

    assert [e["id"] for e in events] == [upcoming]
    assert events[0]["registered_count"] == 0


def test_reports_for_organizer_and_admin(db_session, organizer, admin, make_user, make_event):
    service = EventService(db_session)
    registrations = RegistrationService(db_session)

    full = make_event(event_name="Full", max_students=1)
    half = make_event(event_name="Half", max_students=2)
    make_event(event_name="Waiting")
    service.transition_status(full, "approved", admin.role)
    service.transition_status(half, "approved", admin.role)
    registrations.register_for_event(make_user().id, full)
    registrations.register_for_event(make_user().id, half)

    other = make_user(UserRole.ORGANIZER.value)
    make_event(owner=other, event_name="Someone Else's")

    reports = service.get_event_reports(organizer)

    assert reports["status_counts"] == [
        {"status": "approved", "count": 2},
        {"status": "pending", "count": 1},
    ]
    assert sum(m["event_count"] for m in reports["monthly_events"]) == 3
    assert [s["event_name"] for s in reports["registration_stats"]] == ["Full", "Half"]
    assert [s["fill_percentage"] for s in reports["registration_stats"]] == [100, 50]

    admin_reports = service.get_event_reports(admin)
    assert sum(c["count"] for c in admin_reports["status_counts"]) == 4


def test_reapproving_rejected_event_cannot_duplicate_active_one(
    db_session, admin, make_event
):
    service = EventService(db_session)
    first = make_event(event_name="Gala")
    service.transition_status(first, "rejected", admin.role, reason="Resubmit")
    second = make_event(event_name="Gala")
    service.transition_status(second, "approved", admin.role)

    with pytest.raises(DuplicateEventError):
        service.transition_status(first, "approved", admin.role)

    assert db_session.get(Event, first).status == EventStatus.REJECTED.value
    assert active_future_events_named(db_session, "Gala") == 1


def test_approving_past_event_skips_duplicate_check(db_session, admin, make_event):
    service = EventService(db_session)
    past_id = make_event(
        event_name="Gala", date_time=DateHelpers.utcnow() - timedelta(days=1)
    )
    make_event(event_name="Gala")

    approved = service.transition_status(past_id, "approved", admin.role)

    assert approved["status"] == EventStatus.APPROVED.value


def test_create_event_rejects_non_finite_budget(db_session, organizer, make_event):
    with pytest.raises(ValidationError):
        make_event(total_budget=float("nan"))
    with pytest.raises(ValidationError):
        make_event(total_budget=float("inf"))

    assert db_session.query(Event).count() == 0

# app/routers/event.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Dict, Any
from ..database import get_db
from ..dependencies.permissions import (
    get_current_user,
    require_admin,
    require_organizer,
)
from ..services.event_service import EventService
from ..services.registration_service import RegistrationService
from ..schemas.event import (
    EventCreate,
    EventUpdate,
    EventStatusUpdate,
    EventRejection,
    EventResponse,
)
from ..schemas.user import CurrentUser
from ..models.enums import EventStatus
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["events"])


def _event_out(event: Dict[str, Any]) -> Dict[str, Any]:
    return EventResponse(**event).model_dump()


@router.post("/", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_event(
    event_data: EventCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_organizer),
):
    """Submit a new event for admin review"""
    event_service = EventService(db)
    event_id = event_service.create_event(
        organizer_id=current_user.id,
        event_name=event_data.event_name,
        date_time=event_data.date_time,
        venue=event_data.venue,
        description=event_data.description,
        max_students=event_data.max_students,
        total_budget=event_data.total_budget,
    )

    return RouterResponse.created(
        data={"event_id": event_id}, message="Event submitted for approval"
    )


@router.get("/", response_model=Dict[str, Any])
@handle_service_errors
async def get_upcoming_events(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Approved events that have not happened yet"""
    event_service = EventService(db)
    events = event_service.list_upcoming_approved_events()

    return RouterResponse.success(
        data={"events": [_event_out(event) for event in events]}
    )


@router.get("/all", response_model=Dict[str, Any])
@handle_service_errors
async def get_all_events(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Every event regardless of status"""
    event_service = EventService(db)
    events = event_service.list_all_events(actor_role=current_user.role)

    return RouterResponse.success(
        data={"events": [_event_out(event) for event in events]}
    )


@router.get("/pending", response_model=Dict[str, Any])
@handle_service_errors
async def get_pending_events(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Review queue for admins"""
    event_service = EventService(db)
    events = event_service.list_pending_events(actor_role=current_user.role)

    return RouterResponse.success(
        data={"events": [_event_out(event) for event in events]}
    )


@router.get("/mine/{event_status}", response_model=Dict[str, Any])
@handle_service_errors
async def get_my_events(
    event_status: EventStatus,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_organizer),
):
    """The calling organizer's events in one status"""
    event_service = EventService(db)
    events = event_service.list_organizer_events(
        organizer_id=current_user.id, status=event_status
    )

    return RouterResponse.success(
        data={"events": [_event_out(event) for event in events]}
    )


@router.get("/reports", response_model=Dict[str, Any])
@handle_service_errors
async def get_event_reports(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_organizer),
):
    """Status counts, monthly volume and best-filled events"""
    event_service = EventService(db)
    reports = event_service.get_event_reports(actor=current_user)

    return RouterResponse.success(data=reports)


@router.post("/status", response_model=Dict[str, Any])
@handle_service_errors
async def update_event_status(
    status_data: EventStatusUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Approve or reject an event"""
    event_service = EventService(db)
    event = event_service.transition_status(
        event_id=status_data.event_id,
        target_status=status_data.status,
        actor_role=current_user.role,
        reason=status_data.reason,
    )

    return RouterResponse.updated(
        data={"event": _event_out(event)},
        message=f"Event {status_data.status.value}",
    )


@router.get("/{event_id}", response_model=Dict[str, Any])
@handle_service_errors
async def get_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    event_service = EventService(db)
    event = event_service.get_event(event_id)

    return RouterResponse.success(data={"event": _event_out(event)})


@router.put("/{event_id}", response_model=Dict[str, Any])
@handle_service_errors
async def update_event(
    event_id: int,
    event_data: EventUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Edit a pending event (organizer of the event or admin)"""
    event_service = EventService(db)
    event = event_service.update_event(
        event_id=event_id,
        fields=event_data.model_dump(exclude_unset=True),
        actor=current_user,
    )

    return RouterResponse.updated(
        data={"event": _event_out(event)}, message="Event updated successfully"
    )


@router.delete("/{event_id}", response_model=Dict[str, Any])
@handle_service_errors
async def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    event_service = EventService(db)
    event_service.delete_event(event_id=event_id, actor=current_user)

    return RouterResponse.deleted(message="Event deleted successfully")


@router.put("/{event_id}/approve", response_model=Dict[str, Any])
@handle_service_errors
async def approve_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    event_service = EventService(db)
    event = event_service.transition_status(
        event_id=event_id,
        target_status=EventStatus.APPROVED,
        actor_role=current_user.role,
    )

    return RouterResponse.updated(
        data={"event": _event_out(event)}, message="Event approved"
    )


@router.put("/{event_id}/reject", response_model=Dict[str, Any])
@handle_service_errors
async def reject_event(
    event_id: int,
    rejection: EventRejection,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    event_service = EventService(db)
    event = event_service.transition_status(
        event_id=event_id,
        target_status=EventStatus.REJECTED,
        actor_role=current_user.role,
        reason=rejection.reason,
    )

    return RouterResponse.updated(
        data={"event": _event_out(event)}, message="Event rejected"
    )


@router.get("/{event_id}/registrations", response_model=Dict[str, Any])
@handle_service_errors
async def get_event_registrations(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Students registered for an event (organizer of the event or admin)"""
    registration_service = RegistrationService(db)
    registrations = registration_service.list_registrations_for_event(
        event_id=event_id, actor=current_user
    )

    return RouterResponse.success(
        data={"registrations": registrations, "count": len(registrations)}
    )

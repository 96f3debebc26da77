# app/routers/registrations.py

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Dict, Any
from ..database import get_db
from ..dependencies.permissions import get_current_user
from ..services.registration_service import RegistrationService
from ..schemas.registration import RegistrationRequest, RegistrationResponse
from ..schemas.user import CurrentUser
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["registrations"])


@router.post("/", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def register_for_event(
    registration_data: RegistrationRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Take a seat at an event if one is free"""
    registration_service = RegistrationService(db)
    registration = registration_service.register_for_event(
        user_id=current_user.id, event_id=registration_data.event_id
    )

    return RouterResponse.created(
        data={"registration": RegistrationResponse(**registration).model_dump()},
        message="Registered successfully",
    )


@router.get("/me", response_model=Dict[str, Any])
@handle_service_errors
async def get_my_registrations(
    include_cancelled: bool = Query(
        False, description="Include cancelled registrations"
    ),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    registration_service = RegistrationService(db)
    registrations = registration_service.list_registrations_for_user(
        user_id=current_user.id, include_cancelled=include_cancelled
    )

    return RouterResponse.success(
        data={
            "registrations": [
                RegistrationResponse(**r).model_dump() for r in registrations
            ]
        }
    )


@router.delete("/{event_id}", response_model=Dict[str, Any])
@handle_service_errors
async def cancel_registration(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Cancel the caller's registration; repeating the call is harmless"""
    registration_service = RegistrationService(db)
    cancelled = registration_service.cancel_registration(
        user_id=current_user.id, event_id=event_id
    )

    message = (
        "Registration cancelled" if cancelled else "No active registration to cancel"
    )
    return RouterResponse.success(data={"cancelled": cancelled}, message=message)

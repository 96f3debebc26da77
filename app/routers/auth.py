# app/routers/auth.py

from fastapi import APIRouter, Depends
from ..dependencies.permissions import get_current_user
from ..schemas.common import ResponseFactory, SuccessResponse
from ..schemas.user import CurrentUser, UserResponse

router = APIRouter(tags=["authentication"])


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def get_me(current_user: CurrentUser = Depends(get_current_user)):
    """Identity the access gate resolved for this bearer token"""
    return ResponseFactory.success(
        data=UserResponse(
            id=current_user.id,
            name=current_user.name,
            email=current_user.email,
            role=current_user.role,
        ),
        message="User profile retrieved",
    )

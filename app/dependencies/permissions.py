from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
from ..database import get_db, get_supabase
from ..models.user import User
from ..models.enums import UserRole
from ..schemas.user import CurrentUser
from ..schemas.common import ResponseFactory
from supabase import Client
import logging

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


def _credentials_exception(message: str = "Could not validate credentials"):
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=ResponseFactory.error(message, error_code="AuthenticationError"),
        headers={"WWW-Authenticate": "Bearer"},
    )


# Access gate
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    supabase: Client = Depends(get_supabase),
) -> CurrentUser:
    """Resolve the bearer token to a local user and its role"""
    if credentials is None:
        raise _credentials_exception("Access Denied! No token provided.")

    try:
        # Verify token with Supabase
        auth_response = supabase.auth.get_user(credentials.credentials)
    except Exception as e:
        logger.warning(f"Authentication error: {e}")
        raise _credentials_exception("Invalid Token!")

    if not auth_response or not auth_response.user:
        raise _credentials_exception("Invalid Token!")

    try:
        user = User.get_or_create_from_supabase(auth_response.user, db)
    except SQLAlchemyError as e:
        logger.error(f"Failed to resolve authenticated user: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=ResponseFactory.error(
                "Store unavailable while resolving user",
                error_code="StoreUnavailableError",
            ),
        )

    return CurrentUser.from_model(user)


def _require_roles(*roles: UserRole):
    allowed = {role.value for role in roles}

    async def dependency(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.role not in allowed:
            logger.warning(
                f"User {current_user.id} with role {current_user.role} denied; "
                f"requires one of {sorted(allowed)}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=ResponseFactory.error(
                    "Access Denied!", error_code="PermissionError"
                ),
            )
        return current_user

    return dependency


require_admin = _require_roles(UserRole.ADMIN)
require_organizer = _require_roles(UserRole.ORGANIZER, UserRole.ADMIN)

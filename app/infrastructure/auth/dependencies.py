"""
Authentication dependencies for FastAPI.
Provides authentication and authorization dependencies.
"""

import logging
from typing import Annotated, Any, Dict, List, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config import get_settings
from app.infrastructure.auth.jwt_handler import JWTHandler
from app.domain.models.base import ValidationError

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer()


def get_jwt_handler() -> JWTHandler:
    """Dependency to get JWT handler."""
    return JWTHandler()


async def get_current_user_payload(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    jwt_handler: Annotated[JWTHandler, Depends(get_jwt_handler)]
) -> Dict[str, Any]:
    """
    FastAPI dependency to get current user's full token payload.

    Raises:
        HTTPException: If authentication fails
    """
    try:
        return jwt_handler.verify_token(credentials.credentials)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user_id(
    payload: Annotated[Dict[str, Any], Depends(get_current_user_payload)]
) -> str:
    """FastAPI dependency to get current authenticated user ID."""
    return str(payload["sub"])


async def get_current_user_role(
    payload: Annotated[Dict[str, Any], Depends(get_current_user_payload)]
) -> Optional[str]:
    role = payload.get("role")
    return role.lower() if isinstance(role, str) else None


class RoleChecker:
    """Dependency class to gate endpoints on the token's role claim."""

    def __init__(self, allowed_roles: Optional[List[str]] = None):
        self.allowed_roles = allowed_roles

    async def __call__(
        self,
        user_id: Annotated[str, Depends(get_current_user_id)],
        role: Annotated[Optional[str], Depends(get_current_user_role)]
    ) -> str:
        """
        Returns:
            User ID if authorized

        Raises:
            HTTPException: If the role is not allowed
        """
        allowed = self.allowed_roles or get_settings().rate_admin_roles
        if role not in allowed:
            logger.warning(f"User {user_id} with role {role} denied; requires one of {allowed}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of the roles: {', '.join(allowed)}",
            )
        return user_id


def require_roles(roles: Optional[List[str]] = None) -> RoleChecker:
    """
    Dependency factory for role checking.
    Without explicit roles the configured RATE_ADMIN_ROLES apply.
    """
    return RoleChecker(roles)


require_rate_admin = require_roles()

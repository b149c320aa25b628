"""
Authentication infrastructure module.
Handles JWT validation, user authentication, and authorization.
"""

from .jwt_handler import JWTHandler
from .dependencies import (
    get_jwt_handler,
    get_current_user_id,
    get_current_user_payload,
    get_current_user_role,
    require_roles,
    require_rate_admin,
)

__all__ = [
    "JWTHandler",
    "get_jwt_handler",
    "get_current_user_id",
    "get_current_user_payload",
    "get_current_user_role",
    "require_roles",
    "require_rate_admin",
]

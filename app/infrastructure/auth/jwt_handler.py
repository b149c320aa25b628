"""
JWT token handler.
Verifies bearer tokens issued by the identity provider and extracts claims.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt as jose_jwt

from app.config import get_settings
from app.domain.models.base import ValidationError


class JWTHandler:
    """Handles JWT token validation and user extraction."""

    def __init__(self, secret: Optional[str] = None, algorithm: Optional[str] = None):
        self.settings = get_settings()
        self.jwt_secret = secret or self.settings.jwt_secret_key
        self.jwt_algorithm = algorithm or self.settings.jwt_algorithm

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a JWT token.

        Args:
            token: JWT token string

        Returns:
            Dict containing token payload

        Raises:
            ValidationError: If token is invalid or expired
        """
        if token.startswith('Bearer '):
            token = token[7:]

        try:
            payload = jose_jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[self.jwt_algorithm],
                options={"verify_exp": True, "verify_aud": False}
            )
        except JWTError as e:
            raise ValidationError(f"Invalid JWT token: {str(e)}")

        if not payload.get('sub'):
            raise ValidationError("Token missing user ID (sub claim)")

        if 'exp' not in payload:
            raise ValidationError("Token missing expiration (exp claim)")

        return payload

    def get_user_id(self, token: str) -> str:
        """Extract user ID from JWT token."""
        payload = self.verify_token(token)
        return str(payload['sub'])

    def get_user_role(self, token: str) -> Optional[str]:
        """
        Extract user role from JWT token.

        Returns:
            User role if present in token, None otherwise
        """
        try:
            payload = self.verify_token(token)
            return payload.get('role')
        except ValidationError:
            return None

    def create_token(self, user_id: str, role: str = "user", expires_minutes: int = 60) -> str:
        """
        Issue a signed token. Used by tests and local tooling; production
        tokens come from the identity provider.
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
        }
        return jose_jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)

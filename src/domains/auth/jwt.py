# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token management utilities.

Access tokens carry the caller's identity, legacy role and branch so that
routes can scope queries without a database round trip. Token issuance for
end users happens outside this backend; ``create_access_token`` exists for
the seed script and for tests.

Example:
    >>> from src.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token(user_id="user-123", role="Admin")
    >>> claims = jwt_manager.decode_token(token)
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Literal
from uuid import UUID

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel, ValidationError

from src.core.config.settings import JWTSettings

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """JWT token payload structure.

    Attributes:
        sub: Subject (user ID).
        type: Token type.
        username: Login name of the user.
        role: Legacy single role name (e.g. "SuperAdmin", "Admin", "Teacher").
        branch_id: Branch the user belongs to, if any.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: JWT ID for token tracking.
    """

    sub: str
    type: Literal["access"] = "access"
    username: str | None = None
    role: str | None = None
    branch_id: str | None = None
    exp: int
    iat: int
    jti: str


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """JWT token creation and validation manager.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings

    def create_access_token(
        self,
        user_id: str | UUID,
        username: str | None = None,
        role: str | None = None,
        branch_id: str | UUID | None = None,
        expires_in_minutes: int | None = None,
    ) -> str:
        """Create a signed access token.

        Args:
            user_id: User identifier.
            username: Login name.
            role: Legacy role name.
            branch_id: Branch identifier.
            expires_in_minutes: Override of the configured lifetime.

        Returns:
            JWT access token string.
        """
        now = datetime.now(timezone.utc)
        minutes = (
            expires_in_minutes
            if expires_in_minutes is not None
            else self._settings.access_token_expire_minutes
        )
        exp = now + timedelta(minutes=minutes)

        payload = {
            "sub": str(user_id),
            "type": "access",
            "username": username,
            "role": role,
            "branch_id": str(branch_id) if branch_id else None,
            "exp": int(exp.timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }

        return jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def decode_token(
        self,
        token: str,
        expected_type: Literal["access"] | None = None,
    ) -> TokenPayload:
        """Decode and validate a JWT token.

        Args:
            token: JWT token string.
            expected_type: Expected token type.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or of the wrong type.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except JoseJWTError as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {e}") from e

        if expected_type and payload.get("type") != expected_type:
            raise InvalidTokenError(
                f"Expected {expected_type} token, got {payload.get('type')}"
            )

        try:
            return TokenPayload.model_validate(payload)
        except ValidationError as e:
            logger.warning("Token claims rejected: %s", str(e))
            raise InvalidTokenError("Invalid token: malformed claims") from e


# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bearer token authentication for every KoolHub request.

``AuthMiddleware`` resolves the caller once per request and stores it on
``request.state.user`` (a ``CurrentUser``, or None). It never rejects a
request itself: routes opt in with the ``require_auth`` dependency, which
turns a missing user into a 401 envelope.

    GET /api/v1/students?branch_id=...
    Authorization: Bearer <access token>
"""

import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.core.config import get_settings
from src.domains.auth.jwt import InvalidTokenError, JWTManager, TokenExpiredError, TokenPayload
from src.infrastructure.database.models.user import SUPER_ADMIN_ROLE
from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

# Liveness probes and API docs.
PUBLIC_PATHS = frozenset({
    "/",
    "/health",
    "/health/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
})


def bearer_token(header: str | None) -> str | None:
    """Token from an ``Authorization: Bearer <token>`` header value."""
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token or " " in token:
        return None
    return token


class CurrentUser:
    """Caller identity carried by a verified access token.

    Attributes:
        id: User UUID.
        username: Login name, if carried by the token.
        role: Legacy role name (e.g. ``Admin``, ``Teacher``).
        branch_id: Branch the user belongs to.
    """

    def __init__(self, payload: TokenPayload) -> None:
        self.id = payload.sub
        self.username = payload.username
        self.role = payload.role
        self.branch_id = payload.branch_id

    @property
    def is_super_admin(self) -> bool:
        """SuperAdmins see every branch and hold every permission."""
        return self.role == SUPER_ADMIN_ROLE

    def scope_branch(self, requested: str | None = None) -> str | None:
        """Branch a list request is restricted to.

        SuperAdmins may choose a branch (or none, for all branches); other
        users are always confined to their own branch.
        """
        if self.is_super_admin:
            return requested
        return self.branch_id

    def __repr__(self) -> str:
        return f"<CurrentUser {self.id} role={self.role}>"


class AuthMiddleware(BaseHTTPMiddleware):
    """Attach the authenticated caller, if any, to each request.

    Expired or malformed tokens are logged at debug level and the request
    continues anonymously. The request method, path and user id are bound
    to the structlog context for the duration of the request.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self._jwt = JWTManager(get_settings().jwt)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        request.state.user = None
        clear_context()
        bind_context(method=request.method, path=request.url.path)

        if request.url.path not in PUBLIC_PATHS:
            request.state.user = self._resolve(request.headers.get("Authorization"))

        return await call_next(request)

    def _resolve(self, header: str | None) -> CurrentUser | None:
        token = bearer_token(header)
        if token is None:
            return None
        try:
            payload = self._jwt.decode_token(token, expected_type="access")
        except TokenExpiredError:
            logger.debug("Rejected expired access token")
            return None
        except InvalidTokenError as e:
            logger.debug("Rejected access token: %s", e)
            return None

        bind_context(user_id=payload.sub)
        return CurrentUser(payload)


def get_current_user(request: Request) -> CurrentUser | None:
    """The caller resolved by ``AuthMiddleware``, or None."""
    return getattr(request.state, "user", None)

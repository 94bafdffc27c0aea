# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

This package provides middleware for request processing:
- AuthMiddleware: JWT authentication.
- limiter: slowapi rate limiter keyed by user or client address.

Exports:
    AuthMiddleware: JWT authentication middleware.
    CurrentUser: Authenticated caller stored on ``request.state.user``.
    limiter: Shared rate limiter instance.
    rate_limit_exceeded_handler: 429 envelope handler.
"""

from src.api.middleware.auth import AuthMiddleware, CurrentUser
from src.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "limiter",
    "rate_limit_exceeded_handler",
]

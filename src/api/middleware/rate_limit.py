# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request rate limits (slowapi).

Every route gets ``RATE_LIMIT_REQUESTS_PER_MINUTE`` per client. Report
generation and the bulk attendance/grade writes carry tighter limits.
Clients are keyed by user id once ``AuthMiddleware`` has resolved them,
and by remote address before that.

    @router.post("/bulk")
    @limiter.limit(RATE_LIMIT_BULK)
    async def bulk_mark(request: Request, ...):
        ...
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from src.core.config import get_settings
from src.models.common import Envelope, ErrorKind

logger = logging.getLogger(__name__)

RATE_LIMIT_EXPENSIVE = "10/minute"
RATE_LIMIT_BULK = "30/minute"
RETRY_AFTER_SECONDS = 60


def get_client_identifier(request: Request) -> str:
    """``user:<id>`` for authenticated callers, ``ip:<address>`` otherwise."""
    user = getattr(request.state, "user", None)
    if user:
        return f"user:{user.id}"
    return f"ip:{get_remote_address(request)}"


_limits = get_settings().rate_limit
limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{_limits.requests_per_minute}/minute"],
    storage_uri=_limits.storage_uri,
    enabled=_limits.enabled,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer 429 with a failure envelope and a ``Retry-After`` header."""
    logger.warning("Rate limit %s exceeded by %s", exc.detail, get_client_identifier(request))
    body = Envelope.fail(
        "Too many requests. Please try again later.", ErrorKind.VALIDATION_ERROR
    ).to_dict()
    return JSONResponse(
        content=body,
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )

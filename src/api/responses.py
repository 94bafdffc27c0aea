# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rendering service envelopes as HTTP responses.

Routes never inspect exceptions: they hand the envelope returned by a
service to ``envelope_response``, which picks the status code from
``success`` and ``error_kind``.
"""

from fastapi import status
from fastapi.responses import JSONResponse

from src.models.common import Envelope, ErrorKind

ERROR_STATUS = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONSTRAINT_VIOLATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PERSISTENCE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(envelope: Envelope, success_status: int = status.HTTP_200_OK) -> int:
    if envelope.success:
        return success_status
    return ERROR_STATUS.get(envelope.error_kind, status.HTTP_400_BAD_REQUEST)


def envelope_response(
    envelope: Envelope,
    success_status: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Serialize ``envelope`` with the status code its outcome maps to."""
    return JSONResponse(
        content=envelope.to_dict(),
        status_code=status_for(envelope, success_status),
    )


def error_response(message: str, kind: ErrorKind, status_code: int) -> JSONResponse:
    """Failure envelope for errors raised before a service is reached."""
    return JSONResponse(content=Envelope.fail(message, kind).to_dict(), status_code=status_code)

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request and response models for the API.

Each module holds the create/update request schemas and the response
projections of one resource. ``common`` defines the result envelope
every service returns.
"""

from src.models.common import Envelope, ErrorKind, Pagination

__all__ = ["Envelope", "ErrorKind", "Pagination"]

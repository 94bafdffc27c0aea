# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities.

All timestamps are stored as TIMESTAMPTZ and every Python datetime handled
by the application is timezone-aware UTC. Calendar dates (attendance days,
admission dates) are plain ``date`` values.

Usage:
    from src.utils.datetime import utc_now

    created_at = mapped_column(DateTime(timezone=True), default=utc_now)
"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Get the current UTC calendar date."""
    return utc_now().date()


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Naive datetimes are assumed to already be UTC. Aware datetimes are
    converted.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    """Check whether an optional expiry timestamp lies in the past.

    A missing expiry never expires.

    Args:
        expires_at: Expiry timestamp or None.
        now: Reference time, defaults to the current UTC time.
    """
    if expires_at is None:
        return False
    reference = ensure_utc(now) if now is not None else utc_now()
    return ensure_utc(expires_at) <= reference

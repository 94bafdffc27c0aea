# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Direct messaging domain."""

from src.domains.messaging.service import MessagingService

__all__ = ["MessagingService"]

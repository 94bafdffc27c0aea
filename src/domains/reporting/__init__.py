# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Branch reporting domain."""

from src.domains.reporting.service import ReportingService

__all__ = ["ReportingService"]

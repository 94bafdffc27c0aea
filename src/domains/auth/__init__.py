# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication primitives.

Exports:
    PasswordHasher: bcrypt hashing for user account passwords.
    JWTManager: JWT access token creation and validation.
"""

from src.domains.auth.jwt import JWTManager
from src.domains.auth.password import PasswordHasher

__all__ = [
    "PasswordHasher",
    "JWTManager",
]

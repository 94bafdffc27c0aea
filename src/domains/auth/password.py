# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Password hashing for user accounts using bcrypt.

Accounts created through the user, student and teacher services store
only the bcrypt hash produced here.

Example:
    >>> hasher = PasswordHasher(rounds=10)
    >>> hasher.hash("my_password").startswith("$2b$10$")
    True
"""

import bcrypt

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """bcrypt password hashing with a configurable work factor.

    Attributes:
        _rounds: bcrypt cost factor (log2 of the iteration count).
    """

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        """Hash a password.

        Raises:
            ValueError: If the password is empty or longer than bcrypt accepts.
        """
        if not password:
            raise ValueError("Password cannot be empty")
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes")

        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

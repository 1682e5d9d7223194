# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import PasswordResetToken, SessionClaims, User
from .exceptions import (
    InvalidCredentialsError,
    InvalidResetTokenError,
    UserAlreadyExistsError,
    UserNotFoundError,
)

__all__ = [
    "InvalidCredentialsError",
    "InvalidResetTokenError",
    "PasswordResetToken",
    "SessionClaims",
    "User",
    "UserAlreadyExistsError",
    "UserNotFoundError",
]

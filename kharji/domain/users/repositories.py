# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import PasswordResetToken, User


class UserRepository(Protocol):
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_id(self, user_id: int) -> User | None: ...
    def add(self, user: User) -> User: ...
    def update_name(self, user_id: int, name: str) -> User | None: ...


class PasswordResetTokenRepository(Protocol):
    def add(self, token: PasswordResetToken) -> None: ...
    def redeem(self, token: str, now: datetime, password_hash: str) -> int | None:
        """Consume a live token and set the owner's password in one step.

        Returns the owner's id, or None when the token is unknown, expired or
        already used.
        """
        ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class ResetTokenDelivery(Protocol):
    def deliver(self, email: str, token: str, expires_at: datetime) -> None: ...

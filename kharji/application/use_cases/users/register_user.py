# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from kharji.domain.users.entities import User
from kharji.domain.users.exceptions import UserAlreadyExistsError
from kharji.domain.users.repositories import PasswordHasher, UserRepository


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher

    def execute(self, email: str, password: str) -> User:
        normalized = email.strip().lower()
        if self._users.find_by_email(normalized):
            raise UserAlreadyExistsError()
        hashed = self._password_hasher.hash(password)
        user = User(id=0, email=normalized, password_hash=hashed, created_at=datetime.now(UTC))
        return self._users.add(user)

# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from kharji.domain.users.entities import User
from kharji.domain.users.exceptions import InvalidCredentialsError
from kharji.domain.users.repositories import PasswordHasher, UserRepository


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher

    def execute(self, email: str, password: str) -> User:
        user = self._users.find_by_email(email.strip().lower())
        # same error for unknown email and wrong password
        if user is None or not self._password_hasher.verify(password, user.password_hash):
            raise InvalidCredentialsError()
        return user

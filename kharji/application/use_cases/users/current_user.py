# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from kharji.domain.users.entities import SessionClaims, User
from kharji.domain.users.exceptions import UserNotFoundError
from kharji.domain.users.repositories import UserRepository


class GetCurrentUserUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, claims: SessionClaims | None) -> User | None:
        if claims is None:
            return None
        return self._users.find_by_id(claims.user_id)


class UpdateProfileUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, user_id: int, name: str) -> User:
        user = self._users.update_name(user_id, name)
        if user is None:
            raise UserNotFoundError()
        return user

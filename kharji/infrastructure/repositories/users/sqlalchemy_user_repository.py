# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError

from kharji.domain.users.entities import PasswordResetToken as DomainResetToken
from kharji.domain.users.entities import User as DomainUser
from kharji.domain.users.exceptions import UserAlreadyExistsError
from kharji.domain.users.repositories import PasswordResetTokenRepository, UserRepository
from kharji.infrastructure.db.models import PasswordResetToken, User
from kharji.infrastructure.db.session import session_scope


def _to_domain(row: User) -> DomainUser:
    created_at = row.created_at or datetime.now(UTC)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return DomainUser(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        created_at=created_at,
        name=row.name,
    )


class SqlAlchemyUserRepository(UserRepository):
    def find_by_email(self, email: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.query(User).filter(User.email == email.lower()).first()
            return _to_domain(row) if row else None

    def find_by_id(self, user_id: int) -> DomainUser | None:
        with session_scope() as session:
            row = session.get(User, user_id)
            return _to_domain(row) if row else None

    def add(self, user: DomainUser) -> DomainUser:
        try:
            with session_scope() as session:
                row = User(
                    email=user.email.lower(),
                    password_hash=user.password_hash,
                    name=user.name,
                )
                session.add(row)
                session.flush()
                session.refresh(row)
                return _to_domain(row)
        except IntegrityError as exc:
            # lost a race with a concurrent signup on users.email
            raise UserAlreadyExistsError() from exc

    def update_name(self, user_id: int, name: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.get(User, user_id)
            if row is None:
                return None
            row.name = name
            session.flush()
            return _to_domain(row)


class SqlAlchemyPasswordResetTokenRepository(PasswordResetTokenRepository):
    def add(self, token: DomainResetToken) -> None:
        with session_scope() as session:
            session.add(
                PasswordResetToken(
                    user_id=token.user_id,
                    token=token.token,
                    expires_at=token.expires_at,
                )
            )

    def redeem(self, token: str, now: datetime, password_hash: str) -> int | None:
        with session_scope() as session:
            live = (
                PasswordResetToken.token == token,
                PasswordResetToken.expires_at > now,
            )
            user_id = session.query(PasswordResetToken.user_id).filter(*live).scalar()
            if user_id is None:
                return None

            # only the request whose delete hits the row may set the password
            deleted = session.query(PasswordResetToken).filter(*live).delete(
                synchronize_session=False
            )
            if deleted != 1:
                return None

            session.query(User).filter(User.id == user_id).update(
                {User.password_hash: password_hash, User.updated_at: now},
                synchronize_session=False,
            )
            return user_id

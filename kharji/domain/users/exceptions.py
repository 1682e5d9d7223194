# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from kharji.shared.errors.base import DomainError


class UserAlreadyExistsError(DomainError):
    default_message = "User already exists"
    default_status = HTTPStatus.CONFLICT


class InvalidCredentialsError(DomainError):
    default_message = "Invalid email or password"
    default_status = HTTPStatus.UNAUTHORIZED


class InvalidResetTokenError(DomainError):
    default_message = "Invalid or expired reset token"


class UserNotFoundError(DomainError):
    default_message = "User not found"
    default_status = HTTPStatus.NOT_FOUND

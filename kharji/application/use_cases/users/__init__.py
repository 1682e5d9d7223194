# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .current_user import GetCurrentUserUseCase, UpdateProfileUseCase
from .login_user import LoginUserUseCase
from .register_user import RegisterUserUseCase
from .request_password_reset import RequestPasswordResetUseCase
from .reset_password import ResetPasswordUseCase

__all__ = [
    "GetCurrentUserUseCase",
    "LoginUserUseCase",
    "RegisterUserUseCase",
    "RequestPasswordResetUseCase",
    "ResetPasswordUseCase",
    "UpdateProfileUseCase",
]

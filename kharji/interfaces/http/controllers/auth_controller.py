# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from kharji.application.services.session_manager import SessionManager
from kharji.application.use_cases.users.current_user import GetCurrentUserUseCase
from kharji.application.use_cases.users.login_user import LoginUserUseCase
from kharji.application.use_cases.users.register_user import RegisterUserUseCase
from kharji.application.use_cases.users.request_password_reset import (
    RequestPasswordResetUseCase,
)
from kharji.application.use_cases.users.reset_password import ResetPasswordUseCase
from kharji.domain.users.exceptions import InvalidCredentialsError, InvalidResetTokenError
from kharji.infrastructure.audit import AuditAction, audit_log
from kharji.interfaces.http.dto.auth import (
    AuthSuccessDTO,
    ForgotPasswordRequestDTO,
    LoginRequestDTO,
    MessageDTO,
    ResetPasswordRequestDTO,
    SignupRequestDTO,
)
from kharji.interfaces.http.dto.user import UserDTO
from kharji.shared.errors.validation import raise_validation_error
from kharji.shared.logging import logger

RESET_REQUESTED_MESSAGE = "If that email exists, we sent a password reset link"


def _get_client_ip() -> str | None:
    ip_address = request.headers.get("X-Forwarded-For", request.remote_addr)
    if ip_address and "," in ip_address:
        ip_address = ip_address.split(",")[0].strip()
    return ip_address


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


class AuthController:
    def __init__(
        self,
        *,
        sessions: SessionManager,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        current_user_use_case: GetCurrentUserUseCase,
        request_reset_use_case: RequestPasswordResetUseCase,
        reset_password_use_case: ResetPasswordUseCase,
    ) -> None:
        self._sessions = sessions
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._current_user_use_case = current_user_use_case
        self._request_reset_use_case = request_reset_use_case
        self._reset_password_use_case = reset_password_use_case

    def signup(self) -> tuple[Response, int]:
        try:
            dto = SignupRequestDTO.model_validate(_json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        user = self._register_use_case.execute(dto.email, dto.password)

        audit_log(
            AuditAction.SIGNUP,
            user_id=user.id,
            ip_address=_get_client_ip(),
            success=True,
        )

        payload = AuthSuccessDTO(message="User created successfully", user_id=user.id)
        response = jsonify(payload.model_dump(by_alias=True))
        self._sessions.start(response, user.id, user.email)
        logger.info(f"auth.signup: ok user_id={user.id}")
        return response, 201

    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(_json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = _get_client_ip()

        try:
            user = self._login_use_case.execute(dto.email, dto.password)
        except InvalidCredentialsError:
            audit_log(
                AuditAction.LOGIN_FAILED,
                user_id=None,
                ip_address=ip_address,
                details={"email": dto.email},
                success=False,
            )
            raise

        audit_log(
            AuditAction.LOGIN_SUCCESS,
            user_id=user.id,
            ip_address=ip_address,
            success=True,
        )

        payload = AuthSuccessDTO(message="Logged in successfully", user_id=user.id)
        response = jsonify(payload.model_dump(by_alias=True))
        self._sessions.start(response, user.id, user.email)
        logger.info(f"auth.login: ok user_id={user.id}")
        return response, 200

    def logout(self) -> tuple[Response, int]:
        claims = self._sessions.read()

        audit_log(
            AuditAction.LOGOUT,
            user_id=claims.user_id if claims else None,
            ip_address=_get_client_ip(),
            success=True,
        )

        response = jsonify(MessageDTO(message="Logged out successfully").model_dump())
        self._sessions.end(response)
        logger.info("auth.logout: ok")
        return response, 200

    def me(self) -> tuple[Response, int]:
        claims = self._sessions.read()
        if claims is None:
            return jsonify({"user": None}), 200

        user = self._current_user_use_case.execute(claims)
        if user is None:
            # token outlived its account
            self._sessions.invalidate()
            return jsonify({"user": None}), 200

        return jsonify({"user": UserDTO(**user.public_view()).model_dump()}), 200

    def forgot_password(self) -> tuple[Response, int]:
        try:
            dto = ForgotPasswordRequestDTO.model_validate(_json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        reset = self._request_reset_use_case.execute(dto.email)
        if reset is not None:
            audit_log(
                AuditAction.PASSWORD_RESET_REQUESTED,
                user_id=reset.user_id,
                ip_address=_get_client_ip(),
                success=True,
            )

        # identical response whether or not the account exists
        return jsonify(MessageDTO(message=RESET_REQUESTED_MESSAGE).model_dump()), 200

    def reset_password(self) -> tuple[Response, int]:
        try:
            dto = ResetPasswordRequestDTO.model_validate(_json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = _get_client_ip()
        try:
            user_id = self._reset_password_use_case.execute(dto.token, dto.password)
        except InvalidResetTokenError:
            audit_log(
                AuditAction.PASSWORD_RESET_FAILED,
                ip_address=ip_address,
                success=False,
            )
            raise

        audit_log(
            AuditAction.PASSWORD_RESET_COMPLETED,
            user_id=user_id,
            ip_address=ip_address,
            success=True,
        )
        return jsonify(MessageDTO(message="Password reset successfully").model_dump()), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/signup", view_func=self.signup, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["POST"])
        bp.add_url_rule("/me", view_func=self.me, methods=["GET"])
        bp.add_url_rule("/forgot-password", view_func=self.forgot_password, methods=["POST"])
        bp.add_url_rule("/reset-password", view_func=self.reset_password, methods=["POST"])
        return bp

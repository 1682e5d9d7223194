# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from kharji.application.services.session_manager import SessionManager
from kharji.application.use_cases.users.current_user import UpdateProfileUseCase
from kharji.infrastructure.audit import AuditAction, audit_log
from kharji.interfaces.http.dto.user import UpdateProfileRequestDTO, UserDTO
from kharji.shared.errors import UnauthorizedError
from kharji.shared.errors.validation import raise_validation_error
from kharji.shared.logging import logger


class UserController:
    def __init__(
        self,
        *,
        sessions: SessionManager,
        update_profile_use_case: UpdateProfileUseCase,
    ) -> None:
        self._sessions = sessions
        self._update_profile_use_case = update_profile_use_case

    def update_profile(self) -> tuple[Response, int]:
        claims = self._sessions.read()
        if claims is None:
            raise UnauthorizedError()
        g.user_id = claims.user_id

        try:
            dto = UpdateProfileRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        user = self._update_profile_use_case.execute(claims.user_id, dto.name)
        audit_log(AuditAction.PROFILE_UPDATED, user_id=user.id, success=True)
        logger.info(f"user.profile: updated user_id={user.id}")
        return jsonify({"user": UserDTO(**user.public_view()).model_dump()}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("user", __name__, url_prefix="/api/user")
        bp.add_url_rule("/profile", view_func=self.update_profile, methods=["PUT"])
        return bp

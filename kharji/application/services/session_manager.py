# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Cookie-backed browser sessions on top of :class:`TokenService`."""

from __future__ import annotations

from flask import Flask, Response, g, request

from kharji.application.services.tokens import TokenService
from kharji.domain.users.entities import SessionClaims
from kharji.shared.logging import logger

_INVALID_FLAG = "_session_cookie_invalid"


class SessionManager:
    def __init__(
        self,
        tokens: TokenService,
        *,
        cookie_name: str = "auth_token",
        max_age: int = 60 * 60 * 24 * 30,
        secure: bool = False,
    ) -> None:
        self._tokens = tokens
        self._cookie_name = cookie_name
        self._max_age = max_age
        self._secure = secure

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    def start(self, response: Response, user_id: int, email: str) -> str:
        token = self._tokens.issue(user_id, email)
        response.set_cookie(
            self._cookie_name,
            token,
            max_age=self._max_age,
            path="/",
            httponly=True,
            samesite="Lax",
            secure=self._secure,
        )
        g.pop(_INVALID_FLAG, None)
        logger.debug(f"session.start: user={user_id}")
        return token

    def read(self) -> SessionClaims | None:
        token = request.cookies.get(self._cookie_name)
        if not token:
            return None

        claims = self._tokens.verify(token)
        if claims is None:
            # cleared by the after_request hook installed in init_app
            setattr(g, _INVALID_FLAG, True)
            logger.debug(f"session.read: invalid cookie on {request.method} {request.path}")
        return claims

    def end(self, response: Response) -> None:
        g.pop(_INVALID_FLAG, None)
        response.delete_cookie(
            self._cookie_name,
            path="/",
            httponly=True,
            samesite="Lax",
            secure=self._secure,
        )

    def invalidate(self) -> None:
        """Mark the current request's cookie for removal."""
        setattr(g, _INVALID_FLAG, True)

    def init_app(self, app: Flask) -> None:
        @app.after_request
        def _clear_invalid_session(response: Response) -> Response:
            if g.pop(_INVALID_FLAG, False):
                self.end(response)
            return response


__all__ = ["SessionManager"]

# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, abort, jsonify
from sqlalchemy import text

from kharji.infrastructure.db import ENGINE
from kharji.infrastructure.observability import metrics_enabled, render_latest
from kharji.shared.logging import logger


class MiscController:
    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        bp.add_url_rule("/api/metrics", view_func=self.metrics, methods=["GET"])
        return bp

    def health(self) -> tuple[Response, int]:
        try:
            with ENGINE.connect() as connection:
                connection.execute(text("SELECT 1"))
        except Exception as exc:
            logger.opt(exception=exc).error("health: database unreachable")
            return jsonify({"ok": False, "database": "error"}), 503
        return jsonify({"ok": True, "database": "ok"}), 200

    def metrics(self) -> Response:
        if not metrics_enabled():
            abort(404)
        body, content_type = render_latest()
        return Response(body, content_type=content_type)

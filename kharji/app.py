# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from kharji.infrastructure.container import Container, container
from kharji.infrastructure.db import init_db
from kharji.interfaces.http.controllers.misc_controller import MiscController
from kharji.shared.logging import logger, setup_logging
from kharji.shared.middleware.access_gate import configure_access_gate
from kharji.shared.middleware.error_handler import configure_error_handling
from kharji.shared.middleware.request_logger import configure_request_logging


def create_app(app_container: Container | None = None) -> Flask:
    deps = app_container or container
    config = deps.config

    setup_logging(debug_mode=config.debug_logging)
    init_db()

    app = Flask(__name__, static_folder=None)
    configure_error_handling(app)
    configure_request_logging(app)
    configure_access_gate(
        app,
        deps.access_gate,
        cookie_name=config.auth.cookie_name,
        on_stale_cookie=deps.session_manager.invalidate,
    )
    deps.session_manager.init_app(app)

    app.json.sort_keys = False

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}}
    }
    if any(o != "*" for o in config.security.allowed_origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    app.register_blueprint(MiscController().as_blueprint())
    app.register_blueprint(deps.auth_controller.as_blueprint())
    app.register_blueprint(deps.user_controller.as_blueprint())
    app.register_blueprint(deps.exchange_rate_controller.as_blueprint())

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )

        return resp

    logger.info(f"Flask app initialized env={config.app_env}")
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)

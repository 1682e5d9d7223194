# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from kharji.infrastructure.exchange_rate import ExchangeRateCache
from kharji.shared.errors import ExchangeRateUnavailableError


class ExchangeRateController:
    def __init__(self, *, cache: ExchangeRateCache) -> None:
        self._cache = cache

    def latest(self) -> tuple[Response, int]:
        result = self._cache.get()
        if result is None:
            raise ExchangeRateUnavailableError()
        response = jsonify(result.to_dict())
        response.headers["Cache-Control"] = "no-store"
        return response, 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("exchange_rate", __name__)
        bp.add_url_rule("/api/exchange-rate", view_func=self.latest, methods=["GET"])
        return bp

# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Per-request routing decision: allow, redirect or reject.

Paths are classified by an ordered rule table, first match wins:

1. public API endpoints (exact or prefix-segment match)
2. anything else under ``/api``
3. the root path
4. auth-only pages (login, signup, password recovery)
5. public pages
6. everything else is a protected page

The decision itself is a pure function of the path, the session cookie
value and the table; Flask is only involved in :func:`configure_access_gate`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from urllib.parse import urlencode

from flask import Flask, jsonify, redirect, request

from kharji.shared.logging import logger

API_PREFIX = "/api"

DEFAULT_PUBLIC_API: tuple[str, ...] = (
    "/api/auth/login",
    "/api/auth/signup",
    "/api/auth/forgot-password",
    "/api/auth/reset-password",
    "/api/auth/me",
    "/api/auth/logout",
    "/api/health",
)
DEFAULT_AUTH_PAGES: tuple[str, ...] = (
    "/login",
    "/signup",
    "/forgot-password",
    "/reset-password",
)
DEFAULT_PUBLIC_PAGES: tuple[str, ...] = ("/", *DEFAULT_AUTH_PAGES)


class RouteKind(str, Enum):
    PUBLIC_API = "public_api"
    PROTECTED_API = "protected_api"
    ROOT = "root"
    AUTH_PAGE = "auth_page"
    PUBLIC_PAGE = "public_page"
    PROTECTED_PAGE = "protected_page"


class Match(str, Enum):
    EXACT = "exact"
    SEGMENT = "segment"  # the path itself or anything below it


class Outcome(str, Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"
    REJECT = "reject"


@dataclass(slots=True, frozen=True)
class RouteRule:
    pattern: str
    kind: RouteKind
    match: Match = Match.EXACT

    def matches(self, path: str) -> bool:
        if path == self.pattern:
            return True
        return self.match is Match.SEGMENT and path.startswith(f"{self.pattern.rstrip('/')}/")


@dataclass(slots=True, frozen=True)
class GateDecision:
    outcome: Outcome
    location: str | None = None
    status: int = 200
    stale_cookie: bool = False  # a cookie was sent but did not verify

    @classmethod
    def allow(cls) -> "GateDecision":
        return cls(Outcome.ALLOW)

    @classmethod
    def redirect_to(cls, location: str) -> "GateDecision":
        return cls(Outcome.REDIRECT, location=location, status=307)

    @classmethod
    def reject(cls) -> "GateDecision":
        return cls(Outcome.REJECT, status=401)


def build_route_table(
    *,
    public_api: Iterable[str] = DEFAULT_PUBLIC_API,
    auth_pages: Iterable[str] = DEFAULT_AUTH_PAGES,
    public_pages: Iterable[str] = DEFAULT_PUBLIC_PAGES,
) -> tuple[RouteRule, ...]:
    rules: list[RouteRule] = [
        RouteRule(path, RouteKind.PUBLIC_API, Match.SEGMENT) for path in public_api
    ]
    rules.append(RouteRule(API_PREFIX, RouteKind.PROTECTED_API, Match.SEGMENT))
    rules.append(RouteRule("/", RouteKind.ROOT))
    rules.extend(RouteRule(path, RouteKind.AUTH_PAGE) for path in auth_pages)
    rules.extend(RouteRule(path, RouteKind.PUBLIC_PAGE) for path in public_pages)
    return tuple(rules)


def classify(path: str, rules: Sequence[RouteRule]) -> RouteKind:
    for rule in rules:
        if rule.matches(path):
            return rule.kind
    return RouteKind.PROTECTED_PAGE


class AccessGate:
    def __init__(
        self,
        verify: Callable[[str], object | None],
        *,
        rules: Sequence[RouteRule] | None = None,
        landing_path: str = "/overview",
        login_path: str = "/login",
    ) -> None:
        self._verify = verify
        self._rules = tuple(rules) if rules is not None else build_route_table()
        self._landing_path = landing_path
        self._login_path = login_path

    @property
    def rules(self) -> tuple[RouteRule, ...]:
        return self._rules

    def is_authenticated(self, cookie_value: str | None) -> bool:
        if not cookie_value:
            return False
        return self._verify(cookie_value) is not None

    def evaluate(self, path: str, cookie_value: str | None) -> GateDecision:
        authenticated = self.is_authenticated(cookie_value)
        decision = self._decide(classify(path, self._rules), path, authenticated)
        if cookie_value and not authenticated:
            return replace(decision, stale_cookie=True)
        return decision

    def _decide(self, kind: RouteKind, path: str, authenticated: bool) -> GateDecision:
        if kind is RouteKind.PUBLIC_API:
            return GateDecision.allow()
        if kind is RouteKind.PROTECTED_API:
            return GateDecision.allow() if authenticated else GateDecision.reject()
        if kind is RouteKind.ROOT:
            return GateDecision.redirect_to(
                self._landing_path if authenticated else self._login_path
            )
        if kind is RouteKind.AUTH_PAGE:
            return GateDecision.redirect_to(self._landing_path) if authenticated else GateDecision.allow()
        if kind is RouteKind.PUBLIC_PAGE or authenticated:
            return GateDecision.allow()

        query = urlencode({"from": path}, safe="/")
        return GateDecision.redirect_to(f"{self._login_path}?{query}")


def configure_access_gate(
    app: Flask,
    gate: AccessGate,
    *,
    cookie_name: str,
    on_stale_cookie: Callable[[], None] | None = None,
) -> None:
    @app.before_request
    def _access_gate():
        # CORS preflight carries no cookies
        if request.method == "OPTIONS":
            return None

        decision = gate.evaluate(request.path, request.cookies.get(cookie_name))
        if decision.stale_cookie and on_stale_cookie is not None:
            on_stale_cookie()
        if decision.outcome is Outcome.ALLOW:
            return None
        if decision.outcome is Outcome.REJECT:
            logger.info(f"gate: rejected unauthenticated {request.method} {request.path}")
            return jsonify({"error": "Unauthorized"}), decision.status

        logger.debug(f"gate: redirect {request.path} -> {decision.location}")
        return redirect(decision.location or "/", code=decision.status)


__all__ = [
    "AccessGate",
    "GateDecision",
    "Match",
    "Outcome",
    "RouteKind",
    "RouteRule",
    "build_route_table",
    "classify",
    "configure_access_gate",
]

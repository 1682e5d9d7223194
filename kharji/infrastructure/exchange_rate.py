# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""USD/Toman quote cache with a freshness window and stale fallback.

One slot per process. A successful upstream fetch replaces the slot as a
whole record; concurrent refreshes may both hit upstream, last write wins.
When upstream fails, whatever was cached last is served, however old.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

import httpx

from kharji.infrastructure.observability import record_rate_lookup
from kharji.infrastructure.resilience import CircuitBreaker, default_breaker, resilient_call
from kharji.shared.logging import logger

_MS_PER_HOUR = 60 * 60 * 1000


class UpstreamStatusError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"upstream returned HTTP {status_code}")
        self.status_code = status_code


class RateFetcher(Protocol):
    def fetch(self) -> dict[str, Any]: ...


@dataclass(slots=True, frozen=True)
class CacheEntry:
    payload: dict[str, Any]
    fetched_at: float


@dataclass(slots=True, frozen=True)
class ExchangeRateResult:
    payload: dict[str, Any]
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {**self.payload, "_meta": dict(self.meta)}


def _iso(timestamp: float) -> str:
    moment = datetime.fromtimestamp(timestamp, UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class NavasanRateFetcher:
    def __init__(
        self,
        *,
        api_base: str,
        api_key: str,
        timeout: float = 5.0,
        breaker: CircuitBreaker | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = f"{api_base.rstrip('/')}/latest/"
        self._api_key = api_key
        self._timeout = timeout
        self._breaker = breaker or default_breaker()
        self._transport = transport

    def _get(self) -> httpx.Response:
        with httpx.Client(timeout=self._timeout, transport=self._transport) as http:
            return http.get(self._url, params={"item": "usd", "api_key": self._api_key})

    def fetch(self) -> dict[str, Any]:
        response = resilient_call(
            self._get,
            breaker=self._breaker,
            retry_on=(httpx.TransportError,),
        )
        if response.status_code != 200:
            raise UpstreamStatusError(response.status_code)
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("upstream payload is not an object")
        return payload


class ExchangeRateCache:
    def __init__(
        self,
        fetcher: RateFetcher,
        *,
        ttl_seconds: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._fetcher = fetcher
        self._ttl_ms = ttl_seconds * 1000
        self._clock = clock
        self._entry: CacheEntry | None = None

    @property
    def entry(self) -> CacheEntry | None:
        return self._entry

    def _age_ms(self, entry: CacheEntry, now: float) -> float:
        return max(0.0, (now - entry.fetched_at) * 1000)

    def get(self) -> ExchangeRateResult | None:
        entry = self._entry
        now = self._clock()

        if entry is not None:
            age_ms = self._age_ms(entry, now)
            if age_ms < self._ttl_ms:
                record_rate_lookup("hit")
                logger.info(
                    f"exchange_rate: cache hit age={age_ms / _MS_PER_HOUR:.2f}h"
                )
                return ExchangeRateResult(
                    payload=entry.payload,
                    meta={
                        "cached": True,
                        "cachedAt": _iso(entry.fetched_at),
                        "cacheAgeMs": int(age_ms),
                        "cacheAgeHours": round(age_ms / _MS_PER_HOUR, 2),
                    },
                )

        logger.info("exchange_rate: fetching fresh quote from upstream")
        try:
            payload = self._fetcher.fetch()
        except UpstreamStatusError as exc:
            logger.warning(f"exchange_rate: upstream failed status={exc.status_code}")
            return self._fallback(now, error=False)
        except Exception as exc:
            logger.opt(exception=exc).error("exchange_rate: upstream request failed")
            return self._fallback(now, error=True)

        record_rate_lookup("miss")
        fetched_at = self._clock()
        self._entry = CacheEntry(payload=payload, fetched_at=fetched_at)
        logger.info(f"exchange_rate: fresh quote cached at {_iso(fetched_at)}")
        return ExchangeRateResult(
            payload=payload,
            meta={"cached": False, "fetchedAt": _iso(fetched_at)},
        )

    def _fallback(self, now: float, *, error: bool) -> ExchangeRateResult | None:
        entry = self._entry
        if entry is None:
            logger.error("exchange_rate: no cached quote to fall back on")
            record_rate_lookup("unavailable")
            return None

        age_ms = self._age_ms(entry, now)
        meta: dict[str, Any] = {
            "cached": True,
            "expired": age_ms >= self._ttl_ms,
            "cachedAt": _iso(entry.fetched_at),
            "cacheAgeHours": round(age_ms / _MS_PER_HOUR, 2),
        }
        if error:
            meta["error"] = True
        record_rate_lookup("stale")
        logger.warning(f"exchange_rate: serving stale quote from {meta['cachedAt']}")
        return ExchangeRateResult(payload=entry.payload, meta=meta)


__all__ = [
    "CacheEntry",
    "ExchangeRateCache",
    "ExchangeRateResult",
    "NavasanRateFetcher",
    "RateFetcher",
    "UpstreamStatusError",
]

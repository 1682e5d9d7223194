# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Resilience utilities (retries, circuit breaker)."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from kharji.shared.config import load_config
from kharji.shared.logging import logger

T = TypeVar("T")


class CircuitOpenError(RuntimeError):
    pass


@dataclass
class CircuitBreaker:
    """Simple in-memory circuit breaker."""

    failure_threshold: int
    reset_timeout: float

    def __post_init__(self) -> None:
        self._failures = 0
        self._opened_at: float | None = None

    def allow(self) -> bool:
        if self._opened_at is None:
            return True
        if time.monotonic() - self._opened_at >= self.reset_timeout:
            logger.info("breaker: half-open state")
            self._opened_at = None
            self._failures = 0
            return True
        logger.warning("breaker: open state refusing call")
        return False

    def on_success(self) -> None:
        self._failures = 0
        self._opened_at = None

    def on_failure(self) -> None:
        self._failures += 1
        if self._failures >= self.failure_threshold:
            self._opened_at = time.monotonic()
            logger.error("breaker: opening circuit after failures")


def default_breaker() -> CircuitBreaker:
    config = load_config()
    return CircuitBreaker(
        failure_threshold=config.resilience.circuit_fail_threshold,
        reset_timeout=config.resilience.circuit_reset_timeout,
    )


def resilient_call(  # noqa: UP047
    func: Callable[..., T],
    *args: Any,
    breaker: CircuitBreaker | None = None,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    max_retries: int | None = None,
    **kwargs: Any,
) -> T:
    """Execute call with bounded retries and an optional circuit breaker."""

    config = load_config()
    breaker = breaker or default_breaker()

    if not breaker.allow():
        msg = "Circuit breaker is open"
        raise CircuitOpenError(msg)

    retries = config.resilience.max_retries if max_retries is None else max_retries

    retry = Retrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_exponential(
            multiplier=config.resilience.backoff_base,
            max=config.resilience.backoff_cap,
        ),
        retry=retry_if_exception_type(retry_on),
        reraise=True,
    )

    try:
        for attempt in retry:
            with attempt:
                logger.debug(
                    f"resilience: attempt={attempt.retry_state.attempt_number} "
                    f"func={getattr(func, '__name__', repr(func))}"
                )
                result = func(*args, **kwargs)
                breaker.on_success()
                return result
    except RetryError as exc:
        breaker.on_failure()
        last_exc = exc.last_attempt.exception()
        if last_exc is None:
            raise RuntimeError("resilience: retry failed without exception") from exc
        raise last_exc from exc
    except Exception:
        breaker.on_failure()
        raise
    raise RuntimeError("resilience: reached unexpected branch")


__all__ = ["CircuitBreaker", "CircuitOpenError", "default_breaker", "resilient_call"]

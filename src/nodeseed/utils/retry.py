# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

T = TypeVar("T")


class RetryError(RuntimeError):
    def __init__(self, message: str, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class RetryCancelled(RetryError):
    pass


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounds for a retry loop.

    max_attempts: total attempts allowed (None = bounded by deadline only)
    deadline_seconds: overall wall-clock budget (None = bounded by attempts only)
    delay_seconds: wait after the first failure
    backoff_factor: multiplier applied per failure, 1.0 keeps the delay fixed
    max_delay_seconds: cap on any single wait
    """

    max_attempts: Optional[int] = None
    deadline_seconds: Optional[float] = None
    delay_seconds: float = 1.0
    backoff_factor: float = 1.0
    max_delay_seconds: float = 64.0

    def __post_init__(self):
        if self.max_attempts is None and self.deadline_seconds is None:
            raise ValueError("retry policy needs max_attempts or deadline_seconds")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.deadline_seconds is not None and self.deadline_seconds <= 0:
            raise ValueError(f"deadline_seconds must be > 0, got {self.deadline_seconds}")
        if self.delay_seconds < 0 or self.max_delay_seconds < 0:
            raise ValueError("delays must not be negative")
        if self.backoff_factor < 1.0:
            raise ValueError(f"backoff_factor must be >= 1.0, got {self.backoff_factor}")

    def delay_for(self, attempt: int) -> float:
        """Wait after failed attempt number `attempt` (1-based)."""
        delay = self.delay_seconds * (self.backoff_factor ** (attempt - 1))
        return min(delay, self.max_delay_seconds)


def retry_call(
    fn: Callable[[int, Optional[float]], T],
    *,
    policy: RetryPolicy,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    cancel: Optional[threading.Event] = None,
    on_retry: Callable[[int, BaseException], None] | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> tuple[T, int]:
    """
    Call fn(attempt, remaining) until it returns, the policy is spent, or
    `cancel` is set.

    `remaining` is the seconds left on the deadline (None without one).
    Returns (result, attempts). Raises RetryError when the budget is spent
    and RetryCancelled when `cancel` fires, both carrying the attempt count.
    """
    started = clock()
    last_exc: Optional[BaseException] = None
    attempt = 0

    def remaining() -> Optional[float]:
        if policy.deadline_seconds is None:
            return None
        return policy.deadline_seconds - (clock() - started)

    while True:
        if cancel is not None and cancel.is_set():
            raise RetryCancelled("cancelled", attempt, last_exc)

        left = remaining()
        if attempt > 0 and left is not None and left <= 0:
            break
        if policy.max_attempts is not None and attempt >= policy.max_attempts:
            break

        attempt += 1
        try:
            return fn(attempt, left), attempt
        except retry_on as exc:
            last_exc = exc
            if on_retry:
                on_retry(attempt, exc)

        if policy.max_attempts is not None and attempt >= policy.max_attempts:
            break

        wait = policy.delay_for(attempt)
        left = remaining()
        if left is not None:
            wait = max(0.0, min(wait, left))
        if cancel is not None:
            if cancel.wait(wait):
                raise RetryCancelled("cancelled", attempt, last_exc)
        elif wait > 0:
            time.sleep(wait)

    raise RetryError(f"gave up after {attempt} attempt(s)", attempt, last_exc)

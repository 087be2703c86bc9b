# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodeseed/userdata/fetcher.py

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Dict, Optional

import requests

from nodeseed.errors import (
    Cancelled,
    FetchError,
    FetchExhausted,
    HTTPStatusError,
    TransportError,
)
from nodeseed.observers.dispatcher import EventBus
from nodeseed.observers.events import (
    new_ctx,
    FetchStarted,
    FetchAttempt,
    FetchAttemptFailed,
    FetchSucceeded,
    FetchGaveUp,
    FetchCancelled,
)
from nodeseed.utils.retry import RetryCancelled, RetryError, RetryPolicy, retry_call

log = logging.getLogger("nodeseed")


class Fetcher:
    """
    Downloads the raw userdata document, retrying until the policy is spent.

    Transport errors and non-2xx answers count the same: both are logged
    and retried. The attempt counter belongs to a single fetch() call.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        *,
        timeout: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
        bus: Optional[EventBus] = None,
        run_id: Optional[str] = None,
    ):
        self.policy = policy
        self.timeout = timeout
        self.headers = dict(headers or {})
        self._session = session
        self.bus = bus or EventBus()
        self.run_id = run_id or str(uuid.uuid4())

    def _emit(self, cls, **kw) -> None:
        self.bus.emit(cls(**kw, **new_ctx(self.run_id)))

    def _attempt(self, session: requests.Session, url: str, attempt: int, remaining: Optional[float]) -> bytes:
        budget = self.policy.max_attempts if self.policy.max_attempts is not None else "-"
        log.info("fetching userdata from %s (attempt %d/%s)", url, attempt, budget)
        self._emit(FetchAttempt, url=url, attempt=attempt)

        timeout = self.timeout
        if remaining is not None:
            timeout = max(0.001, min(timeout, remaining))

        try:
            with session.get(url, headers=self.headers, timeout=timeout) as resp:
                if not 200 <= resp.status_code < 300:
                    raise HTTPStatusError(url, resp.status_code)
                return resp.content
        except requests.RequestException as exc:
            raise TransportError(url, f"GET {url} failed: {exc}") from exc

    def _on_retry(self, url: str, attempt: int, exc: BaseException) -> None:
        log.warning("userdata attempt %d failed: %s", attempt, exc)
        self._emit(
            FetchAttemptFailed,
            url=url,
            attempt=attempt,
            error=str(exc),
            status_code=getattr(exc, "status_code", None),
        )

    def fetch(self, url: str, *, cancel: Optional[threading.Event] = None) -> bytes:
        """
        GET `url` and return the body of the first 2xx response.

        Raises FetchExhausted when the retry budget runs out and Cancelled
        when `cancel` is set before a response arrives.
        """
        self._emit(
            FetchStarted,
            url=url,
            max_attempts=self.policy.max_attempts,
            deadline_s=self.policy.deadline_seconds,
        )

        session = self._session or requests.Session()
        t0 = time.monotonic()
        try:
            body, attempts = retry_call(
                lambda attempt, remaining: self._attempt(session, url, attempt, remaining),
                policy=self.policy,
                retry_on=(FetchError,),
                cancel=cancel,
                on_retry=lambda attempt, exc: self._on_retry(url, attempt, exc),
            )
        except RetryCancelled as exc:
            log.warning("userdata fetch from %s cancelled after %d attempt(s)", url, exc.attempts)
            self._emit(FetchCancelled, url=url, attempts=exc.attempts)
            raise Cancelled(url, exc.attempts) from exc.last_error
        except RetryError as exc:
            err = FetchExhausted(url, exc.attempts, exc.last_error)
            log.error("%s", err)
            self._emit(FetchGaveUp, url=url, attempts=exc.attempts, error=str(exc.last_error))
            raise err from exc.last_error
        finally:
            if self._session is None:
                session.close()

        duration_ms = int((time.monotonic() - t0) * 1000)
        log.info("fetched %d bytes of userdata in %d attempt(s)", len(body), attempts)
        self._emit(FetchSucceeded, url=url, attempts=attempts, size=len(body), duration_ms=duration_ms)
        return body

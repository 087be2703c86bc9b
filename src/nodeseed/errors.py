# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodeseed/errors.py

from __future__ import annotations

from typing import Any, List, Optional


class BootstrapError(RuntimeError):
    """Base class for userdata bootstrap failures."""


class FetchError(BootstrapError):
    """A single fetch attempt failed. Retried, never surfaced by fetch()."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class TransportError(FetchError):
    """Connection refused, timeout, DNS failure and friends."""


class HTTPStatusError(FetchError):
    def __init__(self, url: str, status_code: int):
        super().__init__(url, f"GET {url} returned HTTP {status_code}")
        self.status_code = status_code


class FetchExhausted(BootstrapError):
    """Retry budget spent without a successful response."""

    def __init__(self, url: str, attempts: int, last_error: Optional[BaseException]):
        super().__init__(
            f"failed to download userdata from {url} after {attempts} attempt(s): {last_error}"
        )
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


class Cancelled(BootstrapError):
    """The caller withdrew the fetch (deadline or explicit signal)."""

    def __init__(self, url: str, attempts: int):
        super().__init__(f"fetch of {url} cancelled after {attempts} attempt(s)")
        self.url = url
        self.attempts = attempts


class DecodeError(BootstrapError):
    """Malformed or type-mismatched userdata document."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.errors = errors or []

# src/nodeseed/config/settings.py


from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional
import os

from nodeseed.utils.retry import RetryPolicy


class SettingsError(ValueError):
    pass


@dataclass(frozen=True)
class FetchSettings:
    url: Optional[str] = None
    max_attempts: Optional[int] = 10
    deadline_seconds: Optional[float] = None
    delay_seconds: float = 1.0
    backoff_factor: float = 1.0
    max_delay_seconds: float = 64.0
    timeout_seconds: float = 10.0
    headers: Dict[str, str] = field(default_factory=dict)

    def policy(self) -> RetryPolicy:
        try:
            return RetryPolicy(
                max_attempts=self.max_attempts,
                deadline_seconds=self.deadline_seconds,
                delay_seconds=self.delay_seconds,
                backoff_factor=self.backoff_factor,
                max_delay_seconds=self.max_delay_seconds,
            )
        except ValueError as exc:
            raise SettingsError(str(exc)) from exc

    def override(self, **changes) -> "FetchSettings":
        """Copy with every non-None change applied (CLI flags win over env)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _optional(env: Mapping[str, str], key: str, cast, default):
    raw = env.get(key)
    if raw is None:
        return default
    raw = raw.strip()
    if raw == "":
        return None
    try:
        return cast(raw)
    except ValueError:
        raise SettingsError(f"{key}={raw!r} is not a valid {cast.__name__}") from None


def _required(env: Mapping[str, str], key: str, cast, default):
    value = _optional(env, key, cast, default)
    return default if value is None else value


def parse_headers(raw: str) -> Dict[str, str]:
    """Parse "K=V,K2=V2" (or a list of K=V items joined by commas)."""
    headers: Dict[str, str] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise SettingsError(f"bad header {item!r}, expected NAME=VALUE")
        headers[name.strip()] = value.strip()
    return headers


def load_fetch_settings(environ: Optional[Mapping[str, str]] = None) -> FetchSettings:
    # sensible defaults for boot; override via env
    env = os.environ if environ is None else environ
    return FetchSettings(
        url=env.get("NODESEED_URL") or None,
        max_attempts=_optional(env, "NODESEED_MAX_ATTEMPTS", int, 10),
        deadline_seconds=_optional(env, "NODESEED_DEADLINE", float, None),
        delay_seconds=_required(env, "NODESEED_DELAY", float, 1.0),
        backoff_factor=_required(env, "NODESEED_BACKOFF", float, 1.0),
        max_delay_seconds=_required(env, "NODESEED_MAX_DELAY", float, 64.0),
        timeout_seconds=_required(env, "NODESEED_TIMEOUT", float, 10.0),
        headers=parse_headers(env.get("NODESEED_HEADERS", "")),
    )

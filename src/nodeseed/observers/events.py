# src/nodeseed/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events of one boot-time fetch

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
    }


# ---------------------------------------------------------------------
# Fetch lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class FetchStarted(BaseEvent):
    url: str
    max_attempts: Optional[int]
    deadline_s: Optional[float]

@dataclass(frozen=True)
class FetchAttempt(BaseEvent):
    url: str
    attempt: int

@dataclass(frozen=True)
class FetchAttemptFailed(BaseEvent):
    url: str
    attempt: int
    error: str
    status_code: Optional[int] = None

@dataclass(frozen=True)
class FetchSucceeded(BaseEvent):
    url: str
    attempts: int
    size: int
    duration_ms: int

@dataclass(frozen=True)
class FetchGaveUp(BaseEvent):
    url: str
    attempts: int
    error: str

@dataclass(frozen=True)
class FetchCancelled(BaseEvent):
    url: str
    attempts: int


# ---------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ConfigDecoded(BaseEvent):
    version: str
    services: List[str]

@dataclass(frozen=True)
class DecodeFailed(BaseEvent):
    error: str

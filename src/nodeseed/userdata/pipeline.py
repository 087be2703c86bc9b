# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import threading
from typing import Dict, Optional, Tuple

import requests

from nodeseed.errors import DecodeError
from nodeseed.observers.dispatcher import EventBus
from nodeseed.observers.events import new_ctx, ConfigDecoded, DecodeFailed
from nodeseed.utils.retry import RetryPolicy
from .decoder import decode
from .fetcher import Fetcher
from .models import MachineConfig


def fetch_and_decode(
    fetcher: Fetcher,
    url: str,
    *,
    cancel: Optional[threading.Event] = None,
) -> Tuple[bytes, MachineConfig]:
    """
    Fetch `url` through `fetcher` and decode the body.

    Returns the raw bytes along with the config. Decode events go to the
    fetcher's bus under the fetcher's run_id. A DecodeError is final: the
    same bytes are never decoded twice.
    """
    data = fetcher.fetch(url, cancel=cancel)

    try:
        cfg = decode(data)
    except DecodeError as exc:
        fetcher.bus.emit(DecodeFailed(error=str(exc), **new_ctx(fetcher.run_id)))
        raise

    fetcher.bus.emit(
        ConfigDecoded(version=cfg.version, services=cfg.services.names(), **new_ctx(fetcher.run_id))
    )
    return data, cfg


def download(
    url: str,
    policy: RetryPolicy,
    *,
    timeout: float = 10.0,
    headers: Optional[Dict[str, str]] = None,
    cancel: Optional[threading.Event] = None,
    session: Optional[requests.Session] = None,
    bus: Optional[EventBus] = None,
    run_id: Optional[str] = None,
) -> MachineConfig:
    """Fetch userdata from `url` and decode it."""
    fetcher = Fetcher(policy, timeout=timeout, headers=headers, session=session, bus=bus, run_id=run_id)
    _, cfg = fetch_and_decode(fetcher, url, cancel=cancel)
    return cfg

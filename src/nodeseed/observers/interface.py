# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodeseed/observers/interface.py

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .events import BaseEvent


@runtime_checkable
class Observer(Protocol):
    """
    Receives the events of a userdata fetch, in emission order.

    Every event of one Fetcher carries the same run_id: FetchStarted, one
    FetchAttempt per request with FetchAttemptFailed after each failure,
    then exactly one of FetchSucceeded, FetchGaveUp or FetchCancelled.
    When the body is decoded, ConfigDecoded or DecodeFailed closes the run.

    notify() runs on the fetching thread between attempts, so it should
    return quickly. Exceptions it raises are logged by the EventBus and
    do not affect the fetch.
    """

    def notify(self, event: BaseEvent) -> None: ...

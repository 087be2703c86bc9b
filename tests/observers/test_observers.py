import json
import logging
from pathlib import Path

from nodeseed.observers.dispatcher import EventBus
from nodeseed.observers.events import FetchAttempt, FetchGaveUp, new_ctx
from nodeseed.observers.interface import Observer
from nodeseed.observers.jsonfile import JsonFileObserver
from nodeseed.observers.logger import LoggerObserver


def test_new_ctx_keeps_run_id():
    ctx = new_ctx("run-1")
    assert ctx["run_id"] == "run-1"
    assert ctx["ts"].endswith("Z")
    assert new_ctx()["run_id"] != new_ctx()["run_id"]


def test_jsonfile_observer_appends_lines(tmp_path: Path):
    path = tmp_path / "events" / "fetch.jsonl"
    bus = EventBus([JsonFileObserver(path)])

    bus.emit(FetchAttempt(url="http://x/", attempt=1, **new_ctx("r")))
    bus.emit(FetchGaveUp(url="http://x/", attempts=1, error="HTTP 500", **new_ctx("r")))

    lines = [json.loads(l) for l in path.read_text().splitlines()]
    assert [l["type"] for l in lines] == ["FetchAttempt", "FetchGaveUp"]
    assert lines[0]["attempt"] == 1
    assert lines[1]["run_id"] == "r"


def test_logger_observer_writes_event():
    records = []

    class ListHandler(logging.Handler):
        def emit(self, record): records.append(record.getMessage())

    logger = logging.getLogger("nodeseed.test.observer")
    logger.setLevel(logging.DEBUG)
    logger.addHandler(ListHandler())

    LoggerObserver(logger).notify(FetchAttempt(url="http://x/", attempt=2, **new_ctx()))
    assert records == ["[EVENT] FetchAttempt: url=http://x/, attempt=2"]


def test_bus_swallows_observer_failures():
    got = []

    class Boom:
        def notify(self, ev): raise ValueError("nope")

    class Keep:
        def notify(self, ev): got.append(ev)

    ev = FetchAttempt(url="http://x/", attempt=1, **new_ctx())
    EventBus([Boom(), Keep()]).emit(ev)
    assert got == [ev]


def test_shipped_observers_satisfy_protocol(tmp_path: Path, capture):
    assert isinstance(LoggerObserver(logging.getLogger("nodeseed")), Observer)
    assert isinstance(JsonFileObserver(tmp_path / "e.jsonl"), Observer)
    assert isinstance(capture, Observer)
    assert not isinstance(object(), Observer)

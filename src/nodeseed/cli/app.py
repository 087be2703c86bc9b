# src/nodeseed/cli/app.py
from __future__ import annotations

import signal
import threading
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import typer

from nodeseed.config.settings import SettingsError, load_fetch_settings, parse_headers
from nodeseed.errors import Cancelled, DecodeError, FetchExhausted
from nodeseed.logging.log import init_logging
from nodeseed.observers.dispatcher import EventBus
from nodeseed.observers.jsonfile import JsonFileObserver
from nodeseed.observers.logger import LoggerObserver
from nodeseed.userdata.decoder import open_path
from nodeseed.userdata.fetcher import Fetcher
from nodeseed.userdata.models import MachineConfig
from nodeseed.userdata.pipeline import fetch_and_decode


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Fetch and validate node userdata at boot")

EXIT_FETCH_EXHAUSTED = 2
EXIT_DECODE_ERROR = 3
EXIT_SETTINGS_ERROR = 4
EXIT_CANCELLED = 130


def summarize(cfg: MachineConfig) -> List[str]:
    """Human readable one-liners; never prints key material."""
    lines = [f"version: {cfg.version!r}"]

    sec = cfg.security
    for domain in ("os", "kubernetes"):
        d = getattr(sec, domain)
        have = [part for part in ("ca", "identity") if getattr(d, part) is not None]
        lines.append(f"security.{domain}: {', '.join(have) or 'none'}")

    lines.append(f"networking.os.devices: {len(cfg.networking.os.devices)}")
    lines.append(f"services: {', '.join(cfg.services.names()) or 'none'}")

    inst = cfg.install
    for part in ("boot", "root", "data"):
        dev = getattr(inst, part)
        if dev is not None:
            lines.append(f"install.{part}: {dev.device} ({dev.size} bytes)")
    lines.append(f"install.wipe: {inst.wipe}")
    return lines


def _echo_summary(cfg: MachineConfig) -> None:
    for line in summarize(cfg):
        typer.echo(line)


@contextmanager
def _cancel_on_signals(cancel: threading.Event, logger):
    """Turn SIGINT/SIGTERM into `cancel.set()` while the block runs."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handle(signum, _frame):
        logger.warning(f"received {signal.Signals(signum).name}, cancelling fetch")
        cancel.set()

    previous = {sig: signal.signal(sig, _handle) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@app.command()
def fetch(
    url: Optional[str] = typer.Argument(None, help="Provisioning endpoint (default: $NODESEED_URL)"),
    attempts: Optional[int] = typer.Option(None, "--attempts", help="Max attempts (0 = bounded by --deadline only)"),
    deadline: Optional[float] = typer.Option(None, "--deadline", help="Overall deadline in seconds"),
    delay: Optional[float] = typer.Option(None, "--delay", help="Seconds between attempts"),
    backoff: Optional[float] = typer.Option(None, "--backoff", help="Delay multiplier per failure"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per request timeout in seconds"),
    header: List[str] = typer.Option([], "--header", "-H", help="Extra request header NAME=VALUE"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the validated document here"),
    events_file: Optional[Path] = typer.Option(None, "--events-file", help="Append JSON lines events here"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also write a full trace log here"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """
    Download userdata, retrying until it arrives, then validate it.
    """
    logger, run_id, _ = init_logging(base_dir=log_dir, verbose=verbose)

    try:
        settings = load_fetch_settings()
        extra_headers = parse_headers(",".join(header))
        settings = settings.override(
            url=url,
            deadline_seconds=deadline,
            delay_seconds=delay,
            backoff_factor=backoff,
            timeout_seconds=timeout,
        )
        if attempts is not None:
            settings = replace(settings, max_attempts=attempts or None)
        policy = settings.policy()
    except SettingsError as exc:
        logger.error(f"bad settings: {exc}")
        raise typer.Exit(code=EXIT_SETTINGS_ERROR)

    if not settings.url:
        logger.error("no userdata URL given (argument or NODESEED_URL)")
        raise typer.Exit(code=EXIT_SETTINGS_ERROR)

    observers = [LoggerObserver(logger)]
    if events_file is not None:
        observers.append(JsonFileObserver(events_file))
    bus = EventBus(observers=observers)

    fetcher = Fetcher(
        policy,
        timeout=settings.timeout_seconds,
        headers={**settings.headers, **extra_headers},
        bus=bus,
        run_id=run_id,
    )
    cancel = threading.Event()

    try:
        with _cancel_on_signals(cancel, logger):
            data, cfg = fetch_and_decode(fetcher, settings.url, cancel=cancel)
    except Cancelled as exc:
        logger.error(str(exc))
        raise typer.Exit(code=EXIT_CANCELLED)
    except FetchExhausted as exc:
        logger.error(str(exc))
        raise typer.Exit(code=EXIT_FETCH_EXHAUSTED)
    except DecodeError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=EXIT_DECODE_ERROR)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(data)
        logger.info(f"userdata written to {output}")

    _echo_summary(cfg)


@app.command()
def validate(
    path: Path = typer.Argument(..., help="Userdata document on local disk"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """
    Decode a local userdata document and print what it configures.
    """
    logger, _, _ = init_logging(verbose=verbose)
    try:
        cfg = open_path(path)
    except DecodeError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=EXIT_DECODE_ERROR)

    _echo_summary(cfg)


if __name__ == "__main__":
    app()

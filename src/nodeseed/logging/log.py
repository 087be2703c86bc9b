# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

#src/nodeseed/logging/log.py

from __future__ import annotations

import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional
import uuid

def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "nodeseed",
    verbose: bool = False,
) -> tuple[logging.Logger, str, Optional[Path]]:
    """
    Initializes:
      - console output (INFO, DEBUG with verbose)
      - full trace log file when base_dir is given; early boot may not
        have a writable disk yet, so none by default
      - returns run_id so observers can reuse it
    """
    run_id = str(uuid.uuid4())

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_path = None
    if base_dir is not None:
        base_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        log_path = base_dir / f"{name}-{ts}-{run_id}.log"

        # File = FULL TRACE
        fh = logging.FileHandler(log_path)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    logger.debug("=== nodeseed run started ===")
    logger.debug(f"run_id={run_id}")
    if log_path is not None:
        logger.debug(f"log_file={log_path}")

    return logger, run_id, log_path

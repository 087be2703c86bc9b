# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodeseed/userdata/decoder.py

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError
from yaml.constructor import ConstructorError

from nodeseed.errors import DecodeError
from .models import MachineConfig

log = logging.getLogger("nodeseed")


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses mappings with repeated keys."""

    def construct_mapping(self, node, deep=False):
        if not isinstance(node, yaml.MappingNode):
            return super().construct_mapping(node, deep=deep)

        seen = set()
        for key_node, _ in node.value:
            if key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError:
                # unhashable key; let the base class report it
                break
            if duplicate:
                raise ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _format_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def decode(data: bytes | str) -> MachineConfig:
    """
    Parse a userdata document into a MachineConfig.

    Either the whole document validates or DecodeError is raised; no
    partially filled config is ever returned. Pure transform, no I/O.
    """
    try:
        doc = yaml.load(data, Loader=_UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise DecodeError(f"malformed userdata: {exc}") from exc
    except RecursionError as exc:
        raise DecodeError("malformed userdata: document nested too deeply") from exc

    if doc is None:
        raise DecodeError("empty userdata document")
    if not isinstance(doc, dict):
        raise DecodeError(
            f"userdata must be a mapping at the top level, got {type(doc).__name__}"
        )

    try:
        cfg = MachineConfig.model_validate(doc)
    except ValidationError as exc:
        raise DecodeError(
            f"invalid userdata: {_format_errors(exc)}", errors=exc.errors()
        ) from exc
    except RecursionError as exc:
        raise DecodeError("invalid userdata: document nested too deeply") from exc

    log.debug("decoded userdata version=%r services=%s", cfg.version, cfg.services.names())
    return cfg


def open_path(path: str | Path) -> MachineConfig:
    """Read a userdata document from local disk and decode it."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DecodeError(f"cannot read userdata from {path}: {exc}") from exc
    return decode(data)

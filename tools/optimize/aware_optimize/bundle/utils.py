"""Shared helpers used by the optimize tooling."""

from __future__ import annotations

import json
from pathlib import Path, PurePath
from typing import Any


def dumps_json(payload: Any, *, indent: int | str = "\t") -> str:
    """Serialize JSON the way bundle metadata artifacts are written."""

    return json.dumps(payload, indent=indent, ensure_ascii=False)


def write_bytes(path: Path, contents: bytes) -> None:
    """Write bytes to file ensuring parent directories exist."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(contents)


def to_posix(path: PurePath | str) -> str:
    return str(path).replace("\\", "/")

"""Passthrough resources copied next to the bundles."""

from __future__ import annotations

import asyncio
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Pattern, Sequence

from ..bundle.files import OutputFile
from ..bundle.utils import to_posix
from ..errors import ConfigError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> Pattern[str]:
    """Translate a ``**``-aware glob into an anchored regular expression."""

    parts: List[str] = []
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
            continue
        if pattern.startswith("**", index):
            parts.append(".*")
            index += 2
            continue
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
        index += 1
    return re.compile("^" + "".join(parts) + "$")


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    return any(glob_to_regex(pattern).match(path) for pattern in patterns)


def resolve_resource_paths(patterns: Sequence[str], root: Path, *, exclude: Iterable[str] = ()) -> List[Path]:
    """Expand ``patterns`` relative to ``root``; ``!`` entries and ``exclude`` remove matches.

    A pattern that matches nothing is not an error.
    """

    includes = [pattern for pattern in patterns if not pattern.startswith("!")]
    negations = [pattern[1:] for pattern in patterns if pattern.startswith("!")]
    negations.extend(to_posix(path) for path in exclude)

    matched: Dict[str, Path] = {}
    for pattern in includes:
        for path in root.glob(pattern):
            if not path.is_file():
                continue
            relative = to_posix(path.relative_to(root))
            if matches_any(relative, negations):
                continue
            matched.setdefault(relative, path)
    return [matched[key] for key in sorted(matched)]


async def collect_resources(
    patterns: Sequence[str],
    root: Path,
    base: Path,
    *,
    exclude: Iterable[str] = (),
) -> List[OutputFile]:
    paths = resolve_resource_paths(patterns, root, exclude=exclude)
    return await asyncio.to_thread(_read_resources, paths, base)


def _read_resources(paths: Sequence[Path], base: Path) -> List[OutputFile]:
    files: List[OutputFile] = []
    for path in paths:
        try:
            path.relative_to(base)
        except ValueError as exc:
            raise ConfigError(f"Resource {path} is outside of the source folder {base}") from exc
        files.append(OutputFile(path=path, base=base, contents=path.read_bytes()))
    logger.debug("Collected %d passthrough resources", len(files))
    return files

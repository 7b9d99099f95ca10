"""Commit an in-memory file stream to a destination tree."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List

from .bundle.files import OutputFile
from .bundle.utils import write_bytes
from .errors import OptimizeError

logger = logging.getLogger(__name__)


def commit_tree(files: Iterable[OutputFile], destination: Path) -> List[Path]:
    """Write ``files`` under ``destination`` only once all of them are staged.

    Files are staged next to ``destination`` and moved into place afterwards,
    so an error while staging leaves the destination untouched. A relative
    path produced twice keeps the last file.
    """

    staged: Dict[str, OutputFile] = {}
    for file in files:
        relative = file.relative
        _check_relative(relative)
        if relative in staged:
            logger.warning("Output '%s' produced more than once; keeping the last one", relative)
        staged[relative] = file

    destination.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    total = 0
    with tempfile.TemporaryDirectory(prefix=".aware-optimize-", dir=destination.parent) as tmp_dir:
        staging_root = Path(tmp_dir)
        for relative, file in staged.items():
            write_bytes(staging_root / relative, file.contents)

        for relative, file in staged.items():
            target = destination / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            os.replace(staging_root / relative, target)
            written.append(target)
            total += len(file.contents)
            logger.debug("Wrote %s (%d bytes)", relative, len(file.contents))

    logger.info("Committed %d files (%d bytes) to %s", len(written), total, destination)
    return written


def _check_relative(relative: str) -> None:
    path = PurePosixPath(relative)
    if path.is_absolute() or ".." in path.parts:
        raise OptimizeError(f"Refusing to write outside of the output tree: {relative}")

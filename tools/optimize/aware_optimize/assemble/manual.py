"""Manual concatenation jobs: sources joined exactly in the listed order."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterable, List

from ..bundle.files import OutputFile
from ..bundle.utils import to_posix
from ..schemas.optimize import ManualConcatJob
from .concat import SourceChunk, concat_chunks


async def concat_manual(jobs: Iterable[ManualConcatJob], root: Path) -> List[OutputFile]:
    """Run every job; results follow job order."""

    job_list = list(jobs)
    return list(await asyncio.gather(*(asyncio.to_thread(_concat_job, job, root) for job in job_list)))


def _concat_job(job: ManualConcatJob, root: Path) -> OutputFile:
    chunks: List[SourceChunk] = []
    for source in job.src:
        path = root / source
        if not path.is_file():
            raise FileNotFoundError(f"Concatenation source not found for {job.out}: {path}")
        chunks.append(SourceChunk(name=to_posix(source), contents=path.read_text(encoding="utf-8")))
    return concat_chunks(job.out, chunks, base=Path("."))

"""Ordered concatenation of sources into one output file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from ..bundle.files import OutputFile
from .sourcemap import SourceMap, concat_source_maps, identity_map

SEPARATOR = "\n"


@dataclass(frozen=True, slots=True)
class SourceChunk:
    """One source fed into a concatenation; ``name`` is None for synthesized text."""

    name: Optional[str]
    contents: str
    source_map: Optional[SourceMap] = None

    @classmethod
    def from_file(cls, file: OutputFile) -> "SourceChunk":
        return cls(name=file.relative, contents=file.text, source_map=file.source_map)


def wants_source_map(destination: str) -> bool:
    return destination.endswith(".js") and not destination.endswith(".nls.js")


def concat_chunks(
    destination: str,
    chunks: Iterable[SourceChunk],
    *,
    base: Path = Path("."),
    source_maps: Optional[bool] = None,
) -> OutputFile:
    """Join ``chunks`` in the given order into ``base / destination``."""

    ordered: List[SourceChunk] = list(chunks)
    text = SEPARATOR.join(chunk.contents for chunk in ordered)
    use_maps = wants_source_map(destination) if source_maps is None else source_maps

    source_map: Optional[SourceMap] = None
    if use_maps:
        source_map = concat_source_maps(
            [(chunk.contents, _chunk_map(chunk)) for chunk in ordered],
            separator=SEPARATOR,
            file=Path(destination).name,
        )

    return OutputFile(
        path=base / destination,
        base=base,
        contents=text.encode("utf-8"),
        source_map=source_map,
    )


def _chunk_map(chunk: SourceChunk) -> Optional[SourceMap]:
    if chunk.source_map is not None:
        return chunk.source_map
    if chunk.name is None:
        return None
    return identity_map(chunk.name, chunk.contents)

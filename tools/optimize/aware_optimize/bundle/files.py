"""In-memory representation of files flowing through the optimize stages."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from .utils import to_posix

if TYPE_CHECKING:
    from ..assemble.sourcemap import SourceMap


@dataclass(frozen=True, slots=True)
class OutputFile:
    """One artifact destined for the output tree.

    ``path`` is the file location and ``base`` the folder it is relative to;
    the output tree writes it at ``relative``. Synthesized files use a
    ``Path(".")`` base.
    """

    path: Path
    base: Path
    contents: bytes
    source_map: Optional["SourceMap"] = None

    @classmethod
    def synthesized(cls, relative: str, contents: bytes | str) -> "OutputFile":
        data = contents.encode("utf-8") if isinstance(contents, str) else contents
        return cls(path=Path(relative), base=Path("."), contents=data)

    @property
    def relative(self) -> str:
        return to_posix(self.path.relative_to(self.base))

    @property
    def text(self) -> str:
        return self.contents.decode("utf-8")

    def with_contents(self, contents: bytes | str, source_map: Optional["SourceMap"] = None) -> "OutputFile":
        data = contents.encode("utf-8") if isinstance(contents, str) else contents
        return replace(self, contents=data, source_map=source_map)

"""Localization collaborator interface."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from .bundle.files import OutputFile
from .schemas.optimize import Language

logger = logging.getLogger(__name__)


class Localizer(Protocol):
    def localize(
        self,
        files: Sequence[OutputFile],
        *,
        out: Path,
        file_header: str,
        languages: Sequence[Language],
    ) -> List[OutputFile]:  # pragma: no cover - interface
        """Return ``files`` plus one translated variant set per language."""
        ...


class PassthroughLocalizer:
    """Returns the stream unchanged."""

    def localize(
        self,
        files: Sequence[OutputFile],
        *,
        out: Path,
        file_header: str,
        languages: Sequence[Language],
    ) -> List[OutputFile]:
        return list(files)


def localize(
    files: Sequence[OutputFile],
    localizer: Optional[Localizer],
    *,
    out: Path,
    file_header: str,
    languages: Sequence[Language],
) -> List[OutputFile]:
    """Fork the stream per language; a no-op when no languages are configured."""

    if not languages:
        return list(files)
    active = localizer or PassthroughLocalizer()
    logger.info("Localizing %d files for %s", len(files), ", ".join(language.id for language in languages))
    return active.localize(files, out=out, file_header=file_header, languages=languages)

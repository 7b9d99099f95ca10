"""Copyright detection and license header injection."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

from .concat import SourceChunk

COPYRIGHT_PATTERN = re.compile(r"Copyright \(C\) Microsoft Corporation", re.IGNORECASE)

DEFAULT_FILE_HEADER = "\n".join(
    [
        "/*!--------------------------------------------------------",
        " * Copyright (C) Microsoft Corporation. All rights reserved.",
        " *--------------------------------------------------------*/",
    ]
)


def contains_copyright(sources: Iterable[str]) -> bool:
    return any(COPYRIGHT_PATTERN.search(source) for source in sources)


def inject_header(
    chunks: Sequence[SourceChunk],
    header: str = DEFAULT_FILE_HEADER,
    *,
    sources: Optional[Iterable[str]] = None,
) -> List[SourceChunk]:
    """Prepend one synthesized header chunk when the marker is present.

    The marker is searched in ``sources`` when given (the original inputs of a
    bundled file), otherwise in the chunks themselves. Chunks that already
    start with ``header`` are returned unchanged, so the header never doubles.
    """

    result = list(chunks)
    scanned = sources if sources is not None else (chunk.contents for chunk in result)
    if not contains_copyright(scanned):
        return result
    if result and result[0].name is None and result[0].contents == header:
        return result
    return [SourceChunk(name=None, contents=header), *result]

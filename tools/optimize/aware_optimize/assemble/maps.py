"""Write external source maps for script outputs."""

from __future__ import annotations

import posixpath
import re
from dataclasses import replace
from typing import Callable, Iterable, List, Mapping, Optional

from ..bundle.files import OutputFile
from .concat import wants_source_map
from .sourcemap import identity_map

# Bootstrap files are rewritten before bundling; maps point at the pristine copy.
SOURCE_RENAMES: Mapping[str, str] = {
    "bootstrap-fork.js": "bootstrap-fork.orig.js",
}

_EXISTING_COMMENT = re.compile(r"\n?//# sourceMappingURL=\S+\s*$")


def map_source_path(source: str) -> str:
    return SOURCE_RENAMES.get(source, source)


def write_source_maps(
    files: Iterable[OutputFile],
    *,
    source_mapping_url: Optional[Callable[[OutputFile], str]] = None,
    map_sources: Callable[[str], str] = map_source_path,
) -> List[OutputFile]:
    """Externalize maps of ``.js`` outputs (not ``.nls.js``) into ``<file>.map``.

    Files without a map get a line identity map. Maps always embed source
    content; the script gains a trailing ``sourceMappingURL`` comment.
    """

    result: List[OutputFile] = []
    for file in files:
        relative = file.relative
        if not wants_source_map(relative):
            result.append(file)
            continue

        text = _EXISTING_COMMENT.sub("", file.text)
        source_map = file.source_map or identity_map(relative, text)
        source_map = source_map.map_sources(map_sources)
        source_map.file = posixpath.basename(relative)
        source_map.source_root = None

        url = source_mapping_url(file) if source_mapping_url else f"{posixpath.basename(relative)}.map"
        separator = "" if text.endswith("\n") else "\n"
        result.append(file.with_contents(f"{text}{separator}//# sourceMappingURL={url}"))
        result.append(
            replace(
                file,
                path=file.path.with_name(file.path.name + ".map"),
                contents=source_map.dumps().encode("utf-8"),
                source_map=None,
            )
        )
    return result

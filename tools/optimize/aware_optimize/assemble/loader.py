"""Loader preamble: runtime loader, CSS shim and external loader config."""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

from ..bundle.files import OutputFile
from .concat import SourceChunk, concat_chunks

LOADER_OUTPUT = "vs/loader.js"
LOADER_SOURCE = "vs/loader.js"
CSS_SHIM_SOURCE = "vs/css.js"
CSS_SHIM_MODULE_ID = "vs/css"

BASE_URL_PLACEHOLDER = "$BASE_URL"

_DEFINE_CALL = re.compile(r"^define\(", re.MULTILINE)


def loader_rank(name: Optional[str]) -> int:
    if name and name.endswith("loader.js"):
        return 0
    if name and name.endswith("css.js"):
        return 1
    return 2


def with_module_id(contents: str, module_id: str) -> str:
    """Name the first anonymous ``define(`` call of an AMD module."""

    return _DEFINE_CALL.sub(f'define("{module_id}",', contents, count=1)


def emit_external_loader_info(info: Mapping[str, Any]) -> str:
    """Render the loader config snippet appended to the preamble.

    ``baseUrl`` resolves at load time: the runtime's configured base URL wins
    over the one baked into the build.
    """

    config = dict(info)
    external_base_url = config.get("baseUrl")
    config["baseUrl"] = BASE_URL_PLACEHOLDER
    code = (
        "\n(function() {\n"
        f"\tconst baseUrl = require.getConfig().baseUrl || {json.dumps(external_base_url)};\n"
        f"\trequire.config({json.dumps(config, indent=2)});\n"
        "})();"
    )
    return code.replace(json.dumps(BASE_URL_PLACEHOLDER), "baseUrl", 1)


def order_loader_chunks(
    sources: Sequence[SourceChunk],
    header: str,
    external_loader_info: Optional[Mapping[str, Any]] = None,
) -> List[SourceChunk]:
    """Header first, then sources by rank (stable), then the loader config."""

    ordered = [SourceChunk(name=None, contents=header)]
    ordered.extend(sorted(sources, key=lambda chunk: loader_rank(chunk.name)))
    if external_loader_info is not None:
        ordered.append(SourceChunk(name=None, contents=emit_external_loader_info(external_loader_info)))
    return ordered


async def build_loader_preamble(
    src_root: Path,
    *,
    header: str = "",
    bundle_loader: bool = False,
    external_loader_info: Optional[Mapping[str, Any]] = None,
    source_maps: bool = True,
) -> OutputFile:
    """Concatenate the loader preamble into ``vs/loader.js``."""

    sources = await asyncio.to_thread(_read_loader_sources, src_root, bundle_loader)
    chunks = order_loader_chunks(sources, header, external_loader_info)
    return concat_chunks(LOADER_OUTPUT, chunks, base=Path("."), source_maps=source_maps)


def _read_loader_sources(src_root: Path, bundle_loader: bool) -> List[SourceChunk]:
    names = [LOADER_SOURCE]
    if bundle_loader:
        names.append(CSS_SHIM_SOURCE)

    chunks: List[SourceChunk] = []
    for name in names:
        path = src_root / name
        if not path.is_file():
            raise FileNotFoundError(f"Loader source not found: {path}")
        contents = path.read_text(encoding="utf-8")
        if name == CSS_SHIM_SOURCE:
            contents = with_module_id(contents, CSS_SHIM_MODULE_ID)
        chunks.append(SourceChunk(name=name, contents=contents))
    return chunks

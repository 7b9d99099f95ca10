"""One bundling invocation per module."""

from __future__ import annotations

import asyncio
import logging
import os
import posixpath
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from ..assemble.concat import SourceChunk, concat_chunks
from ..assemble.header import inject_header
from ..assemble.sourcemap import SourceMap
from ..schemas.optimize import DEFAULT_ASSET_LOADERS, BundleInfo, Metafile
from .boilerplate import remove_duplicate_ts_boilerplate
from .esbuild import BuildOutput, BuildRequest, Bundler, inlined_inputs
from .files import OutputFile
from .metadata import module_contribution
from .utils import to_posix

logger = logging.getLogger(__name__)

_SOURCE_MAPPING_URL = re.compile(r"\n?//# sourceMappingURL=\S+\s*$")
_TEXT_SOURCE_SUFFIXES = frozenset({".js", ".mjs", ".cjs", ".css", ".ts"})


@dataclass(frozen=True, slots=True)
class BundleContext:
    """Fixed bundling configuration shared by every module invocation."""

    root: Path
    src: str
    bundler: Bundler
    asset_loaders: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_ASSET_LOADERS))
    target: Sequence[str] = ("es2023",)
    collect_info: bool = False
    source_maps: bool = True
    header: Optional[str] = None

    @property
    def src_root(self) -> Path:
        return self.root / self.src


@dataclass(slots=True)
class ModuleBundle:
    module: str
    files: List[OutputFile]
    bundle_info: Optional[BundleInfo] = None
    inlined_resources: List[str] = field(default_factory=list)


async def bundle_module(module: str, context: BundleContext) -> ModuleBundle:
    """Bundle ``module`` with esbuild and normalize the result.

    Bundler failures propagate unchanged.
    """

    started = time.perf_counter()
    logger.info("[bundle] STARTING '%s'...", module)

    src_root = context.src_root
    request = BuildRequest(
        entry_points=(src_root / f"{module}.js",),
        outdir=src_root / posixpath.dirname(module),
        cwd=context.root,
        platform="neutral",
        format="esm",
        target=tuple(context.target),
        loaders=dict(context.asset_loaders),
        packages_external=True,
        metafile=True,
        sourcemap="external" if context.source_maps else None,
    )
    result = await context.bundler.build(request)
    logger.info(
        "[bundle] DONE for '%s' (%dms)",
        module,
        round((time.perf_counter() - started) * 1000),
    )

    maps: Dict[Path, BuildOutput] = {
        output.path: output for output in result.output_files if output.path.name.endswith(".map")
    }
    files: List[OutputFile] = []
    for output in result.output_files:
        if output.path in maps:
            continue
        if output.path.name.endswith(".js"):
            files.append(await _normalize_script(output, maps, result.metafile, context))
        else:
            files.append(OutputFile(path=output.path, base=src_root, contents=output.contents))

    bundle_info = None
    inlined: List[str] = []
    if result.metafile is not None:
        if context.collect_info:
            bundle_info = module_contribution(result.metafile, context.src)
        inlined = inlined_inputs(result.metafile, context.asset_loaders)

    return ModuleBundle(module=module, files=files, bundle_info=bundle_info, inlined_resources=inlined)


async def _normalize_script(
    output: BuildOutput,
    maps: Mapping[Path, BuildOutput],
    metafile: Optional[Metafile],
    context: BundleContext,
) -> OutputFile:
    text = remove_duplicate_ts_boilerplate(output.text)
    source_map: Optional[SourceMap] = None
    map_output = maps.get(output.path.with_name(output.path.name + ".map"))
    if map_output is not None:
        text = _SOURCE_MAPPING_URL.sub("", text)
        source_map = SourceMap.from_json(map_output.contents)

    file = OutputFile(
        path=output.path,
        base=context.src_root,
        contents=text.encode("utf-8"),
        source_map=source_map,
    )
    if context.header is None or metafile is None:
        return file

    key = to_posix(os.path.relpath(output.path, context.root))
    entry = metafile.outputs.get(key)
    input_paths = [context.root / name for name in entry.inputs] if entry else []
    sources = await asyncio.to_thread(_read_sources, input_paths)
    chunks = inject_header([SourceChunk.from_file(file)], context.header, sources=sources)
    if len(chunks) == 1:
        return file

    return concat_chunks(
        file.relative,
        chunks,
        base=file.base,
        source_maps=source_map is not None,
    )


def _read_sources(paths: Sequence[Path]) -> List[str]:
    sources: List[str] = []
    for path in paths:
        if path.suffix not in _TEXT_SOURCE_SUFFIXES or not path.is_file():
            continue
        sources.append(path.read_text(encoding="utf-8", errors="replace"))
    return sources

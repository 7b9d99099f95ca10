"""Top-level optimize tasks wiring the bundling and assembly stages together."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional

from .assemble.loader import build_loader_preamble
from .assemble.manual import concat_manual
from .assemble.maps import write_source_maps
from .assemble.merge import optimize_esm
from .assemble.resources import resolve_resource_paths
from .bundle.esbuild import BuildRequest, Bundler
from .bundle.executor import gather_all
from .bundle.files import OutputFile
from .bundle.modules import resolve_module_set
from .localization import Localizer
from .minify.task import MinifyResult, minify_tree
from .output import commit_tree
from .schemas.optimize import CommonJSTaskOptions, MinifyOptions, OptimizeTaskOptions

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OptimizeResult:
    destination: Path
    modules: List[str] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)


async def optimize_commonjs(options: CommonJSTaskOptions, *, root: Path, bundler: Bundler) -> List[OutputFile]:
    """Bundle each matching entry for CommonJS, keeping its relative path."""

    src_root = root / options.src
    entries = resolve_resource_paths(options.entry_points, src_root)
    logger.info("Bundling %d CommonJS entries from %s", len(entries), src_root)
    return await gather_all(
        _bundle_commonjs(entry, options, root=root, src_root=src_root, bundler=bundler) for entry in entries
    )


async def _bundle_commonjs(
    entry: Path,
    options: CommonJSTaskOptions,
    *,
    root: Path,
    src_root: Path,
    bundler: Bundler,
) -> OutputFile:
    request = BuildRequest(
        entry_points=(entry,),
        outdir=entry.parent,
        cwd=root,
        platform=options.platform,
        format="cjs",
        packages_external=False,
        external=tuple(options.external),
        metafile=False,
    )
    result = await bundler.build(request)
    expected = entry.with_suffix(".js").name
    for output in result.output_files:
        if output.path.name == expected:
            return OutputFile(path=entry.with_suffix(".js"), base=src_root, contents=output.contents)
    raise FileNotFoundError(f"esbuild produced no output for CommonJS entry {entry}")


async def optimize_task(
    options: OptimizeTaskOptions,
    *,
    bundler: Bundler,
    localizer: Optional[Localizer] = None,
    verbose: bool = False,
    destination: Optional[Path] = None,
) -> OptimizeResult:
    """Run the ESM task plus optional CommonJS and manual jobs, then commit to ``out``."""

    root = Path(options.root) if options.root else Path.cwd()
    out = destination or root / options.out

    jobs = [optimize_esm(options.esm, root=root, bundler=bundler, localizer=localizer, verbose=verbose)]
    if options.commonjs is not None:
        jobs.append(optimize_commonjs(options.commonjs, root=root, bundler=bundler))
    if options.manual:
        jobs.append(_manual_files(options, root))
    streams = await gather_all(jobs)

    files: List[OutputFile] = [file for stream in streams for file in stream]
    written = commit_tree(files, out)
    return OptimizeResult(
        destination=out,
        modules=resolve_module_set(options.esm.entry_points),
        written=written,
    )


async def _manual_files(options: OptimizeTaskOptions, root: Path) -> List[OutputFile]:
    files = await concat_manual(options.manual, root)
    if options.esm.source_maps:
        files = write_source_maps(files)
    return files


async def optimize_loader_task(
    *,
    src: Path,
    out: Path,
    bundle_loader: bool,
    header: str = "",
    external_loader_info: Optional[Mapping[str, Any]] = None,
) -> List[Path]:
    """Build the loader preamble alone and commit it to ``out``."""

    preamble = await build_loader_preamble(
        src,
        header=header,
        bundle_loader=bundle_loader,
        external_loader_info=external_loader_info,
        source_maps=False,
    )
    return commit_tree([preamble], out)


async def run_minify(options: MinifyOptions, *, root: Path, bundler: Bundler) -> MinifyResult:
    return await minify_tree(
        root / options.src,
        bundler,
        source_map_base_url=options.source_map_base_url,
        max_concurrency=options.max_concurrency,
    )


__all__ = [
    "OptimizeResult",
    "optimize_commonjs",
    "optimize_loader_task",
    "optimize_task",
    "run_minify",
]

"""ESM optimize task: merge loader, bundles, resources and bundle metadata."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ..bundle.esbuild import Bundler
from ..bundle.executor import BundleOutput, bundle_modules, gather_all
from ..bundle.files import OutputFile
from ..bundle.invoker import BundleContext, ModuleBundle, bundle_module
from ..bundle.metadata import bundle_info_file
from ..bundle.modules import resolve_module_set
from ..localization import Localizer, localize
from ..schemas.optimize import BundleInfo, EsmTaskOptions
from .header import DEFAULT_FILE_HEADER
from .loader import build_loader_preamble
from .maps import write_source_maps
from .resources import collect_resources

logger = logging.getLogger(__name__)


def merge_streams(
    loader: Sequence[OutputFile],
    bundles: Sequence[OutputFile],
    resources: Sequence[OutputFile],
    bundle_info: Sequence[OutputFile],
) -> List[OutputFile]:
    """Join the sub-streams in a fixed order independent of task completion."""

    return [*loader, *bundles, *resources, *bundle_info]


async def optimize_esm(
    options: EsmTaskOptions,
    *,
    root: Path,
    bundler: Bundler,
    localizer: Optional[Localizer] = None,
    verbose: bool = False,
) -> List[OutputFile]:
    header = options.header or DEFAULT_FILE_HEADER
    src_root = root / options.src
    modules = resolve_module_set(options.entry_points)
    context = BundleContext(
        root=root,
        src=options.src,
        bundler=bundler,
        asset_loaders=dict(options.asset_loaders),
        target=tuple(options.target),
        collect_info=options.bundle_info,
        source_maps=options.source_maps,
        header=header if options.inject_header else None,
    )

    async def invoke(module: str) -> ModuleBundle:
        return await bundle_module(module, context)

    logger.info("Bundling %d modules from %s", len(modules), src_root)
    jobs = [bundle_modules(modules, invoke, serial=options.serial)]
    if options.include_loader:
        jobs.append(
            build_loader_preamble(
                src_root,
                header=header,
                bundle_loader=options.bundle_loader,
                external_loader_info=options.external_loader_info,
                source_maps=options.source_maps,
            )
        )
    results = await gather_all(jobs)
    output: BundleOutput = results[0]
    loader: List[OutputFile] = [results[1]] if options.include_loader else []

    for resource in output.inlined_resources:
        logger.log(logging.INFO if verbose else logging.DEBUG, "[optimizer] excluding inlined: %s", resource)
    resources = await collect_resources(options.resources, root, src_root, exclude=output.inlined_resources)

    info_files: List[OutputFile] = []
    if options.bundle_info:
        info_files.append(bundle_info_file(output.bundle_info or BundleInfo()))

    merged = merge_streams(loader, output.files, resources, info_files)
    if options.source_maps:
        merged = write_source_maps(merged)
    return localize(merged, localizer, out=src_root, file_header=header, languages=options.languages)

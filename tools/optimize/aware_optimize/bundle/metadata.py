"""bundleInfo.json contributions and their aggregation."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from ..schemas.optimize import BundleInfo, Metafile
from .files import OutputFile
from .utils import dumps_json

logger = logging.getLogger(__name__)

BUNDLE_INFO_FILENAME = "bundleInfo.json"


def path_to_module(path: str, src: str) -> str:
    """Strip the source folder prefix and the ``.js`` extension."""

    stripped = re.sub(rf"^{re.escape(src.rstrip('/'))}/", "", path.replace("\\", "/"))
    return re.sub(r"\.js$", "", stripped)


def module_contribution(metafile: Metafile, src: str) -> BundleInfo:
    """Translate one invocation's metafile into a partial bundleInfo."""

    info = BundleInfo()
    for output_path, output in metafile.outputs.items():
        if output_path.endswith(".map"):
            continue
        info.bundles[path_to_module(output_path, src)] = [path_to_module(name, src) for name in output.inputs]
    for input_path, value in metafile.inputs.items():
        info.graph[path_to_module(input_path, src)] = [path_to_module(item.path, src) for item in value.imports]
    return info


def merge_bundle_info(target: BundleInfo, part: BundleInfo, *, origin: Optional[str] = None) -> BundleInfo:
    """Return the union of two contributions; keys from ``part`` win.

    The same bundle key coming from two invocations means two modules wrote
    the same output path; it is overwritten and reported.
    """

    source = f" from '{origin}'" if origin else ""
    for key in sorted(target.bundles.keys() & part.bundles.keys()):
        logger.warning("Duplicate bundle output '%s'%s overwrites an earlier entry", key, source)

    return BundleInfo(
        graph={**target.graph, **part.graph},
        bundles={**target.bundles, **part.bundles},
    )


def fold_bundle_info(parts: Iterable[tuple[str, BundleInfo]]) -> BundleInfo:
    result = BundleInfo()
    for origin, part in parts:
        result = merge_bundle_info(result, part, origin=origin)
    return result


def bundle_info_file(info: BundleInfo) -> OutputFile:
    return OutputFile.synthesized(BUNDLE_INFO_FILENAME, dumps_json(info.model_dump(), indent="\t"))

"""Minification pass with Latin-1 validation of script output."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from ..assemble.maps import write_source_maps
from ..assemble.sourcemap import SourceMap
from ..bundle.esbuild import BuildRequest, BuildResult, Bundler
from ..bundle.executor import gather_all
from ..bundle.files import OutputFile
from ..errors import NonAsciiOutputError, OptimizeError
from ..output import commit_tree
from .svg import minify_svg

logger = logging.getLogger(__name__)

MINIFIED_SUFFIX = "-min"

_NON_LATIN1 = re.compile(r"[^\x00-\xFF]+")
_SOURCE_MAPPING_URL = re.compile(r"\n?//# sourceMappingURL=\S+\s*$")


@dataclass(slots=True)
class MinifyResult:
    destination: Path
    written: List[Path] = field(default_factory=list)
    minified: int = 0
    copied: int = 0
    bytes_in: int = 0
    bytes_out: int = 0


def check_latin1(text: str, path: Path | str) -> None:
    """Raise ``NonAsciiOutputError`` for the first run of characters above U+00FF."""

    match = _NON_LATIN1.search(text)
    if match is not None:
        raise NonAsciiOutputError(Path(path), match.group(0))


def default_destination(src_root: Path) -> Path:
    return src_root.with_name(src_root.name + MINIFIED_SUFFIX)


async def minify_tree(
    src_root: Path,
    bundler: Bundler,
    *,
    source_map_base_url: Optional[str] = None,
    max_concurrency: int = 1,
    destination: Optional[Path] = None,
) -> MinifyResult:
    """Minify every file under ``src_root`` into ``destination`` (``<src>-min``).

    Scripts and styles go through esbuild, SVG through :func:`minify_svg`,
    anything else is copied. Existing ``*.map`` files are skipped. Nothing is
    written unless every file succeeds.
    """

    destination = destination or default_destination(src_root)
    paths = sorted(
        path for path in src_root.rglob("*") if path.is_file() and not path.name.endswith(".map")
    )
    semaphore = asyncio.Semaphore(max(max_concurrency, 1))

    async def run(path: Path) -> OutputFile:
        async with semaphore:
            return await _minify_file(path, src_root, bundler)

    logger.info("Minifying %d files from %s", len(paths), src_root)
    files = await gather_all(run(path) for path in paths)

    result = MinifyResult(destination=destination)
    for path, file in zip(paths, files):
        result.bytes_in += path.stat().st_size
        result.bytes_out += len(file.contents)
        if path.suffix in {".js", ".css", ".svg"}:
            result.minified += 1
        else:
            result.copied += 1

    mapped = write_source_maps(files, source_mapping_url=_mapping_url(source_map_base_url))
    result.written = commit_tree(mapped, destination)
    logger.info(
        "Minified %d files, copied %d (%d -> %d bytes)",
        result.minified,
        result.copied,
        result.bytes_in,
        result.bytes_out,
    )
    return result


async def _minify_file(path: Path, src_root: Path, bundler: Bundler) -> OutputFile:
    if path.suffix == ".js":
        build = await bundler.build(_request(path, sourcemap="external"))
        text = _SOURCE_MAPPING_URL.sub("", _output_text(build, path.name))
        check_latin1(text, path)
        source_map = _output_map(build, path.name + ".map")
        return OutputFile(path=path, base=src_root, contents=text.encode("utf-8"), source_map=source_map)
    if path.suffix == ".css":
        build = await bundler.build(_request(path))
        return OutputFile(path=path, base=src_root, contents=_output_text(build, path.name).encode("utf-8"))
    contents = await asyncio.to_thread(path.read_bytes)
    if path.suffix == ".svg":
        try:
            text = contents.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise OptimizeError(f"Cannot minify {path}: not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc
        contents = minify_svg(text).encode("utf-8")
    return OutputFile(path=path, base=src_root, contents=contents)


def _request(path: Path, *, sourcemap: Optional[str] = None) -> BuildRequest:
    return BuildRequest(
        entry_points=(path,),
        outdir=path.parent,
        cwd=path.parent,
        bundle=False,
        platform="node",
        format=None,
        target=("esnext",),
        packages_external=False,
        metafile=False,
        sourcemap=sourcemap,
        minify=True,
    )


def _output_text(build: BuildResult, name: str) -> str:
    for output in build.output_files:
        if output.path.name == name:
            return output.text
    raise FileNotFoundError(f"esbuild produced no output named {name}")


def _output_map(build: BuildResult, name: str) -> Optional[SourceMap]:
    for output in build.output_files:
        if output.path.name == name:
            return SourceMap.from_json(output.contents)
    return None


def _mapping_url(base_url: Optional[str]) -> Optional[Callable[[OutputFile], str]]:
    if not base_url:
        return None
    base = base_url.rstrip("/")
    return lambda file: f"{base}/{file.relative}.map"


__all__ = ["MINIFIED_SUFFIX", "MinifyResult", "check_latin1", "default_destination", "minify_tree"]

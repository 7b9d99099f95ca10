"""Out-of-process esbuild client."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Protocol, Tuple

from ..errors import BundlerError, BundlerNotFoundError
from ..schemas.optimize import Metafile
from .utils import to_posix

logger = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "esbuild"

# Loader modes that embed the asset into the bundle instead of emitting a file.
INLINE_LOADER_MODES = frozenset({"dataurl", "base64", "text", "binary"})


@dataclass(frozen=True, slots=True)
class BuildRequest:
    """Inputs for one esbuild invocation."""

    entry_points: Tuple[Path, ...]
    outdir: Path
    cwd: Path
    bundle: bool = True
    platform: str = "neutral"
    format: Optional[str] = "esm"
    target: Tuple[str, ...] = ("es2023",)
    loaders: Mapping[str, str] = field(default_factory=dict)
    packages_external: bool = True
    external: Tuple[str, ...] = ()
    metafile: bool = True
    sourcemap: Optional[str] = None
    minify: bool = False


@dataclass(frozen=True, slots=True)
class BuildOutput:
    path: Path
    contents: bytes

    @property
    def text(self) -> str:
        return self.contents.decode("utf-8")


@dataclass(slots=True)
class BuildResult:
    output_files: List[BuildOutput]
    metafile: Optional[Metafile] = None


class Bundler(Protocol):
    async def build(self, request: BuildRequest) -> BuildResult:  # pragma: no cover - interface
        ...


class Esbuild:
    """Runs the esbuild CLI once per request, buffering output in memory.

    Files are written to a private staging directory and read back, so a
    failed invocation never touches ``request.outdir``.
    """

    def __init__(self, executable: Optional[str] = None) -> None:
        self.executable = executable or DEFAULT_EXECUTABLE

    def resolve_executable(self) -> str:
        resolved = shutil.which(self.executable)
        if resolved is None:
            raise BundlerNotFoundError(
                f"esbuild executable '{self.executable}' not found. "
                "Install esbuild or set AWARE_OPTIMIZE_ESBUILD."
            )
        return resolved

    def command(self, request: BuildRequest, *, outdir: Path, metafile_path: Optional[Path] = None) -> List[str]:
        cmd = [self.executable, *(str(entry) for entry in request.entry_points)]
        if request.bundle:
            cmd.append("--bundle")
        cmd.append(f"--platform={request.platform}")
        if request.format:
            cmd.append(f"--format={request.format}")
        if request.target:
            cmd.append(f"--target={','.join(request.target)}")
        for extension, mode in sorted(request.loaders.items()):
            cmd.append(f"--loader:{extension}={mode}")
        if request.packages_external:
            cmd.append("--packages=external")
        for name in request.external:
            cmd.append(f"--external:{name}")
        if request.minify:
            cmd.append("--minify")
        if request.sourcemap:
            cmd.append(f"--sourcemap={request.sourcemap}")
        if metafile_path is not None:
            cmd.append(f"--metafile={metafile_path}")
        cmd.append(f"--outdir={outdir}")
        cmd.append("--log-level=error")
        return cmd

    async def build(self, request: BuildRequest) -> BuildResult:
        executable = self.resolve_executable()
        with tempfile.TemporaryDirectory(prefix="aware-optimize-") as tmp_dir:
            staging_root = Path(tmp_dir)
            staging_out = staging_root / "out"
            metafile_path = staging_root / "meta.json" if request.metafile else None

            cmd = self.command(request, outdir=staging_out, metafile_path=metafile_path)
            cmd[0] = executable
            logger.debug("Running %s", " ".join(cmd))
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(request.cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            try:
                _, stderr = await proc.communicate()
            except BaseException:
                # Cancelled or interrupted: the child must not outlive the staging folder.
                if proc.returncode is None:
                    proc.kill()
                    await proc.wait()
                raise
            if proc.returncode != 0:
                raise BundlerError(
                    [to_posix(entry) for entry in request.entry_points],
                    proc.returncode if proc.returncode is not None else -1,
                    stderr.decode("utf-8", errors="replace"),
                )

            return await asyncio.to_thread(_read_staged, request, staging_out, metafile_path)


def _read_staged(request: BuildRequest, staging_out: Path, metafile_path: Optional[Path]) -> BuildResult:
    outputs: List[BuildOutput] = []
    for staged in sorted(staging_out.rglob("*")):
        if not staged.is_file():
            continue
        target = request.outdir / staged.relative_to(staging_out)
        contents = staged.read_bytes()
        if staged.name.endswith(".map"):
            contents = rebase_map_sources(contents, staged.parent, target.parent)
        outputs.append(BuildOutput(path=target, contents=contents))

    metafile = None
    if metafile_path is not None and metafile_path.exists():
        raw = json.loads(metafile_path.read_text(encoding="utf-8"))
        metafile = Metafile.model_validate(
            remap_metafile_outputs(raw, cwd=request.cwd, staging=staging_out, outdir=request.outdir)
        )
    return BuildResult(output_files=outputs, metafile=metafile)


def remap_metafile_outputs(raw: Mapping[str, object], *, cwd: Path, staging: Path, outdir: Path) -> dict:
    """Rewrite metafile output keys from the staging folder to ``outdir``.

    Keys stay relative to ``cwd`` the way esbuild reports them.
    """

    staging_resolved = staging.resolve()
    outputs = {}
    for key, value in dict(raw.get("outputs") or {}).items():  # type: ignore[union-attr]
        absolute = (cwd / key).resolve()
        try:
            relative = absolute.relative_to(staging_resolved)
        except ValueError:
            outputs[key] = value
            continue
        target = outdir / relative
        outputs[to_posix(os.path.relpath(target, cwd))] = value
    return {**raw, "outputs": outputs}


def rebase_map_sources(contents: bytes, staged_dir: Path, target_dir: Path) -> bytes:
    """Make map ``sources`` relative to where the map will finally live."""

    payload = json.loads(contents)
    sources = payload.get("sources") or []
    rebased = []
    for source in sources:
        absolute = os.path.normpath(os.path.join(staged_dir, source))
        rebased.append(to_posix(os.path.relpath(absolute, target_dir)))
    payload["sources"] = rebased
    return json.dumps(payload).encode("utf-8")


def inlined_inputs(metafile: Metafile, loaders: Mapping[str, str]) -> List[str]:
    """Return metafile inputs embedded into bundles by an inlining loader."""

    inline_extensions = {ext for ext, mode in loaders.items() if mode in INLINE_LOADER_MODES}
    return sorted(
        path
        for path in metafile.inputs
        if os.path.splitext(path)[1] in inline_extensions
    )


__all__ = [
    "BuildOutput",
    "BuildRequest",
    "BuildResult",
    "Bundler",
    "Esbuild",
    "INLINE_LOADER_MODES",
    "inlined_inputs",
    "rebase_map_sources",
    "remap_metafile_outputs",
]

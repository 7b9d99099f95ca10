"""Exceptions raised by the optimize pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class OptimizeError(RuntimeError):
    """Base class for pipeline failures."""


class ConfigError(OptimizeError):
    """Raised when an optimize configuration cannot be loaded or validated."""

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        self.path = path
        prefix = f"{path}: " if path else ""
        super().__init__(f"{prefix}{message}")


class BundlerNotFoundError(OptimizeError):
    """Raised when the esbuild executable cannot be located."""


class BundlerError(OptimizeError):
    """Raised when one esbuild invocation exits with a non-zero status."""

    def __init__(self, entry_points: Sequence[str], returncode: int, stderr: str) -> None:
        self.entry_points = list(entry_points)
        self.returncode = returncode
        self.stderr = stderr
        target = ", ".join(self.entry_points) or "<no entry points>"
        detail = stderr.strip() or "no diagnostics"
        super().__init__(f"esbuild failed for {target} (exit {returncode}): {detail}")


class NonAsciiOutputError(OptimizeError):
    """Raised when minified script output contains characters above U+00FF."""

    def __init__(self, path: Path, character: str) -> None:
        self.path = path
        self.character = character
        super().__init__(
            f"Found non-ascii character {character} in the minified output of {path}. "
            "Non-ASCII characters in the output can cause performance problems when loading. "
            "Please review if you have introduced a regular expression that esbuild is not "
            "automatically converting and convert it to using unicode escape sequences."
        )


__all__ = [
    "BundlerError",
    "BundlerNotFoundError",
    "ConfigError",
    "NonAsciiOutputError",
    "OptimizeError",
]

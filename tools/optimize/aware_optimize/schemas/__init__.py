"""Schema definitions for optimize configuration and metadata."""

from .optimize import (
    BundleInfo,
    CommonJSTaskOptions,
    EntryPoint,
    EsmTaskOptions,
    Language,
    ManualConcatJob,
    Metafile,
    MinifyOptions,
    OptimizeTaskOptions,
)

__all__ = [
    "BundleInfo",
    "CommonJSTaskOptions",
    "EntryPoint",
    "EsmTaskOptions",
    "Language",
    "ManualConcatJob",
    "Metafile",
    "MinifyOptions",
    "OptimizeTaskOptions",
]

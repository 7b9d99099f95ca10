"""Module bundling: resolution, esbuild invocation and metadata."""

from .esbuild import BuildOutput, BuildRequest, BuildResult, Bundler, Esbuild
from .files import OutputFile
from .metadata import merge_bundle_info, module_contribution
from .modules import CSS_LOADER_MODULE, resolve_module_set

__all__ = [
    "BuildOutput",
    "BuildRequest",
    "BuildResult",
    "Bundler",
    "CSS_LOADER_MODULE",
    "Esbuild",
    "OutputFile",
    "merge_bundle_info",
    "module_contribution",
    "resolve_module_set",
]

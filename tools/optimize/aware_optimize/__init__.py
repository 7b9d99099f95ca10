"""Output optimization for module-graph builds: bundling, assembly and minification."""

__version__ = "0.1.0"
from .errors import BundlerError, BundlerNotFoundError, ConfigError, NonAsciiOutputError, OptimizeError
from .bundle.esbuild import Esbuild
from .bundle.files import OutputFile
from .config import load_config
from .schemas.optimize import EsmTaskOptions, MinifyOptions, OptimizeTaskOptions
from .pipeline import OptimizeResult, optimize_commonjs, optimize_loader_task, optimize_task, run_minify

__all__ = [
    "__version__",
    "BundlerError",
    "BundlerNotFoundError",
    "ConfigError",
    "Esbuild",
    "EsmTaskOptions",
    "MinifyOptions",
    "NonAsciiOutputError",
    "OptimizeError",
    "OptimizeResult",
    "OptimizeTaskOptions",
    "OutputFile",
    "load_config",
    "optimize_commonjs",
    "optimize_loader_task",
    "optimize_task",
    "run_minify",
]

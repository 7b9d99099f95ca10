"""Minification and output validation."""

from .svg import minify_svg
from .task import MinifyResult, check_latin1, minify_tree

__all__ = ["MinifyResult", "check_latin1", "minify_svg", "minify_tree"]

"""Output assembly: concatenation, headers, loader preamble and source maps."""

from .concat import SourceChunk, concat_chunks
from .header import DEFAULT_FILE_HEADER, contains_copyright, inject_header
from .loader import build_loader_preamble, emit_external_loader_info, loader_rank
from .manual import concat_manual
from .maps import map_source_path, write_source_maps
from .resources import collect_resources, resolve_resource_paths
from .sourcemap import SourceMap, concat_source_maps, identity_map

__all__ = [
    "DEFAULT_FILE_HEADER",
    "SourceChunk",
    "SourceMap",
    "build_loader_preamble",
    "collect_resources",
    "concat_chunks",
    "concat_manual",
    "concat_source_maps",
    "contains_copyright",
    "emit_external_loader_info",
    "identity_map",
    "inject_header",
    "loader_rank",
    "map_source_path",
    "resolve_resource_paths",
    "write_source_maps",
]

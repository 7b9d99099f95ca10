"""Resolve the set of modules bundled by the ESM task."""

from __future__ import annotations

from typing import Iterable, List

from ..schemas.optimize import EntryPoint

CSS_LOADER_MODULE = "vs/css"


def resolve_module_set(entry_points: Iterable[EntryPoint]) -> List[str]:
    """Return every module mentioned by the entry points, sorted.

    Names, includes and excludes all count. The CSS loader shim is dropped
    because the loader preamble emits it separately.
    """

    modules: set[str] = set()
    for entry_point in entry_points:
        modules.add(entry_point.name)
        modules.update(entry_point.include)
        modules.update(entry_point.exclude)

    modules.discard(CSS_LOADER_MODULE)
    return sorted(modules)


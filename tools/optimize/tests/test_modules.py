from __future__ import annotations

from aware_optimize.bundle.modules import CSS_LOADER_MODULE, resolve_module_set
from aware_optimize.schemas.optimize import EntryPoint


def test_module_set_is_union_of_names_includes_and_excludes() -> None:
    entry_points = [
        EntryPoint(name="vs/workbench/workbench.desktop.main", include=["vs/base/common/uri"]),
        EntryPoint(name="vs/editor/editor.main", exclude=["vs/base/common/uri", "vs/nls"]),
    ]

    modules = resolve_module_set(entry_points)

    assert modules == [
        "vs/base/common/uri",
        "vs/editor/editor.main",
        "vs/nls",
        "vs/workbench/workbench.desktop.main",
    ]


def test_module_set_drops_css_loader_shim() -> None:
    entry_points = [
        EntryPoint(name=CSS_LOADER_MODULE),
        EntryPoint(name="vs/code/main", include=[CSS_LOADER_MODULE]),
    ]

    assert resolve_module_set(entry_points) == ["vs/code/main"]


def test_module_set_empty_without_entry_points() -> None:
    assert resolve_module_set([]) == []

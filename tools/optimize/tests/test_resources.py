from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from aware_optimize.assemble.resources import collect_resources, glob_to_regex, resolve_resource_paths
from aware_optimize.errors import ConfigError


def _tree(root: Path) -> None:
    for relative in ["src/vs/a.svg", "src/vs/sub/b.png", "src/vs/sub/c.txt", "src/vs/sub/deep/d.svg"]:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(relative.encode("utf-8"))


def test_glob_translation() -> None:
    assert glob_to_regex("src/**/*.svg").match("src/a.svg")
    assert glob_to_regex("src/**/*.svg").match("src/x/y/a.svg")
    assert not glob_to_regex("src/*.svg").match("src/x/a.svg")
    assert glob_to_regex("src/?.svg").match("src/a.svg")


def test_negations_remove_matches(tmp_path: Path) -> None:
    _tree(tmp_path)

    paths = resolve_resource_paths(["src/vs/**/*.svg", "src/vs/**/*.png", "!src/vs/sub/**"], tmp_path)

    assert [path.relative_to(tmp_path).as_posix() for path in paths] == ["src/vs/a.svg"]


def test_exclude_drops_inlined_inputs(tmp_path: Path) -> None:
    _tree(tmp_path)

    paths = resolve_resource_paths(["src/vs/**/*.svg"], tmp_path, exclude=["src/vs/a.svg"])

    assert [path.relative_to(tmp_path).as_posix() for path in paths] == ["src/vs/sub/deep/d.svg"]


def test_pattern_without_matches_is_not_an_error(tmp_path: Path) -> None:
    _tree(tmp_path)

    assert resolve_resource_paths(["src/vs/**/*.woff"], tmp_path) == []


def test_collected_resources_are_relative_to_base(tmp_path: Path) -> None:
    _tree(tmp_path)

    files = asyncio.run(collect_resources(["src/vs/**/*.png"], tmp_path, tmp_path / "src"))

    assert [file.relative for file in files] == ["vs/sub/b.png"]
    assert files[0].contents == b"src/vs/sub/b.png"


def test_resource_outside_base_is_rejected(tmp_path: Path) -> None:
    _tree(tmp_path)
    (tmp_path / "other.svg").write_text("<svg/>", encoding="utf-8")

    with pytest.raises(ConfigError):
        asyncio.run(collect_resources(["*.svg"], tmp_path, tmp_path / "src"))

from __future__ import annotations

import json
from pathlib import Path

import pytest

from aware_optimize.config import esbuild_from_env, is_verbose, load_config
from aware_optimize.errors import ConfigError

_CONFIG = """
out: out-build
esm:
  src: src
  entry_points:
    - name: vs/workbench/main
      include: [vs/base/common/uri]
  resources:
    - src/vs/**/*.svg
  bundle_info: true
  asset_loaders:
    svg: dataurl
manual:
  - src: [lib/a.js, lib/b.js]
    out: vs/combined.js
"""


def test_load_yaml_config_defaults_root_to_config_folder(tmp_path: Path) -> None:
    path = tmp_path / "optimize.yaml"
    path.write_text(_CONFIG, encoding="utf-8")

    options = load_config(path)

    assert options.root == str(tmp_path.resolve())
    assert options.out == "out-build"
    assert options.esm.entry_points[0].include == ["vs/base/common/uri"]
    assert options.esm.asset_loaders == {".svg": "dataurl"}
    assert options.esm.include_loader is True
    assert options.esm.target == ["es2023"]
    assert options.manual[0].src == ["lib/a.js", "lib/b.js"]
    assert options.commonjs is None


def test_load_json_config_with_relative_root(tmp_path: Path) -> None:
    path = tmp_path / "build" / "optimize.json"
    path.parent.mkdir()
    path.write_text(json.dumps({"out": "out", "root": "..", "esm": {"src": "src"}}), encoding="utf-8")

    options = load_config(path)

    assert options.root == str(tmp_path.resolve())
    assert options.esm.asset_loaders[".ttf"] == "file"


def test_unknown_option_is_a_config_error(tmp_path: Path) -> None:
    path = tmp_path / "optimize.yaml"
    path.write_text("out: out\nesm:\n  src: src\n  bundel_info: true\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(path)

    assert excinfo.value.path == path
    assert "bundel_info" in str(excinfo.value)


def test_missing_and_malformed_configs(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("out: [unterminated\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(broken)

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(listing)


def test_environment_overrides() -> None:
    assert esbuild_from_env({"AWARE_OPTIMIZE_ESBUILD": "/opt/esbuild/bin/esbuild"}) == "/opt/esbuild/bin/esbuild"
    assert esbuild_from_env({"AWARE_OPTIMIZE_ESBUILD": "  "}) is None
    assert esbuild_from_env({}) is None
    assert is_verbose({"AWARE_OPTIMIZE_VERBOSE": "True"})
    assert not is_verbose({"AWARE_OPTIMIZE_VERBOSE": "0"})
    assert not is_verbose({})

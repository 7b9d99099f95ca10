from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Dict, List

from aware_optimize.assemble.header import DEFAULT_FILE_HEADER
from aware_optimize.assemble.merge import merge_streams, optimize_esm
from aware_optimize.assemble.sourcemap import identity_map
from aware_optimize.bundle.esbuild import BuildOutput, BuildRequest, BuildResult
from aware_optimize.bundle.files import OutputFile
from aware_optimize.schemas.optimize import EntryPoint, EsmTaskOptions, Language, Metafile


class _FakeEsbuild:
    """Returns each entry file as its own bundle with a metafile and identity map."""

    def __init__(self, inlined: Dict[str, List[str]] | None = None, delays: Dict[str, float] | None = None) -> None:
        self.inlined = inlined or {}
        self.delays = delays or {}
        self.requests: List[BuildRequest] = []

    async def build(self, request: BuildRequest) -> BuildResult:
        self.requests.append(request)
        entry = request.entry_points[0]
        relative_entry = Path(os.path.relpath(entry, request.cwd)).as_posix()
        await asyncio.sleep(self.delays.get(relative_entry, 0))

        text = entry.read_text(encoding="utf-8")
        output_path = request.outdir / entry.name
        outputs = [BuildOutput(path=output_path, contents=f"{text}\n//# sourceMappingURL={entry.name}.map".encode())]
        if request.sourcemap:
            source_map = identity_map(f"../../{relative_entry}", text)
            outputs.append(BuildOutput(path=output_path.with_name(entry.name + ".map"), contents=source_map.dumps().encode()))

        inputs = {relative_entry: {"bytes": len(text), "imports": []}}
        for name in self.inlined.get(relative_entry, []):
            inputs[name] = {"bytes": 1, "imports": []}
            inputs[relative_entry]["imports"].append({"path": name, "kind": "import-statement"})
        metafile = Metafile.model_validate(
            {
                "inputs": inputs,
                "outputs": {
                    Path(os.path.relpath(output_path, request.cwd)).as_posix(): {
                        "bytes": len(text),
                        "entryPoint": relative_entry,
                        "inputs": {name: {"bytesInOutput": 1} for name in inputs},
                    }
                },
            }
        )
        return BuildResult(output_files=outputs, metafile=metafile)


class _RecordingLocalizer:
    def __init__(self) -> None:
        self.calls: List[List[str]] = []

    def localize(self, files, *, out, file_header, languages):
        self.calls.append([language.id for language in languages])
        return [*files, OutputFile.synthesized("nls.metadata.json", "{}")]


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _workspace(root: Path) -> None:
    _write(root / "src" / "vs" / "loader.js", "var AMDLoader;")
    _write(root / "src" / "vs" / "css.js", "define([], function () {});")
    _write(
        root / "src" / "vs" / "workbench" / "main.js",
        "/*---------\n * Copyright (C) Microsoft Corporation.\n *---------*/\nexport const main = 1;",
    )
    _write(root / "src" / "vs" / "editor" / "editor.js", "export const editor = 2;")
    _write(root / "src" / "vs" / "icons" / "a.svg", "<svg/>")
    _write(root / "src" / "vs" / "icons" / "inline.svg", "<svg/>")


def _options(**overrides) -> EsmTaskOptions:
    payload = {
        "src": "src",
        "entry_points": [
            {"name": "vs/workbench/main"},
            {"name": "vs/editor/editor", "exclude": ["vs/css"]},
        ],
        "resources": ["src/vs/**/*.svg"],
        "bundle_info": True,
        "asset_loaders": {"svg": "dataurl"},
    }
    payload.update(overrides)
    return EsmTaskOptions.model_validate(payload)


def test_merge_streams_fixed_order() -> None:
    loader = [OutputFile.synthesized("vs/loader.js", "l")]
    bundles = [OutputFile.synthesized("vs/a.js", "a")]
    resources = [OutputFile.synthesized("vs/a.svg", "r")]
    info = [OutputFile.synthesized("bundleInfo.json", "{}")]

    merged = merge_streams(loader, bundles, resources, info)

    assert [file.relative for file in merged] == ["vs/loader.js", "vs/a.js", "vs/a.svg", "bundleInfo.json"]


def test_optimize_esm_produces_deterministic_stream(tmp_path: Path) -> None:
    _workspace(tmp_path)
    bundler = _FakeEsbuild(
        inlined={"src/vs/workbench/main.js": ["src/vs/icons/inline.svg"]},
        delays={"src/vs/editor/editor.js": 0.02},
    )

    files = asyncio.run(optimize_esm(_options(), root=tmp_path, bundler=bundler))

    assert [file.relative for file in files] == [
        "vs/loader.js",
        "vs/loader.js.map",
        "vs/editor/editor.js",
        "vs/editor/editor.js.map",
        "vs/workbench/main.js",
        "vs/workbench/main.js.map",
        "vs/icons/a.svg",
        "bundleInfo.json",
    ]
    assert len(bundler.requests) == 2
    assert bundler.requests[0].loaders == {".svg": "dataurl"}


def test_bundled_outputs_and_headers(tmp_path: Path) -> None:
    _workspace(tmp_path)

    files = {
        file.relative: file
        for file in asyncio.run(optimize_esm(_options(), root=tmp_path, bundler=_FakeEsbuild()))
    }

    main = files["vs/workbench/main.js"].text
    editor = files["vs/editor/editor.js"].text
    assert main.startswith(DEFAULT_FILE_HEADER + "\n/*---------")
    assert main.endswith("//# sourceMappingURL=main.js.map")
    assert main.count("sourceMappingURL") == 1
    assert not editor.startswith(DEFAULT_FILE_HEADER)
    assert files["vs/loader.js"].text.startswith(DEFAULT_FILE_HEADER)
    assert 'define("vs/css",' in files["vs/loader.js"].text

    main_map = json.loads(files["vs/workbench/main.js.map"].text)
    assert main_map["file"] == "main.js"
    assert main_map["sources"] == ["../../src/vs/workbench/main.js"]


def test_bundle_info_keys_match_bundled_outputs(tmp_path: Path) -> None:
    _workspace(tmp_path)

    files = asyncio.run(optimize_esm(_options(), root=tmp_path, bundler=_FakeEsbuild()))

    info = json.loads(next(file for file in files if file.relative == "bundleInfo.json").text)
    assert set(info["bundles"]) == {"vs/editor/editor", "vs/workbench/main"}
    assert info["graph"]["vs/workbench/main"] == []


def test_without_inlining_all_resources_pass_through(tmp_path: Path) -> None:
    _workspace(tmp_path)

    files = asyncio.run(
        optimize_esm(
            _options(bundle_info=False, include_loader=False, source_maps=False),
            root=tmp_path,
            bundler=_FakeEsbuild(),
        )
    )

    assert [file.relative for file in files] == [
        "vs/editor/editor.js",
        "vs/workbench/main.js",
        "vs/icons/a.svg",
        "vs/icons/inline.svg",
    ]


def test_localizer_runs_only_with_languages(tmp_path: Path) -> None:
    _workspace(tmp_path)
    localizer = _RecordingLocalizer()

    plain = asyncio.run(optimize_esm(_options(), root=tmp_path, bundler=_FakeEsbuild(), localizer=localizer))
    localized = asyncio.run(
        optimize_esm(
            _options(languages=[Language(id="de").model_dump()]),
            root=tmp_path,
            bundler=_FakeEsbuild(),
            localizer=localizer,
        )
    )

    assert localizer.calls == [["de"]]
    assert len(localized) == len(plain) + 1
    assert localized[-1].relative == "nls.metadata.json"

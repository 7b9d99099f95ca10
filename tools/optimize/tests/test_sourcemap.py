from __future__ import annotations

import json

import pytest

from aware_optimize.assemble.sourcemap import (
    SourceMap,
    concat_source_maps,
    decode_mappings,
    decode_vlq,
    encode_mappings,
    encode_vlq,
    identity_map,
)


def test_encode_vlq_known_values() -> None:
    assert encode_vlq(0) == "A"
    assert encode_vlq(1) == "C"
    assert encode_vlq(-1) == "D"
    assert encode_vlq(16) == "gB"


def test_decode_vlq_reads_multiple_values() -> None:
    assert decode_vlq("AACA") == [0, 0, 1, 0]
    assert decode_vlq("gBD") == [16, -1]


def test_decode_vlq_rejects_invalid_input() -> None:
    with pytest.raises(ValueError):
        decode_vlq("A!")
    with pytest.raises(ValueError):
        decode_vlq("g")


def test_mappings_are_absolute_per_line() -> None:
    lines = decode_mappings("AAAA,IAAI;AACA")

    assert lines == [[(0, 0, 0, 0), (4, 0, 0, 4)], [(0, 0, 1, 4)]]
    assert encode_mappings(lines) == "AAAA,IAAI;AACA"


def test_source_map_json_keeps_content() -> None:
    payload = {
        "version": 3,
        "sources": ["a.ts"],
        "sourcesContent": ["let a = 1;"],
        "names": ["a"],
        "mappings": "AAAAA",
    }

    source_map = SourceMap.from_json(json.dumps(payload))

    assert source_map.lines == [[(0, 0, 0, 0, 0)]]
    assert source_map.to_json()["sourcesContent"] == ["let a = 1;"]
    assert source_map.to_json()["names"] == ["a"]


def test_source_map_rejects_other_versions() -> None:
    with pytest.raises(ValueError):
        SourceMap.from_json({"version": 2, "sources": [], "mappings": ""})


def test_concat_offsets_lines_and_sources() -> None:
    first = "a();\nb();"
    second = "c();"

    combined = concat_source_maps(
        [
            (first, identity_map("x.js", first)),
            ("/* header */", None),
            (second, identity_map("y.js", second)),
        ],
        file="out.js",
    )

    assert combined.sources == ["x.js", "y.js"]
    assert combined.sources_content == [first, second]
    assert combined.file == "out.js"
    assert combined.lines[0] == [(0, 0, 0, 0)]
    assert combined.lines[1] == [(0, 0, 1, 0)]
    assert combined.lines[2] == []
    assert combined.lines[3] == [(0, 1, 0, 0)]


def test_concat_shifts_name_indexes() -> None:
    left = SourceMap(sources=["l.js"], lines=[[(0, 0, 0, 0, 0)]], names=["left"])
    right = SourceMap(sources=["r.js"], lines=[[(0, 0, 0, 0, 0)]], names=["right"])

    combined = concat_source_maps([("l", left), ("r", right)])

    assert combined.names == ["left", "right"]
    assert combined.lines[1] == [(0, 1, 0, 0, 1)]


def test_concat_rejects_non_newline_separator() -> None:
    with pytest.raises(ValueError):
        concat_source_maps([("a", None)], separator=";")

"""Source Map v3 decoding, encoding and concatenation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

Segment = Tuple[int, ...]

_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_INDEX = {char: index for index, char in enumerate(_BASE64)}


def encode_vlq(value: int) -> str:
    vlq = ((-value) << 1) | 1 if value < 0 else value << 1
    chars: List[str] = []
    while True:
        digit = vlq & 0b11111
        vlq >>= 5
        if vlq:
            digit |= 0b100000
        chars.append(_BASE64[digit])
        if not vlq:
            return "".join(chars)


def decode_vlq(segment: str) -> List[int]:
    values: List[int] = []
    value = shift = 0
    for char in segment:
        try:
            digit = _BASE64_INDEX[char]
        except KeyError as exc:
            raise ValueError(f"Invalid base64 VLQ character {char!r} in {segment!r}") from exc
        value += (digit & 0b11111) << shift
        if digit & 0b100000:
            shift += 5
            continue
        negative = value & 1
        value >>= 1
        values.append(-value if negative else value)
        value = shift = 0
    if shift:
        raise ValueError(f"Truncated VLQ segment {segment!r}")
    return values


def decode_mappings(mappings: str) -> List[List[Segment]]:
    """Decode a ``mappings`` string into absolute per-line segments."""

    lines: List[List[Segment]] = []
    source = original_line = original_column = name = 0
    for raw_line in mappings.split(";"):
        column = 0
        segments: List[Segment] = []
        for raw_segment in raw_line.split(","):
            if not raw_segment:
                continue
            fields = decode_vlq(raw_segment)
            column += fields[0]
            if len(fields) < 4:
                segments.append((column,))
                continue
            source += fields[1]
            original_line += fields[2]
            original_column += fields[3]
            if len(fields) >= 5:
                name += fields[4]
                segments.append((column, source, original_line, original_column, name))
            else:
                segments.append((column, source, original_line, original_column))
        lines.append(segments)
    return lines


def encode_mappings(lines: Iterable[Sequence[Segment]]) -> str:
    encoded_lines: List[str] = []
    source = original_line = original_column = name = 0
    for segments in lines:
        column = 0
        encoded: List[str] = []
        for segment in segments:
            parts = [encode_vlq(segment[0] - column)]
            column = segment[0]
            if len(segment) >= 4:
                parts.append(encode_vlq(segment[1] - source))
                parts.append(encode_vlq(segment[2] - original_line))
                parts.append(encode_vlq(segment[3] - original_column))
                source, original_line, original_column = segment[1], segment[2], segment[3]
                if len(segment) >= 5:
                    parts.append(encode_vlq(segment[4] - name))
                    name = segment[4]
            encoded.append("".join(parts))
        encoded_lines.append(",".join(encoded))
    return ";".join(encoded_lines)


@dataclass(slots=True)
class SourceMap:
    """Decoded Source Map v3 document."""

    sources: List[str]
    lines: List[List[Segment]]
    sources_content: List[Optional[str]] = field(default_factory=list)
    names: List[str] = field(default_factory=list)
    file: Optional[str] = None
    source_root: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any] | str | bytes) -> "SourceMap":
        data = json.loads(payload) if isinstance(payload, (str, bytes)) else dict(payload)
        if data.get("version", 3) != 3:
            raise ValueError(f"Unsupported source map version: {data.get('version')}")
        if "sections" in data:
            raise ValueError("Indexed source maps are not supported")
        sources = list(data.get("sources") or [])
        content = list(data.get("sourcesContent") or [])
        return cls(
            sources=sources,
            lines=decode_mappings(data.get("mappings", "")),
            sources_content=content,
            names=list(data.get("names") or []),
            file=data.get("file"),
            source_root=data.get("sourceRoot"),
        )

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"version": 3}
        if self.file is not None:
            payload["file"] = self.file
        if self.source_root is not None:
            payload["sourceRoot"] = self.source_root
        payload["sources"] = list(self.sources)
        payload["names"] = list(self.names)
        payload["mappings"] = encode_mappings(self.lines)
        if any(content is not None for content in self.sources_content):
            padded = list(self.sources_content) + [None] * (len(self.sources) - len(self.sources_content))
            payload["sourcesContent"] = padded[: len(self.sources)]
        return payload

    def dumps(self) -> str:
        return json.dumps(self.to_json(), ensure_ascii=False)

    def content_for(self, index: int) -> Optional[str]:
        if index < len(self.sources_content):
            return self.sources_content[index]
        return None

    def map_sources(self, mapper: Callable[[str], str]) -> "SourceMap":
        return SourceMap(
            sources=[mapper(source) for source in self.sources],
            lines=[list(segments) for segments in self.lines],
            sources_content=list(self.sources_content),
            names=list(self.names),
            file=self.file,
            source_root=self.source_root,
        )


def identity_map(source: str, content: str) -> SourceMap:
    """Map every generated line to the same line of ``source``."""

    line_count = content.count("\n") + 1
    return SourceMap(
        sources=[source],
        lines=[[(0, 0, line, 0)] for line in range(line_count)],
        sources_content=[content],
    )


def concat_source_maps(
    chunks: Sequence[Tuple[str, Optional[SourceMap]]],
    *,
    separator: str = "\n",
    file: Optional[str] = None,
) -> SourceMap:
    """Build the map of ``separator.join(texts)`` from per-chunk maps.

    Chunks without a map contribute unmapped lines. ``separator`` may only
    contain line breaks so every chunk starts at column zero.
    """

    if not separator or separator.strip("\n"):
        raise ValueError("Separator must consist of line breaks only")

    result = SourceMap(sources=[], lines=[], file=file)
    line_offset = 0
    for text, chunk_map in chunks:
        chunk_lines = text.count("\n") + 1
        if chunk_map is not None:
            source_offset = len(result.sources)
            name_offset = len(result.names)
            for index, source in enumerate(chunk_map.sources):
                result.sources.append(source)
                result.sources_content.append(chunk_map.content_for(index))
            result.names.extend(chunk_map.names)
            for line_index, segments in enumerate(chunk_map.lines[:chunk_lines]):
                target = line_offset + line_index
                while len(result.lines) <= target:
                    result.lines.append([])
                result.lines[target].extend(
                    _shift_segment(segment, source_offset, name_offset) for segment in segments
                )
        line_offset += chunk_lines + separator.count("\n") - 1

    return result


def _shift_segment(segment: Segment, source_offset: int, name_offset: int) -> Segment:
    if len(segment) == 1:
        return segment
    shifted = (segment[0], segment[1] + source_offset, segment[2], segment[3])
    if len(segment) >= 5:
        return shifted + (segment[4] + name_offset,)
    return shifted

"""Fixed SVG minification transform."""

from __future__ import annotations

import re

_XML_DECLARATION = re.compile(r"<\?xml[^>]*\?>")
_DOCTYPE = re.compile(r"<!DOCTYPE[^>\[]*(\[[^\]]*\])?\s*>", re.IGNORECASE)
_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_METADATA = re.compile(r"<metadata\b[^>]*/>|<metadata\b.*?</metadata>", re.DOTALL)
_BETWEEN_TAGS = re.compile(r">\s+<")


def minify_svg(text: str) -> str:
    """Drop prolog, comments and metadata, and whitespace-only runs between tags.

    Text content, attribute values and ``<style>`` bodies are left untouched.
    """

    for pattern in (_XML_DECLARATION, _DOCTYPE, _COMMENT, _METADATA):
        text = pattern.sub("", text)
    return _BETWEEN_TAGS.sub("><", text).strip()

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

from .debug_strip import strip_debug_blocks
from .delimiters import find_opener, scan_balanced
from .mappings import MIN_JSON_BLOB_LENGTH, WINDOWS_JSON_MARKER

_HTML_QUOTES = re.compile(r"&quot;|&#34;", re.IGNORECASE)

_RAW_JSON_PATTERNS = (
    re.compile(r'"\w+"\s*:\s*"'),
    re.compile(r'\{\s*"\w+"'),
    re.compile(r"\[\s*\{"),
    re.compile(r"}\s*,\s*\{"),
    re.compile(r'_status"\s*:'),
    re.compile(r'_pakshi"\s*:'),
    re.compile(re.escape(WINDOWS_JSON_MARKER), re.IGNORECASE),
    re.compile(r"\}\}\}"),
)


@dataclass(frozen=True)
class EmbeddedJson:
    data: Any
    cleaned_text: str


def try_parse_json(candidate: str) -> Any:
    """Parse ``candidate`` as-is, then HTML-unquoted, then backslash-unquoted."""

    attempts = (
        candidate,
        _HTML_QUOTES.sub('"', candidate),
        candidate.replace('\\"', '"'),
    )
    for attempt in attempts:
        try:
            parsed = json.loads(attempt)
        except (ValueError, RecursionError):
            continue
        if isinstance(parsed, (dict, list)):
            return parsed
    return None


def extract_and_parse_json(text: Any) -> EmbeddedJson:
    """Parse the first brace/bracket blob in ``text`` and cut it out."""

    if not text:
        return EmbeddedJson(None, "")
    source = str(text)
    start = find_opener(source)
    if start is None:
        return EmbeddedJson(None, strip_debug_blocks(source))
    end = scan_balanced(source, start)
    if end is None:
        end = len(source)
    candidate = source[start:end].strip()
    if len(candidate) < MIN_JSON_BLOB_LENGTH:
        return EmbeddedJson(None, strip_debug_blocks(source))
    parsed = try_parse_json(candidate)
    if parsed is None:
        return EmbeddedJson(None, strip_debug_blocks(source))
    return EmbeddedJson(parsed, strip_debug_blocks(source[:start] + source[end:]))


def parse_embedded_windows_json(note: Any) -> EmbeddedJson:
    """Pull a ``__windows_json__`` payload (or any JSON blob) out of a note.

    With the marker present only the blob directly after it (past separator
    whitespace and colons) is considered; the marker is removed either way.
    """

    if not note:
        return EmbeddedJson(None, "")
    text = str(note)
    idx = text.lower().find(WINDOWS_JSON_MARKER)
    if idx == -1:
        return extract_and_parse_json(text)

    cursor = idx + len(WINDOWS_JSON_MARKER)
    while cursor < len(text) and (text[cursor].isspace() or text[cursor] == ":"):
        cursor += 1
    if cursor >= len(text) or text[cursor] not in "{[":
        return EmbeddedJson(None, strip_debug_blocks(text[:idx] + text[cursor:]))

    end = scan_balanced(text, cursor)
    if end is None:
        end = len(text)
    parsed = try_parse_json(text[cursor:end].strip())
    return EmbeddedJson(parsed, strip_debug_blocks(text[:idx] + text[end:]))


def looks_like_raw_json_data(text: Optional[str], min_length: int = 3) -> bool:
    """True when ``text`` is empty, too short, or still carries JSON debris."""

    if not text:
        return True
    trimmed = text.strip()
    if len(trimmed) < min_length:
        return True
    return any(pattern.search(trimmed) for pattern in _RAW_JSON_PATTERNS)

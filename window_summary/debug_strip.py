"""Removal of backend artifacts that leak into narrative text.

The passes run in a fixed order: marker-anchored JSON blobs, literal markers
and fenced code, standalone JSON-looking blobs, leaked ``"key": value``
fragments, brace/bracket debris, trailing debug labels, and finally
whitespace/punctuation collapse. The heuristics are intentionally loose;
``time_windows[n]`` tokens (single bracket pair, bare integer) survive every
pass.
"""

from __future__ import annotations

import re
from typing import Any

from .delimiters import find_opener, scan_balanced
from .mappings import (
    DEBUG_MARKERS,
    MAX_JSON_BLOB_SIZE,
    MAX_JSON_SCAN_ITERATIONS,
    MIN_JSON_BLOB_LENGTH,
)

_MARKER_LITERALS = re.compile("|".join(re.escape(marker) for marker in DEBUG_MARKERS), re.IGNORECASE)
_FENCED_BLOCK = re.compile(r"```(?:json|javascript|js)?.*?```", re.IGNORECASE | re.DOTALL)
_BACKTICK_RUN = re.compile(r"``+")

_BLOB_QUOTED_KEY = re.compile(r'^[\[{]\s*"[\w_-]+"\s*:')
_BLOB_OBJECT_ARRAY = re.compile(r'^\[\s*\{\s*"[\w_-]+"\s*:')
_BLOB_STRING_ARRAY = re.compile(r'^\[\s*"')
_BLOB_KEY = re.compile(r'"\w+"\s*:')

_LEAKED_KEY_VALUE = re.compile(r'"[\w\s-]+"\s*:\s*("[^"]*"|\d+|true|false|null)\s*,?', re.IGNORECASE)
_EMPTY_STRUCTURE = re.compile(r"\{\s*\}|\[\s*\]")
_PARTIAL_KEY_VALUE = re.compile(r'\w+_\w+"\s*:\s*"[^"]*"\s*,?', re.IGNORECASE)
_QUOTED_PAIR = re.compile(r'"\w+"\s*:\s*"[^"]*"\s*,?', re.IGNORECASE)
_CLOSER_RUN = re.compile(r'[}\]]{3,}\s*,?\s*\{?"?\w*"?:?')
_OPENING_FRAGMENT = re.compile(r'[\[{]\s*"\w+"\s*:\s*\d*\s*,?\s*"?\w*"?\s*:?\s*"?')
_TRAILING_DEBUG = re.compile(r"(?:Debug|Raw payload|Raw data)[:\-]?\s*.*\Z", re.IGNORECASE | re.DOTALL)

_SPACE_BEFORE_PUNCT = re.compile(r"\s+[,.]")
_HORIZONTAL_RUN = re.compile(r"[\t ]{2,}")
_TRAILING_LINE_SPACE = re.compile(r"[ \t]+\n")
_NEWLINE_RUN = re.compile(r"\n{3,}")
_SPACE_COMMA = re.compile(r"\s+,")
_SPACE_PERIOD = re.compile(r"\s+\.")
_COMMA_RUN = re.compile(r",+")
_DELIMITER_RUN = re.compile(r"[{}]{2,}|[\[\]]{2,}")


def _looks_like_json_blob(candidate: str) -> bool:
    return bool(
        _BLOB_QUOTED_KEY.match(candidate)
        or _BLOB_OBJECT_ARRAY.match(candidate)
        or _BLOB_STRING_ARRAY.match(candidate)
        or len(_BLOB_KEY.findall(candidate)) >= 2
    )


def _strip_marker_blobs(text: str) -> str:
    out = text
    for marker in DEBUG_MARKERS:
        search_start = 0
        while search_start < len(out):
            idx = out.lower().find(marker, search_start)
            if idx == -1:
                break
            cursor = idx + len(marker)
            while cursor < len(out) and (out[cursor].isspace() or out[cursor] == ":"):
                cursor += 1
            if cursor < len(out) and out[cursor] in "{[":
                end = scan_balanced(out, cursor)
                if end is None:
                    end = len(out)
                out = out[:idx] + out[end:]
                search_start = max(idx - 1, 0)
            else:
                out = out[:idx] + out[cursor:]
                search_start = idx
    return out


def strip_standalone_json_blobs(text: str) -> str:
    """Drop balanced ``{...}``/``[...]`` spans that look like raw data.

    Scanning is bounded by a blob size and an iteration cap so malformed
    input always terminates.
    """

    if not text:
        return ""
    result = text
    search_start = 0
    iterations = 0
    while search_start < len(result) and iterations < MAX_JSON_SCAN_ITERATIONS:
        iterations += 1
        start = find_opener(result, search_start)
        if start is None:
            break
        end = scan_balanced(result, start, MAX_JSON_BLOB_SIZE)
        if end is None:
            search_start = start + 1
            continue
        candidate = result[start:end]
        if _looks_like_json_blob(candidate) and len(candidate) > MIN_JSON_BLOB_LENGTH:
            result = result[:start] + result[end:]
        else:
            search_start = start + 1
    return result


def _collapse_artifacts(text: str) -> str:
    out = _SPACE_BEFORE_PUNCT.sub(lambda m: m.group(0).strip(), text)
    out = _HORIZONTAL_RUN.sub(" ", out)
    out = _TRAILING_LINE_SPACE.sub("\n", out)
    out = _NEWLINE_RUN.sub("\n\n", out)
    out = _SPACE_COMMA.sub(",", out)
    out = _SPACE_PERIOD.sub(".", out)
    out = _COMMA_RUN.sub(",", out)
    out = _DELIMITER_RUN.sub("", out)
    return out.strip()


def strip_debug_blocks(text: Any) -> str:
    if not text:
        return ""
    out = _strip_marker_blobs(str(text))

    out = _MARKER_LITERALS.sub("", out)
    out = _FENCED_BLOCK.sub("", out)
    out = _BACKTICK_RUN.sub(" ", out)

    out = strip_standalone_json_blobs(out)

    out = _LEAKED_KEY_VALUE.sub("", out)
    out = _EMPTY_STRUCTURE.sub("", out)

    out = _PARTIAL_KEY_VALUE.sub("", out)
    out = _QUOTED_PAIR.sub("", out)
    out = _CLOSER_RUN.sub("", out)
    out = _OPENING_FRAGMENT.sub("", out)

    out = _TRAILING_DEBUG.sub("", out)

    return _collapse_artifacts(out)

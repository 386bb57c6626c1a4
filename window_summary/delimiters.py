from __future__ import annotations

import re
from typing import Optional

_OPENERS = re.compile(r"[\[{]")
_CLOSERS = {"{": "}", "[": "]"}


def find_opener(text: str, start: int = 0) -> Optional[int]:
    """Index of the first ``{`` or ``[`` at or after ``start``."""

    match = _OPENERS.search(text, start)
    return match.start() if match else None


def scan_balanced(text: str, start: int, limit: Optional[int] = None) -> Optional[int]:
    """Return the end (exclusive) of the balanced blob opening at ``start``.

    Only the opening character and its own closer are counted, so ``{"a": [1}``
    closes at the ``}``. Returns ``None`` when the blob never closes within
    ``limit`` characters.
    """

    if start < 0 or start >= len(text):
        return None
    opener = text[start]
    closer = _CLOSERS.get(opener)
    if closer is None:
        return None
    stop = len(text) if limit is None else min(len(text), start + limit)
    depth = 0
    for index in range(start, stop):
        char = text[index]
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return index + 1
    return None

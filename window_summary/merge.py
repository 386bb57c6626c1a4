"""Deterministic merge of AI-authored window text into engine windows.

Engine windows own the times; AI entries only contribute prose. Entries are
matched by position (``window_index`` is 1-based, ``tw_N`` keys are 0-based)
and never by fuzzy text matching.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional, Sequence

from pydantic import ValidationError

from .schemas import AiTimeWindow
from .windows import coerce_raw_window


logger = logging.getLogger(__name__)

DEFAULT_EXPECTED_WINDOWS = 16

_KEY_INDEX = re.compile(r"tw_(\d{1,9})(?!\d)", re.IGNORECASE)


def validate_ai_windows(
    items: Any,
    expected_count: int = DEFAULT_EXPECTED_WINDOWS,
    strict: bool = False,
) -> bool:
    """Check that ``items`` is a usable list of AI windows.

    With ``strict`` the list must hold at least ``expected_count`` entries;
    otherwise one entry is enough. Every entry needs a string ``key``, an
    integer ``window_index`` and a non-blank ``summary``. Entries without any
    time field are accepted with a warning.
    """

    if not isinstance(items, (list, tuple)):
        logger.error("ai_windows_not_a_list", extra={"type": type(items).__name__})
        return False
    min_required = expected_count if strict else 1
    if len(items) < min_required:
        logger.warning(
            "ai_windows_too_few",
            extra={"count": len(items), "expected": min_required, "strict": strict},
        )
        return False
    for position, item in enumerate(items):
        if not isinstance(item, (Mapping, AiTimeWindow)):
            logger.error("ai_window_not_a_mapping", extra={"position": position})
            return False
        try:
            window = item if isinstance(item, AiTimeWindow) else AiTimeWindow.model_validate(dict(item))
        except ValidationError as exc:
            logger.error(
                "ai_window_invalid",
                extra={"position": position, "errors": exc.errors(include_url=False)},
            )
            return False
        if not window.has_time_fields():
            logger.warning("ai_window_without_times", extra={"position": position})
    return True


def _field(item: Any, name: str) -> Any:
    if isinstance(item, AiTimeWindow):
        return getattr(item, name, None)
    if isinstance(item, Mapping):
        return item.get(name)
    return None


def _ai_index(item: Any) -> Optional[int]:
    window_index = _field(item, "window_index")
    if isinstance(window_index, int) and not isinstance(window_index, bool):
        return window_index - 1
    key = _field(item, "key")
    if isinstance(key, str):
        match = _KEY_INDEX.search(key)
        if match:
            return int(match.group(1))
        logger.warning("ai_window_unparseable_key", extra={"key": key})
        return None
    logger.warning("ai_window_without_index")
    return None


def _first_truthy(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return ""


def map_ai_windows_to_engine_windows(
    ai_windows: Sequence[Any],
    engine_windows: Sequence[Any],
) -> list[dict[str, Any]]:
    """Attach AI text to engine windows, keeping engine order and times.

    Each matched window gains ``ai_summary``, ``interpretation_html``,
    ``practical_html`` and ``ai_raw``; a missing engine ``category`` or
    ``score`` is filled from the AI entry.
    Bare engine entries (slot numbers, time strings) become ``{"start": value}``.
    """

    by_index: dict[int, Any] = {}
    for item in ai_windows if isinstance(ai_windows, (list, tuple)) else ():
        index = _ai_index(item)
        if index is not None:
            by_index[index] = item

    if not isinstance(engine_windows, (list, tuple)):
        return []
    merged_windows: list[dict[str, Any]] = []
    for index, engine_window in enumerate(engine_windows):
        merged = dict(coerce_raw_window(engine_window).fields)
        ai_data = by_index.get(index)
        if ai_data is None:
            merged_windows.append(merged)
            continue
        merged["ai_summary"] = _first_truthy(
            _field(ai_data, "summary"), _field(ai_data, "interpretation"), _field(ai_data, "practical")
        )
        merged["interpretation_html"] = _first_truthy(
            _field(ai_data, "interpretation_html"), _field(ai_data, "interpretation")
        )
        merged["practical_html"] = _first_truthy(_field(ai_data, "practical_html"), _field(ai_data, "practical"))
        merged["ai_raw"] = ai_data
        if not merged.get("category") and _field(ai_data, "category"):
            merged["category"] = _field(ai_data, "category")
        ai_score = _field(ai_data, "score")
        if merged.get("score") is None and isinstance(ai_score, (int, float)) and not isinstance(ai_score, bool):
            merged["score"] = ai_score
        merged_windows.append(merged)
    return merged_windows

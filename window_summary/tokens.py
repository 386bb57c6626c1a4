"""Expansion of window references inside narrative text.

Two passes: positional ``time_windows[n]`` tokens (0-based) become rendered
fragments, and prose such as "Windows 3, 4, and 5" (1-based) becomes plain
time ranges.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional, Sequence

from .mappings import DEFAULT_TIME_PLACEHOLDER
from .render import render_fallback, render_time_window
from .schemas import NormalizedTimeWindow
from .settings import FormatOptions, coerce_options, warn_missing_windows
from .windows import format_time_range, normalize_time_window


logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"time_windows\[(\d+)\]", re.IGNORECASE)
_WINDOW_LIST = re.compile(
    r"\bwindows?\s*((?:\d+(?:\s*,\s*|\s+))*(?:\d+\s*,?\s*(?:and|&)\s*)?\d+)",
    re.IGNORECASE,
)
_SINGLE_WINDOW = re.compile(r"\bwindow\s*(\d+)\b", re.IGNORECASE)
_DIGITS = re.compile(r"\d+")
_MAX_NUMBER_DIGITS = 9


class WarningLatch:
    """Remembers whether the missing-windows warning was already logged.

    Owned by the caller so separate pipelines and tests never share state.
    """

    def __init__(self) -> None:
        self.warned = False

    def warn_once(self, log: logging.Logger, message: str, **extra: Any) -> bool:
        if self.warned:
            return False
        self.warned = True
        log.warning(message, extra=extra or None)
        return True

    def reset(self) -> None:
        self.warned = False


def _is_window_list(windows: Any) -> bool:
    return isinstance(windows, (list, tuple))


def _parse_number(digits: str) -> Optional[int]:
    # int() refuses very long digit runs; no window list is that long anyway
    if len(digits) > _MAX_NUMBER_DIGITS:
        return None
    return int(digits)


def _expand_token(
    match: re.Match[str],
    windows: Any,
    opts: FormatOptions,
    latch: WarningLatch,
) -> str:
    if not _is_window_list(windows):
        if warn_missing_windows():
            latch.warn_once(logger, "window_summary_tokens_without_windows", token=match.group(0))
        return render_fallback()
    idx = _parse_number(match.group(1))
    if idx is None or idx >= len(windows):
        return render_fallback()
    window = normalize_time_window(windows[idx], idx, opts)
    return render_time_window(window, format_time_range(window, opts))


def expand_time_window_tokens(
    text: Optional[str],
    windows: Optional[Sequence[Any]],
    options: FormatOptions | Mapping[str, Any] | None = None,
    *,
    latch: Optional[WarningLatch] = None,
) -> str:
    """Replace ``time_windows[n]`` tokens, then window-number references.

    Without a window list, or for an index past its end, a token becomes
    the neutral placeholder fragment.
    """

    if not text:
        return ""
    opts = coerce_options(options)
    latch = latch or WarningLatch()
    result = TOKEN_PATTERN.sub(lambda m: _expand_token(m, windows, opts, latch), text)
    if _is_window_list(windows) and windows:
        result = replace_window_numbers_with_time_ranges(result, windows, opts)
    return result


def _contiguous_runs(numbers: Sequence[int]) -> list[tuple[int, int]]:
    ordered = sorted(set(numbers))
    runs: list[tuple[int, int]] = []
    run_start = run_end = ordered[0]
    for number in ordered[1:]:
        if number == run_end + 1:
            run_end = number
            continue
        runs.append((run_start, run_end))
        run_start = run_end = number
    runs.append((run_start, run_end))
    return runs


def replace_window_numbers_with_time_ranges(
    text: Optional[str],
    windows: Optional[Sequence[Any]],
    options: FormatOptions | Mapping[str, Any] | None = None,
) -> str:
    """Turn 1-based window numbers in prose into their time ranges.

    "Windows 3, 4, and 6" becomes ``"<3 start> to <4 end>, <6 start> – <6 end>"``.
    A list with any number past the end of ``windows`` is left as written.
    """

    if not text or not _is_window_list(windows) or not windows:
        return text or ""
    opts = coerce_options(options)
    normalized = [
        entry if isinstance(entry, NormalizedTimeWindow) else normalize_time_window(entry, idx, opts)
        for idx, entry in enumerate(windows)
    ]

    def lookup(number: int) -> Optional[NormalizedTimeWindow]:
        if 1 <= number <= len(normalized):
            return normalized[number - 1]
        return None

    def single_range(number: Optional[int]) -> Optional[str]:
        window = lookup(number) if number is not None else None
        if window is None:
            return None
        start = window.start_display or DEFAULT_TIME_PLACEHOLDER
        end = window.end_display or DEFAULT_TIME_PLACEHOLDER
        return f"{start} – {end}"

    def replace_list(match: re.Match[str]) -> str:
        numbers = [_parse_number(value) for value in _DIGITS.findall(match.group(1))]
        if not numbers or None in numbers:
            return match.group(0)
        ranges: list[str] = []
        for first, last in _contiguous_runs(numbers):
            first_window, last_window = lookup(first), lookup(last)
            if first_window is None or last_window is None:
                return match.group(0)
            if first == last:
                ranges.append(f"{first_window.start_display} – {first_window.end_display}")
            else:
                ranges.append(f"{first_window.start_display} to {last_window.end_display}")
        return ", ".join(ranges)

    result = _WINDOW_LIST.sub(replace_list, text)
    return _SINGLE_WINDOW.sub(lambda m: single_range(_parse_number(m.group(1))) or m.group(0), result)

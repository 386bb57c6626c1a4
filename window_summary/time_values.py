"""Parsing and formatting of single time-like values.

Values arrive as 1-based slot indices (numbers or numeric strings), clock
strings (``21:10``, ``9:30 PM``), ISO datetimes, or pre-formatted display
strings. Every helper here returns ``None`` (or a fixed placeholder) when a
value cannot be interpreted; none of them raise.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import replace
from datetime import date, datetime, tzinfo
from typing import Any, Mapping, NamedTuple, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .mappings import EMPTY_LOCAL_VALUE, SLOT_RANGE_SENTINEL
from .settings import DEFAULT_SLOT_MINUTES, FormatOptions, coerce_options


logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_NUMERIC_SLOT = re.compile(r"^\d+(\.\d+)?$")
_AMPM_TIME = re.compile(r"^(\d{1,2}):(\d{2})\s*([AaPp][Mm])$")
_CLOCK_TIME = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
_DISPLAY_TIME = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)?", re.IGNORECASE)
_ISO_IN_TEXT = re.compile(
    r"(\d{4}-\d{2}-\d{2}[T\s]\d{2}:\d{2}(?::\d{2})?(?:\.\d+)?(?:Z|[+\-]\d{2}:?\d{2})?)"
)
_TIME_TO_TIME = re.compile(
    r"(\d{1,2}:\d{2}\s*(?:AM|PM)?)\s+to\s+(\d{1,2}:\d{2}\s*(?:AM|PM)?)",
    re.IGNORECASE,
)


class ClockTime(NamedTuple):
    hours: int
    minutes: int


def is_numeric_slot(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        return bool(_NUMERIC_SLOT.match(value.strip()))
    return False


def slot_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        if not _NUMERIC_SLOT.match(value.strip()):
            return None
        value = float(value.strip())
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    return int(value)


def _slot_start_minutes(value: Any, slot_minutes: int) -> Optional[int]:
    slot = slot_index(value)
    if slot is None or slot < 1 or slot_minutes <= 0:
        return None
    if slot > MINUTES_PER_DAY // slot_minutes:
        return None
    return (slot - 1) * slot_minutes


def format_hours_minutes(hours: int, minutes: int, use_ampm: bool = True) -> str:
    if use_ampm:
        period = "PM" if hours >= 12 else "AM"
        hours12 = 12 if hours == 0 else hours - 12 if hours > 12 else hours
        return f"{hours12}:{minutes:02d} {period}"
    return f"{hours:02d}:{minutes:02d}"


def _format_minutes(total_minutes: int, use_ampm: bool) -> str:
    return format_hours_minutes((total_minutes // 60) % 24, total_minutes % 60, use_ampm)


def slot_to_time_range(slot: Any, slot_minutes: int = DEFAULT_SLOT_MINUTES, use_ampm: bool = True) -> str:
    """Render a 1-based slot index as ``"start – end"``.

    Slot 0, negative slots and slots past the end of the day render as the
    ``"time window"`` sentinel.
    """

    start = _slot_start_minutes(slot, slot_minutes)
    if start is None:
        return SLOT_RANGE_SENTINEL
    end = start + slot_minutes
    return f"{_format_minutes(start, use_ampm)} – {_format_minutes(end, use_ampm)}"


def slot_end_display(slot: Any, slot_minutes: int = DEFAULT_SLOT_MINUTES, use_ampm: bool = True) -> Optional[str]:
    start = _slot_start_minutes(slot, slot_minutes)
    if start is None:
        return None
    return _format_minutes(start + slot_minutes, use_ampm)


def parse_time_string(value: Any) -> Optional[ClockTime]:
    """Parse ``H:MM AM/PM`` or ``HH:MM[:SS]``; ``24:xx`` wraps to ``0:xx``."""

    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    match = _AMPM_TIME.match(text)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2))
        meridiem = match.group(3).upper()
        if meridiem == "PM" and hours != 12:
            hours += 12
        if meridiem == "AM" and hours == 12:
            hours = 0
        if 0 <= hours < 24 and 0 <= minutes < 60:
            return ClockTime(hours, minutes)
        return None
    match = _CLOCK_TIME.match(text)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2))
        if hours == 24:
            hours = 0
        if 0 <= hours < 24 and 0 <= minutes < 60:
            return ClockTime(hours, minutes)
    return None


def _resolve_zone(tz: Optional[str]) -> Optional[tzinfo]:
    if not tz:
        return None
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError, TypeError):
        logger.debug("window_summary_unknown_tz", extra={"tz": tz})
        return None


def _localize(moment: datetime, tz: Optional[str]) -> datetime:
    zone = _resolve_zone(tz)
    if zone is None:
        return moment
    if moment.tzinfo is None:
        return moment.replace(tzinfo=zone)
    try:
        return moment.astimezone(zone)
    except (OverflowError, ValueError):
        # near datetime.min/max the shifted value leaves the supported range
        return moment


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(cleaned)
    except ValueError:
        return None


def _month_abbr(moment: datetime) -> str:
    return _MONTH_ABBR[moment.month - 1]


def format_clock(moment: datetime, use_ampm: bool = True, tz: Optional[str] = None) -> str:
    """Short clock time for ``moment``.

    Aware values are shown in ``tz`` when given, else in their own offset;
    naive values are taken as wall time.
    """

    local = _localize(moment, tz)
    return format_hours_minutes(local.hour, local.minute, use_ampm)


def format_card_date(moment: datetime, tz: Optional[str] = None) -> str:
    local = _localize(moment, tz)
    return f"{_month_abbr(local)} {local.day}, {local.year}"


def format_time(value: Any, options: FormatOptions | Mapping[str, Any] | None = None) -> Optional[str]:
    """Format one time-like value for display, or ``None``."""

    if value is None or isinstance(value, bool):
        return None
    opts = coerce_options(options)
    if is_numeric_slot(value):
        start = _slot_start_minutes(value, opts.slot_minutes)
        if start is None:
            return None
        return _format_minutes(start, opts.use_ampm)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    parsed = parse_time_string(text)
    if parsed:
        return format_hours_minutes(parsed.hours, parsed.minutes, opts.use_ampm)
    moment = parse_iso_datetime(text)
    if moment is None:
        return None
    return format_clock(moment, opts.use_ampm, opts.tz)


def format_local(
    value: Any,
    mode: str = "datetime",
    options: FormatOptions | Mapping[str, Any] | None = None,
) -> str:
    """Format ``value`` as ``time``, ``datetime`` (default) or ``date``.

    Absent values render as an em dash; unparseable dates render as the
    input string.
    """

    if value is None or isinstance(value, bool):
        return EMPTY_LOCAL_VALUE
    if isinstance(value, str) and not value.strip():
        return EMPTY_LOCAL_VALUE
    opts = coerce_options(options)
    if mode == "time":
        return format_time(value, replace(opts, use_ampm=True)) or EMPTY_LOCAL_VALUE
    moment = parse_iso_datetime(value if isinstance(value, str) else str(value))
    if moment is None:
        return str(value)
    local = _localize(moment, opts.tz)
    if mode == "datetime":
        clock = format_hours_minutes(local.hour, local.minute, True)
        return f"{_month_abbr(local)} {local.day}, {local.year}, {clock}"
    return f"{local.month}/{local.day}/{local.year}"


def construct_iso_from_date_and_time(date_str: Any, time_str: Any, tz: Optional[str] = None) -> Optional[str]:
    """Combine ``"2025-12-10"`` and ``"06:24 AM"`` into an ISO datetime.

    The result is local wall time: naive, or carrying the offset of ``tz``
    when a known zone is given.
    """

    if not isinstance(date_str, str) or not isinstance(time_str, str):
        return None
    match = _DISPLAY_TIME.search(time_str)
    if not match:
        return None
    hours = int(match.group(1))
    minutes = int(match.group(2))
    meridiem = (match.group(3) or "").upper()
    if meridiem == "PM" and hours != 12:
        hours += 12
    elif meridiem == "AM" and hours == 12:
        hours = 0
    date_part = date_str.split("T", 1)[0].strip()
    try:
        day = date.fromisoformat(date_part)
        moment = datetime(day.year, day.month, day.day, hours, minutes)
    except ValueError:
        return None
    zone = _resolve_zone(tz)
    if zone is not None:
        moment = moment.replace(tzinfo=zone)
    return moment.isoformat()


def format_iso_datetimes_in_text(text: Optional[str], options: FormatOptions | Mapping[str, Any] | None = None) -> str:
    """Replace ISO datetimes in prose with clock times and ``X to Y`` with ``X – Y``."""

    if not text:
        return ""
    opts = coerce_options(options)

    def _replace(match: re.Match[str]) -> str:
        moment = parse_iso_datetime(match.group(0))
        if moment is None:
            return match.group(0)
        return format_clock(moment, opts.use_ampm, opts.tz)

    result = _ISO_IN_TEXT.sub(_replace, text)
    return _TIME_TO_TIME.sub(r"\1 – \2", result)

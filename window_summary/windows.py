"""Normalization of loosely-typed time-window records.

Upstream windows arrive as bare slot numbers, bare strings, or objects with
any subset of name/start/end/ISO/display/score/severity/pakshi fields, and
free-text fields that may carry embedded JSON. ``normalize_time_window``
turns one of those into a ``NormalizedTimeWindow`` with every display field
filled; ``build_time_windows`` does the same for a whole response.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Mapping, Optional, Sequence

from .debug_strip import strip_debug_blocks
from .embedded_json import looks_like_raw_json_data, parse_embedded_windows_json
from .mappings import (
    DEFAULT_RANGE_PLACEHOLDER,
    DEFAULT_TIME_PLACEHOLDER,
    FREE_TEXT_FIELDS,
    NAME_KEYS,
    PAKSHI_DAY_KEYS,
    PAKSHI_NIGHT_KEYS,
    PAKSHI_STATUS_KEYS,
    UNKNOWN_PAKSHI,
)
from .schemas import NormalizedTimeWindow, WindowRecord
from .scoring import determine_severity, normalize_score, score_text, score_variant
from .settings import FormatOptions, coerce_options
from .time_values import (
    construct_iso_from_date_and_time,
    format_card_date,
    format_time,
    is_numeric_slot,
    parse_iso_datetime,
    slot_end_display,
    slot_index,
    slot_to_time_range,
)


logger = logging.getLogger(__name__)

_LAYER_KEYS = ("layers", "layer", "data")
_CLOCK_IN_TEXT = re.compile(r"\d{1,2}:\d{2}")


def coerce_raw_window(entry: Any) -> WindowRecord:
    """Classify a raw entry once so field resolution sees a plain mapping."""

    if isinstance(entry, WindowRecord):
        return entry
    if isinstance(entry, NormalizedTimeWindow):
        return WindowRecord("mapping", entry.model_dump(exclude={"raw"}), entry)
    if isinstance(entry, bool) or entry is None:
        return WindowRecord("empty", {}, entry)
    if isinstance(entry, (int, float)):
        return WindowRecord("slot", {"start": entry}, entry)
    if isinstance(entry, str):
        return WindowRecord("text", {"start": entry}, entry)
    if isinstance(entry, Mapping):
        return WindowRecord("mapping", dict(entry), entry)
    return WindowRecord("empty", {}, entry)


def _first_present(fields: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        value = fields.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    text = value.strip() if isinstance(value, str) else str(value).strip()
    return text or None


def _first_text(fields: Mapping[str, Any], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        text = _text(fields.get(key))
        if text:
            return text
    return None


def _merge_embedded(fields: Mapping[str, Any]) -> tuple[dict[str, Any], str]:
    embedded: dict[str, Any] = {}
    cleaned: dict[str, str] = {}
    for key in FREE_TEXT_FIELDS:
        value = fields.get(key)
        if value is None:
            continue
        result = parse_embedded_windows_json(value)
        cleaned[key] = result.cleaned_text
        if isinstance(result.data, Mapping):
            for data_key, data_value in result.data.items():
                embedded.setdefault(str(data_key), data_value)
    merged = {**embedded, **fields}
    merged.update(cleaned)
    cleaned_note = next((cleaned[key] for key in FREE_TEXT_FIELDS if key in cleaned), "")
    return merged, cleaned_note


def _resolve_name(fields: Mapping[str, Any], index: int) -> str:
    return _first_text(fields, NAME_KEYS) or f"Window {index + 1}"


def _resolve_iso(fields: Mapping[str, Any], which: str, opts: FormatOptions) -> Optional[str]:
    iso = _first_text(fields, (f"{which}ISO", f"{which}_iso"))
    if iso is None and isinstance(fields.get(which), str):
        iso = _text(fields[which])
    if iso is None and opts.date:
        display = _first_text(fields, (f"{which}Display", f"{which}_display"))
        if display:
            iso = construct_iso_from_date_and_time(opts.date, display, opts.tz)
    return iso


def _resolve_display(fields: Mapping[str, Any], which: str, iso: Optional[str], opts: FormatOptions) -> str:
    explicit = _first_text(fields, (f"{which}Display", f"{which}_display"))
    if explicit:
        return explicit
    formatted = format_time(iso, opts) if iso else None
    if not formatted:
        formatted = format_time(fields.get(which), opts)
    return formatted or DEFAULT_TIME_PLACEHOLDER


def _single_slot_end(fields: Mapping[str, Any], opts: FormatOptions) -> Optional[str]:
    start, end = fields.get("start"), fields.get("end")
    if not (is_numeric_slot(start) and is_numeric_slot(end)):
        return None
    if slot_index(start) != slot_index(end):
        return None
    if _first_text(fields, ("endDisplay", "end_display", "endISO", "end_iso")):
        return None
    return slot_end_display(end, opts.slot_minutes, opts.use_ampm)


def _normalize_pakshi(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, Mapping) and value.get("pakshi"):
        return _normalize_pakshi(value["pakshi"])
    if not value:
        return None
    return UNKNOWN_PAKSHI


def _resolve_pakshi(fields: Mapping[str, Any], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        pakshi = _normalize_pakshi(fields.get(key))
        if pakshi:
            return pakshi
    return None


def _resolve_card_date(fields: Mapping[str, Any], start_iso: Optional[str], opts: FormatOptions) -> Optional[str]:
    explicit = _text(fields.get("card_date"))
    if explicit:
        return explicit
    moment = parse_iso_datetime(start_iso)
    if moment is None:
        return None
    return format_card_date(moment, opts.tz)


def normalize_time_window(
    entry: Any,
    index: int,
    options: FormatOptions | Mapping[str, Any] | None = None,
) -> NormalizedTimeWindow:
    opts = coerce_options(options)
    index = max(0, int(index))
    record = coerce_raw_window(entry)
    fields, cleaned_note = _merge_embedded(record.fields)

    start_iso = _resolve_iso(fields, "start", opts)
    end_iso = _resolve_iso(fields, "end", opts)
    start_display = _resolve_display(fields, "start", start_iso, opts)
    end_display = _single_slot_end(fields, opts) or _resolve_display(fields, "end", end_iso, opts)

    score = normalize_score(fields.get("score"))

    short_desc = strip_debug_blocks(_first_present(fields, ("short_desc", "description")) or cleaned_note)
    note = strip_debug_blocks(cleaned_note)
    if looks_like_raw_json_data(note):
        note = short_desc or None

    return NormalizedTimeWindow(
        name=_resolve_name(fields, index),
        index=index,
        start_iso=start_iso,
        end_iso=end_iso,
        start_display=start_display,
        end_display=end_display,
        score=score,
        score_text=score_text(score),
        score_variant=score_variant(score),
        severity=determine_severity(fields, score),
        pakshi_day=_resolve_pakshi(fields, PAKSHI_DAY_KEYS),
        pakshi_night=_resolve_pakshi(fields, PAKSHI_NIGHT_KEYS),
        pakshi_status=_first_text(fields, PAKSHI_STATUS_KEYS),
        card_date=_resolve_card_date(fields, start_iso, opts),
        short_desc=short_desc or None,
        note=note,
        type=_text(fields.get("type")),
        facts_html=_first_text(fields, ("facts_html", "facts")),
        interpretation_html=_first_text(fields, ("interpretation_html", "interpretation")),
        practical_html=_first_text(fields, ("practical_html", "practical")),
        raw=record.raw,
    )


def _key_part(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def window_dedupe_key(entry: Any) -> str:
    """``name|start|end`` from the raw, pre-normalization fields."""

    fields = coerce_raw_window(entry).fields
    name = _first_present(fields, ("name", "label", "category"))
    return f"{_key_part(name)}|{_key_part(fields.get('start'))}|{_key_part(fields.get('end'))}"


def dedupe_time_windows(windows: Any) -> list[Any]:
    if not isinstance(windows, (list, tuple)):
        return []
    seen: set[str] = set()
    unique: list[Any] = []
    for window in windows:
        key = window_dedupe_key(window)
        if key in seen:
            continue
        seen.add(key)
        unique.append(window)
    return unique


def _windows_from_payload(data: Any) -> Any:
    if isinstance(data, (list, tuple)):
        return data
    if not isinstance(data, Mapping):
        return None
    layers = _first_present(data, _LAYER_KEYS)
    if isinstance(layers, str):
        try:
            layers = json.loads(layers)
        except (ValueError, RecursionError):
            logger.debug("window_summary_layers_parse_failed")
            layers = None
    if isinstance(layers, Mapping) and isinstance(layers.get("time_windows"), list):
        return layers["time_windows"]
    if data.get("time_windows") is not None:
        return data["time_windows"]
    debug = data.get("debug")
    if isinstance(debug, Mapping) and isinstance(debug.get("layers"), Mapping):
        return debug["layers"].get("time_windows")
    return None


def build_time_windows(
    data: Any,
    options: FormatOptions | Mapping[str, Any] | None = None,
) -> list[NormalizedTimeWindow]:
    """Dedupe and normalize the windows of ``data``.

    ``data`` may be the window list itself or a response payload carrying
    ``time_windows`` under ``layers``/``layer``/``data`` (optionally as a
    JSON string), at the top level, or under ``debug.layers``.
    """

    raw_windows = _windows_from_payload(data)
    if not isinstance(raw_windows, (list, tuple)):
        return []
    opts = coerce_options(options)
    return [
        normalize_time_window(entry, idx, opts)
        for idx, entry in enumerate(dedupe_time_windows(raw_windows))
    ]


def window_label(window: Any, index: int) -> str:
    if window is None:
        return f"Window {index + 1}"
    fields = coerce_raw_window(window).fields
    return _first_text(fields, ("label", "name", "category")) or f"Window {index + 1}"


def format_time_range(
    window: Any,
    options: FormatOptions | Mapping[str, Any] | None = None,
) -> Optional[str]:
    """``"start → end"`` for a normalized or raw window; ``None`` without one."""

    if window is None:
        return None
    if isinstance(window, NormalizedTimeWindow):
        return f"{window.start_display} → {window.end_display}"
    opts = coerce_options(options)
    fields = coerce_raw_window(window).fields
    start_value = _first_present(fields, ("startISO", "start_iso", "start"))
    end_value = _first_present(fields, ("endISO", "end_iso", "end"))
    if is_numeric_slot(start_value) and is_numeric_slot(end_value):
        if slot_index(start_value) == slot_index(end_value):
            return slot_to_time_range(start_value, opts.slot_minutes, opts.use_ampm).replace(" – ", " → ")
    start = _first_text(fields, ("start_display", "startDisplay")) or format_time(start_value, opts)
    end = _first_text(fields, ("end_display", "endDisplay")) or format_time(end_value, opts)
    if not start and not end:
        return DEFAULT_RANGE_PLACEHOLDER
    return f"{start or DEFAULT_TIME_PLACEHOLDER} → {end or DEFAULT_TIME_PLACEHOLDER}"


def build_window_string(
    window: Any,
    index: int,
    options: FormatOptions | Mapping[str, Any] | None = None,
) -> str:
    label = window_label(window, index)
    time_range = format_time_range(window, options)
    return f"{label} ({time_range})" if time_range else label


def _clock_in(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    match = _CLOCK_IN_TEXT.search(value)
    return match.group(0) if match else ""


def normalize_inauspicious_times(items: Any) -> list[dict[str, str]]:
    """Reduce a muhurta list (Rahu Kalam, Yamagandam, ...) to ``{start, end[, type]}``.

    ``start``/``end`` keep only the first ``H:MM`` found in the value, so ISO
    datetimes and ``"06:24 AM"`` both reduce to a bare clock. Entries missing
    either clock are dropped.
    """

    if not isinstance(items, (list, tuple)):
        return []
    muhurtas: list[dict[str, str]] = []
    for item in items:
        fields = item if isinstance(item, Mapping) else {}
        start, end = _clock_in(fields.get("start")), _clock_in(fields.get("end"))
        if not start or not end:
            continue
        muhurta = {"start": start, "end": end}
        if fields.get("type"):
            muhurta["type"] = str(fields["type"])
        muhurtas.append(muhurta)
    return muhurtas

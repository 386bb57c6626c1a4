"""Formatting options and environment-driven defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional


logger = logging.getLogger(__name__)

DEFAULT_USE_AMPM = True
DEFAULT_SLOT_MINUTES = 90

_OPTION_ALIASES = {
    "useAmpm": "use_ampm",
    "use_ampm": "use_ampm",
    "slotMinutes": "slot_minutes",
    "slot_minutes": "slot_minutes",
    "date": "date",
    "tz": "tz",
}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() == "true"


def default_use_ampm() -> bool:
    return _env_flag("WINDOW_SUMMARY_USE_AMPM", DEFAULT_USE_AMPM)


def default_slot_minutes() -> int:
    raw = os.getenv("WINDOW_SUMMARY_SLOT_MINUTES", str(DEFAULT_SLOT_MINUTES))
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("window_summary_invalid_slot_minutes", extra={"value": raw})
        return DEFAULT_SLOT_MINUTES
    if value <= 0:
        logger.warning("window_summary_invalid_slot_minutes", extra={"value": raw})
        return DEFAULT_SLOT_MINUTES
    return value


def default_tz() -> Optional[str]:
    raw = os.getenv("WINDOW_SUMMARY_TZ", "").strip()
    return raw or None


def warn_missing_windows() -> bool:
    return _env_flag("WINDOW_SUMMARY_WARN_MISSING_WINDOWS", True)


@dataclass(frozen=True)
class FormatOptions:
    use_ampm: bool = DEFAULT_USE_AMPM
    slot_minutes: int = DEFAULT_SLOT_MINUTES
    date: Optional[str] = None
    tz: Optional[str] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "FormatOptions":
        base = cls(
            use_ampm=default_use_ampm(),
            slot_minutes=default_slot_minutes(),
            tz=default_tz(),
        )
        return replace(base, **overrides) if overrides else base


def coerce_options(options: "FormatOptions | Mapping[str, Any] | None" = None) -> FormatOptions:
    """Return a ``FormatOptions`` for ``options``.

    Mappings may use either snake_case keys or the camelCase keys of the
    display contract (``useAmpm``, ``slotMinutes``). Missing keys fall back
    to the environment defaults; unusable values fall back silently.
    """

    if isinstance(options, FormatOptions):
        return options
    base = FormatOptions.from_env()
    if not isinstance(options, Mapping):
        return base
    overrides: dict[str, Any] = {}
    for key, value in options.items():
        field_name = _OPTION_ALIASES.get(key)
        if field_name is None or value is None:
            continue
        overrides[field_name] = value
    if "use_ampm" in overrides:
        flag = overrides["use_ampm"]
        overrides["use_ampm"] = flag.strip().lower() == "true" if isinstance(flag, str) else bool(flag)
    if "slot_minutes" in overrides:
        try:
            minutes = int(overrides["slot_minutes"])
        except (TypeError, ValueError, OverflowError):
            minutes = base.slot_minutes
        overrides["slot_minutes"] = minutes if minutes > 0 else base.slot_minutes
    for key in ("date", "tz"):
        if key in overrides:
            text = str(overrides[key]).strip()
            overrides[key] = text or None
    return replace(base, **overrides)

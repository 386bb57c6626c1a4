from __future__ import annotations

import math
import re
from typing import Any, Literal, Mapping, Optional

from .mappings import (
    CATEGORY_AUSPICIOUS,
    CATEGORY_INAUSPICIOUS,
    CATEGORY_NEUTRAL,
    CATEGORY_KEYS,
    DEFAULT_SCORE_TEXT,
    EXPLICIT_SEVERITY_KEYS,
    SEVERITIES,
)

Severity = Literal["auspicious", "inauspicious", "neutral"]
ScoreVariant = Literal["good", "neutral", "bad"]
CategoryVariant = Literal["auspicious", "inauspicious", "neutral", "default"]

_INAUSPICIOUS_TEXT = re.compile(
    r"highly\s+inauspicious|\binauspicious\b|\bavoid\b|unfavourable|unfavorable|\bbad\b|malefic|caution|negative"
)
_AUSPICIOUS_TEXT = re.compile(
    r"highly\s+auspicious|\bauspicious\b|favourable|favorable|\bgood\b|benefic|positive"
)
_NEUTRAL_TEXT = re.compile(r"neutral|mixed|challenging|moderate")


def normalize_score(raw: Any) -> Optional[float]:
    """Coerce ``raw`` to a finite number clamped to ``[0, 10]``, else ``None``."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    elif isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            return None
    else:
        return None
    if not math.isfinite(value):
        return None
    return max(0.0, min(10.0, value))


def _is_missing(score: Optional[float]) -> bool:
    return score is None or (isinstance(score, float) and math.isnan(score))


def score_variant(score: Optional[float]) -> ScoreVariant:
    if _is_missing(score):
        return "neutral"
    if score >= 7:
        return "good"
    if score >= 4:
        return "neutral"
    return "bad"


def score_text(score: Optional[float]) -> str:
    if _is_missing(score):
        return DEFAULT_SCORE_TEXT
    rounded = math.floor(score * 10 + 0.5) / 10
    if rounded.is_integer():
        return str(int(rounded))
    return str(rounded)


def map_severity_text(value: Any) -> Optional[Severity]:
    if not value:
        return None
    text = str(value).lower()
    if _INAUSPICIOUS_TEXT.search(text):
        return "inauspicious"
    if _AUSPICIOUS_TEXT.search(text):
        return "auspicious"
    if _NEUTRAL_TEXT.search(text):
        return "neutral"
    return None


def map_category_to_severity(category: Any) -> Optional[Severity]:
    if not category or not isinstance(category, str):
        return None
    lowered = category.lower()
    if any(word in lowered for word in CATEGORY_INAUSPICIOUS):
        return "inauspicious"
    if any(word in lowered for word in CATEGORY_AUSPICIOUS):
        return "auspicious"
    if any(word in lowered for word in CATEGORY_NEUTRAL):
        return "neutral"
    return None


def map_severity_from_score(score: Optional[float]) -> Optional[Severity]:
    if _is_missing(score):
        return None
    if score >= 7:
        return "auspicious"
    if score <= 3:
        return "inauspicious"
    return "neutral"


def normalize_severity_value(value: Any) -> Optional[Severity]:
    mapped = map_severity_text(value)
    if mapped:
        return mapped
    if not value:
        return None
    raw = str(value).strip().lower()
    return raw if raw in SEVERITIES else None


def _first_present(fields: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = fields.get(key)
        if value is not None:
            return value
    return None


def determine_severity(fields: Mapping[str, Any], score: Optional[float]) -> Severity:
    """Resolve a window's severity: explicit text, then category, then score."""

    explicit = normalize_severity_value(_first_present(fields, EXPLICIT_SEVERITY_KEYS))
    if explicit:
        return explicit
    category = map_category_to_severity(_first_present(fields, CATEGORY_KEYS))
    if category:
        return category
    return map_severity_from_score(score) or "neutral"


def category_variant(category: Optional[str], score: Optional[float] = None) -> CategoryVariant:
    if category:
        from_category = map_category_to_severity(category) or map_severity_text(category)
        if from_category:
            return from_category
    return map_severity_from_score(score) or "default"


def map_variant_to_severity(explicit: Any, variant: CategoryVariant) -> Severity:
    normalized = normalize_severity_value(explicit)
    if normalized:
        return normalized
    if variant in ("auspicious", "inauspicious"):
        return variant
    return "neutral"

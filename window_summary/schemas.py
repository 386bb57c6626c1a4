"""Window schemas shared by the normalizer, token expander and merger."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

from .scoring import ScoreVariant, Severity

WindowKind = Literal["slot", "text", "mapping", "empty"]


@dataclass(frozen=True)
class WindowRecord:
    """A raw window entry after the single coercion step.

    ``slot`` and ``text`` entries carry ``{"start": value}`` in ``fields``;
    ``mapping`` entries carry a shallow copy of the source object.
    """

    kind: WindowKind
    fields: Mapping[str, Any] = field(default_factory=dict)
    raw: Any = None


class NormalizedTimeWindow(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    index: int = Field(ge=0)
    start_iso: Optional[str] = Field(default=None, alias="startISO")
    end_iso: Optional[str] = Field(default=None, alias="endISO")
    start_display: str = Field(alias="startDisplay", min_length=1)
    end_display: str = Field(alias="endDisplay", min_length=1)
    score: Optional[float] = Field(default=None, ge=0, le=10)
    score_text: str = Field(alias="scoreText")
    score_variant: ScoreVariant = Field(alias="scoreVariant")
    severity: Severity = "neutral"
    pakshi_day: Optional[str] = None
    pakshi_night: Optional[str] = None
    pakshi_status: Optional[str] = None
    card_date: Optional[str] = None
    short_desc: Optional[str] = None
    note: Optional[str] = None
    type: Optional[str] = None
    facts_html: Optional[str] = None
    interpretation_html: Optional[str] = None
    practical_html: Optional[str] = None
    raw: Any = None


class AiTimeWindow(BaseModel):
    """One AI-authored window entry as returned next to the engine windows."""

    model_config = ConfigDict(extra="allow")

    key: StrictStr
    window_index: StrictInt
    summary: StrictStr
    start_iso: Any = None
    start_display: Any = None
    end_iso: Any = None
    end_display: Any = None
    score: Any = None
    category: Any = None
    interpretation: Any = None
    interpretation_html: Any = None
    practical: Any = None
    practical_html: Any = None

    @field_validator("summary")
    @classmethod
    def _summary_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("summary must be a non-empty string")
        return value

    def has_time_fields(self) -> bool:
        return any(
            isinstance(value, str)
            for value in (self.start_iso, self.start_display, self.end_iso, self.end_display)
        )

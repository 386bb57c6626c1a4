"""Top-level cleanup of AI-generated summary text.

``clean_summary_with_windows`` runs a fixed sequence of steps. Every step is
isolated: if one raises, the failure is logged and the text from before that
step carries on to the next one, so callers always get a string back.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Mapping, Optional, Sequence

from .debug_strip import strip_debug_blocks
from .dedupe_summary import DedupeMode, dedupe_summary
from .mappings import BOILERPLATE_MAX_OCCURRENCES, BOILERPLATE_SENTENCES
from .settings import FormatOptions, coerce_options
from .time_values import format_iso_datetimes_in_text
from .tokens import TOKEN_PATTERN, WarningLatch, expand_time_window_tokens


logger = logging.getLogger(__name__)

_METADATA_HINT = re.compile(r"\[based on\s+([^\]]+)\]", re.IGNORECASE)
_BOILERPLATE = tuple(re.compile(re.escape(sentence), re.IGNORECASE) for sentence in BOILERPLATE_SENTENCES)
_INLINE_SPACE_RUN = re.compile(r"[^\S\n\r]{2,}")
_PERIOD_RUN = re.compile(r"\.{2,}")
_SOURCES_FOOTER = re.compile(
    r"(?:\n|\r|\r\n)\s*(Sources?|Raw sources?|References|Credits)\s*[:\-]\s*.*\Z",
    re.IGNORECASE | re.DOTALL,
)
_UPDATED_PREFIX = re.compile(r"\AUpdated:\s*[^\n]+\n*", re.IGNORECASE)
_BACKEND_SECTIONS = tuple(
    re.compile(pattern, re.IGNORECASE | re.DOTALL)
    for pattern in (
        r"(?:\A|\n)\s*(?:#{1,6}\s*)?Windows\s+Explanation[:\s]?.*\Z",
        r"(?:\A|\n)\s*(?:#{1,6}\s*)?Appendix[:\s]?.*\Z",
        r"(?:\A|\n)\s*(?:#{1,6}\s*)?(?:Technical\s+)?(?:Debug|Debugging)\s+(?:Info|Information|Notes?)[:\s]?.*\Z",
        r"(?:\A|\n)\s*(?:#{1,6}\s*)?Internal\s+Notes?[:\s]?.*\Z",
    )
)
_NEWLINE_RUN = re.compile(r"(\r?\n){3,}")
_HORIZONTAL_RUN = re.compile(r"[^\S\n]{2,}")


def convert_metadata_to_hints(text: str) -> str:
    """``[based on core.panchang.moon_sign]`` -> ``*(based on moon sign)*``."""

    if not text:
        return ""

    def _hint(match: re.Match[str]) -> str:
        path = match.group(1)
        segment = path.split(".")[-1] or path
        return f"*(based on {segment.replace('_', ' ').strip()})*"

    return _METADATA_HINT.sub(_hint, text)


def collapse_identical_lines(text: str) -> str:
    """Drop a line equal to the line before it; blank lines always stay."""

    if not text:
        return ""
    kept: list[str] = []
    for line in text.split("\n"):
        if not line.strip() or not kept or line != kept[-1]:
            kept.append(line)
    return "\n".join(kept)


def collapse_boilerplate(text: str) -> str:
    if not text:
        return ""
    out = text
    for pattern in _BOILERPLATE:
        if len(pattern.findall(out)) <= BOILERPLATE_MAX_OCCURRENCES:
            continue
        seen = 0

        def _keep_first(match: re.Match[str]) -> str:
            nonlocal seen
            seen += 1
            return match.group(0) if seen <= BOILERPLATE_MAX_OCCURRENCES else ""

        out = pattern.sub(_keep_first, out)
    out = _INLINE_SPACE_RUN.sub(" ", out)
    return _PERIOD_RUN.sub(".", out).strip()


def strip_sources_footer(text: str) -> str:
    return _SOURCES_FOOTER.sub("", text)


def strip_metadata_sections(text: str) -> str:
    """Remove a leading ``Updated:`` line and backend-only trailing sections."""

    if not text:
        return ""
    result = _UPDATED_PREFIX.sub("", text)
    for pattern in _BACKEND_SECTIONS:
        match = pattern.search(result)
        if match:
            result = result[: match.start()].strip()
    return result


def normalize_spacing(text: str) -> str:
    out = _NEWLINE_RUN.sub("\n\n", text)
    return _HORIZONTAL_RUN.sub(" ", out).strip()


Step = Callable[[str], str]


def _run_step(name: str, step: Step, text: str) -> str:
    try:
        return step(text)
    except Exception:
        logger.exception("summary_clean_step_failed", extra={"step": name})
        return text


class SummaryCleaner:
    """Reusable cleaning pipeline owning its warn-once state.

    ``sentence_dedupe`` enables the repeated-sentence pass (``"consecutive"``
    or ``"global"``) before the final spacing normalization.
    """

    def __init__(
        self,
        options: FormatOptions | Mapping[str, Any] | None = None,
        sentence_dedupe: Optional[DedupeMode] = None,
    ) -> None:
        self.options = coerce_options(options)
        self.sentence_dedupe = sentence_dedupe
        self.latch = WarningLatch()

    def reset_warning(self) -> None:
        self.latch.reset()

    def _steps(self, windows: Optional[Sequence[Any]]) -> list[tuple[str, Step]]:
        opts = self.options

        def expand(text: str) -> str:
            if not TOKEN_PATTERN.search(text) and not windows:
                return text
            return expand_time_window_tokens(text, windows, opts, latch=self.latch)

        steps: list[tuple[str, Step]] = [
            ("strip_debug", strip_debug_blocks),
            ("expand_tokens", expand),
            ("format_datetimes", lambda text: format_iso_datetimes_in_text(text, opts)),
            ("metadata_hints", convert_metadata_to_hints),
            ("collapse_lines", collapse_identical_lines),
            ("collapse_boilerplate", collapse_boilerplate),
            ("strip_sources", strip_sources_footer),
            ("strip_sections", strip_metadata_sections),
        ]
        if self.sentence_dedupe:
            mode = self.sentence_dedupe
            steps.append(("dedupe_sentences", lambda text: dedupe_summary(text, mode=mode)))
        steps.extend(
            [
                ("normalize_spacing", normalize_spacing),
                ("final_strip_debug", strip_debug_blocks),
            ]
        )
        return steps

    def clean(self, summary: Optional[str], windows: Optional[Sequence[Any]] = None) -> str:
        if not summary:
            return ""
        out = str(summary)
        for name, step in self._steps(windows):
            out = _run_step(name, step, out)
        return out


def clean_summary_with_windows(
    summary: Optional[str],
    windows: Optional[Sequence[Any]] = None,
    options: FormatOptions | Mapping[str, Any] | None = None,
    *,
    latch: Optional[WarningLatch] = None,
) -> str:
    """Clean ``summary`` for display, expanding window references from ``windows``."""

    cleaner = SummaryCleaner(options)
    if latch is not None:
        cleaner.latch = latch
    return cleaner.clean(summary, windows)

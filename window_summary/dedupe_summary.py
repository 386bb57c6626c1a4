from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Iterable, Literal, Optional

from .mappings import DEFAULT_COLLAPSE_PHRASES


logger = logging.getLogger(__name__)

DedupeMode = Literal["consecutive", "global"]

DEFAULT_SIMILARITY_THRESHOLD = 0.9

_BULLET = re.compile(r"^\s*(?:[-*•]|\d+\.)\s+")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_LINE_BREAK = re.compile(r"\s*\n\s*")
_SENTENCE = re.compile(r"[^.!?]+[.!?]?")
_WHITESPACE = re.compile(r"\s+")
_SMART_QUOTES = str.maketrans({"“": '"', "”": '"', "‘": "'", "’": "'", "\u00a0": " "})


@dataclass(frozen=True)
class _Unit:
    text: str
    normalized: str


def normalize_for_comparison(text: str) -> str:
    """Lowercase, fold smart quotes and diacritics, drop punctuation and symbols."""

    folded = unicodedata.normalize("NFD", text.translate(_SMART_QUOTES).lower())
    chars = []
    for char in folded:
        category = unicodedata.category(char)
        if category == "Mn":
            continue
        chars.append(" " if category[0] in "PS" else char)
    return _WHITESPACE.sub(" ", "".join(chars)).strip()


def jaccard_similarity(a: str, b: str) -> float:
    if not a or not b:
        return 0.0
    tokens_a, tokens_b = set(a.split()), set(b.split())
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


def _split_sentences(paragraph: str) -> list[str]:
    flattened = _LINE_BREAK.sub(" ", paragraph).strip()
    if not flattened:
        return []
    sentences = [sentence.strip() for sentence in _SENTENCE.findall(flattened)]
    return [sentence for sentence in sentences if sentence] or [flattened]


def _parse_paragraph(paragraph: str) -> tuple[list[_Unit], bool]:
    lines = [line.strip() for line in paragraph.split("\n") if line.strip()]
    is_bullet = bool(lines) and all(_BULLET.match(line) for line in lines)
    pieces = lines if is_bullet else _split_sentences(paragraph)
    return [_Unit(piece, normalize_for_comparison(piece)) for piece in pieces], is_bullet


def _should_remove(
    unit: _Unit,
    last_kept: Optional[_Unit],
    seen: list[_Unit],
    mode: DedupeMode,
    threshold: float,
    collapse_lookup: set[str],
) -> bool:
    if not unit.normalized:
        return False
    if last_kept and unit.normalized in collapse_lookup and unit.normalized == last_kept.normalized:
        return True
    candidates = seen if mode == "global" else [last_kept] if last_kept else []
    return any(
        candidate.normalized and jaccard_similarity(candidate.normalized, unit.normalized) >= threshold
        for candidate in candidates
    )


def dedupe_summary(
    text: Optional[str],
    mode: DedupeMode = "consecutive",
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    collapse_phrases: Optional[Iterable[str]] = None,
) -> str:
    """Drop repeated sentences and bullets from a summary.

    Paragraphs are split into sentences (or kept as bullet lines when every
    line is a bullet). A unit is dropped when its token-set Jaccard similarity
    to the previous kept unit (``consecutive``) or to any kept unit
    (``global``) reaches ``similarity_threshold``. Paragraphs are rejoined
    with a blank line.
    """

    if not text:
        return ""
    phrases = DEFAULT_COLLAPSE_PHRASES if collapse_phrases is None else tuple(collapse_phrases)
    collapse_lookup = {normalized for normalized in map(normalize_for_comparison, phrases) if normalized}

    seen: list[_Unit] = []
    removed = 0
    paragraphs: list[str] = []
    for paragraph in _PARAGRAPH_BREAK.split(text):
        units, is_bullet = _parse_paragraph(paragraph)
        kept: list[_Unit] = []
        last_kept: Optional[_Unit] = None
        for unit in units:
            if _should_remove(unit, last_kept, seen, mode, similarity_threshold, collapse_lookup):
                removed += 1
                continue
            kept.append(unit)
            last_kept = unit
            if mode == "global":
                seen.append(unit)
        joined = "\n".join(unit.text for unit in kept) if is_bullet else " ".join(unit.text for unit in kept)
        if joined.strip():
            paragraphs.append(joined)

    if removed:
        logger.debug("summary_dedupe_removed", extra={"removed": removed, "mode": mode})
    return "\n\n".join(paragraphs).strip()

from __future__ import annotations

import logging

from window_summary import clean
from window_summary.clean import (
    SummaryCleaner,
    clean_summary_with_windows,
    collapse_boilerplate,
    collapse_identical_lines,
    convert_metadata_to_hints,
    normalize_spacing,
    strip_metadata_sections,
    strip_sources_footer,
)


WINDOWS = [
    {
        "name": "Amrit",
        "start": "2025-12-10T06:00:00",
        "end": "2025-12-10T07:30:00",
        "score": 8,
        "pakshi_day": "Crow",
    }
]


def test_empty_summary():
    assert clean_summary_with_windows(None) == ""
    assert clean_summary_with_windows("") == ""


def test_metadata_hint():
    text = "Moon is strong [based on core_layers.panchang.data.moon_sign]."
    assert convert_metadata_to_hints(text) == "Moon is strong *(based on moon sign)*."


def test_collapse_identical_lines_keeps_blank_lines():
    assert collapse_identical_lines("a\na\n\n\nb\nb\nc") == "a\n\n\nb\nc"


def test_collapse_boilerplate_keeps_two():
    out = collapse_boilerplate("Trust your intuition. " * 4)
    assert out == "Trust your intuition. Trust your intuition."


def test_collapse_boilerplate_leaves_two_alone():
    text = "Stay observant today. Work. Stay observant today."
    assert collapse_boilerplate(text) == text


def test_sources_footer():
    assert strip_sources_footer("Text body.\nSources: engine, ai") == "Text body."
    assert strip_sources_footer("Credits are due.") == "Credits are due."


def test_metadata_sections():
    text = "Updated: Dec 10\nGood day.\n\n## Windows Explanation\nslot details"
    assert strip_metadata_sections(text) == "Good day."
    assert strip_metadata_sections("Plan well.\nInternal notes: skip") == "Plan well."
    assert strip_metadata_sections("Plan well.\n\nTechnical Debug Info\nstack") == "Plan well."


def test_normalize_spacing():
    assert normalize_spacing("a  b\n\n\n\nc\t\td ") == "a b\n\nc d"


def test_full_pipeline():
    summary = (
        "Updated: Dec 10, 2025\n"
        "Focus during time_windows[0].\n"
        "Focus during time_windows[0].\n\n\n\n"
        "Stay calm.   Breathe.\n"
        '__debug__ {"layers": {"x": 1}}\n'
        "Sources: engine"
    )
    out = clean_summary_with_windows(summary, WINDOWS)
    assert out.startswith('Focus during <span class="mv-time-window mv-severity--auspicious')
    assert out.count("mv-time-window") == 1
    assert "6:00 AM → 7:30 AM" in out
    assert out.endswith("\n\nStay calm. Breathe.")
    for leaked in ("Updated", "Sources", "__debug__", "layers", "\n\n\n"):
        assert leaked not in out


def test_pipeline_formats_iso_datetimes():
    out = clean_summary_with_windows("Best from 2025-12-10T06:24:00 to 2025-12-10T07:54:00.")
    assert out == "Best from 6:24 AM – 7:54 AM."


def test_pipeline_replaces_window_numbers():
    windows = [{"name": f"W{slot}", "start": slot, "end": slot} for slot in range(1, 5)]
    out = clean_summary_with_windows("Windows 2 and 3 are best.", windows)
    assert out == "1:30 AM – 4:30 AM are best."


def test_failing_step_keeps_previous_text(monkeypatch, caplog):
    def boom(text):
        raise RuntimeError("broken step")

    monkeypatch.setattr(clean, "convert_metadata_to_hints", boom)
    caplog.set_level(logging.ERROR, logger="window_summary.clean")

    out = clean_summary_with_windows("Good day [based on a.b_c].")
    assert out == "Good day [based on a.b_c]."
    failures = [record for record in caplog.records if record.getMessage() == "summary_clean_step_failed"]
    assert len(failures) == 1
    assert failures[0].step == "metadata_hints"


def test_cleaner_sentence_dedupe():
    cleaner = SummaryCleaner(sentence_dedupe="consecutive")
    assert cleaner.clean("The moon is calm. The moon is calm. Act later.") == "The moon is calm. Act later."


def test_cleaner_owns_warning_latch(caplog):
    caplog.set_level(logging.WARNING, logger="window_summary.tokens")
    cleaner = SummaryCleaner()

    cleaner.clean("Use time_windows[0].")
    cleaner.clean("Use time_windows[1].")
    warnings = [r for r in caplog.records if r.getMessage() == "window_summary_tokens_without_windows"]
    assert len(warnings) == 1

    cleaner.reset_warning()
    cleaner.clean("Use time_windows[0].")
    warnings = [r for r in caplog.records if r.getMessage() == "window_summary_tokens_without_windows"]
    assert len(warnings) == 2

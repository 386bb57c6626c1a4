from __future__ import annotations

import logging

import pytest

from window_summary.render import FALLBACK_FRAGMENT
from window_summary.tokens import (
    WarningLatch,
    expand_time_window_tokens,
    replace_window_numbers_with_time_ranges,
)


TOKENS_LOGGER = "window_summary.tokens"
MISSING_WINDOWS_EVENT = "window_summary_tokens_without_windows"


@pytest.fixture
def iso_windows():
    return [
        {
            "name": "Amrit",
            "start": "2025-12-10T06:00:00",
            "end": "2025-12-10T07:30:00",
            "score": 8,
            "pakshi_day": "Crow",
            "pakshi_night": "Owl",
        },
        {"name": "Rahu", "start": "2025-12-10T07:30:00", "end": "2025-12-10T09:00:00", "score": 2},
        {"name": "Plain", "start": "2025-12-10T09:00:00", "end": "2025-12-10T10:30:00"},
    ]


@pytest.fixture
def slot_windows():
    return [{"name": f"W{slot}", "start": slot, "end": slot} for slot in range(1, 7)]


def _missing_window_warnings(caplog):
    return [record for record in caplog.records if record.getMessage() == MISSING_WINDOWS_EVENT]


def test_token_renders_window_fragment(iso_windows):
    out = expand_time_window_tokens("Avoid time_windows[0] today.", iso_windows)
    assert out.startswith('Avoid <span class="mv-time-window mv-severity--auspicious mv-auspicious"')
    assert 'data-severity="auspicious"' in out
    assert '<span class="mv-time-range">6:00 AM → 7:30 AM</span>' in out
    assert '<span class="mv-score mv-score--good">8</span>' in out
    assert '<span class="mv-pakshi-badge mv-pakshi--auspicious">Day: Crow</span>' in out
    assert '<span class="mv-pakshi-badge mv-pakshi--auspicious">Night: Owl</span>' in out
    assert out.endswith("</span> today.")


def test_token_is_case_insensitive(iso_windows):
    out = expand_time_window_tokens("Check TIME_WINDOWS[1] first.", iso_windows)
    assert "mv-severity--inauspicious" in out
    assert "mv-score--bad" in out
    assert "mv-pakshi-badge" not in out


def test_out_of_bounds_token_uses_fallback(iso_windows):
    assert expand_time_window_tokens("See time_windows[5]", iso_windows) == "See " + FALLBACK_FRAGMENT


def test_fallback_fragment_shape():
    assert 'mv-severity--neutral' in FALLBACK_FRAGMENT
    assert "--:-- → --:--" in FALLBACK_FRAGMENT
    assert 'mv-score--neutral">-<' in FALLBACK_FRAGMENT


def test_badges_are_escaped():
    out = expand_time_window_tokens("time_windows[0]", [{"start": 1, "end": 1, "pakshi_day": "<b>Crow</b>"}])
    assert "&lt;b&gt;Crow&lt;/b&gt;" in out
    assert "<b>" not in out


def test_missing_windows_warns_once_per_latch(caplog):
    caplog.set_level(logging.WARNING, logger=TOKENS_LOGGER)
    latch = WarningLatch()

    out = expand_time_window_tokens("Use time_windows[0] or time_windows[1].", None, latch=latch)
    assert out.count("mv-severity--neutral") == 2
    expand_time_window_tokens("Again time_windows[0].", None, latch=latch)
    assert len(_missing_window_warnings(caplog)) == 1
    assert latch.warned

    latch.reset()
    expand_time_window_tokens("Once more time_windows[0].", None, latch=latch)
    assert len(_missing_window_warnings(caplog)) == 2


def test_missing_windows_warning_can_be_disabled(caplog, monkeypatch):
    monkeypatch.setenv("WINDOW_SUMMARY_WARN_MISSING_WINDOWS", "false")
    caplog.set_level(logging.WARNING, logger=TOKENS_LOGGER)
    expand_time_window_tokens("Use time_windows[0].", None)
    assert _missing_window_warnings(caplog) == []


def test_empty_text():
    assert expand_time_window_tokens("", []) == ""
    assert expand_time_window_tokens(None, None) == ""


def test_contiguous_window_numbers_become_one_range(slot_windows):
    out = expand_time_window_tokens("Windows 3, 4, and 5", slot_windows)
    assert out == "3:00 AM to 7:30 AM"


def test_window_number_runs_and_singles(slot_windows):
    out = replace_window_numbers_with_time_ranges("Windows 1, 3 and 4 are good.", slot_windows)
    assert out == "12:00 AM – 1:30 AM, 3:00 AM to 6:00 AM are good."


def test_single_window_reference(slot_windows):
    assert replace_window_numbers_with_time_ranges("Check window 2 first.", slot_windows) == (
        "Check 1:30 AM – 3:00 AM first."
    )


def test_unresolvable_window_numbers_left_alone(slot_windows):
    text = "Windows 5 and 9 look busy."
    assert replace_window_numbers_with_time_ranges(text, slot_windows) == text
    assert replace_window_numbers_with_time_ranges("Window 0 is odd.", slot_windows) == "Window 0 is odd."


def test_window_numbers_without_windows():
    assert replace_window_numbers_with_time_ranges("Window 2", []) == "Window 2"
    assert replace_window_numbers_with_time_ranges("", None) == ""


def test_overlong_numbers_are_not_resolved(slot_windows):
    token = "time_windows[" + "9" * 5000 + "]"
    assert expand_time_window_tokens(token, slot_windows) == FALLBACK_FRAGMENT
    text = "Window " + "9" * 5000 + " is busy."
    assert replace_window_numbers_with_time_ranges(text, slot_windows) == text

from __future__ import annotations

from datetime import datetime

import pytest

from window_summary.time_values import (
    construct_iso_from_date_and_time,
    format_card_date,
    format_iso_datetimes_in_text,
    format_local,
    format_time,
    is_numeric_slot,
    parse_time_string,
    slot_index,
    slot_to_time_range,
)


def test_slot_range_first_slot():
    assert slot_to_time_range(1, 90) == "12:00 AM – 1:30 AM"


@pytest.mark.parametrize("slot", [0, -1, 17, "0", "abc"])
def test_slot_range_out_of_day_is_sentinel(slot):
    assert slot_to_time_range(slot, 90) == "time window"


def test_last_slot_wraps_to_midnight():
    assert slot_to_time_range(16, 90) == "10:30 PM – 12:00 AM"


def test_slot_range_24_hour():
    assert slot_to_time_range(2, 90, use_ampm=False) == "01:30 – 03:00"


def test_numeric_slot_detection():
    assert is_numeric_slot(3)
    assert is_numeric_slot("12")
    assert not is_numeric_slot(True)
    assert not is_numeric_slot("6:00")


def test_parse_time_string_variants():
    assert parse_time_string("9:30 PM") == (21, 30)
    assert parse_time_string("12:15 am") == (0, 15)
    assert parse_time_string("12:40 PM") == (12, 40)
    assert parse_time_string("24:05") == (0, 5)
    assert parse_time_string("21:10:59") == (21, 10)
    assert parse_time_string("25:00") is None
    assert parse_time_string("13:00 PM") is None
    assert parse_time_string("") is None


def test_format_time_slot_and_clock():
    assert format_time(3, {"slotMinutes": 90}) == "3:00 AM"
    assert format_time("21:10", {"useAmpm": False}) == "21:10"
    assert format_time("21:10") == "9:10 PM"
    assert format_time(99) is None


def test_format_time_iso_keeps_its_own_offset():
    assert format_time("2025-12-10T06:24:00+05:30") == "6:24 AM"


def test_format_time_iso_converted_to_zone():
    assert format_time("2025-12-10T00:54:00Z", {"tz": "Asia/Kolkata"}) == "6:24 AM"


def test_format_time_unknown_zone_is_ignored():
    assert format_time("2025-12-10T06:24:00+05:30", {"tz": "Mars/Olympus"}) == "6:24 AM"


@pytest.mark.parametrize("value", [None, True, "", "not a time", object()])
def test_format_time_never_raises(value):
    assert format_time(value) is None


def test_construct_iso_round_trip():
    iso = construct_iso_from_date_and_time("2025-12-10", "6:24 AM")
    assert iso == "2025-12-10T06:24:00"
    assert format_time(iso) == "6:24 AM"


def test_construct_iso_round_trip_with_zone():
    iso = construct_iso_from_date_and_time("2025-12-10", "09:05 PM", "Asia/Kolkata")
    assert iso == "2025-12-10T21:05:00+05:30"
    assert format_time(iso, {"tz": "Asia/Kolkata"}) == "9:05 PM"


def test_construct_iso_noon_and_bad_input():
    assert construct_iso_from_date_and_time("2025-12-10T00:00:00", "12:05 PM") == "2025-12-10T12:05:00"
    assert construct_iso_from_date_and_time("2025-13-45", "6:24 AM") is None
    assert construct_iso_from_date_and_time("2025-12-10", "soon") is None
    assert construct_iso_from_date_and_time(None, "6:24 AM") is None


def test_format_local_modes():
    assert format_local(None) == "—"
    assert format_local("") == "—"
    assert format_local("2025-11-28T11:49:00") == "Nov 28, 2025, 11:49 AM"
    assert format_local("2025-11-28T11:49:00", "date") == "11/28/2025"
    assert format_local("2025-11-28T23:49:00", "time", {"useAmpm": False}) == "11:49 PM"
    assert format_local("garbage") == "garbage"


def test_format_card_date():
    assert format_card_date(datetime(2025, 12, 10, 6, 24)) == "Dec 10, 2025"


def test_iso_datetimes_in_text():
    text = "Starts 2025-12-10T06:24:00 and ends 2025-12-10T07:54:00."
    assert format_iso_datetimes_in_text(text) == "Starts 6:24 AM and ends 7:54 AM."


def test_time_to_time_phrase_becomes_dash():
    assert format_iso_datetimes_in_text("Meet from 6:24 AM to 7:54 AM.") == "Meet from 6:24 AM – 7:54 AM."
    assert format_iso_datetimes_in_text(None) == ""


def test_huge_int_slot_is_out_of_range():
    assert slot_index(10**400) == 10**400
    assert slot_to_time_range(10**400, 90) == "time window"
    assert format_time(10**400) is None


@pytest.mark.parametrize(
    "iso, expected",
    [
        ("0001-01-01T00:30:00+05:00", "12:30 AM"),
        ("9999-12-31T23:30:00-05:00", "11:30 PM"),
    ],
)
def test_zone_conversion_past_datetime_range_keeps_own_offset(iso, expected):
    options = {"tz": "UTC", "useAmpm": True}
    assert format_time(iso, options) == expected
    assert format_iso_datetimes_in_text(f"At {iso}.", options) == f"At {expected}."


def test_format_local_past_datetime_range():
    assert format_local("0001-01-01T00:00:00+05:00", "datetime", {"tz": "UTC"}) == "Jan 1, 1, 12:00 AM"
    assert format_card_date(datetime.fromisoformat("0001-01-01T00:00:00+05:00"), "UTC") == "Jan 1, 1"


def test_month_abbreviations_do_not_follow_locale():
    months = [format_card_date(datetime(2025, month, 1)) for month in range(1, 13)]
    assert months == [
        "Jan 1, 2025",
        "Feb 1, 2025",
        "Mar 1, 2025",
        "Apr 1, 2025",
        "May 1, 2025",
        "Jun 1, 2025",
        "Jul 1, 2025",
        "Aug 1, 2025",
        "Sep 1, 2025",
        "Oct 1, 2025",
        "Nov 1, 2025",
        "Dec 1, 2025",
    ]

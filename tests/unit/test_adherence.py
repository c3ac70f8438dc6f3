"""Unit tests for adherence, progress and calendar calculations."""

from datetime import date, datetime

import pytest

from services.adherence import (
    adherence_message,
    adherence_percentage,
    calendar_month,
    daily_adherence,
    doses_for_day,
    period_range,
    progress_report,
    round_half_up,
    shift_period,
)


def dose(scheduled, status="pending", medication_id="med-1", **extra):
    record = {"id": f"{medication_id}-{scheduled}", "medication_id": medication_id,
              "scheduled_time": scheduled, "status": status}
    record.update(extra)
    return record


def test_round_half_up_matches_math_round():
    """Test .5 rounds up, unlike Python's banker's rounding."""
    assert round_half_up(2.5) == 3
    assert round_half_up(66.666) == 67
    assert round_half_up(0.4) == 0


def test_adherence_percentage():
    records = [dose("2024-03-15T08:00:00", "taken"), dose("2024-03-15T20:00:00", "skipped"),
               dose("2024-03-15T22:00:00", "pending")]
    assert adherence_percentage(records) == 33
    assert adherence_percentage([]) == 0


def test_doses_for_day_uses_half_open_window_and_sorts():
    """Test midnight of the next day is excluded and results are time ordered."""
    # Given: doses around a day boundary, out of order
    records = [
        dose("2024-03-15T20:00:00"),
        dose("2024-03-16T00:00:00"),
        dose("2024-03-15T00:00:00"),
        dose("2024-03-14T23:59:00"),
    ]

    # When
    todays = doses_for_day(records, date(2024, 3, 15))

    # Then
    assert [d["scheduled_time"] for d in todays] == ["2024-03-15T00:00:00", "2024-03-15T20:00:00"]


@pytest.mark.parametrize("value, fragment", [
    (100, "Excellent"),
    (80, "Excellent"),
    (60, "Good"),
    (10, "Low"),
    (0, "Start"),
])
def test_adherence_message_tiers(value, fragment):
    assert fragment in adherence_message(value)


def test_daily_adherence_card():
    records = [
        dose("2024-03-15T08:00:00", "taken"),
        dose("2024-03-15T20:00:00", "pending"),
        dose("2024-03-14T08:00:00", "taken"),
    ]
    card = daily_adherence(records, date(2024, 3, 15))
    assert card["adherence"] == 50
    assert card["taken"] == 1
    assert card["total"] == 2
    assert card["tier"] == "low"


def test_weekly_period_starts_on_sunday():
    """Test the week containing a Friday starts the previous Sunday."""
    start, end = period_range("weekly", date(2024, 3, 15))
    assert start == datetime(2024, 3, 10)
    assert end == datetime(2024, 3, 17)


def test_monthly_period_and_navigation():
    start, end = period_range("monthly", date(2024, 2, 10))
    assert start == datetime(2024, 2, 1)
    assert end == datetime(2024, 3, 1)
    assert shift_period("monthly", date(2024, 3, 31), "prev") == date(2024, 2, 29)
    assert shift_period("daily", date(2024, 3, 1), "prev") == date(2024, 2, 29)
    assert shift_period("weekly", date(2024, 3, 1), "next") == date(2024, 3, 8)


def test_invalid_period():
    with pytest.raises(ValueError):
        period_range("yearly", date(2024, 1, 1))


def test_progress_report_only_lists_medications_with_doses():
    """Test per-medication stats skip medications without doses in the window."""
    # Given: two medications, only one with doses this week
    medications = [{"id": "med-1", "name": "Losartana", "dosage": "50mg"},
                   {"id": "med-2", "name": "Vitamina D", "dosage": "1 cápsula"}]
    records = [
        dose("2024-03-11T08:00:00", "taken"),
        dose("2024-03-12T08:00:00", "skipped"),
        dose("2024-03-13T08:00:00", "taken"),
        dose("2024-03-20T08:00:00", "taken", medication_id="med-2"),
    ]

    # When
    report = progress_report(records, medications, "weekly", date(2024, 3, 13))

    # Then
    assert report["stats"] == {"total": 3, "taken": 2, "skipped": 1, "pending": 0, "adherence": 67}
    assert [m["medication_id"] for m in report["medications"]] == ["med-1"]
    assert report["previous_date"] == "2024-03-06"
    assert report["next_date"] == "2024-03-20"


def test_calendar_month_grid():
    """Test grid shape and per-day counts for March 2024 (starts on a Friday)."""
    records = [
        dose("2024-03-15T08:00:00", "taken"),
        dose("2024-03-15T20:00:00", "pending"),
        dose("2024-03-01T08:00:00", "skipped"),
    ]

    grid = calendar_month(records, 2024, 3, selected_day=15)

    assert grid["days_in_month"] == 31
    assert grid["starting_day_of_week"] == 5
    assert grid["days"][14] == {"day": 15, "taken": 1, "total": 2, "has_doses": True}
    assert grid["days"][1]["has_doses"] is False
    assert [d["scheduled_time"] for d in grid["selected_doses"]] == ["2024-03-15T08:00:00",
                                                                     "2024-03-15T20:00:00"]
    assert grid["previous"] == {"year": 2024, "month": 2}
    assert grid["next"] == {"year": 2024, "month": 4}


def test_calendar_rejects_day_outside_month():
    with pytest.raises(ValueError):
        calendar_month([], 2024, 2, selected_day=30)

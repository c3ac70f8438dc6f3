#!/usr/bin/env python3
"""
Adherence calculations for the client dashboard: daily score, progress by
period and the care calendar. All functions work on dose record dicts as
returned by the remote procedures or by the models' to_dict().
"""

import calendar
import logging
import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from lib.time_utils import day_bounds, parse_timestamp

logger = logging.getLogger(__name__)

EXCELLENT_THRESHOLD = 80
GOOD_THRESHOLD = 60


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(part: int, total: int) -> int:
    return round_half_up(part / total * 100) if total > 0 else 0


def adherence_percentage(records: List[Dict[str, Any]]) -> int:
    """Share of records with status "taken", 0 when there are none"""
    taken = sum(1 for r in records if r.get("status") == "taken")
    return percentage(taken, len(records))


def status_counts(records: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = {"total": len(records), "taken": 0, "skipped": 0, "pending": 0}
    for r in records:
        status = r.get("status")
        if status in counts:
            counts[status] += 1
    return counts


def records_between(records: List[Dict[str, Any]], start: datetime, end: datetime) -> List[Dict[str, Any]]:
    """Records with start <= scheduled_time < end"""
    return [r for r in records if start <= parse_timestamp(r["scheduled_time"]) < end]


def doses_for_day(records: List[Dict[str, Any]], day: date) -> List[Dict[str, Any]]:
    start, end = day_bounds(day)
    selected = records_between(records, start, end)
    return sorted(selected, key=lambda r: parse_timestamp(r["scheduled_time"]))


def adherence_tier(value: int) -> str:
    if value >= EXCELLENT_THRESHOLD:
        return "excellent"
    if value >= GOOD_THRESHOLD:
        return "good"
    return "low"


def adherence_message(value: int) -> str:
    if value >= EXCELLENT_THRESHOLD:
        return "Excellent adherence! Keep it up!"
    if value >= GOOD_THRESHOLD:
        return "Good adherence. Try to improve!"
    if value > 0:
        return "Low adherence. Don't give up!"
    return "Start your treatment today!"


def daily_adherence(records: List[Dict[str, Any]], today: Optional[date] = None) -> Dict[str, Any]:
    """Adherence card: percentage of today's doses already taken"""
    today = today or date.today()
    todays = doses_for_day(records, today)
    value = adherence_percentage(todays)
    return {
        "date": today.isoformat(),
        "adherence": value,
        "tier": adherence_tier(value),
        "message": adherence_message(value),
        "taken": sum(1 for r in todays if r.get("status") == "taken"),
        "total": len(todays),
    }


def period_range(period: str, ref_date: date) -> Tuple[datetime, datetime]:
    """
    [start, end) of the period containing ref_date.
    Weeks start on Sunday.
    """
    if period == "daily":
        return day_bounds(ref_date)
    if period == "weekly":
        # date.weekday(): Monday=0 ... Sunday=6
        days_since_sunday = (ref_date.weekday() + 1) % 7
        start_day = ref_date - timedelta(days=days_since_sunday)
        start, _ = day_bounds(start_day)
        return start, start + timedelta(days=7)
    if period == "monthly":
        start = datetime(ref_date.year, ref_date.month, 1)
        last_day = calendar.monthrange(ref_date.year, ref_date.month)[1]
        return start, datetime(ref_date.year, ref_date.month, last_day) + timedelta(days=1)
    raise ValueError(f"Invalid period: {period}")


def add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def shift_period(period: str, ref_date: date, direction: str) -> date:
    """Reference date of the previous or next period"""
    step = 1 if direction == "next" else -1
    if period == "daily":
        return ref_date + timedelta(days=step)
    if period == "weekly":
        return ref_date + timedelta(days=7 * step)
    if period == "monthly":
        return add_months(ref_date, step)
    raise ValueError(f"Invalid period: {period}")


def progress_report(records: List[Dict[str, Any]], medications: List[Dict[str, Any]],
                    period: str = "daily", ref_date: Optional[date] = None) -> Dict[str, Any]:
    """Totals by status and per-medication adherence for one period"""
    ref_date = ref_date or date.today()
    start, end = period_range(period, ref_date)
    filtered = records_between(records, start, end)

    stats = status_counts(filtered)
    stats["adherence"] = percentage(stats["taken"], stats["total"])

    medication_stats = []
    for med in medications:
        med_records = [r for r in filtered if r.get("medication_id") == med.get("id")]
        if not med_records:
            continue
        med_taken = sum(1 for r in med_records if r.get("status") == "taken")
        medication_stats.append({
            "medication_id": med.get("id"),
            "name": med.get("name"),
            "dosage": med.get("dosage"),
            "total": len(med_records),
            "taken": med_taken,
            "adherence": percentage(med_taken, len(med_records)),
        })

    return {
        "period": period,
        "reference_date": ref_date.isoformat(),
        "start": start.isoformat(),
        "end": (end - timedelta(microseconds=1)).isoformat(),
        "previous_date": shift_period(period, ref_date, "prev").isoformat(),
        "next_date": shift_period(period, ref_date, "next").isoformat(),
        "stats": stats,
        "medications": medication_stats,
    }


def calendar_month(records: List[Dict[str, Any]], year: int, month: int,
                   selected_day: Optional[int] = None) -> Dict[str, Any]:
    """
    Month grid for the care calendar.
    starting_day_of_week counts from Sunday = 0.
    """
    days_in_month = calendar.monthrange(year, month)[1]
    starting_day_of_week = (date(year, month, 1).weekday() + 1) % 7

    days = []
    for day in range(1, days_in_month + 1):
        doses = doses_for_day(records, date(year, month, day))
        taken = sum(1 for d in doses if d.get("status") == "taken")
        days.append({"day": day, "taken": taken, "total": len(doses), "has_doses": bool(doses)})

    selected = []
    if selected_day:
        if not 1 <= selected_day <= days_in_month:
            raise ValueError(f"Invalid day for {year}-{month:02d}: {selected_day}")
        selected = doses_for_day(records, date(year, month, selected_day))

    previous_month = add_months(date(year, month, 1), -1)
    next_month = add_months(date(year, month, 1), 1)

    return {
        "year": year,
        "month": month,
        "days_in_month": days_in_month,
        "starting_day_of_week": starting_day_of_week,
        "days": days,
        "selected_day": selected_day,
        "selected_doses": selected,
        "previous": {"year": previous_month.year, "month": previous_month.month},
        "next": {"year": next_month.year, "month": next_month.month},
    }

#!/usr/bin/env python3
"""
Dose schedule helpers: dosage units, schedule strings and dose generation
"""

import re
import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_UNIT = "mg"
PRESCRIPTION_UNITS = ("mg", "g", "ml", "comprimido", "cápsula", "gota", "gotas")
DOSAGE_UNIT_PATTERN = re.compile(r"mg|g|ml|comprimido|cápsula", re.IGNORECASE)
STORED_UNIT_PATTERN = re.compile(r"(gotas|gota|comprimido|cápsula|mg|ml|g)\s*$", re.IGNORECASE)
SCHEDULE_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

RECURRENCE_TYPES = ("continuous", "weekly", "biweekly", "monthly", "custom")


def normalize_dosage(value: str) -> str:
    """Append the default unit when the dosage has none, e.g. "500" -> "500mg" """
    value = value.strip()
    if DOSAGE_UNIT_PATTERN.search(value):
        return value
    return f"{value}{DEFAULT_UNIT}"


def split_dosage(dosage: str) -> Tuple[str, str]:
    """Split a stored dosage into (value, unit); unit defaults to mg"""
    dosage = (dosage or "").strip()
    match = STORED_UNIT_PATTERN.search(dosage)
    if not match:
        return dosage, DEFAULT_UNIT
    return dosage[:match.start()].strip(), match.group(1)


def clean_schedules(schedules: Optional[Iterable[str]]) -> List[str]:
    """Drop blank entries"""
    return [s.strip() for s in (schedules or []) if s and s.strip()]


def join_schedules(schedules: Iterable[str]) -> str:
    return ", ".join(schedules)


def split_schedules(schedules: Optional[str]) -> List[str]:
    return [s.strip() for s in (schedules or "").split(",") if s.strip()]


def parse_schedule_time(value: str) -> time:
    """Parse "HH:MM" into a time"""
    match = SCHEDULE_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid schedule time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid schedule time: {value!r}")
    return time(hours, minutes)


def parse_custom_dates(dates: Optional[Iterable[str]]) -> List[str]:
    return [d.strip() for d in (dates or []) if d and d.strip()]


def generate_dose_times(start_date: date, duration_days: int, schedules: Iterable[str]) -> List[datetime]:
    """
    One scheduled time per schedule entry per day, for `duration_days` days
    starting on `start_date`. Ordered by day, then by schedule order.
    """
    times = [parse_schedule_time(s) for s in schedules]
    result = []
    for offset in range(max(duration_days, 0)):
        day = start_date + timedelta(days=offset)
        for t in times:
            result.append(datetime.combine(day, t))
    logger.debug(f"Generated {len(result)} dose times from {start_date} for {duration_days} days")
    return result

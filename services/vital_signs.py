#!/usr/bin/env python3
"""
Vital signs rules: form validation, reading classification, history
filtering and averages
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from lib.time_utils import parse_timestamp
from services.adherence import round_half_up

logger = logging.getLogger(__name__)

SYSTOLIC_RANGE = (50, 300)
DIASTOLIC_RANGE = (30, 200)
GLUCOSE_RANGE = (20, 600)

HISTORY_LIMIT = 100
KIND_FILTERS = ("all", "bp", "glucose")
TIME_RANGES = {"all": None, "week": 7, "month": 30}


def validate_vital_sign(systolic: Optional[int], diastolic: Optional[int],
                        glucose: Optional[int], measured_at: Optional[Any]) -> Dict[str, str]:
    """Return field-keyed errors; an empty dict means the reading is valid"""
    errors: Dict[str, str] = {}
    has_bp = systolic is not None and diastolic is not None
    has_glucose = glucose is not None

    if systolic is None and diastolic is None and not has_glucose:
        errors["general"] = "Provide blood pressure or glucose"
    elif (systolic is None) != (diastolic is None):
        errors["general"] = "For blood pressure, provide both systolic and diastolic"

    if has_bp:
        if not SYSTOLIC_RANGE[0] <= systolic <= SYSTOLIC_RANGE[1]:
            errors["systolic"] = "Systolic must be between 50 and 300 mmHg"
        if not DIASTOLIC_RANGE[0] <= diastolic <= DIASTOLIC_RANGE[1]:
            errors["diastolic"] = "Diastolic must be between 30 and 200 mmHg"

    if has_glucose and not GLUCOSE_RANGE[0] <= glucose <= GLUCOSE_RANGE[1]:
        errors["glucose"] = "Glucose must be between 20 and 600 mg/dL"

    if not measured_at:
        errors["measured_at"] = "Provide date and time"

    return errors


def classify_blood_pressure(systolic: Optional[int], diastolic: Optional[int]) -> Optional[str]:
    if not systolic or not diastolic:
        return None
    if systolic < 120 and diastolic < 80:
        return "Normal"
    if systolic < 130 and diastolic < 80:
        return "Elevated"
    if systolic < 140 or diastolic < 90:
        return "Hypertension stage 1"
    if systolic < 180 or diastolic < 120:
        return "Hypertension stage 2"
    return "Hypertensive crisis"


def classify_glucose(glucose: Optional[int]) -> Optional[str]:
    if not glucose:
        return None
    if glucose < 70:
        return "Low"
    if glucose <= 99:
        return "Normal"
    if glucose <= 125:
        return "Pre-diabetes"
    if glucose <= 199:
        return "Diabetes"
    return "High"


def with_status(sign: Dict[str, Any]) -> Dict[str, Any]:
    """Attach the BP / glucose classification to a reading"""
    item = dict(sign)
    item["bp_status"] = classify_blood_pressure(sign.get("systolic"), sign.get("diastolic"))
    item["glucose_status"] = classify_glucose(sign.get("glucose"))
    return item


def apply_time_range(signs: List[Dict[str, Any]], time_range: str = "all",
                     now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    if time_range not in TIME_RANGES:
        raise ValueError(f"Invalid time range: {time_range}")
    days = TIME_RANGES[time_range]
    if days is None:
        return list(signs)
    start = (now or datetime.now()) - timedelta(days=days)
    return [s for s in signs if parse_timestamp(s["measured_at"]) >= start]


def apply_kind_filter(signs: List[Dict[str, Any]], kind: str = "all") -> List[Dict[str, Any]]:
    if kind not in KIND_FILTERS:
        raise ValueError(f"Invalid filter: {kind}")
    if kind == "bp":
        return [s for s in signs if s.get("systolic") is not None and s.get("diastolic") is not None]
    if kind == "glucose":
        return [s for s in signs if s.get("glucose") is not None]
    return list(signs)


def averages(signs: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Rounded averages; None when there is nothing to average"""
    bp_signs = [s for s in signs if s.get("systolic") and s.get("diastolic")]
    glucose_signs = [s for s in signs if s.get("glucose")]

    def _avg(values):
        return round_half_up(sum(values) / len(values)) if values else None

    return {
        "avg_systolic": _avg([s["systolic"] for s in bp_signs]),
        "avg_diastolic": _avg([s["diastolic"] for s in bp_signs]),
        "avg_glucose": _avg([s["glucose"] for s in glucose_signs]),
        "bp_count": len(bp_signs),
        "glucose_count": len(glucose_signs),
    }


def history_view(signs: List[Dict[str, Any]], kind: str = "all", time_range: str = "all",
                 now: Optional[datetime] = None) -> Dict[str, Any]:
    """Filtered readings plus averages over the time-ranged (not kind-filtered) set"""
    ranged = apply_time_range(signs, time_range, now)
    return {
        "filter": kind,
        "time_range": time_range,
        "items": [with_status(s) for s in apply_kind_filter(ranged, kind)],
        "averages": averages(ranged),
    }

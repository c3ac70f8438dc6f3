#!/usr/bin/env python3
"""
Form validation for pharmacy and client submissions.
Every validator returns a dict of field -> message; empty means valid.
"""

import re
from datetime import date
from typing import Dict, List, Optional

from lib.auth_utils import is_valid_email, is_valid_phone
from dal.models.adverse_events import EVENT_TYPES, SEVERITIES
from dal.models.dose_corrections import CORRECTION_TYPES
from services.dose_schedule import (
    DEFAULT_UNIT,
    PRESCRIPTION_UNITS,
    RECURRENCE_TYPES,
    clean_schedules,
    parse_custom_dates,
    parse_schedule_time,
)

MIN_PASSWORD_LENGTH = 6
ISSUE_TYPES = ("correction", "adverse_event")

_DIGITS_ONLY = re.compile(r"^\d+$")


def _check_schedule_format(schedules: List[str], errors: Dict[str, str]) -> None:
    for value in schedules:
        try:
            parse_schedule_time(value)
        except ValueError:
            errors["schedules"] = f"Invalid time: {value}"
            return


def _check_custom_dates(dates: List[str], errors: Dict[str, str]) -> None:
    for value in dates:
        try:
            date.fromisoformat(value)
        except ValueError:
            errors["custom_dates"] = f"Invalid date: {value}"
            return


def validate_client_form(name: str, phone: str, email: Optional[str] = None,
                         password: Optional[str] = None, require_password: bool = False) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not (name or "").strip():
        errors["name"] = "Name is required"
    if not (phone or "").strip():
        errors["phone"] = "Phone is required"
    elif not is_valid_phone(phone):
        errors["phone"] = "Invalid phone. Use the format (11) 99999-9999"
    if (email or "").strip() and not is_valid_email(email.strip()):
        errors["email"] = "Invalid email"
    if require_password and len(password or "") < MIN_PASSWORD_LENGTH:
        errors["password"] = "Password must have at least 6 characters"
    return errors


def validate_pharmacy_medication(client_id: Optional[str], name: str, dosage: str,
                                 schedules: List[str], treatment_duration_days: Optional[int],
                                 recurrence_type: str = "continuous",
                                 custom_dates: Optional[List[str]] = None,
                                 unit: str = DEFAULT_UNIT) -> Dict[str, str]:
    """
    Prescription form. Dosage is digits only, the unit is picked from
    PRESCRIPTION_UNITS. Custom dates are ISO (YYYY-MM-DD).
    A custom recurrence without dates is an as-needed (PRN) medication and
    needs no schedule.
    """
    errors: Dict[str, str] = {}
    if not client_id:
        errors["client_id"] = "Select a client"
    if not (name or "").strip():
        errors["name"] = "Name is required"
    if not (dosage or "").strip():
        errors["dosage"] = "Dosage is required"
    elif not _DIGITS_ONLY.match(dosage.strip()):
        errors["dosage"] = "Use digits only"
    if unit not in PRESCRIPTION_UNITS:
        errors["unit"] = "Invalid unit"

    if recurrence_type not in RECURRENCE_TYPES:
        errors["recurrence"] = "Invalid treatment type"
    elif recurrence_type == "custom":
        _check_custom_dates(parse_custom_dates(custom_dates), errors)

    valid_schedules = clean_schedules(schedules)
    is_prn = recurrence_type == "custom" and not parse_custom_dates(custom_dates)
    if not valid_schedules and not is_prn:
        errors["schedules"] = "Add at least one time"
    else:
        _check_schedule_format(valid_schedules, errors)

    if not treatment_duration_days or treatment_duration_days < 1:
        errors["treatment_duration_days"] = "Duration must be at least 1 day"
    return errors


def validate_client_medication(name: str, dosage: str, schedules: List[str],
                               treatment_duration_days: Optional[int] = None) -> Dict[str, str]:
    """Client-side add and the shared edit form"""
    errors: Dict[str, str] = {}
    if not (name or "").strip():
        errors["name"] = "Enter the medication name"
    if not (dosage or "").strip():
        errors["dosage"] = "Enter the dosage"
    valid_schedules = clean_schedules(schedules)
    if not valid_schedules:
        errors["schedules"] = "Add at least one time"
    else:
        _check_schedule_format(valid_schedules, errors)
    if treatment_duration_days is not None and treatment_duration_days < 1:
        errors["treatment_duration_days"] = "Duration must be at least 1 day"
    return errors


def validate_issue_report(issue_type: str, description: str, correction_type: Optional[str] = None,
                          event_type: Optional[str] = None, severity: Optional[str] = None) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if issue_type not in ISSUE_TYPES:
        errors["issue_type"] = "Choose a correction or an adverse event"
        return errors
    if issue_type == "correction" and correction_type not in CORRECTION_TYPES:
        errors["correction_type"] = "Select the correction type"
    if issue_type == "adverse_event":
        if event_type not in EVENT_TYPES:
            errors["event_type"] = "Select the event type"
        if severity not in SEVERITIES:
            errors["severity"] = "Select the severity"
    if not (description or "").strip():
        errors["description"] = "Describe what happened"
    return errors

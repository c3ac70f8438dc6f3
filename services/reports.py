#!/usr/bin/env python3
"""
Pharmacy dashboards: overview, reports and client roster aggregates.
Inputs are plain row dicts; nothing here touches the database.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from lib.time_utils import day_bounds, parse_timestamp
from lib.whatsapp_utils import build_whatsapp_link, restock_message
from services.adherence import percentage, status_counts

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 5
UNKNOWN_MEDICATION = "Unknown"
UNKNOWN_CLIENT = "—"

REPORT_RANGES = {"7d": 7, "30d": 30}


def top_counts(labels: List[str], limit: int = 5) -> List[Dict[str, Any]]:
    """Most frequent labels, descending; ties keep first-seen order"""
    counts = Counter(labels)
    items = [{"label": label, "count": count} for label, count in counts.items()]
    items.sort(key=lambda i: i["count"], reverse=True)
    return items[:limit]


def _is_low_stock(remaining: Optional[int]) -> bool:
    return remaining is not None and remaining <= LOW_STOCK_THRESHOLD


def pharmacy_overview(medications: List[Dict[str, Any]], taken_doses: List[Dict[str, Any]],
                      clients: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Top registered / used medications and those running out"""
    names_by_id = {m["id"]: m["name"] for m in medications}
    client_names = {c["id"]: c["name"] for c in clients}

    top_registered = top_counts([m["name"] for m in medications])
    top_used = top_counts([names_by_id.get(d["medication_id"], UNKNOWN_MEDICATION) for d in taken_doses])

    running_out = [
        {
            "id": m["id"],
            "name": m["name"],
            "client": client_names.get(m["client_id"], UNKNOWN_CLIENT),
            "remaining": m.get("remaining_doses") or 0,
        }
        for m in medications
        if _is_low_stock(m.get("remaining_doses"))
    ]
    running_out.sort(key=lambda r: r["remaining"])

    return {
        "top_registered": top_registered,
        "top_used": top_used,
        "running_out": running_out[:10],
    }


def pharmacy_reports(clients: List[Dict[str, Any]], medications: List[Dict[str, Any]],
                     doses: List[Dict[str, Any]], range_key: str = "30d",
                     now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    KPIs over the last 7 or 30 days.
    The range starts at midnight `range_days` days ago and ends now.
    """
    if range_key not in REPORT_RANGES:
        raise ValueError(f"Invalid range: {range_key}")

    now = now or datetime.now()
    range_days = REPORT_RANGES[range_key]
    start_of_today, start_of_tomorrow = day_bounds(now.date())
    start_of_range, _ = day_bounds((now - timedelta(days=range_days)).date())

    timed = [(parse_timestamp(d["scheduled_time"]), d) for d in doses]
    today_doses = [d for t, d in timed if start_of_today <= t < start_of_tomorrow]
    ranged = [d for t, d in timed if start_of_range <= t <= now]

    doses_today = status_counts(today_doses)

    # Overall adherence keeps a denominator of at least one
    ranged_taken = sum(1 for d in ranged if d.get("status") == "taken")
    ranged_total = len(ranged) or 1
    adherence_overall = {
        "total": ranged_total,
        "taken": ranged_taken,
        "pct": percentage(ranged_taken, ranged_total),
    }

    names_by_id = {m["id"]: m["name"] for m in medications}
    top_medications_used = top_counts([
        names_by_id.get(d["medication_id"], UNKNOWN_MEDICATION)
        for d in ranged if d.get("status") == "taken"
    ])

    clients_by_id = {c["id"]: c for c in clients}

    by_client: Dict[str, Dict[str, int]] = {}
    for d in ranged:
        agg = by_client.setdefault(d["client_id"], {"total": 0, "taken": 0})
        agg["total"] += 1
        if d.get("status") == "taken":
            agg["taken"] += 1
    low_adherence_clients = [
        {
            "client_id": client_id,
            "name": clients_by_id.get(client_id, {}).get("name", UNKNOWN_CLIENT),
            "pct": percentage(agg["taken"], agg["total"]),
            "total": agg["total"],
        }
        for client_id, agg in by_client.items()
    ]
    low_adherence_clients.sort(key=lambda r: r["pct"])

    active_medications = sum(1 for m in medications if m.get("is_active") is not False)

    low_stock = []
    for m in medications:
        if not _is_low_stock(m.get("remaining_doses")):
            continue
        info = clients_by_id.get(m["client_id"], {})
        client_name = info.get("name", UNKNOWN_CLIENT)
        low_stock.append({
            "client_id": m["client_id"],
            "client_name": client_name,
            "phone": info.get("phone"),
            "medication_name": m["name"],
            "remaining": m.get("remaining_doses") or 0,
            "whatsapp_link": build_whatsapp_link(info.get("phone"), restock_message(client_name, m["name"])),
        })
    low_stock.sort(key=lambda r: r["remaining"])

    return {
        "range": range_key,
        "clients": len(clients),
        "active_medications": active_medications,
        "doses_today": doses_today,
        "adherence_overall": adherence_overall,
        "top_medications_used": top_medications_used,
        "low_adherence_clients": low_adherence_clients[:10],
        "low_stock": low_stock[:30],
    }


def roster_entry(client: Dict[str, Any], medications: List[Dict[str, Any]],
                 recent_doses: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Client list item: profile plus medication count and recent adherence"""
    taken = sum(1 for d in recent_doses if d.get("status") == "taken")
    entry = dict(client)
    entry["medication_count"] = len(medications)
    entry["adherence"] = percentage(taken, len(recent_doses))
    return entry


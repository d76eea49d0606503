# parish/services/request_parsing.py
"""
Convention-based parsing of free-text request fields.

Requests carry no structured recipient name or schedule date, so these
helpers guess them from text. Callers go through this module only, so the
guesses can be swapped for real fields later without touching them.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from parish.models.sacrament_record import SacramentType

RECIPIENT_NAME_MAX = 50

# Order matters: first substring hit wins
_SERVICE_KEYWORDS: tuple[tuple[str, SacramentType], ...] = (
    ("baptism", SacramentType.BAPTISM),
    ("confirmation", SacramentType.CONFIRMATION),
    ("marriage", SacramentType.MARRIAGE),
    ("funeral", SacramentType.FUNERAL),
)


def sacrament_type_for_service(service_type: Optional[str]) -> Optional[SacramentType]:
    """Map a free-text service label ("Infant Baptism") to a SacramentType, or None."""
    s = (service_type or "").lower()
    for keyword, sac_type in _SERVICE_KEYWORDS:
        if keyword in s:
            return sac_type
    return None


def _parse_calendar_date(candidate: Optional[str]) -> Optional[date]:
    if not candidate or "-" not in candidate:
        return None
    try:
        return date.fromisoformat(candidate.strip())
    except ValueError:
        return None


def record_date_for_request(
    confirmed_schedule: Optional[str],
    preferred_date: Optional[str],
    today: Optional[date] = None,
) -> date:
    """
    Pick the date a completed sacrament took place.

    Priority: date part of the confirmed schedule ("2023-12-10 10:00 AM"),
    then the preferred date, then today. A candidate that is not an ISO
    calendar date falls back to today rather than to the next source.
    """
    today = today or date.today()
    if confirmed_schedule and confirmed_schedule.strip():
        candidate: Optional[str] = confirmed_schedule.strip().split(" ")[0]
    elif preferred_date and preferred_date.strip():
        candidate = preferred_date.strip()
    else:
        return today
    return _parse_calendar_date(candidate) or today


def recipient_name_from_details(details: Optional[str]) -> str:
    """Crude recipient guess: the leading 50 characters of the request details."""
    return (details or "").strip()[:RECIPIENT_NAME_MAX].strip()

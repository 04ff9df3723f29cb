"""Booking channel analytics (WhatsApp vs. telephone)."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List

from salondesk.core.settings import DashboardSettings
from salondesk.ingestion.common import parse_visit_date

WHATSAPP = "whatsapp"
TELEPHONE = "telefono"
TREND_DAYS = 30


def channel_of(row: Dict[str, Any]) -> str:
    """Anything not explicitly WhatsApp counts as a phone booking."""

    channel = row.get("from")
    return WHATSAPP if isinstance(channel, str) and channel.lower() == WHATSAPP else TELEPHONE


def channel_breakdown(rows: Iterable[Any], settings: DashboardSettings, now: datetime) -> Dict[str, Any]:
    """Count reservations per channel plus a daily trend for the last 30 days.

    Rows whose date cannot be parsed are ignored.
    """

    dated = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        visit_date = parse_visit_date(row.get("Fecha y hora"), settings.zone)
        if visit_date is not None:
            dated.append((channel_of(row), visit_date))

    from_whatsapp = sum(1 for channel, _ in dated if channel == WHATSAPP)

    window_start = (now.astimezone(settings.zone) - timedelta(days=TREND_DAYS)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    daily: Dict[str, Dict[str, Any]] = {}
    for channel, visit_date in dated:
        if visit_date < window_start:
            continue
        day = visit_date.date().isoformat()
        bucket = daily.setdefault(day, {"date": day, WHATSAPP: 0, TELEPHONE: 0})
        bucket[channel] += 1

    trend: List[Dict[str, Any]] = [daily[day] for day in sorted(daily)]
    return {
        "total": len(dated),
        "from_whatsapp": from_whatsapp,
        "from_telefono": len(dated) - from_whatsapp,
        "daily": trend,
    }

"""Agenda statistics and the text summary handed to the agenda analysis."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List

from salondesk.core.models import CalendarEvent

WEEKDAYS_ES = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")
WINDOW_DAYS = 7


def events_on(events: Iterable[CalendarEvent], day: date) -> List[CalendarEvent]:
    return sorted((event for event in events if event.start.date() == day), key=lambda event: event.start)


def events_next_days(events: Iterable[CalendarEvent], now: datetime, days: int = WINDOW_DAYS) -> List[CalendarEvent]:
    """Events starting between today's midnight and ``days`` days later."""

    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    horizon = today + timedelta(days=days)
    return sorted(
        (event for event in events if today <= event.start < horizon),
        key=lambda event: event.start,
    )


def agenda_stats(events: List[CalendarEvent], day: date, now: datetime) -> Dict[str, int]:
    """KPI counts for the selected day plus the upcoming week.

    An event is completed once its start time has passed.
    """

    selected = events_on(events, day)
    completed = sum(1 for event in selected if event.start < now)
    return {
        "total": len(selected),
        "completed": completed,
        "pending": len(selected) - completed,
        "next_7_days": len(events_next_days(events, now)),
    }


def agenda_summary(events: Iterable[CalendarEvent]) -> str:
    """One line per appointment, e.g. ``- lunes 05: Corte con Ana a las 10:00``."""

    lines = []
    for event in events:
        weekday = WEEKDAYS_ES[event.start.weekday()]
        lines.append(
            f"- {weekday} {event.start:%d}: {event.service or event.title} "
            f"con {event.professional} a las {event.start:%H:%M}"
        )
    return "\n".join(lines)

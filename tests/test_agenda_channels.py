"""Tests for agenda statistics and booking channel analytics."""
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from salondesk.core.models import CalendarEvent
from salondesk.processing.agenda import agenda_stats, agenda_summary, events_next_days
from salondesk.processing.channels import channel_breakdown, channel_of

MADRID = ZoneInfo("Europe/Madrid")


def _event(uid, start, service="Corte", professional="Ana"):
    return CalendarEvent(
        uid=uid,
        start=start,
        end=start + timedelta(minutes=30),
        title=service,
        professional=professional,
        service=service,
    )


def _events():
    return [
        _event("a", datetime(2024, 8, 5, 10, 0, tzinfo=MADRID)),
        _event("b", datetime(2024, 8, 5, 17, 0, tzinfo=MADRID), service="Color", professional="Joana"),
        _event("c", datetime(2024, 8, 8, 12, 0, tzinfo=MADRID)),
        _event("d", datetime(2024, 8, 20, 12, 0, tzinfo=MADRID)),
        _event("e", datetime(2024, 8, 4, 12, 0, tzinfo=MADRID)),
    ]


def test_agenda_stats_split_completed_and_pending():
    now = datetime(2024, 8, 5, 12, 0, tzinfo=MADRID)

    stats = agenda_stats(_events(), date(2024, 8, 5), now)

    assert stats == {"total": 2, "completed": 1, "pending": 1, "next_7_days": 3}


def test_next_days_window_starts_at_midnight():
    now = datetime(2024, 8, 5, 23, 0, tzinfo=MADRID)

    assert [event.uid for event in events_next_days(_events(), now)] == ["a", "b", "c"]


def test_agenda_summary_lines():
    summary = agenda_summary(_events()[:2])

    assert summary.splitlines() == [
        "- lunes 05: Corte con Ana a las 10:00",
        "- lunes 05: Color con Joana a las 17:00",
    ]


def test_channel_of_defaults_to_phone():
    assert channel_of({"from": "WhatsApp"}) == "whatsapp"
    assert channel_of({"from": "instagram"}) == "telefono"
    assert channel_of({}) == "telefono"


def test_channel_breakdown_counts_dated_rows(dummy_rows, settings):
    now = datetime(2024, 8, 10, 9, 0, tzinfo=MADRID)

    summary = channel_breakdown(dummy_rows, settings, now)

    assert summary["total"] == 7
    assert summary["from_whatsapp"] == 3
    assert summary["from_telefono"] == 4
    assert summary["daily"] == [
        {"date": "2024-07-24", "whatsapp": 1, "telefono": 0},
        {"date": "2024-08-01", "whatsapp": 2, "telefono": 1},
        {"date": "2024-08-05", "whatsapp": 0, "telefono": 3},
    ]


def test_channel_trend_only_covers_last_thirty_days(dummy_rows, settings):
    now = datetime(2024, 9, 1, 9, 0, tzinfo=MADRID)

    daily = channel_breakdown(dummy_rows, settings, now)["daily"]

    assert [bucket["date"] for bucket in daily] == ["2024-08-05"]

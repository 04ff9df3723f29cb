"""Data ingestion package: webhook clients and value normalizers."""
from salondesk.ingestion.common import normalize_phone, parse_price, parse_visit_date
from salondesk.ingestion.webhooks import (
    fetch_agenda_events,
    fetch_reservations,
    send_appointment_action,
)

__all__ = [
    "fetch_agenda_events",
    "fetch_reservations",
    "normalize_phone",
    "parse_price",
    "parse_visit_date",
    "send_appointment_action",
]

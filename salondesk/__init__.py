"""Data layer for a salon dashboard: reservations in, clients and invoices out."""
from salondesk.analysis import LLMAnalyst, parse_analysis
from salondesk.core import (
    ClientProfile,
    DashboardSettings,
    Invoice,
    RawReservation,
    Session,
    configure_logging,
)
from salondesk.ingestion import (
    fetch_agenda_events,
    fetch_reservations,
    normalize_phone,
    parse_price,
    parse_visit_date,
    send_appointment_action,
)
from salondesk.messaging import ChatInbox
from salondesk.processing import (
    SyncController,
    aggregate_clients,
    aggregate_invoices,
    channel_breakdown,
    check_rows,
)
from salondesk.reporting import clients_to_rows, invoices_to_rows, write_csv, write_excel

__all__ = [
    "ChatInbox",
    "ClientProfile",
    "DashboardSettings",
    "Invoice",
    "LLMAnalyst",
    "RawReservation",
    "Session",
    "SyncController",
    "aggregate_clients",
    "aggregate_invoices",
    "channel_breakdown",
    "check_rows",
    "clients_to_rows",
    "configure_logging",
    "fetch_agenda_events",
    "fetch_reservations",
    "invoices_to_rows",
    "normalize_phone",
    "parse_analysis",
    "parse_price",
    "parse_visit_date",
    "send_appointment_action",
    "write_csv",
    "write_excel",
]

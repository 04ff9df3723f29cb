"""Aggregation of raw reservations into client, invoice, and agenda views."""
from salondesk.processing.agenda import agenda_stats, agenda_summary, events_next_days, events_on
from salondesk.processing.channels import channel_breakdown
from salondesk.processing.clients import ClientAggregation, aggregate_clients, client_kpis
from salondesk.processing.invoices import (
    InvoiceAggregation,
    aggregate_invoices,
    filter_invoices,
    invoice_kpis,
    toggle_status,
)
from salondesk.processing.rows import Ok, Skipped, check_row, check_rows
from salondesk.processing.sync import SyncController, ViewState

__all__ = [
    "ClientAggregation",
    "InvoiceAggregation",
    "Ok",
    "Skipped",
    "SyncController",
    "ViewState",
    "agenda_stats",
    "agenda_summary",
    "aggregate_clients",
    "aggregate_invoices",
    "channel_breakdown",
    "check_row",
    "check_rows",
    "client_kpis",
    "events_next_days",
    "events_on",
    "filter_invoices",
    "invoice_kpis",
    "toggle_status",
]

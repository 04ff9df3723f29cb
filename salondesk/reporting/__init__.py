"""Export destinations and row templates."""
from salondesk.reporting.sinks import ensure_output_dir, push_to_google_sheets, write_csv, write_excel
from salondesk.reporting.templates import (
    CLIENT_HEADERS,
    INVOICE_HEADERS,
    clients_to_rows,
    invoices_to_rows,
)

__all__ = [
    "CLIENT_HEADERS",
    "INVOICE_HEADERS",
    "clients_to_rows",
    "ensure_output_dir",
    "invoices_to_rows",
    "push_to_google_sheets",
    "write_csv",
    "write_excel",
]

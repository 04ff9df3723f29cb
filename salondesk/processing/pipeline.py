"""Batch orchestration: fetch reservations, aggregate, and export."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from salondesk.core.settings import DashboardSettings
from salondesk.ingestion.webhooks import fetch_reservations
from salondesk.processing.clients import aggregate_clients
from salondesk.processing.invoices import aggregate_invoices
from salondesk.reporting.sinks import push_to_google_sheets, write_csv, write_excel
from salondesk.reporting.templates import (
    CLIENT_HEADERS,
    INVOICE_HEADERS,
    clients_to_rows,
    invoices_to_rows,
)

logger = logging.getLogger(__name__)

VIEWS = ("clients", "invoices")
DEFAULT_SERVICE_ACCOUNT_PATHS = [
    Path("secrets/service_account.json"),
    Path("credentials/service_account.json"),
]


def load_rows(settings: DashboardSettings, input_path: Optional[Path] = None) -> List[Any]:
    """Read reservation rows from a JSON export, or from the webhook when no file is given."""

    if input_path is None:
        return fetch_reservations(settings)

    logger.info("Loading reservations from %s", input_path)
    data = json.loads(input_path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{input_path} must contain a JSON array of reservations")
    return data


def build_rows(view: str, rows: List[Any], settings: DashboardSettings) -> tuple[List[Dict[str, Any]], List[str], int]:
    """Aggregate raw rows for ``view`` and return (export rows, headers, skipped count)."""

    if view == "clients":
        result = aggregate_clients(rows, settings)
        return clients_to_rows(result.clients), CLIENT_HEADERS, len(result.skipped)
    if view == "invoices":
        result = aggregate_invoices(rows, settings)
        return invoices_to_rows(result.invoices), INVOICE_HEADERS, len(result.skipped)
    raise ValueError(f"Unknown view {view!r}; expected one of {', '.join(VIEWS)}")


def _default_service_account_path() -> Optional[Path]:
    for candidate in DEFAULT_SERVICE_ACCOUNT_PATHS:
        if candidate.exists():
            return candidate
    return None


def _resolve_sheets_target(
    spreadsheet_id: Optional[str],
    worksheet_title: str,
    explicit_account_path: Optional[Path],
) -> Dict[str, Any]:
    spreadsheet_id = spreadsheet_id or os.getenv("GOOGLE_SHEETS_SPREADSHEET_ID")
    if not spreadsheet_id:
        raise ValueError("spreadsheet_id is required when sink='sheets'")

    account_path = explicit_account_path or _default_service_account_path()
    if not account_path:
        raise ValueError(
            "Provide --service-account pointing to your Google credentials or place a file at "
            f"{DEFAULT_SERVICE_ACCOUNT_PATHS[0]}"
        )

    return {
        "spreadsheet_id": spreadsheet_id,
        "worksheet_title": worksheet_title,
        "service_account_path": account_path,
    }


def run_pipeline(
    view: str,
    settings: DashboardSettings,
    output_path: Path,
    input_path: Optional[Path] = None,
    sink: str = "csv",
    spreadsheet_id: str | None = None,
    worksheet_title: str = "Sheet1",
    service_account_path: Path | None = None,
    excel_path: Path | None = None,
) -> Path:
    """Load reservations, aggregate them into ``view``, and write the CSV summary."""

    logger.info("Pipeline starting for %s", view)
    raw_rows = load_rows(settings, input_path)
    rows, headers, skipped = build_rows(view, raw_rows, settings)
    if skipped:
        logger.warning("Skipped %d of %d reservation rows", skipped, len(raw_rows))

    write_csv(rows, output_path, headers=headers)
    logger.info("Wrote CSV output to %s", output_path)

    if sink == "excel":
        excel_target = excel_path or output_path.with_suffix(".xlsx")
        write_excel(rows, excel_target, sheet_title=view)
        logger.info("Wrote Excel output to %s", excel_target)
    elif sink == "sheets":
        target = _resolve_sheets_target(spreadsheet_id, worksheet_title, service_account_path)
        push_to_google_sheets(rows, **target)
        logger.info(
            "Pushed %d rows to Google Sheets document %s (worksheet %s)",
            len(rows),
            target["spreadsheet_id"],
            target["worksheet_title"],
        )
    return output_path

"""Daily invoice aggregation: one invoice per client name per calendar day."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List

from salondesk.core.models import STATUS_PAID, STATUS_PENDING, Invoice, InvoiceItem
from salondesk.core.settings import DashboardSettings
from salondesk.processing.rows import Ok, Skipped, check_rows, split_results

logger = logging.getLogger(__name__)

ALL = "todos"


@dataclass
class InvoiceAggregation:
    invoices: List[Invoice] = field(default_factory=list)
    skipped: List[Skipped] = field(default_factory=list)


def invoice_number_for(result: Ok) -> str:
    """Upstream id when the sheet has one, else ``F-<year>-<row index>``.

    The synthetic number depends on the row position, so it is not stable
    across refetches if rows are inserted upstream.
    """

    if result.reservation.invoice_id:
        return result.reservation.invoice_id
    return f"F-{result.date.year}-{result.index:03d}"


def aggregate_invoices(rows: Iterable[Any], settings: DashboardSettings) -> InvoiceAggregation:
    """Group raw reservation rows into daily invoices, newest first."""

    accepted, skipped = split_results(check_rows(rows, settings.zone))

    invoices: Dict[str, Invoice] = {}
    for result in accepted:
        # Keyed by name, not phone: namesakes on the same day share an invoice.
        invoice = invoices.get(result.invoice_key)
        if invoice is None:
            invoice = Invoice(
                invoice_number=invoice_number_for(result),
                client_name=result.name,
                client_phone=result.phone,
                date=result.date,
                status=STATUS_PAID if result.reservation.status == STATUS_PAID else STATUS_PENDING,
            )
            invoices[result.invoice_key] = invoice
        invoice.items.append(
            InvoiceItem(
                service=result.reservation.service,
                professional=result.reservation.professional,
                price=result.price,
            )
        )
        invoice.total_price += result.price

    for invoice in invoices.values():
        invoice.total_price = round(invoice.total_price, 2)
    ordered = sorted(invoices.values(), key=lambda inv: inv.date, reverse=True)
    logger.info("Aggregated %d invoices (%d rows skipped)", len(ordered), len(skipped))
    return InvoiceAggregation(invoices=ordered, skipped=skipped)


def invoice_kpis(invoices: List[Invoice], now: datetime) -> Dict[str, Any]:
    """Billed this month, invoice count, and pending count.

    ``now`` must be aware; invoice dates are compared in its zone.
    """

    def _in_current_month(invoice: Invoice) -> bool:
        local = invoice.date.astimezone(now.tzinfo)
        return local.year == now.year and local.month == now.month

    this_month = [inv for inv in invoices if _in_current_month(inv)]
    return {
        "billed_this_month": round(sum(inv.total_price for inv in this_month), 2),
        "total_invoices": len(invoices),
        "pending_invoices": sum(1 for inv in invoices if inv.status == STATUS_PENDING),
    }


def filter_invoices(
    invoices: Iterable[Invoice],
    search: str = "",
    status: str = ALL,
    professional: str = ALL,
) -> List[Invoice]:
    """Apply the search box and the status / professional dropdowns."""

    needle = search.strip().lower()
    filtered: List[Invoice] = []
    for invoice in invoices:
        if needle and needle not in invoice.client_name.lower() and needle not in invoice.invoice_number.lower():
            continue
        if status.lower() != ALL and invoice.status.lower() != status.lower():
            continue
        if professional != ALL and not any(item.professional == professional for item in invoice.items):
            continue
        filtered.append(invoice)
    return filtered


def toggle_status(invoices: Iterable[Invoice], invoice_number: str) -> List[Invoice]:
    """Flip Pagado/Pendiente for one invoice in local state only.

    Nothing is sent upstream, so the change is lost on the next sync.
    """

    toggled: List[Invoice] = []
    for invoice in invoices:
        if invoice.invoice_number == invoice_number:
            new_status = STATUS_PENDING if invoice.status == STATUS_PAID else STATUS_PAID
            invoice = replace(invoice, status=new_status, items=list(invoice.items))
        toggled.append(invoice)
    return toggled

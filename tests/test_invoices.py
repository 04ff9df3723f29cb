"""Tests for daily invoice aggregation and the invoice view helpers."""
from datetime import datetime
from zoneinfo import ZoneInfo

from salondesk.core.models import STATUS_PAID, STATUS_PENDING
from salondesk.core.settings import DashboardSettings
from salondesk.processing.invoices import (
    aggregate_invoices,
    filter_invoices,
    invoice_kpis,
    toggle_status,
)

MADRID = ZoneInfo("Europe/Madrid")


def _row(name, date, service, price, professional="Ana", phone="612345678", **extra):
    row = {
        "Nombre completo": name,
        "Telefono": phone,
        "Fecha y hora": date,
        "Profesional deseado": professional,
        "Servicio": service,
        "Precio (€)": price,
    }
    row.update(extra)
    return row


def test_same_name_same_day_becomes_one_invoice(settings: DashboardSettings):
    rows = [
        _row("Ana Ruiz", "01/08/2024 10:00:00", "Corte", "15,00 €"),
        _row("Ana Ruiz", "01/08/2024 11:30:00", "Color", "40 €", professional="Joana"),
    ]

    invoices = aggregate_invoices(rows, settings).invoices

    assert len(invoices) == 1
    invoice = invoices[0]
    assert len(invoice.items) == 2
    assert invoice.total_price == 55.0
    assert invoice.status == STATUS_PENDING
    assert invoice.invoice_number == "F-2024-000"


def test_same_client_on_two_days_gets_two_invoices(settings: DashboardSettings):
    rows = [
        _row("Ana Ruiz", "24/07/2024 10:00:00", "Corte", "15 €"),
        _row("Ana Ruiz", "01/08/2024 11:00:00", "Color", "40 €"),
    ]

    invoices = aggregate_invoices(rows, settings).invoices

    assert [inv.invoice_number for inv in invoices] == ["F-2024-001", "F-2024-000"]


def test_namesakes_on_the_same_day_share_an_invoice(settings: DashboardSettings):
    rows = [
        _row("Ana Ruiz", "01/08/2024 10:00:00", "Corte", "15 €", phone="612345678"),
        _row("Ana Ruiz", "01/08/2024 12:00:00", "Corte", "15 €", phone="699999999"),
    ]

    invoices = aggregate_invoices(rows, settings).invoices

    assert len(invoices) == 1
    assert invoices[0].client_phone == "+34612345678"


def test_upstream_id_and_paid_state_are_honored(settings: DashboardSettings):
    rows = [_row("Ana Ruiz", "01/08/2024 10:00:00", "Corte", "15 €", **{"id ": "FAC-77", "Estado": "Pagado"})]

    invoice = aggregate_invoices(rows, settings).invoices[0]

    assert invoice.invoice_number == "FAC-77"
    assert invoice.status == STATUS_PAID


def test_dummy_data_invoices(dummy_rows, settings: DashboardSettings):
    result = aggregate_invoices(dummy_rows, settings)

    summary = [(inv.client_name, inv.date.date().isoformat(), inv.total_price) for inv in result.invoices]
    assert summary == [
        ("Pedro Sanz", "2024-08-05", 0.0),
        ("Marta López", "2024-08-01", 45.5),
        ("Ana Ruiz", "2024-08-01", 40.0),
        ("Ana Ruiz", "2024-07-24", 15.0),
    ]
    assert len(result.skipped) == 3
    assert result.invoices[0].invoice_number == "F-2024-007"


def test_invalid_calendar_date_is_dropped_not_raised(settings: DashboardSettings):
    rows = [_row("Luis", "31/02/2024 10:00:00", "Corte", "12 €")]

    result = aggregate_invoices(rows, settings)

    assert result.invoices == []
    assert result.skipped[0].reason == "unparseable date"


def test_invoice_kpis_count_current_month(dummy_rows, settings: DashboardSettings):
    invoices = aggregate_invoices(dummy_rows, settings).invoices
    now = datetime(2024, 8, 20, 9, 0, tzinfo=MADRID)

    kpis = invoice_kpis(invoices, now)

    assert kpis == {"billed_this_month": 85.5, "total_invoices": 4, "pending_invoices": 4}


def test_filter_invoices(dummy_rows, settings: DashboardSettings):
    invoices = aggregate_invoices(dummy_rows, settings).invoices

    assert [inv.client_name for inv in filter_invoices(invoices, search="marta")] == ["Marta López"]
    assert [inv.invoice_number for inv in filter_invoices(invoices, search="f-2024-007")] == ["F-2024-007"]
    assert len(filter_invoices(invoices, professional="Maria")) == 1
    assert filter_invoices(invoices, status="pagado") == []
    assert len(filter_invoices(invoices, status="Pendiente")) == 4


def test_toggle_status_is_local_and_reversible(dummy_rows, settings: DashboardSettings):
    invoices = aggregate_invoices(dummy_rows, settings).invoices

    toggled = toggle_status(invoices, "F-2024-002")
    restored = toggle_status(toggled, "F-2024-002")

    assert next(inv for inv in toggled if inv.invoice_number == "F-2024-002").status == STATUS_PAID
    assert next(inv for inv in invoices if inv.invoice_number == "F-2024-002").status == STATUS_PENDING
    assert next(inv for inv in restored if inv.invoice_number == "F-2024-002").status == STATUS_PENDING
    # A fresh aggregation starts from Pendiente again.
    assert all(inv.status == STATUS_PENDING for inv in aggregate_invoices(dummy_rows, settings).invoices)


def test_aggregation_is_deterministic(dummy_rows, settings: DashboardSettings):
    first = [inv.to_dict() for inv in aggregate_invoices(dummy_rows, settings).invoices]
    second = [inv.to_dict() for inv in aggregate_invoices(dummy_rows, settings).invoices]

    assert first == second


def test_total_is_rounded_once_after_summing(settings: DashboardSettings):
    rows = [_row("Ana Ruiz", f"01/08/2024 1{hour}:00:00", "Retoque", "0,333 €") for hour in range(3)]

    invoice = aggregate_invoices(rows, settings).invoices[0]

    assert invoice.total_price == 1.0

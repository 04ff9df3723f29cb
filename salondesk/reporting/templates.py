"""Mapping utilities that flatten clients and invoices into export rows."""
from typing import Any, Dict, Iterable, List

from salondesk.core.models import ClientProfile, Invoice

CLIENT_HEADERS = [
    "Nombre",
    "Telefono",
    "Visitas Totales",
    "Ultima Visita",
    "Profesionales",
    "Total Gastado",
]

INVOICE_HEADERS = [
    "Factura",
    "Cliente",
    "Telefono",
    "Fecha",
    "Servicios",
    "Profesionales",
    "Total",
    "Estado",
]


def _format_amount(value: float) -> str:
    return f"{value:.2f}"


def _join(values: Iterable[Any]) -> str:
    return ", ".join(str(value) for value in values if value)


def client_to_row(client: ClientProfile) -> Dict[str, Any]:
    return {
        "Nombre": client.name,
        "Telefono": client.phone,
        "Visitas Totales": client.total_visits,
        "Ultima Visita": client.last_visit.strftime("%Y-%m-%d %H:%M"),
        "Profesionales": _join(client.professionals),
        "Total Gastado": _format_amount(client.total_spent),
    }


def invoice_to_row(invoice: Invoice) -> Dict[str, Any]:
    return {
        "Factura": invoice.invoice_number,
        "Cliente": invoice.client_name,
        "Telefono": invoice.client_phone,
        "Fecha": invoice.date.date().isoformat(),
        "Servicios": _join(item.service for item in invoice.items),
        "Profesionales": _join(dict.fromkeys(item.professional for item in invoice.items)),
        "Total": _format_amount(invoice.total_price),
        "Estado": invoice.status,
    }


def clients_to_rows(clients: Iterable[ClientProfile]) -> List[Dict[str, Any]]:
    return [client_to_row(client) for client in clients]


def invoices_to_rows(invoices: Iterable[Invoice]) -> List[Dict[str, Any]]:
    return [invoice_to_row(invoice) for invoice in invoices]

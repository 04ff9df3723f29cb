"""Data models for reservations and the aggregates derived from them."""
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

NAME_FIELD = "Nombre completo"
PHONE_FIELD = "Telefono"
DATE_FIELD = "Fecha y hora"
PROFESSIONAL_FIELD = "Profesional deseado"
SERVICE_FIELD = "Servicio"
PRICE_FIELDS = ("Precio (€)", "Precio")
CHANNEL_FIELD = "from"
# The upstream sheet header carries a trailing space.
INVOICE_ID_FIELD = "id "
STATUS_FIELD = "Estado"

STATUS_PAID = "Pagado"
STATUS_PENDING = "Pendiente"


@dataclass(frozen=True)
class RawReservation:
    """One booking row exactly as received from the reservations webhook."""

    full_name: Optional[str] = None
    phone: Any = None
    date_text: Optional[str] = None
    professional: Optional[str] = None
    service: Optional[str] = None
    price: Any = None
    channel: Optional[str] = None
    invoice_id: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "RawReservation":
        """Map the webhook's Spanish column names onto fields."""

        price = None
        for key in PRICE_FIELDS:
            if row.get(key) not in (None, ""):
                price = row[key]
                break
        invoice_id = row.get(INVOICE_ID_FIELD) or row.get(INVOICE_ID_FIELD.strip())
        date_text = row.get(DATE_FIELD)
        return cls(
            full_name=row.get(NAME_FIELD),
            phone=row.get(PHONE_FIELD),
            date_text=str(date_text) if date_text is not None else None,
            professional=row.get(PROFESSIONAL_FIELD),
            service=row.get(SERVICE_FIELD),
            price=price,
            channel=row.get(CHANNEL_FIELD),
            invoice_id=str(invoice_id).strip() if invoice_id else None,
            status=row.get(STATUS_FIELD),
        )


@dataclass(frozen=True)
class ClientVisit:
    date: datetime
    service: Optional[str]
    professional: Optional[str]
    price: float


@dataclass
class ClientProfile:
    """All-time view of one client, keyed by name and normalized phone."""

    id: str
    name: str
    phone: str
    total_visits: int
    last_visit: datetime
    professionals: List[str] = field(default_factory=list)
    visits: List[ClientVisit] = field(default_factory=list)

    @property
    def total_spent(self) -> float:
        return round(sum(visit.price for visit in self.visits), 2)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dictionary (datetimes as ISO strings)."""

        data = asdict(self)
        data["last_visit"] = self.last_visit.isoformat()
        data["visits"] = [{**visit, "date": visit["date"].isoformat()} for visit in data["visits"]]
        data["total_spent"] = self.total_spent
        return data


@dataclass(frozen=True)
class InvoiceItem:
    service: Optional[str]
    professional: Optional[str]
    price: float


@dataclass
class Invoice:
    """Daily invoice for one client: every line item booked that calendar day."""

    invoice_number: str
    client_name: str
    client_phone: str
    date: datetime
    items: List[InvoiceItem] = field(default_factory=list)
    total_price: float = 0.0
    status: str = STATUS_PENDING

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


@dataclass
class CalendarEvent:
    """Appointment returned by the agenda webhook."""

    uid: str
    start: datetime
    end: datetime
    title: str
    professional: str
    status: str = "Confirmed"
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    service: Optional[str] = None
    description: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for the appointments webhook (ISO timestamps, upstream key names)."""

        return {
            "uid": self.uid,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "title": self.title,
            "service": self.service,
            "clientName": self.client_name,
            "professional_asignado": self.professional,
        }

"""Per-row checks that turn raw webhook rows into tagged results."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Iterable, List, Union

from salondesk.core.models import RawReservation
from salondesk.ingestion.common import normalize_phone, parse_price, parse_visit_date

logger = logging.getLogger(__name__)

REASON_NOT_OBJECT = "row is not an object"
REASON_MISSING_NAME = "missing name"
REASON_MISSING_PHONE = "missing phone"
REASON_MISSING_DATE = "missing date"
REASON_INVALID_DATE = "unparseable date"


@dataclass(frozen=True)
class Ok:
    """A row that survived validation, with its values already normalized."""

    index: int
    reservation: RawReservation
    name: str
    phone: str
    date: datetime
    price: float

    @property
    def client_key(self) -> str:
        return f"{self.name.lower()}-{self.phone}"

    @property
    def invoice_key(self) -> str:
        return f"{self.name.lower()}-{self.date.date().isoformat()}"


@dataclass(frozen=True)
class Skipped:
    """A row dropped from every aggregate, and why."""

    index: int
    reason: str


RowResult = Union[Ok, Skipped]


def check_row(row: Any, index: int, zone: tzinfo) -> RowResult:
    """Validate and normalize a single raw row."""

    if not isinstance(row, dict):
        return Skipped(index, REASON_NOT_OBJECT)

    reservation = RawReservation.from_dict(row)
    name = str(reservation.full_name).strip() if reservation.full_name is not None else ""
    if not name:
        return Skipped(index, REASON_MISSING_NAME)

    phone = normalize_phone(reservation.phone)
    if not phone:
        return Skipped(index, REASON_MISSING_PHONE)

    if not reservation.date_text or not reservation.date_text.strip():
        return Skipped(index, REASON_MISSING_DATE)
    visit_date = parse_visit_date(reservation.date_text, zone)
    if visit_date is None:
        return Skipped(index, REASON_INVALID_DATE)

    return Ok(
        index=index,
        reservation=reservation,
        name=name,
        phone=phone,
        date=visit_date,
        price=parse_price(reservation.price),
    )


def check_rows(rows: Iterable[Any], zone: tzinfo) -> List[RowResult]:
    """Tag every row as ``Ok`` or ``Skipped``, preserving input order."""

    results: List[RowResult] = []
    for index, row in enumerate(rows):
        result = check_row(row, index, zone)
        if isinstance(result, Skipped):
            logger.debug("Skipping row %d: %s", index, result.reason)
        results.append(result)
    return results


def split_results(results: Iterable[RowResult]) -> tuple[List[Ok], List[Skipped]]:
    accepted: List[Ok] = []
    skipped: List[Skipped] = []
    for result in results:
        if isinstance(result, Ok):
            accepted.append(result)
        else:
            skipped.append(result)
    return accepted, skipped

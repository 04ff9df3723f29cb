"""Client profile aggregation: one profile per name + normalized phone."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from salondesk.core.models import ClientProfile, ClientVisit
from salondesk.core.settings import DashboardSettings
from salondesk.processing.rows import Ok, Skipped, check_rows, split_results

logger = logging.getLogger(__name__)

TOP_CLIENTS = 5


@dataclass
class ClientAggregation:
    clients: List[ClientProfile] = field(default_factory=list)
    skipped: List[Skipped] = field(default_factory=list)


def aggregate_clients(rows: Iterable[Any], settings: DashboardSettings) -> ClientAggregation:
    """Group raw reservation rows into client profiles.

    Visits inside each profile are sorted newest-first; profiles are sorted
    by visit count (descending) with ties kept in first-seen order.
    """

    accepted, skipped = split_results(check_rows(rows, settings.zone))

    grouped: Dict[str, List[Ok]] = {}
    for result in accepted:
        grouped.setdefault(result.client_key, []).append(result)

    clients = [_build_profile(key, entries) for key, entries in grouped.items()]
    clients.sort(key=lambda client: client.total_visits, reverse=True)

    logger.info("Aggregated %d clients (%d rows skipped)", len(clients), len(skipped))
    return ClientAggregation(clients=clients, skipped=skipped)


def _build_profile(key: str, entries: List[Ok]) -> ClientProfile:
    first = entries[0]
    last_visit = first.date
    professionals: List[str] = []
    visits: List[ClientVisit] = []

    for entry in entries:
        if entry.date > last_visit:
            last_visit = entry.date
        professional = entry.reservation.professional
        if professional and professional not in professionals:
            professionals.append(professional)
        visits.append(
            ClientVisit(
                date=entry.date,
                service=entry.reservation.service,
                professional=professional,
                price=entry.price,
            )
        )

    visits.sort(key=lambda visit: visit.date, reverse=True)
    return ClientProfile(
        id=key,
        name=first.name,
        phone=first.phone,
        total_visits=len(entries),
        last_visit=last_visit,
        professionals=professionals,
        visits=visits,
    )


def client_kpis(clients: List[ClientProfile]) -> Dict[str, Any]:
    """Headline numbers for the clients view."""

    if not clients:
        return {"total": 0, "top_clients": [], "avg_visits": 0.0}

    total_visits = sum(client.total_visits for client in clients)
    return {
        "total": len(clients),
        "top_clients": clients[:TOP_CLIENTS],
        "avg_visits": round(total_visits / len(clients), 1),
    }

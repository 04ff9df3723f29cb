"""Clients for the automation webhooks that hold reservations and the agenda."""
from __future__ import annotations

import json
import logging
import time
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

import requests

from salondesk.core.errors import WebhookError
from salondesk.core.models import CalendarEvent
from salondesk.core.settings import DashboardSettings

logger = logging.getLogger(__name__)

APPOINTMENT_ACTIONS = ("create", "delete")


def _cache_buster(clock: Callable[[], float]) -> int:
    return int(clock() * 1000)


def _post(url: str, payload: Mapping[str, Any], timeout: float, http: Any = None) -> requests.Response:
    """POST JSON and raise ``WebhookError`` for network or HTTP failures."""

    client = http or requests
    try:
        response = client.post(url, json=dict(payload), timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Webhook call to %s failed: %s", url, exc)
        raise WebhookError(f"Network error: {exc}") from exc
    return response


def fetch_reservations(
    settings: DashboardSettings,
    http: Any = None,
    clock: Callable[[], float] = time.time,
) -> List[Any]:
    """Download every reservation row from the reservations webhook.

    The body only carries a cache-busting timestamp. The webhook must answer
    with a JSON array; anything else is reported as a ``WebhookError``.
    """

    url = settings.require("reservations_webhook_url")
    logger.info("Fetching reservations from %s", url)
    response = _post(url, {"cb": _cache_buster(clock)}, settings.request_timeout, http)
    try:
        data = response.json()
    except ValueError as exc:
        raise WebhookError("Reservations webhook did not return valid JSON") from exc
    if not isinstance(data, list):
        raise WebhookError(f"Reservations webhook returned {type(data).__name__}, expected a list")
    logger.info("Fetched %d reservation rows", len(data))
    return data


def fetch_agenda_events(
    settings: DashboardSettings,
    day: date,
    http: Any = None,
    clock: Callable[[], float] = time.time,
) -> List[CalendarEvent]:
    """Fetch calendar events around ``day`` from the agenda webhook."""

    url = settings.require("agenda_webhook_url")
    payload = {"day": day.isoformat(), "cb": _cache_buster(clock)}
    response = _post(url, payload, settings.request_timeout, http)

    body = response.text
    if not body or not body.strip():
        return []
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise WebhookError("Agenda webhook did not return valid JSON") from exc

    if not (isinstance(data, dict) and data.get("ok") and isinstance(data.get("items"), list)):
        logger.info("Agenda webhook returned no items")
        return []

    events: List[CalendarEvent] = []
    for item in data["items"]:
        event = _parse_event(item, settings)
        if event is not None:
            events.append(event)
    logger.info("Loaded %d agenda events", len(events))
    return events


def _parse_event(item: Any, settings: DashboardSettings) -> Optional[CalendarEvent]:
    if not isinstance(item, dict):
        return None
    start = _parse_iso(item.get("start"), settings)
    end = _parse_iso(item.get("end"), settings)
    if start is None or end is None:
        logger.debug("Dropping agenda item %r with invalid start/end", item.get("id"))
        return None
    return CalendarEvent(
        uid=str(item.get("id") or item.get("uid") or ""),
        start=start,
        end=end,
        title=item.get("title") or item.get("service") or "",
        professional=item.get("professional") or item.get("professional_asignado") or "",
        status=item.get("status") or "Confirmed",
        client_name=item.get("clientName"),
        client_phone=item.get("clientPhone"),
        service=item.get("service"),
        description=item.get("description"),
    )


def _parse_iso(raw: Any, settings: DashboardSettings) -> Optional[datetime]:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    zone = settings.zone
    return parsed.replace(tzinfo=zone) if parsed.tzinfo is None else parsed.astimezone(zone)


def send_appointment_action(
    settings: DashboardSettings,
    action: str,
    event: CalendarEvent | Dict[str, Any],
    http: Any = None,
) -> None:
    """Ask the automation system to create or delete an appointment.

    Fire-and-forget: the response body is ignored, only HTTP success matters.
    """

    if action not in APPOINTMENT_ACTIONS:
        raise ValueError(f"Unsupported appointment action {action!r}")
    url = settings.require("appointments_webhook_url")

    if isinstance(event, CalendarEvent):
        event_payload = event.to_payload()
    else:
        event_payload = {
            key: value.isoformat() if isinstance(value, datetime) else value
            for key, value in event.items()
        }

    _post(url, {"action": action, "event": event_payload}, settings.request_timeout, http)
    logger.info("Sent %s appointment action to %s", action, url)

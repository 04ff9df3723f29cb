"""Shared helpers for normalizing raw reservation values."""
from __future__ import annotations

import math
import re
from datetime import datetime, tzinfo
from typing import Any

# Tried in order; the first pattern guards the strict two-digit layout.
DATE_LAYOUTS = [
    (re.compile(r"^\d{2}/\d{2}/\d{4} \d{2}:\d{2}:\d{2}$"), "%d/%m/%Y %H:%M:%S"),
    (re.compile(r"^\d{1,2}/\d{1,2}/\d{4} \d{2}:\d{2}:\d{2}$"), "%d/%m/%Y %H:%M:%S"),
]

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_visit_date(raw: Any, zone: tzinfo) -> datetime | None:
    """Parse a reservation timestamp into an aware datetime in ``zone``.

    Accepts ``dd/MM/yyyy HH:mm:ss``, then ``d/M/yyyy HH:mm:ss``, then an
    ISO/SQL timestamp. Returns ``None`` when nothing matches or the calendar
    date does not exist (``31/02/2024``); never raises.
    """

    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not text:
        return None

    for pattern, fmt in DATE_LAYOUTS:
        if not pattern.match(text):
            continue
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=zone)
        except ValueError:
            continue

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=zone)
    return parsed.astimezone(zone)


def normalize_phone(raw: Any) -> str | None:
    """Return a ``+``-prefixed phone; bare 9-digit numbers are assumed Spanish."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, float):
        if math.isnan(raw):
            return None
        if raw.is_integer():
            raw = int(raw)

    phone = re.sub(r"\s+", "", str(raw))
    if not phone:
        return None
    if phone.startswith("+"):
        return phone
    if len(phone) == 9 and phone.isdigit():
        return f"+34{phone}"
    return f"+{phone}"


def parse_price(raw: Any) -> float:
    """Convert a price like ``"12,50 €"`` or ``40`` into a float, ``0.0`` on failure."""

    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
        return 0.0 if math.isnan(value) else value

    normalized = re.sub(r"[€\s]", "", str(raw)).replace(",", ".", 1)
    match = _LEADING_NUMBER.match(normalized)
    if not match:
        return 0.0
    value = float(match.group(0))
    return 0.0 if math.isnan(value) or math.isinf(value) else value

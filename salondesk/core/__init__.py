"""Core building blocks for the salondesk package."""
from salondesk.core.errors import (
    AccessDeniedError,
    ConfigurationError,
    SalonDeskError,
    WebhookError,
)
from salondesk.core.logging import configure_logging
from salondesk.core.models import (
    CalendarEvent,
    ClientProfile,
    ClientVisit,
    Invoice,
    InvoiceItem,
    RawReservation,
)
from salondesk.core.settings import DashboardSettings, Profile, Session

__all__ = [
    "AccessDeniedError",
    "CalendarEvent",
    "ClientProfile",
    "ClientVisit",
    "ConfigurationError",
    "DashboardSettings",
    "Invoice",
    "InvoiceItem",
    "Profile",
    "RawReservation",
    "SalonDeskError",
    "Session",
    "WebhookError",
    "configure_logging",
]

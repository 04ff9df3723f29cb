"""Explicit configuration and session objects passed into every operation."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from salondesk.core.errors import AccessDeniedError, ConfigurationError
from salondesk.core.utils import get_config_value, load_env_file

DEFAULT_TIMEZONE = "Europe/Madrid"
DEFAULT_ENV_FILE = Path("secrets/salondesk.env")
_ENV_LOADED = False

# Keys of the backend settings blob mapped onto DashboardSettings fields.
_BLOB_FIELDS = {
    "clients_webhook_url": "reservations_webhook_url",
    "agenda_webhook_url": "agenda_webhook_url",
    "citas_webhook_url": "appointments_webhook_url",
    "sync_interval": "sync_interval_minutes",
}


def _ensure_env() -> None:
    """Populate os.environ from the local secrets file once per process."""

    global _ENV_LOADED
    if _ENV_LOADED:
        return
    _ENV_LOADED = True
    env_path = Path(os.getenv("SALONDESK_ENV_FILE", DEFAULT_ENV_FILE))
    load_env_file(env_path)


@dataclass(frozen=True)
class DashboardSettings:
    """Webhook endpoints, zone, and sync cadence for one salon."""

    reservations_webhook_url: Optional[str] = None
    agenda_webhook_url: Optional[str] = None
    appointments_webhook_url: Optional[str] = None
    timezone: str = DEFAULT_TIMEZONE
    sync_interval_minutes: int = 0
    request_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "DashboardSettings":
        """Build settings from Streamlit secrets or environment variables."""

        _ensure_env()
        return cls(
            reservations_webhook_url=get_config_value("RESERVATIONS_WEBHOOK_URL") or None,
            agenda_webhook_url=get_config_value("AGENDA_WEBHOOK_URL") or None,
            appointments_webhook_url=get_config_value("APPOINTMENTS_WEBHOOK_URL") or None,
            timezone=get_config_value("SALON_TIMEZONE", DEFAULT_TIMEZONE),
            sync_interval_minutes=_as_int(get_config_value("SYNC_INTERVAL_MINUTES", "0")),
            request_timeout=float(get_config_value("WEBHOOK_TIMEOUT", "30") or 30),
        )

    def with_overrides(self, blob: Mapping[str, Any] | None) -> "DashboardSettings":
        """Layer a backend settings blob (``user_settings.settings``) over these values."""

        if not blob:
            return self
        updates: Dict[str, Any] = {}
        for key, field_name in _BLOB_FIELDS.items():
            value = blob.get(key)
            if value in (None, ""):
                continue
            updates[field_name] = _as_int(value) if field_name == "sync_interval_minutes" else str(value)
        return replace(self, **updates) if updates else self

    @property
    def zone(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(
                f"Unknown timezone {self.timezone!r}; use an IANA name such as {DEFAULT_TIMEZONE}"
            ) from exc

    def require(self, field_name: str) -> str:
        """Return a configured URL or raise ``ConfigurationError`` naming the missing key."""

        value = getattr(self, field_name)
        if not value:
            raise ConfigurationError(f"{field_name} is not configured; set it in the dashboard settings")
        return value


@dataclass(frozen=True)
class Profile:
    """Row of the ``profiles`` table."""

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    is_admin: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Profile":
        return cls(
            id=str(row.get("id", "")),
            email=row.get("email"),
            full_name=row.get("full_name"),
            is_admin=bool(row.get("is_admin")),
        )


@dataclass(frozen=True)
class Session:
    """Authenticated user context handed to views instead of a global provider."""

    profile: Optional[Profile] = None

    @property
    def is_admin(self) -> bool:
        return bool(self.profile and self.profile.is_admin)

    def require_admin(self) -> None:
        if not self.is_admin:
            raise AccessDeniedError("Only administrators can view this section")


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0

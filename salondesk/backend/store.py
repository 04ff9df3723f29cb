"""Supabase-backed profile and settings storage."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from supabase import AuthError, Client, create_client

from salondesk.core.errors import AccessDeniedError, ConfigurationError
from salondesk.core.settings import Profile
from salondesk.core.utils import get_config_value

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
SETTINGS_TABLE = "user_settings"
CHATS_VIEW = "chats_v"
MESSAGES_TABLE = "messages"


def create_backend_client() -> Client:
    """Create a Supabase client from ``SUPABASE_URL`` / ``SUPABASE_KEY``."""

    url = get_config_value("SUPABASE_URL")
    key = get_config_value("SUPABASE_KEY")
    if not url or not key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must be set")
    return create_client(url, key)


class ProfileStore:
    """Reads profile rows and reads/writes the per-user settings blob."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def get_profile(self, user_id: str) -> Optional[Profile]:
        result = (
            self.client.table(PROFILES_TABLE)
            .select("id, email, full_name, is_admin")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        rows = result.data or []
        return Profile.from_row(rows[0]) if rows else None

    def sign_in(self, email: str, password: str) -> Profile:
        """Authenticate with email and password and return the caller's profile.

        Rejected credentials and accounts without a profile row raise
        ``AccessDeniedError``.
        """

        try:
            auth = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as exc:
            logger.warning("Sign-in rejected for %s: %s", email, exc)
            raise AccessDeniedError(f"Inicio de sesión rechazado: {exc}") from exc
        user = getattr(auth, "user", None)
        profile = self.get_profile(str(user.id)) if user else None
        if profile is None:
            raise AccessDeniedError("No existe un perfil para este usuario")
        return profile

    def find_admin_id(self) -> Optional[str]:
        """Return the earliest-created admin, whose settings are shared by the salon."""

        result = (
            self.client.table(PROFILES_TABLE)
            .select("id")
            .eq("is_admin", True)
            .order("created_at")
            .limit(1)
            .execute()
        )
        rows = result.data or []
        return str(rows[0]["id"]) if rows else None

    def load_user_settings(self, user_id: str) -> Dict[str, Any]:
        result = (
            self.client.table(SETTINGS_TABLE)
            .select("settings")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        rows = result.data or []
        if not rows:
            return {}
        return dict(rows[0].get("settings") or {})

    def load_admin_settings(self) -> Dict[str, Any]:
        admin_id = self.find_admin_id()
        if admin_id is None:
            logger.warning("No admin profile found; using empty shared settings")
            return {}
        return self.load_user_settings(admin_id)

    def save_user_settings(self, user_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        """Merge ``updates`` into the stored blob and upsert it."""

        if not user_id:
            raise ValueError("user_id is required to save settings")
        merged = {**self.load_user_settings(user_id), **dict(updates)}
        self.client.table(SETTINGS_TABLE).upsert(
            {"user_id": user_id, "settings": merged}, on_conflict="user_id"
        ).execute()
        logger.info("Saved %d settings keys for user %s", len(updates), user_id)
        return merged

    def load_chats(self) -> List[Dict[str, Any]]:
        """Conversation rows, most recent first."""

        result = self.client.table(CHATS_VIEW).select("*").order("last_message_at", desc=True).execute()
        return list(result.data or [])

    def load_messages(self, chat_id: str) -> List[Dict[str, Any]]:
        result = (
            self.client.table(MESSAGES_TABLE)
            .select("*")
            .eq("chat_id", chat_id)
            .order("created_at")
            .execute()
        )
        return list(result.data or [])

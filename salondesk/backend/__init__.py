"""Backend (Supabase) access for profiles and settings."""
from salondesk.backend.store import ProfileStore, create_backend_client

__all__ = ["ProfileStore", "create_backend_client"]

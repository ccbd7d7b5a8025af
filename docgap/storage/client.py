"""Supabase client for the object store."""

from supabase import Client, create_client

from docgap.config import Settings, get_settings


def get_supabase_client(settings: Settings | None = None) -> Client:
    """Build a service-role client; storage access needs the service key."""
    settings = settings or get_settings()
    return create_client(settings.supabase_url, settings.supabase_service_key)

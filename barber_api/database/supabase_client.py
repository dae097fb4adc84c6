from typing import Optional

from supabase import AsyncClient, acreate_client
from barber_api.config import settings


class SupabaseClient:
    """Process-wide Supabase clients, created once at application startup."""

    _client: Optional[AsyncClient] = None
    _auth_client: Optional[AsyncClient] = None

    @classmethod
    async def init(cls) -> None:
        if cls._client is None:
            key = settings.supabase_service_role_key or settings.supabase_key
            cls._client = await acreate_client(settings.supabase_url, key)
        if cls._auth_client is None:
            # Sign-in stores a session on the client it runs on, so password
            # flows get their own client and never touch the table client.
            cls._auth_client = await acreate_client(settings.supabase_url, settings.supabase_key)

    @classmethod
    def get_client(cls) -> AsyncClient:
        if cls._client is None:
            raise RuntimeError("Supabase client is not initialized")
        return cls._client

    @classmethod
    def get_auth_client(cls) -> AsyncClient:
        """Client with the anon key; used for sign-up and password sign-in."""
        if cls._auth_client is None:
            raise RuntimeError("Supabase auth client is not initialized")
        return cls._auth_client

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._auth_client = None


def get_supabase() -> AsyncClient:
    return SupabaseClient.get_client()


def get_supabase_auth() -> AsyncClient:
    return SupabaseClient.get_auth_client()

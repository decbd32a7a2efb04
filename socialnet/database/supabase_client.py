from supabase import create_client, Client
from socialnet.config.settings import settings
from typing import Callable

UserClientFactory = Callable[[str], Client]


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with the service_role key; bypasses RLS, so PolicyGateway does the checks.

        Without SUPABASE_SERVICE_ROLE_KEY this falls back to the anon client. The
        gateway then runs on top of database RLS with no user JWT attached:
        auth.uid() is null there, so only the public SELECT policies pass and
        every write is refused by the database.
        """
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def get_user_client(cls, access_token: str) -> Client:
        """Fresh anon-key client signed in with the caller's token (never cached)"""
        client = create_client(settings.supabase_url, settings.supabase_key)
        # refresh token unused while the access token is still valid
        client.auth.set_session(access_token, "")
        return client

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()


def get_user_client_factory() -> UserClientFactory:
    return SupabaseClient.get_user_client

from supabase import create_client, Client
from rateboard.config.settings import settings
from typing import Any, Callable, Dict, List

# PostgREST returns at most this many rows per request (Supabase default max-rows)
PAGE_SIZE = 1000


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
        """Client with service_role key; bypasses RLS. Row policies are enforced in rateboard.core.policies."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def has_service_client(cls) -> bool:
        return bool(settings.supabase_service_role_key)

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def fetch_all(build_query: Callable[[], Any], page_size: int = PAGE_SIZE) -> List[Dict[str, Any]]:
    """
    Run a select page by page until a short page comes back.

    `build_query` must return a fresh, ordered select builder on every call;
    each page is requested with `.limit()` and `.offset()`.
    """
    rows: List[Dict[str, Any]] = []
    start = 0
    while True:
        page = build_query().limit(page_size).offset(start).execute().data or []
        rows.extend(page)
        if len(page) < page_size:
            return rows
        start += page_size


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()

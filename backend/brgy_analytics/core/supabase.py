"""
Supabase Client Configuration

Provides configured Supabase clients and the Supabase-backed record store
used by the analytics engine.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import create_client, Client

from .config import get_settings
from .store import CollectionNotFound, Record, RecordStoreError

logger = logging.getLogger(__name__)

# PostgreSQL "undefined_table" and PostgREST "relation not in schema cache"
_MISSING_TABLE_CODES = {"42P01", "PGRST205"}

# PostgREST default max-rows
DEFAULT_PAGE_SIZE = 1000


@lru_cache()
def get_supabase_admin() -> Client:
    """
    Get Supabase client with service role key.
    Used for server-side operations (bypasses RLS).
    """
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_service_key)


def get_user_by_id(user_id: str) -> dict | None:
    """Get user profile by ID."""
    client = get_supabase_admin()
    result = client.table("users").select("*").eq("id", user_id).limit(1).execute()
    return result.data[0] if result.data else None


class SupabaseRecordStore:
    """
    Record store over Supabase tables, one table per collection.

    The Supabase client is synchronous; each call runs in a worker thread so
    that reads gathered by the caller actually overlap.
    """

    def __init__(
        self,
        client: Client,
        key_columns: Optional[Dict[str, str]] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.client = client
        self.page_size = page_size
        self.key_columns = {"tenants": "user_id"}
        self.key_columns.update(key_columns or {})

    def _key(self, collection: str) -> str:
        return self.key_columns.get(collection, "id")

    def _wrap(self, collection: str, e: APIError) -> RecordStoreError:
        if getattr(e, "code", None) in _MISSING_TABLE_CODES:
            return CollectionNotFound(collection)
        return RecordStoreError(f"Supabase error on '{collection}': {e}")

    def _list(self, collection: str) -> List[Record]:
        """Every row of a table, fetched page by page (PostgREST caps each response)."""
        rows: List[Record] = []
        start = 0
        while True:
            try:
                result = self.client.table(collection)\
                    .select("*")\
                    .order(self._key(collection))\
                    .range(start, start + self.page_size - 1)\
                    .execute()
            except APIError as e:
                raise self._wrap(collection, e) from e
            page = result.data or []
            rows.extend(page)
            if len(page) < self.page_size:
                return rows
            start += self.page_size

    def _get(self, collection: str, record_id: str) -> Optional[Record]:
        try:
            result = self.client.table(collection)\
                .select("*")\
                .eq(self._key(collection), record_id)\
                .limit(1)\
                .execute()
        except APIError as e:
            raise self._wrap(collection, e) from e
        return result.data[0] if result.data else None

    def _upsert(self, collection: str, record_id: str, record: Record) -> None:
        payload = dict(record)
        payload[self._key(collection)] = record_id
        try:
            self.client.table(collection).upsert(payload).execute()
        except APIError as e:
            raise self._wrap(collection, e) from e

    async def list(self, collection: str) -> List[Record]:
        return await asyncio.to_thread(self._list, collection)

    async def get(self, collection: str, record_id: str) -> Optional[Record]:
        return await asyncio.to_thread(self._get, collection, record_id)

    async def upsert(self, collection: str, record_id: str, record: Record) -> None:
        await asyncio.to_thread(self._upsert, collection, record_id, record)


@lru_cache()
def get_record_store() -> SupabaseRecordStore:
    """Get cached record store bound to the admin client."""
    return SupabaseRecordStore(get_supabase_admin())

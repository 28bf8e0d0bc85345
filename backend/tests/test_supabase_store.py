import asyncio

import pytest
from postgrest.exceptions import APIError

from brgy_analytics.core.store import CollectionNotFound, RecordStoreError
from brgy_analytics.core.supabase import SupabaseRecordStore


class _Query:
    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.bounds = None

    def select(self, columns):
        return self

    def order(self, column):
        self.client.ordered_by.append(column)
        return self

    def range(self, start, end):
        self.bounds = (start, end)
        return self

    def eq(self, column, value):
        return self

    def limit(self, count):
        return self

    def execute(self):
        if self.client.error is not None:
            raise self.client.error
        self.client.ranges.append(self.bounds)
        start, end = self.bounds
        return type("Response", (), {"data": self.client.rows[start:end + 1]})()


class _FakeClient:
    """Mimics the postgrest builder chain; serves at most `end - start + 1` rows per call."""

    def __init__(self, rows=(), error=None):
        self.rows = list(rows)
        self.error = error
        self.ranges = []
        self.ordered_by = []

    def table(self, name):
        return _Query(self, name)


def test_list_reads_every_page():
    client = _FakeClient([{"id": f"b{i}"} for i in range(7)])
    rows = asyncio.run(SupabaseRecordStore(client, page_size=3).list("bookings"))

    assert [r["id"] for r in rows] == [f"b{i}" for i in range(7)]
    assert client.ranges == [(0, 2), (3, 5), (6, 8)]
    assert set(client.ordered_by) == {"id"}


def test_list_stops_after_exact_multiple_with_empty_page():
    client = _FakeClient([{"id": f"b{i}"} for i in range(4)])
    rows = asyncio.run(SupabaseRecordStore(client, page_size=2).list("bookings"))

    assert len(rows) == 4
    assert client.ranges == [(0, 1), (2, 3), (4, 5)]


def test_profile_table_pages_by_user_id():
    client = _FakeClient([{"user_id": "t1", "gender": "male"}])
    asyncio.run(SupabaseRecordStore(client).list("tenants"))
    assert client.ordered_by == ["user_id"]
    assert client.ranges == [(0, 999)]


def test_missing_table_maps_to_collection_not_found():
    client = _FakeClient(error=APIError({"code": "42P01", "message": "relation does not exist"}))
    with pytest.raises(CollectionNotFound):
        asyncio.run(SupabaseRecordStore(client).list("listing_inquiries"))


def test_other_errors_map_to_store_error():
    client = _FakeClient(error=APIError({"code": "500", "message": "boom"}))
    with pytest.raises(RecordStoreError) as excinfo:
        asyncio.run(SupabaseRecordStore(client).list("bookings"))
    assert not isinstance(excinfo.value, CollectionNotFound)

"""
Record Store

Generic list/get/upsert access to entity collections. The analytics engine
treats the store as an unordered, eventually-consistent document source.

Collections used by the engine:
- bookings, published_listings, users, owner_applications (required)
- listing_inquiries, tenants (optional; absence reads as empty)
"""

import asyncio
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class RecordStoreError(Exception):
    """A store read or write failed."""


class CollectionNotFound(RecordStoreError):
    """The requested collection does not exist in the store."""

    def __init__(self, collection: str):
        super().__init__(f"Collection not found: {collection}")
        self.collection = collection


class RecordStore(Protocol):
    """Async document access used by the analytics engine."""

    async def list(self, collection: str) -> List[Record]:
        ...

    async def get(self, collection: str, record_id: str) -> Optional[Record]:
        ...

    async def upsert(self, collection: str, record_id: str, record: Record) -> None:
        ...


@dataclass
class OptionalCollection:
    """
    Result of reading a collection that may not exist.

    `present` is False when the store has no such collection; `records`
    is then empty. Callers decide what a missing collection means.
    """
    records: List[Record] = field(default_factory=list)
    present: bool = False


async def read_optional(store: RecordStore, collection: str) -> OptionalCollection:
    """Read a collection, treating absence or a failed read as empty."""
    try:
        records = await store.list(collection)
    except CollectionNotFound:
        logger.info(f"Optional collection '{collection}' not present")
        return OptionalCollection()
    except Exception as e:
        logger.warning(f"Error reading optional collection '{collection}': {e}")
        return OptionalCollection()
    return OptionalCollection(records=list(records or []), present=True)


class InMemoryRecordStore:
    """
    Dict-backed record store.

    Collections are `{collection: {record_id: record}}`. Records are copied
    on the way in and out so callers never share mutable state with the
    store. Collections named in `collections` exist even when empty; any
    other name raises CollectionNotFound.
    """

    def __init__(self, collections: Optional[Dict[str, Dict[str, Record]]] = None):
        self._collections: Dict[str, Dict[str, Record]] = {
            name: dict(rows) for name, rows in (collections or {}).items()
        }
        self.writes: List[tuple] = []

    @classmethod
    def from_lists(cls, **collections: List[Record]) -> "InMemoryRecordStore":
        """Build a store from lists of records keyed by their `id` (or `userId`)."""
        data: Dict[str, Dict[str, Record]] = {}
        for name, rows in collections.items():
            keyed: Dict[str, Record] = {}
            for i, row in enumerate(rows):
                key = row.get("id") or row.get("userId") or row.get("user_id") or f"{name}_{i}"
                keyed[str(key)] = row
            data[name] = keyed
        return cls(data)

    def _collection(self, collection: str) -> Dict[str, Record]:
        if collection not in self._collections:
            raise CollectionNotFound(collection)
        return self._collections[collection]

    async def list(self, collection: str) -> List[Record]:
        await asyncio.sleep(0)
        return [copy.deepcopy(r) for r in self._collection(collection).values()]

    async def get(self, collection: str, record_id: str) -> Optional[Record]:
        await asyncio.sleep(0)
        record = self._collection(collection).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def upsert(self, collection: str, record_id: str, record: Record) -> None:
        await asyncio.sleep(0)
        self._collections.setdefault(collection, {})[record_id] = copy.deepcopy(record)
        self.writes.append((collection, record_id))

"""
In-Memory Document Store

Used by tests and by the app when no Google Sheets credentials are
configured. Records live in per-collection dicts, so query results come
back in insertion order.
"""

import copy
from typing import Optional
from uuid import uuid4

from expense_tracker.services.storage.interface import (
    DocumentStoreInterface,
    Filters,
    NotFoundError,
    matches,
)


class InMemoryDocumentStore(DocumentStoreInterface):
    """Dict-backed implementation of the document store."""

    def __init__(self):
        self._collections: dict[str, dict[str, dict]] = {}

    def _collection(self, name: str) -> dict[str, dict]:
        return self._collections.setdefault(name, {})

    @staticmethod
    def _with_id(record_id: str, record: dict) -> dict:
        return {"id": record_id, **copy.deepcopy(record)}

    async def create(
        self,
        collection: str,
        record: dict,
        record_id: Optional[str] = None,
    ) -> str:
        record_id = record_id or uuid4().hex
        data = {k: v for k, v in record.items() if k != "id"}
        self._collection(collection)[record_id] = copy.deepcopy(data)
        return record_id

    async def get(self, collection: str, record_id: str) -> Optional[dict]:
        record = self._collection(collection).get(record_id)
        if record is None:
            return None
        return self._with_id(record_id, record)

    async def update(self, collection: str, record_id: str, partial: dict) -> None:
        records = self._collection(collection)
        if record_id not in records:
            raise NotFoundError(f"Record not found: {collection}/{record_id}")
        records[record_id].update(
            {k: copy.deepcopy(v) for k, v in partial.items() if k != "id"}
        )

    async def delete(self, collection: str, record_id: str) -> None:
        self._collection(collection).pop(record_id, None)

    async def query(self, collection: str, filters: Filters) -> list[dict]:
        return [
            self._with_id(record_id, record)
            for record_id, record in self._collection(collection).items()
            if matches(record, filters)
        ]

    def count(self, collection: str) -> int:
        """Number of records in a collection, markers included."""
        return len(self._collection(collection))

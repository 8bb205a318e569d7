import logging
from typing import Any

from app.core.exceptions import ConflictException
from app.models.record import Record
from app.store.base import COLLECTIONS, TenantScopedStore, is_visible

logger = logging.getLogger(__name__)


class MemoryStore(TenantScopedStore):
    """
    In-process store for development and tests.

    Records are kept per collection keyed by id. Copies go in and out so
    callers never hold a reference to stored state.
    """

    backend_name = "local"

    def __init__(self):
        self._data: dict[str, dict[str, Record]] = {name: {} for name in COLLECTIONS}

    async def start(self) -> None:
        logger.info("Using in-memory store")

    async def stop(self) -> None:
        for records in self._data.values():
            records.clear()

    async def health_check(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "database": self.backend_name,
            "collections": {name: len(records) for name, records in self._data.items()},
        }

    async def _fetch(self, collection: str, record_id: str) -> Record | None:
        record = self._data[collection].get(record_id)
        return record.model_copy(deep=True) if record is not None else None

    async def _insert(self, collection: str, record: Record) -> None:
        if record.id in self._data[collection]:
            raise ConflictException(f"Record {record.id} already exists in {collection}")
        self._data[collection][record.id] = record.model_copy(deep=True)

    async def _replace(self, collection: str, record: Record) -> None:
        self._data[collection][record.id] = record.model_copy(deep=True)

    async def _remove(self, collection: str, record_id: str) -> None:
        self._data[collection].pop(record_id, None)

    async def _scan(self, collection: str, tenant_id: str | None) -> list[Record]:
        return [
            record.model_copy(deep=True)
            for record in self._data[collection].values()
            if is_visible(record.tenant_id, tenant_id)
        ]

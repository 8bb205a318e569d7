"""Tenant-scoped store contract shared by every backend."""

import uuid
from abc import ABC, abstractmethod
from typing import Any

from pydantic import ValidationError

from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.models.base import utcnow
from app.models.member import Member
from app.models.plan import Plan
from app.models.record import Record
from app.models.tenant import Tenant
from app.models.trainer import Trainer
from app.models.user import User

COLLECTIONS: dict[str, type[Record]] = {
    "tenants": Tenant,
    "users": User,
    "members": Member,
    "plans": Plan,
    "trainers": Trainer,
}

# Never replaced by update()
PROTECTED_FIELDS = frozenset({"id", "tenant_id", "created_at"})


def generate_id() -> str:
    return uuid.uuid4().hex


def is_visible(record_tenant_id: str | None, tenant_id: str | None) -> bool:
    """
    Tenant isolation rule.

    A record is visible when no tenant scope is requested, when the record
    carries no tenant (platform-level records: tenants, super admins), or
    when the tenants match.
    """
    return tenant_id is None or record_tenant_id is None or record_tenant_id == tenant_id


def matches(record: Record, filters: dict[str, Any]) -> bool:
    """Exact equality on every filter key (logical AND)."""
    return all(getattr(record, key, None) == value for key, value in filters.items())


class TenantScopedStore(ABC):
    """
    Generic persistence over named collections with tenant isolation.

    Subclasses implement the raw backend primitives (_fetch, _insert,
    _replace, _remove, _scan); visibility, merge and validation rules live
    here so every backend honours the same contract.

    Records that exist but belong to another tenant are reported exactly
    like missing records, so existence never leaks across tenants.
    """

    backend_name: str = "abstract"

    async def start(self) -> None:
        """Acquire backend resources. Called once at application startup."""

    async def stop(self) -> None:
        """Release backend resources. Called once at application shutdown."""

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """Report backend health without raising."""

    # Backend primitives

    @abstractmethod
    async def _fetch(self, collection: str, record_id: str) -> Record | None:
        """Load a record by id regardless of tenant."""

    @abstractmethod
    async def _insert(self, collection: str, record: Record) -> None:
        """Persist a new record."""

    @abstractmethod
    async def _replace(self, collection: str, record: Record) -> None:
        """Overwrite an existing record."""

    @abstractmethod
    async def _remove(self, collection: str, record_id: str) -> None:
        """Hard-delete a record."""

    @abstractmethod
    async def _scan(self, collection: str, tenant_id: str | None) -> list[Record]:
        """All records of a collection visible to tenant_id."""

    # Contract

    def record_type(self, collection: str) -> type[Record]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    async def create(self, collection: str, record: dict[str, Any]) -> Record:
        """
        Persist a new record.

        Assigns an id when none is given and stamps created/updated
        timestamps.

        Raises:
            ValidationException: If the data does not fit the collection's record type
            ConflictException: If an explicit id is already taken
            StorageException: If the backend is unavailable
        """
        record_cls = self.record_type(collection)
        payload = self._normalize_keys(record_cls, record)

        record_id = payload.get("id") or generate_id()
        if payload.get("id") and await self._fetch(collection, record_id) is not None:
            raise ConflictException(f"Record {record_id} already exists in {collection}")

        now = utcnow()
        payload.update({"id": record_id, "created_at": now, "updated_at": now})
        new_record = self._validate(record_cls, payload)

        await self._insert(collection, new_record)
        return new_record

    async def read(self, collection: str, record_id: str, tenant_id: str | None = None) -> Record:
        """
        Get a record visible to tenant_id.

        Raises:
            NotFoundException: If the record does not exist or belongs to another tenant
        """
        self.record_type(collection)
        record = await self._fetch(collection, record_id)
        if record is None or not is_visible(record.tenant_id, tenant_id):
            raise NotFoundException("Item not found")
        return record

    async def update(
        self,
        collection: str,
        record_id: str,
        changes: dict[str, Any],
        tenant_id: str | None = None,
    ) -> Record:
        """
        Shallow-merge changes into a visible record.

        id, tenant_id and created_at are kept whatever changes contains;
        updated_at is restamped.
        """
        existing = await self.read(collection, record_id, tenant_id)
        record_cls = type(existing)

        merged = existing.model_dump()
        for key, value in self._normalize_keys(record_cls, changes).items():
            if key not in PROTECTED_FIELDS:
                merged[key] = value
        merged["updated_at"] = utcnow()

        updated = self._validate(record_cls, merged)
        await self._replace(collection, updated)
        return updated

    async def delete(self, collection: str, record_id: str, tenant_id: str | None = None) -> str:
        """Hard-delete a visible record and return its id."""
        await self.read(collection, record_id, tenant_id)
        await self._remove(collection, record_id)
        return record_id

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        tenant_id: str | None = None,
    ) -> list[Record]:
        """
        Visible records matching every filter exactly.

        Partial/range matching and sorting are left to callers.
        """
        record_cls = self.record_type(collection)
        normalized = self._normalize_keys(record_cls, filters or {})
        records = await self._scan(collection, tenant_id)
        return [record for record in records if matches(record, normalized)]

    # Helpers

    @staticmethod
    def _normalize_keys(record_cls: type[Record], data: dict[str, Any]) -> dict[str, Any]:
        """Map camelCase aliases onto field names so protected fields cannot slip through."""
        by_alias = {
            field.alias: name for name, field in record_cls.model_fields.items() if field.alias
        }
        return {by_alias.get(key, key): value for key, value in data.items()}

    @staticmethod
    def _validate(record_cls: type[Record], payload: dict[str, Any]) -> Record:
        try:
            return record_cls.model_validate(payload)
        except ValidationError as e:
            raise ValidationException(
                f"Invalid {record_cls.__name__.lower()} record",
                errors=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

"""Shared base for every stored entity."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    """
    Base record persisted by the tenant-scoped store.

    Python code uses snake_case field names; JSON output uses camelCase
    aliases (``tenantId``, ``createdAt``) for the browser client.

    ``id``, ``tenant_id`` and ``created_at`` are assigned by the store on
    create and are never replaced by updates.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str
    tenant_id: str | None = None
    created_at: datetime
    updated_at: datetime

    def to_api(self) -> dict:
        """JSON-ready representation with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class TenantOwnedRecord(Record):
    """Record that always belongs to exactly one tenant."""

    tenant_id: str

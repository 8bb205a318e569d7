from typing import Any

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class Document(Base, TimestampMixin):
    """
    One stored record of any collection.

    The full record lives in ``data``; ``tenant_id`` is copied out of it so
    tenant isolation can be applied in SQL.
    """

    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(String(64), primary_key=True)
    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    tenant_id: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
        index=True,  # Critical for multi-tenant queries
    )
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    __table_args__ = (
        Index("ix_documents_collection_tenant", "collection", "tenant_id"),
    )

    def __repr__(self) -> str:
        return f"<Document(collection='{self.collection}', id='{self.id}', tenant_id={self.tenant_id})>"

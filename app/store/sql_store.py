import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import delete, or_, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.core.exceptions import ConflictException, NotFoundException, StorageException
from app.database import create_engine, create_session_factory
from app.models.base import Base
from app.models.document import Document
from app.models.record import Record
from app.store.base import TenantScopedStore

logger = logging.getLogger(__name__)


class SqlDocumentStore(TenantScopedStore):
    """
    Store backed by a relational database through SQLAlchemy's asyncio engine.

    Every collection shares the ``documents`` table. Tenant isolation is
    pushed down to SQL via the indexed tenant_id column; field filters are
    matched on the decoded records so any scalar field can be filtered on
    regardless of the database's JSON dialect.
    """

    backend_name = "sql"

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        echo: bool = False,
    ):
        self.database_url = database_url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    async def start(self) -> None:
        self._engine = create_engine(
            self.database_url,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            echo=self.echo,
        )
        self._sessions = create_session_factory(self._engine)
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            raise StorageException(f"Storage error: {e}") from e
        logger.info("Using SQL store: %s", self._engine.url.render_as_string(hide_password=True))

    async def stop(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessions = None

    async def health_check(self) -> dict[str, Any]:
        try:
            async with self._session() as session:
                await session.execute(text("SELECT 1"))
            return {"status": "healthy", "database": self.backend_name}
        except StorageException as e:
            return {"status": "unhealthy", "database": self.backend_name, "error": e.message}

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        if self._sessions is None:
            raise StorageException("SQL store is not started")
        try:
            async with self._sessions() as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            logger.error("Storage failure: %s", e)
            raise StorageException(f"Storage error: {e}") from e

    def _decode(self, collection: str, document: Document) -> Record:
        return self.record_type(collection).model_validate(document.data)

    async def _fetch(self, collection: str, record_id: str) -> Record | None:
        async with self._session() as session:
            document = await session.get(Document, (collection, record_id))
            return self._decode(collection, document) if document is not None else None

    async def _insert(self, collection: str, record: Record) -> None:
        async with self._session() as session:
            session.add(
                Document(
                    collection=collection,
                    id=record.id,
                    tenant_id=record.tenant_id,
                    data=record.model_dump(mode="json"),
                    created_at=record.created_at,
                    updated_at=record.updated_at,
                )
            )
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ConflictException(f"Record {record.id} already exists in {collection}") from e

    async def _replace(self, collection: str, record: Record) -> None:
        async with self._session() as session:
            document = await session.get(Document, (collection, record.id))
            if document is None:
                raise NotFoundException("Item not found")
            document.data = record.model_dump(mode="json")
            document.tenant_id = record.tenant_id
            document.updated_at = record.updated_at
            await session.commit()

    async def _remove(self, collection: str, record_id: str) -> None:
        async with self._session() as session:
            await session.execute(
                delete(Document).where(
                    Document.collection == collection,
                    Document.id == record_id,
                )
            )
            await session.commit()

    async def _scan(self, collection: str, tenant_id: str | None) -> list[Record]:
        stmt = select(Document).where(Document.collection == collection)
        if tenant_id is not None:
            stmt = stmt.where(or_(Document.tenant_id == tenant_id, Document.tenant_id.is_(None)))
        stmt = stmt.order_by(Document.created_at)

        async with self._session() as session:
            result = await session.execute(stmt)
            return [self._decode(collection, document) for document in result.scalars().all()]

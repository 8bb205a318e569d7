from app.config import Settings
from app.store.base import TenantScopedStore
from app.store.memory_store import MemoryStore
from app.store.sql_store import SqlDocumentStore


def create_store(settings: Settings) -> TenantScopedStore:
    """
    Select the store backend once, at startup, from STORE_BACKEND.

    Raises:
        ValueError: If STORE_BACKEND names an unknown backend
    """
    backend = settings.STORE_BACKEND.lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "sql":
        return SqlDocumentStore(
            settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            echo=settings.DEBUG,
        )
    raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND}")

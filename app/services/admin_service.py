from datetime import datetime

from app.models.base import utcnow
from app.models.tenant import Tenant
from app.services import reporting
from app.store.base import TenantScopedStore

ADMIN_USER_FIELDS = {
    "id",
    "email",
    "first_name",
    "last_name",
    "role",
    "tenant_id",
    "is_active",
    "created_at",
    "last_login",
}


class AdminService:
    """
    Platform-wide views for super admins.

    Queries run without a tenant scope, so every gym's records are visible.
    """

    def __init__(self, store: TenantScopedStore):
        self.store = store

    async def list_tenants(self) -> list[Tenant]:
        return await self.store.query("tenants")

    async def list_users(self) -> list[dict]:
        """Users reduced to account metadata; password hashes never leave the store"""
        users = await self.store.query("users")
        return [
            user.model_dump(mode="json", by_alias=True, include=ADMIN_USER_FIELDS)
            for user in users
        ]

    async def get_analytics(self, now: datetime | None = None) -> dict:
        tenants = await self.store.query("tenants")
        users = await self.store.query("users")
        members = await self.store.query("members")
        return reporting.platform_analytics(tenants, users, members, now or utcnow())

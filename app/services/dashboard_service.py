from datetime import datetime

from app.models.base import utcnow
from app.services import reporting
from app.store.base import TenantScopedStore


class DashboardService:
    """Tenant-wide dashboard, analytics and reports"""

    def __init__(self, store: TenantScopedStore):
        self.store = store

    async def _load(self, tenant_id: str, *collections: str) -> list[list]:
        return [await self.store.query(name, tenant_id=tenant_id) for name in collections]

    async def get_dashboard(self, tenant_id: str, now: datetime | None = None) -> dict:
        members, plans, trainers = await self._load(tenant_id, "members", "plans", "trainers")
        return reporting.build_dashboard(members, plans, trainers, now or utcnow())

    async def get_analytics(self, tenant_id: str, period: str, now: datetime | None = None) -> dict:
        members, plans = await self._load(tenant_id, "members", "plans")
        return reporting.build_analytics(members, plans, period, now or utcnow())

    async def get_report(self, tenant_id: str, report_type: str, now: datetime | None = None) -> dict:
        members, plans, trainers = await self._load(tenant_id, "members", "plans", "trainers")
        return reporting.build_report(report_type, members, plans, trainers, now or utcnow())

from app.core.exceptions import ConflictException, NotFoundException
from app.models.plan import Plan, PlanDuration
from app.schemas.plan_schemas import PlanCreate, PlanUpdate
from app.services import reporting
from app.store.base import TenantScopedStore, generate_id

COLLECTION = "plans"


class PlanService:
    """Service for membership plan business logic"""

    def __init__(self, store: TenantScopedStore):
        self.store = store

    async def list_plans(self, tenant_id: str) -> list[Plan]:
        """All plans of the tenant, cheapest first"""
        plans = await self.store.query(COLLECTION, tenant_id=tenant_id)
        return sorted(plans, key=lambda plan: plan.price)

    async def get_plan(self, plan_id: str, tenant_id: str) -> Plan:
        """
        Get a plan of the tenant.

        Raises:
            NotFoundException: If plan not found or belongs to another tenant
        """
        try:
            return await self.store.read(COLLECTION, plan_id, tenant_id)
        except NotFoundException as e:
            raise NotFoundException("Plan not found", code="PLAN_NOT_FOUND") from e

    async def _name_taken(self, name: str, tenant_id: str) -> bool:
        return bool(await self.store.query(COLLECTION, {"name": name}, tenant_id))

    async def create_plan(self, data: PlanCreate, tenant_id: str) -> Plan:
        """
        Create a plan.

        Raises:
            ConflictException: PLAN_EXISTS if the tenant already has a plan with this name
        """
        name = data.name.strip()
        if await self._name_taken(name, tenant_id):
            raise ConflictException("Plan with this name already exists", code="PLAN_EXISTS")

        record = data.model_dump()
        record.update({"id": f"plan_{generate_id()}", "tenant_id": tenant_id, "name": name})
        return await self.store.create(COLLECTION, record)

    async def update_plan(self, plan_id: str, data: PlanUpdate, tenant_id: str) -> Plan:
        """
        Apply a partial update.

        Raises:
            NotFoundException: If plan not found in the tenant
            ConflictException: NAME_EXISTS if another plan already uses the name
        """
        plan = await self.get_plan(plan_id, tenant_id)
        changes = data.changes()

        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if changes["name"] != plan.name and await self._name_taken(changes["name"], tenant_id):
                raise ConflictException("Plan name already exists", code="NAME_EXISTS")

        return await self.store.update(COLLECTION, plan_id, changes, tenant_id)

    async def delete_plan(self, plan_id: str, tenant_id: str) -> Plan:
        """
        Delete a plan no member is enrolled in.

        Raises:
            NotFoundException: If plan not found in the tenant
            ConflictException: PLAN_IN_USE with ``membersCount`` while members reference it
        """
        plan = await self.get_plan(plan_id, tenant_id)

        enrolled = await self.store.query("members", {"plan_id": plan_id}, tenant_id)
        if enrolled:
            raise ConflictException(
                "Cannot delete plan that is assigned to members",
                code="PLAN_IN_USE",
                membersCount=len(enrolled),
            )

        await self.store.delete(COLLECTION, plan_id, tenant_id)
        return plan

    async def search_plans(
        self,
        tenant_id: str,
        query: str | None = None,
        duration: PlanDuration | None = None,
        is_active: bool | None = None,
    ) -> list[Plan]:
        """Filter by duration and active flag, then by a name substring; cheapest first"""
        filters = {}
        if duration is not None:
            filters["duration"] = duration
        if is_active is not None:
            filters["is_active"] = is_active

        plans = await self.store.query(COLLECTION, filters, tenant_id)
        term = (query or "").strip().lower()
        if term:
            plans = [plan for plan in plans if term in plan.name.lower()]
        return sorted(plans, key=lambda plan: plan.price)

    async def get_stats(self, tenant_id: str) -> dict:
        plans = await self.store.query(COLLECTION, tenant_id=tenant_id)
        members = await self.store.query("members", tenant_id=tenant_id)
        return reporting.plan_stats(plans, members)

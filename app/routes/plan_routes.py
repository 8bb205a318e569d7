from fastapi import APIRouter, Depends, Query, Request, status

from app.core.logging_config import log_security_event
from app.dependencies import get_store, get_tenant_id
from app.models.plan import PlanDuration
from app.schemas.common import success_response
from app.schemas.plan_schemas import PlanCreate, PlanUpdate
from app.services.plan_service import PlanService
from app.store.base import TenantScopedStore

router = APIRouter()


@router.get("")
async def list_plans(
    tenant_id: str = Depends(get_tenant_id), store: TenantScopedStore = Depends(get_store)
):
    """Get all plans of the gym, cheapest first"""
    plans = await PlanService(store).list_plans(tenant_id)
    return success_response([plan.to_api() for plan in plans], count=len(plans))


@router.get("/search")
async def search_plans(
    query: str | None = Query(None),
    duration: PlanDuration | None = Query(None),
    is_active: bool | None = Query(None, alias="isActive"),
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Search plans by name"""
    plans = await PlanService(store).search_plans(tenant_id, query, duration, is_active)
    return success_response([plan.to_api() for plan in plans], count=len(plans))


@router.get("/stats")
async def plan_stats(
    tenant_id: str = Depends(get_tenant_id), store: TenantScopedStore = Depends(get_store)
):
    """Member counts and revenue per plan"""
    return success_response(await PlanService(store).get_stats(tenant_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_plan(
    data: PlanCreate,
    request: Request,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Create a membership plan"""
    plan = await PlanService(store).create_plan(data, tenant_id)
    log_security_event("plan_created", request, planId=plan.id, planName=plan.name)
    return success_response(plan.to_api(), message="Plan created successfully")


@router.get("/{plan_id}")
async def get_plan(
    plan_id: str,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Get specific plan details"""
    plan = await PlanService(store).get_plan(plan_id, tenant_id)
    return success_response(plan.to_api())


@router.put("/{plan_id}")
async def update_plan(
    plan_id: str,
    data: PlanUpdate,
    request: Request,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Update plan details"""
    plan = await PlanService(store).update_plan(plan_id, data, tenant_id)
    log_security_event("plan_updated", request, planId=plan.id, updatedFields=sorted(data.changes()))
    return success_response(plan.to_api(), message="Plan updated successfully")


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: str,
    request: Request,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Delete a plan no member is enrolled in"""
    plan = await PlanService(store).delete_plan(plan_id, tenant_id)
    log_security_event("plan_deleted", request, planId=plan.id, planName=plan.name)
    return success_response({"id": plan.id}, message="Plan deleted successfully")

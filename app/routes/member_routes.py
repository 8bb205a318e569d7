from fastapi import APIRouter, Depends, Query, Request, status

from app.core.logging_config import log_security_event
from app.dependencies import get_store, get_tenant_id
from app.models.member import MemberStatus
from app.schemas.common import success_response
from app.schemas.member_schemas import MemberCreate, MemberUpdate
from app.services.member_service import MemberService
from app.store.base import TenantScopedStore

router = APIRouter()


@router.get("")
async def list_members(
    tenant_id: str = Depends(get_tenant_id), store: TenantScopedStore = Depends(get_store)
):
    """Get all members of the gym, newest first"""
    members = await MemberService(store).list_members(tenant_id)
    return success_response([member.to_api() for member in members], count=len(members))


@router.get("/search")
async def search_members(
    query: str | None = Query(None),
    member_status: MemberStatus | None = Query(None, alias="status"),
    plan_id: str | None = Query(None, alias="planId"),
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Search members by name, email or phone"""
    members = await MemberService(store).search_members(tenant_id, query, member_status, plan_id)
    return success_response([member.to_api() for member in members], count=len(members))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_member(
    data: MemberCreate,
    request: Request,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Enroll a new member"""
    member = await MemberService(store).create_member(data, tenant_id)
    log_security_event("member_created", request, memberId=member.id, memberName=member.name)
    return success_response(member.to_api(), message="Member created successfully")


@router.get("/{member_id}")
async def get_member(
    member_id: str,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Get specific member details"""
    member = await MemberService(store).get_member(member_id, tenant_id)
    return success_response(member.to_api())


@router.put("/{member_id}")
async def update_member(
    member_id: str,
    data: MemberUpdate,
    request: Request,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Update member details"""
    member = await MemberService(store).update_member(member_id, data, tenant_id)
    log_security_event(
        "member_updated", request, memberId=member.id, updatedFields=sorted(data.changes())
    )
    return success_response(member.to_api(), message="Member updated successfully")


@router.delete("/{member_id}")
async def delete_member(
    member_id: str,
    request: Request,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Remove a member"""
    member = await MemberService(store).delete_member(member_id, tenant_id)
    log_security_event("member_deleted", request, memberId=member.id, memberName=member.name)
    return success_response({"id": member.id}, message="Member deleted successfully")

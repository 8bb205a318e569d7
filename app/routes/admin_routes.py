from fastapi import APIRouter, Depends

from app.dependencies import get_store, require_role
from app.models.auth_context import AuthClaims
from app.models.role import UserRole
from app.schemas.common import success_response
from app.services.admin_service import AdminService
from app.store.base import TenantScopedStore

router = APIRouter()

require_super_admin = require_role(UserRole.SUPER_ADMIN)


@router.get("/tenants")
async def list_tenants(
    claims: AuthClaims = Depends(require_super_admin),
    store: TenantScopedStore = Depends(get_store),
):
    """All gyms on the platform"""
    tenants = await AdminService(store).list_tenants()
    return success_response([tenant.to_api() for tenant in tenants], count=len(tenants))


@router.get("/users")
async def list_users(
    claims: AuthClaims = Depends(require_super_admin),
    store: TenantScopedStore = Depends(get_store),
):
    """All user accounts, without password hashes"""
    users = await AdminService(store).list_users()
    return success_response(users, count=len(users))


@router.get("/analytics")
async def platform_analytics(
    claims: AuthClaims = Depends(require_super_admin),
    store: TenantScopedStore = Depends(get_store),
):
    """Platform-wide tenant, user and member metrics"""
    return success_response(await AdminService(store).get_analytics())

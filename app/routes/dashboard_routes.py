from fastapi import APIRouter, Depends, Query, Request

from app.core.logging_config import log_security_event
from app.dependencies import get_store, get_tenant_id
from app.schemas.common import success_response
from app.services.dashboard_service import DashboardService
from app.services.reporting import DEFAULT_PERIOD
from app.store.base import TenantScopedStore

router = APIRouter()


@router.get("/dashboard")
async def get_dashboard(
    tenant_id: str = Depends(get_tenant_id), store: TenantScopedStore = Depends(get_store)
):
    """Overview metrics, plan distribution, recent members and monthly trends"""
    return success_response(await DashboardService(store).get_dashboard(tenant_id))


@router.get("/analytics")
async def get_analytics(
    period: str = Query(DEFAULT_PERIOD),
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Registrations and revenue over 7d, 30d, 90d or 1y"""
    return success_response(await DashboardService(store).get_analytics(tenant_id, period))


@router.get("/reports")
async def get_report(
    request: Request,
    report_type: str = Query("summary", alias="type"),
    report_format: str = Query("json", alias="format"),
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Summary, members, revenue or trainers report"""
    report = await DashboardService(store).get_report(tenant_id, report_type)
    log_security_event("report_generated", request, reportType=report_type, format=report_format)
    return success_response(report)

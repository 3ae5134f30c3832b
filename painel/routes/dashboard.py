from fastapi import APIRouter, Depends, Query

from painel.dependencies.auth import ADMIN_REQUIRED, SESSION_REQUIRED
from painel.services.reports import build_report, dashboard_stats, recent_clients

router = APIRouter()


@router.get("/dashboard/stats")
async def get_dashboard_stats(context=Depends(SESSION_REQUIRED)):
    return await dashboard_stats(context["data"])


@router.get("/dashboard/recent-clients")
async def get_recent_clients(context=Depends(SESSION_REQUIRED)):
    return await recent_clients(context["data"])


@router.get("/reports")
async def get_reports(context=Depends(ADMIN_REQUIRED)):
    return await build_report(context["data"])


@router.get("/audit-logs")
async def get_audit_logs(limit: int = Query(100, ge=1, le=500), context=Depends(ADMIN_REQUIRED)):
    return await context["audit"].recent(limit)

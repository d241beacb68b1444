"""Analytics router — read-only aggregates for the dashboard screens.

HOD users are always restricted to their own department; HR users may
narrow the figures with ``department_code``.
"""


from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from competency_hub.analytics.schemas import DashboardResponse, EmployeeMetricsResponse
from competency_hub.analytics.service import AnalyticsService
from competency_hub.auth.dependencies import department_scope, get_current_user
from competency_hub.auth.models import User
from competency_hub.database import get_db

router = APIRouter()


# ── GET /dashboard ──────────────────────────────────────────────────

@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    department_code: Optional[str] = Query(None, description="Restrict to one department"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Employee totals and gap buckets per department and competency."""
    scope = department_scope(current_user)
    return await AnalyticsService.dashboard(db, scope or department_code)


# ── GET /employee-metrics ───────────────────────────────────────────

@router.get("/employee-metrics", response_model=EmployeeMetricsResponse)
async def employee_metrics(
    department_code: Optional[str] = Query(None, description="Restrict to one department"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Department head-counts, competency overview and performance groupings."""
    scope = department_scope(current_user)
    return await AnalyticsService.employee_metrics(db, scope or department_code)

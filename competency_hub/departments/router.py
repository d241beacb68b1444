"""Department API endpoints.

Routes:
    /departments                    — List (public), create
    /departments/{department_code}  — Update, delete
"""


from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from competency_hub.auth.dependencies import require_permission
from competency_hub.auth.models import User
from competency_hub.database import get_db
from competency_hub.departments.schemas import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
)
from competency_hub.departments.service import DepartmentService

router = APIRouter(prefix="", tags=["departments"])


# ── GET /departments: public, used by the registration form ─────────

@router.get("", response_model=list[DepartmentResponse])
async def list_departments(db: AsyncSession = Depends(get_db)):
    return await DepartmentService.list_departments(db)


# ── POST /departments ───────────────────────────────────────────────

@router.post("", response_model=DepartmentResponse, status_code=201)
async def create_department(
    body: DepartmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("department:manage")),
):
    return await DepartmentService.create_department(db, body)


# ── PUT /departments/{department_code} ──────────────────────────────

@router.put("/{department_code}", response_model=DepartmentResponse)
async def update_department(
    department_code: str,
    body: DepartmentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("department:manage")),
):
    return await DepartmentService.update_department(db, department_code, body)


# ── DELETE /departments/{department_code} ───────────────────────────

@router.delete("/{department_code}", status_code=204)
async def delete_department(
    department_code: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("department:manage")),
):
    await DepartmentService.delete_department(db, department_code)
    return Response(status_code=204)

"""Role endpoints and role ↔ competency assignment.

Routes:
    /roles                           — List, create
    /roles/{role_id}                 — Update, delete
    /roles/{role_code}/competencies  — List, assign, remove requirements
"""


from fastapi import APIRouter, Body, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from competency_hub.auth.dependencies import get_current_user, require_permission
from competency_hub.auth.models import User
from competency_hub.database import get_db
from competency_hub.roles.schemas import (
    RoleCompetencyAssignment,
    RoleCompetencyResponse,
    RoleCreate,
    RoleResponse,
    RoleUpdate,
)
from competency_hub.roles.service import RoleCompetencyService, RoleService

router = APIRouter(prefix="", tags=["roles"])


# ═════════════════════════════════════════════════════════════════════
# Role CRUD
# ═════════════════════════════════════════════════════════════════════


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await RoleService.list_roles(db)


@router.post("", response_model=RoleResponse, status_code=201)
async def create_role(
    body: RoleCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("role:manage")),
):
    return await RoleService.create_role(db, body)


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: int,
    body: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("role:manage")),
):
    return await RoleService.update_role(db, role_id, body)


@router.delete("/{role_id}", status_code=204)
async def delete_role(
    role_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("role:manage")),
):
    await RoleService.delete_role(db, role_id)
    return Response(status_code=204)


# ═════════════════════════════════════════════════════════════════════
# Role competencies
# ═════════════════════════════════════════════════════════════════════


@router.get("/{role_code}/competencies", response_model=list[RoleCompetencyResponse])
async def list_role_competencies(
    role_code: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await RoleCompetencyService.list_for_role(db, role_code)


@router.post("/{role_code}/competencies", response_model=list[RoleCompetencyResponse])
async def assign_role_competencies(
    role_code: str,
    body: RoleCompetencyAssignment = Body(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("role:manage")),
):
    return await RoleCompetencyService.assign(db, role_code, body)


@router.delete("/{role_code}/competencies", response_model=list[RoleCompetencyResponse])
async def remove_role_competencies(
    role_code: str,
    body: list[str] = Body(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("role:manage")),
):
    return await RoleCompetencyService.remove(db, role_code, body)

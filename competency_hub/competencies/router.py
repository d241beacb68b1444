"""Competency catalogue endpoints.

Routes:
    /competency                   — List, create
    /competency/{competency_id}   — Update, delete
"""


from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from competency_hub.auth.dependencies import get_current_user, require_permission
from competency_hub.auth.models import User
from competency_hub.competencies.schemas import (
    CompetencyCreate,
    CompetencyResponse,
    CompetencyUpdate,
)
from competency_hub.competencies.service import CompetencyService
from competency_hub.database import get_db

router = APIRouter(prefix="", tags=["competencies"])


@router.get("", response_model=list[CompetencyResponse])
async def list_competencies(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await CompetencyService.list_competencies(db)


@router.post("", response_model=CompetencyResponse, status_code=201)
async def create_competency(
    body: CompetencyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("competency:manage")),
):
    return await CompetencyService.create_competency(db, body)


@router.put("/{competency_id}", response_model=CompetencyResponse)
async def update_competency(
    competency_id: int,
    body: CompetencyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("competency:manage")),
):
    return await CompetencyService.update_competency(db, competency_id, body)


@router.delete("/{competency_id}", status_code=204)
async def delete_competency(
    competency_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("competency:manage")),
):
    await CompetencyService.delete_competency(db, competency_id)
    return Response(status_code=204)

"""Evaluation endpoints — HR and HOD users score employees."""


from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from competency_hub.auth.dependencies import require_permission, require_role
from competency_hub.auth.models import User
from competency_hub.common.constants import UserRole
from competency_hub.database import get_db
from competency_hub.evaluations.schemas import EvaluationCreate, EvaluationResponse
from competency_hub.evaluations.service import EvaluationService

router = APIRouter(prefix="", tags=["evaluations"])


# ── POST /evaluations: submit scores ────────────────────────────────

@router.post("", response_model=EvaluationResponse, status_code=201)
async def submit_evaluation(
    body: EvaluationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("evaluation:submit")),
):
    """HOD users may only evaluate employees of their own department."""
    return await EvaluationService.submit(db, current_user, body)


# ── GET /evaluations?employee_number=: history ──────────────────────

@router.get("", response_model=list[EvaluationResponse])
async def list_evaluations(
    employee_number: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.hr, UserRole.hod)),
):
    return await EvaluationService.history(db, current_user, employee_number)

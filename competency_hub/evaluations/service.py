"""Evaluation service — score submission and evaluation history."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from competency_hub.auth.models import User
from competency_hub.common.exceptions import ValidationException
from competency_hub.common.scoring import score_gap
from competency_hub.competencies.models import Competency
from competency_hub.config import settings
from competency_hub.employees.models import Employee, EmployeeCompetency
from competency_hub.employees.service import EmployeeService
from competency_hub.evaluations.models import Evaluation, EvaluationScore
from competency_hub.evaluations.schemas import (
    EvaluationCreate,
    EvaluationResponse,
    EvaluationScoreResponse,
)

logger = logging.getLogger(__name__)


class EvaluationService:

    # ── Submit ──────────────────────────────────────────────────────

    @staticmethod
    async def submit(db: AsyncSession, user: User, data: EvaluationCreate) -> EvaluationResponse:
        """Record actual scores for an employee and mark them evaluated."""
        employee = await EmployeeService.get_by_number(db, data.employee_number)
        EmployeeService.ensure_in_scope(user, employee)

        errors: list[str] = []
        seen: set[str] = set()
        for score in data.scores:
            if score.actual_score is not None and score.actual_score > settings.MAX_SCORE:
                errors.append(
                    f"Score for '{score.competency_code}' must be between 0 and {settings.MAX_SCORE}.",
                )
            if score.competency_code in seen:
                errors.append(f"Competency '{score.competency_code}' is scored more than once.")
            seen.add(score.competency_code)
        if errors:
            raise ValidationException({"scores": errors})

        result = await db.execute(
            select(EmployeeCompetency, Competency)
            .join(Competency, EmployeeCompetency.competency_id == Competency.id)
            .where(EmployeeCompetency.employee_id == employee.id),
        )
        required = {competency.code: (row, competency) for row, competency in result.all()}

        unknown = [s.competency_code for s in data.scores if s.competency_code not in required]
        if unknown:
            raise ValidationException(
                {
                    "scores": [
                        f"Competency '{code}' is not required for employee '{employee.employee_number}'."
                        for code in unknown
                    ],
                },
            )

        # The evaluation screen sends unscored rows back as null.
        submitted = [s for s in data.scores if s.actual_score is not None]
        if not submitted:
            raise ValidationException({"scores": ["At least one competency must be scored."]})

        evaluator = data.evaluator_id or user.username
        now = datetime.now(timezone.utc)
        evaluation = Evaluation(employee_id=employee.id, evaluator=evaluator, evaluated_at=now)
        db.add(evaluation)

        scored: list[EvaluationScoreResponse] = []
        for score in submitted:
            row, competency = required[score.competency_code]
            row.actual_score = score.actual_score
            db.add(
                EvaluationScore(
                    evaluation=evaluation,
                    competency_id=competency.id,
                    required_score=row.required_score,
                    actual_score=score.actual_score,
                ),
            )
            scored.append(
                EvaluationScoreResponse(
                    competency_code=competency.code,
                    competency_name=competency.name,
                    required_score=row.required_score,
                    actual_score=score.actual_score,
                    gap=score_gap(row.required_score, score.actual_score),
                ),
            )

        employee.evaluation_status = True
        employee.evaluation_by = evaluator
        employee.last_evaluated_date = now
        await db.flush()

        logger.info(
            "Evaluation %d recorded for %s by %s (%d score(s))",
            evaluation.id, employee.employee_number, evaluator, len(scored),
        )
        return EvaluationResponse(
            id=evaluation.id,
            employee_number=employee.employee_number,
            evaluator=evaluator,
            evaluated_at=now,
            scores=scored,
        )

    # ── History ─────────────────────────────────────────────────────

    @staticmethod
    async def history(db: AsyncSession, user: User, employee_number: str) -> list[EvaluationResponse]:
        """Evaluations of one employee, newest first."""
        employee = await EmployeeService.get_by_number(db, employee_number)
        EmployeeService.ensure_in_scope(user, employee)

        result = await db.execute(
            select(Evaluation)
            .where(Evaluation.employee_id == employee.id)
            .options(selectinload(Evaluation.scores).selectinload(EvaluationScore.competency))
            .order_by(Evaluation.evaluated_at.desc(), Evaluation.id.desc()),
        )
        return [
            EvaluationResponse(
                id=evaluation.id,
                employee_number=employee.employee_number,
                evaluator=evaluation.evaluator,
                evaluated_at=evaluation.evaluated_at,
                scores=[
                    EvaluationScoreResponse(
                        competency_code=s.competency.code,
                        competency_name=s.competency.name,
                        required_score=s.required_score,
                        actual_score=s.actual_score,
                        gap=score_gap(s.required_score, s.actual_score),
                    )
                    for s in sorted(evaluation.scores, key=lambda s: s.competency.code)
                ],
            )
            for evaluation in result.scalars().all()
        ]

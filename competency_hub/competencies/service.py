"""Competency catalogue service."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from competency_hub.common.exceptions import (
    ConflictError,
    InUseError,
    NotFoundException,
    ValidationException,
)
from competency_hub.competencies.models import Competency
from competency_hub.competencies.schemas import CompetencyCreate, CompetencyUpdate
from competency_hub.employees.models import EmployeeCompetency
from competency_hub.evaluations.models import EvaluationScore
from competency_hub.roles.models import RoleCompetency

logger = logging.getLogger(__name__)


class CompetencyService:
    """Async CRUD operations for the competency catalogue."""

    @staticmethod
    async def list_competencies(db: AsyncSession) -> Sequence[Competency]:
        result = await db.execute(select(Competency).order_by(Competency.code))
        return result.scalars().all()

    @staticmethod
    async def get_competency(db: AsyncSession, competency_id: int) -> Competency:
        competency = await db.get(Competency, competency_id)
        if competency is None:
            raise NotFoundException("Competency", competency_id)
        return competency

    @staticmethod
    async def resolve_codes(
        db: AsyncSession,
        codes: Iterable[str],
        *,
        field: str = "competency_code",
    ) -> dict[str, Competency]:
        """Map each code to its Competency; unknown codes raise 422."""
        wanted = list(dict.fromkeys(codes))
        if not wanted:
            return {}
        result = await db.execute(select(Competency).where(Competency.code.in_(wanted)))
        found = {c.code: c for c in result.scalars().all()}
        missing = [code for code in wanted if code not in found]
        if missing:
            raise ValidationException(
                {field: [f"Unknown competency code '{code}'." for code in missing]},
            )
        return found

    @staticmethod
    async def _ensure_code_free(db: AsyncSession, code: str, exclude_id: int | None = None) -> None:
        query = select(Competency.id).where(Competency.code == code)
        if exclude_id is not None:
            query = query.where(Competency.id != exclude_id)
        if (await db.execute(query)).scalar() is not None:
            raise ConflictError("code", code)

    @staticmethod
    async def create_competency(db: AsyncSession, data: CompetencyCreate) -> Competency:
        code = data.code.strip()
        await CompetencyService._ensure_code_free(db, code)

        competency = Competency(code=code, name=data.name.strip(), description=data.description)
        db.add(competency)
        await db.flush()
        logger.info("Created competency %s", code)
        return competency

    @staticmethod
    async def update_competency(
        db: AsyncSession,
        competency_id: int,
        data: CompetencyUpdate,
    ) -> Competency:
        competency = await CompetencyService.get_competency(db, competency_id)
        update_data = data.model_dump(exclude_unset=True)

        if update_data.get("code"):
            update_data["code"] = update_data["code"].strip()
            if update_data["code"] != competency.code:
                await CompetencyService._ensure_code_free(db, update_data["code"], competency.id)

        for field, value in update_data.items():
            if value is None and field != "description":
                continue
            setattr(competency, field, value)

        await db.flush()
        logger.info("Updated competency %s", competency.code)
        return competency

    @staticmethod
    async def delete_competency(db: AsyncSession, competency_id: int) -> None:
        competency = await CompetencyService.get_competency(db, competency_id)

        # Each of these tables keeps a foreign key to the competency.
        for model, label in (
            (RoleCompetency, "role(s)"),
            (EmployeeCompetency, "employee competency row(s)"),
            (EvaluationScore, "evaluation score(s)"),
        ):
            count = await db.scalar(
                select(func.count(model.id)).where(model.competency_id == competency.id),
            )
            if count:
                raise InUseError("Competency", competency.code, f"{count} {label}")

        await db.execute(delete(Competency).where(Competency.id == competency.id))
        logger.info("Deleted competency %s", competency.code)

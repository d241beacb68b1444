"""Role service layer — CRUD and competency requirement assignment."""

from __future__ import annotations

import logging
from typing import Sequence, Union

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from competency_hub.common.exceptions import (
    ConflictError,
    InUseError,
    NotFoundException,
    ValidationException,
)
from competency_hub.competencies.models import Competency
from competency_hub.competencies.service import CompetencyService
from competency_hub.config import settings
from competency_hub.employees.models import Employee
from competency_hub.employees.service import sync_role_employees
from competency_hub.roles.models import Role, RoleCompetency
from competency_hub.roles.schemas import (
    RoleCompetencyItem,
    RoleCompetencyResponse,
    RoleCreate,
    RoleUpdate,
)

logger = logging.getLogger(__name__)


class RoleService:
    """Async CRUD operations for roles."""

    @staticmethod
    async def list_roles(db: AsyncSession) -> Sequence[Role]:
        result = await db.execute(select(Role).order_by(Role.role_code))
        return result.scalars().all()

    @staticmethod
    async def get_role(db: AsyncSession, role_id: int) -> Role:
        role = await db.get(Role, role_id)
        if role is None:
            raise NotFoundException("Role", role_id)
        return role

    @staticmethod
    async def get_by_code(db: AsyncSession, role_code: str) -> Role:
        result = await db.execute(select(Role).where(Role.role_code == role_code))
        role = result.scalars().first()
        if role is None:
            raise NotFoundException("Role", role_code)
        return role

    @staticmethod
    async def _ensure_code_free(db: AsyncSession, code: str, exclude_id: int | None = None) -> None:
        query = select(Role.id).where(Role.role_code == code)
        if exclude_id is not None:
            query = query.where(Role.id != exclude_id)
        if (await db.execute(query)).scalar() is not None:
            raise ConflictError("role_code", code)

    @staticmethod
    async def create_role(db: AsyncSession, data: RoleCreate) -> Role:
        code = data.role_code.strip()
        await RoleService._ensure_code_free(db, code)

        role = Role(role_code=code, name=data.name.strip())
        db.add(role)
        await db.flush()
        logger.info("Created role %s", code)
        return role

    @staticmethod
    async def update_role(db: AsyncSession, role_id: int, data: RoleUpdate) -> Role:
        role = await RoleService.get_role(db, role_id)

        if data.role_code is not None:
            code = data.role_code.strip()
            if code != role.role_code:
                await RoleService._ensure_code_free(db, code, role.id)
                role.role_code = code
        if data.name is not None:
            role.name = data.name.strip()

        await db.flush()
        logger.info("Updated role %s", role.role_code)
        return role

    @staticmethod
    async def delete_role(db: AsyncSession, role_id: int) -> None:
        role = await RoleService.get_role(db, role_id)

        employee_count = await db.scalar(
            select(func.count(Employee.id)).where(Employee.role_id == role.id),
        )
        if employee_count:
            raise InUseError("Role", role.role_code, f"{employee_count} employee(s)")

        await db.execute(delete(RoleCompetency).where(RoleCompetency.role_id == role.id))
        await db.execute(delete(Role).where(Role.id == role.id))
        logger.info("Deleted role %s", role.role_code)


class RoleCompetencyService:
    """Competency requirements attached to a role."""

    @staticmethod
    async def list_for_role(db: AsyncSession, role_code: str) -> list[RoleCompetencyResponse]:
        role = await RoleService.get_by_code(db, role_code)
        result = await db.execute(
            select(Competency, RoleCompetency.required_score)
            .join(RoleCompetency, RoleCompetency.competency_id == Competency.id)
            .where(RoleCompetency.role_id == role.id)
            .order_by(Competency.code),
        )
        return [
            RoleCompetencyResponse(
                competency_id=competency.id,
                code=competency.code,
                name=competency.name,
                description=competency.description,
                required_score=required_score,
            )
            for competency, required_score in result.all()
        ]

    @staticmethod
    def _normalise(items: Sequence[Union[str, RoleCompetencyItem]]) -> dict[str, int]:
        """Map code → required score, validating the score range."""
        wanted: dict[str, int] = {}
        errors: list[str] = []
        for item in items:
            if isinstance(item, str):
                item = RoleCompetencyItem(competency_code=item)
            score = item.required_score
            if score is None:
                score = settings.DEFAULT_REQUIRED_SCORE
            if not 0 <= score <= settings.MAX_SCORE:
                errors.append(
                    f"Required score for '{item.competency_code}' must be between 0 and {settings.MAX_SCORE}.",
                )
                continue
            wanted[item.competency_code.strip()] = score
        if errors:
            raise ValidationException({"required_score": errors})
        return wanted

    @staticmethod
    async def assign(
        db: AsyncSession,
        role_code: str,
        items: Sequence[Union[str, RoleCompetencyItem]],
    ) -> list[RoleCompetencyResponse]:
        """Add or update requirements, then re-sync employees holding the role."""
        role = await RoleService.get_by_code(db, role_code)
        wanted = RoleCompetencyService._normalise(items)
        competencies = await CompetencyService.resolve_codes(db, wanted.keys())

        result = await db.execute(
            select(RoleCompetency).where(RoleCompetency.role_id == role.id),
        )
        current = {rc.competency_id: rc for rc in result.scalars().all()}

        for code, required_score in wanted.items():
            competency = competencies[code]
            existing = current.get(competency.id)
            if existing is None:
                db.add(
                    RoleCompetency(
                        role_id=role.id,
                        competency_id=competency.id,
                        required_score=required_score,
                    ),
                )
            else:
                existing.required_score = required_score
        await db.flush()

        synced = await sync_role_employees(db, role.id)
        logger.info(
            "Assigned %d competency requirement(s) to role %s (%d employee(s) synced)",
            len(wanted), role_code, synced,
        )
        return await RoleCompetencyService.list_for_role(db, role_code)

    @staticmethod
    async def remove(
        db: AsyncSession,
        role_code: str,
        codes: Sequence[str],
    ) -> list[RoleCompetencyResponse]:
        """Drop requirements, then re-sync employees holding the role."""
        role = await RoleService.get_by_code(db, role_code)
        competencies = await CompetencyService.resolve_codes(db, codes)

        if competencies:
            await db.execute(
                delete(RoleCompetency).where(
                    RoleCompetency.role_id == role.id,
                    RoleCompetency.competency_id.in_([c.id for c in competencies.values()]),
                ),
            )

        synced = await sync_role_employees(db, role.id)
        logger.info(
            "Removed %d competency requirement(s) from role %s (%d employee(s) synced)",
            len(competencies), role_code, synced,
        )
        return await RoleCompetencyService.list_for_role(db, role_code)

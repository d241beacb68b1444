"""Employee service layer — async CRUD, requirement sync, evaluation status.

Uses:
  - ``apply_filters / apply_search`` from competency_hub.common.filters
  - ``score_gap`` from competency_hub.common.scoring
  - ``NotFoundException / ConflictError / ValidationException`` from
    competency_hub.common.exceptions
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional, Sequence

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from competency_hub.auth.dependencies import department_scope
from competency_hub.auth.models import User
from competency_hub.common.constants import EvaluationStatusFilter
from competency_hub.common.exceptions import (
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from competency_hub.common.filters import apply_filters, apply_search
from competency_hub.common.scoring import score_gap
from competency_hub.competencies.models import Competency
from competency_hub.departments.models import Department
from competency_hub.employees.models import Employee, EmployeeCompetency
from competency_hub.employees.schemas import (
    EmployeeCompetencyRow,
    EmployeeCompetencyScore,
    EmployeeCreate,
    EmployeeUpdate,
)
from competency_hub.evaluations.models import Evaluation, EvaluationScore
from competency_hub.roles.models import Role, RoleCompetency

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# Requirement sync
# ═════════════════════════════════════════════════════════════════════


async def sync_employee_requirements(db: AsyncSession, employees: Sequence[Employee]) -> None:
    """Make each employee's competency rows mirror their role's requirements.

    Rows for competencies the role no longer requires are removed, required
    scores are refreshed and new requirements are added unscored. Actual
    scores on rows that survive are left untouched.
    """
    if not employees:
        return

    role_ids = {e.role_id for e in employees if e.role_id is not None}
    requirements: dict[int, dict[int, int]] = defaultdict(dict)
    if role_ids:
        result = await db.execute(
            select(
                RoleCompetency.role_id,
                RoleCompetency.competency_id,
                RoleCompetency.required_score,
            ).where(RoleCompetency.role_id.in_(role_ids)),
        )
        for role_id, competency_id, required_score in result.all():
            requirements[role_id][competency_id] = required_score

    result = await db.execute(
        select(EmployeeCompetency).where(
            EmployeeCompetency.employee_id.in_([e.id for e in employees]),
        ),
    )
    existing: dict[int, dict[int, EmployeeCompetency]] = defaultdict(dict)
    for row in result.scalars().all():
        existing[row.employee_id][row.competency_id] = row

    stale_ids: list[int] = []
    for employee in employees:
        wanted = requirements.get(employee.role_id, {})
        current = existing.get(employee.id, {})

        for competency_id, row in current.items():
            if competency_id not in wanted:
                stale_ids.append(row.id)
            elif row.required_score != wanted[competency_id]:
                row.required_score = wanted[competency_id]

        for competency_id, required_score in wanted.items():
            if competency_id not in current:
                db.add(
                    EmployeeCompetency(
                        employee_id=employee.id,
                        competency_id=competency_id,
                        required_score=required_score,
                    ),
                )

    if stale_ids:
        await db.execute(
            delete(EmployeeCompetency).where(EmployeeCompetency.id.in_(stale_ids)),
        )
    await db.flush()


async def sync_role_employees(db: AsyncSession, role_id: int) -> int:
    """Re-sync every employee holding *role_id*; returns how many were touched."""
    result = await db.execute(select(Employee).where(Employee.role_id == role_id))
    employees = result.scalars().all()
    await sync_employee_requirements(db, employees)
    if employees:
        logger.info("Re-synced competency requirements for %d employee(s) of role %s", len(employees), role_id)
    return len(employees)


# ═════════════════════════════════════════════════════════════════════
# EmployeeService
# ═════════════════════════════════════════════════════════════════════


class EmployeeService:
    """Async CRUD operations for employees."""

    @staticmethod
    def _base_query() -> Select:
        return select(Employee).options(
            selectinload(Employee.role),
            selectinload(Employee.department),
        )

    @staticmethod
    async def _reload(db: AsyncSession, employee_id: int) -> Employee:
        result = await db.execute(
            EmployeeService._base_query()
            .where(Employee.id == employee_id)
            .execution_options(populate_existing=True),
        )
        return result.scalars().one()

    # ── List (searchable, filterable, department-scoped) ────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        *,
        search: Optional[str] = None,
        department_code: Optional[str] = None,
        status: EvaluationStatusFilter = EvaluationStatusFilter.all,
        scope_department_code: Optional[str] = None,
    ) -> Sequence[Employee]:
        query = EmployeeService._base_query()

        department_codes = [c for c in (department_code, scope_department_code) if c]
        if department_codes:
            query = query.join(Department, Employee.department_id == Department.id)
            for code in department_codes:
                query = query.where(Department.department_code == code)

        evaluated = None
        if status != EvaluationStatusFilter.all:
            evaluated = status == EvaluationStatusFilter.evaluated
        query = apply_filters(query, Employee, {"evaluation_status": evaluated})
        query = apply_search(query, Employee, search, ["employee_number", "employee_name"])

        result = await db.execute(query.order_by(Employee.employee_number))
        return result.scalars().all()

    # ── Get by employee number ──────────────────────────────────────

    @staticmethod
    async def get_by_number(db: AsyncSession, employee_number: str) -> Employee:
        result = await db.execute(
            EmployeeService._base_query().where(Employee.employee_number == employee_number),
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", employee_number)
        return employee

    @staticmethod
    def ensure_in_scope(user: User, employee: Employee) -> None:
        """HOD users may only touch employees of their own department."""
        scope = department_scope(user)
        if scope is not None and employee.department_code != scope:
            raise ForbiddenException(
                detail=f"Employee '{employee.employee_number}' is outside department '{scope}'.",
            )

    # ── Lookups ─────────────────────────────────────────────────────

    @staticmethod
    async def _resolve_role(db: AsyncSession, role_code: str) -> Role:
        result = await db.execute(select(Role).where(Role.role_code == role_code))
        role = result.scalars().first()
        if role is None:
            raise ValidationException({"role_code": [f"Role '{role_code}' does not exist."]})
        return role

    @staticmethod
    async def _resolve_department(db: AsyncSession, department_code: str) -> Department:
        result = await db.execute(
            select(Department).where(Department.department_code == department_code),
        )
        department = result.scalars().first()
        if department is None:
            raise ValidationException(
                {"department_code": [f"Department '{department_code}' does not exist."]},
            )
        return department

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_employee(db: AsyncSession, data: EmployeeCreate) -> Employee:
        number = data.employee_number.strip()
        existing = await db.execute(
            select(Employee.id).where(Employee.employee_number == number),
        )
        if existing.scalar() is not None:
            raise ConflictError("employee_number", number)

        role = await EmployeeService._resolve_role(db, data.role_code)
        department = await EmployeeService._resolve_department(db, data.department_code)

        employee = Employee(
            employee_number=number,
            employee_name=data.employee_name.strip(),
            job_code=data.job_code,
            reporting_employee_name=data.reporting_employee_name,
            role=role,
            department=department,
        )
        db.add(employee)
        await db.flush()

        await sync_employee_requirements(db, [employee])
        logger.info("Created employee %s (role %s)", number, role.role_code)
        return await EmployeeService._reload(db, employee.id)

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        employee_number: str,
        data: EmployeeUpdate,
    ) -> Employee:
        employee = await EmployeeService.get_by_number(db, employee_number)
        update_data = data.model_dump(exclude_unset=True)

        role_changed = False
        role_code = update_data.pop("role_code", None)
        if role_code is not None and role_code != employee.role_code:
            employee.role = await EmployeeService._resolve_role(db, role_code)
            role_changed = True

        department_code = update_data.pop("department_code", None)
        if department_code is not None and department_code != employee.department_code:
            employee.department = await EmployeeService._resolve_department(db, department_code)

        for field, value in update_data.items():
            if value is None and field == "employee_name":
                continue
            setattr(employee, field, value)

        await db.flush()
        if role_changed:
            await sync_employee_requirements(db, [employee])

        logger.info("Updated employee %s", employee_number)
        return await EmployeeService._reload(db, employee.id)

    # ── Delete ──────────────────────────────────────────────────────

    @staticmethod
    async def delete_employee(db: AsyncSession, employee_number: str) -> None:
        employee = await EmployeeService.get_by_number(db, employee_number)

        evaluation_ids = select(Evaluation.id).where(Evaluation.employee_id == employee.id)
        await db.execute(
            delete(EvaluationScore).where(EvaluationScore.evaluation_id.in_(evaluation_ids)),
        )
        await db.execute(delete(Evaluation).where(Evaluation.employee_id == employee.id))
        await db.execute(
            delete(EmployeeCompetency).where(EmployeeCompetency.employee_id == employee.id),
        )
        await db.execute(delete(Employee).where(Employee.id == employee.id))
        logger.info("Deleted employee %s", employee_number)

    # ── Evaluation status ───────────────────────────────────────────

    @staticmethod
    async def set_evaluation_status(
        db: AsyncSession,
        employee_numbers: list[str],
        status: bool,
    ) -> list[Employee]:
        """Reset the listed employees to pending.

        Only the transition to pending is accepted here; an employee becomes
        evaluated by submitting an evaluation.
        """
        if status:
            raise ValidationException(
                {"status": ["Employees are marked evaluated by submitting an evaluation."]},
            )

        numbers = list(dict.fromkeys(employee_numbers))
        result = await db.execute(
            select(Employee).where(Employee.employee_number.in_(numbers)),
        )
        employees = result.scalars().all()
        found = {e.employee_number for e in employees}
        missing = [n for n in numbers if n not in found]
        if missing:
            raise NotFoundException("Employee", ", ".join(missing))

        for employee in employees:
            employee.mark_pending()
        await db.flush()
        logger.info("Reset evaluation status for %d employee(s)", len(employees))
        return list(employees)


# ═════════════════════════════════════════════════════════════════════
# EmployeeCompetencyService
# ═════════════════════════════════════════════════════════════════════


class EmployeeCompetencyService:
    """Read access to the per-employee required vs. actual scores."""

    @staticmethod
    async def list_rows(
        db: AsyncSession,
        *,
        scope_department_code: Optional[str] = None,
    ) -> list[EmployeeCompetencyRow]:
        query = (
            select(
                EmployeeCompetency.id,
                Employee.employee_number,
                Competency.code,
                EmployeeCompetency.required_score,
                EmployeeCompetency.actual_score,
            )
            .join(Employee, EmployeeCompetency.employee_id == Employee.id)
            .join(Competency, EmployeeCompetency.competency_id == Competency.id)
        )
        if scope_department_code:
            query = query.join(Department, Employee.department_id == Department.id).where(
                Department.department_code == scope_department_code,
            )

        result = await db.execute(query.order_by(Employee.employee_number, Competency.code))
        return [
            EmployeeCompetencyRow(
                id=row_id,
                employee_number=number,
                competency_code=code,
                required_score=required,
                actual_score=actual,
                gap=score_gap(required, actual),
            )
            for row_id, number, code, required, actual in result.all()
        ]

    @staticmethod
    async def scores_for(db: AsyncSession, employee: Employee) -> list[EmployeeCompetencyScore]:
        result = await db.execute(
            select(
                Competency.code,
                Competency.name,
                EmployeeCompetency.required_score,
                EmployeeCompetency.actual_score,
            )
            .join(Competency, EmployeeCompetency.competency_id == Competency.id)
            .where(EmployeeCompetency.employee_id == employee.id)
            .order_by(Competency.code),
        )
        return [
            EmployeeCompetencyScore(
                code=code,
                name=name,
                required_score=required,
                actual_score=actual,
                gap=score_gap(required, actual),
            )
            for code, name, required, actual in result.all()
        ]

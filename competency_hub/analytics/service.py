"""Analytics service — gap buckets and performance groupings.

All figures are computed from the employee competency rows:

* gap buckets count scored rows per severity tier (see ``GapBuckets``)
* low performers are evaluated employees with a scored gap of 2 or more
* promotion-ready employees are evaluated, have at least one competency
  and meet every requirement with a recorded score
* high-potential employees are promotion-ready and exceed at least one
  requirement
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from competency_hub.analytics.schemas import (
    CompetencyGapSummary,
    CompetencyOverviewEntry,
    DashboardResponse,
    DepartmentCount,
    DepartmentGapSummary,
    EmployeeBrief,
    EmployeeMetricsResponse,
    GapData,
)
from competency_hub.common.exceptions import NotFoundException
from competency_hub.common.scoring import GapBuckets, bucket_gaps, gap_tier, score_gap
from competency_hub.competencies.models import Competency
from competency_hub.departments.models import Department
from competency_hub.employees.models import Employee, EmployeeCompetency

logger = logging.getLogger(__name__)


def _gap_data(buckets: GapBuckets) -> GapData:
    return GapData(**buckets.as_dict())


def _brief(employee: Employee) -> EmployeeBrief:
    return EmployeeBrief(
        employee_number=employee.employee_number,
        employee_name=employee.employee_name,
        department_code=employee.department_code,
    )


def _rows(employee: Employee) -> list[tuple[int, Optional[int]]]:
    return [(ec.required_score, ec.actual_score) for ec in employee.competencies]


def _scored_gaps(employee: Employee) -> list[int]:
    return [
        score_gap(required, actual)
        for required, actual in _rows(employee)
        if actual is not None
    ]


def is_low_performer(employee: Employee) -> bool:
    if not employee.evaluation_status:
        return False
    return any((gap_tier(gap) or 0) >= 2 for gap in _scored_gaps(employee))


def is_promotion_ready(employee: Employee) -> bool:
    rows = _rows(employee)
    if not employee.evaluation_status or not rows:
        return False
    # An unscored requirement has not been met yet.
    if any(actual is None for _, actual in rows):
        return False
    return all(gap <= 0 for gap in _scored_gaps(employee))


def is_high_potential(employee: Employee) -> bool:
    return is_promotion_ready(employee) and any(gap < 0 for gap in _scored_gaps(employee))


class AnalyticsService:

    @staticmethod
    async def _departments(
        db: AsyncSession,
        department_code: Optional[str],
    ) -> Sequence[Department]:
        query = select(Department).order_by(Department.department_code)
        if department_code:
            query = query.where(Department.department_code == department_code)
        result = await db.execute(query)
        departments = result.scalars().all()
        if department_code and not departments:
            raise NotFoundException("Department", department_code)
        return departments

    @staticmethod
    async def _employees(
        db: AsyncSession,
        department_ids: Sequence[int],
    ) -> Sequence[Employee]:
        result = await db.execute(
            select(Employee)
            .where(Employee.department_id.in_(department_ids))
            .options(
                selectinload(Employee.department),
                selectinload(Employee.competencies).selectinload(EmployeeCompetency.competency),
            )
            .order_by(Employee.employee_number),
        )
        return result.scalars().all()

    # ── GET /analytics/dashboard ────────────────────────────────────

    @staticmethod
    async def dashboard(
        db: AsyncSession,
        department_code: Optional[str] = None,
    ) -> DashboardResponse:
        departments = await AnalyticsService._departments(db, department_code)
        employees = await AnalyticsService._employees(db, [d.id for d in departments])

        by_department: dict[int, list[Employee]] = defaultdict(list)
        competency_rows: dict[int, list[tuple[int, Optional[int]]]] = defaultdict(list)
        catalogue: dict[int, Competency] = {}
        for employee in employees:
            by_department[employee.department_id].append(employee)
            for ec in employee.competencies:
                catalogue[ec.competency_id] = ec.competency
                competency_rows[ec.competency_id].append((ec.required_score, ec.actual_score))

        department_data = []
        for department in departments:
            members = by_department.get(department.id, [])
            buckets = GapBuckets()
            for employee in members:
                buckets += bucket_gaps(_rows(employee))
            evaluated = sum(1 for e in members if e.evaluation_status)
            department_data.append(
                DepartmentGapSummary(
                    department_code=department.department_code,
                    department_name=department.name,
                    employee_count=len(members),
                    gap_data=_gap_data(buckets),
                    evaluated_count=evaluated,
                    not_evaluated_count=len(members) - evaluated,
                ),
            )

        competency_data = [
            CompetencyGapSummary(
                competency_code=competency.code,
                competency_name=competency.name,
                gap_data=_gap_data(bucket_gaps(competency_rows[competency.id])),
            )
            for competency in sorted(catalogue.values(), key=lambda c: c.code)
        ]

        total_evaluated = sum(1 for e in employees if e.evaluation_status)
        logger.debug(
            "Dashboard computed over %d employee(s) in %d department(s)",
            len(employees), len(departments),
        )
        return DashboardResponse(
            total_employees=len(employees),
            total_evaluated=total_evaluated,
            total_not_evaluated=len(employees) - total_evaluated,
            department_data=department_data,
            competency_data=competency_data,
        )

    # ── GET /analytics/employee-metrics ─────────────────────────────

    @staticmethod
    async def employee_metrics(
        db: AsyncSession,
        department_code: Optional[str] = None,
    ) -> EmployeeMetricsResponse:
        departments = await AnalyticsService._departments(db, department_code)
        employees = await AnalyticsService._employees(db, [d.id for d in departments])

        counts: dict[int, int] = defaultdict(int)
        meeting: dict[int, int] = defaultdict(int)
        catalogue: dict[int, Competency] = {}
        for employee in employees:
            counts[employee.department_id] += 1
            for ec in employee.competencies:
                catalogue[ec.competency_id] = ec.competency
                if ec.actual_score is not None and score_gap(ec.required_score, ec.actual_score) <= 0:
                    meeting[ec.competency_id] += 1

        return EmployeeMetricsResponse(
            total_employees=len(employees),
            department_counts=[
                DepartmentCount(department=d.department_code, count=counts.get(d.id, 0))
                for d in departments
            ],
            competency_overview=[
                CompetencyOverviewEntry(name=c.name, value=meeting.get(c.id, 0))
                for c in sorted(catalogue.values(), key=lambda c: c.code)
            ],
            low_performers=[_brief(e) for e in employees if is_low_performer(e)],
            high_potential=[_brief(e) for e in employees if is_high_potential(e)],
            promotion_ready=[_brief(e) for e in employees if is_promotion_ready(e)],
        )

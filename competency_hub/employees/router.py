"""Employee API endpoints with role-based access control.

Routes:
    /employees                           — List (HOD: own department), create
    /employees/evaluation-status         — Reset employees to pending
    /employees/{employee_number}         — Get, update, delete
    /employee-competencies               — Flat required / actual / gap listing
    /employee-competencies/{number}      — Scores of one employee
"""


from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from competency_hub.auth.dependencies import department_scope, get_current_user, require_permission
from competency_hub.auth.models import User
from competency_hub.common.constants import EvaluationStatusFilter
from competency_hub.database import get_db
from competency_hub.employees.schemas import (
    EmployeeCompetencyRow,
    EmployeeCompetencyScore,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    EvaluationStatusResult,
    EvaluationStatusUpdate,
)
from competency_hub.employees.service import EmployeeCompetencyService, EmployeeService


# ═════════════════════════════════════════════════════════════════════
# Routers
# ═════════════════════════════════════════════════════════════════════

employees_router = APIRouter(prefix="", tags=["employees"])
employee_competencies_router = APIRouter(prefix="", tags=["employee-competencies"])


# ═════════════════════════════════════════════════════════════════════
# Employee Endpoints
# ═════════════════════════════════════════════════════════════════════


# ── GET /employees: List employees ──────────────────────────────────

@employees_router.get("", response_model=list[EmployeeResponse])
async def list_employees(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    search: Optional[str] = Query(None, description="Match employee number or name"),
    department_code: Optional[str] = Query(None, description="Filter by department"),
    status: EvaluationStatusFilter = Query(EvaluationStatusFilter.all, description="all, evaluated or pending"),
):
    """List employees.

    - **HR**: every department
    - **HOD**: always restricted to their own department
    """
    return await EmployeeService.list_employees(
        db,
        search=search,
        department_code=department_code,
        status=status,
        scope_department_code=department_scope(current_user),
    )


# ── POST /employees: Create employee ────────────────────────────────

@employees_router.post("", response_model=EmployeeResponse, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("employee:manage")),
):
    return await EmployeeService.create_employee(db, body)


# ── PATCH /employees/evaluation-status: Reset to pending ────────────

@employees_router.patch("/evaluation-status", response_model=EvaluationStatusResult)
async def update_evaluation_status(
    body: EvaluationStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("evaluation:reset")),
):
    employees = await EmployeeService.set_evaluation_status(db, body.employee_numbers, body.status)
    return EvaluationStatusResult(
        updated=len(employees),
        employee_numbers=[e.employee_number for e in employees],
    )


# ── GET /employees/{employee_number} ────────────────────────────────

@employees_router.get("/{employee_number}", response_model=EmployeeResponse)
async def get_employee(
    employee_number: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    employee = await EmployeeService.get_by_number(db, employee_number)
    EmployeeService.ensure_in_scope(current_user, employee)
    return employee


# ── PUT /employees/{employee_number} ────────────────────────────────

@employees_router.put("/{employee_number}", response_model=EmployeeResponse)
async def update_employee(
    employee_number: str,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("employee:manage")),
):
    return await EmployeeService.update_employee(db, employee_number, body)


# ── DELETE /employees/{employee_number} ─────────────────────────────

@employees_router.delete("/{employee_number}", status_code=204)
async def delete_employee(
    employee_number: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission("employee:manage")),
):
    await EmployeeService.delete_employee(db, employee_number)
    return Response(status_code=204)


# ═════════════════════════════════════════════════════════════════════
# Employee Competency Endpoints
# ═════════════════════════════════════════════════════════════════════


@employee_competencies_router.get("", response_model=list[EmployeeCompetencyRow])
async def list_employee_competencies(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await EmployeeCompetencyService.list_rows(
        db, scope_department_code=department_scope(current_user),
    )


@employee_competencies_router.get(
    "/{employee_number}", response_model=list[EmployeeCompetencyScore],
)
async def get_employee_competencies(
    employee_number: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    employee = await EmployeeService.get_by_number(db, employee_number)
    EmployeeService.ensure_in_scope(current_user, employee)
    return await EmployeeCompetencyService.scores_for(db, employee)

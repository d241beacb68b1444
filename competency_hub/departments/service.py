"""Department service layer — async CRUD."""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from competency_hub.auth.models import User
from competency_hub.common.exceptions import ConflictError, InUseError, NotFoundException
from competency_hub.departments.models import Department
from competency_hub.departments.schemas import DepartmentCreate, DepartmentUpdate
from competency_hub.employees.models import Employee

logger = logging.getLogger(__name__)


class DepartmentService:
    """Async CRUD operations for departments."""

    @staticmethod
    async def list_departments(db: AsyncSession) -> Sequence[Department]:
        result = await db.execute(select(Department).order_by(Department.department_code))
        return result.scalars().all()

    @staticmethod
    async def get_by_code(db: AsyncSession, department_code: str) -> Department:
        result = await db.execute(
            select(Department).where(Department.department_code == department_code),
        )
        department = result.scalars().first()
        if department is None:
            raise NotFoundException("Department", department_code)
        return department

    @staticmethod
    async def create_department(db: AsyncSession, data: DepartmentCreate) -> Department:
        code = data.department_code.strip()
        existing = await db.execute(
            select(Department.id).where(Department.department_code == code),
        )
        if existing.scalar() is not None:
            raise ConflictError("department_code", code)

        department = Department(department_code=code, name=data.name.strip())
        db.add(department)
        await db.flush()
        logger.info("Created department %s", code)
        return department

    @staticmethod
    async def update_department(
        db: AsyncSession,
        department_code: str,
        data: DepartmentUpdate,
    ) -> Department:
        department = await DepartmentService.get_by_code(db, department_code)
        if data.name is not None:
            department.name = data.name.strip()
        await db.flush()
        logger.info("Updated department %s", department_code)
        return department

    @staticmethod
    async def delete_department(db: AsyncSession, department_code: str) -> None:
        department = await DepartmentService.get_by_code(db, department_code)

        employee_count = await db.scalar(
            select(func.count(Employee.id)).where(Employee.department_id == department.id),
        )
        if employee_count:
            raise InUseError("Department", department_code, f"{employee_count} employee(s)")

        user_count = await db.scalar(
            select(func.count(User.id)).where(User.department_code == department_code),
        )
        if user_count:
            raise InUseError("Department", department_code, f"{user_count} user account(s)")

        await db.execute(delete(Department).where(Department.id == department.id))
        logger.info("Deleted department %s", department_code)

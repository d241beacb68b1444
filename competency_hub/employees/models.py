"""Employee ORM models: Employee, EmployeeCompetency.

``EmployeeCompetency`` rows mirror the requirements of the employee's role;
``actual_score`` stays NULL until the employee is evaluated.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from competency_hub.database import Base

if TYPE_CHECKING:
    from competency_hub.competencies.models import Competency
    from competency_hub.departments.models import Department
    from competency_hub.roles.models import Role


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    employee_number: Mapped[str] = mapped_column(sa.String(30), unique=True, nullable=False)
    employee_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    job_code: Mapped[Optional[str]] = mapped_column(sa.String(50))
    reporting_employee_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    role_id: Mapped[Optional[int]] = mapped_column(sa.Integer, sa.ForeignKey("roles.id"))
    department_id: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("departments.id"),
    )

    # Evaluation tracking
    evaluation_status: Mapped[bool] = mapped_column(sa.Boolean, default=False, nullable=False)
    evaluation_by: Mapped[Optional[str]] = mapped_column(sa.String(100))
    last_evaluated_date: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    # ── Relationships ───────────────────────────────────────────────
    role: Mapped[Optional[Role]] = relationship(back_populates="employees")
    department: Mapped[Optional[Department]] = relationship(back_populates="employees")
    competencies: Mapped[list[EmployeeCompetency]] = relationship(
        back_populates="employee",
    )

    @property
    def role_code(self) -> Optional[str]:
        return self.role.role_code if self.role else None

    @property
    def department_code(self) -> Optional[str]:
        return self.department.department_code if self.department else None

    def mark_pending(self) -> None:
        self.evaluation_status = False
        self.evaluation_by = None
        self.last_evaluated_date = None

    def __repr__(self) -> str:
        return f"<Employee {self.employee_number!r}>"


# ═════════════════════════════════════════════════════════════════════
# EmployeeCompetency
# ═════════════════════════════════════════════════════════════════════


class EmployeeCompetency(Base):
    """Required vs. actual score of one competency for one employee."""

    __tablename__ = "employee_competencies"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "competency_id", name="uq_employee_competency"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    competency_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("competencies.id"), nullable=False,
    )
    required_score: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    actual_score: Mapped[Optional[int]] = mapped_column(sa.Integer)

    employee: Mapped[Employee] = relationship(back_populates="competencies")
    competency: Mapped[Competency] = relationship()

"""Role ORM models: Role, RoleCompetency."""

from __future__ import annotations

from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from competency_hub.database import Base

if TYPE_CHECKING:
    from competency_hub.competencies.models import Competency
    from competency_hub.employees.models import Employee


class Role(Base):
    """Job role; employees holding it inherit its competency requirements."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    role_code: Mapped[str] = mapped_column(sa.String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)

    # ── Relationships ───────────────────────────────────────────────
    requirements: Mapped[list[RoleCompetency]] = relationship(back_populates="role")
    employees: Mapped[list[Employee]] = relationship(back_populates="role")

    def __repr__(self) -> str:
        return f"<Role {self.name!r} ({self.role_code})>"


class RoleCompetency(Base):
    """Required score of one competency for one role."""

    __tablename__ = "role_competencies"
    __table_args__ = (
        sa.UniqueConstraint("role_id", "competency_id", name="uq_role_competency"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    role_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("roles.id", ondelete="CASCADE"), nullable=False,
    )
    competency_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("competencies.id"), nullable=False,
    )
    required_score: Mapped[int] = mapped_column(sa.Integer, nullable=False)

    role: Mapped[Role] = relationship(back_populates="requirements")
    competency: Mapped[Competency] = relationship()

"""Evaluation ORM models: Evaluation, EvaluationScore."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from competency_hub.database import Base

if TYPE_CHECKING:
    from competency_hub.competencies.models import Competency
    from competency_hub.employees.models import Employee


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Evaluation(Base):
    """One submitted evaluation of an employee."""

    __tablename__ = "evaluations"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    evaluator: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    evaluated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow, nullable=False,
    )

    employee: Mapped[Employee] = relationship()
    scores: Mapped[list[EvaluationScore]] = relationship(back_populates="evaluation")


class EvaluationScore(Base):
    """Snapshot of one competency score inside an evaluation."""

    __tablename__ = "evaluation_scores"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    evaluation_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("evaluations.id", ondelete="CASCADE"), nullable=False,
    )
    competency_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("competencies.id"), nullable=False,
    )
    required_score: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    actual_score: Mapped[int] = mapped_column(sa.Integer, nullable=False)

    evaluation: Mapped[Evaluation] = relationship(back_populates="scores")
    competency: Mapped[Competency] = relationship()

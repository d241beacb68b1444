"""Evaluation Pydantic schemas."""


from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ScoreInput(BaseModel):
    """One competency score; ``None`` leaves the competency unscored."""

    competency_code: str = Field(..., min_length=1)
    actual_score: Optional[int] = Field(..., ge=0)


class EvaluationCreate(BaseModel):
    """Scores for one employee; ``evaluator_id`` defaults to the caller's username."""

    employee_number: str = Field(..., min_length=1)
    evaluator_id: Optional[str] = Field(None, max_length=100)
    scores: list[ScoreInput] = Field(..., min_length=1)


class EvaluationScoreResponse(BaseModel):
    competency_code: str
    competency_name: str
    required_score: int
    actual_score: int
    gap: int


class EvaluationResponse(BaseModel):
    id: int
    employee_number: str
    evaluator: str
    evaluated_at: datetime
    scores: list[EvaluationScoreResponse]

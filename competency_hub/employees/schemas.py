"""Employee Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Update  → request bodies (write)
  - *Response          → response bodies (read)
"""


from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class EmployeeCreate(BaseModel):
    employee_number: str = Field(..., min_length=1, max_length=30)
    employee_name: str = Field(..., min_length=1, max_length=200)
    job_code: Optional[str] = Field(None, max_length=50)
    reporting_employee_name: Optional[str] = Field(None, max_length=200)
    role_code: str = Field(..., min_length=1)
    department_code: str = Field(..., min_length=1)


class EmployeeUpdate(BaseModel):
    """Partial update; only fields that are sent are applied."""

    employee_name: Optional[str] = Field(None, min_length=1, max_length=200)
    job_code: Optional[str] = Field(None, max_length=50)
    reporting_employee_name: Optional[str] = Field(None, max_length=200)
    role_code: Optional[str] = Field(None, min_length=1)
    department_code: Optional[str] = Field(None, min_length=1)


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_number: str
    employee_name: str
    job_code: Optional[str] = None
    reporting_employee_name: Optional[str] = None
    role_code: Optional[str] = None
    department_code: Optional[str] = None
    evaluation_status: bool = False
    evaluation_by: Optional[str] = None
    last_evaluated_date: Optional[datetime] = None


class EvaluationStatusUpdate(BaseModel):
    employee_numbers: list[str] = Field(..., min_length=1)
    status: bool


class EvaluationStatusResult(BaseModel):
    updated: int
    employee_numbers: list[str]


# ═════════════════════════════════════════════════════════════════════
# Employee competencies
# ═════════════════════════════════════════════════════════════════════


class EmployeeCompetencyRow(BaseModel):
    """One row of the flat ``/employee-competencies`` listing."""

    id: int
    employee_number: str
    competency_code: str
    required_score: int
    actual_score: Optional[int] = None
    gap: int


class EmployeeCompetencyScore(BaseModel):
    """Per-competency score for a single employee."""

    code: str
    name: str
    required_score: int
    actual_score: Optional[int] = None
    gap: int

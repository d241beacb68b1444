"""Analytics response schemas.

Dashboard payloads are serialised with camelCase keys; the embedded
employee entries keep the snake_case keys of the employee listing.
"""


from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GapData(CamelModel):
    gap1: int = 0
    gap2: int = 0
    gap3: int = 0


# ── /analytics/dashboard ────────────────────────────────────────────

class DepartmentGapSummary(CamelModel):
    department_code: str
    department_name: str
    employee_count: int
    gap_data: GapData
    evaluated_count: int
    not_evaluated_count: int


class CompetencyGapSummary(CamelModel):
    competency_code: str
    competency_name: str
    gap_data: GapData


class DashboardResponse(CamelModel):
    total_employees: int
    total_evaluated: int
    total_not_evaluated: int
    department_data: list[DepartmentGapSummary]
    competency_data: list[CompetencyGapSummary]


# ── /analytics/employee-metrics ─────────────────────────────────────

class DepartmentCount(CamelModel):
    department: str
    count: int


class CompetencyOverviewEntry(CamelModel):
    name: str
    value: int


class EmployeeBrief(BaseModel):
    employee_number: str
    employee_name: str
    department_code: str | None = None


class EmployeeMetricsResponse(CamelModel):
    total_employees: int
    department_counts: list[DepartmentCount]
    competency_overview: list[CompetencyOverviewEntry]
    low_performers: list[EmployeeBrief]
    high_potential: list[EmployeeBrief]
    promotion_ready: list[EmployeeBrief]

"""Import every ORM module so relationships resolve and metadata is complete."""

from competency_hub.auth.models import User, UserSession
from competency_hub.competencies.models import Competency
from competency_hub.departments.models import Department
from competency_hub.employees.models import Employee, EmployeeCompetency
from competency_hub.evaluations.models import Evaluation, EvaluationScore
from competency_hub.roles.models import Role, RoleCompetency

__all__ = [
    "Competency",
    "Department",
    "Employee",
    "EmployeeCompetency",
    "Evaluation",
    "EvaluationScore",
    "Role",
    "RoleCompetency",
    "User",
    "UserSession",
]

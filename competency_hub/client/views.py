"""Presentation logic of the Competency Hub screens.

Pure functions over the JSON the API returns, so they can be used by any
front end (and tested without one).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from competency_hub.client.session import Session
from competency_hub.common.constants import NO_DESCRIPTION, UserRole
from competency_hub.common.scoring import GapBuckets, clamp_score, score_gap

__all__ = [
    "BAR_MAX_HEIGHT",
    "BAR_MIN_HEIGHT",
    "MenuItem",
    "clamp_score",
    "enrich_scores",
    "filter_employees",
    "gap_bar_heights",
    "menu_for_role",
    "route_guard",
    "total_gaps",
]

BAR_MAX_HEIGHT = 180
BAR_MIN_HEIGHT = 10


# ── Employee screens ────────────────────────────────────────────────

def enrich_scores(
    scores: Iterable[Mapping[str, Any]],
    catalog: Iterable[Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """Attach catalogue name / description and the gap to each score row.

    Codes missing from the catalogue fall back to the code as name.
    """
    by_code = {c["code"]: c for c in catalog}
    enriched = []
    for score in scores:
        details = by_code.get(score["code"], {})
        enriched.append(
            {
                **score,
                "name": details.get("name") or score["code"],
                "description": details.get("description") or NO_DESCRIPTION,
                "gap": score_gap(score["required_score"], score.get("actual_score")),
            },
        )
    return enriched


def filter_employees(
    employees: Iterable[Mapping[str, Any]],
    *,
    search: str = "",
    department_code: Optional[str] = "all",
    status: str = "all",
) -> list[Mapping[str, Any]]:
    """Filter the employee listing the way the status screen does."""
    result = list(employees)

    term = (search or "").strip().lower()
    if term:
        result = [
            e for e in result
            if term in e["employee_number"].lower() or term in e["employee_name"].lower()
        ]

    if department_code and department_code != "all":
        result = [e for e in result if e.get("department_code") == department_code]

    if status != "all":
        evaluated = status == "evaluated"
        result = [e for e in result if bool(e.get("evaluation_status")) == evaluated]

    return result


# ── Dashboard ───────────────────────────────────────────────────────

def total_gaps(items: Iterable[Mapping[str, Any]]) -> GapBuckets:
    """Sum the ``gapData`` of department or competency dashboard entries."""
    total = GapBuckets()
    for item in items or ():
        gap_data = item["gapData"]
        total += GapBuckets(gap_data["gap1"], gap_data["gap2"], gap_data["gap3"])
    return total


def gap_bar_heights(gap_data: Mapping[str, int]) -> dict[str, float]:
    """Pixel heights of the three gap bars, scaled to the tallest bar."""
    values = {key: gap_data[key] for key in ("gap1", "gap2", "gap3")}
    scale = max(*values.values(), 1)
    return {
        key: max(value / scale * BAR_MAX_HEIGHT, BAR_MIN_HEIGHT) if value > 0 else 0
        for key, value in values.items()
    }


# ── Navigation ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class MenuItem:
    label: str
    path: str


_GUEST_MENU = (MenuItem("Login", "/login"), MenuItem("Register", "/register"))

_ROLE_MENUS: dict[UserRole, tuple[MenuItem, ...]] = {
    UserRole.hr: (
        MenuItem("Home", "/"),
        MenuItem("Manage Department", "/department-crud"),
        MenuItem("Manage Role", "/role-crud"),
        MenuItem("Manage Competency", "/competency-crud"),
        MenuItem("Role Competencies", "/role-competency"),
        MenuItem("Employees", "/employee-crud"),
        MenuItem("Evaluation Status", "/employee-status"),
        MenuItem("Reports", "/reports"),
    ),
    UserRole.hod: (
        MenuItem("Home", "/"),
        MenuItem("Evaluate Employees", "/evaluate-employees"),
        MenuItem("Department Reports", "/department-reports"),
        MenuItem("HOD Dashboard", "/hod-dashboard"),
    ),
}


def menu_for_role(role: Optional[str]) -> tuple[MenuItem, ...]:
    """Navigation entries for a role; guests get login / register."""
    if role is None:
        return _GUEST_MENU
    try:
        return _ROLE_MENUS[UserRole(role.upper())]
    except ValueError:
        return (MenuItem("Home", "/"),)


def route_guard(
    session: Optional[Session],
    allowed_roles: Optional[Iterable[str]] = None,
) -> Optional[str]:
    """Where to redirect before rendering a protected screen, or None to render it."""
    if session is None:
        return "/login"
    if allowed_roles is not None and session.role not in set(allowed_roles):
        return "/"
    return None

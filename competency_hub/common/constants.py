"""Enums and constants shared across Competency Hub modules."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    hr = "HR"
    hod = "HOD"


# ── Employee evaluation ─────────────────────────────────────────────

class EvaluationStatusFilter(str, enum.Enum):
    all = "all"
    evaluated = "evaluated"
    pending = "pending"


# ── Role-based permissions ──────────────────────────────────────────

PERMISSIONS: dict[UserRole, list[str]] = {
    UserRole.hr: [
        "department:manage",
        "role:manage",
        "competency:manage",
        "employee:manage",
        "employee:read_all",
        "evaluation:submit",
        "evaluation:reset",
        "analytics:read_all",
    ],
    UserRole.hod: [
        "employee:read_department",
        "evaluation:submit",
        "analytics:read_department",
    ],
}

NO_DESCRIPTION = "No description available"

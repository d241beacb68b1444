"""Screen logic test suite — enrichment, filters, gap bars and navigation."""

from __future__ import annotations

import pytest

from competency_hub.client.session import Session
from competency_hub.client.views import (
    MenuItem,
    clamp_score,
    enrich_scores,
    filter_employees,
    gap_bar_heights,
    menu_for_role,
    route_guard,
    total_gaps,
)
from competency_hub.common.constants import NO_DESCRIPTION
from competency_hub.common.scoring import GapBuckets

EMPLOYEES = [
    {"employee_number": "E001", "employee_name": "Asha Rao", "department_code": "ENG", "evaluation_status": True},
    {"employee_number": "E002", "employee_name": "Ravi Kumar", "department_code": "ENG", "evaluation_status": False},
    {"employee_number": "O001", "employee_name": "Ravi Shankar", "department_code": "OPS", "evaluation_status": True},
]


# ── enrich_scores ───────────────────────────────────────────────────


def test_enrich_scores_uses_catalog_and_fallbacks():
    scores = [
        {"code": "COMM", "required_score": 3, "actual_score": 1},
        {"code": "GONE", "required_score": 2, "actual_score": None},
    ]
    catalog = [{"code": "COMM", "name": "Communication", "description": None}]

    enriched = enrich_scores(scores, catalog)
    assert enriched[0]["name"] == "Communication"
    assert enriched[0]["description"] == NO_DESCRIPTION
    assert enriched[0]["gap"] == 2
    assert enriched[1]["name"] == "GONE"
    assert enriched[1]["gap"] == 2


# ── filter_employees ────────────────────────────────────────────────


def _numbers(rows) -> list[str]:
    return [r["employee_number"] for r in rows]


def test_filter_defaults_return_everything():
    assert _numbers(filter_employees(EMPLOYEES)) == ["E001", "E002", "O001"]


def test_filter_search_number_or_name():
    assert _numbers(filter_employees(EMPLOYEES, search="ravi")) == ["E002", "O001"]
    assert _numbers(filter_employees(EMPLOYEES, search=" o00 ")) == ["O001"]


def test_filter_combined():
    rows = filter_employees(EMPLOYEES, search="ravi", department_code="ENG", status="pending")
    assert _numbers(rows) == ["E002"]
    assert _numbers(filter_employees(EMPLOYEES, status="evaluated")) == ["E001", "O001"]


# ── Gap totals and bars ─────────────────────────────────────────────


def test_total_gaps():
    departments = [
        {"gapData": {"gap1": 1, "gap2": 0, "gap3": 2}},
        {"gapData": {"gap1": 3, "gap2": 1, "gap3": 0}},
    ]
    assert total_gaps(departments) == GapBuckets(4, 1, 2)
    assert total_gaps(None) == GapBuckets()


def test_gap_bar_heights_scale_to_tallest():
    heights = gap_bar_heights({"gap1": 4, "gap2": 2, "gap3": 0})
    assert heights == {"gap1": 180, "gap2": 90, "gap3": 0}


def test_gap_bar_heights_minimum_visible():
    heights = gap_bar_heights({"gap1": 100, "gap2": 1, "gap3": 0})
    assert heights["gap2"] == 10


def test_gap_bar_heights_all_zero():
    assert gap_bar_heights({"gap1": 0, "gap2": 0, "gap3": 0}) == {"gap1": 0, "gap2": 0, "gap3": 0}


@pytest.mark.parametrize(("value", "expected"), [(-1, 0), (0, 0), (2, 2), (7, 3)])
def test_clamp_score(value, expected):
    assert clamp_score(value) == expected


# ── Navigation ──────────────────────────────────────────────────────


def test_route_guard():
    hod = Session(token="t", username="h", role="HOD", department_code="ENG")
    assert route_guard(None, ["HR"]) == "/login"
    assert route_guard(hod, ["HR"]) == "/"
    assert route_guard(hod, ["HR", "HOD"]) is None
    assert route_guard(hod) is None


def test_menus():
    assert MenuItem("Login", "/login") in menu_for_role(None)
    hr_paths = [item.path for item in menu_for_role("HR")]
    hod_paths = [item.path for item in menu_for_role("hod")]
    assert "/department-crud" in hr_paths
    assert "/evaluate-employees" in hod_paths
    assert "/department-crud" not in hod_paths
    assert menu_for_role("GUEST") == (MenuItem("Home", "/"),)

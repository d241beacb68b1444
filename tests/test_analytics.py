"""Analytics test suite — dashboard gap buckets and employee metrics.

Scenario (role DEV requires COMM=3, CODE=2):

    ENG  E001  evaluated  COMM=3 CODE=3   meets all, exceeds CODE
    ENG  E002  evaluated  COMM=1 CODE=2   COMM gap 2
    ENG  E003  pending    unscored
    ENG  E004  evaluated  COMM=2 CODE=2   COMM gap 1
    OPS  O001  evaluated  COMM=0 CODE=2   COMM gap 3
"""

from __future__ import annotations

import pytest

from competency_hub.departments.models import Department
from tests.conftest import _make_department, create_employee, seed


@pytest.fixture
async def scenario(client, db, hr_headers, catalog):
    await seed(db, Department(**_make_department(code="OPS", name="Operations")))
    employees = [
        ("E001", "Asha Rao", "ENG", {"COMM": 3, "CODE": 3}),
        ("E002", "Ravi Kumar", "ENG", {"COMM": 1, "CODE": 2}),
        ("E003", "Neha Shah", "ENG", None),
        ("E004", "Kiran Das", "ENG", {"COMM": 2, "CODE": 2}),
        ("O001", "Meera Iyer", "OPS", {"COMM": 0, "CODE": 2}),
    ]
    for number, name, dept, scores in employees:
        await create_employee(client, hr_headers, number=number, name=name, department_code=dept)
        if scores:
            resp = await client.post(
                "/evaluations",
                json={
                    "employee_number": number,
                    "scores": [{"competency_code": c, "actual_score": s} for c, s in scores.items()],
                },
                headers=hr_headers,
            )
            assert resp.status_code == 201, resp.text


def _numbers(entries: list[dict]) -> list[str]:
    return [e["employee_number"] for e in entries]


# ═════════════════════════════════════════════════════════════════════
# 1. DASHBOARD
# ═════════════════════════════════════════════════════════════════════


class TestDashboard:

    async def test_totals(self, client, hr_headers, scenario):
        data = (await client.get("/analytics/dashboard", headers=hr_headers)).json()
        assert data["totalEmployees"] == 5
        assert data["totalEvaluated"] == 4
        assert data["totalNotEvaluated"] == 1

    async def test_department_buckets(self, client, hr_headers, scenario):
        data = (await client.get("/analytics/dashboard", headers=hr_headers)).json()
        assert data["departmentData"] == [
            {
                "departmentCode": "ENG",
                "departmentName": "Engineering",
                "employeeCount": 4,
                "gapData": {"gap1": 1, "gap2": 1, "gap3": 0},
                "evaluatedCount": 3,
                "notEvaluatedCount": 1,
            },
            {
                "departmentCode": "OPS",
                "departmentName": "Operations",
                "employeeCount": 1,
                "gapData": {"gap1": 0, "gap2": 0, "gap3": 1},
                "evaluatedCount": 1,
                "notEvaluatedCount": 0,
            },
        ]

    async def test_competency_buckets(self, client, hr_headers, scenario):
        data = (await client.get("/analytics/dashboard", headers=hr_headers)).json()
        assert data["competencyData"] == [
            {"competencyCode": "CODE", "competencyName": "Coding", "gapData": {"gap1": 0, "gap2": 0, "gap3": 0}},
            {"competencyCode": "COMM", "competencyName": "Communication", "gapData": {"gap1": 1, "gap2": 1, "gap3": 1}},
        ]

    async def test_hr_department_filter(self, client, hr_headers, scenario):
        resp = await client.get(
            "/analytics/dashboard", params={"department_code": "OPS"}, headers=hr_headers,
        )
        data = resp.json()
        assert data["totalEmployees"] == 1
        assert [d["departmentCode"] for d in data["departmentData"]] == ["OPS"]

    async def test_unknown_department_filter(self, client, hr_headers, scenario):
        resp = await client.get(
            "/analytics/dashboard", params={"department_code": "NOPE"}, headers=hr_headers,
        )
        assert resp.status_code == 404

    async def test_hod_always_scoped(self, client, hod_headers, scenario):
        resp = await client.get(
            "/analytics/dashboard", params={"department_code": "OPS"}, headers=hod_headers,
        )
        data = resp.json()
        assert data["totalEmployees"] == 4
        assert [d["departmentCode"] for d in data["departmentData"]] == ["ENG"]

    async def test_empty_department_listed(self, client, hr_headers, department):
        data = (await client.get("/analytics/dashboard", headers=hr_headers)).json()
        assert data["totalEmployees"] == 0
        assert data["departmentData"][0]["employeeCount"] == 0
        assert data["competencyData"] == []

    async def test_requires_auth(self, client):
        assert (await client.get("/analytics/dashboard")).status_code == 401


# ═════════════════════════════════════════════════════════════════════
# 2. EMPLOYEE METRICS
# ═════════════════════════════════════════════════════════════════════


class TestEmployeeMetrics:

    async def test_counts_and_overview(self, client, hr_headers, scenario):
        data = (await client.get("/analytics/employee-metrics", headers=hr_headers)).json()
        assert data["totalEmployees"] == 5
        assert data["departmentCounts"] == [
            {"department": "ENG", "count": 4},
            {"department": "OPS", "count": 1},
        ]
        assert data["competencyOverview"] == [
            {"name": "Coding", "value": 4},
            {"name": "Communication", "value": 1},
        ]

    async def test_performance_groups(self, client, hr_headers, scenario):
        data = (await client.get("/analytics/employee-metrics", headers=hr_headers)).json()
        assert _numbers(data["lowPerformers"]) == ["E002", "O001"]
        assert _numbers(data["promotionReady"]) == ["E001"]
        assert _numbers(data["highPotential"]) == ["E001"]
        assert data["lowPerformers"][1] == {
            "employee_number": "O001",
            "employee_name": "Meera Iyer",
            "department_code": "OPS",
        }

    async def test_pending_employee_never_grouped(self, client, hr_headers, scenario):
        data = (await client.get("/analytics/employee-metrics", headers=hr_headers)).json()
        for key in ("lowPerformers", "promotionReady", "highPotential"):
            assert "E003" not in _numbers(data[key])

    async def test_meeting_exactly_is_not_high_potential(self, client, hr_headers, catalog):
        await create_employee(client, hr_headers)
        await client.post(
            "/evaluations",
            json={
                "employee_number": "E001",
                "scores": [
                    {"competency_code": "COMM", "actual_score": 3},
                    {"competency_code": "CODE", "actual_score": 2},
                ],
            },
            headers=hr_headers,
        )
        data = (await client.get("/analytics/employee-metrics", headers=hr_headers)).json()
        assert _numbers(data["promotionReady"]) == ["E001"]
        assert data["highPotential"] == []

    async def test_hod_scoped(self, client, hod_headers, scenario):
        data = (await client.get("/analytics/employee-metrics", headers=hod_headers)).json()
        assert data["totalEmployees"] == 4
        assert data["departmentCounts"] == [{"department": "ENG", "count": 4}]
        assert _numbers(data["lowPerformers"]) == ["E002"]


# ═════════════════════════════════════════════════════════════════════
# 3. UNSCORED REQUIREMENTS
# ═════════════════════════════════════════════════════════════════════


class TestUnscoredRows:

    async def test_partial_evaluation_not_low_performer(self, client, hr_headers, catalog):
        await create_employee(client, hr_headers)
        resp = await client.post(
            "/evaluations",
            json={"employee_number": "E001", "scores": [{"competency_code": "CODE", "actual_score": 2}]},
            headers=hr_headers,
        )
        assert resp.status_code == 201

        metrics = (await client.get("/analytics/employee-metrics", headers=hr_headers)).json()
        assert metrics["lowPerformers"] == []
        assert metrics["promotionReady"] == []
        assert metrics["highPotential"] == []

        dashboard = (await client.get("/analytics/dashboard", headers=hr_headers)).json()
        assert dashboard["departmentData"][0]["gapData"] == {"gap1": 0, "gap2": 0, "gap3": 0}

    async def test_requirement_added_after_evaluation(self, client, hr_headers, catalog):
        await create_employee(client, hr_headers)
        await client.post(
            "/evaluations",
            json={
                "employee_number": "E001",
                "scores": [
                    {"competency_code": "COMM", "actual_score": 3},
                    {"competency_code": "CODE", "actual_score": 3},
                ],
            },
            headers=hr_headers,
        )
        resp = await client.post(
            "/roles/DEV/competencies",
            json=[{"competency_code": "LEAD", "required_score": 3}],
            headers=hr_headers,
        )
        assert resp.status_code == 200

        metrics = (await client.get("/analytics/employee-metrics", headers=hr_headers)).json()
        assert metrics["lowPerformers"] == []
        assert metrics["promotionReady"] == []
        assert metrics["highPotential"] == []

        dashboard = (await client.get("/analytics/dashboard", headers=hr_headers)).json()
        lead = next(c for c in dashboard["competencyData"] if c["competencyCode"] == "LEAD")
        assert lead["gapData"] == {"gap1": 0, "gap2": 0, "gap3": 0}

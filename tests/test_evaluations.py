"""Evaluation module test suite — score submission, validation, scoping and history."""

from __future__ import annotations

from competency_hub.config import settings
from competency_hub.departments.models import Department
from tests.conftest import _make_department, create_employee, seed


def _body(number: str = "E001", evaluator: str | None = None, **scores) -> dict:
    return {
        "employee_number": number,
        "evaluator_id": evaluator,
        "scores": [{"competency_code": c, "actual_score": s} for c, s in scores.items()],
    }


# ── Submission ──────────────────────────────────────────────────────


async def test_submit_updates_scores_and_status(client, hr_headers, catalog):
    await create_employee(client, hr_headers)

    resp = await client.post("/evaluations", json=_body(COMM=2, CODE=3), headers=hr_headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["employee_number"] == "E001"
    assert data["evaluator"] == "hr.admin"
    assert {s["competency_code"]: s["gap"] for s in data["scores"]} == {"COMM": 1, "CODE": -1}

    employee = (await client.get("/employees/E001", headers=hr_headers)).json()
    assert employee["evaluation_status"] is True
    assert employee["evaluation_by"] == "hr.admin"
    assert employee["last_evaluated_date"] is not None

    rows = (await client.get("/employee-competencies/E001", headers=hr_headers)).json()
    assert {r["code"]: r["actual_score"] for r in rows} == {"CODE": 3, "COMM": 2}


async def test_explicit_evaluator_recorded(client, hr_headers, catalog):
    await create_employee(client, hr_headers)
    resp = await client.post(
        "/evaluations", json=_body(evaluator="panel-7", COMM=3), headers=hr_headers,
    )
    assert resp.json()["evaluator"] == "panel-7"


async def test_partial_submission_leaves_other_scores(client, hr_headers, catalog):
    await create_employee(client, hr_headers)
    await client.post("/evaluations", json=_body(CODE=1), headers=hr_headers)
    await client.post("/evaluations", json=_body(COMM=2), headers=hr_headers)

    rows = (await client.get("/employee-competencies/E001", headers=hr_headers)).json()
    assert {r["code"]: r["actual_score"] for r in rows} == {"CODE": 1, "COMM": 2}


async def test_hod_evaluates_own_department(client, hr_headers, hod_headers, catalog):
    await create_employee(client, hr_headers)
    resp = await client.post("/evaluations", json=_body(COMM=3), headers=hod_headers)
    assert resp.status_code == 201
    assert resp.json()["evaluator"] == "eng.head"


async def test_hod_cannot_evaluate_other_department(client, db, hr_headers, hod_headers, catalog):
    await seed(db, Department(**_make_department(code="OPS", name="Operations")))
    await create_employee(client, hr_headers, number="O001", department_code="OPS")
    resp = await client.post("/evaluations", json=_body("O001", COMM=3), headers=hod_headers)
    assert resp.status_code == 403


# ── Validation ──────────────────────────────────────────────────────


async def test_score_above_max_rejected(client, hr_headers, catalog):
    await create_employee(client, hr_headers)
    resp = await client.post(
        "/evaluations", json=_body(COMM=settings.MAX_SCORE + 1), headers=hr_headers,
    )
    assert resp.status_code == 422


async def test_negative_score_rejected(client, hr_headers, catalog):
    await create_employee(client, hr_headers)
    resp = await client.post("/evaluations", json=_body(COMM=-1), headers=hr_headers)
    assert resp.status_code == 422


async def test_competency_not_required_rejected(client, hr_headers, catalog):
    await create_employee(client, hr_headers)
    resp = await client.post("/evaluations", json=_body(LEAD=2), headers=hr_headers)
    assert resp.status_code == 422
    assert "LEAD" in resp.json()["errors"]["scores"][0]

    employee = (await client.get("/employees/E001", headers=hr_headers)).json()
    assert employee["evaluation_status"] is False


async def test_duplicate_code_rejected(client, hr_headers, catalog):
    await create_employee(client, hr_headers)
    body = _body(COMM=1)
    body["scores"].append({"competency_code": "COMM", "actual_score": 2})
    resp = await client.post("/evaluations", json=body, headers=hr_headers)
    assert resp.status_code == 422


async def test_empty_scores_rejected(client, hr_headers, catalog):
    await create_employee(client, hr_headers)
    resp = await client.post("/evaluations", json=_body(), headers=hr_headers)
    assert resp.status_code == 422


async def test_null_scores_left_unscored(client, hr_headers, catalog):
    await create_employee(client, hr_headers)
    resp = await client.post("/evaluations", json=_body(COMM=None, CODE=2), headers=hr_headers)
    assert resp.status_code == 201
    assert [s["competency_code"] for s in resp.json()["scores"]] == ["CODE"]

    rows = (await client.get("/employee-competencies/E001", headers=hr_headers)).json()
    assert {r["code"]: r["actual_score"] for r in rows} == {"CODE": 2, "COMM": None}


async def test_only_null_scores_rejected(client, hr_headers, catalog):
    await create_employee(client, hr_headers)
    resp = await client.post("/evaluations", json=_body(COMM=None, CODE=None), headers=hr_headers)
    assert resp.status_code == 422

    employee = (await client.get("/employees/E001", headers=hr_headers)).json()
    assert employee["evaluation_status"] is False


async def test_unknown_employee(client, hr_headers, catalog):
    resp = await client.post("/evaluations", json=_body("NOPE", COMM=1), headers=hr_headers)
    assert resp.status_code == 404


# ── History ─────────────────────────────────────────────────────────


async def test_history_newest_first(client, hr_headers, hod_headers, catalog):
    await create_employee(client, hr_headers)
    first = (await client.post("/evaluations", json=_body(COMM=1), headers=hr_headers)).json()
    second = (await client.post("/evaluations", json=_body(COMM=2, CODE=2), headers=hod_headers)).json()

    resp = await client.get("/evaluations", params={"employee_number": "E001"}, headers=hr_headers)
    assert resp.status_code == 200
    history = resp.json()
    assert [e["id"] for e in history] == [second["id"], first["id"]]
    assert history[0]["evaluator"] == "eng.head"
    assert [s["competency_code"] for s in history[0]["scores"]] == ["CODE", "COMM"]
    assert history[1]["scores"] == [
        {
            "competency_code": "COMM",
            "competency_name": "Communication",
            "required_score": 3,
            "actual_score": 1,
            "gap": 2,
        },
    ]


async def test_history_requires_employee_number(client, hr_headers):
    resp = await client.get("/evaluations", headers=hr_headers)
    assert resp.status_code == 422

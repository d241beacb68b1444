"""Department module test suite — CRUD, duplicate detection and delete protection."""

from __future__ import annotations

from competency_hub.common.constants import UserRole
from competency_hub.departments.models import Department
from tests.conftest import _make_department, create_employee, seed, seed_user


# ═════════════════════════════════════════════════════════════════════
# 1. DEPARTMENT CRUD
# ═════════════════════════════════════════════════════════════════════


class TestDepartmentCRUD:

    async def test_list_is_public(self, client, db):
        await seed(
            db,
            Department(**_make_department(code="OPS", name="Operations")),
            Department(**_make_department()),
        )
        resp = await client.get("/departments")
        assert resp.status_code == 200
        assert [d["department_code"] for d in resp.json()] == ["ENG", "OPS"]

    async def test_create_department(self, client, hr_headers):
        resp = await client.post(
            "/departments", json={"department_code": "FIN", "name": "Finance"}, headers=hr_headers,
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["department_code"] == "FIN"
        assert data["name"] == "Finance"
        assert isinstance(data["id"], int)

    async def test_create_requires_auth(self, client):
        resp = await client.post("/departments", json={"department_code": "FIN", "name": "Finance"})
        assert resp.status_code == 401

    async def test_update_department_name(self, client, hr_headers, department):
        resp = await client.put(
            "/departments/ENG", json={"name": "Platform Engineering"}, headers=hr_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["name"] == "Platform Engineering"
        assert resp.json()["department_code"] == "ENG"

    async def test_update_unknown_department(self, client, hr_headers):
        resp = await client.put("/departments/NOPE", json={"name": "x"}, headers=hr_headers)
        assert resp.status_code == 404
        assert resp.json()["type"].endswith("/not-found")

    async def test_delete_department(self, client, hr_headers):
        await client.post(
            "/departments", json={"department_code": "TMP", "name": "Temp"}, headers=hr_headers,
        )
        resp = await client.delete("/departments/TMP", headers=hr_headers)
        assert resp.status_code == 204

        codes = [d["department_code"] for d in (await client.get("/departments")).json()]
        assert "TMP" not in codes


# ═════════════════════════════════════════════════════════════════════
# 2. VALIDATION AND INTEGRITY
# ═════════════════════════════════════════════════════════════════════


class TestDepartmentIntegrity:

    async def test_duplicate_code_conflicts(self, client, hr_headers, department):
        resp = await client.post(
            "/departments", json={"department_code": "ENG", "name": "Again"}, headers=hr_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["errors"] == {"department_code": ["'ENG' is already in use."]}

    async def test_blank_name_rejected(self, client, hr_headers):
        resp = await client.post(
            "/departments", json={"department_code": "X", "name": ""}, headers=hr_headers,
        )
        assert resp.status_code == 422

    async def test_delete_with_employees_conflicts(self, client, hr_headers, catalog):
        await create_employee(client, hr_headers)
        resp = await client.delete("/departments/ENG", headers=hr_headers)
        assert resp.status_code == 409
        assert resp.json()["type"].endswith("/in-use")

    async def test_delete_with_hod_account_conflicts(self, client, db, hr_headers, department):
        await seed_user(
            db, username="hod", email="hod@example.com", role=UserRole.hod, department_code="ENG",
        )
        resp = await client.delete("/departments/ENG", headers=hr_headers)
        assert resp.status_code == 409
        assert "user account" in resp.json()["detail"]

"""Async HTTP client for the Competency Hub API.

Every call carries the stored bearer token. A 401 on an authenticated call
means the session is gone: the store is cleared and ``SessionExpiredError``
tells the caller where to send the user next.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Union

import httpx

from competency_hub.client.session import Session, SessionStore

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"


class ApiError(Exception):
    """Non-success HTTP response from the API."""

    def __init__(self, status_code: int, detail: Any) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"HTTP {status_code}: {detail}")


class SessionExpiredError(ApiError):
    """The bearer token was rejected; the local session has been cleared."""

    def __init__(self, detail: Any, redirect_to: str = LOGIN_PATH) -> None:
        super().__init__(401, detail)
        self.redirect_to = redirect_to


def _error_detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return body.get("detail") or body.get("error") or body
    return body


class CompetencyClient:
    """One coroutine per API endpoint."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        store: Optional[SessionStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15,
    ) -> None:
        self.store = store if store is not None else SessionStore()
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "CompetencyClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def session(self) -> Optional[Session]:
        return self.store.session

    # ── Transport ───────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if authenticated and self.store.token:
            headers["Authorization"] = f"Bearer {self.store.token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        response = await self._http.request(method, path, json=json, params=params, headers=headers)

        if response.status_code == 401 and authenticated:
            detail = _error_detail(response)
            logger.warning("%s %s rejected the session (%s); logging out", method, path, detail)
            self.store.clear()
            raise SessionExpiredError(detail)
        if response.is_error:
            detail = _error_detail(response)
            logger.error("%s %s failed with %d: %s", method, path, response.status_code, detail)
            raise ApiError(response.status_code, detail)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ── Auth ────────────────────────────────────────────────────────

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        role: str = "HR",
        department_code: Optional[str] = None,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/register",
            json={
                "username": username,
                "email": email,
                "password": password,
                "role": role,
                "department_code": department_code,
            },
            authenticated=False,
        )

    async def login(self, email: str, password: str) -> Session:
        payload = await self._request(
            "POST", "/login", json={"email": email, "password": password}, authenticated=False,
        )
        session = Session.from_login(payload)
        self.store.save(session)
        logger.info("Logged in as %s (%s)", session.username, session.role)
        return session

    async def logout(self) -> None:
        try:
            if self.store.token:
                await self._request("POST", "/logout")
        finally:
            self.store.clear()

    async def me(self) -> dict[str, Any]:
        return await self._request("GET", "/me")

    # ── Departments ─────────────────────────────────────────────────

    async def list_departments(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/departments")

    async def create_department(self, department_code: str, name: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/departments", json={"department_code": department_code, "name": name},
        )

    async def update_department(self, department_code: str, name: str) -> dict[str, Any]:
        return await self._request("PUT", f"/departments/{department_code}", json={"name": name})

    async def delete_department(self, department_code: str) -> None:
        await self._request("DELETE", f"/departments/{department_code}")

    # ── Roles ───────────────────────────────────────────────────────

    async def list_roles(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/roles")

    async def create_role(self, role_code: str, name: str) -> dict[str, Any]:
        return await self._request("POST", "/roles", json={"role_code": role_code, "name": name})

    async def update_role(
        self,
        role_id: int,
        *,
        role_code: Optional[str] = None,
        name: Optional[str] = None,
    ) -> dict[str, Any]:
        body = {k: v for k, v in {"role_code": role_code, "name": name}.items() if v is not None}
        return await self._request("PUT", f"/roles/{role_id}", json=body)

    async def delete_role(self, role_id: int) -> None:
        await self._request("DELETE", f"/roles/{role_id}")

    async def list_role_competencies(self, role_code: str) -> list[dict[str, Any]]:
        return await self._request("GET", f"/roles/{role_code}/competencies")

    async def assign_role_competencies(
        self,
        role_code: str,
        competencies: Iterable[Union[str, Mapping[str, Any]]],
    ) -> list[dict[str, Any]]:
        """Accepts bare codes or ``{competency_code, required_score}`` mappings."""
        body = [c if isinstance(c, str) else dict(c) for c in competencies]
        return await self._request("POST", f"/roles/{role_code}/competencies", json=body)

    async def remove_role_competencies(
        self,
        role_code: str,
        codes: Iterable[str],
    ) -> list[dict[str, Any]]:
        return await self._request("DELETE", f"/roles/{role_code}/competencies", json=list(codes))

    # ── Competencies ────────────────────────────────────────────────

    async def list_competencies(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/competency")

    async def create_competency(
        self,
        code: str,
        name: str,
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        return await self._request(
            "POST", "/competency", json={"code": code, "name": name, "description": description},
        )

    async def update_competency(self, competency_id: int, **fields: Any) -> dict[str, Any]:
        return await self._request("PUT", f"/competency/{competency_id}", json=fields)

    async def delete_competency(self, competency_id: int) -> None:
        await self._request("DELETE", f"/competency/{competency_id}")

    # ── Employees ───────────────────────────────────────────────────

    async def list_employees(
        self,
        *,
        search: Optional[str] = None,
        department_code: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        return await self._request(
            "GET",
            "/employees",
            params={"search": search, "department_code": department_code, "status": status},
        )

    async def get_employee(self, employee_number: str) -> dict[str, Any]:
        return await self._request("GET", f"/employees/{employee_number}")

    async def create_employee(self, **fields: Any) -> dict[str, Any]:
        return await self._request("POST", "/employees", json=fields)

    async def update_employee(self, employee_number: str, **fields: Any) -> dict[str, Any]:
        return await self._request("PUT", f"/employees/{employee_number}", json=fields)

    async def delete_employee(self, employee_number: str) -> None:
        await self._request("DELETE", f"/employees/{employee_number}")

    async def reset_evaluation_status(self, employee_numbers: Iterable[str]) -> dict[str, Any]:
        return await self._request(
            "PATCH",
            "/employees/evaluation-status",
            json={"employee_numbers": list(employee_numbers), "status": False},
        )

    async def list_employee_competencies(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/employee-competencies")

    async def get_employee_competencies(self, employee_number: str) -> list[dict[str, Any]]:
        return await self._request("GET", f"/employee-competencies/{employee_number}")

    # ── Evaluations ─────────────────────────────────────────────────

    async def submit_evaluation(
        self,
        employee_number: str,
        scores: Mapping[str, Optional[int]],
        evaluator_id: Optional[str] = None,
    ) -> dict[str, Any]:
        if evaluator_id is None and self.session is not None:
            evaluator_id = self.session.username
        return await self._request(
            "POST",
            "/evaluations",
            json={
                "employee_number": employee_number,
                "evaluator_id": evaluator_id,
                "scores": [
                    {"competency_code": code, "actual_score": score}
                    for code, score in scores.items()
                ],
            },
        )

    async def list_evaluations(self, employee_number: str) -> list[dict[str, Any]]:
        return await self._request(
            "GET", "/evaluations", params={"employee_number": employee_number},
        )

    # ── Analytics ───────────────────────────────────────────────────

    async def dashboard(self, department_code: Optional[str] = None) -> dict[str, Any]:
        return await self._request(
            "GET", "/analytics/dashboard", params={"department_code": department_code},
        )

    async def employee_metrics(self) -> dict[str, Any]:
        return await self._request("GET", "/analytics/employee-metrics")

"""Shared test fixtures — fake HR backend, API client, session controller, factories.

The fake backend is a FastAPI app mounted through ``httpx.ASGITransport``. It
keeps its records in memory, answers with the ``{success, data, message}``
envelope and issues python-jose JWTs, so the client is exercised over real
HTTP semantics without a server.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import httpx
import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from jose import JWTError, jwt

from hr_console.auth.session import SessionController
from hr_console.client import ApiClient
from hr_console.common.storage import MemoryTokenStorage

JWT_SECRET = "test-secret-for-ci-do-not-use-in-production"
JWT_ALGORITHM = "HS256"
BASE_URL = "http://test/api"

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "secret123"

PERMISSIONS = {
    "view_employees": True,
    "manage_departments": True,
    "approve_leave": True,
    "manage_payroll": False,
}


# ── Model factories ─────────────────────────────────────────────────

def _make_user(
    *,
    id: int = 1,
    name: str = "Sara Admin",
    email: str = ADMIN_EMAIL,
) -> dict:
    return dict(
        id=id,
        name=name,
        email=email,
        phone="0500000000",
        level="admin",
        status="active",
        created_at="2024-01-01T08:00:00Z",
        updated_at="2024-01-01T08:00:00Z",
    )


def _make_hr_employee(*, id: int = 10, employee_id: str = "EMP-0001") -> dict:
    return dict(
        id=id,
        employee_id=employee_id,
        department="Human Resources",
        position="HR Manager",
        hire_date="2023-02-01",
        employment_type="full-time",
        supervisor=None,
    )


def _make_department(
    *,
    id: int,
    name: str = "Engineering",
    code: str = "ENG",
    description: Optional[str] = None,
) -> dict:
    return dict(
        id=id,
        name=name,
        code=code,
        description=description,
        is_active=True,
        employees_count=0,
        created_at="2024-01-01T08:00:00Z",
        updated_at="2024-01-01T08:00:00Z",
    )


def _make_position(
    *,
    id: int,
    title: str = "Backend Engineer",
    code: str = "BE",
    base_salary_min: str = "8000.00",
    base_salary_max: str = "12000.00",
) -> dict:
    return dict(
        id=id,
        title=title,
        code=code,
        description=None,
        base_salary_min=base_salary_min,
        base_salary_max=base_salary_max,
        is_active=True,
        employees_count=0,
    )


def _make_employee(
    *,
    id: int,
    employee_id: str,
    name: str,
    email: str,
    department: Optional[dict] = None,
    position: Optional[dict] = None,
    is_active: bool = True,
) -> dict:
    return dict(
        id=id,
        user_id=id + 100,
        employee_id=employee_id,
        department_id=department["id"] if department else None,
        position_id=position["id"] if position else None,
        hire_date="2024-01-15",
        salary="9500.00",
        employment_type="full-time",
        is_active=is_active,
        user=_make_user(id=id + 100, name=name, email=email),
        department={"id": department["id"], "name": department["name"]} if department else None,
        position={"id": position["id"], "title": position["title"]} if position else None,
    )


def _make_leave_request(
    *,
    id: int,
    employee: dict,
    leave_type: str = "annual",
    start_date: str = "2024-06-02",
    end_date: str = "2024-06-04",
    status: str = "pending",
    reason: str = "Family visit",
) -> dict:
    days = (date.fromisoformat(end_date) - date.fromisoformat(start_date)).days + 1
    return dict(
        id=id,
        employee_id=employee["id"],
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        total_days=str(days),
        duration_type="days",
        reason=reason,
        status=status,
        employee={
            "id": employee["id"],
            "employee_id": employee["employee_id"],
            "user": {"id": employee["user"]["id"], "name": employee["user"]["name"]},
        },
    )


def _make_attendance(
    *,
    id: int,
    employee: dict,
    day: str,
    check_in_time: Optional[str] = "09:00:00",
    check_out_time: Optional[str] = None,
    notes: Optional[str] = None,
) -> dict:
    return dict(
        id=id,
        employee_id=employee["id"],
        date=day,
        check_in_time=check_in_time,
        check_out_time=check_out_time,
        total_hours="8.50" if check_out_time else None,
        attendance_type="regular",
        attendance_type_label="Regular",
        notes=notes,
        is_checked_in=check_in_time is not None,
        is_checked_out=check_out_time is not None,
        employee={"id": employee["id"], "name": employee["user"]["name"]},
    )


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(user_id: int, expired: bool = False) -> str:
    """Generate a JWT the fake backend accepts (with a unique jti)."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=8)
    payload = {"sub": str(user_id), "type": "access", "jti": uuid.uuid4().hex, "exp": exp}
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


# ═════════════════════════════════════════════════════════════════════
# Fake backend
# ═════════════════════════════════════════════════════════════════════


class FakeApiError(Exception):
    def __init__(self, status_code: int, message: str, errors: Optional[dict] = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors
        super().__init__(message)


class _Override(Exception):
    def __init__(self, response: Response):
        self.response = response


@dataclass
class RecordedCall:
    method: str
    path: str
    query: str
    params: dict[str, str]
    headers: dict[str, str]
    body: Any


class FakeBackend:
    """In-memory state behind the fake HR API."""

    def __init__(self) -> None:
        self.user = _make_user()
        self.hr_employee = _make_hr_employee()
        self.password = ADMIN_PASSWORD
        self.permissions = dict(PERMISSIONS)
        self.revoked: set[str] = set()
        self.calls: list[RecordedCall] = []
        self.overrides: dict[str, Response] = {}
        self._next_id = 100

        eng = _make_department(id=1, name="Engineering", code="ENG", description="Product engineering")
        hr = _make_department(id=2, name="Human Resources", code="HR")
        self.departments = {d["id"]: d for d in (eng, hr)}

        backend = _make_position(id=1, title="Backend Engineer", code="BE")
        recruiter = _make_position(
            id=2, title="Recruiter", code="REC", base_salary_min="5000.00", base_salary_max="7000.00",
        )
        self.positions = {p["id"]: p for p in (backend, recruiter)}

        alice = _make_employee(
            id=1, employee_id="EMP-0101", name="Alice Hassan", email="alice@example.com",
            department=eng, position=backend,
        )
        omar = _make_employee(
            id=2, employee_id="EMP-0102", name="Omar Saleh", email="omar@example.com",
            department=hr, position=recruiter,
        )
        khalid = _make_employee(
            id=3, employee_id="EMP-0103", name="Khalid Ali", email="khalid@example.com",
            department=eng, position=backend, is_active=False,
        )
        self.employees = {e["id"]: e for e in (alice, omar, khalid)}

        self.leave_types = [
            {"value": "annual", "label": "Annual Leave", "is_hourly_based": False},
            {"value": "sick", "label": "Sick Leave", "is_hourly_based": False},
            {"value": "permission", "label": "Short Permission", "is_hourly_based": True},
        ]
        self.leave_requests = {
            1: _make_leave_request(id=1, employee=alice),
            2: _make_leave_request(
                id=2, employee=omar, leave_type="sick", start_date="2024-05-10",
                end_date="2024-05-10", status="approved", reason="Flu",
            ),
        }

        self.attendances = {
            1: _make_attendance(
                id=1, employee=alice, day="2024-05-01", check_out_time="17:30:00",
                notes="Client visit",
            ),
            2: _make_attendance(id=2, employee=omar, day="2024-05-01"),
            3: _make_attendance(
                id=3, employee=alice, day="2024-05-02", check_out_time="17:00:00",
            ),
        }

    # ── Helpers ─────────────────────────────────────────────────────

    def next_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def issue_token(self, user_id: Optional[int] = None) -> str:
        return create_access_token(user_id or self.user["id"])

    def identity(self) -> dict:
        return {
            "user": self.user,
            "hr_employee": self.hr_employee,
            "permissions": self.permissions,
        }

    def last_call(self, path: Optional[str] = None) -> RecordedCall:
        calls = [c for c in self.calls if path is None or c.path == path]
        assert calls, f"no call recorded for {path}"
        return calls[-1]

    def call_count(self, path: str) -> int:
        return sum(1 for c in self.calls if c.path == path)


def _ok(data: Any = None, message: Optional[str] = None, status_code: int = 200) -> JSONResponse:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return JSONResponse(body, status_code=status_code)


def _paginate(rows: list, key: str, per_page: int = 15, page: int = 1) -> dict:
    start = (page - 1) * per_page
    return {
        key: rows[start:start + per_page],
        "pagination": {
            "current_page": page,
            "last_page": max(1, -(-len(rows) // per_page)),
            "per_page": per_page,
            "total": len(rows),
        },
    }


def _bearer(request: Request) -> Optional[str]:
    header = request.headers.get("authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):]


def create_fake_app(backend: FakeBackend) -> FastAPI:
    """FastAPI app serving the ``/api/hr`` routes the client talks to."""
    app = FastAPI()

    @app.exception_handler(FakeApiError)
    async def _api_error(request: Request, exc: FakeApiError):
        body: dict[str, Any] = {"success": False, "message": exc.message}
        if exc.errors:
            body["errors"] = exc.errors
        return JSONResponse(body, status_code=exc.status_code)

    @app.exception_handler(_Override)
    async def _override(request: Request, exc: _Override):
        return exc.response

    async def record(request: Request) -> RecordedCall:
        raw = await request.body()
        call = RecordedCall(
            method=request.method,
            path=request.url.path,
            query=request.url.query,
            params=dict(request.query_params),
            headers=dict(request.headers),
            body=json.loads(raw) if raw else None,
        )
        backend.calls.append(call)
        if call.path in backend.overrides:
            raise _Override(backend.overrides[call.path])
        return call

    async def current_user(request: Request) -> dict:
        token = _bearer(request)
        if token is None or token in backend.revoked:
            raise FakeApiError(401, "Unauthenticated.")
        try:
            payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        except JWTError:
            raise FakeApiError(401, "Unauthenticated.")
        if int(payload["sub"]) != backend.user["id"]:
            raise FakeApiError(401, "Unauthenticated.")
        return backend.user

    # ── Auth ────────────────────────────────────────────────────────

    @app.get("/api/hr/health")
    async def health(call: RecordedCall = Depends(record)):
        return {"status": "ok", "service": "hr"}

    @app.post("/api/hr/login")
    async def login(call: RecordedCall = Depends(record)):
        body = call.body or {}
        errors = {
            field: [f"The {field} field is required."]
            for field in ("email", "password")
            if not body.get(field)
        }
        if errors:
            raise FakeApiError(422, "The given data was invalid.", errors)
        if body["email"] != backend.user["email"] or body["password"] != backend.password:
            raise FakeApiError(401, "Invalid credentials")
        data = {**backend.identity(), "token": backend.issue_token()}
        return _ok(data, "Login successful")

    @app.post("/api/hr/logout")
    async def logout(
        request: Request,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        backend.revoked.add(_bearer(request))
        return _ok(message="Logged out")

    @app.get("/api/hr/me")
    async def me(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        return _ok(backend.identity())

    @app.post("/api/hr/refresh")
    async def refresh(
        request: Request,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        backend.revoked.add(_bearer(request))
        return _ok({"token": backend.issue_token()}, "Token refreshed")

    # ── Employees ───────────────────────────────────────────────────

    @app.get("/api/hr/employees")
    async def list_employees(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        params = call.params
        rows = list(backend.employees.values())
        if params.get("search"):
            term = params["search"].lower()
            rows = [
                e for e in rows
                if term in e["user"]["name"].lower() or term in e["employee_id"].lower()
            ]
        if params.get("department_id"):
            rows = [e for e in rows if e["department_id"] == int(params["department_id"])]
        if params.get("is_active"):
            active = params["is_active"] == "true"
            rows = [e for e in rows if e["is_active"] is active]
        page = int(params.get("page", 1))
        per_page = int(params.get("per_page", 15))
        return _ok(_paginate(rows, "employees", per_page=per_page, page=page))

    @app.get("/api/hr/employees/filter-options")
    async def employee_filter_options(
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        return _ok({
            "departments": [{"id": d["id"], "name": d["name"]} for d in backend.departments.values()],
            "positions": [{"id": p["id"], "title": p["title"]} for p in backend.positions.values()],
            "employment_types": ["full-time", "part-time", "contract", "intern"],
        })

    @app.get("/api/hr/employees/export")
    async def export_employees(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        return _ok({"file_url": "https://files.example.com/employees.xlsx"}, "Export ready")

    @app.get("/api/hr/employees/{employee_id}")
    async def get_employee(
        employee_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if employee_id not in backend.employees:
            raise FakeApiError(404, "Employee not found")
        return _ok(backend.employees[employee_id])

    @app.post("/api/hr/employees")
    async def create_employee(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        body = call.body
        if any(e["user"]["email"] == body["email"] for e in backend.employees.values()):
            raise FakeApiError(
                422,
                "The given data was invalid.",
                {"email": ["The email has already been taken."]},
            )
        employee = _make_employee(
            id=backend.next_id(),
            employee_id=f"EMP-{backend._next_id:04d}",
            name=body["name"],
            email=body["email"],
            department=backend.departments.get(body["department_id"]),
            position=backend.positions.get(body["position_id"]),
        )
        backend.employees[employee["id"]] = employee
        return _ok(employee, "Employee created", status_code=201)

    @app.put("/api/hr/employees/{employee_id}")
    async def update_employee(
        employee_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if employee_id not in backend.employees:
            raise FakeApiError(404, "Employee not found")
        employee = backend.employees[employee_id]
        for key in ("is_active", "employment_type", "notes"):
            if key in call.body:
                employee[key] = call.body[key]
        return _ok(employee, "Employee updated")

    @app.delete("/api/hr/employees/{employee_id}")
    async def delete_employee(
        employee_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if backend.employees.pop(employee_id, None) is None:
            raise FakeApiError(404, "Employee not found")
        return Response(status_code=204)

    # ── Departments ─────────────────────────────────────────────────

    @app.get("/api/hr/departments")
    async def list_departments(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        return _ok(_paginate(list(backend.departments.values()), "departments"))

    @app.get("/api/hr/departments/{department_id}")
    async def get_department(
        department_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if department_id not in backend.departments:
            raise FakeApiError(404, "Department not found")
        return _ok(backend.departments[department_id])

    @app.post("/api/hr/departments")
    async def create_department(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        body = call.body
        if any(d["code"] == body["code"] for d in backend.departments.values()):
            raise FakeApiError(422, "The given data was invalid.", {"code": ["The code has already been taken."]})
        department = _make_department(
            id=backend.next_id(), name=body["name"], code=body["code"],
            description=body.get("description"),
        )
        department["is_active"] = body.get("is_active", True)
        backend.departments[department["id"]] = department
        return _ok(department, "Department created", status_code=201)

    @app.put("/api/hr/departments/{department_id}")
    async def update_department(
        department_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if department_id not in backend.departments:
            raise FakeApiError(404, "Department not found")
        backend.departments[department_id].update(call.body)
        return _ok(backend.departments[department_id], "Department updated")

    @app.delete("/api/hr/departments/{department_id}")
    async def delete_department(
        department_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if any(e["department_id"] == department_id for e in backend.employees.values()):
            raise FakeApiError(409, "Cannot delete a department that still has employees")
        if backend.departments.pop(department_id, None) is None:
            raise FakeApiError(404, "Department not found")
        return _ok(message="Department deleted")

    # ── Positions ───────────────────────────────────────────────────

    @app.get("/api/hr/positions")
    async def list_positions(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        return _ok(_paginate(list(backend.positions.values()), "positions"))

    @app.get("/api/hr/positions/{position_id}")
    async def get_position(
        position_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if position_id not in backend.positions:
            raise FakeApiError(404, "Position not found")
        return _ok(backend.positions[position_id])

    @app.post("/api/hr/positions")
    async def create_position(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        body = call.body
        position = _make_position(
            id=backend.next_id(),
            title=body["title"],
            code=body["code"],
            base_salary_min=f"{body['base_salary_min']:.2f}",
            base_salary_max=f"{body['base_salary_max']:.2f}",
        )
        backend.positions[position["id"]] = position
        return _ok(position, "Position created", status_code=201)

    @app.put("/api/hr/positions/{position_id}")
    async def update_position(
        position_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if position_id not in backend.positions:
            raise FakeApiError(404, "Position not found")
        position = backend.positions[position_id]
        for key, value in call.body.items():
            position[key] = f"{value:.2f}" if key.startswith("base_salary") else value
        return _ok(position, "Position updated")

    @app.delete("/api/hr/positions/{position_id}")
    async def delete_position(
        position_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if backend.positions.pop(position_id, None) is None:
            raise FakeApiError(404, "Position not found")
        return _ok(message="Position deleted")

    # ── Leave requests ──────────────────────────────────────────────

    def _leave_or_404(leave_request_id: int) -> dict:
        if leave_request_id not in backend.leave_requests:
            raise FakeApiError(404, "Leave request not found")
        return backend.leave_requests[leave_request_id]

    def _require_pending(leave_request: dict, action: str) -> None:
        if leave_request["status"] != "pending":
            raise FakeApiError(422, f"Only pending requests can be {action}")

    @app.get("/api/hr/leave-requests")
    async def list_leave_requests(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        rows = list(backend.leave_requests.values())
        if call.params.get("status"):
            rows = [r for r in rows if r["status"] == call.params["status"]]
        if call.params.get("employee_id"):
            rows = [r for r in rows if r["employee_id"] == int(call.params["employee_id"])]
        return _ok({
            "current_page": 1,
            "data": rows,
            "from": 1 if rows else None,
            "to": len(rows) or None,
            "last_page": 1,
            "per_page": 15,
            "total": len(rows),
            "path": "http://test/api/hr/leave-requests",
        })

    @app.get("/api/hr/leave-requests/filter-options")
    async def leave_filter_options(
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        return _ok({
            "leave_types": backend.leave_types,
            "statuses": [
                {"value": s, "label": s.title()}
                for s in ("pending", "approved", "rejected", "cancelled")
            ],
            "employees": [
                {"id": e["id"], "name": e["user"]["name"], "employee_id": e["employee_id"]}
                for e in backend.employees.values()
            ],
        })

    @app.post("/api/hr/leave-requests/check-overlap")
    async def check_overlap(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        body = call.body
        start, end = body["start_date"], body["end_date"]
        overlapping = [
            r for r in backend.leave_requests.values()
            if r["employee_id"] == body["employee_id"]
            and r["status"] in ("pending", "approved")
            and r["start_date"] <= end and start <= r["end_date"]
        ]
        return _ok({"has_overlap": bool(overlapping), "overlapping_requests": overlapping})

    @app.get("/api/hr/leave-requests/{leave_request_id}")
    async def get_leave_request(
        leave_request_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        return _ok(_leave_or_404(leave_request_id))

    @app.post("/api/hr/leave-requests")
    async def create_leave_request(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        body = call.body
        employee = backend.employees.get(body["employee_id"])
        if employee is None:
            raise FakeApiError(422, "The given data was invalid.", {"employee_id": ["Unknown employee."]})
        leave_request = _make_leave_request(
            id=backend.next_id(),
            employee=employee,
            leave_type=body["leave_type"],
            start_date=body["start_date"],
            end_date=body["end_date"],
            reason=body["reason"],
        )
        leave_request["duration_type"] = body.get("duration_type", "days")
        backend.leave_requests[leave_request["id"]] = leave_request
        return _ok(leave_request, "Leave request created", status_code=201)

    @app.put("/api/hr/leave-requests/{leave_request_id}")
    async def update_leave_request(
        leave_request_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        leave_request = _leave_or_404(leave_request_id)
        _require_pending(leave_request, "edited")
        leave_request.update(call.body)
        return _ok(leave_request, "Leave request updated")

    @app.delete("/api/hr/leave-requests/{leave_request_id}")
    async def delete_leave_request(
        leave_request_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        _leave_or_404(leave_request_id)
        del backend.leave_requests[leave_request_id]
        return _ok(message="Leave request deleted")

    @app.post("/api/hr/leave-requests/{leave_request_id}/approve")
    async def approve_leave_request(
        leave_request_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        leave_request = _leave_or_404(leave_request_id)
        _require_pending(leave_request, "approved")
        leave_request.update(
            status="approved",
            approved_by=user["id"],
            approved_at="2024-06-01T10:00:00Z",
            notes=(call.body or {}).get("notes"),
        )
        return _ok(leave_request, "Leave request approved")

    @app.post("/api/hr/leave-requests/{leave_request_id}/reject")
    async def reject_leave_request(
        leave_request_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        leave_request = _leave_or_404(leave_request_id)
        _require_pending(leave_request, "rejected")
        reason = (call.body or {}).get("rejection_reason")
        if not reason:
            raise FakeApiError(
                422, "The given data was invalid.",
                {"rejection_reason": ["The rejection reason field is required."]},
            )
        leave_request.update(status="rejected", rejection_reason=reason)
        return _ok(leave_request, "Leave request rejected")

    @app.post("/api/hr/leave-requests/{leave_request_id}/cancel")
    async def cancel_leave_request(
        leave_request_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        leave_request = _leave_or_404(leave_request_id)
        _require_pending(leave_request, "cancelled")
        leave_request["status"] = "cancelled"
        return _ok(leave_request, "Leave request cancelled")

    # ── Attendance ──────────────────────────────────────────────────

    def _attendance_rows(params: dict[str, str]) -> list[dict]:
        rows = list(backend.attendances.values())
        if params.get("date"):
            rows = [a for a in rows if a["date"] == params["date"]]
        if params.get("employee_id"):
            rows = [a for a in rows if a["employee_id"] == int(params["employee_id"])]
        if params.get("start_date"):
            rows = [a for a in rows if a["date"] >= params["start_date"]]
        if params.get("end_date"):
            rows = [a for a in rows if a["date"] <= params["end_date"]]
        return rows

    def _open_attendance(employee_id: int) -> Optional[dict]:
        for row in backend.attendances.values():
            if row["employee_id"] == employee_id and row["is_checked_in"] and not row["is_checked_out"]:
                return row
        return None

    @app.get("/api/hr/attendances")
    async def list_attendances(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        return _ok(_paginate(_attendance_rows(call.params), "attendances"))

    @app.get("/api/hr/attendances/statistics")
    async def attendance_statistics(
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        rows = list(backend.attendances.values())
        return _ok({
            "total_days": len({a["date"] for a in rows}),
            "total_employees": len({a["employee_id"] for a in rows}),
            "total_checkins": sum(1 for a in rows if a["is_checked_in"]),
            "total_checkouts": sum(1 for a in rows if a["is_checked_out"]),
            "average_hours": 8.25,
            "total_hours": 16.5,
        })

    @app.get("/api/hr/attendances/today-stats")
    async def today_stats(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        return _ok({
            "total_employees": len(backend.employees),
            "checked_in": 2,
            "checked_out": 1,
            "with_location": 1,
            "late_arrivals": 0,
            "absent": 1,
        })

    @app.get("/api/hr/attendances/export")
    async def export_attendances(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        return _ok({"file_url": "https://files.example.com/attendance.xlsx"}, "Export ready")

    @app.get("/api/hr/attendances/{attendance_id}")
    async def get_attendance(
        attendance_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if attendance_id not in backend.attendances:
            raise FakeApiError(404, "Attendance record not found")
        return _ok(backend.attendances[attendance_id])

    @app.post("/api/hr/attendances")
    async def create_attendance(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        body = call.body
        employee = backend.employees[body["employee_id"]]
        row = _make_attendance(
            id=backend.next_id(),
            employee=employee,
            day=(body.get("check_in_time") or "2024-05-03 09:00:00")[:10],
            check_in_time=body.get("check_in_time"),
            check_out_time=body.get("check_out_time"),
            notes=body.get("notes"),
        )
        backend.attendances[row["id"]] = row
        return _ok(row, "Attendance created", status_code=201)

    @app.put("/api/hr/attendances/{attendance_id}")
    async def update_attendance(
        attendance_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if attendance_id not in backend.attendances:
            raise FakeApiError(404, "Attendance record not found")
        row = backend.attendances[attendance_id]
        row.update(call.body)
        return _ok(row, "Attendance updated")

    @app.delete("/api/hr/attendances/{attendance_id}")
    async def delete_attendance(
        attendance_id: int,
        call: RecordedCall = Depends(record),
        user: dict = Depends(current_user),
    ):
        if backend.attendances.pop(attendance_id, None) is None:
            raise FakeApiError(404, "Attendance record not found")
        return Response(status_code=204)

    @app.post("/api/hr/attendance/checkin")
    async def check_in(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        body = call.body
        if _open_attendance(body["employee_id"]) is not None:
            raise FakeApiError(422, "Already checked in")
        row = _make_attendance(
            id=backend.next_id(),
            employee=backend.employees[body["employee_id"]],
            day="2024-05-03",
            check_in_time=body.get("check_in_time") or "09:05:00",
            notes=body.get("notes"),
        )
        row["latitude"] = body.get("latitude")
        row["longitude"] = body.get("longitude")
        backend.attendances[row["id"]] = row
        return _ok(row, "Checked in")

    @app.post("/api/hr/attendance/checkout")
    async def check_out(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        row = _open_attendance(call.body["employee_id"])
        if row is None:
            raise FakeApiError(422, "No open check-in found")
        row.update(
            check_out_time=call.body.get("check_out_time") or "17:10:00",
            is_checked_out=True,
            total_hours="8.08",
        )
        return _ok(row, "Checked out")

    @app.get("/api/hr/attendance/status")
    async def current_status(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        row = _open_attendance(int(call.params["employee_id"]))
        return _ok({
            "is_checked_in": row is not None,
            "is_checked_out": False,
            "attendance": row,
        })

    @app.get("/api/hr/attendance/history")
    async def history(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        return _ok(_attendance_rows(call.params))

    @app.get("/api/hr/attendance/branch-info")
    async def branch_info(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        return _ok({
            "branch": {"id": 1, "name": "Riyadh HQ", "latitude": 24.7136, "longitude": 46.6753},
            "allowed_radius_meters": 150,
        })

    @app.post("/api/hr/attendance/admin/checkin")
    async def admin_check_in(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        body = call.body
        row = _make_attendance(
            id=backend.next_id(),
            employee=backend.employees[body["employee_id"]],
            day=body.get("date") or "2024-05-03",
            check_in_time=body.get("time") or "09:00:00",
            notes=body.get("notes"),
        )
        backend.attendances[row["id"]] = row
        return _ok(row, "Checked in by admin")

    @app.post("/api/hr/attendance/admin/checkout")
    async def admin_check_out(call: RecordedCall = Depends(record), user: dict = Depends(current_user)):
        row = _open_attendance(call.body["employee_id"])
        if row is None:
            raise FakeApiError(422, "No open check-in found")
        row.update(check_out_time=call.body.get("time") or "17:00:00", is_checked_out=True)
        return _ok(row, "Checked out by admin")

    return app


# ═════════════════════════════════════════════════════════════════════
# Fixtures
# ═════════════════════════════════════════════════════════════════════


class RecordingNotifier:
    """Collects notifications instead of showing them."""

    def __init__(self) -> None:
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def app(backend) -> FastAPI:
    return create_fake_app(backend)


@pytest.fixture
def storage() -> MemoryTokenStorage:
    return MemoryTokenStorage()


@pytest.fixture
async def api(app, storage):
    """ApiClient wired to the fake backend, not logged in."""
    client = ApiClient(BASE_URL, storage=storage, transport=httpx.ASGITransport(app=app))
    yield client
    await client.aclose()


@pytest.fixture
async def auth_api(api, backend):
    """ApiClient holding a valid token for the admin user."""
    api.set_token(backend.issue_token())
    return api


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def controller(api, notifier) -> SessionController:
    return SessionController(api, notifier)


def mock_client(handler, storage: Optional[MemoryTokenStorage] = None, **kwargs) -> ApiClient:
    """ApiClient over ``httpx.MockTransport`` for transport-level scenarios."""
    return ApiClient(
        BASE_URL,
        storage=storage,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )

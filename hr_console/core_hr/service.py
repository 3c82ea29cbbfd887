"""Core HR API — employee, department and position endpoints.

Uses:
  - ``request`` / ``request_model`` from hr_console.common.http
  - ``with_query`` from hr_console.common.filters for list query strings
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Union

from hr_console.common.envelope import ApiResponse
from hr_console.common.filters import FilterInput, apply_search, with_query
from hr_console.common.http import BaseApiClient, dump_body, validate_body
from hr_console.core_hr.schemas import (
    Department,
    DepartmentCreate,
    DepartmentsResponse,
    DepartmentUpdate,
    Employee,
    EmployeeCreate,
    EmployeeFilters,
    EmployeesResponse,
    EmployeeUpdate,
    Position,
    PositionCreate,
    PositionsResponse,
    PositionUpdate,
)

Payload = Union[Mapping[str, Any], Any]


# ═════════════════════════════════════════════════════════════════════
# EmployeeApi
# ═════════════════════════════════════════════════════════════════════


class EmployeeApi(BaseApiClient):
    """/hr/employees endpoints."""

    async def get_employees(self, filters: FilterInput = None) -> ApiResponse:
        endpoint = with_query("/hr/employees", filters, EmployeeFilters)
        return await self.request_model(endpoint, EmployeesResponse)

    async def get_employee(self, employee_id: int) -> ApiResponse:
        return await self.request_model(f"/hr/employees/{employee_id}", Employee)

    async def create_employee(self, data: Union[EmployeeCreate, Payload]) -> ApiResponse:
        body = dump_body(validate_body(data, EmployeeCreate))
        return await self.request_model("/hr/employees", Employee, method="POST", json_body=body)

    async def update_employee(
        self,
        employee_id: int,
        data: Union[EmployeeUpdate, Payload],
    ) -> ApiResponse:
        body = dump_body(validate_body(data, EmployeeUpdate))
        return await self.request_model(
            f"/hr/employees/{employee_id}", Employee, method="PUT", json_body=body,
        )

    async def delete_employee(self, employee_id: int) -> ApiResponse:
        return await self.request(f"/hr/employees/{employee_id}", method="DELETE")

    async def get_employee_filter_options(self) -> ApiResponse:
        return await self.request("/hr/employees/filter-options")

    async def export_employees(self, filters: FilterInput = None) -> ApiResponse:
        return await self.request(with_query("/hr/employees/export", filters, EmployeeFilters))


# ═════════════════════════════════════════════════════════════════════
# DepartmentApi
# ═════════════════════════════════════════════════════════════════════


class DepartmentApi(BaseApiClient):
    """/hr/departments endpoints."""

    async def get_departments(self) -> ApiResponse:
        return await self.request_model("/hr/departments", DepartmentsResponse)

    async def get_department(self, department_id: int) -> ApiResponse:
        return await self.request_model(f"/hr/departments/{department_id}", Department)

    async def create_department(self, data: Union[DepartmentCreate, Payload]) -> ApiResponse:
        """POST /hr/departments. Plain mappings go through the form rules first."""
        body = dump_body(validate_body(data, DepartmentCreate))
        return await self.request_model("/hr/departments", Department, method="POST", json_body=body)

    async def update_department(
        self,
        department_id: int,
        data: Union[DepartmentUpdate, Payload],
    ) -> ApiResponse:
        body = dump_body(validate_body(data, DepartmentUpdate))
        return await self.request_model(
            f"/hr/departments/{department_id}", Department, method="PUT", json_body=body,
        )

    async def delete_department(self, department_id: int) -> ApiResponse:
        return await self.request(f"/hr/departments/{department_id}", method="DELETE")


# ═════════════════════════════════════════════════════════════════════
# PositionApi
# ═════════════════════════════════════════════════════════════════════


class PositionApi(BaseApiClient):
    """/hr/positions endpoints."""

    async def get_positions(self) -> ApiResponse:
        return await self.request_model("/hr/positions", PositionsResponse)

    async def get_position(self, position_id: int) -> ApiResponse:
        return await self.request_model(f"/hr/positions/{position_id}", Position)

    async def create_position(self, data: Union[PositionCreate, Payload]) -> ApiResponse:
        """POST /hr/positions. Plain mappings go through the form rules first."""
        body = dump_body(validate_body(data, PositionCreate))
        return await self.request_model("/hr/positions", Position, method="POST", json_body=body)

    async def update_position(
        self,
        position_id: int,
        data: Union[PositionUpdate, Payload],
    ) -> ApiResponse:
        body = dump_body(validate_body(data, PositionUpdate))
        return await self.request_model(
            f"/hr/positions/{position_id}", Position, method="PUT", json_body=body,
        )

    async def delete_position(self, position_id: int) -> ApiResponse:
        return await self.request(f"/hr/positions/{position_id}", method="DELETE")


# ── Client-side search ──────────────────────────────────────────────

def filter_departments(
    departments: Optional[Sequence[Department]],
    term: Optional[str],
) -> list[Department]:
    """Departments whose name, code or description contain *term*."""
    return apply_search(departments, term, lambda d: (d.name, d.code, d.description))


def filter_positions(
    positions: Optional[Sequence[Position]],
    term: Optional[str],
) -> list[Position]:
    """Positions whose title, code or description contain *term*."""
    return apply_search(positions, term, lambda p: (p.title, p.code, p.description))


def filter_employees(
    employees: Optional[Sequence[Employee]],
    term: Optional[str],
) -> list[Employee]:
    """Employees whose name, email or employee number contain *term*."""
    return apply_search(
        employees,
        term,
        lambda e: (
            e.user.name if e.user else None,
            e.user.email if e.user else None,
            e.employee_id,
        ),
    )

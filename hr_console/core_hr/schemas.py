"""Core HR Pydantic v2 schemas — employees, departments and positions.

Naming conventions:
  - *Create / *Update  → request bodies (write), carrying the form rules
  - *Filters           → list query parameters
  - *Response          → list endpoint payloads
  - bare name          → a record as the server returns it
"""


from decimal import Decimal
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from hr_console.auth.schemas import HrUser
from hr_console.common.filters import ListFilters
from hr_console.common.pagination import PaginationMeta


def _upper_code(value: Optional[str]) -> Optional[str]:
    return value.upper() if value is not None else value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_salary_range(low: Optional[float], high: Optional[float]) -> Optional[float]:
    if low is not None and high is not None and high < low:
        raise ValueError("maximum salary must be greater than or equal to the minimum")
    return high


# ═════════════════════════════════════════════════════════════════════
# Embedded
# ═════════════════════════════════════════════════════════════════════


class DepartmentBrief(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    name: str


class PositionBrief(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    title: str


class SupervisorBrief(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    user: Optional[HrUser] = None


# ═════════════════════════════════════════════════════════════════════
# Department
# ═════════════════════════════════════════════════════════════════════


class Department(BaseModel):
    """Full department representation."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    code: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    employees_count: Optional[int] = None


class DepartmentCreate(BaseModel):
    """Payload for creating a department. ``code`` is sent upper-cased."""

    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=10)
    description: Optional[str] = None
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def _normalise_code(cls, value: str) -> str:
        return _upper_code(value)

    @field_validator("description", mode="before")
    @classmethod
    def _drop_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


class DepartmentUpdate(BaseModel):
    """Partial-update payload for a department (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = Field(None, min_length=1, max_length=10)
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("code")
    @classmethod
    def _normalise_code(cls, value: Optional[str]) -> Optional[str]:
        return _upper_code(value)


class DepartmentsResponse(BaseModel):
    departments: list[Department] = Field(default_factory=list)
    pagination: Optional[PaginationMeta] = None


# ═════════════════════════════════════════════════════════════════════
# Position
# ═════════════════════════════════════════════════════════════════════


class Position(BaseModel):
    """Full position representation; salaries arrive as decimal strings."""

    model_config = ConfigDict(extra="allow")

    id: int
    title: str
    code: str
    description: Optional[str] = None
    base_salary_min: Decimal = Decimal("0")
    base_salary_max: Decimal = Decimal("0")
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    employees_count: Optional[int] = None

    @property
    def salary_range(self) -> str:
        return f"{self.base_salary_min:,.2f} - {self.base_salary_max:,.2f}"


class PositionCreate(BaseModel):
    """Payload for creating a position. ``code`` is sent upper-cased."""

    title: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=15)
    description: Optional[str] = None
    base_salary_min: float = Field(..., ge=0)
    base_salary_max: float = Field(..., ge=0)
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def _normalise_code(cls, value: str) -> str:
        return _upper_code(value)

    @field_validator("description", mode="before")
    @classmethod
    def _drop_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("base_salary_max")
    @classmethod
    def _salary_range(cls, value: float, info: ValidationInfo) -> float:
        return _check_salary_range(info.data.get("base_salary_min"), value)


class PositionUpdate(BaseModel):
    """Partial-update payload; the salary range is checked when both ends are given."""

    title: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = Field(None, min_length=1, max_length=15)
    description: Optional[str] = None
    base_salary_min: Optional[float] = Field(None, ge=0)
    base_salary_max: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("code")
    @classmethod
    def _normalise_code(cls, value: Optional[str]) -> Optional[str]:
        return _upper_code(value)

    @field_validator("base_salary_max")
    @classmethod
    def _salary_range(cls, value: Optional[float], info: ValidationInfo) -> Optional[float]:
        return _check_salary_range(info.data.get("base_salary_min"), value)


class PositionsResponse(BaseModel):
    positions: list[Position] = Field(default_factory=list)
    pagination: Optional[PaginationMeta] = None


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(BaseModel):
    """Employee record with its embedded user, department and position."""

    model_config = ConfigDict(extra="allow")

    id: int
    user_id: Optional[int] = None
    employee_id: str
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    hire_date: Optional[str] = None
    salary: Optional[Decimal] = None
    employment_type: Optional[str] = None
    work_schedule: Optional[str] = None
    supervisor_id: Optional[int] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    bank_account_number: Optional[str] = None
    tax_id: Optional[str] = None
    is_active: bool = True
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    user: Optional[HrUser] = None
    department: Optional[DepartmentBrief] = None
    position: Optional[PositionBrief] = None
    supervisor: Optional[SupervisorBrief] = None

    @property
    def display_name(self) -> str:
        return self.user.name if self.user else self.employee_id


class EmployeeFilters(ListFilters):
    """Query parameters accepted by GET /hr/employees and its export."""

    search: Optional[str] = None
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    employment_type: Optional[str] = None
    is_active: Optional[bool] = None
    page: Optional[int] = None
    per_page: Optional[int] = None


class EmployeeCreate(BaseModel):
    """Payload for creating an employee together with its user account."""

    # User information
    name: str = Field(..., min_length=1)
    email: EmailStr
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None
    city_id: int = Field(..., ge=1)
    branch_id: int = Field(..., ge=1)
    level: Optional[str] = None
    status: Optional[str] = None

    # Employee information
    department_id: int = Field(..., ge=1)
    position_id: int = Field(..., ge=1)
    hire_date: str = Field(..., min_length=1)
    employment_type: str = Field(..., min_length=1)
    is_active: bool = True

    # Optional details
    salary: Optional[float] = None
    work_schedule: Optional[str] = None
    supervisor_id: Optional[int] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    bank_account_number: Optional[str] = None
    tax_id: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_optionals(cls, data: Any) -> Any:
        """Form fields left empty are not sent at all."""
        if isinstance(data, dict):
            return {key: _blank_to_none(value) for key, value in data.items()}
        return data


class EmployeeUpdate(BaseModel):
    """Partial-update payload for an employee (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    department_id: Optional[int] = Field(None, ge=1)
    position_id: Optional[int] = Field(None, ge=1)
    hire_date: Optional[str] = None
    employment_type: Optional[str] = None
    is_active: Optional[bool] = None
    salary: Optional[float] = None
    work_schedule: Optional[str] = None
    supervisor_id: Optional[int] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    bank_account_number: Optional[str] = None
    tax_id: Optional[str] = None
    notes: Optional[str] = None


class EmployeesResponse(BaseModel):
    employees: list[Employee] = Field(default_factory=list)
    pagination: Optional[PaginationMeta] = None

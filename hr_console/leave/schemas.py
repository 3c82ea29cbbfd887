"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Update   → request bodies (write)
  - *Filters            → list query parameters
  - *Brief              → compact embedded representations
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from hr_console.common.constants import DurationType
from hr_console.common.filters import ListFilters
from hr_console.common.pagination import PaginatorPage


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class UserBrief(BaseModel):
    """User account embedded in leave responses (employee owner, approver)."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    username: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    level: Optional[str] = None


class LeaveDepartmentBrief(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    code: Optional[str] = None
    color: Optional[str] = None


class LeaveEmployeeBrief(BaseModel):
    """Requesting employee as embedded in a leave request."""

    model_config = ConfigDict(extra="allow")

    id: int
    employee_id: str
    user_id: Optional[int] = None
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    is_active: bool = True
    user: Optional[UserBrief] = None
    department: Optional[LeaveDepartmentBrief] = None


# ═════════════════════════════════════════════════════════════════════
# Leave Request — record
# ═════════════════════════════════════════════════════════════════════


class LeaveRequest(BaseModel):
    """Full leave request as returned by the server."""

    model_config = ConfigDict(extra="allow")

    id: int
    employee_id: int
    leave_type: str
    start_date: str
    end_date: str
    start_datetime: Optional[str] = None
    end_datetime: Optional[str] = None
    total_days: Optional[Decimal] = None
    total_hours: Optional[Decimal] = None
    duration_type: str = DurationType.days.value
    reason: str = ""
    status: str
    approved_by: Optional[int] = None
    approved_at: Optional[str] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    employee: Optional[LeaveEmployeeBrief] = None
    approver: Optional[UserBrief] = None

    @property
    def is_hourly(self) -> bool:
        return self.duration_type == DurationType.hours.value


class LeaveRequestsResponse(PaginatorPage):
    """Paginator body — rows in ``data``."""

    data: list[LeaveRequest] = Field(default_factory=list)


# ═════════════════════════════════════════════════════════════════════
# Leave Request — write
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for filing a leave request."""

    employee_id: int = Field(..., ge=1)
    leave_type: str = Field(..., min_length=1)
    start_date: date = Field(..., description="Leave start date (inclusive)")
    end_date: date = Field(..., description="Leave end date (inclusive)")
    start_datetime: Optional[str] = None
    end_datetime: Optional[str] = None
    duration_type: DurationType = DurationType.days
    reason: str = Field(..., min_length=1)
    notes: Optional[str] = None

    @field_validator("start_datetime", "end_datetime", "notes", mode="before")
    @classmethod
    def _drop_blank(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("end_date")
    @classmethod
    def _end_after_start(cls, value: date, info: ValidationInfo) -> date:
        start = info.data.get("start_date")
        if start is not None and value < start:
            raise ValueError("end date must be on or after the start date")
        return value


class LeaveRequestUpdate(LeaveRequestCreate):
    """Edit payload — the edit form resubmits every field."""


class LeaveApproveRequest(BaseModel):
    notes: Optional[str] = None


class LeaveRejectRequest(BaseModel):
    rejection_reason: str


class LeaveRequestFilters(ListFilters):
    """Query parameters accepted by GET /hr/leave-requests."""

    employee_id: Optional[int] = None
    leave_type: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    page: Optional[int] = None
    per_page: Optional[int] = None


# ═════════════════════════════════════════════════════════════════════
# Filter options
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeOption(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: str
    label: str
    arabic_label: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_hourly_based: bool = False


class LeaveStatusOption(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: str
    label: str
    arabic_label: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class LeaveEmployeeOption(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    employee_id: str
    department: Optional[str] = None


class LeaveRequestFilterOptions(BaseModel):
    model_config = ConfigDict(extra="allow")

    leave_types: list[LeaveTypeOption] = Field(default_factory=list)
    statuses: list[LeaveStatusOption] = Field(default_factory=list)
    employees: list[LeaveEmployeeOption] = Field(default_factory=list)

    def leave_type(self, value: str) -> Optional[LeaveTypeOption]:
        for option in self.leave_types:
            if option.value == value:
                return option
        return None

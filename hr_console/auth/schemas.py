"""Auth Pydantic schemas for request / response validation."""


from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Requests ────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: str
    password: str
    remember_me: Optional[bool] = None


# ── Embedded / Shared ──────────────────────────────────────────────

class HrUser(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    level: Optional[str] = None
    status: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class HrEmployee(BaseModel):
    """Employee profile attached to the logged-in user."""

    model_config = ConfigDict(extra="allow")

    id: int
    employee_id: str
    department: Optional[str] = None
    position: Optional[str] = None
    hire_date: Optional[str] = None
    employment_type: Optional[str] = None
    supervisor: Optional[str] = None


# ── Responses ───────────────────────────────────────────────────────

class MeResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    user: HrUser
    hr_employee: HrEmployee
    permissions: dict[str, bool] = Field(default_factory=dict)

    @field_validator("permissions", mode="before")
    @classmethod
    def _list_means_none_granted(cls, value: Any) -> Any:
        # PHP serialises an empty associative array as []
        if value is None or isinstance(value, list):
            return {}
        return value


class LoginResponse(MeResponse):
    token: str


class RefreshResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    token: str

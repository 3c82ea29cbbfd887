"""ApiClient — the single entry point to the HR backend.

Composes every resource API over one shared ``httpx.AsyncClient`` and token.
"""

from __future__ import annotations

from typing import Optional

import httpx

from hr_console.attendance.service import AttendanceApi
from hr_console.auth.service import AuthApi
from hr_console.common.storage import TokenStorage
from hr_console.config import Settings, get_settings
from hr_console.core_hr.service import DepartmentApi, EmployeeApi, PositionApi
from hr_console.leave.service import LeaveRequestApi


class ApiClient(
    AuthApi,
    EmployeeApi,
    DepartmentApi,
    PositionApi,
    LeaveRequestApi,
    AttendanceApi,
):
    """Auth, employees, departments, positions, leave requests and attendance."""


def create_client(
    settings: Optional[Settings] = None,
    storage: Optional[TokenStorage] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ApiClient:
    """Build an :class:`ApiClient` from ``Settings`` (the environment by default)."""
    settings = settings or get_settings()
    return ApiClient(
        settings.base_url,
        storage=storage,
        token_key=settings.HR_TOKEN_KEY,
        transport=transport,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        get_retries=settings.HTTP_GET_RETRIES,
        retry_backoff=settings.HTTP_RETRY_BACKOFF_SECONDS,
    )

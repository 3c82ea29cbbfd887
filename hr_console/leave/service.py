"""Leave API — leave-request CRUD, approval workflow and form helpers.

Client-side rules:
  - Hourly-based leave types switch the request's duration type to ``hours``
  - Date-range overlap is never judged locally; ``check_leave_request_overlap``
    asks the server
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Union

from hr_console.common.constants import DurationType
from hr_console.common.envelope import ApiResponse
from hr_console.common.filters import FilterInput, apply_search, with_query
from hr_console.common.http import BaseApiClient, dump_body, validate_body
from hr_console.leave.schemas import (
    LeaveApproveRequest,
    LeaveRejectRequest,
    LeaveRequest,
    LeaveRequestCreate,
    LeaveRequestFilterOptions,
    LeaveRequestFilters,
    LeaveRequestsResponse,
    LeaveRequestUpdate,
)

Payload = Union[Mapping[str, Any], Any]


# ═════════════════════════════════════════════════════════════════════
# LeaveRequestApi
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestApi(BaseApiClient):
    """/hr/leave-requests endpoints."""

    # ── CRUD ────────────────────────────────────────────────────────

    async def get_leave_requests(self, filters: FilterInput = None) -> ApiResponse:
        endpoint = with_query("/hr/leave-requests", filters, LeaveRequestFilters)
        return await self.request_model(endpoint, LeaveRequestsResponse)

    async def get_leave_request(self, leave_request_id: int) -> ApiResponse:
        return await self.request_model(f"/hr/leave-requests/{leave_request_id}", LeaveRequest)

    async def create_leave_request(
        self,
        data: Union[LeaveRequestCreate, Payload],
    ) -> ApiResponse:
        body = dump_body(validate_body(data, LeaveRequestCreate))
        return await self.request_model(
            "/hr/leave-requests", LeaveRequest, method="POST", json_body=body,
        )

    async def update_leave_request(
        self,
        leave_request_id: int,
        data: Union[LeaveRequestUpdate, Payload],
    ) -> ApiResponse:
        body = dump_body(validate_body(data, LeaveRequestUpdate))
        return await self.request_model(
            f"/hr/leave-requests/{leave_request_id}", LeaveRequest, method="PUT", json_body=body,
        )

    async def delete_leave_request(self, leave_request_id: int) -> ApiResponse:
        return await self.request(f"/hr/leave-requests/{leave_request_id}", method="DELETE")

    # ── Workflow ────────────────────────────────────────────────────

    async def approve_leave_request(
        self,
        leave_request_id: int,
        notes: Optional[str] = None,
    ) -> ApiResponse:
        return await self.request_model(
            f"/hr/leave-requests/{leave_request_id}/approve",
            LeaveRequest,
            method="POST",
            json_body=dump_body(LeaveApproveRequest(notes=notes)),
        )

    async def reject_leave_request(
        self,
        leave_request_id: int,
        rejection_reason: str,
    ) -> ApiResponse:
        return await self.request_model(
            f"/hr/leave-requests/{leave_request_id}/reject",
            LeaveRequest,
            method="POST",
            json_body=dump_body(LeaveRejectRequest(rejection_reason=rejection_reason)),
        )

    async def cancel_leave_request(self, leave_request_id: int) -> ApiResponse:
        return await self.request_model(
            f"/hr/leave-requests/{leave_request_id}/cancel", LeaveRequest, method="POST",
        )

    # ── Lookups ─────────────────────────────────────────────────────

    async def get_leave_request_filter_options(self) -> ApiResponse:
        return await self.request_model(
            "/hr/leave-requests/filter-options", LeaveRequestFilterOptions,
        )

    async def check_leave_request_overlap(self, data: Payload) -> ApiResponse:
        """POST /hr/leave-requests/check-overlap with a (possibly partial) request."""
        return await self.request(
            "/hr/leave-requests/check-overlap", method="POST", json_body=dump_body(data),
        )


# ── Form helpers ────────────────────────────────────────────────────

def resolve_duration_type(
    leave_type: Optional[str],
    options: Optional[LeaveRequestFilterOptions],
) -> DurationType:
    """``hours`` for an hourly-based leave type, ``days`` otherwise (or when unknown)."""
    if not leave_type or options is None:
        return DurationType.days
    option = options.leave_type(leave_type)
    if option is not None and option.is_hourly_based:
        return DurationType.hours
    return DurationType.days


def leave_type_label(leave_type: str, options: Optional[LeaveRequestFilterOptions]) -> str:
    """Display label for *leave_type*, falling back to the raw value."""
    option = options.leave_type(leave_type) if options is not None else None
    if option is None:
        return leave_type
    return option.arabic_label or option.label or leave_type


def filter_leave_requests(
    leave_requests: Optional[Sequence[LeaveRequest]],
    term: Optional[str],
) -> list[LeaveRequest]:
    """Leave requests whose employee name, employee number or reason contain *term*."""

    def _fields(request: LeaveRequest):
        employee = request.employee
        return (
            employee.user.name if employee and employee.user else None,
            employee.employee_id if employee else None,
            request.reason,
        )

    return apply_search(leave_requests, term, _fields)

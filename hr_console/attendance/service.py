"""Attendance API — records, statistics, exports and check-in / check-out.

Routes:
    /hr/attendances              — list, create (admin records)
    /hr/attendances/{id}         — get, update, delete
    /hr/attendances/statistics   — aggregate totals
    /hr/attendances/today-stats  — today's dashboard counters
    /hr/attendances/export       — export with the list filters
    /hr/attendance/checkin       — self-service check-in (geolocation + photo)
    /hr/attendance/checkout      — self-service check-out
    /hr/attendance/status        — current check-in state of an employee
    /hr/attendance/history       — an employee's records in a date range
    /hr/attendance/branch-info   — the employee's assigned branch
    /hr/attendance/admin/*       — admin override check-in / check-out
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Union

from hr_console.attendance.schemas import (
    AdminAttendanceRequest,
    Attendance,
    AttendanceCreate,
    AttendanceFilters,
    AttendancesResponse,
    AttendanceStatistics,
    AttendanceUpdate,
    CheckInRequest,
    CheckOutRequest,
    TodayStats,
)
from hr_console.common.envelope import ApiResponse
from hr_console.common.filters import FilterInput, apply_search, build_query_string, with_query
from hr_console.common.http import BaseApiClient, dump_body, validate_body

Payload = Union[Mapping[str, Any], Any]


class AttendanceApi(BaseApiClient):
    """Attendance records and the check-in / check-out flow."""

    # ── Records ─────────────────────────────────────────────────────

    async def get_attendances(self, filters: FilterInput = None) -> ApiResponse:
        endpoint = with_query("/hr/attendances", filters, AttendanceFilters)
        return await self.request_model(endpoint, AttendancesResponse)

    async def get_attendance(self, attendance_id: int) -> ApiResponse:
        return await self.request_model(f"/hr/attendances/{attendance_id}", Attendance)

    async def create_attendance(self, data: Union[AttendanceCreate, Payload]) -> ApiResponse:
        body = dump_body(validate_body(data, AttendanceCreate))
        return await self.request_model("/hr/attendances", Attendance, method="POST", json_body=body)

    async def update_attendance(
        self,
        attendance_id: int,
        data: Union[AttendanceUpdate, Payload],
    ) -> ApiResponse:
        body = dump_body(validate_body(data, AttendanceUpdate))
        return await self.request_model(
            f"/hr/attendances/{attendance_id}", Attendance, method="PUT", json_body=body,
        )

    async def delete_attendance(self, attendance_id: int) -> ApiResponse:
        return await self.request(f"/hr/attendances/{attendance_id}", method="DELETE")

    # ── Aggregates / export ─────────────────────────────────────────

    async def get_attendance_statistics(self) -> ApiResponse:
        return await self.request_model("/hr/attendances/statistics", AttendanceStatistics)

    async def get_today_stats(self) -> ApiResponse:
        return await self.request_model("/hr/attendances/today-stats", TodayStats)

    async def export_attendances(self, filters: FilterInput = None) -> ApiResponse:
        return await self.request(
            with_query("/hr/attendances/export", filters, AttendanceFilters),
        )

    # ── Check-in / check-out ────────────────────────────────────────

    async def check_in(
        self,
        employee_id: int,
        check_in_time: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        notes: Optional[str] = None,
        photo: Optional[str] = None,
    ) -> ApiResponse:
        """Check in with optional geolocation and a base64-encoded photo."""
        body = CheckInRequest(
            employee_id=employee_id,
            check_in_time=check_in_time,
            latitude=latitude,
            longitude=longitude,
            notes=notes,
            photo=photo,
        )
        return await self.request_model(
            "/hr/attendance/checkin", Attendance, method="POST", json_body=dump_body(body),
        )

    async def check_out(
        self,
        employee_id: int,
        check_out_time: Optional[str] = None,
        notes: Optional[str] = None,
        photo: Optional[str] = None,
    ) -> ApiResponse:
        body = CheckOutRequest(
            employee_id=employee_id,
            check_out_time=check_out_time,
            notes=notes,
            photo=photo,
        )
        return await self.request_model(
            "/hr/attendance/checkout", Attendance, method="POST", json_body=dump_body(body),
        )

    async def get_current_status(self, employee_id: int) -> ApiResponse:
        query = build_query_string({"employee_id": employee_id})
        return await self.request(f"/hr/attendance/status?{query}")

    async def get_employee_history(
        self,
        employee_id: int,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> ApiResponse:
        params: dict[str, Any] = {"employee_id": employee_id}
        if start_date:
            params["start_date"] = start_date
        if end_date:
            params["end_date"] = end_date
        return await self.request_model(
            f"/hr/attendance/history?{build_query_string(params)}", list[Attendance],
        )

    async def get_employee_branch_info(self, employee_id: int) -> ApiResponse:
        query = build_query_string({"employee_id": employee_id})
        return await self.request(f"/hr/attendance/branch-info?{query}")

    # ── Admin overrides ─────────────────────────────────────────────

    async def admin_check_in(
        self,
        employee_id: int,
        date: Optional[str] = None,
        time: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ApiResponse:
        body = AdminAttendanceRequest(employee_id=employee_id, date=date, time=time, notes=notes)
        return await self.request_model(
            "/hr/attendance/admin/checkin", Attendance, method="POST", json_body=dump_body(body),
        )

    async def admin_check_out(
        self,
        employee_id: int,
        date: Optional[str] = None,
        time: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ApiResponse:
        body = AdminAttendanceRequest(employee_id=employee_id, date=date, time=time, notes=notes)
        return await self.request_model(
            "/hr/attendance/admin/checkout", Attendance, method="POST", json_body=dump_body(body),
        )


# ── Client-side search ──────────────────────────────────────────────

def filter_attendances(
    attendances: Optional[Sequence[Attendance]],
    term: Optional[str],
) -> list[Attendance]:
    """Records whose employee name, employee id or notes contain *term*."""
    return apply_search(
        attendances,
        term,
        lambda a: (
            a.employee.name if a.employee else None,
            a.employee.id if a.employee else None,
            a.notes,
        ),
    )

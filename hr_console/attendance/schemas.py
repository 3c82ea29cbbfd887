"""Attendance Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Filters            → list query parameters
  - *Stats / *Statistics → dashboard aggregates
"""


import base64
import binascii
import datetime as dt
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hr_console.common.filters import ListFilters
from hr_console.common.pagination import PaginationMeta


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_base64(value: Optional[str]) -> Optional[str]:
    """Accept raw base64 or a ``data:<mime>;base64,`` URL."""
    if value is None:
        return value
    encoded = value
    if value.startswith("data:"):
        header, _, encoded = value.partition(",")
        if not header.endswith(";base64"):
            raise ValueError("photo data URL must be base64-encoded")
    try:
        base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("photo must be a base64-encoded image") from None
    return value


# ═════════════════════════════════════════════════════════════════════
# Embedded
# ═════════════════════════════════════════════════════════════════════


class AttendanceLocation(BaseModel):
    """Check-in / check-out location details recorded by the server."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    address: Optional[str] = None
    device_info: Optional[str] = None
    check_in_time: Optional[str] = None
    checkout_name: Optional[str] = None
    checkout_time: Optional[str] = None
    checkout_address: Optional[str] = None
    checkout_latitude: Optional[str] = None
    checkout_longitude: Optional[str] = None
    checkout_branch_name: Optional[str] = None
    checkout_device_info: Optional[str] = None
    checkout_location_status: Optional[str] = None
    checkout_distance_from_branch: Optional[float] = None
    checkout_is_at_assigned_branch: Optional[bool] = None


class AttendanceImage(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    url: str
    thumbnail_url: Optional[str] = None
    medium_url: Optional[str] = None
    large_url: Optional[str] = None
    uploaded_at: Optional[str] = None
    file_name: Optional[str] = None
    size: Optional[int] = None
    mime_type: Optional[str] = None


class AttendanceImages(BaseModel):
    model_config = ConfigDict(extra="allow")

    check_in: Optional[AttendanceImage] = None
    check_out: Optional[AttendanceImage] = None


class NamedBrief(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    name: Optional[str] = None
    title: Optional[str] = None


class AttendanceEmployeeBrief(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    branch: Optional[NamedBrief] = None
    department: Optional[NamedBrief] = None
    position: Optional[NamedBrief] = None


# ═════════════════════════════════════════════════════════════════════
# Attendance record
# ═════════════════════════════════════════════════════════════════════


class Attendance(BaseModel):
    """Single attendance row; ``is_checked_in`` / ``is_checked_out`` come from the server."""

    model_config = ConfigDict(extra="allow")

    id: int
    employee_id: int
    date: str
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    total_hours: Optional[Union[float, str]] = None
    attendance_type: Optional[str] = None
    attendance_type_label: Optional[str] = None
    attendance_type_description: Optional[str] = None
    attendance_type_color: Optional[str] = None
    attendance_type_icon: Optional[str] = None
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location: Optional[AttendanceLocation] = None
    images: Optional[AttendanceImages] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_checked_in: bool = False
    is_checked_out: bool = False
    employee: Optional[AttendanceEmployeeBrief] = None

    @property
    def hours_worked(self) -> Optional[float]:
        """``total_hours`` as a number, or ``None`` when missing / not numeric."""
        if self.total_hours in (None, ""):
            return None
        try:
            return float(self.total_hours)
        except (TypeError, ValueError):
            return None


class AttendancesResponse(BaseModel):
    attendances: list[Attendance] = Field(default_factory=list)
    pagination: Optional[PaginationMeta] = None


class AttendanceFilters(ListFilters):
    """Query parameters accepted by GET /hr/attendances and its export."""

    employee_id: Optional[int] = None
    date: Optional[dt.date] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    attendance_type: Optional[str] = None
    page: Optional[int] = None
    per_page: Optional[int] = None


# ═════════════════════════════════════════════════════════════════════
# Write payloads
# ═════════════════════════════════════════════════════════════════════


class AttendanceCreate(BaseModel):
    """Manual attendance entry. ``photo`` is a base64-encoded image."""

    employee_id: int = Field(..., ge=1)
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    attendance_type: Optional[str] = None
    notes: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    photo: Optional[str] = None

    @field_validator("check_in_time", "check_out_time", "attendance_type", "notes", "photo", mode="before")
    @classmethod
    def _drop_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("photo")
    @classmethod
    def _photo_is_base64(cls, value: Optional[str]) -> Optional[str]:
        return _check_base64(value)


class AttendanceUpdate(AttendanceCreate):
    employee_id: Optional[int] = Field(None, ge=1)


class CheckInRequest(BaseModel):
    """Self-service check-in with optional geolocation and photo."""

    employee_id: int = Field(..., ge=1)
    check_in_time: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    notes: Optional[str] = None
    photo: Optional[str] = None

    @field_validator("photo")
    @classmethod
    def _photo_is_base64(cls, value: Optional[str]) -> Optional[str]:
        return _check_base64(value)


class CheckOutRequest(BaseModel):
    employee_id: int = Field(..., ge=1)
    check_out_time: Optional[str] = None
    notes: Optional[str] = None
    photo: Optional[str] = None

    @field_validator("photo")
    @classmethod
    def _photo_is_base64(cls, value: Optional[str]) -> Optional[str]:
        return _check_base64(value)


class AdminAttendanceRequest(BaseModel):
    """Admin override check-in / check-out on behalf of an employee."""

    employee_id: int = Field(..., ge=1)
    date: Optional[str] = None
    time: Optional[str] = None
    notes: Optional[str] = None


# ═════════════════════════════════════════════════════════════════════
# Aggregates
# ═════════════════════════════════════════════════════════════════════


class AttendanceStatistics(BaseModel):
    model_config = ConfigDict(extra="allow")

    total_days: int = 0
    total_employees: int = 0
    total_checkins: int = 0
    total_checkouts: int = 0
    average_hours: float = 0.0
    total_hours: float = 0.0


class TodayStats(BaseModel):
    model_config = ConfigDict(extra="allow")

    total_employees: int = 0
    checked_in: int = 0
    checked_out: int = 0
    with_location: int = 0
    late_arrivals: int = 0
    absent: int = 0

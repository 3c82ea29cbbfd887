"""Enums and constants for the HR console — matching the backend's string values."""

from __future__ import annotations

import enum


# ── Employee / Core HR ──────────────────────────────────────────────

class EmploymentType(str, enum.Enum):
    full_time = "full-time"
    part_time = "part-time"
    contract = "contract"
    intern = "intern"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


class DurationType(str, enum.Enum):
    days = "days"
    hours = "hours"


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceType(str, enum.Enum):
    regular = "regular"
    late = "late"
    overtime = "overtime"
    remote = "remote"


# ── Session ─────────────────────────────────────────────────────────

class SessionPhase(str, enum.Enum):
    initializing = "initializing"
    unauthenticated = "unauthenticated"
    authenticated = "authenticated"
    transitioning = "transitioning"


# ── Client messages ─────────────────────────────────────────────────

NETWORK_ERROR_MESSAGE = "Network error occurred"
GENERIC_ERROR_MESSAGE = "An error occurred"
LOGIN_SUCCESS_MESSAGE = "Logged in successfully!"
LOGIN_FAILED_MESSAGE = "Login failed"
LOGOUT_SUCCESS_MESSAGE = "Logged out successfully"

# ── Misc constants ──────────────────────────────────────────────────

TOKEN_STORAGE_KEY = "hr_token"
DEFAULT_BASE_URL = "http://localhost:8000/api"
DEFAULT_PAGE_SIZE = 15

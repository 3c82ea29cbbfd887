"""Attendance module — attendance records, check-in / check-out and aggregates."""

from hr_console.attendance.schemas import Attendance

__all__ = ["Attendance"]

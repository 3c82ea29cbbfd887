"""Leave module — leave request schemas, approval workflow calls and helpers."""

from hr_console.leave.schemas import LeaveRequest

__all__ = ["LeaveRequest"]

"""Core HR module — Employee, Department, Position schemas and API calls."""

from hr_console.core_hr.schemas import Department, Employee, Position

__all__ = ["Employee", "Department", "Position"]

"""Common module — shared client utilities for the HR console."""

from hr_console.common.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_PAGE_SIZE,
    TOKEN_STORAGE_KEY,
    AttendanceType,
    DurationType,
    EmploymentType,
    LeaveStatus,
    SessionPhase,
)
from hr_console.common.envelope import ApiResponse
from hr_console.common.exceptions import ApiError
from hr_console.common.filters import (
    ListFilters,
    apply_search,
    build_query_string,
    filter_params,
    matches_search,
    with_query,
)
from hr_console.common.pagination import PaginationMeta, PaginatorPage
from hr_console.common.storage import FileTokenStorage, MemoryTokenStorage, TokenStorage

__all__ = [
    # Constants / Enums
    "AttendanceType",
    "DurationType",
    "EmploymentType",
    "LeaveStatus",
    "SessionPhase",
    "DEFAULT_BASE_URL",
    "DEFAULT_PAGE_SIZE",
    "TOKEN_STORAGE_KEY",
    # Envelope / errors
    "ApiResponse",
    "ApiError",
    # Filters
    "ListFilters",
    "apply_search",
    "build_query_string",
    "filter_params",
    "matches_search",
    "with_query",
    # Pagination
    "PaginationMeta",
    "PaginatorPage",
    # Storage
    "TokenStorage",
    "MemoryTokenStorage",
    "FileTokenStorage",
]

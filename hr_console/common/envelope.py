"""Uniform ``{success, data, message, errors}`` result returned by every API call."""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from hr_console.common.constants import NETWORK_ERROR_MESSAGE
from hr_console.common.exceptions import ApiError

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Normalised outcome of one backend round trip.

    ``status_code`` is the HTTP status when a response arrived, ``None`` when
    the transport failed or the body could not be parsed.
    """

    success: bool
    data: Optional[T] = None
    message: Optional[str] = None
    errors: Optional[dict[str, list[str]]] = None
    status_code: Optional[int] = None

    # ── Constructors ────────────────────────────────────────────────

    @classmethod
    def ok(
        cls,
        data: Any = None,
        message: Optional[str] = None,
        status_code: Optional[int] = 200,
    ) -> "ApiResponse":
        return cls(success=True, data=data, message=message, status_code=status_code)

    @classmethod
    def fail(
        cls,
        message: str,
        errors: Optional[dict[str, list[str]]] = None,
        status_code: Optional[int] = None,
    ) -> "ApiResponse":
        return cls(success=False, message=message, errors=errors, status_code=status_code)

    @classmethod
    def network_error(cls) -> "ApiResponse":
        return cls(success=False, message=NETWORK_ERROR_MESSAGE)

    # ── Helpers ─────────────────────────────────────────────────────

    @property
    def is_network_error(self) -> bool:
        return not self.success and self.status_code is None

    @property
    def is_unauthorized(self) -> bool:
        return not self.success and self.status_code == 401

    def unwrap(self) -> T:
        """Return ``data`` or raise :class:`ApiError` for a failed response."""
        if not self.success:
            raise ApiError(
                self.message or NETWORK_ERROR_MESSAGE,
                status_code=self.status_code,
                errors=self.errors,
            )
        return self.data  # type: ignore[return-value]

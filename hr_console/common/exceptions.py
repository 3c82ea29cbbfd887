"""Client-side exceptions raised when a caller opts out of the response envelope."""

from __future__ import annotations

from typing import Any, Optional


class ApiError(Exception):
    """A failed :class:`~hr_console.common.envelope.ApiResponse`, raised by ``unwrap()``.

    ``status_code`` is ``None`` for transport failures (the request never
    produced a usable HTTP response).
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[dict[str, list[str]]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.errors = errors or {}
        super().__init__(message)

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None

    def field_messages(self, field: str) -> list[str]:
        """Server messages attached to a single form field."""
        return list(self.errors.get(field, []))

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": False,
            "message": self.message,
        }
        if self.status_code is not None:
            body["status"] = self.status_code
        if self.errors:
            body["errors"] = self.errors
        return body

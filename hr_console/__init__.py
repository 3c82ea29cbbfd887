"""HR Console — async client and session controller for the HR administration API."""

from hr_console.auth.session import LoggingNotifier, Notifier, SessionController, SessionState
from hr_console.client import ApiClient, create_client
from hr_console.common.envelope import ApiResponse
from hr_console.common.exceptions import ApiError
from hr_console.common.storage import FileTokenStorage, MemoryTokenStorage, TokenStorage

__version__ = "2.0.0"

__all__ = [
    "ApiClient",
    "create_client",
    "ApiResponse",
    "ApiError",
    "SessionController",
    "SessionState",
    "Notifier",
    "LoggingNotifier",
    "TokenStorage",
    "MemoryTokenStorage",
    "FileTokenStorage",
]

"""Auth module — login/logout/me/refresh calls and the session controller."""

from hr_console.auth.session import SessionController, SessionState

__all__ = ["SessionController", "SessionState"]

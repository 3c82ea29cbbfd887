"""Session controller — who is logged in and what they may do.

State machine:
    initializing ──initialize()──► authenticated | unauthenticated
    unauthenticated ──login()──► transitioning ──► authenticated | unauthenticated
    authenticated ──refresh_token()──► transitioning ──► authenticated | unauthenticated
    any ──logout()──► unauthenticated

Every change replaces the whole :class:`SessionState` snapshot, so the user
and the employee profile always appear and disappear together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Protocol, Union

from hr_console.auth.schemas import HrEmployee, HrUser, LoginRequest, MeResponse
from hr_console.common.constants import (
    LOGIN_FAILED_MESSAGE,
    LOGIN_SUCCESS_MESSAGE,
    LOGOUT_SUCCESS_MESSAGE,
    SessionPhase,
)

if TYPE_CHECKING:
    from hr_console.auth.service import AuthApi

logger = logging.getLogger(__name__)

Listener = Callable[["SessionState"], None]


# ═════════════════════════════════════════════════════════════════════
# Notifications
# ═════════════════════════════════════════════════════════════════════


class Notifier(Protocol):
    """Receives user-facing success / error messages."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier — writes notifications to the ``hr_console.notify`` logger."""

    def __init__(self, logger_name: str = "hr_console.notify") -> None:
        self._logger = logging.getLogger(logger_name)

    def success(self, message: str) -> None:
        self._logger.info(message)

    def error(self, message: str) -> None:
        self._logger.error(message)


# ═════════════════════════════════════════════════════════════════════
# State snapshot
# ═════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SessionState:
    user: Optional[HrUser] = None
    employee_profile: Optional[HrEmployee] = None
    permissions: Mapping[str, bool] = field(default_factory=dict)
    loading: bool = True
    initialized: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.employee_profile is not None

    @property
    def phase(self) -> SessionPhase:
        if not self.initialized:
            return SessionPhase.initializing
        if self.loading:
            return SessionPhase.transitioning
        if self.is_authenticated:
            return SessionPhase.authenticated
        return SessionPhase.unauthenticated


# ═════════════════════════════════════════════════════════════════════
# Controller
# ═════════════════════════════════════════════════════════════════════


class SessionController:
    """Single writer of the session state, built on an :class:`AuthApi` client."""

    def __init__(self, api: "AuthApi", notifier: Optional[Notifier] = None) -> None:
        self.api = api
        self.notifier: Notifier = notifier if notifier is not None else LoggingNotifier()
        self.last_error: Optional[str] = None
        self._state = SessionState()
        self._listeners: list[Listener] = []
        self._initialized = False
        self._closed = False

    # ── Read side ───────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Optional[HrUser]:
        return self._state.user

    @property
    def employee_profile(self) -> Optional[HrEmployee]:
        return self._state.employee_profile

    @property
    def permissions(self) -> Mapping[str, bool]:
        return self._state.permissions

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def closed(self) -> bool:
        return self._closed

    def has_permission(self, name: str) -> bool:
        return bool(self._state.permissions.get(name, False))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with every new snapshot; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Detach: later state writes (e.g. from in-flight calls) are dropped."""
        self._closed = True
        self._listeners.clear()

    # ── State writes ────────────────────────────────────────────────

    def _set_state(self, **changes: Any) -> None:
        if self._closed:
            logger.debug("Session closed, dropping state update %s", sorted(changes))
            return
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    def _adopt(self, identity: MeResponse) -> None:
        self._set_state(
            user=identity.user,
            employee_profile=identity.hr_employee,
            permissions=dict(identity.permissions),
        )

    def _clear(self) -> None:
        self._set_state(user=None, employee_profile=None, permissions={})

    # ── Lifecycle ───────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Resolve the stored token into a session. Runs once; later calls are no-ops."""
        if self._initialized:
            return
        self._initialized = True
        try:
            response = await self.api.me()
            if response.success and response.data is not None:
                self._adopt(response.data)
            else:
                logger.info("Stored session is not valid (%s)", response.message)
                self.api.set_token(None)
        finally:
            self._set_state(loading=False, initialized=True)

    async def login(self, credentials: Union[LoginRequest, Mapping[str, Any]]) -> bool:
        """Log in; exactly one success or error notification is emitted."""
        self._set_state(loading=True)
        try:
            response = await self.api.login(credentials)
            if response.success and response.data is not None:
                self.last_error = None
                self._adopt(response.data)
                self.notifier.success(LOGIN_SUCCESS_MESSAGE)
                return True

            self.last_error = response.message or LOGIN_FAILED_MESSAGE
            self.notifier.error(self.last_error)
            return False
        finally:
            self._set_state(loading=False, initialized=True)

    async def logout(self) -> None:
        """End the session locally whatever the server answers."""
        try:
            response = await self.api.logout()
            if not response.success:
                logger.warning("Server logout failed: %s", response.message)
        finally:
            self._clear()
            self.api.set_token(None)
            self.notifier.success(LOGOUT_SUCCESS_MESSAGE)

    async def refresh_user(self) -> None:
        """Re-read identity and permissions; any failure ends the session."""
        response = await self.api.me()
        if response.success and response.data is not None:
            self._adopt(response.data)
            return
        logger.info("Identity refresh failed (%s), logging out", response.message)
        await self.logout()

    async def refresh_token(self) -> bool:
        """Swap the bearer token for a fresh one, then re-sync identity."""
        self._set_state(loading=True)
        try:
            response = await self.api.refresh()
            if response.success:
                await self.refresh_user()
                return self._state.is_authenticated
            logger.info("Token refresh failed (%s), logging out", response.message)
            await self.logout()
            return False
        finally:
            self._set_state(loading=False)

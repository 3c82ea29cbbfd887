"""Async HTTP core shared by every resource API — token handling and the
``request`` primitive that normalises all outcomes into an :class:`ApiResponse`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping, Optional

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from hr_console.common.constants import (
    DEFAULT_BASE_URL,
    GENERIC_ERROR_MESSAGE,
    TOKEN_STORAGE_KEY,
)
from hr_console.common.envelope import ApiResponse
from hr_console.common.storage import MemoryTokenStorage, TokenStorage

logger = logging.getLogger(__name__)

_IDEMPOTENT_METHODS = frozenset({"GET"})


def _unwrap_payload(body: Any) -> Any:
    """Return ``body["data"]`` unless it is missing, null, false, "" or 0.

    Empty lists and objects count as data and are returned as they are.
    """
    if isinstance(body, dict):
        nested = body.get("data")
        if nested is not None and nested is not False and nested != "" and nested != 0:
            return nested
    return body


def _error_fields(body: Any) -> Optional[dict[str, list[str]]]:
    if not isinstance(body, dict):
        return None
    raw = body.get("errors")
    if not isinstance(raw, dict):
        return None
    errors: dict[str, list[str]] = {}
    for field, messages in raw.items():
        if isinstance(messages, (list, tuple)):
            errors[str(field)] = [str(m) for m in messages]
        else:
            errors[str(field)] = [str(messages)]
    return errors


class BaseApiClient:
    """Owns the bearer token and the underlying ``httpx.AsyncClient``.

    Resource APIs subclass this and only build endpoints and bodies; all
    transport concerns stay here.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        storage: Optional[TokenStorage] = None,
        token_key: str = TOKEN_STORAGE_KEY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
        get_retries: int = 0,
        retry_backoff: float = 0.5,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.storage: TokenStorage = storage if storage is not None else MemoryTokenStorage()
        self.token_key = token_key
        self.get_retries = max(0, get_retries)
        self.retry_backoff = retry_backoff
        self._http = httpx.AsyncClient(transport=transport, timeout=timeout)
        self._token: Optional[str] = self.storage.get(self.token_key)

    # ── Lifecycle ───────────────────────────────────────────────────

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ── Token ───────────────────────────────────────────────────────

    @property
    def has_token(self) -> bool:
        return self._token is not None

    def set_token(self, token: Optional[str]) -> None:
        """Adopt *token* and persist it; ``None`` forgets any stored value."""
        self._token = token or None
        if self._token:
            self.storage.set(self.token_key, self._token)
        else:
            self.storage.remove(self.token_key)

    # ── Request primitive ───────────────────────────────────────────

    def _headers(self, extra: Optional[Mapping[str, str]]) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        if extra:
            headers.update(extra)
        return headers

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        json_body: Any,
    ) -> httpx.Response:
        """Send once, or retry transport failures for idempotent methods."""
        attempts = 1 + (self.get_retries if method in _IDEMPOTENT_METHODS else 0)
        for attempt in range(1, attempts + 1):
            try:
                return await self._http.request(
                    method,
                    url,
                    headers=headers,
                    content=None if json_body is None else json.dumps(json_body),
                )
            except httpx.TransportError as exc:
                if attempt >= attempts:
                    raise
                wait = self.retry_backoff * attempt
                logger.info(
                    "%s %s failed (%s), retry %d/%d in %.1fs",
                    method, url, exc, attempt, attempts - 1, wait,
                )
                await asyncio.sleep(wait)
        raise RuntimeError("unreachable")  # pragma: no cover

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        json_body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ApiResponse:
        """
        Perform one call against ``base_url + endpoint``.

        Never raises for transport or HTTP failures; those become a failed
        :class:`ApiResponse`. Serialisation errors in *json_body* propagate.
        """
        method = method.upper()
        url = f"{self.base_url}{endpoint}"
        request_headers = self._headers(headers)

        try:
            response = await self._send(method, url, request_headers, json_body)
        except httpx.HTTPError as exc:
            logger.error("API request failed: %s %s: %s", method, url, exc)
            return ApiResponse.network_error()

        try:
            body = response.json() if response.content else {}
        except ValueError as exc:
            logger.error(
                "API request failed: %s %s returned unparsable body (%s)",
                method, url, exc,
            )
            return ApiResponse.network_error()

        if not response.is_success:
            message = GENERIC_ERROR_MESSAGE
            if isinstance(body, dict) and body.get("message"):
                message = str(body["message"])
            logger.warning("%s %s → %d: %s", method, url, response.status_code, message)
            return ApiResponse.fail(
                message,
                errors=_error_fields(body),
                status_code=response.status_code,
            )

        payload = _unwrap_payload(body) if response.content else None
        message = body.get("message") if isinstance(body, dict) else None
        return ApiResponse.ok(payload, message=message, status_code=response.status_code)

    async def request_model(
        self,
        endpoint: str,
        model: Any,
        **kwargs: Any,
    ) -> ApiResponse:
        """:meth:`request`, then validate a successful payload into *model*.

        A payload that does not fit *model* is handled like an unparsable body.
        """
        response = await self.request(endpoint, **kwargs)
        if not response.success or response.data is None:
            return response
        try:
            response.data = TypeAdapter(model).validate_python(response.data)
        except ValidationError as exc:
            logger.error("Unexpected payload from %s: %s", endpoint, exc)
            return ApiResponse.network_error()
        return response


def dump_body(payload: Any) -> Any:
    """JSON-ready body for a write payload, omitting unset optional fields."""
    if payload is None:
        return None
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", exclude_none=True)
    return {key: value for key, value in dict(payload).items() if value is not None}


def validate_body(payload: Any, model: type[BaseModel]) -> BaseModel:
    """Run a plain mapping through the write *model*; models pass as given.

    Raises ``ValidationError`` before anything is sent.
    """
    if isinstance(payload, BaseModel):
        return payload
    return model.model_validate(dict(payload))

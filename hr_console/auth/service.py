"""Auth API — login, logout, identity lookup and token refresh."""

from __future__ import annotations

from typing import Any, Mapping, Union

from hr_console.auth.schemas import LoginRequest, LoginResponse, MeResponse, RefreshResponse
from hr_console.common.envelope import ApiResponse
from hr_console.common.http import BaseApiClient, dump_body


class AuthApi(BaseApiClient):
    """Endpoints under ``/hr`` that create, inspect or end a session."""

    async def login(
        self,
        credentials: Union[LoginRequest, Mapping[str, Any]],
    ) -> ApiResponse:
        """POST /hr/login — stores the issued token on success."""
        if not isinstance(credentials, LoginRequest):
            credentials = LoginRequest.model_validate(dict(credentials))

        response = await self.request_model(
            "/hr/login",
            LoginResponse,
            method="POST",
            json_body=dump_body(credentials),
        )
        if response.success and response.data is not None and response.data.token:
            self.set_token(response.data.token)
        return response

    async def logout(self) -> ApiResponse:
        """POST /hr/logout — forgets the token when the server confirms."""
        response = await self.request("/hr/logout", method="POST")
        if response.success:
            self.set_token(None)
        return response

    async def me(self) -> ApiResponse:
        """GET /hr/me — the current user, employee profile and permissions."""
        return await self.request_model("/hr/me", MeResponse)

    async def refresh(self) -> ApiResponse:
        """POST /hr/refresh — swaps in the newly issued token on success."""
        response = await self.request_model("/hr/refresh", RefreshResponse, method="POST")
        if response.success and response.data is not None and response.data.token:
            self.set_token(response.data.token)
        return response

    async def health(self) -> ApiResponse:
        return await self.request("/hr/health")

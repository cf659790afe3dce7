from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .constants import (
    LOGIN_PATH,
    LOGOUT_PATH,
    PROFILE_PATH,
    REFRESH_PATH,
    REGISTER_PATH,
)
from .errors import AuthApiError, AuthResponseError, AuthTransportError
from .models import AuthResponse, RefreshResponse, User
from .token_store import TokenKeys, TokenStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class AuthClient:
    """Talks to the backend's /api/auth and /api/users endpoints.

    Every failure raises a subclass of AuthClientError. Calls that need
    authorisation pick the access token up from the token store and send it
    as a Bearer header.
    """

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        timeout_sec: float = 8.0,
        keys: Optional[TokenKeys] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.store = token_store
        self.keys = keys if keys is not None else TokenKeys()
        self.timeout = timeout_sec
        self._transport = transport

    async def _headers(self) -> Dict[str, str]:
        access = await self.store.get(self.keys.access)
        if not access:
            return {}
        return {"Authorization": f"Bearer {access}"}

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        authorized: bool = False,
    ) -> Any:
        if not self.base_url:
            raise AuthTransportError("auth base url is not configured")

        headers = await self._headers() if authorized else {}
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.request(method, url, headers=headers, json=json)
        except httpx.RequestError as e:
            logger.debug("auth request failed: %s %s: %s", method, path, e)
            raise AuthTransportError(f"{method} {path} failed: {e}", cause=e) from e
        except (httpx.InvalidURL, ValueError) as e:
            # malformed AUTH_BASE_URL
            raise AuthTransportError(f"bad auth url {url!r}: {e}", cause=e) from e

        try:
            data = r.json()
        except ValueError:
            data = None

        if r.status_code >= 400:
            message = ""
            if isinstance(data, dict):
                message = data.get("message") or data.get("error") or ""
            raise AuthApiError(r.status_code, message or r.reason_phrase or "request failed")
        return data

    @staticmethod
    def _parse(model: Type[M], data: Any) -> M:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise AuthResponseError(f"unexpected {model.__name__} payload: {e}") from e

    def _parse_user(self, data: Any) -> User:
        if not isinstance(data, dict) or "user" not in data:
            raise AuthResponseError("response has no user")
        return self._parse(User, data["user"])

    # AUTH
    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self._request("POST", LOGIN_PATH, json={"email": email, "password": password})
        return self._parse(AuthResponse, data)

    async def register(self, name: str, email: str, password: str) -> AuthResponse:
        data = await self._request(
            "POST", REGISTER_PATH, json={"name": name, "email": email, "password": password}
        )
        return self._parse(AuthResponse, data)

    async def logout(self, refresh_token: str) -> None:
        await self._request("POST", LOGOUT_PATH, json={"refreshToken": refresh_token})

    async def refresh(self, refresh_token: str) -> RefreshResponse:
        data = await self._request("POST", REFRESH_PATH, json={"refreshToken": refresh_token})
        return self._parse(RefreshResponse, data)

    # PROFILE
    async def get_profile(self) -> User:
        data = await self._request("GET", PROFILE_PATH, authorized=True)
        return self._parse_user(data)

    async def update_profile(self, name: Optional[str] = None, email: Optional[str] = None) -> User:
        payload: Dict[str, Any] = {}
        if name is not None: payload["name"] = name
        if email is not None: payload["email"] = email
        data = await self._request("PUT", PROFILE_PATH, json=payload, authorized=True)
        return self._parse_user(data)

    async def delete_profile(self) -> None:
        await self._request("DELETE", PROFILE_PATH, authorized=True)

"""
Client-side session lifecycle.

SessionManager is the single writer of the process-wide session: it restores
the user from persisted tokens at startup, runs login/register/logout against
the auth API, and keeps the token store and the cached user in step. Consumers
only read it, through the properties or a SessionView snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .auth_client import AuthClient
from .config import settings
from .errors import NotAuthenticatedError
from .models import AuthResponse, SessionStatus, SessionView, User
from .token_store import TokenKeys, TokenStore, build_token_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestoreResult:
    ok: bool
    user: Optional[User] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class RevokeResult:
    attempted: bool
    ok: bool
    reason: Optional[str] = None


class SessionManager:
    def __init__(self, auth_client: AuthClient, token_store: TokenStore, keys: Optional[TokenKeys] = None):
        self.auth = auth_client
        self.store = token_store
        # must be the same keys the auth client reads the Bearer token from
        self.keys = keys if keys is not None else TokenKeys()

        self._status = SessionStatus.INITIALIZING
        self._user: Optional[User] = None
        self._ready = asyncio.Event()
        # one operation at a time; overlapping login/logout would otherwise race
        self._lock = asyncio.Lock()

    # --- read side ---

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_ready(self) -> bool:
        return self._status is SessionStatus.READY

    @property
    def current_user(self) -> Optional[User]:
        """The cached user, or None when logged out or not yet known."""
        if not self.is_ready:
            return None
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def view(self) -> SessionView:
        return SessionView(status=self._status, user=self.current_user)

    async def wait_ready(self) -> SessionView:
        await self._ready.wait()
        return self.view()

    # --- lifecycle ---

    async def initialize(self) -> SessionView:
        """Restore the session from stored tokens.

        Never raises on auth or network failures: a token the server won't
        accept is treated as no session and both tokens are dropped. Store
        errors still propagate. Only the first call does anything.
        """
        async with self._lock:
            if self.is_ready:
                logger.debug("initialize: already ready, skipping")
                return self.view()
            try:
                result = await self._restore()
                self._user = result.user
                if result.ok and result.user:
                    logger.info("session restored for user %s", result.user.id)
                elif not result.ok:
                    logger.warning("session restore failed: %s", result.reason)
            finally:
                self._status = SessionStatus.READY
                self._ready.set()
            return self.view()

    async def _restore(self) -> RestoreResult:
        access = await self.store.get(self.keys.access)
        if not access:
            return RestoreResult(ok=True)
        try:
            user = await self.auth.get_profile()
        except Exception as e:
            await self._clear_tokens()
            return RestoreResult(ok=False, reason=f"{type(e).__name__}: {e}")
        return RestoreResult(ok=True, user=user)

    async def login(self, email: str, password: str) -> User:
        async with self._lock:
            response = await self.auth.login(email, password)
            await self._establish(response)
            logger.info("logged in as %s", response.user.id)
            return response.user

    async def register(self, name: str, email: str, password: str) -> User:
        async with self._lock:
            response = await self.auth.register(name, email, password)
            await self._establish(response)
            logger.info("registered and logged in as %s", response.user.id)
            return response.user

    async def logout(self) -> None:
        """End the session locally, whatever the server says."""
        async with self._lock:
            try:
                refresh = await self.store.get(self.keys.refresh)
                result = await self._revoke(refresh)
                if result.attempted and not result.ok:
                    logger.warning("server-side logout failed: %s", result.reason)
            finally:
                await self._clear_tokens()
                self._user = None
            logger.info("logged out")

    async def _revoke(self, refresh_token: Optional[str]) -> RevokeResult:
        if not refresh_token:
            return RevokeResult(attempted=False, ok=True)
        try:
            await self.auth.logout(refresh_token)
        except Exception as e:
            return RevokeResult(attempted=True, ok=False, reason=f"{type(e).__name__}: {e}")
        return RevokeResult(attempted=True, ok=True)

    async def refresh(self) -> User:
        """Trade the refresh token for a new access token and a fresh user."""
        async with self._lock:
            refresh = await self.store.get(self.keys.refresh)
            if not refresh:
                raise NotAuthenticatedError("no refresh token stored")
            response = await self.auth.refresh(refresh)
            await self.store.set(self.keys.access, response.access_token)
            self._user = response.user
            logger.info("access token refreshed for user %s", response.user.id)
            return response.user

    async def update_profile(self, name: Optional[str] = None, email: Optional[str] = None) -> User:
        async with self._lock:
            self._require_user()
            user = await self.auth.update_profile(name=name, email=email)
            self._user = user
            return user

    async def delete_account(self) -> None:
        async with self._lock:
            user = self._require_user()
            await self.auth.delete_profile()
            await self._clear_tokens()
            self._user = None
            logger.info("account %s deleted", user.id)

    # --- helpers ---

    def _require_user(self) -> User:
        if self._user is None:
            raise NotAuthenticatedError("not logged in")
        return self._user

    async def _establish(self, response: AuthResponse) -> None:
        tokens = response.tokens
        await self.store.set(self.keys.access, tokens.access_token)
        await self.store.set(self.keys.refresh, tokens.refresh_token)
        self._user = response.user

    async def _clear_tokens(self) -> None:
        await self.store.remove(self.keys.access)
        await self.store.remove(self.keys.refresh)

    async def close(self) -> None:
        """Release the token store's connections."""
        await self.store.close()


# Global session manager instance
_session_manager: Optional[SessionManager] = None


def build_session_manager() -> SessionManager:
    store = build_token_store(
        settings.TOKEN_STORE, settings.REDIS_HOST, settings.REDIS_PORT, settings.TOKEN_TTL_SEC
    )
    keys = TokenKeys(settings.TOKEN_KEY_PREFIX)
    auth = AuthClient(settings.AUTH_BASE_URL, store, timeout_sec=settings.HTTP_TIMEOUT_SEC, keys=keys)
    return SessionManager(auth, store, keys=keys)


def get_session_manager() -> SessionManager:
    """Get the process-wide session manager, building it from settings on first use."""
    global _session_manager

    if _session_manager is None:
        _session_manager = build_session_manager()

    return _session_manager


def configure_session_manager(manager: Optional[SessionManager] = None) -> SessionManager:
    """Replace the process-wide session manager."""
    global _session_manager

    _session_manager = manager if manager is not None else build_session_manager()
    return _session_manager

from __future__ import annotations

from typing import Dict, Optional, Protocol, runtime_checkable

import redis.asyncio as redis

from .constants import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY


@runtime_checkable
class TokenStore(Protocol):
    """Key-value storage that outlives the process.

    Holds the access and refresh tokens under two independent keys.
    """

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...

    async def close(self) -> None:
        ...


class TokenKeys:
    def __init__(self, prefix: str = ""):
        self.access = f"{prefix}{ACCESS_TOKEN_KEY}"
        self.refresh = f"{prefix}{REFRESH_TOKEN_KEY}"


class RedisTokenStore:
    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        ttl_sec: int = 0,
        client: Optional[redis.Redis] = None,
    ):
        self.r = client if client is not None else redis.Redis(host=host, port=port, decode_responses=True)
        self.ttl = ttl_sec

    async def get(self, key: str) -> Optional[str]:
        raw = await self.r.get(key)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return raw or None

    async def set(self, key: str, value: str) -> None:
        await self.r.set(key, value, ex=self.ttl if self.ttl > 0 else None)

    async def remove(self, key: str) -> None:
        await self.r.delete(key)

    async def close(self) -> None:
        await self.r.aclose()


class MemoryTokenStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)

    async def close(self) -> None:
        pass


def build_token_store(kind: str, host: str, port: int, ttl_sec: int) -> TokenStore:
    if kind == "memory":
        return MemoryTokenStore()
    if kind == "redis":
        return RedisTokenStore(host, port, ttl_sec)
    raise ValueError(f"unknown token store: {kind!r}")

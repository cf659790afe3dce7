from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Wire(BaseModel):
    # backend speaks camelCase; unknown fields are ignored
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class User(_Wire):
    id: str
    email: str
    name: str
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class TokenPair(_Wire):
    access_token: str = Field(alias="accessToken", min_length=1)
    refresh_token: str = Field(alias="refreshToken", min_length=1)


class AuthResponse(TokenPair):
    user: User

    @property
    def tokens(self) -> TokenPair:
        return TokenPair(access_token=self.access_token, refresh_token=self.refresh_token)


class RefreshResponse(_Wire):
    access_token: str = Field(alias="accessToken", min_length=1)
    user: User


class SessionStatus(str, Enum):
    INITIALIZING = "initializing"
    READY = "ready"


class SessionView(BaseModel):
    status: SessionStatus
    user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

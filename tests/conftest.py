"""Shared fixtures for the session tests."""

from unittest.mock import AsyncMock

import pytest

from travelauth.auth_client import AuthClient
from travelauth.models import AuthResponse, User
from travelauth.session import SessionManager
from travelauth.token_store import MemoryTokenStore


@pytest.fixture
def user():
    return User.model_validate({
        "id": "user-123",
        "email": "ana@example.com",
        "name": "Ana",
        "createdAt": "2024-05-01T10:00:00.000Z",
    })


@pytest.fixture
def auth_response(user):
    return AuthResponse.model_validate({
        "user": user.model_dump(by_alias=True),
        "accessToken": "access-1",
        "refreshToken": "refresh-1",
    })


@pytest.fixture
def store():
    return MemoryTokenStore()


@pytest.fixture
def auth():
    """AuthClient double; every endpoint is an AsyncMock."""
    return AsyncMock(spec=AuthClient)


@pytest.fixture
def manager(auth, store):
    return SessionManager(auth, store)

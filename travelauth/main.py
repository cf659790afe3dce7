from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from .config import settings
from .constants import (
    EMAIL_MAX_LENGTH,
    EMAIL_RE,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
)
from .errors import AuthApiError, AuthResponseError, AuthTransportError, NotAuthenticatedError
from .models import SessionView, User
from .session import SessionManager, get_session_manager

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def _check_email(v: str) -> str:
    v = v.strip()
    if not EMAIL_RE.match(v):
        raise ValueError("invalid email address")
    return v


class LoginIn(BaseModel):
    email: str = Field(max_length=EMAIL_MAX_LENGTH)
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _check_email(v)


class RegisterIn(BaseModel):
    name: str = Field(min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: str = Field(max_length=EMAIL_MAX_LENGTH)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _check_email(v)


class ProfileIn(BaseModel):
    name: Optional[str] = Field(default=None, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: Optional[str] = Field(default=None, max_length=EMAIL_MAX_LENGTH)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_email(v)


def create_app(manager: Optional[SessionManager] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        session = manager if manager is not None else get_session_manager()
        app.state.session = session
        view = await session.initialize()
        logger.info("session ready, authenticated=%s", view.is_authenticated)
        try:
            yield
        finally:
            await session.close()

    app = FastAPI(title="Travel Session", lifespan=lifespan)

    async def _session(request: Request) -> SessionManager:
        session: SessionManager = request.app.state.session
        await session.wait_ready()
        return session

    @app.exception_handler(AuthApiError)
    async def _api_error(request: Request, exc: AuthApiError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(AuthTransportError)
    async def _transport_error(request: Request, exc: AuthTransportError):
        logger.warning("auth backend unreachable: %s", exc)
        return JSONResponse(status_code=502, content={"message": "Auth service unavailable"})

    @app.exception_handler(AuthResponseError)
    async def _response_error(request: Request, exc: AuthResponseError):
        logger.error("auth backend sent a bad response: %s", exc)
        return JSONResponse(status_code=502, content={"message": "Auth service error"})

    @app.exception_handler(NotAuthenticatedError)
    async def _not_authenticated(request: Request, exc: NotAuthenticatedError):
        return JSONResponse(status_code=401, content={"message": str(exc)})

    @app.get("/session", response_model=SessionView)
    async def get_session(request: Request):
        return (await _session(request)).view()

    @app.post("/session/login", response_model=User)
    async def login(inp: LoginIn, request: Request):
        return await (await _session(request)).login(inp.email, inp.password)

    @app.post("/session/register", response_model=User, status_code=201)
    async def register(inp: RegisterIn, request: Request):
        return await (await _session(request)).register(inp.name, inp.email, inp.password)

    @app.post("/session/logout", response_model=SessionView)
    async def logout(request: Request):
        session = await _session(request)
        await session.logout()
        return session.view()

    @app.post("/session/refresh", response_model=User)
    async def refresh(request: Request):
        return await (await _session(request)).refresh()

    @app.put("/session/profile", response_model=User)
    async def update_profile(inp: ProfileIn, request: Request):
        return await (await _session(request)).update_profile(name=inp.name, email=inp.email)

    @app.delete("/session/profile", response_model=SessionView)
    async def delete_profile(request: Request):
        session = await _session(request)
        await session.delete_account()
        return session.view()

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("travelauth.main:app", host="127.0.0.1", port=8000)

"""Starlette app factory with lifespan for the skill manager."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse

from agentloom.errors import (
    AgentLoomError,
    InvalidSkillNameError,
    SkillExistsError,
    SkillNotFoundError,
    TargetExistsError,
    TargetNotFoundError,
    ValidationFailedError,
)
from agentloom.manager import SkillManager
from agentloom.server.routes_import import routes as import_routes
from agentloom.server.routes_skills import routes as skills_routes
from agentloom.server.routes_system import routes as system_routes
from agentloom.server.routes_targets import routes as targets_routes

_STATUS_CODES: list[tuple[type[AgentLoomError], int]] = [
    (SkillNotFoundError, 404),
    (TargetNotFoundError, 404),
    (SkillExistsError, 409),
    (TargetExistsError, 409),
    (ValidationFailedError, 422),
    (InvalidSkillNameError, 422),
]


async def handle_agentloom_error(request: Request, exc: Exception) -> JSONResponse:
    status_code = 400
    for error_type, code in _STATUS_CODES:
        if isinstance(exc, error_type):
            status_code = code
            break
    body: dict[str, object] = {"error": str(exc)}
    if isinstance(exc, ValidationFailedError):
        body["errors"] = exc.errors
    return JSONResponse(body, status_code=status_code)


def create_app(manager: SkillManager | None = None) -> Starlette:
    """Create the app. Without a manager one is loaded from the user config at startup."""

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncGenerator[None, None]:
        if manager is not None:
            app.state.manager = manager
        else:
            app.state.manager = SkillManager.load()
        yield

    app = Starlette(
        routes=system_routes + skills_routes + targets_routes + import_routes,
        lifespan=lifespan,
        exception_handlers={AgentLoomError: handle_agentloom_error},
    )
    return app

"""Skill routes: list, create, rename, delete, edit content, validate, fix."""

from __future__ import annotations

import json

from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route


class CreateSkillRequest(BaseModel):
    name: str
    description: str


class RenameSkillRequest(BaseModel):
    new_name: str


class SaveContentRequest(BaseModel):
    content: str


async def list_skills(request: Request) -> JSONResponse:
    """GET /api/skills — list all skills with their validation state."""
    manager = request.app.state.manager
    skills = manager.skills()
    return JSONResponse({"skills": [s.to_info() for s in skills], "count": len(skills)})


async def refresh_skills(request: Request) -> JSONResponse:
    """POST /api/skills/refresh — rescan the central skills directory."""
    manager = request.app.state.manager
    skills = manager.refresh_skills()
    return JSONResponse({"skills": [s.to_info() for s in skills], "count": len(skills)})


async def create_skill(request: Request) -> JSONResponse:
    """POST /api/skills — create a skill from the default template."""
    try:
        body = await request.json()
        req = CreateSkillRequest.model_validate(body)
    except (json.JSONDecodeError, ValueError):
        return JSONResponse(
            {"error": "Invalid request: 'name' and 'description' are required"}, status_code=422
        )
    skill = request.app.state.manager.create_skill(req.name, req.description)
    return JSONResponse(skill.to_info(), status_code=201)


async def get_skill(request: Request) -> JSONResponse:
    """GET /api/skills/{name}"""
    skill = request.app.state.manager.get_skill(request.path_params["name"])
    return JSONResponse(skill.to_info())


async def delete_skill(request: Request) -> JSONResponse:
    """DELETE /api/skills/{name} — remove links in every target, then the folder."""
    name = request.path_params["name"]
    request.app.state.manager.delete_skill(name)
    return JSONResponse({"deleted": name})


async def rename_skill(request: Request) -> JSONResponse:
    try:
        body = await request.json()
        req = RenameSkillRequest.model_validate(body)
    except (json.JSONDecodeError, ValueError):
        return JSONResponse({"error": "Invalid request: 'new_name' is required"}, status_code=422)
    skill = request.app.state.manager.rename_skill(request.path_params["name"], req.new_name)
    return JSONResponse(skill.to_info())


async def get_content(request: Request) -> JSONResponse:
    """GET /api/skills/{name}/content — raw SKILL.md text."""
    name = request.path_params["name"]
    content = request.app.state.manager.get_skill_content(name)
    return JSONResponse({"name": name, "content": content})


async def save_content(request: Request) -> JSONResponse:
    """PUT /api/skills/{name}/content — write SKILL.md (may rename the skill)."""
    try:
        body = await request.json()
        req = SaveContentRequest.model_validate(body)
    except (json.JSONDecodeError, ValueError):
        return JSONResponse({"error": "Invalid request: 'content' is required"}, status_code=422)
    skill = request.app.state.manager.save_skill_content(request.path_params["name"], req.content)
    return JSONResponse(skill.to_info())


async def validate_skill(request: Request) -> JSONResponse:
    """POST /api/skills/{name}/validate — 422 with the error list when invalid."""
    skill = request.app.state.manager.validate_skill(request.path_params["name"])
    return JSONResponse({"name": skill.folder_name, "valid": True})


async def validate_all(request: Request) -> JSONResponse:
    """POST /api/skills/validate — re-validate every skill."""
    invalid = request.app.state.manager.validate_all()
    return JSONResponse(
        {"valid": len(invalid) == 0, "invalid_count": len(invalid), "invalid": invalid}
    )


async def fix_skill(request: Request) -> JSONResponse:
    name = request.path_params["name"]
    fixes = request.app.state.manager.fix_skill(name)
    return JSONResponse({"name": name, "fixes": fixes})


async def fix_all(request: Request) -> JSONResponse:
    """POST /api/skills/fix — repair every skill with auto-fixable problems."""
    fixed = request.app.state.manager.fix_all_skills()
    return JSONResponse({"fixed": fixed, "count": len(fixed)})


routes = [
    Route("/api/skills", list_skills),
    Route("/api/skills", create_skill, methods=["POST"]),
    Route("/api/skills/refresh", refresh_skills, methods=["POST"]),
    Route("/api/skills/validate", validate_all, methods=["POST"]),
    Route("/api/skills/fix", fix_all, methods=["POST"]),
    Route("/api/skills/{name}", get_skill),
    Route("/api/skills/{name}", delete_skill, methods=["DELETE"]),
    Route("/api/skills/{name}/rename", rename_skill, methods=["POST"]),
    Route("/api/skills/{name}/content", get_content),
    Route("/api/skills/{name}/content", save_content, methods=["PUT"]),
    Route("/api/skills/{name}/validate", validate_skill, methods=["POST"]),
    Route("/api/skills/{name}/fix", fix_skill, methods=["POST"]),
]

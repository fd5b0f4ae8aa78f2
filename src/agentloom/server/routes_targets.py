"""Target routes: list, enable/disable, custom targets, sync."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route


class EnableRequest(BaseModel):
    enabled: bool


class CustomTargetRequest(BaseModel):
    kind: str
    skills_path: Path


class FolderTargetRequest(BaseModel):
    path: Path


async def list_targets(request: Request) -> JSONResponse:
    """GET /api/targets — targets with their current sync status."""
    infos = request.app.state.manager.target_infos()
    return JSONResponse(
        {"targets": [i.model_dump(mode="json") for i in infos], "count": len(infos)}
    )


async def refresh_targets(request: Request) -> JSONResponse:
    targets = request.app.state.manager.refresh_targets()
    return JSONResponse({"count": len(targets)})


async def available_types(request: Request) -> JSONResponse:
    """GET /api/targets/types — known tools that are not registered yet."""
    kinds = request.app.state.manager.available_target_types()
    return JSONResponse({"types": [{"id": kind_id, "name": name} for kind_id, name in kinds]})


async def toggle_target(request: Request) -> JSONResponse:
    target_id = request.path_params["target_id"]
    enabled = request.app.state.manager.toggle_target(target_id)
    return JSONResponse({"id": target_id, "enabled": enabled})


async def set_enabled(request: Request) -> JSONResponse:
    """PUT /api/targets/{target_id}/enabled"""
    try:
        body = await request.json()
        req = EnableRequest.model_validate(body)
    except (json.JSONDecodeError, ValueError):
        return JSONResponse({"error": "Invalid request: 'enabled' is required"}, status_code=422)
    target = request.app.state.manager.set_target_enabled(
        request.path_params["target_id"], req.enabled
    )
    return JSONResponse(target.model_dump(mode="json"))


async def add_custom_target(request: Request) -> JSONResponse:
    """POST /api/targets — register a known tool at a custom path."""
    try:
        body = await request.json()
        req = CustomTargetRequest.model_validate(body)
    except (json.JSONDecodeError, ValueError):
        return JSONResponse(
            {"error": "Invalid request: 'kind' and 'skills_path' are required"}, status_code=422
        )
    target = request.app.state.manager.add_custom_target(req.kind, req.skills_path)
    return JSONResponse(target.model_dump(mode="json"), status_code=201)


async def add_folder_target(request: Request) -> JSONResponse:
    """POST /api/targets/folder — register an arbitrary folder as a target."""
    try:
        body = await request.json()
        req = FolderTargetRequest.model_validate(body)
    except (json.JSONDecodeError, ValueError):
        return JSONResponse({"error": "Invalid request: 'path' is required"}, status_code=422)
    target = request.app.state.manager.add_folder_as_target(req.path)
    return JSONResponse(target.model_dump(mode="json"), status_code=201)


async def remove_target(request: Request) -> JSONResponse:
    """DELETE /api/targets/{target_id} — custom targets only."""
    target = request.app.state.manager.remove_custom_target(request.path_params["target_id"])
    return JSONResponse({"removed": target.id})


async def sync_all(request: Request) -> JSONResponse:
    """POST /api/sync — sync every enabled target. Always 200; errors are in the report."""
    results = request.app.state.manager.sync_all()
    return JSONResponse(
        {
            "results": [r.model_dump() for r in results],
            "success": all(r.is_success for r in results),
        }
    )


async def sync_target(request: Request) -> JSONResponse:
    result = request.app.state.manager.sync_target(request.path_params["target_id"])
    return JSONResponse(result.model_dump())


routes = [
    Route("/api/targets", list_targets),
    Route("/api/targets", add_custom_target, methods=["POST"]),
    Route("/api/targets/refresh", refresh_targets, methods=["POST"]),
    Route("/api/targets/types", available_types),
    Route("/api/targets/folder", add_folder_target, methods=["POST"]),
    Route("/api/targets/{target_id}", remove_target, methods=["DELETE"]),
    Route("/api/targets/{target_id}/toggle", toggle_target, methods=["POST"]),
    Route("/api/targets/{target_id}/enabled", set_enabled, methods=["PUT"]),
    Route("/api/targets/{target_id}/sync", sync_target, methods=["POST"]),
    Route("/api/sync", sync_all, methods=["POST"]),
]

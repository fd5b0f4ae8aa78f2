"""Import routes: discover skills in targets or folders and bring them into storage."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from agentloom.importer import FolderImportSelection, ImportSelection


class ImportRequest(BaseModel):
    selections: list[ImportSelection] = Field(default_factory=list)


class FolderScanRequest(BaseModel):
    path: Path


class FolderImportRequest(BaseModel):
    selections: list[FolderImportSelection] = Field(default_factory=list)


async def discover(request: Request) -> JSONResponse:
    """GET /api/import/discover — unmanaged skills found in target directories."""
    found = request.app.state.manager.discover_importable_skills()
    return JSONResponse({"skills": [d.to_info() for d in found], "count": len(found)})


async def import_selected(request: Request) -> JSONResponse:
    """POST /api/import — import with per-skill conflict resolution."""
    try:
        body = await request.json()
        req = ImportRequest.model_validate(body)
    except (json.JSONDecodeError, ValueError):
        return JSONResponse({"error": "Invalid request: 'selections' is malformed"}, status_code=422)
    result = request.app.state.manager.import_skills(req.selections)
    return JSONResponse(result.model_dump())


async def import_all(request: Request) -> JSONResponse:
    """POST /api/import/all — import everything without a name clash."""
    result = request.app.state.manager.import_all_skills()
    return JSONResponse(result.model_dump())


async def scan_folder(request: Request) -> JSONResponse:
    """POST /api/import/folder/scan — preview skills in an arbitrary folder."""
    try:
        body = await request.json()
        req = FolderScanRequest.model_validate(body)
    except (json.JSONDecodeError, ValueError):
        return JSONResponse({"error": "Invalid request: 'path' is required"}, status_code=422)
    scanned = request.app.state.manager.scan_folder(req.path)
    return JSONResponse({"skills": [s.to_info() for s in scanned], "count": len(scanned)})


async def import_folder(request: Request) -> JSONResponse:
    """POST /api/import/folder — copy selected skills from a folder."""
    try:
        body = await request.json()
        req = FolderImportRequest.model_validate(body)
    except (json.JSONDecodeError, ValueError):
        return JSONResponse({"error": "Invalid request: 'selections' is malformed"}, status_code=422)
    result = request.app.state.manager.import_from_folder(req.selections)
    return JSONResponse(result.model_dump())


routes = [
    Route("/api/import/discover", discover),
    Route("/api/import", import_selected, methods=["POST"]),
    Route("/api/import/all", import_all, methods=["POST"]),
    Route("/api/import/folder/scan", scan_folder, methods=["POST"]),
    Route("/api/import/folder", import_folder, methods=["POST"]),
]

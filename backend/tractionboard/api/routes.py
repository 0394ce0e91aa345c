"""REST API routes for the Tractionboard backend.

All endpoints are under /api/v1. Routes reach repositories and services
through app.state, populated by the application lifespan.

Annotations are evaluated eagerly here: the CRUD endpoints are defined in a
loop and FastAPI must see the concrete body models.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Any, Literal

from fastapi import APIRouter, File, HTTPException, Request, Response, UploadFile
from pydantic import BaseModel

from tractionboard.db.models import (
    GoalFields,
    GoalPatch,
    IssueFields,
    IssuePatch,
    RockFields,
    RockPatch,
    ScorecardFields,
    ScorecardPatch,
    TodoFields,
    TodoPatch,
    VtoFields,
    VtoPatch,
)
from tractionboard.ingestion.classifier import ImportResult, IngestionError, require_data
from tractionboard.ingestion.readers import parse_upload
from tractionboard.ingestion.template import SAMPLE_CSV, SAMPLE_FILENAME

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")

ENTITY_MODELS: dict[str, tuple[type[BaseModel], type[BaseModel]]] = {
    "goals": (GoalFields, GoalPatch),
    "rocks": (RockFields, RockPatch),
    "issues": (IssueFields, IssuePatch),
    "todos": (TodoFields, TodoPatch),
    "scorecard": (ScorecardFields, ScorecardPatch),
    "vto": (VtoFields, VtoPatch),
}


# -- Helpers -------------------------------------------------------------------

def _get_state(request: Request) -> Any:
    """Get app state (repos, services, settings)."""
    return request.app.state


def _entity_payload(state: Any, name: str) -> Any:
    if name == "vto":
        return state.repos.vto.board()
    return state.repos.entity(name).list_all()


async def _notify(state: Any, name: str) -> None:
    """Invalidate the dashboard cache and push the entity to live views."""
    state.dashboard_service.invalidate()
    await state.hub.broadcast({
        "type": "data-update",
        "entity": name,
        "data": _entity_payload(state, name),
    })


# -- Dashboard -------------------------------------------------------------------

@router.get("/dashboard")
async def get_dashboard(request: Request) -> dict[str, Any]:
    """Get every dashboard family in one payload."""
    state = _get_state(request)
    return state.dashboard_service.get_dashboard()


# -- Entity CRUD -------------------------------------------------------------------

def _register_entity_routes(
    name: str,
    fields_model: type[BaseModel],
    patch_model: type[BaseModel],
) -> None:
    @router.get(f"/{name}", name=f"list_{name}")
    async def list_entities(request: Request) -> Any:
        state = _get_state(request)
        return _entity_payload(state, name)

    @router.post(f"/{name}", name=f"create_{name}")
    async def create_entity(body: fields_model, request: Request) -> dict[str, Any]:
        state = _get_state(request)
        try:
            created = state.repos.entity(name).create(body.model_dump())
        except sqlite3.IntegrityError as exc:
            raise HTTPException(status_code=409, detail=f"Conflicting {name} record: {exc}")
        await _notify(state, name)
        return created

    @router.get(f"/{name}/{{entity_id}}", name=f"get_{name}")
    async def get_entity(entity_id: str, request: Request) -> dict[str, Any]:
        state = _get_state(request)
        record = state.repos.entity(name).get(entity_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"{name} record not found")
        return record

    @router.patch(f"/{name}/{{entity_id}}", name=f"update_{name}")
    async def update_entity(
        entity_id: str,
        body: patch_model,
        request: Request,
    ) -> dict[str, Any]:
        state = _get_state(request)
        try:
            updated = state.repos.entity(name).update(
                entity_id, body.model_dump(exclude_unset=True),
            )
        except sqlite3.IntegrityError as exc:
            raise HTTPException(status_code=409, detail=f"Conflicting {name} record: {exc}")
        if updated is None:
            raise HTTPException(status_code=404, detail=f"{name} record not found")
        await _notify(state, name)
        return updated

    @router.delete(f"/{name}/{{entity_id}}", name=f"delete_{name}")
    async def delete_entity(entity_id: str, request: Request) -> dict[str, Any]:
        state = _get_state(request)
        if not state.repos.entity(name).delete(entity_id):
            raise HTTPException(status_code=404, detail=f"{name} record not found")
        await _notify(state, name)
        return {"status": "deleted", "id": entity_id}


for _name, (_fields, _patch) in ENTITY_MODELS.items():
    _register_entity_routes(_name, _fields, _patch)


@router.put("/goals/period/{period}")
async def update_goal_by_period(
    period: str,
    body: GoalPatch,
    request: Request,
) -> dict[str, Any]:
    """Update the goal for a period (e.g. ``2024-Q4``)."""
    state = _get_state(request)
    updated = state.repos.goals.update_by_period(period, body.model_dump(exclude_unset=True))
    if updated is None:
        raise HTTPException(status_code=404, detail="Goal not found for period")
    await _notify(state, "goals")
    return updated


# -- Import ------------------------------------------------------------------------

async def _read_upload(request: Request, file: UploadFile) -> tuple[str, ImportResult]:
    """Validate and parse an uploaded file; errors become HTTP 400."""
    state = _get_state(request)

    if not file.filename:
        raise HTTPException(status_code=400, detail="Filename is required")

    content = await file.read()
    max_bytes = state.settings.max_upload_bytes
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File exceeds maximum size of {max_bytes // (1024 * 1024)} MB",
        )

    safe_name = Path(file.filename).name
    try:
        result = require_data(parse_upload(safe_name, content))
    except IngestionError as exc:
        logger.info("Rejected upload %s: %s", safe_name, exc)
        raise HTTPException(status_code=400, detail=str(exc))
    return safe_name, result


@router.post("/import")
async def import_file(
    request: Request,
    file: UploadFile = File(...),
    mode: Literal["append", "replace"] = "append",
) -> dict[str, Any]:
    """Upload a CSV/XLSX export and write its rows to the dashboard.

    ``replace`` clears each family present in the file before inserting.
    """
    state = _get_state(request)
    filename, result = await _read_upload(request, file)

    try:
        summary = state.importer.apply(result, mode=mode)
    except IngestionError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    dashboard = state.dashboard_service.get_dashboard()
    await state.hub.broadcast({
        "type": "data-update",
        "entity": "dashboard",
        "data": dashboard,
    })

    return {
        "status": "imported",
        "filename": filename,
        **summary.to_dict(),
        "data": result.to_dict(),
    }


@router.post("/import/preview")
async def preview_import(
    request: Request,
    file: UploadFile = File(...),
) -> dict[str, Any]:
    """Parse an upload and report what would be imported, without writing."""
    filename, result = await _read_upload(request, file)
    return {
        "filename": filename,
        "counts": result.counts(),
        "skipped": [{"line": row.line, "reason": row.reason} for row in result.skipped],
        "data": result.to_dict(),
    }


@router.get("/import/template")
async def download_template() -> Response:
    """Download a sample upload showing every supported row family."""
    return Response(
        content=SAMPLE_CSV,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{SAMPLE_FILENAME}"'},
    )

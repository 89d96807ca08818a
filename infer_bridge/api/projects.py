"""
/api/projects
=============
Project registration. Registering a project creates its RunContext, probes
the analyzer installation once, and republishes findings from a report left
by an earlier session. Deregistering discards the context.
"""
import logging
import os
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, field_validator

from infer_bridge.core.errors import ProjectNotFoundError
from infer_bridge.state.project_registry import ProjectEntry, ProjectRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Projects"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------
class RegisterProjectRequest(BaseModel):
    root_path: str
    docker_image: Optional[str] = None
    show_trace: Optional[bool] = None

    @field_validator("root_path")
    @classmethod
    def validate_root_path(cls, v: str) -> str:
        v = v.strip()
        if not os.path.isdir(v):
            raise ValueError("root_path must be an existing directory")
        return v


class ProjectSummary(BaseModel):
    project_id: str
    root_path: str
    build_system: Optional[str] = None
    execution_mode: Optional[str] = None
    run_in_flight: bool = False


def get_registry(request: Request) -> ProjectRegistry:
    return request.app.state.registry


def summarize(entry: ProjectEntry) -> ProjectSummary:
    ctx = entry.orchestrator.context
    return ProjectSummary(
        project_id=entry.project_id,
        root_path=entry.root_path,
        build_system=ctx.build_system.value if ctx else None,
        execution_mode=ctx.environment.mode.value if ctx and ctx.environment else None,
        run_in_flight=ctx.run_in_flight if ctx else False,
    )


def lookup(request: Request, project_id: str) -> ProjectEntry:
    try:
        return get_registry(request).get(project_id)
    except ProjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
@router.post("/projects", response_model=ProjectSummary, status_code=201)
def register_project(body: RegisterProjectRequest, request: Request):
    entry = get_registry(request).register(
        body.root_path, docker_image=body.docker_image, show_trace=body.show_trace,
    )
    entry.orchestrator.initialize()
    logger.info("[API] Project %s ready at %s", entry.project_id, entry.root_path)
    return summarize(entry)


@router.get("/projects", response_model=List[ProjectSummary])
def list_projects(request: Request):
    return [summarize(entry) for entry in get_registry(request).list()]


@router.delete("/projects/{project_id}", status_code=204)
def deregister_project(project_id: str, request: Request):
    try:
        get_registry(request).deregister(project_id)
    except ProjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

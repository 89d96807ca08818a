"""
/api/projects/{project_id}/analyze and /findings
================================================
Triggers analysis runs and returns the latest findings of a project.

A rerun is accepted (202) and executed on the host worker pool; its result
arrives asynchronously in /findings and /status. A rerun requested while
the previous one is still running is rejected with 409 — requests are not
queued.
"""
import logging
from typing import List

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from infer_bridge.core.errors import RunInFlightError
from infer_bridge.models.diagnostic import DiagnosticFinding
from infer_bridge.api.projects import lookup

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["Analysis"])


class AnalyzeRequest(BaseModel):
    rerun: bool = True


class AnalyzeResponse(BaseModel):
    project_id: str
    submitted: bool


@router.post("/{project_id}/analyze", response_model=AnalyzeResponse, status_code=202)
def analyze_project(project_id: str, body: AnalyzeRequest, request: Request):
    entry = lookup(request, project_id)
    try:
        submitted = entry.orchestrator.analyze(rerun=body.rerun)
    except RunInFlightError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    logger.info("[API] analyze %s | rerun=%s | submitted=%s", project_id, body.rerun, submitted)
    return AnalyzeResponse(project_id=project_id, submitted=submitted)


@router.get("/{project_id}/findings", response_model=List[DiagnosticFinding])
def get_findings(project_id: str, request: Request):
    entry = lookup(request, project_id)
    return request.app.state.host.findings(entry.project_id, entry.orchestrator.source())

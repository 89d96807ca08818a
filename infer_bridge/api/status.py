"""
GET /status
Provides polling for the client: recent host messages and projects with a run in flight.
"""
from typing import List, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class MessageItem(BaseModel):
    project_id: str
    severity: str
    text: str
    timestamp: str


class StatusResponse(BaseModel):
    projects: int
    running: List[str]
    messages: List[MessageItem]


@router.get("/status", response_model=StatusResponse)
def get_status(request: Request, project_id: Optional[str] = None):
    registry = request.app.state.registry
    host = request.app.state.host
    entries = registry.list()
    running = [
        e.project_id for e in entries
        if e.orchestrator.context is not None and e.orchestrator.context.run_in_flight
    ]
    return StatusResponse(
        projects=len(entries),
        running=running,
        messages=[
            MessageItem(
                project_id=m.project_id,
                severity=m.severity.value,
                text=m.text,
                timestamp=m.timestamp,
            )
            for m in host.messages(project_id)
        ],
    )

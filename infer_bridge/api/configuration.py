"""
/api/projects/{project_id}/configuration
Reads and updates the per-project command options ("run default command"
checkbox and "run command: " text).
"""
from typing import List

from fastapi import APIRouter, Request

from infer_bridge.api.projects import lookup
from infer_bridge.models.configuration import ConfigurationOption

router = APIRouter(prefix="/api/projects", tags=["Configuration"])


@router.get("/{project_id}/configuration", response_model=List[ConfigurationOption])
def get_configuration(project_id: str, request: Request):
    return lookup(request, project_id).orchestrator.configuration_options()


@router.put("/{project_id}/configuration", response_model=List[ConfigurationOption])
def update_configuration(project_id: str, options: List[ConfigurationOption], request: Request):
    orchestrator = lookup(request, project_id).orchestrator
    orchestrator.configure(options)
    return orchestrator.configuration_options()

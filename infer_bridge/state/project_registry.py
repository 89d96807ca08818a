"""
Project Registry
================
Owns one orchestrator (and therefore one RunContext) per registered project.

The RunContext lives exactly as long as the registration: deregistering a
project drops its orchestrator and its stored findings. Projects never share
state, so runs of different projects proceed independently.
"""
import logging
import os
import threading
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from infer_bridge.agents.orchestrator import InferOrchestrator
from infer_bridge.core.config import DOCKER_IMAGE, SHOW_TRACE
from infer_bridge.core.errors import ProjectNotFoundError
from infer_bridge.executor.project_detector import FilesystemProjectService
from infer_bridge.services.host import InProcessHost

logger = logging.getLogger(__name__)


@dataclass
class ProjectEntry:
    project_id: str
    root_path: str
    orchestrator: InferOrchestrator


class ProjectRegistry:
    """Thread-safe map of project id → ProjectEntry."""

    def __init__(self, host: InProcessHost, orchestrator_factory=InferOrchestrator) -> None:
        self.host = host
        self._factory = orchestrator_factory
        self._lock = threading.Lock()
        self._projects: Dict[str, ProjectEntry] = {}

    def register(
        self,
        root_path: str,
        docker_image: Optional[str] = None,
        show_trace: Optional[bool] = None,
    ) -> ProjectEntry:
        """Register a project root; an already registered root returns its existing entry."""
        root = os.path.abspath(root_path)
        with self._lock:
            for entry in self._projects.values():
                if entry.root_path == root:
                    return entry

            project_id = uuid.uuid4().hex[:12]
            orchestrator = self._factory(
                FilesystemProjectService(root),
                self.host.for_project(project_id),
                docker_image=docker_image or DOCKER_IMAGE,
                show_trace=SHOW_TRACE if show_trace is None else show_trace,
            )
            entry = ProjectEntry(project_id=project_id, root_path=root, orchestrator=orchestrator)
            self._projects[project_id] = entry

        logger.info("Registered project %s at %s", project_id, root)
        return entry

    def get(self, project_id: str) -> ProjectEntry:
        with self._lock:
            entry = self._projects.get(project_id)
        if entry is None:
            raise ProjectNotFoundError(f"Unknown project: {project_id}")
        return entry

    def deregister(self, project_id: str) -> None:
        with self._lock:
            entry = self._projects.pop(project_id, None)
        if entry is None:
            raise ProjectNotFoundError(f"Unknown project: {project_id}")
        self.host.forget(project_id)
        logger.info("Deregistered project %s", project_id)

    def list(self) -> List[ProjectEntry]:
        with self._lock:
            return list(self._projects.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._projects)

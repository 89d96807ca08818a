"""
Run Context
===========
Per-project run state, owned by that project's orchestrator.

One RunContext is created when a project is registered and discarded when
it is deregistered. It is never shared across projects, and its mutable
fields (is_first_run, environment, run_in_flight) are written only by the
task currently running for the project.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from infer_bridge.core.config import DOCKER_IMAGE


class BuildSystem(str, Enum):
    NONE = "none"
    MAVEN = "maven"
    GRADLE = "gradle"


class ExecutionMode(str, Enum):
    NATIVE = "native"
    CONTAINERIZED = "containerized"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ProbeResult:
    """
    Outcome of the installation probe.

    Fields
    ------
    mode : ExecutionMode
        Where the analyzer can run.
    detail : str
        Version line of the found tool, or the native failure message
        when nothing usable was found.
    """
    mode: ExecutionMode
    detail: str = ""


@dataclass
class RunContext:
    project_root: str
    report_path: str
    build_system: BuildSystem = BuildSystem.NONE
    containerized: bool = False
    container_image: Optional[str] = DOCKER_IMAGE
    is_first_run: bool = True
    configured_command: Optional[str] = None
    use_default_template: bool = True
    # Cached probe result; None until the first probe
    environment: Optional[ProbeResult] = None
    run_in_flight: bool = field(default=False, compare=False)

    def apply_environment(self, probe: ProbeResult) -> None:
        """Cache the probe result and derive the containerized flag from it."""
        self.environment = probe
        self.containerized = probe.mode == ExecutionMode.CONTAINERIZED

    @property
    def runnable(self) -> bool:
        return self.environment is None or self.environment.mode != ExecutionMode.UNAVAILABLE

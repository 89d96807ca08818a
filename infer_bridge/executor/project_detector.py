"""
Project Detector
================
Detects the Java build system of a project from marker files in its root.

Detection is deterministic — same directory always yields the same build system.
Detection runs once when the project context is initialised; the result is
cached on the RunContext for subsequent runs.
"""
import os
from typing import Optional

from infer_bridge.models.run_context import BuildSystem


# ---------------------------------------------------------------------------
# Signal File → Build System mapping (ordered by priority)
# ---------------------------------------------------------------------------
# Order matters: first match wins. A project carrying both a pom.xml and a
# Gradle wrapper is treated as Maven.
SIGNAL_MAP: list[tuple[str, BuildSystem]] = [
    ("pom.xml",             BuildSystem.MAVEN),
    ("build.gradle",        BuildSystem.GRADLE),
    ("build.gradle.kts",    BuildSystem.GRADLE),
    ("settings.gradle",     BuildSystem.GRADLE),
    ("settings.gradle.kts", BuildSystem.GRADLE),
    ("gradlew",             BuildSystem.GRADLE),
]

UNKNOWN_PROJECT_TYPE = "unknown"


def detect_build_system(project_root: str) -> BuildSystem:
    """
    Scan the project root for signal files and return the build system.

    Only the root directory is checked (no recursive search).
    Returns BuildSystem.NONE when no signal file is found or the directory
    does not exist.
    """
    if not os.path.isdir(project_root):
        return BuildSystem.NONE

    for signal_file, build_system in SIGNAL_MAP:
        if os.path.isfile(os.path.join(project_root, signal_file)):
            return build_system

    return BuildSystem.NONE


def build_system_from_project_type(project_type: Optional[str]) -> BuildSystem:
    """Map a provider's project type string ("maven", "Gradle", ...) to a BuildSystem."""
    if not project_type:
        return BuildSystem.NONE
    try:
        return BuildSystem(project_type.strip().lower())
    except ValueError:
        return BuildSystem.NONE


class FilesystemProjectService:
    """
    Project metadata provider backed by the local filesystem.

    Parameters
    ----------
    root_path : str | None
        Project root. None when the host has not opened a folder yet.
    """

    def __init__(self, root_path: Optional[str]) -> None:
        self._root_path = os.path.abspath(root_path) if root_path else None
        self._project_type: Optional[str] = None

    def get_root_path(self) -> Optional[str]:
        return self._root_path

    def get_project_type(self) -> str:
        if self._project_type is None:
            if self._root_path is None:
                self._project_type = UNKNOWN_PROJECT_TYPE
            else:
                detected = detect_build_system(self._root_path)
                self._project_type = (
                    detected.value if detected != BuildSystem.NONE else UNKNOWN_PROJECT_TYPE
                )
        return self._project_type

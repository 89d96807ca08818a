"""Interfaces of the collaborators the run pipeline depends on."""
from typing import Callable, Iterable, Optional, Protocol

from infer_bridge.models.diagnostic import DiagnosticFinding, MessageType, Position


class ProjectMetadataProvider(Protocol):
    """Answers where a project lives and which build system it uses."""

    def get_root_path(self) -> Optional[str]:  # pragma: no cover - interface
        ...

    def get_project_type(self) -> str:  # pragma: no cover - interface
        """Return "maven", "gradle" or "unknown"."""
        ...


class PositionResolver(Protocol):
    """Maps (file, line) to a precise source span."""

    def resolve(self, file: str, line: int) -> Position:  # pragma: no cover - interface
        """Raise PositionResolutionError when the file or line is invalid."""
        ...


class HostSink(Protocol):
    """Receives findings and messages, and runs submitted tasks."""

    def consume(
        self, findings: Iterable[DiagnosticFinding], source_tag: str
    ) -> None:  # pragma: no cover - interface
        ...

    def forward_message(self, severity: MessageType, text: str) -> None:  # pragma: no cover - interface
        ...

    def submit_task(self, task: Callable[[], None]) -> None:  # pragma: no cover - interface
        ...

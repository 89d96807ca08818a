"""
In-Process Host
===============
Default host for the HTTP service: a single worker pool shared by every
project, a bounded message log, and the latest findings per project.

Each project talks to the host through its own ProjectSink, which files
findings and messages under the project's id and forwards submitted tasks
to the shared pool.
"""
import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Set

from infer_bridge.core.config import MESSAGE_LOG_LIMIT, WORKER_POOL_SIZE
from infer_bridge.models.diagnostic import DiagnosticFinding, MessageType

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    MessageType.ERROR: logging.ERROR,
    MessageType.WARNING: logging.WARNING,
    MessageType.INFO: logging.INFO,
    MessageType.LOG: logging.DEBUG,
}


@dataclass
class HostMessage:
    project_id: str
    severity: MessageType
    text: str
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class InProcessHost:
    """
    Worker pool + result store used when the service runs standalone.

    Usage:
        host = InProcessHost()
        sink = host.for_project("abc123")
        orchestrator = InferOrchestrator(project_service, sink)
        ...
        host.shutdown()
    """

    def __init__(self, max_workers: int = WORKER_POOL_SIZE,
                 message_limit: int = MESSAGE_LOG_LIMIT) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix="infer-run",
        )
        self._lock = threading.Lock()
        self._messages: deque[HostMessage] = deque(maxlen=message_limit)
        self._findings: Dict[str, Dict[str, List[DiagnosticFinding]]] = {}
        self._projects: Set[str] = set()

    # ------------------------------------------------------------------
    # Sink operations (called through ProjectSink)
    # ------------------------------------------------------------------
    def consume(self, project_id: str, findings: Iterable[DiagnosticFinding], source_tag: str) -> None:
        batch = list(findings)
        with self._lock:
            if project_id not in self._projects:
                logger.info("[%s] Dropping %d finding(s) for a forgotten project", project_id, len(batch))
                return
            self._findings.setdefault(project_id, {})[source_tag] = batch
        logger.info("[%s] %d finding(s) from %s", project_id, len(batch), source_tag)

    def forward_message(self, project_id: str, severity: MessageType, text: str) -> None:
        with self._lock:
            self._messages.append(HostMessage(project_id=project_id, severity=severity, text=text))
        logger.log(_LOG_LEVELS.get(severity, logging.INFO), "[%s] %s", project_id, text)

    def submit_task(self, project_id: str, task: Callable[[], None]) -> Future:
        future = self._executor.submit(task)
        future.add_done_callback(lambda f: self._report_task_failure(project_id, f))
        return future

    def _report_task_failure(self, project_id: str, future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error("[%s] Analysis task crashed", project_id, exc_info=exc)
            self.forward_message(project_id, MessageType.ERROR, f"Analysis task crashed: {exc}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def for_project(self, project_id: str) -> "ProjectSink":
        with self._lock:
            self._projects.add(project_id)
        return ProjectSink(self, project_id)

    def findings(self, project_id: str, source_tag: Optional[str] = None) -> List[DiagnosticFinding]:
        with self._lock:
            by_source = self._findings.get(project_id, {})
            if source_tag is not None:
                return list(by_source.get(source_tag, []))
            return [f for batch in by_source.values() for f in batch]

    def messages(self, project_id: Optional[str] = None) -> List[HostMessage]:
        with self._lock:
            return [m for m in self._messages if project_id is None or m.project_id == project_id]

    def forget(self, project_id: str) -> None:
        """Drop stored findings for a deregistered project and ignore later ones."""
        with self._lock:
            self._projects.discard(project_id)
            self._findings.pop(project_id, None)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class ProjectSink:
    """HostSink bound to one project id."""

    def __init__(self, host: InProcessHost, project_id: str) -> None:
        self._host = host
        self.project_id = project_id

    def consume(self, findings: Iterable[DiagnosticFinding], source_tag: str) -> None:
        self._host.consume(self.project_id, findings, source_tag)

    def forward_message(self, severity: MessageType, text: str) -> None:
        self._host.forward_message(self.project_id, severity, text)

    def submit_task(self, task: Callable[[], None]) -> None:
        self._host.submit_task(self.project_id, task)

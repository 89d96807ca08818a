"""
Process Supervisor
==================
Runs one analyzer invocation as a local child process and classifies the outcome.

BOUNDARY RULES:
    - Supervisor ONLY observes execution.
    - Supervisor NEVER builds commands — that is the Command Builder's job.
    - Supervisor NEVER parses the report — that is the Report Translator's job.

STREAM STRATEGY:
    - stdout and stderr are drained by two dedicated threads while the
      parent blocks on wait(); an undrained pipe can fill up and block the
      child forever.
    - Ordering is preserved within each stream, not across the two.
    - Both drainers are joined before run_process() returns.

STALE REPORTS:
    The report file is deleted before the process starts, so a report left
    by a crashed earlier run can never be mistaken for this run's output.

No timeout is applied: the process runs to completion or external termination.
"""
import logging
import os
import subprocess
import threading
import time
from dataclasses import dataclass, field
from typing import IO, Optional

from infer_bridge.executor.command_builder import Invocation

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Run Outcome (returned to Orchestrator)
# ---------------------------------------------------------------------------
@dataclass
class RunOutcome:
    """
    Terminal value of one supervised execution.

    Fields
    ------
    exit_code : int
        Process exit code (0 = success). -1 when the process never ran.
    stdout_lines : list[str]
        Lines read from stdout, in order.
    stderr_lines : list[str]
        Lines read from stderr, in order.
    failure_reason : str | None
        Joined stderr on non-zero exit, or the I/O fault message.
    started : bool
        False when no process was spawned (empty invocation, start failure).
    report_found : bool
        True when the report file exists after a successful run.
    drain_errors : list[str]
        Faults raised while reading either stream.
    """
    exit_code: int = -1
    stdout_lines: list[str] = field(default_factory=list)
    stderr_lines: list[str] = field(default_factory=list)
    failure_reason: Optional[str] = None
    started: bool = False
    report_found: bool = False
    drain_errors: list[str] = field(default_factory=list)
    execution_time_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.started and self.exit_code == 0 and self.failure_reason is None


# ---------------------------------------------------------------------------
# Log Excerpt Helper
# ---------------------------------------------------------------------------
_EXCERPT_HEAD_LINES = 20
_EXCERPT_TAIL_LINES = 20


def create_log_excerpt(lines: list[str],
                       head: int = _EXCERPT_HEAD_LINES,
                       tail: int = _EXCERPT_TAIL_LINES) -> str:
    """
    Abbreviate captured output to its first and last N lines.

    Short output is returned joined as-is.
    """
    total = len(lines)
    if total <= head + tail:
        return "\n".join(lines)

    omitted = total - head - tail
    return "\n".join(
        lines[:head]
        + [f"... ({omitted} lines omitted) ..."]
        + lines[-tail:]
    )


# ---------------------------------------------------------------------------
# Stream Draining
# ---------------------------------------------------------------------------
class StreamDrainer(threading.Thread):
    """Reads a text stream line by line into an in-memory buffer."""

    def __init__(self, stream: IO[str], name: str) -> None:
        super().__init__(name=name, daemon=True)
        self._stream = stream
        self.lines: list[str] = []
        self.error: Optional[str] = None

    def run(self) -> None:
        try:
            for line in self._stream:
                self.lines.append(line.rstrip("\r\n"))
        except (OSError, ValueError) as exc:
            self.error = f"{self.name}: {exc}"
            logger.warning("Stream drain failed | %s", self.error)
        finally:
            self._stream.close()


# ---------------------------------------------------------------------------
# Supervision
# ---------------------------------------------------------------------------
def remove_stale_report(report_path: str) -> bool:
    """Delete a leftover report file. Returns True if one was removed."""
    try:
        os.remove(report_path)
    except FileNotFoundError:
        return False
    logger.info("Removed stale report %s", report_path)
    return True


def run_process(
    invocation: Invocation,
    report_path: str,
    cwd: Optional[str] = None,
) -> RunOutcome:
    """
    Execute an invocation and wait for it to terminate.

    Lifecycle:
        1. Delete any stale report at report_path
        2. Refuse empty invocations (not started)
        3. Start the process with piped stdout/stderr
        4. Drain both streams concurrently while waiting
        5. Join the drainers, classify the exit status
        6. On exit 0, record whether the report was produced

    Returns
    -------
    RunOutcome
        Always returned — process-level failures are reported, not raised.
    """
    outcome = RunOutcome()
    start_time = time.monotonic()

    try:
        remove_stale_report(report_path)
    except OSError as exc:
        outcome.failure_reason = f"Cannot remove stale report {report_path}: {exc}"
        logger.error(outcome.failure_reason)
        return outcome

    if invocation.empty:
        outcome.failure_reason = "Empty command — nothing to run"
        logger.warning(outcome.failure_reason)
        return outcome

    logger.info("Starting process | cwd=%s | cmd=%s", cwd, invocation.rendered)

    drainers: list[StreamDrainer] = []
    try:
        process = subprocess.Popen(
            list(invocation.tokens),
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
        outcome.started = True

        stdout_drainer = StreamDrainer(process.stdout, name="stdout")
        stderr_drainer = StreamDrainer(process.stderr, name="stderr")
        drainers = [stdout_drainer, stderr_drainer]
        for drainer in drainers:
            drainer.start()

        outcome.exit_code = process.wait()

    except OSError as exc:
        outcome.failure_reason = exc.strerror or str(exc)
        logger.error("Process start/wait failed: %s", exc)

    finally:
        for drainer in drainers:
            drainer.join()

    if drainers:
        outcome.stdout_lines = drainers[0].lines
        outcome.stderr_lines = drainers[1].lines
        outcome.drain_errors = [d.error for d in drainers if d.error]

    if outcome.started and outcome.failure_reason is None:
        if outcome.exit_code == 0:
            outcome.report_found = os.path.isfile(report_path)
        else:
            outcome.failure_reason = "\n".join(outcome.stderr_lines)

    outcome.execution_time_seconds = round(time.monotonic() - start_time, 3)

    logger.info(
        "Process complete | exit=%d | time=%.2fs | report=%s",
        outcome.exit_code, outcome.execution_time_seconds, outcome.report_found,
    )
    if outcome.stdout_lines:
        logger.debug("Process stdout:\n%s", create_log_excerpt(outcome.stdout_lines))

    return outcome

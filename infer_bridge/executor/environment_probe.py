"""
Environment Probe
=================
Decides where the analyzer can run: natively, inside Docker, or nowhere.

Probe order:
    1. ``infer --version`` on the host (bounded wait).
    2. The docker CLI on PATH, then the daemon version through the Docker
       SDK (bounded wait). Runs invoke the CLI, so both must be present.
    3. Neither → unavailable; the native failure is surfaced to the user.

Exactly one message is forwarded to the host per probe. The result is cached
on the RunContext by the orchestrator and never re-probed per run.
"""
import logging
import shutil
import subprocess
from typing import Optional

import docker
from docker.errors import DockerException

from infer_bridge.core.config import DOCKER_BINARY, INFER_BINARY, PROBE_TIMEOUT_SECONDS
from infer_bridge.core.interfaces import HostSink
from infer_bridge.models.diagnostic import MessageType
from infer_bridge.models.run_context import ExecutionMode, ProbeResult

logger = logging.getLogger(__name__)


class NativeProbeError(Exception):
    """The native analyzer version check did not succeed."""


def _probe_native(analyzer: str, timeout_seconds: int) -> str:
    """Run the analyzer's version check; return its first output line."""
    try:
        result = subprocess.run(
            [analyzer, "--version"],
            capture_output=True, text=True, timeout=timeout_seconds,
        )
    except FileNotFoundError as exc:
        raise NativeProbeError(f"Cannot run program \"{analyzer}\": {exc.strerror or exc}") from exc
    except subprocess.TimeoutExpired as exc:
        raise NativeProbeError(f"{analyzer} --version timed out after {timeout_seconds}s") from exc
    except OSError as exc:
        raise NativeProbeError(str(exc)) from exc

    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        raise NativeProbeError(
            f"{analyzer} --version exited with {result.returncode}"
            + (f": {detail}" if detail else "")
        )

    lines = result.stdout.splitlines()
    return lines[0].strip() if lines else ""


def _probe_docker(timeout_seconds: int, docker_binary: str = DOCKER_BINARY) -> str:
    """
    Check for the docker CLI, then ask the daemon for its version.

    Raises DockerException when the CLI is missing or the daemon is unreachable.
    """
    if shutil.which(docker_binary) is None:
        raise DockerException(f"{docker_binary} CLI not found on PATH")

    client = docker.from_env(timeout=timeout_seconds)
    try:
        info = client.version()
    finally:
        client.close()
    return str(info.get("Version", "")).strip()


def probe_environment(
    sink: Optional[HostSink] = None,
    analyzer: str = INFER_BINARY,
    timeout_seconds: int = PROBE_TIMEOUT_SECONDS,
) -> ProbeResult:
    """
    Determine the execution mode for the analyzer.

    Returns
    -------
    ProbeResult
        NATIVE with the analyzer's version line, CONTAINERIZED with the
        Docker version, or UNAVAILABLE with the native failure message.
    """
    try:
        version = _probe_native(analyzer, timeout_seconds)
    except NativeProbeError as exc:
        native_error = exc
        logger.info("Native %s not usable (%s) — checking docker", analyzer, exc)
    else:
        logger.info("Found %s natively: %s", analyzer, version)
        _notify(sink, MessageType.INFO, f"Found {analyzer}: {version}")
        return ProbeResult(mode=ExecutionMode.NATIVE, detail=version)

    try:
        docker_version = _probe_docker(timeout_seconds)
    except DockerException as docker_exc:
        logger.error(
            "No %s installation and no docker daemon | native=%s | docker=%s",
            analyzer, native_error, docker_exc,
        )
        message = f"Could not determine {analyzer} installation!\n{native_error}"
        _notify(sink, MessageType.ERROR, message)
        return ProbeResult(mode=ExecutionMode.UNAVAILABLE, detail=str(native_error))

    logger.info("Found docker %s — %s will run containerized", docker_version, analyzer)
    _notify(sink, MessageType.INFO, "Found docker" + (f": {docker_version}" if docker_version else ""))
    return ProbeResult(mode=ExecutionMode.CONTAINERIZED, detail=docker_version)


def _notify(sink: Optional[HostSink], severity: MessageType, text: str) -> None:
    if sink is not None:
        sink.forward_message(severity, text)

"""
Command Builder
===============
Produces the exact analyzer invocation for the current run of a project.

Builder never executes commands — it only returns token sequences.
Invocations are passed to the Process Supervisor for execution.

Rules, in order:
    1. Build step: clean+build on the first run, plain build afterwards.
       Unknown build system → no build step.
    2. Template: the user's configured command when the default is switched
       off, otherwise ``infer run --reactive -- {0}``.
    3. The build step fills the single ``{0}`` placeholder. Without a build
       step the command is forced to the bare ``infer run``.
    4. Containerized runs wrap the command in ``docker run``; the wrapper is
       assembled token by token so the inner shell statement stays one argument.
    5. The analyzer command itself is split on whitespace. Arguments with
       embedded spaces (e.g. paths containing spaces) are NOT supported.
"""
import logging
import os
import shlex
from dataclasses import dataclass
from typing import Optional

from infer_bridge.core.config import DOCKER_BINARY, INFER_BINARY
from infer_bridge.core.constants import (
    ANALYZER_PLACEHOLDER,
    BARE_RUN_TEMPLATE,
    BUILD_STEP_PLACEHOLDER,
    CONTAINER_PROJECT_DIR,
    CONTAINER_SHELL,
    DEFAULT_COMMAND_TEMPLATE,
)
from infer_bridge.core.interfaces import HostSink
from infer_bridge.models.diagnostic import MessageType
from infer_bridge.models.run_context import BuildSystem, RunContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildCommands:
    """
    Build-step variants for one build system.

    Fields
    ------
    clean_build_command : str
        Used on the first run of a project (e.g. "mvn clean compile").
    build_command : str
        Used on every later run (e.g. "mvn compile").
    cache_dir : str
        Build-cache directory name under the user's home, mounted into the
        container at the same name under /root.
    """
    clean_build_command: str
    build_command: str
    cache_dir: str


@dataclass(frozen=True)
class Invocation:
    """Immutable command for one run: tokens to execute plus a loggable rendering."""
    tokens: tuple[str, ...]
    rendered: str

    @property
    def empty(self) -> bool:
        return len(self.tokens) == 0


# ---------------------------------------------------------------------------
# Build system → build commands
# ---------------------------------------------------------------------------
_BUILD_COMMAND_MAP: dict[BuildSystem, BuildCommands] = {
    BuildSystem.MAVEN: BuildCommands(
        clean_build_command="mvn clean compile",
        build_command="mvn compile",
        cache_dir=".m2",
    ),
    BuildSystem.GRADLE: BuildCommands(
        clean_build_command="./gradlew clean build",
        build_command="./gradlew build",
        cache_dir=".gradle",
    ),
}


def get_build_commands(build_system: BuildSystem) -> Optional[BuildCommands]:
    """Return the build commands for a build system, or None if unrecognised."""
    return _BUILD_COMMAND_MAP.get(build_system)


def resolve_build_step(ctx: RunContext) -> Optional[str]:
    """
    Pick the build step for this run and consume the first-run flag.

    ``is_first_run`` is read and cleared here exactly once per transition;
    the flag flips even when the build system is unknown.
    """
    first_run = ctx.is_first_run
    ctx.is_first_run = False

    commands = get_build_commands(ctx.build_system)
    if commands is None:
        return None
    return commands.clean_build_command if first_run else commands.build_command


def select_template(ctx: RunContext, analyzer: str = INFER_BINARY) -> str:
    """Configured command when the default is switched off, else the default template."""
    if not ctx.use_default_template and ctx.configured_command:
        return ctx.configured_command
    return DEFAULT_COMMAND_TEMPLATE.replace(ANALYZER_PLACEHOLDER, analyzer)


def compose_analyzer_command(
    template: str, build_step: Optional[str], analyzer: str = INFER_BINARY
) -> str:
    """
    Substitute the build step into the template's placeholder.

    Without a build step the template is ignored entirely and the bare
    ``<analyzer> run`` is returned, so no missing build tool is ever invoked.
    """
    if build_step is None:
        return BARE_RUN_TEMPLATE.replace(ANALYZER_PLACEHOLDER, analyzer)
    return template.replace(BUILD_STEP_PLACEHOLDER, build_step)


def container_tokens(ctx: RunContext, command: str, home_dir: Optional[str] = None) -> list[str]:
    """
    Wrap an analyzer command in a ``docker run`` invocation.

    Mounts the project root at /project and, for recognised build systems,
    the host build cache (~/.m2 or ~/.gradle). The command runs inside a
    shell as ``cd /project && <command>`` — a single token.
    """
    home = home_dir if home_dir is not None else os.path.expanduser("~")
    tokens = [DOCKER_BINARY, "run", "--rm"]

    commands = get_build_commands(ctx.build_system)
    if commands is not None:
        cache_mount = f"{home}/{commands.cache_dir}:/root/{commands.cache_dir}"
        tokens.extend(["-v", cache_mount])

    tokens.extend(["-v", f"{ctx.project_root}:{CONTAINER_PROJECT_DIR}"])
    if ctx.container_image:
        tokens.append(ctx.container_image)
    tokens.extend([CONTAINER_SHELL, "-c", f"cd {CONTAINER_PROJECT_DIR} && {command}"])
    return tokens


def build_invocation(
    ctx: RunContext,
    sink: Optional[HostSink] = None,
    analyzer: str = INFER_BINARY,
    home_dir: Optional[str] = None,
) -> Invocation:
    """
    Assemble the invocation for the current run of ``ctx``.

    Side effect: consumes ``ctx.is_first_run`` and forwards an Info message
    with the rendered command to the host (when a sink is given).
    """
    build_step = resolve_build_step(ctx)
    template = select_template(ctx, analyzer)
    command = compose_analyzer_command(template, build_step, analyzer)

    if ctx.containerized:
        tokens = container_tokens(ctx, command, home_dir)
        rendered = shlex.join(tokens)
    else:
        tokens = command.split()
        rendered = " ".join(tokens)

    invocation = Invocation(tokens=tuple(tokens), rendered=rendered)

    logger.info(
        "Built invocation | build_system=%s | step=%s | containerized=%s | cmd=%s",
        ctx.build_system.value, build_step, ctx.containerized, invocation.rendered,
    )
    if sink is not None:
        sink.forward_message(MessageType.INFO, f"Running command: {invocation.rendered}")
    return invocation

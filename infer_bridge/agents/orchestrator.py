"""
Orchestrator
============
Drives the Build → Execute → Translate cycle for one project.

Lifecycle:
    - First analyze() call initialises the RunContext from the project
      metadata provider, probes the environment once, and republishes the
      findings of a report left by a previous session.
    - analyze(rerun=True) submits one run task to the host worker pool.
    - The run task builds the invocation, supervises the process, and on
      success translates the report and hands the findings to the host.

Guarantees:
    - At most one run in flight per project; a second request while one is
      running is rejected, never queued.
    - No automatic retries: every failure becomes one message to the host.
    - Report parse errors yield zero findings for the run, not a crash.
"""
import logging
import os
import threading
from typing import Callable, List, Optional

from infer_bridge.core.config import DOCKER_IMAGE, INFER_BINARY, REPORT_RELATIVE_PATH, SHOW_TRACE
from infer_bridge.core.constants import OPTION_RUN_COMMAND, OPTION_USE_DEFAULT_COMMAND, SOURCE_TAG
from infer_bridge.core.errors import ReportParseError, RunInFlightError
from infer_bridge.core.interfaces import HostSink, PositionResolver, ProjectMetadataProvider
from infer_bridge.executor.command_builder import build_invocation
from infer_bridge.executor.environment_probe import probe_environment
from infer_bridge.executor.process_supervisor import RunOutcome, run_process
from infer_bridge.executor.project_detector import build_system_from_project_type
from infer_bridge.models.configuration import ConfigurationOption, OptionType
from infer_bridge.models.diagnostic import DiagnosticFinding, MessageType
from infer_bridge.models.run_context import ProbeResult, RunContext
from infer_bridge.services.position_resolver import SourcePositionFinder
from infer_bridge.services.report_translator import translate_report

logger = logging.getLogger(__name__)

Probe = Callable[..., ProbeResult]


class InferOrchestrator:
    """
    Per-project analysis driver.

    Parameters
    ----------
    project_service : ProjectMetadataProvider
        Source of the project root and build system.
    sink : HostSink
        Receives findings and messages; runs submitted tasks.
    resolver : PositionResolver | None
        Maps report (file, line) pairs to spans. Defaults to SourcePositionFinder.
    docker_image : str
        Image used when the analyzer has to run containerized.
    show_trace : bool
        Expand bug traces into the findings.
    probe : callable
        Environment probe; injectable for tests.
    """

    def __init__(
        self,
        project_service: ProjectMetadataProvider,
        sink: HostSink,
        resolver: Optional[PositionResolver] = None,
        docker_image: str = DOCKER_IMAGE,
        show_trace: bool = SHOW_TRACE,
        probe: Optional[Probe] = None,
        analyzer: str = INFER_BINARY,
    ) -> None:
        self.project_service = project_service
        self.sink = sink
        self.resolver = resolver or SourcePositionFinder()
        self.docker_image = docker_image
        self.show_trace = show_trace
        self.analyzer = analyzer
        self._probe = probe or probe_environment
        self.context: Optional[RunContext] = None
        # Settings received before the context exists
        self._use_default_template = True
        self._configured_command: Optional[str] = None
        self._init_lock = threading.Lock()
        self._run_lock = threading.Lock()

    def source(self) -> str:
        return SOURCE_TAG

    # ------------------------------------------------------------------
    # Context initialisation
    # ------------------------------------------------------------------
    def initialize(self) -> Optional[RunContext]:
        """Create the RunContext on first use. Returns None while the root is unknown."""
        with self._init_lock:
            if self.context is None:
                self._create_context()
            return self.context

    def _create_context(self) -> None:
        root_path = self.project_service.get_root_path()
        if root_path is None:
            logger.info("Project root not known yet, analysis deferred")
            return

        ctx = RunContext(
            project_root=root_path,
            report_path=os.path.join(root_path, REPORT_RELATIVE_PATH),
            build_system=build_system_from_project_type(self.project_service.get_project_type()),
            container_image=self.docker_image,
            configured_command=self._configured_command,
            use_default_template=self._use_default_template,
        )
        ctx.apply_environment(self._probe(self.sink, analyzer=self.analyzer))
        self.context = ctx

        logger.info(
            "Project initialised | root=%s | build_system=%s | mode=%s",
            ctx.project_root, ctx.build_system.value, ctx.environment.mode.value,
        )

        # Show results of a previous session
        if os.path.isfile(ctx.report_path):
            self.publish_report(ctx, publish_empty=False)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    def analyze(self, rerun: bool = False) -> bool:
        """
        Initialise if needed and, when ``rerun`` is set, submit a run task.

        Returns True when a run task was submitted.

        Raises
        ------
        RunInFlightError
            If a run for this project is still active.
        """
        ctx = self.initialize()
        if not rerun or ctx is None:
            return False

        if not ctx.runnable:
            self.sink.forward_message(
                MessageType.ERROR,
                f"{self.analyzer} is not available (natively or via docker) — analysis not started",
            )
            return False

        with self._run_lock:
            if ctx.run_in_flight:
                raise RunInFlightError(f"An analysis is already running for {ctx.project_root}")
            ctx.run_in_flight = True

        try:
            self.sink.submit_task(self._run_task)
        except Exception:
            ctx.run_in_flight = False
            raise
        return True

    def _run_task(self) -> None:
        try:
            self.run_once()
        finally:
            self.context.run_in_flight = False

    # ------------------------------------------------------------------
    # One run
    # ------------------------------------------------------------------
    def run_once(self) -> RunOutcome:
        """Build, execute and translate synchronously on the calling thread."""
        ctx = self.context
        if ctx is None:
            raise RuntimeError("run_once() called before the project was initialised")

        invocation = build_invocation(ctx, self.sink, analyzer=self.analyzer)
        outcome = run_process(invocation, ctx.report_path, cwd=ctx.project_root)

        for drain_error in outcome.drain_errors:
            self.sink.forward_message(MessageType.ERROR, drain_error)

        if outcome.succeeded:
            if outcome.report_found:
                self.publish_report(ctx)
            else:
                logger.info("Run succeeded without a report — no findings")
                self.sink.consume([], self.source())
        else:
            reason = outcome.failure_reason or f"{self.analyzer} exited with code {outcome.exit_code}"
            self.sink.forward_message(MessageType.ERROR, reason)

        return outcome

    def publish_report(self, ctx: RunContext, publish_empty: bool = True) -> List[DiagnosticFinding]:
        """Translate the report on disk and hand the findings to the host."""
        try:
            findings = translate_report(
                ctx.report_path, ctx.project_root, self.resolver.resolve, self.show_trace,
            )
        except ReportParseError as exc:
            logger.error("Report processing failed: %s", exc)
            self.sink.forward_message(MessageType.ERROR, f"Could not process {self.source()} report: {exc}")
            findings = []

        if findings or publish_empty:
            self.sink.consume(findings, self.source())
        return findings

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def configuration_options(self) -> List[ConfigurationOption]:
        use_default = self.context.use_default_template if self.context else self._use_default_template
        command = self.context.configured_command if self.context else self._configured_command
        return [
            ConfigurationOption(
                name=OPTION_USE_DEFAULT_COMMAND,
                type=OptionType.CHECKBOX,
                value="true" if use_default else "false",
            ),
            ConfigurationOption(name=OPTION_RUN_COMMAND, type=OptionType.TEXT, value=command),
        ]

    def configure(self, options: List[ConfigurationOption]) -> None:
        """Checkbox → use default template; non-empty text → configured command."""
        for option in options:
            if option.type == OptionType.CHECKBOX:
                self._use_default_template = option.value_as_bool()
            elif option.type == OptionType.TEXT and option.value is not None:
                self._configured_command = option.value

        if self.context is not None:
            self.context.use_default_template = self._use_default_template
            self.context.configured_command = self._configured_command

        logger.info(
            "Configured | use_default=%s | command=%s",
            self._use_default_template, self._configured_command,
        )

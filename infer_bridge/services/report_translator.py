"""
Report Translator
=================
Converts Infer's persisted ``report.json`` into positioned DiagnosticFindings.

FAILURE ISOLATION CONTRACT:
  - Report-level failures (file unreadable, malformed JSON, an entry missing
    a required field) abort the whole translation with ReportParseError.
    No partial findings are returned in that case.
  - Record-level failures (primary file/line cannot be resolved) drop that
    record only; the rest of the batch is still produced.
  - Trace-step failures (file absent on disk, line unresolvable) drop that
    step only; the remaining steps keep their original order.

OUTPUT CONTRACT:
  translate_report(...) -> List[DiagnosticFinding]
  One finding per surviving record, in report order, severity always ERROR.
"""
import json
import logging
import os
from typing import Callable, List, Optional

from pydantic import ValidationError

from infer_bridge.core.errors import PositionResolutionError, ReportParseError
from infer_bridge.models.bug_report import BugRecord, BugReportList, TraceStep
from infer_bridge.models.diagnostic import (
    DiagnosticFinding,
    DiagnosticSeverity,
    Position,
    TraceEntry,
)

logger = logging.getLogger(__name__)

ResolvePosition = Callable[[str, int], Position]

# Faults a resolver may raise for a single (file, line) pair
_RESOLUTION_ERRORS = (PositionResolutionError, OSError, ValueError)


# ===================================================================
# Report Loading
# ===================================================================
def load_report(report_path: str) -> List[BugRecord]:
    """
    Parse the report file into validated BugRecords.

    Raises
    ------
    ReportParseError
        If the file cannot be read, is not valid JSON, is not an array, or
        any entry does not match the BugRecord schema.
    """
    try:
        with open(report_path, encoding="utf-8") as handle:
            raw = json.load(handle)
    except FileNotFoundError as exc:
        raise ReportParseError(f"Report not found: {report_path}") from exc
    except OSError as exc:
        raise ReportParseError(f"Cannot read report {report_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ReportParseError(f"Malformed report {report_path}: {exc}") from exc

    try:
        return BugReportList.validate_python(raw)
    except ValidationError as exc:
        raise ReportParseError(
            f"Report {report_path} does not match the expected schema: "
            f"{exc.error_count()} error(s), first: {exc.errors()[0]['msg']}"
        ) from exc


# ===================================================================
# Position Helpers
# ===================================================================
def _project_file(project_root: str, relative_path: str) -> str:
    return os.path.join(project_root, relative_path)


def _resolve_trace(
    steps: List[TraceStep],
    project_root: str,
    resolve_position: ResolvePosition,
) -> List[TraceEntry]:
    """Resolve trace steps whose files exist; skip the rest, keep order."""
    entries: list[TraceEntry] = []
    for step in steps:
        step_file = _project_file(project_root, step.filename)
        if not os.path.exists(step_file):
            logger.debug("trace: %s not on disk – skipping step", step.filename)
            continue
        try:
            position = resolve_position(step_file, step.line_number)
        except _RESOLUTION_ERRORS as exc:
            logger.debug("trace: cannot resolve %s:%d – %s", step.filename, step.line_number, exc)
            continue
        entries.append(TraceEntry(position=position, description=step.description))
    return entries


def translate_record(
    record: BugRecord,
    project_root: str,
    resolve_position: ResolvePosition,
    include_trace: bool = False,
) -> Optional[DiagnosticFinding]:
    """
    Convert one BugRecord into a finding.

    Returns None when the record's own file/line cannot be resolved.
    """
    try:
        position = resolve_position(_project_file(project_root, record.file), record.line)
    except _RESOLUTION_ERRORS as exc:
        logger.debug("record: cannot resolve %s:%d – dropping (%s)", record.file, record.line, exc)
        return None

    trace = _resolve_trace(record.bug_trace, project_root, resolve_position) if include_trace else []

    return DiagnosticFinding(
        kind=record.bug_type,
        message=record.message,
        position=position,
        severity=DiagnosticSeverity.ERROR,
        trace=trace,
    )


# ===================================================================
# Public Entry Point
# ===================================================================
def translate_report(
    report_path: str,
    project_root: str,
    resolve_position: ResolvePosition,
    include_trace: bool = False,
) -> List[DiagnosticFinding]:
    """
    Translate a report file into diagnostic findings.

    Steps:
    1. Load and validate the whole report (all-or-nothing)
    2. Resolve each record's position, dropping unresolvable records
    3. Optionally expand each record's trace
    """
    records = load_report(report_path)

    findings: list[DiagnosticFinding] = []
    for record in records:
        finding = translate_record(record, project_root, resolve_position, include_trace)
        if finding is not None:
            findings.append(finding)

    dropped = len(records) - len(findings)
    logger.info(
        "Report translated: %d finding(s) from %d record(s)%s",
        len(findings), len(records),
        f" – {dropped} unresolvable record(s) dropped" if dropped else "",
    )
    return findings

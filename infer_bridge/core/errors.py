"""
Errors
======
Exception types raised across the run/translate pipeline.

Process-level failures (non-zero exit, failure to start) are NOT raised —
the supervisor returns them inside a RunOutcome. Only failures that abort a
whole step are exceptions.
"""


class InferBridgeError(Exception):
    """Base class for all service errors."""


class ReportParseError(InferBridgeError):
    """The report file is missing, unreadable, or does not match the schema."""


class PositionResolutionError(InferBridgeError):
    """A (file, line) pair could not be mapped to a source position."""


class ProjectNotFoundError(InferBridgeError):
    """No project is registered under the given id."""


class RunInFlightError(InferBridgeError):
    """A run is already active for this project."""

"""
Diagnostic Models
=================
Positioned findings handed to the host, plus the message severities the
host understands.

Lines are 1-based, columns are 0-based (end column exclusive).
"""
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from infer_bridge.core.constants import SOURCE_TAG


class DiagnosticSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"
    HINT = "hint"


class MessageType(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    LOG = "log"


class Position(BaseModel):
    file: str
    line: int
    column: int = 0
    end_line: int
    end_column: int = 0


class TraceEntry(BaseModel):
    position: Position
    description: str


class DiagnosticFinding(BaseModel):
    kind: str
    message: str
    position: Position
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR
    trace: List[TraceEntry] = Field(default_factory=list)
    source: str = SOURCE_TAG

"""
Bug Report Model
================
Pydantic models for the entries of Infer's ``infer-out/report.json``.
This is the read-only contract between the analyzer and the report translator.

Fields:
    bug_type        — issue kind (e.g. NULL_DEREFERENCE, RESOURCE_LEAK)
    qualifier       — human-readable explanation of the issue
    file            — relative to project root
    line            — line of the reported issue
    bug_trace       — ordered steps of the issue's causal path

Types are checked strictly: a line number given as a string is rejected,
not coerced. Unknown keys emitted by the analyzer (hash, severity,
procedure, ...) are ignored.
"""
from typing import List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class TraceStep(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    filename: str
    line_number: int
    description: str


class BugRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    bug_type: str
    qualifier: str
    file: str
    line: int
    bug_trace: List[TraceStep] = Field(default_factory=list)

    @property
    def message(self) -> str:
        return f"{self.bug_type}: {self.qualifier}"


# Top-level report shape: a JSON array of bug records
BugReportList = TypeAdapter(List[BugRecord])

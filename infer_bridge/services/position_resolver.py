"""
Position Resolver
=================
Maps a (file, line) pair from the report to the span of code on that line.

The span starts at the first non-blank character and ends after the last
one, so the diagnostic underlines the statement rather than its indentation.
Blank lines resolve to an empty span at column 0.
"""
import logging

from infer_bridge.core.errors import PositionResolutionError
from infer_bridge.models.diagnostic import Position

logger = logging.getLogger(__name__)


class SourcePositionFinder:
    """Default PositionResolver reading source files from disk."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def resolve(self, file: str, line: int) -> Position:
        try:
            with open(file, encoding=self._encoding, errors="replace") as handle:
                lines = handle.read().splitlines()
        except OSError as exc:
            raise PositionResolutionError(f"Cannot read {file}: {exc}") from exc

        if line < 1 or line > len(lines):
            raise PositionResolutionError(
                f"Line {line} out of range for {file} ({len(lines)} lines)"
            )

        text = lines[line - 1]
        stripped = text.strip()
        if not stripped:
            return Position(file=file, line=line, column=0, end_line=line, end_column=0)

        column = len(text) - len(text.lstrip())
        return Position(
            file=file,
            line=line,
            column=column,
            end_line=line,
            end_column=column + len(stripped),
        )

# swayparse/errors.py
"""
Error types for the Sway front-end.

Hierarchy
─────────
    SwayError (base)
    └── SwayParseError   - source text does not match the grammar

Parse errors carry the file path and the 1-based line/column of the
furthest position the PEG parser reached, and render in the usual
``path:line:col: message`` form so editors can jump to them.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

__all__ = [
    "SwayError",
    "SwayParseError",
    "offset_to_line_col",
]


def offset_to_line_col(source: str, offset: int) -> Tuple[int, int]:
    """Return the 1-based ``(line, column)`` of byte *offset* in *source*."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


class SwayError(Exception):
    """Base exception for everything raised by ``swayparse`` and
    ``sway_analyzer``."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class SwayParseError(SwayError):
    """Raised when a source file cannot be parsed."""

    def __init__(
        self,
        message: str,
        path: str = "<unknown>",
        line: int = 0,
        column: int = 0,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, cause)
        self.path = path
        self.line = line
        self.column = column

    @classmethod
    def at_offset(
        cls,
        message: str,
        source: str,
        offset: int,
        path: str = "<unknown>",
        cause: Optional[BaseException] = None,
    ) -> "SwayParseError":
        line, column = offset_to_line_col(source, offset)
        return cls(message, path=path, line=line, column=column, cause=cause)

    def to_gcc_format(self) -> str:
        return f"{self.path}:{self.line}:{self.column}: error: {self.message}"

    def to_json(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "line": self.line,
            "column": self.column,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}: {self.message}"

# sway_analyzer/errors.py
"""
Error types raised by the analysis layer.

Hierarchy
─────────
    SwayError                  (swayparse.errors)
    ├── SwayParseError         - source does not match the grammar
    └── AnalyzerError
        ├── SpanResolutionError   - a span cannot be mapped to a line
        ├── UnknownDetectorError  - a detector name is not registered
        └── ConfigError           - an invalid configuration file/value

Structural mismatches inside detectors (a call without arguments, a
pattern that is not a simple binding, ...) are never errors: the
extractors in :mod:`sway_analyzer.utils` return an empty result instead.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from swayparse.ast import Span
from swayparse.errors import SwayError, SwayParseError

__all__ = [
    "SwayError",
    "SwayParseError",
    "AnalyzerError",
    "SpanResolutionError",
    "UnknownDetectorError",
    "ConfigError",
]


class AnalyzerError(SwayError):
    """Base class for errors raised while analyzing a project."""

    def to_json(self) -> Dict[str, Any]:
        return {"error": type(self).__name__, "message": self.message}


class SpanResolutionError(AnalyzerError):
    """A span could not be resolved to a line of the given file.

    Raised by :meth:`sway_analyzer.project.Project.span_to_line`; aborts
    the analysis of the module being processed.
    """

    def __init__(self, path: str, span: Span, reason: str) -> None:
        super().__init__(
            f"cannot resolve span {span.start}..{span.end} of {span.path} "
            f"in {path}: {reason}"
        )
        self.path = path
        self.span = span
        self.reason = reason

    def to_json(self) -> Dict[str, Any]:
        data = super().to_json()
        data.update(path=self.path, start=self.span.start, end=self.span.end)
        return data


class UnknownDetectorError(AnalyzerError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown detector: {name!r}")
        self.name = name


class ConfigError(AnalyzerError):
    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message, cause)
        self.path = path

# sway_analyzer/report.py
"""
Findings and the append-only report they are collected in.

A :class:`ReportEntry` is ``(path, line, severity, message)``.  The
:class:`Report` keeps entries grouped by file in insertion order; the
display helpers sort a copy and never reorder the stored entries.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Dict, Iterator, List, Tuple

__all__ = ["Severity", "ReportEntry", "Report", "SORTINGS"]

SORTINGS = ("line", "severity")


@unique
class Severity(Enum):
    """Ordered finding severity (``LOW < MEDIUM < HIGH < CRITICAL``)."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.value


_SEVERITY_ORDER = [Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]


@dataclass(frozen=True, slots=True)
class ReportEntry:
    path: str
    line: int
    severity: Severity
    message: str

    def to_json(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "line": self.line,
            "severity": self.severity.value,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"{self.path}:{self.line}: [{self.severity}] {self.message}"


class Report:
    """Append-only collection of findings for one project analysis."""

    def __init__(self) -> None:
        self._entries: Dict[str, List[ReportEntry]] = {}

    def add_entry(self, path: str, line: int, severity: Severity, message: str) -> ReportEntry:
        entry = ReportEntry(path, line, severity, message)
        self._entries.setdefault(path, []).append(entry)
        return entry

    @property
    def entries(self) -> Tuple[ReportEntry, ...]:
        """All entries, file by file, in emission order."""
        return tuple(e for entries in self._entries.values() for e in entries)

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def entries_for(self, path: str) -> Tuple[ReportEntry, ...]:
        return tuple(self._entries.get(path, ()))

    def sorted_entries(self, sorting: str = "line") -> List[ReportEntry]:
        """Entries ordered by file, then by *sorting* (``line`` or ``severity``).

        Severity sorting puts the most severe first and breaks ties by line.
        """
        if sorting not in SORTINGS:
            raise ValueError(f"unknown sorting {sorting!r}; expected one of {SORTINGS}")
        result: List[ReportEntry] = []
        for path in sorted(self._entries):
            entries = self._entries[path]
            if sorting == "line":
                result.extend(sorted(entries, key=lambda e: e.line))
            else:
                result.extend(sorted(entries, key=lambda e: (-e.severity.rank, e.line)))
        return result

    def max_severity(self):
        severities = [e.severity for e in self.entries]
        return max(severities) if severities else None

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def __iter__(self) -> Iterator[ReportEntry]:
        return iter(self.entries)

    def to_json(self, sorting: str = "line", indent: int = 2) -> str:
        data = {
            "findings": [e.to_json() for e in self.sorted_entries(sorting)],
            "count": len(self),
        }
        return json.dumps(data, indent=indent)

    def format_text(self, sorting: str = "line") -> str:
        """Group findings under a header per file, one finding per line."""
        lines: List[str] = []
        current = None
        for entry in self.sorted_entries(sorting):
            if entry.path != current:
                if current is not None:
                    lines.append("")
                lines.append(f"{entry.path}:")
                current = entry.path
            lines.append(f"  {entry.line}: [{entry.severity}] {entry.message}")
        if not lines:
            return "No findings."
        return "\n".join(lines)

# sway_analyzer/project.py
"""
A set of Sway source files analysed together.

    project = Project.from_directory("my-contract")
    report = project.analyze()
    print(report.format_text())

The project owns the source text, a per-file line index used to turn
spans into 1-based line numbers, the parsed modules (cached), and the
:class:`~sway_analyzer.report.Report` of the current analysis run.
"""

from __future__ import annotations

import bisect
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from swayparse.ast import Module, Span
from swayparse.parser import parse_module
from sway_analyzer.config import AnalyzerConfig
from sway_analyzer.detectors import create_detectors
from sway_analyzer.errors import AnalyzerError, SpanResolutionError, SwayError, SwayParseError
from sway_analyzer.report import Report
from sway_analyzer.visitor import ModuleContext, RecursiveVisitor

__all__ = ["Project"]

logger = logging.getLogger(__name__)


class Project:
    def __init__(self, config: Optional[AnalyzerConfig] = None) -> None:
        self.config = config or AnalyzerConfig()
        self.report = Report()
        self.errors: List[SwayError] = []
        self._sources: Dict[str, str] = {}
        self._line_starts: Dict[str, List[int]] = {}
        self._modules: Dict[str, Module] = {}

    # ── sources ──────────────────────────────────────────────────────

    @classmethod
    def from_directory(
        cls, directory: Union[str, Path], config: Optional[AnalyzerConfig] = None
    ) -> "Project":
        """Load every source file below *directory*.

        Hidden directories and the configured build directories are
        skipped; files are added in sorted path order.
        """
        project = cls(config)
        root = Path(directory)
        if not root.is_dir():
            raise AnalyzerError(f"not a directory: {root}")
        for path in sorted(root.rglob(f"*{project.config.source_suffix}")):
            relative = path.relative_to(root).parts[:-1]
            if any(part.startswith(".") or part in project.config.excluded_dirs for part in relative):
                continue
            if path.is_file():
                project.add_file(path)
        logger.info("loaded %d source file(s) from %s", len(project.paths), root)
        return project

    @classmethod
    def from_files(
        cls, files: Iterable[Union[str, Path]], config: Optional[AnalyzerConfig] = None
    ) -> "Project":
        project = cls(config)
        for path in files:
            project.add_file(path)
        return project

    def add_file(self, path: Union[str, Path]) -> None:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise AnalyzerError(f"cannot read {path}: {exc.strerror}", exc) from exc
        self.add_source(str(path), text)

    def add_source(self, path: str, text: str) -> None:
        self._sources[path] = text
        self._line_starts[path] = [0] + [i + 1 for i, ch in enumerate(text) if ch == "\n"]
        self._modules.pop(path, None)

    @property
    def paths(self) -> List[str]:
        return list(self._sources)

    def source(self, path: str) -> str:
        return self._sources[path]

    # ── syntax tree provider ─────────────────────────────────────────

    def parse(self, path: str) -> Module:
        """The parsed module for *path* (parsed once, then cached)."""
        module = self._modules.get(path)
        if module is None:
            module = parse_module(self._sources[path], path)
            self._modules[path] = module
        return module

    def span_to_line(self, path: str, span: Span) -> int:
        """1-based line number of the start of *span* in *path*."""
        if span.path != path:
            raise SpanResolutionError(path, span, "span belongs to another file")
        line_starts = self._line_starts.get(path)
        if line_starts is None:
            raise SpanResolutionError(path, span, "file is not part of the project")
        if span.start < 0 or span.end > len(self._sources[path]) or span.start > span.end:
            raise SpanResolutionError(path, span, "span lies outside the source")
        return bisect.bisect_right(line_starts, span.start)

    # ── analysis ─────────────────────────────────────────────────────

    def analyze(self) -> Report:
        """Run the configured detectors over every file.

        Each call starts from a fresh report and fresh detector instances.
        A file that fails to parse or whose spans cannot be resolved is
        skipped; the error is logged and kept in :attr:`errors`.
        """
        self.report = Report()
        self.errors = []
        detectors = create_detectors(self.config.selected_detectors())
        logger.info("running detectors: %s", ", ".join(d.name for d in detectors))
        visitor = RecursiveVisitor(detectors)

        for path in self.paths:
            context = None
            try:
                context = ModuleContext(path, self.parse(path))
                visitor.visit_module(context, self)
                visitor.leave_module(context, self)
            except (SwayParseError, SpanResolutionError) as exc:
                logger.error("skipping %s: %s", path, exc)
                self.errors.append(exc)
                if context is not None:
                    visitor.abort_module(context, self)
            else:
                logger.debug("%s: %d finding(s)", path, len(self.report.entries_for(path)))

        return self.report

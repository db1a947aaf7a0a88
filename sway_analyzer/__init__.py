"""sway_analyzer — static analysis of Sway smart contracts.

Detectors walk the syntax trees produced by :mod:`swayparse` and collect
findings into a per-project report.

Submodules
----------
project
    ``Project``: source loading, cached parsing, span → line mapping and
    the analysis driver.

visitor
    ``AstVisitor`` callback surface, the context records handed to each
    callback, and ``RecursiveVisitor`` which walks a module and fans out
    to detectors and hooks.

detectors
    The detector registry (``DETECTOR_TYPES``) and the detectors:
    ``inline_assembly_usage`` and ``unprotected_storage_variables``.

report
    ``Severity``, ``ReportEntry`` and the append-only ``Report``.

config
    ``AnalyzerConfig`` and ``load_config`` for JSON configuration files.

utils
    Structural queries over the AST shared by the detectors.

main
    CLI entry-point with subcommands: ``analyze``, ``detectors``, ``parse``.

Usage
-----
Command-line::

    python -m sway_analyzer analyze --directory my-contract
    python -m sway_analyzer --help

Programmatic::

    from sway_analyzer.project import Project

    project = Project.from_directory("my-contract")
    report = project.analyze()
    print(report.format_text())

"""

from __future__ import annotations

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
]

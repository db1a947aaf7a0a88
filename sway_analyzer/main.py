#!/usr/bin/env python3
"""sway_analyzer/main.py — CLI entry-point for the Sway analyzer.

Usage examples
--------------
    # Analyse every .sw file below a project directory
    sway-analyzer analyze --directory my-contract

    # Analyse specific files with selected detectors
    sway-analyzer analyze --files src/main.sw src/lib.sw \\
        --detectors unprotected_storage_variables

    # Machine-readable output, most severe first
    sway-analyzer analyze --directory my-contract --format json --sorting severity

    # List the registered detectors
    sway-analyzer detectors

    # Parse a file and print its AST as a tree (debugging aid)
    sway-analyzer parse src/main.sw

Exit codes
----------
    0   Success; no finding of severity High or above.
    1   One or more findings of severity High or Critical.
    2   Infrastructure failure (bad configuration, unreadable file,
        unparsable source, unknown detector, ...).

The module doubles as ``python -m sway_analyzer`` via the companion
``sway_analyzer/__main__.py``.
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from sway_analyzer import __version__
from sway_analyzer.config import DISPLAY_FORMATS, AnalyzerConfig, load_config
from sway_analyzer.detectors import DETECTOR_TYPES
from sway_analyzer.errors import AnalyzerError, SwayParseError
from sway_analyzer.project import Project
from sway_analyzer.report import SORTINGS, Severity

_log = logging.getLogger("sway_analyzer")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


def _configure_logging(verbosity: int) -> None:
    """Set up the ``sway_analyzer`` and ``swayparse`` loggers.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    for name in ("sway_analyzer", "swayparse"):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
            logger.addHandler(handler)


def _open_output(dest: Optional[str]) -> TextIO:
    """Return a writable text stream.

    *dest* ``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path
    for writing (creating parent directories as needed).
    """
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def _split_names(values: Optional[List[str]]) -> Optional[tuple]:
    """``["a,b", "c"]`` → ``("a", "b", "c")``; ``None`` stays ``None``."""
    if values is None:
        return None
    return tuple(n.strip() for v in values for n in v.split(",") if n.strip())


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------

def cmd_analyze(args: argparse.Namespace) -> int:
    """Run the selected detectors and print the report."""
    if not args.directory and not args.files:
        _log.error("Specify --directory or --files.")
        return EXIT_INFRA

    config = load_config(args.config) if args.config else AnalyzerConfig()
    config = config.merged(
        detectors=_split_names(args.detectors),
        excluded_detectors=_split_names(args.exclude),
        sorting=args.sorting,
        display_format=args.format,
    )
    for warning in config.validate():
        _log.warning("%s", warning)

    project = Project(config)
    if args.directory:
        project = Project.from_directory(args.directory, config)
    for path in args.files or ():
        project.add_file(path)

    report = project.analyze()

    out = _open_output(args.output)
    try:
        if config.display_format == "json":
            out.write(report.to_json(config.sorting) + "\n")
        else:
            out.write(report.format_text(config.sorting) + "\n")
    finally:
        if out is not sys.stdout:
            out.close()

    for error in project.errors:
        if isinstance(error, SwayParseError):
            sys.stderr.write(error.to_gcc_format() + "\n")
        else:
            sys.stderr.write(f"error: {error}\n")
    if project.errors:
        return EXIT_INFRA

    worst = report.max_severity()
    return EXIT_ERROR if worst is not None and worst >= Severity.HIGH else EXIT_OK


# ---------------------------------------------------------------------------
# detectors
# ---------------------------------------------------------------------------

def cmd_detectors(args: argparse.Namespace) -> int:
    """List the registered detectors."""
    out = _open_output(args.output)
    try:
        for name, constructor in DETECTOR_TYPES:
            out.write(f"  {name:<32} [{constructor.default_severity}] {constructor.description}\n")
        out.write(f"\n{len(DETECTOR_TYPES)} detector(s) available.\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


# ---------------------------------------------------------------------------
# parse
# ---------------------------------------------------------------------------

def cmd_parse(args: argparse.Namespace) -> int:
    """Parse one source file and print its AST as a tree."""
    from swayparse import dump_ast, parse_module

    path = Path(args.source_file)
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as exc:
        _log.error("cannot read %s: %s", path, exc.strerror)
        return EXIT_INFRA

    try:
        module = parse_module(source, str(path))
    except SwayParseError as exc:
        sys.stderr.write(exc.to_gcc_format() + "\n")
        return EXIT_INFRA

    out = _open_output(args.output)
    try:
        out.write(dump_ast(module, include_spans=args.spans))
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


# ===========================================================================
# Argument parser construction
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""

    parser = argparse.ArgumentParser(
        prog="sway-analyzer",
        description="Static analysis of Sway smart contracts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              sway-analyzer analyze --directory my-contract
              sway-analyzer analyze --files src/main.sw --format json
              sway-analyzer detectors
              sway-analyzer parse src/main.sw
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_output_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "-o", "--output",
            default=None,
            help="Write output to this file instead of stdout.",
        )

    # --- analyze ------------------------------------------------------------
    p_analyze = subparsers.add_parser(
        "analyze",
        help="Run detectors over Sway source files.",
    )
    p_analyze.add_argument(
        "--directory",
        default=None,
        help="Project directory; every .sw file below it is analysed.",
    )
    p_analyze.add_argument(
        "--files",
        nargs="+",
        default=None,
        metavar="FILE",
        help="Individual source files to analyse.",
    )
    p_analyze.add_argument(
        "--detectors",
        action="append",
        default=None,
        metavar="NAME[,NAME...]",
        help="Only run these detectors (repeatable, comma-separated).",
    )
    p_analyze.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="NAME[,NAME...]",
        help="Skip these detectors (repeatable, comma-separated).",
    )
    p_analyze.add_argument(
        "--config",
        default=None,
        help="JSON configuration file.",
    )
    p_analyze.add_argument(
        "--sorting",
        choices=SORTINGS,
        default=None,
        help="Order of findings within a file (default: line).",
    )
    p_analyze.add_argument(
        "--format",
        choices=DISPLAY_FORMATS,
        default=None,
        help="Output format (default: text).",
    )
    _add_output_args(p_analyze)
    p_analyze.set_defaults(func=cmd_analyze)

    # --- detectors ----------------------------------------------------------
    p_detectors = subparsers.add_parser(
        "detectors",
        help="List available detectors.",
    )
    _add_output_args(p_detectors)
    p_detectors.set_defaults(func=cmd_detectors)

    # --- parse --------------------------------------------------------------
    p_parse = subparsers.add_parser(
        "parse",
        help="Parse a source file and dump its AST.",
    )
    p_parse.add_argument("source_file", help="Path to a .sw file.")
    p_parse.add_argument(
        "--spans",
        action="store_true",
        help="Include source spans in the dump.",
    )
    _add_output_args(p_parse)
    p_parse.set_defaults(func=cmd_parse)

    return parser


# ===========================================================================
# Main
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the Sway analyzer CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except AnalyzerError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130  # Standard UNIX convention for SIGINT
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


# ---------------------------------------------------------------------------
# Module execution support
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    raise SystemExit(main())

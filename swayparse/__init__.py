"""swayparse — Sway syntax tree provider.

Submodules
----------
ast
    Frozen dataclass nodes for modules, items, statements, expressions
    and patterns.  Every node carries a ``Span`` into its source file.

grammar
    The parsimonious PEG grammar for the Sway subset the analyzers read.

parser
    ``SwayASTBuilder`` (parse tree → AST) and ``parse_module``.

errors
    ``SwayError`` / ``SwayParseError``.

dump
    Plain-text tree dumps of the AST via rich.

Usage
-----
::

    from swayparse import parse_module

    module = parse_module(open("src/main.sw").read(), path="src/main.sw")
    for fn in module.functions:
        print(fn.name)
"""

from __future__ import annotations

from swayparse.errors import SwayError, SwayParseError
from swayparse.parser import parse_module
from swayparse.dump import dump_ast

__all__ = [
    "SwayError",
    "SwayParseError",
    "parse_module",
    "dump_ast",
]

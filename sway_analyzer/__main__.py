"""
sway_analyzer/__main__.py
=========================

Entry point for ``python -m sway_analyzer``.

Usage
-----
    python -m sway_analyzer <command> [options]

Commands
--------
    analyze     Run the detectors over a project directory or files
    detectors   List the registered detectors
    parse       Parse a source file and dump its AST as a tree
"""

import sys

from sway_analyzer.main import main

if __name__ == "__main__":
    sys.exit(main())

# sway_analyzer/detectors/__init__.py
"""
Detector registry.

``DETECTOR_TYPES`` is a flat, ordered table of ``(name, constructor)``
pairs.  Each constructor takes no arguments and returns a fresh visitor
whose state belongs to that instance alone, so detectors never depend
on one another's run order.
"""

from __future__ import annotations

from typing import Callable, List, Tuple

from sway_analyzer.detectors.inline_assembly_usage import InlineAssemblyUsageVisitor
from sway_analyzer.detectors.unprotected_storage_variables import UnprotectedStorageVariablesVisitor
from sway_analyzer.errors import UnknownDetectorError
from sway_analyzer.visitor import AstVisitor

__all__ = [
    "DETECTOR_TYPES",
    "DetectorEntry",
    "detector_names",
    "get_detector",
    "create_detectors",
    "InlineAssemblyUsageVisitor",
    "UnprotectedStorageVariablesVisitor",
]

DetectorEntry = Tuple[str, Callable[[], AstVisitor]]

DETECTOR_TYPES: Tuple[DetectorEntry, ...] = (
    ("inline_assembly_usage", InlineAssemblyUsageVisitor),
    ("unprotected_storage_variables", UnprotectedStorageVariablesVisitor),
)


def detector_names() -> List[str]:
    return [name for name, _ in DETECTOR_TYPES]


def get_detector(name: str) -> DetectorEntry:
    for entry in DETECTOR_TYPES:
        if entry[0] == name:
            return entry
    raise UnknownDetectorError(name)


def create_detectors(names: List[str]) -> List[AstVisitor]:
    """Fresh instances of the named detectors, in the order given."""
    return [get_detector(name)[1]() for name in names]

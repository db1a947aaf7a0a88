# tests/test_detectors.py
"""Tests for the detector registry (sway_analyzer.detectors)."""

import pytest

from sway_analyzer.config import AnalyzerConfig
from sway_analyzer.detectors import (
    DETECTOR_TYPES, InlineAssemblyUsageVisitor, UnprotectedStorageVariablesVisitor,
    create_detectors, detector_names, get_detector,
)
from sway_analyzer.errors import AnalyzerError, UnknownDetectorError
from sway_analyzer.report import Severity
from sway_analyzer.visitor import AstVisitor


class TestRegistry:

    def test_names_in_order(self):
        assert detector_names() == ["inline_assembly_usage", "unprotected_storage_variables"]

    def test_names_match_visitors(self):
        for name, constructor in DETECTOR_TYPES:
            assert constructor.name == name
            assert constructor.description
            assert issubclass(constructor, AstVisitor)

    def test_default_severities(self):
        assert InlineAssemblyUsageVisitor.default_severity is Severity.MEDIUM
        assert UnprotectedStorageVariablesVisitor.default_severity is Severity.HIGH

    def test_get_detector(self):
        name, constructor = get_detector("unprotected_storage_variables")
        assert constructor is UnprotectedStorageVariablesVisitor

    def test_unknown_detector(self):
        with pytest.raises(UnknownDetectorError) as exc_info:
            get_detector("reentrancy")
        assert exc_info.value.name == "reentrancy"
        assert str(exc_info.value) == "unknown detector: 'reentrancy'"
        assert isinstance(exc_info.value, AnalyzerError)

    def test_fresh_instances(self):
        first = create_detectors(["unprotected_storage_variables"])
        second = create_detectors(["unprotected_storage_variables"])
        assert first[0] is not second[0]
        assert first[0].module_states is not second[0].module_states

    def test_create_in_given_order(self):
        detectors = create_detectors(["unprotected_storage_variables", "inline_assembly_usage"])
        assert [d.name for d in detectors] == ["unprotected_storage_variables", "inline_assembly_usage"]

    def test_repr(self):
        assert repr(InlineAssemblyUsageVisitor()) == "<InlineAssemblyUsageVisitor 'inline_assembly_usage'>"


class TestSelection:

    def test_all_by_default(self):
        assert AnalyzerConfig().selected_detectors() == detector_names()

    def test_explicit_and_excluded(self):
        config = AnalyzerConfig(
            detectors=("unprotected_storage_variables", "inline_assembly_usage"),
            excluded_detectors=("inline_assembly_usage",),
        )
        assert config.selected_detectors() == ["unprotected_storage_variables"]

    def test_unknown_selection_raises(self):
        with pytest.raises(UnknownDetectorError):
            AnalyzerConfig(detectors=("nope",)).selected_detectors()

# tests/test_report.py
"""Tests for severities, report entries and the append-only report."""

import json

import pytest

from sway_analyzer.report import Report, ReportEntry, Severity


@pytest.fixture
def report():
    report = Report()
    report.add_entry("b.sw", 1, Severity.MEDIUM, "m1")
    report.add_entry("a.sw", 5, Severity.HIGH, "m5")
    report.add_entry("a.sw", 2, Severity.LOW, "m2")
    return report


class TestSeverity:

    def test_ordering(self):
        assert Severity.LOW < Severity.MEDIUM < Severity.HIGH < Severity.CRITICAL
        assert Severity.HIGH >= Severity.HIGH
        assert max([Severity.MEDIUM, Severity.CRITICAL, Severity.LOW]) is Severity.CRITICAL

    def test_str(self):
        assert str(Severity.HIGH) == "High"

    def test_not_comparable_with_other_types(self):
        with pytest.raises(TypeError):
            Severity.LOW < 1


class TestReportEntry:

    def test_str(self):
        entry = ReportEntry("a.sw", 3, Severity.HIGH, "msg")
        assert str(entry) == "a.sw:3: [High] msg"

    def test_to_json(self):
        entry = ReportEntry("a.sw", 3, Severity.LOW, "msg")
        assert entry.to_json() == {"path": "a.sw", "line": 3, "severity": "Low", "message": "msg"}


class TestReport:

    def test_entries_grouped_in_emission_order(self, report):
        assert [e.message for e in report.entries] == ["m1", "m5", "m2"]
        assert report.paths == ("b.sw", "a.sw")
        assert [e.message for e in report.entries_for("a.sw")] == ["m5", "m2"]
        assert report.entries_for("c.sw") == ()
        assert len(report) == 3
        assert [e.message for e in report] == ["m1", "m5", "m2"]

    def test_add_entry_returns_entry(self):
        entry = Report().add_entry("a.sw", 1, Severity.LOW, "x")
        assert entry == ReportEntry("a.sw", 1, Severity.LOW, "x")

    def test_sorted_by_line(self, report):
        assert [e.message for e in report.sorted_entries("line")] == ["m2", "m5", "m1"]

    def test_sorted_by_severity(self, report):
        assert [e.message for e in report.sorted_entries("severity")] == ["m5", "m2", "m1"]

    def test_severity_ties_by_line(self):
        report = Report()
        report.add_entry("a.sw", 9, Severity.HIGH, "late")
        report.add_entry("a.sw", 1, Severity.HIGH, "early")
        assert [e.message for e in report.sorted_entries("severity")] == ["early", "late"]

    def test_sorting_does_not_reorder_storage(self, report):
        report.sorted_entries("line")
        assert [e.message for e in report.entries] == ["m1", "m5", "m2"]

    def test_unknown_sorting(self, report):
        with pytest.raises(ValueError):
            report.sorted_entries("path")

    def test_max_severity(self, report):
        assert report.max_severity() is Severity.HIGH
        assert Report().max_severity() is None

    def test_to_json(self, report):
        data = json.loads(report.to_json())
        assert data["count"] == 3
        assert [f["message"] for f in data["findings"]] == ["m2", "m5", "m1"]

    def test_format_text(self, report):
        assert report.format_text() == (
            "a.sw:\n"
            "  2: [Low] m2\n"
            "  5: [High] m5\n"
            "\n"
            "b.sw:\n"
            "  1: [Medium] m1"
        )

    def test_format_text_empty(self):
        assert Report().format_text() == "No findings."

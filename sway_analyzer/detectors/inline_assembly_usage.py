# sway_analyzer/detectors/inline_assembly_usage.py
"""Report every ``asm`` block used inside a function."""

from __future__ import annotations

from sway_analyzer import utils
from sway_analyzer.report import Severity
from sway_analyzer.visitor import AsmBlockContext, AstVisitor

__all__ = ["InlineAssemblyUsageVisitor"]


class InlineAssemblyUsageVisitor(AstVisitor):
    name = "inline_assembly_usage"
    description = "Functions that contain inline assembly."
    default_severity = Severity.MEDIUM

    def visit_asm_block(self, context: AsmBlockContext, project) -> None:
        if context.item_fn is None:
            return
        project.report.add_entry(
            context.path,
            project.span_to_line(context.path, context.asm_block.span),
            self.default_severity,
            f"{utils.get_item_location(context.item_impl, context.item_fn)} "
            f"contains inline assembly usage.",
        )

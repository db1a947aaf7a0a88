# sway_analyzer/visitor.py
"""
Traversal engine.

Detectors subclass :class:`AstVisitor` and override only the callbacks
they need; every callback defaults to a no-op and has the signature
``(context, project) -> None``.  :class:`RecursiveVisitor` owns the walk:
it descends a module depth-first and, at every node, dispatches the
matching callback first to each registered visitor (in registration
order) and then to each ad-hoc hook in the ``<callback>_hooks`` list.

Hooks let a detector layer a second pass over an already-visited module
without writing another tree walk::

    post = RecursiveVisitor()
    post.visit_expr_hooks.append(lambda ctx, project: ...)
    post.hooks("leave_fn").append(lambda ctx, project: ...)
    post.visit_module(module_context, project)
    post.leave_module(module_context, project)

Walk order
──────────
    visit_module
      visit_use / leave_use                      (per use item)
      visit_item_impl                            (per impl)
        visit_fn                                 (per fn)
          visit_block
            visit_statement
              visit_statement_let                (let statements)
                visit_expr ... leave_expr        (initializer)
              leave_statement_let
            leave_statement
          leave_block
        leave_fn
      leave_item_impl
    leave_module                                 (only when called)
    abort_module                                 (instead of leave_module when
                                                  the walk raised)

Expressions are visited pre-order with ``visit_expr`` and closed with
``leave_expr``; an ``asm`` block additionally gets ``visit_asm_block`` /
``leave_asm_block`` between the two.  Expressions outside any function
(storage and configurable initialisers, constants) are visited with
``item_fn`` set to ``None``.  Exceptions raised by callbacks propagate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Dict, List, Optional, Sequence, Tuple

from swayparse.ast import (
    AsmBlock, CodeBlock, Expr, ItemAbi, ItemConfigurable, ItemConst, ItemFn,
    ItemImpl, ItemStorage, ItemTrait, ItemUse, Module, Span, Statement,
    StatementExpr, StatementLet,
)
from sway_analyzer.report import Severity

if TYPE_CHECKING:
    from sway_analyzer.project import Project

__all__ = [
    "ModuleContext", "UseContext", "ItemImplContext", "FnContext",
    "BlockContext", "StatementContext", "StatementLetContext", "ExprContext",
    "AsmBlockContext", "AstVisitor", "RecursiveVisitor", "CALLBACKS",
]

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  Contexts
# ═════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ModuleContext:
    path: str
    module: Module


@dataclass(frozen=True)
class UseContext:
    path: str
    module: Module
    item_use: ItemUse


@dataclass(frozen=True)
class ItemImplContext:
    path: str
    module: Module
    item_impl: ItemImpl


@dataclass(frozen=True)
class FnContext:
    path: str
    module: Module
    item_impl: Optional[ItemImpl]
    item_fn: ItemFn


@dataclass(frozen=True)
class BlockContext:
    """``blocks`` is the scope stack, outermost first, ending with ``block``."""

    path: str
    module: Module
    item_impl: Optional[ItemImpl]
    item_fn: ItemFn
    blocks: Tuple[Span, ...]
    block: CodeBlock


@dataclass(frozen=True)
class StatementContext:
    path: str
    module: Module
    item_impl: Optional[ItemImpl]
    item_fn: ItemFn
    blocks: Tuple[Span, ...]
    statement: Statement


@dataclass(frozen=True)
class StatementLetContext:
    path: str
    module: Module
    item_impl: Optional[ItemImpl]
    item_fn: ItemFn
    blocks: Tuple[Span, ...]
    statement_let: StatementLet


@dataclass(frozen=True)
class ExprContext:
    path: str
    module: Module
    item_impl: Optional[ItemImpl]
    item_fn: Optional[ItemFn]
    blocks: Tuple[Span, ...]
    expr: Expr


@dataclass(frozen=True)
class AsmBlockContext:
    path: str
    module: Module
    item_impl: Optional[ItemImpl]
    item_fn: Optional[ItemFn]
    blocks: Tuple[Span, ...]
    asm_block: AsmBlock


# ═════════════════════════════════════════════════════════════════════════
#  Visitor base class
# ═════════════════════════════════════════════════════════════════════════

CALLBACKS: Tuple[str, ...] = (
    "visit_module", "leave_module", "abort_module",
    "visit_use", "leave_use",
    "visit_item_impl", "leave_item_impl",
    "visit_fn", "leave_fn",
    "visit_block", "leave_block",
    "visit_statement", "leave_statement",
    "visit_statement_let", "leave_statement_let",
    "visit_expr", "leave_expr",
    "visit_asm_block", "leave_asm_block",
)

Hook = Callable[[Any, "Project"], None]


class AstVisitor:
    """
    Base class for detectors.

    Subclass Contract
    ─────────────────
      - Set ``name`` (the registry key), ``description`` and
        ``default_severity``.
      - Override any of the ``visit_*`` / ``leave_*`` callbacks.
      - Keep all state on the instance; a fresh instance is created for
        every project analysis.
    """

    name: ClassVar[str] = "base-visitor"
    description: ClassVar[str] = ""
    default_severity: ClassVar[Severity] = Severity.LOW

    def visit_module(self, context: ModuleContext, project: "Project") -> None:
        pass

    def leave_module(self, context: ModuleContext, project: "Project") -> None:
        pass

    def abort_module(self, context: ModuleContext, project: "Project") -> None:
        """Called instead of ``leave_module`` when the walk of a module fails."""
        pass

    def visit_use(self, context: UseContext, project: "Project") -> None:
        pass

    def leave_use(self, context: UseContext, project: "Project") -> None:
        pass

    def visit_item_impl(self, context: ItemImplContext, project: "Project") -> None:
        pass

    def leave_item_impl(self, context: ItemImplContext, project: "Project") -> None:
        pass

    def visit_fn(self, context: FnContext, project: "Project") -> None:
        pass

    def leave_fn(self, context: FnContext, project: "Project") -> None:
        pass

    def visit_block(self, context: BlockContext, project: "Project") -> None:
        pass

    def leave_block(self, context: BlockContext, project: "Project") -> None:
        pass

    def visit_statement(self, context: StatementContext, project: "Project") -> None:
        pass

    def leave_statement(self, context: StatementContext, project: "Project") -> None:
        pass

    def visit_statement_let(self, context: StatementLetContext, project: "Project") -> None:
        pass

    def leave_statement_let(self, context: StatementLetContext, project: "Project") -> None:
        pass

    def visit_expr(self, context: ExprContext, project: "Project") -> None:
        pass

    def leave_expr(self, context: ExprContext, project: "Project") -> None:
        pass

    def visit_asm_block(self, context: AsmBlockContext, project: "Project") -> None:
        pass

    def leave_asm_block(self, context: AsmBlockContext, project: "Project") -> None:
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


# ═════════════════════════════════════════════════════════════════════════
#  Recursive traversal
# ═════════════════════════════════════════════════════════════════════════


class RecursiveVisitor(AstVisitor):
    """Walks a module and fans every callback out to visitors and hooks."""

    name = "recursive"

    def __init__(self, visitors: Sequence[AstVisitor] = ()) -> None:
        self.visitors: List[AstVisitor] = list(visitors)

        self.visit_module_hooks: List[Hook] = []
        self.leave_module_hooks: List[Hook] = []
        self.abort_module_hooks: List[Hook] = []
        self.visit_use_hooks: List[Hook] = []
        self.leave_use_hooks: List[Hook] = []
        self.visit_item_impl_hooks: List[Hook] = []
        self.leave_item_impl_hooks: List[Hook] = []
        self.visit_fn_hooks: List[Hook] = []
        self.leave_fn_hooks: List[Hook] = []
        self.visit_block_hooks: List[Hook] = []
        self.leave_block_hooks: List[Hook] = []
        self.visit_statement_hooks: List[Hook] = []
        self.leave_statement_hooks: List[Hook] = []
        self.visit_statement_let_hooks: List[Hook] = []
        self.leave_statement_let_hooks: List[Hook] = []
        self.visit_expr_hooks: List[Hook] = []
        self.leave_expr_hooks: List[Hook] = []
        self.visit_asm_block_hooks: List[Hook] = []
        self.leave_asm_block_hooks: List[Hook] = []

        self._hooks: Dict[str, List[Hook]] = {
            "visit_module": self.visit_module_hooks,
            "leave_module": self.leave_module_hooks,
            "abort_module": self.abort_module_hooks,
            "visit_use": self.visit_use_hooks,
            "leave_use": self.leave_use_hooks,
            "visit_item_impl": self.visit_item_impl_hooks,
            "leave_item_impl": self.leave_item_impl_hooks,
            "visit_fn": self.visit_fn_hooks,
            "leave_fn": self.leave_fn_hooks,
            "visit_block": self.visit_block_hooks,
            "leave_block": self.leave_block_hooks,
            "visit_statement": self.visit_statement_hooks,
            "leave_statement": self.leave_statement_hooks,
            "visit_statement_let": self.visit_statement_let_hooks,
            "leave_statement_let": self.leave_statement_let_hooks,
            "visit_expr": self.visit_expr_hooks,
            "leave_expr": self.leave_expr_hooks,
            "visit_asm_block": self.visit_asm_block_hooks,
            "leave_asm_block": self.leave_asm_block_hooks,
        }

    def hooks(self, callback: str) -> List[Hook]:
        """The hook list for *callback*; raises ``KeyError`` for unknown names."""
        return self._hooks[callback]

    def _dispatch(self, callback: str, context: Any, project: "Project") -> None:
        for visitor in self.visitors:
            getattr(visitor, callback)(context, project)
        for hook in self._hooks[callback]:
            hook(context, project)

    # ── module ───────────────────────────────────────────────────────

    def visit_module(self, context: ModuleContext, project: "Project") -> None:
        self._dispatch("visit_module", context, project)

        path, module = context.path, context.module
        for item in module.items:
            if isinstance(item, ItemUse):
                use_context = UseContext(path, module, item)
                self._dispatch("visit_use", use_context, project)
                self._dispatch("leave_use", use_context, project)
            elif isinstance(item, ItemFn):
                self._walk_fn(path, module, None, item, project)
            elif isinstance(item, ItemImpl):
                self._walk_impl(path, module, item, project)
            elif isinstance(item, (ItemAbi, ItemTrait)):
                for item_fn in item.defaults:
                    self._walk_fn(path, module, None, item_fn, project)
            elif isinstance(item, (ItemStorage, ItemConfigurable)):
                for storage_field in item.fields:
                    self._walk_expr(path, module, None, None, (), storage_field.initializer, project)
            elif isinstance(item, ItemConst) and item.expr is not None:
                self._walk_expr(path, module, None, None, (), item.expr, project)

    def leave_module(self, context: ModuleContext, project: "Project") -> None:
        self._dispatch("leave_module", context, project)

    def abort_module(self, context: ModuleContext, project: "Project") -> None:
        self._dispatch("abort_module", context, project)

    # ── items ────────────────────────────────────────────────────────

    def _walk_impl(self, path: str, module: Module, item_impl: ItemImpl, project: "Project") -> None:
        context = ItemImplContext(path, module, item_impl)
        self._dispatch("visit_item_impl", context, project)
        for item in item_impl.contents:
            if isinstance(item, ItemFn):
                self._walk_fn(path, module, item_impl, item, project)
            elif isinstance(item, ItemConst) and item.expr is not None:
                self._walk_expr(path, module, item_impl, None, (), item.expr, project)
        self._dispatch("leave_item_impl", context, project)

    def _walk_fn(
        self,
        path: str,
        module: Module,
        item_impl: Optional[ItemImpl],
        item_fn: ItemFn,
        project: "Project",
    ) -> None:
        context = FnContext(path, module, item_impl, item_fn)
        self._dispatch("visit_fn", context, project)
        self._walk_block(path, module, item_impl, item_fn, (), item_fn.body, project)
        self._dispatch("leave_fn", context, project)

    # ── blocks and statements ────────────────────────────────────────

    def _walk_block(self, path, module, item_impl, item_fn, blocks, block: CodeBlock, project) -> None:
        blocks = blocks + (block.span,)
        context = BlockContext(path, module, item_impl, item_fn, blocks, block)
        self._dispatch("visit_block", context, project)
        for statement in block.statements:
            self._walk_statement(path, module, item_impl, item_fn, blocks, statement, project)
        self._dispatch("leave_block", context, project)

    def _walk_statement(self, path, module, item_impl, item_fn, blocks, statement, project) -> None:
        context = StatementContext(path, module, item_impl, item_fn, blocks, statement)
        self._dispatch("visit_statement", context, project)

        if isinstance(statement, StatementLet):
            let_context = StatementLetContext(path, module, item_impl, item_fn, blocks, statement)
            self._dispatch("visit_statement_let", let_context, project)
            self._walk_expr(path, module, item_impl, item_fn, blocks, statement.expr, project)
            self._dispatch("leave_statement_let", let_context, project)
        elif isinstance(statement, StatementExpr):
            self._walk_expr(path, module, item_impl, item_fn, blocks, statement.expr, project)

        self._dispatch("leave_statement", context, project)

    # ── expressions ──────────────────────────────────────────────────

    def _walk_expr(self, path, module, item_impl, item_fn, blocks, expr: Expr, project) -> None:
        context = ExprContext(path, module, item_impl, item_fn, blocks, expr)
        self._dispatch("visit_expr", context, project)

        if isinstance(expr, AsmBlock):
            asm_context = AsmBlockContext(path, module, item_impl, item_fn, blocks, expr)
            self._dispatch("visit_asm_block", asm_context, project)
            self._dispatch("leave_asm_block", asm_context, project)

        for child in expr.children():
            if isinstance(child, CodeBlock):
                if item_fn is None:
                    # statement contexts require an enclosing function
                    continue
                self._walk_block(path, module, item_impl, item_fn, blocks, child, project)
            else:
                self._walk_expr(path, module, item_impl, item_fn, blocks, child, project)

        self._dispatch("leave_expr", context, project)

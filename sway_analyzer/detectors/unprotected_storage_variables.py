# sway_analyzer/detectors/unprotected_storage_variables.py
"""
Storage writes that are not guarded by a caller-identity check.

A function is *checked* once it contains a guard on the caller identity
(``msg_sender()`` by default, or any ``use`` alias of it):

    require(msg_sender().unwrap() == storage.owner.read(), Error::NotOwner);

    if msg_sender().unwrap() != storage.owner.read() {
        revert(0);
    }

A local bound to the accessor counts as the accessor itself, through
any chain of plain ``let`` bindings (``let a = msg_sender(); let b = a;``).

The analysis runs in two passes per module:

  1. Primary traversal: collect alias names, local bindings, guards and
     the storage slots each function writes.
  2. ``leave_module``: a nested traversal merges the facts of every
     resolvable callee into its caller, then reports each function that
     writes storage and is still unchecked.

Pass 2 is a single sweep in source order.  A caller visited before its
callee's own calls are merged sees only what the callee had at that
moment; there is no fixpoint iteration.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from swayparse.ast import (
    BinaryExpr, BinOp, Expr, FuncApp, IfExpr, IfLet, ItemFn, MatchExpr,
    MethodCall, PathExpr, PatternVar, Span,
)
from sway_analyzer import utils
from sway_analyzer.report import Severity
from sway_analyzer.visitor import (
    AstVisitor, ExprContext, FnContext, ModuleContext, RecursiveVisitor,
    StatementContext, StatementLetContext, UseContext,
)

__all__ = [
    "UnprotectedStorageVariablesVisitor",
    "ModuleState",
    "FnState",
    "BlockState",
    "VarState",
]

logger = logging.getLogger(__name__)

_GUARD_COMBINATORS = (BinOp.EQ, BinOp.NE, BinOp.AND, BinOp.OR)


@dataclass
class VarState:
    name: str
    is_msg_sender: bool


@dataclass
class BlockState:
    var_states: List[VarState] = field(default_factory=list)

    def lookup(self, name: str) -> Optional[VarState]:
        """The latest binding of *name* in this block."""
        for var_state in reversed(self.var_states):
            if var_state.name == name:
                return var_state
        return None


@dataclass
class FnState:
    block_states: Dict[Span, BlockState] = field(default_factory=dict)
    has_msg_sender_check: bool = False
    written_variables: List[str] = field(default_factory=list)

    def block_state(self, span: Span) -> BlockState:
        return self.block_states.setdefault(span, BlockState())

    def add_written_variable(self, name: str) -> None:
        # kept sorted and free of duplicates
        index = bisect.bisect_left(self.written_variables, name)
        if index == len(self.written_variables) or self.written_variables[index] != name:
            self.written_variables.insert(index, name)

    def is_msg_sender_var(self, blocks: Sequence[Span], expr: Expr) -> bool:
        """Whether *expr* names a local bound to the caller identity.

        Scopes are searched innermost first and the first binding of the
        name decides, so an inner non-alias shadows an outer alias.
        """
        if not isinstance(expr, PathExpr):
            return False
        name = expr.as_str()
        for span in reversed(blocks):
            var_state = self.block_state(span).lookup(name)
            if var_state is not None:
                return var_state.is_msg_sender
        return False

    def contains_msg_sender_var(self, blocks: Sequence[Span], expr: Expr) -> bool:
        if isinstance(expr, BinaryExpr) and expr.op in _GUARD_COMBINATORS:
            return (
                self.contains_msg_sender_var(blocks, expr.lhs)
                or self.contains_msg_sender_var(blocks, expr.rhs)
            )
        return self.is_msg_sender_var(blocks, expr)


@dataclass
class ModuleState:
    accessor_path: str
    msg_sender_names: List[str] = field(default_factory=list)
    fn_states: Dict[Span, FnState] = field(default_factory=dict)

    def fn_state(self, span: Span) -> FnState:
        return self.fn_states.setdefault(span, FnState())

    def expr_is_msg_sender_call(self, expr: Expr) -> bool:
        """``msg_sender()``, possibly wrapped in a method chain or ``match``."""
        if isinstance(expr, FuncApp):
            if not isinstance(expr.func, PathExpr):
                return False
            name = expr.func.as_str()
            return name in self.msg_sender_names or name == self.accessor_path
        if isinstance(expr, MethodCall):
            return self.expr_is_msg_sender_call(expr.target)
        if isinstance(expr, MatchExpr):
            return self.expr_is_msg_sender_call(expr.value)
        return False

    def expr_contains_msg_sender_call(self, expr: Expr) -> bool:
        if isinstance(expr, BinaryExpr) and expr.op in _GUARD_COMBINATORS:
            return (
                self.expr_contains_msg_sender_call(expr.lhs)
                or self.expr_contains_msg_sender_call(expr.rhs)
            )
        return self.expr_is_msg_sender_call(expr)


class UnprotectedStorageVariablesVisitor(AstVisitor):
    name = "unprotected_storage_variables"
    description = "Functions that write storage without checking the caller identity."
    default_severity = Severity.HIGH

    def __init__(self) -> None:
        self.module_states: Dict[str, ModuleState] = {}

    def _module_state(self, path: str, project) -> ModuleState:
        state = self.module_states.get(path)
        if state is None:
            accessor = project.config.identity_accessor
            # the accessor is part of the prelude, so its bare name is always visible
            state = ModuleState(accessor, [project.config.identity_accessor_name])
            self.module_states[path] = state
        return state

    def _condition_is_guard(self, module_state: ModuleState, fn_state: FnState,
                            blocks: Sequence[Span], condition: Expr) -> bool:
        return (
            module_state.expr_contains_msg_sender_call(condition)
            or fn_state.contains_msg_sender_var(blocks, condition)
        )

    # ── pass 1 ───────────────────────────────────────────────────────

    def visit_use(self, context: UseContext, project) -> None:
        module_state = self._module_state(context.path, project)
        name = utils.use_tree_to_name(context.item_use.tree, module_state.accessor_path)
        if name is not None:
            logger.debug("%s: `%s` is imported as `%s`", context.path, module_state.accessor_path, name)
            module_state.msg_sender_names.append(name)

    def visit_statement_let(self, context: StatementLetContext, project) -> None:
        module_state = self._module_state(context.path, project)
        fn_state = module_state.fn_state(context.item_fn.signature.span)
        statement_let = context.statement_let

        is_msg_sender = (
            module_state.expr_is_msg_sender_call(statement_let.expr)
            or fn_state.is_msg_sender_var(context.blocks, statement_let.expr)
        )

        block_state = fn_state.block_state(context.blocks[-1])
        pattern = statement_let.pattern
        if isinstance(pattern, PatternVar) and pattern.is_bare:
            block_state.var_states.append(VarState(pattern.name.name, is_msg_sender))
        else:
            for ident in utils.fold_pattern_idents(pattern):
                block_state.var_states.append(VarState(ident.name, False))

    def visit_statement(self, context: StatementContext, project) -> None:
        storage_ident = utils.storage_write_statement_to_storage_variable_ident(
            context.statement, project.config.storage_write_methods
        )
        if storage_ident is None:
            return
        module_state = self._module_state(context.path, project)
        fn_state = module_state.fn_state(context.item_fn.signature.span)
        fn_state.add_written_variable(storage_ident.name)

    def visit_expr(self, context: ExprContext, project) -> None:
        if context.item_fn is None:
            return
        expr = context.expr

        require_args = utils.get_require_args(expr)
        if require_args is not None:
            conditions = require_args
        elif (
            isinstance(expr, IfExpr)
            and not isinstance(expr.condition, IfLet)
            and utils.block_has_revert(expr.then_block)
        ):
            conditions = (expr.condition,)
        else:
            return

        module_state = self._module_state(context.path, project)
        fn_state = module_state.fn_state(context.item_fn.signature.span)
        for condition in conditions:
            if self._condition_is_guard(module_state, fn_state, context.blocks, condition):
                fn_state.has_msg_sender_check = True
                break

    # ── pass 2 ───────────────────────────────────────────────────────

    def leave_module(self, context: ModuleContext, project) -> None:
        module_state = self._module_state(context.path, project)

        def propagate(ctx: ExprContext, project) -> None:
            if not isinstance(ctx.expr, FuncApp) or ctx.item_fn is None:
                return
            callee = _resolve_callee(ctx, ctx.expr)
            if callee is None:
                return

            callee_state = module_state.fn_state(callee.signature.span)
            caller_state = module_state.fn_state(ctx.item_fn.signature.span)
            if callee_state.has_msg_sender_check:
                caller_state.has_msg_sender_check = True
            for name in list(callee_state.written_variables):
                caller_state.add_written_variable(name)
            logger.debug(
                "%s: merged `%s` into `%s` (checked=%s, writes=%s)",
                ctx.path, callee.name, ctx.item_fn.name,
                caller_state.has_msg_sender_check, caller_state.written_variables,
            )

        def check_fn(ctx: FnContext, project) -> None:
            signature = ctx.item_fn.signature
            fn_state = module_state.fn_state(signature.span)
            written = fn_state.written_variables
            if not written or fn_state.has_msg_sender_check:
                return
            project.report.add_entry(
                ctx.path,
                project.span_to_line(ctx.path, signature.span),
                self.default_severity,
                "{} writes to the {} storage {} without access restriction. "
                "Consider checking against `{}()` in order to limit access.".format(
                    utils.get_item_location(ctx.item_impl, ctx.item_fn),
                    ", ".join(f"`{name}`" for name in written),
                    "variable" if len(written) == 1 else "variables",
                    project.config.identity_accessor_name,
                ),
            )

        post = RecursiveVisitor()
        post.visit_expr_hooks.append(propagate)
        post.leave_fn_hooks.append(check_fn)
        try:
            post.visit_module(context, project)
            post.leave_module(context, project)
        finally:
            del self.module_states[context.path]

    def abort_module(self, context: ModuleContext, project) -> None:
        self.module_states.pop(context.path, None)


def _resolve_callee(context: ExprContext, call: FuncApp) -> Optional[ItemFn]:
    """The same-module function a call refers to: top level first, then the
    enclosing ``impl``."""
    if not isinstance(call.func, PathExpr):
        return None
    name = call.func.as_str()
    for item_fn in context.module.functions:
        if item_fn.name == name:
            return item_fn
    if context.item_impl is not None:
        for item_fn in context.item_impl.functions:
            if item_fn.name == name:
                return item_fn
    return None

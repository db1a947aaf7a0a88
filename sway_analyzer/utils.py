# sway_analyzer/utils.py
"""
Structural extractors over the Sway AST.

Every function here is pure and total: a shape the function does not
target yields an empty list, ``None`` or ``False``, never an exception.

Identifier folds
────────────────
    fold_expr_idents(storage.owner.write)   → [storage, owner, write]
    fold_pattern_idents((a, Foo { b, .. }))  → [a, b]
    fold_expr_ident_spans(a + f(b.c))        → spans of a, f, b.c, b

Statement shapes
────────────────
    storage.<name>...write(x)    storage write   (name, x)
    let mut x = storage.<name>.read()    storage read binding (name, x)
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence, Tuple

from swayparse.ast import (
    AbiCast, ArrayExpr, AsmBlock, Attribute, AttributeDecl, BinaryExpr, CodeBlock, Expr,
    FieldProjection, FuncApp, Ident, Index, ItemFn, ItemImpl, MethodCall,
    ParensExpr, PathExpr, Pattern, PatternConstructor, PatternOr, PatternPath,
    PatternStruct, PatternTuple, PatternVar, Reassignment, ReturnExpr, Span,
    Statement, StatementExpr, StatementLet, StructExpr, TupleExpr,
    TupleFieldProjection, UnaryExpr, UnaryOp, UseGlob, UseGroup, UseName,
    UsePath, UseRename, UseTree,
)

__all__ = [
    "STORAGE_WRITE_METHODS", "REQUIRE_NAMES", "REVERT_NAMES",
    "fold_punctuated", "fold_expr_ident_spans", "fold_path_idents",
    "fold_expr_idents", "fold_assignable_idents", "fold_pattern_idents",
    "use_tree_to_name", "expr_is_call_to", "get_require_args",
    "block_has_revert", "find_storage_access_in_expr",
    "statement_to_variable_binding_ident",
    "statement_to_storage_read_binding_idents",
    "statement_to_reassignment_idents", "statement_to_storage_write_idents",
    "storage_write_statement_to_storage_variable_ident",
    "check_attribute_decls", "get_item_location",
]

STORAGE_WRITE_METHODS: Tuple[str, ...] = ("write", "insert")
REQUIRE_NAMES: Tuple[str, ...] = ("require", "std::revert::require")
REVERT_NAMES: Tuple[str, ...] = ("revert", "std::revert::revert")


def fold_punctuated(seq: Optional[Iterable[Any]]) -> List[Any]:
    """A delimited sequence (tuple, list or ``None``) as a plain list."""
    if seq is None:
        return []
    return list(seq)


# ─────────────────────────────────────────────────────────────────────────
#  Identifier folds
# ─────────────────────────────────────────────────────────────────────────


def fold_expr_ident_spans(expr: Expr) -> List[Span]:
    """Spans of every identifier-like leaf in *expr*.

    Paths contribute their own span, field projections contribute the
    whole projection followed by the spans inside their target, struct
    shorthand fields contribute the field name and reassignments the
    assigned place.
    """
    spans: List[Span] = []

    if isinstance(expr, PathExpr):
        spans.append(expr.span)
    elif isinstance(expr, AbiCast):
        spans.extend(fold_expr_ident_spans(expr.address))
    elif isinstance(expr, StructExpr):
        for f in expr.fields:
            if f.expr is not None:
                spans.extend(fold_expr_ident_spans(f.expr))
            else:
                spans.append(f.name.span)
    elif isinstance(expr, (TupleExpr, ArrayExpr)):
        for child in expr.children():
            spans.extend(fold_expr_ident_spans(child))
    elif isinstance(expr, ParensExpr):
        spans.extend(fold_expr_ident_spans(expr.inner))
    elif isinstance(expr, ReturnExpr):
        if expr.expr is not None:
            spans.extend(fold_expr_ident_spans(expr.expr))
    elif isinstance(expr, FuncApp):
        spans.extend(fold_expr_ident_spans(expr.func))
        for arg in expr.args:
            spans.extend(fold_expr_ident_spans(arg))
    elif isinstance(expr, Index):
        spans.extend(fold_expr_ident_spans(expr.target))
        spans.extend(fold_expr_ident_spans(expr.arg))
    elif isinstance(expr, MethodCall):
        spans.extend(fold_expr_ident_spans(expr.target))
        for arg in expr.args:
            spans.extend(fold_expr_ident_spans(arg))
    elif isinstance(expr, (FieldProjection, TupleFieldProjection)):
        spans.append(expr.span)
        spans.extend(fold_expr_ident_spans(expr.target))
    elif isinstance(expr, UnaryExpr):
        spans.extend(fold_expr_ident_spans(expr.expr))
    elif isinstance(expr, BinaryExpr):
        spans.extend(fold_expr_ident_spans(expr.lhs))
        spans.extend(fold_expr_ident_spans(expr.rhs))
    elif isinstance(expr, Reassignment):
        spans.append(expr.target.span)
        spans.extend(fold_expr_ident_spans(expr.expr))

    return spans


def fold_path_idents(path: PathExpr) -> List[Ident]:
    return list(path.segments)


def fold_expr_idents(expr: Expr) -> List[Ident]:
    """The identifier chain of a path, field, index or method-call chain."""
    if isinstance(expr, PathExpr):
        return fold_path_idents(expr)
    if isinstance(expr, (Index, TupleFieldProjection)):
        return fold_expr_idents(expr.target)
    if isinstance(expr, (MethodCall, FieldProjection)):
        return fold_expr_idents(expr.target) + [expr.name]
    return []


def fold_assignable_idents(expr: Expr) -> List[Ident]:
    """Identifiers of an assignment target (``a``, ``a.b[i].c``, ``*p``)."""
    if isinstance(expr, PathExpr):
        return fold_path_idents(expr)
    if isinstance(expr, (Index, TupleFieldProjection)):
        return fold_assignable_idents(expr.target)
    if isinstance(expr, FieldProjection):
        return fold_assignable_idents(expr.target) + [expr.name]
    if isinstance(expr, UnaryExpr) and expr.op is UnaryOp.DEREF:
        return fold_assignable_idents(expr.expr)
    if isinstance(expr, ParensExpr):
        return fold_assignable_idents(expr.inner)
    return []


def fold_pattern_idents(pattern: Pattern) -> List[Ident]:
    """Names bound (or referenced, for constant paths) by *pattern*.

    Constructor and struct type names are not included.
    """
    result: List[Ident] = []

    if isinstance(pattern, PatternOr):
        result.extend(fold_pattern_idents(pattern.lhs))
        result.extend(fold_pattern_idents(pattern.rhs))
    elif isinstance(pattern, PatternVar):
        result.append(pattern.name)
    elif isinstance(pattern, PatternPath):
        result.extend(fold_path_idents(pattern.path))
    elif isinstance(pattern, PatternConstructor):
        for arg in pattern.args:
            result.extend(fold_pattern_idents(arg))
    elif isinstance(pattern, PatternStruct):
        for f in pattern.fields:
            if f.is_rest:
                continue
            if f.pattern is not None:
                result.extend(fold_pattern_idents(f.pattern))
            else:
                result.append(f.name)
    elif isinstance(pattern, PatternTuple):
        for element in pattern.elements:
            result.extend(fold_pattern_idents(element))

    return result


# ─────────────────────────────────────────────────────────────────────────
#  Imports
# ─────────────────────────────────────────────────────────────────────────


def use_tree_to_name(tree: UseTree, target: str) -> Optional[str]:
    """The local name under which *tree* makes *target* available.

    ``target`` is a fully-qualified path such as ``std::auth::msg_sender``.

    >>> # use std::auth::msg_sender;           → "msg_sender"
    >>> # use std::auth::msg_sender as sender; → "sender"
    >>> # use std::auth::*;                    → "msg_sender"
    >>> # use std::auth;                       → "auth::msg_sender"
    """
    return _use_tree_to_name(tree, (), tuple(target.split("::")))


def _imported_name(full: Tuple[str, ...], local: str, target: Tuple[str, ...]) -> Optional[str]:
    if full == target:
        return local
    if len(full) < len(target) and target[:len(full)] == full:
        return "::".join((local,) + target[len(full):])
    return None


def _use_tree_to_name(tree: UseTree, prefix: Tuple[str, ...], target: Tuple[str, ...]) -> Optional[str]:
    if isinstance(tree, UsePath):
        return _use_tree_to_name(tree.suffix, prefix + (tree.prefix.name,), target)

    if isinstance(tree, UseGroup):
        for sub_tree in tree.trees:
            name = _use_tree_to_name(sub_tree, prefix, target)
            if name is not None:
                return name
        return None

    if isinstance(tree, UseName):
        if tree.name.name == "self":
            if not prefix:
                return None
            return _imported_name(prefix, prefix[-1], target)
        return _imported_name(prefix + (tree.name.name,), tree.name.name, target)

    if isinstance(tree, UseRename):
        if tree.name.name == "self":
            return _imported_name(prefix, tree.alias.name, target) if prefix else None
        return _imported_name(prefix + (tree.name.name,), tree.alias.name, target)

    if isinstance(tree, UseGlob):
        if len(prefix) < len(target) and target[:len(prefix)] == prefix:
            return "::".join(target[len(prefix):])
        return None

    return None


# ─────────────────────────────────────────────────────────────────────────
#  Calls, guards and storage access
# ─────────────────────────────────────────────────────────────────────────


def expr_is_call_to(expr: Expr, names: Sequence[str]) -> bool:
    """True if *expr* is ``f(...)`` where the path ``f`` is one of *names*."""
    if not isinstance(expr, FuncApp) or not isinstance(expr.func, PathExpr):
        return False
    return expr.func.as_str() in names


def get_require_args(expr: Expr) -> Optional[Tuple[Expr, ...]]:
    """The arguments of a ``require(...)`` call, else ``None``."""
    if expr_is_call_to(expr, REQUIRE_NAMES):
        return expr.args
    return None


def block_has_revert(block: CodeBlock) -> bool:
    """True if a statement at the top level of *block* calls ``revert``."""
    for statement in block.statements:
        if isinstance(statement, StatementExpr) and expr_is_call_to(statement.expr, REVERT_NAMES):
            return True
    return False


def find_storage_access_in_expr(expr: Expr) -> Optional[Expr]:
    """The first ``storage.<name>.<method>(...)`` call inside *expr*."""
    if isinstance(expr, AsmBlock):
        return None
    if isinstance(expr, MethodCall):
        idents = fold_expr_idents(expr)
        if len(idents) >= 3 and idents[0].name == "storage":
            return expr

    for child in expr.children():
        if isinstance(child, CodeBlock):
            result = _find_storage_access_in_block(child)
        else:
            result = find_storage_access_in_expr(child)
        if result is not None:
            return result
    return None


def _find_storage_access_in_block(block: CodeBlock) -> Optional[Expr]:
    for statement in block.statements:
        if isinstance(statement, (StatementLet, StatementExpr)):
            result = find_storage_access_in_expr(statement.expr)
            if result is not None:
                return result
    return None


# ─────────────────────────────────────────────────────────────────────────
#  Statement shapes
# ─────────────────────────────────────────────────────────────────────────


def statement_to_variable_binding_ident(statement: Statement) -> Optional[Ident]:
    if isinstance(statement, StatementLet) and isinstance(statement.pattern, PatternVar):
        return statement.pattern.name
    return None


def statement_to_storage_read_binding_idents(statement: Statement) -> Optional[Tuple[Ident, Ident]]:
    """``let mut x = storage.<name>.read();`` → ``(name, x)``."""
    if not isinstance(statement, StatementLet):
        return None
    pattern = statement.pattern
    if not isinstance(pattern, PatternVar) or not pattern.mutable:
        return None

    idents = fold_expr_idents(statement.expr)
    if len(idents) < 3 or idents[0].name != "storage" or idents[-1].name != "read":
        return None
    return idents[1], pattern.name


def statement_to_reassignment_idents(statement: Statement) -> Optional[List[Ident]]:
    if isinstance(statement, StatementExpr) and isinstance(statement.expr, Reassignment):
        return fold_assignable_idents(statement.expr.target)
    return None


def _storage_write_idents(
    statement: Statement, methods: Sequence[str]
) -> Optional[Tuple[List[Ident], MethodCall]]:
    if not isinstance(statement, StatementExpr) or not isinstance(statement.expr, MethodCall):
        return None
    idents = fold_expr_idents(statement.expr)
    if len(idents) < 3 or idents[0].name != "storage" or idents[-1].name not in methods:
        return None
    return idents, statement.expr


def statement_to_storage_write_idents(
    statement: Statement, methods: Sequence[str] = STORAGE_WRITE_METHODS
) -> Optional[Tuple[Ident, Ident]]:
    """``storage.<name>.write(x);`` → ``(name, x)`` when ``x`` is a single identifier."""
    found = _storage_write_idents(statement, methods)
    if found is None:
        return None
    idents, call = found
    if not call.args:
        return None

    # TODO: support written values that are paths with multiple segments
    variable_idents = fold_expr_idents(call.args[-1])
    if len(variable_idents) != 1:
        return None
    return idents[1], variable_idents[0]


def storage_write_statement_to_storage_variable_ident(
    statement: Statement, methods: Sequence[str] = STORAGE_WRITE_METHODS
) -> Optional[Ident]:
    """The storage slot written by a ``storage.<name>...write|insert(...)`` statement."""
    found = _storage_write_idents(statement, methods)
    if found is None:
        return None
    return found[0][1]


# ─────────────────────────────────────────────────────────────────────────
#  Items
# ─────────────────────────────────────────────────────────────────────────


def check_attribute_decls(
    attribute_decls: Sequence[AttributeDecl],
    attribute_name: str,
    attribute_arg_names: Sequence[str] = (),
) -> bool:
    """True if some attribute named *attribute_name*, in any of the
    ``#[...]`` declarations, carries every requested arg.

    With no arg names requested the attribute only has to be present.
    """
    for attribute_decl in attribute_decls:
        for attribute in attribute_decl.attributes:
            if _check_attribute(attribute, attribute_name, attribute_arg_names):
                return True
    return False


def _check_attribute(attribute: Attribute, attribute_name: str, attribute_arg_names: Sequence[str]) -> bool:
    if attribute.name.name != attribute_name:
        return False
    if not attribute_arg_names:
        return True
    arg_names = {arg.name for arg in attribute.args}
    return all(name in arg_names for name in attribute_arg_names)


def get_item_location(item_impl: Optional[ItemImpl], item_fn: Optional[ItemFn]) -> str:
    """Human-readable location used at the start of finding messages."""
    if item_fn is None:
        if item_impl is not None:
            return f"The `{item_impl.ty.text}` implementation"
        return "The module"
    if item_impl is not None:
        return f"The `{item_impl.ty.text}::{item_fn.name}` function"
    return f"The `{item_fn.name}` function"

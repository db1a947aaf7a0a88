"""swayparse/parser.py – Build the Sway AST from a parsimonious parse tree.

Usage::

    from swayparse.parser import parse_module

    module = parse_module(source_text, path="src/main.sw")

``SwayASTBuilder`` walks the parse tree bottom-up.  Every ``visit_*``
method receives the already-visited children; anonymous sequence and
repetition nodes are flattened by :meth:`SwayASTBuilder.generic_visit`
so each named rule sees a flat list of the AST values beneath it.
Keyword modifiers (``pub``, ``mut``, ``ref``) travel up as plain strings.
"""

from __future__ import annotations

import logging
import sys
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Any, List, Optional, Tuple

from parsimonious.exceptions import IncompleteParseError, ParseError, VisitationError
from parsimonious.nodes import Node as ParseNode
from parsimonious.nodes import NodeVisitor

from swayparse.ast import (
    AbiCast, ArrayExpr, AsmBlock, AsmRegister, AssignOp, Attribute, AttributeDecl,
    BinaryExpr, BinOp, BlockExpr, BreakExpr, CodeBlock, ContinueExpr, Expr,
    FieldProjection, FnParam, FnSignature, ForExpr, FuncApp, Ident, IfExpr,
    IfLet, Index, Item, ItemAbi, ItemConfigurable, ItemConst, ItemEnum,
    ItemFn, ItemImpl, ItemMod, ItemStorage, ItemStruct, ItemTrait,
    ItemTypeAlias, ItemUse, Literal, LiteralKind, MatchBranch, MatchExpr,
    MethodCall, Module, ParensExpr, PathExpr, Pattern, PatternConstructor,
    PatternLiteral, PatternOr, PatternPath, PatternStruct, PatternStructField,
    PatternTuple, PatternVar, PatternWildcard, Reassignment, ReturnExpr, Span,
    Statement, StatementExpr, StatementLet, StorageField, StorageNamespace, StructExpr,
    StructExprField, TupleExpr, TupleFieldProjection, TypeField, TypeRef,
    UnaryExpr, UnaryOp, UseGlob, UseGroup, UseName, UsePath, UseRename,
    UseTree, WhileExpr,
)
from swayparse.errors import SwayParseError
from swayparse.grammar import SWAY_GRAMMAR

__all__ = ["SwayASTBuilder", "parse_module"]

logger = logging.getLogger(__name__)

# Deeply nested blocks recurse through every precedence level.
_MIN_RECURSION_LIMIT = 10_000


# ─────────────────────────────────────────────────────────────────────────
# Intermediate values that only live inside the builder
# ─────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class _ProgramKind:
    kind: str


@dataclass(frozen=True, slots=True)
class _AsmBody:
    text: str


@dataclass(frozen=True, slots=True)
class _ContractArgs:
    fields: Tuple[StructExprField, ...]


@dataclass(frozen=True, slots=True)
class _MethodSuffix:
    name: Ident
    contract_args: Tuple[StructExprField, ...]
    args: Tuple[Expr, ...]
    end: int


@dataclass(frozen=True, slots=True)
class _FieldSuffix:
    name: Ident
    end: int


@dataclass(frozen=True, slots=True)
class _TupleFieldSuffix:
    index: int
    end: int


@dataclass(frozen=True, slots=True)
class _CallSuffix:
    args: Tuple[Expr, ...]
    end: int


@dataclass(frozen=True, slots=True)
class _IndexSuffix:
    arg: Expr
    end: int


_REST_MARKER = ".."


def _of(items: List[Any], kind) -> List[Any]:
    return [x for x in items if isinstance(x, kind)]


def _first(items: List[Any], kind) -> Any:
    for x in items:
        if isinstance(x, kind):
            return x
    return None


class SwayASTBuilder(NodeVisitor):
    """Turn a ``SWAY_GRAMMAR`` parse tree into :class:`swayparse.ast.Module`."""

    grammar = SWAY_GRAMMAR
    unwrapped_exceptions = (SwayParseError, RecursionError)

    def __init__(self, source: str, path: str = "<unknown>") -> None:
        self.source = source
        self.path = path
        # Start offset of the innermost node that failed to build.
        self.error_offset: Optional[int] = None

    def visit(self, node: ParseNode) -> Any:
        try:
            return super().visit(node)
        except (VisitationError, RecursionError):
            if self.error_offset is None:
                self.error_offset = node.start
            raise

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def _span(self, node: ParseNode) -> Span:
        return Span(self.path, node.start, node.end, node.text)

    def _span_range(self, start: int, end: int) -> Span:
        return Span(self.path, start, end, self.source[start:end])

    def _flatten(self, items) -> List[Any]:
        result: List[Any] = []
        for item in items:
            if isinstance(item, list):
                result.extend(self._flatten(item))
            elif item is not None:
                result.append(item)
        return result

    def _fold_binary(self, node: ParseNode, visited_children) -> Expr:
        flat = self._flatten(visited_children)
        result = flat[0]
        for i in range(1, len(flat) - 1, 2):
            rhs = flat[i + 1]
            result = BinaryExpr(
                flat[i], result, rhs,
                self._span_range(result.span.start, rhs.span.end),
            )
        return result

    def _with_attributes(self, visited_children) -> Any:
        flat = self._flatten(visited_children)
        attributes = tuple(_of(flat, AttributeDecl))
        target = [x for x in flat if not isinstance(x, AttributeDecl)][-1]
        if attributes and isinstance(target, Item):
            return replace(target, attributes=attributes)
        return target

    def generic_visit(self, node, visited_children):
        """Anonymous nodes pass their non-empty results up as a flat list."""
        flat = self._flatten(visited_children)
        return flat or None

    def visit__(self, node, visited_children):
        return None

    # ─────────────────────────────────────────────────────────────
    # Lexical
    # ─────────────────────────────────────────────────────────────

    def visit_ident(self, node, visited_children):
        return Ident(node.text, self._span(node))

    def visit_upper_ident(self, node, visited_children):
        return Ident(node.text, self._span(node))

    def visit_self_kw(self, node, visited_children):
        return Ident(node.text, self._span(node))

    def visit_pub_kw(self, node, visited_children):
        return "pub"

    def visit_mut_kw(self, node, visited_children):
        return "mut"

    def visit_ref_kw(self, node, visited_children):
        return "ref"

    def visit_tuple_index(self, node, visited_children):
        return int(node.text)

    # ─────────────────────────────────────────────────────────────
    # Module and items
    # ─────────────────────────────────────────────────────────────

    def visit_module(self, node, visited_children):
        flat = self._flatten(visited_children)
        kind = _first(flat, _ProgramKind)
        return Module(
            path=self.path,
            kind=kind.kind if kind is not None else None,
            items=tuple(_of(flat, Item)),
            span=self._span(node),
        )

    def visit_program_kind(self, node, visited_children):
        return _ProgramKind(node.children[0].text)

    def visit_item(self, node, visited_children):
        return self._with_attributes(visited_children)

    def visit_impl_member(self, node, visited_children):
        return self._with_attributes(visited_children)

    def visit_abi_member(self, node, visited_children):
        return self._with_attributes(visited_children)

    def visit_trait_member(self, node, visited_children):
        return self._with_attributes(visited_children)

    def visit_attribute_decl(self, node, visited_children):
        attributes = _of(self._flatten(visited_children), Attribute)
        return AttributeDecl(tuple(attributes), self._span(node))

    def visit_attribute(self, node, visited_children):
        idents = _of(self._flatten(visited_children), Ident)
        return Attribute(idents[0], tuple(idents[1:]), self._span(node))

    def visit_use_item(self, node, visited_children):
        flat = self._flatten(visited_children)
        return ItemUse(_first(flat, UseTree), "pub" in flat, self._span(node))

    def visit_use_group(self, node, visited_children):
        trees = _of(self._flatten(visited_children), UseTree)
        return UseGroup(tuple(trees), self._span(node))

    def visit_use_path(self, node, visited_children):
        prefix, suffix = self._flatten(visited_children)
        return UsePath(prefix, suffix, self._span(node))

    def visit_use_glob(self, node, visited_children):
        return UseGlob(self._span(node))

    def visit_use_rename(self, node, visited_children):
        name, alias = _of(self._flatten(visited_children), Ident)
        return UseRename(name, alias, self._span(node))

    def visit_use_name(self, node, visited_children):
        name = _first(self._flatten(visited_children), Ident)
        return UseName(name, self._span(node))

    def visit_fn_signature(self, node, visited_children):
        flat = self._flatten(visited_children)
        return FnSignature(
            name=_first(flat, Ident),
            params=tuple(_of(flat, FnParam)),
            return_type=_first(flat, TypeRef),
            is_public="pub" in flat,
            span=self._span(node),
        )

    def visit_generic_params(self, node, visited_children):
        return None

    def visit_generic_args(self, node, visited_children):
        return None

    def visit_where_clause(self, node, visited_children):
        return None

    def _fn_param(self, node, visited_children) -> FnParam:
        flat = self._flatten(visited_children)
        return FnParam(
            _first(flat, Ident), _first(flat, TypeRef), "mut" in flat,
            self._span(node), reference="ref" in flat,
        )

    visit_self_param = _fn_param
    visit_typed_param = _fn_param

    def visit_fn_item(self, node, visited_children):
        signature, body = self._flatten(visited_children)
        return ItemFn(signature, body, self._span(node))

    def visit_impl_item(self, node, visited_children):
        flat = self._flatten(visited_children)
        types = _of(flat, TypeRef)
        if len(types) > 1:
            trait_name, ty = types[0], types[1]
        else:
            trait_name, ty = None, types[0]
        return ItemImpl(ty, trait_name, tuple(_of(flat, Item)), self._span(node))

    def visit_abi_item(self, node, visited_children):
        flat = self._flatten(visited_children)
        return ItemAbi(
            name=_first(flat, Ident),
            signatures=tuple(_of(flat, FnSignature)),
            defaults=tuple(_of(flat, ItemFn)),
            span=self._span(node),
        )

    def visit_trait_item(self, node, visited_children):
        flat = self._flatten(visited_children)
        return ItemTrait(
            name=_first(flat, Ident),
            signatures=tuple(_of(flat, FnSignature)),
            defaults=tuple(_of(flat, ItemFn)),
            span=self._span(node),
        )

    def visit_storage_item(self, node, visited_children):
        entries = _of(self._flatten(visited_children), (StorageField, StorageNamespace))
        return ItemStorage(tuple(entries), self._span(node))

    def visit_storage_namespace(self, node, visited_children):
        flat = self._flatten(visited_children)
        return StorageNamespace(
            flat[0], tuple(_of(flat, (StorageField, StorageNamespace))), self._span(node)
        )

    def visit_configurable_item(self, node, visited_children):
        fields = _of(self._flatten(visited_children), StorageField)
        return ItemConfigurable(tuple(fields), self._span(node))

    def visit_storage_field(self, node, visited_children):
        name, ty, initializer = self._flatten(visited_children)
        return StorageField(name, ty, initializer, self._span(node))

    def visit_struct_item(self, node, visited_children):
        flat = self._flatten(visited_children)
        return ItemStruct(
            _first(flat, Ident), tuple(_of(flat, TypeField)), self._span(node)
        )

    def visit_enum_item(self, node, visited_children):
        flat = self._flatten(visited_children)
        return ItemEnum(
            _first(flat, Ident), tuple(_of(flat, TypeField)), self._span(node)
        )

    def visit_type_field(self, node, visited_children):
        flat = self._flatten(visited_children)
        return TypeField(_first(flat, Ident), _first(flat, TypeRef), self._span(node))

    def visit_variant_field(self, node, visited_children):
        flat = self._flatten(visited_children)
        return TypeField(_first(flat, Ident), _first(flat, TypeRef), self._span(node))

    def visit_const_item(self, node, visited_children):
        flat = self._flatten(visited_children)
        return ItemConst(
            _first(flat, Ident), _first(flat, TypeRef), _first(flat, Expr),
            self._span(node),
        )

    def visit_type_alias_item(self, node, visited_children):
        flat = self._flatten(visited_children)
        return ItemTypeAlias(_first(flat, Ident), _first(flat, TypeRef), self._span(node))

    def visit_mod_item(self, node, visited_children):
        return ItemMod(_first(self._flatten(visited_children), Ident), self._span(node))

    # ─────────────────────────────────────────────────────────────
    # Types
    # ─────────────────────────────────────────────────────────────

    def visit_type(self, node, visited_children):
        return TypeRef(node.text, self._span(node))

    def visit_path_type(self, node, visited_children):
        return TypeRef(node.text, self._span(node))

    # ─────────────────────────────────────────────────────────────
    # Blocks and statements
    # ─────────────────────────────────────────────────────────────

    def visit_block(self, node, visited_children):
        statements = _of(self._flatten(visited_children), Statement)
        return CodeBlock(tuple(statements), self._span(node))

    def visit_let_stmt(self, node, visited_children):
        flat = self._flatten(visited_children)
        return StatementLet(
            pattern=_first(flat, Pattern),
            ty=_first(flat, TypeRef),
            expr=_of(flat, Expr)[-1],
            span=self._span(node),
        )

    def visit_semi_expr_stmt(self, node, visited_children):
        expr = _first(self._flatten(visited_children), Expr)
        return StatementExpr(expr, True, self._span(node))

    def visit_block_like_stmt(self, node, visited_children):
        expr = _first(self._flatten(visited_children), Expr)
        return StatementExpr(expr, node.text.endswith(";"), self._span(node))

    def visit_tail_expr(self, node, visited_children):
        expr = _first(self._flatten(visited_children), Expr)
        return StatementExpr(expr, False, self._span(node))

    def visit_block_like_expr(self, node, visited_children):
        (value,) = self._flatten(visited_children)
        if isinstance(value, CodeBlock):
            return BlockExpr(value, value.span)
        return value

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    def visit_expr(self, node, visited_children):
        return self._flatten(visited_children)[0]

    def visit_reassignment(self, node, visited_children):
        target, op, expr = self._flatten(visited_children)
        return Reassignment(op, target, expr, self._span(node))

    def visit_assign_op(self, node, visited_children):
        return AssignOp(node.text)

    visit_or_expr = _fold_binary
    visit_and_expr = _fold_binary
    visit_cmp_expr = _fold_binary
    visit_bitor_expr = _fold_binary
    visit_bitxor_expr = _fold_binary
    visit_bitand_expr = _fold_binary
    visit_shift_expr = _fold_binary
    visit_add_expr = _fold_binary
    visit_mul_expr = _fold_binary
    visit_pow_expr = _fold_binary

    def _binary_op(self, node, visited_children):
        return BinOp(node.text)

    visit_or_op = _binary_op
    visit_and_op = _binary_op
    visit_cmp_op = _binary_op
    visit_bitor_op = _binary_op
    visit_bitxor_op = _binary_op
    visit_bitand_op = _binary_op
    visit_shift_op = _binary_op
    visit_add_op = _binary_op
    visit_mul_op = _binary_op
    visit_pow_op = _binary_op

    def visit_unary_expr(self, node, visited_children):
        flat = self._flatten(visited_children)
        if isinstance(flat[0], UnaryOp):
            return UnaryExpr(flat[0], flat[1], self._span(node))
        return flat[0]

    def visit_unary_op(self, node, visited_children):
        if node.text.startswith("&"):
            return UnaryOp.REF
        return UnaryOp(node.text)

    def visit_postfix_expr(self, node, visited_children):
        flat = self._flatten(visited_children)
        expr = flat[0]
        for suffix in flat[1:]:
            span = self._span_range(expr.span.start, suffix.end)
            if isinstance(suffix, _MethodSuffix):
                expr = MethodCall(expr, suffix.name, suffix.contract_args, suffix.args, span)
            elif isinstance(suffix, _FieldSuffix):
                expr = FieldProjection(expr, suffix.name, span)
            elif isinstance(suffix, _TupleFieldSuffix):
                expr = TupleFieldProjection(expr, suffix.index, span)
            elif isinstance(suffix, _CallSuffix):
                expr = FuncApp(expr, suffix.args, span)
            else:
                expr = Index(expr, suffix.arg, span)
        return expr

    def visit_method_suffix(self, node, visited_children):
        flat = self._flatten(visited_children)
        contract = _first(flat, _ContractArgs)
        return _MethodSuffix(
            name=_first(flat, Ident),
            contract_args=contract.fields if contract is not None else (),
            args=tuple(_of(flat, Expr)),
            end=node.end,
        )

    def visit_contract_args(self, node, visited_children):
        return _ContractArgs(tuple(_of(self._flatten(visited_children), StructExprField)))

    def visit_field_suffix(self, node, visited_children):
        return _FieldSuffix(_first(self._flatten(visited_children), Ident), node.end)

    def visit_tuple_field_suffix(self, node, visited_children):
        return _TupleFieldSuffix(_first(self._flatten(visited_children), int), node.end)

    def visit_call_suffix(self, node, visited_children):
        return _CallSuffix(tuple(_of(self._flatten(visited_children), Expr)), node.end)

    def visit_index_suffix(self, node, visited_children):
        return _IndexSuffix(_first(self._flatten(visited_children), Expr), node.end)

    def visit_primary(self, node, visited_children):
        (value,) = self._flatten(visited_children)
        if isinstance(value, CodeBlock):
            return BlockExpr(value, value.span)
        return value

    def visit_bool_lit(self, node, visited_children):
        return Literal(LiteralKind.BOOL, node.text, self._span(node))

    def visit_int_lit(self, node, visited_children):
        return Literal(LiteralKind.INT, node.text, self._span(node))

    def visit_string_lit(self, node, visited_children):
        return Literal(LiteralKind.STRING, node.text, self._span(node))

    def visit_asm_expr(self, node, visited_children):
        flat = self._flatten(visited_children)
        return AsmBlock(
            tuple(_of(flat, AsmRegister)), _first(flat, _AsmBody).text,
            self._span(node),
        )

    def visit_asm_register(self, node, visited_children):
        flat = self._flatten(visited_children)
        return AsmRegister(_first(flat, Ident), _first(flat, Expr), self._span(node))

    def visit_asm_body(self, node, visited_children):
        return _AsmBody(node.text)

    def visit_abi_cast(self, node, visited_children):
        abi_name, address = self._flatten(visited_children)
        return AbiCast(abi_name, address, self._span(node))

    def visit_if_expr(self, node, visited_children):
        flat = self._flatten(visited_children)
        condition, then_block = flat[0], flat[1]
        else_branch = flat[2] if len(flat) > 2 else None
        return IfExpr(condition, then_block, else_branch, self._span(node))

    def visit_if_let(self, node, visited_children):
        pattern, rhs = self._flatten(visited_children)
        return IfLet(pattern, rhs, self._span(node))

    def visit_match_expr(self, node, visited_children):
        flat = self._flatten(visited_children)
        return MatchExpr(flat[0], tuple(_of(flat, MatchBranch)), self._span(node))

    def visit_match_branch(self, node, visited_children):
        pattern, body = self._flatten(visited_children)
        return MatchBranch(pattern, body, self._span(node))

    def visit_while_expr(self, node, visited_children):
        condition, block = self._flatten(visited_children)
        return WhileExpr(condition, block, self._span(node))

    def visit_for_expr(self, node, visited_children):
        pattern, iterator, block = self._flatten(visited_children)
        return ForExpr(pattern, iterator, block, self._span(node))

    def visit_return_expr(self, node, visited_children):
        return ReturnExpr(_first(self._flatten(visited_children), Expr), self._span(node))

    def visit_break_expr(self, node, visited_children):
        return BreakExpr(self._span(node))

    def visit_continue_expr(self, node, visited_children):
        return ContinueExpr(self._span(node))

    def visit_struct_expr(self, node, visited_children):
        flat = self._flatten(visited_children)
        return StructExpr(flat[0], tuple(_of(flat, StructExprField)), self._span(node))

    def visit_struct_path(self, node, visited_children):
        return PathExpr(tuple(_of(self._flatten(visited_children), Ident)), self._span(node))

    def visit_struct_field(self, node, visited_children):
        flat = self._flatten(visited_children)
        return StructExprField(_first(flat, Ident), _first(flat, Expr), self._span(node))

    def visit_unit_expr(self, node, visited_children):
        return TupleExpr((), self._span(node))

    def visit_parens_expr(self, node, visited_children):
        return ParensExpr(_first(self._flatten(visited_children), Expr), self._span(node))

    def visit_tuple_expr(self, node, visited_children):
        return TupleExpr(tuple(_of(self._flatten(visited_children), Expr)), self._span(node))

    def visit_array_repeat(self, node, visited_children):
        value, length = self._flatten(visited_children)
        return ArrayExpr((value,), length, self._span(node))

    def visit_array_list(self, node, visited_children):
        return ArrayExpr(tuple(_of(self._flatten(visited_children), Expr)), None, self._span(node))

    def visit_path_expr(self, node, visited_children):
        return PathExpr(tuple(_of(self._flatten(visited_children), Ident)), self._span(node))

    def visit_path_segment(self, node, visited_children):
        return _first(self._flatten(visited_children), Ident)

    # ─────────────────────────────────────────────────────────────
    # Patterns
    # ─────────────────────────────────────────────────────────────

    def visit_pattern(self, node, visited_children):
        flat = _of(self._flatten(visited_children), Pattern)
        result = flat[0]
        for rhs in flat[1:]:
            result = PatternOr(result, rhs, self._span_range(result.span.start, rhs.span.end))
        return result

    def visit_pattern_wildcard(self, node, visited_children):
        return PatternWildcard(self._span(node))

    def visit_pattern_literal(self, node, visited_children):
        return PatternLiteral(_first(self._flatten(visited_children), Literal), self._span(node))

    def visit_pattern_tuple(self, node, visited_children):
        return PatternTuple(tuple(_of(self._flatten(visited_children), Pattern)), self._span(node))

    def visit_pattern_struct(self, node, visited_children):
        flat = self._flatten(visited_children)
        return PatternStruct(
            flat[0].path, tuple(_of(flat, PatternStructField)), self._span(node)
        )

    def visit_pattern_struct_field(self, node, visited_children):
        flat = self._flatten(visited_children)
        if _REST_MARKER in flat:
            return PatternStructField(None, None, self._span(node))
        return PatternStructField(_first(flat, Ident), _first(flat, Pattern), self._span(node))

    def visit_rest_marker(self, node, visited_children):
        return _REST_MARKER

    def visit_pattern_constructor(self, node, visited_children):
        flat = self._flatten(visited_children)
        return PatternConstructor(flat[0].path, tuple(flat[1:]), self._span(node))

    def visit_pattern_var(self, node, visited_children):
        flat = self._flatten(visited_children)
        return PatternVar(
            name=_first(flat, Ident),
            mutable="mut" in flat,
            reference="ref" in flat,
            span=self._span(node),
        )

    def visit_pattern_path(self, node, visited_children):
        path = PathExpr(tuple(_of(self._flatten(visited_children), Ident)), self._span(node))
        return PatternPath(path, self._span(node))


def _ensure_recursion_limit() -> None:
    if sys.getrecursionlimit() < _MIN_RECURSION_LIMIT:
        sys.setrecursionlimit(_MIN_RECURSION_LIMIT)


class _FurthestFailure(ParseError):
    """A :class:`ParseError` that remembers the furthest offset any
    expression failed at, named or not.

    parsimonious stops recording unnamed failures once a named rule has
    failed, and repetitions are never tried at the end of the text, so its
    own error often points at the start of the enclosing rule.  ``pos``
    and ``expr`` read as "nothing recorded yet" so that every failure is
    handed to the setters below.
    """

    def __init__(self, text: str) -> None:
        self.furthest = 0
        self.rule: Optional[str] = None
        self.failed_expr = None
        self._candidate = None
        super().__init__(text)

    @property
    def expr(self):
        return None

    @expr.setter
    def expr(self, expression) -> None:
        self._candidate = expression

    @property
    def pos(self) -> int:
        return -1

    @pos.setter
    def pos(self, offset: int) -> None:
        if self._candidate is None:
            return
        name = self._candidate.name or None
        if name == "keyword":
            name = None
        if offset > self.furthest or self.failed_expr is None:
            self.furthest = offset
            self.rule = name
            self.failed_expr = self._candidate
        elif offset == self.furthest and name:
            self.rule = name
            self.failed_expr = self._candidate


def _parse_tree(source: str, path: str) -> ParseNode:
    error = _FurthestFailure(source)
    try:
        tree = SWAY_GRAMMAR.default_rule.match_core(source, 0, defaultdict(dict), error)
    except RecursionError as exc:
        raise SwayParseError.at_offset(
            "expression nesting too deep", source, error.furthest, path, cause=exc,
        ) from exc
    if tree is not None and tree.end == len(source):
        return tree

    if tree is None:
        offset = error.furthest
        cause = ParseError(source, offset, error.failed_expr)
    else:
        offset = max(tree.end, error.furthest)
        cause = IncompleteParseError(source, tree.end, SWAY_GRAMMAR.default_rule)
    snippet = source[offset:offset + 20].split("\n", 1)[0]
    message = f"unexpected input {snippet!r}" if snippet else "unexpected end of input"
    if error.rule and offset == error.furthest:
        message += f" (while matching '{error.rule}')"
    raise SwayParseError.at_offset(message, source, offset, path, cause=cause) from cause


def parse_module(source: str, path: str = "<unknown>") -> Module:
    """Parse Sway *source* into a :class:`Module`.

    Raises :class:`SwayParseError` carrying the file *path* and the
    line/column of the furthest point the grammar could reach.  Failures
    while building the AST point at the parse node being visited.
    """
    _ensure_recursion_limit()
    tree = _parse_tree(source, path)

    builder = SwayASTBuilder(source, path)
    try:
        module = builder.visit(tree)
    except RecursionError as exc:
        raise SwayParseError.at_offset(
            "expression nesting too deep", source, builder.error_offset or 0,
            path, cause=exc,
        ) from exc
    except VisitationError as exc:
        raise SwayParseError.at_offset(
            f"could not build syntax tree: {exc.original_class.__name__}",
            source, builder.error_offset or 0, path, cause=exc,
        ) from exc
    logger.debug("parsed %s: %d items", path, len(module.items))
    return module

"""swayparse/ast.py – AST definitions for Sway source modules.

The parser (:mod:`swayparse.parser`) produces a tree of frozen dataclasses
defined here; the analysis package (:mod:`sway_analyzer`) consumes it
read-only.

Design invariants
-----------------
* Every AST node is a frozen dataclass (immutable after construction).
* Nodes that carry children use tuples, never lists.
* Every node records its source ``Span``.  Spans compare and hash on
  ``(path, start, end)`` only, so a span is a stable identity key for a
  node across repeated traversals of the same tree.
* Types are not modelled structurally; a ``TypeRef`` keeps the source text.

Module layout
-------------
§1  Spans and identifiers
§2  Operators
§3  Node bases
§4  Patterns
§5  Expressions
§6  Statements and blocks
§7  Items
§8  Module
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple, Union

__all__ = [
    "Span", "Ident", "TypeRef",
    "BinOp", "UnaryOp", "AssignOp", "LiteralKind",
    "Node", "Pattern", "Expr", "Statement", "Item", "UseTree",
    "PatternWildcard", "PatternVar", "PatternLiteral", "PatternPath",
    "PatternConstructor", "PatternStructField", "PatternStruct",
    "PatternTuple", "PatternOr",
    "PathExpr", "Literal", "FuncApp", "MethodCall", "FieldProjection",
    "TupleFieldProjection", "Index", "StructExprField", "StructExpr",
    "TupleExpr", "ParensExpr", "ArrayExpr", "BlockExpr", "IfLet", "IfExpr",
    "MatchBranch", "MatchExpr", "WhileExpr", "ForExpr", "ReturnExpr",
    "BreakExpr", "ContinueExpr", "AbiCast", "AsmRegister", "AsmBlock",
    "UnaryExpr", "BinaryExpr", "Reassignment",
    "CodeBlock", "StatementLet", "StatementExpr",
    "Attribute", "AttributeDecl", "FnParam", "FnSignature", "ItemFn", "ItemUse",
    "UseName", "UseRename", "UseGlob", "UsePath", "UseGroup",
    "ItemImpl", "ItemAbi", "ItemTrait", "StorageField", "StorageNamespace", "ItemStorage",
    "ItemConfigurable", "TypeField", "ItemStruct", "ItemEnum", "ItemConst",
    "ItemTypeAlias", "ItemMod", "Module",
]


# ════════════════════════════════════════════════════════════════════════
# §1  Spans and identifiers
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Span:
    """A half-open byte range ``[start, end)`` into the file at ``path``.

    ``text`` is the covered source slice.  It is excluded from equality
    and hashing: two spans are equal iff they denote the same range of
    the same file.
    """

    path: str
    start: int
    end: int
    text: str = field(default="", compare=False, repr=False)

    def as_str(self) -> str:
        return self.text

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, other: Span) -> bool:
        return (
            self.path == other.path
            and self.start <= other.start
            and other.end <= self.end
        )


@dataclass(frozen=True, slots=True)
class Ident:
    """A source-level identifier."""

    name: str
    span: Span = field(repr=False)

    def as_str(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class TypeRef:
    """A type annotation, kept as source text."""

    text: str
    span: Span = field(repr=False)

    def __str__(self) -> str:
        return self.text


# ════════════════════════════════════════════════════════════════════════
# §2  Operators
# ════════════════════════════════════════════════════════════════════════


class BinOp(Enum):
    OR = "||"
    AND = "&&"
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    BIT_OR = "|"
    BIT_XOR = "^"
    BIT_AND = "&"
    SHL = "<<"
    SHR = ">>"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    POW = "**"


class UnaryOp(Enum):
    NOT = "!"
    REF = "&"
    DEREF = "*"
    NEG = "-"


class AssignOp(Enum):
    EQ = "="
    ADD_EQ = "+="
    SUB_EQ = "-="
    MUL_EQ = "*="
    DIV_EQ = "/="
    MOD_EQ = "%="
    SHL_EQ = "<<="
    SHR_EQ = ">>="
    AND_EQ = "&="
    OR_EQ = "|="
    XOR_EQ = "^="


class LiteralKind(Enum):
    INT = "int"
    STRING = "string"
    BOOL = "bool"


# ════════════════════════════════════════════════════════════════════════
# §3  Node bases
# ════════════════════════════════════════════════════════════════════════


class Node:
    """Common base of every spanned AST node."""

    __slots__ = ()

    def children(self) -> Tuple[Union["Expr", "CodeBlock"], ...]:
        """Sub-expressions and nested blocks, in source order."""
        return ()


class Pattern(Node):
    __slots__ = ()


class Expr(Node):
    __slots__ = ()


class Statement(Node):
    __slots__ = ()


class Item(Node):
    __slots__ = ()


class UseTree(Node):
    __slots__ = ()


# ════════════════════════════════════════════════════════════════════════
# §4  Patterns
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PatternWildcard(Pattern):
    span: Span


@dataclass(frozen=True, slots=True)
class PatternVar(Pattern):
    """A binding ``name``, ``mut name`` or ``ref mut name``.

    A bare binding (neither ``mut`` nor ``ref``) is also how a lone
    identifier in a match arm is parsed; it may name an enum variant.
    """

    name: Ident
    mutable: bool
    reference: bool
    span: Span

    @property
    def is_bare(self) -> bool:
        return not self.mutable and not self.reference


@dataclass(frozen=True, slots=True)
class PatternLiteral(Pattern):
    literal: "Literal"
    span: Span


@dataclass(frozen=True, slots=True)
class PatternPath(Pattern):
    path: "PathExpr"
    span: Span


@dataclass(frozen=True, slots=True)
class PatternConstructor(Pattern):
    path: "PathExpr"
    args: Tuple[Pattern, ...]
    span: Span


@dataclass(frozen=True, slots=True)
class PatternStructField:
    """``name``, ``name: pattern`` or the rest marker ``..``."""

    name: Optional[Ident]
    pattern: Optional[Pattern]
    span: Span

    @property
    def is_rest(self) -> bool:
        return self.name is None


@dataclass(frozen=True, slots=True)
class PatternStruct(Pattern):
    path: "PathExpr"
    fields: Tuple[PatternStructField, ...]
    span: Span


@dataclass(frozen=True, slots=True)
class PatternTuple(Pattern):
    elements: Tuple[Pattern, ...]
    span: Span


@dataclass(frozen=True, slots=True)
class PatternOr(Pattern):
    lhs: Pattern
    rhs: Pattern
    span: Span


# ════════════════════════════════════════════════════════════════════════
# §5  Expressions
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PathExpr(Expr):
    """``a``, ``a::b::c``; turbofish generics are dropped."""

    segments: Tuple[Ident, ...]
    span: Span

    @property
    def prefix(self) -> Ident:
        return self.segments[0]

    @property
    def suffix(self) -> Tuple[Ident, ...]:
        return self.segments[1:]

    def as_str(self) -> str:
        return "::".join(s.name for s in self.segments)


@dataclass(frozen=True, slots=True)
class Literal(Expr):
    kind: LiteralKind
    text: str
    span: Span


@dataclass(frozen=True, slots=True)
class FuncApp(Expr):
    func: Expr
    args: Tuple[Expr, ...]
    span: Span

    def children(self):
        return (self.func,) + self.args


@dataclass(frozen=True, slots=True)
class StructExprField:
    """A field initialiser; ``expr`` is ``None`` for the shorthand form."""

    name: Ident
    expr: Optional[Expr]
    span: Span


@dataclass(frozen=True, slots=True)
class MethodCall(Expr):
    target: Expr
    name: Ident
    contract_args: Tuple[StructExprField, ...]
    args: Tuple[Expr, ...]
    span: Span

    def children(self):
        contract = tuple(f.expr for f in self.contract_args if f.expr is not None)
        return (self.target,) + contract + self.args


@dataclass(frozen=True, slots=True)
class FieldProjection(Expr):
    target: Expr
    name: Ident
    span: Span

    def children(self):
        return (self.target,)


@dataclass(frozen=True, slots=True)
class TupleFieldProjection(Expr):
    target: Expr
    index: int
    span: Span

    def children(self):
        return (self.target,)


@dataclass(frozen=True, slots=True)
class Index(Expr):
    target: Expr
    arg: Expr
    span: Span

    def children(self):
        return (self.target, self.arg)


@dataclass(frozen=True, slots=True)
class StructExpr(Expr):
    path: PathExpr
    fields: Tuple[StructExprField, ...]
    span: Span

    def children(self):
        return tuple(f.expr for f in self.fields if f.expr is not None)


@dataclass(frozen=True, slots=True)
class TupleExpr(Expr):
    elements: Tuple[Expr, ...]
    span: Span

    def children(self):
        return self.elements


@dataclass(frozen=True, slots=True)
class ParensExpr(Expr):
    inner: Expr
    span: Span

    def children(self):
        return (self.inner,)


@dataclass(frozen=True, slots=True)
class ArrayExpr(Expr):
    """``[a, b, c]`` or, when ``length`` is set, ``[value; length]``."""

    elements: Tuple[Expr, ...]
    length: Optional[Expr]
    span: Span

    def children(self):
        if self.length is not None:
            return self.elements + (self.length,)
        return self.elements


@dataclass(frozen=True, slots=True)
class BlockExpr(Expr):
    block: "CodeBlock"
    span: Span

    def children(self):
        return (self.block,)


@dataclass(frozen=True, slots=True)
class IfLet:
    """The ``let pattern = rhs`` condition of an ``if let``."""

    pattern: Pattern
    rhs: Expr
    span: Span


@dataclass(frozen=True, slots=True)
class IfExpr(Expr):
    condition: Union[Expr, IfLet]
    then_block: "CodeBlock"
    else_branch: Optional[Union["IfExpr", "CodeBlock"]]
    span: Span

    def children(self):
        cond = self.condition.rhs if isinstance(self.condition, IfLet) else self.condition
        result: Tuple = (cond, self.then_block)
        if self.else_branch is not None:
            result += (self.else_branch,)
        return result


@dataclass(frozen=True, slots=True)
class MatchBranch:
    pattern: Pattern
    body: Union[Expr, "CodeBlock"]
    span: Span


@dataclass(frozen=True, slots=True)
class MatchExpr(Expr):
    value: Expr
    branches: Tuple[MatchBranch, ...]
    span: Span

    def children(self):
        return (self.value,) + tuple(b.body for b in self.branches)


@dataclass(frozen=True, slots=True)
class WhileExpr(Expr):
    condition: Expr
    block: "CodeBlock"
    span: Span

    def children(self):
        return (self.condition, self.block)


@dataclass(frozen=True, slots=True)
class ForExpr(Expr):
    pattern: Pattern
    iterator: Expr
    block: "CodeBlock"
    span: Span

    def children(self):
        return (self.iterator, self.block)


@dataclass(frozen=True, slots=True)
class ReturnExpr(Expr):
    expr: Optional[Expr]
    span: Span

    def children(self):
        return (self.expr,) if self.expr is not None else ()


@dataclass(frozen=True, slots=True)
class BreakExpr(Expr):
    span: Span


@dataclass(frozen=True, slots=True)
class ContinueExpr(Expr):
    span: Span


@dataclass(frozen=True, slots=True)
class AbiCast(Expr):
    """``abi(Name, address)``."""

    abi_name: PathExpr
    address: Expr
    span: Span

    def children(self):
        return (self.address,)


@dataclass(frozen=True, slots=True)
class AsmRegister:
    name: Ident
    value: Optional[Expr]
    span: Span


@dataclass(frozen=True, slots=True)
class AsmBlock(Expr):
    """``asm(r1: x, r2) { ... }``; the body is kept as raw text."""

    registers: Tuple[AsmRegister, ...]
    body: str
    span: Span

    def children(self):
        return tuple(r.value for r in self.registers if r.value is not None)

    @property
    def instructions(self) -> Tuple[str, ...]:
        return tuple(
            line.strip() for line in self.body.split(";") if line.strip()
        )


@dataclass(frozen=True, slots=True)
class UnaryExpr(Expr):
    op: UnaryOp
    expr: Expr
    span: Span

    def children(self):
        return (self.expr,)


@dataclass(frozen=True, slots=True)
class BinaryExpr(Expr):
    op: BinOp
    lhs: Expr
    rhs: Expr
    span: Span

    def children(self):
        return (self.lhs, self.rhs)


@dataclass(frozen=True, slots=True)
class Reassignment(Expr):
    op: AssignOp
    target: Expr
    expr: Expr
    span: Span

    def children(self):
        return (self.target, self.expr)


# ════════════════════════════════════════════════════════════════════════
# §6  Statements and blocks
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StatementLet(Statement):
    pattern: Pattern
    ty: Optional[TypeRef]
    expr: Expr
    span: Span


@dataclass(frozen=True, slots=True)
class StatementExpr(Statement):
    """An expression statement.

    ``semicolon`` is ``False`` for block-like expressions written without
    one and for the trailing value expression of a block.
    """

    expr: Expr
    semicolon: bool
    span: Span


@dataclass(frozen=True, slots=True)
class CodeBlock(Node):
    """``{ ... }``; the trailing expression is the last statement."""

    statements: Tuple[Statement, ...]
    span: Span

    @property
    def final_expr(self) -> Optional[Expr]:
        if not self.statements:
            return None
        last = self.statements[-1]
        if isinstance(last, StatementExpr) and not last.semicolon:
            return last.expr
        return None

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.statements)


# ════════════════════════════════════════════════════════════════════════
# §7  Items
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Attribute:
    """One ``name(arg, ...)`` entry of an attribute declaration."""

    name: Ident
    args: Tuple[Ident, ...]
    span: Span


@dataclass(frozen=True, slots=True)
class AttributeDecl:
    """``#[storage(read, write), payable]``: one or more attributes."""

    attributes: Tuple[Attribute, ...]
    span: Span


@dataclass(frozen=True, slots=True)
class FnParam:
    name: Ident
    ty: Optional[TypeRef]
    mutable: bool
    span: Span
    reference: bool = False


@dataclass(frozen=True, slots=True)
class FnSignature:
    name: Ident
    params: Tuple[FnParam, ...]
    return_type: Optional[TypeRef]
    is_public: bool
    span: Span


@dataclass(frozen=True, slots=True)
class ItemFn(Item):
    signature: FnSignature
    body: CodeBlock
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()

    @property
    def name(self) -> str:
        return self.signature.name.name


@dataclass(frozen=True, slots=True)
class UseName(UseTree):
    name: Ident
    span: Span


@dataclass(frozen=True, slots=True)
class UseRename(UseTree):
    name: Ident
    alias: Ident
    span: Span


@dataclass(frozen=True, slots=True)
class UseGlob(UseTree):
    span: Span


@dataclass(frozen=True, slots=True)
class UsePath(UseTree):
    prefix: Ident
    suffix: UseTree
    span: Span


@dataclass(frozen=True, slots=True)
class UseGroup(UseTree):
    trees: Tuple[UseTree, ...]
    span: Span


@dataclass(frozen=True, slots=True)
class ItemUse(Item):
    tree: UseTree
    is_public: bool
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()


@dataclass(frozen=True, slots=True)
class ItemImpl(Item):
    """``impl Ty { ... }`` or ``impl Trait for Ty { ... }``."""

    ty: TypeRef
    trait_name: Optional[TypeRef]
    contents: Tuple[Item, ...]
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()

    @property
    def functions(self) -> Tuple[ItemFn, ...]:
        return tuple(i for i in self.contents if isinstance(i, ItemFn))


@dataclass(frozen=True, slots=True)
class ItemAbi(Item):
    name: Ident
    signatures: Tuple[FnSignature, ...]
    defaults: Tuple[ItemFn, ...]
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()


@dataclass(frozen=True, slots=True)
class ItemTrait(Item):
    name: Ident
    signatures: Tuple[FnSignature, ...]
    defaults: Tuple[ItemFn, ...]
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()


@dataclass(frozen=True, slots=True)
class StorageField:
    name: Ident
    ty: TypeRef
    initializer: Expr
    span: Span


@dataclass(frozen=True, slots=True)
class StorageNamespace:
    """``name { field: T = init, ... }`` nested inside ``storage``."""

    name: Ident
    entries: Tuple[Union[StorageField, "StorageNamespace"], ...]
    span: Span

    @property
    def fields(self) -> Tuple[StorageField, ...]:
        return _flatten_storage(self.entries)


def _flatten_storage(entries) -> Tuple[StorageField, ...]:
    result = []
    for entry in entries:
        if isinstance(entry, StorageNamespace):
            result.extend(entry.fields)
        else:
            result.append(entry)
    return tuple(result)


@dataclass(frozen=True, slots=True)
class ItemStorage(Item):
    entries: Tuple[Union[StorageField, StorageNamespace], ...]
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()

    @property
    def fields(self) -> Tuple[StorageField, ...]:
        """Every field in source order, namespaced ones included."""
        return _flatten_storage(self.entries)


@dataclass(frozen=True, slots=True)
class ItemConfigurable(Item):
    fields: Tuple[StorageField, ...]
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()


@dataclass(frozen=True, slots=True)
class TypeField:
    """A struct field or an enum variant (``ty`` optional for variants)."""

    name: Ident
    ty: Optional[TypeRef]
    span: Span


@dataclass(frozen=True, slots=True)
class ItemStruct(Item):
    name: Ident
    fields: Tuple[TypeField, ...]
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()


@dataclass(frozen=True, slots=True)
class ItemEnum(Item):
    name: Ident
    variants: Tuple[TypeField, ...]
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()


@dataclass(frozen=True, slots=True)
class ItemConst(Item):
    name: Ident
    ty: Optional[TypeRef]
    expr: Optional[Expr]
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()


@dataclass(frozen=True, slots=True)
class ItemTypeAlias(Item):
    name: Ident
    ty: TypeRef
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()


@dataclass(frozen=True, slots=True)
class ItemMod(Item):
    name: Ident
    span: Span
    attributes: Tuple[AttributeDecl, ...] = ()


# ════════════════════════════════════════════════════════════════════════
# §8  Module
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Module:
    """A parsed source file."""

    path: str
    kind: Optional[str]
    items: Tuple[Item, ...]
    span: Span

    @property
    def functions(self) -> Tuple[ItemFn, ...]:
        return tuple(i for i in self.items if isinstance(i, ItemFn))

    @property
    def impls(self) -> Tuple[ItemImpl, ...]:
        return tuple(i for i in self.items if isinstance(i, ItemImpl))

    @property
    def uses(self) -> Tuple[ItemUse, ...]:
        return tuple(i for i in self.items if isinstance(i, ItemUse))

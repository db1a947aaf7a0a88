"""swayparse/dump.py – Human-readable dumps of the Sway AST.

Every dataclass node becomes a branch labelled with its class name; its
fields hang beneath it in declaration order::

    FuncApp
    ├── func: PathExpr
    │   └── segments [1]
    │       └── msg_sender
    └── args: ()

Identifiers render as their name, literal text verbatim, booleans as
``true``/``false``, enum members by lower-case name and missing optional
children as ``nil``.  Spans are omitted unless ``include_spans`` is set,
in which case each node label is suffixed with ``@start..end``.
"""

from __future__ import annotations

import io
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from swayparse.ast import Ident, Module, Span, TypeRef

__all__ = ["to_tree", "dump_ast"]


def _scalar(value: Any) -> Any:
    """Leaf text for *value*, or ``None`` if it has structure."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, str)):
        return str(value)
    if isinstance(value, Enum):
        return value.name.lower()
    if isinstance(value, Ident):
        return value.name
    if isinstance(value, TypeRef):
        return f"type {value.text}"
    if isinstance(value, Span):
        return f"{value.start}..{value.end}"
    return None


def _node_label(node: Any, include_spans: bool) -> str:
    label = type(node).__name__
    span = getattr(node, "span", None)
    if include_spans and isinstance(span, Span):
        label += f" @{span.start}..{span.end}"
    return label


def _add_node_fields(branch: Tree, node: Any, include_spans: bool) -> None:
    for f in fields(node):
        if f.name == "span":
            continue
        value = getattr(node, f.name)
        if f.name == "attributes" and not value:
            continue
        _add_value(branch, f.name, value, include_spans)


def _add_value(tree: Tree, name: str, value: Any, include_spans: bool) -> None:
    text = _scalar(value)
    if text is not None:
        tree.add(Text(f"{name}: {text}"))
    elif isinstance(value, tuple):
        if not value:
            tree.add(Text(f"{name}: ()"))
            return
        branch = tree.add(Text(f"{name} [{len(value)}]"))
        for element in value:
            leaf = _scalar(element)
            if leaf is not None:
                branch.add(Text(leaf))
            else:
                sub = branch.add(Text(_node_label(element, include_spans)))
                _add_node_fields(sub, element, include_spans)
    elif is_dataclass(value):
        branch = tree.add(Text(f"{name}: {_node_label(value, include_spans)}"))
        _add_node_fields(branch, value, include_spans)
    else:
        raise TypeError(f"cannot dump {type(value).__name__}")


def to_tree(node: Any, include_spans: bool = False) -> Tree:
    """Build a :class:`rich.tree.Tree` for *node* (usually a :class:`Module`)."""
    if isinstance(node, Module):
        root = Tree(Text(f"module {node.path} ({node.kind or 'nil'})"))
        for item in node.items:
            branch = root.add(Text(_node_label(item, include_spans)))
            _add_node_fields(branch, item, include_spans)
        return root
    if not is_dataclass(node):
        raise TypeError(f"cannot dump {type(node).__name__}")
    root = Tree(Text(_node_label(node, include_spans)))
    _add_node_fields(root, node, include_spans)
    return root


def dump_ast(node: Any, include_spans: bool = False, width: int = 120) -> str:
    """Render *node* as plain text (no colour codes)."""
    console = Console(file=io.StringIO(), width=width, color_system=None, highlight=False)
    console.print(to_tree(node, include_spans))
    return console.file.getvalue()

# tests/test_utils.py
"""
Tests for the structural extractors in sway_analyzer.utils.

All inputs are real parser output; every extractor must return an empty
result (never raise) for shapes it does not target.
"""

import pytest

from swayparse.ast import MethodCall
from swayparse.parser import parse_module
from sway_analyzer import utils


def _fn(src: str):
    return parse_module("fn f() {\n" + src + "\n}", "test.sw").functions[0]


def _stmt(src: str):
    return _fn(src).body.statements[0]


def _expr(src: str):
    return parse_module("fn f() { " + src + " }", "test.sw").functions[0].body.final_expr


def _use_tree(src: str):
    return parse_module(src).uses[0].tree


def _names(idents):
    return [ident.name for ident in idents]


def _texts(spans):
    return [span.text for span in spans]


class TestFoldPunctuated:

    def test_none(self):
        assert utils.fold_punctuated(None) == []

    def test_tuple(self):
        assert utils.fold_punctuated((1, 2, 3)) == [1, 2, 3]


class TestIdentifierFolds:

    def test_method_chain(self):
        assert _names(utils.fold_expr_idents(_expr("storage.owner.write(x)"))) == [
            "storage", "owner", "write",
        ]

    def test_chain_through_index(self):
        assert _names(utils.fold_expr_idents(_expr("storage.vec.get(0)[1].len()"))) == [
            "storage", "vec", "get", "len",
        ]

    def test_non_chain_is_empty(self):
        assert utils.fold_expr_idents(_expr("1 + 2")) == []
        assert utils.fold_expr_idents(_expr("f(x)")) == []

    def test_path_idents(self):
        assert _names(utils.fold_path_idents(_expr("std::auth::msg_sender"))) == [
            "std", "auth", "msg_sender",
        ]

    def test_ident_spans(self):
        assert _texts(utils.fold_expr_ident_spans(_expr("a + f(b.c)"))) == ["a", "f", "b.c", "b"]

    def test_ident_spans_struct_shorthand(self):
        assert _texts(utils.fold_expr_ident_spans(_expr("Point { x, y: z }"))) == ["x", "z"]

    def test_ident_spans_reassignment(self):
        stmt = _stmt("a.b = c;")
        assert _texts(utils.fold_expr_ident_spans(stmt.expr)) == ["a.b", "c"]

    def test_ident_spans_literal(self):
        assert utils.fold_expr_ident_spans(_expr("42")) == []

    def test_assignable_idents(self):
        stmt = _stmt("a.b[i].c = 1;")
        assert _names(utils.fold_assignable_idents(stmt.expr.target)) == ["a", "b", "c"]

    def test_assignable_deref(self):
        stmt = _stmt("*p = 1;")
        assert _names(utils.fold_assignable_idents(stmt.expr.target)) == ["p"]

    def test_pattern_idents(self):
        stmt = _stmt("let (a, Foo { b, c: d, .. }, Some(e), _) = x;")
        assert _names(utils.fold_pattern_idents(stmt.pattern)) == ["a", "b", "d", "e"]

    def test_or_pattern_idents(self):
        pattern = _expr("match v { a | b => 0 }").branches[0].pattern
        assert _names(utils.fold_pattern_idents(pattern)) == ["a", "b"]


class TestUseTreeToName:

    TARGET = "std::auth::msg_sender"

    @pytest.mark.parametrize("src, expected", [
        ("use std::auth::msg_sender;", "msg_sender"),
        ("use ::std::auth::msg_sender;", "msg_sender"),
        ("use std::auth::msg_sender as sender;", "sender"),
        ("use std::auth::*;", "msg_sender"),
        ("use std::*;", "auth::msg_sender"),
        ("use std::auth;", "auth::msg_sender"),
        ("use std::auth::{self, msg_sender as who};", "auth::msg_sender"),
        ("use std::{hash::sha256, auth::msg_sender as who};", "who"),
        ("use std::hash::sha256;", None),
        ("use other::auth::msg_sender;", None),
    ])
    def test_local_name(self, src, expected):
        assert utils.use_tree_to_name(_use_tree(src), self.TARGET) == expected


class TestCallsAndGuards:

    def test_expr_is_call_to(self):
        assert utils.expr_is_call_to(_expr("require(x, 1)"), utils.REQUIRE_NAMES)
        assert utils.expr_is_call_to(_expr("std::revert::require(x, 1)"), utils.REQUIRE_NAMES)
        assert not utils.expr_is_call_to(_expr("checker.require(x)"), utils.REQUIRE_NAMES)
        assert not utils.expr_is_call_to(_expr("assert(x)"), utils.REQUIRE_NAMES)

    def test_get_require_args(self):
        args = utils.get_require_args(_expr('require(a == b, "nope")'))
        assert len(args) == 2
        assert utils.get_require_args(_expr("log(a)")) is None

    def test_block_has_revert(self):
        assert utils.block_has_revert(_fn("revert(0);").body)
        assert utils.block_has_revert(_fn("log(1);\nrevert(0)").body)
        assert not utils.block_has_revert(_fn("if x { revert(0); }").body)
        assert not utils.block_has_revert(_fn("").body)

    def test_find_storage_access(self):
        found = utils.find_storage_access_in_expr(_expr("a + storage.count.read()"))
        assert isinstance(found, MethodCall)
        assert found.span.text == "storage.count.read()"

    def test_find_storage_access_in_nested_block(self):
        found = utils.find_storage_access_in_expr(_expr("if c { storage.x.write(1); }"))
        assert found.span.text == "storage.x.write(1)"

    def test_find_storage_access_none(self):
        assert utils.find_storage_access_in_expr(_expr("x + 1")) is None
        assert utils.find_storage_access_in_expr(_expr("asm(r1) { r1: u64 }")) is None


class TestStatementShapes:

    def test_variable_binding(self):
        assert utils.statement_to_variable_binding_ident(_stmt("let x = 1;")).name == "x"
        assert utils.statement_to_variable_binding_ident(_stmt("let (a, b) = t;")) is None
        assert utils.statement_to_variable_binding_ident(_stmt("f();")) is None

    def test_storage_read_binding(self):
        slot, var = utils.statement_to_storage_read_binding_idents(
            _stmt("let mut v = storage.vec.read();")
        )
        assert (slot.name, var.name) == ("vec", "v")

    def test_storage_read_binding_requires_mut(self):
        assert utils.statement_to_storage_read_binding_idents(
            _stmt("let v = storage.vec.read();")
        ) is None
        assert utils.statement_to_storage_read_binding_idents(
            _stmt("let mut v = other.vec.read();")
        ) is None

    def test_reassignment_idents(self):
        assert _names(utils.statement_to_reassignment_idents(_stmt("a.b = 1;"))) == ["a", "b"]
        assert utils.statement_to_reassignment_idents(_stmt("f(x);")) is None

    def test_storage_write_idents(self):
        slot, var = utils.statement_to_storage_write_idents(_stmt("storage.owner.write(owner);"))
        assert (slot.name, var.name) == ("owner", "owner")

    def test_storage_insert_idents(self):
        slot, var = utils.statement_to_storage_write_idents(_stmt("storage.map.insert(k, v);"))
        assert (slot.name, var.name) == ("map", "v")

    def test_storage_write_idents_unmatched(self):
        assert utils.statement_to_storage_write_idents(_stmt("storage.owner.write(Some(x));")) is None
        assert utils.statement_to_storage_write_idents(_stmt("storage.owner.write();")) is None

    def test_storage_write_slot(self):
        f = utils.storage_write_statement_to_storage_variable_ident
        assert f(_stmt("storage.owner.write(Some(x));")).name == "owner"
        assert f(_stmt("storage.balances.get(who).write(1);")).name == "balances"
        assert f(_stmt("storage.count.read();")) is None
        assert f(_stmt("let y = storage.x.write(1);")) is None
        assert f(_stmt("other.x.write(1);")) is None

    def test_storage_write_tail_statement(self):
        stmt = _stmt("storage.x.write(1)")
        assert not stmt.semicolon
        assert utils.storage_write_statement_to_storage_variable_ident(stmt).name == "x"

    def test_storage_write_custom_methods(self):
        f = utils.storage_write_statement_to_storage_variable_ident
        assert f(_stmt("storage.x.store(1);"), ("store",)).name == "x"
        assert f(_stmt("storage.x.write(1);"), ("store",)) is None


class TestItems:

    def test_check_attribute_decls(self):
        attrs = parse_module("#[storage(read, write)]\n#[payable]\nfn f() {}").functions[0].attributes
        assert utils.check_attribute_decls(attrs, "storage", ["write"])
        assert utils.check_attribute_decls(attrs, "storage", ["read", "write"])
        assert not utils.check_attribute_decls(attrs, "storage", ["write", "payable"])
        assert utils.check_attribute_decls(attrs, "payable")
        assert not utils.check_attribute_decls(attrs, "test")

    def test_check_attribute_decls_folds_each_decl(self):
        decls = parse_module("#[storage(read), payable]\nfn f() {}").functions[0].attributes
        assert len(decls) == 1
        assert utils.check_attribute_decls(decls, "storage", ["read"])
        assert utils.check_attribute_decls(decls, "payable")
        assert not utils.check_attribute_decls(decls, "storage", ["write"])
        assert not utils.check_attribute_decls(decls, "payable", ["read"])

    def test_check_attribute_decls_without_decls(self):
        assert not utils.check_attribute_decls((), "storage")

    def test_item_location(self):
        module = parse_module(
            "fn bump() {}\nimpl Counter for Contract { fn increment() {} }"
        )
        impl = module.impls[0]
        assert utils.get_item_location(impl, impl.functions[0]) == "The `Contract::increment` function"
        assert utils.get_item_location(None, module.functions[0]) == "The `bump` function"
        assert utils.get_item_location(impl, None) == "The `Contract` implementation"
        assert utils.get_item_location(None, None) == "The module"

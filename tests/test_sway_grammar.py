# tests/test_sway_grammar.py
"""
Tests that the Sway PEG grammar is well-formed and accepts the core
constructs at the grammar level (before the AST builder runs).
"""

import pytest
from parsimonious.exceptions import IncompleteParseError, ParseError

from swayparse.grammar import SWAY_GRAMMAR
from tests.conftest import KITCHEN_SINK_SW, PROTECTED_OWNER_SW


@pytest.fixture(scope="module")
def grammar():
    return SWAY_GRAMMAR


class TestGrammarWellFormed:

    def test_default_rule_is_module(self, grammar):
        assert grammar.default_rule.name == "module"

    def test_key_rules_exist(self, grammar):
        for rule in ("module", "item", "fn_item", "impl_item", "abi_item",
                     "storage_item", "block", "let_stmt", "expr", "pattern",
                     "asm_expr", "use_tree", "type", "_"):
            assert rule in grammar, f"Rule {rule!r} missing"


class TestGrammarLexical:

    def test_identifiers(self, grammar):
        for name in ("x", "msg_sender", "_priv", "Identity", "letter", "storage", "self"):
            assert grammar["ident"].parse(name).text == name

    def test_identifier_rejects_keywords(self, grammar):
        for kw in ("let", "fn", "impl", "abi", "asm", "if", "match", "return", "true"):
            with pytest.raises((ParseError, IncompleteParseError)):
                grammar["ident"].parse(kw)

    def test_integer_literals(self, grammar):
        for lit in ("0", "42", "1_000", "0xFF", "0b1010", "100u64"):
            assert grammar["int_lit"].parse(lit).text == lit

    def test_string_literal_with_escape(self, grammar):
        grammar["string_lit"].parse(r'"not \"owner\""')

    def test_comments_are_whitespace(self, grammar):
        grammar.parse("// line comment\n/* block\ncomment */\ncontract;\n")

    def test_block_comments_nest(self, grammar):
        grammar.parse("/* a /* b */ c */\ncontract;\n")
        with pytest.raises(ParseError):
            grammar.parse("/* a /* b */\ncontract;\n")


class TestGrammarItems:

    def test_empty_module(self, grammar):
        grammar.parse("")

    def test_program_kinds(self, grammar):
        for header in ("contract;", "library;", "script;", "predicate;", "library foo;"):
            grammar.parse(header)

    def test_use_items(self, grammar):
        for src in ("use std::auth::msg_sender;",
                    "use std::auth::msg_sender as sender;",
                    "use std::auth::*;",
                    "use ::std::{auth::msg_sender, hash::*};",
                    "pub use lib::Thing;"):
            grammar["use_item"].parse(src)

    def test_fn_with_generics_and_where(self, grammar):
        grammar["fn_item"].parse(
            "pub fn id<T>(value: T) -> T where T: Eq + Ord { value }"
        )

    def test_self_params(self, grammar):
        grammar["fn_item"].parse("fn get(self, other: Self) -> bool { true }")
        grammar["fn_item"].parse("fn set(ref mut self, v: u64) { }")

    def test_ref_mut_params(self, grammar):
        grammar["fn_item"].parse("fn f(ref mut x: u64, mut y: u64) { }")

    def test_several_attributes_per_decl(self, grammar):
        grammar["item"].parse("#[storage(read, write), payable]\nfn f() {}")
        grammar["item"].parse("#[storage(read)]\n#[payable]\nfn f() {}")

    def test_storage_namespaces(self, grammar):
        grammar["storage_item"].parse("storage { ns { a: u64 = 0, } }")
        grammar["storage_item"].parse("storage {\n    a: u64 = 0,\n    ns { inner { b: bool = true } },\n}")

    def test_abi_with_attributes(self, grammar):
        grammar["abi_item"].parse(
            "abi Owned {\n"
            "    #[storage(read, write)]\n"
            "    fn set_owner(owner: Identity);\n"
            "}"
        )

    def test_types(self, grammar):
        for ty in ("u64", "Option<Identity>", "StorageMap<Identity, StorageVec<u64>>",
                   "(u64, bool)", "()", "[u8; 32]", "str[5]", "str", "&mut Vec<u8>"):
            grammar["type"].parse(ty)

    def test_full_programs(self, grammar):
        grammar.parse(PROTECTED_OWNER_SW)
        grammar.parse(KITCHEN_SINK_SW)


class TestGrammarExpressions:

    def test_binary_operators(self, grammar):
        for src in ("a + b * c", "a == b && c != d || e", "a << 2 | b & 1 ^ c",
                    "a <= b", "a >= b", "a < b", "a > b", "2 ** 8 % 3 - 1 / x"):
            grammar["expr"].parse(src)

    def test_reassignment_operators(self, grammar):
        for op in ("=", "+=", "-=", "*=", "/=", "%=", "<<=", ">>=", "&=", "|=", "^="):
            grammar["expr"].parse(f"x {op} 1")

    def test_comparison_is_not_reassignment(self, grammar):
        tree = grammar["expr"].parse("a == b")
        assert tree.children[0].expr_name == "or_expr"

    def test_method_chains(self, grammar):
        grammar["expr"].parse("storage.owner.read().unwrap()")
        grammar["expr"].parse("storage.balances.get(who).write(x)")
        grammar["expr"].parse("t.0.1")

    def test_contract_call_arguments(self, grammar):
        grammar["expr"].parse("abi(Token, id).transfer { gas: 1000, coins: amount }(to)")

    def test_turbofish_path(self, grammar):
        grammar["expr"].parse("Vec::<u64>::new()")

    def test_turbofish_struct_literal(self, grammar):
        grammar["expr"].parse("StorageMap::<Identity, u64> {}")
        grammar["expr"].parse("std::hash::Hasher::<u64> { state: 0 }")

    def test_struct_literal_requires_capital(self, grammar):
        grammar["expr"].parse("Point { x: 1, y }")
        with pytest.raises((ParseError, IncompleteParseError)):
            grammar["expr"].parse("point { x: 1 }")

    def test_asm_block(self, grammar):
        tree = grammar["asm_expr"].parse("asm(r1: x, r2) { add r2 r1 one; r2: u64 }")
        assert "add r2 r1 one" in tree.text

    def test_if_let_else(self, grammar):
        grammar["if_expr"].parse("if let Some(x) = y { x } else if z { 1 } else { 2 }")

    def test_match_with_patterns(self, grammar):
        grammar["match_expr"].parse(
            "match v { Foo::A(x) | Foo::B(x) => x, Bar { a, .. } => a, (1, _) => 0, _ => { 3 } }"
        )

    def test_bad_expression_rejected(self, grammar):
        with pytest.raises((ParseError, IncompleteParseError)):
            grammar["expr"].parse("a + )")


class TestGrammarStatements:

    def test_let_statement(self, grammar):
        grammar["let_stmt"].parse("let mut x: u64 = 42;")

    def test_destructuring_let(self, grammar):
        grammar["let_stmt"].parse("let (a, b) = pair();")

    def test_block_with_tail_expression(self, grammar):
        grammar["block"].parse("{ let x = 1; x + 1 }")

    def test_block_like_statements_need_no_semicolon(self, grammar):
        grammar["block"].parse("{ if a { revert(0); } storage.x.write(1); }")

    def test_missing_semicolon_rejected(self, grammar):
        with pytest.raises((ParseError, IncompleteParseError)):
            grammar["block"].parse("{ let x = 1 x }")

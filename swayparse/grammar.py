"""swayparse/grammar.py – Parsimonious PEG grammar for Sway source files.

The grammar covers the subset of Sway that the analyzers inspect:
program headers, ``use`` trees, functions, ``impl`` / ``abi`` / ``trait``
blocks, ``storage`` and ``configurable`` declarations, structs, enums,
constants, attributes, statements, the full expression precedence ladder,
patterns and inline ``asm`` blocks.  Types are recognised but only kept
as text by the AST builder.

Conventions
-----------
* ``_`` is optional whitespace and comments.  Named rules never end with
  ``_`` so that node spans stop at the last significant character.
* Block comments nest: ``/* a /* b */ c */`` is a single comment.
* Keywords are matched with ``\\b`` so ``letter`` is an identifier while
  ``let`` is not.
* Struct literals require a capitalised type name (``Foo { .. }``); this
  keeps ``if x { .. }`` and ``match y { .. }`` unambiguous.
* No rule is a bare alias of another rule: parsimonious collapses such
  rules into their target and the builder would never see the name.
"""

from __future__ import annotations

from parsimonious.grammar import Grammar

__all__ = ["SWAY_GRAMMAR_TEXT", "SWAY_GRAMMAR"]


SWAY_GRAMMAR_TEXT = r'''
    # ─────────────────────────────────────────────────────────────
    # Module
    # ─────────────────────────────────────────────────────────────

    module              = _ program_kind? _ (item _)* eof
    program_kind        = program_kw (_ ident)? _ ";"
    program_kw          = ~r"(contract|library|script|predicate)\b"
    eof                 = !~r"[\s\S]"

    # ─────────────────────────────────────────────────────────────
    # Items
    # ─────────────────────────────────────────────────────────────

    item                = (attribute_decl _)* item_kind
    item_kind           = use_item / fn_item / impl_item / abi_item / trait_item
                        / storage_item / configurable_item / struct_item
                        / enum_item / const_item / type_alias_item / mod_item

    attribute_decl      = "#" _ "[" _ attribute (_ "," _ attribute)* (_ ",")? _ "]"
    attribute           = ident (_ "(" _ attr_args? _ ")")?
    attr_args           = attr_arg (_ "," _ attr_arg)* (_ ",")?
    attr_arg            = (ident (_ "=" _ literal)?) / literal

    use_item            = (pub_kw _)? use_kw _ ("::" _)? use_tree _ ";"
    use_tree            = use_group / use_path / use_glob / use_rename / use_name
    use_group           = "{" _ (use_tree (_ "," _ use_tree)* (_ ",")?)? _ "}"
    use_path            = ident _ "::" _ use_tree
    use_glob            = "*"
    use_rename          = ident _ as_kw _ ident
    use_name            = ident !(_ "::")

    fn_item             = fn_signature _ block
    fn_signature        = (pub_kw _)? fn_kw _ ident _ generic_params? _ "(" _ fn_params? _ ")" (_ "->" _ type)? (_ where_clause)?
    generic_params      = "<" _ generic_param (_ "," _ generic_param)* (_ ",")? _ ">"
    generic_param       = ident (_ ":" _ trait_bounds)?
    trait_bounds        = type (_ "+" _ type)*
    where_clause        = where_kw _ where_pred (_ "," _ where_pred)* (_ ",")?
    where_pred          = type _ ":" _ trait_bounds
    fn_params           = fn_param (_ "," _ fn_param)* (_ ",")?
    fn_param            = self_param / typed_param
    self_param          = (ref_kw _)? (mut_kw _)? self_kw (_ ":" _ type)?
    typed_param         = (ref_kw _)? (mut_kw _)? ident _ ":" _ type

    impl_item           = impl_kw _ generic_params? _ path_type (_ for_kw _ type)? _ (where_clause _)? "{" _ (impl_member _)* "}"
    impl_member         = (attribute_decl _)* (fn_item / const_item / type_alias_item)

    abi_item            = abi_kw _ ident (_ ":" _ trait_bounds)? _ "{" _ (abi_member _)* "}" (_ "{" _ (impl_member _)* "}")?
    abi_member          = (attribute_decl _)* ((fn_signature _ ";") / const_item)

    trait_item          = (pub_kw _)? trait_kw _ ident _ generic_params? (_ ":" _ trait_bounds)? _ (where_clause _)? "{" _ (trait_member _)* "}" (_ "{" _ (impl_member _)* "}")?
    trait_member        = (attribute_decl _)* (fn_item / (fn_signature _ ";") / const_item / type_alias_item)

    storage_item        = storage_kw _ "{" _ storage_entries? _ "}"
    storage_entries     = storage_entry (_ "," _ storage_entry)* (_ ",")?
    storage_entry       = storage_namespace / storage_field
    storage_namespace   = ident _ "{" _ storage_entries? _ "}"
    configurable_item   = configurable_kw _ "{" _ storage_fields? _ "}"
    storage_fields      = storage_field (_ "," _ storage_field)* (_ ",")?
    storage_field       = ident _ ":" _ type _ "=" _ expr

    struct_item         = (pub_kw _)? struct_kw _ ident _ generic_params? _ (where_clause _)? "{" _ type_fields? _ "}"
    type_fields         = type_field (_ "," _ type_field)* (_ ",")?
    type_field          = (pub_kw _)? ident _ ":" _ type
    enum_item           = (pub_kw _)? enum_kw _ ident _ generic_params? _ (where_clause _)? "{" _ variant_fields? _ "}"
    variant_fields      = variant_field (_ "," _ variant_field)* (_ ",")?
    variant_field       = ident (_ ":" _ type)?

    const_item          = (pub_kw _)? const_kw _ ident (_ ":" _ type)? (_ "=" _ expr)? _ ";"
    type_alias_item     = (pub_kw _)? type_kw _ ident _ "=" _ type _ ";"
    mod_item            = (pub_kw _)? mod_kw _ ident _ ";"

    # ─────────────────────────────────────────────────────────────
    # Types (kept as text)
    # ─────────────────────────────────────────────────────────────

    type                = ref_type / tuple_type / array_type / str_type / never_type / path_type
    ref_type            = "&" _ (mut_kw _)? type
    tuple_type          = "(" _ (type (_ "," _ type)* (_ ",")?)? _ ")"
    array_type          = "[" _ type _ ";" _ expr _ "]"
    str_type            = str_kw (_ "[" _ expr _ "]")?
    never_type          = "!"
    path_type           = ident (_ "::" _ ident)* (_ generic_args)?
    generic_args        = "<" _ type (_ "," _ type)* (_ ",")? _ ">"

    # ─────────────────────────────────────────────────────────────
    # Blocks and statements
    # ─────────────────────────────────────────────────────────────

    block               = "{" _ (block_item _)* "}"
    block_item          = let_stmt / semi_expr_stmt / block_like_stmt / tail_expr
    let_stmt            = let_kw _ pattern (_ ":" _ type)? _ "=" _ expr _ ";"
    semi_expr_stmt      = expr _ ";"
    block_like_stmt     = block_like_expr (_ ";")?
    tail_expr           = expr !(_ ";")
    block_like_expr     = if_expr / match_expr / while_expr / for_expr / asm_expr / block

    # ─────────────────────────────────────────────────────────────
    # Expressions, lowest precedence first
    # ─────────────────────────────────────────────────────────────

    expr                = reassignment / or_expr
    reassignment        = unary_expr _ assign_op _ expr
    assign_op           = ~r"(\+|-|\*|/|%|<<|>>|&|\||\^)?=(?!=)"

    or_expr             = and_expr (_ or_op _ and_expr)*
    and_expr            = cmp_expr (_ and_op _ cmp_expr)*
    cmp_expr            = bitor_expr (_ cmp_op _ bitor_expr)*
    bitor_expr          = bitxor_expr (_ bitor_op _ bitxor_expr)*
    bitxor_expr         = bitand_expr (_ bitxor_op _ bitand_expr)*
    bitand_expr         = shift_expr (_ bitand_op _ shift_expr)*
    shift_expr          = add_expr (_ shift_op _ add_expr)*
    add_expr            = mul_expr (_ add_op _ mul_expr)*
    mul_expr            = pow_expr (_ mul_op _ pow_expr)*
    pow_expr            = unary_expr (_ pow_op _ unary_expr)*

    or_op               = "||"
    and_op              = "&&"
    cmp_op              = "==" / "!=" / "<=" / ">=" / ~r"<(?![<=])" / ~r">(?![>=])"
    bitor_op            = ~r"\|(?![|=])"
    bitxor_op           = ~r"\^(?!=)"
    bitand_op           = ~r"&(?![&=])"
    shift_op            = ~r"(<<|>>)(?!=)"
    add_op              = ~r"[+\-](?![=>])"
    mul_op              = ~r"\*(?![*=])|/(?![/*=])|%(?!=)"
    pow_op              = ~r"\*\*(?!=)"

    unary_expr          = (unary_op _ unary_expr) / postfix_expr
    unary_op            = ~r"&\s*mut\b" / "!" / "&" / "*" / "-"

    postfix_expr        = primary postfix_op*
    postfix_op          = method_suffix / tuple_field_suffix / field_suffix / call_suffix / index_suffix
    method_suffix       = _ "." _ ident _ contract_args? _ "(" _ expr_list? _ ")"
    contract_args       = "{" _ struct_fields? _ "}"
    tuple_field_suffix  = _ "." _ tuple_index
    tuple_index         = ~r"[0-9]+"
    field_suffix        = _ "." _ ident
    call_suffix         = _ "(" _ expr_list? _ ")"
    index_suffix        = _ "[" _ expr _ "]"

    primary             = literal / asm_expr / abi_cast / if_expr / match_expr
                        / while_expr / for_expr / return_expr / break_expr
                        / continue_expr / block / struct_expr / unit_expr
                        / parens_expr / tuple_expr / array_expr / path_expr

    literal             = bool_lit / int_lit / string_lit
    bool_lit            = ~r"(true|false)\b"
    int_lit             = ~r"(0x[0-9a-fA-F_]+|0b[01_]+|[0-9][0-9_]*)(u8|u16|u32|u64|u256|b256)?\b"
    string_lit          = ~r'"(?:[^"\\]|\\.)*"'

    asm_expr            = asm_kw _ "(" _ asm_registers? _ ")" _ "{" asm_body "}"
    asm_registers       = asm_register (_ "," _ asm_register)* (_ ",")?
    asm_register        = ident (_ ":" _ expr)?
    asm_body            = ~r"[^{}]*"

    abi_cast            = abi_kw _ "(" _ path_expr _ "," _ expr (_ ",")? _ ")"

    if_expr             = if_kw _ if_condition _ block (_ else_kw _ else_branch)?
    if_condition        = if_let / expr
    if_let              = let_kw _ pattern _ "=" _ expr
    else_branch         = if_expr / block

    match_expr          = match_kw _ expr _ "{" _ (match_branch _ ("," _)?)* "}"
    match_branch        = pattern _ "=>" _ (block / expr)

    while_expr          = while_kw _ expr _ block
    for_expr            = for_kw _ pattern _ in_kw _ expr _ block
    return_expr         = return_kw (_ expr)?
    break_expr          = ~r"break\b"
    continue_expr       = ~r"continue\b"

    struct_expr         = struct_path _ "{" _ struct_fields? _ "}"
    struct_path         = (ident _ "::" _ (generic_args _ "::" _)? &ident)* upper_ident (_ "::" _ generic_args)?
    struct_fields       = struct_field (_ "," _ struct_field)* (_ ",")?
    struct_field        = ident (_ ":" _ expr)?

    unit_expr           = "(" _ ")"
    parens_expr         = "(" _ expr _ ")"
    tuple_expr          = "(" _ expr _ "," _ expr_list? _ ")"
    array_expr          = array_repeat / array_list
    array_repeat        = "[" _ expr _ ";" _ expr _ "]"
    array_list          = "[" _ expr_list? _ "]"
    expr_list           = expr (_ "," _ expr)* (_ ",")?

    path_expr           = ("::" _)? path_segment (_ "::" _ path_segment)*
    path_segment        = ident (_ "::" _ generic_args)?

    # ─────────────────────────────────────────────────────────────
    # Patterns
    # ─────────────────────────────────────────────────────────────

    pattern             = pattern_atom (_ "|" _ pattern_atom)*
    pattern_atom        = pattern_wildcard / pattern_literal / pattern_tuple
                        / pattern_struct / pattern_constructor / pattern_var
                        / pattern_path
    pattern_wildcard    = ~r"_(?![A-Za-z0-9_])"
    pattern_literal     = bool_lit / int_lit / string_lit
    pattern_tuple       = "(" _ (pattern (_ "," _ pattern)* (_ ",")?)? _ ")"
    pattern_struct      = pattern_path _ "{" _ (pattern_struct_field (_ "," _ pattern_struct_field)* (_ ",")?)? _ "}"
    pattern_struct_field = rest_marker / (ident (_ ":" _ pattern)?)
    rest_marker         = ".."
    pattern_constructor = pattern_path _ "(" _ (pattern (_ "," _ pattern)* (_ ",")?)? _ ")"
    pattern_var         = (ref_kw _)? (mut_kw _)? ident !(_ "::")
    pattern_path        = ident (_ "::" _ ident)*

    # ─────────────────────────────────────────────────────────────
    # Lexical
    # ─────────────────────────────────────────────────────────────

    ident               = !keyword ~r"[A-Za-z_][A-Za-z0-9_]*"
    upper_ident         = !keyword ~r"[A-Z][A-Za-z0-9_]*"
    keyword             = ~r"(abi|as|asm|break|configurable|const|continue|contract|else|enum|false|fn|for|if|impl|in|let|library|match|mod|mut|predicate|pub|ref|return|script|struct|trait|true|type|use|where|while)\b"

    abi_kw              = ~r"abi\b"
    as_kw               = ~r"as\b"
    asm_kw              = ~r"asm\b"
    configurable_kw     = ~r"configurable\b"
    const_kw            = ~r"const\b"
    else_kw             = ~r"else\b"
    enum_kw             = ~r"enum\b"
    fn_kw               = ~r"fn\b"
    for_kw              = ~r"for\b"
    if_kw               = ~r"if\b"
    impl_kw             = ~r"impl\b"
    in_kw               = ~r"in\b"
    let_kw              = ~r"let\b"
    match_kw            = ~r"match\b"
    mod_kw              = ~r"mod\b"
    mut_kw              = ~r"mut\b"
    pub_kw              = ~r"pub\b"
    ref_kw              = ~r"ref\b"
    return_kw           = ~r"return\b"
    self_kw             = ~r"self\b"
    storage_kw          = ~r"storage\b"
    str_kw              = ~r"str\b"
    struct_kw           = ~r"struct\b"
    trait_kw            = ~r"trait\b"
    type_kw             = ~r"type\b"
    use_kw              = ~r"use\b"
    where_kw            = ~r"where\b"
    while_kw            = ~r"while\b"

    _                   = (~r"\s+" / ~r"//[^\n]*" / block_comment)*
    block_comment       = "/*" (block_comment / ~r"(?:(?!/\*|\*/)[\s\S])+")* "*/"
'''

SWAY_GRAMMAR = Grammar(SWAY_GRAMMAR_TEXT)

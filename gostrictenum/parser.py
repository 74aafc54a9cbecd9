"""gostrictenum/parser.py – Go source → syntax tree.

Parses Go source text with a Parsimonious PEG grammar and converts the
resulting parse tree into the dataclass nodes of
:mod:`gostrictenum.go_ast`.

Design principles
-----------------
* **One grammar, one pass** – ``GO_GRAMMAR`` covers the Go subset the
  analysers need: package clause, imports, ``type``/``const``/``var``
  declarations, functions and methods, function literals, the statement
  forms, and every expression form.
* **Name-dispatch conversion** – every named rule in the parse tree is
  handled by a ``_build_<rule>`` method; anonymous sub-expressions are
  transparent.
* **Newline-aware statements** – ``hs`` is horizontal space only; a
  statement ends at ``;``, a newline, a line comment, ``)`` or ``}``.
  Operators may be followed by a line break, never preceded by one.
* **gofmt layout for composite literals** – ``T{...}`` requires the brace
  to follow the type immediately, which keeps ``if x {`` unambiguous.
* **Fail-fast with location** – syntax errors raise
  :class:`~gostrictenum.errors.GoSyntaxError` with file/line/column.

Public API
----------
``parse_file(source, path) -> go_ast.SourceFile``
    Parse one Go source file.
"""

from __future__ import annotations

import bisect
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from parsimonious.exceptions import IncompleteParseError, ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node

from gostrictenum import go_ast as A
from gostrictenum.errors import ErrorCodes, GoSyntaxError, SourceSpan

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — GO GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

GO_GRAMMAR = Grammar(r'''
    # ─────────────────────────────────────────────────────────────
    # Source File
    # ─────────────────────────────────────────────────────────────

    source_file         = _ package_clause eos _ (import_decl eos _)* (top_level_decl eos _)*
    package_clause      = ~r"package\b" hs identifier

    import_decl         = ~r"import\b" hs (import_group / import_spec)
    import_group        = "(" _ (import_spec eos _)* ")"
    import_spec         = (import_alias hs)? string_lit
    import_alias        = "." / identifier

    top_level_decl      = func_decl / method_decl / declaration
    declaration         = const_decl / type_decl / var_decl

    # ─────────────────────────────────────────────────────────────
    # Declarations
    # ─────────────────────────────────────────────────────────────

    const_decl          = ~r"const\b" hs (const_group / value_spec)
    const_group         = "(" _ (value_spec eos _)* ")"
    var_decl            = ~r"var\b" hs (var_group / value_spec)
    var_group           = "(" _ (value_spec eos _)* ")"
    value_spec          = identifier_list spec_type? spec_values?
    spec_type           = hs type
    spec_values         = hs "=" _ expression_list

    type_decl           = ~r"type\b" hs (type_group / type_spec)
    type_group          = "(" _ (type_spec eos _)* ")"
    type_spec           = identifier type_params? hs alias_marker? type
    alias_marker        = "=" hs

    type_params         = "[" _ type_param_decl (_ "," _ type_param_decl)* (_ ",")? _ "]"
    type_param_decl     = identifier_list hs constraint
    constraint          = constraint_term (_ "|" _ constraint_term)*
    constraint_term     = "~"? type

    func_decl           = ~r"func\b" hs identifier type_params? signature func_body?
    method_decl         = ~r"func\b" hs parameters hs identifier signature func_body?
    func_body           = hs block

    signature           = parameters result?
    result              = hs (parameters / type)
    parameters          = "(" _ parameter_list? _ ")"
    parameter_list      = parameter_decl (_ "," _ parameter_decl)* (_ ",")?
    parameter_decl      = named_param / unnamed_param
    named_param         = identifier hs variadic? type
    unnamed_param       = variadic? type
    variadic            = "..."

    # ─────────────────────────────────────────────────────────────
    # Types
    # ─────────────────────────────────────────────────────────────

    type                = paren_type / pointer_type / func_type / struct_type
                        / interface_type / map_type / chan_type / slice_type
                        / array_type / generic_type / type_name
    paren_type          = "(" _ type _ ")"
    pointer_type        = "*" type
    func_type           = ~r"func\b" hs signature
    struct_type         = ~r"struct\b" hs "{" _ (field_decl eos _)* "}"
    field_decl          = (named_fields / embedded_field) tag?
    named_fields        = identifier_list hs type
    embedded_field      = "*"? type_name
    tag                 = hs string_lit
    interface_type      = ~r"interface\b" hs "{" _ (interface_elem eos _)* "}"
    interface_elem      = method_spec / constraint
    method_spec         = identifier signature
    map_type            = ~r"map\b" hs "[" _ type _ "]" type
    chan_type           = recv_chan / send_chan / both_chan
    recv_chan           = "<-" hs ~r"chan\b" hs type
    send_chan           = ~r"chan\b" hs "<-" hs type
    both_chan           = ~r"chan\b" hs type
    slice_type          = "[" "]" type
    array_type          = "[" _ (ellipsis_len / expression) _ "]" type
    ellipsis_len        = "..."
    generic_type        = type_name type_args
    type_args           = "[" _ type (_ "," _ type)* (_ ",")? _ "]"
    type_name           = qualified_ident / identifier
    qualified_ident     = identifier "." identifier

    # ─────────────────────────────────────────────────────────────
    # Statements
    # ─────────────────────────────────────────────────────────────

    block               = "{" _ statement_list "}"
    statement_list      = (statement eos _)*
    statement           = declaration / return_stmt / if_stmt / for_stmt
                        / switch_stmt / select_stmt / go_stmt / defer_stmt
                        / branch_stmt / block / labeled_stmt / simple_stmt

    return_stmt         = ~r"return\b" return_values?
    return_values       = hs expression_list

    if_stmt             = ~r"if\b" hs if_init expression hs block else_clause?
    if_init             = (simple_stmt hs ";" _)?
    else_clause         = hs ~r"else\b" hs (if_stmt / block)

    for_stmt            = ~r"for\b" hs (range_clause / for_clause / expression)? hs block
    range_clause        = range_lhs? ~r"range\b" hs expression
    range_lhs           = expression_list hs range_op _
    range_op            = ":=" / "="
    for_clause          = for_init hs ";" _ for_cond hs ";" _ for_post
    for_init            = simple_stmt?
    for_cond            = expression?
    for_post            = simple_stmt?

    switch_stmt         = ~r"switch\b" hs switch_init (type_switch_guard / expression)? hs "{" _ (case_clause _)* "}"
    switch_init         = (simple_stmt hs ";" _)?
    type_switch_guard   = (identifier hs ":=" _)? primary_expr "." "(" _ ~r"type\b" _ ")"
    case_clause         = case_head hs ":" _ statement_list
    case_head           = case_exprs / default_kw
    case_exprs          = ~r"case\b" hs case_item (hs "," _ case_item)*
    case_item           = expression / type
    default_kw          = ~r"default\b"

    select_stmt         = ~r"select\b" hs "{" _ (comm_clause _)* "}"
    comm_clause         = comm_head hs ":" _ statement_list
    comm_head           = comm_case / default_kw
    comm_case           = ~r"case\b" hs simple_stmt

    go_stmt             = ~r"go\b" hs expression
    defer_stmt          = ~r"defer\b" hs expression
    branch_stmt         = branch_keyword (hs identifier)?
    branch_keyword      = ~r"(?:break|continue|goto|fallthrough)\b"
    labeled_stmt        = identifier hs ":" !"=" _ statement?

    simple_stmt         = short_var_decl / assignment / inc_dec_stmt / send_stmt / expression
    short_var_decl      = identifier_list hs ":=" _ expression_list
    assignment          = expression_list hs assign_op _ expression_list
    assign_op           = ~r"(?:<<|>>|&\^|[-+*/%&|^])?=(?!=)"
    inc_dec_stmt        = expression hs inc_dec_op
    inc_dec_op          = "++" / "--"
    send_stmt           = expression hs "<-" _ expression

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    expression_list     = expression (hs "," _ expression)*
    expression          = unary_expr binary_tail*
    binary_tail         = hs binary_op _ unary_expr
    binary_op           = ~r"\|\||&&|==|!=|<=|>=|<<|>>|&\^|\+(?![+=])|-(?![-=])|\*(?!=)|/(?![/*=])|%(?!=)|\|(?!=)|\^(?!=)|&(?!=)|<(?![-=])|>(?!=)"

    unary_expr          = unary_prefix / primary_expr
    unary_prefix        = unary_op unary_expr
    unary_op            = ~r"<-|[-+!^*&]"

    primary_expr        = operand postfix*
    postfix             = selector / type_assertion / index_or_slice / call_args
    selector            = "." _ identifier
    type_assertion      = "." "(" _ type _ ")"
    index_or_slice      = "[" _ (slice_body / index_list) _ "]"
    slice_body          = slice_low _ ":" _ slice_high (_ ":" _ expression)?
    slice_low           = expression?
    slice_high          = expression?
    index_list          = index_item (_ "," _ index_item)* (_ ",")?
    index_item          = expression / type
    call_args           = "(" _ argument_list? _ ")"
    argument_list       = argument (_ "," _ argument)* (_ spread)? (_ ",")?
    argument            = expression / type
    spread              = "..."

    operand             = basic_lit / func_lit / composite_lit / conversion / paren_expr / identifier
    func_lit            = ~r"func\b" hs signature hs block
    composite_lit       = literal_type literal_value
    literal_type        = struct_type / map_type / slice_type / array_type / generic_type / type_name
    literal_value       = "{" _ element_list? _ "}"
    element_list        = keyed_element (_ "," _ keyed_element)* (_ ",")?
    keyed_element       = element_key? element
    element_key         = element hs ":" _
    element             = literal_value / expression
    conversion          = conv_type "(" _ expression (_ ",")? _ ")"
    conv_type           = slice_type / array_type / map_type / chan_type / func_type / interface_type
    paren_expr          = "(" _ (expression / type) _ ")"

    # ─────────────────────────────────────────────────────────────
    # Literals
    # ─────────────────────────────────────────────────────────────

    basic_lit           = imaginary_lit / float_lit / int_lit / rune_lit / string_lit
    imaginary_lit       = ~r"(?:\d[\d_]*(?:\.[\d_]*)?(?:[eE][+-]?\d[\d_]*)?|\.\d[\d_]*(?:[eE][+-]?\d[\d_]*)?)i(?!\w)"
    float_lit           = ~r"0[xX][0-9a-fA-F_]*\.?[0-9a-fA-F_]*[pP][+-]?\d[\d_]*|\d[\d_]*\.[\d_]*(?:[eE][+-]?\d[\d_]*)?|\d[\d_]*[eE][+-]?\d[\d_]*|\.\d[\d_]*(?:[eE][+-]?\d[\d_]*)?"
    int_lit             = ~r"0[xX][0-9a-fA-F_]+|0[bB][01_]+|0[oO]?[0-7_]+(?![\d.eE])|\d[\d_]*"
    rune_lit            = ~r"'(?:[^'\\\n]|\\[^\n])+'"
    string_lit          = raw_string_lit / interpreted_string_lit
    raw_string_lit      = ~r"`[^`]*`"
    interpreted_string_lit = ~r'"(?:[^"\\\n]|\\.)*"'

    # ─────────────────────────────────────────────────────────────
    # Identifiers & Whitespace
    # ─────────────────────────────────────────────────────────────

    identifier_list     = identifier (hs "," _ identifier)*
    identifier          = !keyword ~r"[^\W\d]\w*"
    keyword             = ~r"(?:break|case|chan|const|continue|default|defer|else|fallthrough|for|func|goto|go|if|import|interface|map|package|range|return|select|struct|switch|type|var)(?!\w)"

    eos                 = hs (";" / line_comment / "\n" / &")" / &"}" / end_of_input)
    line_comment        = ~r"//[^\n]*"
    end_of_input        = ~r"\Z"
    hs                  = ~r"(?:[ \t\r]+|/\*[^\n]*?\*/)*"
    _                   = ~r"(?:\s+|//[^\n]*|/\*[\s\S]*?\*/)*"
''')


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — PARSE TREE → SYNTAX TREE
# ═══════════════════════════════════════════════════════════════════

# Rules that never carry structure.
_TRIVIA = frozenset({"_", "hs", "eos", "line_comment", "end_of_input", "keyword"})

# Ordered-choice rules whose node simply wraps the matched alternative.
_WRAPPERS = frozenset({
    "top_level_decl", "declaration", "statement", "type", "chan_type",
    "type_name", "parameter_decl", "unary_expr", "postfix", "operand",
    "basic_lit", "string_lit", "literal_type", "conv_type", "element",
    "argument", "index_item", "case_item", "interface_elem",
})

_LIT_KINDS = {
    "int_lit": A.LitKind.INT,
    "float_lit": A.LitKind.FLOAT,
    "imaginary_lit": A.LitKind.IMAG,
    "rune_lit": A.LitKind.CHAR,
    "raw_string_lit": A.LitKind.STRING,
    "interpreted_string_lit": A.LitKind.STRING,
}

_PRECEDENCE = {
    "||": 1,
    "&&": 2,
    "==": 3, "!=": 3, "<": 3, "<=": 3, ">": 3, ">=": 3,
    "+": 4, "-": 4, "|": 4, "^": 4,
    "*": 5, "/": 5, "%": 5, "<<": 5, ">>": 5, "&": 5, "&^": 5,
}


def _named(node: Node) -> List[Node]:
    """Named, non-trivia descendants of *node*, looking through anonymous nodes."""
    out: List[Node] = []
    for child in node.children:
        name = child.expr_name
        if name in _TRIVIA:
            continue
        if name:
            out.append(child)
        else:
            out.extend(_named(child))
    return out


def _first(nodes: Sequence[Node], name: str) -> Optional[Node]:
    for n in nodes:
        if n.expr_name == name:
            return n
    return None


class _TreeBuilder:
    """Converts a Parsimonious parse tree into ``go_ast`` nodes."""

    def __init__(self, text: str, path: str) -> None:
        self.text = text
        self.path = path
        self._line_starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self._line_starts.append(i + 1)

    # ── positions ────────────────────────────────────────────────

    def position(self, offset: int) -> Tuple[int, int]:
        """1-based (line, column) of a character offset."""
        idx = bisect.bisect_right(self._line_starts, offset) - 1
        return idx + 1, offset - self._line_starts[idx] + 1

    def loc(self, node: Node) -> A.Loc:
        line, col = self.position(node.start)
        return A.Loc(self.path, line, col)

    def error(self, message: str, node: Node) -> GoSyntaxError:
        line, col = self.position(node.start)
        return GoSyntaxError(
            message,
            code=ErrorCodes.UNSUPPORTED_SYNTAX,
            span=SourceSpan(self.path, line, col),
            snippet=node.text[:40],
        )

    # ── dispatch ─────────────────────────────────────────────────

    def build(self, node: Node):
        name = node.expr_name
        if name in _WRAPPERS:
            return self.build(_named(node)[0])
        if name in _LIT_KINDS:
            return A.BasicLit(_LIT_KINDS[name], node.text, loc=self.loc(node))
        method: Optional[Callable] = getattr(self, f"_build_{name}", None)
        if method is None:
            raise self.error(f"unexpected syntax node '{name}'", node)
        return method(node)

    def build_all(self, nodes: Sequence[Node]) -> list:
        return [self.build(n) for n in nodes]

    # ── source file & declarations ───────────────────────────────

    def _build_source_file(self, node: Node) -> A.SourceFile:
        parts = _named(node)
        package = self.build(_named(parts[0])[0])
        imports = [self.build(p) for p in parts if p.expr_name == "import_decl"]
        decls = [self.build(p) for p in parts if p.expr_name == "top_level_decl"]
        return A.SourceFile(
            path=self.path,
            package=package,
            imports=imports,
            decls=decls,
            source=self.text,
            loc=self.loc(node),
        )

    def _build_identifier(self, node: Node) -> A.Ident:
        return A.Ident(node.text, loc=self.loc(node))

    def _build_identifier_list(self, node: Node) -> List[A.Ident]:
        return self.build_all(_named(node))

    def _build_import_decl(self, node: Node) -> A.GenDecl:
        inner = _named(node)[0]
        if inner.expr_name == "import_group":
            specs = self.build_all(_named(inner))
            return A.GenDecl(A.DeclKind.IMPORT, specs, grouped=True, loc=self.loc(node))
        return A.GenDecl(A.DeclKind.IMPORT, [self.build(inner)], loc=self.loc(node))

    def _build_import_spec(self, node: Node) -> A.ImportSpec:
        parts = _named(node)
        alias_node = _first(parts, "import_alias")
        alias = None
        if alias_node is not None:
            alias = A.Ident(alias_node.text, loc=self.loc(alias_node))
        path = self.build(parts[-1])
        return A.ImportSpec(alias, path, loc=self.loc(node))

    def _build_grouped_decl(self, node: Node, kind: A.DeclKind, group_rule: str) -> A.GenDecl:
        inner = _named(node)[0]
        if inner.expr_name == group_rule:
            specs = self.build_all(_named(inner))
            return A.GenDecl(kind, specs, grouped=True, loc=self.loc(node))
        return A.GenDecl(kind, [self.build(inner)], loc=self.loc(node))

    def _build_const_decl(self, node: Node) -> A.GenDecl:
        return self._build_grouped_decl(node, A.DeclKind.CONST, "const_group")

    def _build_var_decl(self, node: Node) -> A.GenDecl:
        return self._build_grouped_decl(node, A.DeclKind.VAR, "var_group")

    def _build_type_decl(self, node: Node) -> A.GenDecl:
        return self._build_grouped_decl(node, A.DeclKind.TYPE, "type_group")

    def _build_value_spec(self, node: Node) -> A.ValueSpec:
        parts = _named(node)
        names = self.build(parts[0])
        type_node = _first(parts, "spec_type")
        values_node = _first(parts, "spec_values")
        type_expr = self.build(_named(type_node)[0]) if type_node is not None else None
        values = self.build(_named(values_node)[0]) if values_node is not None else []
        return A.ValueSpec(names, type_expr, values, loc=self.loc(node))

    def _build_type_spec(self, node: Node) -> A.TypeSpec:
        parts = _named(node)
        params_node = _first(parts, "type_params")
        return A.TypeSpec(
            name=self.build(parts[0]),
            type_expr=self.build(parts[-1]),
            type_params=self.build(params_node) if params_node is not None else [],
            is_alias=_first(parts, "alias_marker") is not None,
            loc=self.loc(node),
        )

    def _build_type_params(self, node: Node) -> List[A.Field]:
        fields = []
        for decl in _named(node):
            names_node, constraint_node = _named(decl)
            fields.append(A.Field(
                self.build(names_node),
                self.build(constraint_node),
                loc=self.loc(decl),
            ))
        return fields

    def _build_constraint(self, node: Node) -> A.Node:
        terms = self.build_all(_named(node))
        if len(terms) == 1 and not isinstance(terms[0], A.UnaryExpr):
            return terms[0]
        return A.UnionType(terms, loc=self.loc(node))

    def _build_constraint_term(self, node: Node) -> A.Node:
        inner = self.build(_named(node)[0])
        if node.text.startswith("~"):
            return A.UnaryExpr("~", inner, loc=self.loc(node))
        return inner

    def _build_func_decl(self, node: Node) -> A.FuncDecl:
        parts = _named(node)
        signature = self.build(_first(parts, "signature"))
        params_node = _first(parts, "type_params")
        if params_node is not None:
            signature.type_params = self.build(params_node)
        body_node = _first(parts, "func_body")
        return A.FuncDecl(
            name=self.build(parts[0]),
            signature=signature,
            body=self.build(_named(body_node)[0]) if body_node is not None else None,
            loc=self.loc(node),
        )

    def _build_method_decl(self, node: Node) -> A.FuncDecl:
        parts = _named(node)
        receivers = self.build(parts[0])
        if len(receivers) != 1 or len(receivers[0].names) > 1:
            raise self.error("method must have exactly one receiver", parts[0])
        body_node = _first(parts, "func_body")
        return A.FuncDecl(
            name=self.build(parts[1]),
            signature=self.build(parts[2]),
            body=self.build(_named(body_node)[0]) if body_node is not None else None,
            receiver=receivers[0],
            loc=self.loc(node),
        )

    # ── signatures ───────────────────────────────────────────────

    def _build_signature(self, node: Node) -> A.Signature:
        parts = _named(node)
        params = self.build(parts[0])
        results: List[A.Field] = []
        result_node = _first(parts, "result")
        if result_node is not None:
            inner = _named(result_node)[0]
            if inner.expr_name == "parameters":
                results = self.build(inner)
            else:
                type_expr = self.build(inner)
                results = [A.Field([], type_expr, loc=type_expr.loc)]
        return A.Signature(params, results, loc=self.loc(node))

    def _build_parameters(self, node: Node) -> List[A.Field]:
        """Build a parameter list, applying Go's grouping rule.

        ``(a, b int)`` parses as an unnamed ``a`` followed by a named
        ``b int``; when any parameter is named, the bare identifiers that
        precede it are names sharing its type.
        """
        list_node = _first(_named(node), "parameter_list")
        if list_node is None:
            return []
        raw = [self.build(p) for p in _named(list_node)]
        if not any(name is not None for name, _, _ in raw):
            return [A.Field([], type_expr, loc=type_expr.loc) for _, type_expr, _ in raw]

        fields: List[A.Field] = []
        pending: List[A.Ident] = []
        for name, type_expr, decl in raw:
            if name is None:
                if not isinstance(type_expr, A.Ident):
                    raise self.error("mixed named and unnamed parameters", decl)
                pending.append(type_expr)
                continue
            names = pending + [name]
            fields.append(A.Field(names, type_expr, loc=names[0].loc))
            pending = []
        if pending:
            raise self.error("mixed named and unnamed parameters", list_node)
        return fields

    def _build_named_param(self, node: Node):
        parts = _named(node)
        type_expr = self.build(parts[-1])
        if _first(parts, "variadic") is not None:
            type_expr = A.Ellipsis(type_expr, loc=self.loc(_first(parts, "variadic")))
        return self.build(parts[0]), type_expr, node

    def _build_unnamed_param(self, node: Node):
        parts = _named(node)
        type_expr = self.build(parts[-1])
        if _first(parts, "variadic") is not None:
            type_expr = A.Ellipsis(type_expr, loc=self.loc(node))
        return None, type_expr, node

    # ── types ────────────────────────────────────────────────────

    def _build_paren_type(self, node: Node) -> A.ParenExpr:
        # (T) stays wrapped; only a bare Ident annotation names an enum type
        return A.ParenExpr(self.build(_named(node)[0]), loc=self.loc(node))

    def _build_pointer_type(self, node: Node) -> A.StarExpr:
        return A.StarExpr(self.build(_named(node)[0]), loc=self.loc(node))

    def _build_func_type(self, node: Node) -> A.FuncType:
        return A.FuncType(self.build(_named(node)[0]), loc=self.loc(node))

    def _build_struct_type(self, node: Node) -> A.StructType:
        return A.StructType(self.build_all(_named(node)), loc=self.loc(node))

    def _build_field_decl(self, node: Node) -> A.Field:
        parts = _named(node)
        head = parts[0]
        tag_node = _first(parts, "tag")
        tag = self.build(_named(tag_node)[0]) if tag_node is not None else None
        if head.expr_name == "named_fields":
            names_node, type_node = _named(head)
            return A.Field(self.build(names_node), self.build(type_node), tag, loc=self.loc(node))
        type_expr = self.build(_named(head)[0])
        if head.text.startswith("*"):
            type_expr = A.StarExpr(type_expr, loc=self.loc(head))
        return A.Field([], type_expr, tag, loc=self.loc(node))

    def _build_interface_type(self, node: Node) -> A.InterfaceType:
        return A.InterfaceType(self.build_all(_named(node)), loc=self.loc(node))

    def _build_method_spec(self, node: Node) -> A.Field:
        name_node, sig_node = _named(node)
        sig = self.build(sig_node)
        return A.Field([self.build(name_node)], A.FuncType(sig, loc=sig.loc), loc=self.loc(node))

    def _build_map_type(self, node: Node) -> A.MapType:
        key, value = _named(node)
        return A.MapType(self.build(key), self.build(value), loc=self.loc(node))

    def _build_chan(self, node: Node, direction: A.ChanDir) -> A.ChanType:
        return A.ChanType(direction, self.build(_named(node)[0]), loc=self.loc(node))

    def _build_recv_chan(self, node: Node) -> A.ChanType:
        return self._build_chan(node, A.ChanDir.RECV)

    def _build_send_chan(self, node: Node) -> A.ChanType:
        return self._build_chan(node, A.ChanDir.SEND)

    def _build_both_chan(self, node: Node) -> A.ChanType:
        return self._build_chan(node, A.ChanDir.BOTH)

    def _build_slice_type(self, node: Node) -> A.ArrayType:
        return A.ArrayType(None, self.build(_named(node)[0]), loc=self.loc(node))

    def _build_array_type(self, node: Node) -> A.ArrayType:
        length_node, elt_node = _named(node)
        if length_node.expr_name == "ellipsis_len":
            length = A.Ellipsis(loc=self.loc(length_node))
        else:
            length = self.build(length_node)
        return A.ArrayType(length, self.build(elt_node), loc=self.loc(node))

    def _build_generic_type(self, node: Node) -> A.IndexExpr:
        name_node, args_node = _named(node)
        return A.IndexExpr(
            self.build(name_node),
            self.build_all(_named(args_node)),
            loc=self.loc(node),
        )

    def _build_qualified_ident(self, node: Node) -> A.SelectorExpr:
        pkg, name = self.build_all(_named(node))
        return A.SelectorExpr(pkg, name, loc=self.loc(node))

    # ── statements ───────────────────────────────────────────────

    def _build_block(self, node: Node) -> A.BlockStmt:
        return A.BlockStmt(self.build(_named(node)[0]), loc=self.loc(node))

    def _build_statement_list(self, node: Node) -> List[A.Node]:
        stmts = []
        for child in _named(node):
            stmt = self.build(child)
            if isinstance(stmt, A.GenDecl):
                stmt = A.DeclStmt(stmt, loc=stmt.loc)
            stmts.append(stmt)
        return stmts

    def _build_return_stmt(self, node: Node) -> A.ReturnStmt:
        values = _first(_named(node), "return_values")
        results = self.build(_named(values)[0]) if values is not None else []
        return A.ReturnStmt(results, loc=self.loc(node))

    def _build_optional_stmt(self, node: Node) -> Optional[A.Node]:
        parts = _named(node)
        return self.build(parts[0]) if parts else None

    def _build_if_stmt(self, node: Node) -> A.IfStmt:
        parts = _named(node)
        else_node = _first(parts, "else_clause")
        return A.IfStmt(
            init=self._build_optional_stmt(parts[0]),
            cond=self.build(parts[1]),
            body=self.build(parts[2]),
            else_=self.build(_named(else_node)[0]) if else_node is not None else None,
            loc=self.loc(node),
        )

    def _build_for_stmt(self, node: Node) -> A.Node:
        parts = _named(node)
        body = self.build(parts[-1])
        header = parts[0] if len(parts) > 1 else None
        if header is None:
            return A.ForStmt(None, None, None, body, loc=self.loc(node))
        if header.expr_name == "range_clause":
            return self._build_range(header, body, node)
        if header.expr_name == "for_clause":
            init_node, cond_node, post_node = _named(header)
            return A.ForStmt(
                self._build_optional_stmt(init_node),
                self._build_optional_stmt(cond_node),
                self._build_optional_stmt(post_node),
                body,
                loc=self.loc(node),
            )
        return A.ForStmt(None, self.build(header), None, body, loc=self.loc(node))

    def _build_range(self, header: Node, body: A.BlockStmt, node: Node) -> A.RangeStmt:
        parts = _named(header)
        lhs_node = _first(parts, "range_lhs")
        key = value = None
        op = ""
        if lhs_node is not None:
            list_node, op_node = _named(lhs_node)
            lhs = self.build(list_node)
            key = lhs[0]
            value = lhs[1] if len(lhs) > 1 else None
            op = op_node.text
        return A.RangeStmt(key, value, op, self.build(parts[-1]), body, loc=self.loc(node))

    def _build_switch_stmt(self, node: Node) -> A.Node:
        parts = _named(node)
        init = self._build_optional_stmt(parts[0])
        clauses = [self.build(p) for p in parts if p.expr_name == "case_clause"]
        guard = _first(parts, "type_switch_guard")
        if guard is not None:
            guard_parts = _named(guard)
            binding_node = _first(guard_parts, "identifier")
            return A.TypeSwitchStmt(
                init=init,
                binding=self.build(binding_node) if binding_node is not None else None,
                x=self.build(guard_parts[-1]),
                clauses=clauses,
                loc=self.loc(node),
            )
        tag_node = _first(parts, "expression")
        return A.SwitchStmt(
            init=init,
            tag=self.build(tag_node) if tag_node is not None else None,
            clauses=clauses,
            loc=self.loc(node),
        )

    def _build_case_clause(self, node: Node) -> A.CaseClause:
        head_node, body_node = _named(node)
        head = _named(head_node)[0]
        exprs = None
        if head.expr_name == "case_exprs":
            exprs = self.build_all(_named(head))
        return A.CaseClause(exprs, self.build(body_node), loc=self.loc(node))

    def _build_select_stmt(self, node: Node) -> A.SelectStmt:
        return A.SelectStmt(self.build_all(_named(node)), loc=self.loc(node))

    def _build_comm_clause(self, node: Node) -> A.CommClause:
        head_node, body_node = _named(node)
        head = _named(head_node)[0]
        comm = None
        if head.expr_name == "comm_case":
            comm = self.build(_named(head)[0])
        return A.CommClause(comm, self.build(body_node), loc=self.loc(node))

    def _build_go_stmt(self, node: Node) -> A.GoStmt:
        return A.GoStmt(self.build(_named(node)[0]), loc=self.loc(node))

    def _build_defer_stmt(self, node: Node) -> A.DeferStmt:
        return A.DeferStmt(self.build(_named(node)[0]), loc=self.loc(node))

    def _build_branch_stmt(self, node: Node) -> A.BranchStmt:
        parts = _named(node)
        label = self.build(parts[1]) if len(parts) > 1 else None
        return A.BranchStmt(parts[0].text, label, loc=self.loc(node))

    def _build_labeled_stmt(self, node: Node) -> A.LabeledStmt:
        parts = _named(node)
        stmt = self.build(parts[1]) if len(parts) > 1 else None
        if isinstance(stmt, A.GenDecl):
            stmt = A.DeclStmt(stmt, loc=stmt.loc)
        return A.LabeledStmt(self.build(parts[0]), stmt, loc=self.loc(node))

    def _build_simple_stmt(self, node: Node) -> A.Node:
        inner = _named(node)[0]
        if inner.expr_name == "expression":
            return A.ExprStmt(self.build(inner), loc=self.loc(node))
        return self.build(inner)

    def _build_short_var_decl(self, node: Node) -> A.AssignStmt:
        names_node, values_node = _named(node)
        return A.AssignStmt(
            self.build(names_node), ":=", self.build(values_node), loc=self.loc(node),
        )

    def _build_assignment(self, node: Node) -> A.AssignStmt:
        lhs_node, op_node, rhs_node = _named(node)
        return A.AssignStmt(
            self.build(lhs_node), op_node.text, self.build(rhs_node), loc=self.loc(node),
        )

    def _build_inc_dec_stmt(self, node: Node) -> A.IncDecStmt:
        x_node, op_node = _named(node)
        return A.IncDecStmt(self.build(x_node), op_node.text, loc=self.loc(node))

    def _build_send_stmt(self, node: Node) -> A.SendStmt:
        chan, value = _named(node)
        return A.SendStmt(self.build(chan), self.build(value), loc=self.loc(node))

    # ── expressions ──────────────────────────────────────────────

    def _build_expression_list(self, node: Node) -> List[A.Node]:
        return self.build_all(_named(node))

    def _build_expression(self, node: Node) -> A.Node:
        parts = _named(node)
        operands = [self.build(parts[0])]
        ops: List[str] = []
        for tail in parts[1:]:
            op_node, operand_node = _named(tail)
            ops.append(op_node.text)
            operands.append(self.build(operand_node))
        if not ops:
            return operands[0]

        # Precedence climbing; all binary operators are left-associative.
        output: List[A.Node] = [operands[0]]
        pending: List[str] = []

        def reduce() -> None:
            op = pending.pop()
            y = output.pop()
            x = output.pop()
            output.append(A.BinaryExpr(x, op, y, loc=x.loc))

        for op, rhs in zip(ops, operands[1:]):
            while pending and _PRECEDENCE[pending[-1]] >= _PRECEDENCE[op]:
                reduce()
            pending.append(op)
            output.append(rhs)
        while pending:
            reduce()
        return output[0]

    def _build_unary_prefix(self, node: Node) -> A.Node:
        op_node, operand_node = _named(node)
        operand = self.build(operand_node)
        if op_node.text == "*":
            return A.StarExpr(operand, loc=self.loc(node))
        return A.UnaryExpr(op_node.text, operand, loc=self.loc(node))

    def _build_primary_expr(self, node: Node) -> A.Node:
        parts = _named(node)
        expr = self.build(parts[0])
        for postfix in parts[1:]:
            expr = self._apply_postfix(expr, _named(postfix)[0])
        return expr

    def _apply_postfix(self, x: A.Node, node: Node) -> A.Node:
        kind = node.expr_name
        if kind == "selector":
            return A.SelectorExpr(x, self.build(_named(node)[0]), loc=x.loc)
        if kind == "type_assertion":
            return A.TypeAssertExpr(x, self.build(_named(node)[0]), loc=x.loc)
        if kind == "call_args":
            list_node = _first(_named(node), "argument_list")
            if list_node is None:
                return A.CallExpr(x, [], loc=x.loc)
            items = _named(list_node)
            args = [self.build(a) for a in items if a.expr_name == "argument"]
            spread = _first(items, "spread") is not None
            return A.CallExpr(x, args, has_ellipsis=spread, loc=x.loc)
        # index_or_slice
        inner = _named(node)[0]
        if inner.expr_name == "slice_body":
            slice_parts = _named(inner)
            return A.SliceExpr(
                x,
                low=self._build_optional_stmt(slice_parts[0]),
                high=self._build_optional_stmt(slice_parts[1]),
                max=self.build(slice_parts[2]) if len(slice_parts) > 2 else None,
                loc=x.loc,
            )
        return A.IndexExpr(x, self.build_all(_named(inner)), loc=x.loc)

    def _build_func_lit(self, node: Node) -> A.FuncLit:
        sig_node, body_node = _named(node)
        return A.FuncLit(self.build(sig_node), self.build(body_node), loc=self.loc(node))

    def _build_composite_lit(self, node: Node) -> A.CompositeLit:
        type_node, value_node = _named(node)
        lit = self.build(value_node)
        lit.type_expr = self.build(type_node)
        lit.loc = self.loc(node)
        return lit

    def _build_literal_value(self, node: Node) -> A.CompositeLit:
        list_node = _first(_named(node), "element_list")
        elts = self.build_all(_named(list_node)) if list_node is not None else []
        return A.CompositeLit(None, elts, loc=self.loc(node))

    def _build_keyed_element(self, node: Node) -> A.Node:
        parts = _named(node)
        value = self.build(parts[-1])
        key_node = _first(parts, "element_key")
        if key_node is None:
            return value
        key = self.build(_named(key_node)[0])
        return A.KeyValueExpr(key, value, loc=key.loc)

    def _build_conversion(self, node: Node) -> A.CallExpr:
        type_node, arg_node = _named(node)
        return A.CallExpr(self.build(type_node), [self.build(arg_node)], loc=self.loc(node))

    def _build_paren_expr(self, node: Node) -> A.ParenExpr:
        return A.ParenExpr(self.build(_named(node)[0]), loc=self.loc(node))


# ═══════════════════════════════════════════════════════════════════
#  PART 3 — PUBLIC API
# ═══════════════════════════════════════════════════════════════════

def parse_file(source: str, path: str = "<string>") -> A.SourceFile:
    """Parse one Go source file.

    Raises
    ------
    GoSyntaxError
        If the text is not valid Go (or uses syntax outside the supported
        subset).
    """
    if source.startswith("\ufeff"):
        source = source[1:]
    builder = _TreeBuilder(source, path)
    try:
        tree = GO_GRAMMAR.parse(source)
    except IncompleteParseError as exc:
        line, col = builder.position(exc.pos)
        raise GoSyntaxError(
            "unexpected input",
            span=SourceSpan(path, line, col),
            snippet=source[exc.pos:exc.pos + 40],
            cause=exc,
        ) from exc
    except ParseError as exc:
        line, col = builder.position(exc.pos)
        raise GoSyntaxError(
            f"syntax error (rule '{exc.expr.name or exc.expr.as_rule()}')",
            span=SourceSpan(path, line, col),
            snippet=source[exc.pos:exc.pos + 40],
            cause=exc,
        ) from exc
    source_file = builder.build(tree)
    logger.debug("Parsed %s: %d declarations", path, len(source_file.decls))
    return source_file


__all__ = ["GO_GRAMMAR", "parse_file"]

# tests/test_parser.py
"""
Tests for the Go front end: the PEG grammar at rule level, and the
conversion of parse trees into ``go_ast`` nodes.
"""

import pytest
from parsimonious.exceptions import IncompleteParseError, ParseError

from gostrictenum import go_ast as A
from gostrictenum.errors import ErrorCodes, GoSyntaxError
from gostrictenum.parser import GO_GRAMMAR, parse_file
from gostrictenum.strict_enum import FunctionSignature
from gostrictenum.visitor import iter_nodes
from tests.conftest import fixture_path, parse_go


@pytest.fixture(scope="module")
def grammar():
    return GO_GRAMMAR


def _func(sf: A.SourceFile, name: str) -> A.FuncDecl:
    for decl in sf.decls:
        if isinstance(decl, A.FuncDecl) and decl.name.name == name:
            return decl
    raise AssertionError(f"no func {name}")


def _body_expr(src: str) -> A.Node:
    """Parse ``var v = <src>`` and return the initializer."""
    sf = parse_go(f"package p\n\nvar v = {src}\n")
    return sf.decls[0].specs[0].values[0]


class TestGrammarWellFormed:

    def test_key_rules_exist(self, grammar):
        for rule in ("source_file", "func_decl", "method_decl", "value_spec",
                     "type_spec", "return_stmt", "func_lit", "expression",
                     "statement", "type"):
            assert rule in grammar, f"Rule {rule!r} missing"

    def test_default_rule_is_source_file(self, grammar):
        assert grammar.default_rule.name == "source_file"


class TestGrammarAtoms:

    def test_identifiers(self, grammar):
        for name in ("x", "_", "camelCase", "ALL_CAPS", "golang", "café", "true", "iota"):
            assert grammar["identifier"].parse(name).text == name

    def test_identifier_rejects_keywords(self, grammar):
        for kw in ("func", "return", "range", "chan", "go", "goto", "type", "var"):
            with pytest.raises((ParseError, IncompleteParseError)):
                grammar["identifier"].parse(kw)

    def test_int_literals(self, grammar):
        for lit in ("0", "42", "0xFF", "0b1010", "0o77", "017", "1_000"):
            assert grammar["int_lit"].parse(lit).text == lit

    def test_float_literals(self, grammar):
        for lit in ("3.14", "1e10", ".5", "1.", "2.5E-3", "0x1p-2"):
            assert grammar["float_lit"].parse(lit).text == lit

    def test_imaginary_literals(self, grammar):
        for lit in ("2i", "1.5i", "1e3i"):
            assert grammar["imaginary_lit"].parse(lit).text == lit

    def test_rune_and_string_literals(self, grammar):
        grammar["rune_lit"].parse("'a'")
        grammar["rune_lit"].parse(r"'\n'")
        grammar["string_lit"].parse('"hello"')
        grammar["string_lit"].parse(r'"esc\"aped"')
        grammar["string_lit"].parse("`raw\nstring`")

    def test_binary_op_does_not_eat_other_tokens(self, grammar):
        for text in ("+=", "++", "<-", "//", "-=", "&="):
            with pytest.raises((ParseError, IncompleteParseError)):
                grammar["binary_op"].parse(text)


class TestGrammarConstructs:

    def test_types(self, grammar):
        for text in ("Status", "pkg.Type", "*Status", "[]Status", "[4]int",
                     "map[string][]*Status", "func(int) (string, error)",
                     "chan<- bool", "<-chan int", "chan int", "struct{}",
                     "interface{}", "List[int]"):
            assert grammar["type"].parse(text).text == text

    def test_value_specs(self, grammar):
        grammar["value_spec"].parse('StatusActive Status = "active"')
        grammar["value_spec"].parse("ColorRed Color = iota")
        grammar["value_spec"].parse("ColorGreen")
        grammar["value_spec"].parse("a, b = 1, 2")

    def test_statements(self, grammar):
        for text in ("x := 1", "x += 2", "i++", "ch <- v", "<-done",
                     "return", "return a, b",
                     "for i := 0; i < n; i++ {\n}",
                     "for k, v := range m {\n}",
                     "switch x := v.(type) {\ncase int:\n}",
                     "if err := f(); err != nil {\n}",
                     "defer func() {}()"):
            assert grammar["statement"].parse(text).text == text

    def test_expression_with_operators(self, grammar):
        grammar["expression"].parse("a + b*c == d && !ok")

    def test_minimal_source_file(self, grammar):
        grammar.parse("package p\n")


class TestBuildDeclarations:

    def test_package_and_imports(self):
        sf = parse_go('''\
            package main

            import (
            	"fmt"
            	str "strings"
            )

            import "os"
        ''')
        assert sf.package.name == "main"
        assert len(sf.imports) == 2
        group = sf.imports[0]
        assert group.grouped is True
        assert [s.path.value for s in group.specs] == ['"fmt"', '"strings"']
        assert group.specs[1].name.name == "str"
        assert sf.imports[1].specs[0].path.value == '"os"'

    def test_const_group_with_iota(self):
        sf = parse_go('''\
            package p

            type Color int

            const (
            	ColorRed Color = iota
            	ColorGreen
            )
        ''')
        type_decl, const_decl = sf.decls
        assert type_decl.kind is A.DeclKind.TYPE
        assert type_decl.specs[0].name.name == "Color"
        assert const_decl.kind is A.DeclKind.CONST
        red, green = const_decl.specs
        assert isinstance(red.type_expr, A.Ident) and red.type_expr.name == "Color"
        assert red.values[0].name == "iota"
        assert green.type_expr is None
        assert green.values == []

    def test_qualified_const_type(self):
        sf = parse_go("package p\n\nconst Sunday time.Weekday = 0\n")
        spec = sf.decls[0].specs[0]
        assert isinstance(spec.type_expr, A.SelectorExpr)
        assert spec.type_expr.x.name == "time"
        assert spec.type_expr.sel.name == "Weekday"

    def test_type_alias_and_generic_type(self):
        sf = parse_go('''\
            package p

            type (
            	Name = string
            	List[T any] struct {
            		items []T
            	}
            )
        ''')
        alias, generic = sf.decls[0].specs
        assert alias.is_alias is True
        assert generic.type_params[0].names[0].name == "T"
        assert isinstance(generic.type_expr, A.StructType)

    def test_parameter_grouping(self):
        sf = parse_go('''\
            package p

            func f(a, b int, s ...string) (x, y Color, err error) {
            	return
            }
        ''')
        sig = _func(sf, "f").signature
        assert [n.name for n in sig.params[0].names] == ["a", "b"]
        assert sig.params[0].type_expr.name == "int"
        assert isinstance(sig.params[1].type_expr, A.Ellipsis)
        assert FunctionSignature.from_signature(sig).slots == ["Color", "Color", "error"]

    def test_unnamed_results(self):
        sf = parse_go("package p\n\nfunc f() (Status, *Status, []Status) {\n\treturn\n}\n")
        slots = FunctionSignature.from_signature(_func(sf, "f").signature).slots
        assert slots == ["Status", None, None]

    def test_method_receiver(self):
        sf = parse_go('''\
            package p

            func (r *Repo) Get() Status {
            	return r.s
            }
        ''')
        method = _func(sf, "Get")
        assert method.receiver.names[0].name == "r"
        assert isinstance(method.receiver.type_expr, A.StarExpr)
        ret = method.body.stmts[0]
        assert isinstance(ret.results[0], A.SelectorExpr)

    def test_generic_function(self):
        sf = parse_go('''\
            package p

            func first[K comparable, V any](m map[K]V, keys ...K) (V, bool) {
            	var zero V
            	return zero, false
            }
        ''')
        sig = _func(sf, "first").signature
        assert [f.names[0].name for f in sig.type_params] == ["K", "V"]
        assert isinstance(sig.params[0].type_expr, A.MapType)

    def test_bodyless_function(self):
        sf = parse_go("package p\n\nfunc external() int\n")
        assert _func(sf, "external").body is None


class TestBuildStatements:

    def test_local_declarations_are_decl_stmts(self):
        sf = parse_go('''\
            package p

            func f() {
            	type Mode string
            	const ModeOn Mode = "on"
            	var m Mode = ModeOn
            	_ = m
            }
        ''')
        stmts = _func(sf, "f").body.stmts
        assert [type(s) for s in stmts[:3]] == [A.DeclStmt] * 3
        assert [s.decl.kind for s in stmts[:3]] == [
            A.DeclKind.TYPE, A.DeclKind.CONST, A.DeclKind.VAR,
        ]
        assert isinstance(stmts[3], A.AssignStmt)

    def test_control_flow(self):
        sf = parse_go('''\
            package p

            func f(items []string, ch <-chan int) int {
            	for i, item := range items {
            		if item == "" {
            			continue
            		} else if i > 2 {
            			break
            		}
            	}
            	for i := 0; i < 3; i++ {
            	}
            	select {
            	case v := <-ch:
            		return v
            	default:
            	}
            	switch x := len(items); x {
            	case 1, 2:
            		return x
            	}
            	return 0
            }
        ''')
        stmts = _func(sf, "f").body.stmts
        rng, loop, sel, sw, ret = stmts
        assert isinstance(rng, A.RangeStmt) and rng.op == ":=" and rng.value.name == "item"
        assert isinstance(rng.body.stmts[0].else_, A.IfStmt)
        assert isinstance(loop, A.ForStmt) and isinstance(loop.post, A.IncDecStmt)
        assert isinstance(sel, A.SelectStmt)
        assert sel.clauses[1].comm is None
        assert isinstance(sw, A.SwitchStmt)
        assert isinstance(sw.init, A.AssignStmt)
        assert len(sw.clauses[0].exprs) == 2
        assert isinstance(ret.results[0], A.BasicLit)

    def test_type_switch(self):
        sf = parse_go('''\
            package p

            func f(v interface{}) {
            	switch x := v.(type) {
            	case int:
            	default:
            	}
            }
        ''')
        sw = _func(sf, "f").body.stmts[0]
        assert isinstance(sw, A.TypeSwitchStmt)
        assert sw.binding.name == "x"
        assert sw.clauses[1].exprs is None

    def test_send_go_and_defer(self):
        sf = parse_go('''\
            package p

            func f(done chan bool) {
            	defer close(done)
            	go func(out chan<- bool) {
            		out <- true
            	}(done)
            	<-done
            }
        ''')
        defer, go, recv = _func(sf, "f").body.stmts
        assert isinstance(defer, A.DeferStmt)
        assert isinstance(go.call, A.CallExpr) and isinstance(go.call.fun, A.FuncLit)
        send = go.call.fun.body.stmts[0]
        assert isinstance(send, A.SendStmt)
        assert isinstance(recv, A.ExprStmt) and recv.x.op == "<-"


class TestBuildExpressions:

    def test_precedence(self):
        expr = _body_expr("a + b*c == d")
        assert expr.op == "=="
        assert expr.x.op == "+"
        assert expr.x.y.op == "*"

    def test_left_associative(self):
        expr = _body_expr("a - b - c")
        assert expr.x.op == "-" and expr.x.x.name == "a"
        assert expr.y.name == "c"

    def test_composite_literal(self):
        expr = _body_expr("Point{X: 1, Y: 2}")
        assert isinstance(expr, A.CompositeLit)
        assert expr.type_expr.name == "Point"
        assert isinstance(expr.elts[0], A.KeyValueExpr)

    def test_nested_composite_literal(self):
        expr = _body_expr('map[string][]int{\n\t"a": {1, 2},\n}')
        assert isinstance(expr.type_expr, A.MapType)
        inner = expr.elts[0].value
        assert isinstance(inner, A.CompositeLit) and inner.type_expr is None

    def test_conversions_and_calls(self):
        expr = _body_expr("[]byte(s)")
        assert isinstance(expr, A.CallExpr) and isinstance(expr.fun, A.ArrayType)
        call = _body_expr("append(xs, ys...)")
        assert call.has_ellipsis is True
        make = _body_expr("make(chan bool, 1)")
        assert isinstance(make.args[0], A.ChanType)

    def test_postfix_chain(self):
        expr = _body_expr("r.items[i].Name()")
        assert isinstance(expr, A.CallExpr)
        assert isinstance(expr.fun, A.SelectorExpr)
        assert isinstance(expr.fun.x, A.IndexExpr)

    def test_slices_and_assertions(self):
        assert isinstance(_body_expr("s[1:]"), A.SliceExpr)
        assert _body_expr("s[:n:m]").max.name == "m"
        assert isinstance(_body_expr("v.(Status)"), A.TypeAssertExpr)

    def test_literal_kinds(self):
        assert _body_expr('"x"').kind is A.LitKind.STRING
        assert _body_expr("`x`").kind is A.LitKind.STRING
        assert _body_expr("1.5").kind is A.LitKind.FLOAT
        assert _body_expr("'c'").kind is A.LitKind.CHAR
        assert _body_expr("2i").kind is A.LitKind.IMAG
        assert _body_expr("7").kind is A.LitKind.INT

    def test_function_literal(self):
        expr = _body_expr("func() Status {\n\treturn \"x\"\n}")
        assert isinstance(expr, A.FuncLit)
        assert expr.signature.results[0].type_expr.name == "Status"
        assert len(list(iter_nodes(expr, A.ReturnStmt))) == 1


class TestLocations:

    def test_line_and_column(self):
        sf = parse_go('''\
            package p

            func f() Status {
            	return "x"
            }
        ''', path="dir/f.go")
        lit = _func(sf, "f").body.stmts[0].results[0]
        assert lit.loc.file == "dir/f.go"
        assert (lit.loc.line, lit.loc.col) == (4, 9)

    def test_byte_order_mark_is_ignored(self):
        sf = parse_file("\ufeffpackage p\n")
        assert sf.package.name == "p"
        assert sf.package.loc.line == 1

    def test_comments_are_skipped(self):
        sf = parse_go('''\
            // Package p does things.
            package p

            /* block
               comment */
            const X = 1 // trailing
        ''')
        assert sf.decls[0].specs[0].names[0].name == "X"

    def test_line_text(self):
        sf = parse_go("package p\n\nvar x = 1\n")
        assert sf.line_text(3) == "var x = 1"
        assert sf.line_text(99) == ""


class TestParseErrors:

    def test_incomplete_input(self):
        with open(fixture_path("broken", "bad.go"), encoding="utf-8") as fh:
            source = fh.read()
        with pytest.raises(GoSyntaxError) as info:
            parse_file(source, "bad.go")
        err = info.value
        assert err.code == ErrorCodes.SYNTAX_ERROR
        assert err.span.file == "bad.go"
        assert err.span.line == 3
        assert err.snippet.startswith("func oops(")

    def test_missing_package_clause(self):
        with pytest.raises(GoSyntaxError) as info:
            parse_file("func f() {}\n", "x.go")
        assert info.value.span.line == 1
        assert "GSE-1100" in info.value.to_gcc_format()

    def test_mixed_parameters_rejected(self):
        with pytest.raises(GoSyntaxError) as info:
            parse_go("package p\n\nfunc f(a int, []string) {}\n")
        assert info.value.code == ErrorCodes.UNSUPPORTED_SYNTAX

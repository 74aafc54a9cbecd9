# gostrictenum/go_ast.py
"""
Go syntax tree node definitions.

The front end (:mod:`gostrictenum.parser`) builds these nodes from Go
source.  The tree keeps exactly what the analysis passes need: declaration
structure, function signatures, statement nesting and the *syntactic* form
of every expression.  There is no type information.

Every node carries a :class:`Loc` pointing at its first character.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


# ── Source Location ──────────────────────────────────────────────

@dataclass(frozen=True)
class Loc:
    """Source location for diagnostics (1-based line and column)."""
    file: str = "<unknown>"
    line: int = 0
    col: int = 0

    def __str__(self):
        return f"{self.file}:{self.line}:{self.col}"


# ── Enums ────────────────────────────────────────────────────────

class DeclKind(Enum):
    IMPORT = "import"
    CONST = "const"
    TYPE = "type"
    VAR = "var"


class LitKind(Enum):
    INT = "int"
    FLOAT = "float"
    IMAG = "imag"
    CHAR = "char"
    STRING = "string"


class ChanDir(Enum):
    BOTH = "chan"
    SEND = "chan<-"
    RECV = "<-chan"


# ── Base ─────────────────────────────────────────────────────────

_SNAKE_RE = re.compile(r"(?<!^)(?=[A-Z])")
_VISIT_NAMES: dict = {}


def _visit_name(cls: type) -> str:
    name = _VISIT_NAMES.get(cls)
    if name is None:
        name = "visit_" + _SNAKE_RE.sub("_", cls.__name__).lower()
        _VISIT_NAMES[cls] = name
    return name


class Node:
    """Base class for all Go syntax nodes.

    ``accept`` dispatches to ``visitor.visit_<snake_case_class_name>``
    and falls back to ``visitor.generic_visit``.
    """

    def accept(self, visitor: Any) -> Any:
        method = getattr(visitor, _visit_name(type(self)), None)
        if method is None:
            return visitor.generic_visit(self)
        return method(self)


# ── Expressions ──────────────────────────────────────────────────

@dataclass
class Ident(Node):
    name: str
    loc: Loc = field(default_factory=Loc)


@dataclass
class BasicLit(Node):
    """A literal token; ``value`` is the exact source text."""
    kind: LitKind
    value: str
    loc: Loc = field(default_factory=Loc)


@dataclass
class CompositeLit(Node):
    type_expr: Optional[Node]
    elts: List[Node] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class KeyValueExpr(Node):
    key: Node
    value: Node
    loc: Loc = field(default_factory=Loc)


@dataclass
class FuncLit(Node):
    signature: "Signature"
    body: "BlockStmt"
    loc: Loc = field(default_factory=Loc)


@dataclass
class ParenExpr(Node):
    x: Node
    loc: Loc = field(default_factory=Loc)


@dataclass
class SelectorExpr(Node):
    x: Node
    sel: Ident
    loc: Loc = field(default_factory=Loc)


@dataclass
class IndexExpr(Node):
    x: Node
    indices: List[Node] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class SliceExpr(Node):
    x: Node
    low: Optional[Node] = None
    high: Optional[Node] = None
    max: Optional[Node] = None
    loc: Loc = field(default_factory=Loc)


@dataclass
class TypeAssertExpr(Node):
    """``x.(T)``; ``type_expr`` is None for the ``x.(type)`` switch guard."""
    x: Node
    type_expr: Optional[Node] = None
    loc: Loc = field(default_factory=Loc)


@dataclass
class CallExpr(Node):
    fun: Node
    args: List[Node] = field(default_factory=list)
    has_ellipsis: bool = False
    loc: Loc = field(default_factory=Loc)


@dataclass
class StarExpr(Node):
    """``*x`` — a pointer type or a dereference."""
    x: Node
    loc: Loc = field(default_factory=Loc)


@dataclass
class UnaryExpr(Node):
    op: str
    x: Node
    loc: Loc = field(default_factory=Loc)


@dataclass
class BinaryExpr(Node):
    x: Node
    op: str
    y: Node
    loc: Loc = field(default_factory=Loc)


# ── Type Expressions ────────────────────────────────────────────

@dataclass
class Ellipsis(Node):
    elt: Optional[Node] = None
    loc: Loc = field(default_factory=Loc)


@dataclass
class ArrayType(Node):
    """``[N]T``; ``length`` is None for a slice type ``[]T``."""
    length: Optional[Node]
    elt: Node
    loc: Loc = field(default_factory=Loc)


@dataclass
class MapType(Node):
    key: Node
    value: Node
    loc: Loc = field(default_factory=Loc)


@dataclass
class ChanType(Node):
    direction: ChanDir
    value: Node
    loc: Loc = field(default_factory=Loc)


@dataclass
class Field(Node):
    """A parameter, result, struct field or interface method.

    ``names`` is empty for unnamed parameters/results and embedded fields.
    """
    names: List[Ident]
    type_expr: Node
    tag: Optional[BasicLit] = None
    loc: Loc = field(default_factory=Loc)


@dataclass
class Signature(Node):
    params: List[Field] = field(default_factory=list)
    results: List[Field] = field(default_factory=list)
    type_params: List[Field] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class FuncType(Node):
    signature: Signature
    loc: Loc = field(default_factory=Loc)


@dataclass
class StructType(Node):
    fields: List[Field] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class InterfaceType(Node):
    elements: List[Node] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class UnionType(Node):
    """Constraint union ``~int | ~string``; tilde terms are ``UnaryExpr('~')``."""
    terms: List[Node] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


# ── Statements ───────────────────────────────────────────────────

@dataclass
class BlockStmt(Node):
    stmts: List[Node] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class DeclStmt(Node):
    decl: "GenDecl"
    loc: Loc = field(default_factory=Loc)


@dataclass
class ExprStmt(Node):
    x: Node
    loc: Loc = field(default_factory=Loc)


@dataclass
class SendStmt(Node):
    chan: Node
    value: Node
    loc: Loc = field(default_factory=Loc)


@dataclass
class IncDecStmt(Node):
    x: Node
    op: str
    loc: Loc = field(default_factory=Loc)


@dataclass
class AssignStmt(Node):
    """Assignment or short variable declaration (``op == ":="``)."""
    lhs: List[Node]
    op: str
    rhs: List[Node]
    loc: Loc = field(default_factory=Loc)


@dataclass
class GoStmt(Node):
    call: Node
    loc: Loc = field(default_factory=Loc)


@dataclass
class DeferStmt(Node):
    call: Node
    loc: Loc = field(default_factory=Loc)


@dataclass
class ReturnStmt(Node):
    results: List[Node] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class BranchStmt(Node):
    keyword: str
    label: Optional[Ident] = None
    loc: Loc = field(default_factory=Loc)


@dataclass
class LabeledStmt(Node):
    label: Ident
    stmt: Optional[Node]
    loc: Loc = field(default_factory=Loc)


@dataclass
class IfStmt(Node):
    init: Optional[Node]
    cond: Node
    body: BlockStmt
    else_: Optional[Node] = None
    loc: Loc = field(default_factory=Loc)


@dataclass
class ForStmt(Node):
    init: Optional[Node]
    cond: Optional[Node]
    post: Optional[Node]
    body: BlockStmt
    loc: Loc = field(default_factory=Loc)


@dataclass
class RangeStmt(Node):
    key: Optional[Node]
    value: Optional[Node]
    op: str
    x: Node
    body: BlockStmt
    loc: Loc = field(default_factory=Loc)


@dataclass
class CaseClause(Node):
    """``case a, b:`` / ``default:``; ``exprs`` is None for default."""
    exprs: Optional[List[Node]]
    body: List[Node] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class SwitchStmt(Node):
    init: Optional[Node]
    tag: Optional[Node]
    clauses: List[CaseClause] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class TypeSwitchStmt(Node):
    init: Optional[Node]
    binding: Optional[Ident]
    x: Node
    clauses: List[CaseClause] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class CommClause(Node):
    """``case <comm>:`` / ``default:`` inside ``select``; comm is None for default."""
    comm: Optional[Node]
    body: List[Node] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class SelectStmt(Node):
    clauses: List[CommClause] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


# ── Declarations ─────────────────────────────────────────────────

@dataclass
class ImportSpec(Node):
    name: Optional[Ident]
    path: BasicLit
    loc: Loc = field(default_factory=Loc)


@dataclass
class TypeSpec(Node):
    name: Ident
    type_expr: Node
    type_params: List[Field] = field(default_factory=list)
    is_alias: bool = False
    loc: Loc = field(default_factory=Loc)


@dataclass
class ValueSpec(Node):
    """One line of a ``const`` or ``var`` declaration."""
    names: List[Ident]
    type_expr: Optional[Node] = None
    values: List[Node] = field(default_factory=list)
    loc: Loc = field(default_factory=Loc)


@dataclass
class GenDecl(Node):
    kind: DeclKind
    specs: List[Node] = field(default_factory=list)
    grouped: bool = False
    loc: Loc = field(default_factory=Loc)


@dataclass
class FuncDecl(Node):
    name: Ident
    signature: Signature
    body: Optional[BlockStmt] = None
    receiver: Optional[Field] = None
    loc: Loc = field(default_factory=Loc)


@dataclass
class SourceFile(Node):
    path: str
    package: Ident
    imports: List[GenDecl] = field(default_factory=list)
    decls: List[Node] = field(default_factory=list)
    source: str = field(default="", repr=False, compare=False)
    loc: Loc = field(default_factory=Loc)

    def line_text(self, line: int) -> str:
        """Return source line ``line`` (1-based) without its newline."""
        lines = self.source.splitlines()
        if 1 <= line <= len(lines):
            return lines[line - 1]
        return ""


# Function-like nodes own return statements.
FUNCTION_NODES = (FuncDecl, FuncLit)

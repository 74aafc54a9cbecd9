"""
gostrictenum/strict_enum.py
═══════════════════════════

Strict-enum checker.

Go has no closed enumerations: an "enum" is a named type plus a group of
constants declared with that type.  This checker flags every place where
a value of such a type is produced from something other than one of those
constants:

    type Status string

    const (
        StatusActive  Status = "active"
        StatusPending Status = "pending"
    )

    func get() Status {
        return "unknown"     // returning literal '"unknown"' which is ...
    }

    var s Status = other     // variable 's' assigned 'other' which is ...

The analysis is purely syntactic and runs five sub-passes over all files
of one unit:

  1. type catalog      — every named type declared anywhere in the unit
  2. enum discovery    — constants whose annotation is a bare cataloged type
  3. return indexing   — each ``return`` → its innermost enclosing function
  4. return validation — returned identifiers/literals vs. result slots
  5. var validation    — ``var x T = v`` initializers

Passes 1–3 run in ``collect_evidence``; passes 4–5 in ``diagnose``.  The
enum registry is frozen between the two phases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, Union

from gostrictenum import go_ast as A
from gostrictenum.checkers import (
    DEFAULT_REGISTRY,
    Checker,
    CheckerContext,
    Confidence,
    DiagnosticSeverity,
)
from gostrictenum.errors import RegistryFrozenError
from gostrictenum.visitor import DepthFirstVisitor, iter_nodes

logger = logging.getLogger(__name__)

FunctionNode = Union[A.FuncDecl, A.FuncLit]

RETURN_IDENT_MSG = "returning '{value}' which is not a valid enum value for type {type}"
RETURN_LITERAL_MSG = "returning literal '{value}' which is not a valid enum value for type {type}"
VAR_IDENT_MSG = "variable '{var}' assigned '{value}' which is not a valid enum value for type {type}"
VAR_LITERAL_MSG = (
    "variable '{var}' assigned literal '{value}' which is not a valid enum value for type {type}"
)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — ANALYSIS STATE
# ═════════════════════════════════════════════════════════════════════════

class TypeCatalog:
    """Names of the types declared in one unit."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: Set[str] = set(names)

    def add(self, name: str) -> None:
        self._names.add(name)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))


class EnumRegistry:
    """
    Type name → names of the constants declared with that type.

    Grows during discovery and is frozen before validation; a type is
    enum-like iff its entry is non-empty.
    """

    def __init__(self) -> None:
        self._values: Dict[str, Set[str]] = {}
        self._frozen = False

    def add(self, type_name: str, const_name: str) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                f"cannot add '{const_name}' to enum {type_name}: registry is frozen"
            )
        self._values.setdefault(type_name, set()).add(const_name)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def is_enum_like(self, type_name: Optional[str]) -> bool:
        return bool(type_name) and bool(self._values.get(type_name))

    def values(self, type_name: str) -> FrozenSet[str]:
        return frozenset(self._values.get(type_name, ()))

    def is_member(self, type_name: str, name: str) -> bool:
        return name in self._values.get(type_name, ())

    @property
    def type_names(self) -> List[str]:
        return sorted(t for t, vals in self._values.items() if vals)

    def __len__(self) -> int:
        return len(self.type_names)


@dataclass
class FunctionSignature:
    """Result slots of one function: one entry per result position.

    ``None`` marks a slot whose declared type is not a bare identifier.
    """
    slots: List[Optional[str]] = field(default_factory=list)

    @classmethod
    def from_signature(cls, signature: A.Signature) -> "FunctionSignature":
        slots: List[Optional[str]] = []
        for result in signature.results:
            type_name = result.type_expr.name if isinstance(result.type_expr, A.Ident) else None
            slots.extend([type_name] * max(len(result.names), 1))
        return cls(slots)

    def __len__(self) -> int:
        return len(self.slots)


@dataclass
class ReturnSite:
    stmt: A.ReturnStmt
    owner: FunctionNode


@dataclass
class VariableSite:
    """One name of a ``var`` spec with an enum-like annotation."""
    type_name: str
    name: A.Ident
    value: Optional[A.Node] = None


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — DISCOVERY PASSES
# ═════════════════════════════════════════════════════════════════════════

def _specs(files: Iterable[A.SourceFile], kind: A.DeclKind) -> Iterator[A.Node]:
    for decl in iter_nodes(files, A.GenDecl):
        if decl.kind is kind:
            yield from decl.specs


def build_type_catalog(files: Iterable[A.SourceFile]) -> TypeCatalog:
    """Collect every type name declared in *files*, at any nesting depth."""
    catalog = TypeCatalog()
    for spec in _specs(files, A.DeclKind.TYPE):
        catalog.add(spec.name.name)
    return catalog


def discover_enums(files: Iterable[A.SourceFile], catalog: TypeCatalog) -> EnumRegistry:
    """Record constants whose annotation is a bare identifier naming a cataloged type.

    Untyped constants and qualified or compound annotations are ignored, so
    in an ``iota`` group only the specs that spell out the type count.
    """
    registry = EnumRegistry()
    for spec in _specs(files, A.DeclKind.CONST):
        type_expr = spec.type_expr
        if not isinstance(type_expr, A.Ident) or type_expr.name not in catalog:
            continue
        for name in spec.names:
            registry.add(type_expr.name, name.name)
    return registry


class _ReturnIndexer(DepthFirstVisitor):
    """Maps each return statement to its innermost enclosing function."""

    def __init__(self) -> None:
        self.sites: List[ReturnSite] = []
        self._owners: List[FunctionNode] = []

    def _enter(self, node: FunctionNode) -> None:
        self._owners.append(node)
        try:
            self.generic_visit(node)
        finally:
            self._owners.pop()

    visit_func_decl = _enter
    visit_func_lit = _enter

    def visit_return_stmt(self, node: A.ReturnStmt) -> None:
        if self._owners:
            self.sites.append(ReturnSite(node, self._owners[-1]))
        self.generic_visit(node)


def index_return_sites(files: Iterable[A.SourceFile]) -> List[ReturnSite]:
    indexer = _ReturnIndexer()
    for f in files:
        f.accept(indexer)
    return indexer.sites


def collect_variable_sites(
    files: Iterable[A.SourceFile], registry: EnumRegistry,
) -> List[VariableSite]:
    """Package-level and local ``var`` specs annotated with an enum-like type."""
    sites: List[VariableSite] = []
    for spec in _specs(files, A.DeclKind.VAR):
        type_expr = spec.type_expr
        if not isinstance(type_expr, A.Ident) or not registry.is_enum_like(type_expr.name):
            continue
        for i, name in enumerate(spec.names):
            value = spec.values[i] if i < len(spec.values) else None
            sites.append(VariableSite(type_expr.name, name, value))
    return sites


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — CHECKER
# ═════════════════════════════════════════════════════════════════════════

class StrictEnumChecker(Checker):
    """Only declared enum constants may be returned or assigned for enum types."""

    name = "gostrictenum"
    description = "Check that only enum values are returned for enum types"
    error_ids = frozenset({
        "nonEnumReturn",
        "nonEnumLiteralReturn",
        "nonEnumVariable",
        "nonEnumLiteralVariable",
    })
    default_severity = DiagnosticSeverity.WARNING

    def __init__(self) -> None:
        super().__init__()
        self.catalog = TypeCatalog()
        self.registry = EnumRegistry()
        self.return_sites: List[ReturnSite] = []
        self._signatures: Dict[int, FunctionSignature] = {}

    def collect_evidence(self, ctx: CheckerContext) -> None:
        files = ctx.unit.files
        self.catalog = build_type_catalog(files)
        self.registry = discover_enums(files, self.catalog)
        self.registry.freeze()
        self.return_sites = index_return_sites(files)
        logger.debug(
            "%s: %d type(s), %d enum(s) %s, %d return site(s)",
            ctx.unit.label, len(self.catalog), len(self.registry),
            self.registry.type_names, len(self.return_sites),
        )

    def diagnose(self, ctx: CheckerContext) -> None:
        checked = self._validate_returns()
        var_sites = collect_variable_sites(ctx.unit.files, self.registry)
        for site in var_sites:
            if site.value is not None:
                self._check_value(
                    site.value, site.type_name,
                    VAR_IDENT_MSG, VAR_LITERAL_MSG, "Variable", variable=site.name.name,
                )
        ctx.stats[self.name] = {
            "types": len(self.catalog),
            "enums": len(self.registry),
            "return_sites": len(self.return_sites),
            "checked_returns": checked,
            "variable_sites": len(var_sites),
        }

    # ── helpers ──────────────────────────────────────────────────────

    def signature_of(self, owner: FunctionNode) -> FunctionSignature:
        key = id(owner)
        sig = self._signatures.get(key)
        if sig is None:
            sig = FunctionSignature.from_signature(owner.signature)
            self._signatures[key] = sig
        return sig

    def _validate_returns(self) -> int:
        checked = 0
        for site in self.return_sites:
            sig = self.signature_of(site.owner)
            if not sig.slots:
                continue
            for value, type_name in zip(site.stmt.results, sig.slots):
                if not self.registry.is_enum_like(type_name):
                    continue
                checked += 1
                self._check_value(value, type_name, RETURN_IDENT_MSG, RETURN_LITERAL_MSG, "Return")
        return checked

    def _check_value(
        self,
        value: A.Node,
        type_name: str,
        ident_msg: str,
        literal_msg: str,
        site_kind: str,
        variable: str = "",
    ) -> None:
        if isinstance(value, A.Ident):
            if self.registry.is_member(type_name, value.name):
                return
            error_id = f"nonEnum{site_kind}"
            message = ident_msg.format(value=value.name, type=type_name, var=variable)
            text = value.name
        elif isinstance(value, A.BasicLit):
            error_id = f"nonEnumLiteral{site_kind}"
            message = literal_msg.format(value=value.value, type=type_name, var=variable)
            text = value.value
        else:
            return
        evidence = {"type": type_name, "value": text}
        if variable:
            evidence["variable"] = variable
        self._emit(
            error_id,
            message,
            file=value.loc.file,
            line=value.loc.line,
            column=value.loc.col,
            confidence=Confidence.HIGH,
            evidence=evidence,
        )


DEFAULT_REGISTRY.register(StrictEnumChecker)


__all__ = [
    "TypeCatalog",
    "EnumRegistry",
    "FunctionSignature",
    "ReturnSite",
    "VariableSite",
    "build_type_catalog",
    "discover_enums",
    "index_return_sites",
    "collect_variable_sites",
    "StrictEnumChecker",
    "RETURN_IDENT_MSG",
    "RETURN_LITERAL_MSG",
    "VAR_IDENT_MSG",
    "VAR_LITERAL_MSG",
]

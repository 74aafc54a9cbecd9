"""
gostrictenum/checkers.py
════════════════════════

Checker framework: turns analyses over loaded Go units into actionable,
suppressible diagnostics.

Architecture
────────────

  ┌─────────────────────────────────────────────────────────┐
  │                   CheckerRunner                         │
  │      run(unit)            run_units(units, jobs=N)      │
  │  ┌──────────────────────────────────────────────────┐   │
  │  │  fresh Checker instances per unit                │   │
  │  │  (StrictEnumChecker, ...)                        │   │
  │  └──────────────────────┬───────────────────────────┘   │
  │                         │                               │
  │  ┌──────────────────────▼───────────────────────────┐   │
  │  │           SuppressionManager                     │   │
  │  │        //nolint[:names]   │   global             │   │
  │  └──────────────────────┬───────────────────────────┘   │
  │                         │                               │
  │  ┌──────────────────────▼───────────────────────────┐   │
  │  │      CheckerRunResults (gcc / JSON lines)        │   │
  │  └──────────────────────────────────────────────────┘   │
  └─────────────────────────────────────────────────────────┘

Each Checker follows a four-phase lifecycle:

  1. **configure()**        — read options
  2. **collect_evidence()** — walk the unit's syntax trees, gather sites
  3. **diagnose()**         — turn suspicious sites into diagnostics
  4. **report()**           — return diagnostics (filtered by suppressions)
"""

from __future__ import annotations

import json
import logging
import re
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    Type,
)

from gostrictenum.loader import Unit

logger = logging.getLogger(__name__)

# Error id of the diagnostic that stands in for a checker that raised.
INTERNAL_ERROR_ID = "checkerInternalError"


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    """Severity levels, ordered from most to least severe."""
    ERROR = "error"
    WARNING = "warning"
    STYLE = "style"
    INFORMATION = "information"


class Confidence(Enum):
    """
    How certain we are that the diagnostic is a true positive.

    HIGH   — the offending expression is syntactically certain to be wrong
    MEDIUM — strongly suspected
    LOW    — heuristic / pattern-based, may be false positive
    """
    HIGH = auto()
    MEDIUM = auto()
    LOW = auto()


@dataclass(frozen=True)
class SourceLocation:
    """A specific point in source code."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single diagnostic finding.

    Attributes
    ----------
    error_id     : Unique identifier (e.g., "nonEnumReturn")
    message      : Human-readable description
    severity     : DiagnosticSeverity
    location     : Position of the offending expression
    confidence   : Confidence level
    checker_name : Name of the checker that produced this
    evidence     : Machine-readable context for downstream tooling
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    confidence: Confidence = Confidence.MEDIUM
    checker_name: str = ""
    evidence: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "file": self.location.file,
            "line": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "checker": self.checker_name,
            "errorId": self.error_id,
        }

    def to_json_str(self) -> str:
        """Single-line JSON string."""
        return json.dumps(self.to_json_dict())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message [id]."""
        sev = self.severity.value
        return f"{self.location}: {sev}: {self.message} [{self.error_id}]"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

# ``//nolint`` or ``//nolint:name1,name2`` (an explanation may follow).
_NOLINT_RE = re.compile(r"//\s*nolint(?::([\w\-]+(?:\s*,\s*[\w\-]+)*))?(?![\w:])")


class SuppressionManager:
    """
    Manages diagnostic suppressions from multiple sources.

    Sources:
      1. Inline comments:  ``//nolint`` or ``//nolint:gostrictenum`` on the
         diagnostic's line (names may be checker names or error ids)
      2. Global suppressions (command-line or config)

    Usage
    -----
    >>> sm = SuppressionManager()
    >>> sm.add_global_suppression("nonEnumVariable")
    >>> unit_sm = sm.for_unit(unit)
    >>> if not unit_sm.is_suppressed(diagnostic):
    ...     emit(diagnostic)
    """

    def __init__(self) -> None:
        # {(file, line)} → names suppressed at that location ("*" = all)
        self._inline: Dict[Tuple[str, int], Set[str]] = defaultdict(set)
        # globally suppressed error ids / checker names
        self._global: Set[str] = set()

    def load_inline_suppressions(self, unit: Unit) -> None:
        """Scan the unit's source text for ``//nolint`` directives."""
        for source_file in unit.files:
            for lineno, text in enumerate(source_file.source.splitlines(), start=1):
                if "nolint" not in text:
                    continue
                m = _NOLINT_RE.search(text)
                if m is None:
                    continue
                names = m.group(1)
                key = (source_file.path, lineno)
                if names is None:
                    self._inline[key].add("*")
                else:
                    self._inline[key].update(n.strip() for n in names.split(","))

    def for_unit(self, unit: Unit) -> "SuppressionManager":
        """A copy sharing this manager's global rules plus *unit*'s inline ones."""
        clone = SuppressionManager()
        clone._global = set(self._global)
        clone.load_inline_suppressions(unit)
        return clone

    def add_global_suppression(self, error_id: str) -> None:
        """Globally suppress ``error_id`` (or every diagnostic of a checker)."""
        self._global.add(error_id)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        """Check whether a diagnostic should be suppressed."""
        keys = {diag.error_id, diag.checker_name, "*"}

        if keys & self._global:
            return True

        loc = diag.location
        inline = self._inline.get((loc.file, loc.line))
        if not inline:
            return False
        return bool(keys & inline) or "all" in inline

    def filter_diagnostics(
        self, diagnostics: Iterable[Diagnostic]
    ) -> List[Diagnostic]:
        """Return only non-suppressed diagnostics."""
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — CHECKER BASE CLASS
# ═════════════════════════════════════════════════════════════════════════

class Checker(ABC):
    """
    Abstract base class for all checkers.

    Lifecycle
    ─────────
      1. ``configure(ctx)``        — receive context, read options
      2. ``collect_evidence(ctx)``  — walk the unit, gather sites
      3. ``diagnose(ctx)``          — turn evidence into diagnostics
      4. ``report(ctx)``            — return final diagnostics

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``error_ids``
      - Implement ``collect_evidence()`` and ``diagnose()``
      - Optionally override ``configure()`` for custom setup

    A checker instance analyses exactly one unit; the runner creates a
    fresh instance for every unit.
    """

    # ── Metadata (override in subclasses) ────────────────────────────

    name: ClassVar[str] = "base-checker"
    description: ClassVar[str] = ""
    error_ids: ClassVar[FrozenSet[str]] = frozenset()
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.WARNING

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []
        self._config: Dict[str, Any] = {}

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def configure(self, ctx: CheckerContext) -> None:
        """
        Called before evidence collection.

        Default implementation copies ``ctx.options`` into ``self._config``.
        """
        self._config = dict(ctx.options)

    @abstractmethod
    def collect_evidence(self, ctx: CheckerContext) -> None:
        """Walk the unit and store intermediate results."""
        ...

    @abstractmethod
    def diagnose(self, ctx: CheckerContext) -> None:
        """
        Correlate evidence into Diagnostic objects.

        Append diagnostics with ``self._emit``.
        """
        ...

    def report(self, ctx: CheckerContext) -> List[Diagnostic]:
        """
        Return final diagnostics, filtered by suppressions.

        Normally you don't need to override this.
        """
        return ctx.suppressions.filter_diagnostics(self._diagnostics)

    def _emit(
        self,
        error_id: str,
        message: str,
        file: str,
        line: int,
        column: int = 0,
        severity: Optional[DiagnosticSeverity] = None,
        confidence: Confidence = Confidence.MEDIUM,
        evidence: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Helper to create and store a diagnostic."""
        self._diagnostics.append(Diagnostic(
            error_id=error_id,
            message=message,
            severity=severity or self.default_severity,
            location=SourceLocation(file=file, line=line, column=column),
            confidence=confidence,
            checker_name=self.name,
            evidence=evidence or {},
        ))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


@dataclass
class CheckerContext:
    """
    Context passed to every checker while it analyses one unit.

    Attributes
    ----------
    unit         : the loaded package being analysed
    suppressions : SuppressionManager for this unit
    options      : user-provided options dict
    stats        : mutable dict for timing / counting statistics
    """
    unit: Unit
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    options: Dict[str, Any] = field(default_factory=dict)
    stats: Dict[str, Any] = field(default_factory=dict)


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — CHECKER REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class CheckerRegistry:
    """
    Registry of available checkers.

    Usage
    -----
    >>> registry = CheckerRegistry()
    >>> registry.register(StrictEnumChecker)
    >>> checkers = registry.get_all()
    """

    def __init__(self) -> None:
        self._checkers: Dict[str, Type[Checker]] = {}

    def register(self, checker_cls: Type[Checker]) -> None:
        """Register a checker class."""
        self._checkers[checker_cls.name] = checker_cls

    def get_all(self) -> List[Type[Checker]]:
        """Return all registered checker classes."""
        return list(self._checkers.values())


DEFAULT_REGISTRY = CheckerRegistry()


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — RUNNER
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerRunResults:
    """
    Aggregate results from running a suite of checkers.

    Attributes
    ----------
    diagnostics            : All diagnostics from all checkers
    diagnostics_by_checker : Diagnostics grouped by checker name
    stats                  : Timing and counting statistics
    checker_names          : Names of checkers that were run
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_checker: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, Any] = field(default_factory=dict)
    checker_names: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(
            1 for d in self.diagnostics
            if d.severity == DiagnosticSeverity.ERROR
        )

    @property
    def warning_count(self) -> int:
        return sum(
            1 for d in self.diagnostics
            if d.severity == DiagnosticSeverity.WARNING
        )

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    @property
    def internal_errors(self) -> List[Diagnostic]:
        """Diagnostics recording a checker that failed instead of finishing."""
        return [d for d in self.diagnostics if d.error_id == INTERNAL_ERROR_ID]

    def merge(self, other: "CheckerRunResults") -> None:
        """Append *other*'s diagnostics and accumulate its statistics."""
        self.diagnostics.extend(other.diagnostics)
        for name, diags in other.diagnostics_by_checker.items():
            self.diagnostics_by_checker[name].extend(diags)
        for key, val in other.stats.items():
            if key in self.stats:
                self.stats[key] += val
            else:
                self.stats[key] = val
        for name in other.checker_names:
            if name not in self.checker_names:
                self.checker_names.append(name)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Checker run complete: {self.total_count} diagnostics "
            f"({self.error_count} errors, {self.warning_count} warnings) "
            f"in {self.stats.get('units', 0)} unit(s)",
        ]
        for name in self.checker_names:
            count = len(self.diagnostics_by_checker.get(name, []))
            elapsed = self.stats.get(f"{name}_elapsed_ms", 0)
            lines.append(f"  {name}: {count} findings ({elapsed:.1f}ms)")
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs a suite of checkers against loaded units.

    Usage
    -----
    >>> runner = CheckerRunner()
    >>> results = runner.run(unit)
    >>> print(results.summary())

    >>> # Several packages, four worker threads:
    >>> results = runner.run_units(units, jobs=4)

    Parameters for constructor
    ─────────────────────────
    registry    : CheckerRegistry — source of checker classes
    suppressions: SuppressionManager — global rules
    options     : dict — checker configuration
    """

    def __init__(
        self,
        registry: Optional[CheckerRegistry] = None,
        suppressions: Optional[SuppressionManager] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.registry = registry or DEFAULT_REGISTRY
        self.suppressions = suppressions or SuppressionManager()
        self.options = options or {}

    def run(self, unit: Unit) -> CheckerRunResults:
        """
        Run every registered checker against a single unit.

        Returns
        -------
        CheckerRunResults
        """
        results = CheckerRunResults()
        results.stats["units"] = 1

        ctx = CheckerContext(
            unit=unit,
            suppressions=self.suppressions.for_unit(unit),
            options=dict(self.options),
        )

        for cls in self.registry.get_all():
            checker = cls()
            checker_name = cls.name
            results.checker_names.append(checker_name)

            t0 = time.monotonic()
            try:
                checker.configure(ctx)
                checker.collect_evidence(ctx)
                checker.diagnose(ctx)
                diags = checker.report(ctx)
            except Exception as exc:
                logger.error(
                    "Checker '%s' failed on %s: %s", checker_name, unit.label, exc,
                    exc_info=True,
                )
                diags = [Diagnostic(
                    error_id=INTERNAL_ERROR_ID,
                    message=f"Checker '{checker_name}' failed: {exc}",
                    severity=DiagnosticSeverity.INFORMATION,
                    location=SourceLocation(file=unit.directory),
                    checker_name=checker_name,
                )]
            elapsed_ms = (time.monotonic() - t0) * 1000.0

            results.diagnostics.extend(diags)
            results.diagnostics_by_checker[checker_name].extend(diags)
            results.stats[f"{checker_name}_elapsed_ms"] = elapsed_ms
            logger.debug(
                "%s on %s: %d diagnostic(s) in %.1fms",
                checker_name, unit.label, len(diags), elapsed_ms,
            )

        return results

    def run_units(
        self,
        units: Sequence[Unit],
        jobs: int = 1,
    ) -> CheckerRunResults:
        """
        Run checkers across independent units.

        With ``jobs > 1`` the units are analysed on a thread pool.  Each
        unit gets its own checker instances and suppression manager, and
        the combined results keep the order of *units*.
        """
        combined = CheckerRunResults()
        if jobs > 1 and len(units) > 1:
            with ThreadPoolExecutor(max_workers=jobs) as pool:
                partials = list(pool.map(self.run, units))
        else:
            partials = [self.run(u) for u in units]
        for partial in partials:
            combined.merge(partial)
        return combined


__all__ = [
    # Model
    "DiagnosticSeverity",
    "Confidence",
    "SourceLocation",
    "Diagnostic",
    "INTERNAL_ERROR_ID",
    # Suppressions
    "SuppressionManager",
    # Framework
    "Checker",
    "CheckerContext",
    "CheckerRegistry",
    "DEFAULT_REGISTRY",
    "CheckerRunResults",
    "CheckerRunner",
]

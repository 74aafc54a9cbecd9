# gostrictenum/errors.py
"""
Error types for the gostrictenum toolchain.

Enum violations found in analysed code are *diagnostics*, not exceptions:
they are collected by the checker and reported through the checker
framework.  The exceptions in this module cover load failures, bad
settings payloads and broken internal invariants.

Error Hierarchy:
────────────────
  GoStrictEnumError (base)
  ├── LoadError            - a unit cannot be loaded (I/O, package clause)
  │   └── GoSyntaxError    - a source file does not parse
  ├── ConfigurationError   - settings payload / CLI configuration
  └── InternalError        - analyser bugs (should never happen)
      └── RegistryFrozenError

Error Codes:
────────────
Codes follow the pattern GSE-XXXX:
  - 1000-1999: Load / syntax errors
  - 2000-2999: Configuration errors
  - 9000-9999: Internal errors
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR PHASES AND CODES
# ═══════════════════════════════════════════════════════════════════════════════

@unique
class ErrorPhase(Enum):
    """Pipeline phase where the error occurred."""

    LOAD = "load"              # Reading files, grouping packages
    SYNTAX = "syntax"          # Parsing Go source
    CONFIG = "config"          # Settings decoding
    INTERNAL = "internal"      # Analyser internals


class ErrorCode:
    """
    Structured error code.

    Error codes follow the pattern ``GSE-NNNN`` where ``NNNN`` is a
    4-digit number inside the range of the code's phase.
    """

    __slots__ = ("prefix", "number", "phase")

    def __init__(self, prefix: str, number: int, phase: ErrorPhase) -> None:
        self.prefix = prefix
        self.number = number
        self.phase = phase

    @property
    def code(self) -> str:
        """Get the full error code string."""
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.phase.value})"

    def __hash__(self) -> int:
        return hash((self.prefix, self.number))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ErrorCode):
            return NotImplemented
        return (self.prefix, self.number) == (other.prefix, other.number)


class ErrorCodes:
    """Predefined error codes."""

    # ═══════════════════════════════════════════════════════════════════════════
    # LOAD / SYNTAX ERRORS (1000-1999)
    # ═══════════════════════════════════════════════════════════════════════════

    FILE_NOT_FOUND = ErrorCode("GSE", 1000, ErrorPhase.LOAD)
    FILE_UNREADABLE = ErrorCode("GSE", 1001, ErrorPhase.LOAD)
    PACKAGE_MISMATCH = ErrorCode("GSE", 1002, ErrorPhase.LOAD)
    NO_GO_FILES = ErrorCode("GSE", 1003, ErrorPhase.LOAD)
    SYNTAX_ERROR = ErrorCode("GSE", 1100, ErrorPhase.SYNTAX)
    UNSUPPORTED_SYNTAX = ErrorCode("GSE", 1101, ErrorPhase.SYNTAX)

    # ═══════════════════════════════════════════════════════════════════════════
    # CONFIGURATION ERRORS (2000-2999)
    # ═══════════════════════════════════════════════════════════════════════════

    INVALID_SETTINGS = ErrorCode("GSE", 2000, ErrorPhase.CONFIG)
    UNKNOWN_PLUGIN = ErrorCode("GSE", 2001, ErrorPhase.CONFIG)
    DUPLICATE_PLUGIN = ErrorCode("GSE", 2002, ErrorPhase.CONFIG)

    # ═══════════════════════════════════════════════════════════════════════════
    # INTERNAL ERRORS (9000-9999)
    # ═══════════════════════════════════════════════════════════════════════════

    INTERNAL_ERROR = ErrorCode("GSE", 9000, ErrorPhase.INTERNAL)
    REGISTRY_FROZEN = ErrorCode("GSE", 9001, ErrorPhase.INTERNAL)


# ═══════════════════════════════════════════════════════════════════════════════
# SOURCE SPANS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SourceSpan:
    """A position in a source file (1-based line and column)."""

    file: str = ""
    line: int = 0
    column: int = 0

    @classmethod
    def from_node(cls, node: Any) -> "SourceSpan":
        """Create a SourceSpan from an AST node carrying a ``loc``."""
        loc = getattr(node, "loc", None)
        if loc is None:
            return cls()
        return cls(file=loc.file, line=loc.line, column=loc.col)

    def __bool__(self) -> bool:
        return bool(self.file or self.line)

    def __str__(self) -> str:
        if not self.line:
            return self.file
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class GoStrictEnumError(Exception):
    """
    Base exception for all gostrictenum errors.

    Carries a structured :class:`ErrorCode` and an optional
    :class:`SourceSpan` so the CLI can print ``GSE-XXXX`` codes and
    positions uniformly.
    """

    default_code: ErrorCode = ErrorCodes.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        cause: Optional[BaseException] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.span = span or SourceSpan()
        self.cause = cause
        self.hint = hint

    def to_gcc_format(self) -> str:
        """Format as ``file:line:col: error: message [GSE-XXXX]``."""
        prefix = f"{self.span}: " if self.span else ""
        text = f"{prefix}error: {self.message} [{self.code}]"
        if self.hint:
            text += f"\n  hint: {self.hint}"
        return text

    def __str__(self) -> str:
        if self.span:
            return f"{self.code}: {self.message} (at {self.span})"
        return f"{self.code}: {self.message}"


class LoadError(GoStrictEnumError):
    """A compilation unit could not be loaded; no diagnostics are produced for it."""

    default_code = ErrorCodes.FILE_UNREADABLE


class GoSyntaxError(LoadError):
    """A Go source file could not be parsed."""

    default_code = ErrorCodes.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        snippet: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, span=span, **kwargs)
        self.snippet = snippet


class ConfigurationError(GoStrictEnumError):
    """Settings payload or plugin configuration is invalid."""

    default_code = ErrorCodes.INVALID_SETTINGS


class InternalError(GoStrictEnumError):
    """An analyser invariant was violated."""

    default_code = ErrorCodes.INTERNAL_ERROR


class RegistryFrozenError(InternalError):
    """An enum value was added after validation started."""

    default_code = ErrorCodes.REGISTRY_FROZEN


__all__ = [
    "ErrorPhase",
    "ErrorCode",
    "ErrorCodes",
    "SourceSpan",
    "GoStrictEnumError",
    "LoadError",
    "GoSyntaxError",
    "ConfigurationError",
    "InternalError",
    "RegistryFrozenError",
]

# gostrictenum/loader.py
"""
Compilation-unit loading.

A *unit* is one Go package: the ``.go`` files of a single directory that
share a package clause.  External test packages (``package foo_test``)
form a unit of their own.  Units are parsed completely before any checker
sees them; a unit that fails to load raises :class:`LoadError` and yields
no diagnostics.

Patterns follow the go tool:

    path/to/file.go     a single file (its unit is just that file)
    path/to/dir         the package in ``dir``
    path/to/dir/...     every package below ``dir``; ``testdata``,
                        ``vendor`` and directories starting with ``.``
                        or ``_`` are skipped
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List

from gostrictenum.errors import ErrorCodes, LoadError, SourceSpan
from gostrictenum.go_ast import SourceFile
from gostrictenum.parser import parse_file

logger = logging.getLogger(__name__)

RECURSIVE_SUFFIX = "..."
_SKIP_DIRS = frozenset({"testdata", "vendor"})


@dataclass
class Unit:
    """One package's worth of parsed files."""

    name: str
    directory: str
    files: List[SourceFile] = field(default_factory=list)

    @property
    def label(self) -> str:
        return f"{self.directory}:{self.name}"


# ─────────────────────────────────────────────────────────────────────────
#  Pattern expansion
# ─────────────────────────────────────────────────────────────────────────

def _is_go_file(name: str, include_tests: bool) -> bool:
    if not name.endswith(".go") or name.startswith((".", "_")):
        return False
    return include_tests or not name.endswith("_test.go")


def _go_files(directory: str, include_tests: bool) -> List[str]:
    try:
        names = sorted(os.listdir(directory))
    except OSError as exc:
        raise LoadError(
            f"cannot read directory: {exc.strerror}",
            code=ErrorCodes.FILE_UNREADABLE,
            span=SourceSpan(directory),
            cause=exc,
        ) from exc
    return [
        os.path.join(directory, n) for n in names
        if _is_go_file(n, include_tests) and os.path.isfile(os.path.join(directory, n))
    ]


def _walk_packages(root: str, include_tests: bool) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in _SKIP_DIRS and not d.startswith((".", "_"))
        )
        if any(_is_go_file(n, include_tests) for n in filenames):
            yield dirpath


def expand_patterns(patterns: Iterable[str], include_tests: bool = True) -> List[List[str]]:
    """Expand command-line patterns into groups of files, one group per directory/file.

    Raises LoadError for a pattern that names nothing on disk.
    """
    groups: List[List[str]] = []
    seen = set()

    def add(files: List[str]) -> None:
        key = tuple(files)
        if files and key not in seen:
            seen.add(key)
            groups.append(files)

    for pattern in patterns:
        recursive = pattern == RECURSIVE_SUFFIX or pattern.endswith("/" + RECURSIVE_SUFFIX)
        if recursive:
            root = pattern[: -len(RECURSIVE_SUFFIX)].rstrip("/") or "."
            if not os.path.isdir(root):
                raise LoadError(
                    f"directory not found: {root}",
                    code=ErrorCodes.FILE_NOT_FOUND,
                    span=SourceSpan(root),
                )
            for directory in _walk_packages(root, include_tests):
                add(_go_files(directory, include_tests))
            continue

        if os.path.isfile(pattern):
            add([pattern])
        elif os.path.isdir(pattern):
            files = _go_files(pattern, include_tests)
            if not files:
                raise LoadError(
                    f"no Go files in {pattern}",
                    code=ErrorCodes.NO_GO_FILES,
                    span=SourceSpan(pattern),
                )
            add(files)
        else:
            raise LoadError(
                f"no such file or directory: {pattern}",
                code=ErrorCodes.FILE_NOT_FOUND,
                span=SourceSpan(pattern),
            )
    return groups


# ─────────────────────────────────────────────────────────────────────────
#  Loading
# ─────────────────────────────────────────────────────────────────────────

def read_source(path: str) -> str:
    try:
        with open(path, encoding="utf-8") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(
            f"cannot read file: {exc}",
            code=ErrorCodes.FILE_UNREADABLE,
            span=SourceSpan(path),
            cause=exc,
        ) from exc


def load_files(paths: List[str]) -> List[Unit]:
    """Parse *paths* (all from one directory) and group them into units.

    Files declaring ``package X_test`` next to files declaring
    ``package X`` become a separate unit; any other mix of package
    clauses is a load failure.
    """
    parsed = [parse_file(read_source(p), p) for p in paths]
    directory = os.path.dirname(paths[0]) or "."

    by_package: Dict[str, List[SourceFile]] = {}
    for sf in parsed:
        by_package.setdefault(sf.package.name, []).append(sf)

    names = list(by_package)
    if len(names) > 1:
        bases = {n[: -len("_test")] if n.endswith("_test") else n for n in names}
        if len(bases) != 1 or len(names) > 2:
            first, second = names[0], names[1]
            culprit = by_package[second][0]
            raise LoadError(
                f"found packages {first} and {second} in {directory}",
                code=ErrorCodes.PACKAGE_MISMATCH,
                span=SourceSpan.from_node(culprit.package),
            )

    units = [Unit(name, directory, files) for name, files in by_package.items()]
    for unit in units:
        logger.debug("Loaded unit %s (%d files)", unit.label, len(unit.files))
    return units


def load_units(patterns: Iterable[str], include_tests: bool = True) -> List[Unit]:
    """Expand *patterns* and load every unit they name."""
    units: List[Unit] = []
    for group in expand_patterns(patterns, include_tests):
        units.extend(load_files(group))
    logger.info("Loaded %d unit(s)", len(units))
    return units


__all__ = ["Unit", "expand_patterns", "read_source", "load_files", "load_units"]

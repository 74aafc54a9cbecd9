# tests/conftest.py
"""Shared helpers: Go fixture loading and ``// want`` expectation matching.

Fixture packages live under ``tests/testdata/src/<name>``.  A line that
should produce diagnostics carries a trailing comment::

    return "x" // want `returning literal '"x"' which is not ...`

Each pattern (backquoted, or double-quoted with ``\\"`` escapes) is a
regular expression that must match the message of one diagnostic
reported on that line.
"""

from __future__ import annotations

import os
import re
import textwrap
from typing import Dict, List, Tuple

import pytest

from gostrictenum.checkers import CheckerRegistry, CheckerRunner, Diagnostic, SuppressionManager
from gostrictenum.loader import Unit, load_files, load_units
from gostrictenum.parser import parse_file
from gostrictenum.strict_enum import StrictEnumChecker

TESTDATA = os.path.join(os.path.dirname(os.path.abspath(__file__)), "testdata", "src")

_WANT_RE = re.compile(r"//\s*want\s+(.*)$")
_PATTERN_RE = re.compile(r'"((?:[^"\\]|\\.)*)"|`([^`]*)`')


def fixture_path(*parts: str) -> str:
    return os.path.join(TESTDATA, *parts)


def load_testdata_unit(name: str, include_tests: bool = True) -> List[Unit]:
    """Load the fixture package *name*; returns every unit in the directory."""
    return load_units([fixture_path(name)], include_tests=include_tests)


def parse_go(src: str, path: str = "test.go"):
    return parse_file(textwrap.dedent(src), path)


def parse_unit(*sources: str, name: str = "p") -> Unit:
    """Build a unit from inline Go sources (dedented)."""
    files = [
        parse_file(textwrap.dedent(src), f"{name}/file{i}.go")
        for i, src in enumerate(sources)
    ]
    return Unit(name, name, files)


def run_checker(unit: Unit, suppressions: SuppressionManager = None) -> List[Diagnostic]:
    registry = CheckerRegistry()
    registry.register(StrictEnumChecker)
    runner = CheckerRunner(registry=registry, suppressions=suppressions)
    return runner.run(unit).diagnostics


def collect_wants(unit: Unit) -> Dict[Tuple[str, int], List[str]]:
    """``(path, line) -> [pattern, ...]`` for every ``// want`` comment in *unit*."""
    wants: Dict[Tuple[str, int], List[str]] = {}
    for sf in unit.files:
        for lineno, text in enumerate(sf.source.splitlines(), start=1):
            m = _WANT_RE.search(text)
            if m is None:
                continue
            patterns = []
            for dq, bq in _PATTERN_RE.findall(m.group(1)):
                if bq:
                    patterns.append(bq)
                else:
                    patterns.append(re.sub(r"\\(.)", r"\1", dq))
            wants[(sf.path, lineno)] = patterns
    return wants


def check_wants(unit: Unit, diagnostics: List[Diagnostic]) -> List[str]:
    """Compare *diagnostics* against the unit's ``// want`` comments.

    Returns a list of human-readable problems; empty means a perfect match.
    """
    problems: List[str] = []
    remaining = list(diagnostics)
    for (path, line), patterns in sorted(collect_wants(unit).items()):
        for pattern in patterns:
            for d in remaining:
                if (d.location.file, d.location.line) == (path, line) and re.search(pattern, d.message):
                    remaining.remove(d)
                    break
            else:
                problems.append(f"{path}:{line}: no diagnostic matching {pattern!r}")
    for d in remaining:
        problems.append(f"unexpected diagnostic: {d.to_gcc_format()}")
    return problems


@pytest.fixture
def strict_runner():
    registry = CheckerRegistry()
    registry.register(StrictEnumChecker)
    return CheckerRunner(registry=registry)


__all__ = [
    "TESTDATA",
    "fixture_path",
    "load_testdata_unit",
    "load_files",
    "parse_go",
    "parse_unit",
    "run_checker",
    "collect_wants",
    "check_wants",
]

"""
gostrictenum/reporter.py
════════════════════════

Diagnostic output.

Output formats
──────────────
  • gcc     : ``file:line:col: severity: message [errorId]`` (default)
  • json    : one JSON object per line
  • pretty  : colourful Rust-style rendering with the offending source line
  • summary : counts per checker and elapsed time

Usage
─────
    results = CheckerRunner().run_units(units)
    write_report(results, "pretty", sys.stdout, units=units)
"""

from __future__ import annotations

import sys
from typing import Dict, Iterable, List, Optional, TextIO

from termcolor import colored

from gostrictenum.checkers import CheckerRunResults, Diagnostic, DiagnosticSeverity
from gostrictenum.loader import Unit

FORMATS = ("gcc", "json", "pretty", "summary")

_SEVERITY_COLOR = {
    DiagnosticSeverity.ERROR: "red",
    DiagnosticSeverity.WARNING: "yellow",
    DiagnosticSeverity.STYLE: "cyan",
    DiagnosticSeverity.INFORMATION: "blue",
}


# ═════════════════════════════════════════════════════════════════════════
#  TERMINAL RENDERER  (Rust-style colourful output)
# ═════════════════════════════════════════════════════════════════════════

class PrettyRenderer:
    """Render diagnostics with colours, a source excerpt and a caret."""

    def __init__(self, stream: TextIO = sys.stdout, sources: Optional[Dict[str, str]] = None) -> None:
        self._stream = stream
        self._sources: Dict[str, List[str]] = {
            path: text.splitlines() for path, text in (sources or {}).items()
        }

    def render(self, diag: Diagnostic) -> None:
        color = _SEVERITY_COLOR.get(diag.severity, "white")
        lines: List[str] = []

        # ── header: severity[errorId]: message ───────────────────────
        sev_str = colored(f"{diag.severity.value}[{diag.error_id}]", color, attrs=["bold"])
        lines.append(f"{sev_str}: {colored(diag.message, attrs=['bold'])}")

        loc = diag.location
        if loc.file:
            arrow = colored("-->", "blue", attrs=["bold"])
            lines.append(f"  {arrow} {loc}")

        src_text = self._source_line(loc.file, loc.line)
        if src_text is not None:
            gutter_w = len(str(loc.line)) + 1
            pipe = colored("|", "blue", attrs=["bold"])
            line_prefix = colored(str(loc.line).rjust(gutter_w), "blue", attrs=["bold"])
            lines.append(f" {line_prefix} {pipe} {src_text}")
            pad = " " * (loc.column - 1) if loc.column > 0 else ""
            blank_gutter = " " * gutter_w
            lines.append(f" {blank_gutter} {pipe} {pad}{colored('^', color, attrs=['bold'])}")

        lines.append(colored(diag.to_gcc_format(), attrs=["dark"]))
        lines.append("")
        self._stream.write("\n".join(lines) + "\n")

    def _source_line(self, path: str, line: int) -> Optional[str]:
        if not path or line <= 0:
            return None
        if path not in self._sources:
            try:
                with open(path, "r", errors="replace") as fh:
                    self._sources[path] = fh.read().splitlines()
            except OSError:
                self._sources[path] = []
        text = self._sources[path]
        if line > len(text):
            return None
        return text[line - 1]


# ═════════════════════════════════════════════════════════════════════════
#  REPORT ENTRY POINT
# ═════════════════════════════════════════════════════════════════════════

def sources_of(units: Iterable[Unit]) -> Dict[str, str]:
    """Source text of every file in *units*, keyed by path."""
    return {f.path: f.source for u in units for f in u.files}


def write_report(
    results: CheckerRunResults,
    fmt: str,
    stream: TextIO,
    units: Iterable[Unit] = (),
) -> None:
    """Write *results* to *stream* in format *fmt* (one of ``FORMATS``)."""
    if fmt == "gcc":
        for d in results.diagnostics:
            stream.write(d.to_gcc_format() + "\n")
    elif fmt == "json":
        for d in results.diagnostics:
            stream.write(d.to_json_str() + "\n")
    elif fmt == "pretty":
        renderer = PrettyRenderer(stream, sources_of(units))
        for d in results.diagnostics:
            renderer.render(d)
        if results.diagnostics:
            stream.write(colored(results.summary().splitlines()[0], attrs=["bold"]) + "\n")
    elif fmt == "summary":
        stream.write(results.summary() + "\n")
    else:
        raise ValueError(f"unknown output format: {fmt}")


__all__ = ["FORMATS", "PrettyRenderer", "sources_of", "write_report"]

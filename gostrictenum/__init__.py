"""gostrictenum — strict enum checking for Go.

Go models enumerations as a named type plus a group of typed constants,
with nothing stopping other values of that type from being produced.
This package flags returns and ``var`` initializers that produce a value
of such a type from a literal or from an identifier that is not one of
the declared constants.

Submodules
----------
parser, go_ast, visitor
    Go front end: Parsimonious grammar, syntax tree nodes, traversal.

loader
    Pattern expansion and package (unit) loading.

checkers
    Checker framework: diagnostics, suppressions, registry, runner.

strict_enum
    The five-pass strict-enum checker.

plugin
    Registration handshake for linter hosts (``new``, ``build_analyzers``).

main
    CLI entry-point.

Usage
-----
Command-line::

    gostrictenum ./...
    python -m gostrictenum --format pretty ./internal/...

Programmatic::

    from gostrictenum.loader import load_units
    from gostrictenum.plugin import get_plugin

    plugin = get_plugin("gostrictenum")(None)
    analyzer = plugin.build_analyzers()[0]
    for unit in load_units(["./..."]):
        for diag in analyzer.run(unit):
            print(diag.to_gcc_format())
"""

from __future__ import annotations

__version__: str = "0.1.0"

from gostrictenum import plugin  # noqa: E402  (registers the plugin)

__all__: list[str] = [
    "__version__",
    "plugin",
]

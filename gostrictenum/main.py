#!/usr/bin/env python3
"""gostrictenum/main.py — command-line driver.

Usage examples
--------------
    # Check the package in the current directory
    gostrictenum

    # Check every package below ./internal, four at a time
    gostrictenum -j 4 ./internal/...

    # JSON lines, without _test.go files
    gostrictenum --format json --no-tests ./cmd/server

    # Pass a settings payload the way a linter host would
    gostrictenum --settings gostrictenum.json ./...

Exit codes
----------
    0   No diagnostics.
    1   One or more diagnostics were reported.
    2   Infrastructure failure (load error, bad settings, missing path,
        or a checker that failed internally).

The module doubles as ``python -m gostrictenum`` via the companion
``gostrictenum/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import textwrap
from contextlib import ExitStack
from typing import Optional, Sequence, TextIO

from gostrictenum import __version__
from gostrictenum.checkers import CheckerRegistry, CheckerRunner, SuppressionManager
from gostrictenum.config import DEFAULT_FORMAT, RunConfig, load_settings_payload
from gostrictenum.errors import GoStrictEnumError
from gostrictenum.loader import load_units
from gostrictenum.plugin import PLUGIN_NAME, get_plugin
from gostrictenum.reporter import FORMATS, write_report

_log = logging.getLogger("gostrictenum")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


def _configure_logging(verbosity: int) -> None:
    """Set up the root ``gostrictenum`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("gostrictenum")
    root.setLevel(level)
    root.handlers[:] = [handler]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gostrictenum",
        description=(
            "gostrictenum — strict enum checking for Go.\n\n"
            "Reports returns and var initializers that produce a value of an\n"
            "enum-like type from anything other than its declared constants."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            patterns:
              file.go       a single file
              dir           the package in dir
              dir/...       every package below dir (testdata and vendor skipped)
        """),
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        default=["."],
        metavar="PATTERN",
        help="Files, package directories or dir/... patterns (default: .).",
    )
    parser.add_argument(
        "-f", "--format",
        choices=FORMATS,
        default=DEFAULT_FORMAT,
        help=f"Output format (default: {DEFAULT_FORMAT}).",
    )
    parser.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    parser.add_argument(
        "--tests",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Include _test.go files (default: yes).",
    )
    parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=1,
        metavar="N",
        help="Analyse up to N packages concurrently.",
    )
    parser.add_argument(
        "--suppress",
        action="append",
        default=[],
        metavar="ID",
        help="Suppress an error id or checker name (repeatable, comma-separated).",
    )
    parser.add_argument(
        "--settings",
        default=None,
        metavar="FILE",
        help="JSON settings payload handed to the plugin factory.",
    )
    parser.add_argument(
        "--list-checkers",
        action="store_true",
        help="List available checkers and exit.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    return parser


def _list_checkers(out: TextIO) -> int:
    plugin = get_plugin(PLUGIN_NAME)(None)
    for analyzer in plugin.build_analyzers():
        ids = ", ".join(sorted(analyzer.checker.error_ids))
        out.write(f"{analyzer.name}: {analyzer.doc}\n  error ids: {ids}\n")
    return EXIT_OK


def _run(args: argparse.Namespace) -> int:
    try:
        config = RunConfig.from_args(args)
        plugin = get_plugin(PLUGIN_NAME)(load_settings_payload(config.settings_path))
        units = load_units(config.patterns, include_tests=config.include_tests)
    except GoStrictEnumError as exc:
        _log.error("%s", exc)
        sys.stderr.write(exc.to_gcc_format() + "\n")
        return EXIT_INFRA

    registry = CheckerRegistry()
    for analyzer in plugin.build_analyzers():
        registry.register(analyzer.checker)

    suppressions = SuppressionManager()
    for error_id in config.suppress:
        suppressions.add_global_suppression(error_id)

    runner = CheckerRunner(
        registry=registry,
        suppressions=suppressions,
        options=dataclasses.asdict(plugin.settings),
    )
    results = runner.run_units(units, jobs=config.jobs)
    _log.info(
        "%d diagnostic(s) in %d unit(s)", results.total_count, len(units),
    )

    with ExitStack() as stack:
        if config.output and config.output != "-":
            try:
                out = stack.enter_context(open(config.output, "w", encoding="utf-8"))
            except OSError as exc:
                _log.error("cannot write %s: %s", config.output, exc.strerror)
                return EXIT_INFRA
        else:
            out = sys.stdout
        write_report(results, config.output_format, out, units=units)

    if results.internal_errors:
        return EXIT_INFRA
    return EXIT_ERROR if results.total_count > 0 else EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the gostrictenum CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    try:
        if args.list_checkers:
            return _list_checkers(sys.stdout)
        return _run(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130  # Standard UNIX convention for SIGINT
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())

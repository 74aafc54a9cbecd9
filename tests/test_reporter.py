# tests/test_reporter.py
"""Tests for the output formats."""

import io
import json

import pytest

from gostrictenum.reporter import FORMATS, PrettyRenderer, sources_of, write_report
from tests.conftest import load_testdata_unit


@pytest.fixture(scope="module")
def suppressed():
    (unit,) = load_testdata_unit("suppressed")
    return unit


@pytest.fixture
def results(suppressed, strict_runner):
    return strict_runner.run_units([suppressed])


def _render(results, fmt, units=()):
    out = io.StringIO()
    write_report(results, fmt, out, units=units)
    return out.getvalue()


class TestWriteReport:

    def test_gcc(self, results, suppressed):
        text = _render(results, "gcc")
        (line,) = text.splitlines()
        path = suppressed.files[0].path
        assert line == (
            f"{path}:23:9: warning: returning literal '\"custom\"' which is not a valid "
            "enum value for type Mode [nonEnumLiteralReturn]"
        )

    def test_json(self, results):
        (line,) = _render(results, "json").splitlines()
        payload = json.loads(line)
        assert payload["errorId"] == "nonEnumLiteralReturn"
        assert (payload["line"], payload["column"]) == (23, 9)

    def test_summary(self, results):
        text = _render(results, "summary")
        assert text.startswith("Checker run complete: 1 diagnostics")
        assert "gostrictenum: 1 findings" in text

    def test_pretty_shows_source_and_caret(self, results, suppressed):
        text = _render(results, "pretty", units=[suppressed])
        assert "warning[nonEnumLiteralReturn]" in text
        assert 'return "custom"' in text
        assert "^" in text
        assert "Checker run complete" in text

    def test_empty_results(self, strict_runner):
        empty = strict_runner.run_units([])
        for fmt in ("gcc", "json", "pretty"):
            assert _render(empty, fmt) == ""

    def test_unknown_format(self, results):
        with pytest.raises(ValueError):
            _render(results, "xml")

    def test_formats_are_advertised(self):
        assert FORMATS == ("gcc", "json", "pretty", "summary")


class TestPrettyRenderer:

    def test_reads_source_from_disk_when_not_given(self, results):
        out = io.StringIO()
        PrettyRenderer(out).render(results.diagnostics[0])
        assert 'return "custom"' in out.getvalue()

    def test_missing_source_is_tolerated(self, results):
        out = io.StringIO()
        renderer = PrettyRenderer(out, sources={results.diagnostics[0].location.file: ""})
        renderer.render(results.diagnostics[0])
        assert "-->" in out.getvalue()

    def test_sources_of(self, suppressed):
        sources = sources_of([suppressed])
        assert list(sources) == [suppressed.files[0].path]
        assert sources[suppressed.files[0].path].startswith("package suppressed")

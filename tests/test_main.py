# tests/test_main.py
"""End-to-end tests for the command-line driver."""

import json

import pytest

from gostrictenum import __version__
from gostrictenum.main import EXIT_ERROR, EXIT_INFRA, EXIT_OK, main
from gostrictenum.strict_enum import StrictEnumChecker
from tests.conftest import fixture_path


class TestExitCodes:

    def test_diagnostics_found(self, capsys):
        assert main([fixture_path("basic")]) == EXIT_ERROR
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 25
        assert all(": warning: " in ln for ln in lines)

    def test_clean_package(self, capsys):
        assert main(["--no-tests", fixture_path("withtests")]) == EXIT_OK
        assert capsys.readouterr().out == ""

    def test_test_files_are_included_by_default(self, capsys):
        assert main([fixture_path("withtests")]) == EXIT_ERROR
        assert "internal_test.go:4:9:" in capsys.readouterr().out

    def test_missing_path(self, capsys):
        assert main([fixture_path("nope")]) == EXIT_INFRA
        assert "GSE-1000" in capsys.readouterr().err

    def test_package_mismatch(self, capsys):
        assert main([fixture_path("mismatch")]) == EXIT_INFRA
        assert "GSE-1002" in capsys.readouterr().err

    def test_syntax_error(self, capsys):
        assert main([fixture_path("broken")]) == EXIT_INFRA
        err = capsys.readouterr().err
        assert "bad.go:3:1: error:" in err

    def test_invalid_jobs(self, capsys):
        assert main(["-j", "0", fixture_path("basic")]) == EXIT_INFRA

    def test_checker_failure_is_an_infrastructure_error(self, monkeypatch, capsys):
        def explode(self, ctx):
            raise RuntimeError("kaboom")

        monkeypatch.setattr(StrictEnumChecker, "collect_evidence", explode)
        assert main([fixture_path("basic")]) == EXIT_INFRA
        assert "[checkerInternalError]" in capsys.readouterr().out


class TestOptions:

    def test_json_format(self, capsys):
        assert main(["--format", "json", fixture_path("misc")]) == EXIT_ERROR
        records = [json.loads(ln) for ln in capsys.readouterr().out.splitlines()]
        assert {r["errorId"] for r in records} == {
            "nonEnumReturn", "nonEnumLiteralReturn", "nonEnumLiteralVariable",
        }
        assert all(r["checker"] == "gostrictenum" for r in records)

    def test_summary_format(self, capsys):
        main(["-f", "summary", fixture_path("basic"), fixture_path("misc")])
        out = capsys.readouterr().out
        assert "in 2 unit(s)" in out

    def test_suppress(self, capsys):
        code = main([
            "--suppress", "nonEnumLiteralReturn,nonEnumReturn",
            fixture_path("suppressed"),
        ])
        assert code == EXIT_OK

    def test_suppress_repeatable(self, capsys):
        code = main([
            "--suppress", "nonEnumLiteralReturn",
            "--suppress", "nonEnumReturn",
            "--suppress", "nonEnumLiteralVariable",
            "--suppress", "nonEnumVariable",
            fixture_path("basic"),
        ])
        assert code == EXIT_OK

    def test_output_file(self, tmp_path, capsys):
        target = tmp_path / "report.txt"
        assert main(["-o", str(target), fixture_path("suppressed")]) == EXIT_ERROR
        assert capsys.readouterr().out == ""
        assert "[nonEnumLiteralReturn]" in target.read_text(encoding="utf-8")

    def test_unwritable_output(self, tmp_path):
        target = tmp_path / "missing" / "report.txt"
        assert main(["-o", str(target), fixture_path("suppressed")]) == EXIT_INFRA

    def test_parallel_jobs(self, capsys):
        assert main(["-j", "3", fixture_path("basic"), fixture_path("misc")]) == EXIT_ERROR
        sequential_out = capsys.readouterr().out
        main([fixture_path("basic"), fixture_path("misc")])
        assert capsys.readouterr().out == sequential_out

    def test_list_checkers(self, capsys):
        assert main(["--list-checkers"]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith("gostrictenum: Check that only enum values are returned")
        assert "nonEnumLiteralVariable" in out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--version"])
        assert info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestSettings:

    def test_mapping_is_accepted(self, tmp_path, capsys):
        settings = tmp_path / "settings.json"
        settings.write_text('{"unknown": 1}', encoding="utf-8")
        assert main(["--settings", str(settings), fixture_path("suppressed")]) == EXIT_ERROR

    def test_invalid_json(self, tmp_path, capsys):
        settings = tmp_path / "settings.json"
        settings.write_text("{not json", encoding="utf-8")
        assert main(["--settings", str(settings), fixture_path("suppressed")]) == EXIT_INFRA
        assert "invalid JSON" in capsys.readouterr().err

    def test_non_mapping_payload(self, tmp_path, capsys):
        settings = tmp_path / "settings.json"
        settings.write_text("[1, 2]", encoding="utf-8")
        assert main(["--settings", str(settings), fixture_path("suppressed")]) == EXIT_INFRA
        assert "GSE-2000" in capsys.readouterr().err

    def test_missing_settings_file(self, tmp_path, capsys):
        assert main(["--settings", str(tmp_path / "none.json"), fixture_path("suppressed")]) == EXIT_INFRA

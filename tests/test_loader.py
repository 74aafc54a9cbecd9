# tests/test_loader.py
"""Tests for pattern expansion and unit loading."""

import os

import pytest

from gostrictenum.errors import ErrorCodes, GoSyntaxError, LoadError
from gostrictenum.loader import expand_patterns, load_files, load_units, read_source
from tests.conftest import TESTDATA, fixture_path


def _write(root, rel, text):
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return str(path)


@pytest.fixture
def tree(tmp_path):
    """A small module: two packages, plus directories the walk must skip."""
    _write(tmp_path, "a/a.go", "package a\n")
    _write(tmp_path, "a/a_test.go", "package a\n")
    _write(tmp_path, "a/b/b.go", "package b\n")
    _write(tmp_path, "a/b/notes.txt", "not go\n")
    _write(tmp_path, "a/testdata/t.go", "package broken(\n")
    _write(tmp_path, "a/vendor/v/v.go", "package v\n")
    _write(tmp_path, "a/.hidden/h.go", "package h\n")
    _write(tmp_path, "a/_skip/s.go", "package s\n")
    _write(tmp_path, "a/_ignored.go", "package a\n")
    return tmp_path


class TestExpandPatterns:

    def test_single_file(self, tree):
        path = str(tree / "a" / "a.go")
        assert expand_patterns([path]) == [[path]]

    def test_directory(self, tree):
        groups = expand_patterns([str(tree / "a")])
        assert [[os.path.basename(p) for p in g] for g in groups] == [["a.go", "a_test.go"]]

    def test_directory_without_tests(self, tree):
        groups = expand_patterns([str(tree / "a")], include_tests=False)
        assert [[os.path.basename(p) for p in g] for g in groups] == [["a.go"]]

    def test_recursive_skips_special_directories(self, tree):
        groups = expand_patterns([str(tree / "a") + "/..."])
        dirs = [os.path.relpath(os.path.dirname(g[0]), tree) for g in groups]
        assert dirs == ["a", os.path.join("a", "b")]

    def test_duplicates_are_collapsed(self, tree):
        a = str(tree / "a")
        assert len(expand_patterns([a, a, a + "/..."])) == 2

    def test_missing_path(self, tree):
        with pytest.raises(LoadError) as info:
            expand_patterns([str(tree / "nope")])
        assert info.value.code == ErrorCodes.FILE_NOT_FOUND

    def test_missing_recursive_root(self, tree):
        with pytest.raises(LoadError) as info:
            expand_patterns([str(tree / "nope") + "/..."])
        assert info.value.code == ErrorCodes.FILE_NOT_FOUND

    def test_directory_without_go_files(self, tree):
        empty = tree / "empty"
        empty.mkdir()
        with pytest.raises(LoadError) as info:
            expand_patterns([str(empty)])
        assert info.value.code == ErrorCodes.NO_GO_FILES


class TestLoadUnits:

    def test_fixture_package(self):
        (unit,) = load_units([fixture_path("basic")])
        assert unit.name == "basic"
        assert unit.directory == fixture_path("basic")
        assert [os.path.basename(f.path) for f in unit.files] == [
            "nested.go", "returns.go", "types.go", "vars.go",
        ]
        assert unit.label.endswith("basic:basic")

    def test_external_test_package_is_its_own_unit(self):
        units = load_units([fixture_path("withtests")])
        assert {u.name: len(u.files) for u in units} == {"withtests": 2, "withtests_test": 1}

    def test_package_mismatch(self):
        with pytest.raises(LoadError) as info:
            load_units([fixture_path("mismatch")])
        err = info.value
        assert err.code == ErrorCodes.PACKAGE_MISMATCH
        assert "one" in err.message and "two" in err.message
        assert err.span.file.endswith("b.go")

    def test_syntax_error_fails_the_unit(self):
        with pytest.raises(GoSyntaxError) as info:
            load_units([fixture_path("broken")])
        assert isinstance(info.value, LoadError)
        assert info.value.span.file.endswith("bad.go")

    def test_recursive_over_fixtures_stops_at_broken_package(self):
        with pytest.raises(LoadError):
            load_units([TESTDATA + "/..."])

    def test_load_files_groups_by_package(self, tree):
        units = load_files([str(tree / "a" / "a.go"), str(tree / "a" / "a_test.go")])
        assert len(units) == 1
        assert len(units[0].files) == 2

    def test_unreadable_file(self, tree):
        with pytest.raises(LoadError) as info:
            read_source(str(tree / "missing.go"))
        assert info.value.code == ErrorCodes.FILE_UNREADABLE

    def test_non_utf8_file(self, tree):
        path = tree / "latin1.go"
        path.write_bytes("package p\n// caf\xe9\n".encode("latin-1"))
        with pytest.raises(LoadError):
            read_source(str(path))

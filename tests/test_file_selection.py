"""
Tests for log file discovery and line counting.
"""

import pytest

from visitor_import.errors import FatalInputError
from visitor_import.file_selection import count_lines, describe_files, iter_lines, resolve_log_files


class TestResolveLogFiles:
    """Test directory / list / prefix glob resolution."""

    def test_invalid_directory(self, tmp_path):
        with pytest.raises(FatalInputError) as exc_info:
            resolve_log_files(tmp_path / "missing")
        assert "Invalid log directory" in str(exc_info.value)

    def test_prefix_glob(self, log_dir, write_log):
        write_log("access_log.1", ["a"])
        write_log("access_log", ["b"])
        write_log("error_log", ["c"])
        (log_dir / "access_dir").mkdir()

        files = resolve_log_files(log_dir)
        assert [f.name for f in files] == ["access_log", "access_log.1"]

    def test_custom_prefix(self, log_dir, write_log):
        write_log("access_log", ["a"])
        write_log("ssl_access_log", ["b"])

        files = resolve_log_files(log_dir, prefix="ssl_")
        assert [f.name for f in files] == ["ssl_access_log"]

    def test_explicit_list_keeps_order(self, log_dir, write_log):
        write_log("b.log", ["b"])
        write_log("a.log", ["a"])

        files = resolve_log_files(log_dir, " b.log , a.log,")
        assert files == [log_dir / "b.log", log_dir / "a.log"]

    def test_missing_listed_file(self, log_dir, write_log):
        write_log("a.log", ["a"])
        with pytest.raises(FatalInputError) as exc_info:
            resolve_log_files(log_dir, "a.log,nope.log")
        assert "nope.log" in str(exc_info.value)

    def test_no_matching_files(self, log_dir, write_log):
        write_log("error_log", ["x"])
        with pytest.raises(FatalInputError):
            resolve_log_files(log_dir)


class TestLineCounting:
    """Test streaming line counts."""

    def test_count_lines(self, write_log):
        path = write_log("access_log", ["one", "two", "", "four"])
        assert count_lines(path) == 4

    def test_count_matches_iteration(self, log_dir):
        path = log_dir / "access_log"
        path.write_bytes(b"one\r\ntwo\nthree")
        assert count_lines(path) == 3
        assert len(list(iter_lines(path))) == 3

    def test_describe_files(self, write_log):
        path = write_log("access_log", ["one", "two"])
        assert list(describe_files([path])) == [(path, path.stat().st_size, 2)]

    def test_describe_missing_file(self, log_dir):
        with pytest.raises(FatalInputError):
            list(describe_files([log_dir / "gone"]))

    def test_undecodable_bytes_are_replaced(self, log_dir):
        path = log_dir / "access_log"
        path.write_bytes(b"caf\xe9\n")
        assert list(iter_lines(path)) == ["caf\ufffd\n"]

"""Unit tests for workspace_mcp.reading module."""

import pytest

from workspace_mcp.exceptions import PathEscapeError, SizeLimitExceededError, WorkspaceIOError
from workspace_mcp.reading import read_file


@pytest.fixture
def long_file(temp_workspace):
    """600-line file with no trailing newline."""
    target = temp_workspace / "long.txt"
    target.write_text("\n".join(f"line {i}" for i in range(1, 601)))
    return target


@pytest.mark.unit
@pytest.mark.reading
class TestReadFile:
    """Tests for read_file pagination."""

    def test_default_window_truncates(self, temp_workspace, long_file):
        """Without a limit, 500 lines are returned and the result is truncated."""
        result = read_file(temp_workspace, "long.txt")

        assert result.total_lines == 600
        assert result.start_line == 1
        assert result.end_line == 500
        assert result.truncated is True
        assert len(result.content.split("\n")) == 500

    def test_explicit_limit_is_not_truncation(self, temp_workspace, long_file):
        result = read_file(temp_workspace, "long.txt", offset=501, limit=200)

        assert result.start_line == 501
        assert result.end_line == 600
        assert result.truncated is False
        assert result.content.split("\n")[0] == " 501\tline 501"

    def test_explicit_small_limit_not_truncated(self, temp_workspace, long_file):
        result = read_file(temp_workspace, "long.txt", limit=10)

        assert result.end_line == 10
        assert result.truncated is False

    def test_line_number_format(self, temp_workspace):
        (temp_workspace / "a.txt").write_text("alpha\nbeta")

        result = read_file(temp_workspace, "a.txt")

        assert result.content == "   1\talpha\n   2\tbeta"

    def test_width_grows_with_line_numbers(self, temp_workspace):
        (temp_workspace / "big.txt").write_text("\n".join(str(i) for i in range(1, 10002)))

        result = read_file(temp_workspace, "big.txt", offset=10000, limit=2)

        assert result.content == "10000\t10000\n10001\t10001"

    def test_trailing_newline_counts_as_final_empty_line(self, temp_workspace):
        (temp_workspace / "a.txt").write_text("one\ntwo\n")

        result = read_file(temp_workspace, "a.txt")

        assert result.total_lines == 3

    @pytest.mark.parametrize("offset,limit", [(0, None), (-5, None), (1, 0), (1, -3)])
    def test_values_below_one_clamp(self, temp_workspace, offset, limit):
        (temp_workspace / "a.txt").write_text("one\ntwo\nthree")

        result = read_file(temp_workspace, "a.txt", offset=offset, limit=limit)

        assert result.start_line == 1
        assert result.end_line >= 1

    def test_offset_past_end(self, temp_workspace):
        (temp_workspace / "a.txt").write_text("one\ntwo")

        result = read_file(temp_workspace, "a.txt", offset=50)

        assert result.content == ""
        assert result.start_line == 50
        assert result.end_line == 2
        assert result.truncated is False

    def test_size_ceiling(self, temp_workspace):
        (temp_workspace / "big.bin").write_text("x" * 2048)

        with pytest.raises(SizeLimitExceededError, match="offset/limit"):
            read_file(temp_workspace, "big.bin", max_bytes=1024)

    def test_missing_file(self, temp_workspace):
        with pytest.raises(WorkspaceIOError, match="not found"):
            read_file(temp_workspace, "missing.txt")

    def test_directory_is_not_a_file(self, sample_files):
        with pytest.raises(WorkspaceIOError, match="not a file"):
            read_file(sample_files, "src")

    def test_invalid_utf8(self, temp_workspace):
        (temp_workspace / "bin.dat").write_bytes(b"\xff\xfe\x00binary")

        with pytest.raises(WorkspaceIOError, match="UTF-8"):
            read_file(temp_workspace, "bin.dat")

    def test_escape_rejected(self, temp_workspace):
        with pytest.raises(PathEscapeError):
            read_file(temp_workspace, "../../etc/passwd")

    def test_leading_slash_path(self, sample_files):
        result = read_file(sample_files, "/src/pkg/mod.py")

        assert result.path == "src/pkg/mod.py"
        assert "VALUE = 1" in result.content

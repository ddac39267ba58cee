"""Unit tests for workspace_mcp.sandbox and workspace_mcp.allowlist."""

from pathlib import Path

import pytest

from workspace_mcp.allowlist import glob_to_regex, is_path_allowed
from workspace_mcp.exceptions import PathEscapeError
from workspace_mcp.sandbox import relative_to_root, resolve_path

ROOT = Path("/ws")


@pytest.mark.unit
@pytest.mark.sandbox
class TestResolvePath:
    """Tests for resolve_path."""

    @pytest.mark.parametrize("alias", ["", "/", ".", "  ", " / "])
    def test_root_aliases_resolve_to_root(self, alias):
        """Empty string, "/" and "." all mean the workspace root."""
        assert resolve_path(ROOT, alias) == ROOT

    def test_relative_path(self):
        """Plain relative paths resolve under the root."""
        assert resolve_path(ROOT, "src/app.py") == ROOT / "src" / "app.py"

    def test_leading_separator_is_root_relative(self):
        """A single leading "/" is stripped, not treated as the filesystem root."""
        assert resolve_path(ROOT, "/src/app.py") == ROOT / "src" / "app.py"

    def test_internal_parent_segments_collapse(self):
        """Parent segments that stay inside the root are allowed."""
        assert resolve_path(ROOT, "src/../docs/guide.md") == ROOT / "docs" / "guide.md"

    def test_parent_back_to_root(self):
        """A path that collapses to the root itself is accepted."""
        assert resolve_path(ROOT, "src/..") == ROOT

    def test_double_dot_inside_filename_is_allowed(self):
        """".." inside a segment is not a traversal."""
        assert resolve_path(ROOT, "file..name.swift") == ROOT / "file..name.swift"
        assert resolve_path(ROOT, "a/..b/c..") == ROOT / "a" / "..b" / "c.."

    @pytest.mark.parametrize(
        "raw_path",
        [
            "..",
            "../etc/passwd",
            "/../etc/passwd",
            "src/../../outside",
            "src/../../../etc/passwd",
            "//etc/passwd",
        ],
    )
    def test_escapes_are_rejected(self, raw_path):
        """Paths that leave the root raise PathEscapeError naming the input."""
        with pytest.raises(PathEscapeError) as exc_info:
            resolve_path(ROOT, raw_path)

        assert exc_info.value.raw_path == raw_path
        assert raw_path in str(exc_info.value)
        assert exc_info.value.code == "path_escape"

    def test_sibling_with_shared_prefix_is_rejected(self):
        """"/ws-other" is not inside "/ws" even though it shares a prefix."""
        with pytest.raises(PathEscapeError):
            resolve_path(ROOT, "../ws-other/file.txt")

    def test_no_filesystem_access(self, tmp_path):
        """Resolution works for paths that do not exist."""
        resolved = resolve_path(tmp_path, "does/not/exist.txt")
        assert resolved == tmp_path / "does" / "not" / "exist.txt"
        assert not resolved.exists()

    def test_escape_is_logged(self, caplog):
        """Escape attempts are logged as warnings."""
        with caplog.at_level("WARNING"):
            with pytest.raises(PathEscapeError):
                resolve_path(ROOT, "../secret")

        assert any("../secret" in record.message for record in caplog.records)


@pytest.mark.unit
@pytest.mark.sandbox
class TestRelativeToRoot:
    """Tests for relative_to_root."""

    def test_root_maps_to_empty_string(self):
        assert relative_to_root(ROOT, ROOT) == ""

    def test_nested_path_uses_posix_separators(self):
        assert relative_to_root(ROOT, ROOT / "src" / "pkg" / "mod.py") == "src/pkg/mod.py"


@pytest.mark.unit
@pytest.mark.sandbox
class TestAllowlist:
    """Tests for glob allowlist matching."""

    @pytest.mark.parametrize(
        "path",
        ["src/a.py", "src/pkg/a.py", "src/pkg/deep/er/a.py"],
    )
    def test_double_star_matches_zero_or_more_segments(self, path):
        """src/**/*.py matches files directly in src and in any subdirectory."""
        assert is_path_allowed(path, ["src/**/*.py"])

    def test_double_star_does_not_match_other_extensions(self):
        assert not is_path_allowed("src/pkg/a.txt", ["src/**/*.py"])

    def test_single_star_does_not_cross_separator(self):
        """"*" matches within a single segment only."""
        assert is_path_allowed("src/a.py", ["src/*.py"])
        assert not is_path_allowed("src/pkg/a.py", ["src/*.py"])

    def test_question_mark_matches_one_character(self):
        assert is_path_allowed("v1.txt", ["v?.txt"])
        assert not is_path_allowed("v10.txt", ["v?.txt"])
        assert not is_path_allowed("v/.txt", ["v?.txt"])

    def test_full_match_required(self):
        """A pattern must cover the whole path, not a prefix or substring."""
        assert not is_path_allowed("src/a.py.bak", ["src/*.py"])
        assert not is_path_allowed("other/src/a.py", ["src/*.py"])

    def test_trailing_double_star_matches_everything_below(self):
        assert is_path_allowed("src/a.py", ["src/**"])
        assert is_path_allowed("src/pkg/deep/file.md", ["src/**"])
        assert not is_path_allowed("docs/a.md", ["src/**"])

    def test_regex_metacharacters_are_literal(self):
        """Characters like "." "+" "(" are matched literally."""
        assert is_path_allowed("notes(1)+.md", ["notes(1)+.md"])
        assert not is_path_allowed("notesX1X+.md", ["notes(1)+.md"])
        assert not is_path_allowed("aXmd", ["a.md"])

    def test_case_sensitive(self):
        assert not is_path_allowed("SRC/a.py", ["src/*.py"])

    def test_empty_allowlist_rejects_everything(self):
        assert not is_path_allowed("src/a.py", [])

    def test_any_pattern_may_match(self):
        patterns = ["docs/*.md", "src/**/*.py"]
        assert is_path_allowed("src/pkg/mod.py", patterns)
        assert is_path_allowed("docs/guide.md", patterns)
        assert not is_path_allowed("README.md", patterns)

    def test_glob_to_regex_is_anchored(self):
        regex = glob_to_regex("*.py")
        assert regex.match("a.py")
        assert not regex.match("a.pyc")

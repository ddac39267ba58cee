"""Tests for search_workspace against a real ripgrep process."""

import sys

import pytest

from workspace_mcp.exceptions import InvalidPatternError, PathEscapeError, WorkspaceIOError
from workspace_mcp.search import run_ripgrep, search_workspace


@pytest.mark.unit
@pytest.mark.search
class TestRipgrepProcessErrors:
    """Tests that do not need ripgrep installed."""

    @pytest.mark.asyncio
    async def test_missing_executable(self, temp_workspace):
        with pytest.raises(WorkspaceIOError, match="not found"):
            await run_ripgrep(["--json", "--", "x", "."], temp_workspace, "no-such-rg-binary")

    @pytest.mark.asyncio
    async def test_unknown_output_mode(self, sample_files):
        with pytest.raises(ValueError):
            await search_workspace(sample_files, "hello", output_mode="lines")

    @pytest.mark.asyncio
    async def test_escaping_search_path(self, sample_files):
        with pytest.raises(PathEscapeError):
            await search_workspace(sample_files, "hello", path="../..")

    @pytest.mark.asyncio
    async def test_missing_search_path(self, sample_files):
        with pytest.raises(WorkspaceIOError, match="path not found"):
            await search_workspace(sample_files, "hello", path="nowhere")


@pytest.fixture
def fake_ripgrep(tmp_path):
    """Build an executable that prints fixed output and exits with a given status."""

    def _make(stdout: str, stderr: str, status: int) -> str:
        script = tmp_path / "fake-rg"
        script.write_text(
            "#!/bin/sh\n"
            f"printf '%s' '{stdout}'\n"
            f"printf '%s' '{stderr}' >&2\n"
            f"exit {status}\n"
        )
        script.chmod(0o755)
        return str(script)

    return _make


@pytest.mark.unit
@pytest.mark.search
@pytest.mark.skipif(sys.platform == "win32", reason="Unix-specific test")
class TestRipgrepExitStatus:
    """Exit status handling of run_ripgrep."""

    @pytest.mark.asyncio
    async def test_no_matches(self, temp_workspace, fake_ripgrep):
        rg = fake_ripgrep("", "", 1)

        assert await run_ripgrep(["x"], temp_workspace, rg) == ([], False)

    @pytest.mark.asyncio
    async def test_partial_errors_keep_output(self, temp_workspace, fake_ripgrep, caplog):
        rg = fake_ripgrep('{"type":"end"}', "locked.txt: Permission denied", 2)

        with caplog.at_level("WARNING"):
            lines, truncated = await run_ripgrep(["x"], temp_workspace, rg)

        assert lines == ['{"type":"end"}']
        assert truncated is False
        assert any("Permission denied" in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_failure_without_output(self, temp_workspace, fake_ripgrep):
        rg = fake_ripgrep("", "something broke", 2)

        with pytest.raises(WorkspaceIOError, match="something broke"):
            await run_ripgrep(["x"], temp_workspace, rg)

    @pytest.mark.asyncio
    async def test_regex_parse_error(self, temp_workspace, fake_ripgrep):
        rg = fake_ripgrep("", "regex parse error: unclosed group", 2)

        with pytest.raises(InvalidPatternError):
            await run_ripgrep(["x"], temp_workspace, rg)


@pytest.mark.unit
@pytest.mark.search
@pytest.mark.requires_ripgrep
class TestSearchWorkspace:
    """End-to-end searches over sample files."""

    @pytest.mark.asyncio
    async def test_content_mode(self, sample_files):
        projection = await search_workspace(sample_files, "hello")

        files = {match.file for match in projection.results}
        assert files == {"src/util.py", "docs/guide.md"}
        assert all(not match.file.startswith("/") for match in projection.results)

    @pytest.mark.asyncio
    async def test_scoped_path(self, sample_files):
        projection = await search_workspace(sample_files, "hello", path="src")

        assert [match.file for match in projection.results] == ["src/util.py"]
        assert projection.results[0].line == 2

    @pytest.mark.asyncio
    async def test_glob_filter(self, sample_files):
        projection = await search_workspace(sample_files, "hello", glob="*.md", output_mode="files")

        assert [match.file for match in projection.results] == ["docs/guide.md"]

    @pytest.mark.asyncio
    async def test_count_mode(self, sample_files):
        (sample_files / "src" / "many.py").write_text("x = 1\nx = 2\nx = 3\n")

        projection = await search_workspace(sample_files, r"^x = \d", output_mode="count")

        assert [(c.file, c.count) for c in projection.results] == [("src/many.py", 3)]

    @pytest.mark.asyncio
    async def test_context_lines(self, sample_files):
        projection = await search_workspace(sample_files, "DEBUG", context_lines=1)

        match = projection.results[0]
        assert match.file == "src/app.py"
        assert match.context_before == ("",)
        assert match.context_after == ("",)

    @pytest.mark.asyncio
    async def test_case_insensitive(self, sample_files):
        sensitive = await search_workspace(sample_files, "debug")
        insensitive = await search_workspace(sample_files, "debug", case_insensitive=True)

        assert sensitive.total == 0
        assert insensitive.total == 1

    @pytest.mark.asyncio
    async def test_no_matches_is_empty(self, sample_files):
        projection = await search_workspace(sample_files, "zzz_no_such_text")

        assert projection.total == 0
        assert projection.results == ()

    @pytest.mark.asyncio
    async def test_pattern_starting_with_dash(self, sample_files):
        (sample_files / "flags.txt").write_text("use -rf carefully\n")

        projection = await search_workspace(sample_files, "-rf", output_mode="files")

        assert [m.file for m in projection.results] == ["flags.txt"]

    @pytest.mark.asyncio
    async def test_invalid_regex(self, sample_files):
        with pytest.raises(InvalidPatternError):
            await search_workspace(sample_files, "(unclosed")

    @pytest.mark.asyncio
    async def test_output_ceiling_truncates(self, sample_files):
        (sample_files / "big.txt").write_text("needle line\n" * 5000)

        projection = await search_workspace(sample_files, "needle", max_output_bytes=4096)

        assert projection.truncated is True
        assert 0 < projection.total < 5000

    @pytest.mark.asyncio
    async def test_pagination(self, sample_files):
        full = await search_workspace(sample_files, "hello")
        page = await search_workspace(sample_files, "hello", offset=1, limit=1)

        assert page.total == full.total
        assert page.results == full.results[1:2]

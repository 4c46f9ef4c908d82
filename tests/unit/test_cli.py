"""Unit tests for the render, lookup and records CLI commands."""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from offwiki.__main__ import cli
from offwiki.cli.lookup import lookup
from offwiki.cli.records import records
from offwiki.cli.render import render
from offwiki.utils.logger import configure_logging

from tests.conftest import SampleDump


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep .env files and ambient variables out of CLI runs."""
    for key in ("OFFWIKI_INDEX_PATH", "OFFWIKI_DUMP_PATH", "OFFWIKI_STRICT_MARKUP"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("OFFWIKI_LINK_PREFIX", "/wiki/")
    configure_logging("WARNING")
    with patch("offwiki.utils.config.load_dotenv"):
        yield


class TestRenderCLI:
    """Test the render command."""

    def test_render_help_shows_options(self) -> None:
        """Test that --help shows expected options."""
        result = CliRunner().invoke(render, ["--help"])

        assert result.exit_code == 0
        assert "--title" in result.output
        assert "--standalone" in result.output

    def test_render_by_title(self, sample_dump: SampleDump) -> None:
        """Test rendering an article to stdout."""
        result = CliRunner().invoke(
            render,
            [
                "--title",
                "Alpha",
                "--index",
                str(sample_dump.index_path),
                "--dump",
                str(sample_dump.dump_path),
            ],
        )

        assert result.exit_code == 0
        assert "<h1>Alpha</h1>" in result.output
        assert '<strong>Alpha</strong> is a <a href="/wiki/letter">letter</a>' in result.output

    def test_render_by_id_from_environment(
        self, sample_dump: SampleDump, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that archive paths fall back to environment variables."""
        monkeypatch.setenv("OFFWIKI_INDEX_PATH", str(sample_dump.index_path))
        monkeypatch.setenv("OFFWIKI_DUMP_PATH", str(sample_dump.dump_path))

        result = CliRunner().invoke(render, ["--id", "12", "--raw"])

        assert result.exit_code == 0
        assert "<h1>" not in result.output
        assert '<li id="ref-2">Second source</li>' in result.output

    def test_render_to_standalone_file(self, sample_dump: SampleDump, tmp_path: Path) -> None:
        """Test writing a complete HTML page to a file."""
        output = tmp_path / "alpha.html"

        result = CliRunner().invoke(
            render,
            [
                "--title",
                "Alpha",
                "--index",
                str(sample_dump.index_path),
                "--dump",
                str(sample_dump.dump_path),
                "--standalone",
                "-o",
                str(output),
            ],
        )

        assert result.exit_code == 0
        page = output.read_text(encoding="utf-8")
        assert page.startswith("<!DOCTYPE html>")
        assert "<title>Alpha</title>" in page

    def test_render_inline_citations(self, sample_dump: SampleDump) -> None:
        """Test that --inline leaves citations in place."""
        result = CliRunner().invoke(
            render,
            [
                "--title",
                "Beta: The Sequel",
                "--index",
                str(sample_dump.index_path),
                "--dump",
                str(sample_dump.dump_path),
                "--inline",
            ],
        )

        assert result.exit_code == 0
        assert "<ref>First source</ref>" in result.output
        assert "cite-1" not in result.output

    def test_render_not_found_aborts(self, sample_dump: SampleDump) -> None:
        """Test that a missing title exits non-zero."""
        result = CliRunner().invoke(
            render,
            [
                "--title",
                "Omega",
                "--index",
                str(sample_dump.index_path),
                "--dump",
                str(sample_dump.dump_path),
            ],
        )

        assert result.exit_code != 0
        assert "not found" in result.output

    def test_render_strict_fails_on_warnings(self, sample_dump: SampleDump) -> None:
        """Test that --strict turns markup warnings into a failure."""
        result = CliRunner().invoke(
            render,
            [
                "--title",
                "Gamma",
                "--index",
                str(sample_dump.index_path),
                "--dump",
                str(sample_dump.dump_path),
                "--strict",
            ],
        )

        assert result.exit_code != 0
        assert "markup warning" in result.output

    def test_render_requires_one_selector(self, sample_dump: SampleDump) -> None:
        """Test that giving no selector is a usage error."""
        result = CliRunner().invoke(render, ["--index", str(sample_dump.index_path)])

        assert result.exit_code == 2
        assert "exactly one of --title or --id" in result.output

    def test_render_without_dump_path_aborts(self, sample_dump: SampleDump) -> None:
        """Test that a missing dump location is reported."""
        result = CliRunner().invoke(
            render, ["--title", "Alpha", "--index", str(sample_dump.index_path)]
        )

        assert result.exit_code != 0
        assert "OFFWIKI_DUMP_PATH" in result.output


class TestLookupCLI:
    """Test the lookup command."""

    def test_lookup_middle_block(self, sample_dump: SampleDump) -> None:
        """Test that a non-final block reports its compressed length."""
        result = CliRunner().invoke(
            lookup, ["--title", "Alfa", "--index", str(sample_dump.index_path)]
        )

        block_a, block_b, _ = sample_dump.offsets
        assert result.exit_code == 0
        assert "Page ID: 11" in result.output
        assert f"Block offset: {block_a}" in result.output
        assert "Ordinal in block: 1" in result.output
        assert f"Block length: {block_b - block_a:,} bytes" in result.output

    def test_lookup_final_block(self, sample_dump: SampleDump) -> None:
        """Test that the final block is reported as undetermined."""
        result = CliRunner().invoke(lookup, ["--id", "13", "--index", str(sample_dump.index_path)])

        assert result.exit_code == 0
        assert "Block length: undetermined" in result.output

    def test_lookup_not_found_aborts(self, sample_dump: SampleDump) -> None:
        """Test that a missing id exits non-zero."""
        result = CliRunner().invoke(lookup, ["--id", "999", "--index", str(sample_dump.index_path)])

        assert result.exit_code != 0
        assert "not found" in result.output


def test_lookup_and_render_report_misses_alike(sample_dump: SampleDump) -> None:
    """Test that both commands share one lookup and its error message."""
    runner = CliRunner()
    index = str(sample_dump.index_path)

    looked_up = runner.invoke(lookup, ["--title", "Omega", "--index", index])
    rendered = runner.invoke(
        render, ["--title", "Omega", "--index", index, "--dump", str(sample_dump.dump_path)]
    )

    expected = "Error: Article with title 'Omega' not found in index"
    assert looked_up.exit_code != 0
    assert rendered.exit_code != 0
    assert expected in looked_up.output
    assert expected in rendered.output


class TestRecordsCLI:
    """Test the records command."""

    def test_records_lists_block(self, sample_dump: SampleDump) -> None:
        """Test listing the records of one block."""
        block_a, block_b, _ = sample_dump.offsets

        result = CliRunner().invoke(
            records,
            [
                "--offset",
                str(block_a),
                "--length",
                str(block_b - block_a),
                "--dump",
                str(sample_dump.dump_path),
            ],
        )

        assert result.exit_code == 0
        assert f"2 records in block at offset {block_a}" in result.output
        assert "[0] id=10 ns=0 Alpha" in result.output
        assert "[1] id=11 ns=0 Alfa -> Alpha" in result.output

    def test_records_to_end_of_file(self, sample_dump: SampleDump) -> None:
        """Test that omitting --length reads to the end of the dump."""
        _, _, block_c = sample_dump.offsets

        result = CliRunner().invoke(
            records, ["--offset", str(block_c), "--dump", str(sample_dump.dump_path)]
        )

        assert result.exit_code == 0
        assert "[0] id=13 ns=0 Gamma" in result.output

    def test_records_bad_offset_aborts(self, sample_dump: SampleDump) -> None:
        """Test that an offset inside a frame fails cleanly."""
        block_a, _, _ = sample_dump.offsets

        result = CliRunner().invoke(
            records,
            ["--offset", str(block_a + 3), "--length", "40", "--dump", str(sample_dump.dump_path)],
        )

        assert result.exit_code != 0
        assert "Error:" in result.output


def test_cli_group_lists_commands() -> None:
    """Test that the top-level group exposes every command."""
    result = CliRunner().invoke(cli, ["--help"])

    assert result.exit_code == 0
    for name in ("render", "lookup", "records"):
        assert name in result.output


def test_cli_version() -> None:
    """Test the version option."""
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output

"""Tests for the CLI entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from sourcelink.cli import PRETTY_ENVVAR, app
from sourcelink.errors import DuplicateAnchorError

runner = CliRunner()


class TestCLI:
    """Tests for the sourcelink CLI."""

    def test_stdout_default(self, sample_repo: Path) -> None:
        result = runner.invoke(app, [str(sample_repo)])
        assert result.exit_code == 0
        assert "// src/shop/Cart.java" in result.stdout
        assert "// src/shop/Status.java" in result.stdout
        assert 'typeTable([["shop.Cart","cl"]]);' in result.stdout
        assert 'typeTable([["shop.Status","en"]]);' in result.stdout

    def test_units_in_path_order(self, sample_repo: Path) -> None:
        result = runner.invoke(app, [str(sample_repo)])
        out = result.stdout
        assert out.index("Cart.java") < out.index("Item.java") < out.index("Status")

    def test_output_directory(self, sample_repo: Path, tmp_path: Path) -> None:
        out_dir = tmp_path / "site"
        result = runner.invoke(app, [str(sample_repo), "--output", str(out_dir)])
        assert result.exit_code == 0
        artifact = out_dir / "src" / "shop" / "Item.java.js"
        assert artifact.is_file()
        assert artifact.read_text(encoding="utf-8").startswith("typeTable(")
        assert "Wrote 3 artifact(s)" in result.output
        assert "typeTable(" not in result.stdout

    def test_pretty_flag(self, sample_repo: Path) -> None:
        result = runner.invoke(app, [str(sample_repo), "--pretty"])
        assert result.exit_code == 0
        assert "typeTable([\n  [\n" in result.stdout

    def test_pretty_envvar(self, sample_repo: Path) -> None:
        result = runner.invoke(app, [str(sample_repo)], env={PRETTY_ENVVAR: "1"})
        assert result.exit_code == 0
        assert "methodTable([\n" in result.stdout

    def test_single_file(self, sample_java_file: Path) -> None:
        result = runner.invoke(app, [str(sample_java_file)])
        assert result.exit_code == 0
        assert result.stdout.startswith("// Greeter.java\n")

    def test_language_filter(self, sample_repo: Path) -> None:
        result = runner.invoke(app, [str(sample_repo), "--language", "java"])
        assert result.exit_code == 0

    def test_unsupported_language(self, sample_repo: Path) -> None:
        result = runner.invoke(app, [str(sample_repo), "-l", "cobol"])
        assert result.exit_code == 1
        assert "unsupported language" in result.output

    def test_nonexistent_root(self, tmp_path: Path) -> None:
        result = runner.invoke(app, [str(tmp_path / "nope")])
        assert result.exit_code != 0

    def test_no_sources(self, tmp_path: Path) -> None:
        (tmp_path / "README.md").write_text("hello", encoding="utf-8")
        result = runner.invoke(app, [str(tmp_path)])
        assert result.exit_code == 1
        assert "No source files found" in result.output

    def test_all_over_size_limit(self, sample_repo: Path) -> None:
        result = runner.invoke(app, [str(sample_repo), "--max-file-size", "1"])
        assert result.exit_code == 1
        assert "size limit" in result.output

    def test_fast(self, sample_repo: Path) -> None:
        fast = runner.invoke(app, [str(sample_repo), "--fast"])
        slow = runner.invoke(app, [str(sample_repo)])
        assert fast.exit_code == 0
        assert fast.stdout == slow.stdout

    def test_verbose(self, sample_repo: Path) -> None:
        result = runner.invoke(app, [str(sample_repo), "--verbose"])
        assert result.exit_code == 0

    def test_render_error_skipped(self, sample_repo: Path) -> None:
        with patch(
            "sourcelink.cli.render_file",
            side_effect=DuplicateAnchorError("duplicate anchor 'A'"),
        ):
            result = runner.invoke(app, [str(sample_repo)])
        assert result.exit_code == 1
        assert "Warning" in result.output
        assert "No files could be rendered" in result.output

    def test_programming_error_not_swallowed(self, sample_repo: Path) -> None:
        with patch("sourcelink.cli.render_file", side_effect=TypeError("bug")):
            result = runner.invoke(app, [str(sample_repo)])
        assert result.exit_code == 1
        assert isinstance(result.exception, TypeError)

from __future__ import annotations

from typer.testing import CliRunner

from rsync_analyse.cli import app

from conftest import mk_output

runner = CliRunner()


def test_reads_file_and_prints_summary(tmp_path) -> None:
    log = tmp_path / "rsync.log"
    log.write_text(mk_output(">f+++++++++ a.txt", "*deleting b.txt"), encoding="utf-8")

    result = runner.invoke(app, [str(log)])

    assert result.exit_code == 0
    assert "RSYNC ANALYSIS SUMMARY" in result.output
    assert "Total items: 2" in result.output
    assert "Deletion" in result.output
    assert "a.txt" not in result.output


def test_lists_changes_from_stdin() -> None:
    result = runner.invoke(
        app, ["--changes"], input=mk_output(">f+++++++++ a.txt", "ERROR: [sender] x")
    )

    assert result.exit_code == 0
    assert "a.txt" in result.output
    assert "ERROR: [sender] x" in result.output


def test_unrecognized_input_exits_with_error() -> None:
    result = runner.invoke(app, ["-"], input="hello world\n")

    assert result.exit_code == 1
    assert "No rsync statistics found" in result.output


def test_missing_file_exits_with_error(tmp_path) -> None:
    result = runner.invoke(app, [str(tmp_path / "missing.log")])

    assert result.exit_code == 1
    assert "Cannot read input" in result.output

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from .analyser import RsyncOutputAnalyser
from .config import LOG_FORMAT
from .models import ChangeType, ItemizedChange
from .report import describe_statistics

app = typer.Typer(help="Summarize itemized rsync output")
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _read_input(path: Path | None) -> str:
    if path is None or str(path) == "-":
        return sys.stdin.read()
    return path.read_text(encoding="utf-8", errors="surrogateescape")


def _change_label(change: ItemizedChange) -> Text:
    badge = "deleting" if change.flags.is_deletion else change.flags.flag_string or "-"
    name = change.path
    if change.target is not None:
        name = f"{name} -> {change.target}"
    return Text.assemble(
        (f"{change.change_type.description:<9}", "cyan"),
        " ",
        (f"[{badge}]", "yellow"),
        " ",
        (name, "white"),
    )


@app.command()
def main(
    path: Path | None = typer.Argument(
        None,
        help="File holding rsync --itemize-changes --stats output (default: stdin)",
    ),
    changes: bool = typer.Option(
        False,
        "--changes/--no-changes",
        help="List every itemized change after the summary.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log parser decisions to stderr.",
    ),
) -> None:
    """Analyze rsync output and print a summary report."""
    _configure_logging(verbose)
    try:
        text = _read_input(path)
    except OSError as exc:
        console.print(f"[red]Cannot read input:[/red] {exc}")
        raise typer.Exit(1)

    analyser = RsyncOutputAnalyser()
    result = analyser.analyze(text)
    if result is None:
        console.print("[red]No rsync statistics found in input.[/red]")
        raise typer.Exit(1)

    console.print(analyser.summary(result), highlight=False)
    console.print()
    console.print(describe_statistics(result.statistics), highlight=False)

    counts = analyser.changes_by_type(result)
    table = Table(title="Changes by type")
    table.add_column("Type")
    table.add_column("Count", justify="right")
    for change_type in ChangeType:
        if counts.get(change_type):
            table.add_row(change_type.description, str(counts[change_type]))
    console.print(table)

    for message in result.errors:
        console.print(Text(message, style="red"))
    for message in result.warnings:
        console.print(Text(message, style="yellow"))

    if changes:
        for change in result.itemized_changes:
            console.print(_change_label(change))


if __name__ == "__main__":
    app()

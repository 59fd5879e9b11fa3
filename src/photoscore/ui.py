"""UI utilities for photoscore CLI."""

from __future__ import annotations

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from photoscore.scoring.types import AnalysisResult


def create_progress() -> Progress:
    """Create a standard progress bar for batch analysis.

    Returns:
        Configured Progress instance with spinner, description,
        bar, percentage, count, and elapsed time columns.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TextColumn("({task.completed}/{task.total})"),
        TimeElapsedColumn(),
        console=None,
    )


def score_table(result: AnalysisResult) -> Table:
    """Side-by-side table of technical and composition scores."""
    table = Table(title=f"Overall score: {result.display_score:.1f} / 10")
    table.add_column("Technical")
    table.add_column("", justify="right")
    table.add_column("Composition")
    table.add_column("", justify="right")

    tech = list(result.technical.as_dict().items())
    comp = list(result.composition.as_dict().items())
    for i in range(max(len(tech), len(comp))):
        row: list[str] = []
        for items in (tech, comp):
            if i < len(items):
                name, value = items[i]
                row.extend([name.replace("_", " "), f"{value:.1f}"])
            else:
                row.extend(["", ""])
        table.add_row(*row)
    return table


def print_result(result: AnalysisResult, console: Console | None = None) -> None:
    console = console or Console()
    console.print(score_table(result))

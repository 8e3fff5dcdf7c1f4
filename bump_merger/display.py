"""Rich terminal output for a merge pass."""

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .runner import Outcome, RunSummary

console = Console()

OUTCOME_STYLES = {
    Outcome.MERGED: "bold green",
    Outcome.DRY_RUN: "cyan",
    Outcome.SKIPPED_POLICY: "yellow",
    Outcome.SKIPPED_SIGNALS: "yellow",
    Outcome.MERGE_FAILED: "bold red",
}


def display_summary(summary: RunSummary, title: str = "Dependency PRs"):
    """Display one row per evaluated pull request and a totals line."""
    if not summary.outcomes:
        console.print("[yellow]No matching pull requests.[/yellow]")
        return

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("PR", width=6, justify="right")
    table.add_column("Title", max_width=50)
    table.add_column("Bump", width=6)
    table.add_column("Approved", width=8)
    table.add_column("Outcome")
    table.add_column("Detail", style="dim", max_width=40)

    for o in summary.outcomes:
        approved = Text("Yes", style="green") if o.approved else Text("-", style="dim")
        table.add_row(
            f"#{o.number}",
            Text(o.title),
            o.bump.value if o.bump else "-",
            approved,
            Text(o.outcome.value, style=OUTCOME_STYLES[o.outcome]),
            Text(o.detail),
        )

    console.print()
    console.print(table)
    console.print(
        f"\n  Total: {len(summary.outcomes)} pull requests, "
        f"[green]{summary.count(Outcome.MERGED)} merged[/green], "
        f"[red]{summary.count(Outcome.MERGE_FAILED)} failed[/red], "
        f"{summary.count(Outcome.SKIPPED_SIGNALS) + summary.count(Outcome.SKIPPED_POLICY)} skipped"
    )

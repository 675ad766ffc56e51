"""Rich-powered console output for patchprep."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from patchprep.checks import Advisory
from patchprep.preparer import PrepareResult
from patchprep.reviewers.ranker import RankedReviewerList


class Console:
    """Terminal output for patchprep using Rich.

    Progress goes to stdout, warnings and errors to stderr.
    """

    def __init__(self) -> None:
        self.console = RichConsole(highlight=False)
        self.err_console = RichConsole(stderr=True, highlight=False)

    def msg(self, message: str) -> None:
        """A pipeline stage announcement."""
        self.console.print(f"[green]{message}[/green]\n")

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.err_console.print(f"[red]✗[/red] {escape(message)}")

    def warning(self, message: str) -> None:
        self.err_console.print(f"[yellow]![/yellow] {escape(message)}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def advisory(self, advisory: Advisory) -> None:
        """Highlighted WARNING banner for a non-fatal finding."""
        self.err_console.print()
        self.err_console.print("[yellow]###\n### WARNING\n###[/yellow]")
        self.err_console.print(f"[yellow]>[/yellow] {escape(advisory.title)}")
        if advisory.detail:
            self.err_console.print(advisory.detail, markup=False)
        self.err_console.print()

    def show_reviewers(self, reviewers: RankedReviewerList) -> None:
        """Display ranked reviewers in a table."""
        if not reviewers:
            self.info("No reviewer suggestions (no existing lines were touched)")
            return

        table = Table(title="Suggested Reviewers", border_style="cyan")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Email", style="bold")
        table.add_column("Lines", justify="right", style="cyan")
        table.add_column("Recent", justify="center")

        for i, candidate in enumerate(reviewers, 1):
            table.add_row(
                str(i),
                escape(candidate.email),
                str(candidate.line_count),
                "[green]yes[/green]" if candidate.recent else "[dim]no[/dim]",
            )
        self.console.print(table)

    def show_result(self, result: PrepareResult) -> None:
        """Summary of a prepare run and the command to send it."""
        self.console.print(
            Panel(
                f"[bold]Topic:[/bold] {escape(result.topic)}\n"
                f"[bold]Tag:[/bold] {escape(result.tag)}\n"
                f"[bold]Commits:[/bold] {result.commit_count}\n"
                f"[bold]Patches:[/bold] {len(result.patch_files)} in {escape(str(result.patch_dir))}\n"
                f"[bold]Warnings:[/bold] {len(result.advisories)}",
                title=f"[bold]v{result.version}[/bold]",
                border_style="yellow" if result.advisories else "green",
            )
        )
        self.console.print("\nSend patch with:")
        self.console.print(result.send_command, markup=False, soft_wrap=True)

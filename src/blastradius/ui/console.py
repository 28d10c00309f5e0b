"""Rich-powered console output for blastradius."""

from __future__ import annotations

import logging

from rich.console import Console as RichConsole
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from blastradius.impact.summary import Summary


def configure_logging(verbose: bool = False, console: RichConsole | None = None) -> None:
    """Route blastradius logging through Rich."""
    handler = RichHandler(
        console=console or RichConsole(stderr=True),
        show_path=False,
        markup=False,
    )
    logger = logging.getLogger("blastradius")
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


class Console:
    """Terminal output for blastradius using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole()

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def show_summary(self, summary: Summary) -> None:
        """Display an impact summary: counts, commits, module chains."""
        self.console.print(
            Panel(
                f"[bold]Root:[/bold] {summary.root}\n"
                f"[bold]Since:[/bold] {summary.revision}\n"
                f"[bold]Modules:[/bold] {len(summary.modules)}\n"
                f"[bold]Files:[/bold] {len(summary.files)}\n"
                f"[bold]Commits:[/bold] {len(summary.revisions)}",
                title="[bold]Blast Radius[/bold]",
                border_style="red" if summary.modules else "green",
            )
        )

        if summary.revisions:
            table = Table(title="Commits", border_style="cyan")
            table.add_column("SHA", style="bold")
            table.add_column("Description")
            table.add_column("Modules", style="cyan")
            for rev in summary.revisions:
                table.add_row(
                    rev.sha[:12],
                    rev.description,
                    "\n".join(m.identity for m in rev.modules),
                )
            self.console.print(table)

        if summary.modules:
            tree = Tree(f"[bold cyan]{summary.root}[/bold cyan]")
            for module in summary.modules:
                label = f"[bold]{module.identity}[/bold]"
                if module.path_from_root and len(module.path_from_root) > 1:
                    via = " > ".join(module.path_from_root[1:-1])
                    if via:
                        label += f" [dim]via {via}[/dim]"
                tree.add(label)
            self.console.print(tree)

        if summary.files:
            self.console.print("\n[bold]Changed files:[/bold]")
            for f in summary.files:
                self.console.print(f"  [cyan]{f}[/cyan]")

    def show_path(self, path: list[str]) -> None:
        """Display an import chain, one hop per level."""
        tree = Tree(f"[bold cyan]{path[0]}[/bold cyan]")
        node = tree
        for part in path[1:]:
            node = node.add(f"[bold]{part}[/bold]")
        self.console.print(tree)

    def show_stats(self, stats: dict) -> None:
        """Display graph statistics in a table."""
        table = Table(title="Module Graph Statistics", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right", style="cyan")

        table.add_row("Root", str(stats.get("root", "")))
        table.add_row("Modules", str(stats.get("modules", 0)))
        table.add_row("Import edges", str(stats.get("edges", 0)))
        table.add_row("Import cycles", str(stats.get("cycles", 0)))
        table.add_row("Largest cycle", str(stats.get("largest_cycle", 0)))
        table.add_row("Modules using stdlib/foreign", str(stats.get("native_users", 0)))
        table.add_row("Acyclic", "yes" if stats.get("is_dag") else "no")

        self.console.print(table)

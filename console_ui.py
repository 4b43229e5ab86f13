#!/usr/bin/env python3
"""
Console UI Module using Rich

Styled output for Siope: verbose action lines, captured command output,
the catalog listing and the end-of-run summary.
"""

from typing import Any, Iterable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from auxiliary import pluralize


class ConsoleUI:
    """Console UI handler using Rich"""

    def __init__(self, force_terminal: Optional[bool] = None, console: Optional[Console] = None):
        """Initialize console with optional terminal forcing or an injected Console"""
        self.console = console or Console(force_terminal=force_terminal, highlight=False)

    # Basic styled output methods
    def print_success(self, message: str):
        """Print success message in green"""
        self.console.print(message, style="green")

    def print_error(self, message: str):
        """Print error message in red"""
        self.console.print(message, style="red bold")

    def print_info(self, message: str):
        """Print info message in cyan"""
        self.console.print(message, style="cyan")

    def print_header(self, title: str, subtitle: Optional[str] = None):
        """Print a header with optional subtitle"""
        if subtitle:
            header_text = f"[bold]{title}[/bold]\n[dim]{subtitle}[/dim]"
        else:
            header_text = f"[bold]{title}[/bold]"

        panel = Panel(header_text, box=box.ROUNDED, padding=(0, 1))
        self.console.print(panel)

    # Configuration display
    def show_configuration(self, config: dict[str, Any]):
        """Display configuration in a formatted table"""
        table = Table(show_header=False, box=box.SIMPLE)
        table.add_column("Setting", style="cyan dim", min_width=20, justify="right")
        table.add_column("Value", style="cyan", min_width=30)

        for key, value in config.items():
            if isinstance(value, list):
                value = ", ".join(str(v) for v in value) or "-"
            table.add_row(key, escape(str(value)))

        self.console.print(table)

    # Action output
    def print_action(self, line: str):
        """Print the log line of an action about to be performed"""
        self.console.print(escape(line), style="white")

    def print_command_result(self, application: str, success: bool, output: str, error: Optional[str] = None):
        """Echo captured command output and its status"""
        for line in output.rstrip().splitlines():
            self.console.print(f"  [dim]│[/dim] {escape(line)}")
        if success:
            self.console.print(f"  [green]✓[/green] [dim]{escape(application)}[/dim]")
        else:
            self.console.print(f"  [red]✗ {escape(application)}: {escape(error or 'failed')}[/red]")

    # Tables
    def show_catalog(self, rows: Iterable[tuple[str, str, str, str, bool]], title: str = "Opt-out Catalog"):
        """Show catalog rows (application, kind, action, platforms, applicable)"""
        table = Table(title=title, box=box.ROUNDED, show_lines=False)
        table.add_column("Application", style="cyan", min_width=18)
        table.add_column("Kind", style="dim", justify="center", min_width=7)
        table.add_column("Action", style="white", min_width=30)
        table.add_column("Platforms", style="dim", min_width=10)
        table.add_column("Here", justify="center", min_width=4)

        for application, kind, action, platforms, applicable in rows:
            mark = "[green]✓[/green]" if applicable else "[dim]-[/dim]"
            table.add_row(escape(application), kind, escape(action), platforms, mark)

        self.console.print(table)

    def show_run_summary(self, applied: int, simulated: int, failed: list[tuple[str, str]], skipped: int):
        """Show summary of a completed pass"""
        self.console.print()
        if simulated:
            self.print_info(f"Dry run: {pluralize(simulated, 'action')} would be applied")
        if applied:
            self.print_success(f"Applied {pluralize(applied, 'action')}")
        if failed:
            self.print_error(f"{pluralize(len(failed), 'action')} failed:")
            for application, error in failed:
                self.console.print(f"[red dim]  • {escape(application)}: {escape(error)}[/red dim]")
        if skipped:
            self.console.print(f"[dim]Skipped {pluralize(skipped, 'action')} (not applicable here)[/dim]")
        if not (applied or simulated or failed):
            self.print_info("Nothing to do.")

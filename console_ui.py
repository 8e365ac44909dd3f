#!/usr/bin/env python3
"""
Console UI Module using Rich

Colored output, spinners, tables and interactive prompts for jskill.
"""

from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.prompt import Confirm, Prompt
from rich.table import Table


class ConsoleUI:
    """Console UI handler using Rich"""

    def __init__(self, force_terminal: Optional[bool] = None, console: Optional[Console] = None):
        """Initialize console with optional terminal forcing"""
        self.console = console or Console(force_terminal=force_terminal, highlight=False)

    # Basic styled output methods
    def print_success(self, message: str):
        """Print success message in green"""
        self.console.print(message, style="green")

    def print_error(self, message: str):
        """Print error message in red"""
        self.console.print(message, style="red bold")

    def print_warning(self, message: str):
        """Print warning message in yellow"""
        self.console.print(message, style="yellow")

    def print_info(self, message: str):
        """Print info message in cyan"""
        self.console.print(message, style="cyan")

    def print_plain(self, message: str):
        """Print message in plain white"""
        self.console.print(message, style="white", markup=False)

    def print_header(self, title: str, subtitle: Optional[str] = None):
        """Print a header with optional subtitle"""
        if subtitle:
            header_text = f"[bold]{title}[/bold]\n[dim]{subtitle}[/dim]"
        else:
            header_text = f"[bold]{title}[/bold]"

        panel = Panel(header_text, box=box.ROUNDED, padding=(0, 1))
        self.console.print(panel)

    def print_lines(self, lines: list[str], style: str = "white"):
        """Print pre-rendered lines as-is"""
        for line in lines:
            self.console.print(line, style=style, markup=False, highlight=False)

    def show_configuration(self, config: dict[str, Any]):
        """Display configuration in a formatted table"""
        table = Table(show_header=False, box=box.SIMPLE)
        table.add_column("Setting", style="cyan dim", min_width=20, justify="right")
        table.add_column("Value", style="cyan", min_width=30)

        for key, value in config.items():
            if isinstance(value, list):
                value = ", ".join(str(v) for v in value)
            table.add_row(key, str(value))

        self.console.print(table)

    # Progress displays
    def create_progress(self) -> Progress:
        """Create a Rich progress context manager for batch operations"""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("({task.completed}/{task.total})"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )

    def create_activity_progress(self) -> Progress:
        """Create a Rich progress context manager for activity-only display (no counts)"""
        return Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )

    # Interactive prompts
    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask for yes/no confirmation"""
        return Confirm.ask(question, default=default, console=self.console)

    def prompt(self, question: str, default: Optional[str] = None, choices: Optional[list[str]] = None) -> str:
        """Ask for text input with optional default and choices"""
        return Prompt.ask(question, default=default, choices=choices, console=self.console)

    def select_from_list(self, items: list[str], title: str = "Select items") -> list[str]:
        """Allow user to select multiple items from a list, all selected by default

        Accepts 'all', 'none', comma separated numbers and ranges like 2-5.
        """
        if not items:
            return []

        self.console.print(f"\n[cyan]{title}:[/cyan]")
        for i, item in enumerate(items, 1):
            self.console.print(f"  {i:>3}. ", end="")
            self.console.print(item, markup=False)

        while True:
            response = self.prompt(
                "Enter numbers or ranges separated by commas (e.g., 1,3,5-7), 'all' or 'none'", default="all"
            )

            if response.strip().lower() == "all":
                return items.copy()
            if response.strip().lower() == "none":
                return []

            try:
                indices = parse_selection(response, len(items))
                return [items[i] for i in indices]
            except ValueError:
                self.print_error("Invalid selection. Please try again.")


def parse_selection(response: str, count: int) -> list[int]:
    """Turn '1,3,5-7' into sorted zero based indices

    Raises:
        ValueError: on anything that is not a number or range within 1..count
    """
    indices: set[int] = set()
    for part in response.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_text, end_text = part.split("-", 1)
            start, end = int(start_text), int(end_text)
        else:
            start = end = int(part)
        if start < 1 or end > count or start > end:
            raise ValueError(f"Selection out of range: {part}")
        indices.update(range(start - 1, end))
    return sorted(indices)

"""
Terminal UI for sqlsend.

Short status messages, the SQL being sent and result tables, rendered with
'rich'.
"""

from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.box import ROUNDED

from ..config import SQLSendConfig, get_config


class TerminalUI:
    """Rich terminal output for send commands."""

    def __init__(self, config: Optional[SQLSendConfig] = None, console: Optional[Console] = None):
        """Settings are read once from config."""
        config = config or get_config()
        self.console = console or Console(
            color_system="auto" if config.ui.use_colors else None
        )
        self.show_technical = config.ui.show_technical_details
        self.echo_sql = config.ui.echo_sql
        self.max_rows = config.ui.max_rows

    def print_success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str, technical_details: Optional[str] = None) -> None:
        """Technical details are only shown in debug mode."""
        self.console.print(f"[red]✗[/red] {message}")
        if technical_details and self.show_technical:
            self.console.print(f"[dim]{technical_details}[/dim]")

    def print_warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        self.console.print(f"[blue]ℹ[/blue] {message}")

    def print_sql(self, sql: str, session_label: str) -> None:
        """Echo the SQL about to run (if enabled)."""
        if self.echo_sql:
            self.console.print(Panel(
                Syntax(sql, "sql", theme="monokai", word_wrap=True),
                title=f"→ {session_label}",
                title_align="left",
                border_style="dim",
            ))

    def print_result(self, result: Any, title: Optional[str] = None) -> None:
        """Render whatever the executor returned."""
        if result is None:
            self.print_success("Done!")
            return

        if getattr(result, "success", True) is False:
            self.print_error(result.to_user_friendly())
            return

        columns = getattr(result, "columns", None)
        if not columns:
            friendly = getattr(result, "to_user_friendly", None)
            self.print_success(friendly() if friendly else str(result))
            return

        rows = list(result.rows)
        table = Table(title=title, box=ROUNDED, show_lines=False)
        for column in columns:
            table.add_column(str(column), overflow="fold")
        for row in rows[:self.max_rows]:
            table.add_row(*("NULL" if v is None else str(v) for v in row))
        self.console.print(table)

        if len(rows) > self.max_rows:
            self.console.print(f"[dim]... {len(rows) - self.max_rows} more row(s) not shown[/dim]")
        else:
            self.console.print(f"[dim]{result.to_user_friendly()}[/dim]")

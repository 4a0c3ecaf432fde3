"""
Connection commands for sqlsend.

Handles binding a buffer to a session and showing the current binding.
"""

from typing import Optional, TYPE_CHECKING

from ..errors import ErrorBoundary
from ..router import SessionHandle

if TYPE_CHECKING:
    from ..router import SessionRouter
    from ..ui.terminal import TerminalUI


class ConnectionCommands:
    """Commands for per-buffer session bindings."""

    def __init__(self, ui: "TerminalUI", router: "SessionRouter"):
        self.ui = ui
        self.router = router

    def set_connection(self, surface: str) -> Optional[SessionHandle]:
        """Prompt for a live session and bind the buffer to it."""
        with ErrorBoundary("set_connection") as boundary:
            handle = self.router.set_session(surface)

        if boundary.cancelled:
            self.ui.console.print("[dim]Cancelled[/dim]")
            return None
        if boundary.has_error:
            self.ui.print_error(boundary.error_context.user_message)
            return None

        self.ui.print_success(f"{surface} now sends to {handle.label}")
        return handle

    def show_connection(self, surface: str) -> Optional[SessionHandle]:
        """Show which session the buffer would send to."""
        bound = self.router.get_bound_session(surface)
        if bound is not None:
            self.ui.print_info(f"{surface} is connected to {bound.label}")
            return bound

        # Only look; resolve() would bind when persist_implicit is set
        candidates = self.router.candidates()
        if not candidates:
            self.ui.print_warning(f"{surface} is not connected and no session is live")
            return None

        latest = candidates[0]
        self.ui.print_info(f"{surface} is not connected; sends go to {latest.label} (most recent)")
        return latest.handle

    def list_sessions(self) -> None:
        """Display live sessions, most recent first."""
        candidates = self.router.candidates()
        if not candidates:
            self.ui.print_info("No live sessions.")
            return

        self.ui.console.print("\n[bold cyan]Live Sessions[/bold cyan]\n")
        for candidate in candidates:
            where = candidate.handle.surface or "?"
            self.ui.console.print(f"  [green]●[/green] [bold]{candidate.label}[/bold]")
            self.ui.console.print(f"    [dim]Surface: {where}[/dim]")
        self.ui.console.print()

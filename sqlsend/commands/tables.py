"""
Table commands for sqlsend.
"""

from typing import Optional, TYPE_CHECKING

from ..errors import ErrorBoundary

if TYPE_CHECKING:
    from ..dispatch import EditSurface
    from ..tables import TableNavigator
    from ..ui.terminal import TerminalUI


class TableCommands:
    """Open the table named under the cursor."""

    def __init__(self, ui: "TerminalUI", navigator: "TableNavigator"):
        self.ui = ui
        self.navigator = navigator

    def open_table_at_point(self, surface: "EditSurface") -> Optional[str]:
        with ErrorBoundary("open_table") as boundary:
            table = self.navigator.open_table_at(surface.name, surface.text, surface.cursor)

        if boundary.cancelled:
            return None
        if boundary.has_error:
            self.ui.print_error(boundary.error_context.user_message)
            return None
        return table

"""
Send commands for sqlsend.

Handles sending a statement, paragraph, line, region or the whole buffer
and reporting the outcome.
"""

from typing import Optional, Tuple, TYPE_CHECKING

from ..boundary import UnitKind
from ..dispatch import DispatchOutcome, DispatchStatus, EditSurface

if TYPE_CHECKING:
    from ..dispatch import SQLDispatcher
    from ..ui.terminal import TerminalUI


class SendCommands:
    """Commands that dispatch SQL from a buffer."""

    def __init__(self, ui: "TerminalUI", dispatcher: "SQLDispatcher"):
        self.ui = ui
        self.dispatcher = dispatcher

    def send(
        self,
        surface: EditSurface,
        unit: UnitKind,
        region: Optional[Tuple[int, int]] = None,
        choose: bool = False,
    ) -> DispatchOutcome:
        """Send a unit and report the outcome."""
        outcome = self.dispatcher.send(surface, unit, region=region, choose=choose)
        self.report(outcome)
        return outcome

    def send_statement(self, surface: EditSurface) -> DispatchOutcome:
        return self.send(surface, UnitKind.STATEMENT)

    def send_paragraph(self, surface: EditSurface) -> DispatchOutcome:
        return self.send(surface, UnitKind.PARAGRAPH)

    def send_line(self, surface: EditSurface) -> DispatchOutcome:
        return self.send(surface, UnitKind.LINE)

    def send_region(
        self,
        surface: EditSurface,
        region: Optional[Tuple[int, int]] = None,
    ) -> DispatchOutcome:
        return self.send(surface, UnitKind.REGION, region=region)

    def send_buffer(self, surface: EditSurface) -> DispatchOutcome:
        return self.send(surface, UnitKind.BUFFER)

    def report(self, outcome: DispatchOutcome) -> None:
        """Print the outcome of a send."""
        if outcome.status is DispatchStatus.SKIPPED:
            self.ui.print_info(outcome.message)
            return

        if outcome.status is DispatchStatus.CANCELLED:
            self.ui.console.print("[dim]Cancelled[/dim]")
            return

        if outcome.status is DispatchStatus.FAILED:
            error = outcome.error
            self.ui.print_error(
                error.user_message,
                technical_details=error.traceback_str or error.technical_message,
            )
            if error.suggested_action:
                self.ui.print_info(error.suggested_action)
            return

        self.ui.print_sql(outcome.sql, outcome.session.label)
        self.ui.print_result(outcome.result)

"""
Dispatching SQL from an edit surface.

Ties the pieces together for one user action: pick the session, find the
span, trim it, hand it to the environment's executor and remember what
happened.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Deque, List, Optional, Tuple, TYPE_CHECKING

from .boundary import UnitKind, UnitSpan, extract_unit_text, resolve
from .errors import (
    EmptySelection,
    ErrorBoundary,
    ErrorCategory,
    ErrorContext,
    format_error_for_log,
)
from .router import SessionHandle, SessionRouter

if TYPE_CHECKING:
    from .environment import Environment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditSurface:
    """An edit buffer as sqlsend sees it. Never mutated by the core."""
    name: str
    text: str
    cursor: int = 0
    mark: Optional[int] = None

    @property
    def region(self) -> Optional[Tuple[int, int]]:
        if self.mark is None:
            return None
        return (self.mark, self.cursor)


class DispatchStatus(Enum):
    """How a send ended."""
    EXECUTED = "executed"
    SKIPPED = "skipped"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class DispatchOutcome:
    """What a send did, for the caller to report."""
    status: DispatchStatus
    session: Optional[SessionHandle] = None
    span: Optional[UnitSpan] = None
    sql: Optional[str] = None
    result: Any = None
    error: Optional[ErrorContext] = None

    @property
    def message(self) -> str:
        if self.status is DispatchStatus.SKIPPED:
            return "Nothing to execute"
        if self.status is DispatchStatus.CANCELLED:
            return "Cancelled"
        if self.error is not None:
            return self.error.user_message
        return f"Sent to {self.session.label}" if self.session else "Sent"


@dataclass
class DispatchRecord:
    """One entry of the dispatch history."""
    surface: str
    unit: str
    status: str
    session: Optional[str] = None
    span: Optional[Tuple[int, int]] = None
    sql: Optional[str] = None
    error: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class DispatchHistory:
    """Bounded in-memory history of sends, oldest first."""

    def __init__(self, max_entries: int = 200):
        self._records: Deque[DispatchRecord] = deque(maxlen=max_entries)

    def append(self, record: DispatchRecord) -> None:
        self._records.append(record)

    def recent(self, count: int = 10) -> List[DispatchRecord]:
        if count <= 0:
            return []
        return list(self._records)[-count:]

    def for_surface(self, surface: str) -> List[DispatchRecord]:
        return [r for r in self._records if r.surface == surface]

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class SQLDispatcher:
    """Sends statements, paragraphs, lines, regions or buffers to a session."""

    def __init__(
        self,
        router: SessionRouter,
        environment: "Environment",
        history: Optional[DispatchHistory] = None,
        show_technical_details: bool = False,
    ):
        self.router = router
        self.environment = environment
        self.history = history if history is not None else DispatchHistory()
        self.show_technical_details = show_technical_details

    def send(
        self,
        surface: EditSurface,
        unit: UnitKind,
        region: Optional[Tuple[int, int]] = None,
        choose: bool = False,
    ) -> DispatchOutcome:
        """
        Send one unit of the surface's text.

        Args:
            surface: The buffer to send from
            unit: Which unit around the cursor to send
            region: Explicit (start, end), defaults to the surface's mark/cursor
            choose: Prompt for a session if the surface is unbound

        Returns:
            DispatchOutcome, never raises for routing or boundary failures
        """
        unit = UnitKind(unit)
        if unit is UnitKind.REGION and region is None:
            region = surface.region

        outcome = DispatchOutcome(status=DispatchStatus.FAILED)

        with ErrorBoundary(
            f"send_{unit.value}",
            show_technical_details=self.show_technical_details,
            default_category=ErrorCategory.EXECUTION,
        ) as boundary:
            outcome.session = self._session_for(surface.name, choose)
            outcome.span = resolve(unit, surface.text, surface.cursor, region)
            outcome.sql = extract_unit_text(outcome.span, surface.text)
            outcome.result = self._execute(outcome.session, outcome.sql)
            outcome.status = DispatchStatus.EXECUTED

        if boundary.has_error:
            self._settle_error(outcome, boundary)

        self._record(surface.name, unit.value, outcome)
        return outcome

    def send_string(
        self,
        surface: str,
        sql: str,
        choose: bool = False,
    ) -> DispatchOutcome:
        """Send literal SQL text on behalf of a surface."""
        outcome = DispatchOutcome(status=DispatchStatus.FAILED)

        with ErrorBoundary(
            "send_string",
            show_technical_details=self.show_technical_details,
            default_category=ErrorCategory.EXECUTION,
        ) as boundary:
            outcome.session = self._session_for(surface, choose)
            outcome.span = UnitSpan(0, len(sql))
            outcome.sql = extract_unit_text(outcome.span, sql)
            outcome.result = self._execute(outcome.session, outcome.sql)
            outcome.status = DispatchStatus.EXECUTED

        if boundary.has_error:
            self._settle_error(outcome, boundary)

        self._record(surface, "string", outcome)
        return outcome

    def _session_for(self, surface: str, choose: bool) -> SessionHandle:
        if choose:
            return self.router.resolve_or_prompt(surface)
        return self.router.resolve(surface)

    def _execute(self, handle: SessionHandle, sql: str) -> Any:
        logger.info(f"Executing on {handle.label}: {sql[:80]}")
        return self.environment.execute(handle, sql)

    def _settle_error(self, outcome: DispatchOutcome, boundary: ErrorBoundary) -> None:
        context = boundary.error_context
        if isinstance(context.original_exception, EmptySelection):
            outcome.status = DispatchStatus.SKIPPED
            logger.debug("Nothing to execute")
            return
        outcome.error = context
        if boundary.cancelled:
            outcome.status = DispatchStatus.CANCELLED
            return
        outcome.status = DispatchStatus.FAILED
        logger.warning(format_error_for_log(context))

    def _record(self, surface: str, unit: str, outcome: DispatchOutcome) -> None:
        self.history.append(DispatchRecord(
            surface=surface,
            unit=unit,
            status=outcome.status.value,
            session=outcome.session.label if outcome.session else None,
            span=outcome.span.as_tuple() if outcome.span else None,
            sql=outcome.sql,
            error=outcome.error.user_message if outcome.error else None,
        ))

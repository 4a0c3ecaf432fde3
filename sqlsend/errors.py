"""
Error handling for sqlsend.

Provides:
- Custom exception types for routing, boundary and table lookups
- Error boundary wrapper so a failing action never takes down the caller
- Log formatting for error contexts
"""

import traceback
from typing import Callable, Optional
from dataclasses import dataclass
from enum import Enum


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    LOW = "low"           # Skips and cancellations, nothing went wrong
    MEDIUM = "medium"     # The in-flight action was aborted
    HIGH = "high"         # Misconfiguration, every action will fail
    CRITICAL = "critical" # Should exit the application


class ErrorCategory(Enum):
    """Categories of errors for better handling."""
    CONFIGURATION = "configuration"
    SESSION = "session"
    SELECTION = "selection"
    SCHEMA = "schema"
    EXECUTION = "execution"
    USER_INPUT = "user_input"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Context information about an error."""
    category: ErrorCategory
    severity: ErrorSeverity
    operation: str
    user_message: str
    technical_message: str
    recoverable: bool = True
    suggested_action: Optional[str] = None
    original_exception: Optional[BaseException] = None
    traceback_str: Optional[str] = None


class SQLSendError(Exception):
    """Base exception for sqlsend errors."""

    category = ErrorCategory.UNKNOWN
    severity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        category: Optional[ErrorCategory] = None,
        severity: Optional[ErrorSeverity] = None,
        user_message: Optional[str] = None,
        recoverable: bool = True,
        suggested_action: Optional[str] = None
    ):
        super().__init__(message)
        if category is not None:
            self.category = category
        if severity is not None:
            self.severity = severity
        self.user_message = user_message or message
        self.recoverable = recoverable
        self.suggested_action = suggested_action


class ConfigurationError(SQLSendError):
    """Configuration-related errors."""
    category = ErrorCategory.CONFIGURATION
    severity = ErrorSeverity.HIGH


class NoActiveSession(SQLSendError):
    """No bound session and none discoverable for a surface."""
    category = ErrorCategory.SESSION

    def __init__(self, message: str = "No active SQL session", **kwargs):
        kwargs.setdefault(
            "suggested_action",
            "Open a database connection or run 'set connection' first."
        )
        super().__init__(message, **kwargs)


class NoCandidates(NoActiveSession):
    """Discovery returned no session-bearing surfaces."""

    def __init__(self, message: str = "No live SQL sessions to choose from", **kwargs):
        super().__init__(message, **kwargs)


class EmptySelection(SQLSendError):
    """The resolved span trims to empty text. A skip, not a failure."""
    category = ErrorCategory.SELECTION
    severity = ErrorSeverity.LOW

    def __init__(self, message: str = "Nothing to execute", **kwargs):
        super().__init__(message, **kwargs)


class TableNotFound(SQLSendError):
    """The identifier does not name a table on the resolved session."""
    category = ErrorCategory.SCHEMA

    def __init__(self, table: str, session_label: Optional[str] = None, **kwargs):
        self.table = table
        if session_label:
            message = f"No table named '{table}' in {session_label}"
        else:
            message = f"No table named '{table}'"
        super().__init__(message, **kwargs)


class OperationCancelled(SQLSendError):
    """The user aborted a prompt."""
    category = ErrorCategory.USER_INPUT
    severity = ErrorSeverity.LOW

    def __init__(self, message: str = "Cancelled", **kwargs):
        super().__init__(message, **kwargs)


class NoHostSurface(SQLSendError):
    """No environment surface hosts the resolved session."""
    category = ErrorCategory.SESSION

    def __init__(self, session_label: str, **kwargs):
        self.session_label = session_label
        super().__init__(f"No surface is showing session {session_label}", **kwargs)


class ErrorBoundary:
    """
    Catches whatever a single user action raises and keeps it as an
    ErrorContext, so commands can report it and carry on.

    Usage:
        with ErrorBoundary("open_table") as boundary:
            navigator.open_table_at(surface.name, surface.text, surface.cursor)

        if boundary.cancelled:
            return
        if boundary.has_error:
            ui.print_error(boundary.error_context.user_message)
    """

    def __init__(
        self,
        operation: str,
        on_error: Optional[Callable[[ErrorContext], None]] = None,
        show_technical_details: bool = False,
        default_category: ErrorCategory = ErrorCategory.UNKNOWN,
    ):
        """
        Args:
            operation: Name of the action, used in logs
            on_error: Called with the context once an error is caught
            show_technical_details: Keep the formatted traceback
            default_category: Category for exceptions sqlsend does not own
        """
        self.operation = operation
        self.on_error = on_error
        self.show_technical_details = show_technical_details
        self.default_category = default_category
        self.error_context: Optional[ErrorContext] = None

    @property
    def has_error(self) -> bool:
        return self.error_context is not None

    @property
    def cancelled(self) -> bool:
        """True if the user backed out of a prompt."""
        return self.has_error and isinstance(
            self.error_context.original_exception, (OperationCancelled, KeyboardInterrupt)
        )

    def __enter__(self) -> "ErrorBoundary":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None or issubclass(exc_type, SystemExit):
            return False

        self.error_context = self._to_context(exc_val, exc_tb)
        if self.on_error:
            self.on_error(self.error_context)
        return True

    def _to_context(self, exc: BaseException, exc_tb) -> ErrorContext:
        if isinstance(exc, SQLSendError):
            category, severity = exc.category, exc.severity
            user_message = exc.user_message
            suggested_action = exc.suggested_action
            recoverable = exc.recoverable
        elif isinstance(exc, KeyboardInterrupt):
            category, severity = ErrorCategory.USER_INPUT, ErrorSeverity.LOW
            user_message, suggested_action, recoverable = "Cancelled", None, True
        elif isinstance(exc, ValueError):
            # Bad offsets, regions and prompt answers
            category, severity = ErrorCategory.USER_INPUT, ErrorSeverity.LOW
            user_message, suggested_action, recoverable = f"Invalid value: {exc}", None, True
        else:
            category, severity = self.default_category, ErrorSeverity.MEDIUM
            user_message, suggested_action, recoverable = str(exc) or type(exc).__name__, None, True

        traceback_str = None
        if self.show_technical_details:
            traceback_str = "".join(traceback.format_exception(type(exc), exc, exc_tb))

        return ErrorContext(
            category=category,
            severity=severity,
            operation=self.operation,
            user_message=user_message,
            technical_message=f"{type(exc).__name__}: {exc}",
            recoverable=recoverable,
            suggested_action=suggested_action,
            original_exception=exc,
            traceback_str=traceback_str,
        )


def format_error_for_log(context: ErrorContext) -> str:
    """One header line per error, then the traceback if it was kept."""
    text = (
        f"[{context.severity.value.upper()}] {context.category.value}: "
        f"{context.operation} failed: {context.technical_message}"
    )
    if context.traceback_str:
        text += "\n" + context.traceback_str.rstrip()
    return text

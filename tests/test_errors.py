"""Tests for error handling module."""

import pytest

from sqlsend.errors import (
    ConfigurationError,
    EmptySelection,
    ErrorBoundary,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    NoActiveSession,
    NoCandidates,
    NoHostSurface,
    OperationCancelled,
    SQLSendError,
    TableNotFound,
    format_error_for_log,
)


class TestErrorTypes:
    """Test custom exception types."""

    def test_base_error_defaults(self):
        """Test SQLSendError defaults."""
        error = SQLSendError("boom")
        assert error.user_message == "boom"
        assert error.category is ErrorCategory.UNKNOWN
        assert error.severity is ErrorSeverity.MEDIUM
        assert error.recoverable is True

    def test_overrides(self):
        """Test category and severity can be overridden per instance."""
        error = SQLSendError("boom", category=ErrorCategory.SCHEMA, severity=ErrorSeverity.HIGH)
        assert error.category is ErrorCategory.SCHEMA
        assert error.severity is ErrorSeverity.HIGH

    def test_no_active_session(self):
        """Test NoActiveSession carries a suggestion."""
        error = NoActiveSession()
        assert error.category is ErrorCategory.SESSION
        assert error.suggested_action

    def test_no_candidates_is_session_error(self):
        assert isinstance(NoCandidates(), NoActiveSession)

    def test_skips_are_low_severity(self):
        """Test empty selections and cancels are not failures."""
        assert EmptySelection().severity is ErrorSeverity.LOW
        assert OperationCancelled().severity is ErrorSeverity.LOW

    def test_table_not_found(self):
        error = TableNotFound("users", "app")
        assert error.table == "users"
        assert error.user_message == "No table named 'users' in app"

    def test_no_host_surface(self):
        error = NoHostSurface("app")
        assert error.session_label == "app"
        assert "app" in error.user_message

    def test_configuration_error(self):
        assert ConfigurationError("bad").severity is ErrorSeverity.HIGH


class TestErrorBoundary:
    """Test ErrorBoundary context manager."""

    def test_no_error(self):
        with ErrorBoundary("op") as boundary:
            pass
        assert not boundary.has_error

    def test_sqlsend_error_converted(self):
        """Test SQLSendError fields carry into the context."""
        with ErrorBoundary("send") as boundary:
            raise NoActiveSession()
        ctx = boundary.error_context
        assert ctx.category is ErrorCategory.SESSION
        assert ctx.operation == "send"
        assert ctx.suggested_action
        assert not boundary.cancelled

    def test_cancel_detected(self):
        with ErrorBoundary("set_connection") as boundary:
            raise OperationCancelled()
        assert boundary.cancelled

    def test_keyboard_interrupt_is_cancel(self):
        with ErrorBoundary("prompt") as boundary:
            raise KeyboardInterrupt()
        assert boundary.cancelled
        assert boundary.error_context.user_message == "Cancelled"

    def test_value_error(self):
        with ErrorBoundary("op") as boundary:
            raise ValueError("bad offset")
        assert boundary.error_context.category is ErrorCategory.USER_INPUT
        assert "bad offset" in boundary.error_context.user_message

    def test_default_category(self):
        with ErrorBoundary("op", default_category=ErrorCategory.EXECUTION) as boundary:
            raise RuntimeError("lost")
        assert boundary.error_context.category is ErrorCategory.EXECUTION
        assert boundary.error_context.technical_message == "RuntimeError: lost"

    def test_traceback_when_requested(self):
        with ErrorBoundary("op", show_technical_details=True) as boundary:
            raise RuntimeError("lost")
        assert "Traceback" in boundary.error_context.traceback_str

    def test_on_error_called(self):
        seen = []
        with ErrorBoundary("op", on_error=seen.append):
            raise RuntimeError("x")
        assert len(seen) == 1

    def test_system_exit_propagates(self):
        with pytest.raises(SystemExit):
            with ErrorBoundary("op"):
                raise SystemExit(2)


class TestFormatting:
    """Test error formatting."""

    def make_context(self, **kwargs):
        defaults = dict(
            category=ErrorCategory.SESSION,
            severity=ErrorSeverity.MEDIUM,
            operation="send_statement",
            user_message="No active SQL session",
            technical_message="NoActiveSession: No active SQL session",
        )
        defaults.update(kwargs)
        return ErrorContext(**defaults)

    def test_log_format(self):
        text = format_error_for_log(self.make_context())
        assert text.startswith("[MEDIUM] session: send_statement")
        assert "NoActiveSession" in text

    def test_log_format_with_traceback(self):
        text = format_error_for_log(self.make_context(traceback_str="Traceback (most recent call last):\n  ...\n"))
        assert text.splitlines()[1] == "Traceback (most recent call last):"

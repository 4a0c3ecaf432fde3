"""
Environment collaborators for sqlsend.

The core never opens connections or renders results itself. It talks to an
Environment: something that knows which sessions are live, what tables they
have, how to run SQL on them and how to show a table.

SQLiteEnvironment is the environment the command line tool uses.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional, Protocol, Sequence, Set, Tuple

from .router import SessionHandle

logger = logging.getLogger(__name__)

# sqlite3 refuses more than one statement per execute() with this text
MULTI_STATEMENT_MESSAGE = "one statement at a time"


@dataclass
class ExecutionResult:
    """Result of running SQL on a session."""
    success: bool
    columns: List[str] = field(default_factory=list)
    rows: List[Tuple[Any, ...]] = field(default_factory=list)
    rowcount: int = -1
    error_message: Optional[str] = None

    @property
    def has_rows(self) -> bool:
        return bool(self.columns)

    def to_user_friendly(self) -> str:
        """Convert to user-friendly message."""
        if not self.success:
            return f"There was a problem: {self.error_message}"
        if self.has_rows:
            count = len(self.rows)
            return f"{count} row{'s' if count != 1 else ''}"
        if self.rowcount >= 0:
            return f"{self.rowcount} row{'s' if self.rowcount != 1 else ''} affected"
        return "Done!"


class Environment(Protocol):
    """What sqlsend needs from its host."""

    def enumerate_session_surfaces(self) -> Sequence[Tuple[str, SessionHandle]]:
        """Live sessions as (label, handle), most recently registered first."""
        ...

    def list_tables(self, handle: SessionHandle) -> Set[str]:
        ...

    def execute(self, handle: SessionHandle, sql: str) -> Any:
        ...

    def open_table_view(self, handle: SessionHandle, table: str) -> None:
        ...

    def find_host_surface(self, handle: SessionHandle) -> Optional[str]:
        """Name of the surface showing this session, if any."""
        ...


class SQLiteEnvironment:
    """SQLite databases opened in this process, each on its own surface."""

    def __init__(
        self,
        on_open_table: Optional[Callable[[SessionHandle, str], None]] = None
    ):
        """
        Initialize the environment.

        Args:
            on_open_table: Callback that shows a table, e.g. a terminal preview
        """
        self._sessions: List[SessionHandle] = []
        self.on_open_table = on_open_table

    # -- Lifecycle ------------------------------------------------------------

    def open(self, path: str, label: Optional[str] = None) -> SessionHandle:
        """Open a database and register it as the most recent session."""
        if path == ":memory:":
            database = path
            name = label or "memory"
        else:
            database = str(Path(path).expanduser())
            name = label or Path(database).stem

        connection = sqlite3.connect(database)
        handle = SessionHandle(label=name, connection=connection, surface=f"*SQL: {name}*")
        self._sessions.append(handle)
        logger.info(f"Opened session {name} ({database})")
        return handle

    def close(self, handle: SessionHandle) -> bool:
        """Close a session. Returns False if it was not open here."""
        if handle not in self._sessions:
            return False
        self._sessions.remove(handle)
        handle.connection.close()
        logger.info(f"Closed session {handle.label}")
        return True

    def close_all(self) -> None:
        for handle in list(self._sessions):
            self.close(handle)

    # -- Collaborators --------------------------------------------------------

    def enumerate_session_surfaces(self) -> List[Tuple[str, SessionHandle]]:
        return [(handle.label, handle) for handle in reversed(self._sessions)]

    def list_tables(self, handle: SessionHandle) -> Set[str]:
        cursor = handle.connection.execute(
            "SELECT name FROM sqlite_master WHERE type IN ('table', 'view')"
        )
        return {row[0] for row in cursor.fetchall()}

    def execute(self, handle: SessionHandle, sql: str) -> ExecutionResult:
        """Run SQL, reporting database errors in the result."""
        connection = handle.connection
        try:
            try:
                cursor = connection.execute(sql)
            except (sqlite3.ProgrammingError, sqlite3.Warning) as e:
                if MULTI_STATEMENT_MESSAGE not in str(e):
                    raise
                # More than one statement: run as a script, no result set
                connection.executescript(sql)
                connection.commit()
                return ExecutionResult(success=True)

            columns = [d[0] for d in cursor.description] if cursor.description else []
            rows = cursor.fetchall() if columns else []
            connection.commit()
            return ExecutionResult(
                success=True,
                columns=columns,
                rows=rows,
                rowcount=cursor.rowcount,
            )
        except (sqlite3.Error, sqlite3.Warning) as e:
            logger.debug(f"Execution failed on {handle.label}: {e}")
            return ExecutionResult(success=False, error_message=str(e))

    def open_table_view(self, handle: SessionHandle, table: str) -> None:
        if self.on_open_table is not None:
            self.on_open_table(handle, table)

    def find_host_surface(self, handle: SessionHandle) -> Optional[str]:
        if handle in self._sessions:
            return handle.surface
        return None

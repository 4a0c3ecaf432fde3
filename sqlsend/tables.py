"""
Table references under the cursor.

Checks that an identifier names a table on the resolved session and asks the
environment to open a view of it.
"""

import logging
import re
from typing import Callable, Iterable, TYPE_CHECKING

from .errors import NoHostSurface, TableNotFound
from .router import SessionHandle

if TYPE_CHECKING:
    from .environment import Environment
    from .router import SessionRouter

logger = logging.getLogger(__name__)

_IDENTIFIER_CHARS = re.compile(r'[\w$."`\[\]]')
_QUOTE_PAIRS = {'"': '"', "`": "`", "[": "]"}


def _split_qualified(name: str) -> list:
    """Split on dots that are not inside a quoted part."""
    parts = [""]
    closing = None
    for ch in name:
        if closing is not None:
            if ch == closing:
                closing = None
        elif ch in _QUOTE_PAIRS:
            closing = _QUOTE_PAIRS[ch]
        elif ch == ".":
            parts.append("")
            continue
        parts[-1] += ch
    return parts


def unqualify(name: str) -> str:
    """Unqualified part of a possibly schema-qualified, quoted table name."""
    part = _split_qualified(name.strip())[-1]
    if len(part) >= 2 and _QUOTE_PAIRS.get(part[0]) == part[-1]:
        part = part[1:-1]
    return part


def identifier_at(text: str, offset: int) -> str:
    """
    Identifier token touching the cursor.

    A cursor right after the last character of a word still counts, the way
    a caret at the end of a word does in an editor.
    """
    offset = max(0, min(offset, len(text)))
    start = offset
    while start > 0 and _IDENTIFIER_CHARS.match(text[start - 1]):
        start -= 1
    end = offset
    while end < len(text) and _IDENTIFIER_CHARS.match(text[end]):
        end += 1
    return text[start:end].strip(".")


def find_table(
    token: str,
    handle: SessionHandle,
    list_tables: Callable[[SessionHandle], Iterable[str]],
) -> str:
    """
    Match a token against the session's tables.

    Comparison is case-sensitive on the unqualified name.

    Returns:
        The table name as listed by the environment

    Raises:
        TableNotFound: if no listed table matches
    """
    wanted = unqualify(token)
    if not wanted:
        raise TableNotFound(token, handle.label)

    for table in sorted(list_tables(handle)):
        if unqualify(table) == wanted:
            return table

    raise TableNotFound(wanted, handle.label)


class TableNavigator:
    """Opens a view of the table named under the cursor."""

    def __init__(self, router: "SessionRouter", environment: "Environment"):
        self.router = router
        self.environment = environment

    def open_table(self, surface: str, token: str) -> str:
        """Open a view of the table named by token, returning its listed name."""
        handle = self.router.resolve(surface)
        return self._open(handle, token)

    def open_table_at(self, surface: str, text: str, offset: int) -> str:
        """Open a view of the table whose name is under the cursor."""
        handle = self.router.resolve(surface)
        token = identifier_at(text, offset)
        if not token:
            raise TableNotFound("", handle.label, user_message="No table name at point")
        return self._open(handle, token)

    def _open(self, handle: SessionHandle, token: str) -> str:
        table = find_table(token, handle, self.environment.list_tables)

        host = self.environment.find_host_surface(handle)
        if host is None:
            raise NoHostSurface(handle.label)

        logger.info(f"Opening table {table} of {handle.label} in {host}")
        self.environment.open_table_view(handle, table)
        return table

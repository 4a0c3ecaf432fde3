"""
Execution unit boundaries.

Given the full text of a buffer and a cursor offset, work out which span of
text a send command should dispatch. Statements are split purely lexically on
semicolons: a ';' inside a string literal or comment still ends a statement.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .errors import EmptySelection

logger = logging.getLogger(__name__)

DELIMITER = ";"


class UnitKind(Enum):
    """Granularity of text to execute."""
    STATEMENT = "statement"
    PARAGRAPH = "paragraph"
    LINE = "line"
    REGION = "region"
    BUFFER = "buffer"


@dataclass(frozen=True)
class UnitSpan:
    """Half-open (start, end) offsets into a document."""
    start: int
    end: int

    def __post_init__(self):
        if not 0 <= self.start <= self.end:
            raise ValueError(f"Invalid span ({self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def extract(self, text: str) -> str:
        """Return the raw text covered by this span."""
        return text[self.start:self.end]

    def as_tuple(self) -> Tuple[int, int]:
        return (self.start, self.end)


def _clamp(offset: int, text: str) -> int:
    return max(0, min(offset, len(text)))


def statement_bounds(text: str, cursor: int) -> UnitSpan:
    """
    Bounds of the semicolon-delimited statement around the cursor.

    The forward scan starts strictly after the cursor and keeps the ';' it
    finds. The backward scan looks strictly before the cursor and drops the
    ';' it finds. A ';' sitting exactly at the cursor therefore belongs to
    neither scan.
    """
    cursor = _clamp(cursor, text)

    found = text.find(DELIMITER, cursor + 1)
    end = found + 1 if found != -1 else len(text)

    found = text.rfind(DELIMITER, 0, cursor)
    start = found + 1 if found != -1 else 0

    return UnitSpan(start, end)


def _is_blank(line: str) -> bool:
    return not line.strip()


def paragraph_bounds(text: str, cursor: int) -> UnitSpan:
    """
    Bounds of the blank-line separated block containing the cursor.

    On a blank line the next block wins, then the previous one. Trailing
    newline of the block's last line is not part of the span.
    """
    cursor = _clamp(cursor, text)
    lines = text.splitlines(keepends=True)
    if not lines:
        return UnitSpan(cursor, cursor)

    # (start offset, line) pairs
    offsets = []
    position = 0
    for line in lines:
        offsets.append(position)
        position += len(line)

    index = len(lines) - 1
    for i, start in enumerate(offsets):
        if cursor < start + len(lines[i]):
            index = i
            break
    # A cursor after a trailing newline sits on an empty last line
    if cursor == len(text) and text.endswith(("\n", "\r")):
        index = len(lines)
        lines.append("")
        offsets.append(len(text))

    if _is_blank(lines[index]):
        following = next(
            (i for i in range(index + 1, len(lines)) if not _is_blank(lines[i])), None
        )
        if following is None:
            following = next(
                (i for i in range(index - 1, -1, -1) if not _is_blank(lines[i])), None
            )
        if following is None:
            return UnitSpan(cursor, cursor)
        index = following

    first = index
    while first > 0 and not _is_blank(lines[first - 1]):
        first -= 1
    last = index
    while last + 1 < len(lines) and not _is_blank(lines[last + 1]):
        last += 1

    start = offsets[first]
    end = offsets[last] + len(lines[last].rstrip("\r\n"))
    return UnitSpan(start, end)


def line_bounds(text: str, cursor: int) -> UnitSpan:
    """Bounds of the line containing the cursor, without its newline."""
    cursor = _clamp(cursor, text)
    start = text.rfind("\n", 0, cursor) + 1
    end = text.find("\n", cursor)
    if end == -1:
        end = len(text)
    if end > start and text[end - 1] == "\r":
        end -= 1
    return UnitSpan(start, end)


def region_bounds(text: str, region: Tuple[int, int]) -> UnitSpan:
    """Caller-supplied region, ordered and clamped to the document."""
    start, end = region
    if start > end:
        start, end = end, start
    return UnitSpan(_clamp(start, text), _clamp(end, text))


def resolve(
    unit: UnitKind,
    text: str,
    cursor: int = 0,
    region: Optional[Tuple[int, int]] = None,
) -> UnitSpan:
    """
    Resolve the span of text a unit covers.

    Args:
        unit: Granularity to resolve
        text: Full document text
        cursor: Cursor offset into text
        region: (start, end) for UnitKind.REGION

    Returns:
        UnitSpan with 0 <= start <= end <= len(text)
    """
    unit = UnitKind(unit)

    if unit is UnitKind.STATEMENT:
        span = statement_bounds(text, cursor)
    elif unit is UnitKind.PARAGRAPH:
        span = paragraph_bounds(text, cursor)
    elif unit is UnitKind.LINE:
        span = line_bounds(text, cursor)
    elif unit is UnitKind.REGION:
        if region is None:
            raise ValueError("A region send needs start and end offsets")
        span = region_bounds(text, region)
    else:
        span = UnitSpan(0, len(text))

    logger.debug(f"Resolved {unit.value} at {cursor} to {span.as_tuple()}")
    return span


def extract_unit_text(span: UnitSpan, text: str) -> str:
    """
    Text of a span with surrounding whitespace trimmed.

    Raises:
        EmptySelection: if nothing but whitespace is left
    """
    sql = span.extract(text).strip()
    if not sql:
        raise EmptySelection()
    return sql

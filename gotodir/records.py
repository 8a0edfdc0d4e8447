from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from .errors import DataError, InternalError

SEP = ";"
U32_MAX = 2**32 - 1

_UINT_RE = re.compile(r"^[0-9]+$")


def parse_uint(text: str) -> Optional[int]:
    """Parse a base-10 unsigned 32-bit integer; None when it is not one."""
    if not _UINT_RE.match(text):
        return None
    value = int(text)
    if value > U32_MAX:
        return None
    return value


@dataclass
class Record:
    """One store line: a directory, its shortcuts and its usage priority."""

    path: str
    shortcuts: list[str] = field(default_factory=list)
    priority: int = 0

    def has(self, shortcut: Optional[str]) -> bool:
        return shortcut is not None and shortcut in self.shortcuts

    def serialize(self, priority: Optional[int] = None) -> str:
        prio = self.priority if priority is None else priority
        return SEP.join([self.path, *self.shortcuts, str(prio)])


@dataclass
class ParsedLine:
    """
    Result of parsing one raw line.

    `record` is None for blank lines and for lines too short to hold a record.
    `error` carries the data problem found, if any; the record (with a 0 priority)
    is still usable when only the priority was bad.
    """

    raw: str
    record: Optional[Record] = None
    error: Optional[DataError] = None

    @property
    def blank(self) -> bool:
        return self.record is None and self.error is None


def parse_line(raw: str) -> ParsedLine:
    line = raw.strip()
    fields = line.split(SEP)
    if len(fields) < 2:
        if fields[0]:
            return ParsedLine(raw=line, error=DataError(f"Invalid line <{line}> found in directory library"))
        return ParsedLine(raw=line)

    priority = parse_uint(fields[-1])
    error = None
    if priority is None:
        error = DataError(f"Priority not an integer in <{line}>")
        priority = 0

    record = Record(path=fields[0], shortcuts=fields[1:-1], priority=priority)
    return ParsedLine(raw=line, record=record, error=error)


def bumped(priority: int, incr: int) -> int:
    """priority + incr, refusing to leave the unsigned 32-bit range."""
    total = priority + incr
    if total > U32_MAX:
        raise InternalError(f"Overflow on priority {priority} + {incr}")
    return total


def parse_store(text: str) -> list[ParsedLine]:
    return [parse_line(raw) for raw in text.split("\n")]

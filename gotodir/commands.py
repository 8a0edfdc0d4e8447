from __future__ import annotations

import posixpath
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import InternalError, UserError
from .records import parse_uint


class CommandKind(str, Enum):
    GET = "get"
    ADD = "add"
    EDIT = "edit"
    REMOVE = "remove"
    DELETE = "delete"
    DECREMENT = "decrement"
    RESET = "reset"


class ParseState(str, Enum):
    AWAITING_SHORTCUT = "awaiting_shortcut"
    AWAITING_PATH = "awaiting_path"
    AWAITING_AMOUNT = "awaiting_amount"
    COMPLETE = "complete"


KEYWORDS = {
    "-get": CommandKind.GET,
    "-add": CommandKind.ADD,
    "-edit": CommandKind.EDIT,
    "-remove": CommandKind.REMOVE,
    "-delete": CommandKind.DELETE,
    "-decrement": CommandKind.DECREMENT,
    "-reset": CommandKind.RESET,
}

# Variants whose slots are (shortcut, path), filled in that order
_SHORT_PATH = (CommandKind.GET, CommandKind.ADD, CommandKind.EDIT)


def last_segment(path: str) -> str:
    return path.replace("\\", "/").rstrip("/").split("/")[-1]


def normalize_path(value: str, cwd: str) -> str:
    """Make a user-supplied directory absolute and slash-separated."""
    path = value.replace("\\", "/")
    here = cwd.replace("\\", "/")
    if not path:
        path = here
    elif not path.startswith("/") and path[1:2] != ":":
        path = posixpath.join(here, path)
    path = posixpath.normpath(path)
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    return path


@dataclass
class Command:
    """
    One store command built incrementally from command-line tokens.

    Get/Add/Edit carry (shortcut, path); for Get the path is a sub-directory
    appended to the resolved directory. Remove carries a shortcut, Delete a path,
    Decrement an amount where 0 means "not given yet".
    """

    kind: CommandKind
    shortcut: Optional[str] = None
    path: Optional[str] = None
    amount: int = 0

    @classmethod
    def begin(cls, keyword: str) -> "Command":
        kind = KEYWORDS.get(keyword)
        if kind is None:
            raise InternalError(f"Trying to convert <{keyword}> to valid command.")
        return cls(kind=kind)

    @property
    def state(self) -> ParseState:
        if self.kind in _SHORT_PATH:
            if self.shortcut is None:
                return ParseState.AWAITING_SHORTCUT
            if self.path is None:
                return ParseState.AWAITING_PATH
            return ParseState.COMPLETE
        if self.kind == CommandKind.REMOVE:
            return ParseState.COMPLETE if self.shortcut else ParseState.AWAITING_SHORTCUT
        if self.kind == CommandKind.DELETE:
            return ParseState.COMPLETE if self.path else ParseState.AWAITING_PATH
        if self.kind == CommandKind.DECREMENT:
            return ParseState.COMPLETE if self.amount else ParseState.AWAITING_AMOUNT
        return ParseState.COMPLETE

    @property
    def complete(self) -> bool:
        return self.state == ParseState.COMPLETE

    def append(self, value: str, cwd: Optional[str] = None) -> None:
        """
        Fill the next empty slot with `value`.

        Add/Edit paths are normalised against `cwd` when it is given.
        Raises UserError, leaving the command unchanged, when the command takes no
        argument, is already complete, or the decrement is not an unsigned integer.
        """
        if self.kind == CommandKind.RESET:
            raise UserError("The <-reset> option takes no arguments.")

        state = self.state
        if state == ParseState.COMPLETE:
            raise UserError(f"Too many arguments for {self} command.")

        if state == ParseState.AWAITING_AMOUNT:
            amount = parse_uint(value)
            if amount is None:
                raise UserError("The value of <-decrement> must be an integer.")
            self.amount = amount
        elif state == ParseState.AWAITING_SHORTCUT:
            self.shortcut = value
        elif self.kind in (CommandKind.ADD, CommandKind.EDIT) and cwd is not None:
            self.path = normalize_path(value, cwd)
        else:
            self.path = value

    def append_default(self, cwd: str) -> None:
        """Complete a trailing Add/Edit with the current directory and its name."""
        if self.kind not in (CommandKind.ADD, CommandKind.EDIT):
            return
        if self.shortcut is None:
            self.append(last_segment(cwd))
        if self.path is None:
            self.append(cwd, cwd)

    def __str__(self) -> str:
        if self.kind in _SHORT_PATH:
            name = "goto" if self.kind == CommandKind.GET else self.kind.value
            return f"<{name} {self.shortcut or ''} {self.path or ''}>"
        if self.kind == CommandKind.REMOVE:
            return f"<rm {self.shortcut or ''}>"
        if self.kind == CommandKind.DELETE:
            return f"<del {self.path or ''}>"
        if self.kind == CommandKind.DECREMENT:
            return f"<decr {self.amount}>"
        return "<reset>"


def get(shortcut: Optional[str] = None, subpath: Optional[str] = None) -> Command:
    return Command(kind=CommandKind.GET, shortcut=shortcut, path=subpath)


def add(shortcut: str, path: str) -> Command:
    return Command(kind=CommandKind.ADD, shortcut=shortcut, path=path)


def edit(shortcut: str, path: str) -> Command:
    return Command(kind=CommandKind.EDIT, shortcut=shortcut, path=path)


def remove(shortcut: str) -> Command:
    return Command(kind=CommandKind.REMOVE, shortcut=shortcut)


def delete(path: str) -> Command:
    return Command(kind=CommandKind.DELETE, path=path)


def decrement(amount: int) -> Command:
    return Command(kind=CommandKind.DECREMENT, amount=amount)


def reset() -> Command:
    return Command(kind=CommandKind.RESET)

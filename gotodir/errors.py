from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ErrorKind(str, Enum):
    USER = "User Error"
    DATA = "Data Error"
    INTERNAL = "Internal Error"
    FILE = "File Error"


class Diagnostic(BaseModel):
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


class GotoError(Exception):
    """Base error; every failure carries the kind that decides how it is reported."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(kind=self.kind, message=self.message)


class UserError(GotoError):
    """Bad or missing arguments, shortcut collisions, unknown shortcuts."""

    kind = ErrorKind.USER


class DataError(GotoError):
    """A malformed line in the store file."""

    kind = ErrorKind.DATA


class InternalError(GotoError):
    """A logic fault in the tool itself."""

    kind = ErrorKind.INTERNAL


class FileError(GotoError):
    """Reading or writing the store or history file failed."""

    kind = ErrorKind.FILE


def is_fatal(diagnostics: list[Diagnostic]) -> bool:
    return any(d.kind in (ErrorKind.INTERNAL, ErrorKind.FILE) for d in diagnostics)

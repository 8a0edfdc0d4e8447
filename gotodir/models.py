from pydantic import BaseModel, Field
from typing import List, Optional

from .errors import Diagnostic


class ShortcutIn(BaseModel):
    shortcut: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1, description="Absolute directory path")


class RecordOut(BaseModel):
    path: str
    shortcuts: List[str]
    priority: int


class StateResult(BaseModel):
    records: List[RecordOut]
    text: str


class ResolveResult(BaseModel):
    found: bool
    path: Optional[str] = None
    diagnostics: List[Diagnostic] = Field(default_factory=list)


class MutationResult(BaseModel):
    ok: bool
    diagnostics: List[Diagnostic] = Field(default_factory=list)

"""Shortcut store update engine.

The store is a text file of `path;short1;short2;...;priority` lines. Every
command is applied in one pass over the records; the whole rewritten text is
written back once, after all commands ran.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .commands import Command, CommandKind
from .errors import Diagnostic, FileError, GotoError, InternalError, UserError
from .records import ParsedLine, Record, bumped, parse_store

logger = logging.getLogger(__name__)


@dataclass
class SearchState:
    exact_match: Optional[str] = None
    best_fallback: Optional[str] = None
    best_fallback_priority: int = 0

    def offer_fallback(self, record: Record) -> None:
        if record.priority > self.best_fallback_priority:
            self.best_fallback_priority = record.priority
            self.best_fallback = record.path

    @property
    def base(self) -> Optional[str]:
        return self.exact_match or self.best_fallback


@dataclass
class ScanResult:
    lines: list[str]
    success: bool
    state: SearchState
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)


@dataclass
class Outcome:
    text: str
    resolved: Optional[str] = None
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class _Known:
    shortcuts: set[str]
    paths: set[str]


@dataclass
class _Step:
    """What one record becomes: the line to emit (None drops the record), whether
    the command found its target here, and a problem to report."""

    line: Optional[str]
    matched: bool = False
    error: Optional[GotoError] = None


def _bump(record: Record, incr: int, shortcuts: Optional[list[str]] = None) -> _Step:
    """Matched record written with its raised priority, or unraised on overflow."""
    kept = Record(record.path, shortcuts or record.shortcuts, record.priority)
    try:
        return _Step(kept.serialize(bumped(record.priority, incr)), True)
    except InternalError as err:
        return _Step(kept.serialize(), True, err)


def _get(record: Record, cmd: Command, incr: int, state: SearchState) -> _Step:
    if record.has(cmd.shortcut):
        state.exact_match = record.path
        return _bump(record, incr)
    state.offer_fallback(record)
    return _Step(record.serialize())


def _add(record: Record, cmd: Command, incr: int, known: _Known) -> _Step:
    if record.has(cmd.shortcut):
        return _Step(record.serialize(), True, UserError(f"Shortcut {cmd.shortcut} already exists"))
    if record.path == cmd.path and cmd.shortcut not in known.shortcuts:
        return _bump(record, incr, [*record.shortcuts, cmd.shortcut])
    return _Step(record.serialize())


def _edit(record: Record, cmd: Command, known: _Known) -> _Step:
    if record.path == cmd.path:
        return _Step(record.serialize(), True, UserError(f"Path {cmd.path} already exists"))
    if record.has(cmd.shortcut) and cmd.path not in known.paths:
        return _Step(Record(cmd.path, record.shortcuts, record.priority).serialize(), True)
    return _Step(record.serialize())


def _remove(record: Record, cmd: Command) -> _Step:
    if not record.has(cmd.shortcut):
        return _Step(record.serialize())
    rest = [s for s in record.shortcuts if s != cmd.shortcut]
    if not rest:
        return _Step(None, True)
    return _Step(Record(record.path, rest, record.priority).serialize(), True)


def _delete(record: Record, cmd: Command) -> _Step:
    if record.path == cmd.path:
        return _Step(None, True)
    return _Step(record.serialize())


def _transform(record: Record, cmd: Command, incr: int, state: SearchState, known: _Known) -> _Step:
    if cmd.kind == CommandKind.GET:
        return _get(record, cmd, incr, state)
    if cmd.kind == CommandKind.ADD:
        return _add(record, cmd, incr, known)
    if cmd.kind == CommandKind.EDIT:
        return _edit(record, cmd, known)
    if cmd.kind == CommandKind.REMOVE:
        return _remove(record, cmd)
    if cmd.kind == CommandKind.DELETE:
        return _delete(record, cmd)
    if cmd.kind == CommandKind.DECREMENT:
        return _Step(record.serialize(max(record.priority - cmd.amount, 0)))
    if cmd.kind == CommandKind.RESET:
        return _Step(record.serialize(0))
    raise InternalError(f"Unhandled command {cmd}")


def _known(parsed: list[ParsedLine]) -> _Known:
    shortcuts: set[str] = set()
    paths: set[str] = set()
    for line in parsed:
        if line.record is not None:
            shortcuts.update(line.record.shortcuts)
            paths.add(line.record.path)
    return _Known(shortcuts, paths)


def scan(text: str, cmd: Command, incr: int) -> ScanResult:
    """Apply one command to every line of `text`; never raises for bad data."""
    parsed = parse_store(text)
    known = _known(parsed)
    state = SearchState()
    result = ScanResult(lines=[], success=False, state=state)

    # An incomplete Add/Edit cannot match anything; keep the store as it is
    inert = cmd.kind in (CommandKind.ADD, CommandKind.EDIT) and not cmd.complete
    if inert:
        result.diagnostics.append(UserError(f"Missing shortcut or path to {cmd}").to_diagnostic())

    for line in parsed:
        if line.blank:
            continue
        if line.error is not None:
            result.diagnostics.append(line.error.to_diagnostic())
        if result.success or inert or line.record is None:
            result.lines.append(line.raw)
            continue

        try:
            step = _transform(line.record, cmd, incr, state, known)
        except GotoError as err:
            step = _Step(line.raw, error=err)
        if step.error is not None:
            result.diagnostics.append(step.error.to_diagnostic())

        if step.matched:
            logger.debug(f"✅ {cmd} matched {line.record.path}")
            result.success = True
        if step.line is not None:
            result.lines.append(step.line)

    return result


def _finish(cmd: Command, scanned: ScanResult) -> tuple[Optional[str], Optional[GotoError]]:
    """Turn a finished scan into the resolved path, extra store line or report."""
    if cmd.kind == CommandKind.GET:
        base = scanned.state.base
        error = None
        if cmd.shortcut is not None and not scanned.success:
            error = UserError(f"Shortcut {cmd.shortcut} not found")
        if not base:
            return None, error or UserError("No directory registered yet")
        return (f"{base}/{cmd.path}" if cmd.path else base), error

    if not cmd.complete:
        if cmd.kind in (CommandKind.REMOVE, CommandKind.DELETE):
            return None, UserError(f"Missing argument to {cmd}")
        return None, None
    if scanned.success:
        return None, None
    if cmd.kind in (CommandKind.ADD, CommandKind.EDIT):
        scanned.lines.append(Record(cmd.path, [cmd.shortcut], 0).serialize())
        return None, None
    if cmd.kind == CommandKind.REMOVE:
        return None, UserError(f"Failed to remove shortcut {cmd.shortcut}: not found")
    if cmd.kind == CommandKind.DELETE:
        return None, UserError(f"Failed to delete path {cmd.path}: not found")
    return None, None


def run_commands(text: str, commands: list[Command], incr: int) -> Outcome:
    """Apply `commands` in order to the store text; pure, no I/O."""
    if not commands:
        return Outcome(text=text, diagnostics=[InternalError("No option pushed in argument list.").to_diagnostic()])

    outcome = Outcome(text=text)
    for cmd in commands:
        scanned = scan(outcome.text, cmd, incr)
        resolved, error = _finish(cmd, scanned)
        outcome.diagnostics.extend(scanned.diagnostics)
        if error is not None:
            outcome.diagnostics.append(error.to_diagnostic())
        if resolved is not None:
            outcome.resolved = resolved
        outcome.text = scanned.text
    return outcome


def read_store(store_path: str) -> str:
    p = Path(store_path)
    if not p.exists():
        logger.debug(f"🔎 No store at {store_path} yet, starting empty")
        return ""
    try:
        return p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileError(f"Unable to read file {store_path}: {e}") from e


def write_store(store_path: str, text: str) -> None:
    p = Path(store_path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
    except OSError as e:
        raise FileError(f"Unable to write in file {store_path}: {e}") from e


def resolve_and_mutate(store_path: str,
                       commands: list[Command],
                       incr: int,
                       diagnostics: Optional[list[Diagnostic]] = None) -> Optional[str]:
    """
    Run `commands` against the store file and write it back once.

    Returns the resolved directory of a Get command, or None when nothing is to
    be visited. Problems are appended to `diagnostics` when a list is given and
    logged otherwise; a store that cannot be read is left untouched.
    """
    sink: list[Diagnostic] = diagnostics if diagnostics is not None else []
    try:
        text = read_store(store_path)
    except FileError as e:
        sink.append(e.to_diagnostic())
        _log_unreported(diagnostics, sink)
        return None

    outcome = run_commands(text, commands, incr)
    sink.extend(outcome.diagnostics)
    try:
        write_store(store_path, outcome.text)
    except FileError as e:
        sink.append(e.to_diagnostic())

    _log_unreported(diagnostics, sink)
    logger.debug(f"🎯 Resolved: {outcome.resolved}")
    return outcome.resolved


def _log_unreported(requested: Optional[list[Diagnostic]], sink: list[Diagnostic]) -> None:
    if requested is None:
        for diag in sink:
            logger.warning(str(diag))


def load_records(store_path: str) -> list[Record]:
    return [line.record for line in parse_store(read_store(store_path)) if line.record is not None]


def render_state(text: str) -> str:
    """Column-aligned dump: each column as wide as its longest field plus one."""
    rows = [line.strip().split(";") for line in text.splitlines() if line.strip()]
    widths: list[int] = []
    for row in rows:
        for idx, elt in enumerate(row):
            if idx < len(widths):
                widths[idx] = max(widths[idx], len(elt) + 1)
            else:
                widths.append(len(elt) + 1)
    if widths:
        widths.pop()
    total = sum(widths)

    out = []
    for row in rows:
        priority = row[-1]
        head = "".join(f"{elt:<{widths[idx]}}" for idx, elt in enumerate(row[:-1]))
        out.append(f"{head:<{total}}{priority}\n")
    return "".join(out)


def format_state(store_path: str) -> str:
    return render_state(read_store(store_path))


def clear_store(store_path: str) -> None:
    write_store(store_path, "")

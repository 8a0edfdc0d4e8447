"""Command-line entry point.

Usage (through the shell wrapper, which changes directory):

    gt [shortcut [subdir]]        go to a shortcut, or to the most used directory
    gt -add [shortcut] [path]     defaults: current folder name, current directory
    gt -edit [shortcut] [path]
    gt -remove shortcut
    gt -delete path
    gt -decrement n | -reset
    gt -get [shortcut]            print the path only
    gt -pop | -state | -clear | -still | -noclear

stdout carries a single `still#get#path` line for the wrapper; every
diagnostic goes to stderr.
"""

from __future__ import annotations

import os
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .commands import Command, CommandKind
from .config import CliTables, Settings, load_cli_tables, settings
from .errors import Diagnostic, FileError, GotoError, UserError, is_fatal
from .history import popd, pushd
from .logging_utils import create_session_id, log_execution, report_diagnostics, setup_logger
from .store import clear_store, format_state, resolve_and_mutate

# Shortcut and sub-directory
GET_ARITY = 2


@dataclass
class ParsedArgs:
    commands: list[Command] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)
    get: bool = False
    diagnostics: list[Diagnostic] = field(default_factory=list)


def _complete(cmd: Command, cwd: str, parsed: ParsedArgs) -> None:
    try:
        cmd.append_default(cwd)
    except GotoError as e:
        parsed.diagnostics.append(e.to_diagnostic())


def parse_tokens(tokens: list[str], tables: CliTables, cwd: str) -> ParsedArgs:
    """
    Turn raw tokens into store commands and store-free flags.

    A store keyword takes at most as many trailing arguments as the arity table
    allows; the surplus is reported and dropped.
    """
    parsed = ParsedArgs()
    keyword = None
    left = 0

    for token in tokens:
        curr = tables.canonical(token)

        if curr in tables.arities or curr == "-get":
            if parsed.commands:
                _complete(parsed.commands[-1], cwd, parsed)
            try:
                parsed.commands.append(Command.begin(curr))
            except GotoError as e:
                parsed.diagnostics.append(e.to_diagnostic())
                continue
            keyword = curr
            left = tables.arities.get(curr, GET_ARITY)
            if curr == "-get":
                parsed.get = True
        elif curr in tables.store_free:
            parsed.flags.append(curr)
        elif parsed.commands:
            # An argument to the previous option
            if left <= 0:
                parsed.diagnostics.append(
                    UserError(f"Too many arguments for {keyword}: {curr} ignored").to_diagnostic()
                )
                continue
            left -= 1
            try:
                parsed.commands[-1].append(curr, cwd)
            except GotoError as e:
                parsed.diagnostics.append(e.to_diagnostic())
        else:
            parsed.commands.append(Command(kind=CommandKind.GET, shortcut=curr))
            keyword = "-get"
            left = GET_ARITY - 1

    if parsed.commands:
        _complete(parsed.commands[-1], cwd, parsed)
    elif not parsed.flags:
        parsed.commands.append(Command(kind=CommandKind.GET))

    return parsed


def run_store_free(flags: list[str], cfg: Settings, diagnostics: list[Diagnostic], out) -> tuple[Optional[str], bool]:
    """
    Run the flags that do not go through the store engine.

    Returns the popped directory, if any, and whether the run must stop here
    (after a state dump).
    """
    popped = None
    stop = False
    for flag in flags:
        if stop:
            break
        try:
            if flag == "-pop":
                popped = popd(cfg.hist_file)
            elif flag == "-state":
                stop = True
                out.write(format_state(cfg.dirs_file))
            elif flag == "-clear":
                clear_store(cfg.dirs_file)
        except GotoError as e:
            diagnostics.append(e.to_diagnostic())
    return popped, stop


def main(argv: Optional[list[str]] = None,
         cfg: Optional[Settings] = None,
         cwd: Optional[str] = None,
         out=None) -> int:
    cfg = cfg or settings
    out = out or sys.stdout
    logger = setup_logger("gotodir", cfg.log_level)
    tokens = sys.argv[1:] if argv is None else argv
    here = cwd or os.getcwd()

    session_id = create_session_id()
    start_time = time.time()

    tables = load_cli_tables(Path(cfg.tables_file))
    parsed = parse_tokens(tokens, tables, here)
    diagnostics = list(parsed.diagnostics)

    resolved = None
    if parsed.commands:
        resolved = resolve_and_mutate(cfg.dirs_file, parsed.commands, cfg.incr, diagnostics)

    popped, stop = run_store_free(parsed.flags, cfg, diagnostics, out)
    target = popped or resolved or ""

    if not stop:
        if popped is None and resolved:
            try:
                pushd(cfg.hist_file, resolved)
            except FileError as e:
                diagnostics.append(e.to_diagnostic())
        still = "-still" in parsed.flags
        out.write(f"{int(still)}#{int(parsed.get)}#{target}")

    report_diagnostics(logger, diagnostics)
    duration_ms = (time.time() - start_time) * 1000
    log_execution(
        logger, session_id, [str(c) for c in parsed.commands] + parsed.flags,
        not diagnostics, duration_ms, resolved=target, diagnostics=diagnostics
    )
    return 1 if is_fatal(diagnostics) else 0


if __name__ == "__main__":
    raise SystemExit(main())

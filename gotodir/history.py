from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from .errors import FileError

logger = logging.getLogger(__name__)


def pushd(hist_path: str, path: str) -> None:
    """
    Append `path;pid;unix_timestamp` to the history file.

    Directories that do not exist are not recorded.
    """
    if not Path(path).exists():
        logger.debug(f"Not pushing missing directory {path}")
        return
    p = Path(hist_path)
    try:
        previous = p.read_text(encoding="utf-8").strip() if p.exists() else ""
        lines = [previous] if previous else []
        lines.append(f"{path};{os.getpid()};{int(time.time())}")
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileError(f"Unable to update file {hist_path}: {e}") from e


def popd(hist_path: str) -> str:
    """
    Return the directory visited before the current one.

    Entries whose directory vanished are dropped, the latest entry (the current
    directory) is discarded and the returned one becomes the last line again.
    """
    p = Path(hist_path)
    try:
        raw = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileError(f"Unable to read {hist_path}: {e}") from e

    lines = [
        line.strip() for line in raw.splitlines()
        if line.strip() and Path(line.split(";")[0]).exists()
    ]
    if lines:
        lines.pop()
    if not lines:
        raise FileError(f"{hist_path} is empty")

    try:
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as e:
        raise FileError(f"Unable to write to {hist_path}: {e}") from e
    return lines[-1].split(";")[0]

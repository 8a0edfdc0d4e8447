import logging
import sys
import time
from typing import Iterable, Optional

from .errors import Diagnostic, ErrorKind


def setup_logger(name: str = "gotodir", level: str = "WARNING") -> logging.Logger:
    """Setup standardized stderr logger; stdout is reserved for the shell wrapper."""
    logger = logging.getLogger(name)

    if not logger.handlers:  # Avoid duplicate handlers
        handler = logging.StreamHandler(sys.stderr)
        # Paths may hold any unicode
        if hasattr(handler.stream, 'reconfigure'):
            handler.stream.reconfigure(encoding='utf-8')

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    return logger


def report_diagnostics(logger: logging.Logger,
                       diagnostics: Iterable[Diagnostic],
                       stream=None) -> int:
    """Print every diagnostic on stderr and log it; returns how many were reported."""
    out = stream if stream is not None else sys.stderr
    count = 0
    for diag in diagnostics:
        print(str(diag), file=out)
        if diag.kind in (ErrorKind.INTERNAL, ErrorKind.FILE):
            logger.error(f"❌ {diag}")
        else:
            logger.warning(f"⚠️ {diag}")
        count += 1
    return count


def log_execution(logger: logging.Logger,
                  session_id: str,
                  commands: list[str],
                  success: bool,
                  duration_ms: float,
                  resolved: Optional[str] = None,
                  diagnostics: Optional[list[Diagnostic]] = None) -> None:
    """Log one invocation in a structured format."""

    log_data = {
        "session_id": session_id,
        "commands": commands,
        "success": success,
        "duration_ms": round(duration_ms, 1),
    }

    if resolved:
        log_data["resolved"] = resolved

    if diagnostics:
        log_data["diagnostics"] = [str(d) for d in diagnostics]

    status_icon = "✅" if success else "❌"
    logger.info(f"{status_icon} Execution: {log_data}")


def create_session_id() -> str:
    """Create unique session ID for tracking."""
    return f"session_{int(time.time() * 1000)}"

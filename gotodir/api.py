from __future__ import annotations

from datetime import datetime

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Response

from . import commands as cmds
from .config import settings
from .errors import Diagnostic, ErrorKind, FileError
from .logging_utils import setup_logger
from .models import MutationResult, RecordOut, ResolveResult, ShortcutIn, StateResult
from .store import format_state, load_records, resolve_and_mutate

API_VERSION = "0.2.0"

app = FastAPI(title="gotodir shortcut store API", version=API_VERSION)
logger = setup_logger("gotodir", settings.log_level)


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")):
    if not settings.api_key:
        return
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


def _raise_for(diagnostics: list[Diagnostic], user_status: int) -> None:
    """Map the worst diagnostic onto an HTTP error; data errors are only logged."""
    for diag in diagnostics:
        if diag.kind in (ErrorKind.INTERNAL, ErrorKind.FILE):
            logger.error(f"❌ {diag}")
            raise HTTPException(500, detail=str(diag))
    for diag in diagnostics:
        if diag.kind == ErrorKind.USER:
            raise HTTPException(user_status, detail=diag.message)
    for diag in diagnostics:
        logger.warning(f"⚠️ {diag}")


@app.get("/health")
def health(response: Response):
    response.headers["Cache-Control"] = "no-store"
    return {
        "status": "ok",
        "service": "gotodir",
        "version": API_VERSION,
        "time": datetime.now().astimezone().isoformat()
    }


@app.get("/state", dependencies=[Depends(require_api_key)])
def state() -> StateResult:
    try:
        records = load_records(settings.dirs_file)
        text = format_state(settings.dirs_file)
    except FileError as e:
        raise HTTPException(500, detail=e.message)
    return StateResult(
        records=[RecordOut(path=r.path, shortcuts=r.shortcuts, priority=r.priority) for r in records],
        text=text,
    )


@app.get("/resolve", dependencies=[Depends(require_api_key)])
def resolve(
    q: str | None = Query(default=None, description="Shortcut; omit for the most used directory"),
    sub: str | None = Query(default=None, description="Sub-directory under the resolved one"),
) -> ResolveResult:
    diagnostics: list[Diagnostic] = []
    path = resolve_and_mutate(settings.dirs_file, [cmds.get(q, sub)], settings.incr, diagnostics)
    return ResolveResult(found=path is not None, path=path, diagnostics=diagnostics)


@app.post("/shortcuts", dependencies=[Depends(require_api_key)])
def add_shortcut(body: ShortcutIn) -> MutationResult:
    if not body.path.startswith("/"):
        raise HTTPException(400, detail="Path must be absolute")
    diagnostics: list[Diagnostic] = []
    resolve_and_mutate(settings.dirs_file, [cmds.add(body.shortcut, body.path)], settings.incr, diagnostics)
    _raise_for(diagnostics, user_status=409)
    return MutationResult(ok=True, diagnostics=diagnostics)


@app.delete("/shortcuts/{shortcut}", dependencies=[Depends(require_api_key)])
def remove_shortcut(shortcut: str) -> MutationResult:
    diagnostics: list[Diagnostic] = []
    resolve_and_mutate(settings.dirs_file, [cmds.remove(shortcut)], settings.incr, diagnostics)
    _raise_for(diagnostics, user_status=404)
    return MutationResult(ok=True, diagnostics=diagnostics)

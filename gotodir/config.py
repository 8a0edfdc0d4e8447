from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

# Load environment variables from .env (if present)
load_dotenv()

DEFAULT_HOME = Path.home() / ".goto"
DEFAULT_TABLES_FILE = Path(__file__).parent / "cli_tables.yml"


class Settings(BaseModel):
    # File holding the shortcut records
    dirs_file: str = Field(default_factory=lambda: os.getenv("GOTO_DIRS_FILE", str(DEFAULT_HOME / "dirs.csv")))

    # File holding the pushd/popd history
    hist_file: str = Field(default_factory=lambda: os.getenv("GOTO_HIST_FILE", str(DEFAULT_HOME / "hist.csv")))

    # Added to a record's priority every time it is resolved
    incr: int = Field(default_factory=lambda: int(os.getenv("GOTO_INCR", "10")), ge=0)

    # Alias and arity tables of the command line
    tables_file: str = Field(default_factory=lambda: os.getenv("GOTO_TABLES_FILE", str(DEFAULT_TABLES_FILE)))

    log_level: str = Field(default_factory=lambda: os.getenv("GOTO_LOG_LEVEL", "WARNING"))

    # API key for the HTTP surface (sent via X-API-Key header); empty disables the check
    api_key: str = Field(default_factory=lambda: os.getenv("GOTO_API_KEY", ""))


class CliTables(BaseModel):
    aliases: dict[str, str] = Field(default_factory=dict)
    arities: dict[str, int] = Field(default_factory=dict)
    store_free: list[str] = Field(default_factory=list)

    def canonical(self, token: str) -> str:
        return self.aliases.get(token, token)


BUILTIN_TABLES = CliTables(
    aliases={
        "-a": "-add",
        "-rm": "-remove",
        "-del": "-delete",
        "-decr": "-decrement",
        "-p": "-pop",
        "?": "-state",
        "-nc": "-noclear",
        "!": "-noclear",
        "%": "-still",
        "-g": "-get",
        "-cls": "-clear",
    },
    arities={
        "-add": 2,
        "-edit": 2,
        "-remove": 1,
        "-delete": 1,
        "-decrement": 1,
        "-reset": 0,
    },
    store_free=["-noclear", "-still", "-pop", "-state", "-clear"],
)


def load_cli_tables(tables_file: Path) -> CliTables:
    """
    Read the alias/arity tables from YAML.

    A missing, empty or malformed file yields the built-in tables so that the
    command line keeps working.
    """
    if not tables_file.exists():
        return BUILTIN_TABLES
    try:
        data = yaml.safe_load(tables_file.read_text(encoding="utf-8"))
    except yaml.YAMLError:
        return BUILTIN_TABLES
    if not data or not isinstance(data, dict):
        return BUILTIN_TABLES
    try:
        return CliTables(**data)
    except ValidationError:
        return BUILTIN_TABLES


settings = Settings()

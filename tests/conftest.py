import pytest

from gotodir.config import DEFAULT_TABLES_FILE, Settings


@pytest.fixture
def store_file(tmp_path):
    p = tmp_path / "dirs.csv"
    p.write_text("", encoding="utf-8")
    return p


@pytest.fixture
def cfg(tmp_path, store_file):
    return Settings(
        dirs_file=str(store_file),
        hist_file=str(tmp_path / "hist.csv"),
        incr=10,
        tables_file=str(DEFAULT_TABLES_FILE),
        log_level="WARNING",
        api_key="",
    )

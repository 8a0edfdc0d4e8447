import io

import pytest

from gotodir.cli import main, parse_tokens
from gotodir.commands import CommandKind
from gotodir.config import BUILTIN_TABLES, DEFAULT_TABLES_FILE, load_cli_tables
from gotodir.errors import ErrorKind

CWD = "/home/u/proj"


def parse(*tokens):
    return parse_tokens(list(tokens), BUILTIN_TABLES, CWD)


class TestParseTokens:
    def test_no_tokens_is_plain_get(self):
        parsed = parse()
        assert len(parsed.commands) == 1
        cmd = parsed.commands[0]
        assert cmd.kind == CommandKind.GET and cmd.shortcut is None

    def test_bare_shortcut_and_subdir(self):
        cmd = parse("docs", "api").commands[0]
        assert (cmd.kind, cmd.shortcut, cmd.path) == (CommandKind.GET, "docs", "api")

    def test_add_alone_defaults_to_current_directory(self):
        cmd = parse("-a").commands[0]
        assert (cmd.kind, cmd.shortcut, cmd.path) == (CommandKind.ADD, "proj", CWD)

    def test_add_with_shortcut_only(self):
        cmd = parse("-add", "w").commands[0]
        assert (cmd.shortcut, cmd.path) == ("w", CWD)

    def test_too_many_arguments(self):
        parsed = parse("-add", "w", "/tmp/x", "extra")
        cmd = parsed.commands[0]
        assert (cmd.shortcut, cmd.path) == ("w", "/tmp/x")
        assert [d.kind for d in parsed.diagnostics] == [ErrorKind.USER]

    def test_previous_add_is_completed_before_next_command(self):
        parsed = parse("-a", "w", "-decr", "3")
        add, decr = parsed.commands
        assert (add.shortcut, add.path) == ("w", CWD)
        assert (decr.kind, decr.amount) == (CommandKind.DECREMENT, 3)

    def test_store_free_flags(self):
        parsed = parse("?")
        assert parsed.commands == []
        assert parsed.flags == ["-state"]

    def test_get_flag(self):
        parsed = parse("-g", "docs")
        assert parsed.get
        assert parsed.commands[0].shortcut == "docs"

    def test_reset_argument_is_reported(self):
        parsed = parse("-reset", "3")
        assert parsed.commands[0].kind == CommandKind.RESET
        assert [d.kind for d in parsed.diagnostics] == [ErrorKind.USER]

    def test_bare_shortcut_takes_one_subdir(self):
        parsed = parse("docs", "api", "extra")
        assert parsed.commands[0].path == "api"
        assert [d.kind for d in parsed.diagnostics] == [ErrorKind.USER]


class TestTables:
    def test_packaged_tables_match_builtin(self):
        assert load_cli_tables(DEFAULT_TABLES_FILE) == BUILTIN_TABLES

    def test_missing_or_broken_file_falls_back(self, tmp_path):
        assert load_cli_tables(tmp_path / "none.yml") == BUILTIN_TABLES
        broken = tmp_path / "broken.yml"
        broken.write_text("aliases: [unclosed", encoding="utf-8")
        assert load_cli_tables(broken) == BUILTIN_TABLES

    def test_custom_alias(self, tmp_path):
        custom = tmp_path / "tables.yml"
        custom.write_text('aliases:\n  "+": "-add"\narities:\n  "-add": 2\n', encoding="utf-8")
        tables = load_cli_tables(custom)
        parsed = parse_tokens(["+", "w", "/x"], tables, CWD)
        assert parsed.commands[0].kind == CommandKind.ADD

    def test_arity_limits_trailing_arguments(self, tmp_path):
        custom = tmp_path / "tables.yml"
        custom.write_text('arities:\n  "-add": 1\n', encoding="utf-8")
        tables = load_cli_tables(custom)
        parsed = parse_tokens(["-add", "w", "/tmp/x"], tables, CWD)
        cmd = parsed.commands[0]
        assert (cmd.shortcut, cmd.path) == ("w", CWD)
        assert [d.kind for d in parsed.diagnostics] == [ErrorKind.USER]


class TestMain:
    def test_jump_bumps_priority_and_records_history(self, cfg, store_file, tmp_path):
        proj = tmp_path / "proj"
        proj.mkdir()
        store_file.write_text(f"{proj};p;5\n", encoding="utf-8")
        out = io.StringIO()

        assert main(["p"], cfg, cwd=str(tmp_path), out=out) == 0
        assert out.getvalue() == f"0#0#{proj}"
        assert store_file.read_text(encoding="utf-8") == f"{proj};p;15\n"
        assert (tmp_path / "hist.csv").read_text(encoding="utf-8").startswith(f"{proj};")

    def test_add_current_directory(self, cfg, store_file, tmp_path):
        out = io.StringIO()
        assert main(["-add", "w"], cfg, cwd="/home/u/proj", out=out) == 0
        assert out.getvalue() == "0#0#"
        assert store_file.read_text(encoding="utf-8") == "/home/u/proj;w;0\n"

    def test_still_and_get_flags(self, cfg, store_file):
        store_file.write_text("/a;x;1\n", encoding="utf-8")
        out = io.StringIO()
        main(["-g", "x", "%"], cfg, cwd="/", out=out)
        assert out.getvalue() == "1#1#/a"

    def test_unknown_shortcut_reports_on_stderr(self, cfg, store_file, capsys):
        store_file.write_text("/a;x;1\n", encoding="utf-8")
        out = io.StringIO()
        assert main(["nope"], cfg, cwd="/", out=out) == 0
        assert out.getvalue() == "0#0#/a"
        assert "[User Error] Shortcut nope not found" in capsys.readouterr().err

    def test_state_dump(self, cfg, store_file):
        store_file.write_text("/a;x;1\n", encoding="utf-8")
        out = io.StringIO()
        assert main(["-state"], cfg, cwd="/", out=out) == 0
        assert out.getvalue() == "/a x 1\n"

    def test_clear(self, cfg, store_file):
        store_file.write_text("/a;x;1\n", encoding="utf-8")
        main(["-cls"], cfg, cwd="/", out=io.StringIO())
        assert store_file.read_text(encoding="utf-8") == ""

    def test_pop_returns_previous_directory(self, cfg, tmp_path):
        first, second = tmp_path / "one", tmp_path / "two"
        first.mkdir()
        second.mkdir()
        (tmp_path / "hist.csv").write_text(f"{first};1;1\n{second};1;2\n", encoding="utf-8")
        out = io.StringIO()
        assert main(["-p"], cfg, cwd=str(second), out=out) == 0
        assert out.getvalue() == f"0#0#{first}"

    def test_file_errors_set_exit_code(self, cfg, tmp_path):
        cfg.dirs_file = str(tmp_path)
        assert main(["x"], cfg, cwd="/", out=io.StringIO()) == 1

    def test_undecodable_store_sets_exit_code(self, cfg, store_file, capsys):
        store_file.write_bytes(b"/a;x;1\n/\xff\xfe;y;2\n")
        out = io.StringIO()
        assert main(["x"], cfg, cwd="/", out=out) == 1
        assert out.getvalue() == "0#0#"
        assert "[File Error]" in capsys.readouterr().err

    def test_undecodable_store_state_dump(self, cfg, store_file):
        store_file.write_bytes(b"\xff\n")
        out = io.StringIO()
        assert main(["-state"], cfg, cwd="/", out=out) == 1
        assert out.getvalue() == ""


if __name__ == "__main__":
    pytest.main([__file__])

"""Tests for the command line entry point."""

import io
import sqlite3
from pathlib import Path

import pytest

from sqlsend.main import EXIT_FAILED, EXIT_OK, build_parser, main


@pytest.fixture
def database(temp_dir):
    path = Path(temp_dir) / "app.db"
    connection = sqlite3.connect(path)
    connection.execute("CREATE TABLE users (id INTEGER, name TEXT)")
    connection.execute("INSERT INTO users VALUES (1, 'alice')")
    connection.commit()
    connection.close()
    return str(path)


@pytest.fixture
def sql_file(temp_dir):
    def write(text):
        path = Path(temp_dir) / "queries.sql"
        path.write_text(text)
        return str(path)
    return write


class TestParser:
    """Test argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["q.sql"])
        assert args.db == []
        assert args.unit is None
        assert args.offset == 0
        assert args.region is None

    def test_repeatable_db(self):
        args = build_parser().parse_args(["q.sql", "--db", "a.db", "--db", "b.db"])
        assert args.db == ["a.db", "b.db"]


class TestMain:
    """Test main()."""

    def test_version(self, capsys):
        assert main(["--version"]) == EXIT_OK
        assert "sqlsend version" in capsys.readouterr().out

    def test_file_required(self, isolated_config):
        with pytest.raises(SystemExit):
            main([])

    def test_send_statement(self, isolated_config, database, sql_file, capsys):
        path = sql_file("select name from users;\nselect 2;")
        assert main([path, "--db", database, "--offset", "3"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "alice" in out
        assert "1 row" in out

    def test_changes_are_committed(self, isolated_config, database, sql_file):
        path = sql_file("insert into users values (2, 'bob');")
        assert main([path, "--db", database]) == EXIT_OK

        connection = sqlite3.connect(database)
        count = connection.execute("select count(*) from users").fetchone()[0]
        connection.close()
        assert count == 2

    def test_region(self, isolated_config, database, sql_file, capsys):
        path = sql_file("select 1 as a; select name from users;")
        assert main([path, "--db", database, "--region", "15", "38"]) == EXIT_OK
        assert "alice" in capsys.readouterr().out

    def test_no_session(self, isolated_config, sql_file, capsys):
        path = sql_file("select 1;")
        assert main([path]) == EXIT_FAILED
        assert "No active SQL session" in capsys.readouterr().out

    def test_sql_error(self, isolated_config, database, sql_file, capsys):
        path = sql_file("select * from missing;")
        assert main([path, "--db", database]) == EXIT_FAILED
        assert "no such table" in capsys.readouterr().out

    def test_blank_unit_is_not_a_failure(self, isolated_config, database, sql_file, capsys):
        path = sql_file("select 1;\n\n\nselect 2;")
        assert main([path, "--db", database, "--unit", "line", "--offset", "11"]) == EXIT_OK
        assert "Nothing to execute" in capsys.readouterr().out

    def test_missing_file(self, isolated_config, temp_dir, capsys):
        missing = str(Path(temp_dir) / "nope.sql")
        assert main([missing]) == EXIT_FAILED
        assert "Could not read" in capsys.readouterr().out

    def test_stdin(self, isolated_config, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("select 42 as answer;"))
        assert main(["-", "--db", ":memory:"]) == EXIT_OK
        assert "42" in capsys.readouterr().out

    def test_open_table(self, isolated_config, database, sql_file, capsys):
        path = sql_file("select * from users")
        assert main([path, "--db", database, "--open-table", "--offset", "16"]) == EXIT_OK
        assert "alice" in capsys.readouterr().out

    def test_open_unknown_table(self, isolated_config, database, sql_file, capsys):
        path = sql_file("select * from orders")
        assert main([path, "--db", database, "--open-table", "--offset", "16"]) == EXIT_FAILED
        assert "No table named 'orders'" in capsys.readouterr().out

    def test_config_file_sets_default_unit(self, isolated_config, database, sql_file, temp_dir, capsys):
        config_path = Path(temp_dir) / "extra.toml"
        config_path.write_text('[router]\ndefault_unit = "line"\n')
        path = sql_file("select name from users -- first\nselect 1 as a;")
        assert main([path, "--db", database, "--offset", "3", "--config", str(config_path)]) == EXIT_OK
        assert "alice" in capsys.readouterr().out

    def test_invalid_config(self, isolated_config, sql_file, temp_dir, capsys):
        config_path = Path(temp_dir) / "bad.toml"
        config_path.write_text("[router\n")
        assert main([sql_file("select 1;"), "--config", str(config_path)]) == EXIT_FAILED
        assert "Invalid TOML" in capsys.readouterr().err

    def test_list_sessions_without_file(self, isolated_config, temp_dir, capsys):
        """Test sessions are listed most recent first."""
        first = str(Path(temp_dir) / "first.db")
        second = str(Path(temp_dir) / "second.db")
        assert main(["--db", first, "--db", second, "--list-sessions"]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.index("*SQL: second*") < out.index("*SQL: first*")

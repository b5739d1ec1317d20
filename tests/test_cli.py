"""Tests for the pts command line."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from pts_cli.main import app, parse_table_list, resolve_config_path

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path, sqlite_db):
    """A table/custom config pointing at the sample SQLite database."""
    template = tmp_path / "names.tmpl"
    template.write_text("{% for t in tables %}{{ t.type_name }}={{ t.comment }}\n{% endfor %}")
    path = tmp_path / "pts.yaml"
    path.write_text(
        "database:\n"
        "  driver: sqlite\n"
        f"  data_source_name: {sqlite_db}\n"
        "disable_table:\n"
        "  - ^log_.*$\n"
        "comments:\n"
        "  users:\n"
        "    comment: site users\n"
        f"template_file_custom: {template}\n"
    )
    return path


class TestHelpers:
    """Test argument helpers."""

    def test_parse_table_list(self):
        assert parse_table_list(" users, orders,,users ") == ["users", "orders"]
        assert parse_table_list("") == []

    def test_existing_path_wins(self, tmp_path, monkeypatch):
        path = tmp_path / "a.yaml"
        path.write_text("")
        monkeypatch.setenv("PTS_TABLE_CONFIG", str(tmp_path / "other.yaml"))
        assert resolve_config_path(str(path), "table") == str(path)

    def test_env_fallback(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("")
        monkeypatch.setenv("PTS_SCHEMA_CONFIG", str(path))
        assert resolve_config_path(str(tmp_path / "missing.yaml"), "schema") == str(path)

    def test_no_fallback_keeps_given_path(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PTS_SCHEMA_CONFIG", raising=False)
        missing = str(tmp_path / "missing.yaml")
        assert resolve_config_path(missing, "schema") == missing


class TestCommands:
    """Test commands end to end against SQLite."""

    def test_config(self):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "driver: postgres" in result.output
        assert "only_table" in result.output

    def test_table(self, config_file):
        result = runner.invoke(app, ["table", "-c", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "type Users struct {" in result.output
        assert "type Orders struct {" in result.output
        assert "Log2023" not in result.output

    def test_table_with_allow_list(self, config_file):
        result = runner.invoke(app, ["table", "-c", str(config_file), "-t", "log_2023"])

        assert result.exit_code == 0, result.output
        assert "type Log2023 struct {" in result.output
        assert "type Users struct {" not in result.output

    def test_custom_template(self, config_file):
        result = runner.invoke(app, ["custom", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "Users=site users" in result.output
        assert "Orders=orders" in result.output

    def test_env_config(self, config_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PTS_REPLACE_CONFIG", str(config_file))
        result = runner.invoke(app, ["replace"])

        assert result.exit_code == 0, result.output
        assert "package replace" in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["schema", "-c", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_sqlite_without_path(self, tmp_path):
        path = tmp_path / "pts.yaml"
        path.write_text("database:\n  driver: sqlite\n")
        result = runner.invoke(app, ["table", "-c", str(path)])

        assert result.exit_code == 1
        assert "data_source_name" in result.output

    def test_unsupported_driver(self, tmp_path):
        path = tmp_path / "pts.yaml"
        path.write_text("database:\n  driver: oracle\n")
        result = runner.invoke(app, ["table", "-c", str(path)])

        assert result.exit_code == 1
        assert "unsupported database driver" in result.output

    def test_postgres_function_install_failure(self, tmp_path, fake_handle_factory):
        path = tmp_path / "pts.yaml"
        path.write_text("database:\n  driver: postgres\n  database: shop\n")
        handle = fake_handle_factory("postgresql")

        def execute(sql):
            if "CREATE OR REPLACE FUNCTION" in sql:
                raise RuntimeError("permission denied for schema public")
            handle.executed.append(sql)

        handle.execute = execute
        with patch("pts_cli.app.open_database", return_value=handle):
            result = runner.invoke(app, ["table", "-c", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.output
        assert handle.closed

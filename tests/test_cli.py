"""Tests for the command line entry point."""
from __future__ import annotations

import json
import os
from unittest.mock import patch

import pytest

from agrivocab import __main__ as cli
from agrivocab.db import Database


@pytest.fixture
def pid_file(tmp_path):
    path = tmp_path / ".server.pid"
    with patch("agrivocab.__main__.PID_FILE", path):
        yield path


@pytest.fixture
def config(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"db_path": str(tmp_path / "cli.db")}))
    with patch("agrivocab.config.CONFIG_PATH", config_path):
        yield tmp_path / "cli.db"


class TestOption:
    def test_value(self):
        assert cli._option(["--port", "9000"], "--port") == "9000"

    def test_missing(self):
        assert cli._option(["--host", "0.0.0.0"], "--port") is None

    def test_flag_without_value(self):
        assert cli._option(["--port"], "--port") is None


class TestServerPid:
    def test_no_file(self, pid_file):
        assert cli._server_pid() is None

    def test_live_process(self, pid_file):
        pid_file.write_text(str(os.getpid()))
        assert cli._server_pid() == os.getpid()

    def test_garbage_file_removed(self, pid_file):
        pid_file.write_text("not a pid")
        assert cli._server_pid() is None
        assert not pid_file.exists()

    def test_dead_process_removed(self, pid_file):
        pid_file.write_text("12345")
        with patch("agrivocab.__main__.os.kill", side_effect=ProcessLookupError):
            assert cli._server_pid() is None
        assert not pid_file.exists()

    def test_status_not_running(self, pid_file, capsys):
        cli.main(["status"])
        assert "not running" in capsys.readouterr().out

    def test_stop_not_running(self, pid_file):
        assert cli._stop() is False


class TestCommands:
    def test_unknown_command(self, capsys):
        with pytest.raises(SystemExit):
            cli.main(["dance"])
        assert "Unknown command" in capsys.readouterr().out

    def test_import_file(self, config, tmp_path, sheet_csv, capsys):
        sheet = tmp_path / "words.csv"
        sheet.write_text(sheet_csv, encoding="utf-8")
        cli.main(["import", "--file", str(sheet)])
        assert "3 words imported" in capsys.readouterr().out

        db = Database(config)
        assert db.get_word_count() == 3
        db.close()

    def test_import_missing_file(self, config, tmp_path):
        with pytest.raises(SystemExit):
            cli.main(["import", "--file", str(tmp_path / "missing.csv")])

    def test_import_not_configured(self, config):
        with pytest.raises(SystemExit):
            cli.main(["import"])

    def test_stats(self, config, capsys):
        cli.main(["stats"])
        out = capsys.readouterr().out
        assert "Total words:        0" in out
        assert "Overall accuracy:   0%" in out

"""Tests for the souschef command line interface."""

import json
import logging

import pytest

from souschef import __version__
from souschef.cli import main


@pytest.fixture
def run_cli(monkeypatch, capsys, temp_db):
    """Run ``souschef`` with args against a temp database; returns (exit_code, stdout)."""

    def run(*argv):
        monkeypatch.setattr("sys.argv", ["souschef", "--db", str(temp_db), *argv])
        code = 0
        try:
            main()
        except SystemExit as e:
            code = e.code
        return code, capsys.readouterr().out

    yield run
    logging.getLogger().handlers.clear()


class TestParse:
    def test_valid_command(self, run_cli):
        code, out = run_cli("parse", "set a timer for 10 minutes")
        data = json.loads(out)
        assert code == 0
        assert data["command"] == "set_timer"
        assert data["parameters"] == {"minutes": 10}
        assert data["valid"] is True

    def test_unknown_command(self, run_cli):
        code, out = run_cli("parse", "the oven is hot")
        assert code == 1
        assert json.loads(out)["command"] == "unknown"

    def test_wake_word(self, run_cli):
        code, out = run_cli("parse", "--wake", "hey sous chef go back")
        assert code == 0
        assert json.loads(out)["command"] == "previous_step"

    def test_missing_wake_word(self, run_cli):
        code, out = run_cli("parse", "--wake", "go back")
        assert code == 1
        assert json.loads(out) == {"wake_word": False}


class TestQuotaCommands:
    def test_check_allowed(self, run_cli):
        code, out = run_cli("check", "voice_commands", "--tier", "free")
        assert code == 0
        assert json.loads(out)["allowed"] is True

    def test_record_then_exhaust(self, run_cli):
        for _ in range(3):
            run_cli("record", "voice_commands")
        code, out = run_cli("check", "voice_commands")
        result = json.loads(out)
        assert code == 1
        assert result["reason"] == "limit_reached"
        assert result["upgrade_required"] == "premium"

    def test_locked_feature(self, run_cli):
        code, out = run_cli("check", "portion_analysis")
        assert code == 1
        assert json.loads(out)["reason"] == "feature_locked"

    def test_usage_json(self, run_cli):
        run_cli("record", "ai_substitution")
        code, out = run_cli("usage", "--tier", "pro", "--json")
        data = json.loads(out)
        assert data["tier"] == "pro"
        assert data["features"]["ai_substitution"]["used"] == 1
        assert data["features"]["ai_substitution"]["remaining"] == "unlimited"

    def test_usage_table(self, run_cli):
        code, out = run_cli("usage")
        assert "Free tier" in out
        assert "voice_commands" in out

    def test_invalid_feature(self, run_cli):
        code, _ = run_cli("check", "teleport")
        assert code == 2


class TestMisc:
    def test_version(self, run_cli):
        code, out = run_cli("--version")
        assert out.strip() == f"souschef {__version__}"

    def test_no_command_prints_help(self, run_cli):
        code, out = run_cli()
        assert "usage: souschef" in out

    def test_timer_rejects_zero(self, run_cli):
        code, _ = run_cli("timer", "0")
        assert code == 2

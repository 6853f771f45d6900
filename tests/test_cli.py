"""Tests for the Typer command line."""
import pytest
from typer.testing import CliRunner

from neurolink.cli import app as cli_app
from neurolink.llm import BackendHTTPError

from conftest import FakeBackend

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("GOOGLE_API_KEY", "GEMINI_API_KEY", "NEUROLINK_TRANSPORT", "NEUROLINK_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def use_orchestrator(monkeypatch, make_orchestrator):
    def _use(backend: FakeBackend) -> None:
        orchestrator = make_orchestrator(backend)
        monkeypatch.setattr(cli_app, "require_orchestrator", lambda settings, console=None: orchestrator)

    return _use


class TestHealthCommand:
    def test_key_set(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "AIza-cli-secret")

        result = runner.invoke(cli_app.app, ["health"])

        assert result.exit_code == 0
        assert "SET" in result.output
        assert "AIza-cli-secret" not in result.output

    def test_key_missing(self):
        result = runner.invoke(cli_app.app, ["health"])

        assert result.exit_code == 1
        assert "NOT SET" in result.output

    def test_invalid_configuration(self, monkeypatch):
        monkeypatch.setenv("NEUROLINK_HISTORY_LIMIT", "lots")

        result = runner.invoke(cli_app.app, ["health"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestAskCommand:
    def test_prints_reply(self, use_orchestrator):
        use_orchestrator(FakeBackend("Try a short walk outside."))

        result = runner.invoke(cli_app.app, ["ask", "I feel stuck"])

        assert result.exit_code == 0
        assert "Try a short walk outside." in result.output

    def test_error_reply_exits_nonzero(self, use_orchestrator):
        use_orchestrator(FakeBackend(BackendHTTPError(400, "Invalid argument")))

        result = runner.invoke(cli_app.app, ["ask", "hello"])

        assert result.exit_code == 1
        assert "Details" in result.output

    def test_blank_message(self, use_orchestrator):
        use_orchestrator(FakeBackend("ok"))

        result = runner.invoke(cli_app.app, ["ask", "   "])

        assert result.exit_code == 1


class TestLogLevelOption:
    def test_unknown_level_is_a_usage_error(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "AIza-cli-secret")

        result = runner.invoke(cli_app.app, ["--log-level", "verbose", "health"])

        assert result.exit_code == 2
        assert not isinstance(result.exception, ValueError)

    def test_known_level_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "AIza-cli-secret")

        result = runner.invoke(cli_app.app, ["--log-level", "debug", "health"])

        assert result.exit_code == 0

"""Tests for the CLI entry point (typer app).

Runs the analyze command in mock mode end to end and checks option
handling, invalid symbols, failure exit codes, and the config table.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from Stock_Analyzer.cli import app
from Stock_Analyzer.config import Settings
from Stock_Analyzer.utils.exceptions import BatchAnalysisError, TickerNotFoundError

runner = CliRunner()


@pytest.fixture(autouse=True)
def _mock_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """No API keys and no simulated latency unless a test sets them."""
    monkeypatch.delenv("POLYGON_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("MOCK_DELAY_SECONDS", "0")


class TestCommandRegistration:
    def test_analyze_help(self) -> None:
        result = runner.invoke(app, ["analyze", "--help"])
        assert result.exit_code == 0
        assert "--mock" in result.output

    def test_config_help(self) -> None:
        result = runner.invoke(app, ["config", "--help"])
        assert result.exit_code == 0


class TestAnalyzeCommand:
    """stock-analyzer analyze TICKER..."""

    def test_mock_run_renders_table(self) -> None:
        result = runner.invoke(app, ["analyze", "aapl", "TSLA", "-q"])
        assert result.exit_code == 0, result.output
        assert "AAPL" in result.output
        assert "TSLA" in result.output
        assert "mock" in result.output

    def test_invalid_ticker_exit_2(self) -> None:
        result = runner.invoke(app, ["analyze", "NOT VALID"])
        assert result.exit_code == 2
        assert "Invalid ticker" in result.output

    def test_mock_flag_overrides_keys(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POLYGON_API_KEY", "pk_live")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-live")
        with patch("Stock_Analyzer.agents.AnalysisOrchestrator") as orchestrator_cls:
            orchestrator_cls.return_value.mock_mode = True
            orchestrator_cls.return_value.run = AsyncMock(return_value=[])
            result = runner.invoke(app, ["analyze", "AAPL", "--mock", "-q"])

        assert result.exit_code == 0, result.output
        settings: Settings = orchestrator_cls.call_args.args[0]
        assert settings.mock_mode is True

    def test_concurrency_and_dedupe(self) -> None:
        with patch("Stock_Analyzer.agents.AnalysisOrchestrator") as orchestrator_cls:
            orchestrator_cls.return_value.mock_mode = True
            orchestrator_cls.return_value.run = AsyncMock(return_value=[])
            result = runner.invoke(
                app, ["analyze", "AAPL", "aapl", "MSFT", "--concurrency", "3", "-q"]
            )

        assert result.exit_code == 0, result.output
        settings: Settings = orchestrator_cls.call_args.args[0]
        assert settings.max_concurrency == 3
        orchestrator_cls.return_value.run.assert_awaited_once_with(["AAPL", "MSFT"])

    def test_failure_exit_1(self) -> None:
        cause = TickerNotFoundError("No results", ticker="ZZZZ", source="polygon")
        error = BatchAnalysisError(
            "Analysis failed for ZZZZ: No results", ticker="ZZZZ", cause=cause
        )
        with patch("Stock_Analyzer.agents.AnalysisOrchestrator") as orchestrator_cls:
            orchestrator_cls.return_value.mock_mode = False
            orchestrator_cls.return_value.run = AsyncMock(side_effect=error)
            result = runner.invoke(app, ["analyze", "ZZZZ", "-q"])

        assert result.exit_code == 1
        assert "Analysis failed for ZZZZ" in result.output


class TestConfigCommand:
    def test_keys_masked(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POLYGON_API_KEY", "pk_live_secretvalue")
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "secretvalue" not in result.output
        assert "not configured" in result.output
        assert "mock" in result.output

"""CLI entry point for Stock Analyzer: AI-assisted stock recommendations.

Provides the ``stock-analyzer`` command with subcommands for analyzing a
list of tickers and inspecting the resolved configuration.

This is the ONLY module where console output is allowed.  All other modules
use ``logging``.  Async internals are bridged to typer's synchronous
interface via ``asyncio.run()``.
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from Stock_Analyzer.config import Settings
from Stock_Analyzer.logging_config import configure_logging
from Stock_Analyzer.models import (
    AnalysisResult,
    MarketDataVariant,
    RecommendationAction,
    RiskLevel,
    normalize_ticker,
)
from Stock_Analyzer.utils.exceptions import BatchAnalysisError, InvalidTickerError

# ---------------------------------------------------------------------------
# Typer app
# ---------------------------------------------------------------------------

app = typer.Typer(name="stock-analyzer", help="AI-assisted stock recommendations")

# Rich console for formatted output
console = Console()

_ACTION_STYLES: dict[RecommendationAction, str] = {
    RecommendationAction.BUY: "green",
    RecommendationAction.SELL: "red",
    RecommendationAction.HOLD: "yellow",
}

_RISK_STYLES: dict[RiskLevel, str] = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
}

# ---------------------------------------------------------------------------
# analyze command
# ---------------------------------------------------------------------------


@app.command()
def analyze(
    tickers: Annotated[list[str], typer.Argument(help="Ticker symbols to analyze")],
    mock: Annotated[
        bool, typer.Option("--mock", help="Use generated data even if API keys are set")
    ] = False,
    concurrency: Annotated[
        int | None,
        typer.Option(min=1, help="Max tickers analyzed at once (default: MAX_CONCURRENCY)"),
    ] = None,
    variant: Annotated[
        MarketDataVariant | None,
        typer.Option(help="Polygon endpoint pair used to build snapshots"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Suppress info logging")] = False,
) -> None:
    """Fetch market data and a recommendation for each ticker, in order."""
    configure_logging(verbose=verbose, quiet=quiet)

    try:
        symbols = _dedupe([normalize_ticker(t) for t in tickers])
    except InvalidTickerError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc

    settings = _resolve_settings(mock=mock, concurrency=concurrency, variant=variant)
    asyncio.run(_analyze_async(symbols, settings))


async def _analyze_async(tickers: list[str], settings: Settings) -> None:
    """Run the orchestrator under a spinner and render the results table."""
    from Stock_Analyzer.agents import AnalysisOrchestrator

    orchestrator = AnalysisOrchestrator(settings)
    mode = "mock" if orchestrator.mock_mode else "live"
    console.print(f"\n[bold]Analyzing {', '.join(tickers)} ({mode} data)...[/bold]")

    with Progress(
        SpinnerColumn(spinner_name="line"),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Analyzing...", total=None)
        try:
            results = await orchestrator.run(tickers)
        except BatchAnalysisError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(code=1) from exc
        progress.update(task, completed=1)

    _render_results(results, mock_mode=orchestrator.mock_mode)


def _render_results(results: list[AnalysisResult], *, mock_mode: bool) -> None:
    """Print one table row per ticker followed by each model's reasoning."""
    title = "Recommendations (mock data)" if mock_mode else "Recommendations"
    table = Table(title=title)
    table.add_column("Ticker", style="bold", width=8)
    table.add_column("Price", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Action", width=6)
    table.add_column("Confidence", justify="right")
    table.add_column("Risk", width=8)
    table.add_column("Target", justify="right")

    for result in results:
        snap = result.snapshot
        rec = result.recommendation
        change_style = "green" if snap.is_up else "red"
        sign = "+" if snap.is_up else ""
        action_style = _ACTION_STYLES[rec.recommendation]
        risk_style = _RISK_STYLES[rec.risk_level]
        table.add_row(
            snap.ticker,
            f"${snap.price:,.2f}",
            f"[{change_style}]{sign}{snap.change:.2f} ({sign}{snap.change_percent:.2f}%)"
            f"[/{change_style}]",
            f"[{action_style}]{rec.recommendation.value}[/{action_style}]",
            f"{rec.confidence}%",
            f"[{risk_style}]{rec.risk_level.value}[/{risk_style}]",
            f"${rec.price_target:,.2f}" if rec.price_target is not None else "\u2014",
        )

    console.print(table)
    for result in results:
        model_used = result.recommendation.model_used
        console.print(f"\n[bold]{result.ticker}[/bold] [dim]({model_used})[/dim]")
        console.print(result.recommendation.reasoning)


# ---------------------------------------------------------------------------
# config command
# ---------------------------------------------------------------------------


@app.command()
def config() -> None:
    """Show the resolved configuration with API keys masked."""
    configure_logging(quiet=True)
    settings = Settings.from_env()

    table = Table(title="Stock Analyzer Configuration")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for key, value in settings.masked().items():
        table.add_row(key, value)
    table.add_row("mode", "mock" if settings.mock_mode else "live")
    console.print(table)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _resolve_settings(
    *,
    mock: bool,
    concurrency: int | None,
    variant: MarketDataVariant | None,
) -> Settings:
    """Apply command-line overrides on top of the environment settings."""
    settings = Settings.from_env()
    overrides: dict[str, object] = {}
    if mock:
        overrides["polygon_api_key"] = None
        overrides["openai_api_key"] = None
    if concurrency is not None:
        overrides["max_concurrency"] = concurrency
    if variant is not None:
        overrides["market_data_variant"] = variant
    return settings.model_copy(update=overrides) if overrides else settings


def _dedupe(tickers: list[str]) -> list[str]:
    """Drop repeated symbols, keeping first-seen order."""
    return list(dict.fromkeys(tickers))


if __name__ == "__main__":
    app()

"""Command-line interface for the ultimate scanner."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from ultimate_scanner.clients.base import ProviderError
from ultimate_scanner.clients.factory import batch_settings_for, build_provider
from ultimate_scanner.config import ScannerConfig, get_config
from ultimate_scanner.ingest.watchlist import load_watchlist
from ultimate_scanner.models.scan import (
    EvaluationStatus,
    Resolution,
    ScanReport,
    ScanRequest,
    ScanTier,
)
from ultimate_scanner.models.series import OHLCVSeries, series_to_dataframe
from ultimate_scanner.notifications import (
    DiscordWebhookSink,
    format_match_list,
    summarize_report,
)
from ultimate_scanner.scanner import Scanner
from ultimate_scanner.scanning.tiers import TIER_CRITERIA
from ultimate_scanner.technicals.criteria import last_index
from ultimate_scanner.technicals.indicators import (
    compute_macd,
    compute_squeeze,
    compute_supertrend,
    latest_value,
)

console = Console()


def setup_logging(config: ScannerConfig, verbose: bool):
    """Configure logging based on config and verbosity."""
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.WARNING),
        format=config.log_format,
    )
    if verbose:
        logging.getLogger("ultimate_scanner").setLevel(logging.DEBUG)


def format_status(status: EvaluationStatus) -> Text:
    """Format evaluation status with color coding."""
    colors = {
        EvaluationStatus.MATCHED: "green",
        EvaluationStatus.NOT_MATCHED: "dim",
        EvaluationStatus.INSUFFICIENT_DATA: "yellow",
    }
    return Text(status.value, style=colors[status])


def display_report(report: ScanReport, display_limit: int):
    """Display scan results in rich format."""
    title = f"{report.tier.display_name} Scan Results"
    body = Text(summarize_report(report))
    if report.matched:
        body.append("\n\n")
        body.append(format_match_list(report.matched, display_limit), style="bold green")
    if report.failed_symbols:
        body.append("\n\nFailed to fetch: ", style="red")
        body.append(format_match_list(report.failed_symbols, display_limit))
    if report.cancelled:
        body.append("\n\nScan cancelled before completion.", style="yellow")

    console.print(Panel(body, title=title, border_style="cyan"))

    skipped = report.insufficient_data
    if skipped:
        console.print(
            f"[yellow]Insufficient history:[/yellow] {format_match_list(skipped, display_limit)}"
        )


def display_evaluations(report: ScanReport):
    """Per-symbol outcome table."""
    table = Table(title="Per-symbol outcome")
    table.add_column("Symbol", style="bold")
    table.add_column("Status")
    table.add_column("Stopped at", style="dim")

    for evaluation in report.evaluations:
        table.add_row(
            evaluation.symbol,
            format_status(evaluation.status),
            evaluation.failed_criterion or "",
        )
    for symbol in report.failed_symbols:
        table.add_row(symbol, Text("fetch_failed", style="red"), "")

    console.print(table)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx, verbose):
    """Ultimate Scanner - MACD, Supertrend and squeeze stock scans."""
    ctx.ensure_object(dict)
    try:
        config = get_config()
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise SystemExit(1)
    ctx.obj["config"] = config
    setup_logging(config, verbose)


@main.command()
@click.argument("symbols", nargs=-1)
@click.option(
    "--tier",
    "-t",
    type=click.Choice([t.value for t in ScanTier]),
    default=ScanTier.BASIC.value,
    help="Scan to run",
)
@click.option("--watchlist", "-w", type=click.Path(exists=True, dir_okay=False), help="TradingView watchlist file")
@click.option("--resolution", type=click.Choice([r.value for r in Resolution]), default=None)
@click.option("--lookback-days", type=int, default=None, help="Days of history to fetch")
@click.option("--source", type=click.Choice(["finnhub", "yahoo"]), default=None, help="Data source")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--details", is_flag=True, help="Show the outcome for every symbol")
@click.option("--alert/--no-alert", default=None, help="Send results to the Discord webhook")
@click.pass_context
def scan(
    ctx,
    symbols: tuple[str, ...],
    tier: str,
    watchlist: Optional[str],
    resolution: Optional[str],
    lookback_days: Optional[int],
    source: Optional[str],
    json_output: bool,
    alert: Optional[bool],
    details: bool,
):
    """Scan a watchlist or the given SYMBOLS with the selected tier."""
    config: ScannerConfig = ctx.obj["config"]

    universe = load_watchlist(watchlist) if watchlist else list(symbols)
    if not universe:
        console.print("[red]Error:[/red] No symbols provided. Pass symbols or --watchlist.")
        raise SystemExit(1)

    request = ScanRequest(
        symbols=universe,
        tier=ScanTier(tier),
        resolution=Resolution(resolution or config.default_resolution),
        lookback_days=lookback_days or config.default_lookback_days,
    )

    data_source = source or config.resolved_data_source
    sinks = []
    send_alert = config.discord_alerts_enabled if alert is None else alert
    if send_alert and config.discord_webhook_url:
        sinks.append(DiscordWebhookSink(config.discord_webhook_url, config.display_limit))

    async def run() -> ScanReport:
        provider = build_provider(config, data_source)
        settings = batch_settings_for(config, data_source)
        async with Scanner(provider, settings, config.indicator_params(), sinks) as scanner:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task(
                    f"Scanning {len(request.symbols)} symbols ({request.tier.display_name})...",
                    total=None,
                )
                return await scanner.run(request)

    try:
        report = asyncio.run(run())
    except ProviderError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if json_output:
        console.print_json(report.model_dump_json(indent=2))
    else:
        display_report(report, config.display_limit)
        if details:
            display_evaluations(report)


@main.command()
def tiers():
    """List the available scan tiers and their criteria."""
    table = Table(title="Scan Tiers")
    table.add_column("Tier", style="bold")
    table.add_column("Name")
    table.add_column("Criteria")
    table.add_column("Description", style="dim")

    for tier in ScanTier:
        table.add_row(
            tier.value,
            tier.display_name,
            " AND ".join(TIER_CRITERIA[tier]),
            tier.description,
        )

    console.print(table)


def fetch_one_series(
    config: ScannerConfig,
    symbol: str,
    source: Optional[str],
    resolution: Optional[str],
    lookback_days: Optional[int],
) -> OHLCVSeries:
    """Fetch a single series for the per-symbol commands, exiting on provider errors."""

    async def run() -> OHLCVSeries:
        async with build_provider(config, source) as provider:
            to_time = datetime.now(timezone.utc)
            from_time = to_time - timedelta(days=lookback_days or config.default_lookback_days)
            return await provider.fetch_series(
                symbol, resolution or config.default_resolution, from_time, to_time
            )

    try:
        return asyncio.run(run())
    except ProviderError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


@main.command()
@click.argument("symbol")
@click.option("--source", type=click.Choice(["finnhub", "yahoo"]), default=None, help="Data source")
@click.option("--resolution", type=click.Choice([r.value for r in Resolution]), default=None)
@click.option("--lookback-days", type=int, default=None, help="Days of history to fetch")
@click.pass_context
def indicators(
    ctx,
    symbol: str,
    source: Optional[str],
    resolution: Optional[str],
    lookback_days: Optional[int],
):
    """Show the latest indicator values for SYMBOL."""
    config: ScannerConfig = ctx.obj["config"]
    params = config.indicator_params()
    symbol = symbol.upper()

    series = fetch_one_series(config, symbol, source, resolution, lookback_days)

    macd = compute_macd(series.closes, params.macd_fast, params.macd_slow, params.macd_signal)
    supertrend = compute_supertrend(
        series.highs, series.lows, series.closes,
        period=params.supertrend_period, multiplier=params.supertrend_multiplier,
    )
    squeeze = compute_squeeze(
        series.highs, series.lows, series.closes,
        period=params.squeeze_period, bb_mult=params.squeeze_bb_mult, kc_mult=params.squeeze_kc_mult,
    )

    def fmt(value: Optional[float]) -> str:
        return "n/a" if value is None else f"{value:.4f}"

    table = Table(title=f"{symbol} ({len(series)} bars)", show_header=False)
    table.add_column("Label", style="dim")
    table.add_column("Value")

    table.add_row("Close", fmt(latest_value(series.closes)))
    table.add_row("MACD line", fmt(latest_value(macd.macd_line)))
    table.add_row("MACD signal", fmt(latest_value(macd.signal_line)))
    table.add_row("MACD histogram", fmt(latest_value(macd.histogram)))

    if supertrend.is_empty:
        table.add_row("Supertrend", "n/a")
    elif supertrend.is_green(last_index(supertrend.trend)):
        table.add_row("Supertrend", Text("green", style="green"))
    else:
        table.add_row("Supertrend", Text("red", style="red"))

    table.add_row("Squeeze momentum", fmt(latest_value(squeeze.momentum)))
    if not squeeze.is_empty:
        table.add_row("Squeezing", "yes" if squeeze.is_squeezing[-1] else "no")

    console.print(table)


@main.command()
@click.argument("symbol")
@click.option("--source", type=click.Choice(["finnhub", "yahoo"]), default=None, help="Data source")
@click.option("--resolution", type=click.Choice([r.value for r in Resolution]), default=None)
@click.option("--lookback-days", type=int, default=None, help="Days of history to fetch")
@click.option("--rows", "-n", type=int, default=10, show_default=True, help="Most recent bars to show")
@click.pass_context
def show(
    ctx,
    symbol: str,
    source: Optional[str],
    resolution: Optional[str],
    lookback_days: Optional[int],
    rows: int,
):
    """Show the most recent OHLCV bars for SYMBOL."""
    config: ScannerConfig = ctx.obj["config"]
    symbol = symbol.upper()

    series = fetch_one_series(config, symbol, source, resolution, lookback_days)
    df = series_to_dataframe(series).tail(rows)

    table = Table(title=f"{symbol} {series.resolution} ({len(series)} bars)")
    table.add_column("Date", style="dim")
    for column in ("Open", "High", "Low", "Close"):
        table.add_column(column, justify="right")
    table.add_column("Volume", justify="right")

    for timestamp, row in df.iterrows():
        table.add_row(
            timestamp.strftime("%Y-%m-%d"),
            f"{row['open']:.2f}",
            f"{row['high']:.2f}",
            f"{row['low']:.2f}",
            f"{row['close']:.2f}",
            f"{row['volume']:,.0f}",
        )

    console.print(table)


if __name__ == "__main__":
    main()

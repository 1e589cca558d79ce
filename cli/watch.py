#!/usr/bin/env python3
"""
MACD crossover watch service.

Long-running service that polls Binance klines for one pair, recomputes
MACD/RSI/ADX and alerts on new buy/sell crossovers.

Usage:
    python -m cli.watch --pair BTCUSDT --interval 1h
    python -m cli.watch --config configs/watch.yaml --chart charts/btc.png
    python -m cli.watch --once --strategy macd_cross
"""
import argparse
import logging
import signal
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from macdwatch.automation.notifier import describe_signal
from macdwatch.automation.watcher import SignalWatcher
from macdwatch.data.binance import BinanceClient
from macdwatch.indicators.technical import AdxVariant
from macdwatch.shared.defaults import KLINE_INTERVALS
from macdwatch.shared.errors import MarketDataError
from macdwatch.shared.types import SignalType
from macdwatch.signals.config import PRESET_CONFIGS, CrossoverStrategy, WatchConfig, get_preset
from macdwatch.signals.config_loader import load_config_from_yaml


def setup_logging(log_path: Optional[Path] = None, verbose: bool = False):
    """
    Setup logging to stdout and optionally to file.

    Args:
        log_path: Path to log file (None = stdout only)
        verbose: If True, use DEBUG level, otherwise INFO
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear any existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Watch a Binance pair for MACD crossover signals",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Confirmed crossovers (RSI < 50 for buys, > 50 for sells, ADX > 20)
    python -m cli.watch --pair ETHUSDT --interval 15m

    # Every MACD/signal-line cross, single run, with chart
    python -m cli.watch --strategy macd_cross --once --chart charts/eth.png

    # Every crossover via the macd_cross preset
    python -m cli.watch --preset macd_cross --pair SOLUSDT

    # Settings from YAML, thresholds overridden on the command line
    python -m cli.watch --config configs/watch.yaml --adx-threshold 25
        """
    )
    parser.add_argument("--config", "-c", type=Path, help="YAML config file")
    parser.add_argument("--pair", "-p", help="Trading pair, e.g. BTCUSDT")
    parser.add_argument("--interval", "-i", choices=KLINE_INTERVALS, help="Kline interval")
    parser.add_argument("--limit", type=int, help="Candles per fetch (max 1000)")
    parser.add_argument("--poll-interval", type=float, help="Seconds between polls")
    parser.add_argument(
        "--preset",
        choices=list(PRESET_CONFIGS),
        help="Start from a preset signal config (applied before the other options)",
    )
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in CrossoverStrategy],
        help="macd_cross = every crossover, confirmed = RSI/ADX gated",
    )
    parser.add_argument("--rsi-threshold", type=float, help="RSI level separating buy/sell momentum")
    parser.add_argument("--adx-threshold", type=float, help="Minimum ADX for confirmed signals")
    parser.add_argument(
        "--adx-variant",
        choices=[v.value for v in AdxVariant],
        help="ADX directional movement from high/low or close only",
    )
    parser.add_argument("--chart", type=Path, help="Write MACD chart PNG here every cycle")
    parser.add_argument("--bell", action="store_true", help="Ring the terminal bell on alerts")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and print signals")
    parser.add_argument("--max-cycles", type=int, help="Stop after this many polls")
    parser.add_argument("--log-file", type=Path, help="Also log to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    return parser


def build_config(args: argparse.Namespace) -> WatchConfig:
    """YAML config (if given), then the preset, then command-line overrides."""
    config = load_config_from_yaml(args.config) if args.config else WatchConfig()
    if args.preset:
        config = replace(config, signals=get_preset(args.preset))

    signal_overrides = {
        key: value for key, value in (
            ("strategy", args.strategy),
            ("rsi_threshold", args.rsi_threshold),
            ("adx_threshold", args.adx_threshold),
            ("adx_variant", args.adx_variant),
        ) if value is not None
    }
    watch_overrides = {
        key: value for key, value in (
            ("pair", args.pair),
            ("interval", args.interval),
            ("limit", args.limit),
            ("poll_interval", args.poll_interval),
            ("chart_path", args.chart),
        ) if value is not None
    }
    if args.bell:
        watch_overrides["bell"] = True

    # replace() re-runs __post_init__ validation
    signals = replace(config.signals, **signal_overrides)
    return replace(config, signals=signals, **watch_overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    chart = None
    if config.chart_path is not None:
        from macdwatch.visualization.chart import MACDChart
        chart = MACDChart(config.chart_path, rsi_threshold=config.signals.rsi_threshold)

    watcher = SignalWatcher(BinanceClient(), config, chart=chart)

    if args.once:
        try:
            result = watcher.run_once()
        except MarketDataError as e:
            logger.error(f"Failed to fetch data: {e}")
            return 1
        finally:
            if chart is not None:
                chart.close()
        if result is None:
            return 1
        for s in result.signals.all_signals():
            print(describe_signal(s))
        latest = result.signals.latest()
        if latest is None:
            print(f"No {config.signals.strategy.value} signals in {len(result.candles)} candles")
        elif latest.signal_type == SignalType.BUY:
            print("Latest: Buy Signal")
        else:
            print("Latest: Sell Signal")
        return 0

    def _shutdown(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        watcher.stop()

    signal.signal(signal.SIGTERM, _shutdown)
    signal.signal(signal.SIGINT, _shutdown)

    try:
        watcher.run_forever(max_cycles=args.max_cycles)
    except Exception as e:
        logger.exception(f"Fatal error in watch loop: {e}")
        return 1
    finally:
        if chart is not None:
            chart.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

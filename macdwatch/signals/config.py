"""
Signal and watcher configuration.

Contains the crossover strategy choice, indicator parameters, watcher
settings and presets. Config validation runs at construction time
(fail fast with clear errors).
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional

from ..indicators.technical import AdxVariant
from ..shared.defaults import (
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    RSI_PERIOD, RSI_THRESHOLD,
    ADX_PERIOD, ADX_THRESHOLD,
    DEFAULT_PAIR, DEFAULT_INTERVAL, KLINE_LIMIT, KLINE_INTERVALS,
    POLL_INTERVAL_SECONDS,
)

SIGNAL_TYPES = ("buy", "sell", "all")


class CrossoverStrategy(Enum):
    """Which conditions a MACD crossover must meet to become a signal."""
    MACD_CROSS = "macd_cross"  # bare MACD/signal-line crossover
    CONFIRMED = "confirmed"  # crossover confirmed by RSI side and ADX strength


def _validate_config(
    *,
    macd_fast: int,
    macd_slow: int,
    macd_signal: int,
    rsi_period: int,
    adx_period: int,
    rsi_threshold: float,
    adx_threshold: float,
    signal_types: str,
) -> None:
    """Validate indicator and threshold parameters. Raises ValueError with clear message on failure."""
    for name, value in (
        ("macd_fast", macd_fast),
        ("macd_slow", macd_slow),
        ("macd_signal", macd_signal),
        ("rsi_period", rsi_period),
        ("adx_period", adx_period),
    ):
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")
    if macd_fast >= macd_slow:
        raise ValueError(
            f"MACD fast length ({macd_fast}) must be less than slow length ({macd_slow})"
        )
    if not (0 <= rsi_threshold <= 100):
        raise ValueError(f"rsi_threshold must be in [0, 100], got {rsi_threshold}")
    if not (0 <= adx_threshold <= 100):
        raise ValueError(f"adx_threshold must be in [0, 100], got {adx_threshold}")
    if signal_types not in SIGNAL_TYPES:
        raise ValueError(
            f"signal_types must be one of {', '.join(SIGNAL_TYPES)}, got {signal_types!r}"
        )


@dataclass
class SignalConfig:
    """Configuration for indicator calculation and crossover detection."""
    strategy: CrossoverStrategy = CrossoverStrategy.CONFIRMED

    # MACD parameters
    macd_fast: int = MACD_FAST
    macd_slow: int = MACD_SLOW
    macd_signal: int = MACD_SIGNAL

    # RSI parameters
    rsi_period: int = RSI_PERIOD
    rsi_threshold: float = RSI_THRESHOLD

    # ADX parameters
    adx_period: int = ADX_PERIOD
    adx_threshold: float = ADX_THRESHOLD
    adx_variant: AdxVariant = AdxVariant.HIGH_LOW

    # Signal filtering
    signal_types: str = "all"  # "buy", "sell", or "all"

    def __post_init__(self) -> None:
        # Accept enum values from YAML / CLI strings
        self.strategy = CrossoverStrategy(self.strategy)
        self.adx_variant = AdxVariant(self.adx_variant)
        _validate_config(
            macd_fast=self.macd_fast,
            macd_slow=self.macd_slow,
            macd_signal=self.macd_signal,
            rsi_period=self.rsi_period,
            adx_period=self.adx_period,
            rsi_threshold=self.rsi_threshold,
            adx_threshold=self.adx_threshold,
            signal_types=self.signal_types,
        )

    @property
    def uses_confirmation(self) -> bool:
        return self.strategy is CrossoverStrategy.CONFIRMED


@dataclass
class WatchConfig:
    """Configuration for the polling watcher: market, cadence and output."""
    pair: str = DEFAULT_PAIR
    interval: str = DEFAULT_INTERVAL
    limit: int = KLINE_LIMIT
    poll_interval: float = POLL_INTERVAL_SECONDS
    signals: SignalConfig = field(default_factory=SignalConfig)
    chart_path: Optional[Path] = None  # None = no chart rendering
    alert_existing: bool = False  # Alert on signals already present at startup
    bell: bool = False  # Ring the terminal bell on alerts

    def __post_init__(self) -> None:
        self.pair = self.pair.upper()
        if self.chart_path is not None:
            self.chart_path = Path(self.chart_path)
        if self.interval not in KLINE_INTERVALS:
            raise ValueError(
                f"Unknown interval {self.interval!r}. Available: {', '.join(KLINE_INTERVALS)}"
            )
        if not (1 <= self.limit <= 1000):
            raise ValueError(f"limit must be in [1, 1000], got {self.limit}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {self.poll_interval}")


PRESET_CONFIGS = {
    # Bare MACD/signal crossover, every cross is a signal
    "macd_cross": SignalConfig(strategy=CrossoverStrategy.MACD_CROSS),

    # Crossover confirmed by RSI side of 50 and ADX above 20
    "confirmed": SignalConfig(strategy=CrossoverStrategy.CONFIRMED),
}


def get_preset(name: str) -> SignalConfig:
    """Get a preset configuration by name."""
    if name not in PRESET_CONFIGS:
        available = ", ".join(PRESET_CONFIGS.keys())
        raise ValueError(f"Unknown preset: {name}. Available: {available}")
    return replace(PRESET_CONFIGS[name])

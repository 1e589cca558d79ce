"""
Shared types for candles and trading signals.

This module consolidates the records passed between the data layer,
the indicator core and the signal detector.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

import pandas as pd

# Epoch milliseconds from the exchange, or a pandas Timestamp after conversion
TimeValue = Union[int, pd.Timestamp]


class SignalType(Enum):
    """Type of trading signal."""
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Candle:
    """
    One OHLC candle.

    Only time and close are required; high and low are needed by the
    high/low ADX variant.
    """
    time: int  # epoch millis (candle open time)
    close: float
    high: Optional[float] = None
    low: Optional[float] = None
    open: Optional[float] = None
    volume: Optional[float] = None


@dataclass(frozen=True)
class Signal:
    """A point where a crossover condition became true."""
    time: TimeValue
    value: float  # MACD line value at the crossover
    signal_type: SignalType = SignalType.BUY
    index: int = -1  # position in the candle sequence


@dataclass(frozen=True)
class SignalSet:
    """Buy and sell signals, each ordered by time ascending."""
    buy_signals: Tuple[Signal, ...] = field(default_factory=tuple)
    sell_signals: Tuple[Signal, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.buy_signals and not self.sell_signals

    def all_signals(self) -> Tuple[Signal, ...]:
        """Buy and sell signals merged in scan order."""
        return tuple(sorted(self.buy_signals + self.sell_signals, key=lambda s: s.index))

    def latest(self, signal_type: Optional[SignalType] = None) -> Optional[Signal]:
        """Most recent signal, optionally restricted to one side."""
        if signal_type == SignalType.BUY:
            candidates = self.buy_signals
        elif signal_type == SignalType.SELL:
            candidates = self.sell_signals
        else:
            candidates = self.all_signals()
        return candidates[-1] if candidates else None

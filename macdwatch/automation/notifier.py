"""
Signal alerting.

The watcher hands newly detected signals to a Notifier. The default
LoggingNotifier reports them through logging and can ring the terminal bell.
"""
import logging
import numbers
import sys
from typing import Protocol, Sequence

import pandas as pd

from ..shared.types import Signal, SignalType

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Receives newly detected signals for one side."""

    def notify(self, signal_type: SignalType, signals: Sequence[Signal], pair: str) -> None:
        ...


def describe_signal(signal: Signal) -> str:
    """One-line description, e.g. 'BUY at 2024-01-01 12:00 UTC (MACD=-12.3400)'."""
    when = signal.time
    if isinstance(when, numbers.Integral):  # epoch millis
        when = pd.Timestamp(int(when), unit="ms", tz="UTC")
    if isinstance(when, pd.Timestamp):
        when = when.strftime("%Y-%m-%d %H:%M %Z").strip()
    return f"{signal.signal_type.value.upper()} at {when} (MACD={signal.value:.4f})"


class LoggingNotifier:
    """Logs alerts at WARNING so they stand out from the polling chatter."""

    def __init__(self, bell: bool = False, stream=None):
        """
        Initialize notifier.

        Args:
            bell: Ring the terminal bell with every alert
            stream: Where to write the bell character (default: sys.stdout)
        """
        self.bell = bell
        self.stream = stream

    def notify(self, signal_type: SignalType, signals: Sequence[Signal], pair: str) -> None:
        if not signals:
            return
        side = "Buy" if signal_type == SignalType.BUY else "Sell"
        logger.warning(f"{side} Signal Detected for {pair}: {describe_signal(signals[-1])}")
        for signal in signals[:-1]:
            logger.info(f"  earlier: {describe_signal(signal)}")
        if self.bell:
            stream = self.stream or sys.stdout
            stream.write("\a")
            stream.flush()

"""
Exception hierarchy for the watcher.

The indicator core never raises on degenerate numeric input (empty series,
division by zero); these errors cover malformed input and I/O failures.
"""


class MacdWatchError(Exception):
    """Base class for all watcher errors."""


class MarketDataError(MacdWatchError):
    """Fetching or decoding market data from the exchange failed."""


class MissingColumnError(MacdWatchError, ValueError):
    """Candle data lacks a column required by the requested calculation."""

    def __init__(self, column: str, purpose: str = ""):
        self.column = column
        message = f"Candle data is missing required column '{column}'"
        if purpose:
            message += f" (needed for {purpose})"
        super().__init__(message)

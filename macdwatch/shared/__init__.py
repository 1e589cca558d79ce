"""
Shared types, defaults and errors.

This module provides:
- Candle, Signal and SignalSet records
- Centralized default values for all indicator parameters
- The exception hierarchy used by the data and signal layers
"""
from .types import Candle, Signal, SignalSet, SignalType
from .errors import MacdWatchError, MarketDataError, MissingColumnError
from .defaults import (
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    RSI_PERIOD, RSI_THRESHOLD,
    ADX_PERIOD, ADX_THRESHOLD,
    POLL_INTERVAL_SECONDS, KLINE_LIMIT,
    DEFAULT_PAIR, DEFAULT_INTERVAL, QUOTE_ASSET,
)

__all__ = [
    'Candle',
    'Signal',
    'SignalSet',
    'SignalType',
    'MacdWatchError',
    'MarketDataError',
    'MissingColumnError',
    'MACD_FAST', 'MACD_SLOW', 'MACD_SIGNAL',
    'RSI_PERIOD', 'RSI_THRESHOLD',
    'ADX_PERIOD', 'ADX_THRESHOLD',
    'POLL_INTERVAL_SECONDS', 'KLINE_LIMIT',
    'DEFAULT_PAIR', 'DEFAULT_INTERVAL', 'QUOTE_ASSET',
]

"""
Market data module.

Provides:
- Candle normalisation and validation for the indicator core
- Binance REST client for USDT pairs and klines
"""
from .candles import to_frame, candle_times, to_datetimes, validate_candles
from .binance import BinanceClient, format_pair_label

__all__ = [
    'to_frame',
    'candle_times',
    'to_datetimes',
    'validate_candles',
    'BinanceClient',
    'format_pair_label',
]

"""
MACD crossover watcher.

Provides:
- Indicator calculations (EMA, MACD, RSI, ADX) over OHLC candles
- Crossover signal detection, optionally confirmed by RSI/ADX
- Market data fetching from the Binance REST API
- A polling watcher that alerts on new signals and renders charts
"""
__version__ = "0.1.0"

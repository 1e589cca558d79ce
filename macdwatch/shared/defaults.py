"""
Centralized default values for indicator and watcher parameters.

This is the SINGLE SOURCE OF TRUTH for parameter defaults.
All modules should import from here to ensure consistency.
"""

# MACD (Moving Average Convergence Divergence) defaults
MACD_FAST = 12  # Standard default
MACD_SLOW = 26  # Standard default
MACD_SIGNAL = 9  # Standard default

# RSI (Relative Strength Index) defaults
RSI_PERIOD = 14  # Wilder's original period
RSI_THRESHOLD = 50  # Buy below, sell above (momentum confirmation)

# ADX (Average Directional Index) defaults
ADX_PERIOD = 14
ADX_THRESHOLD = 20  # Below this the market is considered trendless

# Market data defaults
BINANCE_API_URL = "https://api.binance.com/api/v3"
QUOTE_ASSET = "USDT"
DEFAULT_PAIR = "BTCUSDT"
DEFAULT_INTERVAL = "1h"
KLINE_LIMIT = 500  # Candles per request (Binance allows up to 1000)
REQUEST_TIMEOUT = 10  # seconds

# Kline intervals accepted by the exchange
KLINE_INTERVALS = (
    "1s", "1m", "3m", "5m", "15m", "30m",
    "1h", "2h", "4h", "6h", "8h", "12h",
    "1d", "3d", "1w", "1M",
)

# Watch loop defaults
POLL_INTERVAL_SECONDS = 5.0

"""
Binance REST client for spot pairs and klines (public endpoints, no API key).
"""
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional

import pandas as pd

from .candles import validate_candles
from ..shared.defaults import BINANCE_API_URL, KLINE_LIMIT, QUOTE_ASSET, REQUEST_TIMEOUT
from ..shared.errors import MarketDataError

logger = logging.getLogger(__name__)

USER_AGENT = "macdwatch/0.1"

# Positions in a Binance kline array
# [open_time, open, high, low, close, volume, close_time, quote_volume, trades, ...]
KLINE_FIELDS = {"time": 0, "open": 1, "high": 2, "low": 3, "close": 4, "volume": 5}


def format_pair_label(ticker: Dict[str, Any]) -> str:
    """Label like 'BTCUSDT (Vol: 1234.57M)' from a 24h ticker."""
    volume_millions = float(ticker.get("quoteVolume", 0.0)) / 1_000_000
    return f"{ticker['symbol']} (Vol: {volume_millions:.2f}M)"


class BinanceClient:
    """Fetches tickers and klines from the Binance spot REST API."""

    def __init__(self, base_url: str = BINANCE_API_URL, timeout: float = REQUEST_TIMEOUT):
        """
        Initialize client.

        Args:
            base_url: REST API base, e.g. https://api.binance.com/api/v3
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET endpoint and decode JSON. Raises MarketDataError on any failure."""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        if params:
            url += "?" + urllib.parse.urlencode(params)
        logger.debug(f"GET {url}")
        try:
            req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read().decode()
            return json.loads(body)
        except urllib.error.HTTPError as e:
            raise MarketDataError(f"HTTP {e.code} from {endpoint}: {e.reason}") from e
        except (urllib.error.URLError, OSError) as e:
            raise MarketDataError(f"Failed to reach {endpoint}: {e}") from e
        except json.JSONDecodeError as e:
            raise MarketDataError(f"Invalid JSON from {endpoint}: {e}") from e

    def fetch_usdt_pairs(self, quote_asset: str = QUOTE_ASSET) -> List[Dict[str, Any]]:
        """
        24h tickers quoted in quote_asset, sorted by quote volume (descending).

        Returns:
            List of ticker dicts as returned by /ticker/24hr
        """
        tickers = self._get("ticker/24hr")
        if not isinstance(tickers, list):
            raise MarketDataError("Unexpected /ticker/24hr response (expected a list)")
        pairs = [t for t in tickers if str(t.get("symbol", "")).endswith(quote_asset)]
        pairs.sort(key=lambda t: float(t.get("quoteVolume", 0.0)), reverse=True)
        logger.info(f"Found {len(pairs)} {quote_asset} pairs")
        return pairs

    def fetch_klines(self, pair: str, interval: str, limit: int = KLINE_LIMIT) -> pd.DataFrame:
        """
        Fetch the most recent candles for a pair.

        Args:
            pair: Symbol, e.g. BTCUSDT
            interval: Kline interval, e.g. 1h
            limit: Number of candles (max 1000)

        Returns:
            DataFrame with time (open time, epoch millis) and open/high/low/close/volume
            floats; empty when the exchange returned no candles
        """
        raw = self._get("klines", {"symbol": pair.upper(), "interval": interval, "limit": limit})
        if not isinstance(raw, list):
            raise MarketDataError(f"Unexpected /klines response for {pair} (expected a list)")
        if not raw:
            logger.warning(f"No klines returned for {pair} {interval}")
            return pd.DataFrame(columns=list(KLINE_FIELDS))

        try:
            df = pd.DataFrame(
                {name: [row[pos] for row in raw] for name, pos in KLINE_FIELDS.items()}
            )
            df["time"] = df["time"].astype("int64")
            for col in ("open", "high", "low", "close", "volume"):
                df[col] = df[col].astype(float)
            validate_candles(df)
        except (IndexError, TypeError, ValueError) as e:
            raise MarketDataError(f"Malformed kline data for {pair}: {e}") from e

        logger.debug(f"Fetched {len(df)} {interval} candles for {pair}")
        return df

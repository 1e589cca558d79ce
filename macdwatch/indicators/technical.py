"""
Technical indicators for MACD crossover signals.

Provides EMA, MACD, RSI and ADX calculations over candle data. Every
function is pure: it builds fresh Series from its input and returns a
result aligned 1:1 with the candle sequence (positional index 0..n-1),
with NaN marking warm-up positions that have no defined value.
"""
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..data.candles import CandleInput, candle_times, to_frame
from ..shared.defaults import (
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    RSI_PERIOD, ADX_PERIOD,
)
from ..shared.errors import MissingColumnError

logger = logging.getLogger(__name__)


class AdxVariant(Enum):
    """How directional movement and true range are derived."""
    CLOSE_ONLY = "close_only"  # close-to-close moves, no mutual exclusivity
    HIGH_LOW = "high_low"  # Wilder's directional movement from high/low


@dataclass(frozen=True)
class MACDResult:
    """MACD series bundle, all aligned with the candle sequence."""
    time: pd.Series
    macd: pd.Series
    signal: pd.Series
    histogram: pd.Series

    def __len__(self) -> int:
        return len(self.macd)


@dataclass(frozen=True)
class DirectionalMovement:
    """Raw +DM, -DM and true range; index 0 is NaN (no previous candle)."""
    plus_dm: pd.Series
    minus_dm: pd.Series
    true_range: pd.Series


def _as_frame(candles: CandleInput) -> pd.DataFrame:
    return candles if _is_normalised(candles) else to_frame(candles)


def _is_normalised(candles) -> bool:
    return (
        isinstance(candles, pd.DataFrame)
        and "close" in candles.columns
        and isinstance(candles.index, pd.RangeIndex)
        and candles.index.start == 0
    )


def compute_ema(values: Union[Sequence[float], pd.Series], length: int) -> pd.Series:
    """
    Calculate Exponential Moving Average.

    k = 2 / (length + 1); the first output equals the first input and
    ema[i] = values[i] * k + ema[i-1] * (1 - k). There is no window: each
    value depends on the whole history back to the seed. Leading NaN
    entries stay NaN and the first valid entry seeds the average.

    Args:
        values: Input values
        length: EMA length (>= 1)

    Returns:
        Series of the same length as values
    """
    if length < 1:
        raise ValueError(f"EMA length must be >= 1, got {length}")
    series = values if isinstance(values, pd.Series) else pd.Series(values, dtype=float)
    if series.empty:
        return series.astype(float)
    return series.astype(float).ewm(span=length, adjust=False).mean()


def compute_macd(
    candles: CandleInput,
    fast: int = MACD_FAST,
    slow: int = MACD_SLOW,
    signal: int = MACD_SIGNAL,
) -> MACDResult:
    """
    Calculate MACD (Moving Average Convergence Divergence).

    macd = EMA(close, fast) - EMA(close, slow); signal = EMA(macd, signal);
    histogram = macd - signal.

    Returns:
        MACDResult with time, macd, signal and histogram series
    """
    df = _as_frame(candles)
    close = df["close"]
    if 0 < len(close) < slow:
        logger.debug(f"MACD: {len(close)} candles is shorter than slow length {slow}")

    ema_fast = compute_ema(close, fast)
    ema_slow = compute_ema(close, slow)
    macd_line = ema_fast - ema_slow
    signal_line = compute_ema(macd_line, signal)
    histogram = macd_line - signal_line

    return MACDResult(
        time=candle_times(df),
        macd=macd_line.rename("macd"),
        signal=signal_line.rename("signal"),
        histogram=histogram.rename("histogram"),
    )


def compute_rsi(candles: CandleInput, length: int = RSI_PERIOD) -> pd.Series:
    """
    Calculate Relative Strength Index (RSI) with Wilder smoothing.

    The first `length` close-to-close changes are averaged to seed the
    average gain/loss; every later change updates them as
    avg = (avg * (length - 1) + current) / length.

    RSI = 100 - (100 / (1 + RS)), RS = Average Gain / Average Loss

    Returns:
        Series of candle length; the first `length` entries are NaN.
        An average loss of zero saturates RSI at 100.
    """
    if length < 1:
        raise ValueError(f"RSI length must be >= 1, got {length}")
    close = _as_frame(candles)["close"]
    rsi = pd.Series(np.nan, index=close.index, name="rsi")
    if len(close) <= length:
        logger.debug(f"RSI: {len(close)} candles, need more than {length} for warm-up")
        return rsi

    delta = close.diff()
    gain = delta.clip(lower=0)
    loss = (-delta).clip(lower=0)

    # Seed at candle `length` with the simple mean of the first `length` changes
    seeded_gain = gain.iloc[length:].copy()
    seeded_loss = loss.iloc[length:].copy()
    seeded_gain.iloc[0] = gain.iloc[1:length + 1].mean()
    seeded_loss.iloc[0] = loss.iloc[1:length + 1].mean()

    avg_gain = seeded_gain.ewm(alpha=1.0 / length, adjust=False).mean()
    avg_loss = seeded_loss.ewm(alpha=1.0 / length, adjust=False).mean()

    with np.errstate(divide="ignore", invalid="ignore"):
        rs = avg_gain / avg_loss
        values = 100 - (100 / (1 + rs))
    values = values.where(avg_loss != 0, 100.0)

    rsi.iloc[length:] = values.to_numpy()
    return rsi


def directional_movement(
    candles: CandleInput,
    variant: AdxVariant = AdxVariant.HIGH_LOW,
) -> DirectionalMovement:
    """
    Calculate +DM, -DM and true range per candle.

    CLOSE_ONLY: +DM = max(close - prev_close, 0), -DM = max(prev_close - close, 0),
    TR = |close - prev_close|.

    HIGH_LOW: up = high - prev_high, down = prev_low - low; +DM = up only when
    up > down and up > 0, -DM = down only when down > up and down > 0 (at most
    one is nonzero per candle); TR = max(high - low, |high - prev_close|,
    |low - prev_close|).
    """
    df = _as_frame(candles)
    variant = AdxVariant(variant)
    close = df["close"]
    prev_close = close.shift(1)

    if variant is AdxVariant.CLOSE_ONLY:
        delta = close - prev_close
        plus_dm = delta.clip(lower=0)
        minus_dm = (-delta).clip(lower=0)
        tr = delta.abs()
    else:
        for col in ("high", "low"):
            if col not in df.columns:
                raise MissingColumnError(col, "high/low ADX")
        high, low = df["high"], df["low"]
        up_move = high - high.shift(1)
        down_move = low.shift(1) - low
        plus_dm = up_move.where((up_move > down_move) & (up_move > 0), 0.0)
        minus_dm = down_move.where((down_move > up_move) & (down_move > 0), 0.0)
        tr = pd.concat([
            high - low,
            (high - prev_close).abs(),
            (low - prev_close).abs(),
        ], axis=1).max(axis=1)
        # No previous candle at index 0
        if len(df):
            plus_dm.iloc[0] = np.nan
            minus_dm.iloc[0] = np.nan
            tr.iloc[0] = np.nan

    return DirectionalMovement(
        plus_dm=plus_dm.rename("plus_dm"),
        minus_dm=minus_dm.rename("minus_dm"),
        true_range=tr.rename("true_range"),
    )


def compute_adx(
    candles: CandleInput,
    length: int = ADX_PERIOD,
    variant: AdxVariant = AdxVariant.HIGH_LOW,
) -> pd.Series:
    """
    Calculate ADX (Average Directional Index) for trend strength.

    +DM, -DM and TR are each smoothed with the EMA engine; then
    +DI = 100 * smoothed +DM / smoothed TR (and -DI likewise),
    DX = 100 * |+DI - -DI| / (+DI + -DI), ADX = EMA(DX, length).

    ADX measures trend strength (0-100):
    - ADX > 25: Strong trend
    - ADX < 20: Weak/no trend

    Returns:
        Series of candle length; index 0 is NaN, and DX is NaN wherever
        +DI + -DI is zero (flat stretch), which leaves ADX NaN until the
        first defined DX.
    """
    dm = directional_movement(candles, variant)

    smoothed_plus = compute_ema(dm.plus_dm, length)
    smoothed_minus = compute_ema(dm.minus_dm, length)
    smoothed_tr = compute_ema(dm.true_range, length).replace(0, np.nan)

    plus_di = 100 * (smoothed_plus / smoothed_tr)
    minus_di = 100 * (smoothed_minus / smoothed_tr)
    dx = 100 * (plus_di - minus_di).abs() / (plus_di + minus_di).replace(0, np.nan)

    return compute_ema(dx, length).rename("adx")


class TechnicalIndicators:
    """Calculates the MACD, RSI and ADX series for one candle sequence."""

    def __init__(
        self,
        macd_fast: int = MACD_FAST,  # From shared.defaults
        macd_slow: int = MACD_SLOW,  # From shared.defaults
        macd_signal: int = MACD_SIGNAL,  # From shared.defaults
        rsi_period: int = RSI_PERIOD,  # From shared.defaults
        adx_period: int = ADX_PERIOD,  # From shared.defaults
        adx_variant: AdxVariant = AdxVariant.HIGH_LOW,
    ):
        """
        Initialize indicator calculator.

        Args:
            macd_fast: MACD fast EMA length (default: shared.defaults.MACD_FAST)
            macd_slow: MACD slow EMA length (default: shared.defaults.MACD_SLOW)
            macd_signal: MACD signal EMA length (default: shared.defaults.MACD_SIGNAL)
            rsi_period: RSI length (default: shared.defaults.RSI_PERIOD)
            adx_period: ADX smoothing length (default: shared.defaults.ADX_PERIOD)
            adx_variant: ADX directional-movement variant
        """
        self.macd_fast = macd_fast
        self.macd_slow = macd_slow
        self.macd_signal = macd_signal
        self.rsi_period = rsi_period
        self.adx_period = adx_period
        self.adx_variant = AdxVariant(adx_variant)

    def resolve_adx_variant(self, df: pd.DataFrame) -> AdxVariant:
        """
        HIGH_LOW needs high/low columns; close-only candles fall back to CLOSE_ONLY.
        """
        if self.adx_variant is AdxVariant.HIGH_LOW and not {"high", "low"} <= set(df.columns):
            logger.info("Candles carry no high/low, using close-only ADX")
            return AdxVariant.CLOSE_ONLY
        return self.adx_variant

    def _compute_macd_block(self, df: pd.DataFrame) -> Tuple[str, Dict[str, pd.Series], float]:
        """Compute MACD block; returns (timing_key, {col: series}, elapsed)."""
        t0 = time.perf_counter()
        result = compute_macd(df, self.macd_fast, self.macd_slow, self.macd_signal)
        cols = {
            "macd_line": result.macd,
            "macd_signal": result.signal,
            "macd_histogram": result.histogram,
        }
        return "indicator_macd", cols, time.perf_counter() - t0

    def _compute_rsi_block(self, df: pd.DataFrame) -> Tuple[str, Dict[str, pd.Series], float]:
        """Compute RSI block; returns (timing_key, {col: series}, elapsed)."""
        t0 = time.perf_counter()
        return "indicator_rsi", {"rsi": compute_rsi(df, self.rsi_period)}, time.perf_counter() - t0

    def _compute_adx_block(self, df: pd.DataFrame) -> Tuple[str, Dict[str, pd.Series], float]:
        """Compute ADX block; returns (timing_key, {col: series}, elapsed)."""
        t0 = time.perf_counter()
        adx = compute_adx(df, self.adx_period, self.resolve_adx_variant(df))
        return "indicator_adx", {"adx": adx}, time.perf_counter() - t0

    def calculate_all(
        self,
        candles: CandleInput,
        timings: Optional[Dict[str, float]] = None,
        max_workers: Optional[int] = 1,
    ) -> pd.DataFrame:
        """
        Calculate all indicators and return as DataFrame.

        MACD, RSI and ADX share no state, so they may run in parallel via
        ThreadPoolExecutor when max_workers > 1.

        Args:
            candles: Candle records or DataFrame
            timings: If provided, accumulate per-indicator elapsed seconds
            max_workers: Thread pool size (None = cpu_count); 1 = sequential.

        Returns:
            DataFrame with time, close, macd_line, macd_signal, macd_histogram, rsi, adx
        """
        def _acc(key: str, elapsed: float) -> None:
            if timings is not None:
                timings[key] = timings.get(key, 0.0) + elapsed

        df = _as_frame(candles)
        out = pd.DataFrame(index=df.index)
        out["time"] = candle_times(df)
        out["close"] = df["close"]

        blocks = (self._compute_macd_block, self._compute_rsi_block, self._compute_adx_block)
        workers = max(1, max_workers) if max_workers is not None else (os.cpu_count() or 1)

        if workers <= 1:
            results = [block(df) for block in blocks]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(block, df) for block in blocks]
                results = [future.result() for future in as_completed(futures)]

        for key, cols, elapsed in results:
            _acc(key, elapsed)
            for name, series in cols.items():
                out[name] = series

        return out[["time", "close", "macd_line", "macd_signal", "macd_histogram", "rsi", "adx"]]

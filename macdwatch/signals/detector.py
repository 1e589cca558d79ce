"""
MACD crossover signal detector.

Turns a candle sequence into aligned MACD, RSI and ADX series and scans
them for crossover events:
- Indicators calculate values from candle data
- Signal rules interpret those values to create buy/sell signals
"""
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..data.candles import CandleInput, to_frame
from ..indicators.technical import MACDResult, TechnicalIndicators
from ..shared.defaults import RSI_THRESHOLD, ADX_THRESHOLD
from ..shared.types import Signal, SignalSet, SignalType
from .config import CrossoverStrategy, SignalConfig
from .rules import AdxRule, MacdCrossRule, RsiRule, SignalRule, apply_rules, get_crossover_rules

logger = logging.getLogger(__name__)

SeriesLike = Union[pd.Series, Sequence[Optional[float]]]


@dataclass(frozen=True)
class PipelineResult:
    """Everything one pipeline run produced, aligned by candle index."""
    candles: pd.DataFrame
    macd: MACDResult
    rsi: pd.Series
    adx: pd.Series
    signals: SignalSet

    @property
    def has_warmup(self) -> bool:
        """False when there were too few candles for any RSI/ADX value."""
        return bool(self.rsi.notna().any() and self.adx.notna().any())


def _positional(values: SeriesLike, name: str, length: int) -> pd.Series:
    series = pd.Series(np.asarray(values, dtype=float), name=name)
    if len(series) != length:
        raise ValueError(f"{name} has {len(series)} values, expected {length} (MACD length)")
    return series


def _rules_for_series(has_rsi: bool, has_adx: bool) -> List[SignalRule]:
    rules: List[SignalRule] = [MacdCrossRule()]
    if has_rsi:
        rules.append(RsiRule())
    if has_adx:
        rules.append(AdxRule())
    return rules


def _collect(mask: pd.Series, macd: MACDResult, signal_type: SignalType) -> tuple:
    values = macd.macd.to_numpy(dtype=float)
    return tuple(
        Signal(time=macd.time.iloc[i], value=float(values[i]), signal_type=signal_type, index=int(i))
        for i in np.flatnonzero(mask.to_numpy())
    )


def detect_crossovers(
    macd: MACDResult,
    rsi: Optional[SeriesLike] = None,
    adx: Optional[SeriesLike] = None,
    rsi_threshold: float = RSI_THRESHOLD,
    adx_threshold: float = ADX_THRESHOLD,
    strategy: Optional[CrossoverStrategy] = None,
) -> SignalSet:
    """
    Scan the MACD bundle for signal-line crossovers.

    MACD_CROSS: every upward cross is a buy, every downward cross a sell.
    CONFIRMED: additionally requires rsi < rsi_threshold (buy) or
    rsi > rsi_threshold (sell), and adx > adx_threshold for both. Positions
    where RSI or ADX is NaN never confirm.

    Args:
        macd: MACD bundle from compute_macd
        rsi: RSI series aligned with macd (required for CONFIRMED)
        adx: ADX series aligned with macd (required for CONFIRMED)
        rsi_threshold: RSI level separating buy and sell momentum
        adx_threshold: Minimum ADX for a confirmed signal
        strategy: Crossover strategy. When omitted, every supplied series
            gates the crossover (RSI side and/or ADX strength); with neither
            supplied every crossover is a signal

    Returns:
        SignalSet with buy and sell signals in ascending time order
    """
    config = SignalConfig(
        strategy=strategy or CrossoverStrategy.CONFIRMED,
        rsi_threshold=rsi_threshold,
        adx_threshold=adx_threshold,
    )
    if strategy is None:
        # Gate with whatever was supplied
        rules = _rules_for_series(rsi is not None, adx is not None)
    elif config.uses_confirmation:
        if rsi is None or adx is None:
            raise ValueError("CONFIRMED strategy needs both RSI and ADX series")
        rules = get_crossover_rules(config)
    else:
        rsi = adx = None
        rules = get_crossover_rules(config)

    length = len(macd)
    frame = pd.DataFrame({
        "macd_line": macd.macd.to_numpy(dtype=float),
        "macd_signal": _positional(macd.signal, "signal", length).to_numpy(),
    })
    if rsi is not None:
        frame["rsi"] = _positional(rsi, "rsi", length)
    if adx is not None:
        frame["adx"] = _positional(adx, "adx", length)

    buy_mask, sell_mask = apply_rules(frame, rules, config)
    return SignalSet(
        buy_signals=_collect(buy_mask, macd, SignalType.BUY),
        sell_signals=_collect(sell_mask, macd, SignalType.SELL),
    )


def filter_signals_by_type(signals: SignalSet, signal_types: str) -> SignalSet:
    """
    Keep only signals of the requested type.

    Args:
        signals: Detected signals
        signal_types: "buy", "sell", or "all"

    Returns:
        Filtered SignalSet (same object if signal_types == "all")
    """
    if signal_types == "buy":
        return SignalSet(buy_signals=signals.buy_signals)
    if signal_types == "sell":
        return SignalSet(sell_signals=signals.sell_signals)
    return signals


class SignalDetector:
    """
    Full pipeline: candles -> MACD/RSI/ADX -> SignalSet.

    Holds only configuration; every run recomputes from the given candles.
    """

    def __init__(self, config: Optional[SignalConfig] = None):
        """
        Initialize the signal detector.

        Args:
            config: SignalConfig with indicator settings (default: SignalConfig())
        """
        self.config = config or SignalConfig()
        self.technical_indicators = TechnicalIndicators(
            macd_fast=self.config.macd_fast,
            macd_slow=self.config.macd_slow,
            macd_signal=self.config.macd_signal,
            rsi_period=self.config.rsi_period,
            adx_period=self.config.adx_period,
            adx_variant=self.config.adx_variant,
        )

    def run(
        self,
        candles: CandleInput,
        timings: Optional[Dict[str, float]] = None,
    ) -> PipelineResult:
        """
        Calculate indicators and detect signals.

        Args:
            candles: Candle records or DataFrame (time-ordered)
            timings: If provided, per-stage elapsed seconds are accumulated here

        Returns:
            PipelineResult with the MACD bundle, RSI, ADX and signals
        """
        df = to_frame(candles)
        indicator_df = self.technical_indicators.calculate_all(df, timings=timings)
        macd = MACDResult(
            time=indicator_df["time"],
            macd=indicator_df["macd_line"].rename("macd"),
            signal=indicator_df["macd_signal"].rename("signal"),
            histogram=indicator_df["macd_histogram"].rename("histogram"),
        )

        t0 = time.perf_counter()
        signals = detect_crossovers(
            macd,
            rsi=indicator_df["rsi"],
            adx=indicator_df["adx"],
            rsi_threshold=self.config.rsi_threshold,
            adx_threshold=self.config.adx_threshold,
            strategy=self.config.strategy,
        )
        signals = filter_signals_by_type(signals, self.config.signal_types)
        if timings is not None:
            timings["signal_detection"] = timings.get("signal_detection", 0.0) + time.perf_counter() - t0

        logger.debug(
            f"{len(df)} candles -> {len(signals.buy_signals)} buy / "
            f"{len(signals.sell_signals)} sell signals ({self.config.strategy.value})"
        )
        return PipelineResult(
            candles=df,
            macd=macd,
            rsi=indicator_df["rsi"],
            adx=indicator_df["adx"],
            signals=signals,
        )

    def detect_signals(self, candles: CandleInput) -> SignalSet:
        """Detect signals only; see run() for the indicator series."""
        return self.run(candles).signals

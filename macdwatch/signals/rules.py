"""
Pluggable signal rules for MACD crossover detection.

Each rule evaluates the aligned indicator frame and returns boolean buy/sell
masks; the detector ANDs the masks of every active rule. The crossover rule
produces candidate events, the RSI and ADX rules only gate them.
"""
from typing import Any, List, Protocol, Tuple

import pandas as pd

from .config import CrossoverStrategy

Masks = Tuple[pd.Series, pd.Series]


class SignalRule(Protocol):
    """Protocol for a rule that evaluates all rows and returns buy/sell masks."""

    def evaluate(self, frame: pd.DataFrame, config: Any) -> Masks:
        """
        Evaluate rule on every row.

        Args:
            frame: Indicator frame (macd_line, macd_signal, optional rsi/adx)
            config: SignalConfig or any object with the threshold attributes

        Returns:
            (buy_mask, sell_mask) boolean Series aligned with frame
        """
        ...


class MacdCrossRule:
    """
    MACD line crossing the signal line.

    Buy at i when macd[i-1] <= signal[i-1] and macd[i] > signal[i];
    sell at i when macd[i-1] >= signal[i-1] and macd[i] < signal[i].
    """

    def evaluate(self, frame: pd.DataFrame, config: Any) -> Masks:
        macd_line = frame["macd_line"]
        signal_line = frame["macd_signal"]
        prev_macd = macd_line.shift(1)
        prev_signal = signal_line.shift(1)
        buy = (macd_line > signal_line) & (prev_macd <= prev_signal)
        sell = (macd_line < signal_line) & (prev_macd >= prev_signal)
        return buy, sell


class RsiRule:
    """Momentum confirmation: buy below the RSI threshold, sell above it."""

    def evaluate(self, frame: pd.DataFrame, config: Any) -> Masks:
        rsi = frame["rsi"]
        threshold = config.rsi_threshold
        # NaN (warm-up) compares False and suppresses the signal
        return rsi < threshold, rsi > threshold


class AdxRule:
    """Trend-strength confirmation: ADX above the threshold for both sides."""

    def evaluate(self, frame: pd.DataFrame, config: Any) -> Masks:
        strong = frame["adx"] > config.adx_threshold
        return strong, strong


def get_crossover_rules(config: Any) -> List[SignalRule]:
    """
    Return the list of rules for the configured crossover strategy.

    Order: MACD cross first, then RSI and ADX gates for CONFIRMED.
    """
    rules: List[SignalRule] = [MacdCrossRule()]
    if CrossoverStrategy(getattr(config, "strategy", CrossoverStrategy.MACD_CROSS)) is CrossoverStrategy.CONFIRMED:
        rules.append(RsiRule())
        rules.append(AdxRule())
    return rules


def apply_rules(frame: pd.DataFrame, rules: List[SignalRule], config: Any) -> Masks:
    """AND the buy and sell masks of all rules."""
    buy = pd.Series(True, index=frame.index)
    sell = pd.Series(True, index=frame.index)
    for rule in rules:
        rule_buy, rule_sell = rule.evaluate(frame, config)
        buy &= rule_buy.astype(bool)
        sell &= rule_sell.astype(bool)
    return buy, sell

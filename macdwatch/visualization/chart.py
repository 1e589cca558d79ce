"""
Renders the MACD chart with buy/sell markers and an RSI panel.
"""
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import matplotlib
matplotlib.use("Agg")  # Headless: the watcher writes image files
import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ..data.candles import to_datetimes
from ..signals.detector import PipelineResult

logger = logging.getLogger(__name__)

MACD_COLOR = (75 / 255, 192 / 255, 192 / 255)
SIGNAL_COLOR = (153 / 255, 102 / 255, 1.0)
NEGATIVE_COLOR = (1.0, 99 / 255, 132 / 255)


class MACDChart:
    """
    Owns one matplotlib figure and redraws it for every pipeline result.

    The figure is held by the instance, so several charts (e.g. one per pair)
    can live side by side.
    """

    def __init__(
        self,
        output_path: Union[str, Path],
        figsize: Tuple[float, float] = (14, 8),
        rsi_threshold: Optional[float] = None,
        dpi: int = 100,
    ):
        """
        Initialize the chart.

        Args:
            output_path: PNG file rewritten on every render
            figsize: Figure size (width, height)
            rsi_threshold: Draw this level on the RSI panel (None = no line)
            dpi: Output resolution
        """
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.figsize = figsize
        self.rsi_threshold = rsi_threshold
        self.dpi = dpi
        self.figure = None

    def close(self) -> None:
        """Release the current figure."""
        if self.figure is not None:
            plt.close(self.figure)
            self.figure = None

    def render(self, result: PipelineResult, pair: str = "") -> Path:
        """
        Draw MACD, signal line, histogram, signals and RSI; save to output_path.

        Args:
            result: Pipeline output to draw
            pair: Pair name for the title

        Returns:
            Path to saved chart
        """
        self.close()
        fig, (ax_macd, ax_rsi) = plt.subplots(
            2, 1, figsize=self.figsize, sharex=True,
            gridspec_kw={"height_ratios": [3, 1]},
        )
        self.figure = fig

        times = to_datetimes(result.macd.time)
        is_datetime = pd.api.types.is_datetime64_any_dtype(times)
        if is_datetime and times.dt.tz is not None:
            times = times.dt.tz_convert(None)
        x = times.to_numpy()
        macd = result.macd

        # Histogram bars, colour by sign
        histogram = macd.histogram.to_numpy(dtype=float)
        positive = histogram >= 0
        colors = np.where(positive[:, None], [MACD_COLOR + (0.4,)], [NEGATIVE_COLOR + (0.4,)])
        width = _bar_width(times, is_datetime)
        ax_macd.bar(x, histogram, width=width, color=colors, label="Histogram")

        ax_macd.plot(x, macd.macd.to_numpy(), color=MACD_COLOR, linewidth=2, label="MACD")
        ax_macd.plot(x, macd.signal.to_numpy(), color=SIGNAL_COLOR, linewidth=2, label="Signal Line")

        signals = result.signals
        if signals.buy_signals:
            ax_macd.scatter(
                [x[s.index] for s in signals.buy_signals],
                [s.value for s in signals.buy_signals],
                color="green", marker="^", s=120, zorder=5,
                label="Buy Signal", edgecolors="darkgreen", linewidths=1.5,
            )
        if signals.sell_signals:
            ax_macd.scatter(
                [x[s.index] for s in signals.sell_signals],
                [s.value for s in signals.sell_signals],
                color="red", marker="v", s=120, zorder=5,
                label="Sell Signal", edgecolors="darkred", linewidths=1.5,
            )

        ax_macd.axhline(0, color="gray", linewidth=0.8, alpha=0.6)
        ax_macd.set_title(f"{pair} MACD".strip(), fontsize=14, fontweight="bold")
        ax_macd.legend(loc="best", fontsize=9)
        ax_macd.grid(True, alpha=0.3)

        ax_rsi.plot(x, result.rsi.to_numpy(), color="slateblue", linewidth=1.2, label="RSI")
        if self.rsi_threshold is not None:
            ax_rsi.axhline(self.rsi_threshold, color="gray", linestyle="--", linewidth=0.8)
        ax_rsi.set_ylim(0, 100)
        ax_rsi.set_ylabel("RSI")
        ax_rsi.grid(True, alpha=0.3)

        if len(times) and is_datetime:
            ax_rsi.xaxis.set_major_formatter(mdates.DateFormatter("%Y-%m-%d %H:%M"))
            ax_rsi.xaxis.set_major_locator(mdates.AutoDateLocator())
            fig.autofmt_xdate()

        fig.tight_layout()
        fig.savefig(self.output_path, dpi=self.dpi)
        logger.debug(f"Rendered {len(times)} candles to {self.output_path}")
        return self.output_path


def _bar_width(times: pd.Series, is_datetime: bool) -> float:
    """Bar width in x units: 80% of the typical candle spacing."""
    if len(times) < 2:
        return 0.8
    if is_datetime:
        spacing = times.diff().median()
        return spacing.total_seconds() / 86400 * 0.8  # matplotlib date units are days
    return 0.8

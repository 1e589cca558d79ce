"""Tests for the MACD chart renderer."""
import numpy as np
import pandas as pd
import pytest

from macdwatch.shared.types import Candle
from macdwatch.signals.config import CrossoverStrategy, SignalConfig
from macdwatch.signals.detector import SignalDetector
from macdwatch.visualization.chart import MACDChart, _bar_width


@pytest.fixture
def result():
    t = np.arange(150)
    close = 100 + 4 * np.sin(t / 7)
    df = pd.DataFrame({
        "time": 1_700_000_000_000 + t * 3_600_000,
        "high": close + 1,
        "low": close - 1,
        "close": close,
    })
    config = SignalConfig(strategy=CrossoverStrategy.MACD_CROSS)
    return SignalDetector(config).run(df)


class TestMACDChart:
    def test_render_writes_png(self, result, tmp_path):
        chart = MACDChart(tmp_path / "charts" / "btc.png", rsi_threshold=50)
        path = chart.render(result, "BTCUSDT")
        assert path == tmp_path / "charts" / "btc.png"
        assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
        chart.close()
        assert chart.figure is None

    def test_figure_has_macd_and_rsi_panels(self, result, tmp_path):
        chart = MACDChart(tmp_path / "out.png")
        chart.render(result, "ETHUSDT")
        ax_macd, ax_rsi = chart.figure.axes
        assert ax_macd.get_title() == "ETHUSDT MACD"
        labels = ax_macd.get_legend_handles_labels()[1]
        assert {"MACD", "Signal Line", "Histogram", "Buy Signal", "Sell Signal"} <= set(labels)
        assert ax_rsi.get_ylim() == (0, 100)
        chart.close()

    def test_rerender_replaces_figure(self, result, tmp_path):
        chart = MACDChart(tmp_path / "out.png")
        chart.render(result)
        first = chart.figure
        chart.render(result)
        assert chart.figure is not first
        chart.close()

    def test_render_flat_prices_without_signals(self, tmp_path):
        flat = SignalDetector().run([Candle(time=i * 60_000, close=100.0) for i in range(5)])
        assert flat.signals.is_empty
        chart = MACDChart(tmp_path / "flat.png")
        assert chart.render(flat).exists()
        chart.close()


class TestBarWidth:
    def test_hourly_candles(self):
        times = pd.Series(pd.date_range("2024-01-01", periods=5, freq="h"))
        assert _bar_width(times, True) == pytest.approx(0.8 / 24)

    def test_positional(self):
        assert _bar_width(pd.Series([0, 1, 2]), False) == 0.8

    def test_single_candle(self):
        assert _bar_width(pd.Series([0]), False) == 0.8

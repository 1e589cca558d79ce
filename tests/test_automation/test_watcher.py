"""Tests for the polling watcher and alert notifier."""
import io
import logging
from unittest.mock import MagicMock

import numpy as np
import pandas as pd
import pytest

from macdwatch.automation.notifier import LoggingNotifier, describe_signal
from macdwatch.automation.watcher import SignalWatcher
from macdwatch.shared.errors import MarketDataError
from macdwatch.shared.types import Signal, SignalSet, SignalType
from macdwatch.signals.config import CrossoverStrategy, SignalConfig, WatchConfig


def _klines(n=120):
    t = np.arange(n)
    close = 100 + 5 * np.sin(t / 5)
    return pd.DataFrame({
        "time": 1_700_000_000_000 + t * 60_000,
        "open": close,
        "high": close + 0.5,
        "low": close - 0.5,
        "close": close,
        "volume": 1.0,
    })


def _buy(time, index=0):
    return Signal(time=time, value=0.5, signal_type=SignalType.BUY, index=index)


def _sell(time, index=0):
    return Signal(time=time, value=-0.5, signal_type=SignalType.SELL, index=index)


class FakeClient:
    """Returns queued responses; exceptions are raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def fetch_klines(self, pair, interval, limit):
        self.calls.append((pair, interval, limit))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def config():
    return WatchConfig(
        pair="ethusdt",
        interval="1m",
        limit=120,
        poll_interval=2.5,
        signals=SignalConfig(strategy=CrossoverStrategy.MACD_CROSS),
    )


class TestRunOnce:
    def test_fetches_and_detects(self, config):
        client = FakeClient(_klines())
        result = SignalWatcher(client, config, notifier=MagicMock()).run_once()
        assert client.calls == [("ETHUSDT", "1m", 120)]
        assert len(result.macd) == 120
        assert not result.signals.is_empty

    def test_first_poll_does_not_alert(self, config):
        notifier = MagicMock()
        SignalWatcher(FakeClient(_klines()), config, notifier=notifier).run_once()
        notifier.notify.assert_not_called()

    def test_alert_existing_announces_latest_history(self, config):
        config.alert_existing = True
        notifier = MagicMock()
        SignalWatcher(FakeClient(_klines()), config, notifier=notifier).run_once()
        assert notifier.notify.called
        signal_type, signals, pair = notifier.notify.call_args[0]
        assert pair == "ETHUSDT"
        assert all(s.signal_type == signal_type for s in signals)

    def test_same_data_twice_alerts_nothing_new(self, config):
        config.alert_existing = True
        notifier = MagicMock()
        watcher = SignalWatcher(FakeClient(_klines()), config, notifier=notifier)
        watcher.run_once()
        notifier.reset_mock()
        watcher.run_once()
        notifier.notify.assert_not_called()

    def test_empty_data_returns_none(self, config, caplog):
        chart = MagicMock()
        watcher = SignalWatcher(FakeClient(pd.DataFrame()), config, notifier=MagicMock(), chart=chart)
        with caplog.at_level(logging.WARNING):
            assert watcher.run_once() is None
        assert "No data returned" in caplog.text
        chart.render.assert_not_called()

    def test_renders_chart(self, config):
        chart = MagicMock()
        watcher = SignalWatcher(FakeClient(_klines()), config, notifier=MagicMock(), chart=chart)
        result = watcher.run_once()
        chart.render.assert_called_once_with(result, "ETHUSDT")

    def test_logs_pipeline_timings(self, config, caplog):
        watcher = SignalWatcher(FakeClient(_klines()), config, notifier=MagicMock())
        with caplog.at_level(logging.DEBUG, logger="macdwatch.automation.watcher"):
            watcher.run_once()
        assert "Pipeline timings:" in caplog.text
        assert "indicator_macd=" in caplog.text
        assert "signal_detection=" in caplog.text

    def test_short_history_warns(self, config, caplog):
        watcher = SignalWatcher(FakeClient(_klines(10)), config, notifier=MagicMock())
        with caplog.at_level(logging.WARNING):
            watcher.run_once()
        assert "warming up" in caplog.text

    def test_fetch_error_propagates(self, config):
        watcher = SignalWatcher(FakeClient(MarketDataError("down")), config, notifier=MagicMock())
        with pytest.raises(MarketDataError):
            watcher.run_once()


class TestAlertDedupe:
    """Signals are announced once, per side, newest first seen."""

    def _watcher(self, config, notifier):
        return SignalWatcher(FakeClient(_klines()), config, notifier=notifier)

    def test_only_new_signals_are_announced(self, config):
        notifier = MagicMock()
        watcher = self._watcher(config, notifier)
        watcher._alert(SignalSet(buy_signals=(_buy(1),), sell_signals=(_sell(2),)))
        notifier.notify.assert_not_called()

        watcher._alert(SignalSet(buy_signals=(_buy(1), _buy(5)), sell_signals=(_sell(2),)))
        notifier.notify.assert_called_once_with(SignalType.BUY, [_buy(5)], "ETHUSDT")

    def test_sides_are_tracked_separately(self, config):
        notifier = MagicMock()
        watcher = self._watcher(config, notifier)
        watcher._alert(SignalSet(buy_signals=(_buy(10),)))
        watcher._alert(SignalSet(buy_signals=(_buy(10),), sell_signals=(_sell(3),)))
        notifier.notify.assert_called_once_with(SignalType.SELL, [_sell(3)], "ETHUSDT")

    def test_signal_dropping_out_of_window_is_not_reannounced(self, config):
        notifier = MagicMock()
        watcher = self._watcher(config, notifier)
        watcher._alert(SignalSet(buy_signals=(_buy(1), _buy(5))))
        watcher._alert(SignalSet(buy_signals=(_buy(5),)))
        notifier.notify.assert_not_called()


class TestRunForever:
    def test_max_cycles_and_sleep(self, config):
        sleeps = []
        watcher = SignalWatcher(FakeClient(_klines()), config, notifier=MagicMock(), sleep=sleeps.append)
        assert watcher.run_forever(max_cycles=3) == 3
        assert sleeps == [2.5, 2.5]

    def test_data_errors_skip_cycle(self, config, caplog):
        client = FakeClient(MarketDataError("timeout"), _klines())
        watcher = SignalWatcher(client, config, notifier=MagicMock(), sleep=lambda s: None)
        with caplog.at_level(logging.ERROR):
            assert watcher.run_forever(max_cycles=2) == 2
        assert "skipping this cycle" in caplog.text
        assert len(client.calls) == 2

    def test_stop_ends_loop(self, config):
        holder = {}
        watcher = SignalWatcher(
            FakeClient(_klines()), config, notifier=MagicMock(),
            sleep=lambda s: holder["w"].stop(),
        )
        holder["w"] = watcher
        assert watcher.run_forever() == 1
        assert watcher.stopped

    def test_stop_before_start(self, config):
        watcher = SignalWatcher(FakeClient(_klines()), config, notifier=MagicMock())
        watcher.stop()
        assert watcher.run_forever() == 0


class TestLoggingNotifier:
    def test_describe_signal_from_millis(self):
        signal = Signal(time=0, value=1.23456, signal_type=SignalType.BUY, index=3)
        assert describe_signal(signal) == "BUY at 1970-01-01 00:00 UTC (MACD=1.2346)"

    def test_describe_signal_other_time(self):
        signal = Signal(time="bar-7", value=-2.0, signal_type=SignalType.SELL)
        assert describe_signal(signal) == "SELL at bar-7 (MACD=-2.0000)"

    def test_logs_warning(self, caplog):
        with caplog.at_level(logging.INFO):
            LoggingNotifier().notify(SignalType.SELL, [_sell(0), _sell(60_000)], "BTCUSDT")
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "Sell Signal Detected for BTCUSDT" in warnings[0].getMessage()
        assert "00:01" in warnings[0].getMessage()
        assert "earlier" in caplog.text

    def test_bell(self):
        stream = io.StringIO()
        LoggingNotifier(bell=True, stream=stream).notify(SignalType.BUY, [_buy(0)], "BTCUSDT")
        assert stream.getvalue() == "\a"

    def test_no_signals_is_silent(self, caplog):
        stream = io.StringIO()
        with caplog.at_level(logging.INFO):
            LoggingNotifier(bell=True, stream=stream).notify(SignalType.BUY, [], "BTCUSDT")
        assert caplog.records == []
        assert stream.getvalue() == ""

    def test_watcher_default_notifier_uses_bell_setting(self, config):
        config.bell = True
        watcher = SignalWatcher(FakeClient(_klines()), config)
        assert isinstance(watcher.notifier, LoggingNotifier)
        assert watcher.notifier.bell is True

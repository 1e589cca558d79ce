"""
Polling watcher for MACD crossover signals.

Long-running loop that:
1. Fetches the latest candles for the configured pair
2. Recomputes MACD, RSI, ADX and signals from scratch
3. Renders the chart (optional)
4. Alerts on signals not announced before
5. Sleeps for the poll interval and repeats
"""
import logging
import time
from typing import Callable, Dict, Optional

from ..data.binance import BinanceClient
from ..shared.errors import MarketDataError
from ..shared.types import SignalSet, SignalType
from ..signals.config import WatchConfig
from ..signals.detector import PipelineResult, SignalDetector
from .notifier import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)


class SignalWatcher:
    """
    Re-runs the signal pipeline on fresh candles at a fixed cadence.

    Responsibilities:
    - Fetch candles and run the stateless pipeline every cycle
    - Remember the last alerted signal time per side, so a crossover is
      announced once rather than on every poll
    - Keep going when a single fetch fails
    """

    def __init__(
        self,
        client: BinanceClient,
        config: WatchConfig,
        notifier: Optional[Notifier] = None,
        chart=None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize watcher.

        Args:
            client: Market data client with fetch_klines(pair, interval, limit)
            config: Watcher configuration
            notifier: Alert sink (default: LoggingNotifier)
            chart: Optional renderer with render(result, pair)
            sleep: Sleep function between cycles (injectable for tests)
        """
        self.client = client
        self.config = config
        self.notifier = notifier or LoggingNotifier(bell=config.bell)
        self.chart = chart
        self.detector = SignalDetector(config.signals)
        self._sleep = sleep
        self._stop_requested = False
        self._last_alerted: Dict[SignalType, object] = {}
        self._primed = config.alert_existing
        self.cycles = 0

    def stop(self) -> None:
        """Ask run_forever to exit after the current cycle."""
        self._stop_requested = True

    @property
    def stopped(self) -> bool:
        return self._stop_requested

    def run_once(self) -> Optional[PipelineResult]:
        """
        Run one fetch-compute-alert cycle.

        Returns:
            PipelineResult, or None if the exchange returned no candles

        Raises:
            MarketDataError: If fetching candles failed
        """
        candles = self.client.fetch_klines(self.config.pair, self.config.interval, self.config.limit)
        if len(candles) == 0:
            logger.warning(f"No data returned for {self.config.pair} {self.config.interval}")
            return None

        timings: Dict[str, float] = {}
        result = self.detector.run(candles, timings=timings)
        logger.debug(
            "Pipeline timings: " + ", ".join(f"{k}={v * 1000:.1f}ms" for k, v in sorted(timings.items()))
        )
        if not result.has_warmup:
            logger.warning(
                f"Only {len(candles)} candles for {self.config.pair}; "
                "RSI/ADX still warming up, confirmed signals are unavailable"
            )

        if self.chart is not None:
            path = self.chart.render(result, self.config.pair)
            logger.debug(f"Chart written to {path}")

        self._alert(result.signals)
        return result

    def _alert(self, signals: SignalSet) -> None:
        """Notify about signals newer than the last alerted one, per side."""
        for signal_type, side in (
            (SignalType.BUY, signals.buy_signals),
            (SignalType.SELL, signals.sell_signals),
        ):
            last = self._last_alerted.get(signal_type)
            fresh = [s for s in side if last is None or s.time > last]
            if side:
                self._last_alerted[signal_type] = side[-1].time
            if fresh and self._primed:
                self.notifier.notify(signal_type, fresh, self.config.pair)
        # Signals present on the first poll are history, not news
        self._primed = True

    def run_forever(self, max_cycles: Optional[int] = None) -> int:
        """
        Poll until stop() is called or max_cycles is reached.

        Data errors are logged and the cycle is skipped.

        Args:
            max_cycles: Stop after this many cycles (None = unbounded)

        Returns:
            Number of cycles run
        """
        logger.info(
            f"Watching {self.config.pair} {self.config.interval} every "
            f"{self.config.poll_interval:g}s ({self.config.signals.strategy.value})"
        )
        while not self._stop_requested:
            try:
                self.run_once()
            except MarketDataError as e:
                logger.error(f"Data fetch failed, skipping this cycle: {e}")
            self.cycles += 1

            if max_cycles is not None and self.cycles >= max_cycles:
                break
            if not self._stop_requested:
                self._sleep(self.config.poll_interval)

        logger.info(f"Watcher stopped after {self.cycles} cycles")
        return self.cycles

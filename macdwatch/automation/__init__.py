"""
Automation module.

Provides the polling watcher that re-runs the signal pipeline on fresh
candles and the notifiers that announce new signals.
"""
from .notifier import Notifier, LoggingNotifier, describe_signal
from .watcher import SignalWatcher

__all__ = [
    'Notifier',
    'LoggingNotifier',
    'describe_signal',
    'SignalWatcher',
]

"""
Signal generation module.

Detects MACD/signal-line crossovers, either bare or confirmed by RSI
momentum and ADX trend strength. Indicators calculate values; the
crossover rules interpret those values.
"""
from .config import (
    CrossoverStrategy,
    SignalConfig,
    WatchConfig,
    PRESET_CONFIGS,
    get_preset,
)
from .config_loader import load_config_from_yaml, save_config_to_yaml
from .detector import (
    PipelineResult,
    SignalDetector,
    detect_crossovers,
    filter_signals_by_type,
)
from .rules import (
    SignalRule,
    MacdCrossRule,
    RsiRule,
    AdxRule,
    get_crossover_rules,
    apply_rules,
)

__all__ = [
    'CrossoverStrategy',
    'SignalConfig',
    'WatchConfig',
    'PRESET_CONFIGS',
    'get_preset',
    'load_config_from_yaml',
    'save_config_to_yaml',
    'PipelineResult',
    'SignalDetector',
    'detect_crossovers',
    'filter_signals_by_type',
    'SignalRule',
    'MacdCrossRule',
    'RsiRule',
    'AdxRule',
    'get_crossover_rules',
    'apply_rules',
]

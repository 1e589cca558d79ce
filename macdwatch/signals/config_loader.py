"""
YAML configuration loader for the watcher.

Loads market, indicator and signal settings from YAML files, so thresholds
and pairs can be changed without code changes.
"""
from pathlib import Path
from typing import Union

import yaml

from .config import CrossoverStrategy, SignalConfig, WatchConfig
from ..indicators.technical import AdxVariant
from ..shared.defaults import (
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    RSI_PERIOD, RSI_THRESHOLD,
    ADX_PERIOD, ADX_THRESHOLD,
    DEFAULT_PAIR, DEFAULT_INTERVAL, KLINE_LIMIT,
    POLL_INTERVAL_SECONDS,
)


def load_config_from_yaml(yaml_path: Union[str, Path]) -> WatchConfig:
    """
    Load watcher configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        WatchConfig object

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty or contains invalid values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty config file: {yaml_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file must contain a mapping: {yaml_path}")

    market = config_dict.get('market', {})
    indicators = config_dict.get('indicators', {})
    macd = indicators.get('macd', {})
    rsi = indicators.get('rsi', {})
    adx = indicators.get('adx', {})
    signals = config_dict.get('signals', {})
    watch = config_dict.get('watch', {})

    signal_config = SignalConfig(
        strategy=signals.get('strategy', CrossoverStrategy.CONFIRMED.value),
        signal_types=signals.get('signal_types', 'all'),

        macd_fast=macd.get('fast', MACD_FAST),
        macd_slow=macd.get('slow', MACD_SLOW),
        macd_signal=macd.get('signal', MACD_SIGNAL),

        rsi_period=rsi.get('period', RSI_PERIOD),
        rsi_threshold=rsi.get('threshold', RSI_THRESHOLD),

        adx_period=adx.get('period', ADX_PERIOD),
        adx_threshold=adx.get('threshold', ADX_THRESHOLD),
        adx_variant=adx.get('variant', AdxVariant.HIGH_LOW.value),
    )

    return WatchConfig(
        pair=market.get('pair', DEFAULT_PAIR),
        interval=market.get('interval', DEFAULT_INTERVAL),
        limit=market.get('limit', KLINE_LIMIT),
        poll_interval=float(watch.get('poll_interval', POLL_INTERVAL_SECONDS)),
        signals=signal_config,
        chart_path=watch.get('chart_path'),
        alert_existing=watch.get('alert_existing', False),
        bell=watch.get('bell', False),
    )


def save_config_to_yaml(config: WatchConfig, yaml_path: Union[str, Path]):
    """
    Save watcher configuration to YAML file.

    Args:
        config: WatchConfig object to save
        yaml_path: Path where to save YAML file
    """
    yaml_path = Path(yaml_path)
    signals = config.signals

    # Build nested structure
    config_dict = {
        'market': {
            'pair': config.pair,
            'interval': config.interval,
            'limit': config.limit,
        },

        'indicators': {
            'macd': {
                'fast': signals.macd_fast,
                'slow': signals.macd_slow,
                'signal': signals.macd_signal,
            },
            'rsi': {
                'period': signals.rsi_period,
                'threshold': signals.rsi_threshold,
            },
            'adx': {
                'period': signals.adx_period,
                'threshold': signals.adx_threshold,
                'variant': signals.adx_variant.value,
            },
        },

        'signals': {
            'strategy': signals.strategy.value,
            'signal_types': signals.signal_types,
        },

        'watch': {
            'poll_interval': config.poll_interval,
            'chart_path': str(config.chart_path) if config.chart_path else None,
            'alert_existing': config.alert_existing,
            'bell': config.bell,
        },
    }

    # Ensure parent directory exists
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    with open(yaml_path, 'w') as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

"""
Indicator calculation module.

Provides the technical indicators behind MACD crossover signals:
- EMA engine (recursive smoothing used by every other indicator)
- MACD line, signal line and histogram
- RSI with Wilder smoothing
- ADX in close-only and high/low variants
"""
from .technical import (
    AdxVariant,
    DirectionalMovement,
    MACDResult,
    TechnicalIndicators,
    compute_adx,
    compute_ema,
    compute_macd,
    compute_rsi,
    directional_movement,
)

__all__ = [
    'AdxVariant',
    'DirectionalMovement',
    'MACDResult',
    'TechnicalIndicators',
    'compute_adx',
    'compute_ema',
    'compute_macd',
    'compute_rsi',
    'directional_movement',
]

"""
Chart rendering for pipeline results.
"""
from .chart import MACDChart

__all__ = ['MACDChart']

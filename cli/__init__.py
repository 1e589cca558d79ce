"""
CLI entry points for the MACD crossover watcher.

Provides command-line interfaces for:
- Watching a pair for MACD crossover signals
- Listing USDT pairs by 24h volume
"""

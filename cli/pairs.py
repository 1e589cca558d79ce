#!/usr/bin/env python3
"""
List Binance pairs quoted in USDT, highest 24h volume first.
"""
import argparse
import sys
from typing import List, Optional

from macdwatch.data.binance import BinanceClient, format_pair_label
from macdwatch.shared.defaults import QUOTE_ASSET
from macdwatch.shared.errors import MarketDataError


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="List pairs by 24h quote volume")
    parser.add_argument("--top", "-n", type=int, default=20, help="Show this many pairs (0 = all)")
    parser.add_argument("--quote", default=QUOTE_ASSET, help=f"Quote asset (default: {QUOTE_ASSET})")
    args = parser.parse_args(argv)

    try:
        pairs = BinanceClient().fetch_usdt_pairs(args.quote.upper())
    except MarketDataError as e:
        print(f"Error fetching pairs: {e}", file=sys.stderr)
        return 1

    if args.top > 0:
        pairs = pairs[:args.top]
    for ticker in pairs:
        print(format_pair_label(ticker))
    return 0


if __name__ == "__main__":
    sys.exit(main())

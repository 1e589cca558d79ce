"""Tests for the pair listing CLI."""
from unittest.mock import patch

from cli.pairs import main
from macdwatch.shared.errors import MarketDataError

TICKERS = [
    {"symbol": "BTCUSDT", "quoteVolume": "2500000000"},
    {"symbol": "ETHUSDT", "quoteVolume": "1200000000"},
    {"symbol": "SOLUSDT", "quoteVolume": "300000"},
]


class TestPairsCli:
    def test_lists_pairs(self, capsys):
        with patch("cli.pairs.BinanceClient") as client_cls:
            client_cls.return_value.fetch_usdt_pairs.return_value = TICKERS
            assert main([]) == 0
        client_cls.return_value.fetch_usdt_pairs.assert_called_once_with("USDT")
        assert capsys.readouterr().out.splitlines() == [
            "BTCUSDT (Vol: 2500.00M)",
            "ETHUSDT (Vol: 1200.00M)",
            "SOLUSDT (Vol: 0.30M)",
        ]

    def test_top(self, capsys):
        with patch("cli.pairs.BinanceClient") as client_cls:
            client_cls.return_value.fetch_usdt_pairs.return_value = TICKERS
            assert main(["--top", "1", "--quote", "usdt"]) == 0
        assert capsys.readouterr().out.splitlines() == ["BTCUSDT (Vol: 2500.00M)"]

    def test_error(self, capsys):
        with patch("cli.pairs.BinanceClient") as client_cls:
            client_cls.return_value.fetch_usdt_pairs.side_effect = MarketDataError("offline")
            assert main([]) == 1
        assert "offline" in capsys.readouterr().err

"""Tests for candle normalisation and validation."""
import numpy as np
import pandas as pd
import pytest

from macdwatch.data.candles import candle_times, to_datetimes, to_frame, validate_candles
from macdwatch.shared.errors import MissingColumnError
from macdwatch.shared.types import Candle


class TestToFrame:
    def test_from_candle_records(self):
        df = to_frame([Candle(time=1, close=10.0), Candle(time=2, close=11.0)])
        assert list(df.columns) == ["time", "close"]
        assert df["close"].tolist() == [10.0, 11.0]

    def test_keeps_filled_optional_columns(self):
        df = to_frame([Candle(time=1, close=10.0, high=11.0, low=9.0)])
        assert list(df.columns) == ["time", "high", "low", "close"]

    def test_from_dicts(self):
        df = to_frame([{"time": 5, "close": "1.5", "note": "x"}])
        assert list(df.columns) == ["time", "close"]
        assert df["close"].iloc[0] == 1.5

    def test_dataframe_columns_lowercased_and_index_reset(self):
        raw = pd.DataFrame(
            {"Close": [1, 2, 3], "High": [2, 3, 4]},
            index=pd.date_range("2024-01-01", periods=3, freq="h"),
        )
        df = to_frame(raw)
        assert list(df.index) == [0, 1, 2]
        assert list(df.columns) == ["high", "close"]
        assert df["close"].dtype == float

    def test_does_not_modify_input(self):
        raw = pd.DataFrame({"time": [1, 2], "close": [1, 2], "extra": [0, 0]})
        to_frame(raw)
        assert list(raw.columns) == ["time", "close", "extra"]
        assert raw["close"].dtype == np.int64

    def test_empty_input(self):
        df = to_frame([])
        assert df.empty
        assert list(df.columns) == ["time", "close"]

    def test_missing_close(self):
        with pytest.raises(MissingColumnError, match="'close'"):
            to_frame([{"time": 1, "open": 2.0}])


class TestCandleTimes:
    def test_time_column(self):
        df = to_frame([Candle(time=100, close=1.0), Candle(time=200, close=2.0)])
        assert candle_times(df).tolist() == [100, 200]

    def test_positional_fallback(self):
        df = pd.DataFrame({"close": [1.0, 2.0, 3.0]})
        assert candle_times(df).tolist() == [0, 1, 2]

    def test_to_datetimes_from_millis(self):
        times = to_datetimes(pd.Series([0, 3_600_000]))
        assert times.iloc[1] == pd.Timestamp("1970-01-01 01:00", tz="UTC")

    def test_to_datetimes_passes_through_timestamps(self):
        stamps = pd.Series(pd.date_range("2024-01-01", periods=2, freq="D"))
        assert to_datetimes(stamps) is stamps


class TestValidateCandles:
    def test_valid(self):
        df = validate_candles([Candle(time=1, close=1.0), Candle(time=2, close=2.0)])
        assert len(df) == 2

    def test_empty_is_valid(self):
        assert validate_candles([]).empty

    def test_missing_time(self):
        with pytest.raises(MissingColumnError, match="'time'"):
            validate_candles(pd.DataFrame({"close": [1.0]}))

    def test_missing_close_value(self):
        with pytest.raises(ValueError, match="index 1 is missing"):
            validate_candles(pd.DataFrame({"time": [1, 2, 3], "close": [1.0, np.nan, 2.0]}))

    def test_non_numeric_close(self):
        with pytest.raises(ValueError, match="must be numeric"):
            validate_candles([{"time": 1, "close": "abc"}])

    def test_decreasing_times(self):
        with pytest.raises(ValueError, match="strictly increasing"):
            validate_candles([Candle(time=2, close=1.0), Candle(time=1, close=1.0)])

    def test_duplicate_times(self):
        with pytest.raises(ValueError, match="strictly increasing"):
            validate_candles([Candle(time=1, close=1.0), Candle(time=1, close=2.0)])

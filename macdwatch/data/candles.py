"""
Candle normalisation.

The indicator core works on a DataFrame with a positional index and
lower-case columns (time, close, and optionally high/low/open/volume).
Candles may arrive as Candle records, dicts, or an existing DataFrame.
"""
from dataclasses import asdict, is_dataclass
from typing import Iterable, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from ..shared.errors import MissingColumnError
from ..shared.types import Candle

CANDLE_COLUMNS = ("time", "open", "high", "low", "close", "volume")

CandleInput = Union[pd.DataFrame, Sequence[Candle], Sequence[Mapping], Iterable]


def _empty_frame() -> pd.DataFrame:
    return pd.DataFrame({"time": pd.Series(dtype="int64"), "close": pd.Series(dtype=float)})


def _record(candle) -> dict:
    if is_dataclass(candle):
        return asdict(candle)
    return dict(candle)


def to_frame(candles: CandleInput) -> pd.DataFrame:
    """
    Normalise candles into a DataFrame.

    Args:
        candles: DataFrame, or sequence of Candle / dict records

    Returns:
        DataFrame with positional index 0..n-1 and the candle columns present
        in the input (all-None optional columns are dropped)

    Raises:
        MissingColumnError: If non-empty input has no close column
    """
    if isinstance(candles, pd.DataFrame):
        df = candles.rename(columns=lambda c: str(c).lower()).reset_index(drop=True)
    else:
        records = [_record(c) for c in candles]
        if not records:
            return _empty_frame()
        df = pd.DataFrame.from_records(records)
    df = df[[c for c in CANDLE_COLUMNS if c in df.columns]].copy()

    if "close" not in df.columns:
        if df.empty:
            return _empty_frame()
        raise MissingColumnError("close", "every indicator")

    # Optional columns that were never filled (Candle defaults) carry no data
    for col in ("high", "low", "open", "volume"):
        if col in df.columns and len(df) and df[col].isna().all():
            df = df.drop(columns=col)
    for col in df.columns:
        if col != "time":
            df[col] = df[col].astype(float)
    return df


def candle_times(df: pd.DataFrame) -> pd.Series:
    """Candle times as given; the positional index when there is no time column."""
    if "time" not in df.columns:
        return pd.Series(df.index, index=df.index, name="time")
    return df["time"]


def to_datetimes(times: pd.Series) -> pd.Series:
    """Epoch-millis times as UTC timestamps; other time values pass through."""
    if pd.api.types.is_numeric_dtype(times):
        return pd.to_datetime(times, unit="ms", utc=True)
    return times


def validate_candles(candles: CandleInput) -> pd.DataFrame:
    """
    Check the preconditions the indicator core assumes.

    Called by the fetch layer before candles reach the indicators.

    Raises:
        MissingColumnError: If time or close is missing
        ValueError: If close is non-numeric/NaN or time is not strictly increasing
    """
    try:
        df = to_frame(candles)
    except MissingColumnError:
        raise
    except (TypeError, ValueError) as e:
        raise ValueError(f"Candle close prices must be numeric: {e}") from e
    if df.empty:
        return df
    if "time" not in df.columns:
        raise MissingColumnError("time", "time alignment")
    if df["close"].isna().any():
        bad = int(np.flatnonzero(df["close"].isna().to_numpy())[0])
        raise ValueError(f"Candle close price at index {bad} is missing")
    times = df["time"]
    if not times.is_monotonic_increasing or times.duplicated().any():
        raise ValueError("Candle times must be strictly increasing")
    return df

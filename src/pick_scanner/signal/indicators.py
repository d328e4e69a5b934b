"""Technical indicators used by the signal evaluators.

All functions are pure and accept any numeric sequence (list, numpy array,
pandas Series). They raise ``InsufficientDataError`` when the input is too
short for the requested period; callers treat that as "not applicable".
"""

from typing import Sequence

import numpy as np
import pandas as pd

from ..core.errors import InsufficientDataError


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def _require(arr: np.ndarray, minimum: int, what: str) -> None:
    if len(arr) < minimum:
        raise InsufficientDataError(what, minimum, len(arr))


def _require_same_length(*arrays: np.ndarray) -> None:
    lengths = {len(a) for a in arrays}
    if len(lengths) > 1:
        raise ValueError(f"Input series must have equal length, got {sorted(lengths)}")


def mean(values: Sequence[float]) -> float:
    arr = _as_array(values)
    _require(arr, 1, "mean")
    return float(arr.mean())


def minimum(values: Sequence[float]) -> float:
    arr = _as_array(values)
    _require(arr, 1, "minimum")
    return float(arr.min())


def ema(values: Sequence[float], period: int) -> np.ndarray:
    """
    Exponential moving average.

    Seeded with the simple mean of the first *period* values, so the result
    has ``len(values) - period + 1`` entries.
    """
    if period < 1:
        raise ValueError("EMA period must be positive")
    arr = _as_array(values)
    _require(arr, period, f"EMA({period})")

    k = 2.0 / (period + 1)
    out = np.empty(len(arr) - period + 1)
    out[0] = arr[:period].mean()
    for i, value in enumerate(arr[period:], start=1):
        out[i] = (value - out[i - 1]) * k + out[i - 1]
    return out


def bollinger(values: Sequence[float], period: int = 20, std_dev: float = 2.0) -> pd.DataFrame:
    """Bollinger Bands (population standard deviation) for every full window."""
    arr = _as_array(values)
    _require(arr, period, f"Bollinger({period})")

    series = pd.Series(arr)
    middle = series.rolling(window=period).mean()
    spread = series.rolling(window=period).std(ddof=0) * std_dev
    bands = pd.DataFrame({
        "upper": middle + spread,
        "middle": middle,
        "lower": middle - spread,
    })
    return bands.iloc[period - 1:].reset_index(drop=True)


def band_width(bands: pd.DataFrame) -> pd.Series:
    """Width of the bands relative to the middle line."""
    return (bands["upper"] - bands["lower"]) / bands["middle"]


def parabolic_sar(
    highs: Sequence[float],
    lows: Sequence[float],
    step: float = 0.02,
    max_step: float = 0.2,
) -> np.ndarray:
    """
    Parabolic stop-and-reverse, one value per bar.

    The first bar seeds an up-trend with the stop at its low and the extreme
    point at its high.
    """
    high = _as_array(highs)
    low = _as_array(lows)
    _require_same_length(high, low)
    _require(high, 2, "PSAR")

    out = np.empty(len(high))
    rising = True
    accel = step
    sar = low[0]
    extreme = high[0]
    out[0] = sar

    for i in range(1, len(high)):
        sar = sar + accel * (extreme - sar)
        if rising:
            sar = min(sar, low[i - 1], low[max(i - 2, 0)])
            if high[i] > extreme:
                extreme = high[i]
                accel = min(accel + step, max_step)
        else:
            sar = max(sar, high[i - 1], high[max(i - 2, 0)])
            if low[i] < extreme:
                extreme = low[i]
                accel = min(accel + step, max_step)

        if (rising and low[i] < sar) or (not rising and high[i] > sar):
            accel = step
            sar = extreme
            rising = not rising
            extreme = high[i] if rising else low[i]

        out[i] = sar

    return out


def sar_flipped_up(sar: Sequence[float], closes: Sequence[float]) -> bool:
    """True when the stop moved from above price to below it on the last bar."""
    sar_arr = _as_array(sar)
    close_arr = _as_array(closes)
    _require(sar_arr, 2, "PSAR flip")
    _require(close_arr, 2, "PSAR flip")
    return bool(sar_arr[-2] > close_arr[-2] and sar_arr[-1] < close_arr[-1])


def sar_flipped_down(sar: Sequence[float], closes: Sequence[float]) -> bool:
    """True when the stop moved from below price to above it on the last bar."""
    sar_arr = _as_array(sar)
    close_arr = _as_array(closes)
    _require(sar_arr, 2, "PSAR flip")
    _require(close_arr, 2, "PSAR flip")
    return bool(sar_arr[-2] < close_arr[-2] and sar_arr[-1] > close_arr[-1])


def vwap(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
) -> np.ndarray:
    """Cumulative volume-weighted average of the typical price."""
    high = _as_array(highs)
    low = _as_array(lows)
    close = _as_array(closes)
    volume = _as_array(volumes)
    _require_same_length(high, low, close, volume)
    _require(close, 1, "VWAP")

    typical = (high + low + close) / 3.0
    cum_volume = np.cumsum(volume)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.cumsum(typical * volume) / cum_volume

"""
Numpy oracle implementation for MA-family indicators.

Vectorized counterpart of the incremental `SMAIndicator`/`EMAIndicator`. It serves as a
verification oracle: tests cross-check the incremental indicators against it on float64
close vectors (`BarSeries.close_array()`). The simulation path does not call it.

Docs: docs/architecture/backtest-engine.md (section 4.1)
Related: tradelab.contexts.indicators.domain.indicators.moving_average,
  tradelab.shared_kernel.primitives.bar_series
"""

from __future__ import annotations

import math

import numpy as np

_SUPPORTED_MA_IDS = {
    "ma.sma",
    "ma.ema",
}


def is_supported_ma_indicator(*, indicator_id: str) -> bool:
    """
    Return whether indicator id is supported by MA oracle implementation.

    Args:
        indicator_id: Indicator identifier.
    Returns:
        bool: True when id is supported by MA oracle.
    Assumptions:
        Identifier normalization is delegated to `_normalize_ma_indicator_id`.
    Raises:
        ValueError: If identifier is blank.
    Side Effects:
        None.
    """
    normalized_id = _normalize_ma_indicator_id(indicator_id=indicator_id)
    return normalized_id in _SUPPORTED_MA_IDS


def compute_ma_grid_f64(
    *,
    indicator_id: str,
    source: np.ndarray,
    windows: np.ndarray,
) -> np.ndarray:
    """
    Compute MA indicator matrix `(T, W)` using pure NumPy/Python loops.

    Args:
        indicator_id: MA indicator identifier (`ma.sma` or `ma.ema`).
        source: Source series vector.
        windows: Window values vector.
    Returns:
        np.ndarray: Float64 C-contiguous matrix `(T, W)`.
    Assumptions:
        Output is NaN for `t < window - 1` (warmup), same as the incremental indicators.
    Raises:
        ValueError: If indicator id is unsupported or windows are invalid.
    Side Effects:
        Allocates one output matrix.
    """
    normalized_id = _normalize_ma_indicator_id(indicator_id=indicator_id)
    if normalized_id not in _SUPPORTED_MA_IDS:
        raise ValueError(f"unsupported MA indicator_id: {indicator_id!r}")

    source_f64, windows_i64 = _prepare_source_and_windows(source=source, windows=windows)

    t_size = source_f64.shape[0]
    out = np.empty((t_size, windows_i64.shape[0]), dtype=np.float64)
    for window_index, window_raw in enumerate(windows_i64):
        window = int(window_raw)
        if normalized_id == "ma.sma":
            out[:, window_index] = _sma_series_f64(source=source_f64, window=window)
        else:
            out[:, window_index] = _ema_series_f64(source=source_f64, window=window)

    return np.ascontiguousarray(out)


def compute_ma_series_f64(*, indicator_id: str, source: np.ndarray, window: int) -> np.ndarray:
    """
    Compute one MA series `(T,)` for a single window.

    Args:
        indicator_id: MA indicator identifier.
        source: Source series vector.
        window: Positive lookback window.
    Returns:
        np.ndarray: Float64 vector.
    Assumptions:
        Thin wrapper over `compute_ma_grid_f64`.
    Raises:
        ValueError: If indicator id or window is invalid.
    Side Effects:
        Allocates one output matrix.
    """
    grid = compute_ma_grid_f64(
        indicator_id=indicator_id,
        source=source,
        windows=np.asarray([window], dtype=np.int64),
    )
    return np.ascontiguousarray(grid[:, 0])


def _normalize_ma_indicator_id(*, indicator_id: str) -> str:
    normalized = indicator_id.strip().lower()
    if not normalized:
        raise ValueError("indicator_id must be non-empty")
    return normalized


def _prepare_source_and_windows(
    *,
    source: np.ndarray,
    windows: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Normalize source/windows inputs for MA oracle functions.

    Args:
        source: Source series vector.
        windows: Window values vector.
    Returns:
        tuple[np.ndarray, np.ndarray]: `(source_f64, windows_i64)` contiguous arrays.
    Assumptions:
        Source can contain NaNs and windows must be positive integers.
    Raises:
        ValueError: If array shapes are invalid or window values are non-positive.
    Side Effects:
        Allocates normalized contiguous arrays.
    """
    source_f64 = np.ascontiguousarray(source, dtype=np.float64)
    if source_f64.ndim != 1:
        raise ValueError("source must be a 1D array")

    windows_i64 = np.ascontiguousarray(windows, dtype=np.int64)
    if windows_i64.ndim != 1:
        raise ValueError("windows must be a 1D array")
    if windows_i64.shape[0] == 0:
        raise ValueError("windows must contain at least one value")
    if np.any(windows_i64 <= 0):
        raise ValueError("windows must contain only positive integers")

    return source_f64, windows_i64


def _sma_series_f64(*, source: np.ndarray, window: int) -> np.ndarray:
    """
    Compute one SMA series from a running sum with window-NaN policy.

    Args:
        source: Float64 source series.
        window: Positive rolling window.
    Returns:
        np.ndarray: Float64 SMA series.
    Assumptions:
        Any NaN inside window produces NaN output.
    Raises:
        None.
    Side Effects:
        Allocates one output array.
    """
    t_size = source.shape[0]
    out = np.empty(t_size, dtype=np.float64)

    running_sum = 0.0
    nan_count = 0
    for time_index in range(t_size):
        incoming = float(source[time_index])
        if math.isnan(incoming):
            nan_count += 1
        else:
            running_sum += incoming

        if time_index >= window:
            outgoing = float(source[time_index - window])
            if math.isnan(outgoing):
                nan_count -= 1
            else:
                running_sum -= outgoing

        if time_index + 1 < window or nan_count > 0:
            out[time_index] = np.nan
        else:
            out[time_index] = running_sum / float(window)

    return out


def _ema_series_f64(*, source: np.ndarray, window: int) -> np.ndarray:
    """
    Compute one EMA series seeded with the first value, alpha `2 / (window + 1)`.

    Args:
        source: Float64 source series.
        window: Positive window.
    Returns:
        np.ndarray: Float64 EMA series with NaN warmup `t < window - 1`.
    Assumptions:
        NaN source value resets state and emits NaN on the same index.
    Raises:
        None.
    Side Effects:
        Allocates one output array.
    """
    alpha = 2.0 / (float(window) + 1.0)
    t_size = source.shape[0]
    out = np.empty(t_size, dtype=np.float64)
    previous = np.nan

    for time_index in range(t_size):
        value = float(source[time_index])
        if math.isnan(value):
            previous = np.nan
            out[time_index] = np.nan
            continue
        if math.isnan(previous):
            previous = value
        else:
            previous = previous + alpha * (value - previous)
        out[time_index] = previous

    out[: max(0, window - 1)] = np.nan
    return out

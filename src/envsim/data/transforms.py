"""
Derived statistics of observational time series.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import logging

import pandas as pd

from envsim.exceptions import DataError

logger = logging.getLogger(__name__)


def _check_window(window: int | str) -> None:
    if isinstance(window, str):
        if pd.Timedelta(window) <= pd.Timedelta(0):
            raise ValueError("window must be a positive duration")
    elif window <= 0:
        raise ValueError("window must be positive")


def moving_average(
    series: pd.Series,
    window: int | str,
    *,
    center: bool = True,
    min_periods: int | None = None,
) -> pd.Series:
    """
    Rolling mean of a time series.

    Parameters
    ----------
    series : pandas.Series
        Input series. Time-based windows need a ``DatetimeIndex``.
    window : int or str
        Number of observations, or a pandas offset such as ``"365D"``.
    center : bool, default True
        Label each window at its centre.
    min_periods : int, optional
        Minimum observations in a window; defaults to 1 for offsets and to the
        window size for counts.

    Raises
    ------
    ValueError
        If the window is not positive.
    """
    _check_window(window)
    if isinstance(window, str) and min_periods is None:
        min_periods = 1
    rolled = series.rolling(window, center=center, min_periods=min_periods).mean()
    return rolled.rename(f"{series.name}_ma" if series.name is not None else None)


def detrend(series: pd.Series, window: int | str, **kwargs: object) -> pd.Series:
    """
    Subtract the moving average from ``series``.

    Used to remove slow drift (e.g. sea-level rise) before extracting maxima.
    Keyword arguments go to :func:`moving_average`.
    """
    trend = moving_average(series, window, **kwargs)  # type: ignore[arg-type]
    return (series - trend).rename(series.name)


def block_maxima(
    series: pd.Series,
    freq: str = "Y",
    *,
    min_coverage: float = 0.0,
    expected_per_block: int | None = None,
) -> pd.Series:
    """
    Maximum of ``series`` within each calendar block.

    Parameters
    ----------
    series : pandas.Series
        Series with a ``DatetimeIndex``.
    freq : str, default "Y"
        Pandas period frequency of the blocks.
    min_coverage : float, default 0.0
        Blocks whose observation count divided by ``expected_per_block`` is
        below this share are dropped.
    expected_per_block : int, optional
        Expected observations per complete block; required when
        ``min_coverage > 0``.

    Returns
    -------
    pandas.Series
        Block maxima indexed by ``PeriodIndex``.

    Raises
    ------
    DataError
        If the series is empty or has no datetime index.
    """
    if not isinstance(series.index, pd.DatetimeIndex):
        raise DataError("block maxima need a DatetimeIndex")
    values = series.dropna()
    if values.empty:
        raise DataError("cannot take block maxima of an empty series")
    if min_coverage > 0 and not expected_per_block:
        raise ValueError("expected_per_block is required when min_coverage > 0")

    # blocks follow the local calendar of a timezone-aware index
    index = values.index if values.index.tz is None else values.index.tz_localize(None)
    grouped = values.groupby(index.to_period(freq))
    maxima = grouped.max()

    if min_coverage > 0:
        coverage = grouped.count() / float(expected_per_block)  # type: ignore[arg-type]
        keep = coverage >= min_coverage
        dropped = list(maxima.index[~keep])
        if dropped:
            logger.info(
                "Dropping %d block(s) below %.0f%% coverage: %s",
                len(dropped),
                100 * min_coverage,
                ", ".join(str(p) for p in dropped),
            )
        maxima = maxima[keep]

    return maxima.rename(series.name)


def annual_maxima(
    series: pd.Series,
    *,
    min_coverage: float = 0.0,
    expected_per_year: int | None = None,
) -> pd.Series:
    """
    Annual maxima of a time series.

    Returns
    -------
    pandas.Series
        One maximum per calendar year, indexed by the integer year.
    """
    maxima = block_maxima(
        series, "Y", min_coverage=min_coverage, expected_per_block=expected_per_year
    )
    maxima.index = pd.Index([p.year for p in maxima.index], name="year")
    return maxima

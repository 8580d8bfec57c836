"""
CSV loaders for the observational datasets used in the course analyses.

Two record layouts are supported:

* tide-gauge exports from NOAA Tides & Currents, with separate date and time
  columns and a water level column in metres;
* river records with a timestamp, a discharge and a total dissolved solids
  column.

Loaders only read; files are never modified.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from envsim.exceptions import DataError

logger = logging.getLogger(__name__)

TIDE_TIME_COLUMNS = ("Date", "Time (GMT)")
TIDE_LEVEL_COLUMN = "Verified (m)"

RIVER_TIME_COLUMN = "datetime"
RIVER_DISCHARGE_COLUMN = "discharge_cms"
RIVER_TDS_COLUMN = "tds_mgL"


def _read_csv(path: str | Path, required: Sequence[str], **kwargs: object) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise DataError(f"Data file not found: {path}")

    try:
        frame = pd.read_csv(path, **kwargs)  # type: ignore[call-overload]
    except pd.errors.EmptyDataError as exc:
        raise DataError(f"Data file is empty: {path}") from exc

    frame.columns = [str(c).strip() for c in frame.columns]
    missing = [c for c in required if c not in frame.columns]
    if missing:
        raise DataError(f"{path.name}: missing column(s) {', '.join(map(repr, missing))}")
    if frame.empty:
        raise DataError(f"Data file has no rows: {path}")

    logger.debug("Read %d rows from %s", len(frame), path)
    return frame


def _parse_time(
    frame: pd.DataFrame, time_column: str | Sequence[str], time_format: str | None
) -> pd.DatetimeIndex:
    columns = [time_column] if isinstance(time_column, str) else list(time_column)
    raw = frame[columns].astype(str).agg(" ".join, axis=1)
    times = pd.to_datetime(raw, format=time_format, errors="coerce")
    n_bad = int(times.isna().sum())
    if n_bad == len(times):
        raise DataError(f"Could not parse any timestamp from column(s) {columns}")
    if n_bad:
        logger.warning("Dropping %d rows with unparseable timestamps", n_bad)
    return pd.DatetimeIndex(times)


def _clean_index(series: pd.Series | pd.DataFrame) -> pd.Series | pd.DataFrame:
    series = series[series.index.notna()].sort_index(kind="stable")
    duplicated = series.index.duplicated(keep="first")
    if duplicated.any():
        logger.warning("Dropping %d duplicated timestamps", int(duplicated.sum()))
        series = series[~duplicated]
    return series


def load_tide_gauge(
    path: str | Path,
    *,
    time_column: str | Sequence[str] = TIDE_TIME_COLUMNS,
    level_column: str = TIDE_LEVEL_COLUMN,
    time_format: str | None = None,
) -> pd.Series:
    """
    Load a tide-gauge water level record.

    Parameters
    ----------
    path : str or Path
        CSV file to read.
    time_column : str or sequence of str, default ("Date", "Time (GMT)")
        Timestamp column, or several columns joined with a space before parsing.
    level_column : str, default "Verified (m)"
        Water level column.
    time_format : str, optional
        Explicit ``strftime`` format for the joined timestamp.

    Returns
    -------
    pandas.Series
        Water levels named ``"level"`` indexed by sorted, unique timestamps.

    Raises
    ------
    DataError
        If the file is missing, empty, lacks a column, or holds no valid level.
    """
    time_columns = [time_column] if isinstance(time_column, str) else list(time_column)
    frame = _read_csv(path, [*time_columns, level_column])

    levels = pd.to_numeric(frame[level_column], errors="coerce")
    series = pd.Series(
        levels.to_numpy(), index=_parse_time(frame, time_column, time_format), name="level"
    )
    series.index.name = "time"

    n_missing = int(series.isna().sum())
    if n_missing:
        logger.debug("Dropping %d rows with missing water level", n_missing)
    series = _clean_index(series.dropna())
    if series.empty:
        raise DataError(f"No valid water levels in {path}")

    logger.info(
        "Loaded %d tide-gauge observations (%s to %s)",
        len(series),
        series.index[0],
        series.index[-1],
    )
    return series


def load_river_flow(
    path: str | Path,
    *,
    time_column: str = RIVER_TIME_COLUMN,
    discharge_column: str = RIVER_DISCHARGE_COLUMN,
    tds_column: str = RIVER_TDS_COLUMN,
    time_format: str | None = None,
) -> pd.DataFrame:
    """
    Load paired river discharge and total dissolved solids measurements.

    Parameters
    ----------
    path : str or Path
        CSV file to read.
    time_column, discharge_column, tds_column : str
        Source column names.
    time_format : str, optional
        Explicit ``strftime`` format for the timestamp.

    Returns
    -------
    pandas.DataFrame
        Columns ``discharge`` and ``tds`` indexed by sorted timestamps.

    Raises
    ------
    DataError
        If a column is missing or any discharge is non-positive (models use
        ``log(discharge)``).
    """
    frame = _read_csv(path, [time_column, discharge_column, tds_column])

    data = pd.DataFrame(
        {
            "discharge": pd.to_numeric(frame[discharge_column], errors="coerce").to_numpy(),
            "tds": pd.to_numeric(frame[tds_column], errors="coerce").to_numpy(),
        },
        index=_parse_time(frame, time_column, time_format),
    )
    data.index.name = "time"

    n_incomplete = int(data.isna().any(axis=1).sum())
    if n_incomplete:
        logger.debug("Dropping %d incomplete river records", n_incomplete)
    data = _clean_index(data.dropna())
    if data.empty:
        raise DataError(f"No complete river records in {path}")

    if (data["discharge"] <= 0).any():
        raise DataError("Discharge must be strictly positive")

    logger.info("Loaded %d river records from %s", len(data), Path(path).name)
    return data

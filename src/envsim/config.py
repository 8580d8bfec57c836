"""
Analysis configuration: paths, defaults and logging setup.

Notebooks build one :class:`AnalysisConfig` and pass its fields to the
loaders, transforms and estimators. Library functions never read the
configuration implicitly.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

# ── Paths ──────────────────────────────────────────────────────────────────────

DATA_DIR = Path("data")

TIDE_GAUGE_CSV = DATA_DIR / "norfolk-hourly-surge-2015.csv"
RIVER_CSV = DATA_DIR / "tds_cuyaoga.csv"

# ── Transforms ─────────────────────────────────────────────────────────────────

# One year of hourly observations; removes sea-level rise before taking maxima
MOVING_AVERAGE_WINDOW = "365D"

# Years with less than this share of expected hourly observations are dropped
MIN_ANNUAL_COVERAGE = 0.9
HOURS_PER_YEAR = 24 * 365

# ── Sampling ───────────────────────────────────────────────────────────────────

N_CHAINS = 4
N_SAMPLES = 2_000
N_WARMUP = 1_000
SEED = 4850

RETURN_PERIODS = (2, 10, 25, 50, 100, 500)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_HANDLER_NAME = "envsim.stream"


@dataclass(frozen=True)
class AnalysisConfig:
    """Lightweight configuration bundle passed around by notebooks."""

    data_dir: Path = DATA_DIR
    tide_gauge_csv: Path = TIDE_GAUGE_CSV
    river_csv: Path = RIVER_CSV
    moving_average_window: str | int = MOVING_AVERAGE_WINDOW
    min_annual_coverage: float = MIN_ANNUAL_COVERAGE
    expected_per_year: int = HOURS_PER_YEAR
    n_chains: int = N_CHAINS
    n_samples: int = N_SAMPLES
    n_warmup: int = N_WARMUP
    seed: int | None = SEED
    return_periods: tuple[float, ...] = field(default=RETURN_PERIODS)

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_annual_coverage <= 1.0:
            raise ValueError("min_annual_coverage must be in [0, 1]")
        if self.n_chains < 1 or self.n_samples < 1 or self.n_warmup < 0:
            raise ValueError("n_chains and n_samples must be positive, n_warmup non-negative")
        if any(period <= 1 for period in self.return_periods):
            raise ValueError("return periods must be greater than one block")


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """
    Attach a single stream handler to the ``envsim`` logger.

    Calling this more than once only updates the level.

    Parameters
    ----------
    level : int or str, default logging.INFO
        Logging level for the package logger.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    logger = logging.getLogger("envsim")
    logger.setLevel(level)
    if not any(h.name == LOG_HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(LOG_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


__all__ = [
    "AnalysisConfig",
    "configure_logging",
]

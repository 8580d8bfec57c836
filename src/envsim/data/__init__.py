"""
Data subpackage

Loaders for the tide-gauge and river datasets (:mod:`.io`) and the derived
statistics computed from them (:mod:`.transforms`).
"""

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from .io import load_river_flow, load_tide_gauge
from .transforms import annual_maxima, block_maxima, detrend, moving_average

__all__ = [
    "load_tide_gauge",
    "load_river_flow",
    "moving_average",
    "detrend",
    "block_maxima",
    "annual_maxima",
]

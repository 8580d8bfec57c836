"""
Exception hierarchy shared by the data, fitting and sampling layers.
"""

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"


class EnvSimError(Exception):
    """Base class for all errors raised by EnvSim."""


class DataError(EnvSimError, ValueError):
    """Raised when an input dataset is missing, malformed or unusable."""


class FitError(EnvSimError, RuntimeError):
    """Raised when an estimator cannot produce a usable estimate."""


__all__ = [
    "EnvSimError",
    "DataError",
    "FitError",
]

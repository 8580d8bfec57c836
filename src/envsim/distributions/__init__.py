"""
Distributions subpackage

Interfaces and default implementations for probability distributions used by
EnvSim:

- distribution protocol (:mod:`.distribution`);
- numerical conversions (:mod:`.fitters`);
- sampling protocol and array-backed samples (:mod:`.sampling`);
- pluggable strategies (:mod:`.strategies`);
- interval supports (:mod:`.support`).
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"
from .computation import (
    AnalyticalComputation,
    ComputationMethod,
    FittedComputationMethod,
)
from .distribution import Distribution
from .fitters import DEFAULT_CONVERSIONS
from .sampling import ArraySample, Sample
from .strategies import (
    ComputationStrategy,
    DefaultComputationStrategy,
    DefaultSamplingUnivariateStrategy,
    SamplingStrategy,
)
from .support import ContinuousSupport, Support

__all__ = [
    # computation primitives
    "AnalyticalComputation",
    "ComputationMethod",
    "FittedComputationMethod",
    "DEFAULT_CONVERSIONS",
    # distribution
    "Distribution",
    # sampling
    "Sample",
    "ArraySample",
    # strategies
    "ComputationStrategy",
    "DefaultComputationStrategy",
    "SamplingStrategy",
    "DefaultSamplingUnivariateStrategy",
    # support
    "Support",
    "ContinuousSupport",
]

"""
Normal family: regression residuals and coefficient priors.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import math
from typing import TYPE_CHECKING, cast

import numpy as np
from scipy.special import erfc, erfcinv

from envsim.distributions.support import ContinuousSupport
from envsim.families.parametric_family import ParametricFamily
from envsim.families.parametrizations import (
    Parametrization,
    constraint,
    parametrization,
)
from envsim.families.registry import ParametricFamilyRegister
from envsim.types import (
    CharacteristicName,
    FamilyName,
    NumericArray,
    UnivariateContinuous,
)

if TYPE_CHECKING:
    from typing import Any

_LOG_SQRT_2PI = 0.5 * math.log(2.0 * math.pi)
_SQRT2 = math.sqrt(2.0)


def configure_normal_family() -> None:
    """Register the Normal family unless it is already registered."""

    if ParametricFamilyRegister.contains(FamilyName.NORMAL):
        return

    NORMAL_DOC = """
    Normal distribution N(μ, σ).

        f(x) = exp(-(x - μ)² / (2σ²)) / (σ √(2π))

    Base parametrization ``meanStd`` (μ, σ > 0); ``meanPrec`` uses the
    precision τ = 1/σ².
    """

    def _z(parameters: Parametrization, x: Any) -> tuple[NumericArray, _MeanStd]:
        params = cast(_MeanStd, parameters)
        return (np.asarray(x, dtype=np.float64) - params.mu) / params.sigma, params

    def logpdf(parameters: Parametrization, x: NumericArray) -> NumericArray:
        z, params = _z(parameters, x)
        return cast(NumericArray, -0.5 * z**2 - math.log(params.sigma) - _LOG_SQRT_2PI)

    def pdf(parameters: Parametrization, x: NumericArray) -> NumericArray:
        return cast(NumericArray, np.exp(logpdf(parameters, x)))

    def cdf(parameters: Parametrization, x: NumericArray) -> NumericArray:
        """``erfc(-z / √2) / 2``; keeps relative precision deep in the lower tail."""
        z, _ = _z(parameters, x)
        return cast(NumericArray, 0.5 * erfc(-z / _SQRT2))

    def ppf(parameters: Parametrization, p: NumericArray) -> NumericArray:
        """
        Quantile function.

        Raises
        ------
        ValueError
            If a probability lies outside [0, 1].
        """
        q = np.asarray(p, dtype=np.float64)
        if np.any((q < 0) | (q > 1)):
            raise ValueError("Probability must be in [0, 1]")
        params = cast(_MeanStd, parameters)
        return cast(NumericArray, params.mu - params.sigma * _SQRT2 * erfcinv(2.0 * q))

    def mean_func(parameters: Parametrization, _: Any = None) -> float:
        return cast(_MeanStd, parameters).mu

    def var_func(parameters: Parametrization, _: Any = None) -> float:
        return cast(_MeanStd, parameters).sigma ** 2

    Normal = ParametricFamily(
        name=FamilyName.NORMAL,
        distr_type=UnivariateContinuous,
        distr_parametrizations=["meanStd", "meanPrec"],
        distr_characteristics={
            CharacteristicName.LOGPDF: logpdf,
            CharacteristicName.PDF: pdf,
            CharacteristicName.CDF: cdf,
            CharacteristicName.PPF: ppf,
            CharacteristicName.MEAN: mean_func,
            CharacteristicName.VAR: var_func,
        },
        support_by_parametrization=lambda _params: ContinuousSupport(),
    )
    Normal.__doc__ = NORMAL_DOC

    @parametrization(family=Normal, name="meanStd")
    class _MeanStd(Parametrization):
        """Mean ``mu`` and standard deviation ``sigma``."""

        mu: float
        sigma: float

        @constraint(description="sigma > 0")
        def check_sigma_positive(self) -> bool:
            return self.sigma > 0

    @parametrization(family=Normal, name="meanPrec")
    class _MeanPrec(Parametrization):
        """Mean ``mu`` and precision ``tau = 1 / sigma**2``."""

        mu: float
        tau: float

        @constraint(description="tau > 0")
        def check_tau_positive(self) -> bool:
            return self.tau > 0

        def transform_to_base_parametrization(self) -> Parametrization:
            return _MeanStd(mu=self.mu, sigma=1.0 / math.sqrt(self.tau))

    ParametricFamilyRegister.register(Normal)

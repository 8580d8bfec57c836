"""
Generalized extreme value distribution family implementation.

Contains the GEV family with the location-scale-shape parametrization and the
``scipy.stats.genextreme`` convention.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import math
from typing import TYPE_CHECKING, cast

import numpy as np
from scipy.special import gamma as gamma_fn

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

GUMBEL_TOLERANCE = 1e-8
"""Shape parameters with ``|xi|`` below this value use the Gumbel limit."""


def _is_gumbel(xi: float) -> bool:
    return abs(xi) < GUMBEL_TOLERANCE


def configure_gev_family() -> None:
    """
    Configure and register the GEV distribution family.
    """

    if ParametricFamilyRegister.contains(FamilyName.GEV):
        return

    GEV_DOC = """
    Generalized extreme value (GEV) distribution.

    Limit distribution of normalized block maxima (e.g., annual maximum
    storm surge). Parameters are location (μ), scale (σ > 0) and shape (ξ):

        F(x) = exp(-(1 + ξ (x - μ)/σ)^(-1/ξ)),    1 + ξ (x - μ)/σ > 0

    ξ > 0 gives the heavy-tailed Fréchet type with a lower bound,
    ξ < 0 the Weibull type with an upper bound, and ξ → 0 the Gumbel type
    F(x) = exp(-exp(-(x - μ)/σ)).
    """

    def _standardize(parameters: Parametrization, x: Any) -> tuple[NumericArray, float]:
        parameters = cast(_LocScaleShape, parameters)
        z = (np.asarray(x, dtype=np.float64) - parameters.mu) / parameters.sigma
        return z, parameters.xi

    def logpdf(parameters: Parametrization, x: NumericArray) -> NumericArray:
        """
        Log probability density of the GEV distribution.

        Parameters
        ----------
        parameters : Parametrization
            Distribution parameters object with fields ``mu``, ``sigma``, ``xi``.
        x : NumericArray
            Points at which to evaluate the log density.

        Returns
        -------
        NumericArray
            Log density values, ``-inf`` outside the support.
        """
        z, xi = _standardize(parameters, x)
        log_sigma = math.log(cast(_LocScaleShape, parameters).sigma)

        with np.errstate(all="ignore"):
            if _is_gumbel(xi):
                result = -log_sigma - z - np.exp(-z)
            else:
                t = 1.0 + xi * z
                inside = t > 0
                t_safe = np.where(inside, t, 1.0)
                values = -log_sigma - (1.0 + 1.0 / xi) * np.log(t_safe) - t_safe ** (-1.0 / xi)
                result = np.where(inside, values, -np.inf)
        return cast(NumericArray, result)

    def pdf(parameters: Parametrization, x: NumericArray) -> NumericArray:
        """Probability density of the GEV distribution."""
        return cast(NumericArray, np.exp(logpdf(parameters, x)))

    def cdf(parameters: Parametrization, x: NumericArray) -> NumericArray:
        """
        Cumulative distribution function of the GEV distribution.

        Below a lower support bound the result is 0; above an upper bound it is 1.
        """
        z, xi = _standardize(parameters, x)

        with np.errstate(all="ignore"):
            if _is_gumbel(xi):
                return cast(NumericArray, np.exp(-np.exp(-z)))
            t = 1.0 + xi * z
            inside = t > 0
            t_safe = np.where(inside, t, 1.0)
            values = np.exp(-(t_safe ** (-1.0 / xi)))
            outside = 0.0 if xi > 0 else 1.0
            return cast(NumericArray, np.where(inside, values, outside))

    def sf(parameters: Parametrization, x: NumericArray) -> NumericArray:
        """Survival function ``P(X > x)``, computed without cancellation in the upper tail."""
        z, xi = _standardize(parameters, x)

        with np.errstate(all="ignore"):
            if _is_gumbel(xi):
                return cast(NumericArray, -np.expm1(-np.exp(-z)))
            t = 1.0 + xi * z
            inside = t > 0
            t_safe = np.where(inside, t, 1.0)
            values = -np.expm1(-(t_safe ** (-1.0 / xi)))
            outside = 1.0 if xi > 0 else 0.0
            return cast(NumericArray, np.where(inside, values, outside))

    def ppf(parameters: Parametrization, p: NumericArray) -> NumericArray:
        """
        Percent point function (inverse CDF) of the GEV distribution.

        Parameters
        ----------
        parameters : Parametrization
            Distribution parameters object with fields ``mu``, ``sigma``, ``xi``.
        p : NumericArray
            Probability from [0, 1]

        Returns
        -------
        NumericArray
            Quantiles; ``p = 0`` and ``p = 1`` map to the support bounds.

        Raises
        ------
        ValueError
            If probability is outside [0, 1]
        """
        p = np.asarray(p, dtype=np.float64)
        if np.any((p < 0) | (p > 1)):
            raise ValueError("Probability must be in [0, 1]")

        params = cast(_LocScaleShape, parameters)
        mu, sigma, xi = params.mu, params.sigma, params.xi

        with np.errstate(all="ignore"):
            y = -np.log(p)
            if _is_gumbel(xi):
                return cast(NumericArray, mu - sigma * np.log(y))
            return cast(NumericArray, mu + sigma / xi * (y ** (-xi) - 1.0))

    def mean_func(parameters: Parametrization, _: Any = None) -> float:
        """Mean of the GEV distribution (infinite for ``xi >= 1``)."""
        params = cast(_LocScaleShape, parameters)
        if _is_gumbel(params.xi):
            return params.mu + params.sigma * np.euler_gamma
        if params.xi >= 1:
            return math.inf
        return params.mu + params.sigma * (float(gamma_fn(1.0 - params.xi)) - 1.0) / params.xi

    def var_func(parameters: Parametrization, _: Any = None) -> float:
        """Variance of the GEV distribution (infinite for ``xi >= 1/2``)."""
        params = cast(_LocScaleShape, parameters)
        if _is_gumbel(params.xi):
            return params.sigma**2 * math.pi**2 / 6.0
        if params.xi >= 0.5:
            return math.inf
        g1 = float(gamma_fn(1.0 - params.xi))
        g2 = float(gamma_fn(1.0 - 2.0 * params.xi))
        return params.sigma**2 * (g2 - g1**2) / params.xi**2

    def _support(parameters: Parametrization) -> ContinuousSupport:
        """Support of the GEV distribution, bounded on one side unless ``xi == 0``."""
        params = cast(_LocScaleShape, parameters)
        if _is_gumbel(params.xi):
            return ContinuousSupport()
        bound = params.mu - params.sigma / params.xi
        if params.xi > 0:
            return ContinuousSupport.lower_bounded(bound)
        return ContinuousSupport.upper_bounded(bound)

    GEV = ParametricFamily(
        name=FamilyName.GEV,
        distr_type=UnivariateContinuous,
        distr_parametrizations=["locScaleShape", "scipy"],
        distr_characteristics={
            CharacteristicName.LOGPDF: logpdf,
            CharacteristicName.PDF: pdf,
            CharacteristicName.CDF: cdf,
            CharacteristicName.SF: sf,
            CharacteristicName.PPF: ppf,
            CharacteristicName.MEAN: mean_func,
            CharacteristicName.VAR: var_func,
        },
        support_by_parametrization=_support,
    )
    GEV.__doc__ = GEV_DOC

    @parametrization(family=GEV, name="locScaleShape")
    class _LocScaleShape(Parametrization):
        """
        Location-scale-shape parametrization of the GEV distribution.

        Parameters
        ----------
        mu : float
            Location.
        sigma : float
            Scale.
        xi : float
            Shape; positive for a heavy upper tail.
        """

        mu: float
        sigma: float
        xi: float

        @constraint(description="sigma > 0")
        def check_sigma_positive(self) -> bool:
            return self.sigma > 0

        @constraint(description="parameters are finite")
        def check_finite(self) -> bool:
            return all(math.isfinite(v) for v in (self.mu, self.sigma, self.xi))

    @parametrization(family=GEV, name="scipy")
    class _SciPy(Parametrization):
        """
        Parametrization used by ``scipy.stats.genextreme``, whose shape ``c`` is ``-xi``.

        Parameters
        ----------
        loc : float
        scale : float
        c : float
        """

        loc: float
        scale: float
        c: float

        @constraint(description="scale > 0")
        def check_scale_positive(self) -> bool:
            return self.scale > 0

        def transform_to_base_parametrization(self) -> Parametrization:
            return _LocScaleShape(mu=self.loc, sigma=self.scale, xi=-self.c)

    ParametricFamilyRegister.register(GEV)

"""
Bayesian simple linear regression.

Model
-----
.. math::

    y_i = a + b x_i + \\varepsilon_i, \\qquad \\varepsilon_i \\sim N(0, \\sigma)

with independent priors on ``a``, ``b`` and ``sigma``. Priors are Normal
family distributions; the prior on ``sigma`` is restricted to ``sigma > 0``
(a half-normal when centred at zero). The posterior is sampled with
:class:`~envsim.inference.mcmc.MetropolisSampler` starting from the least
squares estimate.

In the course example ``x`` is ``log(discharge)`` and ``y`` the total
dissolved solids concentration of a river.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

from envsim.families.configuration import configure_families_register
from envsim.inference.mcmc import MCMCResult, MetropolisSampler
from envsim.types import CharacteristicName, FamilyName

if TYPE_CHECKING:
    import numpy.typing as npt

    from envsim.families.distribution import ParametricFamilyDistribution

    FloatArray = np.ndarray[Any, np.dtype[np.float64]]

logger = logging.getLogger(__name__)

PARAMETER_NAMES = ("a", "b", "sigma")
_LOG_SQRT_2PI = 0.5 * math.log(2.0 * math.pi)


def _normal(mu: float, sigma: float) -> ParametricFamilyDistribution:
    return configure_families_register().get(FamilyName.NORMAL)(mu=mu, sigma=sigma)


def _default_priors() -> dict[str, ParametricFamilyDistribution]:
    return {"a": _normal(0.0, 10.0), "b": _normal(0.0, 10.0), "sigma": _normal(0.0, 5.0)}


def _check_xy(x: npt.ArrayLike, y: npt.ArrayLike) -> tuple[FloatArray, FloatArray]:
    xa = np.asarray(x, dtype=np.float64).ravel()
    ya = np.asarray(y, dtype=np.float64).ravel()
    if xa.shape != ya.shape:
        raise ValueError(f"x and y must have the same length, got {xa.size} and {ya.size}")
    if xa.size < 3:
        raise ValueError("at least three observations are needed")
    if not (np.all(np.isfinite(xa)) and np.all(np.isfinite(ya))):
        raise ValueError("x and y must be finite")
    return xa, ya


@dataclass(frozen=True, slots=True)
class LeastSquaresFit:
    """Maximum likelihood (ordinary least squares) estimate of the regression."""

    a: float
    b: float
    sigma: float
    n_obs: int

    def as_array(self) -> FloatArray:
        return np.array([self.a, self.b, self.sigma])


def fit_least_squares(x: npt.ArrayLike, y: npt.ArrayLike) -> LeastSquaresFit:
    """
    Least squares intercept and slope; ``sigma`` is the ML residual scale.

    Raises
    ------
    ValueError
        If the inputs differ in length, are too short, or ``x`` is constant.
    """
    xa, ya = _check_xy(x, y)
    if np.ptp(xa) == 0:
        raise ValueError("x must not be constant")
    design = np.column_stack([np.ones_like(xa), xa])
    (a, b), *_ = np.linalg.lstsq(design, ya, rcond=None)
    residuals = ya - (a + b * xa)
    sigma = float(np.sqrt(np.mean(residuals**2)))
    return LeastSquaresFit(a=float(a), b=float(b), sigma=sigma, n_obs=int(xa.size))


@dataclass(slots=True)
class LinearRegressionModel:
    """
    Bayesian simple linear regression with Normal noise.

    Parameters
    ----------
    priors : dict[str, ParametricFamilyDistribution], optional
        Priors for ``"a"``, ``"b"`` and ``"sigma"``; missing entries use
        ``Normal(0, 10)``, ``Normal(0, 10)`` and the half-normal
        ``Normal(0, 5)`` restricted to ``sigma > 0``.
    """

    priors: dict[str, ParametricFamilyDistribution] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = set(self.priors) - set(PARAMETER_NAMES)
        if unknown:
            raise ValueError(f"unknown parameter(s) in priors: {sorted(unknown)}")
        self.priors = {**_default_priors(), **self.priors}

    def log_prior(self, theta: npt.ArrayLike) -> float:
        """Joint log prior density; ``-inf`` when ``sigma <= 0``."""
        a, b, sigma = np.asarray(theta, dtype=np.float64)
        if not sigma > 0:
            return -math.inf
        return float(
            sum(
                self.priors[name].query_method(CharacteristicName.LOGPDF)(value)
                for name, value in zip(PARAMETER_NAMES, (a, b, sigma), strict=True)
            )
        )

    @staticmethod
    def log_likelihood(theta: npt.ArrayLike, x: npt.ArrayLike, y: npt.ArrayLike) -> float:
        """Gaussian log-likelihood of ``y`` given ``x``."""
        a, b, sigma = np.asarray(theta, dtype=np.float64)
        if not sigma > 0:
            return -math.inf
        resid = (np.asarray(y) - (a + b * np.asarray(x))) / sigma
        n = resid.size
        return float(-0.5 * np.sum(resid**2) - n * (math.log(sigma) + _LOG_SQRT_2PI))

    def log_posterior(self, theta: npt.ArrayLike, x: npt.ArrayLike, y: npt.ArrayLike) -> float:
        lp = self.log_prior(theta)
        if not math.isfinite(lp):
            return -math.inf
        return lp + self.log_likelihood(theta, x, y)

    def fit(
        self,
        x: npt.ArrayLike,
        y: npt.ArrayLike,
        *,
        n_samples: int = 2_000,
        n_warmup: int = 1_000,
        n_chains: int = 4,
        rng: np.random.Generator | int | None = None,
    ) -> MCMCResult:
        """
        Sample the posterior of ``(a, b, sigma)``.

        Chains start from the least squares estimate with a small jitter so
        that the convergence diagnostics compare genuinely different chains.

        Returns
        -------
        MCMCResult
            Draws with parameter names ``("a", "b", "sigma")``.
        """
        xa, ya = _check_xy(x, y)
        ls = fit_least_squares(xa, ya)
        logger.info("Least squares start: a=%.4g, b=%.4g, sigma=%.4g", ls.a, ls.b, ls.sigma)

        gen = np.random.default_rng(rng)
        sx = float(np.std(xa)) or 1.0
        sigma0 = max(ls.sigma, 1e-8)
        root_n = math.sqrt(xa.size)
        # approximate posterior standard deviations of a, b and sigma
        scales = sigma0 / root_n * np.array([1.0, 1.0 / sx, 1.0 / math.sqrt(2)])
        starts = ls.as_array() + scales * gen.standard_normal((n_chains, 3))
        starts[:, 2] = np.abs(starts[:, 2])
        starts[:, 2] = np.where(starts[:, 2] > 0, starts[:, 2], sigma0)

        sampler = MetropolisSampler(
            lambda theta: self.log_posterior(theta, xa, ya),
            step_size=scales,
            n_chains=n_chains,
            parameter_names=PARAMETER_NAMES,
            rng=gen,
        )
        return sampler.sample(starts, n_samples, n_warmup=n_warmup)


def posterior_predictive(
    result: MCMCResult,
    x_new: npt.ArrayLike,
    *,
    rng: np.random.Generator | int | None = None,
    n_draws: int | None = None,
) -> FloatArray:
    """
    Simulate new observations from the posterior predictive distribution.

    Parameters
    ----------
    result : MCMCResult
        Posterior draws with parameters ``a``, ``b`` and ``sigma``.
    x_new : array_like
        Predictor values to simulate at.
    rng : numpy.random.Generator or int, optional
        Generator or seed.
    n_draws : int, optional
        Number of posterior draws to use (sampled without replacement);
        defaults to all pooled draws.

    Returns
    -------
    numpy.ndarray
        Simulated responses, shape ``(n_draws, len(x_new))``, including the
        observation noise.
    """
    gen = np.random.default_rng(rng)
    xs = np.atleast_1d(np.asarray(x_new, dtype=np.float64))
    params = np.column_stack([result[name].ravel() for name in PARAMETER_NAMES])
    if n_draws is not None:
        if not 0 < n_draws <= params.shape[0]:
            raise ValueError(f"n_draws must be in [1, {params.shape[0]}]")
        params = params[gen.choice(params.shape[0], size=n_draws, replace=False)]

    a, b, sigma = (params[:, i : i + 1] for i in range(3))
    mean = a + b * xs[np.newaxis, :]
    return mean + sigma * gen.standard_normal(mean.shape)


def predictive_interval(
    draws: npt.ArrayLike, level: float = 0.9
) -> tuple[FloatArray, FloatArray, FloatArray]:
    """
    Central predictive interval of simulated draws.

    Parameters
    ----------
    draws : array_like
        Simulations, shape ``(n_draws, n_points)``.
    level : float, default 0.9
        Interval probability.

    Returns
    -------
    tuple of numpy.ndarray
        ``(lower, median, upper)`` per point.
    """
    if not 0 < level < 1:
        raise ValueError("level must be in (0, 1)")
    tail = (1.0 - level) / 2.0
    lower, median, upper = np.quantile(np.asarray(draws), [tail, 0.5, 1.0 - tail], axis=0)
    return lower, median, upper

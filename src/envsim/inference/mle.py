"""
Maximum likelihood estimation for parametric families.

The negative log-likelihood of a family's base parametrization is minimised
with :func:`scipy.optimize.minimize`. Parameter vectors that violate a
constraint, or give a non-finite likelihood, are mapped to a large finite
penalty so derivative-free methods can step back into the feasible region.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
from scipy import optimize as _sp_optimize

from envsim.exceptions import DataError, FitError
from envsim.families.configuration import configure_families_register
from envsim.types import CharacteristicName, FamilyName

if TYPE_CHECKING:
    import numpy.typing as npt

    from envsim.families.distribution import ParametricFamilyDistribution
    from envsim.families.parametric_family import ParametricFamily

logger = logging.getLogger(__name__)

PENALTY = 1e10
"""Objective value used for infeasible parameter vectors."""


@dataclass(frozen=True, slots=True)
class MLEResult:
    """
    Outcome of a maximum likelihood fit.

    Attributes
    ----------
    distribution : ParametricFamilyDistribution
        Fitted distribution.
    parameters : dict[str, float]
        Estimates in the family's base parametrization.
    log_likelihood : float
        Maximised log-likelihood.
    converged : bool
        Whether the optimizer reported success.
    n_obs : int
        Number of observations used.
    message : str
        Optimizer status message.
    """

    distribution: ParametricFamilyDistribution
    parameters: dict[str, float]
    log_likelihood: float
    converged: bool
    n_obs: int
    message: str = ""

    @property
    def n_params(self) -> int:
        return len(self.parameters)

    @property
    def aic(self) -> float:
        """Akaike information criterion."""
        return 2.0 * self.n_params - 2.0 * self.log_likelihood

    @property
    def bic(self) -> float:
        """Bayesian information criterion."""
        return self.n_params * math.log(self.n_obs) - 2.0 * self.log_likelihood


def _as_observations(data: npt.ArrayLike) -> np.ndarray[Any, np.dtype[np.float64]]:
    x = np.asarray(data, dtype=np.float64).ravel()
    x = x[~np.isnan(x)]
    if x.size == 0:
        raise DataError("cannot fit a distribution to an empty sample")
    if not np.all(np.isfinite(x)):
        raise DataError("observations must be finite")
    return x


def negative_log_likelihood(
    family: ParametricFamily, values: Sequence[float], data: npt.ArrayLike
) -> float:
    """
    Negative log-likelihood of ``data`` at base parameter ``values``.

    Returns :data:`PENALTY` for infeasible or non-finite evaluations.
    """
    try:
        distr = family.from_values(values)
    except ValueError:
        return PENALTY
    ll = distr.log_likelihood(data)
    if not math.isfinite(ll):
        return PENALTY
    return -ll


def fit_mle(
    family: ParametricFamily,
    data: npt.ArrayLike,
    *,
    initial: Sequence[float],
    bounds: Sequence[tuple[float | None, float | None]] | None = None,
    method: str = "Nelder-Mead",
    options: dict[str, Any] | None = None,
) -> MLEResult:
    """
    Fit ``family`` to ``data`` by maximum likelihood.

    Parameters
    ----------
    family : ParametricFamily
        Family to fit; estimates are in its base parametrization.
    data : array_like
        Observations; NaNs are ignored.
    initial : sequence of float
        Starting values for the base parameters.
    bounds : sequence of (low, high), optional
        Box bounds passed to the optimizer (use with ``"L-BFGS-B"``).
    method : str, default "Nelder-Mead"
        :func:`scipy.optimize.minimize` method.
    options : dict, optional
        Optimizer options.

    Returns
    -------
    MLEResult

    Raises
    ------
    DataError
        If ``data`` is empty or contains infinities.
    FitError
        If the likelihood is not finite at ``initial`` or at the optimum.
    """
    x = _as_observations(data)
    names = family.parameter_names()

    x0 = np.asarray(initial, dtype=np.float64)
    if x0.shape != (len(names),):
        raise ValueError(f"initial must have {len(names)} values for {names}")
    if negative_log_likelihood(family, x0, x) >= PENALTY:
        start = dict(zip(names, x0.tolist(), strict=True))
        raise FitError(f"log-likelihood is not finite at the starting point {start}")

    opts = {"maxiter": 5_000, "xatol": 1e-8, "fatol": 1e-10} if method == "Nelder-Mead" else {}
    opts.update(options or {})

    logger.debug("Fitting %s to %d observations from %s", family.name, x.size, x0)
    res = _sp_optimize.minimize(
        lambda theta: negative_log_likelihood(family, theta, x),
        x0,
        method=method,
        bounds=bounds,
        options=opts,
    )

    if res.fun >= PENALTY:
        raise FitError(f"{family.name} fit ended at an infeasible point: {res.message}")
    if not res.success:
        logger.warning("%s fit did not converge: %s", family.name, res.message)

    estimates = {n: float(v) for n, v in zip(names, res.x, strict=True)}
    logger.info(
        "Fitted %s: %s (log-likelihood %.3f)",
        family.name,
        ", ".join(f"{k}={v:.4g}" for k, v in estimates.items()),
        -res.fun,
    )
    return MLEResult(
        distribution=family.from_values(res.x),
        parameters=estimates,
        log_likelihood=float(-res.fun),
        converged=bool(res.success),
        n_obs=int(x.size),
        message=str(res.message),
    )


def gumbel_moment_estimates(data: npt.ArrayLike) -> tuple[float, float]:
    """
    Method-of-moments location and scale of a Gumbel distribution.

    Returns
    -------
    tuple[float, float]
        ``(mu, sigma)`` with ``sigma = sqrt(6) s / pi`` and
        ``mu = mean - euler_gamma * sigma``.

    Raises
    ------
    DataError
        If fewer than two observations remain or they have zero variance.
    """
    x = _as_observations(data)
    if x.size < 2 or np.ptp(x) == 0:
        raise DataError("observations have zero variance; no scale can be estimated")
    sigma = float(np.std(x, ddof=1)) * math.sqrt(6.0) / math.pi
    return float(np.mean(x)) - float(np.euler_gamma) * sigma, sigma


def fit_gev(
    data: npt.ArrayLike, *, initial_shape: float = 0.1, **kwargs: Any
) -> MLEResult:
    """
    Fit a GEV distribution to block maxima.

    Starting values come from the Gumbel moment estimates; if the likelihood
    is infeasible there (an observation outside the support), the fit starts
    from a Gumbel shape instead.

    Parameters
    ----------
    data : array_like
        Block maxima.
    initial_shape : float, default 0.1
        Starting shape parameter.
    **kwargs
        Forwarded to :func:`fit_mle`.
    """
    x = _as_observations(data)
    if x.size < 3:
        raise DataError("at least three block maxima are needed to fit a GEV distribution")
    if np.ptp(x) == 0:
        raise DataError("block maxima have zero variance; a GEV scale cannot be fitted")

    family = configure_families_register().get(FamilyName.GEV)
    mu0, sigma0 = gumbel_moment_estimates(x)
    initial = [mu0, sigma0, initial_shape]
    if negative_log_likelihood(family, initial, x) >= PENALTY:
        initial = [mu0, sigma0, 0.0]
    return fit_mle(family, x, initial=initial, **kwargs)


def return_level(
    distribution: ParametricFamilyDistribution, period: float | npt.ArrayLike
) -> float | np.ndarray[Any, np.dtype[np.float64]]:
    """
    Level exceeded on average once every ``period`` blocks.

    Parameters
    ----------
    distribution : ParametricFamilyDistribution
        Distribution of block maxima.
    period : float or array_like
        Return period(s) in blocks; must exceed 1.

    Returns
    -------
    float or numpy.ndarray
        ``ppf(1 - 1/period)``.

    Raises
    ------
    ValueError
        If any period is not greater than 1.
    """
    periods = np.asarray(period, dtype=np.float64)
    if np.any(periods <= 1):
        raise ValueError("return period must be greater than 1")
    levels = np.asarray(distribution.query_method(CharacteristicName.PPF)(1.0 - 1.0 / periods))
    return float(levels) if levels.ndim == 0 else levels


def return_period(
    distribution: ParametricFamilyDistribution, level: float | npt.ArrayLike
) -> float | np.ndarray[Any, np.dtype[np.float64]]:
    """
    Average number of blocks between exceedances of ``level`` (``1 / sf(level)``).
    """
    with np.errstate(divide="ignore"):
        periods = 1.0 / np.asarray(distribution.query_method(CharacteristicName.SF)(level))
    return float(periods) if periods.ndim == 0 else periods

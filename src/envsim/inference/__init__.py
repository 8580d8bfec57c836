"""
Inference subpackage

- maximum likelihood fits and return levels (:mod:`.mle`);
- random-walk Metropolis sampling and diagnostics (:mod:`.mcmc`);
- Bayesian linear regression and posterior predictive simulation
  (:mod:`.regression`).
"""

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from .mcmc import MCMCResult, MetropolisSampler, effective_sample_size, split_r_hat
from .mle import (
    MLEResult,
    fit_gev,
    fit_mle,
    gumbel_moment_estimates,
    negative_log_likelihood,
    return_level,
    return_period,
)
from .regression import (
    LeastSquaresFit,
    LinearRegressionModel,
    fit_least_squares,
    posterior_predictive,
    predictive_interval,
)

__all__ = [
    # maximum likelihood
    "MLEResult",
    "fit_mle",
    "fit_gev",
    "gumbel_moment_estimates",
    "negative_log_likelihood",
    "return_level",
    "return_period",
    # mcmc
    "MCMCResult",
    "MetropolisSampler",
    "split_r_hat",
    "effective_sample_size",
    # regression
    "LeastSquaresFit",
    "LinearRegressionModel",
    "fit_least_squares",
    "posterior_predictive",
    "predictive_interval",
]

"""
Markov chain Monte Carlo
========================

Random-walk Metropolis sampling of an unnormalised log density:

- :class:`MetropolisSampler` runs independent chains with Gaussian
  proposals; the proposal covariance is adapted during warm-up from the
  warm-up draws, and its scale from the observed acceptance rate.
- :class:`MCMCResult` holds draws of all chains plus convergence diagnostics
  (split :math:`\\hat R`, effective sample size) and a tabular summary.

Notes
-----
- Chains run one after another; each owns a generator spawned from the
  sampler's generator, so a single seed reproduces every chain.
- Warm-up draws are discarded; adaptation stops when warm-up ends, so the
  retained draws come from a fixed Markov kernel.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    import numpy.typing as npt

    FloatArray = np.ndarray[Any, np.dtype[np.float64]]

logger = logging.getLogger(__name__)

TARGET_ACCEPTANCE = 0.3
ADAPTATION_WINDOW = 50
SUMMARY_QUANTILES = (0.05, 0.5, 0.95)


def _autocovariance(x: FloatArray) -> FloatArray:
    """Biased autocovariance of a 1D series for all lags (FFT based)."""
    n = x.size
    centered = x - x.mean()
    spectrum = np.fft.rfft(centered, n=2 * n)
    return np.fft.irfft(spectrum * np.conjugate(spectrum))[:n] / n


def split_r_hat(chains: npt.ArrayLike) -> float:
    """
    Split-chain potential scale reduction factor.

    Parameters
    ----------
    chains : array_like
        Draws of one scalar quantity, shape ``(n_chains, n_draws)``.

    Returns
    -------
    float
        :math:`\\hat R`; values near 1 indicate the chains agree. ``nan`` when
        there are fewer than four draws per chain or no within-chain variance.
    """
    x = np.asarray(chains, dtype=np.float64)
    n = x.shape[1] // 2
    if n < 2:
        return math.nan
    halves = np.concatenate([x[:, :n], x[:, -n:]], axis=0)

    within = float(np.mean(np.var(halves, axis=1, ddof=1)))
    between = n * float(np.var(np.mean(halves, axis=1), ddof=1))
    if within <= 0:
        return math.nan
    var_plus = (n - 1) / n * within + between / n
    return math.sqrt(var_plus / within)


def effective_sample_size(chains: npt.ArrayLike) -> float:
    """
    Effective sample size from the combined autocorrelation of all chains.

    Uses Geyer's initial monotone sequence to truncate the autocorrelation sum.
    Chains are neither split nor rank normalised.

    Parameters
    ----------
    chains : array_like
        Draws of one scalar quantity, shape ``(n_chains, n_draws)``.
    """
    x = np.asarray(chains, dtype=np.float64)
    m, n = x.shape
    if n < 4:
        return math.nan

    acov = np.array([_autocovariance(chain) for chain in x])
    mean_var = float(np.mean(acov[:, 0])) * n / (n - 1)
    var_plus = mean_var * (n - 1) / n
    if m > 1:
        var_plus += float(np.var(np.mean(x, axis=1), ddof=1))
    if var_plus <= 0:
        return math.nan

    rho = 1.0 - (mean_var - np.mean(acov, axis=0)) / var_plus
    rho[0] = 1.0

    pair_sums: list[float] = []
    for t in range(0, n - 1, 2):
        p = float(rho[t] + rho[t + 1])
        if p < 0:
            break
        pair_sums.append(p)
    monotone = np.minimum.accumulate(np.asarray(pair_sums or [1.0]))
    tau = max(-1.0 + 2.0 * float(monotone.sum()), 1.0 / math.log10(m * n))
    return m * n / tau


@dataclass(frozen=True, slots=True)
class MCMCResult:
    """
    Draws from a Markov chain Monte Carlo run.

    Attributes
    ----------
    draws : numpy.ndarray
        Retained draws, shape ``(n_chains, n_samples, n_params)``.
    parameter_names : tuple[str, ...]
        Names of the parameters, in column order.
    acceptance_rate : numpy.ndarray
        Post warm-up acceptance rate of each chain.
    log_density : numpy.ndarray
        Log density at each retained draw, shape ``(n_chains, n_samples)``.
    """

    draws: FloatArray
    parameter_names: tuple[str, ...]
    acceptance_rate: FloatArray
    log_density: FloatArray

    def __post_init__(self) -> None:
        if self.draws.ndim != 3:
            raise ValueError("draws must have shape (n_chains, n_samples, n_params)")
        if self.draws.shape[2] != len(self.parameter_names):
            raise ValueError("one parameter name is required per draw column")

    @property
    def n_chains(self) -> int:
        return int(self.draws.shape[0])

    @property
    def n_samples(self) -> int:
        return int(self.draws.shape[1])

    def __getitem__(self, name: str) -> FloatArray:
        """Draws of one parameter, shape ``(n_chains, n_samples)``."""
        try:
            idx = self.parameter_names.index(name)
        except ValueError:
            raise KeyError(name) from None
        return self.draws[:, :, idx]

    def flat(self) -> FloatArray:
        """Draws of all chains pooled, shape ``(n_chains * n_samples, n_params)``."""
        return self.draws.reshape(-1, self.draws.shape[2])

    def r_hat(self) -> dict[str, float]:
        return {name: split_r_hat(self[name]) for name in self.parameter_names}

    def ess(self) -> dict[str, float]:
        return {name: effective_sample_size(self[name]) for name in self.parameter_names}

    def summary(self) -> pd.DataFrame:
        """
        Posterior summary table.

        Returns
        -------
        pandas.DataFrame
            One row per parameter with ``mean``, ``sd``, the 5%/50%/95%
            quantiles, ``r_hat`` and ``ess``.
        """
        flat = self.flat()
        quantiles = np.quantile(flat, SUMMARY_QUANTILES, axis=0)
        table = pd.DataFrame(
            {
                "mean": flat.mean(axis=0),
                "sd": flat.std(axis=0, ddof=1),
                **{f"{q:.0%}": quantiles[i] for i, q in enumerate(SUMMARY_QUANTILES)},
            },
            index=pd.Index(self.parameter_names, name="parameter"),
        )
        table["r_hat"] = pd.Series(self.r_hat())
        table["ess"] = pd.Series(self.ess())
        return table

    def to_frame(self) -> pd.DataFrame:
        """Long table of draws with ``chain`` and ``draw`` columns."""
        chain_idx, draw_idx = np.meshgrid(
            np.arange(self.n_chains), np.arange(self.n_samples), indexing="ij"
        )
        frame = pd.DataFrame(self.flat(), columns=list(self.parameter_names))
        frame.insert(0, "draw", draw_idx.ravel())
        frame.insert(0, "chain", chain_idx.ravel())
        return frame


class MetropolisSampler:
    """
    Adaptive random-walk Metropolis sampler.

    Parameters
    ----------
    log_density : Callable[[numpy.ndarray], float]
        Unnormalised log density of the parameter vector. ``-inf`` (or
        ``nan``) marks points outside the support.
    step_size : float or sequence of float, default 0.1
        Initial proposal standard deviation(s).
    n_chains : int, default 4
        Number of independent chains.
    parameter_names : sequence of str, optional
        Names reported in the result; defaults to ``theta[i]``.
    rng : numpy.random.Generator or int, optional
        Generator or seed.
    adapt : bool, default True
        Adapt the proposal during warm-up.
    target_acceptance : float, default 0.3
        Acceptance rate the scale adaptation aims for.
    """

    def __init__(
        self,
        log_density: Callable[[FloatArray], float],
        *,
        step_size: float | Sequence[float] = 0.1,
        n_chains: int = 4,
        parameter_names: Sequence[str] | None = None,
        rng: np.random.Generator | int | None = None,
        adapt: bool = True,
        target_acceptance: float = TARGET_ACCEPTANCE,
    ) -> None:
        if n_chains < 1:
            raise ValueError("n_chains must be positive")
        if not 0 < target_acceptance < 1:
            raise ValueError("target_acceptance must be in (0, 1)")
        steps = np.atleast_1d(np.asarray(step_size, dtype=np.float64))
        if np.any(steps <= 0):
            raise ValueError("step sizes must be positive")

        self.log_density = log_density
        self.step_size = steps
        self.n_chains = n_chains
        self.parameter_names = None if parameter_names is None else tuple(parameter_names)
        self.rng = np.random.default_rng(rng)
        self.adapt = adapt
        self.target_acceptance = target_acceptance

    def _evaluate(self, theta: FloatArray) -> float:
        value = float(self.log_density(theta))
        return value if not math.isnan(value) else -math.inf

    def _initial_points(self, initial: npt.ArrayLike, n_params: int) -> FloatArray:
        start = np.atleast_1d(np.asarray(initial, dtype=np.float64))
        if start.ndim == 1:
            if start.size != n_params:
                raise ValueError("initial point has the wrong number of parameters")
            return np.tile(start, (self.n_chains, 1))
        if start.shape != (self.n_chains, n_params):
            raise ValueError(f"initial points must have shape ({self.n_chains}, {n_params})")
        return start

    def _run_chain(
        self,
        start: FloatArray,
        n_samples: int,
        n_warmup: int,
        thin: int,
        rng: np.random.Generator,
        chain: int,
    ) -> tuple[FloatArray, FloatArray, float]:
        d = start.size
        theta = start.copy()
        logp = self._evaluate(theta)
        if not math.isfinite(logp):
            raise ValueError(f"log density is not finite at the initial point of chain {chain}")

        steps = np.broadcast_to(self.step_size, (d,))
        chol = np.diag(steps)
        scale = 1.0
        warmup_draws = np.empty((n_warmup, d))
        window_accepts = 0
        covariance_update_at = (n_warmup // 2 // ADAPTATION_WINDOW) * ADAPTATION_WINDOW

        n_total = n_warmup + n_samples * thin
        draws = np.empty((n_samples, d))
        log_densities = np.empty(n_samples)
        accepted = 0

        for i in range(n_total):
            proposal = theta + scale * (chol @ rng.standard_normal(d))
            logp_prop = self._evaluate(proposal)
            log_ratio = logp_prop - logp
            if log_ratio >= 0 or rng.random() < math.exp(log_ratio):
                theta, logp = proposal, logp_prop
                if i >= n_warmup:
                    accepted += 1
                else:
                    window_accepts += 1

            if i < n_warmup:
                warmup_draws[i] = theta
                if self.adapt and (i + 1) % ADAPTATION_WINDOW == 0:
                    rate = window_accepts / ADAPTATION_WINDOW
                    scale *= math.exp(rate - self.target_acceptance)
                    window_accepts = 0
                    if i + 1 == covariance_update_at:
                        history = warmup_draws[(i + 1) // 2 : i + 1]
                        chol, scale = self._covariance_factor(history, chol, scale)
            else:
                j, r = divmod(i - n_warmup, thin)
                if r == thin - 1:
                    draws[j] = theta
                    log_densities[j] = logp

        rate = accepted / (n_samples * thin)
        logger.debug("Chain %d: acceptance rate %.3f", chain, rate)
        return draws, log_densities, rate

    @staticmethod
    def _covariance_factor(
        history: FloatArray, fallback: FloatArray, scale: float
    ) -> tuple[FloatArray, float]:
        """Cholesky factor of the empirical covariance of ``history``, rescaled for dimension."""
        d = history.shape[1]
        if history.shape[0] <= d + 1:
            return fallback, scale
        cov = np.atleast_2d(np.cov(history, rowvar=False))
        cov += 1e-10 * np.eye(d) * max(float(np.max(np.diag(cov))), 1e-12)
        try:
            factor = np.linalg.cholesky(cov)
        except np.linalg.LinAlgError:
            return fallback, scale
        if not np.all(np.isfinite(factor)) or np.allclose(factor, 0.0):
            return fallback, scale
        return factor, 2.38 / math.sqrt(d)

    def sample(
        self,
        initial: npt.ArrayLike,
        n_samples: int,
        *,
        n_warmup: int = 1_000,
        thin: int = 1,
    ) -> MCMCResult:
        """
        Run all chains.

        Parameters
        ----------
        initial : array_like
            Starting point shared by all chains, shape ``(n_params,)``, or one
            starting point per chain, shape ``(n_chains, n_params)``.
        n_samples : int
            Retained draws per chain.
        n_warmup : int, default 1000
            Discarded adaptation draws per chain.
        thin : int, default 1
            Keep every ``thin``-th post warm-up draw.

        Returns
        -------
        MCMCResult

        Raises
        ------
        ValueError
            If the log density is not finite at a starting point, or the sizes
            are invalid.
        """
        if n_samples < 1 or n_warmup < 0 or thin < 1:
            raise ValueError("n_samples and thin must be positive, n_warmup non-negative")

        n_params = int(np.atleast_1d(np.asarray(initial)).shape[-1])
        starts = self._initial_points(initial, n_params)
        names = self.parameter_names or tuple(f"theta[{i}]" for i in range(n_params))
        if len(names) != n_params:
            raise ValueError("one parameter name is required per parameter")
        if self.step_size.size not in (1, n_params):
            raise ValueError("step_size must be a scalar or have one entry per parameter")

        logger.info(
            "Sampling %d chain(s): %d warm-up + %d draws (thin=%d)",
            self.n_chains,
            n_warmup,
            n_samples,
            thin,
        )
        chain_rngs = self.rng.spawn(self.n_chains)
        results = [
            self._run_chain(starts[c], n_samples, n_warmup, thin, chain_rngs[c], c)
            for c in range(self.n_chains)
        ]

        result = MCMCResult(
            draws=np.stack([r[0] for r in results]),
            parameter_names=tuple(names),
            acceptance_rate=np.array([r[2] for r in results]),
            log_density=np.stack([r[1] for r in results]),
        )
        r_hat = [v for v in result.r_hat().values() if math.isfinite(v)]
        if r_hat and max(r_hat) > 1.05:
            logger.warning("Chains may not have converged: max r_hat = %.3f", max(r_hat))
        return result

"""
Figure builders for the course analyses.

Every function creates a new figure (or draws into ``ax`` when given) and
returns ``(fig, ax)`` or ``(fig, axes)``; nothing is shown or saved.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING, Any

import matplotlib.pyplot as plt
import numpy as np

from envsim.inference.mle import return_level
from envsim.inference.regression import predictive_interval
from envsim.types import CharacteristicName

if TYPE_CHECKING:
    import numpy.typing as npt
    import pandas as pd
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure

    from envsim.families.distribution import ParametricFamilyDistribution
    from envsim.inference.mcmc import MCMCResult


def _figure(ax: Axes | None, **kwargs: Any) -> tuple[Figure, Axes]:
    if ax is not None:
        return ax.figure, ax  # type: ignore[return-value]
    return plt.subplots(**kwargs)


def _style(ax: Axes, xlabel: str, ylabel: str, title: str | None) -> None:
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    if title:
        ax.set_title(title, fontweight="bold")
    ax.grid(True, alpha=0.3, linestyle="--")


def plot_series(
    series: pd.Series,
    *,
    moving_average: pd.Series | None = None,
    ylabel: str = "Water level (m)",
    title: str | None = None,
    ax: Axes | None = None,
) -> tuple[Figure, Axes]:
    """Plot a time series, optionally with its moving average on top."""
    fig, ax = _figure(ax, figsize=(10, 4))
    ax.plot(series.index, series.to_numpy(), linewidth=0.6, color="tab:blue", label="Observed")
    if moving_average is not None:
        ax.plot(
            moving_average.index,
            moving_average.to_numpy(),
            linewidth=2,
            color="tab:red",
            label="Moving average",
        )
        ax.legend()
    _style(ax, "Time", ylabel, title)
    return fig, ax


def plot_annual_maxima_fit(
    maxima: npt.ArrayLike,
    distribution: ParametricFamilyDistribution,
    *,
    bins: int | str = "auto",
    xlabel: str = "Annual maximum (m)",
    title: str | None = None,
    ax: Axes | None = None,
) -> tuple[Figure, Axes]:
    """Density histogram of block maxima with the fitted density overlaid."""
    x = np.asarray(maxima, dtype=np.float64)
    fig, ax = _figure(ax, figsize=(7, 4))
    ax.hist(x, bins=bins, density=True, color="tab:gray", alpha=0.6, label="Data")

    span = x.max() - x.min()
    grid = np.linspace(x.min() - 0.25 * span, x.max() + 0.25 * span, 400)
    density = distribution.query_method(CharacteristicName.PDF)(grid)
    ax.plot(grid, density, color="tab:red", linewidth=2, label="Fitted")
    ax.legend()
    _style(ax, xlabel, "Density", title)
    return fig, ax


def plot_return_levels(
    maxima: npt.ArrayLike,
    distribution: ParametricFamilyDistribution,
    *,
    periods: npt.ArrayLike | None = None,
    ylabel: str = "Return level (m)",
    title: str | None = None,
    ax: Axes | None = None,
) -> tuple[Figure, Axes]:
    """
    Return level plot.

    Observations are placed at Weibull plotting positions ``T = (n + 1) / rank``;
    the model curve is ``ppf(1 - 1/T)`` on a logarithmic period axis.
    """
    x = np.sort(np.asarray(maxima, dtype=np.float64))[::-1]
    n = x.size
    empirical_periods = (n + 1) / np.arange(1, n + 1)
    if periods is None:
        longest = max(500.0, 2 * empirical_periods[0])
        periods = np.logspace(np.log10(1.01), np.log10(longest), 200)
    periods = np.asarray(periods, dtype=np.float64)

    fig, ax = _figure(ax, figsize=(7, 4))
    ax.plot(periods, return_level(distribution, periods), color="tab:red", label="Fitted")
    ax.scatter(empirical_periods, x, color="black", s=12, zorder=3, label="Observed")
    ax.set_xscale("log")
    ax.legend()
    _style(ax, "Return period (years)", ylabel, title)
    return fig, ax


def plot_traces(result: MCMCResult, *, title: str | None = None) -> tuple[Figure, Any]:
    """One trace panel per parameter, one line per chain."""
    n_params = len(result.parameter_names)
    fig, axes = plt.subplots(
        n_params, 1, figsize=(8, 2.2 * n_params), sharex=True, squeeze=False
    )
    axes = axes[:, 0]
    for ax, name in zip(axes, result.parameter_names, strict=True):
        for chain, draws in enumerate(result[name]):
            ax.plot(draws, linewidth=0.5, alpha=0.8, label=f"Chain {chain + 1}")
        ax.set_ylabel(name)
        ax.grid(True, alpha=0.3, linestyle="--")
    axes[-1].set_xlabel("Iteration")
    axes[0].legend(loc="upper right", fontsize=8, ncol=result.n_chains)
    if title:
        fig.suptitle(title, fontweight="bold")
    return fig, axes


def plot_predictive_interval(
    x: npt.ArrayLike,
    y: npt.ArrayLike,
    x_new: npt.ArrayLike,
    draws: npt.ArrayLike,
    *,
    level: float = 0.9,
    xlabel: str = "log(discharge)",
    ylabel: str = "TDS (mg/L)",
    title: str | None = None,
    ax: Axes | None = None,
) -> tuple[Figure, Axes]:
    """Observations with the posterior predictive median and central interval."""
    lower, median, upper = predictive_interval(draws, level)
    order = np.argsort(np.asarray(x_new))
    xs = np.asarray(x_new)[order]

    fig, ax = _figure(ax, figsize=(7, 4))
    ax.fill_between(
        xs, lower[order], upper[order], color="tab:blue", alpha=0.25, label=f"{level:.0%} interval"
    )
    ax.plot(xs, median[order], color="tab:blue", linewidth=2, label="Median")
    ax.scatter(x, y, color="black", s=10, zorder=3, label="Observed")
    ax.legend()
    _style(ax, xlabel, ylabel, title)
    return fig, ax

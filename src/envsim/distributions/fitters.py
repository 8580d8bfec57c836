"""
Numerical conversions between characteristics.

Each conversion derives one characteristic from another that the
distribution can already evaluate. They are tried in order by
:class:`~envsim.distributions.strategies.DefaultComputationStrategy`.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Callable
from math import isfinite
from typing import TYPE_CHECKING, Any, cast

import numpy as np
from mypy_extensions import KwArg
from scipy import optimize as _sp_optimize

from envsim.distributions.computation import ComputationMethod, FittedComputationMethod
from envsim.types import CharacteristicName

if TYPE_CHECKING:
    from envsim.distributions.distribution import Distribution
    from envsim.types import GenericCharacteristicName, NumericArray


def _resolve(
    distribution: Distribution, name: GenericCharacteristicName
) -> Callable[[Any, KwArg(Any)], Any]:
    """Callable for ``name``; ``RuntimeError`` if ``distribution`` has no strategy."""
    try:
        return distribution.query_method(name)
    except AttributeError as e:
        raise RuntimeError(
            "Distribution must provide computation_strategy.query_method(name, distribution)."
        ) from e


def _ppf_brentq_from_cdf(
    cdf: Callable[[float], float],
    *,
    x0: float = 0.0,
    init_step: float = 1.0,
    expand_factor: float = 2.0,
    max_expand: int = 80,
    x_tol: float = 1e-12,
    max_iter: int = 200,
) -> Callable[[float], float]:
    """
    Scalar quantile function inverting a monotone ``cdf``.

    Starting from ``[x0 - init_step, x0 + init_step]``, each side that does
    not yet enclose ``q`` moves outward by a step multiplied by
    ``expand_factor`` every round, at most ``max_expand`` times. The enclosed
    root is then refined by :func:`scipy.optimize.brentq` with ``x_tol`` and
    ``max_iter``.

    ``q <= 0`` gives ``-inf`` and ``q >= 1`` gives ``+inf``. When no bracket
    is found the last endpoint on the side of ``q`` is returned.
    """

    def _ppf(q: float) -> float:
        if q <= 0.0:
            return float("-inf")
        if q >= 1.0:
            return float("inf")

        step = init_step
        left, right = x0 - step, x0 + step
        f_left, f_right = float(cdf(left)), float(cdf(right))

        for _ in range(max_expand):
            if f_left <= q <= f_right:
                break
            step *= expand_factor
            if q < f_left:
                left -= step
                f_left = float(cdf(left))
            if q > f_right:
                right += step
                f_right = float(cdf(right))
        else:
            return left if q < f_left else right

        if f_left == q:
            return left
        if f_right == q:
            return right
        root = _sp_optimize.brentq(
            lambda t: float(cdf(t)) - q, left, right, xtol=x_tol, maxiter=max_iter
        )
        return float(root)

    return _ppf


def fit_logpdf_to_pdf(
    distribution: Distribution, /, **_: Any
) -> FittedComputationMethod[Any, Any]:
    """
    Fit ``pdf`` as the exponential of an analytical ``logpdf``.

    Parameters
    ----------
    distribution : Distribution

    Returns
    -------
    FittedComputationMethod
        Fitted ``logpdf -> pdf`` conversion.
    """
    logpdf_func = _resolve(distribution, CharacteristicName.LOGPDF)

    def _pdf(x: NumericArray, **options: Any) -> NumericArray:
        return cast("NumericArray", np.exp(logpdf_func(x, **options)))

    return FittedComputationMethod[Any, Any](
        target=CharacteristicName.PDF, sources=[CharacteristicName.LOGPDF], func=_pdf
    )


def fit_cdf_to_sf(distribution: Distribution, /, **_: Any) -> FittedComputationMethod[Any, Any]:
    """
    Fit the survival function as ``1 - cdf``.

    Parameters
    ----------
    distribution : Distribution

    Returns
    -------
    FittedComputationMethod
        Fitted ``cdf -> sf`` conversion.
    """
    cdf_func = _resolve(distribution, CharacteristicName.CDF)

    def _sf(x: NumericArray, **options: Any) -> NumericArray:
        return cast("NumericArray", 1.0 - np.asarray(cdf_func(x, **options)))

    return FittedComputationMethod[Any, Any](
        target=CharacteristicName.SF, sources=[CharacteristicName.CDF], func=_sf
    )


def fit_cdf_to_ppf(
    distribution: Distribution, /, **options: Any
) -> FittedComputationMethod[Any, Any]:
    """
    Fit ``ppf`` from a resolvable ``cdf`` using bracketing and Brent's method.

    Parameters
    ----------
    distribution : Distribution
    **options
        Bracketing options forwarded to the root finder (``x0``, ``init_step``).

    Returns
    -------
    FittedComputationMethod
        Fitted ``cdf -> ppf`` conversion, vectorised over its input.
    """
    cdf_func = _resolve(distribution, CharacteristicName.CDF)

    def cdf_scalar(x: float) -> float:
        return float(cdf_func(x))

    support = distribution.support
    x0 = float(options.get("x0", 0.0))
    if support is not None and hasattr(support, "left") and not support.contains(x0):
        left, right = support.left, support.right
        x0 = left + 1.0 if isfinite(left) else right - 1.0

    ppf_scalar = _ppf_brentq_from_cdf(
        cdf_scalar, x0=x0, init_step=float(options.get("init_step", 1.0))
    )

    def _ppf(p: NumericArray, **_: Any) -> NumericArray | float:
        arr = np.asarray(p, dtype=np.float64)
        if np.any((arr < 0) | (arr > 1)):
            raise ValueError("Probability must be in [0, 1]")
        if arr.ndim == 0:
            return ppf_scalar(float(arr))
        out = np.fromiter((ppf_scalar(float(q)) for q in arr.ravel()), dtype=np.float64)
        return cast("NumericArray", out.reshape(arr.shape))

    return FittedComputationMethod[Any, Any](
        target=CharacteristicName.PPF, sources=[CharacteristicName.CDF], func=_ppf
    )


logpdf_to_pdf_1C = ComputationMethod[Any, Any](
    target=CharacteristicName.PDF,
    source=CharacteristicName.LOGPDF,
    fitter=fit_logpdf_to_pdf,
)

cdf_to_sf_1C = ComputationMethod[Any, Any](
    target=CharacteristicName.SF,
    source=CharacteristicName.CDF,
    fitter=fit_cdf_to_sf,
)

cdf_to_ppf_1C = ComputationMethod[Any, Any](
    target=CharacteristicName.PPF,
    source=CharacteristicName.CDF,
    fitter=fit_cdf_to_ppf,
)

DEFAULT_CONVERSIONS: tuple[ComputationMethod[Any, Any], ...] = (
    logpdf_to_pdf_1C,
    cdf_to_sf_1C,
    cdf_to_ppf_1C,
)
"""Numerical conversions available to the default computation strategy."""

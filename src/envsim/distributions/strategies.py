"""
Computation and sampling strategies.

A distribution delegates two jobs to strategy objects shared by its family:

- resolving a characteristic name to a callable
  (:class:`DefaultComputationStrategy`), analytically when possible and
  otherwise through one of :data:`~envsim.distributions.fitters.DEFAULT_CONVERSIONS`;
- drawing samples (:class:`DefaultSamplingUnivariateStrategy`, inverse
  transform through ``ppf``).
"""

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol

import numpy as np

from envsim.distributions.computation import (
    AnalyticalComputation,
    ComputationMethod,
    FittedComputationMethod,
)
from envsim.distributions.fitters import DEFAULT_CONVERSIONS
from envsim.types import CharacteristicName, GenericCharacteristicName

from .sampling import ArraySample, Sample

if TYPE_CHECKING:
    from .distribution import Distribution

type Method[In, Out] = AnalyticalComputation[In, Out] | FittedComputationMethod[In, Out]


class ComputationStrategy(Protocol):
    def query_method(
        self, state: GenericCharacteristicName, distr: "Distribution", **options: Any
    ) -> Method[Any, Any]: ...


class DefaultComputationStrategy:
    """
    Resolve characteristics analytically first, numerically second.

    A conversion is usable when its own source resolves, so chains such as
    ``ppf <- cdf`` work for any distribution with an analytical ``cdf``.

    Parameters
    ----------
    conversions : Sequence[ComputationMethod], optional
        Conversions to try, in order; ``DEFAULT_CONVERSIONS`` by default.
    enable_caching : bool, default False
        Keep fitted conversions per distribution and characteristic.

    Raises
    ------
    RuntimeError
        From :meth:`query_method` when nothing resolves or the conversions
        form a cycle.
    """

    def __init__(
        self,
        conversions: Sequence[ComputationMethod[Any, Any]] | None = None,
        enable_caching: bool = False,
    ) -> None:
        self.conversions = tuple(DEFAULT_CONVERSIONS if conversions is None else conversions)
        self.enable_caching = enable_caching
        self._cache: dict[tuple[int, GenericCharacteristicName], Method[Any, Any]] = {}
        self._resolving: dict[int, set[GenericCharacteristicName]] = {}

    @contextmanager
    def _resolving_guard(
        self, distr: "Distribution", state: GenericCharacteristicName
    ) -> Iterator[None]:
        key = id(distr)
        in_progress = self._resolving.setdefault(key, set())
        if state in in_progress:
            raise RuntimeError(f"Cycle detected while resolving '{state}'.")
        in_progress.add(state)
        try:
            yield
        finally:
            in_progress.discard(state)
            if not in_progress:
                del self._resolving[key]

    def query_method(
        self, state: GenericCharacteristicName, distr: "Distribution", **options: Any
    ) -> Method[Any, Any]:
        """
        Callable computing ``state`` for ``distr``.

        ``options`` are handed to the fitter of the selected conversion.
        """
        analytical = distr.analytical_computations
        if state in analytical:
            return analytical[state]

        cache_key = (id(distr), state)
        if self.enable_caching and cache_key in self._cache:
            return self._cache[cache_key]

        if not analytical:
            raise RuntimeError(
                "Distribution provides no analytical computations to ground conversions."
            )

        with self._resolving_guard(distr, state):
            for conversion in self.conversions:
                if conversion.target != state:
                    continue
                try:
                    self.query_method(conversion.source, distr, **options)
                except RuntimeError:
                    continue
                fitted = conversion.fit(distr, **options)
                if self.enable_caching:
                    self._cache[cache_key] = fitted
                return fitted

        raise RuntimeError(f"No conversion from any analytical characteristic to '{state}'.")


class SamplingStrategy(Protocol):
    def sample(self, n: int, distr: "Distribution", **options: Any) -> Sample: ...


class DefaultSamplingUnivariateStrategy(SamplingStrategy):
    """
    Inverse transform sampling: ``ppf(U)`` for ``U ~ Uniform(0, 1)``.

    Pass ``rng`` (a ``numpy.random.Generator`` or a seed) for reproducible
    draws; the result is an :class:`ArraySample` of shape ``(n, 1)``.
    """

    def sample(self, n: int, distr: "Distribution", **options: Any) -> ArraySample:
        if n < 0:
            raise ValueError("Number of samples must be non-negative.")
        rng = np.random.default_rng(options.pop("rng", None))
        ppf = distr.query_method(CharacteristicName.PPF, **options)
        uniforms = rng.random(n)
        return ArraySample(np.asarray(ppf(uniforms), dtype=np.float64).reshape(n, 1))

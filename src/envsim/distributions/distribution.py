"""
Distribution Interface
======================

This module defines the public :class:`Distribution` protocol used by the
strategies, the estimators and the Bayesian models.

Notes
-----
- Sampling delegates to the attached sampling strategy (inverse transform
  through ``ppf`` by default).
- Log-likelihood is computed from ``logpdf`` when it resolves, otherwise from
  ``log(pdf)``; a point outside the support makes the total ``-inf``.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

from envsim.distributions.sampling import ArraySample
from envsim.types import CharacteristicName

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any

    import numpy.typing as npt

    from envsim.distributions.computation import AnalyticalComputation
    from envsim.distributions.sampling import Sample
    from envsim.distributions.strategies import (
        ComputationStrategy,
        Method,
        SamplingStrategy,
    )
    from envsim.distributions.support import Support
    from envsim.types import (
        DistributionType,
        GenericCharacteristicName,
    )


@runtime_checkable
class Distribution(Protocol):
    """Public distribution interface used by strategies and estimators."""

    @property
    def distribution_type(self) -> DistributionType: ...

    @property
    def analytical_computations(
        self,
    ) -> Mapping[GenericCharacteristicName, AnalyticalComputation[Any, Any]]: ...

    @property
    def sampling_strategy(self) -> SamplingStrategy: ...
    @property
    def computation_strategy(self) -> ComputationStrategy: ...

    @property
    def support(self) -> Support | None: ...

    def query_method(
        self, characteristic_name: GenericCharacteristicName, **options: Any
    ) -> Method[Any, Any]:
        return self.computation_strategy.query_method(characteristic_name, self, **options)

    def calculate_characteristic(
        self, characteristic_name: GenericCharacteristicName, value: Any, **options: Any
    ) -> Any:
        return self.query_method(characteristic_name, **options)(value)

    def sample(self, n: int, **options: Any) -> Sample:
        return self.sampling_strategy.sample(n, distr=self, **options)

    def log_likelihood(self, data: Sample | npt.ArrayLike) -> float:
        """
        Total log-likelihood of ``data`` under this distribution.

        Parameters
        ----------
        data : Sample or array_like
            Observations; samples are flattened.

        Returns
        -------
        float
            Sum of log densities, ``-inf`` if any point lies outside the support.
        """
        values = data.array if isinstance(data, ArraySample) else np.asarray(data)
        x = np.asarray(values, dtype=np.float64).ravel()

        support = self.support
        if support is not None and not np.all(support.contains(x)):
            return float("-inf")

        if CharacteristicName.LOGPDF in self.analytical_computations:
            logs = np.asarray(self.query_method(CharacteristicName.LOGPDF)(x))
        else:
            with np.errstate(divide="ignore"):
                logs = np.log(np.asarray(self.query_method(CharacteristicName.PDF)(x)))

        total = float(np.sum(logs))
        return total if not np.isnan(total) else float("-inf")

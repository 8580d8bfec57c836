"""
Members of a parametric family.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"


from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from envsim.distributions.distribution import Distribution
from envsim.families.registry import ParametricFamilyRegister

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any

    from envsim.distributions.computation import AnalyticalComputation
    from envsim.distributions.strategies import ComputationStrategy, SamplingStrategy
    from envsim.distributions.support import Support
    from envsim.families.parametric_family import ParametricFamily
    from envsim.families.parametrizations import Parametrization
    from envsim.types import (
        DistributionType,
        GenericCharacteristicName,
    )


@dataclass(slots=True)
class ParametricFamilyDistribution(Distribution):
    """
    Distribution fixed by a family name and one set of parameter values.

    The family is looked up in :class:`ParametricFamilyRegister` on each
    access, so instances stay small and picklable. Analytical computations
    are bound to the parameters on first use and then reused.
    """

    family_name: str
    _distribution_type: DistributionType
    parameters: Parametrization
    _support: Support | None
    _analytical: dict[GenericCharacteristicName, AnalyticalComputation[Any, Any]] | None = field(
        default=None, repr=False, compare=False
    )

    @property
    def family(self) -> ParametricFamily:
        return ParametricFamilyRegister.get(self.family_name)

    @property
    def distribution_type(self) -> DistributionType:
        return self._distribution_type

    @property
    def support(self) -> Support | None:
        return self._support

    @property
    def parametrization_name(self) -> str:
        return self.parameters.name

    @property
    def base_parameters(self) -> Parametrization:
        """``parameters`` expressed in the family's base parametrization."""
        return self.family.to_base(self.parameters)

    @property
    def analytical_computations(
        self,
    ) -> Mapping[GenericCharacteristicName, AnalyticalComputation[Any, Any]]:
        if self._analytical is None:
            self._analytical = self.family.build_analytical_computations(self.parameters)
        return self._analytical

    @property
    def computation_strategy(self) -> ComputationStrategy:
        return self.family.computation_strategy

    @property
    def sampling_strategy(self) -> SamplingStrategy:
        return self.family.sampling_strategy

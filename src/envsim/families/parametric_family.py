"""
Families of distributions sharing closed-form characteristics.

A :class:`ParametricFamily` ties together

- the declared parametrization names (the first is the *base* one that
  every characteristic is written against),
- the characteristic functions ``f(base_parameters, x)``,
- the computation and sampling strategies handed to its distributions.

Parametrization classes are attached afterwards with
:func:`~envsim.families.parametrizations.parametrization`.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"


from functools import partial
from typing import TYPE_CHECKING, dataclass_transform

from envsim.distributions.computation import AnalyticalComputation
from envsim.distributions.strategies import (
    DefaultComputationStrategy,
    DefaultSamplingUnivariateStrategy,
)
from envsim.families.distribution import ParametricFamilyDistribution
from envsim.types import DistributionType

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from typing import Any

    from envsim.distributions.strategies import ComputationStrategy, SamplingStrategy
    from envsim.distributions.support import Support
    from envsim.families.parametrizations import Parametrization
    from envsim.types import (
        GenericCharacteristicName,
        ParametrizationName,
    )

    type ParametrizedFunction = Callable[..., Any]
    type SupportResolver = Callable[[Parametrization], Support | None]


def _no_support(_params: Parametrization) -> Support | None:
    return None


class ParametricFamily:
    """
    Named family of distributions.

    Parameters
    ----------
    name : str
        Registry key of the family.
    distr_type : DistributionType
        Type of every member.
    distr_parametrizations : list[ParametrizationName]
        Declared parametrization names, base first.
    distr_characteristics : dict[str, Callable]
        Characteristic name to ``f(base_parameters, x)``.
    sampling_strategy : SamplingStrategy, optional
        Defaults to inverse transform sampling.
    computation_strategy : ComputationStrategy, optional
        Defaults to :class:`DefaultComputationStrategy`.
    support_by_parametrization : Callable, optional
        Support of the member with the given base parameters.
    """

    def __init__(
        self,
        name: str,
        distr_type: DistributionType,
        distr_parametrizations: list[ParametrizationName],
        distr_characteristics: dict[GenericCharacteristicName, ParametrizedFunction],
        sampling_strategy: SamplingStrategy | None = None,
        computation_strategy: ComputationStrategy | None = None,
        support_by_parametrization: SupportResolver | None = None,
    ):
        if not distr_parametrizations:
            raise ValueError("A family needs at least one parametrization.")
        self._name = name
        self.distr_type = distr_type
        self.parametrization_names: list[ParametrizationName] = list(distr_parametrizations)
        self.base_parametrization_name: ParametrizationName = distr_parametrizations[0]
        self.distr_characteristics = dict(distr_characteristics)
        self.computation_strategy: ComputationStrategy = (
            computation_strategy or DefaultComputationStrategy()
        )
        self.sampling_strategy: SamplingStrategy = (
            sampling_strategy or DefaultSamplingUnivariateStrategy()
        )
        self._support_resolver: SupportResolver = support_by_parametrization or _no_support
        self._parametrizations: dict[ParametrizationName, type[Parametrization]] = {}

    def __repr__(self) -> str:
        names = self.parametrization_names
        return f"ParametricFamily(name={self._name!r}, parametrizations={names})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def parametrizations(self) -> dict[ParametrizationName, type[Parametrization]]:
        """Registered parametrization classes by name."""
        return self._parametrizations

    @property
    def base(self) -> type[Parametrization]:
        """
        Class of the base parametrization.

        Raises
        ------
        ValueError
            While no class is registered under the base name.
        """
        base_cls = self._parametrizations.get(self.base_parametrization_name)
        if base_cls is None:
            raise ValueError(
                f"Base parametrization '{self.base_parametrization_name}' is not registered."
            )
        return base_cls

    def _parametrization_class(self, name: str | None) -> type[Parametrization]:
        return self.base if name is None else self._parametrizations[name]

    def parameter_names(self, parametrization_name: str | None = None) -> tuple[str, ...]:
        """Field names of a parametrization in declaration order; base by default."""
        return self._parametrization_class(parametrization_name).parameter_names()

    def register_parametrization(
        self,
        name: ParametrizationName,
        parametrization_class: type[Parametrization],
    ) -> None:
        """
        Attach ``parametrization_class`` under a declared name.

        Raises
        ------
        ValueError
            For an undeclared name or a second class under the same name.
        """
        if name not in self.parametrization_names:
            raise ValueError(f"Parametrization '{name}' is not declared by family {self.name}.")
        if name in self._parametrizations:
            raise ValueError(f"Parametrization '{name}' is already registered.")
        self._parametrizations[name] = parametrization_class

    def to_base(self, parameters: Parametrization) -> Parametrization:
        if parameters.name != self.base_parametrization_name:
            return parameters.transform_to_base_parametrization()
        return parameters

    def build_analytical_computations(
        self, parameters: Parametrization
    ) -> dict[GenericCharacteristicName, AnalyticalComputation[Any, Any]]:
        """Characteristic functions with the base form of ``parameters`` bound in."""
        bound = self.to_base(parameters)
        computations: dict[GenericCharacteristicName, AnalyticalComputation[Any, Any]] = {}
        for target, func in self.distr_characteristics.items():
            computations[target] = AnalyticalComputation(target=target, func=partial(func, bound))
        return computations

    def distribution(
        self,
        parametrization_name: str | None = None,
        **parameters_values: Any,
    ) -> ParametricFamilyDistribution:
        """
        Member of the family with the given parameter values.

        Parameters
        ----------
        parametrization_name : str, optional
            Parametrization the keyword values belong to; base by default.
        **parameters_values
            Field values of that parametrization.

        Raises
        ------
        KeyError
            For a parametrization the family does not know.
        ValueError
            When a constraint of the parametrization fails.
        """
        params = self._parametrization_class(parametrization_name)(**parameters_values)
        params.validate()
        support = self._support_resolver(self.to_base(params))
        return ParametricFamilyDistribution(self.name, self.distr_type, params, support)

    def from_values(
        self, values: Sequence[float], parametrization_name: str | None = None
    ) -> ParametricFamilyDistribution:
        """Member built from positional values, e.g. an optimizer's parameter vector."""
        names = self.parameter_names(parametrization_name)
        if len(values) != len(names):
            raise ValueError(f"Expected {len(names)} values for {names}, got {len(values)}.")
        return self.distribution(
            parametrization_name, **dict(zip(names, map(float, values), strict=True))
        )

    @dataclass_transform()
    def parametrization(
        self, *, name: str
    ) -> Callable[[type[Parametrization]], type[Parametrization]]:
        """Shortcut for ``parametrization(family=self, name=name)``."""
        from envsim.families.parametrizations import parametrization as register_in

        return register_in(family=self, name=name)

    __call__ = distribution

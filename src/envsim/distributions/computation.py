"""
Callables that evaluate distribution characteristics.

An :class:`AnalyticalComputation` is supplied by a distribution itself (for a
parametric family, a closed form bound to the parameter values). When a
characteristic has no closed form, a :class:`ComputationMethod` knows how to
derive it from another one; fitting it against a distribution produces a
:class:`FittedComputationMethod`. Both callables accept scalars or numpy
arrays and return values of the same shape.
"""

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"


from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mypy_extensions import KwArg

from envsim.types import GenericCharacteristicName

if TYPE_CHECKING:
    from envsim.distributions.distribution import Distribution


@dataclass(frozen=True, slots=True)
class AnalyticalComputation[In, Out]:
    """Closed-form characteristic ``target`` evaluated by ``func``."""

    target: GenericCharacteristicName
    func: Callable[[In, KwArg(Any)], Out]

    def __call__(self, data: In, **options: Any) -> Out:
        return self.func(data, **options)


@dataclass(frozen=True, slots=True)
class FittedComputationMethod[In, Out]:
    """
    Numerical characteristic ``target`` derived from ``sources``.

    Instances are tied to the distribution they were fitted for.
    """

    target: GenericCharacteristicName
    sources: Sequence[GenericCharacteristicName]
    func: Callable[[In, KwArg(Any)], Out]

    def __call__(self, data: In, **options: Any) -> Out:
        return self.func(data, **options)


@dataclass(frozen=True, slots=True)
class ComputationMethod[In, Out]:
    """
    Recipe deriving ``target`` from ``source``.

    Parameters
    ----------
    target : str
        Characteristic produced.
    source : str
        Characteristic the recipe needs from the distribution.
    fitter : Callable
        ``fitter(distribution, **options)`` returning the fitted callable.
    """

    target: GenericCharacteristicName
    source: GenericCharacteristicName
    fitter: Callable[["Distribution", KwArg(Any)], FittedComputationMethod[In, Out]]

    def fit(self, distribution: "Distribution", **options: Any) -> FittedComputationMethod[In, Out]:
        return self.fitter(distribution, **options)

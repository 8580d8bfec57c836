"""
Shared types
============

Aliases, enums and the interval type used by the distribution layer, the
families and the estimators.
"""

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass
from enum import Enum, StrEnum, auto
from math import inf
from typing import Any, cast, overload

import numpy as np
from numpy.typing import NDArray

NumPyNumber = np.floating[Any] | np.integer[Any]
Number = NumPyNumber | int | float
NumericArray = NDArray[NumPyNumber]
BoolArray = NDArray[np.bool_]

type GenericCharacteristicName = str
type ParametrizationName = str


class Kind(StrEnum):
    """Whether a distribution lives on a lattice or on a continuum."""

    DISCRETE = "discrete"
    CONTINUOUS = "continuous"


class DistributionType:
    """Marker base class for distribution type descriptors."""

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class EuclideanDistributionType(DistributionType):
    """
    Distribution on ``R^dimension``.

    Parameters
    ----------
    kind : Kind
        Discrete or continuous.
    dimension : int
        Number of coordinates of one observation.
    """

    kind: Kind
    dimension: int


UnivariateContinuous = EuclideanDistributionType(kind=Kind.CONTINUOUS, dimension=1)
"""Type shared by every built-in family."""


class ContinuousSupportShape1D(Enum):
    """Topological class of a one-dimensional interval."""

    REAL_LINE = auto()
    RAY_LEFT = auto()
    RAY_RIGHT = auto()
    BOUNDED_INTERVAL = auto()
    EMPTY = auto()
    SINGLE_POINT = auto()


@dataclass(frozen=True, slots=True)
class Interval1D:
    """
    Interval of the real line.

    Infinite endpoints are always open: the real line does not contain
    ``inf``, and neither does a ray.

    Parameters
    ----------
    left, right : float
        Endpoints, ``-inf`` and ``inf`` by default.
    left_closed, right_closed : bool, default True
        Whether a finite endpoint belongs to the interval.
    """

    left: float = -inf
    right: float = inf
    left_closed: bool = True
    right_closed: bool = True

    def __post_init__(self) -> None:
        if self.left == -inf:
            object.__setattr__(self, "left_closed", False)
        if self.right == inf:
            object.__setattr__(self, "right_closed", False)

    @overload
    def contains(self, x: Number) -> bool: ...
    @overload
    def contains(self, x: NumericArray) -> BoolArray: ...

    def contains(self, x: Number | NumericArray) -> bool | BoolArray:
        """Membership test, elementwise for arrays."""
        arr = np.asarray(x)
        above = arr >= self.left if self.left_closed else arr > self.left
        below = arr <= self.right if self.right_closed else arr < self.right
        inside = above & below
        return bool(inside) if inside.ndim == 0 else cast(BoolArray, inside)

    def __contains__(self, x: object) -> bool:
        return bool(self.contains(cast(Number, x)))

    @property
    def is_empty(self) -> bool:
        if self.left == self.right:
            return not (self.left_closed and self.right_closed)
        return self.left > self.right

    @property
    def shape(self) -> ContinuousSupportShape1D:
        if self.is_empty:
            return ContinuousSupportShape1D.EMPTY
        if self.left == self.right:
            return ContinuousSupportShape1D.SINGLE_POINT
        match (self.left == -inf, self.right == inf):
            case (True, True):
                return ContinuousSupportShape1D.REAL_LINE
            case (True, False):
                return ContinuousSupportShape1D.RAY_LEFT
            case (False, True):
                return ContinuousSupportShape1D.RAY_RIGHT
            case _:
                return ContinuousSupportShape1D.BOUNDED_INTERVAL


class CharacteristicName(StrEnum):
    """
    Characteristics known to EnvSim.

    Families implement a subset analytically; the default computation
    strategy derives ``pdf``, ``sf`` and ``ppf`` numerically when missing.
    """

    PDF = "pdf"
    LOGPDF = "logpdf"
    CDF = "cdf"
    SF = "sf"
    PPF = "ppf"
    MEAN = "mean"
    VAR = "var"


class FamilyName(StrEnum):
    GEV = "GEV"
    NORMAL = "Normal"


__all__ = [
    "Kind",
    "DistributionType",
    "EuclideanDistributionType",
    "UnivariateContinuous",
    "GenericCharacteristicName",
    "ParametrizationName",
    "Interval1D",
    "ContinuousSupportShape1D",
    "BoolArray",
    "NumPyNumber",
    "Number",
    "NumericArray",
    "CharacteristicName",
    "FamilyName",
]

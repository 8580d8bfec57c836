from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import Protocol, overload, runtime_checkable

from envsim.types import BoolArray, Interval1D, Number, NumericArray


@runtime_checkable
class Support(Protocol):
    @overload
    def contains(self, x: Number) -> bool: ...
    @overload
    def contains(self, x: NumericArray) -> BoolArray: ...


class ContinuousSupport(Interval1D, Support):
    """Interval support of a univariate continuous distribution."""

    @classmethod
    def lower_bounded(cls, left: float) -> ContinuousSupport:
        """Support ``[left, inf)``."""
        return cls(left=left)

    @classmethod
    def upper_bounded(cls, right: float) -> ContinuousSupport:
        """Support ``(-inf, right]``."""
        return cls(right=right)

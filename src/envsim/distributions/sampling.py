"""
Sample containers returned by sampling strategies.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING, Protocol

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import Any

    import numpy.typing as npt

    FloatArray = npt.NDArray[np.floating[Any]]


class Sample(Protocol):
    """Draws stored row-wise: ``array`` has shape ``(n, d)``."""

    def __len__(self) -> int: ...
    @property
    def array(self) -> FloatArray: ...
    @property
    def shape(self) -> tuple[int, ...]: ...


class ArraySample:
    """
    Sample backed by a float array of shape ``(n, d)``.

    A 1D input of length ``n`` becomes a single column. Inputs with more
    than two dimensions raise ``ValueError``.
    """

    dimension: int
    data: FloatArray

    def __init__(self, data: npt.ArrayLike) -> None:
        arr = np.asarray(data, dtype=np.float64)
        if arr.ndim == 1:
            arr = arr[:, np.newaxis]
        elif arr.ndim != 2:
            raise ValueError(f"ArraySample expects a 1D or 2D array, got {arr.ndim} dimensions.")
        self.data = arr
        self.dimension = int(arr.shape[1])

    def __len__(self) -> int:
        return int(self.data.shape[0])

    def __iter__(self) -> Iterator[FloatArray]:
        return iter(self.data)

    @property
    def array(self) -> FloatArray:
        return self.data

    @property
    def values(self) -> FloatArray:
        """Flat view of a univariate sample."""
        if self.dimension != 1:
            raise ValueError("values is only defined for univariate samples.")
        return self.data[:, 0]

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(int(s) for s in self.data.shape)

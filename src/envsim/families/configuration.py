"""
Registration of the built-in families.

:func:`configure_families_register` adds the GEV family (block maxima) and
the Normal family (regression residuals and priors) to the global
:class:`ParametricFamilyRegister`. Repeated calls return the same register
without registering anything twice.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from functools import lru_cache

from envsim.families.builtins import (
    configure_gev_family,
    configure_normal_family,
)
from envsim.families.registry import ParametricFamilyRegister


@lru_cache(maxsize=1)
def configure_families_register() -> ParametricFamilyRegister:
    """Register GEV and Normal once and return the register."""
    for configure in (configure_gev_family, configure_normal_family):
        configure()
    return ParametricFamilyRegister()


def reset_families_register() -> None:
    """Empty the register so the next configuration starts from scratch."""
    configure_families_register.cache_clear()
    ParametricFamilyRegister._reset()

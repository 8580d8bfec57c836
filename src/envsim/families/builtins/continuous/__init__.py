"""
Built-in continuous distribution families.
"""

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"


from envsim.families.builtins.continuous.gev import configure_gev_family
from envsim.families.builtins.continuous.normal import configure_normal_family

__all__ = [
    "configure_gev_family",
    "configure_normal_family",
]

"""
Built-in distribution families for EnvSim.
"""

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"


from envsim.families.builtins.continuous import (
    configure_gev_family,
    configure_normal_family,
)

__all__ = [
    "configure_gev_family",
    "configure_normal_family",
]

"""
EnvSim
======

Environmental data analysis and simulation toolkit: loaders and transforms
for observational time series, parametric distribution families (GEV,
Normal), maximum likelihood and return levels, Metropolis MCMC with Bayesian
linear regression, and plotting helpers.
"""

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from importlib.metadata import version

from .config import AnalysisConfig, configure_logging
from .data import *
from .data import __all__ as _data_all
from .distributions import *
from .distributions import __all__ as _distr_all
from .exceptions import *
from .exceptions import __all__ as _exc_all
from .families import *
from .families import __all__ as _family_all
from .inference import *
from .inference import __all__ as _inference_all
from .types import *
from .types import __all__ as _types_all

__version__ = version("envsim")
__all__ = [
    "__version__",
    "AnalysisConfig",
    "configure_logging",
    *_data_all,
    *_distr_all,
    *_exc_all,
    *_family_all,
    *_inference_all,
    *_types_all,
]

del _data_all
del _distr_all
del _exc_all
del _family_all
del _inference_all
del _types_all

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Generator
from typing import Any

import matplotlib
import pytest

from envsim.families.configuration import reset_families_register

matplotlib.use("Agg")


@pytest.fixture(autouse=True)
def _fresh_registries() -> Generator[None, Any, None]:
    reset_families_register()
    yield


@pytest.fixture(autouse=True)
def _close_figures() -> Generator[None, Any, None]:
    yield
    import matplotlib.pyplot as plt

    plt.close("all")

"""
Tests for Distribution Families Configuration

This module tests the configuration and registration of the built-in
families in the global ParametricFamilyRegister.
"""

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import pytest

from envsim.families.builtins import configure_gev_family
from envsim.families.configuration import (
    configure_families_register,
    reset_families_register,
)
from envsim.families.registry import ParametricFamilyRegister
from envsim.types import FamilyName


class TestConfiguration:
    """Test suite for configuration functionality."""

    def setup_method(self):
        self.registry = configure_families_register()

    def test_configure_families_register_returns_registry(self):
        assert isinstance(self.registry, ParametricFamilyRegister)

    def test_configure_families_register_is_cached(self):
        assert configure_families_register() is self.registry

    def test_families_registered(self):
        assert ParametricFamilyRegister.names() == [FamilyName.GEV, FamilyName.NORMAL]
        assert ParametricFamilyRegister.contains(FamilyName.GEV)
        assert not ParametricFamilyRegister.contains("Weibull")

    def test_configure_family_twice_is_noop(self):
        gev = self.registry.get(FamilyName.GEV)
        configure_gev_family()
        assert self.registry.get(FamilyName.GEV) is gev

    def test_reset_families_register(self):
        registry1 = configure_families_register()
        reset_families_register()
        registry2 = configure_families_register()

        assert registry1 is not registry2

    def test_registry_singleton_pattern(self):
        assert ParametricFamilyRegister() is ParametricFamilyRegister()

    def test_registry_get_family_method(self):
        normal_family = self.registry.get(FamilyName.NORMAL)
        assert normal_family.name == FamilyName.NORMAL

        with pytest.raises(ValueError, match="No family"):
            self.registry.get("NonExistentFamily")

    def test_register_duplicate_family(self):
        with pytest.raises(ValueError, match="already found"):
            ParametricFamilyRegister.register(self.registry.get(FamilyName.GEV))

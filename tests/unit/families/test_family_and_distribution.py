from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import math

import numpy as np
import pytest

from envsim.distributions.computation import AnalyticalComputation, FittedComputationMethod
from envsim.distributions.support import ContinuousSupport
from envsim.families import (
    ParametricFamily,
    ParametricFamilyRegister,
    Parametrization,
    constraint,
    parametrization,
)
from envsim.types import CharacteristicName, UnivariateContinuous


def _exponential_cdf(parameters, x):
    x = np.asarray(x, dtype=np.float64)
    return np.where(x > 0, -np.expm1(-parameters.rate * x), 0.0)


@pytest.fixture
def cdf_only_family() -> ParametricFamily:
    """Exponential family that only knows its CDF analytically."""
    family = ParametricFamily(
        name="CdfOnlyExponential",
        distr_type=UnivariateContinuous,
        distr_parametrizations=["rate", "scale"],
        distr_characteristics={CharacteristicName.CDF: _exponential_cdf},
        support_by_parametrization=lambda _params: ContinuousSupport.lower_bounded(0.0),
    )

    @parametrization(family=family, name="rate")
    class _Rate(Parametrization):
        rate: float

        @constraint(description="rate > 0")
        def check_rate_positive(self) -> bool:
            return self.rate > 0

    @parametrization(family=family, name="scale")
    class _Scale(Parametrization):
        beta: float

        def transform_to_base_parametrization(self) -> Parametrization:
            return _Rate(rate=1.0 / self.beta)

    ParametricFamilyRegister.register(family)
    return family


class TestParametricFamily:
    def test_base_and_parameter_names(self, cdf_only_family):
        assert cdf_only_family.base.parameter_names() == ("rate",)
        assert cdf_only_family.parameter_names("scale") == ("beta",)
        assert set(cdf_only_family.parametrizations) == {"rate", "scale"}

    def test_family_requires_parametrization(self):
        with pytest.raises(ValueError):
            ParametricFamily(
                name="Empty",
                distr_type=UnivariateContinuous,
                distr_parametrizations=[],
                distr_characteristics={},
            )

    def test_register_undeclared_parametrization(self, cdf_only_family):
        with pytest.raises(ValueError, match="not declared"):

            @parametrization(family=cdf_only_family, name="mean")
            class _Mean(Parametrization):
                mean: float

    def test_register_duplicate_parametrization(self, cdf_only_family):
        with pytest.raises(ValueError, match="already registered"):

            @parametrization(family=cdf_only_family, name="rate")
            class _Rate(Parametrization):
                rate: float

    def test_constraint_violation(self, cdf_only_family):
        with pytest.raises(ValueError, match="rate > 0"):
            cdf_only_family(rate=-2.0)

    def test_constraints_are_collected(self, cdf_only_family):
        params = cdf_only_family.base(rate=2.0)

        assert [c.description for c in params.constraints] == ["rate > 0"]
        assert params.is_valid()
        assert not cdf_only_family.base(rate=0.0).is_valid()

    def test_parametrization_is_frozen(self, cdf_only_family):
        params = cdf_only_family.base(rate=2.0)
        with pytest.raises(AttributeError):
            params.rate = 3.0

    def test_static_constraint_rejected(self, cdf_only_family):
        family = ParametricFamily(
            name="Broken",
            distr_type=UnivariateContinuous,
            distr_parametrizations=["p"],
            distr_characteristics={},
        )
        with pytest.raises(TypeError, match="instance method"):

            @parametrization(family=family, name="p")
            class _P(Parametrization):
                p: float

                @staticmethod
                @constraint(description="p > 0")
                def check() -> bool:
                    return True

    def test_from_values(self, cdf_only_family):
        dist = cdf_only_family.from_values([2.0])

        assert dist.parameters.parameters == {"rate": 2.0}
        with pytest.raises(ValueError, match="Expected 1 values"):
            cdf_only_family.from_values([1.0, 2.0])

    def test_non_base_parametrization_binds_base_values(self, cdf_only_family):
        dist = cdf_only_family(beta=0.5, parametrization_name="scale")
        cdf = dist.query_method(CharacteristicName.CDF)

        assert dist.base_parameters.parameters == {"rate": 2.0}
        assert cdf(1.0) == pytest.approx(1.0 - math.exp(-2.0))


class TestParametricFamilyDistribution:
    def test_analytical_computations_are_cached(self, cdf_only_family):
        dist = cdf_only_family(rate=1.0)
        first = dist.analytical_computations

        assert dist.analytical_computations is first
        assert isinstance(first[CharacteristicName.CDF], AnalyticalComputation)

    def test_family_lookup(self, cdf_only_family):
        dist = cdf_only_family(rate=1.0)
        assert dist.family is cdf_only_family

    def test_ppf_is_derived_from_cdf(self, cdf_only_family):
        dist = cdf_only_family(rate=2.0)
        ppf = dist.query_method(CharacteristicName.PPF)
        p = np.array([0.05, 0.5, 0.95])

        assert isinstance(ppf, FittedComputationMethod)
        np.testing.assert_allclose(ppf(p), -np.log1p(-p) / 2.0, atol=1e-9)
        assert ppf(0.0) == -math.inf
        assert ppf(1.0) == math.inf

    def test_derived_ppf_rejects_invalid_probability(self, cdf_only_family):
        ppf = cdf_only_family(rate=2.0).query_method(CharacteristicName.PPF)
        with pytest.raises(ValueError):
            ppf(np.array([0.5, 1.5]))

    def test_missing_conversion_raises(self, cdf_only_family):
        dist = cdf_only_family(rate=2.0)
        with pytest.raises(RuntimeError):
            dist.query_method(CharacteristicName.PDF)

    def test_sampling_through_derived_ppf(self, cdf_only_family):
        sample = cdf_only_family(rate=2.0).sample(2_000, rng=3)

        assert sample.shape == (2_000, 1)
        assert np.all(sample.values >= 0)
        assert sample.values.mean() == pytest.approx(0.5, abs=0.05)

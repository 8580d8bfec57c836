"""
Tests for the GEV distribution family

Characteristics are checked against ``scipy.stats.genextreme``, whose shape
parameter is ``c = -xi``, and against ``scipy.stats.gumbel_r`` in the
Gumbel limit.
"""

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import math

import numpy as np
import pytest
from scipy.stats import genextreme, gumbel_r

from envsim.distributions.support import ContinuousSupport
from envsim.families.configuration import configure_families_register
from envsim.types import (
    CharacteristicName,
    ContinuousSupportShape1D,
    FamilyName,
    UnivariateContinuous,
)

from .base import BaseDistributionTest


class TestGEVFamily(BaseDistributionTest):
    """Test suite for the GEV distribution family."""

    def setup_method(self):
        registry = configure_families_register()
        self.gev_family = registry.get(FamilyName.GEV)
        self.frechet = self.gev_family(mu=10.0, sigma=2.0, xi=0.2)
        self.weibull = self.gev_family(mu=10.0, sigma=2.0, xi=-0.3)
        self.gumbel = self.gev_family(mu=10.0, sigma=2.0, xi=0.0)

    def test_family_properties(self):
        assert self.gev_family.name == FamilyName.GEV
        assert self.gev_family.parametrization_names == ["locScaleShape", "scipy"]
        assert self.gev_family.base_parametrization_name == "locScaleShape"
        assert self.gev_family.parameter_names() == ("mu", "sigma", "xi")
        assert self.gev_family.parameter_names("scipy") == ("loc", "scale", "c")

    def test_distribution_creation(self):
        assert self.frechet.family_name == FamilyName.GEV
        assert self.frechet.distribution_type == UnivariateContinuous
        assert self.frechet.parameters.parameters == {"mu": 10.0, "sigma": 2.0, "xi": 0.2}
        assert self.frechet.parametrization_name == "locScaleShape"

    def test_scipy_parametrization_converts_to_base(self):
        dist = self.gev_family(loc=10.0, scale=2.0, c=-0.2, parametrization_name="scipy")

        assert dist.parametrization_name == "scipy"
        assert dist.base_parameters.parameters == {"mu": 10.0, "sigma": 2.0, "xi": 0.2}
        x = np.array([1.0, 5.0, 10.0, 20.0])
        self.assert_arrays_almost_equal(
            dist.query_method(CharacteristicName.CDF)(x),
            self.frechet.query_method(CharacteristicName.CDF)(x),
        )

    @pytest.mark.parametrize(
        "params, message",
        [
            ({"mu": 0.0, "sigma": 0.0, "xi": 0.1}, "sigma > 0"),
            ({"mu": 0.0, "sigma": -1.0, "xi": 0.1}, "sigma > 0"),
            ({"mu": math.inf, "sigma": 1.0, "xi": 0.1}, "parameters are finite"),
            ({"mu": 0.0, "sigma": 1.0, "xi": math.nan}, "parameters are finite"),
        ],
    )
    def test_parametrization_constraints(self, params, message):
        with pytest.raises(ValueError, match=message):
            self.gev_family(**params)

    def test_scipy_parametrization_constraint(self):
        with pytest.raises(ValueError, match="scale > 0"):
            self.gev_family(loc=0.0, scale=-1.0, c=0.0, parametrization_name="scipy")

    @pytest.mark.parametrize(
        "char_name, scipy_method",
        [
            (CharacteristicName.PDF, "pdf"),
            (CharacteristicName.LOGPDF, "logpdf"),
            (CharacteristicName.CDF, "cdf"),
            (CharacteristicName.SF, "sf"),
        ],
    )
    @pytest.mark.parametrize("xi", [0.2, -0.3, 0.05])
    def test_characteristics_match_scipy(self, char_name, scipy_method, xi):
        dist = self.gev_family(mu=10.0, sigma=2.0, xi=xi)
        reference = getattr(genextreme(c=-xi, loc=10.0, scale=2.0), scipy_method)

        self.assert_matches_reference(
            dist, char_name, [4.0, 8.0, 10.0, 12.0, 15.0], reference, precision=1e-9
        )

    @pytest.mark.parametrize("xi", [0.2, -0.3])
    def test_ppf_matches_scipy(self, xi):
        dist = self.gev_family(mu=10.0, sigma=2.0, xi=xi)
        reference = genextreme(c=-xi, loc=10.0, scale=2.0).ppf

        self.assert_matches_reference(
            dist,
            CharacteristicName.PPF,
            [0.001, 0.01, 0.1, 0.5, 0.9, 0.99, 0.999],
            reference,
            precision=1e-8,
        )

    @pytest.mark.parametrize(
        "char_name, scipy_method",
        [
            (CharacteristicName.PDF, "pdf"),
            (CharacteristicName.CDF, "cdf"),
            (CharacteristicName.SF, "sf"),
            (CharacteristicName.PPF, "ppf"),
        ],
    )
    def test_gumbel_limit_matches_scipy(self, char_name, scipy_method):
        reference = getattr(gumbel_r(loc=10.0, scale=2.0), scipy_method)
        points = (
            [0.01, 0.25, 0.5, 0.75, 0.99]
            if char_name == CharacteristicName.PPF
            else [5.0, 9.0, 10.0, 12.0, 20.0]
        )

        self.assert_matches_reference(self.gumbel, char_name, points, reference, precision=1e-9)

    def test_tiny_shape_uses_gumbel_limit(self):
        nearly_gumbel = self.gev_family(mu=10.0, sigma=2.0, xi=1e-10)
        x = np.array([5.0, 10.0, 20.0])

        self.assert_arrays_almost_equal(
            nearly_gumbel.query_method(CharacteristicName.CDF)(x),
            gumbel_r.cdf(x, loc=10.0, scale=2.0),
        )
        assert nearly_gumbel.support.shape == ContinuousSupportShape1D.REAL_LINE

    @pytest.mark.parametrize("xi", [0.2, -0.3, 0.0, 0.45])
    def test_moments_match_scipy(self, xi):
        dist = self.gev_family(mu=10.0, sigma=2.0, xi=xi)
        mean, var = genextreme.stats(c=-xi, loc=10.0, scale=2.0, moments="mv")

        assert dist.query_method(CharacteristicName.MEAN)(None) == pytest.approx(float(mean))
        assert dist.query_method(CharacteristicName.VAR)(None) == pytest.approx(float(var))

    def test_infinite_moments(self):
        heavy = self.gev_family(mu=0.0, sigma=1.0, xi=1.2)
        semi_heavy = self.gev_family(mu=0.0, sigma=1.0, xi=0.6)

        assert heavy.query_method(CharacteristicName.MEAN)(None) == math.inf
        assert heavy.query_method(CharacteristicName.VAR)(None) == math.inf
        assert math.isfinite(semi_heavy.query_method(CharacteristicName.MEAN)(None))
        assert semi_heavy.query_method(CharacteristicName.VAR)(None) == math.inf

    def test_frechet_support_is_lower_bounded(self):
        support = self.frechet.support

        assert isinstance(support, ContinuousSupport)
        assert support.shape == ContinuousSupportShape1D.RAY_RIGHT
        assert support.left == pytest.approx(0.0)
        assert support.right == math.inf

    def test_weibull_support_is_upper_bounded(self):
        support = self.weibull.support

        assert support.shape == ContinuousSupportShape1D.RAY_LEFT
        assert support.right == pytest.approx(10.0 + 2.0 / 0.3)
        assert support.left == -math.inf

    def test_gumbel_support_is_real_line(self):
        assert self.gumbel.support.shape == ContinuousSupportShape1D.REAL_LINE

    def test_characteristics_outside_support(self):
        below = np.array([-5.0, -1.0])
        assert np.all(self.frechet.query_method(CharacteristicName.PDF)(below) == 0.0)
        assert np.all(self.frechet.query_method(CharacteristicName.LOGPDF)(below) == -np.inf)
        assert np.all(self.frechet.query_method(CharacteristicName.CDF)(below) == 0.0)
        assert np.all(self.frechet.query_method(CharacteristicName.SF)(below) == 1.0)

        above = np.array([17.0, 100.0])
        assert np.all(self.weibull.query_method(CharacteristicName.CDF)(above) == 1.0)
        assert np.all(self.weibull.query_method(CharacteristicName.SF)(above) == 0.0)

    def test_ppf_endpoints_are_support_bounds(self):
        ppf = self.frechet.query_method(CharacteristicName.PPF)

        assert ppf(0.0) == pytest.approx(0.0)
        assert ppf(1.0) == math.inf
        assert self.weibull.query_method(CharacteristicName.PPF)(1.0) == pytest.approx(
            10.0 + 2.0 / 0.3
        )

    @pytest.mark.parametrize("p", [-0.1, 1.5])
    def test_ppf_rejects_invalid_probability(self, p):
        with pytest.raises(ValueError, match=r"\[0, 1\]"):
            self.frechet.query_method(CharacteristicName.PPF)(p)

    @pytest.mark.parametrize("xi", [0.2, -0.3, 0.0])
    def test_cdf_inverts_ppf(self, xi):
        dist = self.gev_family(mu=1.0, sigma=0.5, xi=xi)
        p = np.linspace(0.01, 0.99, 25)
        x = dist.query_method(CharacteristicName.PPF)(p)

        self.assert_arrays_almost_equal(dist.query_method(CharacteristicName.CDF)(x), p)

    def test_sf_and_cdf_sum_to_one(self):
        x = np.linspace(0.5, 40.0, 50)
        total = self.frechet.query_method(CharacteristicName.CDF)(
            x
        ) + self.frechet.query_method(CharacteristicName.SF)(x)

        self.assert_arrays_almost_equal(total, np.ones_like(x))

    def test_log_likelihood_matches_scipy(self):
        data = np.array([8.5, 9.7, 10.2, 11.9, 14.3])

        assert self.frechet.log_likelihood(data) == pytest.approx(
            float(np.sum(genextreme.logpdf(data, c=-0.2, loc=10.0, scale=2.0)))
        )

    def test_log_likelihood_outside_support_is_minus_inf(self):
        assert self.frechet.log_likelihood([5.0, -1.0, 12.0]) == -math.inf
        assert self.weibull.log_likelihood([10.0, 30.0]) == -math.inf

    def test_sampling_stays_in_support_and_is_reproducible(self):
        first = self.frechet.sample(500, rng=7)
        second = self.frechet.sample(500, rng=7)

        assert first.shape == (500, 1)
        np.testing.assert_array_equal(first.array, second.array)
        assert np.all(self.frechet.support.contains(first.values))

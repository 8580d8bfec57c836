from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

import math

import numpy as np
import pytest
from scipy.stats import genextreme, gumbel_r

from envsim.exceptions import DataError, FitError
from envsim.families.configuration import configure_families_register
from envsim.inference import (
    fit_gev,
    fit_mle,
    gumbel_moment_estimates,
    negative_log_likelihood,
    return_level,
    return_period,
)
from envsim.inference.mle import PENALTY
from envsim.types import CharacteristicName, FamilyName


@pytest.fixture(scope="module")
def gev_sample() -> np.ndarray:
    return genextreme.rvs(
        c=-0.1, loc=10.0, scale=2.0, size=2_000, random_state=np.random.default_rng(4850)
    )


class TestFitGEV:
    def test_recovers_parameters(self, gev_sample):
        result = fit_gev(gev_sample)

        assert result.parameters["mu"] == pytest.approx(10.0, abs=0.25)
        assert result.parameters["sigma"] == pytest.approx(2.0, abs=0.2)
        assert result.parameters["xi"] == pytest.approx(0.1, abs=0.07)
        assert result.n_obs == 2_000

    def test_likelihood_at_least_as_good_as_scipy(self, gev_sample):
        result = fit_gev(gev_sample)
        c, loc, scale = genextreme.fit(gev_sample)
        scipy_ll = float(np.sum(genextreme.logpdf(gev_sample, c, loc=loc, scale=scale)))

        assert result.log_likelihood >= scipy_ll - 1e-3
        assert result.log_likelihood == pytest.approx(
            result.distribution.log_likelihood(gev_sample)
        )

    def test_information_criteria(self, gev_sample):
        result = fit_gev(gev_sample)

        assert result.n_params == 3
        assert result.aic == pytest.approx(6.0 - 2.0 * result.log_likelihood)
        assert result.bic == pytest.approx(3.0 * math.log(2_000) - 2.0 * result.log_likelihood)

    def test_fitted_distribution_is_gev(self, gev_sample):
        result = fit_gev(gev_sample)

        assert result.distribution.family_name == FamilyName.GEV
        assert result.distribution.parameters.parameters == result.parameters

    def test_nan_values_are_ignored(self, gev_sample):
        with_gaps = np.concatenate([gev_sample[:500], [np.nan, np.nan]])
        assert fit_gev(with_gaps).n_obs == 500

    def test_too_few_maxima(self):
        with pytest.raises(DataError):
            fit_gev([1.0, 2.0])

    def test_infinite_observation(self):
        with pytest.raises(DataError):
            fit_gev([1.0, 2.0, np.inf, 3.0])

    def test_constant_maxima_rejected(self):
        with pytest.raises(DataError, match="zero variance"):
            fit_gev([2.0] * 10)


class TestFitMLE:
    def setup_method(self):
        registry = configure_families_register()
        self.normal = registry.get(FamilyName.NORMAL)
        self.gev = registry.get(FamilyName.GEV)
        self.data = np.random.default_rng(1).normal(3.0, 0.5, size=200)

    def test_normal_closed_form(self):
        result = fit_mle(self.normal, self.data, initial=[0.0, 1.0])

        assert result.converged
        assert result.parameters["mu"] == pytest.approx(self.data.mean(), abs=1e-5)
        assert result.parameters["sigma"] == pytest.approx(self.data.std(), abs=1e-5)

    def test_bounded_method(self):
        result = fit_mle(
            self.normal,
            self.data,
            initial=[1.0, 1.0],
            bounds=[(None, None), (1e-6, None)],
            method="L-BFGS-B",
        )
        assert result.parameters["mu"] == pytest.approx(self.data.mean(), abs=1e-3)

    def test_infeasible_start(self):
        with pytest.raises(FitError, match="starting point"):
            fit_mle(self.gev, self.data, initial=[3.0, -1.0, 0.1])

    def test_start_outside_support(self):
        # lower bound mu - sigma/xi = 2.9 lies above the smallest observation
        with pytest.raises(FitError):
            fit_mle(self.gev, self.data, initial=[3.0, 0.1, 1.0])

    def test_wrong_number_of_initial_values(self):
        with pytest.raises(ValueError, match="initial"):
            fit_mle(self.normal, self.data, initial=[0.0])

    def test_empty_data(self):
        with pytest.raises(DataError, match="empty"):
            fit_mle(self.normal, [np.nan], initial=[0.0, 1.0])

    def test_non_convergence_is_logged(self, caplog):
        result = fit_mle(self.normal, self.data, initial=[0.0, 1.0], options={"maxiter": 3})

        assert not result.converged
        assert "did not converge" in caplog.text

    def test_negative_log_likelihood_penalty(self):
        assert negative_log_likelihood(self.normal, [0.0, -1.0], self.data) == PENALTY
        assert negative_log_likelihood(self.normal, [3.0, 0.5], self.data) < PENALTY


class TestReturnLevels:
    def setup_method(self):
        self.gev = configure_families_register().get(FamilyName.GEV)(mu=1.0, sigma=0.3, xi=0.1)

    @pytest.mark.parametrize("period", [2.0, 10.0, 100.0, 500.0])
    def test_exceedance_probability(self, period):
        level = return_level(self.gev, period)
        sf = self.gev.query_method(CharacteristicName.SF)

        assert isinstance(level, float)
        assert sf(level) == pytest.approx(1.0 / period)

    def test_vectorised(self):
        periods = np.array([2.0, 10.0, 100.0])
        levels = return_level(self.gev, periods)

        assert levels.shape == (3,)
        assert np.all(np.diff(levels) > 0)

    def test_matches_scipy(self):
        expected = genextreme.isf(0.01, c=-0.1, loc=1.0, scale=0.3)
        assert return_level(self.gev, 100.0) == pytest.approx(expected)

    @pytest.mark.parametrize("period", [1.0, 0.5, -3.0])
    def test_period_must_exceed_one(self, period):
        with pytest.raises(ValueError, match="greater than 1"):
            return_level(self.gev, period)

    def test_return_period_inverts_return_level(self):
        assert return_period(self.gev, return_level(self.gev, 50.0)) == pytest.approx(50.0)

    def test_return_period_beyond_upper_bound(self):
        bounded = configure_families_register().get(FamilyName.GEV)(mu=0.0, sigma=1.0, xi=-0.5)
        assert return_period(bounded, 5.0) == math.inf


def test_gumbel_moment_estimates():
    data = gumbel_r.rvs(loc=5.0, scale=1.5, size=200_000, random_state=np.random.default_rng(0))
    mu, sigma = gumbel_moment_estimates(data)

    assert mu == pytest.approx(5.0, abs=0.05)
    assert sigma == pytest.approx(1.5, abs=0.05)


@pytest.mark.parametrize("data", [[3.0], [3.0, 3.0, 3.0]])
def test_gumbel_moment_estimates_need_spread(data):
    with pytest.raises(DataError, match="zero variance"):
        gumbel_moment_estimates(data)

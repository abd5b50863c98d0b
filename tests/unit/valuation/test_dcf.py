# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the discounted cash flow method.
"""

import numpy as np
import pytest

from carevalue.core.primitives import InputError
from carevalue.valuation import DCFMethod, DCFOptions, dcf_sensitivity
from carevalue.valuation.dcf import DCFInputs, project_noi


def _expected_value(noi, growth, discount, terminal, years):
    nois = noi * (1 + growth) ** np.arange(1, years + 1)
    factors = 1 / (1 + discount) ** np.arange(1, years + 1)
    return float(np.dot(nois, factors) + nois[-1] / terminal * factors[-1])


class TestProjectNOI:
    def test_blended_growth_without_revenue(self):
        inputs = DCFInputs(
            base_noi=1_000_000,
            projection_years=3,
            discount_rate=0.12,
            terminal_cap_rate=0.11,
            revenue_growth_rate=0.03,
            expense_growth_rate=0.03,
        )
        np.testing.assert_allclose(
            project_noi(inputs), [1_030_000, 1_060_900, 1_092_727], rtol=1e-6
        )

    def test_revenue_and_expenses_projected_separately(self):
        inputs = DCFInputs(
            base_noi=1_000_000,
            projection_years=2,
            discount_rate=0.12,
            terminal_cap_rate=0.11,
            revenue_growth_rate=0.10,
            expense_growth_rate=0.0,
            base_revenue=10_000_000,
            base_expenses=9_000_000,
        )
        np.testing.assert_allclose(project_noi(inputs), [2_000_000, 3_100_000])


class TestDCFMethod:
    def test_default_snf_assumptions(self, make_profile):
        result = DCFMethod().evaluate(make_profile())

        # SNF defaults: 12% discount, 11% exit cap, 2.5% revenue / 3% expense growth
        expected = _expected_value(2_000_000, 0.0225, 0.12, 0.11, 10)
        assert result.value == pytest.approx(expected, abs=1)
        assert result.inputs_used["projection_years"] == 10
        assert result.value_low <= result.value <= result.value_high

    def test_explicit_options(self, make_profile):
        options = DCFOptions(
            projection_years=5,
            discount_rate=0.10,
            terminal_cap_rate=0.09,
            revenue_growth_rate=0.02,
            expense_growth_rate=0.02,
        )
        result = DCFMethod().evaluate(make_profile(), options)
        assert result.value == pytest.approx(_expected_value(2_000_000, 0.02, 0.10, 0.09, 5), abs=1)

    def test_higher_discount_rate_lowers_value(self, make_profile):
        low = DCFMethod().evaluate(make_profile(), DCFOptions(discount_rate=0.14))
        high = DCFMethod().evaluate(make_profile(), DCFOptions(discount_rate=0.10))
        assert low.value < high.value

    def test_calculation_trail(self, make_profile):
        result = DCFMethod().evaluate(make_profile(), DCFOptions(projection_years=3))
        labels = [c.label for c in result.calculations]
        assert "Year 3 NOI" in labels
        assert "Terminal Value" in labels
        assert "Total DCF Value" in labels

    def test_revenue_only_not_accepted(self, make_profile):
        with pytest.raises(InputError) as exc_info:
            DCFMethod().evaluate(make_profile(ttm_noi=None, ttm_revenue=10_000_000))
        assert exc_info.value.fields == ("ttm_noi", "ttm_ebitdar")

    def test_confidence_in_bounds(self, profile):
        result = DCFMethod().evaluate(profile)
        assert 40 <= result.confidence <= 100


class TestDCFSensitivity:
    def test_sweeps(self, make_profile):
        sweep = dcf_sensitivity(make_profile())
        assert len(sweep.discount_rate) == 9
        assert len(sweep.terminal_cap_rate) == 9

        values = [p.value for p in sweep.discount_rate]
        assert values == sorted(values, reverse=True)
        values = [p.value for p in sweep.terminal_cap_rate]
        assert values == sorted(values, reverse=True)

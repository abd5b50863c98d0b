# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the direct capitalization method.
"""

import pytest

from carevalue.core.primitives import AssumptionSourceEnum, InputError, ValuationMethodEnum
from carevalue.valuation import CapRateMethod, CapRateOptions, cap_rate_sensitivity


def _cap_rate_assumption(result):
    return next(a for a in result.assumptions if a.field == "cap_rate")


class TestCapRateValue:
    def test_explicit_target_cap_rate(self, make_profile):
        result = CapRateMethod().evaluate(make_profile(), CapRateOptions(target_cap_rate=0.10))

        assert result.method == ValuationMethodEnum.CAP_RATE
        assert result.value == 20_000_000
        assert result.value_low == 18_181_818
        assert result.value_high == 22_222_222
        assert result.inputs_used["cap_rate"] == 0.10
        assert _cap_rate_assumption(result).source == AssumptionSourceEnum.PROVIDED

    def test_range_contains_value(self, profile):
        result = CapRateMethod().evaluate(profile)
        assert result.value_low <= result.value <= result.value_high

    def test_explicit_bounds_drive_range(self, make_profile):
        options = CapRateOptions(target_cap_rate=0.10, cap_rate_low=0.095, cap_rate_high=0.12)
        result = CapRateMethod().evaluate(make_profile(), options)
        assert result.value_low == round(2_000_000 / 0.12)
        assert result.value_high == round(2_000_000 / 0.095)

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValueError, match="must not exceed"):
            CapRateOptions(cap_rate_low=0.12, cap_rate_high=0.10)

    def test_low_bound_above_market_rate(self, make_profile):
        options = CapRateOptions(cap_rate_low=0.10, cap_rate_high=0.12)
        with pytest.raises(InputError) as exc_info:
            CapRateMethod().evaluate(make_profile(market_cap_rate=0.09), options)
        assert exc_info.value.fields == ("cap_rate_low",)

    def test_high_bound_below_default_rate(self, make_profile):
        with pytest.raises(InputError) as exc_info:
            CapRateMethod().evaluate(make_profile(), CapRateOptions(cap_rate_high=0.11))
        assert exc_info.value.fields == ("cap_rate_high",)

    def test_bounds_around_market_rate(self, make_profile):
        options = CapRateOptions(cap_rate_low=0.08, cap_rate_high=0.10)
        result = CapRateMethod().evaluate(make_profile(market_cap_rate=0.09), options)
        assert result.value_low == 20_000_000
        assert result.value_high == 25_000_000


class TestCapRateResolution:
    def test_market_cap_rate_beats_rating(self, make_profile):
        result = CapRateMethod().evaluate(make_profile(market_cap_rate=0.09, cms_rating=2))
        assert result.inputs_used["cap_rate"] == 0.09
        assert _cap_rate_assumption(result).source == AssumptionSourceEnum.MARKET

    def test_rating_band_midpoint(self, make_profile):
        result = CapRateMethod().evaluate(make_profile(cms_rating=4))
        assert result.inputs_used["cap_rate"] == pytest.approx(0.1075)
        assert _cap_rate_assumption(result).source == AssumptionSourceEnum.DERIVED

    def test_asset_type_default(self, make_profile):
        result = CapRateMethod().evaluate(make_profile())
        assert result.inputs_used["cap_rate"] == 0.12
        assert result.value == 16_666_667
        assert _cap_rate_assumption(result).source == AssumptionSourceEnum.ASSUMED


class TestNOIResolution:
    def test_noi_derived_from_ebitdar(self, make_profile):
        profile = make_profile(ttm_noi=None, ttm_ebitdar=2_600_000, ttm_revenue=14_500_000)
        result = CapRateMethod().evaluate(profile, CapRateOptions(target_cap_rate=0.10))

        # 2.6M less 6% of 14.5M revenue
        assert result.inputs_used["noi"] == pytest.approx(1_730_000)
        assert result.value == 17_300_000

    def test_noi_from_revenue_margin(self, make_profile):
        profile = make_profile(ttm_noi=None, ttm_revenue=10_000_000)
        result = CapRateMethod().evaluate(profile, CapRateOptions(target_cap_rate=0.10))
        assert result.inputs_used["noi"] == pytest.approx(800_000)

    def test_missing_income_raises(self, make_profile):
        with pytest.raises(InputError) as exc_info:
            CapRateMethod().evaluate(make_profile(ttm_noi=None))
        assert exc_info.value.fields == ("ttm_noi", "ttm_ebitdar", "ttm_revenue")

    def test_negative_noi_raises(self, make_profile):
        with pytest.raises(InputError, match="positive NOI"):
            CapRateMethod().evaluate(make_profile(ttm_noi=-250_000))

    def test_zero_beds_raises(self, make_profile):
        with pytest.raises(InputError) as exc_info:
            CapRateMethod().evaluate(make_profile(beds=0))
        assert exc_info.value.fields == ("beds",)


class TestConfidence:
    def test_provided_cap_rate_raises_confidence(self, make_profile):
        result = CapRateMethod().evaluate(make_profile(), CapRateOptions(target_cap_rate=0.10))
        assert result.confidence == 90

    def test_assumed_cap_rate_lowers_confidence(self, make_profile):
        assert CapRateMethod().evaluate(make_profile()).confidence == 70

    def test_quality_signals_raise_confidence(self, make_profile):
        profile = make_profile(cms_rating=5, occupancy_rate=0.90)
        result = CapRateMethod().evaluate(profile, CapRateOptions(target_cap_rate=0.10))
        assert result.confidence == 100

    def test_confidence_clamped(self, make_profile):
        profile = make_profile(ttm_noi=None, ttm_revenue=10_000_000)
        result = CapRateMethod().evaluate(profile)
        assert 40 <= result.confidence <= 100


class TestCapRateSensitivity:
    def test_symmetric_sweep(self):
        points = cap_rate_sensitivity(2_000_000, 0.10)
        rates = [p.rate for p in points]

        assert len(points) == 9
        assert rates == sorted(rates)
        assert rates[0] == pytest.approx(0.08)
        assert rates[-1] == pytest.approx(0.12)
        assert points[4].value == 20_000_000

    def test_value_falls_as_rate_rises(self):
        values = [p.value for p in cap_rate_sensitivity(2_000_000, 0.10)]
        assert values == sorted(values, reverse=True)

    def test_non_positive_rates_skipped(self):
        points = cap_rate_sensitivity(1_000_000, 0.01)
        assert all(p.rate > 0 for p in points)
        assert len(points) == 6

    def test_zero_step_rejected(self):
        with pytest.raises(InputError):
            cap_rate_sensitivity(1_000_000, 0.10, step=0)

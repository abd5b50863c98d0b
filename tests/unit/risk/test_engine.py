# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the risk adjustment engine.
"""

import pytest

from carevalue.core.primitives import (
    AdjustmentCategoryEnum,
    AssetTypeEnum,
    ConfidenceLevelEnum,
    LocationTypeEnum,
    RiskTierEnum,
)
from carevalue.facility import MarketConditions
from carevalue.risk import (
    DEFAULT_RISK_TABLES,
    RiskAdjustedValuationInput,
    calculate_risk_adjusted_valuation,
    capital_adjustments,
    compliance_adjustments,
    market_adjustments,
    operations_adjustments,
    quality_adjustments,
)


def _bps(adjustments):
    return {a.factor: a.basis_points for a in adjustments if a is not None}


def _run(profile, **kwargs):
    return calculate_risk_adjusted_valuation(RiskAdjustedValuationInput(profile=profile, **kwargs))


class TestRiskAdjustedCapRate:
    def test_additive_premiums(self, make_profile):
        output = _run(make_profile(cms_rating=2, occupancy_rate=0.78, state="NY"))

        assert output.base_cap_rate == 0.085
        assert output.total_basis_points == 150
        assert output.total_risk_premium == pytest.approx(0.015)
        assert output.risk_adjusted_cap_rate == pytest.approx(0.10)
        assert output.risk_adjusted_value == pytest.approx(20_000_000)
        assert output.base_value == pytest.approx(2_000_000 / 0.085)
        assert output.value_impact == pytest.approx(20_000_000 - 2_000_000 / 0.085)

    def test_cap_rate_is_base_plus_adjustments(self, profile):
        output = _run(profile)
        expected = output.base_cap_rate + sum(a.basis_points for a in output.risk_adjustments) / 10_000
        assert output.risk_adjusted_cap_rate == pytest.approx(expected)

    def test_base_cap_rate_override(self, make_profile):
        output = _run(make_profile(), base_cap_rate=0.10)
        assert output.base_cap_rate == 0.10
        assert output.risk_adjusted_cap_rate == pytest.approx(0.10)

    def test_asset_type_baseline(self, make_profile):
        assert _run(make_profile(asset_type=AssetTypeEnum.ALF)).base_cap_rate == 0.065

    def test_floor_applied(self, make_profile):
        profile = make_profile(
            cms_rating=5, occupancy_rate=0.96, state="TX", location_type=LocationTypeEnum.URBAN
        )
        output = _run(profile, base_cap_rate=0.02)
        assert output.cap_rate_floor_applied
        assert output.risk_adjusted_cap_rate == DEFAULT_RISK_TABLES.cap_rate_floor

    def test_zero_adjustments_not_recorded(self, make_profile):
        output = _run(make_profile(cms_rating=3, occupancy_rate=0.87))
        assert output.risk_adjustments == []
        assert output.risk_adjusted_cap_rate == 0.085

    def test_missing_noi_values_zero(self, make_profile):
        output = _run(make_profile(ttm_noi=None, cms_rating=2))
        assert output.risk_adjusted_value == 0.0
        assert output.risk_adjusted_cap_rate == pytest.approx(0.09)


class TestRuleGroups:
    def test_quality(self, make_profile):
        profile = make_profile(cms_rating=4, staffing_rating=1, quality_rating=5)
        adjustments, observed = quality_adjustments(profile, DEFAULT_RISK_TABLES)
        assert _bps(adjustments) == {
            "CMS Overall Rating": -35,
            "CMS Staffing Rating": 40,
            "CMS Quality Rating": -30,
        }
        assert observed == 3

    @pytest.mark.parametrize(
        "hppd, expected",
        [(3.0, {"Staffing HPPD": 50}), (4.0, {}), (4.6, {"Staffing HPPD": -25})],
    )
    def test_staffing_hours(self, make_profile, hppd, expected):
        adjustments, observed = operations_adjustments(
            make_profile(total_hppd=hppd), DEFAULT_RISK_TABLES
        )
        assert _bps(adjustments) == expected
        assert observed == 1

    def test_operations(self, make_profile):
        profile = make_profile(occupancy_rate=0.72, agency_labor_percent=0.25, medicare_percent=0.30)
        adjustments, observed = operations_adjustments(profile, DEFAULT_RISK_TABLES)
        assert _bps(adjustments) == {
            "Occupancy Rate": 100,
            "Agency Labor": 100,
            "Medicare Mix": -25,
        }
        assert observed == 3

    def test_compliance(self, make_profile):
        profile = make_profile(is_sff=True, has_immediate_jeopardy=True, survey_deficiencies=12)
        adjustments, observed = compliance_adjustments(profile, DEFAULT_RISK_TABLES)
        assert _bps(adjustments) == {
            "Immediate Jeopardy": 150,
            "Special Focus Facility": 200,
            "Survey Deficiencies": 50,
        }
        assert observed == 1

    def test_capital(self, make_profile):
        profile = make_profile(year_built=1970, immediate_capex_needs=2_400_000)
        adjustments, observed = capital_adjustments(profile, DEFAULT_RISK_TABLES)
        # 20,000 per bed is not above the top bracket
        assert _bps(adjustments) == {"Building Age": 75, "CapEx Requirements": 75}
        assert all(
            a.category == AdjustmentCategoryEnum.CAPITAL for a in adjustments if a is not None
        )
        assert observed == 2

    def test_market_supply(self, make_profile):
        growing = MarketConditions(supply_growth_rate=0.04)
        adjustments, _ = market_adjustments(make_profile(), growing, DEFAULT_RISK_TABLES)
        assert _bps(adjustments) == {"Supply Growth": 35}

        constrained = MarketConditions(supply_growth_rate=0.005, competitor_occupancy=0.90)
        adjustments, _ = market_adjustments(
            make_profile(location_type=LocationTypeEnum.RURAL), constrained, DEFAULT_RISK_TABLES
        )
        assert _bps(adjustments) == {"Location Type": 25, "Supply Constrained": -25}


class TestRiskProfile:
    def test_tier_and_key_risks(self, make_profile):
        output = _run(make_profile(cms_rating=2, occupancy_rate=0.78, state="NY"))
        assert output.risk_profile.overall_risk == RiskTierEnum.HIGH
        assert len(output.risk_profile.key_risks) == 3
        assert output.risk_profile.mitigating_factors == []

    def test_mitigants_sorted_by_size(self, make_profile):
        output = _run(make_profile(cms_rating=5, occupancy_rate=0.96, state="TX"))
        assert output.risk_profile.mitigating_factors[0] == "5-star CMS rating"
        assert output.risk_profile.overall_risk == RiskTierEnum.LOW

    @pytest.mark.parametrize(
        "premium, tier",
        [
            (0.0, RiskTierEnum.LOW),
            (0.005, RiskTierEnum.MODERATE),
            (0.015, RiskTierEnum.HIGH),
            (0.03, RiskTierEnum.CRITICAL),
        ],
    )
    def test_tier_thresholds(self, premium, tier):
        assert DEFAULT_RISK_TABLES.risk_tier(premium) == tier


class TestDataQuality:
    def test_sparse_profile_low_confidence(self, make_profile):
        output = _run(make_profile(cms_rating=2, occupancy_rate=0.78))
        # cms, occupancy, state of 12 data points
        assert output.data_quality_score == 25
        assert output.confidence == ConfidenceLevelEnum.LOW

    def test_rich_profile_high_confidence(self, make_profile):
        profile = make_profile(
            cms_rating=4,
            staffing_rating=4,
            quality_rating=4,
            occupancy_rate=0.88,
            agency_labor_percent=0.08,
            total_hppd=4.0,
            medicare_percent=0.20,
            survey_deficiencies=5,
            year_built=2005,
            immediate_capex_needs=600_000,
        )
        output = _run(profile, market=MarketConditions(supply_growth_rate=0.02))
        assert output.data_quality_score == 100
        assert output.confidence == ConfidenceLevelEnum.HIGH

    def test_adjustments_dataframe(self, make_profile):
        frame = _run(make_profile(cms_rating=2, state="NY")).adjustments_dataframe()
        assert list(frame["Basis Points"]) == [50, 50]

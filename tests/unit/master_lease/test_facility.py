# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for per-facility master lease analysis.
"""

import pytest

from carevalue.core.primitives import FacilityRecommendationEnum
from carevalue.master_lease import (
    FacilityRulePremiums,
    MasterLeaseOptions,
    MasterLeaseSettings,
    analyze_facility,
    determine_inclusions,
)
from carevalue.risk import RiskAdjustmentTables

INCLUDE = FacilityRecommendationEnum.INCLUDE
EXCLUDE = FacilityRecommendationEnum.EXCLUDE
NEGOTIATE = FacilityRecommendationEnum.NEGOTIATE


class TestAnalyzeFacility:
    def test_clean_facility_included(self, sabra, make_facility):
        analysis = analyze_facility(make_facility(), sabra)

        assert analysis.recommendation == INCLUDE
        assert analysis.risk_premium_bps == 0
        assert analysis.risk_adjusted_cap_rate == pytest.approx(0.0725)
        assert analysis.risk_adjusted_purchase_price == pytest.approx(2_000_000 / 0.0725)
        assert analysis.economics.coverage_ratio == pytest.approx(1.45)
        assert analysis.notes == []

    def test_low_occupancy_premium(self, sabra, make_facility):
        analysis = analyze_facility(make_facility(occupancy_rate=0.79), sabra)
        assert analysis.risk_premium_bps == 50
        assert analysis.risk_adjusted_cap_rate == pytest.approx(0.0775)
        assert analysis.recommendation == INCLUDE

    def test_low_rating_is_excluded(self, sabra, make_facility):
        analysis = analyze_facility(make_facility(cms_rating=2), sabra)
        assert analysis.risk_premium_bps == 75
        assert analysis.recommendation == EXCLUDE
        assert "Does not meet partner underwriting criteria" in analysis.notes

    def test_immediate_jeopardy(self, sabra, make_facility):
        analysis = analyze_facility(make_facility(has_immediate_jeopardy=True), sabra)
        assert analysis.risk_premium_bps == 150
        assert analysis.recommendation == EXCLUDE

    def test_premiums_stack(self, sabra, make_facility):
        facility = make_facility(cms_rating=2, occupancy_rate=0.79, has_immediate_jeopardy=True)
        assert analyze_facility(facility, sabra).risk_premium_bps == 275

    def test_low_coverage_negotiates(self, sabra, make_facility):
        analysis = analyze_facility(make_facility(ttm_ebitdar=2_400_000), sabra)
        assert analysis.economics.coverage_ratio < 1.30
        assert analysis.recommendation == NEGOTIATE
        assert any("below minimum" in note for note in analysis.notes)

    def test_exclusion_outranks_coverage(self, sabra, make_facility):
        analysis = analyze_facility(make_facility(ttm_ebitdar=2_400_000, cms_rating=1), sabra)
        assert analysis.recommendation == EXCLUDE

    def test_warnings_alone_keep_facility_included(self, sabra, make_facility):
        analysis = analyze_facility(
            make_facility(agency_labor_percent=0.15, medicaid_percent=0.70), sabra
        )
        assert analysis.underwriting.passes
        assert {w.field for w in analysis.underwriting.warnings} == {
            "agency_labor_percent",
            "medicaid_percent",
        }
        assert analysis.recommendation == INCLUDE

    def test_custom_premiums(self, sabra, make_facility):
        settings = MasterLeaseSettings(premiums=FacilityRulePremiums(low_occupancy_bps=100))
        analysis = analyze_facility(make_facility(occupancy_rate=0.79), sabra, settings=settings)
        assert analysis.risk_premium_bps == 100


class TestRiskEnginePremium:
    def test_engine_premium_applied(self, sabra, make_facility):
        options = MasterLeaseOptions(apply_risk_engine_premium=True)
        analysis = analyze_facility(make_facility(), sabra, options)

        engine_bps = analysis.risk_valuation.total_basis_points
        assert engine_bps != 0
        assert analysis.risk_premium_bps == engine_bps
        assert analysis.risk_adjusted_cap_rate == pytest.approx(0.0725 + engine_bps / 10_000)

    def test_engine_not_applied_by_default(self, sabra, make_facility):
        analysis = analyze_facility(make_facility(), sabra)
        assert analysis.risk_valuation is not None
        assert analysis.risk_premium_bps == 0

    def test_cap_rate_clamped_to_floor(self, sabra, make_facility):
        options = MasterLeaseOptions(apply_risk_engine_premium=True)
        tables = RiskAdjustmentTables(cap_rate_floor=0.07)
        analysis = analyze_facility(make_facility(), sabra, options, risk_tables=tables)

        assert analysis.risk_premium_bps < 0
        assert analysis.risk_adjusted_cap_rate == 0.07
        assert analysis.risk_adjusted_purchase_price == pytest.approx(2_000_000 / 0.07)
        assert any("clamped to floor" in note for note in analysis.notes)

    def test_custom_cap_rate_does_not_move_baseline(self, sabra, make_facility):
        options = MasterLeaseOptions(custom_cap_rate=0.09)
        analysis = analyze_facility(make_facility(), sabra, options)

        assert analysis.economics.purchase_price == pytest.approx(2_000_000 / 0.09)
        assert analysis.risk_adjusted_cap_rate == pytest.approx(0.0725)


class TestDetermineInclusions:
    @pytest.fixture
    def analyses(self, sabra, make_facility):
        return [
            analyze_facility(make_facility(facility_id="a"), sabra),
            analyze_facility(make_facility(facility_id="b", cms_rating=1), sabra),
            analyze_facility(make_facility(facility_id="c", is_sff=True), sabra),
        ]

    def test_all_or_nothing_includes_everything(self, analyses):
        included, excluded = determine_inclusions(analyses)
        assert [a.facility.facility_id for a in included] == ["a", "b", "c"]
        assert excluded == []

    def test_partial_exclusions_capped(self, analyses):
        options = MasterLeaseOptions(allow_partial_exclusions=True, max_excluded_facilities=1)
        included, excluded = determine_inclusions(analyses, options)
        assert [a.facility.facility_id for a in excluded] == ["b"]
        assert [a.facility.facility_id for a in included] == ["a", "c"]

    def test_partial_exclusions_all_removed(self, analyses):
        options = MasterLeaseOptions(
            all_or_nothing=False, allow_partial_exclusions=True, max_excluded_facilities=5
        )
        included, excluded = determine_inclusions(analyses, options)
        assert [a.facility.facility_id for a in included] == ["a"]
        assert len(excluded) == 2

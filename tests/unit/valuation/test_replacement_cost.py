# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the replacement cost method.
"""

import pytest
from pydantic import ValidationError

from carevalue.core.primitives import AssumptionSourceEnum, InputError, ValuationMethodEnum
from carevalue.valuation import (
    ReconcileOptions,
    ReplacementCostMethod,
    ReplacementCostOptions,
    ValuationReconciler,
)

REPLACEMENT_COST = ValuationMethodEnum.REPLACEMENT_COST


@pytest.fixture
def building(make_profile):
    """100-bed midwest SNF, 20 years old, 45,000 SF."""
    return make_profile(
        beds=100, year_built=2005, square_footage=45_000, region="Midwest"
    )


class TestCostBuildUp:
    def test_breakdown_components(self, building):
        costs = ReplacementCostMethod().breakdown(
            building, ReplacementCostOptions(land_value=1_000_000)
        )

        assert costs.cost_per_sf == pytest.approx(332.5)
        assert costs.building_cost == pytest.approx(14_962_500)
        assert costs.soft_costs == pytest.approx(2_244_375)
        assert costs.ffe_cost == 1_500_000
        assert costs.gross_replacement_cost == pytest.approx(21_677_562.5)
        # 80% of the depreciable base over 40 years, 20 years in
        assert costs.physical_depreciation == pytest.approx(20_677_562.5 * 0.4)
        assert costs.depreciated_cost == pytest.approx(13_406_537.5)

    def test_value_and_range(self, building):
        result = ReplacementCostMethod().evaluate(
            building, ReplacementCostOptions(land_value=1_000_000)
        )

        assert result.method == REPLACEMENT_COST
        assert result.value == pytest.approx(13_406_538, abs=1)
        assert result.value_low == pytest.approx(result.value * 0.9, abs=1)
        assert result.value_high == pytest.approx(result.value * 1.1, abs=1)
        assert result.inputs_used["land_value"] == 1_000_000

    def test_land_estimated_from_beds(self, building):
        costs = ReplacementCostMethod().breakdown(building, ReplacementCostOptions())
        # 3 acres at the suburban SNF rate
        assert costs.land_value == pytest.approx(750_000)
        assert costs.land_source == AssumptionSourceEnum.ASSUMED

    def test_square_footage_estimated_from_beds(self, make_profile):
        costs = ReplacementCostMethod().breakdown(
            make_profile(beds=100, year_built=2005), ReplacementCostOptions()
        )
        assert costs.square_footage == 45_000
        assert costs.square_footage_source == AssumptionSourceEnum.ASSUMED

    def test_unknown_region_uses_national_cost(self, make_profile):
        costs = ReplacementCostMethod().breakdown(
            make_profile(year_built=2005, square_footage=50_000, region="pacific"),
            ReplacementCostOptions(),
        )
        assert costs.cost_per_sf == 350

    def test_obsolescence_reduces_value(self, building):
        method = ReplacementCostMethod()
        plain = method.breakdown(building, ReplacementCostOptions(land_value=1_000_000))
        obsolete = method.breakdown(
            building,
            ReplacementCostOptions(land_value=1_000_000, functional_obsolescence_percent=0.10),
        )
        assert plain.depreciated_cost - obsolete.depreciated_cost == pytest.approx(
            20_677_562.5 * 0.10
        )

    def test_depreciation_stops_at_useful_life(self, make_profile):
        method = ReplacementCostMethod()
        old = method.breakdown(make_profile(year_built=1960), ReplacementCostOptions())
        older = method.breakdown(make_profile(year_built=1930), ReplacementCostOptions())
        assert old.physical_depreciation == pytest.approx(older.physical_depreciation)


class TestEffectiveAge:
    def test_recent_renovation_halves_age(self, make_profile):
        costs = ReplacementCostMethod().breakdown(
            make_profile(year_built=1985, year_renovated=2015), ReplacementCostOptions()
        )
        assert costs.effective_age == 20

    def test_old_renovation_limits_reduction(self, make_profile):
        costs = ReplacementCostMethod().breakdown(
            make_profile(year_built=1985, year_renovated=2000), ReplacementCostOptions()
        )
        assert costs.effective_age == 25

    def test_missing_year_built(self, make_profile):
        with pytest.raises(InputError) as exc_info:
            ReplacementCostMethod().evaluate(make_profile(), ReplacementCostOptions())
        assert exc_info.value.fields == ("year_built",)


class TestApplicability:
    def test_requires_area_or_options(self, make_profile, building):
        method = ReplacementCostMethod()
        assert method.is_applicable(building)
        assert not method.is_applicable(make_profile(year_built=2005))
        assert method.is_applicable(make_profile(year_built=2005), ReplacementCostOptions())

    def test_joins_reconciliation_with_square_footage(self, building):
        summary = ValuationReconciler().reconcile(building)
        assert summary.result_for(REPLACEMENT_COST) is not None

    def test_absent_from_default_run_without_building_data(self, profile):
        summary = ValuationReconciler().reconcile(profile)
        assert summary.result_for(REPLACEMENT_COST) is None

    def test_options_passed_through_reconciler(self, building):
        options = ReconcileOptions(
            methods=[REPLACEMENT_COST],
            replacement_cost=ReplacementCostOptions(land_value=1_000_000),
        )
        summary = ValuationReconciler().reconcile(building, options)
        assert summary.result_for(REPLACEMENT_COST).inputs_used["land_value"] == 1_000_000

    def test_combined_obsolescence_rejected(self):
        with pytest.raises(ValidationError, match="obsolescence"):
            ReplacementCostOptions(
                functional_obsolescence_percent=0.6, external_obsolescence_percent=0.5
            )

# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for portfolio sensitivity sweeps.
"""

import pytest

from carevalue.master_lease import (
    MasterLeaseOptions,
    MasterLeaseSettings,
    SensitivityGrids,
    analyze_facility,
    calculate_portfolio_summary,
    calculate_sensitivity,
)


@pytest.fixture
def summary(portfolio, sabra):
    return calculate_portfolio_summary(
        [analyze_facility(facility, sabra) for facility in portfolio], sabra
    )


class TestSweeps:
    def test_cap_rate_sweep(self, summary, sabra):
        sensitivity = calculate_sensitivity(summary, sabra)
        assert len(sensitivity.cap_rate_sensitivity) == 8

        row = next(r for r in sensitivity.cap_rate_sensitivity if r.cap_rate == 0.08)
        assert row.purchase_price == pytest.approx(75_000_000)
        assert row.annual_rent == pytest.approx(6_000_000)
        assert row.coverage == pytest.approx(1.6)

    def test_higher_cap_rate_improves_coverage(self, summary, sabra):
        rows = calculate_sensitivity(summary, sabra).cap_rate_sensitivity
        coverages = [r.coverage for r in rows]
        assert coverages == sorted(coverages)

    def test_flat_noi_matches_base(self, summary, sabra):
        rows = calculate_sensitivity(summary, sabra).noi_sensitivity
        base = next(r for r in rows if r.noi_change == 0.0)
        assert base.purchase_price == pytest.approx(summary.total_purchase_price)
        assert base.coverage == pytest.approx(summary.portfolio_coverage_ratio)

    def test_noi_decline(self, summary, sabra):
        rows = calculate_sensitivity(summary, sabra).noi_sensitivity
        down = next(r for r in rows if r.noi_change == -0.20)
        assert down.coverage == pytest.approx(1.45 * 0.8)

    def test_occupancy_sweep(self, summary, sabra):
        rows = calculate_sensitivity(summary, sabra).occupancy_sensitivity
        row = next(r for r in rows if r.occupancy == 0.70)
        factor = 0.70 / summary.avg_occupancy
        assert row.projected_noi == pytest.approx(6_000_000 * factor)
        assert row.coverage == pytest.approx(1.45 * factor)

    def test_escalation_sweep(self, summary, sabra):
        rows = calculate_sensitivity(summary, sabra).escalation_sensitivity
        row = next(r for r in rows if r.escalation == 0.025)
        rent = summary.total_annual_rent
        assert row.year_5_rent == pytest.approx(rent * 1.025**4)
        assert row.year_10_rent == pytest.approx(rent * 1.025**9)
        assert row.total_lease_obligation == pytest.approx(
            sum(rent * 1.025**k for k in range(20))
        )

    def test_short_projection_still_reports_year_ten(self, summary, sabra):
        options = MasterLeaseOptions(projection_years=5)
        row = calculate_sensitivity(summary, sabra, options).escalation_sensitivity[0]
        rent = summary.total_annual_rent
        assert row.year_10_rent == pytest.approx(rent * 1.015**9)
        assert row.total_lease_obligation == pytest.approx(
            sum(rent * 1.015**k for k in range(5))
        )

    def test_custom_grid(self, summary, sabra):
        settings = MasterLeaseSettings(grids=SensitivityGrids(cap_rates=[0.07, 0.09]))
        sensitivity = calculate_sensitivity(summary, sabra, settings=settings)
        assert [r.cap_rate for r in sensitivity.cap_rate_sensitivity] == [0.07, 0.09]

    def test_dataframes(self, summary, sabra):
        frames = calculate_sensitivity(summary, sabra).to_dataframes()
        assert set(frames) == {
            "cap_rate_sensitivity",
            "noi_sensitivity",
            "occupancy_sensitivity",
            "escalation_sensitivity",
        }
        assert len(frames["noi_sensitivity"]) == 9


class TestBreakEven:
    def test_break_even_measures(self, summary, sabra):
        sensitivity = calculate_sensitivity(summary, sabra)
        assert sensitivity.break_even_occupancy == pytest.approx(
            summary.avg_occupancy * 1.30 / 1.45
        )
        assert sensitivity.break_even_noi_decline == pytest.approx(1 - 1.30 / 1.45)
        assert sensitivity.cushion_to_breakeven == pytest.approx(1.45 / 1.30 - 1)

    def test_break_even_coverage_is_minimum(self, summary, sabra):
        # losing exactly the break-even share of EBITDAR leaves minimum coverage
        sensitivity = calculate_sensitivity(summary, sabra)
        remaining = summary.total_ebitdar * (1 - sensitivity.break_even_noi_decline)
        assert remaining / summary.total_annual_rent == pytest.approx(1.30)

    def test_zero_coverage(self, sabra):
        empty = calculate_portfolio_summary([], sabra)
        sensitivity = calculate_sensitivity(empty, sabra)
        assert sensitivity.break_even_occupancy == 0.0
        assert sensitivity.break_even_noi_decline == 0.0
        assert sensitivity.cushion_to_breakeven == pytest.approx(-1.0)

# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for per-facility deal economics.
"""

import numpy as np
import pytest

from carevalue.core.primitives import CoverageStatusEnum, InputError
from carevalue.partners import (
    PartnerLeaseTerms,
    calculate_deal_economics,
    coverage_status,
    create_custom_profile,
    lease_npv,
)


class TestDealEconomics:
    def test_sabra_pricing(self, sabra):
        deal = calculate_deal_economics(sabra, noi=2_000_000, ebitdar=3_000_000)

        assert deal.purchase_price == pytest.approx(27_586_206.90, abs=0.01)
        assert deal.annual_rent == pytest.approx(27_586_206.90 * 0.08, abs=0.01)
        assert deal.monthly_rent == pytest.approx(deal.annual_rent / 12)
        assert deal.coverage_ratio == pytest.approx(3_000_000 / deal.annual_rent)
        assert deal.coverage_status == CoverageStatusEnum.WARNING
        assert deal.meets_partner_criteria

    def test_headroom(self, sabra):
        deal = calculate_deal_economics(sabra, noi=2_000_000, ebitdar=3_000_000)
        assert deal.max_rent_at_target_coverage == pytest.approx(3_000_000 / 1.40)
        assert deal.min_purchase_price_at_target_yield == pytest.approx(3_000_000 / 1.40 / 0.08)

    def test_custom_rates(self, sabra):
        deal = calculate_deal_economics(
            sabra, noi=1_000_000, ebitdar=1_500_000, custom_cap_rate=0.10, custom_yield=0.10
        )
        assert deal.purchase_price == pytest.approx(10_000_000)
        assert deal.annual_rent == pytest.approx(1_000_000)
        assert deal.coverage_ratio == pytest.approx(1.5)
        assert deal.implied_cap_rate == 0.10

    @pytest.mark.parametrize("field", ["custom_cap_rate", "custom_yield"])
    def test_non_positive_custom_rate(self, sabra, field):
        with pytest.raises(InputError) as exc_info:
            calculate_deal_economics(sabra, 1_000_000, 1_500_000, **{field: 0.0})
        assert exc_info.value.fields == (field,)

    def test_lease_value_over_full_term(self, sabra):
        deal = calculate_deal_economics(sabra, noi=2_000_000, ebitdar=3_000_000)
        npv, obligation = lease_npv(deal.annual_rent, sabra.lease_terms, 0.08)
        assert deal.lease_npv == pytest.approx(npv)
        assert deal.total_lease_obligation == pytest.approx(obligation)
        assert deal.total_lease_obligation > deal.annual_rent * 20


class TestCoverageStatus:
    @pytest.fixture
    def economics(self, sabra):
        custom = create_custom_profile(
            "Wide Bands",
            sabra,
            economics={
                "min_coverage_ratio": 1.25,
                "warning_coverage_ratio": 1.35,
                "target_coverage_ratio": 1.50,
            },
        )
        return custom.economics

    @pytest.mark.parametrize(
        "ratio, status",
        [
            (1.80, CoverageStatusEnum.HEALTHY),
            (1.50, CoverageStatusEnum.HEALTHY),
            (1.49, CoverageStatusEnum.WARNING),
            (1.35, CoverageStatusEnum.WARNING),
            (1.3499, CoverageStatusEnum.CRITICAL),
            (0.0, CoverageStatusEnum.CRITICAL),
        ],
    )
    def test_inclusive_boundaries(self, economics, ratio, status):
        assert coverage_status(ratio, economics) == status

    def test_sabra_thresholds(self, sabra):
        assert coverage_status(1.40, sabra.economics) == CoverageStatusEnum.HEALTHY
        assert coverage_status(1.35, sabra.economics) == CoverageStatusEnum.WARNING
        assert coverage_status(1.30, sabra.economics) == CoverageStatusEnum.CRITICAL


class TestLeaseNPV:
    def test_fixed_escalation(self):
        terms = PartnerLeaseTerms(initial_term_years=5, fixed_escalation=0.03)
        npv, obligation = lease_npv(1_000_000, terms, 0.08)

        rents = 1_000_000 * 1.03 ** np.arange(5)
        factors = 1 / 1.08 ** np.arange(1, 6)
        assert obligation == pytest.approx(5_309_135.81, abs=0.01)
        assert npv == pytest.approx(float(np.dot(rents, factors)))

    def test_renewals_extend_term(self):
        base = PartnerLeaseTerms(initial_term_years=5, fixed_escalation=0.0)
        renewed = base.model_copy(update={"renewal_options": 2, "renewal_term_years": 5})
        assert lease_npv(100, renewed, 0.0)[1] == pytest.approx(1_500)
        assert lease_npv(100, base, 0.0)[1] == pytest.approx(500)

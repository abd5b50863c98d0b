# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the deal decision engine.
"""

import pytest

from carevalue.core.primitives import (
    BuyVsLeaseEnum,
    ConfidenceLevelEnum,
    DealRecommendationEnum,
    DecisionImpactEnum,
)
from carevalue.master_lease import (
    DecisionSettings,
    FinancingAssumptions,
    analyze_facility,
    calculate_buy_vs_lease,
    calculate_lease_projection,
    calculate_portfolio_summary,
    calculate_sensitivity,
    decision_factors,
    generate_decision,
    negotiation_bands,
    score_decision,
)

PROCEED = DealRecommendationEnum.PROCEED
NEGOTIATE = DealRecommendationEnum.NEGOTIATE
PASS = DealRecommendationEnum.PASS
HIGH = ConfidenceLevelEnum.HIGH
MEDIUM = ConfidenceLevelEnum.MEDIUM
LOW = ConfidenceLevelEnum.LOW


def build_inputs(facilities, partner):
    analyses = [analyze_facility(facility, partner) for facility in facilities]
    summary = calculate_portfolio_summary(analyses, partner)
    return summary, calculate_lease_projection(summary, partner), calculate_sensitivity(
        summary, partner
    )


@pytest.fixture
def strong(portfolio, sabra):
    return build_inputs(portfolio, sabra)


@pytest.fixture
def weak(sabra, make_facility):
    facility = make_facility(ttm_ebitdar=2_400_000, cms_rating=2, occupancy_rate=0.80)
    return build_inputs([facility], sabra)


class TestScoreDecision:
    @pytest.mark.parametrize(
        "positive,negative,expected",
        [
            (15, 0, (PROCEED, HIGH)),
            (14, 0, (PROCEED, MEDIUM)),
            (5, 0, (PROCEED, MEDIUM)),
            (4, 0, (NEGOTIATE, MEDIUM)),
            (0, 5, (NEGOTIATE, MEDIUM)),
            (0, 6, (NEGOTIATE, LOW)),
            (0, 15, (NEGOTIATE, LOW)),
            (0, 16, (PASS, MEDIUM)),
            (0, 25, (PASS, MEDIUM)),
            (0, 26, (PASS, HIGH)),
            (10, 26, (PASS, HIGH)),
        ],
    )
    def test_bands(self, positive, negative, expected):
        assert score_decision(positive, negative) == expected

    def test_negative_factor_never_improves_recommendation(self):
        for positive in range(0, 40):
            for negative in range(0, 40):
                before, _ = score_decision(positive, negative)
                after, _ = score_decision(positive, negative + 1)
                assert after.rank >= before.rank

    def test_positive_factor_never_worsens_recommendation(self):
        for positive in range(0, 40):
            for negative in range(0, 40):
                before, _ = score_decision(positive, negative)
                after, _ = score_decision(positive + 1, negative)
                assert after.rank <= before.rank

    def test_custom_bands(self):
        settings = DecisionSettings(proceed_high_score=30)
        assert score_decision(27, 0, settings) == (PROCEED, MEDIUM)

    def test_bands_must_descend(self):
        with pytest.raises(ValueError, match="descending"):
            DecisionSettings(proceed_medium_score=20)


class TestDecisionFactors:
    def test_strong_portfolio(self, strong, sabra):
        summary, _, sensitivity = strong
        positives, negatives, mitigations = decision_factors(summary, 0, sensitivity, sabra)

        assert [f.factor for f in positives] == [
            "Strong Coverage",
            "Quality Portfolio",
            "Strong Occupancy",
            "Portfolio Scale",
        ]
        assert sum(f.weight for f in positives) == 27
        assert all(f.impact == DecisionImpactEnum.POSITIVE for f in positives)
        assert negatives == []
        assert mitigations == []

    def test_weak_portfolio(self, weak, sabra):
        summary, _, sensitivity = weak
        positives, negatives, mitigations = decision_factors(summary, 1, sensitivity, sabra)

        assert positives == []
        assert [f.factor for f in negatives] == [
            "Insufficient Coverage",
            "Quality Concerns",
            "Substandard Facilities",
            "Thin Cushion",
        ]
        assert sum(f.weight for f in negatives) == 33
        assert len(mitigations) == 8

    def test_unrated_portfolio_has_no_quality_factor(self, sabra, make_facility):
        summary, _, sensitivity = build_inputs([make_facility(cms_rating=None)], sabra)
        positives, negatives, _ = decision_factors(summary, 0, sensitivity, sabra)
        factors = {f.factor for f in positives + negatives}
        assert "Quality Portfolio" not in factors
        assert "Quality Concerns" not in factors


class TestNegotiationBands:
    def test_bands_ordered(self, strong, sabra):
        summary, _, _ = strong
        rent, price = negotiation_bands(summary, sabra)

        assert rent.low == pytest.approx(9_600_000 / 1.40)
        assert rent.high == pytest.approx(9_600_000 / 1.30)
        assert rent.low <= rent.mid <= rent.high
        assert price.low <= price.mid <= price.high
        assert price.mid == pytest.approx(rent.mid / 0.08)


class TestBuyVsLease:
    def test_either_when_returns_are_modest(self, strong, sabra):
        summary, projection, _ = strong
        comparison = calculate_buy_vs_lease(summary, projection, sabra)
        price = summary.total_purchase_price

        assert comparison.purchase.equity_required == pytest.approx(price * 0.30)
        assert comparison.purchase.debt_service == pytest.approx(price * 0.70 * 0.085)
        assert comparison.purchase.net_cash_flow == pytest.approx(
            6_000_000 - price * 0.70 * 0.085
        )
        assert comparison.recommendation == BuyVsLeaseEnum.EITHER

    def test_lease_side(self, strong, sabra):
        summary, projection, _ = strong
        lease = calculate_buy_vs_lease(summary, projection, sabra).lease
        assert lease.year_one_rent == pytest.approx(summary.total_annual_rent)
        assert lease.five_year_rent == pytest.approx(projection.rent_in_year(5))
        assert lease.ten_year_rent == pytest.approx(projection.rent_in_year(10))
        assert lease.effective_cost == pytest.approx(projection.lease_npv)

    def test_lease_when_coverage_is_short(self, weak, sabra):
        summary, projection, _ = weak
        assert (
            calculate_buy_vs_lease(summary, projection, sabra).recommendation
            == BuyVsLeaseEnum.LEASE
        )

    def test_purchase_when_returns_clear_hurdles(self, strong, sabra):
        summary, projection, _ = strong
        financing = FinancingAssumptions(purchase_min_year_one_return=0.0, purchase_min_irr=0.0)
        comparison = calculate_buy_vs_lease(summary, projection, sabra, financing)
        assert comparison.purchase.five_year_irr > 0
        assert comparison.recommendation == BuyVsLeaseEnum.PURCHASE

    def test_lost_equity(self, strong, sabra):
        summary, projection, _ = strong
        financing = FinancingAssumptions(loan_to_value=0.99)
        comparison = calculate_buy_vs_lease(summary, projection, sabra, financing)
        assert comparison.purchase.five_year_irr == -1.0


class TestGenerateDecision:
    def test_strong_portfolio_proceeds(self, strong, sabra):
        summary, projection, sensitivity = strong
        decision = generate_decision(summary, 0, projection, sensitivity, sabra)

        assert decision.recommendation == PROCEED
        assert decision.confidence == HIGH
        assert decision.positive_score == 27
        assert decision.negative_score == 0
        assert decision.net_score == 27

    def test_weak_portfolio_passes(self, weak, sabra):
        summary, projection, sensitivity = weak
        decision = generate_decision(summary, 1, projection, sensitivity, sabra)

        assert decision.recommendation == PASS
        assert decision.confidence == HIGH
        assert decision.buy_vs_lease.recommendation == BuyVsLeaseEnum.LEASE

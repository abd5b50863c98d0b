# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Deal decision engine.

Threshold rules produce weighted positive and negative factors. The net score
(positive less negative weight) maps to a recommendation and confidence
through fixed bands, so adding a negative factor can never improve the
recommendation and adding a positive one can never worsen it.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..core.calculations import FinancialCalculations
from ..core.primitives import (
    BuyVsLeaseEnum,
    ConfidenceLevelEnum,
    DealRecommendationEnum,
    DecisionImpactEnum,
)
from ..partners import PartnerProfile
from ..valuation.results import format_percent
from .results import (
    BuyVsLeaseComparison,
    DealDecision,
    DecisionFactor,
    LeaseProjection,
    LeaseScenario,
    PortfolioSummary,
    PurchaseScenario,
    SensitivityAnalysis,
    ValueBand,
)
from .settings import (
    DEFAULT_MASTER_LEASE_SETTINGS,
    DecisionSettings,
    FinancingAssumptions,
    MasterLeaseSettings,
)

logger = logging.getLogger(__name__)


def _positive(factor: str, weight: int, description: str) -> DecisionFactor:
    return DecisionFactor(
        factor=factor, impact=DecisionImpactEnum.POSITIVE, weight=weight, description=description
    )


def _negative(factor: str, weight: int, description: str) -> DecisionFactor:
    return DecisionFactor(
        factor=factor, impact=DecisionImpactEnum.NEGATIVE, weight=weight, description=description
    )


def score_decision(
    positive_score: int, negative_score: int, settings: Optional[DecisionSettings] = None
) -> Tuple[DealRecommendationEnum, ConfidenceLevelEnum]:
    """
    Map factor scores to a recommendation and confidence.

    Bands on net score (defaults): >= 15 proceed/high, >= 5 proceed/medium,
    >= -5 negotiate/medium, >= -15 negotiate/low, else pass with high
    confidence when the negative score exceeds 25 and medium otherwise.
    """
    bands = settings or DEFAULT_MASTER_LEASE_SETTINGS.decision
    net = positive_score - negative_score

    if net >= bands.proceed_high_score:
        return DealRecommendationEnum.PROCEED, ConfidenceLevelEnum.HIGH
    if net >= bands.proceed_medium_score:
        return DealRecommendationEnum.PROCEED, ConfidenceLevelEnum.MEDIUM
    if net >= bands.negotiate_medium_score:
        return DealRecommendationEnum.NEGOTIATE, ConfidenceLevelEnum.MEDIUM
    if net >= bands.negotiate_low_score:
        return DealRecommendationEnum.NEGOTIATE, ConfidenceLevelEnum.LOW
    if negative_score > bands.pass_high_confidence_negative:
        return DealRecommendationEnum.PASS, ConfidenceLevelEnum.HIGH
    return DealRecommendationEnum.PASS, ConfidenceLevelEnum.MEDIUM


def decision_factors(
    summary: PortfolioSummary,
    substandard_count: int,
    sensitivity: SensitivityAnalysis,
    partner: PartnerProfile,
    settings: Optional[DecisionSettings] = None,
) -> Tuple[List[DecisionFactor], List[DecisionFactor], List[str]]:
    """
    Evaluate the factor rules.

    Returns:
        (positive_factors, negative_factors, risk_mitigations)
    """
    rules = settings or DEFAULT_MASTER_LEASE_SETTINGS.decision
    econ = partner.economics
    coverage = summary.portfolio_coverage_ratio
    rating = summary.avg_cms_rating

    positives: List[DecisionFactor] = []
    negatives: List[DecisionFactor] = []
    mitigations: List[str] = []

    # === POSITIVE ===
    if coverage >= econ.target_coverage_ratio:
        positives.append(
            _positive(
                "Strong Coverage",
                rules.strong_coverage_weight,
                f"Portfolio coverage of {coverage:.2f}x meets target of "
                f"{econ.target_coverage_ratio:.2f}x",
            )
        )
    if rating is not None and rating >= rules.quality_portfolio_rating:
        positives.append(
            _positive(
                "Quality Portfolio",
                rules.quality_portfolio_weight,
                f"Average CMS rating of {rating:.1f} stars indicates quality operations",
            )
        )
    if summary.avg_occupancy >= rules.strong_occupancy_threshold:
        positives.append(
            _positive(
                "Strong Occupancy",
                rules.strong_occupancy_weight,
                f"Portfolio occupancy of {format_percent(summary.avg_occupancy, 1)} "
                "demonstrates market demand",
            )
        )
    if summary.included_facilities >= partner.underwriting.min_facilities_in_portfolio:
        positives.append(
            _positive(
                "Portfolio Scale",
                rules.portfolio_scale_weight,
                f"{summary.included_facilities} facilities provide operational diversification",
            )
        )

    # === NEGATIVE ===
    if coverage < econ.min_coverage_ratio:
        negatives.append(
            _negative(
                "Insufficient Coverage",
                rules.insufficient_coverage_weight,
                f"Portfolio coverage of {coverage:.2f}x below minimum of "
                f"{econ.min_coverage_ratio:.2f}x",
            )
        )
        mitigations.append("Negotiate lower purchase price to improve coverage")
        mitigations.append("Request operational improvement plan from seller")
    if rating is not None and rating < rules.quality_concerns_rating:
        negatives.append(
            _negative(
                "Quality Concerns",
                rules.quality_concerns_weight,
                f"Average CMS rating of {rating:.1f} stars below industry average",
            )
        )
        mitigations.append("Require quality improvement covenants")
        mitigations.append("Consider enhanced monitoring provisions")
    if substandard_count > 0:
        negatives.append(
            _negative(
                "Substandard Facilities",
                rules.substandard_facilities_weight,
                f"{substandard_count} facilities do not meet underwriting criteria",
            )
        )
        mitigations.append("Negotiate carve-outs for underperforming facilities")
        mitigations.append("Request price adjustment for portfolio quality")
    if sensitivity.cushion_to_breakeven < rules.thin_cushion_threshold:
        negatives.append(
            _negative(
                "Thin Cushion",
                rules.thin_cushion_weight,
                f"Only {format_percent(sensitivity.cushion_to_breakeven, 1)} cushion to "
                "break-even coverage",
            )
        )
        mitigations.append("Structure with performance guarantees")
        mitigations.append("Consider rent deferral provisions")

    return positives, negatives, mitigations


def negotiation_bands(summary: PortfolioSummary, partner: PartnerProfile) -> Tuple[ValueBand, ValueBand]:
    """
    Suggested rent and purchase price bands.

    Rent runs from the rent at target coverage (low) to the most rent the
    portfolio supports at minimum coverage (high), with the midpoint between.
    Prices capitalize each rent at the partner target yield, so both bands
    are ordered low <= mid <= high.

    Returns:
        (rent_band, price_band)
    """
    econ = partner.economics
    min_coverage_rent = summary.total_ebitdar / econ.min_coverage_ratio
    target_coverage_rent = summary.total_ebitdar / econ.target_coverage_ratio
    rent = ValueBand(
        low=target_coverage_rent,
        mid=(min_coverage_rent + target_coverage_rent) / 2,
        high=min_coverage_rent,
    )
    price = ValueBand(
        low=rent.low / econ.target_yield,
        mid=rent.mid / econ.target_yield,
        high=rent.high / econ.target_yield,
    )
    return rent, price


def calculate_buy_vs_lease(
    summary: PortfolioSummary,
    projection: LeaseProjection,
    partner: PartnerProfile,
    financing: Optional[FinancingAssumptions] = None,
) -> BuyVsLeaseComparison:
    """
    Compare buying the portfolio with leasing it.

    The purchase scenario finances at the configured loan-to-value with a debt
    constant of interest plus amortization, holds for five years with NOI
    growth, and exits at the partner target cap rate plus the exit spread.
    The hold return is annualized as ``(1 + total_return / equity) ** (1 / years) - 1``
    (-100% when the equity is lost).
    """
    financing = financing or DEFAULT_MASTER_LEASE_SETTINGS.financing
    econ = partner.economics
    price = summary.total_purchase_price

    equity = price * (1 - financing.loan_to_value)
    debt_service = price * financing.loan_to_value * financing.debt_constant
    net_cash_flow = summary.total_noi - debt_service
    year_one_return = FinancialCalculations.safe_divide(net_cash_flow, equity)

    exit_cap_rate = econ.target_cap_rate + financing.exit_cap_spread
    exit_noi = summary.total_noi * (1 + financing.hold_noi_growth) ** financing.hold_years
    exit_value = exit_noi / exit_cap_rate
    total_return = net_cash_flow * financing.hold_years + exit_value - price
    growth = 1 + FinancialCalculations.safe_divide(total_return, equity)
    hold_irr = growth ** (1 / financing.hold_years) - 1 if growth > 0 else -1.0

    if (
        year_one_return > financing.purchase_min_year_one_return
        and hold_irr > financing.purchase_min_irr
    ):
        recommendation = BuyVsLeaseEnum.PURCHASE
        rationale = (
            f"Strong purchase returns ({format_percent(year_one_return, 1)} year 1, "
            f"{format_percent(hold_irr, 1)} {financing.hold_years}-yr IRR) favor acquisition"
        )
    elif summary.portfolio_coverage_ratio < econ.min_coverage_ratio:
        recommendation = BuyVsLeaseEnum.LEASE
        rationale = "Coverage concerns make sale-leaseback structure more appropriate"
    else:
        recommendation = BuyVsLeaseEnum.EITHER
        rationale = (
            "Both structures viable; decision depends on capital availability and strategic goals"
        )

    return BuyVsLeaseComparison(
        purchase=PurchaseScenario(
            total_cost=price,
            equity_required=equity,
            debt_service=debt_service,
            net_cash_flow=net_cash_flow,
            year_one_return=year_one_return,
            five_year_irr=hold_irr,
        ),
        lease=LeaseScenario(
            year_one_rent=summary.total_annual_rent,
            five_year_rent=projection.rent_in_year(5),
            ten_year_rent=projection.rent_in_year(10),
            effective_cost=projection.lease_npv,
        ),
        recommendation=recommendation,
        rationale=rationale,
    )


def generate_decision(
    summary: PortfolioSummary,
    substandard_count: int,
    projection: LeaseProjection,
    sensitivity: SensitivityAnalysis,
    partner: PartnerProfile,
    settings: Optional[MasterLeaseSettings] = None,
) -> DealDecision:
    """
    Score the deal and derive negotiation guidance.

    Args:
        summary: Portfolio summary of the included facilities
        substandard_count: Facilities recommended for exclusion
        projection: Lease projection (for year-5/10 rent and lease NPV)
        sensitivity: Sensitivity analysis (for the cushion to break-even)
        partner: Partner profile
        settings: Decision weights, bands and financing assumptions
    """
    settings = settings or DEFAULT_MASTER_LEASE_SETTINGS
    positives, negatives, mitigations = decision_factors(
        summary, substandard_count, sensitivity, partner, settings.decision
    )
    positive_score = sum(f.weight for f in positives)
    negative_score = sum(f.weight for f in negatives)
    recommendation, confidence = score_decision(positive_score, negative_score, settings.decision)
    rent_band, price_band = negotiation_bands(summary, partner)

    logger.debug(
        f"Decision: +{positive_score} / -{negative_score} -> "
        f"{recommendation.value} ({confidence.value})"
    )

    return DealDecision(
        recommendation=recommendation,
        confidence=confidence,
        positive_factors=positives,
        negative_factors=negatives,
        risk_mitigations=mitigations,
        suggested_purchase_price=price_band,
        suggested_rent=rent_band,
        buy_vs_lease=calculate_buy_vs_lease(summary, projection, partner, settings.financing),
    )

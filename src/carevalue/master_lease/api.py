# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Master lease analysis entry point.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..core.primitives import FacilityRecommendationEnum, InputError
from ..facility import PortfolioFacility
from ..partners import PartnerProfile
from ..risk import (
    RiskAdjustedValuationInput,
    RiskAdjustmentTables,
    calculate_portfolio_risk_valuation,
)
from ..valuation.results import format_percent
from .decision import generate_decision
from .facility import analyze_facility, determine_inclusions
from .projection import calculate_lease_projection
from .results import FacilityAnalysis, MasterLeaseResult, PortfolioSummary
from .sensitivity import calculate_sensitivity
from .settings import (
    DEFAULT_MASTER_LEASE_SETTINGS,
    MasterLeaseOptions,
    MasterLeaseSettings,
)
from .summary import calculate_portfolio_summary

logger = logging.getLogger(__name__)


def _portfolio_warnings(
    included: Sequence[FacilityAnalysis],
    excluded: Sequence[FacilityAnalysis],
    summary: PortfolioSummary,
    partner: PartnerProfile,
) -> List[str]:
    warnings: List[str] = []
    if excluded:
        warnings.append(f"{len(excluded)} facilities excluded from master lease")
        for analysis in excluded:
            warnings.append(f"  - {analysis.facility.name}: {', '.join(analysis.notes)}")

    uw = partner.underwriting
    if summary.included_facilities < uw.min_facilities_in_portfolio:
        warnings.append(
            f"Portfolio of {summary.included_facilities} facilities is below the partner "
            f"minimum of {uw.min_facilities_in_portfolio}"
        )

    if summary.total_purchase_price > 0 and included:
        largest = max(included, key=lambda a: a.economics.purchase_price)
        share = largest.economics.purchase_price / summary.total_purchase_price
        if share > uw.max_concentration_percent:
            warnings.append(
                f"{largest.facility.name} is {format_percent(share, 1)} of purchase price, "
                f"above the partner maximum of {format_percent(uw.max_concentration_percent, 0)}"
            )
    return warnings


def _portfolio_recommendations(
    included: Sequence[FacilityAnalysis],
    summary: PortfolioSummary,
    partner: PartnerProfile,
    options: MasterLeaseOptions,
) -> List[str]:
    econ = partner.economics
    recommendations: List[str] = []

    if summary.portfolio_coverage_ratio < econ.target_coverage_ratio:
        recommendations.append(
            f"Consider negotiating purchase price down to achieve "
            f"{econ.target_coverage_ratio:.2f}x coverage"
        )
        target_price = summary.total_ebitdar / econ.target_coverage_ratio / econ.target_yield
        recommendations.append(
            f"Target purchase price: ${target_price / 1_000_000:.1f}M "
            f"(vs. ${summary.total_purchase_price / 1_000_000:.1f}M)"
        )

    if summary.avg_cms_rating is not None and summary.avg_cms_rating < 3:
        recommendations.append("Consider operational improvement plan for low-rated facilities")

    substandard_included = any(
        a.recommendation == FacilityRecommendationEnum.EXCLUDE for a in included
    )
    if substandard_included and options.all_or_nothing:
        recommendations.append(
            "Portfolio includes substandard facilities - negotiate carve-outs or price adjustments"
        )
    return recommendations


def analyze_master_lease(
    facilities: Sequence[PortfolioFacility],
    partner: PartnerProfile,
    options: Optional[MasterLeaseOptions] = None,
    settings: Optional[MasterLeaseSettings] = None,
    risk_tables: Optional[RiskAdjustmentTables] = None,
) -> MasterLeaseResult:
    """
    Evaluate a multi-facility portfolio for a master lease with one partner.

    Pipeline: per-facility analysis, inclusion decisions, portfolio summary,
    lease projection, sensitivity, decision, then warnings, recommendations
    and a portfolio risk valuation of the included facilities.

    Args:
        facilities: Portfolio facilities, in presentation order
        partner: Partner profile supplying economics, lease terms and underwriting
        options: Deal options; defaults to all-or-nothing with renewals
        settings: Rule premiums, sensitivity grids, decision weights, financing
        risk_tables: Tables for the risk engine

    Returns:
        MasterLeaseResult

    Raises:
        InputError: If ``facilities`` is empty

    Example:
        ```python
        result = analyze_master_lease(facilities, get_partner_profile("sabra"))
        result.summary.portfolio_coverage_ratio
        result.decision.recommendation  # DealRecommendationEnum.PROCEED
        ```
    """
    if not facilities:
        raise InputError("Master lease analysis requires at least one facility", fields=("facilities",))

    options = options or MasterLeaseOptions()
    settings = settings or DEFAULT_MASTER_LEASE_SETTINGS

    analyses = [
        analyze_facility(facility, partner, options, settings, risk_tables)
        for facility in facilities
    ]
    included, excluded = determine_inclusions(analyses, options)

    summary = calculate_portfolio_summary(included, partner, total_facilities=len(analyses))
    projection = calculate_lease_projection(summary, partner, options)
    sensitivity = calculate_sensitivity(summary, partner, options, settings)

    substandard_count = sum(
        1 for a in analyses if a.recommendation == FacilityRecommendationEnum.EXCLUDE
    )
    decision = generate_decision(
        summary, substandard_count, projection, sensitivity, partner, settings
    )

    warnings = _portfolio_warnings(included, excluded, summary, partner)
    for message in warnings:
        logger.warning(message.strip())
    recommendations = _portfolio_recommendations(included, summary, partner, options)

    portfolio_risk = None
    if included:
        portfolio_risk = calculate_portfolio_risk_valuation(
            [RiskAdjustedValuationInput(profile=a.facility) for a in included], risk_tables
        )

    logger.info(
        f"Master lease analysis for {partner.name}: {summary.included_facilities} of "
        f"{summary.total_facilities} facilities, coverage {summary.portfolio_coverage_ratio:.2f}x, "
        f"recommendation {decision.recommendation.value}"
    )

    return MasterLeaseResult(
        summary=summary,
        facility_analysis=analyses,
        lease_projection=projection,
        sensitivity=sensitivity,
        decision=decision,
        warnings=warnings,
        recommendations=recommendations,
        excluded_facility_ids=[a.facility.facility_id for a in excluded],
        portfolio_risk=portfolio_risk,
    )

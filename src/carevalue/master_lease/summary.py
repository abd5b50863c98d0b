# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Portfolio summary over included facilities.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ..core.calculations import FinancialCalculations
from ..partners import PartnerProfile, coverage_status
from .results import FacilityAnalysis, PortfolioSummary

divide = FinancialCalculations.safe_divide


def calculate_portfolio_summary(
    included: Sequence[FacilityAnalysis],
    partner: PartnerProfile,
    total_facilities: Optional[int] = None,
) -> PortfolioSummary:
    """
    Aggregate the included facilities.

    Totals are plain sums of facility values; weighted ratios are ratios of
    those totals, so the portfolio coverage ratio is always
    ``total_ebitdar / total_annual_rent`` and the risk-adjusted cap rate is
    total NOI over the summed risk-adjusted prices. Ratios over an empty or zero
    denominator are 0.0.

    Args:
        included: Analyses of the facilities in the deal
        partner: Partner whose coverage thresholds classify the portfolio
        total_facilities: Facilities evaluated, included or not; defaults to
            the included count
    """
    count = len(included)
    total_facilities = count if total_facilities is None else total_facilities

    total_beds = sum(a.facility.beds for a in included)
    total_revenue = sum(a.facility.ttm_revenue for a in included)
    total_ebitdar = sum(a.facility.ttm_ebitdar for a in included)
    total_noi = sum(a.facility.ttm_noi for a in included)

    total_purchase_price = sum(a.economics.purchase_price for a in included)
    total_annual_rent = sum(a.economics.annual_rent for a in included)
    risk_adjusted_purchase_price = sum(a.risk_adjusted_purchase_price for a in included)

    coverage = FinancialCalculations.coverage_ratio(total_ebitdar, total_annual_rent)

    ratings = [a.facility.cms_rating for a in included if a.facility.cms_rating is not None]

    return PortfolioSummary(
        total_facilities=total_facilities,
        included_facilities=count,
        excluded_facilities=total_facilities - count,
        total_beds=total_beds,
        total_revenue=total_revenue,
        total_ebitdar=total_ebitdar,
        total_noi=total_noi,
        total_purchase_price=total_purchase_price,
        total_annual_rent=total_annual_rent,
        total_monthly_rent=total_annual_rent / 12,
        weighted_cap_rate=divide(total_noi, total_purchase_price),
        weighted_yield=divide(total_annual_rent, total_purchase_price),
        portfolio_coverage_ratio=coverage,
        coverage_status=coverage_status(coverage, partner.economics),
        avg_price_per_bed=divide(total_purchase_price, total_beds),
        avg_rent_per_bed=divide(total_annual_rent, total_beds),
        avg_noi_per_bed=divide(total_noi, total_beds),
        avg_ebitdar_margin=divide(total_ebitdar, total_revenue),
        risk_adjusted_cap_rate=divide(total_noi, risk_adjusted_purchase_price),
        risk_adjusted_purchase_price=risk_adjusted_purchase_price,
        avg_cms_rating=sum(ratings) / len(ratings) if ratings else None,
        avg_occupancy=divide(
            sum(a.facility.occupancy_rate * a.facility.beds for a in included), total_beds
        ),
        portfolio_health_score=divide(sum(a.underwriting.score for a in included), count),
    )

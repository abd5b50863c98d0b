# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Per-facility master lease analysis and inclusion decisions.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from ..core.primitives import FacilityRecommendationEnum
from ..facility import PortfolioFacility
from ..partners import (
    PartnerProfile,
    calculate_deal_economics,
    check_underwriting_criteria,
)
from ..risk import (
    DEFAULT_RISK_TABLES,
    RiskAdjustedValuationInput,
    RiskAdjustmentTables,
    calculate_risk_adjusted_valuation,
)
from ..valuation.results import format_percent
from .results import FacilityAnalysis
from .settings import (
    DEFAULT_MASTER_LEASE_SETTINGS,
    MasterLeaseOptions,
    MasterLeaseSettings,
)

logger = logging.getLogger(__name__)


def analyze_facility(
    facility: PortfolioFacility,
    partner: PartnerProfile,
    options: Optional[MasterLeaseOptions] = None,
    settings: Optional[MasterLeaseSettings] = None,
    risk_tables: Optional[RiskAdjustmentTables] = None,
) -> FacilityAnalysis:
    """
    Price, risk-adjust and underwrite one facility for the partner.

    The risk-adjusted cap rate starts at the partner target cap rate, even
    when deal economics use a custom cap rate, and adds discrete rule
    premiums: below-average rating, low occupancy and immediate jeopardy
    history. When ``apply_risk_engine_premium`` is set the facility's risk
    engine premium is added as well. The result is clamped to the risk
    tables' cap rate floor.

    Recommendation:
        - ``exclude`` when underwriting fails (any blocker)
        - ``negotiate`` when coverage is below the partner minimum
        - ``include`` otherwise
    """
    options = options or MasterLeaseOptions()
    premiums = (settings or DEFAULT_MASTER_LEASE_SETTINGS).premiums
    notes: List[str] = []

    economics = calculate_deal_economics(
        partner,
        facility.ttm_noi,
        facility.ttm_ebitdar,
        custom_cap_rate=options.custom_cap_rate,
        custom_yield=options.custom_yield,
        discount_rate=options.discount_rate,
    )
    underwriting = check_underwriting_criteria(partner, facility)
    risk_valuation = calculate_risk_adjusted_valuation(
        RiskAdjustedValuationInput(profile=facility), risk_tables
    )

    # === CAP RATE PREMIUMS ===
    premium_bps = 0
    if facility.cms_rating is not None and facility.cms_rating < premiums.low_rating_threshold:
        premium_bps += premiums.low_rating_bps
        notes.append(
            f"CMS rating {facility.cms_rating} adds {premiums.low_rating_bps} bps to cap rate"
        )
    if facility.occupancy_rate < premiums.low_occupancy_threshold:
        premium_bps += premiums.low_occupancy_bps
        notes.append(
            f"Low occupancy ({format_percent(facility.occupancy_rate, 1)}) adds "
            f"{premiums.low_occupancy_bps} bps to cap rate"
        )
    if facility.has_immediate_jeopardy:
        premium_bps += premiums.immediate_jeopardy_bps
        notes.append(
            f"Immediate jeopardy history adds {premiums.immediate_jeopardy_bps} bps to cap rate"
        )
    if options.apply_risk_engine_premium:
        engine_bps = risk_valuation.total_basis_points
        premium_bps += engine_bps
        notes.append(f"Risk engine premium of {engine_bps:+d} bps applied")

    risk_adjusted_cap_rate = partner.economics.target_cap_rate + premium_bps / 10_000
    cap_rate_floor = (risk_tables or DEFAULT_RISK_TABLES).cap_rate_floor
    if risk_adjusted_cap_rate < cap_rate_floor:
        notes.append(
            f"Risk-adjusted cap rate clamped to floor of {format_percent(cap_rate_floor)}"
        )
        logger.warning(
            f"Risk-adjusted cap rate for {facility.facility_id} "
            f"({risk_adjusted_cap_rate:.4f}) clamped to floor {cap_rate_floor:.4f}"
        )
        risk_adjusted_cap_rate = cap_rate_floor

    # === RECOMMENDATION ===
    recommendation = FacilityRecommendationEnum.INCLUDE
    if not underwriting.passes:
        recommendation = FacilityRecommendationEnum.EXCLUDE
        notes.append("Does not meet partner underwriting criteria")

    if economics.coverage_ratio < partner.economics.min_coverage_ratio:
        if recommendation != FacilityRecommendationEnum.EXCLUDE:
            recommendation = FacilityRecommendationEnum.NEGOTIATE
        notes.append(f"Coverage ratio {economics.coverage_ratio:.2f}x below minimum")

    logger.debug(
        f"Facility {facility.facility_id}: coverage {economics.coverage_ratio:.2f}x, "
        f"premium {premium_bps} bps, recommendation {recommendation.value}"
    )

    return FacilityAnalysis(
        facility=facility,
        economics=economics,
        underwriting=underwriting,
        risk_valuation=risk_valuation,
        risk_premium_bps=premium_bps,
        risk_adjusted_cap_rate=risk_adjusted_cap_rate,
        risk_adjusted_purchase_price=facility.ttm_noi / risk_adjusted_cap_rate,
        recommendation=recommendation,
        notes=notes,
    )


def determine_inclusions(
    analyses: Sequence[FacilityAnalysis], options: Optional[MasterLeaseOptions] = None
) -> Tuple[List[FacilityAnalysis], List[FacilityAnalysis]]:
    """
    Split analyses into (included, excluded).

    An all-or-nothing deal without partial exclusions includes everything.
    Otherwise up to ``max_excluded_facilities`` facilities recommended for
    exclusion are carved out, in input order.
    """
    options = options or MasterLeaseOptions()
    if options.all_or_nothing and not options.allow_partial_exclusions:
        return list(analyses), []

    included: List[FacilityAnalysis] = []
    excluded: List[FacilityAnalysis] = []
    for analysis in analyses:
        if (
            analysis.recommendation == FacilityRecommendationEnum.EXCLUDE
            and len(excluded) < options.max_excluded_facilities
        ):
            excluded.append(analysis)
        else:
            included.append(analysis)
    return included, excluded

# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Risk Adjustment Engine

Derives a risk-adjusted cap rate from a baseline asset-type cap rate plus a
strictly additive set of basis-point adjustments:

- Quality: CMS overall, staffing and quality-measure star ratings
- Operations: occupancy, agency labor, nursing HPPD, Medicare payer mix
- Compliance: immediate jeopardy, special focus status, survey deficiencies
- Capital: building age, immediate capital needs per bed
- Market: state regulatory environment, location type, supply/demand

Missing optional data never raises. It contributes no adjustment and lowers
the data quality score instead.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..core.calculations import FinancialCalculations
from ..core.primitives import AdjustmentCategoryEnum, ConfidenceLevelEnum
from ..facility import FacilityFinancialProfile, MarketConditions
from .results import (
    CapRateAdjustment,
    RiskAdjustedValuationInput,
    RiskAdjustedValuationOutput,
    RiskProfile,
)
from .tables import DEFAULT_RISK_TABLES, RiskAdjustmentTables

logger = logging.getLogger(__name__)

round_half_up = FinancialCalculations.round_half_up

HIGH = ConfidenceLevelEnum.HIGH
MEDIUM = ConfidenceLevelEnum.MEDIUM


def _adjustment(
    category: AdjustmentCategoryEnum,
    factor: str,
    description: str,
    basis_points: float,
    confidence: ConfidenceLevelEnum = HIGH,
) -> Optional[CapRateAdjustment]:
    """Build an adjustment record; zero contributions are not recorded."""
    bps = int(round_half_up(basis_points))
    if bps == 0:
        return None
    return CapRateAdjustment(
        category=category,
        factor=factor,
        description=description,
        basis_points=bps,
        confidence=confidence,
    )


def quality_adjustments(
    profile: FacilityFinancialProfile, tables: RiskAdjustmentTables
) -> Tuple[List[Optional[CapRateAdjustment]], int]:
    """CMS star rating adjustments and the number of ratings observed."""
    adjustments: List[Optional[CapRateAdjustment]] = []
    observed = 0
    category = AdjustmentCategoryEnum.QUALITY

    if profile.cms_rating is not None:
        adjustments.append(
            _adjustment(
                category,
                "CMS Overall Rating",
                f"{profile.cms_rating}-star CMS rating",
                tables.cms_rating_bps.get(profile.cms_rating, 0),
            )
        )
        observed += 1

    if profile.staffing_rating is not None:
        adjustments.append(
            _adjustment(
                category,
                "CMS Staffing Rating",
                f"{profile.staffing_rating}-star staffing rating",
                (tables.rating_baseline - profile.staffing_rating) * tables.staffing_rating_step_bps,
            )
        )
        observed += 1

    if profile.quality_rating is not None:
        adjustments.append(
            _adjustment(
                category,
                "CMS Quality Rating",
                f"{profile.quality_rating}-star quality measures",
                (tables.rating_baseline - profile.quality_rating) * tables.quality_rating_step_bps,
            )
        )
        observed += 1

    return adjustments, observed


def operations_adjustments(
    profile: FacilityFinancialProfile, tables: RiskAdjustmentTables
) -> Tuple[List[Optional[CapRateAdjustment]], int]:
    """Occupancy, agency labor, staffing hours and payer mix adjustments."""
    adjustments: List[Optional[CapRateAdjustment]] = []
    observed = 0
    category = AdjustmentCategoryEnum.OPERATIONS

    if profile.occupancy_rate is not None:
        adjustments.append(
            _adjustment(
                category,
                "Occupancy Rate",
                f"{profile.occupancy_rate * 100:.1f}% occupancy",
                tables.occupancy.lookup(profile.occupancy_rate),
            )
        )
        observed += 1

    if profile.agency_labor_percent is not None:
        adjustments.append(
            _adjustment(
                category,
                "Agency Labor",
                f"{profile.agency_labor_percent * 100:.1f}% agency staffing",
                tables.agency_labor.lookup(profile.agency_labor_percent),
            )
        )
        observed += 1

    if profile.total_hppd is not None:
        hppd = profile.total_hppd
        if hppd < tables.min_hppd:
            adjustments.append(
                _adjustment(
                    category,
                    "Staffing HPPD",
                    f"{hppd:.2f} HPPD below {tables.min_hppd} minimum",
                    tables.low_hppd_bps,
                    MEDIUM,
                )
            )
        elif hppd >= tables.min_hppd + tables.strong_hppd_margin:
            adjustments.append(
                _adjustment(
                    category,
                    "Staffing HPPD",
                    f"Strong staffing at {hppd:.2f} HPPD",
                    tables.strong_hppd_bps,
                    MEDIUM,
                )
            )
        observed += 1

    if profile.medicare_percent is not None:
        adjustments.append(
            _adjustment(
                category,
                "Medicare Mix",
                f"{profile.medicare_percent * 100:.1f}% Medicare payer mix",
                tables.medicare_mix.lookup(profile.medicare_percent),
            )
        )
        observed += 1

    return adjustments, observed


def compliance_adjustments(
    profile: FacilityFinancialProfile, tables: RiskAdjustmentTables
) -> Tuple[List[Optional[CapRateAdjustment]], int]:
    """Survey and enforcement adjustments."""
    adjustments: List[Optional[CapRateAdjustment]] = []
    category = AdjustmentCategoryEnum.COMPLIANCE

    if profile.has_immediate_jeopardy:
        adjustments.append(
            _adjustment(
                category,
                "Immediate Jeopardy",
                "History of immediate jeopardy citation",
                tables.immediate_jeopardy_bps,
            )
        )
    if profile.is_sff:
        adjustments.append(
            _adjustment(
                category,
                "Special Focus Facility",
                "Designated as Special Focus Facility",
                tables.special_focus_bps,
            )
        )

    observed = 0
    if profile.survey_deficiencies is not None:
        adjustments.append(
            _adjustment(
                category,
                "Survey Deficiencies",
                f"{profile.survey_deficiencies} total deficiencies",
                tables.deficiencies.lookup(profile.survey_deficiencies),
            )
        )
        observed = 1

    return adjustments, observed


def capital_adjustments(
    profile: FacilityFinancialProfile, tables: RiskAdjustmentTables
) -> Tuple[List[Optional[CapRateAdjustment]], int]:
    """Physical plant adjustments."""
    adjustments: List[Optional[CapRateAdjustment]] = []
    observed = 0
    category = AdjustmentCategoryEnum.CAPITAL

    age = profile.building_age
    if age is not None:
        adjustments.append(
            _adjustment(
                category,
                "Building Age",
                f"{age} year old building",
                tables.building_age.lookup(age),
            )
        )
        observed += 1

    if profile.immediate_capex_needs is not None and profile.beds > 0:
        capex_per_bed = profile.immediate_capex_needs / profile.beds
        adjustments.append(
            _adjustment(
                category,
                "CapEx Requirements",
                f"${capex_per_bed:,.0f} per bed in immediate CapEx",
                tables.capex_per_bed.lookup(capex_per_bed),
                MEDIUM,
            )
        )
        observed += 1

    return adjustments, observed


def market_adjustments(
    profile: FacilityFinancialProfile,
    market: Optional[MarketConditions],
    tables: RiskAdjustmentTables,
) -> Tuple[List[Optional[CapRateAdjustment]], int]:
    """State, location and supply/demand adjustments."""
    adjustments: List[Optional[CapRateAdjustment]] = []
    observed = 0
    category = AdjustmentCategoryEnum.MARKET

    if profile.state:
        adjustments.append(
            _adjustment(
                category,
                "State Environment",
                f"{profile.state} regulatory/reimbursement environment",
                tables.state_bps.get(profile.state, 0),
            )
        )
        observed += 1

    adjustments.append(
        _adjustment(
            category,
            "Location Type",
            f"{profile.location_type.value} market location",
            tables.location_bps.get(profile.location_type, 0),
            MEDIUM,
        )
    )

    if market is not None and market.supply_growth_rate is not None:
        supply_growth = market.supply_growth_rate
        if supply_growth > tables.high_supply_growth:
            adjustments.append(
                _adjustment(
                    category,
                    "Supply Growth",
                    f"High supply growth ({supply_growth * 100:.1f}%)",
                    tables.high_supply_bps,
                    MEDIUM,
                )
            )
        elif (
            supply_growth < tables.constrained_supply_growth
            and market.competitor_occupancy is not None
            and market.competitor_occupancy > tables.constrained_competitor_occupancy
        ):
            adjustments.append(
                _adjustment(
                    category,
                    "Supply Constrained",
                    "Limited supply with strong competitor occupancy",
                    tables.constrained_supply_bps,
                    MEDIUM,
                )
            )
        observed += 1

    return adjustments, observed


def build_risk_profile(
    adjustments: List[CapRateAdjustment], total_premium: float, tables: RiskAdjustmentTables
) -> RiskProfile:
    """
    Summarize the three largest premiums and the three largest discounts.

    Ties keep evaluation order.
    """
    risks = sorted((a for a in adjustments if a.basis_points > 0), key=lambda a: -a.basis_points)
    mitigants = sorted((a for a in adjustments if a.basis_points < 0), key=lambda a: a.basis_points)
    return RiskProfile(
        overall_risk=tables.risk_tier(total_premium),
        key_risks=[a.description for a in risks[:3]],
        mitigating_factors=[a.description for a in mitigants[:3]],
    )


def calculate_risk_adjusted_valuation(
    valuation_input: RiskAdjustedValuationInput,
    tables: Optional[RiskAdjustmentTables] = None,
) -> RiskAdjustedValuationOutput:
    """
    Compute the risk-adjusted cap rate and value for one facility.

    Args:
        valuation_input: Facility snapshot, optional market signals and an
            optional baseline cap rate override
        tables: Adjustment tables; defaults to ``DEFAULT_RISK_TABLES``

    Returns:
        RiskAdjustedValuationOutput with the adjustment breakdown and risk profile

    Example:
        ```python
        output = calculate_risk_adjusted_valuation(
            RiskAdjustedValuationInput(profile=profile)
        )
        output.risk_adjusted_cap_rate  # e.g. 0.0925
        ```
    """
    tables = tables or DEFAULT_RISK_TABLES
    profile = valuation_input.profile

    base_cap_rate = valuation_input.base_cap_rate or tables.base_cap_rate(profile.asset_type)
    noi = profile.ttm_noi or 0.0
    base_value = noi / base_cap_rate

    collected: List[Optional[CapRateAdjustment]] = []
    data_points = 0
    for adjustments, observed in (
        quality_adjustments(profile, tables),
        operations_adjustments(profile, tables),
        compliance_adjustments(profile, tables),
        capital_adjustments(profile, tables),
        market_adjustments(profile, valuation_input.market, tables),
    ):
        collected.extend(adjustments)
        data_points += observed
    adjustments = [a for a in collected if a is not None]

    total_bps = sum(a.basis_points for a in adjustments)
    total_risk_premium = total_bps / 10_000
    risk_adjusted_cap_rate = base_cap_rate + total_risk_premium
    floor_applied = risk_adjusted_cap_rate < tables.cap_rate_floor
    if floor_applied:
        logger.warning(
            f"Risk-adjusted cap rate {risk_adjusted_cap_rate:.4f} for {profile.facility_id} "
            f"clamped to floor {tables.cap_rate_floor:.4f}"
        )
        risk_adjusted_cap_rate = tables.cap_rate_floor

    risk_adjusted_value = noi / risk_adjusted_cap_rate
    data_quality_score = int(
        round_half_up(min(data_points, tables.max_data_points) / tables.max_data_points * 100)
    )
    if data_quality_score >= tables.high_confidence_score:
        confidence = ConfidenceLevelEnum.HIGH
    elif data_quality_score >= tables.medium_confidence_score:
        confidence = ConfidenceLevelEnum.MEDIUM
    else:
        confidence = ConfidenceLevelEnum.LOW

    logger.debug(
        f"Risk adjustment for {profile.facility_id}: {len(adjustments)} adjustments, "
        f"{total_bps:+d} bps, data quality {data_quality_score}"
    )

    return RiskAdjustedValuationOutput(
        base_cap_rate=base_cap_rate,
        base_value=base_value,
        risk_adjustments=adjustments,
        total_risk_premium=total_risk_premium,
        risk_adjusted_cap_rate=risk_adjusted_cap_rate,
        risk_adjusted_value=risk_adjusted_value,
        value_impact=risk_adjusted_value - base_value,
        cap_rate_floor_applied=floor_applied,
        risk_adjusted_price_per_bed=FinancialCalculations.safe_divide(
            risk_adjusted_value, profile.beds if profile.beds > 0 else 0
        ),
        risk_adjusted_noi_yield=FinancialCalculations.safe_divide(noi, risk_adjusted_value),
        confidence=confidence,
        data_quality_score=data_quality_score,
        risk_profile=build_risk_profile(adjustments, total_risk_premium, tables),
    )

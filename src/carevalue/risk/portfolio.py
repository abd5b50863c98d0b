# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Portfolio risk valuation.

Aggregates per-facility risk-adjusted valuations and adds simplified
portfolio effects: a diversification benefit from facility and state count,
and concentration risk from the largest single facility.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional, Sequence

from ..core.calculations import FinancialCalculations
from ..core.primitives import InputError, RiskTierEnum
from .engine import calculate_risk_adjusted_valuation
from .results import (
    FacilityRiskValuation,
    PortfolioRiskProfile,
    PortfolioRiskValuation,
    RatingShare,
    RiskAdjustedValuationInput,
)
from .tables import DEFAULT_RISK_TABLES, RiskAdjustmentTables

logger = logging.getLogger(__name__)

MAX_DIVERSIFICATION_BPS = 50
STATE_DIVERSIFICATION_BPS = 5
FACILITY_DIVERSIFICATION_BPS = 3


def diversification_benefit_bps(facility_count: int, state_count: int) -> int:
    """Basis-point benefit from geographic spread and facility count, capped at 50."""
    return min(
        MAX_DIVERSIFICATION_BPS,
        (state_count - 1) * STATE_DIVERSIFICATION_BPS
        + (facility_count - 1) * FACILITY_DIVERSIFICATION_BPS,
    )


def portfolio_risk_tier(mean_tier_index: float) -> RiskTierEnum:
    """Overall portfolio tier from the mean facility tier index (low=0 .. critical=3)."""
    if mean_tier_index >= 2.5:
        return RiskTierEnum.CRITICAL
    if mean_tier_index >= 1.5:
        return RiskTierEnum.HIGH
    if mean_tier_index >= 0.5:
        return RiskTierEnum.MODERATE
    return RiskTierEnum.LOW


def calculate_portfolio_risk_valuation(
    inputs: Sequence[RiskAdjustedValuationInput],
    tables: Optional[RiskAdjustmentTables] = None,
) -> PortfolioRiskValuation:
    """
    Risk-adjust every facility and aggregate the results.

    Weighted cap rates are aggregate NOI over aggregate value, so they agree
    with the facility totals by construction.

    Raises:
        InputError: If ``inputs`` is empty
    """
    if not inputs:
        raise InputError("Portfolio risk valuation requires at least one facility", fields=("inputs",))

    tables = tables or DEFAULT_RISK_TABLES
    facilities = [
        FacilityRiskValuation(
            facility_id=item.profile.facility_id,
            name=item.profile.name,
            valuation=calculate_risk_adjusted_valuation(item, tables),
        )
        for item in inputs
    ]

    total_noi = sum(item.profile.ttm_noi or 0.0 for item in inputs)
    total_base_value = sum(f.valuation.base_value for f in facilities)
    total_risk_adjusted_value = sum(f.valuation.risk_adjusted_value for f in facilities)

    weighted_cap_rate = FinancialCalculations.safe_divide(total_noi, total_base_value)
    weighted_risk_adjusted_cap_rate = FinancialCalculations.safe_divide(
        total_noi, total_risk_adjusted_value
    )

    state_count = len({item.profile.state for item in inputs})
    largest_value = max(f.valuation.risk_adjusted_value for f in facilities)
    concentration_risk = FinancialCalculations.safe_divide(largest_value, total_risk_adjusted_value)

    rating_counts = Counter(
        item.profile.cms_rating for item in inputs if item.profile.cms_rating is not None
    )
    quality_distribution = [
        RatingShare(rating=rating, count=count, percent=count / len(inputs))
        for rating, count in sorted(rating_counts.items(), reverse=True)
    ]

    mean_tier_index = sum(f.valuation.risk_profile.overall_risk.rank for f in facilities) / len(
        facilities
    )

    logger.info(
        f"Portfolio risk valuation: {len(facilities)} facilities in {state_count} states, "
        f"risk-adjusted value {total_risk_adjusted_value:,.0f}"
    )

    return PortfolioRiskValuation(
        facilities=facilities,
        total_base_value=total_base_value,
        total_risk_adjusted_value=total_risk_adjusted_value,
        portfolio_risk_premium=weighted_risk_adjusted_cap_rate - weighted_cap_rate,
        weighted_cap_rate=weighted_cap_rate,
        weighted_risk_adjusted_cap_rate=weighted_risk_adjusted_cap_rate,
        diversification_benefit_bps=diversification_benefit_bps(len(facilities), state_count),
        portfolio_risk_profile=PortfolioRiskProfile(
            overall_risk=portfolio_risk_tier(mean_tier_index),
            concentration_risk=concentration_risk,
            geographic_diversification=state_count,
            quality_distribution=quality_distribution,
        ),
    )

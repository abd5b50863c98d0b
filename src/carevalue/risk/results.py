# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Risk engine input and output records.
"""

from __future__ import annotations

from typing import List, Optional

import pandas as pd
from pydantic import Field

from ..core.primitives import (
    AdjustmentCategoryEnum,
    CapRate,
    ConfidenceLevelEnum,
    Model,
    RiskTierEnum,
)
from ..facility import FacilityFinancialProfile, MarketConditions


class CapRateAdjustment(Model):
    """
    One signed basis-point contribution to the risk premium.

    Positive basis points raise the cap rate (lower value).
    """

    category: AdjustmentCategoryEnum
    factor: str
    description: str
    basis_points: int
    confidence: ConfidenceLevelEnum


class RiskProfile(Model):
    """Qualitative risk summary."""

    overall_risk: RiskTierEnum
    key_risks: List[str] = Field(default_factory=list)
    mitigating_factors: List[str] = Field(default_factory=list)


class RiskAdjustedValuationInput(Model):
    """
    Inputs to the risk adjustment engine.

    Attributes:
        profile: Facility snapshot
        market: Local supply/demand signals
        base_cap_rate: Overrides the asset-type baseline cap rate
    """

    profile: FacilityFinancialProfile
    market: Optional[MarketConditions] = Field(default=None)
    base_cap_rate: Optional[CapRate] = Field(default=None)


class RiskAdjustedValuationOutput(Model):
    """
    Risk-adjusted cap rate and value for one facility.

    ``risk_adjusted_cap_rate`` equals ``base_cap_rate + total_risk_premium``
    unless the result fell below the configured floor, in which case it is
    clamped and ``cap_rate_floor_applied`` is set.
    """

    # === BASELINE ===
    base_cap_rate: float
    base_value: float

    # === ADJUSTMENTS ===
    risk_adjustments: List[CapRateAdjustment] = Field(default_factory=list)
    total_risk_premium: float = Field(..., description="Sum of basis points / 10,000")

    # === RISK-ADJUSTED ===
    risk_adjusted_cap_rate: float
    risk_adjusted_value: float
    value_impact: float = Field(..., description="Risk-adjusted value less base value")
    cap_rate_floor_applied: bool = False

    # === IMPLIED METRICS ===
    risk_adjusted_price_per_bed: float
    risk_adjusted_noi_yield: float

    # === DATA QUALITY ===
    confidence: ConfidenceLevelEnum
    data_quality_score: int = Field(..., ge=0, le=100)

    risk_profile: RiskProfile

    @property
    def total_basis_points(self) -> int:
        return sum(a.basis_points for a in self.risk_adjustments)

    def adjustments_dataframe(self) -> pd.DataFrame:
        """Adjustment breakdown as a DataFrame, in evaluation order."""
        return pd.DataFrame(
            [
                {
                    "Category": a.category.value,
                    "Factor": a.factor,
                    "Description": a.description,
                    "Basis Points": a.basis_points,
                    "Confidence": a.confidence.value,
                }
                for a in self.risk_adjustments
            ],
            columns=["Category", "Factor", "Description", "Basis Points", "Confidence"],
        )


class FacilityRiskValuation(Model):
    """One facility's entry in a portfolio risk valuation."""

    facility_id: str
    name: str
    valuation: RiskAdjustedValuationOutput


class RatingShare(Model):
    """Count and share of facilities at one CMS overall rating."""

    rating: int
    count: int
    percent: float


class PortfolioRiskProfile(Model):
    """
    Portfolio-level risk summary.

    Attributes:
        overall_risk: Tier from the mean facility tier index
        concentration_risk: Largest facility's risk-adjusted value / total
        geographic_diversification: Number of distinct states
        quality_distribution: CMS rating shares, best rating first
    """

    overall_risk: RiskTierEnum
    concentration_risk: float
    geographic_diversification: int
    quality_distribution: List[RatingShare] = Field(default_factory=list)


class PortfolioRiskValuation(Model):
    """Aggregated risk valuation across a portfolio."""

    facilities: List[FacilityRiskValuation]
    total_base_value: float
    total_risk_adjusted_value: float
    portfolio_risk_premium: float
    weighted_cap_rate: float
    weighted_risk_adjusted_cap_rate: float
    diversification_benefit_bps: int
    portfolio_risk_profile: PortfolioRiskProfile
